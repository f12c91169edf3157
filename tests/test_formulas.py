"""Symbolic output of the formula engine."""

import pytest

from mlp_viz.architecture import NetworkArchitecture, default_architecture
from mlp_viz.errors import IndexOutOfRange
from mlp_viz.formulas import (
    dimension_badges,
    dimension_trace,
    forward_composition,
    layer_reasoning,
    output_layer_formula,
    per_layer_equations,
)


def test_two_transition_composition_nests_softmax_outside_relu():
    arch = NetworkArchitecture.from_widths([3, 4, 2], ["ReLU"])
    expected = (
        r"f(x) = \operatorname{softmax}\!\bigl(W^{(2)}"
        r"\sigma_{\scriptscriptstyle\text{ReLU}}\!\bigl(W^{(1)}x + b^{(1)}\bigr)"
        r" + b^{(2)}\bigr)"
    )
    assert forward_composition(arch) == expected
    assert forward_composition(arch).count(r"\bigl(") == 2


def test_default_composition_order():
    tex = forward_composition(default_architecture())
    assert tex.startswith(r"f(x) = \operatorname{softmax}\!\bigl(W^{(3)}")
    relu = tex.index(r"\text{ReLU}")
    tanh = tex.index(r"\text{Tanh}")
    # Tanh (layer 2) wraps ReLU (layer 1)
    assert tanh < relu
    assert r"W^{(1)}x + b^{(1)}\bigr)" in tex
    assert tex.endswith(r" + b^{(3)}\bigr)")
    assert tex.count("softmax") == 1


def test_per_layer_equations_hidden():
    eq = per_layer_equations(default_architecture(), 1)
    assert eq.affine == r"z^{(1)} = W^{(1)} a^{(0)} + b^{(1)}"
    assert r"\max(0,z)" in eq.activation
    assert eq.activation.startswith(r"a^{(1)} = \sigma")
    assert eq.weight_shape == (5, 3)
    assert eq.activation_is_identity_warning is False


def test_linear_layer_sets_identity_warning():
    arch = NetworkArchitecture.from_widths([3, 5, 2], ["Linear"])
    eq = per_layer_equations(arch, 1)
    assert eq.activation_is_identity_warning is True
    assert eq.activation.endswith(r"\sigma(z) = z")


def test_output_layer_equations_use_softmax():
    eq = per_layer_equations(default_architecture(), 3)
    assert r"\sum_j e^{z_j}" in eq.activation
    assert eq.weight_shape == (2, 4)


@pytest.mark.parametrize("index", [0, 4, -1])
def test_layer_index_out_of_range(index):
    arch = default_architecture()
    with pytest.raises(IndexOutOfRange):
        per_layer_equations(arch, index)
    with pytest.raises(IndexOutOfRange):
        dimension_trace(arch, index)


def test_dimension_trace_steps():
    steps = dimension_trace(default_architecture(), 2)
    assert [s.shape for s in steps] == [5, 4, 4, 4]
    assert steps[0].expression == r"a^{(1)} \in \mathbb{R}^{5}"
    assert steps[1].annotation == "(4×5) · (5×1) = (4×1)"
    assert steps[2].annotation == "add bias"
    assert steps[3].annotation == "element-wise Tanh"


def test_dimension_badges():
    badges = dimension_badges(default_architecture(), 1)
    assert badges[0] == r"W^{(1)} \in \mathbb{R}^{5\times3}"
    assert len(badges) == 5


def test_reasoning_adds_softmax_note_only_on_output():
    arch = default_architecture()
    hidden = layer_reasoning(arch, 1)
    output = layer_reasoning(arch, 3)
    assert len(hidden) == 3
    assert len(output) == 4
    assert output[-1].title == "Output layer: why softmax?"


def test_reasoning_warns_for_linear():
    arch = NetworkArchitecture.from_widths([3, 5, 2], ["Linear"])
    body = layer_reasoning(arch, 1)[2].body
    assert "no non-linearity" in body


def test_output_layer_formula():
    head, constraint = output_layer_formula(3)
    assert head.endswith("K = 3")
    assert r"\sum_{i=1}^{3}" in constraint
