"""
Symbolic Formula Engine

Pure functions that turn a ``NetworkArchitecture`` into LaTeX strings: the
full forward-pass composition, the equations of a single layer, and the
dimension bookkeeping behind them. Prose fields are markdown with inline
``$...$`` math so any KaTeX-capable renderer can display them as-is.
"""

from dataclasses import dataclass
from typing import List, Tuple

from mlp_viz.activations import ActivationKind
from mlp_viz.architecture import NetworkArchitecture
from mlp_viz.errors import IndexOutOfRange


@dataclass(frozen=True)
class LayerEquations:
    affine: str
    activation: str
    activation_is_identity_warning: bool
    weight_shape: Tuple[int, int]


@dataclass(frozen=True)
class DimensionStep:
    expression: str
    shape: int
    annotation: str


@dataclass(frozen=True)
class ReasoningSection:
    title: str
    body: str


def _check_layer_index(architecture: NetworkArchitecture, layer_index: int) -> None:
    # Layer 0 has no incoming transition, so it has no equations
    if not 1 <= layer_index <= architecture.output_index:
        raise IndexOutOfRange(
            f"Layer index {layer_index} outside [1, {architecture.output_index}]"
        )


def _layer_dims(architecture: NetworkArchitecture, layer_index: int) -> Tuple[int, int]:
    _check_layer_index(architecture, layer_index)
    return architecture[layer_index - 1].width, architecture[layer_index].width


def activation_symbol(kind: ActivationKind) -> str:
    if kind is ActivationKind.SOFTMAX:
        return r"\operatorname{softmax}"
    return rf"\sigma_{{\scriptscriptstyle\text{{{kind.value}}}}}"


# =============================================================================
# Whole-network composition
# =============================================================================

def forward_composition(architecture: NetworkArchitecture) -> str:
    """
    Render f(x) = σ_L(W^(L) ... σ_1(W^(1)x + b^(1)) ... + b^(L)).

    Folds from the output layer back to the first hidden layer: each step
    opens the current layer's activation-of-affine wrapper and queues its bias
    term to close around everything built after it. The innermost operand is
    the input symbol x.
    """
    openers: List[str] = []
    closers: List[str] = []
    for l in range(architecture.output_index, 0, -1):
        openers.append(rf"{activation_symbol(architecture[l].activation)}\!\bigl(W^{{({l})}}")
        closers.append(rf" + b^{{({l})}}\bigr)")
    return "f(x) = " + "".join(openers) + "x" + "".join(reversed(closers))


def output_layer_formula(num_classes: int) -> Tuple[str, str]:
    """Softmax head statement and the probability-simplex constraint."""
    head = (
        r"\hat{y} = \operatorname{softmax}\!\left(z^{(L)}\right) \in \Delta^{K-1}, \quad K = "
        f"{num_classes}"
    )
    constraint = rf"\hat{{y}}_i \geq 0, \quad \sum_{{i=1}}^{{{num_classes}}} \hat{{y}}_i = 1"
    return head, constraint


# =============================================================================
# Single-layer views
# =============================================================================

def per_layer_equations(architecture: NetworkArchitecture, layer_index: int) -> LayerEquations:
    n_in, n_out = _layer_dims(architecture, layer_index)
    l = layer_index
    kind = architecture[l].activation

    affine = rf"z^{{({l})}} = W^{{({l})}} a^{{({l - 1})}} + b^{{({l})}}"
    activation = (
        rf"a^{{({l})}} = \sigma\!\bigl(z^{{({l})}}\bigr), \qquad \sigma(z) = {kind.tex}"
    )
    return LayerEquations(
        affine=affine,
        activation=activation,
        activation_is_identity_warning=kind.is_identity,
        weight_shape=(n_out, n_in),
    )


def dimension_trace(architecture: NetworkArchitecture, layer_index: int) -> List[DimensionStep]:
    n_in, n_out = _layer_dims(architecture, layer_index)
    l = layer_index
    kind = architecture[l].activation

    return [
        DimensionStep(
            expression=rf"a^{{({l - 1})}} \in \mathbb{{R}}^{{{n_in}}}",
            shape=n_in,
            annotation="input to this layer",
        ),
        DimensionStep(
            expression=rf"W^{{({l})}} a^{{({l - 1})}} \in \mathbb{{R}}^{{{n_out}}}",
            shape=n_out,
            annotation=f"({n_out}×{n_in}) · ({n_in}×1) = ({n_out}×1)",
        ),
        DimensionStep(
            expression=(
                rf"z^{{({l})}} = W^{{({l})}} a^{{({l - 1})}} + b^{{({l})}}"
                rf" \in \mathbb{{R}}^{{{n_out}}}"
            ),
            shape=n_out,
            annotation="add bias",
        ),
        DimensionStep(
            expression=rf"a^{{({l})}} = \sigma(z^{{({l})}}) \in \mathbb{{R}}^{{{n_out}}}",
            shape=n_out,
            annotation=f"element-wise {kind.value}",
        ),
    ]


def dimension_badges(architecture: NetworkArchitecture, layer_index: int) -> List[str]:
    n_in, n_out = _layer_dims(architecture, layer_index)
    l = layer_index
    return [
        rf"W^{{({l})}} \in \mathbb{{R}}^{{{n_out}\times{n_in}}}",
        rf"b^{{({l})}} \in \mathbb{{R}}^{{{n_out}}}",
        rf"a^{{({l - 1})}} \in \mathbb{{R}}^{{{n_in}}}",
        rf"z^{{({l})}} \in \mathbb{{R}}^{{{n_out}}}",
        rf"a^{{({l})}} \in \mathbb{{R}}^{{{n_out}}}",
    ]


def layer_reasoning(architecture: NetworkArchitecture, layer_index: int) -> List[ReasoningSection]:
    """Explanatory notes shown under a layer's equations."""
    n_in, n_out = _layer_dims(architecture, layer_index)
    l = layer_index
    kind = architecture[l].activation

    sections = [
        ReasoningSection(
            title=rf"Why is $W^{{({l})}}$ shaped ${n_out} \times {n_in}$?",
            body=(
                f"The weight matrix maps an input vector of size **{n_in}** (layer {l - 1}) "
                f"to an output vector of size **{n_out}** (this layer). Multiplying a "
                f"({n_out}×{n_in}) matrix by a ({n_in}×1) column vector yields a ({n_out}×1) "
                f"vector, one scalar per output neuron. Entry $W^{{({l})}}_{{ij}}$ is the "
                f"connection strength from neuron *j* in layer {l - 1} to neuron *i* in "
                f"layer {l}, so row *i* is the template neuron *i* matches against its "
                f"{n_in} inputs."
            ),
        ),
        ReasoningSection(
            title=rf"What does $W^{{({l})}}a^{{({l - 1})}} + b^{{({l})}}$ compute geometrically?",
            body=(
                "It is an **affine transformation**: a linear map (rotation, scaling, "
                "shearing) followed by a translation. For neuron *i*: "
                rf"$z^{{({l})}}_i = \sum_{{j=1}}^{{{n_in}}} W^{{({l})}}_{{ij}} a^{{({l - 1})}}_j"
                rf" + b^{{({l})}}_i$. "
                f"This is a weighted sum of all {n_in} inputs with the bias acting as a "
                "learnable threshold. Without the bias every neuron's decision hyperplane "
                "would pass through the origin."
            ),
        ),
    ]

    activation_title = rf"Why apply $\sigma_{{\text{{{kind.value}}}}}$ after the linear step?"
    if kind.is_identity:
        sections.append(ReasoningSection(
            title=activation_title,
            body=(
                "**Warning: no non-linearity here.** Composing purely linear layers is "
                "equivalent to a *single* linear layer regardless of depth: the product "
                r"$W^{(L)}\cdots W^{(1)}$ is just another matrix. Linear activations belong "
                "in a regression head, not in the hidden layers of a classifier."
            ),
        ))
    else:
        sections.append(ReasoningSection(
            title=activation_title,
            body=(
                "Stacking affine maps without a non-linearity collapses to a single affine "
                "map, so the network could only learn linear decision boundaries. Applying "
                f"**{kind.value}** element-wise adds the non-linearity needed to approximate "
                "complex functions. With at least one non-linear hidden layer the network "
                "is a universal approximator of continuous functions on compact domains."
            ),
        ))

    if l == architecture.output_index:
        sections.append(ReasoningSection(
            title="Output layer: why softmax?",
            body=(
                rf"The final affine step produces raw *logits* $z^{{({l})}} \in "
                rf"\mathbb{{R}}^{{{n_out}}}$ with no probabilistic meaning. Softmax "
                "exponentiates and normalises them so every output is positive and they "
                "sum to 1, which reads directly as class probabilities. The exponential "
                "also amplifies gaps between logits, giving confident predictions when one "
                "class dominates."
            ),
        ))

    return sections
