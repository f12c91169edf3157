"""Snapshot API and the coupling between output width and loss selection."""

import pytest

from mlp_viz.errors import IndexOutOfRange, InvalidOperation
from mlp_viz.session import VisualizerSession


def test_fresh_session_snapshot():
    session = VisualizerSession()
    assert session.get_architecture().widths == (3, 5, 4, 2)
    assert session.get_parameter_breakdown()["total"] == 54
    assert session.get_forward_composition().startswith("f(x) = ")
    assert session.selected_layer == 1
    assert session.loss.active_id == "ce"


def test_bce_follows_output_width():
    session = VisualizerSession()
    session.resize_layer(3, +1)
    assert session.num_classes == 3
    assert session.select_loss("bce") is False
    assert session.loss.active_id == "ce"

    session.resize_layer(3, -1)
    assert session.select_loss("bce") is True
    assert session.loss.active_id == "bce"

    session.resize_layer(3, +1)
    assert session.loss.active_id == "ce"


def test_resizing_hidden_layer_keeps_binary_loss():
    session = VisualizerSession()
    session.select_loss("bce")
    session.resize_layer(1, +2)
    session.insert_hidden_layer()
    assert session.loss.active_id == "bce"


def test_reset_keeps_loss_valid():
    session = VisualizerSession()
    session.select_loss("bce")
    session.reset()
    assert session.loss.active_id == "bce"
    assert session.get_architecture().output_width == 2


def test_selection_reclamped_after_removal():
    session = VisualizerSession()
    session.select_layer(3)
    session.remove_hidden_layer(2)
    assert session.selected_layer == 2
    session.select_layer(99)
    assert session.selected_layer == 2


def test_remove_errors_propagate():
    session = VisualizerSession()
    with pytest.raises(InvalidOperation):
        session.remove_hidden_layer(0)
    with pytest.raises(IndexOutOfRange):
        session.remove_hidden_layer(7)


def test_layer_detail():
    session = VisualizerSession()
    detail = session.get_layer_detail(2)
    assert detail.equations.weight_shape == (4, 5)
    assert len(detail.dimension_trace) == 4
    assert len(detail.matrix.rows) == 4
    assert len(detail.matrix.rows[0]) == 5
    with pytest.raises(IndexOutOfRange):
        session.get_layer_detail(0)


def test_loss_options_reflect_width():
    session = VisualizerSession()
    assert all(o["selectable"] for o in session.get_loss_options())
    session.resize_layer(3, +2)
    bce = next(o for o in session.get_loss_options() if o["id"] == "bce")
    assert bce["selectable"] is False


def test_active_loss_view_uses_session_params():
    session = VisualizerSession()
    session.select_loss("focal")
    session.set_loss_parameter("gamma", 1.5)
    view = session.get_active_loss_view()
    assert view.id == "focal"
    assert r"^{1.5}" in view.formula
    assert view.output_layer[0].endswith("K = 2")

    override = session.get_active_loss_view({"gamma": 4})
    assert r"^{4}" in override.formula
    assert session.loss.params["gamma"] == 1.5


def test_set_activation_through_session():
    session = VisualizerSession()
    session.set_activation(2, "Linear")
    assert session.get_layer_detail(2).equations.activation_is_identity_warning
