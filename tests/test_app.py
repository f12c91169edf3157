"""Smoke tests for the Streamlit shell."""

from streamlit.testing.v1 import AppTest

from mlp_viz.losses import LOSSES

APP = "../app.py"


def test_app_renders_default_network():
    at = AppTest.from_file(APP, default_timeout=30).run()
    assert not at.exception
    assert at.title[0].value == "Neural Net × Matrix Visualizer"
    assert any("54 trainable parameters" in md.value for md in at.markdown)


def test_add_layer_button_updates_session():
    at = AppTest.from_file(APP, default_timeout=30).run()
    at.button(key="add_layer").click().run()
    assert not at.exception
    assert at.session_state["session"].get_architecture().num_layers == 5


def test_active_loss_header_uses_loss_color():
    at = AppTest.from_file(APP, default_timeout=30).run()
    ce = LOSSES["ce"]
    assert any(ce.color in md.value and ce.label in md.value for md in at.markdown)

    at.button(key="loss_bce").click().run()
    assert not at.exception
    assert any(LOSSES["bce"].color in md.value for md in at.markdown)


def test_weight_matrix_entry_is_explained():
    at = AppTest.from_file(APP, default_timeout=30).run()
    at.checkbox(key="matrix_1").check().run()
    assert not at.exception
    expected = "W[1,1]: weight from neuron 1 (layer 0) to neuron 1 (layer 1)"
    assert any(expected in caption.value for caption in at.caption)
