import pytest

from mlp_viz.illustrative import illustrative_matrix, illustrative_weight


def test_illustrative_weight_is_pure_and_bounded():
    for l in range(1, 6):
        for r in range(8):
            for c in range(8):
                value = illustrative_weight(l, r, c)
                assert value == illustrative_weight(l, r, c)
                assert -1.0 <= value <= 1.0
                assert round(value, 2) == value


def test_illustrative_weight_varies():
    values = {illustrative_weight(1, r, c) for r in range(5) for c in range(5)}
    assert len(values) > 10


@pytest.mark.parametrize("n_in, n_out, shape, truncated", [
    (3, 5, (5, 3), (False, False)),
    (8, 2, (2, 5), (False, True)),
    (7, 6, (5, 5), (True, True)),
])
def test_matrix_preview_caps_visible_cells(n_in, n_out, shape, truncated):
    preview = illustrative_matrix(2, n_in, n_out)
    assert (len(preview.rows), len(preview.rows[0])) == shape
    assert (preview.rows_truncated, preview.cols_truncated) == truncated
    assert preview.rows[1][0] == illustrative_weight(2, 1, 0)


def test_matrix_preview_text():
    preview = illustrative_matrix(1, 7, 6)
    assert preview.caption == "Showing 5×5 of 6×7."
    assert preview.cell_meaning(0, 2) == "W[1,3]: weight from neuron 3 (layer 0) to neuron 1 (layer 1)"
