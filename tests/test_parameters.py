import pytest

from mlp_viz.architecture import NetworkArchitecture, default_architecture
from mlp_viz.parameters import compute_parameters, format_params, transition_rows


def test_default_network_counts():
    params = compute_parameters(default_architecture())
    assert params["total_weights"] == 3 * 5 + 5 * 4 + 4 * 2 == 43
    assert params["total_biases"] == 5 + 4 + 2 == 11
    assert params["total"] == 54


def test_per_transition_breakdown():
    params = compute_parameters(default_architecture())
    assert [t["layer_index"] for t in params["per_transition"]] == [1, 2, 3]
    first = params["per_transition"][0]
    assert first == {"layer_index": 1, "n_in": 3, "n_out": 5, "weight_count": 15, "bias_count": 5}


@pytest.mark.parametrize("widths", [
    [1, 1, 1],
    [8, 8, 8, 8, 8, 8],
    [2, 7, 1, 3],
    [5, 3, 6, 2, 4],
])
def test_totals_match_closed_form(widths):
    params = compute_parameters(NetworkArchitecture.from_widths(widths))
    closed_form = sum(widths[l] * (widths[l - 1] + 1) for l in range(1, len(widths)))
    assert params["total"] == params["total_weights"] + params["total_biases"] == closed_form
    assert isinstance(params["total"], int)
    assert params["total_weights"] >= 0 and params["total_biases"] >= 0
    assert len(params["per_transition"]) == len(widths) - 1


def test_widest_transition_is_72():
    params = compute_parameters(NetworkArchitecture.from_widths([8, 8, 8]))
    for t in params["per_transition"]:
        assert t["weight_count"] + t["bias_count"] == 72


@pytest.mark.parametrize("n, expected", [
    (54, "54"),
    (1500, "1.5K"),
    (2_500_000, "2.50M"),
    (3_000_000_000, "3.00B"),
])
def test_format_params(n, expected):
    assert format_params(n) == expected


def test_transition_rows_pair_weights_and_biases():
    rows = transition_rows(compute_parameters(default_architecture()))
    assert len(rows) == 6
    assert rows[0]["transition"] == r"l_{0} \to l_{1}"
    assert rows[0]["shape"] == r"5 \times 3"
    assert rows[1]["tensor"] == "b^{(1)}"
    assert rows[1]["count"] == 5
