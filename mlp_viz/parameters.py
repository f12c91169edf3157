"""Parameter counting for the fully-connected network."""

from mlp_viz.architecture import NetworkArchitecture

GENERAL_FORMULA = (
    r"\text{Params} = \underbrace{\sum_{l=1}^{L} n_l \cdot n_{l-1}}_{\text{weights}}"
    r" \;+\; \underbrace{\sum_{l=1}^{L} n_l}_{\text{biases}}"
    r" \;=\; \sum_{l=1}^{L} n_l\,(n_{l-1} + 1)"
)


def format_params(n: int) -> str:
    """Format parameter count with appropriate suffix."""
    if n >= 1e9:
        return f"{n/1e9:.2f}B"
    elif n >= 1e6:
        return f"{n/1e6:.2f}M"
    elif n >= 1e3:
        return f"{n/1e3:.1f}K"
    return str(n)


def compute_parameters(architecture: NetworkArchitecture) -> dict:
    """
    Calculate weight and bias counts for every layer-to-layer transition.

    For the transition into layer l (width n_out) from layer l-1 (width n_in):
    - Weights W^(l): n_out × n_in
    - Biases b^(l): n_out

    The input layer owns no parameters, so an L-layer network has L-1
    transitions and Σ n_l (n_{l-1} + 1) parameters in total.
    """
    per_transition = []
    total_weights = 0
    total_biases = 0

    widths = architecture.widths
    for layer_index in range(1, len(widths)):
        n_in, n_out = widths[layer_index - 1], widths[layer_index]
        weight_count = n_in * n_out
        bias_count = n_out

        total_weights += weight_count
        total_biases += bias_count

        per_transition.append({
            "layer_index": layer_index,
            "n_in": n_in,
            "n_out": n_out,
            "weight_count": weight_count,
            "bias_count": bias_count,
        })

    return {
        "per_transition": per_transition,
        "total_weights": total_weights,
        "total_biases": total_biases,
        "total": total_weights + total_biases,
    }


def transition_rows(breakdown: dict) -> list:
    """LaTeX rows (transition, tensor, shape, count) for the explainer table."""
    rows = []
    for t in breakdown["per_transition"]:
        l = t["layer_index"]
        rows.append({
            "transition": rf"l_{{{l - 1}}} \to l_{{{l}}}",
            "tensor": rf"W^{{({l})}}",
            "shape": rf"{t['n_out']} \times {t['n_in']}",
            "count": t["weight_count"],
        })
        rows.append({
            "transition": "",
            "tensor": rf"b^{{({l})}}",
            "shape": f"{t['n_out']}",
            "count": t["bias_count"],
        })
    return rows
