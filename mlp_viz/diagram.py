"""Graphviz rendering of the editable network."""

from typing import List, Optional, Tuple

import graphviz

from mlp_viz.activations import INPUT_COLOR
from mlp_viz.architecture import NetworkArchitecture
from mlp_viz.config import MAX_NODES_SHOWN
from mlp_viz.parameters import compute_parameters, format_params


def layer_color(architecture: NetworkArchitecture, index: int) -> str:
    if index == 0:
        return INPUT_COLOR
    return architecture[index].activation.color


def visible_nodes(width: int, max_shown: int = MAX_NODES_SHOWN) -> List[Tuple[str, bool]]:
    """
    Node ids shown for a layer of ``width`` neurons.

    Returns (suffix, is_ellipsis) pairs; wide layers replace their last
    visible node with an ellipsis.
    """
    shown = min(width, max_shown)
    return [(str(i + 1), i == max_shown - 1 and width > max_shown) for i in range(shown)]


def create_network_diagram(architecture: NetworkArchitecture,
                           selected_layer: Optional[int] = None) -> graphviz.Digraph:
    """Create a left-to-right graphviz diagram of the network."""
    dot = graphviz.Digraph(comment='MLP Architecture')
    dot.attr(rankdir='LR', splines='line', nodesep='0.25', ranksep='1.2')
    dot.attr('node', shape='circle', style='filled', fontname='Helvetica', fontsize='9',
             fixedsize='true', width='0.45')

    breakdown = compute_parameters(architecture)
    counts = {t["layer_index"]: t for t in breakdown["per_transition"]}

    for li, layer in enumerate(architecture):
        color = layer_color(architecture, li)
        selected = li == selected_layer

        label = f'{architecture.layer_name(li)}\nn={layer.width}'
        if li in counts:
            t = counts[li]
            label += f'\n{format_params(t["weight_count"] + t["bias_count"])} params'

        with dot.subgraph(name=f'cluster_{li}') as cluster:
            cluster.attr(label=label, style='rounded,dashed', color=color if selected else 'gray',
                         fontname='Helvetica', fontsize='10', penwidth='2' if selected else '1')
            for suffix, ellipsis in visible_nodes(layer.width):
                prefix = 'x' if li == 0 else 'a'
                cluster.node(
                    f'l{li}_{suffix}',
                    '…' if ellipsis else f'{prefix}{suffix}',
                    fillcolor=color if selected else f'{color}88',
                )

    # Edges, highlighted when they touch the selected layer
    for li in range(architecture.num_layers - 1):
        highlighted = selected_layer in (li, li + 1)
        edge_color = '#6366f1' if highlighted else '#cbd5e1'
        for src, _ in visible_nodes(architecture[li].width):
            for dst, _ in visible_nodes(architecture[li + 1].width):
                dot.edge(f'l{li}_{src}', f'l{li + 1}_{dst}', color=edge_color,
                         penwidth='1.2' if highlighted else '0.6', arrowsize='0.4')

    return dot
