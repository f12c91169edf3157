"""
Interactive MLP Architecture Visualizer

A Streamlit dashboard for editing a fully-connected classifier and watching
its dimension algebra, parameter count, forward-pass composition and loss
gradients update live.
"""

import sys
from pathlib import Path

# Make the mlp_viz package importable when run straight from a checkout
sys.path.insert(0, str(Path(__file__).parent))

import streamlit as st

from mlp_viz.activations import HIDDEN_ACTIVATIONS
from mlp_viz.config import MAX_LAYERS, settings
from mlp_viz.logging_config import setup_logging
from mlp_viz.losses import LOSSES, comparison_rows
from mlp_viz.parameters import GENERAL_FORMULA, format_params, transition_rows
from mlp_viz.session import VisualizerSession

# Set page config first (must be first Streamlit command)
st.set_page_config(
    page_title=settings.page_title,
    page_icon=settings.page_icon,
    layout="wide",
)

setup_logging(settings.log_level, settings.log_file)


def get_session() -> VisualizerSession:
    if "session" not in st.session_state:
        st.session_state.session = VisualizerSession()
    return st.session_state.session


# =============================================================================
# Sidebar: architecture editor
# =============================================================================

def _on_activation_change(session: VisualizerSession, index: int, key: str) -> None:
    session.set_activation(index, st.session_state[key])


def render_layer_editor(session: VisualizerSession, index: int) -> None:
    model = session.model
    arch = model.architecture
    layer = arch[index]

    st.markdown(f"**{arch.layer_name(index)}**")
    minus, width, plus, act, remove = st.columns([1, 1, 1, 3, 1])

    minus.button("−", key=f"shrink_{index}", on_click=session.resize_layer, args=(index, -1),
                 disabled=not model.can_shrink(index))
    width.markdown(f"`{layer.width}`")
    plus.button("+", key=f"grow_{index}", on_click=session.resize_layer, args=(index, +1),
                disabled=not model.can_grow(index))

    if index == 0:
        act.caption("identity")
    elif index == arch.output_index:
        act.caption("Softmax")
    else:
        # Keyed on the current value so a reset or removal re-seeds the widget
        key = f"act_{index}_{layer.activation.value}"
        options = [a.value for a in HIDDEN_ACTIVATIONS]
        act.selectbox(
            "Activation",
            options,
            index=options.index(layer.activation.value),
            key=key,
            label_visibility="collapsed",
            on_change=_on_activation_change,
            args=(session, index, key),
        )
        remove.button("×", key=f"remove_{index}", on_click=session.remove_hidden_layer,
                      args=(index,), disabled=not model.can_remove(),
                      help="Remove this layer" if model.can_remove() else "Need at least one hidden layer")

    if index == session.selected_layer:
        shape = rf"a^{{({index})}} \in \mathbb{{R}}^{{{layer.width}}}"
        if index > 0:
            shape += rf", \quad W^{{({index})}} \in \mathbb{{R}}^{{{layer.width}\times{arch[index - 1].width}}}"
        st.markdown(f"${shape}$")


def render_sidebar(session: VisualizerSession) -> None:
    with st.sidebar:
        st.header("Architecture")

        n = session.model.architecture.num_layers
        st.caption(f"{'●' * n}{'○' * (MAX_LAYERS - n)}  {n}/{MAX_LAYERS} layers")

        reset_col, add_col = st.columns(2)
        reset_col.button("↺ Reset", on_click=session.reset, help="Reset to default architecture")
        add_col.button(
            "+ Add Hidden Layer" if session.model.can_insert() else "Max layers reached",
            key="add_layer",
            on_click=session.insert_hidden_layer,
            disabled=not session.model.can_insert(),
        )

        st.divider()

        for index in range(n):
            render_layer_editor(session, index)


# =============================================================================
# Main area
# =============================================================================

def render_summary(session: VisualizerSession) -> None:
    st.header("Parameter Summary")

    arch = session.get_architecture()
    params = session.get_parameter_breakdown()

    st.metric("Total Parameters", format_params(params["total"]))
    layers_col, weights_col, biases_col, classes_col = st.columns(4)
    layers_col.metric("Layers", arch.num_layers)
    weights_col.metric("Weights", params["total_weights"])
    biases_col.metric("Biases", params["total_biases"])
    classes_col.metric("Classes", arch.output_width)

    st.divider()

    st.subheader("Transition Breakdown")
    breakdown_data = {
        "Transition": [],
        "W shape": [],
        "Weights": [],
        "Biases": [],
        "% of Total": [],
    }
    for t in params["per_transition"]:
        breakdown_data["Transition"].append(f"{t['layer_index'] - 1} → {t['layer_index']}")
        breakdown_data["W shape"].append(f"{t['n_out']} × {t['n_in']}")
        breakdown_data["Weights"].append(t["weight_count"])
        breakdown_data["Biases"].append(t["bias_count"])
        share = t["weight_count"] + t["bias_count"]
        breakdown_data["% of Total"].append(f"{100 * share / params['total']:.1f}%")
    st.table(breakdown_data)

    with st.expander("How are these computed?"):
        st.latex(GENERAL_FORMULA)
        for row in transition_rows(params):
            prefix = f"${row['transition']}$ · " if row["transition"] else ""
            st.markdown(f"{prefix}${row['tensor']}$ · ${row['shape']}$ · **{row['count']}**")
        st.markdown(
            f"Weights total **{params['total_weights']}** · "
            f"Biases total **{params['total_biases']}** · "
            f"Total parameters **{params['total']}**"
        )

    st.divider()

    st.subheader("Function Composition")
    st.latex(session.get_forward_composition())


def render_layer_card(session: VisualizerSession, layer_index: int) -> None:
    arch = session.get_architecture()
    kind = arch[layer_index].activation
    detail = session.get_layer_detail(layer_index)

    title = f"Layer {layer_index} · a({layer_index - 1}) → a({layer_index}) · {kind.value}"
    with st.expander(title, expanded=layer_index == session.selected_layer):
        st.markdown("  ".join(f"${badge}$" for badge in detail.badges))

        st.latex(detail.equations.affine)
        st.latex(detail.equations.activation)
        st.caption(kind.description)
        if detail.equations.activation_is_identity_warning:
            st.warning("Linear activation: this layer adds no expressive power beyond a single affine map.")

        if st.checkbox("show reasoning", key=f"why_{layer_index}"):
            for section in detail.reasoning:
                st.markdown(f"**{section.title}**")
                st.markdown(section.body)

            st.markdown("**Step-by-step dimension flow**")
            for step in detail.dimension_trace:
                st.markdown(f"${step.expression}$ · {step.annotation}")

        if st.checkbox("show weight matrix", key=f"matrix_{layer_index}"):
            matrix = detail.matrix
            n_out, n_in = detail.equations.weight_shape
            st.caption(
                rf"Illustrative entries of $W^{{({layer_index})}} \in \mathbb{{R}}^{{{n_out}\times{n_in}}}$"
            )
            columns = {
                f"from {c + 1}": [row[c] for row in matrix.rows]
                for c in range(len(matrix.rows[0]))
            }
            if matrix.cols_truncated:
                columns["⋯"] = ["⋯"] * len(matrix.rows)
            st.table(columns)
            st.caption(matrix.caption + (" More rows omitted." if matrix.rows_truncated else ""))

            cells = [(r, c) for r in range(len(matrix.rows)) for c in range(len(matrix.rows[0]))]
            r, c = st.selectbox(
                "Inspect entry",
                cells,
                format_func=lambda rc: f"W[{rc[0] + 1},{rc[1] + 1}]",
                key=f"cell_{layer_index}_{n_out}x{n_in}",
            )
            st.caption(f"{matrix.cell_meaning(r, c)} = {matrix.rows[r][c]}")


def render_loss_panel(session: VisualizerSession) -> None:
    st.header("Classification Objective")
    K = session.num_classes

    option_cols = st.columns(len(LOSSES))
    for col, option in zip(option_cols, session.get_loss_options()):
        active = option["id"] == session.loss.active_id
        col.button(
            option["label"],
            key=f"loss_{option['id']}",
            on_click=session.select_loss,
            args=(option["id"],),
            disabled=not option["selectable"],
            type="primary" if active else "secondary",
            help=option["tag"] if option["selectable"] else f"Requires K=2 (current K={K})",
        )

    descriptor = session.loss.active
    st.markdown(
        f"<div style='border-left: 4px solid {descriptor.color}; padding-left: 8px'>"
        f"<strong>{descriptor.label}</strong> · {descriptor.tag}</div>",
        unsafe_allow_html=True,
    )
    for p in descriptor.parameters:
        value = st.slider(
            p.label,
            min_value=p.minimum,
            max_value=p.maximum,
            value=session.loss.params[p.key],
            step=p.step,
            key=f"param_{p.key}",
        )
        session.set_loss_parameter(p.key, p.clamp(value))

    view = session.get_active_loss_view()
    formula_tab, derivation_tab = st.tabs(["Formula", "Derivation"])

    with formula_tab:
        st.latex(view.formula)
        st.markdown(view.explanation)

        st.subheader("Output layer")
        head, constraint = view.output_layer
        st.latex(head)
        st.markdown(f"All {K} outputs satisfy ${constraint}$.")

        st.subheader("Gradient w.r.t. output logits")
        st.latex(view.gradient)
        st.caption(view.gradient_note)

    with derivation_tab:
        for heading, body in view.derivation_sections:
            st.markdown(f"**{heading}**")
            st.markdown(body)

        st.subheader("Quick comparison")
        st.table(comparison_rows())


def main():
    session = get_session()
    render_sidebar(session)

    arch = session.get_architecture()
    total = session.get_parameter_breakdown()["total"]

    st.title("Neural Net × Matrix Visualizer")
    st.markdown(
        f"classification · {arch.num_layers} layers · {total:,} trainable parameters"
    )

    # Main content area - two columns
    col1, col2 = st.columns([2, 1])

    with col1:
        st.header("Network Graph")
        selected = st.selectbox(
            "Inspect layer",
            options=list(range(arch.num_layers)),
            index=session.selected_layer,
            format_func=arch.layer_name,
        )
        session.select_layer(selected)
        st.graphviz_chart(session.diagram(), width='stretch')

        st.header("Layer Transformations")
        for layer_index in range(1, arch.num_layers):
            render_layer_card(session, layer_index)

        render_loss_panel(session)

    with col2:
        render_summary(session)


if __name__ == "__main__":
    main()
