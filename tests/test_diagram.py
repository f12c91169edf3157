from mlp_viz.architecture import NetworkArchitecture, default_architecture
from mlp_viz.diagram import create_network_diagram, visible_nodes


def test_visible_nodes_caps_wide_layers():
    assert visible_nodes(3) == [("1", False), ("2", False), ("3", False)]
    nodes = visible_nodes(8)
    assert len(nodes) == 6
    assert nodes[-1] == ("6", True)
    assert not any(ellipsis for _, ellipsis in visible_nodes(6))


def test_diagram_contains_every_layer_and_edge():
    dot = create_network_diagram(default_architecture(), selected_layer=1)
    source = dot.source
    for li in range(4):
        assert f"cluster_{li}" in source
    assert "l0_1 -> l1_1" in source
    assert "l2_4 -> l3_2" in source
    assert "Hidden 1" in source
    # 3*5 + 5*4 + 4*2 edges
    assert source.count("->") == 43


def test_diagram_labels_inputs_and_parameter_counts():
    dot = create_network_diagram(NetworkArchitecture.from_widths([8, 2, 2]))
    source = dot.source
    assert "x1" in source
    assert "…" in source
    assert "18 params" in source
    assert "6 params" in source
