import pytest

from conftest import inner, leaf, make_snapshot, two_level_data
from highlight import HighlightKind
from layout import LayoutConfig, build_layout, layout_extent
from snapshot import DanglingReference, NodeKind, NodeRef, Snapshot

CFG = LayoutConfig()


def test_single_leaf_scenario():
    layout = build_layout(make_snapshot())

    assert len(layout.nodes) == 1
    node = layout.nodes[0]
    assert node.ref == NodeRef(NodeKind.LEAF, 0)
    assert node.highlight is HighlightKind.LEAF
    assert (node.x, node.y) == (25, 150)

    assert [c.key for c in layout.cells] == [10, 20]
    assert [(c.x, c.y) for c in layout.cells] == [(50, 150), (110, 150)]
    assert all(c.highlight is HighlightKind.NONE for c in layout.cells)
    assert [c.slot for c in layout.cells] == [0, 1]


def test_staged_insert_comes_first():
    layout = build_layout(make_snapshot(to_insert=15))
    staged = layout.cells[0]
    assert (staged.x, staged.y, staged.key) == (50, 50, 15)
    assert staged.owner is None and staged.slot is None
    assert len(layout.cells) == 3


def test_children_cascade_and_stack():
    layout = build_layout(Snapshot.from_json(two_level_data()))

    assert [n.ref for n in layout.nodes] == [
        NodeRef(NodeKind.INNER, 0), NodeRef(NodeKind.LEAF, 0), NodeRef(NodeKind.LEAF, 1)]
    ys = [n.y for n in layout.nodes]
    assert ys == [150, 250, 350]
    # both children share one column, two cell widths right of the parent
    assert layout.nodes[1].x == layout.nodes[2].x == 50 + 2 * 50 - 25
    assert [n.highlight for n in layout.nodes] == [
        HighlightKind.INNER, HighlightKind.LEAF, HighlightKind.LEAF]


def test_split_child_laid_out_beside_main_tree():
    data = {
        "node_capacity": 2,
        "root_node": leaf(0),
        "leaf_nodes": [{"keys": [1, 2]}, {"keys": [3]}],
        "to_insert_child": leaf(1),
    }
    layout = build_layout(Snapshot.from_json(data))
    assert len(layout.nodes) == 2
    split = layout.nodes[1]
    assert split.ref == NodeRef(NodeKind.LEAF, 1)
    assert (split.x, split.y) == (800 - 25, 150)
    assert layout.cells[-1].x == 800


def test_childless_counts_match_reachable_nodes():
    data = {
        "node_capacity": 4,
        "root_node": leaf(0),
        "leaf_nodes": [{"keys": [1, 2, 3]}, {"keys": [7, 8]}, {"keys": [99]}],
        "to_insert_child": leaf(1),
        "to_insert": 5,
    }
    layout = build_layout(Snapshot.from_json(data))
    assert len(layout.nodes) == 2
    assert len(layout.cells) == 3 + 2 + 1


def test_zero_key_node_still_gets_background():
    data = {
        "node_capacity": 3,
        "root_node": inner(0),
        "inner_nodes": [{"keys": [], "children": [leaf(0)]}],
        "leaf_nodes": [{"keys": [4]}],
    }
    layout = build_layout(Snapshot.from_json(data))
    assert len(layout.nodes) == 2
    assert [c.key for c in layout.cells] == [4]


def _deep_data():
    """
    inner[0] = [50]
      ├── inner[1] = [20]
      │     ├── leaf[0] = [5]
      │     └── leaf[1] = [30]
      └── leaf[2] = [60, 70]
    """
    return {
        "node_capacity": 3,
        "root_node": inner(0),
        "inner_nodes": [
            {"keys": [50], "children": [inner(1), leaf(2)]},
            {"keys": [20], "children": [leaf(0), leaf(1)]},
        ],
        "leaf_nodes": [{"keys": [5]}, {"keys": [30]}, {"keys": [60, 70]}],
    }


def test_sibling_subtrees_never_overlap():
    layout = build_layout(Snapshot.from_json(_deep_data()))
    by_ref = {n.ref: n for n in layout.nodes}
    first_subtree = [by_ref[NodeRef(NodeKind.INNER, 1)],
                     by_ref[NodeRef(NodeKind.LEAF, 0)],
                     by_ref[NodeRef(NodeKind.LEAF, 1)]]
    second = by_ref[NodeRef(NodeKind.LEAF, 2)]

    first_bottom = max(n.y for n in first_subtree) + CFG.cell_height / 2
    assert first_bottom <= second.y


def test_layout_is_pure():
    snap = Snapshot.from_json(_deep_data())
    assert build_layout(snap) == build_layout(snap)


def test_custom_geometry():
    cfg = LayoutConfig(cell_width=20, cell_padding=0, origin_x=100, origin_y=10)
    layout = build_layout(make_snapshot(), cfg)
    assert [(c.x, c.y) for c in layout.cells] == [(100, 10), (120, 10)]
    assert layout.nodes[0].x == 90


def test_dangling_child_aborts_layout():
    data = two_level_data()
    data["inner_nodes"][0]["children"][1] = leaf(7)
    with pytest.raises(DanglingReference):
        build_layout(Snapshot.from_json(data))


def test_extent_covers_everything():
    layout = build_layout(Snapshot.from_json(_deep_data()))
    max_x, max_y = layout_extent(layout, 3, CFG)
    assert max_y >= max(c.y for c in layout.cells) + CFG.half_cell_height
    assert max_x >= max(c.x for c in layout.cells) + CFG.half_cell_width


def test_node_width():
    assert CFG.node_width(3) == 3 * 50 + 2 * 10
