"""Tests for the tidy-tree layout engine."""

import math

import pytest

from jsonscape import layout, normalize, subtree_spans
from jsonscape.layout import build_forest
from jsonscape.settings import Align, Direction, Settings
from tests.conftest import B, C, D, ROOT, make_graph, make_node, make_settings


def boxes(graph):
    return {n.id: (n.x, n.y) for n in graph.nodes}


# =============================================================================
# Forest
# =============================================================================


class TestForest:
    def test_sample_forest(self, sample_doc):
        forest = build_forest(normalize(sample_doc))

        assert forest.roots == [ROOT]
        assert forest.order == [ROOT, B, C, D]
        assert forest.children[ROOT] == [B, C]
        assert forest.depth == {ROOT: 0, B: 1, C: 1, D: 2}

    def test_children_sorted_by_child_order(self):
        graph = make_graph(["r", "x", "y"], [("r", "y"), ("r", "x")])
        assert build_forest(graph).children["r"] == ["y", "x"]

    def test_cycle_still_places_every_node(self):
        graph = make_graph(["a", "b"], [("a", "b"), ("b", "a")])
        forest = build_forest(graph)
        assert forest.roots == ["a"]
        assert sorted(forest.order) == ["a", "b"]

    def test_multiple_roots_in_node_order(self):
        graph = make_graph(["r1", "r2", "c"], [("r2", "c")])
        assert build_forest(graph).roots == ["r1", "r2"]


# =============================================================================
# Placement
# =============================================================================


class TestForwardLayout:
    def test_center_alignment(self, sample_doc, center_settings):
        graph = layout(normalize(sample_doc), center_settings)

        assert boxes(graph) == {ROOT: (0, 88), B: (320, 40), C: (320, 136), D: (640, 136)}

    def test_parent_centered_on_mean_of_children(self, sample_doc, center_settings):
        by_id = layout(normalize(sample_doc), center_settings).node_by_id()

        assert by_id[ROOT].center.y == (by_id[B].center.y + by_id[C].center.y) / 2
        assert by_id[C].center.y == by_id[D].center.y

    def test_first_child_alignment(self, sample_doc):
        graph = layout(normalize(sample_doc))
        assert boxes(graph) == {ROOT: (0, 40), B: (320, 40), C: (320, 136), D: (640, 136)}

    def test_single_child_same_in_both_modes(self, sample_doc, center_settings):
        first = layout(normalize(sample_doc)).node_by_id()
        center = layout(normalize(sample_doc), center_settings).node_by_id()
        assert first[C].y == center[C].y == first[D].y

    def test_pins(self, sample_doc, center_settings):
        graph = layout(normalize(sample_doc), center_settings)
        assert dict(graph.meta["pinY"]) == {ROOT: 120, B: 72, C: 168, D: 168}
        assert "pinX" not in graph.meta

    def test_pins_merge_over_existing(self, sample_doc):
        graph = normalize(sample_doc).with_meta(pinY={"$.gone": 5, ROOT: 1})
        pins = layout(graph).meta["pinY"]
        assert pins["$.gone"] == 5
        assert pins[ROOT] == 72

    def test_level_offsets_use_widest_node(self, sample_doc):
        full = normalize(sample_doc)
        wide = full.with_nodes(n.resized(400, 64) if n.id == B else n for n in full.nodes)
        by_id = layout(wide).node_by_id()
        assert by_id[B].x == by_id[C].x == 320
        assert by_id[D].x == 320 + 400 + 64

    def test_sizes_are_left_untouched(self, sample_doc):
        graph = layout(normalize(sample_doc))
        assert all((n.width, n.height) == (256, 64) for n in graph.nodes)

    def test_roots_stacked_from_margin(self):
        graph = make_graph(["r1", "r2"], [])
        by_id = layout(graph).node_by_id()
        assert by_id["r1"].y == 40
        assert by_id["r2"].y == 40 + 64 + 32


class TestDownwardLayout:
    def test_sample(self, sample_doc, downward_settings):
        graph = layout(normalize(sample_doc), downward_settings)

        assert boxes(graph) == {ROOT: (40, 0), B: (40, 96), C: (360, 96), D: (360, 192)}
        assert dict(graph.meta["pinX"]) == {ROOT: 168, B: 168, C: 488, D: 488}

    def test_gaps_swap_roles(self, sample_doc):
        settings = make_settings(direction=Direction.DOWNWARD, column_gap=10, row_gap=100)
        by_id = layout(normalize(sample_doc), settings).node_by_id()
        assert by_id[B].y == 64 + 100
        assert by_id[C].x == 40 + 256 + 10


# =============================================================================
# Robustness
# =============================================================================


class TestRobustness:
    @pytest.mark.parametrize("bad", [None, 0, -5, math.nan, math.inf])
    def test_invalid_sizes_use_default(self, sample_doc, bad):
        full = normalize(sample_doc)
        broken = full.with_nodes(n.resized(bad, bad) if n.id == B else n for n in full.nodes)

        assert boxes(layout(broken)) == boxes(layout(full))
        assert layout(broken).node_by_id()[B].width is bad

    @pytest.mark.parametrize("gap", [0, -1, math.nan])
    def test_invalid_gaps_fall_back(self, sample_doc, gap):
        settings = make_settings(column_gap=gap, row_gap=gap)
        assert boxes(layout(normalize(sample_doc), settings)) == boxes(layout(normalize(sample_doc)))

    def test_empty_graph(self):
        graph = layout(make_graph([], []))
        assert graph.nodes == ()
        assert dict(graph.meta["pinY"]) == {}

    def test_dangling_edges_ignored(self):
        graph = make_graph(["a", "b"], [("a", "b"), ("a", "ghost")])
        by_id = layout(graph).node_by_id()
        assert by_id["b"].x == 320

    def test_coordinates_are_whole_pixels(self, catalog_doc):
        full = normalize(catalog_doc)
        odd = full.with_nodes(n.resized(201, 37) for n in full.nodes)
        for node in layout(odd, make_settings(align=Align.CENTER)).nodes:
            assert float(node.x).is_integer()
            assert float(node.y).is_integer()


# =============================================================================
# Properties
# =============================================================================


class TestProperties:
    def test_deterministic(self, catalog_doc):
        settings = Settings()
        assert layout(normalize(catalog_doc), settings) == layout(normalize(catalog_doc), settings)

    @pytest.mark.parametrize("direction", list(Direction))
    @pytest.mark.parametrize("align", list(Align))
    def test_subtree_containment(self, catalog_doc, direction, align):
        settings = make_settings(direction=direction, align=align)
        graph = layout(normalize(catalog_doc), settings)
        spans = subtree_spans(graph, settings)
        forest = build_forest(graph)
        by_id = graph.node_by_id()

        for node_id, (start, end) in spans.items():
            for child in forest.children[node_id]:
                child_start, child_end = spans[child]
                assert start <= child_start and child_end <= end

        for node_id, kids in forest.children.items():
            if kids:
                continue
            node = by_id[node_id]
            low = node.y if direction is Direction.FORWARD else node.x
            size = node.height if direction is Direction.FORWARD else node.width
            start, end = spans[node_id]
            assert start <= low and low + size <= end + 0.5

    def test_sibling_subtrees_do_not_overlap(self, catalog_doc):
        graph = layout(normalize(catalog_doc))
        spans = subtree_spans(graph)
        forest = build_forest(graph)
        for kids in [forest.roots, *forest.children.values()]:
            ordered = [spans[k] for k in kids]
            for (_, end), (start, _) in zip(ordered, ordered[1:]):
                assert end < start

    def test_custom_default_node_size(self):
        settings = Settings.from_mapping({"data": {"default_node_size": [100, 20]}})
        graph = make_graph(["a", "b"], [("a", "b")]).with_nodes(
            [make_node("a", width=None, height=None), make_node("b", 0, width=None, height=None)]
        )
        assert layout(graph, settings).node_by_id()["b"].x == 100 + 64
