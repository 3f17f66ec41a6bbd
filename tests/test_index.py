"""Tests for the layer and tree indices."""

from __future__ import annotations

import uuid

import pytest

from diveweb.index.errors import DuplicateIdentifierError, IndexBuildError
from diveweb.index.flatten import SortOrder
from diveweb.index.layers import LayerIndex, LayerView
from diveweb.index.trees import TreeIndex
from tests.helpers import TREE_A, TREE_B, base_tree, make_layer, make_node, make_tree, second_tree


class TestLayerIndex:
    def test_build_preserves_order(self, analysis):
        index = LayerIndex.build(analysis.layers)
        assert index.list_ids() == ["sha256:abc", "sha256:def"]
        assert len(index) == 2

    def test_view_fields(self, analysis):
        index = LayerIndex.build(analysis.layers)
        view = index.get("sha256:abc")
        assert view == LayerView(
            id="sha256:abc",
            index=0,
            command="RUN x",
            size=1024,
            tree_id=TREE_A,
            names=("base",),
            digest="sha256:abc",
        )

    def test_list_views_in_order(self, analysis):
        index = LayerIndex.build(analysis.layers)
        assert [v.id for v in index.list_views()] == index.list_ids()

    def test_get_missing(self, analysis):
        index = LayerIndex.build(analysis.layers)
        assert index.get("sha256:zzz") is None
        assert "sha256:zzz" not in index
        assert "sha256:abc" in index

    def test_duplicate_id_rejected(self):
        tree = base_tree()
        layers = [make_layer("sha256:abc", tree), make_layer("sha256:abc", tree, index=1)]
        with pytest.raises(DuplicateIdentifierError, match="duplicate layer id: sha256:abc"):
            LayerIndex.build(layers)

    def test_empty(self):
        index = LayerIndex.build([])
        assert index.list_ids() == []
        assert index.list_views() == []

    def test_view_decoupled_from_layer(self, analysis):
        index = LayerIndex.build(analysis.layers)
        analysis.layers[0].names.append("mutated")
        assert index.get("sha256:abc").names == ("base",)

    def test_returned_id_list_is_a_copy(self, analysis):
        index = LayerIndex.build(analysis.layers)
        index.list_ids().clear()
        assert index.list_ids() == ["sha256:abc", "sha256:def"]


class TestTreeIndex:
    def test_build_preserves_order(self):
        index = TreeIndex.build([second_tree(), base_tree()])
        assert index.list_ids() == [TREE_B, TREE_A]

    def test_build_from_pairs(self):
        other = uuid.UUID("33333333-3333-3333-3333-333333333333")
        index = TreeIndex.build([(other, base_tree())])
        assert index.list_ids() == [other]
        assert index.get_tree(TREE_A) is None
        assert set(index.get_tree(other)) == {"/", "/app", "/app/main"}

    def test_duplicate_id_rejected(self):
        with pytest.raises(IndexBuildError):
            TreeIndex.build([base_tree(), make_tree(TREE_A, make_node("/"))])

    def test_get_tree(self):
        index = TreeIndex.build([base_tree()])
        nodes = index.get_tree(TREE_A)
        assert set(nodes) == {"/", "/app", "/app/main"}
        assert index.get_tree(TREE_B) is None

    def test_get_node(self):
        index = TreeIndex.build([base_tree()])
        node = index.get_node(TREE_A, "/app/main")
        assert node.name == "main"
        assert node is index.get_tree(TREE_A)["/app/main"]

    def test_get_node_exact_match_only(self):
        index = TreeIndex.build([base_tree()])
        assert index.get_node(TREE_A, "/app/") is None
        assert index.get_node(TREE_A, "app/main") is None
        assert index.get_node(TREE_A, "/APP") is None

    def test_get_node_missing_tree(self):
        index = TreeIndex.build([base_tree()])
        assert index.get_node(TREE_B, "/") is None

    def test_tree_maps_are_read_only(self):
        index = TreeIndex.build([base_tree()])
        with pytest.raises(TypeError):
            index.get_tree(TREE_A)["/new"] = None

    def test_sort_order_applies_to_children(self):
        root = make_node("/", children=[make_node("a", size=1), make_node("b", size=9)])
        tree = make_tree(TREE_A, root)
        assert TreeIndex.build([tree]).get_node(TREE_A, "/").children == ("a", "b")
        by_size = TreeIndex.build([tree], sort_order=SortOrder.BY_SIZE_DESC)
        assert by_size.get_node(TREE_A, "/").children == ("b", "a")

    def test_summary(self):
        index = TreeIndex.build([second_tree()])
        summary = index.get_summary(TREE_B)
        assert summary.id == TREE_B
        assert summary.name == "app"
        assert summary.root_path == "/"
        assert summary.node_count == 6
        assert index.get_summary(TREE_A) is None
