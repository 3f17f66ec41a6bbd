"""Read-only query contract over the layer and tree indices.

Every operation is total: a lookup that misses returns an
``IdentifierNotFound`` or ``PathNotFound`` value naming what was missing,
never raises.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass

from diveweb.analysis.models import AnalysisResult
from diveweb.index.flatten import FlatNodeView, SortOrder
from diveweb.index.layers import LayerIndex, LayerView
from diveweb.index.trees import NodeMap, TreeIndex, TreeSummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentifierNotFound:
    """A layer id or tree id absent from the index."""

    kind: str  # "layer" or "file tree"
    identifier: str

    @property
    def message(self) -> str:
        return f"{self.kind} id not found: {self.identifier}"


@dataclass(frozen=True)
class PathNotFound:
    """A path absent from an existing tree."""

    tree_id: str
    path: str

    @property
    def message(self) -> str:
        return f"path not found in file tree {self.tree_id}: {self.path}"


NotFound = IdentifierNotFound | PathNotFound


def _parse_tree_id(tree_id: uuid.UUID | str) -> uuid.UUID | None:
    if isinstance(tree_id, uuid.UUID):
        return tree_id
    try:
        return uuid.UUID(tree_id)
    except (ValueError, TypeError, AttributeError):
        return None


class QueryFacade:
    def __init__(self, layers: LayerIndex, trees: TreeIndex) -> None:
        self._layers = layers
        self._trees = trees

    @classmethod
    def from_analysis(
        cls,
        analysis: AnalysisResult,
        sort_order: SortOrder | str = SortOrder.BY_NAME,
    ) -> QueryFacade:
        """Build both indices from a fully computed analysis result."""
        t0 = time.perf_counter()
        layers = LayerIndex.build(analysis.layers)
        trees = TreeIndex.build(analysis.ref_trees, sort_order=sort_order)
        logger.info(
            "Query indices ready: %d layers, %d trees (%.2fs)",
            len(layers), len(trees), time.perf_counter() - t0,
        )
        return cls(layers, trees)

    # ── Layers ──

    def all_layer_ids(self) -> list[str]:
        return self._layers.list_ids()

    def all_layers(self) -> list[LayerView]:
        return self._layers.list_views()

    def layer(self, layer_id: str) -> LayerView | IdentifierNotFound:
        view = self._layers.get(layer_id)
        if view is None:
            return IdentifierNotFound("layer", str(layer_id))
        return view

    # ── Trees ──

    def all_tree_ids(self) -> list[uuid.UUID]:
        return self._trees.list_ids()

    def all_trees(self) -> dict[uuid.UUID, NodeMap]:
        return {tree_id: self._trees.get_tree(tree_id) for tree_id in self._trees.list_ids()}

    def tree_nodes(self, tree_id: uuid.UUID | str) -> NodeMap | IdentifierNotFound:
        parsed = _parse_tree_id(tree_id)
        nodes = self._trees.get_tree(parsed) if parsed is not None else None
        if nodes is None:
            return IdentifierNotFound("file tree", str(tree_id))
        return nodes

    def tree_node(self, tree_id: uuid.UUID | str, path: str) -> FlatNodeView | NotFound:
        """Resolve the tree first, then the exact path within it."""
        nodes = self.tree_nodes(tree_id)
        if isinstance(nodes, IdentifierNotFound):
            return nodes
        node = nodes.get(path)
        if node is None:
            return PathNotFound(str(tree_id), path)
        return node

    def tree_summary(self, tree_id: uuid.UUID | str) -> TreeSummary | IdentifierNotFound:
        parsed = _parse_tree_id(tree_id)
        summary = self._trees.get_summary(parsed) if parsed is not None else None
        if summary is None:
            return IdentifierNotFound("file tree", str(tree_id))
        return summary
