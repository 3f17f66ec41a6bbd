"""Tree index: tree id -> flattened path mapping."""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from diveweb.analysis.models import FileTree
from diveweb.index.errors import DuplicateIdentifierError
from diveweb.index.flatten import ROOT_PATH, FlatNodeView, SortOrder, flatten

logger = logging.getLogger(__name__)

NodeMap = Mapping[str, FlatNodeView]


@dataclass(frozen=True)
class TreeSummary:
    """Tree-level metadata, without any of the nodes."""

    id: uuid.UUID
    name: str
    size: int
    file_size: int
    sort_order: str
    root_path: str
    node_count: int


class TreeIndex:
    """Read-only lookup of flattened file trees by id, preserving input order."""

    def __init__(
        self,
        trees: Mapping[uuid.UUID, NodeMap],
        ids: tuple[uuid.UUID, ...],
        summaries: Mapping[uuid.UUID, TreeSummary] | None = None,
    ) -> None:
        self._trees = MappingProxyType({
            tree_id: MappingProxyType(dict(nodes)) for tree_id, nodes in trees.items()
        })
        self._ids = ids
        self._summaries = MappingProxyType(dict(summaries or {}))

    @classmethod
    def build(
        cls,
        trees: Iterable[FileTree | tuple[uuid.UUID, FileTree]],
        sort_order: SortOrder | str = SortOrder.BY_NAME,
    ) -> TreeIndex:
        """Flatten every tree.

        Accepts trees directly or as ``(id, tree)`` pairs; with pairs the
        given id is the one the tree is indexed under.
        """
        t0 = time.perf_counter()
        flat: dict[uuid.UUID, NodeMap] = {}
        summaries: dict[uuid.UUID, TreeSummary] = {}
        ids: list[uuid.UUID] = []
        for item in trees:
            tree_id, tree = item if isinstance(item, tuple) else (item.id, item)
            if tree_id in flat:
                raise DuplicateIdentifierError("file tree", tree_id)
            nodes = flatten(tree.root, sort_order)
            flat[tree_id] = nodes
            summaries[tree_id] = TreeSummary(
                id=tree_id,
                name=tree.name,
                size=tree.size,
                file_size=tree.file_size,
                sort_order=tree.sort_order,
                root_path=ROOT_PATH,
                node_count=len(nodes),
            )
            ids.append(tree_id)
            logger.debug("Flattened tree %s: %d nodes", tree_id, len(nodes))
        logger.info(
            "Indexed %d file trees, %d nodes (%.2fs)",
            len(ids), sum(len(n) for n in flat.values()), time.perf_counter() - t0,
        )
        return cls(flat, tuple(ids), summaries)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, tree_id: object) -> bool:
        return tree_id in self._trees

    def list_ids(self) -> list[uuid.UUID]:
        return list(self._ids)

    def get_tree(self, tree_id: uuid.UUID) -> NodeMap | None:
        return self._trees.get(tree_id)

    def get_node(self, tree_id: uuid.UUID, path: str) -> FlatNodeView | None:
        """Look up a node by exact path. Returns None if the tree or path is absent."""
        nodes = self._trees.get(tree_id)
        if nodes is None:
            return None
        return nodes.get(path)

    def get_summary(self, tree_id: uuid.UUID) -> TreeSummary | None:
        return self._summaries.get(tree_id)
