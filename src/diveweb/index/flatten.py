"""Flatten a file tree into a path-keyed mapping of node views.

Nodes are visited depth first, children before their parent, with siblings
ordered by a sort strategy so the visit order is reproducible.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass

from diveweb.analysis.models import DiffType, FileInfo, FileNode
from diveweb.index.errors import IndexBuildError

ROOT_PATH = "/"

Visitor = Callable[[FileNode, str, tuple[str, ...]], None]
VisitEvaluator = Callable[[FileNode, str], bool]
OrderStrategy = Callable[[dict[str, FileNode]], list[str]]


class SortOrder(str, enum.Enum):
    BY_NAME = "name"
    BY_SIZE_DESC = "size"

    @classmethod
    def parse(cls, value: str | SortOrder) -> SortOrder:
        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(o.value for o in cls)
            raise ValueError(f"Unknown sort order {value!r}. Available: {choices}") from None


def _order_by_name(children: dict[str, FileNode]) -> list[str]:
    return sorted(children)


def _order_by_size_desc(children: dict[str, FileNode]) -> list[str]:
    return sorted(children, key=lambda name: (-children[name].size, name))


_STRATEGIES: dict[SortOrder, OrderStrategy] = {
    SortOrder.BY_NAME: _order_by_name,
    SortOrder.BY_SIZE_DESC: _order_by_size_desc,
}


def get_sort_order_strategy(order: SortOrder | str) -> OrderStrategy:
    """Return the function that orders a node's child names for ``order``."""
    return _STRATEGIES[SortOrder.parse(order)]


def child_path(parent_path: str, name: str) -> str:
    if parent_path == ROOT_PATH:
        return ROOT_PATH + name
    return f"{parent_path}/{name}"


def visit_depth_child_first(
    root: FileNode,
    visitor: Visitor,
    evaluator: VisitEvaluator | None = None,
    sort_order: SortOrder | str = SortOrder.BY_NAME,
) -> None:
    """Walk ``root`` post-order, calling ``visitor(node, path, child_names)``.

    Children are walked in the order given by ``sort_order``, and the visitor
    receives the child names in that same order. When an evaluator is given,
    only nodes it accepts are passed to the visitor; their descendants are
    still walked.
    """
    order = get_sort_order_strategy(sort_order)
    # (node, path, ordered child names once the children are queued)
    stack: list[tuple[FileNode, str, tuple[str, ...] | None]] = [(root, ROOT_PATH, None)]
    while stack:
        node, path, child_names = stack.pop()
        if child_names is not None:
            if evaluator is None or evaluator(node, path):
                visitor(node, path, child_names)
            continue
        child_names = tuple(order(node.children))
        stack.append((node, path, child_names))
        for name in reversed(child_names):
            stack.append((node.children[name], child_path(path, name), None))


@dataclass(frozen=True)
class FlatNodeView:
    """One file tree node with its children reduced to names.

    A child's view is found under ``child_path(view.path, child_name)``.
    """

    size: int
    name: str
    path: str
    children: tuple[str, ...]
    file_info: FileInfo
    diff_type: DiffType


def flatten(
    root: FileNode,
    sort_order: SortOrder | str = SortOrder.BY_NAME,
) -> dict[str, FlatNodeView]:
    """Return every node reachable from ``root`` keyed by its path.

    Raises IndexBuildError if two nodes resolve to the same path, which
    happens when a child name is empty or contains a slash.
    """
    nodes: dict[str, FlatNodeView] = {}

    def visit(node: FileNode, path: str, child_names: tuple[str, ...]) -> None:
        if path in nodes:
            raise IndexBuildError(f"two nodes share the path {path!r}")
        nodes[path] = FlatNodeView(
            size=node.size,
            name=node.name,
            path=path,
            children=child_names,
            file_info=node.data.file_info,
            diff_type=node.data.diff_type,
        )

    visit_depth_child_first(root, visit, sort_order=sort_order)
    return nodes
