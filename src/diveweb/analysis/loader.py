"""Read and write the JSON analysis document exported by the layer analyzer."""

from __future__ import annotations

import json
import logging
import time
import uuid
from pathlib import Path
from typing import Any

from diveweb.analysis.models import (
    AnalysisResult,
    DiffType,
    FileInfo,
    FileNode,
    FileTree,
    Inefficiency,
    Layer,
    NodeData,
)

logger = logging.getLogger(__name__)


class AnalysisLoadError(Exception):
    """Raised when an analysis document is missing or malformed."""


_MISSING = object()


def _expect_object(value: Any, where: str) -> dict:
    if not isinstance(value, dict):
        raise AnalysisLoadError(f"{where}: expected an object, got {type(value).__name__}")
    return value


def _require(obj: dict, key: str, where: str) -> Any:
    _expect_object(obj, where)
    if key not in obj:
        raise AnalysisLoadError(f"{where}: missing required key {key!r}")
    return obj[key]


def _typed(obj: dict, key: str, where: str, kind: type | tuple[type, ...], default: Any = _MISSING) -> Any:
    """Return ``obj[key]`` checked against ``kind``; ``default`` when absent."""
    value = obj.get(key, _MISSING)
    if value is None and kind is list:
        # empty slices are encoded as null upstream
        value = _MISSING
    if value is _MISSING:
        if default is _MISSING:
            raise AnalysisLoadError(f"{where}: missing required key {key!r}")
        return default
    # bool is an int subclass; JSON true/false is never a size or an index
    if not isinstance(value, kind) or (isinstance(value, bool) and kind is not bool):
        names = kind.__name__ if isinstance(kind, type) else " or ".join(k.__name__ for k in kind)
        raise AnalysisLoadError(f"{where}.{key}: expected {names}, got {value!r}")
    return value


def _str_list(obj: dict, key: str, where: str) -> list[str]:
    value = _typed(obj, key, where, list, [])
    if not all(isinstance(v, str) for v in value):
        raise AnalysisLoadError(f"{where}.{key}: expected a list of strings, got {value!r}")
    return list(value)


def _parse_uuid(value: Any, where: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(value))
    except ValueError as e:
        raise AnalysisLoadError(f"{where}: invalid tree id {value!r}") from e


def _parse_diff_type(value: Any, where: str) -> DiffType:
    try:
        return DiffType(str(value).lower())
    except ValueError as e:
        raise AnalysisLoadError(f"{where}: unknown diff type {value!r}") from e


def _parse_file_info(raw: Any, where: str) -> FileInfo:
    raw = _expect_object(raw, where)
    return FileInfo(
        path=_typed(raw, "path", where, str, ""),
        type_flag=_typed(raw, "typeFlag", where, int, 0),
        linkname=_typed(raw, "linkname", where, str, ""),
        hash=_typed(raw, "hash", where, int, 0),
        size=_typed(raw, "size", where, int, 0),
        mode=_typed(raw, "mode", where, int, 0),
        uid=_typed(raw, "uid", where, int, 0),
        gid=_typed(raw, "gid", where, int, 0),
        is_dir=_typed(raw, "isDir", where, bool, False),
    )


def _parse_node(raw: Any, where: str) -> FileNode:
    """Parse a node and its subtree.

    Uses an explicit stack so very deep trees don't hit the recursion limit.
    Child names must be non-empty and slash-free, so every node gets its own
    path.
    """
    root = FileNode(name="")
    stack: list[tuple[Any, FileNode, str]] = [(raw, root, where)]
    while stack:
        raw_node, node, loc = stack.pop()
        _expect_object(raw_node, loc)
        node.name = _typed(raw_node, "name", loc, str)
        node.size = _typed(raw_node, "size", loc, int, 0)
        node.data = NodeData(
            file_info=_parse_file_info(raw_node.get("fileInfo") or {}, f"{loc}.fileInfo"),
            diff_type=_parse_diff_type(raw_node.get("diffType", "unchanged"), loc),
        )
        for i, raw_child in enumerate(_typed(raw_node, "children", loc, list, [])):
            child_loc = f"{loc}.children[{i}]"
            _expect_object(raw_child, child_loc)
            name = _typed(raw_child, "name", child_loc, str)
            if not name or "/" in name:
                raise AnalysisLoadError(f"{child_loc}: invalid file name {name!r}")
            if name in node.children:
                raise AnalysisLoadError(f"{child_loc}: duplicate child name {name!r}")
            child = FileNode(name=name)
            node.children[name] = child
            stack.append((raw_child, child, child_loc))
    return root


def _parse_tree(raw: Any, where: str) -> FileTree:
    _expect_object(raw, where)
    return FileTree(
        id=_parse_uuid(_require(raw, "id", where), where),
        root=_parse_node(_require(raw, "root", where), f"{where}.root"),
        name=_typed(raw, "name", where, str, ""),
        size=_typed(raw, "size", where, int, 0),
        file_size=_typed(raw, "fileSize", where, int, 0),
        sort_order=_typed(raw, "sortOrder", where, str, "name"),
    )


def _parse_inefficiency(raw: Any, where: str) -> Inefficiency:
    _expect_object(raw, where)
    nodes = []
    for j, n in enumerate(_typed(raw, "nodes", where, list, [])):
        loc = f"{where}.nodes[{j}]"
        _expect_object(n, loc)
        nodes.append((_typed(n, "layerIndex", loc, int, 0), _typed(n, "size", loc, int, 0)))
    return Inefficiency(
        path=_typed(raw, "path", where, str),
        cumulative_size=_typed(raw, "cumulativeSize", where, int, 0),
        nodes=nodes,
    )


def parse_analysis(doc: dict) -> AnalysisResult:
    """Build an AnalysisResult from a decoded analysis document.

    Layers reference their file tree by id; every referenced id must appear
    in ``refTrees``. Values of the wrong JSON type are rejected here rather
    than surfacing later as serialization errors.
    """
    if not isinstance(doc, dict):
        raise AnalysisLoadError("analysis document must be a JSON object")

    trees = [
        _parse_tree(raw, f"refTrees[{i}]")
        for i, raw in enumerate(_typed(doc, "refTrees", "analysis", list, []))
    ]
    trees_by_id = {t.id: t for t in trees}

    layers: list[Layer] = []
    for i, raw in enumerate(_typed(doc, "layers", "analysis", list, [])):
        where = f"layers[{i}]"
        tree_id = _parse_uuid(_require(raw, "treeId", where), where)
        tree = trees_by_id.get(tree_id)
        if tree is None:
            raise AnalysisLoadError(f"{where}: tree {tree_id} not found in refTrees")
        layers.append(Layer(
            id=_typed(raw, "id", where, str),
            index=_typed(raw, "index", where, int, i),
            command=_typed(raw, "command", where, str, ""),
            size=_typed(raw, "size", where, int, 0),
            tree=tree,
            names=_str_list(raw, "names", where),
            digest=_typed(raw, "digest", where, str, ""),
        ))

    inefficiencies = [
        _parse_inefficiency(raw, f"inefficiencies[{i}]")
        for i, raw in enumerate(_typed(doc, "inefficiencies", "analysis", list, []))
    ]

    number = (int, float)
    return AnalysisResult(
        image=_typed(doc, "image", "analysis", str, ""),
        layers=layers,
        ref_trees=trees,
        efficiency=_typed(doc, "efficiency", "analysis", number, 0.0),
        size_bytes=_typed(doc, "sizeBytes", "analysis", int, 0),
        user_size_bytes=_typed(doc, "userSizeBytes", "analysis", int, 0),
        wasted_bytes=_typed(doc, "wastedBytes", "analysis", int, 0),
        wasted_user_percent=_typed(doc, "wastedUserPercent", "analysis", number, 0.0),
        inefficiencies=inefficiencies,
    )


def read_document(path: Path) -> dict:
    """Read and decode an analysis document without interpreting it."""
    try:
        return json.loads(path.read_text())
    except FileNotFoundError as e:
        raise AnalysisLoadError(f"analysis file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise AnalysisLoadError(f"analysis file is not valid JSON: {path}: {e}") from e


def load_analysis(path: Path) -> tuple[AnalysisResult, dict]:
    """Load an analysis document from disk.

    Returns the parsed result together with the decoded document, which is
    what ``/api/analysis`` serves back.
    """
    t0 = time.perf_counter()
    doc = read_document(path)
    result = parse_analysis(doc)
    logger.info(
        "Loaded analysis of %r from %s: %d layers, %d trees (%.2fs)",
        result.image, path, len(result.layers), len(result.ref_trees),
        time.perf_counter() - t0,
    )
    return result, doc


# ── Serialization ──


def _dump_node(root: FileNode) -> dict:
    out: dict = {}
    stack: list[tuple[FileNode, dict]] = [(root, out)]
    while stack:
        node, target = stack.pop()
        target["name"] = node.name
        target["size"] = node.size
        target["diffType"] = node.data.diff_type.label
        target["fileInfo"] = node.data.file_info.to_dict()
        target["children"] = []
        for child in node.children.values():
            child_out: dict = {}
            target["children"].append(child_out)
            stack.append((child, child_out))
    return out


def dump_analysis(result: AnalysisResult) -> dict:
    """Render an AnalysisResult as the JSON document ``parse_analysis`` reads."""
    return {
        "image": result.image,
        "efficiency": result.efficiency,
        "sizeBytes": result.size_bytes,
        "userSizeBytes": result.user_size_bytes,
        "wastedBytes": result.wasted_bytes,
        "wastedUserPercent": result.wasted_user_percent,
        "inefficiencies": [
            {
                "path": inef.path,
                "cumulativeSize": inef.cumulative_size,
                "nodes": [{"layerIndex": idx, "size": size} for idx, size in inef.nodes],
            }
            for inef in result.inefficiencies
        ],
        "layers": [
            {
                "id": layer.id,
                "index": layer.index,
                "command": layer.command,
                "size": layer.size,
                "treeId": str(layer.tree_id),
                "names": list(layer.names),
                "digest": layer.digest,
            }
            for layer in result.layers
        ],
        "refTrees": [
            {
                "id": str(tree.id),
                "name": tree.name,
                "size": tree.size,
                "fileSize": tree.file_size,
                "sortOrder": tree.sort_order,
                "root": _dump_node(tree.root),
            }
            for tree in result.ref_trees
        ],
    }
