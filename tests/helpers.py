"""Shared test helpers: analysis model factories."""

import uuid

from diveweb.analysis.models import (
    AnalysisResult,
    DiffType,
    FileInfo,
    FileNode,
    FileTree,
    Layer,
    NodeData,
)

TREE_A = uuid.UUID("11111111-1111-1111-1111-111111111111")
TREE_B = uuid.UUID("22222222-2222-2222-2222-222222222222")


def make_node(name: str, size: int = 0, diff: DiffType = DiffType.UNCHANGED, children=(), path: str = "") -> FileNode:
    """Create a FileNode owning the given children."""
    node = FileNode(
        name=name,
        size=size,
        data=NodeData(file_info=FileInfo(path=path or name, size=size, is_dir=bool(children)), diff_type=diff),
    )
    for child in children:
        node.children[child.name] = child
    return node


def make_tree(tree_id: uuid.UUID, root: FileNode, name: str = "") -> FileTree:
    return FileTree(id=tree_id, root=root, name=name)


def make_layer(layer_id: str, tree: FileTree, index: int = 0, command: str = "", size: int = 0, names=None) -> Layer:
    return Layer(
        id=layer_id,
        index=index,
        command=command,
        size=size,
        tree=tree,
        names=list(names or []),
        digest=layer_id,
    )


def base_tree() -> FileTree:
    """/ -> app (unchanged) -> main (added)."""
    root = make_node("/", children=[
        make_node("app", size=100, children=[
            make_node("main", size=100, diff=DiffType.ADDED, path="app/main"),
        ]),
    ])
    return make_tree(TREE_A, root, name="base")


def second_tree() -> FileTree:
    root = make_node("/", children=[
        make_node("app", size=350, diff=DiffType.MODIFIED, children=[
            make_node("main", size=150, diff=DiffType.MODIFIED, path="app/main"),
            make_node("config.json", size=200, diff=DiffType.ADDED, path="app/config.json"),
        ]),
        make_node("etc", size=10, diff=DiffType.MODIFIED, children=[
            make_node("passwd", size=10, diff=DiffType.REMOVED, path="etc/passwd"),
        ]),
    ])
    return make_tree(TREE_B, root, name="app")


def sample_analysis() -> AnalysisResult:
    tree_a = base_tree()
    tree_b = second_tree()
    return AnalysisResult(
        image="example/app:latest",
        layers=[
            make_layer("sha256:abc", tree_a, index=0, command="RUN x", size=1024, names=["base"]),
            make_layer("sha256:def", tree_b, index=1, command="COPY . /app", size=360, names=["app", "latest"]),
        ],
        ref_trees=[tree_a, tree_b],
        efficiency=0.97,
        size_bytes=1384,
        user_size_bytes=360,
        wasted_bytes=10,
    )
