"""Image analysis result types, as produced by the upstream layer analyzer.

Everything here is read-only input: the analyzer builds these objects once
and the indices in ``diveweb.index`` only ever read them.
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field


class DiffType(str, enum.Enum):
    """How a file differs from the comparison baseline."""

    UNCHANGED = "unchanged"
    MODIFIED = "modified"
    ADDED = "added"
    REMOVED = "removed"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class FileInfo:
    path: str = ""
    type_flag: int = 0
    linkname: str = ""
    hash: int = 0
    size: int = 0
    mode: int = 0
    uid: int = 0
    gid: int = 0
    is_dir: bool = False

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "typeFlag": self.type_flag,
            "linkname": self.linkname,
            "hash": self.hash,
            "size": self.size,
            "mode": self.mode,
            "uid": self.uid,
            "gid": self.gid,
            "isDir": self.is_dir,
        }


@dataclass(frozen=True)
class NodeData:
    """Per-node payload: file metadata plus its diff classification."""

    file_info: FileInfo = field(default_factory=FileInfo)
    diff_type: DiffType = DiffType.UNCHANGED


@dataclass
class FileNode:
    """One entry in a file tree.

    Children are owned by their parent and keyed by name. Nodes keep no
    reference to their parent; paths are derived while walking from the root.
    """

    name: str
    size: int = 0
    data: NodeData = field(default_factory=NodeData)
    children: dict[str, FileNode] = field(default_factory=dict)


@dataclass
class FileTree:
    id: uuid.UUID
    root: FileNode
    name: str = ""
    size: int = 0
    file_size: int = 0
    sort_order: str = "name"


@dataclass
class Layer:
    id: str
    index: int
    command: str
    size: int
    tree: FileTree
    names: list[str] = field(default_factory=list)
    digest: str = ""

    @property
    def tree_id(self) -> uuid.UUID:
        return self.tree.id


@dataclass
class Inefficiency:
    """A path duplicated or overwritten across layers, wasting space."""

    path: str
    cumulative_size: int
    nodes: list[tuple[int, int]] = field(default_factory=list)


@dataclass
class AnalysisResult:
    image: str
    layers: list[Layer] = field(default_factory=list)
    ref_trees: list[FileTree] = field(default_factory=list)
    efficiency: float = 0.0
    size_bytes: int = 0
    user_size_bytes: int = 0
    wasted_bytes: int = 0
    wasted_user_percent: float = 0.0
    inefficiencies: list[Inefficiency] = field(default_factory=list)
