"""Layer index: layer id -> flattened layer view."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from diveweb.analysis.models import Layer
from diveweb.index.errors import DuplicateIdentifierError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayerView:
    """Wire projection of a Layer, decoupled from the analysis model."""

    id: str
    index: int
    command: str
    size: int
    tree_id: uuid.UUID
    names: tuple[str, ...]
    digest: str

    @classmethod
    def from_layer(cls, layer: Layer) -> LayerView:
        return cls(
            id=layer.id,
            index=layer.index,
            command=layer.command,
            size=layer.size,
            tree_id=layer.tree_id,
            names=tuple(layer.names),
            digest=layer.digest,
        )


class LayerIndex:
    """Read-only lookup of layer views by id, preserving input order."""

    def __init__(self, views: Mapping[str, LayerView], ids: tuple[str, ...]) -> None:
        self._views = MappingProxyType(dict(views))
        self._ids = ids

    @classmethod
    def build(cls, layers: Iterable[Layer]) -> LayerIndex:
        views: dict[str, LayerView] = {}
        ids: list[str] = []
        for layer in layers:
            if layer.id in views:
                raise DuplicateIdentifierError("layer", layer.id)
            views[layer.id] = LayerView.from_layer(layer)
            ids.append(layer.id)
        logger.debug("Indexed %d layers", len(ids))
        return cls(views, tuple(ids))

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, layer_id: object) -> bool:
        return layer_id in self._views

    def list_ids(self) -> list[str]:
        return list(self._ids)

    def list_views(self) -> list[LayerView]:
        return [self._views[i] for i in self._ids]

    def get(self, layer_id: str) -> LayerView | None:
        return self._views.get(layer_id)
