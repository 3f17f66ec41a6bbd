"""API router: layers, file trees and the raw analysis document."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from diveweb.analysis.models import DiffType
from diveweb.index.flatten import ROOT_PATH
from diveweb.query import IdentifierNotFound, PathNotFound, QueryFacade

logger = logging.getLogger(__name__)

router = APIRouter()


def get_facade(request: Request) -> QueryFacade:
    return request.app.state.facade


def _or_404(result):
    if isinstance(result, (IdentifierNotFound, PathNotFound)):
        logger.debug("404: %s", result.message)
        raise HTTPException(status_code=404, detail=result.message)
    return result


# ── Response models ──


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class LayerResponse(_WireModel):
    id: str
    index: int
    command: str
    size: int
    tree_id: uuid.UUID
    names: list[str]
    digest: str


class FileInfoResponse(_WireModel):
    path: str
    type_flag: int
    linkname: str
    hash: int
    size: int
    mode: int
    uid: int
    gid: int
    is_dir: bool


class FileNodeResponse(_WireModel):
    size: int
    name: str
    path: str
    children: list[str]
    file_info: FileInfoResponse
    diff_type: DiffType


class TreeSummaryResponse(_WireModel):
    id: uuid.UUID
    name: str
    size: int
    file_size: int
    sort_order: str
    root_path: str
    node_count: int


def _nodes_response(nodes) -> dict[str, FileNodeResponse]:
    """Validate views for routes that return them without a response_model."""
    return {path: FileNodeResponse.model_validate(view) for path, view in nodes.items()}


# ── Health ──


@router.get("/health")
def health():
    return {"status": "ok"}


# ── Analysis ──


@router.get("/api/analysis")
def get_analysis(request: Request):
    """The analysis document exactly as it was loaded."""
    return request.app.state.analysis_doc


# ── Layers ──


@router.get("/api/layer")
def list_layer_ids(
    id: str | None = Query(None, description="Legacy single-layer lookup"),
    facade: QueryFacade = Depends(get_facade),
):
    """Ordered layer ids, or one layer when ``?id=`` is given."""
    if id:
        return LayerResponse.model_validate(_or_404(facade.layer(id)))
    return facade.all_layer_ids()


@router.get("/api/layers", response_model=list[LayerResponse])
def list_layers(facade: QueryFacade = Depends(get_facade)):
    return facade.all_layers()


@router.get("/api/layer/{layer_id:path}", response_model=LayerResponse)
def get_layer(layer_id: str, facade: QueryFacade = Depends(get_facade)):
    return _or_404(facade.layer(layer_id))


# ── File trees ──


@router.get("/api/tree", response_model=list[uuid.UUID])
def list_tree_ids(facade: QueryFacade = Depends(get_facade)):
    return facade.all_tree_ids()


@router.get("/api/tree/{tree_id}", response_model=dict[str, FileNodeResponse])
def get_tree_nodes(tree_id: str, facade: QueryFacade = Depends(get_facade)):
    """Every node in the tree, keyed by path."""
    return dict(_or_404(facade.tree_nodes(tree_id)))


@router.get("/api/tree/{tree_id}/{node_path:path}", response_model=FileNodeResponse)
def get_tree_node(tree_id: str, node_path: str, facade: QueryFacade = Depends(get_facade)):
    """One node, addressed by its path without the leading slash."""
    path = ROOT_PATH + node_path
    return _or_404(facade.tree_node(tree_id, path))


@router.get("/api/treeinfo/{tree_id}", response_model=TreeSummaryResponse)
def get_tree_summary(tree_id: str, facade: QueryFacade = Depends(get_facade)):
    return _or_404(facade.tree_summary(tree_id))


@router.get("/api/filetree")
def list_file_trees(
    id: str | None = Query(None, description="Legacy single-tree lookup"),
    facade: QueryFacade = Depends(get_facade),
):
    """Legacy binding: one tree's nodes with ``?id=``, otherwise every tree's."""
    if id:
        return _nodes_response(_or_404(facade.tree_nodes(id)))
    return {
        str(tree_id): _nodes_response(nodes)
        for tree_id, nodes in facade.all_trees().items()
    }
