"""FastAPI app serving the analysis query API and the bundled viewer."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from diveweb import config
from diveweb.analysis.loader import dump_analysis
from diveweb.analysis.models import AnalysisResult
from diveweb.api.routes import router
from diveweb.index.flatten import SortOrder
from diveweb.query import QueryFacade

# Configure logging on import, before anything else logs
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)


def create_app(
    analysis: AnalysisResult,
    raw_doc: dict | None = None,
    facade: QueryFacade | None = None,
    dist_dir: Path | None = None,
    sort_order: SortOrder | str = SortOrder.BY_NAME,
) -> FastAPI:
    """Build the app around an already computed analysis.

    The indices are built here, once, before the app serves anything.
    ``raw_doc`` is the decoded document the analysis was parsed from and is
    served as-is by ``/api/analysis``; without it the document is rendered
    from the model.
    """
    t0 = time.perf_counter()
    app = FastAPI(title="diveweb", description="Container image layer analysis viewer")
    app.state.analysis_doc = raw_doc if raw_doc is not None else dump_analysis(analysis)
    app.state.facade = facade or QueryFacade.from_analysis(analysis, sort_order=sort_order)
    logger.info("App for %r ready (%.2fs)", analysis.image, time.perf_counter() - t0)

    # CORS for the viewer's dev server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:5174"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(router)

    # ── Viewer static files ──
    # Must be mounted after all API routes.
    dist_dir = dist_dir if dist_dir is not None else config.DIST_DIR
    if dist_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(dist_dir), html=True), name="viewer")
    else:
        logger.warning("Viewer dist directory %s not found; serving API only", dist_dir)
    return app
