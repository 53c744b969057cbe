"""
api/main.py

FastAPI application factory. The AnalysisSession is wired in by the
entry point via set_session(); routes reach it through a dependency so
tests can swap it out.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import settings
from ..metrics import METRICS
from ..session import AnalysisSession
from .routes import config as config_router
from .routes import datasets as datasets_router

logger = logging.getLogger(__name__)

_session: AnalysisSession | None = None


def set_session(session: AnalysisSession) -> None:
    global _session
    _session = session


def get_session() -> AnalysisSession:
    if _session is None:
        raise RuntimeError("Session not initialised: call set_session() first")
    return _session


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("FastAPI startup")
        yield
        logger.info("FastAPI shutdown")

    app = FastAPI(
        title="LeakGuard: Data Leakage Detector",
        version="1.0.0",
        description="Heuristic threat scoring for uploaded CSV datasets",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    app.include_router(datasets_router.router, prefix="/api")
    app.include_router(config_router.router,   prefix="/api")

    @app.get("/health")
    async def health() -> dict:
        aggregator_stats: dict = {}
        busy = False
        if _session is not None:
            aggregator_stats = dict(_session.aggregator.stats)
            busy = _session.busy
        return {
            "status": "ok",
            "analysis_running": busy,
            "counters": METRICS.as_dict(),
            "aggregator": aggregator_stats,
        }

    return app
