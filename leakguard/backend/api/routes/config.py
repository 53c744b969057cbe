"""
api/routes/config.py

GET /api/config:  current live tunables
PUT /api/config:  update tunables (takes effect on the next upload; 409 while one runs)
GET /api/model:   current model weights, trained flag, last metrics

The tunables live on the AnalysisSession, not in a DB row; the Settings
values are only the startup defaults.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from ...errors import AnalysisInProgress
from ...session import AnalysisSession
from ..serializers import ConfigResponse, ConfigUpdateRequest, ModelMetricsResponse, ModelResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["config"])


def _get_session() -> AnalysisSession:
    """FastAPI dependency: replaced in tests via app.dependency_overrides."""
    from ..main import get_session
    return get_session()


def _current(session: AnalysisSession) -> ConfigResponse:
    return ConfigResponse(
        risk_threshold=session.aggregator.scorer.threshold,
        min_training_rows=session.aggregator.min_training_rows,
        report_list_limit=session.report_list_limit,
    )


@router.get("/config", response_model=ConfigResponse)
async def read_config(
    session: AnalysisSession = Depends(_get_session),
) -> ConfigResponse:
    return _current(session)


@router.put("/config", response_model=ConfigResponse)
async def update_config(
    update: ConfigUpdateRequest,
    session: AnalysisSession = Depends(_get_session),
) -> ConfigResponse:
    """
    Update one or more tunables.
    Only provided fields are changed; others remain unchanged.
    """
    patch = update.model_dump(exclude_none=True)
    try:
        session.apply_config(**patch)
    except AnalysisInProgress as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    logger.info("Config updated: %s", patch)
    return _current(session)


@router.get("/model", response_model=ModelResponse)
async def read_model(
    session: AnalysisSession = Depends(_get_session),
) -> ModelResponse:
    model = session.aggregator.model
    metrics = model.state.metrics
    return ModelResponse(
        trained=model.state.trained,
        weights=model.state.weights_dict(),
        threshold=model.threshold,
        metrics=ModelMetricsResponse(**metrics.to_dict()) if metrics else None,
    )
