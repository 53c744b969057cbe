"""
api/routes/datasets.py

POST /api/datasets:  upload a CSV, analyse it, return the new metrics
GET  /api/metrics:   metrics of the last successful analysis
GET  /api/report:    plain-text report as a download
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import PlainTextResponse

from ...errors import (
    AnalysisFailed,
    AnalysisInProgress,
    DatasetReadError,
    NoDataAvailable,
    UnsupportedFileType,
)
from ...session import AnalysisSession
from ..serializers import MetricsResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["datasets"])


def _get_session() -> AnalysisSession:
    """FastAPI dependency: replaced in tests via app.dependency_overrides."""
    from ..main import get_session
    return get_session()


@router.post("/datasets", response_model=MetricsResponse)
async def upload_dataset(
    file: UploadFile = File(...),
    session: AnalysisSession = Depends(_get_session),
) -> MetricsResponse:
    """Analyse an uploaded CSV and make it the current dataset."""
    filename = file.filename or ""
    try:
        metrics = await session.analyze_upload(filename, file.read)
    except UnsupportedFileType as exc:
        raise HTTPException(status_code=415, detail=str(exc))
    except DatasetReadError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except AnalysisInProgress as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except AnalysisFailed as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return MetricsResponse.from_metrics(metrics)


@router.get("/metrics", response_model=MetricsResponse)
async def read_metrics(
    session: AnalysisSession = Depends(_get_session),
) -> MetricsResponse:
    try:
        metrics = session.require_metrics()
    except NoDataAvailable as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return MetricsResponse.from_metrics(metrics)


@router.get("/report", response_class=PlainTextResponse)
async def download_report(
    session: AnalysisSession = Depends(_get_session),
) -> PlainTextResponse:
    """Return the text report of the current metrics as an attachment."""
    try:
        report = session.generate_report()
        filename = session.report_filename()
    except NoDataAvailable as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return PlainTextResponse(
        report,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
