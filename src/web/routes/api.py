from __future__ import annotations

import time
from typing import List, Optional, Tuple

from fastapi import APIRouter, HTTPException

from ..api_models import (
    ConfigResponse,
    HealthResponse,
    ReportResponse,
    StatusResponse,
    SubjectsResponse,
)
from ..state import state

router = APIRouter()

# Seconds without a frame before the camera is reported stale / offline
STALE_AFTER_S = 2.0
OFFLINE_AFTER_S = 10.0


def _derive_status(last_frame_age: Optional[float], publish_failed: int, publish_dropped: int) -> Tuple[str, List[str]]:
    """
    Lightweight status classifier used by /api/status.
    Thresholds: >10s since last frame => offline; >2s => stale.
    """
    level = "running"
    warnings: List[str] = []
    if last_frame_age is None or last_frame_age > OFFLINE_AFTER_S:
        level = "offline"
        warnings.append("camera_offline")
    elif last_frame_age > STALE_AFTER_S:
        level = "stale"
        warnings.append("camera_stale")

    if publish_failed > 0:
        warnings.append("publish_failures")
    if publish_dropped > 0:
        warnings.append("publish_backlog")

    return level, warnings


@router.get("/health", response_model=HealthResponse)
def health():
    sys_stats = state.get_system_stats_copy()
    uptime = time.time() - sys_stats.get("start_time", time.time())
    return {"status": "ok", "uptime_seconds": int(uptime)}


@router.get("/status", response_model=StatusResponse)
def status():
    now = time.time()
    sys_stats = state.get_system_stats_copy()
    last_frame_ts = sys_stats.get("last_frame_ts")
    last_frame_age = now - last_frame_ts if last_frame_ts else None

    publish = state.dispatcher.stats() if state.dispatcher is not None else {}
    level, warnings = _derive_status(
        last_frame_age,
        publish.get("failed", 0),
        publish.get("dropped", 0),
    )

    return {
        "status": level,
        "warnings": warnings,
        "last_frame_age_s": last_frame_age,
        "fps": sys_stats.get("fps", 0.0),
        "frame_count": sys_stats.get("frame_count", 0),
        "subject_count": len(state.get_subjects()),
        "publish": publish,
        "timestamp": now,
    }


@router.get("/subjects", response_model=SubjectsResponse)
def subjects():
    current = state.get_subjects()
    return {
        "count": len(current),
        "subjects": [s.to_dict() for s in current],
        "updated_at": state.subjects_ts,
    }


@router.get("/reports/latest", response_model=ReportResponse)
def latest_report():
    dispatcher = state.dispatcher
    report = dispatcher.last_report if dispatcher is not None else None
    if report is None:
        raise HTTPException(status_code=404, detail="No report published yet")
    return {
        "report": report,
        "lines": report.splitlines(),
        "submitted_at": dispatcher.last_report_time,
        "topic": dispatcher.topic,
    }


@router.get("/config", response_model=ConfigResponse)
def get_config():
    cfg = state.get_config()
    if cfg is None:
        raise HTTPException(status_code=503, detail="Configuration not loaded")
    return {"config": cfg.to_dict()}
