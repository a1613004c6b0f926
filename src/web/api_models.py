from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    uptime_seconds: int


class PublishStats(BaseModel):
    submitted: int = 0
    delivered: int = 0
    failed: int = 0
    dropped: int = 0
    pending: int = 0


class StatusResponse(BaseModel):
    """
    Compact status response for polling.
    """
    status: str = Field(..., description="running|stale|offline")
    warnings: List[str] = Field(default_factory=list)
    last_frame_age_s: Optional[float] = Field(None, description="Seconds since last frame")
    fps: float = 0.0
    frame_count: int = 0
    subject_count: int = 0
    publish: PublishStats = Field(default_factory=PublishStats)
    timestamp: float


class SubjectModel(BaseModel):
    identity: int
    confidence: float
    bbox: List[float] = Field(..., description="[x, y, width, height]")


class SubjectsResponse(BaseModel):
    count: int
    subjects: List[SubjectModel]
    updated_at: Optional[float] = None


class ReportResponse(BaseModel):
    report: str
    lines: List[str]
    submitted_at: Optional[float] = None
    topic: Optional[str] = None


class ConfigResponse(BaseModel):
    config: Dict[str, object]
