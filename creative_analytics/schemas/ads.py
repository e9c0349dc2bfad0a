"""
Ad and analysis schemas.
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Any
from datetime import datetime


class IterationSuggestion(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    expected_impact: Optional[str] = None


class AdAnalysisResult(BaseModel):
    """Structured creative classification returned by the language model."""
    asset_type: Optional[str] = None
    visual_format: Optional[str] = None
    messaging_angle: Optional[str] = None
    hook_tactic: Optional[str] = None
    offer_type: Optional[str] = None
    funnel_stage: Optional[str] = None
    ai_summary: Optional[str] = None
    strengths: List[Any] = Field(default_factory=list)
    improvements: List[Any] = Field(default_factory=list)
    iterations: List[Any] = Field(default_factory=list)


class AdResponse(BaseModel):
    """Cached ad joined with its analysis (analysis fields are null when not analyzed)."""
    id: str
    account_id: str
    name: Optional[str] = None
    status: Optional[str] = None
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    spend: float = 0.0
    impressions: int = 0
    clicks: int = 0
    ctr: float = 0.0
    leads: int = 0
    cpl: float = 0.0
    hook_rate: float = 0.0
    hold_rate: float = 0.0
    video_views_3s: int = 0
    video_views_100pct: int = 0
    synced_at: Optional[datetime] = None
    asset_type: Optional[str] = None
    visual_format: Optional[str] = None
    messaging_angle: Optional[str] = None
    hook_tactic: Optional[str] = None
    offer_type: Optional[str] = None
    funnel_stage: Optional[str] = None
    ai_summary: Optional[str] = None
    strengths: Optional[List[Any]] = None
    improvements: Optional[List[Any]] = None
    iterations: Optional[List[Any]] = None


class AnalyzeResponse(BaseModel):
    ok: bool = True
    analysis: AdAnalysisResult


class AnalyzeAllRequest(BaseModel):
    account_id: Optional[str] = None


class AnalyzeAllResponse(BaseModel):
    queued: int
    ids: List[str]
