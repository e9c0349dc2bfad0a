from pydantic import BaseModel, Field
from typing import List, Dict, Any


class AnalyticsSummary(BaseModel):
    total: int
    winners: int
    win_rate: int
    avg_cpl: float
    total_spend: float
    total_leads: int
    cpl_target: float


class GroupBreakdown(BaseModel):
    name: str
    count: int
    winners: int
    win_rate: int
    spend: float
    leads: int
    avg_cpl: float


class AnalyticsResponse(BaseModel):
    summary: AnalyticsSummary
    by_asset_type: List[GroupBreakdown]
    by_messaging_angle: List[GroupBreakdown]
    by_hook_tactic: List[GroupBreakdown]
    by_funnel_stage: List[GroupBreakdown]
    kill_scale_watch: Dict[str, List[Dict[str, Any]]]
    iteration_priority: List[Dict[str, Any]]
    policy_version: str = Field(..., description="Version of the recommendation thresholds applied")
