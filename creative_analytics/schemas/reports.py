from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class ReportGenerateRequest(BaseModel):
    account_id: Optional[str] = None
    days: int = Field(default=30, ge=1, le=365)


class ReportGenerateResponse(BaseModel):
    ok: bool = True
    id: int
    data: Dict[str, Any]
    insights: str


class ReportResponse(BaseModel):
    id: int
    account_id: str
    period_start: str
    period_end: str
    data: Dict[str, Any]
    ai_insights: Optional[str] = None
    created_at: Optional[datetime] = None
