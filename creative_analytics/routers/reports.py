"""
Report routes: generate a narrative report and list recent ones.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
import json

from creative_analytics.database import get_db
from creative_analytics.deps import get_llm_service, get_runtime_config
from creative_analytics.schemas import ReportGenerateRequest, ReportGenerateResponse, ReportResponse
from creative_analytics.services.llm_service import LLMService
from creative_analytics.services.reports import generate_report, list_reports
from creative_analytics.services.settings_store import RuntimeConfig
from creative_analytics.utils import serialize_report

router = APIRouter()


@router.post("/api/reports/generate", response_model=ReportGenerateResponse)
def generate(
    body: Optional[ReportGenerateRequest] = None,
    db: Session = Depends(get_db),
    config: RuntimeConfig = Depends(get_runtime_config),
    llm_service: LLMService = Depends(get_llm_service),
):
    body = body or ReportGenerateRequest()
    llm_service.ensure_configured()
    report = generate_report(db, llm_service, config.cpl_target, account_id=body.account_id, days=body.days)
    return ReportGenerateResponse(id=report.id, data=json.loads(report.data), insights=report.ai_insights or "")


@router.get("/api/reports", response_model=List[ReportResponse])
def recent_reports(db: Session = Depends(get_db)):
    """Last 10 reports, newest first."""
    return [serialize_report(r) for r in list_reports(db, limit=10)]
