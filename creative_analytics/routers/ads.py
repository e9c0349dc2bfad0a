"""
Ad routes: cached ads listing and per-ad language-model analysis.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from creative_analytics.database import get_db
from creative_analytics.deps import get_llm_service, get_runtime_config
from creative_analytics.models import Ad, AdAnalysis
from creative_analytics.schemas import AdResponse, AnalyzeAllRequest, AnalyzeAllResponse, AnalyzeResponse
from creative_analytics.services.ad_analysis import analyze_ad, list_pending_ad_ids
from creative_analytics.services.llm_service import LLMService
from creative_analytics.services.settings_store import RuntimeConfig
from creative_analytics.utils import resolve_account_filter, serialize_ad

router = APIRouter()


@router.get("/api/ads", response_model=List[AdResponse])
def list_ads(account_id: Optional[str] = None, db: Session = Depends(get_db)):
    """Cached ads with their analysis joined, highest spend first."""
    query = db.query(Ad, AdAnalysis).outerjoin(AdAnalysis, AdAnalysis.ad_id == Ad.id)
    account_filter = resolve_account_filter(account_id)
    if account_filter:
        query = query.filter(Ad.account_id == account_filter)
    rows = query.order_by(Ad.spend.desc(), Ad.id.asc()).all()
    return [serialize_ad(ad, analysis) for ad, analysis in rows]


@router.post("/api/analyze/{ad_id}", response_model=AnalyzeResponse)
def analyze_single_ad(
    ad_id: str,
    db: Session = Depends(get_db),
    config: RuntimeConfig = Depends(get_runtime_config),
    llm_service: LLMService = Depends(get_llm_service),
):
    llm_service.ensure_configured()
    analysis = analyze_ad(db, llm_service, ad_id, config.cpl_target)
    return AnalyzeResponse(analysis=analysis)


@router.post("/api/analyze-all", response_model=AnalyzeAllResponse)
def analyze_all(body: Optional[AnalyzeAllRequest] = None, db: Session = Depends(get_db)):
    """
    List ads still waiting for analysis.
    The client issues one /api/analyze/{ad_id} call per returned id.
    """
    ids = list_pending_ad_ids(db, body.account_id if body else None)
    return AnalyzeAllResponse(queued=len(ids), ids=ids)
