from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from creative_analytics.database import get_db
from creative_analytics.deps import get_runtime_config
from creative_analytics.schemas import AnalyticsResponse
from creative_analytics.services.analytics import compute_analytics, load_analytics_rows
from creative_analytics.services.settings_store import RuntimeConfig

router = APIRouter()


@router.get("/api/analytics", response_model=AnalyticsResponse)
def get_analytics(
    account_id: Optional[str] = None,
    db: Session = Depends(get_db),
    config: RuntimeConfig = Depends(get_runtime_config),
):
    rows = load_analytics_rows(db, account_id)
    return compute_analytics(rows, config.cpl_target)
