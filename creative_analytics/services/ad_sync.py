"""
Ad sync: pull ads + insights for one account from Meta and upsert the local snapshot.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from creative_analytics.errors import NotFoundError
from creative_analytics.models import Ad, AdAccount
from creative_analytics.services.meta_ads_service import MetaAdsService
from creative_analytics.utils import normalize_account_id

logger = logging.getLogger(__name__)


def compute_hook_rate(video_views_3s: int, impressions: int) -> float:
    """Percent of impressions that reached a 3-second view."""
    if not impressions:
        return 0.0
    return video_views_3s / impressions * 100


def compute_hold_rate(video_views_100pct: int, video_views_3s: int) -> float:
    """Percent of 3-second viewers who watched to the end."""
    if not video_views_3s:
        return 0.0
    return video_views_100pct / video_views_3s * 100


def build_insights_lookup(insights: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    lookup: Dict[str, Dict[str, Any]] = {}
    for insight in insights:
        ad_id = insight.get("ad_id")
        if not ad_id:
            continue
        lookup[str(ad_id)] = MetaAdsService.parse_insight(insight)
    return lookup


def build_ad_row(ad: Dict[str, Any], account_id: str, metrics: Dict[str, Any]) -> Dict[str, Any]:
    """Full column set for one ad; missing metrics default to zero."""
    impressions = metrics.get("impressions", 0)
    views_3s = metrics.get("video_views_3s", 0)
    views_100 = metrics.get("video_views_100pct", 0)
    creative = ad.get("creative") or {}
    return {
        "id": str(ad["id"]),
        "account_id": account_id,
        "name": ad.get("name"),
        "status": ad.get("status"),
        "thumbnail_url": creative.get("thumbnail_url") or "",
        "spend": metrics.get("spend", 0.0),
        "impressions": impressions,
        "clicks": metrics.get("clicks", 0),
        "ctr": metrics.get("ctr", 0.0),
        "leads": metrics.get("leads", 0),
        "cpl": metrics.get("cpl", 0.0),
        "hook_rate": compute_hook_rate(views_3s, impressions),
        "hold_rate": compute_hold_rate(views_100, views_3s),
        "video_views_3s": views_3s,
        "video_views_100pct": views_100,
    }


def require_registered_account(db: Session, account_id: str) -> None:
    if not db.query(AdAccount).filter(AdAccount.id == account_id).first():
        raise NotFoundError(f"Ad account {account_id} is not registered")


def write_ads(db: Session, account_id: str, ads: List[Dict[str, Any]], insights: List[Dict[str, Any]]) -> int:
    """Upsert every listed ad in one transaction; rolled back together on failure."""
    lookup = build_insights_lookup(insights)
    synced_at = datetime.now(timezone.utc)
    written = 0
    try:
        for ad in ads:
            if not ad.get("id"):
                continue
            row = build_ad_row(ad, account_id, lookup.get(str(ad["id"]), {}))
            db.merge(Ad(**row, synced_at=synced_at))
            written += 1
        db.commit()
    except Exception:
        db.rollback()
        logger.error(f"Sync for {account_id} failed, rolled back")
        raise

    logger.info(f"Synced {written} ads for {account_id} ({len(lookup)} with insights)")
    return written


async def sync_account_ads(
    db: Session,
    meta_service: MetaAdsService,
    account_id: str,
    access_token: str,
) -> int:
    """
    Fetch ads and insights for an account and replace the cached rows.

    Both upstream calls complete before anything is written. Database work
    runs in a worker thread so the event loop is not blocked.

    Returns:
        Number of ads written
    """
    account_id = normalize_account_id(account_id)
    await asyncio.to_thread(require_registered_account, db, account_id)

    ads = await meta_service.list_ads(access_token, account_id)
    insights = await meta_service.list_ad_insights(access_token, account_id)
    return await asyncio.to_thread(write_ads, db, account_id, ads, insights)
