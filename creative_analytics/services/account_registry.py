"""
Registry of Meta ad accounts selected for analysis.
"""
import asyncio
import logging
from typing import Any, Dict, List, Tuple

from sqlalchemy.orm import Session

from creative_analytics.models import Ad, AdAccount, AdAnalysis
from creative_analytics.services.ad_sync import sync_account_ads
from creative_analytics.services.meta_ads_service import MetaAdsService
from creative_analytics.utils import normalize_account_id

logger = logging.getLogger(__name__)


def list_accounts(db: Session) -> List[AdAccount]:
    return db.query(AdAccount).order_by(AdAccount.added_at.asc(), AdAccount.id.asc()).all()


def upsert_account(db: Session, account_id: str, info: Dict[str, Any]) -> AdAccount:
    account = db.query(AdAccount).filter(AdAccount.id == account_id).first()
    if account:
        account.name = info.get("name")
        account.currency = info.get("currency")
    else:
        account = AdAccount(id=account_id, name=info.get("name"), currency=info.get("currency"))
        db.add(account)
    db.commit()
    db.refresh(account)
    logger.info(f"Registered ad account {account_id} ({account.name})")
    return account


async def add_account(
    db: Session,
    meta_service: MetaAdsService,
    account_id: str,
    access_token: str,
) -> Tuple[AdAccount, int]:
    """
    Register an ad account and run its first sync before returning.

    Name and currency come from Meta, so an invalid id or a token without
    access fails here with ExternalApiError and nothing is stored.

    Returns:
        (account, number of ads synced)
    """
    info = await meta_service.get_ad_account(access_token, account_id)
    canonical_id = normalize_account_id(str(info.get("id") or account_id))
    account = await asyncio.to_thread(upsert_account, db, canonical_id, info)

    synced = await sync_account_ads(db, meta_service, canonical_id, access_token)
    await asyncio.to_thread(db.refresh, account)
    return account, synced


def remove_account(db: Session, account_id: str, policy: str = "retain") -> int:
    """
    Delete an account row.

    With policy "retain" its ads and analyses stay cached; with "cascade" they
    are deleted in the same transaction. Unknown ids are a no-op under
    either policy.

    Returns:
        Number of ads deleted
    """
    account_id = normalize_account_id(account_id)
    account = db.query(AdAccount).filter(AdAccount.id == account_id).first()
    if not account:
        logger.info(f"Ad account {account_id} is not registered, nothing removed")
        return 0
    db.delete(account)
    removed_ads = 0
    if policy == "cascade":
        ad_ids = [row.id for row in db.query(Ad.id).filter(Ad.account_id == account_id).all()]
        if ad_ids:
            db.query(AdAnalysis).filter(AdAnalysis.ad_id.in_(ad_ids)).delete(synchronize_session=False)
            removed_ads = db.query(Ad).filter(Ad.id.in_(ad_ids)).delete(synchronize_session=False)
    db.commit()
    logger.info(f"Removed ad account {account_id} (policy={policy}, ads deleted={removed_ads})")
    return removed_ads
