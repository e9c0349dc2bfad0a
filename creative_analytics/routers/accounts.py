"""
Ad account routes: Meta account discovery, registry and manual sync.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from creative_analytics.config import get_settings
from creative_analytics.database import get_db
from creative_analytics.deps import get_meta_service, get_runtime_config
from creative_analytics.schemas import (
    AccountAddRequest,
    AccountAddResponse,
    AccountRemoveResponse,
    AdAccountResponse,
    SyncResponse,
)
from creative_analytics.services import account_registry
from creative_analytics.services.ad_sync import sync_account_ads
from creative_analytics.services.meta_ads_service import MetaAdsService
from creative_analytics.services.settings_store import RuntimeConfig

router = APIRouter()


@router.get("/api/meta/accounts")
async def list_meta_accounts(
    config: RuntimeConfig = Depends(get_runtime_config),
    meta_service: MetaAdsService = Depends(get_meta_service),
):
    """Ad accounts visible to the configured Meta token."""
    token = config.require_meta_token()
    return await meta_service.list_ad_accounts(token)


@router.post("/api/accounts/add", response_model=AccountAddResponse)
async def add_account(
    body: AccountAddRequest,
    db: Session = Depends(get_db),
    config: RuntimeConfig = Depends(get_runtime_config),
    meta_service: MetaAdsService = Depends(get_meta_service),
):
    """Register an account and sync its ads before responding."""
    token = config.require_meta_token()
    account, synced = await account_registry.add_account(db, meta_service, body.account_id, token)
    return AccountAddResponse(account=AdAccountResponse.model_validate(account), synced=synced)


@router.get("/api/accounts", response_model=List[AdAccountResponse])
def list_accounts(db: Session = Depends(get_db)):
    return [AdAccountResponse.model_validate(a) for a in account_registry.list_accounts(db)]


@router.delete("/api/accounts/{account_id}", response_model=AccountRemoveResponse)
def remove_account(account_id: str, db: Session = Depends(get_db)):
    """Remove an account; cached ads follow ACCOUNT_REMOVAL_POLICY."""
    policy = get_settings().get_account_removal_policy()
    removed_ads = account_registry.remove_account(db, account_id, policy=policy)
    return AccountRemoveResponse(removed_ads=removed_ads)


@router.post("/api/sync/{account_id}", response_model=SyncResponse)
async def sync_account(
    account_id: str,
    db: Session = Depends(get_db),
    config: RuntimeConfig = Depends(get_runtime_config),
    meta_service: MetaAdsService = Depends(get_meta_service),
):
    token = config.require_meta_token()
    synced = await sync_account_ads(db, meta_service, account_id, token)
    return SyncResponse(synced=synced)
