"""
FastAPI dependencies: per-request runtime config and external service clients.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from creative_analytics.database import get_db
from creative_analytics.services.llm_service import LLMService
from creative_analytics.services.meta_ads_service import MetaAdsService
from creative_analytics.services.settings_store import RuntimeConfig, load_runtime_config


def get_runtime_config(db: Session = Depends(get_db)) -> RuntimeConfig:
    """Settings snapshot loaded once per request."""
    return load_runtime_config(db)


def get_meta_service() -> MetaAdsService:
    return MetaAdsService()


def get_llm_service(config: RuntimeConfig = Depends(get_runtime_config)) -> LLMService:
    return LLMService(
        anthropic_api_key=config.anthropic_key,
        openai_api_key=config.openai_api_key,
        default_model=config.llm_model,
    )
