"""
Key/value settings persisted in the settings table, plus the per-request
RuntimeConfig snapshot that services receive instead of reading settings ad hoc.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional

from sqlalchemy.orm import Session

from creative_analytics.config import Settings, get_settings
from creative_analytics.errors import ConfigurationMissingError
from creative_analytics.models import Setting

logger = logging.getLogger(__name__)

SETTING_KEYS = ("meta_token", "anthropic_key", "cpl_target", "winner_threshold_type")


class SettingsStore:
    """Read/write access to the settings table. Every write commits immediately."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        row = self.db.query(Setting).filter(Setting.key == key).first()
        return row.value if row else default

    def set(self, key: str, value: Optional[str]) -> None:
        row = self.db.query(Setting).filter(Setting.key == key).first()
        if row:
            row.value = value
        else:
            self.db.add(Setting(key=key, value=value))
        self.db.commit()
        logger.info(f"Setting '{key}' updated")

    def get_many(self, keys=SETTING_KEYS, default: str = "") -> Dict[str, str]:
        rows = self.db.query(Setting).filter(Setting.key.in_(list(keys))).all()
        found = {row.key: row.value for row in rows}
        return {key: found.get(key) if found.get(key) is not None else default for key in keys}


def parse_cpl_target(raw: Optional[str], fallback: float = 50.0) -> float:
    """Parse the stored CPL target; missing, unparseable or non-finite values fall back."""
    if raw is None:
        return fallback
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return fallback
    return value if math.isfinite(value) else fallback


@dataclass(frozen=True)
class RuntimeConfig:
    """Settings snapshot for one request."""
    meta_token: Optional[str]
    anthropic_key: Optional[str]
    cpl_target: float
    winner_threshold_type: str
    llm_model: str
    openai_api_key: Optional[str] = None

    def require_meta_token(self) -> str:
        if not self.meta_token:
            raise ConfigurationMissingError("Meta access token is not configured")
        return self.meta_token


def load_runtime_config(db: Session, settings: Optional[Settings] = None) -> RuntimeConfig:
    """Build a RuntimeConfig from stored settings, falling back to environment settings."""
    settings = settings or get_settings()
    stored = SettingsStore(db).get_many()
    return RuntimeConfig(
        meta_token=stored["meta_token"] or settings.meta_access_token,
        anthropic_key=stored["anthropic_key"] or settings.anthropic_api_key,
        cpl_target=parse_cpl_target(stored["cpl_target"] or None, settings.default_cpl_target),
        winner_threshold_type=stored["winner_threshold_type"] or "cpl",
        llm_model=settings.llm_model,
        openai_api_key=settings.openai_api_key,
    )
