import json
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings


PROJECT_ROOT = Path(__file__).resolve().parent.parent
LOCAL_ENV_FILE = PROJECT_ROOT / ".env.local"

if LOCAL_ENV_FILE.exists():
    load_dotenv(LOCAL_ENV_FILE, override=True)

ACCOUNT_REMOVAL_POLICIES = ("retain", "cascade")


class Settings(BaseSettings):
    class Config:
        env_file = ".env"
        extra = "ignore"
    database_url: str = "sqlite:///./creative_analytics.db"
    database_public_url: str = ""
    environment: str = "development"
    log_level: str = Field(default="INFO")
    frontend_base_url: str = Field(default="http://localhost:3000")
    additional_cors_origins: str | None = Field(default=None)

    # Meta Graph API
    meta_graph_api_base: str = Field(default="https://graph.facebook.com/v19.0")
    meta_access_token: str | None = Field(default=None)
    meta_max_pages: int = Field(default=1)  # 1 keeps the 200-ad cap per sync

    # Language model providers
    anthropic_api_key: str | None = Field(default=None)
    openai_api_key: str | None = Field(default=None)
    llm_model: str = Field(default="claude-sonnet-4-5-20250929")

    default_cpl_target: float = Field(default=50.0)
    account_removal_policy: str = Field(default="retain")  # retain | cascade

    def get_database_url(self) -> str:
        """
        Get the appropriate database URL.
        Prefers DATABASE_PUBLIC_URL when set (external access during local development),
        otherwise DATABASE_URL.
        """
        public_url = os.getenv('DATABASE_PUBLIC_URL') or self.database_public_url
        internal_url = os.getenv('DATABASE_URL') or self.database_url

        if public_url:
            return public_url
        return internal_url

    def get_account_removal_policy(self) -> str:
        policy = (self.account_removal_policy or "").strip().lower()
        if policy not in ACCOUNT_REMOVAL_POLICIES:
            return "retain"
        return policy

    def get_additional_cors_origins(self) -> list[str]:
        value = self.additional_cors_origins
        if not value:
            return []

        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                return []
            if stripped.startswith("[") and stripped.endswith("]"):
                try:
                    parsed = json.loads(stripped)
                    if isinstance(parsed, list):
                        return [
                            str(origin).strip()
                            for origin in parsed
                            if str(origin).strip()
                        ]
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in stripped.split(",") if item.strip()]

        if isinstance(value, (list, tuple, set)):
            return [str(origin).strip() for origin in value if str(origin).strip()]

        return []


def get_cors_origins(settings: Settings) -> list[str]:
    """Frontend origin plus any additional origins, deduplicated, invalid entries dropped."""
    from creative_analytics.utils import extract_origin

    origins: list[str] = []
    candidates = [settings.frontend_base_url, *settings.get_additional_cors_origins()]
    for candidate in candidates:
        origin = extract_origin(candidate)
        if origin and origin not in origins:
            origins.append(origin)
    return origins


@lru_cache()
def get_settings():
    return Settings()
