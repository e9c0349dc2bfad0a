"""
Meta/Facebook Graph API client (read-only).
Fetches ad accounts, ads with creative thumbnails, and ad-level insights.
"""
import logging
import httpx
from typing import Optional, List, Dict, Any

from creative_analytics.config import get_settings
from creative_analytics.errors import ExternalApiError
from creative_analytics.utils import normalize_account_id

logger = logging.getLogger(__name__)

SYNC_DATE_PRESET = "last_90d"
PAGE_LIMIT = 200

LEAD_ACTION_TYPES = ("lead", "onsite_conversion.lead_grouped")
VIDEO_VIEW_ACTION_TYPES = ("video_view",)

AD_FIELDS = "id,name,status,creative{thumbnail_url,video_id}"
INSIGHT_FIELDS = ",".join(
    [
        "ad_id",
        "spend",
        "impressions",
        "clicks",
        "ctr",
        "actions",
        "cost_per_action_type",
        "video_thruplay_watched_actions",
        "video_p25_watched_actions",
    ]
)


def find_action_value(items: Any, action_types) -> Optional[Any]:
    """
    Return the raw value of the first entry whose action_type is in action_types.

    Entries are scanned in upstream order; duplicates after the first match are ignored.
    """
    if not isinstance(items, list):
        return None
    for action in items:
        if not isinstance(action, dict):
            continue
        if action.get("action_type") in action_types:
            return action.get("value")
    return None


class MetaAdsService:
    """Service for reading from the Meta Marketing API."""

    def __init__(
        self,
        api_base: Optional[str] = None,
        max_pages: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.api_base = (api_base or settings.meta_graph_api_base).rstrip("/")
        self.max_pages = max(1, max_pages if max_pages is not None else settings.meta_max_pages)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=30.0, transport=self._transport)

    @staticmethod
    def _raise_for_meta_error(response: httpx.Response) -> Dict[str, Any]:
        """Decode a Graph response, turning error payloads into ExternalApiError."""
        try:
            data = response.json()
        except ValueError:
            logger.error(f"Meta API returned non-JSON response ({response.status_code}): {response.text[:200]}")
            raise ExternalApiError(f"Meta API error: unexpected response ({response.status_code})")
        if isinstance(data, dict) and data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            logger.error(f"Meta API error: {message}")
            raise ExternalApiError(message or "Meta API error")
        if not response.is_success:
            raise ExternalApiError(f"Meta API error: HTTP {response.status_code}")
        return data

    async def _get(self, path: str, access_token: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = path if path.startswith("http") else f"{self.api_base}{path}"
        try:
            async with self._client() as client:
                response = await client.get(
                    url,
                    params=params,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.HTTPError as e:
            logger.error(f"Meta API request failed for {path}: {e}")
            raise ExternalApiError(f"Meta API request failed: {e}")
        return self._raise_for_meta_error(response)

    async def _get_paged(self, path: str, access_token: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Collect `data` from up to max_pages pages, following paging.next."""
        result = await self._get(path, access_token, params)
        items = list(result.get("data") or [])
        pages = 1
        next_url = (result.get("paging") or {}).get("next")
        while next_url and pages < self.max_pages:
            result = await self._get(next_url, access_token)
            items.extend(result.get("data") or [])
            pages += 1
            next_url = (result.get("paging") or {}).get("next")
        return items

    # ==================== Ad Account Methods ====================

    async def list_ad_accounts(self, access_token: str) -> List[Dict[str, Any]]:
        """
        List all ad accounts accessible to the token.

        Returns:
            List of ad account dicts with id, name, currency, account_status
        """
        data = await self._get(
            "/me/adaccounts",
            access_token,
            {"fields": "id,name,currency,account_status"},
        )
        return data.get("data", [])

    async def get_ad_account(self, access_token: str, account_id: str) -> Dict[str, Any]:
        """Fetch canonical id, name and currency for one ad account."""
        return await self._get(
            f"/{normalize_account_id(account_id)}",
            access_token,
            {"fields": "id,name,currency"},
        )

    # ==================== Ads & Insights ====================

    async def list_ads(self, access_token: str, account_id: str) -> List[Dict[str, Any]]:
        """Ads in the account with creative thumbnail references."""
        return await self._get_paged(
            f"/{normalize_account_id(account_id)}/ads",
            access_token,
            {"fields": AD_FIELDS, "date_preset": SYNC_DATE_PRESET, "limit": PAGE_LIMIT},
        )

    async def list_ad_insights(self, access_token: str, account_id: str) -> List[Dict[str, Any]]:
        """Ad-level insights for the sync window."""
        return await self._get_paged(
            f"/{normalize_account_id(account_id)}/insights",
            access_token,
            {
                "fields": INSIGHT_FIELDS,
                "date_preset": SYNC_DATE_PRESET,
                "level": "ad",
                "limit": PAGE_LIMIT,
            },
        )

    @staticmethod
    def _safe_float(value: Any, default: float = 0.0) -> float:
        try:
            if value is None:
                return default
            return float(value)
        except (TypeError, ValueError):
            return default

    @staticmethod
    def _safe_int(value: Any, default: int = 0) -> int:
        try:
            if value is None:
                return default
            return int(float(value))
        except (TypeError, ValueError):
            return default

    @classmethod
    def parse_insight(cls, insight: Dict[str, Any]) -> Dict[str, Any]:
        """Normalize one insights row into numeric metrics; absent values become zero."""
        return {
            "spend": cls._safe_float(insight.get("spend")),
            "impressions": cls._safe_int(insight.get("impressions")),
            "clicks": cls._safe_int(insight.get("clicks")),
            "ctr": cls._safe_float(insight.get("ctr")),
            "leads": cls._safe_int(find_action_value(insight.get("actions"), LEAD_ACTION_TYPES)),
            "cpl": cls._safe_float(find_action_value(insight.get("cost_per_action_type"), LEAD_ACTION_TYPES)),
            "video_views_3s": cls._safe_int(
                find_action_value(insight.get("video_p25_watched_actions"), VIDEO_VIEW_ACTION_TYPES)
            ),
            "video_views_100pct": cls._safe_int(
                find_action_value(insight.get("video_thruplay_watched_actions"), VIDEO_VIEW_ACTION_TYPES)
            ),
        }
