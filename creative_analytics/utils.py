"""
Small helpers shared by routers and services.
"""
import json
from typing import Any, List, Optional
from urllib.parse import urlparse

from creative_analytics.schemas import AdResponse, ReportResponse


def extract_origin(url: str | None) -> Optional[str]:
    """Return the origin (scheme + host [+ port]) from a URL-like string."""
    if not url:
        return None
    parsed = urlparse(url.strip())
    if parsed.scheme and parsed.netloc:
        return f"{parsed.scheme}://{parsed.netloc}"
    return None


def normalize_account_id(account_id: str) -> str:
    """Return the act_-prefixed form Meta uses for ad account ids."""
    account_id = (account_id or "").strip()
    return account_id if account_id.startswith("act_") else f"act_{account_id}"


def resolve_account_filter(account_id: Optional[str]) -> Optional[str]:
    """None for "no filter" (missing, blank or "all"), else the normalized account id."""
    if account_id is None:
        return None
    account_id = account_id.strip()
    if not account_id or account_id == "all":
        return None
    return normalize_account_id(account_id)


def decode_json_list(value: Any) -> Optional[List[Any]]:
    """Decode a stored JSON array column; None stays None, bad data becomes []."""
    if value is None:
        return None
    try:
        decoded = json.loads(value)
    except (TypeError, ValueError):
        return []
    return decoded if isinstance(decoded, list) else []


def serialize_ad(ad, analysis=None) -> AdResponse:
    """Convert an Ad (and optional AdAnalysis) ORM pair into a response model."""
    payload = {column.name: getattr(ad, column.name) for column in ad.__table__.columns}
    if analysis is not None:
        for field in ("asset_type", "visual_format", "messaging_angle", "hook_tactic",
                      "offer_type", "funnel_stage", "ai_summary"):
            payload[field] = getattr(analysis, field)
        for field in ("strengths", "improvements", "iterations"):
            payload[field] = decode_json_list(getattr(analysis, field))
    return AdResponse.model_validate(payload)


def serialize_report(report) -> ReportResponse:
    """Convert a Report ORM object into a response model with decoded statistics."""
    try:
        data = json.loads(report.data) if report.data else {}
    except ValueError:
        data = {}
    return ReportResponse(
        id=report.id,
        account_id=report.account_id,
        period_start=report.period_start,
        period_end=report.period_end,
        data=data if isinstance(data, dict) else {},
        ai_insights=report.ai_insights,
        created_at=report.created_at,
    )
