"""
Analytics over cached ads + analyses: summary, category breakdowns,
kill/scale/watch recommendations and the iteration priority list.

Everything except load_analytics_rows is a pure function over row dicts.
"""
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from creative_analytics.models import Ad, AdAnalysis
from creative_analytics.services.ad_analysis import is_winner
from creative_analytics.utils import resolve_account_filter

UNCLASSIFIED = "unclassified"
GROUP_FIELDS = ("asset_type", "messaging_angle", "hook_tactic", "funnel_stage")
STAGE_KEYS = ("top_of_funnel", "middle_of_funnel", "bottom_of_funnel")
OTHER_STAGE_KEY = "other"

AD_COLUMNS = (
    "id", "account_id", "name", "status", "thumbnail_url", "spend", "impressions",
    "clicks", "ctr", "leads", "cpl", "hook_rate", "hold_rate", "video_views_3s",
    "video_views_100pct",
)
ANALYSIS_COLUMNS = (
    "asset_type", "visual_format", "messaging_angle", "hook_tactic", "offer_type",
    "funnel_stage",
)


@dataclass(frozen=True)
class RecommendationPolicy:
    """Thresholds for kill/scale/watch and iteration priority. Bump version when changing values."""
    version: str = "v1"
    min_spend: float = 10.0
    weak_multiplier: float = 0.7          # below cohort average
    strong_multiplier: float = 1.2        # above cohort average
    mofu_cpl_kill_multiplier: float = 1.5
    bofu_cpl_scale_multiplier: float = 0.8
    bofu_cpl_kill_multiplier: float = 1.3
    bofu_zero_lead_kill_spend: float = 50.0
    iteration_min_spend: float = 30.0
    iteration_cpl_multiplier: float = 1.2
    iteration_zero_lead_spend: float = 20.0
    iteration_limit: int = 10


DEFAULT_POLICY = RecommendationPolicy()


def percent(part: int, whole: int) -> int:
    """Integer percentage rounded half-up; 0 when whole is 0."""
    if whole <= 0:
        return 0
    return int(math.floor(part / whole * 100 + 0.5))


def positive_average(rows: List[Dict[str, Any]], field: str) -> float:
    """Average of field over rows where it is > 0; denominator floors at 1."""
    values = [row.get(field) or 0 for row in rows if (row.get(field) or 0) > 0]
    return sum(values) / (len(values) or 1)


def load_analytics_rows(db: Session, account_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Ads with spend > 0, left-joined with their analysis, as plain dicts."""
    query = (
        db.query(Ad, AdAnalysis)
        .outerjoin(AdAnalysis, AdAnalysis.ad_id == Ad.id)
        .filter(Ad.spend > 0)
    )
    account_filter = resolve_account_filter(account_id)
    if account_filter:
        query = query.filter(Ad.account_id == account_filter)

    rows = []
    for ad, analysis in query.order_by(Ad.spend.desc(), Ad.id.asc()).all():
        row = {column: getattr(ad, column) for column in AD_COLUMNS}
        for column in ANALYSIS_COLUMNS:
            row[column] = getattr(analysis, column) if analysis else None
        rows.append(row)
    return rows


def summarize(rows: List[Dict[str, Any]], cpl_target: float) -> Dict[str, Any]:
    total = len(rows)
    winners = sum(1 for row in rows if is_winner(row.get("leads"), row.get("cpl"), cpl_target))
    return {
        "total": total,
        "winners": winners,
        "win_rate": percent(winners, total),
        "avg_cpl": positive_average(rows, "cpl"),
        "total_spend": sum(row.get("spend") or 0 for row in rows),
        "total_leads": sum(row.get("leads") or 0 for row in rows),
        "cpl_target": cpl_target,
    }


def group_by(rows: List[Dict[str, Any]], field: str, cpl_target: float) -> List[Dict[str, Any]]:
    """Partition rows by field (missing -> 'unclassified'), sorted by spend descending."""
    groups: Dict[str, Dict[str, Any]] = {}
    for row in rows:
        key = row.get(field) or UNCLASSIFIED
        group = groups.setdefault(key, {"count": 0, "winners": 0, "spend": 0.0, "leads": 0, "cpls": []})
        group["count"] += 1
        group["spend"] += row.get("spend") or 0
        group["leads"] += row.get("leads") or 0
        if (row.get("cpl") or 0) > 0:
            group["cpls"].append(row["cpl"])
        if is_winner(row.get("leads"), row.get("cpl"), cpl_target):
            group["winners"] += 1

    breakdown = [
        {
            "name": name,
            "count": g["count"],
            "winners": g["winners"],
            "win_rate": percent(g["winners"], g["count"]),
            "spend": g["spend"],
            "leads": g["leads"],
            "avg_cpl": sum(g["cpls"]) / len(g["cpls"]) if g["cpls"] else 0.0,
        }
        for name, g in groups.items()
    ]
    breakdown.sort(key=lambda item: item["spend"], reverse=True)
    return breakdown


def normalize_funnel_stage(stage: Optional[str]) -> Optional[str]:
    """Map model-provided stage labels onto STAGE_KEYS; None if blank, 'other' if unrecognized."""
    if not stage or not str(stage).strip():
        return None
    value = str(stage).strip().lower().replace("-", " ").replace("_", " ")
    if value in ("tofu", "top") or value.startswith("top"):
        return "top_of_funnel"
    if value in ("mofu", "mid", "middle") or value.startswith("middle") or value.startswith("mid "):
        return "middle_of_funnel"
    if value in ("bofu", "bottom") or value.startswith("bottom"):
        return "bottom_of_funnel"
    return OTHER_STAGE_KEY


def classify_ad(
    row: Dict[str, Any],
    stage: str,
    avg_hook_rate: float,
    avg_ctr: float,
    cpl_target: float,
    policy: RecommendationPolicy = DEFAULT_POLICY,
) -> Tuple[str, str]:
    """Return (recommendation, reason) for one ad. Exactly one of kill/scale/watch."""
    hook = row.get("hook_rate") or 0
    ctr = row.get("ctr") or 0
    cpl = row.get("cpl") or 0
    leads = row.get("leads") or 0
    spend = row.get("spend") or 0
    weak = policy.weak_multiplier
    strong = policy.strong_multiplier

    if stage == "top_of_funnel":
        if hook < avg_hook_rate * weak and ctr < avg_ctr * weak:
            return "kill", f"Hook rate {hook:.1f}% and CTR {ctr:.2f}% below average"
        if hook > avg_hook_rate * strong or ctr > avg_ctr * strong:
            return "scale", f"Hook rate {hook:.1f}% or CTR above average"
        return "watch", "Metrics around average, keep monitoring"

    if stage == "middle_of_funnel":
        if ctr < avg_ctr * weak and (cpl > cpl_target * policy.mofu_cpl_kill_multiplier or leads == 0):
            return "kill", f"Low CTR and CPL {cpl:.0f} over target"
        if ctr > avg_ctr * strong and 0 < cpl <= cpl_target:
            return "scale", f"Good CTR and CPL {cpl:.0f} under target"
        return "watch", "Monitor CTR and CPL"

    if stage == "bottom_of_funnel":
        if leads == 0 and spend > policy.bofu_zero_lead_kill_spend:
            return "kill", f"{spend:.0f} spent, 0 leads generated"
        if 0 < cpl <= cpl_target * policy.bofu_cpl_scale_multiplier:
            return "scale", f"CPL {cpl:.0f} excellent (target {cpl_target:g})"
        if cpl > cpl_target * policy.bofu_cpl_kill_multiplier:
            return "kill", f"CPL {cpl:.0f} too high (target {cpl_target:g})"
        return "watch", f"CPL {cpl:.0f} close to target"

    return "watch", "Unrecognized funnel stage, no rule set applies"


def kill_scale_watch(
    rows: List[Dict[str, Any]],
    cpl_target: float,
    policy: RecommendationPolicy = DEFAULT_POLICY,
) -> Dict[str, List[Dict[str, Any]]]:
    """Recommendations for ads with a funnel stage and spend >= min_spend, bucketed by stage."""
    avg_hook_rate = positive_average(rows, "hook_rate")
    avg_ctr = positive_average(rows, "ctr")

    buckets: Dict[str, List[Dict[str, Any]]] = {key: [] for key in STAGE_KEYS + (OTHER_STAGE_KEY,)}
    for row in rows:
        stage = normalize_funnel_stage(row.get("funnel_stage"))
        if stage is None or (row.get("spend") or 0) < policy.min_spend:
            continue
        recommendation, reason = classify_ad(row, stage, avg_hook_rate, avg_ctr, cpl_target, policy)
        buckets[stage].append({**row, "recommendation": recommendation, "reason": reason})
    return buckets


def iteration_priority(
    rows: List[Dict[str, Any]],
    cpl_target: float,
    policy: RecommendationPolicy = DEFAULT_POLICY,
) -> List[Dict[str, Any]]:
    """High-spend underperformers to iterate on first."""
    candidates = [
        row for row in rows
        if (row.get("spend") or 0) > policy.iteration_min_spend
        and (
            (row.get("cpl") or 0) > cpl_target * policy.iteration_cpl_multiplier
            or ((row.get("spend") or 0) > policy.iteration_zero_lead_spend and not row.get("leads"))
        )
    ]
    candidates.sort(key=lambda row: row.get("spend") or 0, reverse=True)
    return candidates[:policy.iteration_limit]


def compute_analytics(
    rows: List[Dict[str, Any]],
    cpl_target: float,
    policy: RecommendationPolicy = DEFAULT_POLICY,
) -> Dict[str, Any]:
    result: Dict[str, Any] = {"summary": summarize(rows, cpl_target)}
    for field in GROUP_FIELDS:
        result[f"by_{field}"] = group_by(rows, field, cpl_target)
    result["kill_scale_watch"] = kill_scale_watch(rows, cpl_target, policy)
    result["iteration_priority"] = iteration_priority(rows, cpl_target, policy)
    result["policy_version"] = policy.version
    return result
