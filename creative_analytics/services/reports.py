"""
Narrative performance reports: aggregate the cached ads, ask the language
model for a strategic write-up and store both as an immutable Report row.
"""
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from creative_analytics.models import Report
from creative_analytics.services.analytics import load_analytics_rows, summarize
from creative_analytics.services.llm_service import LLMService
from creative_analytics.utils import resolve_account_filter

logger = logging.getLogger(__name__)

REPORT_MAX_TOKENS = 1500
TOP_N = 5
BOTTOM_MIN_SPEND = 20

REPORT_AD_FIELDS = ("id", "name", "spend", "leads", "cpl", "messaging_angle", "funnel_stage")


def _compact(row: Dict[str, Any]) -> Dict[str, Any]:
    return {field: row.get(field) for field in REPORT_AD_FIELDS}


def build_report_data(rows: List[Dict[str, Any]], cpl_target: float) -> Dict[str, Any]:
    """Statistics snapshot stored with the report and embedded in the prompt."""
    summary = summarize(rows, cpl_target)
    total_spend = summary["total_spend"]
    total_leads = summary["total_leads"]
    top5 = sorted((r for r in rows if (r.get("leads") or 0) > 0), key=lambda r: r.get("cpl") or 0)[:TOP_N]
    bottom5 = sorted(
        (r for r in rows if (r.get("spend") or 0) > BOTTOM_MIN_SPEND),
        key=lambda r: r.get("cpl") or 0,
        reverse=True,
    )[:TOP_N]
    return {
        "total_spend": total_spend,
        "total_leads": total_leads,
        "blended_cpl": total_spend / total_leads if total_leads > 0 else 0.0,
        "avg_cpl": summary["avg_cpl"],
        "winners": summary["winners"],
        "win_rate": summary["win_rate"],
        "total": summary["total"],
        "cpl_target": cpl_target,
        "top5": [_compact(r) for r in top5],
        "bottom5": [_compact(r) for r in bottom5],
    }


def build_report_prompt(data: Dict[str, Any], days: int) -> str:
    target = data["cpl_target"]
    top_lines = "\n".join(
        f"- {a['name']}: {a['cpl'] or 0:.2f} CPL, {a['leads'] or 0} leads, {a['spend'] or 0:.0f} spend"
        f" | Angle: {a['messaging_angle'] or 'n/a'} | Stage: {a['funnel_stage'] or 'n/a'}"
        for a in data["top5"]
    ) or "- none"
    bottom_lines = "\n".join(
        f"- {a['name']}: {a['cpl'] or 0:.2f} CPL, {a['leads'] or 0} leads, {a['spend'] or 0:.0f} spend"
        f" | Angle: {a['messaging_angle'] or 'n/a'}"
        for a in data["bottom5"]
    ) or "- none"

    return f"""You are a senior performance marketer specialised in B2C financial services.

Analyze this Meta Ads performance data for the last {days} days (independent fee-only financial advisory):

SUMMARY:
- Total spend: {data['total_spend']:.2f}
- Total leads: {data['total_leads']}
- Blended CPL: {data['blended_cpl']:.2f} (target: {target:g})
- Win rate (CPL <= {target:g}): {data['winners']}/{data['total']} ({data['win_rate']}%)

TOP 5 ADS BY CPL:
{top_lines}

BOTTOM 5 ADS (most expensive):
{bottom_lines}

Write a strategic report with:
1. **Executive Summary** (3-4 sentences)
2. **What is working** (with specific data)
3. **Critical problems to fix**
4. **3 priority actions for next week**
5. **Target audience insights** based on the winning angles

Be direct and concrete, use the data. Speak like a senior consultant."""


def generate_report(
    db: Session,
    llm_service: LLMService,
    cpl_target: float,
    account_id: Optional[str] = None,
    days: int = 30,
    model: Optional[str] = None,
) -> Report:
    """Build statistics, request the narrative and persist the report. Nothing is stored if the model call fails."""
    rows = load_analytics_rows(db, account_id)
    data = build_report_data(rows, cpl_target)
    prompt = build_report_prompt(data, days)

    result = llm_service.execute_prompt(user_message=prompt, model=model, max_tokens=REPORT_MAX_TOKENS)
    insights = (result or {}).get("content") or ""

    now = datetime.now(timezone.utc)
    report = Report(
        account_id=resolve_account_filter(account_id) or "all",
        period_start=(now - timedelta(days=days)).isoformat(),
        period_end=now.isoformat(),
        data=json.dumps(data, ensure_ascii=False),
        ai_insights=insights,
    )
    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info(f"Generated report {report.id} for {report.account_id} ({data['total']} ads, {days} days)")
    return report


def list_reports(db: Session, limit: int = 10) -> List[Report]:
    return db.query(Report).order_by(Report.created_at.desc(), Report.id.desc()).limit(limit).all()
