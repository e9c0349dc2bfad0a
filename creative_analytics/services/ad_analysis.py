"""
Per-ad creative analysis: prompt the language model with an ad's metrics,
parse its JSON classification and store it as an AdAnalysis row.
"""
import json
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from creative_analytics.errors import MalformedAiResponseError, NotFoundError
from creative_analytics.models import Ad, AdAnalysis
from creative_analytics.schemas import AdAnalysisResult, IterationSuggestion
from creative_analytics.services.llm_service import LLMService
from creative_analytics.utils import resolve_account_filter

logger = logging.getLogger(__name__)

ANALYSIS_MAX_TOKENS = 1024

ASSET_TYPES = ["UGC", "AI Video Avatar", "Static Image", "Carousel", "Screen Recording"]
VISUAL_FORMATS = ["Talking Head", "Testimonial", "Demo", "Infographic", "Lifestyle"]
MESSAGING_ANGLES = [
    "Retirement anxiety",
    "Independence from the bank",
    "Fee-only vs bank comparison",
    "Authority/Expert",
    "Returns",
    "Wealth protection",
    "Tax savings",
]
HOOK_TACTICS = [
    "Provocative question",
    "Shock statistic",
    "Personal story",
    "Common problem",
    "Promised result",
    "Contradiction",
]
OFFER_TYPES = ["Free webinar", "Free consultation", "Lead magnet", "Demo", "No offer"]
FUNNEL_STAGES = ["Top of Funnel", "Middle of Funnel", "Bottom of Funnel"]
IMPACT_LEVELS = ["High", "Medium", "Low"]


def is_winner(leads: Optional[int], cpl: Optional[float], cpl_target: float) -> bool:
    """Winner: at least one lead and a positive CPL at or below target."""
    return (leads or 0) > 0 and (cpl or 0) > 0 and cpl <= cpl_target


def _options(values: List[str]) -> str:
    return " | ".join(values)


def build_analysis_prompt(ad: Ad, cpl_target: float) -> str:
    winner = is_winner(ad.leads, ad.cpl, cpl_target)
    return f"""You are a performance marketing expert for independent, fee-only financial advisory services.

Analyze this Meta ad:

Name: {ad.name}
Status: {ad.status}
Thumbnail URL: {ad.thumbnail_url or 'not available'}

METRICS:
- Spend: {ad.spend or 0:.2f}
- Impressions: {ad.impressions or 0:,}
- Clicks: {ad.clicks or 0}
- CTR: {ad.ctr or 0:.2f}%
- Leads: {ad.leads or 0}
- CPL (cost per lead): {ad.cpl or 0:.2f} (target: {cpl_target:g})
- Hook Rate (3s): {ad.hook_rate or 0:.1f}%
- Hold Rate: {ad.hold_rate or 0:.1f}%
- Performance: {'WINNER' if winner else 'NEEDS OPTIMIZATION'}

Reply ONLY with valid JSON (no text outside the JSON):
{{
  "asset_type": "{_options(ASSET_TYPES)}",
  "visual_format": "{_options(VISUAL_FORMATS)}",
  "messaging_angle": "{_options(MESSAGING_ANGLES)}",
  "hook_tactic": "{_options(HOOK_TACTICS)}",
  "offer_type": "{_options(OFFER_TYPES)}",
  "funnel_stage": "{_options(FUNNEL_STAGES)}",
  "ai_summary": "2-3 sentence summary of the ad and why it performs this way",
  "strengths": ["strength 1", "strength 2"],
  "improvements": ["improvement area 1", "improvement area 2"],
  "iterations": [
    {{
      "title": "Iteration 1",
      "description": "Concrete description of what to change",
      "expected_impact": "{_options(IMPACT_LEVELS)}"
    }},
    {{
      "title": "Iteration 2",
      "description": "Second variant to test",
      "expected_impact": "{_options(IMPACT_LEVELS)}"
    }}
  ]
}}"""


def extract_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced {...} substring of text, or None.

    Braces inside JSON string literals are ignored.
    """
    if not text:
        return None
    start = text.find("{")
    if start == -1:
        return None
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def _as_text(value):
    """Model output sometimes has numbers where text is expected."""
    if value is None or isinstance(value, str):
        return value
    return str(value)


def parse_analysis_response(content: str) -> AdAnalysisResult:
    """Parse model output into AdAnalysisResult; raises MalformedAiResponseError."""
    candidate = extract_json_object(content)
    if candidate is None:
        logger.warning("Analysis response contained no JSON object")
        raise MalformedAiResponseError("AI response did not contain a JSON object")
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.warning(f"Analysis response JSON parse failed: {e}")
        raise MalformedAiResponseError(f"AI response JSON could not be parsed: {e}")
    if not isinstance(data, dict):
        raise MalformedAiResponseError("AI response JSON is not an object")
    for key in ("strengths", "improvements", "iterations"):
        if not isinstance(data.get(key), list):
            data[key] = []
    for key in ("asset_type", "visual_format", "messaging_angle", "hook_tactic", "offer_type", "funnel_stage", "ai_summary"):
        data[key] = _as_text(data.get(key))
    # Non-object iteration entries are dropped
    data["iterations"] = [
        IterationSuggestion.model_validate(
            {field: _as_text(item.get(field)) for field in IterationSuggestion.model_fields}
        ).model_dump()
        for item in data["iterations"]
        if isinstance(item, dict)
    ]
    return AdAnalysisResult.model_validate(data)


def analyze_ad(
    db: Session,
    llm_service: LLMService,
    ad_id: str,
    cpl_target: float,
    model: Optional[str] = None,
) -> AdAnalysisResult:
    """Run the language-model classification for one cached ad and upsert its analysis."""
    ad = db.query(Ad).filter(Ad.id == ad_id).first()
    if not ad:
        raise NotFoundError(f"Ad {ad_id} not found")

    prompt = build_analysis_prompt(ad, cpl_target)
    result = llm_service.execute_prompt(user_message=prompt, model=model, max_tokens=ANALYSIS_MAX_TOKENS)
    analysis = parse_analysis_response((result or {}).get("content") or "")

    db.merge(
        AdAnalysis(
            ad_id=ad.id,
            asset_type=analysis.asset_type,
            visual_format=analysis.visual_format,
            messaging_angle=analysis.messaging_angle,
            hook_tactic=analysis.hook_tactic,
            offer_type=analysis.offer_type,
            funnel_stage=analysis.funnel_stage,
            ai_summary=analysis.ai_summary,
            strengths=json.dumps(analysis.strengths, ensure_ascii=False),
            improvements=json.dumps(analysis.improvements, ensure_ascii=False),
            iterations=json.dumps(analysis.iterations, ensure_ascii=False),
        )
    )
    db.commit()
    logger.info(f"Stored analysis for ad {ad.id} (funnel_stage={analysis.funnel_stage})")
    return analysis


def list_pending_ad_ids(db: Session, account_id: Optional[str] = None) -> List[str]:
    """Ids of cached ads without an analysis row. Does not call the language model."""
    query = (
        db.query(Ad.id)
        .outerjoin(AdAnalysis, AdAnalysis.ad_id == Ad.id)
        .filter(AdAnalysis.ad_id.is_(None))
    )
    account_filter = resolve_account_filter(account_id)
    if account_filter:
        query = query.filter(Ad.account_id == account_filter)
    return [row.id for row in query.order_by(Ad.spend.desc(), Ad.id.asc()).all()]

