from creative_analytics.schemas.settings import SettingsResponse, SettingsUpdate
from creative_analytics.schemas.accounts import (
    AccountAddRequest,
    AccountAddResponse,
    AccountRemoveResponse,
    AdAccountResponse,
    SyncResponse,
)
from creative_analytics.schemas.ads import (
    AdAnalysisResult,
    AdResponse,
    AnalyzeAllRequest,
    AnalyzeAllResponse,
    AnalyzeResponse,
    IterationSuggestion,
)
from creative_analytics.schemas.analytics import AnalyticsResponse, AnalyticsSummary, GroupBreakdown
from creative_analytics.schemas.reports import ReportGenerateRequest, ReportGenerateResponse, ReportResponse

__all__ = [
    "SettingsResponse",
    "SettingsUpdate",
    "AccountAddRequest",
    "AccountAddResponse",
    "AccountRemoveResponse",
    "AdAccountResponse",
    "SyncResponse",
    "AdAnalysisResult",
    "AdResponse",
    "AnalyzeAllRequest",
    "AnalyzeAllResponse",
    "AnalyzeResponse",
    "IterationSuggestion",
    "AnalyticsResponse",
    "AnalyticsSummary",
    "GroupBreakdown",
    "ReportGenerateRequest",
    "ReportGenerateResponse",
    "ReportResponse",
]
