from creative_analytics.models.setting import Setting
from creative_analytics.models.ad_account import AdAccount
from creative_analytics.models.ad import Ad
from creative_analytics.models.ad_analysis import AdAnalysis
from creative_analytics.models.report import Report

__all__ = [
    "Setting",
    "AdAccount",
    "Ad",
    "AdAnalysis",
    "Report",
]
