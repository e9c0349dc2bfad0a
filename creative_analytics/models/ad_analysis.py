from sqlalchemy import Column, String, DateTime, Text, ForeignKey
from sqlalchemy.sql import func
from creative_analytics.database import Base


class AdAnalysis(Base):
    __tablename__ = "ad_analysis"

    ad_id = Column(String(64), ForeignKey('ads.id', ondelete='CASCADE'), primary_key=True)
    asset_type = Column(String(100), nullable=True)
    visual_format = Column(String(100), nullable=True)
    messaging_angle = Column(String(255), nullable=True)
    hook_tactic = Column(String(255), nullable=True)
    offer_type = Column(String(100), nullable=True)
    funnel_stage = Column(String(64), nullable=True)
    ai_summary = Column(Text, nullable=True)
    strengths = Column(Text, nullable=True)  # JSON array
    improvements = Column(Text, nullable=True)  # JSON array
    iterations = Column(Text, nullable=True)  # JSON array of {title, description, expected_impact}
    analyzed_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<AdAnalysis(ad_id={self.ad_id}, funnel_stage={self.funnel_stage})>"
