from sqlalchemy import Column, String, DateTime, Text, Integer
from sqlalchemy.sql import func
from creative_analytics.database import Base


class Report(Base):
    """Generated performance report. Rows are never updated after insert."""
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(String(64), nullable=False, default="all")
    period_start = Column(String(40), nullable=False)
    period_end = Column(String(40), nullable=False)
    data = Column(Text, nullable=False)  # JSON statistics at generation time
    ai_insights = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Report(id={self.id}, account_id={self.account_id})>"
