from sqlalchemy import Column, String, DateTime, Text, Integer, Float
from sqlalchemy.sql import func
from creative_analytics.database import Base


class Ad(Base):
    """Latest synced snapshot of a Meta ad. Each sync replaces the whole row."""
    __tablename__ = "ads"

    id = Column(String(64), primary_key=True)
    # References ad_accounts.id; checked at sync time so retained ads survive account removal
    account_id = Column(String(64), nullable=False, index=True)
    name = Column(Text, nullable=True)
    status = Column(String(32), nullable=True)
    thumbnail_url = Column(Text, nullable=True)
    video_url = Column(Text, nullable=True)

    # Performance metrics (trailing sync window)
    spend = Column(Float, nullable=False, default=0.0)
    impressions = Column(Integer, nullable=False, default=0)
    clicks = Column(Integer, nullable=False, default=0)
    ctr = Column(Float, nullable=False, default=0.0)
    leads = Column(Integer, nullable=False, default=0)
    cpl = Column(Float, nullable=False, default=0.0)
    hook_rate = Column(Float, nullable=False, default=0.0)
    hold_rate = Column(Float, nullable=False, default=0.0)
    video_views_3s = Column(Integer, nullable=False, default=0)
    video_views_100pct = Column(Integer, nullable=False, default=0)

    synced_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Ad(id={self.id}, account_id={self.account_id}, spend={self.spend})>"
