from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from creative_analytics.database import Base


class AdAccount(Base):
    __tablename__ = "ad_accounts"

    id = Column(String(64), primary_key=True)  # act_<numeric id>
    name = Column(String(255), nullable=True)
    currency = Column(String(8), nullable=True)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<AdAccount(id={self.id}, name={self.name})>"
