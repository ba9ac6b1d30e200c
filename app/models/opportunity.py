import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import OpportunityTypeEnum


def _uuid() -> str:
    return str(uuid.uuid4())


class OpportunityAnalytics(Base):
    __tablename__ = "opportunity_analytics"

    id = Column(String(36), primary_key=True, default=_uuid)
    invested_person_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    followup_person_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)


class MergerAndAcquisition(Base):
    __tablename__ = "mergers_and_acquisitions"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    client_acquisitioner_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    client_originator_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    analytics_id = Column(String(36), ForeignKey("opportunity_analytics.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    analytics = relationship("OpportunityAnalytics", uselist=False)


class RealEstate(Base):
    __tablename__ = "real_estates"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    client_acquisitioner_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    client_originator_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    analytics_id = Column(String(36), ForeignKey("opportunity_analytics.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    analytics = relationship("OpportunityAnalytics", uselist=False)


class OpportunityAccountManager(Base):
    """Account manager assignment; (opportunity_id, opportunity_type) points into either opportunity table."""
    __tablename__ = "opportunity_account_managers"

    id = Column(String(36), primary_key=True, default=_uuid)
    opportunity_id = Column(String(36), nullable=False, index=True)
    opportunity_type = Column(Enum(OpportunityTypeEnum), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint("opportunity_id", "opportunity_type", "user_id", name="uq_opportunity_account_manager"),
    )
