import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from app.core.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class UserMergerAndAcquisitionInterest(Base):
    __tablename__ = "user_merger_and_acquisition_interests"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    opportunity_id = Column(String(36), ForeignKey("mergers_and_acquisitions.id", ondelete="CASCADE"), nullable=False)
    interested = Column(Boolean, nullable=False, default=False)
    nda_signed = Column(Boolean, nullable=False, default=False)
    not_interested_reason = Column(String, nullable=True)
    processed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "opportunity_id", name="uq_user_mna_interest"),
    )


class UserRealEstateInterest(Base):
    __tablename__ = "user_real_estate_interests"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    opportunity_id = Column(String(36), ForeignKey("real_estates.id", ondelete="CASCADE"), nullable=False)
    interested = Column(Boolean, nullable=False, default=False)
    nda_signed = Column(Boolean, nullable=False, default=False)
    not_interested_reason = Column(String, nullable=True)
    processed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "opportunity_id", name="uq_user_real_estate_interest"),
    )
