import uuid
from sqlalchemy import Column, String, DateTime, Enum
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import AccessRequestStatusEnum

class AccessRequest(Base):
    __tablename__ = "access_requests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    company = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    position = Column(String, nullable=True)
    message = Column(String, nullable=True)
    status = Column(Enum(AccessRequestStatusEnum), nullable=False, default=AccessRequestStatusEnum.PENDING)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
