from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime
from typing import Optional

from app.core.constants import AccessRequestStatusEnum

class AccessRequestCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    company: str = Field(..., min_length=1)
    phone: Optional[str] = None
    position: Optional[str] = None
    message: Optional[str] = None

class AccessRequest(AccessRequestCreate):
    id: str
    status: AccessRequestStatusEnum
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class AccessRequestReceipt(BaseModel):
    success: bool = True
    id: str
