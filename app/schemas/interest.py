from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional

class InterestStatus(BaseModel):
    interested: bool = False
    nda_signed: bool = False
    not_interested_reason: Optional[str] = None
    processed: bool = False

class Interest(InterestStatus):
    id: str
    user_id: str
    opportunity_id: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class NotInterestedRequest(BaseModel):
    reason: Optional[str] = None
