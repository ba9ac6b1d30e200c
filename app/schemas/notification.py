from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional

from app.core.constants import NotificationTypeEnum, OpportunityTypeEnum

class NotificationContent(BaseModel):
    """Everything about a notification except its recipient."""
    type: NotificationTypeEnum
    title: str
    message: str
    opportunity_id: Optional[str] = None
    opportunity_type: Optional[OpportunityTypeEnum] = None
    related_user_id: Optional[str] = None

class NotificationCreate(NotificationContent):
    """Schema for creating a notification for one recipient."""
    user_id: str

class Notification(NotificationCreate):
    """Schema for reading a notification, includes ID and status."""
    id: str
    read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class NotificationBroadcast(BaseModel):
    """Envelope pushed to realtime subscribers; never persisted."""
    id: Optional[str] = None
    type: NotificationTypeEnum
    title: str
    message: str
    opportunity_id: Optional[str] = Field(None, serialization_alias="opportunityId")
    opportunity_type: Optional[OpportunityTypeEnum] = Field(None, serialization_alias="opportunityType")
    created_at: datetime = Field(..., serialization_alias="createdAt")

    def to_payload(self) -> dict:
        payload = self.model_dump(mode="json", by_alias=True)
        if self.id is None:
            payload.pop("id")
        return payload

class NotificationPage(BaseModel):
    items: List[Notification]
    page: int
    page_size: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool

class UnreadCount(BaseModel):
    count: int

class MarkAllReadResult(BaseModel):
    updated: int
