from enum import Enum


class RoleEnum(str, Enum):
    ADMIN = "ADMIN"
    TEAM = "TEAM"
    INVESTOR = "INVESTOR"

class NotificationTypeEnum(str, Enum):
    ACCESS_REQUEST = "ACCESS_REQUEST"
    OPPORTUNITY_NDA_SIGNED = "OPPORTUNITY_NDA_SIGNED"
    COMMISSION_RESOLVED = "COMMISSION_RESOLVED"

class OpportunityTypeEnum(str, Enum):
    MNA = "MNA"
    REAL_ESTATE = "REAL_ESTATE"

class AccessRequestStatusEnum(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

class ReadFilterEnum(str, Enum):
    ALL = "all"
    READ = "read"
    UNREAD = "unread"

class NdaStatusEnum(str, Enum):
    COMPLETED = "completed"
    DECLINED = "declined"


# Realtime channels and events
NOTIFICATIONS_CHANNEL = "notifications"
NOTIFICATION_EVENT = "notification"
ACCESS_REQUEST_EVENT = "access-request"
NDA_STATUS_EVENT = "nda-status-update"

def user_channel(email: str) -> str:
    return f"user-{email}"


# PandaDoc
DOCUMENT_STATE_CHANGED = "document_state_changed"
DOCUMENT_UPLOADED = "document.uploaded"
DOCUMENT_DRAFT = "document.draft"
DOCUMENT_SENT = "document.sent"
DOCUMENT_VIEWED = "document.viewed"
DOCUMENT_COMPLETED = "document.completed"
DOCUMENT_DECLINED = "document.declined"

OPPORTUNITY_TYPE_LABELS = {
    OpportunityTypeEnum.MNA: "M&A",
    OpportunityTypeEnum.REAL_ESTATE: "Real Estate",
}

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
