from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class WebhookEventData(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    shared_key: Optional[str] = None


class WebhookEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    event: str
    data: WebhookEventData


class DocumentToken(BaseModel):
    name: str
    value: str


class CreateDocumentInput(BaseModel):
    template_id: str
    name: str
    recipient_email: str
    recipient_name: str
    metadata: Dict[str, str] = Field(default_factory=dict)
    tokens: List[DocumentToken] = Field(default_factory=list)


class Document(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    status: str
    name: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class SigningSession(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    expires_at: Optional[str] = None


class NdaSigningSession(BaseModel):
    document_id: str
    signing_url: str
    expires_at: Optional[str] = None
