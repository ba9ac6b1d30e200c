"""PandaDoc webhook ingestion for NDA documents.

Only two document transitions matter: ``document.completed`` marks the NDA as
signed on the matching interest record and tells the team, ``document.declined``
only informs the signer's open sessions. Every other status is ignored.

Duplicate deliveries are not filtered. Re-applying a completed document leaves
the interest record unchanged but emits another notification batch.
"""
import hmac
import json
from datetime import datetime, timezone
from typing import List

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.constants import (
    DOCUMENT_COMPLETED,
    DOCUMENT_DECLINED,
    DOCUMENT_STATE_CHANGED,
    NDA_STATUS_EVENT,
    NdaStatusEnum,
    user_channel,
)
from app.crud.user import user as crud_user
from app.realtime.broadcaster import RealtimeBroadcaster
from app.schemas.opportunity import OpportunityRef, opportunity_ref
from app.schemas.pandadoc import WebhookEvent
from app.services.interest import interest_service
from app.services.notification import NotificationService
from app.services.pandadoc import PandaDocService
from app.utils.logger import setup_logger

logger = setup_logger("app.services.nda_webhook", "webhooks.log")


class WebhookPayloadError(Exception):
    pass


class WebhookAuthError(Exception):
    pass


def verify_and_parse(body: bytes, shared_key: str) -> List[WebhookEvent]:
    """Parse the raw body and check the shared key carried by the first event.

    Raises WebhookPayloadError for malformed JSON and WebhookAuthError when the
    key is missing or wrong. Nothing is processed before this returns.
    """
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise WebhookPayloadError("Invalid JSON") from e

    if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
        raise WebhookAuthError("Invalid webhook key")

    data = payload[0].get("data")
    received_key = data.get("shared_key") if isinstance(data, dict) else None
    if not shared_key or not isinstance(received_key, str) or not hmac.compare_digest(received_key.encode(), shared_key.encode()):
        raise WebhookAuthError("Invalid webhook key")

    events = []
    for entry in payload:
        try:
            events.append(WebhookEvent.model_validate(entry))
        except ValidationError as e:
            logger.warning(f"[PandaDoc Webhook] Skipping malformed event: {e.errors()}")
    return events


class NdaWebhookService:
    def __init__(self, pandadoc: PandaDocService, notifications: NotificationService, broadcaster: RealtimeBroadcaster):
        self.pandadoc = pandadoc
        self.notifications = notifications
        self.broadcaster = broadcaster

    async def process_events(self, db: Session, events: List[WebhookEvent]) -> None:
        for entry in events:
            if entry.event != DOCUMENT_STATE_CHANGED:
                continue

            document_id = entry.data.id
            try:
                await self.process_document(db, document_id)
            except Exception as e:
                db.rollback()
                logger.error(f"[PandaDoc Webhook] Error processing document {document_id}: {e}", exc_info=True)

    async def process_document(self, db: Session, document_id: str) -> None:
        document = await self.pandadoc.get_document_details(document_id)
        metadata = document.metadata or {}

        user_id = metadata.get("userId")
        opportunity_id = metadata.get("opportunityId")
        opportunity_type = metadata.get("opportunityType")
        if not (user_id and opportunity_id and opportunity_type):
            logger.warning(f"[PandaDoc Webhook] Missing metadata on document {document_id}")
            return

        try:
            ref = opportunity_ref(opportunity_id, opportunity_type)
        except ValueError:
            logger.warning(f"[PandaDoc Webhook] Unknown opportunity type '{opportunity_type}' on document {document_id}")
            return

        if document.status == DOCUMENT_COMPLETED:
            await self.handle_document_completed(db, user_id, ref)
        elif document.status == DOCUMENT_DECLINED:
            self.handle_document_declined(db, user_id)

    async def handle_document_completed(self, db: Session, user_id: str, ref: OpportunityRef) -> None:
        _, user = await interest_service.sign_nda(db, user_id=user_id, ref=ref, notifications=self.notifications)
        if user and user.email:
            self.push_nda_status(user.email, NdaStatusEnum.COMPLETED)

    def handle_document_declined(self, db: Session, user_id: str) -> None:
        user = crud_user.get(db, id=user_id)
        if user and user.email:
            self.push_nda_status(user.email, NdaStatusEnum.DECLINED)

    def push_nda_status(self, email: str, status: NdaStatusEnum) -> None:
        self.broadcaster.safe_trigger(user_channel(email), NDA_STATUS_EVENT, {
            "status": status.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })
