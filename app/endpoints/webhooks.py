from fastapi import APIRouter, Request, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.schemas.response import WebhookAck
from app.services.nda_webhook import NdaWebhookService, WebhookAuthError, WebhookPayloadError, verify_and_parse
from app.utils import deps

router = APIRouter()

@router.post("/pandadocs/webhook", response_model=WebhookAck)
async def pandadoc_webhook(
    request: Request,
    db: Session = Depends(deps.get_db),
    webhook_service: NdaWebhookService = Depends(deps.get_nda_webhook_service),
):
    payload = await request.body()

    try:
        events = verify_and_parse(payload, settings.PANDADOC_WEBHOOK_KEY)
    except WebhookPayloadError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except WebhookAuthError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

    # Per-event failures are logged inside; the provider always gets an ack
    await webhook_service.process_events(db, events)
    return WebhookAck()
