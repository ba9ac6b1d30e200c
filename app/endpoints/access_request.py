from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.realtime.broadcaster import RealtimeBroadcaster
from app.schemas.access_request import AccessRequestCreate, AccessRequestReceipt
from app.schemas.response import APIResponse
from app.services.access_request import access_request_service
from app.services.notification import NotificationService
from app.utils import deps

router = APIRouter()

@router.post("/request-access", response_model=APIResponse[AccessRequestReceipt])
async def request_access(
    request_in: AccessRequestCreate,
    db: Session = Depends(deps.get_db),
    notifications: NotificationService = Depends(deps.get_notification_service),
    broadcaster: RealtimeBroadcaster = Depends(deps.get_broadcaster),
):
    """Public endpoint: store an access request and alert the admins."""
    access_request = await access_request_service.create_access_request(
        db, request_in=request_in, notifications=notifications, broadcaster=broadcaster
    )
    return APIResponse(message="Access request received", data=AccessRequestReceipt(id=access_request.id))
