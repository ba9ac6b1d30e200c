from datetime import datetime, timezone
from sqlalchemy.orm import Session

from app.core.constants import ACCESS_REQUEST_EVENT, NOTIFICATIONS_CHANNEL, NotificationTypeEnum
from app.crud.access_request import access_request as crud_access_request
from app.realtime.broadcaster import RealtimeBroadcaster
from app.schemas.access_request import AccessRequest, AccessRequestCreate
from app.schemas.notification import NotificationContent
from app.services.notification import NotificationService
from app.utils.logger import setup_logger

logger = setup_logger("app.services.access_request", "access_requests.log")

class AccessRequestService:
    async def create_access_request(
        self,
        db: Session,
        *,
        request_in: AccessRequestCreate,
        notifications: NotificationService,
        broadcaster: RealtimeBroadcaster,
    ) -> AccessRequest:
        access_request = AccessRequest.model_validate(crud_access_request.create(db, obj_in=request_in))
        logger.info(f"Access request {access_request.id} received from {access_request.email}")

        broadcaster.safe_trigger(NOTIFICATIONS_CHANNEL, ACCESS_REQUEST_EVENT, {
            "accessRequestId": access_request.id,
            "name": access_request.name,
            "email": access_request.email,
            "company": access_request.company,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

        await notifications.notify_admins(NotificationContent(
            type=NotificationTypeEnum.ACCESS_REQUEST,
            title="New access request",
            message=f"{access_request.name} from {access_request.company} ({access_request.email}) requested access",
        ))
        return access_request

access_request_service = AccessRequestService()
