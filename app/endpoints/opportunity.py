from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.constants import NotificationTypeEnum, RoleEnum
from app.crud.opportunity import opportunity as crud_opportunity
from app.endpoints.interest import get_opportunity_ref
from app.models.user import User
from app.schemas.notification import NotificationContent
from app.schemas.opportunity import OpportunityRef
from app.schemas.response import APIResponse
from app.services.notification import NotificationService
from app.utils import deps

router = APIRouter()

class RecipientsNotified(BaseModel):
    recipients: int

@router.post("/{opportunity_type}/{opportunity_id}/commissions/resolved", response_model=APIResponse[RecipientsNotified])
async def notify_commissions_resolved(
    ref: OpportunityRef = Depends(get_opportunity_ref),
    db: Session = Depends(deps.get_db),
    _: User = Depends(deps.require_roles(RoleEnum.ADMIN, RoleEnum.TEAM)),
    notifications: NotificationService = Depends(deps.get_notification_service),
):
    """Tell everyone involved in the opportunity that its commissions were resolved."""
    name = crud_opportunity.get_name(db, ref=ref) or "opportunity"
    outcomes = await notifications.notify_involved_users(db, ref, NotificationContent(
        type=NotificationTypeEnum.COMMISSION_RESOLVED,
        title="Commission resolved",
        message=f'Commissions for "{name}" have been resolved. Check your commission details.',
        opportunity_id=ref.id,
        opportunity_type=ref.kind,
    ))
    return APIResponse(message="Involved users notified", data=RecipientsNotified(recipients=len(outcomes)))
