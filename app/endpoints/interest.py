from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.constants import OpportunityTypeEnum, RoleEnum
from app.crud.opportunity import opportunity as crud_opportunity
from app.models.user import User
from app.schemas.interest import Interest, InterestStatus, NotInterestedRequest
from app.schemas.pandadoc import NdaSigningSession
from app.schemas.opportunity import OpportunityRef, opportunity_ref
from app.schemas.response import APIResponse
from app.services.interest import interest_service
from app.services.nda_signing import NdaAlreadySignedError, NdaSigningService, NdaSigningUnavailableError
from app.services.notification import NotificationService
from app.services.pandadoc import PandaDocError
from app.utils import deps

router = APIRouter()

def get_opportunity_ref(
    opportunity_type: OpportunityTypeEnum,
    opportunity_id: str,
    db: Session = Depends(deps.get_db),
) -> OpportunityRef:
    ref = opportunity_ref(opportunity_id, opportunity_type)
    if crud_opportunity.get_name(db, ref=ref) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Opportunity not found")
    return ref

@router.get("/{opportunity_type}/{opportunity_id}/interest", response_model=APIResponse[InterestStatus])
async def get_interest(
    ref: OpportunityRef = Depends(get_opportunity_ref),
    db: Session = Depends(deps.get_db),
    user: User = Depends(deps.get_current_user),
):
    data = interest_service.get_interest(db, user_id=user.id, ref=ref)
    return APIResponse(message="Interest fetched successfully", data=data)

@router.post("/{opportunity_type}/{opportunity_id}/interest", response_model=APIResponse[Interest])
async def mark_interested(
    ref: OpportunityRef = Depends(get_opportunity_ref),
    db: Session = Depends(deps.get_db),
    user: User = Depends(deps.get_current_user),
):
    data = interest_service.mark_interested(db, user_id=user.id, ref=ref)
    return APIResponse(message="Marked as interested", data=data)

@router.post("/{opportunity_type}/{opportunity_id}/no-interest", response_model=APIResponse[Interest])
async def mark_not_interested(
    body: NotInterestedRequest,
    ref: OpportunityRef = Depends(get_opportunity_ref),
    db: Session = Depends(deps.get_db),
    user: User = Depends(deps.get_current_user),
):
    data = interest_service.mark_not_interested(db, user_id=user.id, ref=ref, reason=body.reason)
    return APIResponse(message="Marked as not interested", data=data)

@router.post("/{opportunity_type}/{opportunity_id}/nda", response_model=APIResponse[Interest])
async def sign_nda(
    ref: OpportunityRef = Depends(get_opportunity_ref),
    db: Session = Depends(deps.get_db),
    user: User = Depends(deps.get_current_user),
    notifications: NotificationService = Depends(deps.get_notification_service),
):
    """Record a signed NDA and tell the team. Notification failures never fail this call."""
    data, _ = await interest_service.sign_nda(db, user_id=user.id, ref=ref, notifications=notifications)
    return APIResponse(message="NDA signed", data=data)

@router.post("/{opportunity_type}/{opportunity_id}/nda/session", response_model=APIResponse[NdaSigningSession])
async def start_nda_session(
    ref: OpportunityRef = Depends(get_opportunity_ref),
    db: Session = Depends(deps.get_db),
    user: User = Depends(deps.get_current_user),
    signing: NdaSigningService = Depends(deps.get_nda_signing_service),
):
    """Open (or resume) the embedded PandaDoc signing session for this NDA."""
    try:
        data = await signing.start_session(db, user=user, ref=ref)
    except NdaAlreadySignedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except NdaSigningUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except PandaDocError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Signing provider error: {e}")
    return APIResponse(message="Signing session created", data=data)

@router.post("/{opportunity_type}/{opportunity_id}/interests/{interest_id}/processed", response_model=APIResponse[Interest])
async def toggle_processed(
    interest_id: str,
    ref: OpportunityRef = Depends(get_opportunity_ref),
    db: Session = Depends(deps.get_db),
    _: User = Depends(deps.require_roles(RoleEnum.ADMIN, RoleEnum.TEAM)),
):
    data = interest_service.toggle_processed(db, ref=ref, interest_id=interest_id)
    if data is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Interest not found")
    return APIResponse(message="Interest processed state updated", data=data)
