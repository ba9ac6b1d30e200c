from typing import Optional
from sqlalchemy.orm import Session

from app.core.constants import NotificationTypeEnum
from app.crud.interest import interest as crud_interest
from app.crud.opportunity import opportunity as crud_opportunity
from app.crud.user import user as crud_user
from app.models.user import User
from app.schemas.interest import Interest, InterestStatus
from app.schemas.notification import NotificationContent
from app.schemas.opportunity import OpportunityRef, opportunity_label
from app.services.notification import NotificationService


def nda_signed_notification(user: Optional[User], opportunity_name: Optional[str], ref: OpportunityRef) -> NotificationContent:
    user_name = (user.name if user else None) or "User"
    return NotificationContent(
        type=NotificationTypeEnum.OPPORTUNITY_NDA_SIGNED,
        title=f"{user_name} signed NDA",
        message=f"{user_name} signed NDA for {opportunity_name or 'opportunity'} ({opportunity_label(ref)})",
        opportunity_id=ref.id,
        opportunity_type=ref.kind,
        related_user_id=user.id if user else None,
    )


class InterestService:
    def get_interest(self, db: Session, *, user_id: str, ref: OpportunityRef) -> InterestStatus:
        existing = crud_interest.get_by_natural_key(db, user_id=user_id, ref=ref)
        if existing is None:
            return InterestStatus()
        return Interest.model_validate(existing)

    def mark_interested(self, db: Session, *, user_id: str, ref: OpportunityRef) -> Interest:
        record = crud_interest.upsert(db, user_id=user_id, ref=ref, values={"interested": True})
        return Interest.model_validate(record)

    def mark_not_interested(self, db: Session, *, user_id: str, ref: OpportunityRef, reason: Optional[str] = None) -> Interest:
        record = crud_interest.upsert(
            db, user_id=user_id, ref=ref, values={"interested": False, "not_interested_reason": reason}
        )
        return Interest.model_validate(record)

    def record_nda_signed(self, db: Session, *, user_id: str, ref: OpportunityRef) -> Interest:
        """Upsert {nda_signed, interested}; applying it twice leaves the same state."""
        record = crud_interest.upsert(
            db, user_id=user_id, ref=ref, values={"nda_signed": True, "interested": True}
        )
        return Interest.model_validate(record)

    async def sign_nda(
        self, db: Session, *, user_id: str, ref: OpportunityRef, notifications: NotificationService
    ) -> tuple[Interest, Optional[User]]:
        interest = self.record_nda_signed(db, user_id=user_id, ref=ref)

        user = crud_user.get(db, id=user_id)
        opportunity_name = crud_opportunity.get_name(db, ref=ref)
        await notifications.notify_team_and_admins(nda_signed_notification(user, opportunity_name, ref))
        return interest, user

    def toggle_processed(self, db: Session, *, ref: OpportunityRef, interest_id: str) -> Optional[Interest]:
        record = crud_interest.get(db, ref=ref, interest_id=interest_id)
        if record is None:
            return None
        record.processed = not record.processed
        db.add(record)
        db.commit()
        db.refresh(record)
        return Interest.model_validate(record)

interest_service = InterestService()
