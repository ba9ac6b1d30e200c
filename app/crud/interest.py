from typing import Any, Dict, Optional
from sqlalchemy.orm import Session

from app.models.interest import UserMergerAndAcquisitionInterest, UserRealEstateInterest
from app.schemas.opportunity import OpportunityRef, MnaRef, RealEstateRef


class CRUDInterest:
    """Interest records keyed by the natural key (user_id, opportunity_id)."""

    def model_for(self, ref: OpportunityRef):
        match ref:
            case MnaRef():
                return UserMergerAndAcquisitionInterest
            case RealEstateRef():
                return UserRealEstateInterest
        raise TypeError(f"Unsupported opportunity reference: {ref!r}")

    def get_by_natural_key(self, db: Session, *, user_id: str, ref: OpportunityRef):
        model = self.model_for(ref)
        return (
            db.query(model)
            .filter(model.user_id == user_id, model.opportunity_id == ref.id)
            .first()
        )

    def upsert(self, db: Session, *, user_id: str, ref: OpportunityRef, values: Dict[str, Any]):
        """Update the existing record for (user_id, opportunity) or create it with `values`."""
        existing = self.get_by_natural_key(db, user_id=user_id, ref=ref)
        if existing:
            for field, value in values.items():
                setattr(existing, field, value)
            db.add(existing)
            db.commit()
            db.refresh(existing)
            return existing

        model = self.model_for(ref)
        db_obj = model(user_id=user_id, opportunity_id=ref.id, **values)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get(self, db: Session, *, ref: OpportunityRef, interest_id: str) -> Optional[Any]:
        model = self.model_for(ref)
        return (
            db.query(model)
            .filter(model.id == interest_id, model.opportunity_id == ref.id)
            .first()
        )

interest = CRUDInterest()
