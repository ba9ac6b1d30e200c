from typing import List, Optional
from sqlalchemy.orm import Session, joinedload

from app.models.opportunity import MergerAndAcquisition, RealEstate, OpportunityAccountManager
from app.schemas.opportunity import OpportunityRef, MnaRef, RealEstateRef


class CRUDOpportunity:
    """Lookups across the two opportunity tables, addressed by OpportunityRef."""

    def model_for(self, ref: OpportunityRef):
        match ref:
            case MnaRef():
                return MergerAndAcquisition
            case RealEstateRef():
                return RealEstate
        raise TypeError(f"Unsupported opportunity reference: {ref!r}")

    def get(self, db: Session, *, ref: OpportunityRef) -> Optional[MergerAndAcquisition | RealEstate]:
        model = self.model_for(ref)
        return (
            db.query(model)
            .options(joinedload(model.analytics))
            .filter(model.id == ref.id)
            .first()
        )

    def get_name(self, db: Session, *, ref: OpportunityRef) -> Optional[str]:
        model = self.model_for(ref)
        row = db.query(model.name).filter(model.id == ref.id).first()
        return row.name if row else None

    def get_account_manager_ids(self, db: Session, *, ref: OpportunityRef) -> List[str]:
        rows = (
            db.query(OpportunityAccountManager.user_id)
            .filter(
                OpportunityAccountManager.opportunity_id == ref.id,
                OpportunityAccountManager.opportunity_type == ref.kind,
            )
            .all()
        )
        return [row.user_id for row in rows]

opportunity = CRUDOpportunity()
