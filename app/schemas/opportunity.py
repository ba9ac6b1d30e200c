from typing import Literal, Union
from pydantic import BaseModel, ConfigDict

from app.core.constants import OpportunityTypeEnum, OPPORTUNITY_TYPE_LABELS


class MnaRef(BaseModel):
    """Reference to a row in the mergers-and-acquisitions table."""
    model_config = ConfigDict(frozen=True)

    kind: Literal[OpportunityTypeEnum.MNA] = OpportunityTypeEnum.MNA
    id: str


class RealEstateRef(BaseModel):
    """Reference to a row in the real-estate table."""
    model_config = ConfigDict(frozen=True)

    kind: Literal[OpportunityTypeEnum.REAL_ESTATE] = OpportunityTypeEnum.REAL_ESTATE
    id: str


OpportunityRef = Union[MnaRef, RealEstateRef]


def opportunity_ref(opportunity_id: str, opportunity_type: OpportunityTypeEnum | str) -> OpportunityRef:
    """Build the tagged reference for an (id, type) pair.

    Raises ValueError for an unknown opportunity type.
    """
    match OpportunityTypeEnum(opportunity_type):
        case OpportunityTypeEnum.MNA:
            return MnaRef(id=opportunity_id)
        case OpportunityTypeEnum.REAL_ESTATE:
            return RealEstateRef(id=opportunity_id)


def opportunity_label(ref: OpportunityRef) -> str:
    return OPPORTUNITY_TYPE_LABELS[ref.kind]
