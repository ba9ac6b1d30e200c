from typing import List, Sequence
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.crud.base import CRUDBase
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate

class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    def get_enabled_ids_by_roles(self, db: Session, *, roles: Sequence[RoleEnum]) -> List[str]:
        rows = (
            db.query(User.id)
            .filter(User.role.in_(list(roles)), User.disabled == False)
            .all()
        )
        return [row.id for row in rows]

user = CRUDUser(User)
