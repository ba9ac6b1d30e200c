from datetime import datetime, timezone
from typing import List, Tuple
from sqlalchemy.orm import Session

from app.core.constants import ReadFilterEnum
from app.crud.base import CRUDBase
from app.models.notification import Notification
from app.schemas.notification import NotificationCreate

class CRUDNotification(CRUDBase[Notification, NotificationCreate, NotificationCreate]):
    """CRUD operations for Notifications. Content is immutable; only read state changes."""

    def _for_user(self, db: Session, *, user_id: str, read_filter: ReadFilterEnum = ReadFilterEnum.ALL):
        query = db.query(self.model).filter(self.model.user_id == user_id)
        if read_filter == ReadFilterEnum.READ:
            query = query.filter(self.model.read == True)
        elif read_filter == ReadFilterEnum.UNREAD:
            query = query.filter(self.model.read == False)
        return query

    def get_page_for_user(
        self, db: Session, *, user_id: str, skip: int = 0, limit: int = 20, read_filter: ReadFilterEnum = ReadFilterEnum.ALL
    ) -> Tuple[List[Notification], int]:
        query = self._for_user(db, user_id=user_id, read_filter=read_filter)
        total = query.count()
        items = query.order_by(self.model.created_at.desc()).offset(skip).limit(limit).all()
        return items, total

    def count_unread_for_user(self, db: Session, *, user_id: str) -> int:
        return self._for_user(db, user_id=user_id, read_filter=ReadFilterEnum.UNREAD).count()

    def mark_as_read(self, db: Session, *, notification_id: str, user_id: str) -> Notification | None:
        notification = (
            db.query(self.model)
            .filter(self.model.id == notification_id, self.model.user_id == user_id)
            .first()
        )
        if notification and not notification.read:
            notification.read = True
            notification.read_at = datetime.now(timezone.utc)
            db.add(notification)
            db.commit()
            db.refresh(notification)
        return notification

    def mark_all_as_read(self, db: Session, *, user_id: str) -> int:
        updated = (
            db.query(self.model)
            .filter(self.model.user_id == user_id, self.model.read == False)
            .update({"read": True, "read_at": datetime.now(timezone.utc)}, synchronize_session=False)
        )
        db.commit()
        return updated

notification = CRUDNotification(Notification)
