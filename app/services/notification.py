"""Notification fan-out.

A business event becomes one ``Notification`` row per recipient plus at most
one realtime broadcast on the shared ``notifications`` channel. Notifications
are side effects: every method here logs and swallows its own failures so the
caller's primary operation never fails because of them.

Rows are written through their own sessions on a worker pool, so a batch of N
recipients is written concurrently and a failed write never touches the
caller's transaction.
"""
import asyncio
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Union

from sqlalchemy.orm import Session

from app.core.constants import (
    NOTIFICATIONS_CHANNEL,
    NOTIFICATION_EVENT,
    ReadFilterEnum,
    RoleEnum,
)
from app.crud.notification import notification as crud_notification
from app.crud.opportunity import opportunity as crud_opportunity
from app.crud.user import user as crud_user
from app.realtime.broadcaster import RealtimeBroadcaster
from app.schemas.notification import (
    Notification,
    NotificationBroadcast,
    NotificationContent,
    NotificationCreate,
    NotificationPage,
)
from app.schemas.opportunity import OpportunityRef

logger = logging.getLogger(__name__)

# One entry per write: the stored notification, None when the write failed,
# or the exception if the write task itself blew up.
Outcome = Union[Notification, None, BaseException]


class NotificationService:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        broadcaster: RealtimeBroadcaster,
        max_workers: int = 8,
    ):
        self.session_factory = session_factory
        self.broadcaster = broadcaster
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notifications")

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

    async def _run(self, fn, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, fn, *args)

    def _persist(self, notification_in: NotificationCreate) -> Notification:
        with self.session_factory() as db:
            db_obj = crud_notification.create(db, obj_in=notification_in)
            return Notification.model_validate(db_obj)

    def _enabled_user_ids(self, roles: Sequence[RoleEnum]) -> List[str]:
        with self.session_factory() as db:
            return crud_user.get_enabled_ids_by_roles(db, roles=roles)

    async def create_notification(self, notification_in: NotificationCreate, *, broadcast: bool = True) -> Optional[Notification]:
        try:
            notification = await self._run(self._persist, notification_in)
        except Exception as e:
            logger.error(f"[Notification] Failed to save to database: {e}", exc_info=True)
            return None

        if broadcast:
            envelope = NotificationBroadcast(
                id=notification.id,
                type=notification.type,
                title=notification.title,
                message=notification.message,
                opportunity_id=notification.opportunity_id,
                opportunity_type=notification.opportunity_type,
                created_at=notification.created_at,
            )
            self.broadcaster.safe_trigger(NOTIFICATIONS_CHANNEL, NOTIFICATION_EVENT, envelope.to_payload())

        return notification

    async def create_notifications(self, inputs: Sequence[NotificationCreate]) -> List[Outcome]:
        """Write one row per input concurrently, then send a single broadcast for the batch.

        The broadcast describes ``inputs[0]``; batches should share type, title and message.
        """
        if not inputs:
            return []

        results = await asyncio.gather(
            *(self.create_notification(notification_in, broadcast=False) for notification_in in inputs),
            return_exceptions=True,
        )

        first = inputs[0]
        envelope = NotificationBroadcast(
            type=first.type,
            title=first.title,
            message=first.message,
            opportunity_id=first.opportunity_id,
            opportunity_type=first.opportunity_type,
            created_at=datetime.now(timezone.utc),
        )
        self.broadcaster.safe_trigger(NOTIFICATIONS_CHANNEL, NOTIFICATION_EVENT, envelope.to_payload())

        return list(results)

    async def _notify_roles(self, content: NotificationContent, roles: Sequence[RoleEnum]) -> Optional[List[Outcome]]:
        try:
            recipient_ids = await self._run(self._enabled_user_ids, roles)
        except Exception as e:
            role_names = ", ".join(role.value for role in roles)
            logger.error(f"[Notification] Failed to resolve recipients for roles {role_names}: {e}", exc_info=True)
            return None

        inputs = [NotificationCreate(user_id=user_id, **content.model_dump()) for user_id in recipient_ids]
        return await self.create_notifications(inputs)

    async def notify_admins(self, content: NotificationContent) -> Optional[List[Outcome]]:
        return await self._notify_roles(content, [RoleEnum.ADMIN])

    async def notify_team_and_admins(self, content: NotificationContent) -> Optional[List[Outcome]]:
        return await self._notify_roles(content, [RoleEnum.ADMIN, RoleEnum.TEAM])

    def get_opportunity_involved_users(self, db: Session, ref: OpportunityRef) -> List[str]:
        """Users with a stake in the opportunity, each listed once.

        Covers the client acquisitioner, the client originator, the analytics
        follow-up contact and every assigned account manager.
        """
        user_ids: dict = {}
        try:
            opp = crud_opportunity.get(db, ref=ref)
            if opp is not None:
                user_ids.update(dict.fromkeys(filter(None, (
                    opp.client_acquisitioner_id,
                    opp.client_originator_id,
                    opp.analytics.followup_person_id if opp.analytics else None,
                ))))
            user_ids.update(dict.fromkeys(crud_opportunity.get_account_manager_ids(db, ref=ref)))
        except Exception as e:
            logger.error(f"[Notification] Failed to resolve users involved in {ref.kind.value} {ref.id}: {e}", exc_info=True)
            return []
        return list(user_ids)

    async def notify_involved_users(self, db: Session, ref: OpportunityRef, content: NotificationContent) -> List[Outcome]:
        user_ids = self.get_opportunity_involved_users(db, ref)
        inputs = [NotificationCreate(user_id=user_id, **content.model_dump()) for user_id in user_ids]
        return await self.create_notifications(inputs)

    def get_user_notifications(
        self,
        db: Session,
        *,
        user_id: str,
        page: int = 1,
        page_size: int = 20,
        read_filter: ReadFilterEnum = ReadFilterEnum.ALL,
    ) -> NotificationPage:
        items, total = crud_notification.get_page_for_user(
            db, user_id=user_id, skip=(page - 1) * page_size, limit=page_size, read_filter=read_filter
        )
        total_pages = math.ceil(total / page_size)
        return NotificationPage(
            items=[Notification.model_validate(item) for item in items],
            page=page,
            page_size=page_size,
            total_count=total,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        )

    def get_unread_count(self, db: Session, *, user_id: str) -> int:
        return crud_notification.count_unread_for_user(db, user_id=user_id)

    def mark_notification_as_read(self, db: Session, *, notification_id: str, user_id: str) -> Notification | None:
        n = crud_notification.mark_as_read(db, notification_id=notification_id, user_id=user_id)
        return Notification.model_validate(n) if n else None

    def mark_all_notifications_as_read(self, db: Session, *, user_id: str) -> int:
        return crud_notification.mark_all_as_read(db, user_id=user_id)
