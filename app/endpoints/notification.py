from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, MIN_PAGE_SIZE, ReadFilterEnum
from app.models.user import User
from app.schemas.notification import MarkAllReadResult, Notification, NotificationPage, UnreadCount
from app.schemas.response import APIResponse
from app.services.notification import NotificationService
from app.utils import deps

router = APIRouter()

@router.get("/", response_model=APIResponse[NotificationPage])
async def get_my_notifications(
    db: Session = Depends(deps.get_db),
    user: User = Depends(deps.get_current_user),
    notifications: NotificationService = Depends(deps.get_notification_service),
    page: int = Query(DEFAULT_PAGE, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=MIN_PAGE_SIZE, le=MAX_PAGE_SIZE),
    read_filter: ReadFilterEnum = ReadFilterEnum.ALL,
):
    """Retrieve notifications for the current user, newest first."""
    data = notifications.get_user_notifications(
        db, user_id=user.id, page=page, page_size=page_size, read_filter=read_filter
    )
    return APIResponse(message="Notifications fetched successfully", data=data)

@router.get("/unread_count", response_model=APIResponse[UnreadCount])
async def get_unread_notifications_count(
    db: Session = Depends(deps.get_db),
    user: User = Depends(deps.get_current_user),
    notifications: NotificationService = Depends(deps.get_notification_service),
):
    """Get the count of unread notifications for the current user."""
    count = notifications.get_unread_count(db, user_id=user.id)
    return APIResponse(message="Unread notifications count fetched successfully", data=UnreadCount(count=count))

@router.post("/mark_all_read", response_model=APIResponse[MarkAllReadResult])
async def mark_all_notifications_as_read(
    db: Session = Depends(deps.get_db),
    user: User = Depends(deps.get_current_user),
    notifications: NotificationService = Depends(deps.get_notification_service),
):
    """Mark all unread notifications for the current user as read."""
    updated = notifications.mark_all_notifications_as_read(db, user_id=user.id)
    return APIResponse(message="All notifications marked as read", data=MarkAllReadResult(updated=updated))

@router.post("/{notification_id}/read", response_model=APIResponse[Notification])
async def mark_notification_as_read(
    notification_id: str,
    db: Session = Depends(deps.get_db),
    user: User = Depends(deps.get_current_user),
    notifications: NotificationService = Depends(deps.get_notification_service),
):
    """Mark a specific notification as read."""
    notification = notifications.mark_notification_as_read(db, notification_id=notification_id, user_id=user.id)
    if not notification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found or not authorized")
    return APIResponse(message="Notification marked as read", data=notification)
