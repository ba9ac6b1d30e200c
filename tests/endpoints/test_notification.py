import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.constants import NotificationTypeEnum, RoleEnum
from app.models.notification import Notification


@pytest.fixture
def notification_factory(db_session: Session):
    def _notification_factory(user, title="Commission resolved", read=False):
        notification = Notification(
            id=str(uuid.uuid4()),
            user_id=user.id,
            type=NotificationTypeEnum.COMMISSION_RESOLVED,
            title=title,
            message=f"{title} message",
            read=read,
        )
        db_session.add(notification)
        db_session.commit()
        return notification
    return _notification_factory


def test_requires_authentication(client: TestClient):
    response = client.get("/notifications/")
    assert response.status_code in (401, 403)


def test_disabled_user_is_forbidden(client: TestClient, user_factory, auth_headers):
    user = user_factory(disabled=True)
    response = client.get("/notifications/", headers=auth_headers(user))
    assert response.status_code == 403


def test_lists_only_own_notifications_with_paging(client: TestClient, user_factory, auth_headers, notification_factory):
    user = user_factory()
    other = user_factory()
    for i in range(3):
        notification_factory(user, title=f"mine {i}")
    notification_factory(other, title="theirs")

    response = client.get("/notifications/", params={"page": 1, "page_size": 2}, headers=auth_headers(user))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_count"] == 3
    assert data["total_pages"] == 2
    assert data["has_next_page"] is True
    assert len(data["items"]) == 2
    assert all(item["user_id"] == user.id for item in data["items"])

    second = client.get("/notifications/", params={"page": 2, "page_size": 2}, headers=auth_headers(user)).json()["data"]
    assert len(second["items"]) == 1
    assert second["has_previous_page"] is True
    assert second["has_next_page"] is False


def test_read_filter(client: TestClient, user_factory, auth_headers, notification_factory):
    user = user_factory()
    notification_factory(user, title="old", read=True)
    notification_factory(user, title="new")

    unread = client.get("/notifications/", params={"read_filter": "unread"}, headers=auth_headers(user)).json()["data"]
    read = client.get("/notifications/", params={"read_filter": "read"}, headers=auth_headers(user)).json()["data"]

    assert [item["title"] for item in unread["items"]] == ["new"]
    assert [item["title"] for item in read["items"]] == ["old"]


def test_page_size_is_bounded(client: TestClient, user_factory, auth_headers):
    user = user_factory()
    response = client.get("/notifications/", params={"page_size": 1000}, headers=auth_headers(user))
    assert response.status_code == 422


def test_unread_count_and_mark_read(client: TestClient, user_factory, auth_headers, notification_factory):
    user = user_factory()
    first = notification_factory(user, title="one")
    notification_factory(user, title="two")
    headers = auth_headers(user)

    assert client.get("/notifications/unread_count", headers=headers).json()["data"]["count"] == 2

    response = client.post(f"/notifications/{first.id}/read", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["read"] is True
    assert response.json()["data"]["read_at"] is not None

    assert client.get("/notifications/unread_count", headers=headers).json()["data"]["count"] == 1


def test_cannot_mark_someone_elses_notification(client: TestClient, user_factory, auth_headers, notification_factory, db_session: Session):
    owner = user_factory()
    intruder = user_factory(role=RoleEnum.ADMIN)
    notification = notification_factory(owner)

    response = client.post(f"/notifications/{notification.id}/read", headers=auth_headers(intruder))

    assert response.status_code == 404
    db_session.expire_all()
    assert db_session.get(Notification, notification.id).read is False


def test_mark_all_read(client: TestClient, user_factory, auth_headers, notification_factory):
    user = user_factory()
    other = user_factory()
    for _ in range(3):
        notification_factory(user)
    notification_factory(other)

    response = client.post("/notifications/mark_all_read", headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json()["data"]["updated"] == 3
    assert client.get("/notifications/unread_count", headers=auth_headers(user)).json()["data"]["count"] == 0
    assert client.get("/notifications/unread_count", headers=auth_headers(other)).json()["data"]["count"] == 1
