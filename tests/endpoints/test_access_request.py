from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.constants import ACCESS_REQUEST_EVENT, NOTIFICATION_EVENT, NOTIFICATIONS_CHANNEL, NotificationTypeEnum, RoleEnum
from app.models.access_request import AccessRequest
from app.models.notification import Notification

REQUEST = {
    "name": "Jordan Reyes",
    "email": "jordan@fund.example.com",
    "company": "Reyes Capital",
    "position": "Partner",
}


def test_access_request_is_stored_and_admins_alerted(client: TestClient, broadcaster, user_factory, db_session: Session):
    admin = user_factory(role=RoleEnum.ADMIN)
    user_factory(role=RoleEnum.ADMIN, disabled=True)
    user_factory(role=RoleEnum.TEAM)

    response = client.post("/auth/request-access", json=REQUEST)

    assert response.status_code == 200
    receipt = response.json()["data"]
    assert receipt["success"] is True

    stored = db_session.get(AccessRequest, receipt["id"])
    assert stored.company == "Reyes Capital"

    notifications = db_session.query(Notification).all()
    assert [n.user_id for n in notifications] == [admin.id]
    assert notifications[0].type == NotificationTypeEnum.ACCESS_REQUEST
    assert notifications[0].message == "Jordan Reyes from Reyes Capital (jordan@fund.example.com) requested access"

    events = [event for _, event, _ in broadcaster.on(NOTIFICATIONS_CHANNEL)]
    assert events == [ACCESS_REQUEST_EVENT, NOTIFICATION_EVENT]
    _, _, payload = broadcaster.calls[0]
    assert payload["accessRequestId"] == receipt["id"]


def test_access_request_without_admins_still_succeeds(client: TestClient, db_session: Session):
    response = client.post("/auth/request-access", json=REQUEST)

    assert response.status_code == 200
    assert db_session.query(AccessRequest).count() == 1
    assert db_session.query(Notification).count() == 0


def test_access_request_validates_email(client: TestClient):
    response = client.post("/auth/request-access", json={**REQUEST, "email": "not-an-email"})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
