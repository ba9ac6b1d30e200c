from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.constants import NOTIFICATIONS_CHANNEL, NotificationTypeEnum, OpportunityTypeEnum, RoleEnum
from app.models.interest import UserMergerAndAcquisitionInterest
from app.models.notification import Notification


def test_interest_defaults_when_nothing_recorded(client: TestClient, user_factory, auth_headers, opportunity_factory):
    user = user_factory()
    opp = opportunity_factory()

    response = client.get(f"/opportunities/MNA/{opp.id}/interest", headers=auth_headers(user))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["interested"] is False
    assert data["nda_signed"] is False


def test_unknown_opportunity_is_not_found(client: TestClient, user_factory, auth_headers):
    user = user_factory()
    response = client.get("/opportunities/MNA/does-not-exist/interest", headers=auth_headers(user))
    assert response.status_code == 404


def test_unknown_opportunity_type_is_rejected(client: TestClient, user_factory, auth_headers, opportunity_factory):
    user = user_factory()
    opp = opportunity_factory()
    response = client.get(f"/opportunities/CRYPTO/{opp.id}/interest", headers=auth_headers(user))
    assert response.status_code == 422


def test_opportunity_id_is_scoped_to_its_type(client: TestClient, user_factory, auth_headers, opportunity_factory):
    user = user_factory()
    opp = opportunity_factory(opportunity_type=OpportunityTypeEnum.MNA)
    response = client.get(f"/opportunities/REAL_ESTATE/{opp.id}/interest", headers=auth_headers(user))
    assert response.status_code == 404


def test_interest_then_no_interest_updates_one_record(client: TestClient, user_factory, auth_headers, opportunity_factory):
    user = user_factory()
    opp = opportunity_factory(opportunity_type=OpportunityTypeEnum.REAL_ESTATE)
    headers = auth_headers(user)

    first = client.post(f"/opportunities/REAL_ESTATE/{opp.id}/interest", headers=headers).json()["data"]
    assert first["interested"] is True

    second = client.post(
        f"/opportunities/REAL_ESTATE/{opp.id}/no-interest", json={"reason": "Outside mandate"}, headers=headers
    ).json()["data"]
    assert second["id"] == first["id"]
    assert second["interested"] is False
    assert second["not_interested_reason"] == "Outside mandate"


def test_sign_nda_records_and_notifies_staff(client: TestClient, broadcaster, user_factory, auth_headers, opportunity_factory, db_session: Session):
    investor = user_factory(name="Ana")
    admin = user_factory(role=RoleEnum.ADMIN)
    opp = opportunity_factory(name="Atlas")

    response = client.post(f"/opportunities/MNA/{opp.id}/nda", headers=auth_headers(investor))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["nda_signed"] is True
    assert data["interested"] is True

    notifications = db_session.query(Notification).all()
    assert [n.user_id for n in notifications] == [admin.id]
    assert notifications[0].type == NotificationTypeEnum.OPPORTUNITY_NDA_SIGNED
    assert notifications[0].message == "Ana signed NDA for Atlas (M&A)"
    assert len(broadcaster.on(NOTIFICATIONS_CHANNEL)) == 1


def test_sign_nda_survives_notification_failure(client: TestClient, user_factory, auth_headers, opportunity_factory, monkeypatch):
    def _boom(*args, **kwargs):
        raise RuntimeError("database is down")
    monkeypatch.setattr("app.crud.notification.notification.create", _boom, raising=True)
    investor = user_factory()
    user_factory(role=RoleEnum.ADMIN)
    opp = opportunity_factory()

    response = client.post(f"/opportunities/MNA/{opp.id}/nda", headers=auth_headers(investor))

    assert response.status_code == 200
    assert response.json()["data"]["nda_signed"] is True


def test_toggle_processed_requires_staff(client: TestClient, user_factory, auth_headers, opportunity_factory):
    investor = user_factory()
    team = user_factory(role=RoleEnum.TEAM)
    opp = opportunity_factory()
    interest = client.post(f"/opportunities/MNA/{opp.id}/interest", headers=auth_headers(investor)).json()["data"]
    url = f"/opportunities/MNA/{opp.id}/interests/{interest['id']}/processed"

    assert client.post(url, headers=auth_headers(investor)).status_code == 403

    response = client.post(url, headers=auth_headers(team))
    assert response.status_code == 200
    assert response.json()["data"]["processed"] is True

    assert client.post(url, headers=auth_headers(team)).json()["data"]["processed"] is False


def test_toggle_processed_unknown_interest(client: TestClient, user_factory, auth_headers, opportunity_factory):
    admin = user_factory(role=RoleEnum.ADMIN)
    opp = opportunity_factory()
    response = client.post(f"/opportunities/MNA/{opp.id}/interests/missing/processed", headers=auth_headers(admin))
    assert response.status_code == 404


def test_toggle_processed_is_scoped_to_the_opportunity_in_the_url(client: TestClient, user_factory, auth_headers, opportunity_factory, db_session: Session):
    investor = user_factory()
    admin = user_factory(role=RoleEnum.ADMIN)
    opp = opportunity_factory(name="Atlas")
    other_opp = opportunity_factory(name="Borealis")
    interest = client.post(f"/opportunities/MNA/{opp.id}/interest", headers=auth_headers(investor)).json()["data"]

    response = client.post(
        f"/opportunities/MNA/{other_opp.id}/interests/{interest['id']}/processed", headers=auth_headers(admin)
    )

    assert response.status_code == 404
    db_session.expire_all()
    assert db_session.get(UserMergerAndAcquisitionInterest, interest["id"]).processed is False


def test_nda_session_creates_document_and_returns_signing_url(client: TestClient, pandadoc_api, user_factory, auth_headers, opportunity_factory):
    investor = user_factory(name="Ana Silva")
    opp = opportunity_factory(opportunity_type=OpportunityTypeEnum.REAL_ESTATE, name="Atlas")

    response = client.post(f"/opportunities/REAL_ESTATE/{opp.id}/nda/session", headers=auth_headers(investor))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["document_id"] == "doc-1"
    assert data["signing_url"] == "https://app.pandadoc.com/s/sess-doc-1"

    body = pandadoc_api.created[0]
    assert body["template_uuid"] == "tpl-nda"
    assert body["name"] == f"NDA - Atlas - {investor.email}"
    assert body["metadata"] == {"userId": investor.id, "opportunityId": opp.id, "opportunityType": "REAL_ESTATE"}
    assert body["recipients"][0]["first_name"] == "Ana"
    assert pandadoc_api.documents["doc-1"]["status"] == "document.sent"


def test_nda_session_reuses_open_document(client: TestClient, pandadoc_api, user_factory, auth_headers, opportunity_factory):
    investor = user_factory()
    opp = opportunity_factory(name="Atlas")
    pandadoc_api.add_document("doc-7", "document.viewed", name=f"NDA - Atlas - {investor.email}")

    response = client.post(f"/opportunities/MNA/{opp.id}/nda/session", headers=auth_headers(investor))

    assert response.status_code == 200
    assert response.json()["data"]["document_id"] == "doc-7"
    assert pandadoc_api.created == []
    assert pandadoc_api.documents["doc-7"]["status"] == "document.viewed"


def test_nda_session_after_signing_is_a_conflict(client: TestClient, pandadoc_api, user_factory, auth_headers, opportunity_factory):
    investor = user_factory()
    opp = opportunity_factory()
    headers = auth_headers(investor)
    client.post(f"/opportunities/MNA/{opp.id}/nda", headers=headers)

    response = client.post(f"/opportunities/MNA/{opp.id}/nda/session", headers=headers)

    assert response.status_code == 409
    assert pandadoc_api.requests == []


def test_nda_session_without_template_is_unavailable(client: TestClient, services, pandadoc_api, user_factory, auth_headers, opportunity_factory, monkeypatch):
    monkeypatch.setattr(services.nda_signing, "template_id", "")
    investor = user_factory()
    opp = opportunity_factory()

    response = client.post(f"/opportunities/MNA/{opp.id}/nda/session", headers=auth_headers(investor))

    assert response.status_code == 503
    assert pandadoc_api.requests == []


def test_nda_session_provider_error_is_a_bad_gateway(client: TestClient, pandadoc_api, user_factory, auth_headers, opportunity_factory):
    pandadoc_api.fail_with = 500
    investor = user_factory()
    opp = opportunity_factory()

    response = client.post(f"/opportunities/MNA/{opp.id}/nda/session", headers=auth_headers(investor))

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "BAD_GATEWAY"
