import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL") or "sqlite:///./test.db"
os.environ["REALTIME_REDIS_URL"] = ""
os.environ["SECRET_KEY"] = "test-secret"
os.environ["PANDADOC_WEBHOOK_KEY"] = "correct"
os.environ["PANDADOC_API_KEY"] = "test-api-key"

import json
import uuid
import httpx
import pytest
from fastapi.testclient import TestClient

import main
from app.core.config import settings
from app.core.constants import OpportunityTypeEnum, RoleEnum
from app.core.database import Base, SessionLocal, engine
from app.core.security import create_access_token
from app.models.opportunity import (
    MergerAndAcquisition,
    OpportunityAccountManager,
    OpportunityAnalytics,
    RealEstate,
)
from app.models.user import User
from app.realtime.broadcaster import RealtimeBroadcaster
from app.services.notification import NotificationService
from app.services.pandadoc import PandaDocService
from app.utils.service_registry import ServiceRegistry


class RecordingBroadcaster(RealtimeBroadcaster):
    """Records every trigger instead of publishing it."""

    def __init__(self):
        super().__init__(client=None)
        self.calls = []

    @property
    def enabled(self) -> bool:
        return True

    def safe_trigger(self, channels, event, data):
        self.calls.append((channels, event, data))

    def on(self, channel):
        return [call for call in self.calls if call[0] == channel]


class FakePandaDocApi:
    """In-memory stand-in for the PandaDoc REST API, served through httpx.MockTransport."""

    def __init__(self):
        self.documents = {}
        self.requests = []
        self.created = []
        self.fail_with = None

    def add_document(self, document_id, status, metadata=None, name=None):
        self.documents[document_id] = {
            "id": document_id,
            "name": name or f"NDA {document_id}",
            "status": status,
            "metadata": metadata or {},
        }

    def _create(self, request):
        body = json.loads(request.content)
        self.created.append(body)
        document_id = f"doc-{len(self.documents) + 1}"
        self.add_document(document_id, "document.uploaded", metadata=body.get("metadata"), name=body.get("name"))
        return httpx.Response(201, json=self.documents[document_id])

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"detail": "Upstream failure"})

        parts = request.url.path.rstrip("/").split("/")
        rest = parts[parts.index("documents") + 1:] if "documents" in parts else None
        if rest == [] and request.method == "GET":
            query = request.url.params.get("q", "")
            return httpx.Response(200, json={
                "results": [doc for doc in self.documents.values() if query in doc["name"]]
            })
        if rest == [] and request.method == "POST":
            return self._create(request)
        if not rest or rest[0] not in self.documents:
            return httpx.Response(404, json={"detail": "Not found"})

        document = self.documents[rest[0]]
        action = rest[1] if len(rest) > 1 else None
        if action is None and request.method == "GET":
            # Documents created from a template finish processing after the first poll.
            if document["status"] == "document.uploaded":
                document["status"] = "document.draft"
            return httpx.Response(200, json=document)
        if action == "send" and request.method == "POST":
            document["status"] = "document.sent"
            return httpx.Response(200, json=document)
        if action == "session" and request.method == "POST":
            return httpx.Response(201, json={"id": f"sess-{document['id']}", "expires_at": "2026-01-01T01:00:00Z"})
        return httpx.Response(404, json={"detail": "Not found"})


@pytest.fixture(scope="session")
def database_engine():
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if settings.DATABASE_URL.startswith("sqlite:///./"):
        db_file = settings.DATABASE_URL.replace("sqlite:///./", "")
        if os.path.exists(db_file):
            os.remove(db_file)

@pytest.fixture(autouse=True)
def _clean_tables(database_engine):
    yield
    with database_engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())

@pytest.fixture(scope="function")
def db_session(database_engine):
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()

@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()

@pytest.fixture
def notification_service(broadcaster):
    service = NotificationService(SessionLocal, broadcaster, max_workers=4)
    yield service
    service.shutdown()

@pytest.fixture
def pandadoc_api():
    return FakePandaDocApi()

@pytest.fixture
def services(broadcaster, notification_service, pandadoc_api):
    return ServiceRegistry(
        broadcaster=broadcaster,
        notification=notification_service,
        pandadoc=PandaDocService(settings, transport=httpx.MockTransport(pandadoc_api.handler)),
        nda_template_id="tpl-nda",
    )

@pytest.fixture(scope="function")
def client(services):
    main.app.state.services = services
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.state.services = None

@pytest.fixture
def user_factory(db_session):
    def _user_factory(role=RoleEnum.INVESTOR, name="Test User", email=None, disabled=False):
        user = User(
            name=name,
            email=email or f"{role.value.lower()}-{uuid.uuid4().hex[:8]}@example.com",
            role=role,
            disabled=disabled,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _user_factory

@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _auth_headers

@pytest.fixture
def opportunity_factory(db_session):
    def _opportunity_factory(
        opportunity_type=OpportunityTypeEnum.MNA,
        name="Harbor Deal",
        acquisitioner=None,
        originator=None,
        followup=None,
        account_managers=(),
    ):
        analytics = None
        if followup is not None:
            analytics = OpportunityAnalytics(followup_person_id=followup.id)
            db_session.add(analytics)
            db_session.flush()

        model = MergerAndAcquisition if opportunity_type == OpportunityTypeEnum.MNA else RealEstate
        opp = model(
            name=name,
            client_acquisitioner_id=acquisitioner.id if acquisitioner else None,
            client_originator_id=originator.id if originator else None,
            analytics_id=analytics.id if analytics else None,
        )
        db_session.add(opp)
        db_session.flush()

        for manager in account_managers:
            db_session.add(OpportunityAccountManager(
                opportunity_id=opp.id, opportunity_type=opportunity_type, user_id=manager.id
            ))
        db_session.commit()
        db_session.refresh(opp)
        return opp
    return _opportunity_factory
