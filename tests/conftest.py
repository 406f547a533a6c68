import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from paydesk.main import app
from paydesk.core.auth import create_access_token
from paydesk.db.mongo import create_indexes, mongodb
from paydesk.models.period import PayPeriod
from paydesk.models.scope import Credentials, RoleScope
from paydesk.models.user import Role, SessionIdentity
from paydesk.services.shared_link_service import SharedLinkService

TEST_DATABASE_NAME = "paydesk_test"


@pytest_asyncio.fixture
async def test_db(monkeypatch):
    """In-memory database with the production indexes, wired into the services."""
    client = AsyncMongoMockClient()
    db = client[TEST_DATABASE_NAME]
    await create_indexes(db)

    monkeypatch.setattr(mongodb, "db", db)
    yield db


@pytest_asyncio.fixture
async def api_client(test_db):
    """HTTP client against the app; startup hooks are not run."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def make_user(test_db):
    """Insert a user-directory entry, returning its id as a string."""
    async def _make_user(name, hourly_rate=25.0, role=Role.DEVELOPER, bank_details=None):
        doc = {
            "name": name,
            "email": f"{name.lower().replace(' ', '.')}@example.com",
            "role": Role(role).value,
            "hourly_rate": hourly_rate,
        }
        if bank_details is not None:
            doc["bank_details"] = bank_details
        result = await test_db["users"].insert_one(doc)
        return str(result.inserted_id)
    return _make_user


@pytest.fixture
def log_hours(test_db):
    """Insert a time log entry (approved unless told otherwise)."""
    async def _log_hours(user_id, date, hours, status="approved"):
        await test_db["time_logs"].insert_one({
            "user_id": user_id,
            "date": date,
            "hours": hours,
            "status": status,
            "summary": "work",
        })
    return _log_hours


def session_credentials(role, name="Test User"):
    return Credentials(session=SessionIdentity(id=str(ObjectId()), name=name, role=role))


@pytest.fixture
def manager_credentials():
    return session_credentials(Role.MANAGER, name="Maya Manager")


@pytest.fixture
def finance_credentials():
    return session_credentials(Role.FINANCE, name="Fin Ops")


@pytest.fixture
def developer_credentials():
    return session_credentials(Role.DEVELOPER, name="Dev Eloper")


@pytest.fixture
def manager_scope(manager_credentials):
    session = manager_credentials.session
    return RoleScope(user_id=session.id, name=session.name, role=session.role)


@pytest.fixture
def mint_token(test_db, manager_scope):
    """Mint a shared link and return its token."""
    async def _mint(month=3, year=2026, period=PayPeriod.P1):
        link = await SharedLinkService.mint(month, year, period, manager_scope)
        return link.token
    return _mint


def auth_headers(role, name="Test User", user_id=None):
    token = create_access_token(user_id or str(ObjectId()), role, name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def manager_headers():
    return auth_headers(Role.MANAGER, name="Maya Manager")


@pytest.fixture
def developer_headers():
    return auth_headers(Role.DEVELOPER, name="Dev Eloper")


@pytest.fixture
def finance_headers():
    return auth_headers(Role.FINANCE, name="Fin Ops")
