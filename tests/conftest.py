from datetime import date, datetime

import pytest
from beanie import init_beanie
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from app.api.routes.auth import get_password_hash, token_for
from app.models.counter import Counter
from app.models.personal_task import PersonalTask
from app.models.profile import Profile, UserRole
from app.models.work_request import Priority, WorkRequest, WorkStatus, to_datetime
from app.services.change_feed import change_feed
from app.services.webhook import webhook_service
from main import app


@pytest.fixture(autouse=True)
async def database(monkeypatch):
    """Fresh in-memory database for every test; outbound webhooks off"""
    client = AsyncMongoMockClient()
    await init_beanie(
        database=client["test_work_orders"],
        document_models=[WorkRequest, PersonalTask, Profile, Counter],
    )
    monkeypatch.setattr(webhook_service, "enabled", False)
    monkeypatch.setattr(change_feed, "_subscribers", set())
    yield client["test_work_orders"]


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def _profile(email: str, role: UserRole, name: str) -> Profile:
    profile = Profile(
        email=email,
        name=name,
        role=role,
        password_hash=get_password_hash("secret123"),
    )
    await profile.insert()
    return profile


@pytest.fixture
async def admin() -> Profile:
    return await _profile("admin@church.org", UserRole.ADMIN, "Pat Admin")


@pytest.fixture
async def employee() -> Profile:
    return await _profile("volunteer@church.org", UserRole.EMPLOYEE, "Vic Volunteer")


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {token_for(admin)['access_token']}"}


@pytest.fixture
def employee_headers(employee):
    return {"Authorization": f"Bearer {token_for(employee)['access_token']}"}


def make_request(**overrides) -> WorkRequest:
    """Unsaved work request with sensible defaults"""
    requested = overrides.pop("requested", date(2026, 3, 10))
    fields = dict(
        work_order_id="WO-1",
        requestor_name="Jane Doe",
        requestor_email="jane@church.org",
        department="worship",
        title="Replace stage lights",
        description="Two spotlights are out",
        location="Main sanctuary",
        priority=Priority.MEDIUM,
        requested_date=to_datetime(requested),
        status=WorkStatus.PENDING,
        created_at=datetime(2026, 3, 1, 9, 0),
        updated_at=datetime(2026, 3, 1, 9, 0),
    )
    fields.update(overrides)
    return WorkRequest(**fields)


@pytest.fixture
def work_request_factory():
    return make_request
