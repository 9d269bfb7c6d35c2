import os
import sys
import uuid
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ADMIN_SIGNUP_CODE", "let-me-admin")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.api.deps import get_repositories  # noqa: E402
from app.core.permissions import Role  # noqa: E402
from app.core.security import get_password_hash  # noqa: E402
from app.main import app  # noqa: E402
from app.models.ticket import Ticket, TicketPriority, TicketStatus  # noqa: E402
from app.models.user import User  # noqa: E402
from app.repositories.memory import memory_repositories  # noqa: E402
from app.utils.helpers import utcnow  # noqa: E402

PASSWORD = "correct-horse"


def make_user(role: Role = Role.CUSTOMER, fullname: str = None, email: str = None, is_active: bool = True) -> User:
    user_id = uuid.uuid4()
    now = utcnow()
    return User(
        id=user_id,
        fullname=fullname or f"{role.value.title()} {user_id.hex[:6]}",
        email=email or f"{user_id.hex[:10]}@example.com",
        hashed_password=get_password_hash(PASSWORD),
        role=role,
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )


def make_ticket(customer: User, status: TicketStatus = TicketStatus.OPEN, agent: User = None) -> Ticket:
    now = utcnow()
    return Ticket(
        id=uuid.uuid4(),
        title="Printer on fire",
        description="Smoke is coming out of tray 2",
        status=status,
        priority=TicketPriority.MEDIUM,
        customer_id=customer.id,
        customer_name=customer.fullname,
        customer_email=customer.email,
        assigned_agent_id=agent.id if agent else None,
        assigned_agent_name=agent.fullname if agent else None,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def repos():
    return memory_repositories()


@pytest.fixture
def client(repos):
    app.dependency_overrides[get_repositories] = lambda: repos
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client: TestClient, fullname: str, email: str, admin_code: str = None) -> dict:
    """Register through the API and return the user payload plus auth headers."""
    payload = {"fullname": fullname, "email": email, "password": PASSWORD}
    if admin_code:
        payload["admin_code"] = admin_code
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    body = response.json()
    return {"user": body["user"], "headers": {"Authorization": f"Bearer {body['access_token']}"}}
