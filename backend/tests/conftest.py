"""
Pytest configuration and shared fixtures.

Tests run the app in-process against a throw-away SQLite database. Object
storage and outgoing email are replaced by in-memory fakes.
"""

import os
import tempfile
import uuid
from typing import List, Optional

# Environment must be in place before config.settings is imported
_TEST_DIR = tempfile.mkdtemp(prefix="journal-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["LOG_DIR"] = os.path.join(_TEST_DIR, "logs")
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["ADMIN_NOTIFICATION_EMAIL"] = "editors@journal.test"
os.environ["SMTP_USERNAME"] = ""
os.environ["SMTP_PASSWORD"] = ""
os.environ["AUTH_EMAIL_HOOK_SECRET"] = ""

import httpx
import pytest

from database import AsyncSessionLocal, drop_async_db, init_async_db
from main import app
from models import AppRole, UserRoleAssignment
from services.email_service import get_email_service
from services.storage_service import StorageService, get_storage_service

TEST_PASSWORD = "TestPass123!"


# ═══════════════════════════════════════════════════════════════════════════
# Fakes
# ═══════════════════════════════════════════════════════════════════════════


class FakeS3Client:
    """Records put_object calls and hands out predictable signed URLs."""

    def __init__(self):
        self.objects = {}

    def put_object(self, Bucket, Key, Body, **kwargs):
        self.objects[(Bucket, Key)] = {"body": Body, **kwargs}

    def generate_presigned_url(self, operation, Params, ExpiresIn):
        return f"https://signed.test/{Params['Bucket']}/{Params['Key']}?expires={ExpiresIn}"


class EmailOutbox:
    """Collects every email the app tries to send."""

    def __init__(self):
        self.messages: List[dict] = []

    async def send_html_email(self, to_email, subject, html_content, text_content=None, from_name=None):
        self.messages.append({
            "to": to_email,
            "subject": subject,
            "html": html_content,
            "from_name": from_name,
        })
        return True

    def to(self, address: str) -> List[dict]:
        return [m for m in self.messages if m["to"] == address]


# ═══════════════════════════════════════════════════════════════════════════
# APIClient: HTTP client for flow tests
# ═══════════════════════════════════════════════════════════════════════════


class APIClient:
    """httpx.AsyncClient over the ASGI app, with auth helpers."""

    def __init__(self):
        self.http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
        self.token: Optional[str] = None
        self.user_id: Optional[int] = None
        self.email: Optional[str] = None

    def _headers(self, kwargs: dict) -> dict:
        headers = dict(kwargs.pop("headers", None) or {})
        if self.token:
            headers.setdefault("Authorization", f"Bearer {self.token}")
        return headers

    async def register(self, email: str, password: str = TEST_PASSWORD, full_name: Optional[str] = None) -> httpx.Response:
        """POST /api/auth/register (JSON body)."""
        payload = {"email": email, "password": password}
        if full_name:
            payload["full_name"] = full_name
        resp = await self.http.post("/api/auth/register", json=payload)
        if resp.status_code == 200:
            data = resp.json()
            self.token = data["access_token"]
            self.user_id = data["user_id"]
            self.email = data["email"]
        return resp

    async def login(self, email: str, password: str = TEST_PASSWORD) -> httpx.Response:
        """POST /api/auth/login (form-encoded, field name 'username')."""
        resp = await self.http.post("/api/auth/login", data={"username": email, "password": password})
        if resp.status_code == 200:
            data = resp.json()
            self.token = data["access_token"]
            self.user_id = data["user_id"]
            self.email = data["email"]
        return resp

    async def get(self, path: str, **kwargs) -> httpx.Response:
        return await self.http.get(path, headers=self._headers(kwargs), **kwargs)

    async def post(self, path: str, **kwargs) -> httpx.Response:
        return await self.http.post(path, headers=self._headers(kwargs), **kwargs)

    async def put(self, path: str, **kwargs) -> httpx.Response:
        return await self.http.put(path, headers=self._headers(kwargs), **kwargs)

    async def delete(self, path: str, **kwargs) -> httpx.Response:
        return await self.http.delete(path, headers=self._headers(kwargs), **kwargs)

    async def aclose(self):
        await self.http.aclose()


async def grant_role(user_id: int, role: AppRole) -> None:
    """Grant a role directly in the store, bypassing the admin API."""
    async with AsyncSessionLocal() as session:
        session.add(UserRoleAssignment(user_id=user_id, role=role))
        await session.commit()


# ═══════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════


@pytest.fixture(autouse=True)
async def database():
    """Fresh tables for every test."""
    await init_async_db()
    yield
    await drop_async_db()


@pytest.fixture
def s3_client():
    client = FakeS3Client()
    app.dependency_overrides[get_storage_service] = lambda: StorageService(client=client)
    yield client
    app.dependency_overrides.pop(get_storage_service, None)


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    box = EmailOutbox()
    monkeypatch.setattr(get_email_service(), "send_html_email", box.send_html_email)
    return box


@pytest.fixture
async def make_client():
    """Factory for API clients; registers a fresh user unless anonymous=True."""
    clients: List[APIClient] = []

    async def _make(anonymous: bool = False, role: Optional[AppRole] = None, full_name: Optional[str] = None) -> APIClient:
        client = APIClient()
        clients.append(client)
        if anonymous:
            return client
        email = f"user_{uuid.uuid4().hex[:8]}@test.example.com"
        resp = await client.register(email, full_name=full_name)
        assert resp.status_code == 200, f"Registration failed: {resp.text}"
        if role is not None:
            await grant_role(client.user_id, role)
            # Fresh token so the role claim is current
            resp = await client.login(email)
            assert resp.status_code == 200, resp.text
        return client

    yield _make

    for client in clients:
        await client.aclose()


@pytest.fixture
async def anon(make_client) -> APIClient:
    return await make_client(anonymous=True)


@pytest.fixture
async def user(make_client) -> APIClient:
    return await make_client(full_name="Dana Reader")


@pytest.fixture
async def admin(make_client) -> APIClient:
    return await make_client(role=AppRole.ADMIN, full_name="Ada Admin")


@pytest.fixture
async def reviewer(make_client) -> APIClient:
    return await make_client(role=AppRole.REVIEWER, full_name="Rita Reviewer")


@pytest.fixture
def create_article(admin):
    """Factory: create an article through the admin API, optionally published."""

    async def _create(title: str = "Flap Reconstruction Outcomes", publish: bool = True, **fields) -> dict:
        resp = await admin.post("/api/admin/articles", json={"title": title, **fields})
        assert resp.status_code == 201, f"Article creation failed: {resp.text}"
        article = resp.json()
        if publish:
            resp = await admin.post(f"/api/admin/articles/{article['id']}/publish")
            assert resp.status_code == 200, resp.text
            article = next(a for a in resp.json() if a["id"] == article["id"])
        return article

    return _create


@pytest.fixture
def create_submission():
    """Factory: submit a manuscript as the given client."""

    async def _create(client: APIClient, title: str = "Burn Scar Laser Therapy", **fields) -> dict:
        payload = {
            "title": title,
            "abstract": "A prospective study.",
            "authors": "A. Author, B. Author",
            **fields,
        }
        resp = await client.post("/api/submissions", json=payload)
        assert resp.status_code == 201, f"Submission failed: {resp.text}"
        return resp.json()

    return _create
