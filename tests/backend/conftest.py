import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from pharmadir.config import Settings
from pharmadir.core import db as db_module
from pharmadir.core.context import build_context
from pharmadir.main import app
from pharmadir.schemas.identity import Role
from pharmadir.services.mailer import MailDeliveryError, NotificationDispatcher


TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL

TEST_SETTINGS = Settings(
    jwt_secret="pharmadir-test-secret-0123456789abcdef",
    client_url="http://client.test",
    public_api_url="http://testserver",
    mail_api_url=None,
    admin_password=None,
)


class RecordingMailer(NotificationDispatcher):
    """Keeps every message in memory instead of sending it."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def send(self, to: str, subject: str, html: str, text: str) -> None:
        if self.fail:
            raise MailDeliveryError("mail API unreachable")
        self.sent.append({"to": to, "subject": subject, "text": text})

    async def send_verification_email(self, to, link, name=None):
        await super().send_verification_email(to, link, name)
        self.sent[-1].update(kind="verify", link=link)

    async def send_password_reset_email(self, to, link, name=None):
        await super().send_password_reset_email(to, link, name)
        self.sent[-1].update(kind="reset", link=link)

    def last_link(self, kind: str, to: str) -> str:
        for msg in reversed(self.sent):
            if msg.get("kind") == kind and msg["to"] == to:
                return msg["link"]
        raise AssertionError(f"no {kind} mail sent to {to}")


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if getattr(Tortoise, "_inited", False):
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest_asyncio.fixture
async def db():
    """Fresh database for tests that talk to Tortoise directly."""
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest_asyncio.fixture
async def ctx(db, mailer):
    """Service container wired like production, with the recording mailer."""
    return build_context(TEST_SETTINGS, mailer=mailer)


@pytest_asyncio.fixture
async def client(ctx):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    app.state.context = ctx
    # Use ASGITransport without lifespan parameter (not supported in all httpx versions)
    try:
        transport = ASGITransport(app=app, lifespan="off")
    except TypeError:
        # Fallback for httpx versions that don't support lifespan parameter
        transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest_asyncio.fixture
async def create_user(ctx):
    """
    Factory fixture registering a user and marking the email verified.
    Returns (uid, email, password).
    """

    async def _create_user(password: str = "UserPass!23", name: str = "Test User") -> tuple[str, str, str]:
        email = f"{uuid.uuid4().hex[:8]}@example.com"
        await ctx.auth.register(email, password, name)
        account = await ctx.provider.get_account_by_email(email)
        await ctx.provider.update_account(account.uid, email_verified=True)
        return account.uid, email, password

    return _create_user


@pytest_asyncio.fixture
async def create_admin(ctx, create_user):
    """
    Factory fixture creating a verified user whose profile carries the ADMIN role.
    """

    async def _create_admin(password: str = "AdminPass!23") -> tuple[str, str, str]:
        uid, email, password = await create_user(password=password, name="Admin")
        await ctx.store.set("users", uid, {"role": Role.ADMIN.value}, merge=True)
        return uid, email, password

    return _create_admin


@pytest_asyncio.fixture
async def create_pharmacy(ctx):
    """
    Factory fixture writing a pharmacy document directly to the store.
    """

    async def _create_pharmacy(pharmacy_id: str | None = None, name: str = "Central Pharmacy") -> str:
        pharmacy_id = pharmacy_id or f"ph_{uuid.uuid4().hex[:8]}"
        await ctx.store.set("pharmacies", pharmacy_id, {"name": name, "address": "1 Main Street"})
        return pharmacy_id

    return _create_pharmacy


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    """

    async def _get_headers(email: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/v1/auth/login",
            json={"email": email, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["data"]["token"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers
