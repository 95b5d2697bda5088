"""Shared fixtures for the RoomHub account tests.

Every test gets its own SQLite file under ``tmp_path``, bcrypt at cost 4 and
in-memory fakes for email delivery and image storage.
"""

from collections.abc import AsyncGenerator, Callable, Iterator
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from roomhub.application.services.admin_service import AdminService
from roomhub.application.services.profile_service import ProfileService
from roomhub.core.app_factory import build_container, create_application
from roomhub.core.config import Settings
from roomhub.core.container import ApplicationContainer
from roomhub.domain.models import Account, CodePurpose, Role
from roomhub.infrastructure.persistence.sqlite import SQLiteAccountRepository
from roomhub.services.account_service import AccountService
from roomhub.services.one_time_codes import OneTimeCodeEngine
from roomhub.services.password_hasher import CredentialHasher
from roomhub.services.phone_normalizer import PhoneNormalizer
from roomhub.services.token_service import TokenService, TokenSettings

# Test-only secrets; never used outside this suite.
TEST_ACCESS_SECRET = "test-access-secret-that-is-long-enough-for-hs256"
TEST_REFRESH_SECRET = "test-refresh-secret-that-is-long-enough-for-hs256"
TEST_PASSWORD = "Abcdef12"
_BCRYPT_ROUNDS = 4  # Low cost factor for fast tests


# ===================================================================
# Fakes
# ===================================================================


class FakeCodeDelivery:
    """Records every code it is asked to send instead of emailing it."""

    def __init__(self) -> None:
        self.enabled = True
        self.fail = False
        self.sent: List[Dict[str, Any]] = []

    def send_code(
        self,
        to_email: str,
        recipient_name: str,
        code: str,
        purpose: CodePurpose,
        resend: bool = False,
    ) -> bool:
        if self.fail:
            return False
        self.sent.append(
            {"to": to_email, "name": recipient_name, "code": code, "purpose": purpose, "resend": resend}
        )
        return True

    def last_code(self, email: str, purpose: CodePurpose = CodePurpose.EMAIL_VERIFICATION) -> str:
        for message in reversed(self.sent):
            if message["to"] == email and message["purpose"] is purpose:
                return message["code"]
        raise AssertionError(f"No {purpose.value} code was sent to {email}")


class FakeImageStorage:
    """Keeps uploaded images in memory and hands out Cloudinary-shaped URLs."""

    def __init__(self) -> None:
        self.enabled = True
        self.stored: Dict[str, bytes] = {}
        self.deleted: List[str] = []
        self._counter = 0

    def store(self, content: bytes, account_id: int) -> str:
        self._counter += 1
        url = (
            "https://res.cloudinary.com/demo/image/upload/"
            f"v1/roomhub/profile-photos/user_{account_id}_{self._counter}.jpg"
        )
        self.stored[url] = content
        return url

    def delete(self, url: str) -> None:
        self.deleted.append(url)
        self.stored.pop(url, None)


class FakeClock:
    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


# ===================================================================
# Service fixtures
# ===================================================================


@pytest.fixture
def repository(tmp_path) -> Iterator[SQLiteAccountRepository]:
    repo = SQLiteAccountRepository(tmp_path / "accounts.db")
    yield repo
    repo.close()


@pytest.fixture
def hasher() -> CredentialHasher:
    return CredentialHasher(rounds=_BCRYPT_ROUNDS)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def code_engine(repository, hasher, clock) -> OneTimeCodeEngine:
    return OneTimeCodeEngine(repository, hasher, ttl=timedelta(minutes=30), clock=clock)


@pytest.fixture
def phone() -> PhoneNormalizer:
    return PhoneNormalizer()


@pytest.fixture
def account_service(repository, hasher, code_engine, phone) -> AccountService:
    return AccountService(repository, hasher, code_engine, phone)


@pytest.fixture
def token_settings() -> TokenSettings:
    return TokenSettings(access_secret=TEST_ACCESS_SECRET, refresh_secret=TEST_REFRESH_SECRET)


@pytest.fixture
def token_service(token_settings, repository) -> TokenService:
    return TokenService(token_settings, repository)


@pytest.fixture
def image_storage() -> FakeImageStorage:
    return FakeImageStorage()


@pytest.fixture
def delivery() -> FakeCodeDelivery:
    return FakeCodeDelivery()


@pytest.fixture
def profile_service(account_service, image_storage) -> ProfileService:
    return ProfileService(account_service, image_storage, max_photo_bytes=1024)


@pytest.fixture
def admin_service(account_service, repository, image_storage) -> AdminService:
    return AdminService(account_service, repository, image_storage)


@pytest.fixture
def make_account(account_service) -> Callable[..., Account]:
    """Factory registering accounts with sensible defaults.

    Each call gets a fresh email and phone unless given explicitly.
    """
    counter = {"n": 0}

    def _make(**overrides: Any) -> Account:
        counter["n"] += 1
        n = counter["n"]
        data: Dict[str, Any] = {
            "name": "Ana",
            "last_name": "Perez",
            "email": f"user{n}@roomhub.cl",
            "region": "Metropolitana",
            "city": "Santiago",
            "phone": f"9{n:08d}",
            "password": TEST_PASSWORD,
            "role": Role.SEEKER,
        }
        data.update(overrides)
        if data["role"] is Role.ADMIN:
            data.setdefault("allowed_roles", tuple(Role))
        return account_service.register(**data)

    return _make


# ===================================================================
# API fixtures
# ===================================================================


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Settings:
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "api.db"))
    monkeypatch.setenv("JWT_ACCESS_SECRET", TEST_ACCESS_SECRET)
    monkeypatch.setenv("JWT_REFRESH_SECRET", TEST_REFRESH_SECRET)
    monkeypatch.setenv("BCRYPT_ROUNDS", str(_BCRYPT_ROUNDS))
    monkeypatch.setenv("DEBUG", "false")
    for key in ("ADMIN_EMAIL", "ADMIN_PASSWORD", "SMTP_HOST", "CLOUDINARY_CLOUD_NAME"):
        monkeypatch.delenv(key, raising=False)
    return Settings()


@pytest.fixture
def container(settings, delivery, image_storage) -> Iterator[ApplicationContainer]:
    built = build_container(settings, email_service=delivery, image_storage=image_storage)
    yield built
    built.repository.close()


@pytest.fixture
def app(settings, container):
    application = create_application()
    # ASGITransport does not run the lifespan, so the container is attached directly.
    application.state.container = container
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def create_user(container) -> Callable[..., Account]:
    """Create an account directly in the API's store."""
    counter = {"n": 0}

    def _create(role: Role = Role.SEEKER, verified: bool = True, **overrides: Any) -> Account:
        counter["n"] += 1
        n = counter["n"]
        data: Dict[str, Any] = {
            "name": "Ana",
            "last_name": "Perez",
            "email": f"member{n}@roomhub.cl",
            "region": "Metropolitana",
            "city": "Santiago",
            "phone": f"98{n:07d}",
            "password": TEST_PASSWORD,
        }
        data.update(overrides)
        return container.account_service.register(
            role=role,
            verified=verified,
            allowed_roles=tuple(Role),
            **data,
        )

    return _create


@pytest.fixture
def auth_headers(container) -> Callable[[Account], Dict[str, str]]:
    def _headers(account: Account) -> Dict[str, str]:
        pair = container.token_service.issue_pair(account)
        return {"Authorization": f"Bearer {pair.access_token}"}

    return _headers


@pytest.fixture
def user_with_token(create_user, auth_headers) -> Tuple[Account, Dict[str, str]]:
    account = create_user()
    return account, auth_headers(account)


@pytest.fixture
def admin_with_token(create_user, auth_headers) -> Tuple[Account, Dict[str, str]]:
    account = create_user(role=Role.ADMIN, email="admin@roomhub.cl", phone="900000000")
    return account, auth_headers(account)
