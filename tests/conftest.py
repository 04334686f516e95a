"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any
from uuid import uuid4

# Disable rate limiting and the background recheck loop in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DOMAIN_RECHECK_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities.domain_verification import SslStatus
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base, UserModel
from infrastructure.domains.provider import CnameLookup


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

BASE_DOMAIN = "namedrop.cv"
CNAME_TARGET = "custom.namedrop.cv"

# Fixed test user ID for consistency
TEST_USER_ID = uuid4()

UserFactory = Callable[..., Awaitable[tuple[TokenUser, dict[str, str]]]]


class FakeDomainAuthority:
    """In-memory DNS/SSL authority.

    ``cnames`` maps a host to the CNAME target it currently points at.
    """

    def __init__(self) -> None:
        self.cnames: dict[str, str] = {}
        self.ssl_status = SslStatus.ISSUED
        self.certificates_requested: list[str] = []

    async def resolve_cname(self, domain: str) -> CnameLookup:
        target = self.cnames.get(domain)
        if target is None:
            return CnameLookup()
        return CnameLookup(
            target=target,
            ttl=300,
            records=[{"type": "CNAME", "name": domain, "value": target, "ttl": 300}],
        )

    async def issue_certificate(self, domain: str) -> SslStatus:
        self.certificates_requested.append(domain)
        return self.ssl_status


class MovableClock:
    """Clock shared by the services under test; tests may move it forward."""

    def __init__(self) -> None:
        self.offset = timedelta(0)

    def advance(self, **kwargs: float) -> None:
        self.offset += timedelta(**kwargs)

    def __call__(self) -> datetime:
        return datetime.utcnow() + self.offset


def _provide(instance: Any) -> Callable[[], Any]:
    def dependency() -> Any:
        return instance

    return dependency


@pytest.fixture(scope="session")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
    )
    yield engine
    await engine.dispose()


@pytest.fixture(scope="session")
async def setup_database(engine: AsyncEngine) -> AsyncGenerator[None, None]:
    """Create all tables once per session."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(scope="session")
async def session_factory(
    engine: AsyncEngine, setup_database: None
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create session factory."""
    factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    yield factory


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user with fixed ID."""
    return TokenUser(
        id=TEST_USER_ID,
        email="test@example.com",
        display_name="Test User",
        first_name="Test",
        last_name="User",
    )


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def make_user(
    session_factory: async_sessionmaker[AsyncSession],
    auth_provider: JWTAuthProvider,
) -> UserFactory:
    """
    Insert a fresh user row and return it with its authorization headers.

    Every call yields a new identity so tests sharing the session database
    never collide on usernames or emails.
    """

    async def _make(
        is_pro: bool = False,
        is_admin: bool = False,
        is_banned: bool = False,
    ) -> tuple[TokenUser, dict[str, str]]:
        user_id = uuid4()
        token_user = TokenUser(id=user_id, email=f"{user_id.hex}@example.com")
        async with session_factory() as session:
            session.add(
                UserModel(
                    id=user_id,
                    email=token_user.email,
                    is_pro=is_pro,
                    is_admin=is_admin,
                    is_banned=is_banned,
                )
            )
            await session.commit()
        token = auth_provider.create_token(token_user)
        return token_user, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def unique_slug() -> Callable[[], str]:
    """Generate usernames that are unique across the test session."""
    return lambda: f"u{uuid4().hex[:12]}"


@pytest.fixture
def make_profile(
    app_client: AsyncClient,
    make_user: UserFactory,
    unique_slug: Callable[[], str],
) -> Callable[..., Awaitable[tuple[dict[str, Any], dict[str, str]]]]:
    """Create a user with a filled-in profile, published unless told otherwise."""

    async def _make(
        publish: bool = True, is_pro: bool = False, **fields: Any
    ) -> tuple[dict[str, Any], dict[str, str]]:
        _, headers = await make_user(is_pro=is_pro)
        response = await app_client.post(
            "/api/v1/profiles", json={"slug": unique_slug()}, headers=headers
        )
        assert response.status_code == 201, response.text

        body = {"name": "Ada Lovelace", "bio": "Analytical engines.", **fields}
        response = await app_client.patch("/api/v1/profiles/me", json=body, headers=headers)
        assert response.status_code == 200, response.text

        if publish:
            response = await app_client.post("/api/v1/profiles/me/publish", headers=headers)
            assert response.status_code == 200, response.text
        return response.json()["data"], headers

    return _make


@pytest.fixture
def domain_authority() -> FakeDomainAuthority:
    """Fake DNS/SSL authority shared by the app under test."""
    return FakeDomainAuthority()


@pytest.fixture
def clock() -> MovableClock:
    """Real time unless a test moves it forward."""
    return MovableClock()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def app_client(
    session_factory: async_sessionmaker[AsyncSession],
    auth_provider: JWTAuthProvider,
    domain_authority: FakeDomainAuthority,
    clock: MovableClock,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client wired to the test database.

    This client:
    - Uses an in-memory SQLite database
    - Validates bearer tokens minted by the ``auth_provider`` fixture
    - Overrides every service to use a UoW factory bound to the test session
    - Replaces DNS and certificate calls with ``domain_authority``
    """
    from api.dependencies.auth import get_auth_provider
    from api.dependencies.services import (
        get_admin_log_service,
        get_admin_service,
        get_analytics_service,
        get_domain_verification_service,
        get_moderation_service,
        get_profile_service,
        get_user_service,
    )
    from domain.services.admin_log_service import AdminLogService
    from domain.services.admin_service import AdminService
    from domain.services.analytics_service import AnalyticsService
    from domain.services.domain_verification_service import DomainVerificationService
    from domain.services.moderation_service import ModerationService
    from domain.services.profile_service import ProfileService
    from domain.services.user_service import UserService
    from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
    from main import create_app

    app = create_app()

    # Create a UoW factory that uses test session
    def test_uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    admin_log_service = AdminLogService(test_uow_factory)
    services: dict[Callable[..., Any], Any] = {
        get_admin_log_service: admin_log_service,
        get_user_service: UserService(test_uow_factory, clock=clock),
        get_admin_service: AdminService(
            test_uow_factory, admin_log_service=admin_log_service, clock=clock
        ),
        get_profile_service: ProfileService(
            test_uow_factory, base_domain=BASE_DOMAIN, clock=clock
        ),
        get_analytics_service: AnalyticsService(test_uow_factory, clock=clock),
        get_domain_verification_service: DomainVerificationService(
            test_uow_factory,
            domain_authority,
            cname_target=CNAME_TARGET,
            base_domain=BASE_DOMAIN,
            clock=clock,
        ),
        get_moderation_service: ModerationService(
            test_uow_factory, admin_log_service=admin_log_service, clock=clock
        ),
    }

    for dependency, instance in services.items():
        app.dependency_overrides[dependency] = _provide(instance)
    app.dependency_overrides[get_auth_provider] = _provide(auth_provider)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(
    app_client: AsyncClient, auth_headers: dict[str, str]
) -> AsyncClient:
    """The wired test client, signed in as ``test_user``."""
    app_client.headers.update(auth_headers)
    return app_client
