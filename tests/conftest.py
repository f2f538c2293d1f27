# tests/conftest.py
from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-techcircle")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from techcircle.core.security import create_access_token
from techcircle.db.session import Base, enable_sqlite_foreign_keys
from techcircle.db.session import get_db as app_get_session
from techcircle.main import app as fastapi_app
from techcircle.models import AppRole, ApprovalStatus, Community, Profile, RoleAssignment
from techcircle.services.access import AccessContext, resolve_access
from techcircle.services.roles import RoleResolver
from techcircle.services.session_context import session_hub

TEST_DB_URL = "sqlite://"


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    """A fresh in-memory database per test, with FK cascades enforced."""
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def reset_session_hub() -> Iterator[None]:
    yield
    session_hub.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def resolver() -> RoleResolver:
    """Resolver with the legacy fallback pinned on, independent of the environment."""
    return RoleResolver(legacy_fallback=True)


@pytest.fixture()
def make_profile(db_session: Session) -> Callable[..., Profile]:
    """Factory for persisted profiles.

    ``admin=True`` adds an unscoped admin assignment; ``roles`` adds further
    assignment rows; ``legacy_role`` fills the old free-text column.
    """

    def _make(
        name: str = "Member",
        status: ApprovalStatus = ApprovalStatus.APPROVED,
        admin: bool = False,
        roles: tuple[AppRole, ...] = (),
        legacy_role: str | None = None,
    ) -> Profile:
        profile = Profile(id=str(uuid.uuid4()), name=name, status=status, role=legacy_role)
        db_session.add(profile)
        granted = list(roles) + ([AppRole.ADMIN] if admin else [])
        for role in granted:
            db_session.add(RoleAssignment(user_id=profile.id, role=role))
        db_session.commit()
        db_session.refresh(profile)
        return profile

    return _make


@pytest.fixture()
def context_for(db_session: Session, resolver: RoleResolver) -> Callable[[Profile], AccessContext]:
    def _context(profile: Profile) -> AccessContext:
        return resolve_access(db_session, profile.id, resolver)

    return _context


@pytest.fixture()
def alice(make_profile) -> Profile:
    return make_profile("Alice")


@pytest.fixture()
def bob(make_profile) -> Profile:
    return make_profile("Bob")


@pytest.fixture()
def admin(make_profile) -> Profile:
    return make_profile("Admin", admin=True)


@pytest.fixture()
def pending_user(make_profile) -> Profile:
    return make_profile("Pending", status=ApprovalStatus.PENDING)


def auth_headers(user_id: str) -> dict[str, str]:
    """Return authorization headers for ``user_id``."""
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture()
def headers_for() -> Callable[[str], dict[str, str]]:
    return auth_headers


@pytest.fixture()
def alice_headers(alice: Profile) -> dict[str, str]:
    return auth_headers(alice.id)


@pytest.fixture()
def bob_headers(bob: Profile) -> dict[str, str]:
    return auth_headers(bob.id)


@pytest.fixture()
def admin_headers(admin: Profile) -> dict[str, str]:
    return auth_headers(admin.id)


@pytest.fixture()
def community(db_session: Session) -> Iterator[Community]:
    """Create a default test community."""
    community = Community(slug="ai-ml", name="AI & ML")
    db_session.add(community)
    db_session.commit()
    db_session.refresh(community)
    yield community
