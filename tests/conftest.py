import pytest
from fastapi.testclient import TestClient
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.dialects.sqlite import base as sqlite_base
from sqlalchemy.orm import sessionmaker

import zopforms.models  # noqa: F401 — register models with Base.metadata
from zopforms.core.config import settings
from zopforms.core.database import Base, get_db
from zopforms.main import app as fastapi_app
from zopforms.models import Form, User
from zopforms.schemas.forms import FormSettings
from zopforms.services.auth import create_access_token, hash_password

# Enable debug mode for tests (allows non-HTTPS cookies in TestClient)
settings.DEBUG = True

# ---------------------------------------------------------------------------
# SQLite compatibility for PostgreSQL-specific types (JSONB)
# ---------------------------------------------------------------------------
sqlite_base.SQLiteTypeCompiler.visit_JSONB = lambda self, type_, **kw: self.visit_JSON(type_, **kw)

# In-memory SQLite for tests — no PostgreSQL dependency needed
TEST_DATABASE_URL = "sqlite://"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "strongpassword123"


@pytest.fixture(autouse=True)
def setup_db():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    """Provide a test database session."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    """TestClient with overridden DB dependency."""

    def _override_get_db():
        try:
            yield db
        finally:
            pass

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()


def create_test_user(db, name="Sita Sharma", email="sita@example.com", **overrides) -> User:
    """Insert a user directly into the DB and return it."""
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(PASSWORD),
        **overrides,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_header(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


def create_test_form(
    db,
    owner: User,
    *,
    title="Customer Survey",
    fields=None,
    settings=None,
    is_active=True,
) -> Form:
    """Insert a form directly into the DB. ``settings`` overrides the defaults."""
    if fields is None:
        fields = [
            {"id": "name", "type": "text", "label": "Full Name", "required": True},
            {
                "id": "source",
                "type": "radio",
                "label": "How did you find us?",
                "required": False,
                "options": ["TV", "Radio", "Internet"],
            },
        ]
    form = Form(
        user_id=owner.id,
        title=title,
        description="",
        fields=fields,
        settings=FormSettings(**(settings or {})).model_dump(),
        is_active=is_active,
    )
    db.add(form)
    db.commit()
    db.refresh(form)
    return form


@pytest.fixture
def make_user(db):
    return lambda **kwargs: create_test_user(db, **kwargs)


@pytest.fixture
def make_form(db, user):
    """Factory for forms owned by ``user`` unless ``owner`` is given."""

    def _make(owner=None, **kwargs):
        return create_test_form(db, owner or user, **kwargs)

    return _make


@pytest.fixture
def user(db) -> User:
    return create_test_user(db)


@pytest.fixture
def other_user(db) -> User:
    return create_test_user(db, name="Hari Thapa", email="hari@example.com")


@pytest.fixture
def headers(user) -> dict:
    return auth_header(user)


@pytest.fixture
def other_headers(other_user) -> dict:
    return auth_header(other_user)
