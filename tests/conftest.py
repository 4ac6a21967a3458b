import os

# Must be set before the package reads its configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["FIREBASE_PROJECT_ID"] = "test-project"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest  # noqa: E402
from factories import make_client, make_interpreter, make_user  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from interpreter_booking.auth import get_current_user  # noqa: E402
from interpreter_booking.database import Base, SessionLocal, engine  # noqa: E402
from interpreter_booking.main import app  # noqa: E402
from interpreter_booking.models import User, UserRole  # noqa: E402


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client_org(db):
    return make_client(db)


@pytest.fixture
def interpreter(db):
    return make_interpreter(db)


@pytest.fixture
def admin_user(db):
    return make_user(db, UserRole.ADMIN, email="admin@example.com")


@pytest.fixture
def client_user(db, client_org):
    return make_user(db, UserRole.CLIENT, profile_id=client_org.id)


@pytest.fixture
def interpreter_user(db, interpreter):
    return make_user(db, UserRole.INTERPRETER, profile_id=interpreter.id)


@pytest.fixture
def api(db):
    """TestClient whose requests run as the user passed to ``api.as_user``"""
    client = TestClient(app)

    def as_user(user: User):
        # Detached copy so request threads never touch the test session
        snapshot = User(
            id=user.id,
            firebase_uid=user.firebase_uid,
            email=user.email,
            role=user.role,
            profile_id=user.profile_id,
            status=user.status,
        )
        app.dependency_overrides[get_current_user] = lambda: snapshot
        return client

    client.as_user = as_user
    yield client
    app.dependency_overrides.clear()
