"""
Pytest fixtures for movement journal backend tests.

Provides test database setup, one user per role with auth headers, and a
test client.
"""

import pytest
from movement_journal import create_app
from movement_journal.extensions import db
from movement_journal.models import Movement, User
from movement_journal.permissions import (
    FIELD_ENGINEER,
    SENIOR_FIELD_ENGINEER,
    SYSTEM_ADMINISTRATOR,
)
from movement_journal.services import session_service
from movement_journal.services.auth_service import hash_password


PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'UPLOAD_FOLDER': str(tmp_path_factory.mktemp('uploads')),
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='session')
def password_hash():
    """bcrypt is deliberately slow; hash the shared test password once."""
    return hash_password(PASSWORD)


@pytest.fixture(scope='function')
def make_user(db_session, password_hash):
    """Factory: create a user directly in the database."""
    counter = {"n": 0}

    def _make_user(role=FIELD_ENGINEER, *, username=None, supervisor=None, districts=None, **fields):
        counter["n"] += 1
        user = User(
            username=username or f"user{counter['n']}",
            password_hash=password_hash,
            full_name=fields.pop("full_name", f"Test User {counter['n']}"),
            role=role,
            supervisor_id=supervisor.id if supervisor else None,
            status=fields.pop("status", "active"),
            **fields,
        )
        user.set_districts(districts or [])
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture(scope='function')
def make_movement(db_session):
    """Factory: insert a movement in any state without going through the API."""
    def _make_movement(staff, *, date="2026-01-15", status="pending", **fields):
        movement = Movement(staff_id=staff.id, date=date, status=status, **fields)
        db_session.add(movement)
        db_session.commit()
        return movement

    return _make_movement


@pytest.fixture(scope='function')
def admin(make_user):
    return make_user(SYSTEM_ADMINISTRATOR, username="admin", full_name="Ada Admin")


@pytest.fixture(scope='function')
def supervisor(make_user):
    return make_user(
        SENIOR_FIELD_ENGINEER,
        username="senior",
        full_name="Sam Senior",
        districts=["North"],
    )


@pytest.fixture(scope='function')
def other_supervisor(make_user):
    return make_user(
        SENIOR_FIELD_ENGINEER,
        username="senior2",
        full_name="Olive Other",
        districts=["South"],
    )


@pytest.fixture(scope='function')
def engineer(make_user, supervisor):
    """Field Engineer reporting to `supervisor`."""
    return make_user(
        FIELD_ENGINEER,
        username="engineer",
        full_name="Fred Field",
        supervisor=supervisor,
        districts=["East"],
    )


def get_auth_token(client, username: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def headers_for(user) -> dict:
    """Issue a session directly (skips bcrypt verification) and build headers."""
    _, token = session_service.create_session(user.id)
    return auth_headers(token)


@pytest.fixture(scope='function')
def admin_headers(admin):
    return headers_for(admin)


@pytest.fixture(scope='function')
def supervisor_headers(supervisor):
    return headers_for(supervisor)


@pytest.fixture(scope='function')
def other_supervisor_headers(other_supervisor):
    return headers_for(other_supervisor)


@pytest.fixture(scope='function')
def engineer_headers(engineer):
    return headers_for(engineer)
