"""Shared test fixtures."""
import pytest

from backoffice.app import create_app
from backoffice.config import TestingConfig
from backoffice.extensions import db as _db
from backoffice.models import Role, RoleName, User


@pytest.fixture
def app():
    """Application on an in-memory SQLite database with a fresh schema."""
    app = create_app(TestingConfig)

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def make_user(db):
    """
    Factory persisting an active, verified user with the given roles.

    Usage:
        user = make_user("jdoe", roles=["OPERATOR"])
    """

    def _make_user(username="jdoe", roles=("USER",), password_hash="not-a-hash", **fields):
        user = User(
            username=username,
            email=fields.pop("email", f"{username}@example.com"),
            password_hash=password_hash,
            is_active=fields.pop("is_active", True),
            email_verified=fields.pop("email_verified", True),
            **fields,
        )
        for name in roles:
            role = db.session.query(Role).filter_by(name=RoleName(name)).first()
            if role is None:
                role = Role(name=RoleName(name), is_system=(name == "ADMIN"))
                db.session.add(role)
            user.roles.append(role)
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def auth_headers(app):
    """Build an Authorization header carrying a fresh access token for a user."""

    def _auth_headers(user):
        token = app.container.jwt_service().generate_access_token(user)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
