"""Tests for the dependency injection container."""
from unittest.mock import MagicMock

from backoffice.container import Container, container_settings
from backoffice.config import TestingConfig
from backoffice.services.auth_service import AuthService
from backoffice.services.invoice_service import InvoiceService
from backoffice.services.user_directory_service import UserDirectoryService


def make_container():
    flask_config = {key: getattr(TestingConfig, key) for key in dir(TestingConfig) if key.isupper()}
    container = Container()
    container.config.from_dict(container_settings(flask_config))
    container.db_session.override(MagicMock())
    return container


class TestContainer:

    def test_settings_map_flask_keys(self):
        settings = container_settings({
            "JWT_SECRET_KEY": "secret",
            "JWT_ISSUER": "maritime-backoffice",
            "JWT_ACCESS_TOKEN_EXPIRES": 60,
            "JWT_REFRESH_TOKEN_EXPIRES": 120,
            "LOGIN_MAX_FAILED_ATTEMPTS": 3,
            "LOGIN_LOCK_MINUTES": 10,
        })

        assert settings["jwt"]["access_token_expires"] == 60
        assert settings["login"] == {"max_failed_attempts": 3, "lock_minutes": 10}
        assert settings["smtp"]["port"] == 587
        assert settings["frontend_url"] == "http://localhost:4200"

    def test_services_are_wired(self):
        container = make_container()

        assert isinstance(container.auth_service(), AuthService)
        assert isinstance(container.invoice_service(), InvoiceService)
        assert isinstance(container.user_directory(), UserDirectoryService)

    def test_jwt_service_is_singleton(self):
        container = make_container()

        assert container.jwt_service() is container.jwt_service()

    def test_services_are_created_per_call(self):
        container = make_container()

        assert container.invoice_service() is not container.invoice_service()
