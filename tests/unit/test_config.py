"""Tests for configuration selection."""
import pytest

from backoffice.config import (
    DEFAULT_SECRET_KEY,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    get_config,
)


class TestGetConfig:

    def test_named_environments(self):
        assert get_config("testing") is TestingConfig
        assert get_config("production") is ProductionConfig

    def test_unknown_falls_back_to_development(self):
        assert get_config("staging") is DevelopmentConfig

    def test_reads_flask_env(self, monkeypatch):
        monkeypatch.setenv("FLASK_ENV", "testing")

        assert get_config() is TestingConfig

    def test_lockout_defaults(self):
        assert TestingConfig.LOGIN_MAX_FAILED_ATTEMPTS == 5
        assert TestingConfig.LOGIN_LOCK_MINUTES == 30
        assert TestingConfig.JWT_ACCESS_TOKEN_EXPIRES == 1440 * 60


class TestProductionConfig:

    def test_requires_flask_secret(self, monkeypatch):
        monkeypatch.delenv("FLASK_SECRET_KEY", raising=False)
        monkeypatch.setenv("JWT_SECRET_KEY", "j" * 64)

        with pytest.raises(ValueError, match="FLASK_SECRET_KEY must be set"):
            ProductionConfig()

    def test_requires_jwt_secret(self, monkeypatch):
        monkeypatch.setenv("FLASK_SECRET_KEY", "f" * 64)
        monkeypatch.delenv("JWT_SECRET_KEY", raising=False)

        with pytest.raises(ValueError, match="JWT_SECRET_KEY must be set"):
            ProductionConfig()

    def test_rejects_default_secret(self, monkeypatch):
        monkeypatch.setenv("FLASK_SECRET_KEY", DEFAULT_SECRET_KEY)
        monkeypatch.setenv("JWT_SECRET_KEY", "j" * 64)

        with pytest.raises(ValueError, match="insecure default"):
            ProductionConfig()

    def test_accepts_real_secrets(self, monkeypatch):
        monkeypatch.setenv("FLASK_SECRET_KEY", "f" * 64)
        monkeypatch.setenv("JWT_SECRET_KEY", "j" * 64)

        config = ProductionConfig()

        assert config.JWT_SECRET_KEY == "j" * 64
