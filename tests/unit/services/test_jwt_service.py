"""Tests for JwtService."""
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
from uuid import uuid4

import jwt

from backoffice.services.jwt_service import JwtService

SECRET = "unit-test-jwt-secret-key-long-enough-for-hs512-signatures-abcdefghij"


def make_user(**overrides):
    user = MagicMock()
    user.id = overrides.get("id", uuid4())
    user.username = overrides.get("username", "jdoe")
    user.email = overrides.get("email", "jdoe@example.com")
    user.full_name = overrides.get("full_name", "John Doe")
    user.role_names = overrides.get("role_names", ["OPERATOR"])
    user.is_active = overrides.get("is_active", True)
    return user


def make_service(clock=None, access_ttl=3600, refresh_ttl=7 * 86400):
    kwargs = {}
    if clock is not None:
        kwargs["clock"] = clock
    return JwtService(
        secret_key=SECRET,
        issuer="maritime-backoffice",
        access_token_ttl=access_ttl,
        refresh_token_ttl=refresh_ttl,
        **kwargs,
    )


class TestTokenIssuance:
    """Issued tokens carry the expected claims."""

    def test_access_token_is_valid_and_classified(self):
        service = make_service()
        token = service.generate_access_token(make_user())

        assert service.validate_token(token) is True
        assert service.is_access_token(token) is True
        assert service.is_refresh_token(token) is False

    def test_refresh_token_is_valid_and_classified(self):
        service = make_service()
        token = service.generate_refresh_token(make_user())

        assert service.validate_token(token) is True
        assert service.is_refresh_token(token) is True
        assert service.is_access_token(token) is False

    def test_claims_reflect_user(self):
        user_id = uuid4()
        service = make_service()
        token = service.generate_access_token(
            make_user(id=user_id, role_names=["ADMIN", "MANAGER"])
        )

        assert service.get_username(token) == "jdoe"
        assert service.get_user_id(token) == str(user_id)
        assert service.get_email(token) == "jdoe@example.com"
        assert service.get_full_name(token) == "John Doe"
        assert service.get_roles(token) == ["ADMIN", "MANAGER"]
        assert service.get_token_type(token) == "ACCESS"
        assert service.get_is_active(token) is True

    def test_token_uses_hs512_and_issuer(self):
        service = make_service()
        token = service.generate_access_token(make_user())

        header = jwt.get_unverified_header(token)
        claims = jwt.decode(token, options={"verify_signature": False})

        assert header["alg"] == "HS512"
        assert claims["iss"] == "maritime-backoffice"

    def test_expiry_follows_access_ttl(self):
        now = datetime(2026, 1, 15, 10, 0, tzinfo=timezone.utc)
        service = make_service(clock=lambda: now, access_ttl=900)

        token = service.generate_access_token(make_user())
        claims = service.get_claims(token)

        assert claims["exp"] - claims["iat"] == 900

    def test_access_token_ttl_seconds(self):
        assert make_service(access_ttl=1440 * 60).access_token_ttl_seconds == 86400


class TestTokenValidation:
    """Invalid tokens are reported as False, never raised."""

    def test_expired_token_fails_validation(self):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        issuer = make_service(clock=lambda: past, access_ttl=60)
        token = issuer.generate_access_token(make_user())

        service = make_service()
        assert service.validate_token(token) is False
        assert service.is_expired(token) is True

    def test_tampered_signature_fails_validation(self):
        service = make_service()
        token = service.generate_access_token(make_user())

        header, payload, signature = token.split(".")
        flipped = "A" if signature[0] != "A" else "B"
        tampered = ".".join([header, payload, flipped + signature[1:]])

        assert service.validate_token(tampered) is False

    def test_token_signed_with_other_key_fails_validation(self):
        other = JwtService(
            secret_key="another-secret-key-long-enough-for-hs512-signatures-0123456789ab",
            issuer="maritime-backoffice",
            access_token_ttl=3600,
            refresh_token_ttl=3600,
        )
        token = other.generate_access_token(make_user())

        assert make_service().validate_token(token) is False

    @pytest.mark.parametrize("token", [None, "", "   "])
    def test_empty_token_fails_validation(self, token):
        assert make_service().validate_token(token) is False

    def test_malformed_token_fails_validation(self):
        assert make_service().validate_token("not.a.jwt") is False

    def test_get_claims_raises_on_invalid_token(self):
        with pytest.raises(jwt.InvalidTokenError):
            make_service().get_claims("not.a.jwt")

    def test_classification_is_false_for_invalid_token(self):
        service = make_service()

        assert service.is_access_token("garbage") is False
        assert service.is_refresh_token("garbage") is False

    def test_missing_active_claim_reads_as_inactive(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "jdoe", "iat": now, "exp": now + timedelta(minutes=5)},
            SECRET,
            algorithm="HS512",
        )

        assert make_service().get_is_active(token) is False


class TestRemainingLifetime:

    def test_remaining_seconds_counts_down(self):
        service = make_service(access_ttl=600)
        token = service.generate_access_token(make_user())

        remaining = service.get_remaining_seconds(token)

        assert 590 <= remaining <= 600
        assert service.is_expired(token) is False


class TestFrozenClock:
    """Expiry follows the service clock, not the host clock."""

    FROZEN = datetime(2026, 1, 15, 10, 0, tzinfo=timezone.utc)

    def test_fresh_token_valid_under_frozen_clock(self):
        service = make_service(clock=lambda: self.FROZEN, access_ttl=900)

        token = service.generate_access_token(make_user())

        assert service.validate_token(token) is True
        assert service.is_expired(token) is False
        assert service.get_remaining_seconds(token) == 900

    def test_token_expires_when_clock_reaches_exp(self):
        clock = {"now": self.FROZEN}
        service = make_service(clock=lambda: clock["now"], access_ttl=900)
        token = service.generate_access_token(make_user())

        clock["now"] = self.FROZEN + timedelta(seconds=899)
        assert service.validate_token(token) is True

        clock["now"] = self.FROZEN + timedelta(seconds=900)
        assert service.validate_token(token) is False
        assert service.is_expired(token) is True

    def test_real_token_expired_for_later_clock(self):
        token = make_service(access_ttl=60).generate_access_token(make_user())
        later = datetime.now(timezone.utc) + timedelta(hours=1)

        service = make_service(clock=lambda: later)

        assert service.validate_token(token) is False
        assert service.is_expired(token) is True
        with pytest.raises(jwt.ExpiredSignatureError):
            service.get_claims(token)
