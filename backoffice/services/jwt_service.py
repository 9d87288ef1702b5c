"""JWT issuance, validation and claim extraction."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import jwt

from backoffice.models.enums import TokenType

logger = logging.getLogger(__name__)

ALGORITHM = "HS512"

CLAIM_USER_ID = "userId"
CLAIM_EMAIL = "email"
CLAIM_FULL_NAME = "fullName"
CLAIM_ROLES = "roles"
CLAIM_IS_ACTIVE = "isActive"
CLAIM_TOKEN_TYPE = "tokenType"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JwtService:
    """
    Signed token engine.

    Issues access and refresh tokens for a user and validates them.
    Every public method is a pure function of its input, the secret key
    and the clock, so a single instance is shared across requests.
    """

    def __init__(
        self,
        secret_key: str,
        issuer: str,
        access_token_ttl: int,
        refresh_token_ttl: int,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the token engine.

        Args:
            secret_key: HMAC signing key.
            issuer: Value of the ``iss`` claim.
            access_token_ttl: Access token lifetime in seconds.
            refresh_token_ttl: Refresh token lifetime in seconds.
            clock: Returns the current aware UTC datetime.
        """
        self._secret_key = secret_key
        self._issuer = issuer
        self._access_ttl = timedelta(seconds=access_token_ttl)
        self._refresh_ttl = timedelta(seconds=refresh_token_ttl)
        self._clock = clock

    @property
    def access_token_ttl_seconds(self) -> int:
        return int(self._access_ttl.total_seconds())

    # ------------------------------------------------------------------
    # Issuance
    # ------------------------------------------------------------------

    def generate_access_token(self, user) -> str:
        """Issue a short-lived token that authorizes API calls."""
        return self._generate(user, TokenType.ACCESS, self._access_ttl)

    def generate_refresh_token(self, user) -> str:
        """Issue a long-lived token only usable to obtain new access tokens."""
        return self._generate(user, TokenType.REFRESH, self._refresh_ttl)

    def _generate(self, user, token_type: TokenType, ttl: timedelta) -> str:
        now = self._clock()
        payload = {
            "sub": user.username,
            "iss": self._issuer,
            "iat": now,
            "exp": now + ttl,
            CLAIM_USER_ID: str(user.id),
            CLAIM_EMAIL: user.email,
            CLAIM_FULL_NAME: user.full_name,
            CLAIM_ROLES: list(user.role_names),
            CLAIM_IS_ACTIVE: bool(user.is_active),
            CLAIM_TOKEN_TYPE: token_type.value,
        }
        return jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_token(self, token: Optional[str]) -> bool:
        """
        Check signature and expiry.

        Never raises: every failure is logged and reported as False.
        """
        if not token or not token.strip():
            logger.warning("JWT claims string is empty")
            return False

        try:
            self._decode(token)
            return True
        except jwt.ExpiredSignatureError:
            logger.warning("JWT token is expired")
        except jwt.InvalidSignatureError:
            logger.error("Invalid JWT signature")
        except jwt.InvalidAlgorithmError:
            logger.error("JWT token uses an unsupported algorithm")
        except jwt.MissingRequiredClaimError as e:
            logger.error(f"JWT token is missing a required claim: {e}")
        except jwt.DecodeError as e:
            logger.error(f"Malformed JWT token: {e}")
        except jwt.InvalidTokenError as e:
            logger.error(f"JWT token rejected: {e}")
        except Exception as e:
            logger.error(f"Unexpected error validating JWT token: {e}")
        return False

    def _decode(self, token: str) -> Dict[str, Any]:
        # Time claims are checked against the service clock, not the host clock
        claims = jwt.decode(
            token,
            self._secret_key,
            algorithms=[ALGORITHM],
            options={
                "require": ["sub", "iat", "exp"],
                "verify_exp": False,
                "verify_iat": False,
                "verify_nbf": False,
            },
        )
        if not claims:
            raise jwt.DecodeError("JWT claims are empty")

        try:
            expires_at = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
        except (TypeError, ValueError, OverflowError):
            raise jwt.DecodeError("Expiration Time claim (exp) must be an integer")
        if expires_at <= self._clock():
            raise jwt.ExpiredSignatureError("Signature has expired")
        return claims

    def get_claims(self, token: str) -> Dict[str, Any]:
        """
        Decode a token, verifying its signature and expiry.

        Raises:
            jwt.InvalidTokenError: If the token cannot be trusted.
        """
        try:
            return self._decode(token)
        except jwt.InvalidTokenError as e:
            logger.error(f"Cannot read claims from JWT token: {e}")
            raise

    # ------------------------------------------------------------------
    # Claim accessors
    # ------------------------------------------------------------------

    def get_username(self, token: str) -> str:
        return self.get_claims(token)["sub"]

    def get_user_id(self, token: str) -> Optional[str]:
        return self.get_claims(token).get(CLAIM_USER_ID)

    def get_email(self, token: str) -> Optional[str]:
        return self.get_claims(token).get(CLAIM_EMAIL)

    def get_full_name(self, token: str) -> Optional[str]:
        return self.get_claims(token).get(CLAIM_FULL_NAME)

    def get_roles(self, token: str) -> List[str]:
        return list(self.get_claims(token).get(CLAIM_ROLES) or [])

    def get_token_type(self, token: str) -> Optional[str]:
        return self.get_claims(token).get(CLAIM_TOKEN_TYPE)

    def get_is_active(self, token: str) -> bool:
        """The isActive claim; an absent claim reads as False."""
        return self.get_claims(token).get(CLAIM_IS_ACTIVE) is True

    def get_expiration(self, token: str) -> datetime:
        exp = self.get_claims(token)["exp"]
        return datetime.fromtimestamp(exp, tz=timezone.utc)

    def get_remaining_seconds(self, token: str) -> int:
        """Seconds until expiry, never negative."""
        remaining = (self.get_expiration(token) - self._clock()).total_seconds()
        return max(0, int(remaining))

    def is_expired(self, token: str) -> bool:
        try:
            return self.get_expiration(token) <= self._clock()
        except jwt.ExpiredSignatureError:
            return True

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def is_access_token(self, token: str) -> bool:
        return self._has_type(token, TokenType.ACCESS)

    def is_refresh_token(self, token: str) -> bool:
        return self._has_type(token, TokenType.REFRESH)

    def _has_type(self, token: str, token_type: TokenType) -> bool:
        try:
            return self.get_token_type(token) == token_type.value
        except Exception as e:
            logger.error(f"Cannot determine JWT token type: {e}")
            return False
