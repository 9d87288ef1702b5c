"""Startup validation of the environment the back office runs in."""
import os
import sys
import logging
from typing import Dict, List, Optional

from backoffice.defaults import (
    DEFAULT_JWT_EXPIRATION_MINUTES,
    DEFAULT_JWT_REFRESH_EXPIRATION_DAYS,
    DEFAULT_LOCK_MINUTES,
    DEFAULT_MAX_FAILED_ATTEMPTS,
    DEFAULT_SECRET_KEY,
)

logger = logging.getLogger(__name__)

REQUIRED_ENV_VARS = [
    "DATABASE_URL",
]

# Tokens are signed with these and the rate limiter stores its windows in Redis
REQUIRED_IN_PRODUCTION = [
    "FLASK_SECRET_KEY",
    "JWT_SECRET_KEY",
    "REDIS_URL",
]

INSECURE_DEFAULTS = [
    DEFAULT_SECRET_KEY,
    "dev-secret-key",
    "change-me-in-production",
]

# HS512 keys shorter than this are rejected by most JWT validators
MIN_JWT_SECRET_LENGTH = 32

# Lockout and token lifetime settings, with the defaults Config falls back to
POSITIVE_INT_SETTINGS = {
    "LOGIN_MAX_FAILED_ATTEMPTS": DEFAULT_MAX_FAILED_ATTEMPTS,
    "LOGIN_LOCK_MINUTES": DEFAULT_LOCK_MINUTES,
    "JWT_EXPIRATION_MINUTES": DEFAULT_JWT_EXPIRATION_MINUTES,
    "JWT_REFRESH_EXPIRATION_DAYS": DEFAULT_JWT_REFRESH_EXPIRATION_DAYS,
}

MINUTES_PER_DAY = 1440


def get_missing_vars() -> List[str]:
    """
    Get list of missing required environment variables.

    Returns:
        List of missing variable names.
    """
    return [var for var in REQUIRED_ENV_VARS if not os.environ.get(var)]


def _positive_int(var: str) -> Optional[int]:
    raw = os.environ.get(var)
    if raw is None or raw.strip() == "":
        return POSITIVE_INT_SETTINGS[var]
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value > 0 else None


def get_invalid_settings() -> List[str]:
    """
    Check the lockout policy and token lifetimes.

    Each setting must be a positive integer, and a refresh token must
    outlive the access token it renews.

    Returns:
        Human-readable problems, empty when the settings are usable.
    """
    problems = []
    values: Dict[str, Optional[int]] = {}
    for var in POSITIVE_INT_SETTINGS:
        values[var] = _positive_int(var)
        if values[var] is None:
            problems.append(f"{var} (must be a positive integer, got {os.environ.get(var)!r})")

    access_minutes = values["JWT_EXPIRATION_MINUTES"]
    refresh_days = values["JWT_REFRESH_EXPIRATION_DAYS"]
    if access_minutes and refresh_days and refresh_days * MINUTES_PER_DAY <= access_minutes:
        problems.append(
            "JWT_REFRESH_EXPIRATION_DAYS (refresh tokens must outlive access tokens)"
        )

    return problems


def get_security_issues() -> List[str]:
    """Weak or default secrets; only enforced in production."""
    issues = []
    for var in ("FLASK_SECRET_KEY", "JWT_SECRET_KEY"):
        value = os.environ.get(var)
        if value and any(insecure in value.lower() for insecure in INSECURE_DEFAULTS):
            issues.append(f"{var} (using insecure default)")

    jwt_secret = os.environ.get("JWT_SECRET_KEY", "")
    if jwt_secret and len(jwt_secret) < MIN_JWT_SECRET_LENGTH:
        issues.append(f"JWT_SECRET_KEY (shorter than {MIN_JWT_SECRET_LENGTH} characters)")
    return issues


def validate_environment() -> bool:
    """
    Validate the environment before the workers start.

    In production missing variables, weak secrets or an unusable
    lockout/token policy terminate the process with exit code 1. In
    development they are only logged.

    Returns:
        True if required variables are present and the policy settings are valid.
    """
    is_production = os.environ.get("FLASK_ENV") == "production"
    missing = get_missing_vars()
    invalid = get_invalid_settings()

    if is_production:
        missing += [var for var in REQUIRED_IN_PRODUCTION if not os.environ.get(var)]
        security_issues = get_security_issues()
    else:
        security_issues = []

    if missing:
        logger.error(f"Missing required environment variables: {missing}")
        if is_production:
            logger.critical(
                "Cannot start in production with missing required variables"
            )
            sys.exit(1)
        else:
            logger.warning("Continuing in development mode with missing variables")

    if invalid:
        logger.error(f"Invalid lockout or token settings: {invalid}")
        if is_production:
            logger.critical("Cannot start in production with an unusable login policy")
            sys.exit(1)

    if security_issues:
        logger.error(f"Security issues detected: {security_issues}")
        if is_production:
            logger.critical("Cannot start in production with insecure configuration")
            sys.exit(1)

    return not missing and not invalid
