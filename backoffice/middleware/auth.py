"""Request authentication filter and route guards."""
import logging
from functools import wraps
from typing import Any, Callable, Optional

from flask import Flask, current_app, g, jsonify, request

from backoffice.middleware.context import AuthContext
from backoffice.services.jwt_service import JwtService

logger = logging.getLogger(__name__)

PUBLIC_ENDPOINTS = (
    "/api/v1/auth/login",
    "/api/v1/auth/register",
    "/api/v1/auth/refresh-token",
    "/api/v1/auth/forgot-password",
    "/api/v1/auth/reset-password",
    "/api/v1/auth/verify-email",
    "/api/v1/auth/resend-verification",
    "/api/v1/auth/check-username",
    "/api/v1/auth/check-email",
    "/api/v1/health",
    "/api/docs",
    "/favicon.ico",
)

STATIC_PREFIXES = ("/static/", "/css/", "/js/", "/images/")
STATIC_SUFFIXES = (".ico", ".png", ".jpg", ".css", ".js")

BEARER_PREFIX = "Bearer "


def is_static_path(path: str) -> bool:
    return path.startswith(STATIC_PREFIXES) or path.endswith(STATIC_SUFFIXES)


def is_public_path(path: str) -> bool:
    return any(
        path == endpoint or path.startswith(endpoint + "/")
        for endpoint in PUBLIC_ENDPOINTS
    )


def extract_token() -> Optional[str]:
    """Bearer token from the Authorization header, else the ``token`` query param."""
    header = request.headers.get("Authorization", "")
    if header.startswith(BEARER_PREFIX):
        token = header[len(BEARER_PREFIX):].strip()
        if token:
            return token

    token = request.args.get("token", "").strip()
    return token or None


def get_auth_context() -> Optional[AuthContext]:
    """Identity established for the current request, if any."""
    return g.get("auth_context")


def authenticate_request() -> None:
    """
    Establish the caller's identity from its access token.

    Never rejects the request: any failure leaves it unauthenticated and
    the route guards decide whether identity is required.
    """
    path = request.path
    g.auth_context = None

    if is_static_path(path) or is_public_path(path):
        return

    try:
        token = extract_token()
        if token is None:
            return

        jwt_service: JwtService = current_app.container.jwt_service()
        if not jwt_service.validate_token(token):
            logger.warning(f"Invalid JWT token on {request.method} {path}")
            return

        if not jwt_service.is_access_token(token):
            logger.warning(f"Non-access token rejected on {request.method} {path}")
            return

        username = jwt_service.get_username(token)
        directory = current_app.container.user_directory()
        user = directory.load_user_by_username(username)

        if not jwt_service.get_is_active(token) or not user.is_active:
            logger.warning(f"Inactive account in token for {username}")
            return

        g.auth_context = AuthContext(
            user_id=str(user.id),
            username=user.username,
            roles=user.role_names,
            email=user.email,
            token=token,
        )
        logger.debug(f"Authenticated {username} with roles {user.role_names}")

    except Exception as e:
        logger.error(f"Cannot authenticate request on {path}: {e}")


def init_auth(app: Flask) -> None:
    app.before_request(authenticate_request)


def require_auth(f: Callable) -> Callable:
    """
    Decorator requiring an authenticated caller.

    Usage:
        @bp.route("/protected")
        @require_auth
        def protected_route():
            context = get_auth_context()
    """

    @wraps(f)
    def decorated(*args: Any, **kwargs: Any) -> Any:
        if get_auth_context() is None:
            return (
                jsonify(
                    {
                        "error": "Authentication required",
                        "code": "AUTHENTICATION_REQUIRED",
                    }
                ),
                401,
            )
        return f(*args, **kwargs)

    return decorated


def require_role(*role_names: str) -> Callable:
    """
    Decorator requiring at least one of the given roles.

    Usage:
        @require_role("ADMIN", "MANAGER")
        def delete_invoice(invoice_id):
            ...
    """

    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated(*args: Any, **kwargs: Any) -> Any:
            context = get_auth_context()
            if context is None:
                return (
                    jsonify(
                        {
                            "error": "Authentication required",
                            "code": "AUTHENTICATION_REQUIRED",
                        }
                    ),
                    401,
                )

            if not context.has_role(*role_names):
                return (
                    jsonify(
                        {
                            "error": "Insufficient permissions",
                            "required": list(role_names),
                            "code": "PERMISSION_DENIED",
                        }
                    ),
                    403,
                )

            return f(*args, **kwargs)

        return decorated

    return decorator
