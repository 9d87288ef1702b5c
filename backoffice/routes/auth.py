"""Authentication routes."""
from flask import Blueprint, current_app, jsonify, request

from backoffice.extensions import limiter
from backoffice.middleware.auth import extract_token, get_auth_context, require_auth
from backoffice.schemas.auth_schemas import (
    ChangePasswordRequestSchema,
    EmailRequestSchema,
    LoginRequestSchema,
    RefreshTokenRequestSchema,
    RegisterRequestSchema,
    ResetPasswordRequestSchema,
)

# Create blueprint
auth_bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")

# Initialize schemas
login_schema = LoginRequestSchema()
refresh_schema = RefreshTokenRequestSchema()
register_schema = RegisterRequestSchema()
email_schema = EmailRequestSchema()
reset_password_schema = ResetPasswordRequestSchema()
change_password_schema = ChangePasswordRequestSchema()


def _auth_service():
    return current_app.container.auth_service()


def _token_response(result) -> dict:
    return {
        "success": True,
        "access_token": result.access_token,
        "refresh_token": result.refresh_token,
        "token_type": result.token_type,
        "expires_in": result.expires_in,
        "user": result.user.to_dict(),
    }


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("20 per minute")
def login():
    """Login with username or email.

    ---
    Request body:
        {
            "username_or_email": "jdoe",
            "password": "SecurePassword123!"
        }

    Returns:
        200: {"access_token": ..., "refresh_token": ..., "token_type": "Bearer",
              "expires_in": minutes, "user": {...}}
        401: Invalid credentials
        403: Account disabled or email not verified
        423: Account locked
    """
    data = login_schema.load(request.get_json() or {})

    result = _auth_service().login(
        data["username_or_email"], data["password"], ip_address=request.remote_addr
    )
    return jsonify(_token_response(result)), 200


@auth_bp.route("/refresh-token", methods=["POST"])
@limiter.limit("60 per minute")
def refresh_token():
    """Exchange a refresh token for a new token pair."""
    data = refresh_schema.load(request.get_json() or {})

    result = _auth_service().refresh_token(data["refresh_token"])
    return jsonify(_token_response(result)), 200


@auth_bp.route("/logout", methods=["POST"])
def logout():
    """Logout.

    Tokens are stateless; the client discards them.

    Returns:
        200: {"message": "Logged out successfully"}
    """
    return jsonify({"success": True, "message": "Logged out successfully"}), 200


@auth_bp.route("/validate-token", methods=["GET"])
def validate_token():
    """Report whether the presented token is valid, with its details."""
    token = extract_token()
    if token is None:
        return jsonify({"valid": False, "error": "Token required"}), 400

    return jsonify(_auth_service().describe_token(token)), 200


@auth_bp.route("/user-info", methods=["GET"])
@require_auth
def user_info():
    """Current user profile."""
    context = get_auth_context()
    user = current_app.container.user_repository().find_by_id(context.user_id)
    return jsonify({"user": user.to_dict()}), 200


@auth_bp.route("/register", methods=["POST"])
@limiter.limit("10 per minute")
def register():
    """Register a new account.

    The account stays inactive until the email is verified.

    Returns:
        201: {"success": true, "user": {...}}
        400: Validation error
        409: Username or email already taken
    """
    data = register_schema.load(request.get_json() or {})

    user = _auth_service().register(data)
    return jsonify({
        "success": True,
        "message": "Account created, check your email to activate it",
        "user": user.to_dict(),
    }), 201


@auth_bp.route("/verify-email", methods=["GET"])
def verify_email():
    token = request.args.get("token", "")
    user = _auth_service().verify_email(token)
    return jsonify({
        "success": True,
        "message": "Email verified",
        "username": user.username,
    }), 200


@auth_bp.route("/resend-verification", methods=["POST"])
@limiter.limit("5 per minute")
def resend_verification():
    data = email_schema.load(request.get_json() or {})
    result = _auth_service().resend_verification_email(data["email"])
    return jsonify({"success": result.success, "message": result.message}), 200


@auth_bp.route("/forgot-password", methods=["POST"])
@limiter.limit("5 per minute")
def forgot_password():
    """Request a password reset link.

    Always answers 200 so the response does not reveal registered emails.
    """
    data = email_schema.load(request.get_json() or {})
    result = _auth_service().initiate_password_reset(
        data["email"], ip_address=request.remote_addr
    )
    return jsonify({"success": True, "message": result.message}), 200


@auth_bp.route("/reset-password", methods=["POST"])
@limiter.limit("10 per minute")
def reset_password():
    data = reset_password_schema.load(request.get_json() or {})
    result = _auth_service().reset_password(data["token"], data["new_password"])
    return jsonify({"success": True, "message": result.message}), 200


@auth_bp.route("/change-password", methods=["POST"])
@require_auth
def change_password():
    data = change_password_schema.load(request.get_json() or {})
    result = _auth_service().change_password(
        get_auth_context().user_id, data["current_password"], data["new_password"]
    )
    return jsonify({"success": True, "message": result.message}), 200


@auth_bp.route("/check-username", methods=["GET"])
def check_username():
    """Check whether a username is still free."""
    username = request.args.get("username", "").strip()
    if not username:
        return jsonify({"error": "Username required"}), 400

    return jsonify({"available": _auth_service().is_username_available(username)})


@auth_bp.route("/check-email", methods=["GET"])
def check_email():
    """Check whether an email is still free."""
    email = request.args.get("email", "").strip().lower()
    if not email:
        return jsonify({"error": "Email required"}), 400

    return jsonify({"available": _auth_service().is_email_available(email)})
