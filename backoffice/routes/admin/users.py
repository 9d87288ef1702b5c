"""Admin user management routes."""
from flask import Blueprint, current_app, jsonify, request

from backoffice.middleware.auth import get_auth_context, require_role
from backoffice.schemas.user_schemas import (
    UserCreateSchema,
    UserListQuerySchema,
    UserUpdateSchema,
)

admin_users_bp = Blueprint("admin_users", __name__, url_prefix="/api/v1/admin/users")

create_schema = UserCreateSchema()
update_schema = UserUpdateSchema(partial=True)
list_query_schema = UserListQuerySchema()


def _user_service():
    return current_app.container.user_service()


def _actor_name():
    context = get_auth_context()
    return context.username if context else None


def _user_page(params):
    limit = params.pop("limit")
    offset = params.pop("offset")
    users, total = _user_service().list_users(params, limit=limit, offset=offset)
    return jsonify({
        "users": [user.to_dict() for user in users],
        "total": total,
        "limit": limit,
        "offset": offset,
    }), 200


@admin_users_bp.route("", methods=["GET"])
@require_role("ADMIN")
def list_users():
    """
    List accounts.

    Query params:
        search, is_active, email_verified, role, limit, offset

    Returns:
        200: {"users": [...], "total": n, "limit": ..., "offset": ...}
    """
    return _user_page(list_query_schema.load(request.args.to_dict()))


@admin_users_bp.route("/search", methods=["POST"])
@require_role("ADMIN")
def search_users():
    """Same filters as the listing, taken from the JSON body."""
    return _user_page(list_query_schema.load(request.get_json(silent=True) or {}))


@admin_users_bp.route("", methods=["POST"])
@require_role("ADMIN")
def create_user():
    """
    Create an account with roles.

    Returns:
        201: Created user
        400: Validation error or unknown role
        409: Username or email already taken
    """
    data = create_schema.load(request.get_json() or {})
    user = _user_service().create_user(data, actor=_actor_name())
    return jsonify({"user": user.to_dict()}), 201


@admin_users_bp.route("/<user_id>", methods=["GET"])
@require_role("ADMIN")
def get_user(user_id):
    return jsonify({"user": _user_service().get_user(user_id).to_dict()}), 200


@admin_users_bp.route("/<user_id>", methods=["PUT"])
@require_role("ADMIN")
def update_user(user_id):
    data = update_schema.load(request.get_json() or {})
    user = _user_service().update_user(user_id, data, actor=_actor_name())
    return jsonify({"user": user.to_dict()}), 200


@admin_users_bp.route("/<user_id>/can-delete", methods=["GET"])
@require_role("ADMIN")
def can_delete(user_id):
    return jsonify({"can_delete": _user_service().can_delete(user_id)}), 200


@admin_users_bp.route("/<user_id>/account-status", methods=["GET"])
@require_role("ADMIN")
def account_status(user_id):
    """
    Lockout and activation state of an account.

    Returns:
        200: {"is_active", "email_verified", "is_locked", "locked_until",
              "failed_login_attempts", "last_login", ...}
        404: User not found
    """
    return jsonify(_user_service().get_account_status(user_id)), 200


@admin_users_bp.route("/<user_id>/toggle-status", methods=["POST"])
@require_role("ADMIN")
def toggle_status(user_id):
    user = _user_service().toggle_user_status(user_id, actor=_actor_name())
    return jsonify({
        "success": True,
        "message": "User activated" if user.is_active else "User deactivated",
        "user": user.to_dict(),
    }), 200


@admin_users_bp.route("/<user_id>/unlock", methods=["POST"])
@require_role("ADMIN")
def unlock(user_id):
    user = _user_service().unlock_user_account(user_id, actor=_actor_name())
    return jsonify({
        "success": True,
        "message": "Account unlocked",
        "user": user.to_dict(),
    }), 200


@admin_users_bp.route("/<user_id>", methods=["DELETE"])
@require_role("ADMIN")
def delete_user(user_id):
    """
    Delete a user.

    Returns:
        200: Deleted
        400: User holds a system role
        404: User not found
    """
    _user_service().delete_user(user_id, actor=_actor_name())
    return jsonify({"success": True, "message": "User deleted"}), 200
