"""Invoice routes."""
from flask import Blueprint, current_app, jsonify, request

from backoffice.middleware.auth import get_auth_context, require_auth, require_role
from backoffice.models.enums import InvoiceStatus
from backoffice.schemas.invoice_schemas import (
    BatchDeleteSchema,
    BatchStatusSchema,
    CommentSchema,
    InvoiceCreateSchema,
    InvoiceListQuerySchema,
    InvoiceUpdateSchema,
    RecentQuerySchema,
    StatusChangeSchema,
    ToggleActiveQuerySchema,
)

# Create blueprint
invoices_bp = Blueprint("invoices", __name__, url_prefix="/api/v1/invoices")

WRITE_ROLES = ("ADMIN", "MANAGER", "OPERATOR")
DELETE_ROLES = ("ADMIN", "MANAGER")

create_schema = InvoiceCreateSchema()
update_schema = InvoiceUpdateSchema(partial=True)
status_schema = StatusChangeSchema()
comment_schema = CommentSchema()
batch_status_schema = BatchStatusSchema()
batch_delete_schema = BatchDeleteSchema()
list_query_schema = InvoiceListQuerySchema()
recent_query_schema = RecentQuerySchema()
toggle_query_schema = ToggleActiveQuerySchema()


def _invoice_service():
    return current_app.container.invoice_service()


@invoices_bp.route("", methods=["GET"])
@require_auth
def list_invoices():
    """
    List active invoices.

    Query params:
        statut, company_id, ship_id, search, date_debut, date_fin, mois,
        annee, min_amount, max_amount, limit, offset

    Returns:
        200: {"invoices": [...], "total": n, "limit": ..., "offset": ...}
    """
    params = list_query_schema.load(request.args.to_dict())
    limit = params.pop("limit")
    offset = params.pop("offset")

    invoices, total = _invoice_service().list_invoices(params, limit=limit, offset=offset)
    return jsonify({
        "invoices": [invoice.to_dict() for invoice in invoices],
        "total": total,
        "limit": limit,
        "offset": offset,
    }), 200


@invoices_bp.route("/<invoice_id>", methods=["GET"])
@require_auth
def get_invoice(invoice_id):
    """
    Get invoice detail.

    Returns:
        200: Invoice details
        404: If invoice not found
    """
    invoice = _invoice_service().get_invoice(invoice_id)
    return jsonify({"invoice": invoice.to_dict()}), 200


@invoices_bp.route("/numero/<numero>", methods=["GET"])
@require_auth
def get_invoice_by_numero(numero):
    invoice = _invoice_service().get_invoice_by_numero(numero)
    return jsonify({"invoice": invoice.to_dict()}), 200


@invoices_bp.route("/next-number", methods=["GET"])
@require_role(*WRITE_ROLES)
def next_number():
    """Preview the number the next invoice would receive."""
    return jsonify({"numero": _invoice_service().generate_invoice_number()}), 200


@invoices_bp.route("/overdue", methods=["GET"])
@require_auth
def overdue_invoices():
    invoices = _invoice_service().get_overdue_invoices()
    return jsonify({"invoices": [invoice.to_dict() for invoice in invoices]}), 200


@invoices_bp.route("/pending", methods=["GET"])
@require_auth
def pending_invoices():
    invoices = _invoice_service().get_pending_invoices()
    return jsonify({"invoices": [invoice.to_dict() for invoice in invoices]}), 200


@invoices_bp.route("/recent", methods=["GET"])
@require_auth
def recent_invoices():
    """Latest active invoices for the dashboard; ``limit`` defaults to 10."""
    params = recent_query_schema.load(request.args.to_dict())
    invoices = _invoice_service().get_recent_invoices(params["limit"])
    return jsonify({"invoices": [invoice.to_dict() for invoice in invoices]}), 200


@invoices_bp.route("", methods=["POST"])
@require_role(*WRITE_ROLES)
def create_invoice():
    """
    Create a draft invoice.

    Returns:
        201: Created invoice
        400: Validation error
        404: Unknown company, ship or operation
        409: Number already used
    """
    data = create_schema.load(request.get_json() or {})
    invoice = _invoice_service().create_invoice(data, actor=get_auth_context())
    return jsonify({"invoice": invoice.to_dict()}), 201


@invoices_bp.route("/<invoice_id>", methods=["PUT"])
@require_role(*WRITE_ROLES)
def update_invoice(invoice_id):
    """Update a draft invoice."""
    data = update_schema.load(request.get_json() or {})
    invoice = _invoice_service().update_invoice(
        invoice_id, data, actor=get_auth_context()
    )
    return jsonify({"invoice": invoice.to_dict()}), 200


@invoices_bp.route("/<invoice_id>", methods=["DELETE"])
@require_role(*DELETE_ROLES)
def delete_invoice(invoice_id):
    _invoice_service().delete_invoice(invoice_id, actor=get_auth_context())
    return jsonify({"success": True, "message": "Invoice deleted"}), 200


@invoices_bp.route("/<invoice_id>/toggle-active", methods=["PATCH"])
@require_role(*DELETE_ROLES)
def toggle_active(invoice_id):
    """
    Soft-delete or restore an invoice.

    Query params:
        active: target state; omitted flips the current one

    Returns:
        200: Invoice with its new ``active`` flag
        400: Deactivating an invoice that is no longer deletable
        404: Unknown invoice
    """
    params = toggle_query_schema.load(request.args.to_dict())
    invoice = _invoice_service().set_active(
        invoice_id, params["active"], actor=get_auth_context()
    )
    return jsonify({"invoice": invoice.to_dict()}), 200


@invoices_bp.route("/<invoice_id>/status", methods=["PATCH"])
@require_role(*WRITE_ROLES)
def change_status(invoice_id):
    """
    Change invoice status.

    Request body:
        {"statut": "EMISE", "commentaire": "optional, required for ANNULEE"}
    """
    data = status_schema.load(request.get_json() or {})
    invoice = _invoice_service().change_status(
        invoice_id,
        InvoiceStatus(data["statut"]),
        data.get("commentaire"),
        actor=get_auth_context(),
    )
    return jsonify({"invoice": invoice.to_dict()}), 200


def _transition(invoice_id, action):
    data = comment_schema.load(request.get_json(silent=True) or {})
    invoice = action(invoice_id, data.get("commentaire"), actor=get_auth_context())
    return jsonify({"invoice": invoice.to_dict()}), 200


@invoices_bp.route("/<invoice_id>/emit", methods=["POST"])
@require_role(*WRITE_ROLES)
def emit_invoice(invoice_id):
    return _transition(invoice_id, _invoice_service().emit_invoice)


@invoices_bp.route("/<invoice_id>/mark-paid", methods=["POST"])
@require_role(*WRITE_ROLES)
def mark_paid(invoice_id):
    return _transition(invoice_id, _invoice_service().mark_as_paid)


@invoices_bp.route("/<invoice_id>/cancel", methods=["POST"])
@require_role(*WRITE_ROLES)
def cancel_invoice(invoice_id):
    return _transition(invoice_id, _invoice_service().cancel_invoice)


@invoices_bp.route("/<invoice_id>/draft", methods=["POST"])
@require_role(*WRITE_ROLES)
def return_to_draft(invoice_id):
    return _transition(invoice_id, _invoice_service().return_to_draft)


@invoices_bp.route("/<invoice_id>/recalculate", methods=["POST"])
@require_role(*WRITE_ROLES)
def recalculate(invoice_id):
    invoice = _invoice_service().recalculate_amounts(invoice_id)
    return jsonify({"invoice": invoice.to_dict()}), 200


@invoices_bp.route("/mark-overdue", methods=["POST"])
@require_role(*DELETE_ROLES)
def mark_overdue():
    """Run the overdue sweep now."""
    count = _invoice_service().mark_overdue_invoices()
    return jsonify({"success": True, "updated": count}), 200


@invoices_bp.route("/batch/status", methods=["POST"])
@require_role(*WRITE_ROLES)
def batch_status():
    data = batch_status_schema.load(request.get_json() or {})
    result = _invoice_service().batch_change_status(
        data["ids"],
        InvoiceStatus(data["statut"]),
        data.get("commentaire"),
        actor=get_auth_context(),
    )
    return jsonify(result), 200


@invoices_bp.route("/batch/delete", methods=["POST"])
@require_role(*DELETE_ROLES)
def batch_delete():
    data = batch_delete_schema.load(request.get_json() or {})
    result = _invoice_service().batch_delete(data["ids"], actor=get_auth_context())
    return jsonify(result), 200
