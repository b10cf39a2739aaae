from __future__ import annotations

import io

from flask import Flask, request, send_file

from ..common.http import current_user, json_response, roles_required
from ..common.validators import optional_int, parse_enum
from ..container import Container
from ..core.enums import InvoiceStatus, PaymentMethod
from ..users.permissions import CASHIER_ROLES
from .model import InvoiceFilter


def invoice_filter_from_args(args) -> InvoiceFilter:
    status = args.get("status")
    method = args.get("paymentMethod")
    return InvoiceFilter(
        branch_id=optional_int(args.get("branchId"), "branchId"),
        status=parse_enum(InvoiceStatus, status, "status") if status else None,
        payment_method=parse_enum(PaymentMethod, method, "paymentMethod") if method else None,
        search=(args.get("search") or "").strip() or None,
        page=optional_int(args.get("page"), "page") or 1,
        limit=optional_int(args.get("limit"), "limit") or 10,
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/invoices", methods=["GET"], endpoint="list_invoices")
    @roles_required(*CASHIER_ROLES)
    def list_invoices():
        page = container.invoice_service.list_invoices(actor=current_user(), filters=invoice_filter_from_args(request.args))
        return json_response(
            {
                "invoices": page.items,
                "pagination": {"page": page.page, "limit": page.limit, "total": page.total, "pages": page.pages},
            }
        )

    @app.route("/api/invoices/export", methods=["GET"], endpoint="export_invoices")
    @roles_required(*CASHIER_ROLES)
    def export_invoices():
        export = container.invoice_service.export_invoices(actor=current_user(), filters=invoice_filter_from_args(request.args))
        return send_file(
            io.BytesIO(export.content),
            mimetype=export.mimetype,
            as_attachment=True,
            download_name=export.filename,
        )

    @app.route("/api/invoices/<int:invoice_id>", methods=["GET"], endpoint="get_invoice")
    @roles_required(*CASHIER_ROLES)
    def get_invoice(invoice_id: int):
        return json_response(container.invoice_service.get_invoice(actor=current_user(), invoice_id=invoice_id))

    @app.route("/api/invoices/<int:invoice_id>/resend-link", methods=["POST"], endpoint="resend_payment_link")
    @roles_required(*CASHIER_ROLES)
    def resend_payment_link(invoice_id: int):
        return json_response(container.invoice_service.resend_payment_link(actor=current_user(), invoice_id=invoice_id))
