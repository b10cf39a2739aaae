from __future__ import annotations

from flask import Flask, render_template, request

from ..common.http import current_user, json_body, json_response, roles_required
from ..container import Container
from ..users.permissions import CASHIER_ROLES
from .model import CombinedReceipt


def register(app: Flask, container: Container) -> None:
    def _render(document):
        if request.args.get("format") == "json":
            return json_response(document)
        if isinstance(document, CombinedReceipt):
            html = render_template("receipts/combined_receipt.html", combined=document)
        else:
            html = render_template("receipts/receipt.html", receipt=document)
        return app.response_class(html, mimetype="text/html")

    @app.route("/api/receipts/<int:invoice_id>", methods=["GET"], endpoint="get_receipt")
    @roles_required(*CASHIER_ROLES)
    def get_receipt(invoice_id: int):
        return _render(container.receipt_service.get_receipt(actor=current_user(), invoice_id=invoice_id))

    @app.route("/api/receipts/generate", methods=["POST"], endpoint="generate_receipt")
    @roles_required(*CASHIER_ROLES)
    def generate_receipt():
        data = json_body()
        invoice_ids = data.get("invoiceIds")
        if invoice_ids is None and data.get("invoiceId") is not None:
            invoice_ids = [data.get("invoiceId")]
        if not isinstance(invoice_ids, list):
            invoice_ids = []
        return _render(container.receipt_service.generate(actor=current_user(), invoice_ids=invoice_ids))

    @app.route("/api/receipts/combined/<int:parent_id>", methods=["GET"], endpoint="combined_receipt")
    @roles_required(*CASHIER_ROLES)
    def combined_receipt(parent_id: int):
        return _render(container.receipt_service.combined_for_parent(actor=current_user(), parent_id=parent_id))

    @app.route("/api/receipts/<int:invoice_id>/check-fs", methods=["GET"], endpoint="check_fs_number")
    @roles_required(*CASHIER_ROLES)
    def check_fs_number(invoice_id: int):
        return json_response(container.receipt_service.check_fs_number(actor=current_user(), invoice_id=invoice_id))

    @app.route("/api/receipts/<int:invoice_id>/fs-number", methods=["PUT"], endpoint="update_fs_number")
    @roles_required(*CASHIER_ROLES)
    def update_fs_number(invoice_id: int):
        fs_number = container.receipt_service.update_fs_number(
            actor=current_user(),
            invoice_id=invoice_id,
            fs_number=json_body().get("fsNumber"),
        )
        return json_response({"message": "FS number updated successfully", "fsNumber": fs_number})

    @app.route("/api/receipts/parent-invoices/<parent_phone>", methods=["GET"], endpoint="parent_invoices")
    @roles_required(*CASHIER_ROLES)
    def parent_invoices(parent_phone: str):
        rows = container.receipt_service.list_parent_invoices(actor=current_user(), parent_phone=parent_phone)
        return json_response({"invoices": rows})
