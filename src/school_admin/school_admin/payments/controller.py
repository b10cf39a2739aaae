from __future__ import annotations

from flask import Flask

from ..common.http import current_user, json_body, json_response, roles_required
from ..container import Container
from ..users.permissions import CASHIER_ROLES


def register(app: Flask, container: Container) -> None:
    @app.route("/api/registration-payments/pay", methods=["POST"], endpoint="pay_registration")
    @roles_required(*CASHIER_ROLES)
    def pay_registration():
        data = json_body()
        outcome = container.payment_service.handle_payment(
            actor=current_user(),
            registration_id=data.get("registrationId"),
            payment_method=data.get("paymentMethod"),
            payment_date=data.get("paymentDate"),
            discount_percentage=data.get("discountPercentage"),
            receipt_number=data.get("receiptNumber"),
            transaction_number=data.get("transactionNumber"),
            paid_amount=data.get("paidAmount"),
            notes=data.get("notes"),
        )
        return json_response(outcome)

    @app.route("/api/invoices/<int:invoice_id>/confirm-payment", methods=["POST"], endpoint="confirm_invoice_payment")
    @roles_required(*CASHIER_ROLES)
    def confirm_invoice_payment(invoice_id: int):
        data = json_body()
        outcome = container.payment_service.confirm_payment(
            actor=current_user(),
            invoice_id=invoice_id,
            transaction_reference=data.get("transactionReference"),
            notes=data.get("notes"),
        )
        return json_response(outcome)
