from __future__ import annotations

from decimal import Decimal

import pytest

from src.school_admin.school_admin.core.enums import InvoiceStatus, PaymentStatus, RegistrationStatus, Role
from src.school_admin.school_admin.core.exceptions import ConflictError, NotFoundError
from tests.fakes import staff


@pytest.fixture
def online_invoice(world, payment_service):
    registration = world.add_registration()
    outcome = payment_service.handle_payment(
        actor=staff(Role.CASHIER),
        registration_id=registration.registration_id,
        payment_method="ONLINE",
        discount_percentage=10,
    )
    return outcome.invoice


def test_confirm_settles_pending_online_payment(world, payment_service, online_invoice):
    outcome = payment_service.confirm_payment(
        actor=staff(Role.CASHIER),
        invoice_id=online_invoice.invoice_id,
        transaction_reference="TB-7781",
    )

    assert outcome.message == "Payment confirmed successfully"
    assert outcome.invoice.status == InvoiceStatus.PAID
    assert outcome.invoice.paid_amount == Decimal("1500.00")
    assert outcome.payment.status == PaymentStatus.COMPLETED
    assert outcome.payment.transaction_id == "TB-7781"
    registration = world.registrations.get_by_id(online_invoice.registration_id)
    assert registration.status == RegistrationStatus.PAYMENT_COMPLETED
    assert registration.completed_at is not None


def test_confirm_twice_is_rejected(payment_service, online_invoice):
    payment_service.confirm_payment(actor=staff(Role.CASHIER), invoice_id=online_invoice.invoice_id)

    with pytest.raises(ConflictError) as exc:
        payment_service.confirm_payment(actor=staff(Role.CASHIER), invoice_id=online_invoice.invoice_id)

    assert exc.value.message == "Invoice already paid"


def test_confirm_unknown_invoice(payment_service):
    with pytest.raises(NotFoundError):
        payment_service.confirm_payment(actor=staff(Role.CASHIER), invoice_id=404)


def test_confirm_invoice_of_other_branch_is_hidden(payment_service, online_invoice):
    with pytest.raises(NotFoundError):
        payment_service.confirm_payment(actor=staff(Role.CASHIER, branch_id=2), invoice_id=online_invoice.invoice_id)


def test_confirm_without_pending_payment(world, payment_service, online_invoice):
    payment = world.payments.find_pending_for_invoice(online_invoice.invoice_id)
    world.payments.complete(payment_id=payment.payment_id, transaction_id=None, notes=None)

    with pytest.raises(ConflictError) as exc:
        payment_service.confirm_payment(actor=staff(Role.CASHIER), invoice_id=online_invoice.invoice_id)

    assert exc.value.message == "No pending payment found"
