from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from src.school_admin.school_admin.core.enums import Role
from src.school_admin.school_admin.core.exceptions import ConflictError, FsNumberRequiredError, NotFoundError, ValidationError
from src.school_admin.school_admin.receipts.model import CombinedReceipt, Receipt
from tests.fakes import staff

CASHIER = staff(Role.CASHIER)


def _paid_invoice(world, payment_service, *, student_id=1, paid_on="2026-03-07T10:00:00", discount=0):
    registration = world.add_registration(student_id=student_id)
    return payment_service.handle_payment(
        actor=CASHIER,
        registration_id=registration.registration_id,
        payment_method="CASH",
        payment_date=paid_on,
        discount_percentage=discount,
        transaction_number="TX-55",
        paid_amount=1500,
    ).invoice


def test_receipt_needs_fs_number_first(world, payment_service, receipt_service):
    invoice = _paid_invoice(world, payment_service)

    status = receipt_service.check_fs_number(actor=CASHIER, invoice_id=invoice.invoice_id)
    assert status.needs_fs_number is True
    assert status.has_fs is False

    with pytest.raises(FsNumberRequiredError) as exc:
        receipt_service.get_receipt(actor=CASHIER, invoice_id=invoice.invoice_id)

    assert exc.value.details["needs_fs_number"] is True
    assert exc.value.invoices_needing_fs == [{"id": invoice.invoice_id, "student_name": "Liya Alemu"}]


def test_fs_number_is_assigned_once(world, payment_service, receipt_service):
    invoice = _paid_invoice(world, payment_service)

    assert receipt_service.update_fs_number(actor=CASHIER, invoice_id=invoice.invoice_id, fs_number=" FS-100 ") == "FS-100"
    with pytest.raises(ConflictError):
        receipt_service.update_fs_number(actor=CASHIER, invoice_id=invoice.invoice_id, fs_number="FS-101")

    assert world.invoices.get_by_id(invoice.invoice_id).fs_number == "FS-100"


def test_blank_fs_number_is_rejected(world, payment_service, receipt_service):
    invoice = _paid_invoice(world, payment_service)

    with pytest.raises(ValidationError):
        receipt_service.update_fs_number(actor=CASHIER, invoice_id=invoice.invoice_id, fs_number="  ")


def test_receipt_uses_registration_number_and_no_penalty_when_on_time(world, payment_service, receipt_service):
    invoice = _paid_invoice(world, payment_service, discount=10)
    receipt_service.update_fs_number(actor=CASHIER, invoice_id=invoice.invoice_id, fs_number="FS-1")

    receipt = receipt_service.get_receipt(actor=CASHIER, invoice_id=invoice.invoice_id)

    registration = world.registrations.get_by_id(invoice.registration_id)
    assert receipt.receipt_number == registration.registration_number
    assert receipt.fs_number == "FS-1"
    assert receipt.payment_duration == "First Quarter"
    assert receipt.penalty_fee == Decimal("0.00")
    assert receipt.base_amount == Decimal("1500.00")
    assert receipt.discount_amount == Decimal("150.00")
    assert receipt.final_amount == Decimal("1350.00")
    assert receipt.cashier_name == "Abel Kebede"
    assert [line.fee_type for line in receipt.items] == ["Registration Fee", "Tuition Fee"]


def test_late_payment_adds_penalty_on_receipt_only(world, payment_service, receipt_service):
    invoice = _paid_invoice(world, payment_service, paid_on="2026-03-16T09:00:00")
    receipt_service.update_fs_number(actor=CASHIER, invoice_id=invoice.invoice_id, fs_number="FS-2")

    receipt = receipt_service.get_receipt(actor=CASHIER, invoice_id=invoice.invoice_id)

    assert receipt.penalty_fee == Decimal("75.00")
    assert receipt.final_amount == Decimal("1575.00")
    assert world.invoices.get_by_id(invoice.invoice_id).final_amount == Decimal("1500.00")


def test_penalty_is_stable_across_generations(world, payment_service, receipt_service):
    invoice = _paid_invoice(world, payment_service, paid_on="2026-03-20T09:00:00")
    receipt_service.update_fs_number(actor=CASHIER, invoice_id=invoice.invoice_id, fs_number="FS-3")

    first = receipt_service.get_receipt(actor=CASHIER, invoice_id=invoice.invoice_id)
    second = receipt_service.get_receipt(actor=CASHIER, invoice_id=invoice.invoice_id)

    assert first.penalty_fee == second.penalty_fee


def test_receipt_number_falls_back_to_transaction_then_invoice_number(world, payment_service, receipt_service):
    invoice = _paid_invoice(world, payment_service)
    receipt_service.update_fs_number(actor=CASHIER, invoice_id=invoice.invoice_id, fs_number="FS-4")
    del world.db.tables["registrations"][invoice.registration_id]

    assert receipt_service.get_receipt(actor=CASHIER, invoice_id=invoice.invoice_id).receipt_number == "TX-55"

    world.db.tables["payments"].clear()
    assert receipt_service.get_receipt(actor=CASHIER, invoice_id=invoice.invoice_id).receipt_number == invoice.invoice_number


def test_generate_single_and_combined(world, payment_service, receipt_service):
    first = _paid_invoice(world, payment_service, student_id=1)
    second = _paid_invoice(world, payment_service, student_id=2, paid_on="2026-03-09T09:00:00")
    for invoice, fs in ((first, "FS-10"), (second, "FS-11")):
        receipt_service.update_fs_number(actor=CASHIER, invoice_id=invoice.invoice_id, fs_number=fs)

    single = receipt_service.generate(actor=CASHIER, invoice_ids=[first.invoice_id])
    combined = receipt_service.generate(actor=CASHIER, invoice_ids=[first.invoice_id, str(second.invoice_id)])

    assert isinstance(single, Receipt)
    assert isinstance(combined, CombinedReceipt)
    assert combined.parent_name == "Alemu Bekele"
    assert len(combined.receipts) == 2
    assert combined.total_penalty == Decimal("50.00")
    assert combined.grand_total == Decimal("3050.00")


def test_combined_lists_every_invoice_missing_fs(world, payment_service, receipt_service):
    first = _paid_invoice(world, payment_service, student_id=1)
    second = _paid_invoice(world, payment_service, student_id=2)
    receipt_service.update_fs_number(actor=CASHIER, invoice_id=first.invoice_id, fs_number="FS-20")

    with pytest.raises(FsNumberRequiredError) as exc:
        receipt_service.generate(actor=CASHIER, invoice_ids=[first.invoice_id, second.invoice_id])

    assert exc.value.message == "Some invoices require FS numbers"
    assert [m["id"] for m in exc.value.invoices_needing_fs] == [second.invoice_id]


def test_combined_for_parent(world, payment_service, receipt_service):
    for student_id in (1, 2):
        invoice = _paid_invoice(world, payment_service, student_id=student_id)
        receipt_service.update_fs_number(actor=CASHIER, invoice_id=invoice.invoice_id, fs_number=f"FS-{student_id}")

    combined = receipt_service.combined_for_parent(actor=CASHIER, parent_id=21)

    assert {r.student_name for r in combined.receipts} == {"Liya Alemu", "Nahom Alemu"}
    assert combined.receipt_date == datetime(2026, 3, 10, 9, 30, 0)


def test_combined_for_unknown_parent(receipt_service):
    with pytest.raises(NotFoundError):
        receipt_service.combined_for_parent(actor=CASHIER, parent_id=999)


def test_parent_invoices_by_phone(world, payment_service, receipt_service):
    _paid_invoice(world, payment_service, student_id=1)

    rows = receipt_service.list_parent_invoices(actor=CASHIER, parent_phone="+251911000001")

    assert len(rows) == 1
