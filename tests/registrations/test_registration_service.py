from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest

from src.school_admin.school_admin.core.enums import RegistrationStatus, Role
from src.school_admin.school_admin.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from src.school_admin.school_admin.registrations.model import RegistrationFilter
from tests.fakes import staff


def test_registration_snapshots_fees(world, registration_service, fixed_now):
    registration = registration_service.create_registration(
        actor=staff(Role.REGISTRAR), student_id=1, payment_duration="quarter"
    )

    assert registration.status == RegistrationStatus.PENDING_PAYMENT
    assert registration.registration_fee == Decimal("500.00")
    assert registration.additional_fee == Decimal("1000.00")
    assert registration.total_amount == Decimal("1500.00")
    assert registration.payment_due_date == fixed_now + timedelta(days=7)
    assert registration.registration_number == "REG-B1-00001"
    assert world.db.lock_timeouts == [15]


def test_pricing_change_does_not_touch_existing_registration(world, registration_service, pricing_service):
    registration = registration_service.create_registration(
        actor=staff(Role.REGISTRAR), student_id=1, payment_duration="ONE_MONTH"
    )
    pricing_service.create_or_update_pricing_schema(
        actor=staff(Role.BRANCH_ADMIN), branch_id=1, grade_id=1, registration_fee=900, monthly_fee=900, service_fee=0
    )

    stored = world.registrations.get_by_id(registration.registration_id)
    assert stored.registration_fee == Decimal("500.00")
    assert stored.total_amount == Decimal("900.00")


def test_student_can_register_once_per_year(registration_service):
    registration_service.create_registration(actor=staff(Role.REGISTRAR), student_id=1, payment_duration="ONE_MONTH")

    with pytest.raises(ConflictError):
        registration_service.create_registration(actor=staff(Role.REGISTRAR), student_id=1, payment_duration="ONE_MONTH")


def test_unknown_student(registration_service):
    with pytest.raises(NotFoundError):
        registration_service.create_registration(actor=staff(Role.REGISTRAR), student_id=77, payment_duration="ONE_MONTH")


def test_invalid_duration(registration_service):
    with pytest.raises(ValidationError):
        registration_service.create_registration(actor=staff(Role.REGISTRAR), student_id=1, payment_duration="WEEKLY")


def test_registrar_limited_to_own_branch(registration_service):
    with pytest.raises(AuthorizationError):
        registration_service.create_registration(actor=staff(Role.REGISTRAR), student_id=3, payment_duration="ONE_MONTH")


def test_no_active_year(world, registration_service):
    world.db.tables["years"].clear()

    with pytest.raises(ValidationError) as exc:
        registration_service.create_registration(actor=staff(Role.REGISTRAR), student_id=1, payment_duration="ONE_MONTH")

    assert exc.value.message == "No active academic year found"


def test_listing_is_scoped_to_actor_branch(world, registration_service):
    world.add_registration(student_id=1)
    world.add_registration(student_id=3)

    page = registration_service.list_registrations(actor=staff(Role.CASHIER), filters=RegistrationFilter(branch_id=2))

    assert page.total == 1
    assert [row["branch_id"] for row in page.items] == [1]


def test_super_admin_listing_pages(world, registration_service):
    world.add_registration(student_id=1)
    world.add_registration(student_id=2)
    world.add_registration(student_id=3)

    page = registration_service.list_registrations(
        actor=staff(Role.SUPER_ADMIN, branch_id=None), filters=RegistrationFilter(page=2, limit=2)
    )

    assert page.total == 3
    assert page.pages == 2
    assert len(page.items) == 1


def test_details_include_invoice_and_payments(world, registration_service, payment_service):
    registration = world.add_registration()
    payment_service.handle_payment(
        actor=staff(Role.CASHIER),
        registration_id=registration.registration_id,
        payment_method="CASH",
        receipt_number="R-1",
        paid_amount=1500,
    )

    details = registration_service.get_registration_details(
        actor=staff(Role.CASHIER), registration_id=str(registration.registration_id)
    )

    assert details.registration.status == RegistrationStatus.PAYMENT_COMPLETED
    assert details.invoice is not None
    assert len(details.invoice_items) == 2
    assert len(details.payments) == 1
    assert details.student.student_code == "STU-0001"


def test_details_of_other_branch_are_hidden(world, registration_service):
    registration = world.add_registration(student_id=3)

    with pytest.raises(NotFoundError):
        registration_service.get_registration_details(actor=staff(Role.CASHIER), registration_id=registration.registration_id)
