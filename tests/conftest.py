from __future__ import annotations

import pytest

from src.school_admin.school_admin.enrollments.service import EnrollmentService
from src.school_admin.school_admin.invoices.service import InvoiceService
from src.school_admin.school_admin.payments.service import PaymentService
from src.school_admin.school_admin.pricing.service import PricingService
from src.school_admin.school_admin.receipts.service import ReceiptService
from src.school_admin.school_admin.registrations.service import RegistrationService
from tests.fakes import NOW, World


@pytest.fixture
def fixed_now():
    return NOW


@pytest.fixture
def world():
    return World()


@pytest.fixture
def pricing_service(world):
    return PricingService(world.pricing)


@pytest.fixture
def registration_service(world, fixed_now):
    return RegistrationService(
        world.db,
        world.registrations,
        world.students,
        world.pricing,
        world.academics,
        world.invoices,
        world.payments,
        world.numbers,
        payment_due_days=7,
        lock_timeout_seconds=15,
        clock=lambda: fixed_now,
    )


@pytest.fixture
def payment_service(world, fixed_now):
    return PaymentService(
        world.db,
        world.registrations,
        world.invoices,
        world.payments,
        world.students,
        world.numbers,
        world.sms,
        payment_link_base_url="https://pay.school.test",
        school_name="Yeka Michael Schools",
        clock=lambda: fixed_now,
    )


@pytest.fixture
def invoice_service(world, fixed_now):
    return InvoiceService(
        world.db,
        world.invoices,
        world.payments,
        world.students,
        world.numbers,
        world.sms,
        payment_link_base_url="https://pay.school.test",
        clock=lambda: fixed_now,
    )


@pytest.fixture
def enrollment_service(world, fixed_now):
    return EnrollmentService(world.db, world.registrations, world.enrollments, world.students, world.academics, clock=lambda: fixed_now)


@pytest.fixture
def receipt_service(world, fixed_now):
    return ReceiptService(
        world.invoices,
        world.payments,
        world.registrations,
        world.students,
        world.users,
        school_name="Yeka Michael Schools",
        clock=lambda: fixed_now,
    )
