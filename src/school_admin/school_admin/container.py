from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .academics.mysql_academic_repository import MySQLAcademicRepository
from .common.numbering import DocumentNumberGenerator
from .core.constants import (
    DEFAULT_PAYMENT_DUE_DAYS,
    DEFAULT_REGISTRATION_LOCK_TIMEOUT_SECONDS,
    DEFAULT_SCHOOL_NAME,
)
from .database.connection import DBConfig, DatabaseConnection
from .database.mysql_sequence_repository import MySQLSequenceRepository
from .enrollments.mysql_enrollment_repository import MySQLEnrollmentRepository
from .enrollments.service import EnrollmentService
from .invoices.mysql_invoice_repository import MySQLInvoiceRepository
from .invoices.service import InvoiceService
from .notifications.sms import SmsConfig, SmsSender, build_sms_sender
from .payments.mysql_payment_repository import MySQLPaymentRepository
from .payments.service import PaymentService
from .pricing.mysql_pricing_repository import MySQLPricingRepository
from .pricing.service import PricingService
from .receipts.service import ReceiptService
from .registrations.mysql_registration_repository import MySQLRegistrationRepository
from .registrations.service import RegistrationService
from .students.mysql_student_repository import MySQLStudentRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: Any

    users_repo: Any
    students_repo: Any
    academics_repo: Any
    pricing_repo: Any
    registrations_repo: Any
    invoices_repo: Any
    payments_repo: Any
    enrollments_repo: Any
    sms: SmsSender

    auth_service: AuthService
    pricing_service: PricingService
    registration_service: RegistrationService
    payment_service: PaymentService
    invoice_service: InvoiceService
    enrollment_service: EnrollmentService
    receipt_service: ReceiptService


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection(config)

    school_name = getattr(settings, "SCHOOL_NAME", DEFAULT_SCHOOL_NAME)
    payment_link_base_url = getattr(settings, "PAYMENT_LINK_BASE_URL", "http://localhost:3000")
    sms = build_sms_sender(SmsConfig.from_dict(getattr(settings, "SMS_CONFIG", None)))

    users_repo = MySQLUserRepository(conn)
    students_repo = MySQLStudentRepository(conn)
    academics_repo = MySQLAcademicRepository(conn)
    pricing_repo = MySQLPricingRepository(conn)
    registrations_repo = MySQLRegistrationRepository(conn)
    invoices_repo = MySQLInvoiceRepository(conn)
    payments_repo = MySQLPaymentRepository(conn)
    enrollments_repo = MySQLEnrollmentRepository(conn)
    numbers = DocumentNumberGenerator(MySQLSequenceRepository(conn))

    return Container(
        conn=conn,
        users_repo=users_repo,
        students_repo=students_repo,
        academics_repo=academics_repo,
        pricing_repo=pricing_repo,
        registrations_repo=registrations_repo,
        invoices_repo=invoices_repo,
        payments_repo=payments_repo,
        enrollments_repo=enrollments_repo,
        sms=sms,
        auth_service=AuthService(users_repo),
        pricing_service=PricingService(pricing_repo),
        registration_service=RegistrationService(
            conn,
            registrations_repo,
            students_repo,
            pricing_repo,
            academics_repo,
            invoices_repo,
            payments_repo,
            numbers,
            payment_due_days=int(getattr(settings, "PAYMENT_DUE_DAYS", DEFAULT_PAYMENT_DUE_DAYS)),
            lock_timeout_seconds=int(
                getattr(settings, "REGISTRATION_LOCK_TIMEOUT_SECONDS", DEFAULT_REGISTRATION_LOCK_TIMEOUT_SECONDS)
            ),
        ),
        payment_service=PaymentService(
            conn,
            registrations_repo,
            invoices_repo,
            payments_repo,
            students_repo,
            numbers,
            sms,
            payment_link_base_url=payment_link_base_url,
            school_name=school_name,
        ),
        invoice_service=InvoiceService(
            conn,
            invoices_repo,
            payments_repo,
            students_repo,
            numbers,
            sms,
            payment_link_base_url=payment_link_base_url,
            school_name=school_name,
        ),
        enrollment_service=EnrollmentService(conn, registrations_repo, enrollments_repo, students_repo, academics_repo),
        receipt_service=ReceiptService(
            invoices_repo,
            payments_repo,
            registrations_repo,
            students_repo,
            users_repo,
            school_name=school_name,
        ),
    )
