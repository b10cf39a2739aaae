from __future__ import annotations

import pytest

from src.school_admin.school_admin.container import Container
from src.school_admin.school_admin.core.enums import Role
from src.school_admin.school_admin.main import create_app
from src.school_admin.school_admin.pricing.service import PricingService
from src.school_admin.school_admin.users.service import AuthService
from tests.fakes import staff


@pytest.fixture
def app(
    monkeypatch,
    world,
    registration_service,
    payment_service,
    invoice_service,
    enrollment_service,
    receipt_service,
):
    monkeypatch.setenv("APP_ENV", "testing")
    container = Container(
        conn=world.db,
        users_repo=world.users,
        students_repo=world.students,
        academics_repo=world.academics,
        pricing_repo=world.pricing,
        registrations_repo=world.registrations,
        invoices_repo=world.invoices,
        payments_repo=world.payments,
        enrollments_repo=world.enrollments,
        sms=world.sms,
        auth_service=AuthService(world.users),
        pricing_service=PricingService(world.pricing),
        registration_service=registration_service,
        payment_service=payment_service,
        invoice_service=invoice_service,
        enrollment_service=enrollment_service,
        receipt_service=receipt_service,
    )
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


def login_as(client, role: Role, branch_id=1):
    with client.session_transaction() as sess:
        sess.update(staff(role, branch_id=branch_id).to_session())


def _pay_cash(client, registration_id):
    return client.post(
        "/api/registration-payments/pay",
        json={
            "registrationId": registration_id,
            "paymentMethod": "CASH",
            "discountPercentage": 10,
            "receiptNumber": "RC-9",
            "paidAmount": 1350,
            "paymentDate": "2026-03-07T10:00:00Z",
        },
    )


def test_health(client):
    res = client.get("/health")

    assert res.status_code == 200
    assert res.get_json()["status"] == "OK"


def test_login_sets_session(client):
    res = client.post("/api/auth/login", json={"email": "cashier@school.test", "password": "cashier123"})

    assert res.status_code == 200
    assert res.get_json()["user"]["role"] == "CASHIER"
    assert client.get("/api/auth/me").get_json()["user"]["fullName"] == "Abel Kebede"


def test_bad_login(client):
    res = client.post("/api/auth/login", json={"email": "cashier@school.test", "password": "nope"})

    assert res.status_code == 401
    assert res.get_json()["error"] == "Invalid email or password"


def test_requires_login(client):
    assert client.get("/api/invoices").status_code == 401


def test_role_is_enforced(client):
    login_as(client, Role.CASHIER)

    res = client.post("/api/registrations", json={"studentId": 1, "paymentDuration": "QUARTER"})

    assert res.status_code == 403
    assert res.get_json()["kind"] == "AUTHORIZATION"


def test_create_registration(client):
    login_as(client, Role.REGISTRAR)

    res = client.post("/api/registrations", json={"studentId": 1, "paymentDuration": "QUARTER"})

    assert res.status_code == 201
    body = res.get_json()["registration"]
    assert body["status"] == "PENDING_PAYMENT"
    assert body["totalAmount"] == 1500.0


def test_pay_returns_camel_case_outcome(world, client):
    registration = world.add_registration()
    login_as(client, Role.CASHIER)

    res = _pay_cash(client, registration.registration_id)

    assert res.status_code == 200
    body = res.get_json()
    assert body["invoice"]["finalAmount"] == 1350.0
    assert body["invoice"]["status"] == "PAID"
    assert body["registration"]["status"] == "PAYMENT_COMPLETED"
    assert body["redirectTo"].startswith("/dashboard/registration-payments/")


def test_pay_validation_error(world, client):
    registration = world.add_registration()
    login_as(client, Role.CASHIER)

    res = client.post(
        "/api/registration-payments/pay",
        json={"registrationId": registration.registration_id, "paymentMethod": "CASH", "paidAmount": 10},
    )

    assert res.status_code == 400
    assert res.get_json()["kind"] == "VALIDATION"


def test_unknown_invoice_is_404(client):
    login_as(client, Role.CASHIER)

    res = client.get("/api/invoices/404")

    assert res.status_code == 404
    assert res.get_json()["error"] == "Invoice not found"


def test_receipt_flow(world, client):
    registration = world.add_registration()
    login_as(client, Role.CASHIER)
    invoice_id = _pay_cash(client, registration.registration_id).get_json()["invoice"]["invoiceId"]

    blocked = client.get(f"/api/receipts/{invoice_id}")
    assert blocked.status_code == 400
    assert blocked.get_json()["needsFsNumber"] is True
    assert blocked.get_json()["invoicesNeedingFs"][0]["studentName"] == "Liya Alemu"

    res = client.put(f"/api/receipts/{invoice_id}/fs-number", json={"fsNumber": "FS-77"})
    assert res.get_json() == {"message": "FS number updated successfully", "fsNumber": "FS-77"}

    html = client.get(f"/api/receipts/{invoice_id}")
    assert html.status_code == 200
    assert html.mimetype == "text/html"
    assert b"FS-77" in html.data
    assert registration.registration_number.encode() in html.data

    data = client.get(f"/api/receipts/{invoice_id}?format=json").get_json()
    assert data["finalAmount"] == 1350.0


def test_combined_receipt_html(world, client):
    login_as(client, Role.CASHIER)
    ids = []
    for student_id in (1, 2):
        registration = world.add_registration(student_id=student_id)
        invoice_id = _pay_cash(client, registration.registration_id).get_json()["invoice"]["invoiceId"]
        client.put(f"/api/receipts/{invoice_id}/fs-number", json={"fsNumber": f"FS-{student_id}"})
        ids.append(invoice_id)

    res = client.post("/api/receipts/generate", json={"invoiceIds": ids})

    assert res.status_code == 200
    assert b"GRAND TOTAL" in res.data


def test_invoice_export_download(world, client):
    registration = world.add_registration()
    login_as(client, Role.CASHIER)
    _pay_cash(client, registration.registration_id)

    res = client.get("/api/invoices/export")

    assert res.status_code == 200
    assert res.data[:2] == b"PK"
    assert "invoices-export-" in res.headers["Content-Disposition"]


def test_enroll_and_export_csv(world, client):
    registration = world.add_registration()
    login_as(client, Role.CASHIER)
    _pay_cash(client, registration.registration_id)
    login_as(client, Role.REGISTRAR)

    res = client.post("/api/enrollments", json={"registrationId": registration.registration_id, "classId": 1})
    assert res.status_code == 200
    assert res.get_json()["registration"]["status"] == "ENROLLED"

    csv_res = client.get("/api/enrollments/export")
    assert csv_res.mimetype == "text/csv"
    text = csv_res.data.decode("utf-8-sig")
    assert text.splitlines()[0].startswith("Student ID,First Name")
    assert "STU-0001" in text


def test_stats(world, client):
    world.add_registration()
    login_as(client, Role.REGISTRAR)

    body = client.get("/api/enrollments/stats").get_json()

    assert body == {"pendingPayment": 1, "readyForEnrollment": 0, "enrolled": 0, "totalRegistrations": 1}


def test_pricing_quote(client):
    login_as(client, Role.REGISTRAR)

    body = client.get("/api/pricing?branchId=1&gradeId=1").get_json()

    assert body["pricingSchema"]["monthlyFee"] == 400.0
    assert body["paymentOptions"][0]["duration"] == "ONE_MONTH"
