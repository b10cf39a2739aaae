from __future__ import annotations

from flask import Flask, request

from ..common.http import current_user, json_body, json_response, roles_required
from ..common.validators import optional_int, parse_enum
from ..container import Container
from ..core.enums import PaymentDuration, RegistrationStatus
from ..users.permissions import CASHIER_ROLES, REGISTRAR_ROLES
from .model import RegistrationFilter


def registration_filter_from_args(args) -> RegistrationFilter:
    status = args.get("status")
    duration = args.get("paymentDuration")
    return RegistrationFilter(
        branch_id=optional_int(args.get("branchId"), "branchId"),
        grade_id=optional_int(args.get("gradeId"), "gradeId"),
        status=parse_enum(RegistrationStatus, status, "status") if status else None,
        payment_duration=parse_enum(PaymentDuration, duration, "paymentDuration") if duration else None,
        search=(args.get("search") or "").strip() or None,
        page=optional_int(args.get("page"), "page") or 1,
        limit=optional_int(args.get("limit"), "limit") or 10,
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/registrations", methods=["POST"], endpoint="create_registration")
    @roles_required(*REGISTRAR_ROLES)
    def create_registration():
        data = json_body()
        registration = container.registration_service.create_registration(
            actor=current_user(),
            student_id=data.get("studentId"),
            payment_duration=data.get("paymentDuration"),
        )
        return json_response({"message": "Registration created successfully", "registration": registration}, 201)

    @app.route("/api/registration-payments", methods=["GET"], endpoint="list_registration_payments")
    @roles_required(*CASHIER_ROLES)
    def list_registration_payments():
        page = container.registration_service.list_registrations(
            actor=current_user(),
            filters=registration_filter_from_args(request.args),
        )
        return json_response(
            {
                "registrations": page.items,
                "pagination": {"page": page.page, "limit": page.limit, "total": page.total, "pages": page.pages},
            }
        )

    @app.route("/api/registration-payments/details", methods=["GET"], endpoint="registration_payment_details")
    @roles_required(*CASHIER_ROLES)
    def registration_payment_details():
        details = container.registration_service.get_registration_details(
            actor=current_user(),
            registration_id=request.args.get("registrationId"),
        )
        return json_response(details)
