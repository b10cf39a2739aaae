from __future__ import annotations

from flask import Flask, request

from ..common.http import current_user, json_body, json_response, login_required, roles_required
from ..container import Container
from ..users.permissions import BRANCH_ADMIN_ROLES


def register(app: Flask, container: Container) -> None:
    @app.route("/api/pricing", methods=["GET"], endpoint="get_pricing")
    @login_required
    def get_pricing():
        quote = container.pricing_service.get_pricing_schema(
            branch_id=request.args.get("branchId"),
            grade_id=request.args.get("gradeId"),
        )
        return json_response(quote)

    @app.route("/api/pricing", methods=["POST"], endpoint="save_pricing")
    @roles_required(*BRANCH_ADMIN_ROLES)
    def save_pricing():
        data = json_body()
        schema = container.pricing_service.create_or_update_pricing_schema(
            actor=current_user(),
            branch_id=data.get("branchId"),
            grade_id=data.get("gradeId"),
            registration_fee=data.get("registrationFee"),
            monthly_fee=data.get("monthlyFee"),
            service_fee=data.get("serviceFee"),
        )
        return json_response({"message": "Pricing schema saved successfully", "pricingSchema": schema})
