from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, List

from ..common.money import to_money
from ..common.validators import require_int, require_money, require_non_negative
from ..core.enums import PaymentDuration
from ..core.exceptions import NotFoundError, ValidationError
from ..users.model import SessionUser
from ..users.permissions import ensure_branch_write
from .model import PAYMENT_OPTION_TABLE, MONTHS_BY_DURATION, PaymentOption, PricingQuote, PricingSchema
from .repository import PricingRepository

logger = logging.getLogger(__name__)


def build_payment_options(schema: PricingSchema) -> List[PaymentOption]:
    return [
        PaymentOption(
            duration=duration,
            label=label,
            months=months,
            additional_fee=to_money(schema.monthly_fee * months),
        )
        for duration, label, months in PAYMENT_OPTION_TABLE
    ]


def additional_fee_for(schema: PricingSchema, duration: PaymentDuration) -> Decimal:
    return to_money(schema.monthly_fee * MONTHS_BY_DURATION[duration])


class PricingService:
    """Use case: resolve and maintain fee schedules per branch+grade."""

    def __init__(self, pricing: PricingRepository):
        self._pricing = pricing

    def get_pricing_schema(self, *, branch_id: Any, grade_id: Any) -> PricingQuote:
        if branch_id in (None, "") or grade_id in (None, ""):
            raise ValidationError("Branch ID and Grade ID are required")
        schema = self._pricing.get_active(
            branch_id=require_int(branch_id, "branchId"),
            grade_id=require_int(grade_id, "gradeId"),
        )
        if not schema:
            raise NotFoundError("Pricing schema not found for this branch and grade")
        return PricingQuote(pricing_schema=schema, payment_options=build_payment_options(schema))

    def create_or_update_pricing_schema(
        self,
        *,
        actor: SessionUser,
        branch_id: Any,
        grade_id: Any,
        registration_fee: Any,
        monthly_fee: Any,
        service_fee: Any,
    ) -> PricingSchema:
        if any(v in (None, "") for v in (branch_id, grade_id, registration_fee, monthly_fee, service_fee)):
            raise ValidationError("All fields are required")
        if not actor.school_id:
            raise ValidationError("User school not found")

        branch_id = require_int(branch_id, "branchId")
        ensure_branch_write(actor, branch_id)

        schema = self._pricing.upsert(
            school_id=int(actor.school_id),
            branch_id=branch_id,
            grade_id=require_int(grade_id, "gradeId"),
            registration_fee=require_non_negative(require_money(registration_fee, "registrationFee"), "registrationFee"),
            monthly_fee=require_non_negative(require_money(monthly_fee, "monthlyFee"), "monthlyFee"),
            service_fee=require_non_negative(require_money(service_fee, "serviceFee"), "serviceFee"),
        )
        logger.info("Pricing schema saved for branch=%s grade=%s by user=%s", schema.branch_id, schema.grade_id, actor.user_id)
        return schema
