from __future__ import annotations

from decimal import Decimal

import pytest

from src.school_admin.school_admin.core.enums import PaymentDuration, Role
from src.school_admin.school_admin.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.school_admin.school_admin.pricing.service import additional_fee_for
from tests.fakes import staff


def test_quote_lists_every_payment_option(pricing_service):
    quote = pricing_service.get_pricing_schema(branch_id="1", grade_id="1")

    fees = {o.duration: o.additional_fee for o in quote.payment_options}
    assert quote.pricing_schema.registration_fee == Decimal("500.00")
    assert fees[PaymentDuration.ONE_MONTH] == Decimal("400.00")
    assert fees[PaymentDuration.QUARTER] == Decimal("1000.00")
    assert fees[PaymentDuration.TEN_MONTHS] == Decimal("4000.00")
    assert len(quote.payment_options) == len(PaymentDuration)


def test_missing_schema_is_not_found(pricing_service):
    with pytest.raises(NotFoundError) as exc:
        pricing_service.get_pricing_schema(branch_id=1, grade_id=2)

    assert exc.value.message == "Pricing schema not found for this branch and grade"


def test_branch_and_grade_are_required(pricing_service):
    with pytest.raises(ValidationError):
        pricing_service.get_pricing_schema(branch_id=None, grade_id=1)


def test_upsert_is_idempotent_per_branch_and_grade(world, pricing_service):
    actor = staff(Role.BRANCH_ADMIN)
    first = pricing_service.create_or_update_pricing_schema(
        actor=actor, branch_id=1, grade_id=2, registration_fee="600", monthly_fee="450", service_fee="0"
    )
    second = pricing_service.create_or_update_pricing_schema(
        actor=actor, branch_id=1, grade_id=2, registration_fee="650", monthly_fee="450", service_fee="0"
    )

    assert first.pricing_id == second.pricing_id
    assert world.pricing.get_active(branch_id=1, grade_id=2).registration_fee == Decimal("650.00")


def test_upsert_requires_every_field(pricing_service):
    with pytest.raises(ValidationError) as exc:
        pricing_service.create_or_update_pricing_schema(
            actor=staff(Role.BRANCH_ADMIN), branch_id=1, grade_id=1, registration_fee="", monthly_fee=1, service_fee=1
        )

    assert exc.value.message == "All fields are required"


def test_upsert_rejects_negative_fee(pricing_service):
    with pytest.raises(ValidationError):
        pricing_service.create_or_update_pricing_schema(
            actor=staff(Role.BRANCH_ADMIN), branch_id=1, grade_id=1, registration_fee=-5, monthly_fee=1, service_fee=1
        )


@pytest.mark.parametrize("field, kwarg", [("registrationFee", "registration_fee"), ("monthlyFee", "monthly_fee"), ("serviceFee", "service_fee")])
def test_upsert_rejects_fee_beyond_column_range(pricing_service, field, kwarg):
    fees = dict(registration_fee=500, monthly_fee=400, service_fee=100)
    fees[kwarg] = "1e30"

    with pytest.raises(ValidationError) as exc:
        pricing_service.create_or_update_pricing_schema(actor=staff(Role.BRANCH_ADMIN), branch_id=1, grade_id=1, **fees)

    assert exc.value.details["field"] == field


def test_upsert_rounds_fees_to_cents(pricing_service):
    schema = pricing_service.create_or_update_pricing_schema(
        actor=staff(Role.BRANCH_ADMIN), branch_id=1, grade_id=3, registration_fee="9999999999.99", monthly_fee="10.005", service_fee=0
    )

    assert schema.registration_fee == Decimal("9999999999.99")
    assert schema.monthly_fee == Decimal("10.01")


def test_branch_admin_cannot_price_another_branch(pricing_service):
    with pytest.raises(AuthorizationError):
        pricing_service.create_or_update_pricing_schema(
            actor=staff(Role.BRANCH_ADMIN), branch_id=2, grade_id=1, registration_fee=1, monthly_fee=1, service_fee=1
        )


def test_quarter_fee_is_two_and_a_half_months(world):
    schema = world.pricing.get_active(branch_id=1, grade_id=1)

    assert additional_fee_for(schema, PaymentDuration.QUARTER) == Decimal("1000.00")
