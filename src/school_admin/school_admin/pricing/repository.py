from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol

from .model import PricingSchema


class PricingRepository(Protocol):
    def get_active(self, *, branch_id: int, grade_id: int) -> Optional[PricingSchema]:
        raise NotImplementedError

    def upsert(
        self,
        *,
        school_id: int,
        branch_id: int,
        grade_id: int,
        registration_fee: Decimal,
        monthly_fee: Decimal,
        service_fee: Decimal,
    ) -> PricingSchema:
        """Insert or overwrite the row keyed by (branch_id, grade_id) and mark it active."""

        raise NotImplementedError
