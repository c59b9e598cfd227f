from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from shift_roster.schemas.officer import OfficerProfileRead


class ServiceCreditCalculator:
    """Seniority credit in years, one decimal place.

    A positive manual override always wins. Otherwise credit runs from the
    promotion date matching the officer's rank (sergeants from their sergeant
    promotion, lieutenants and chiefs from their lieutenant promotion) or from
    the hire date when no matching promotion date is recorded.

    The year, month and day differences are taken component-wise and summed
    as ``years + months / 12 + days / 365``.
    """

    def __init__(self, as_of: date | None = None) -> None:
        self.as_of = as_of

    def reference_date(self, profile: OfficerProfileRead) -> date | None:
        rank = (profile.rank or "").lower()
        if ("sergeant" in rank or "sgt" in rank) and profile.promotion_date_sergeant:
            return profile.promotion_date_sergeant
        if ("lieutenant" in rank or "lt" in rank) and profile.promotion_date_lieutenant:
            return profile.promotion_date_lieutenant
        if "chief" in rank and profile.promotion_date_lieutenant:
            return profile.promotion_date_lieutenant
        return profile.hire_date

    def calculate(self, profile: OfficerProfileRead, as_of: date | None = None) -> float:
        override = profile.service_credit_override
        if override is not None and float(override) > 0:
            return float(override)

        start = self.reference_date(profile)
        if start is None:
            return 0.0

        today = as_of or self.as_of or date.today()
        credit = (
            Decimal(today.year - start.year)
            + Decimal(today.month - start.month) / Decimal(12)
            + Decimal(today.day - start.day) / Decimal(365)
        )
        rounded = credit.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
        return max(0.0, float(rounded))
