from datetime import date

from shift_roster.schemas.officer import OfficerProfileRead
from shift_roster.services.service_credit import ServiceCreditCalculator

AS_OF = date(2024, 6, 1)


def _profile(**overrides) -> OfficerProfileRead:
    data = {"id": 1, "full_name": "Pat Credit", "rank": "Officer", "hire_date": date(2015, 6, 1)}
    data.update(overrides)
    return OfficerProfileRead(**data)


def test_credit_from_hire_date() -> None:
    calculator = ServiceCreditCalculator(as_of=AS_OF)
    assert calculator.calculate(_profile()) == 9.0


def test_sergeant_credit_runs_from_promotion() -> None:
    calculator = ServiceCreditCalculator(as_of=AS_OF)
    profile = _profile(rank="Sergeant", promotion_date_sergeant=date(2020, 3, 15))

    assert calculator.reference_date(profile) == date(2020, 3, 15)
    # 4 years + 3/12 - 14/365
    assert calculator.calculate(profile) == 4.2


def test_lieutenant_without_promotion_date_uses_hire_date() -> None:
    calculator = ServiceCreditCalculator(as_of=AS_OF)
    profile = _profile(rank="Lieutenant", promotion_date_sergeant=date(2018, 1, 1))

    assert calculator.reference_date(profile) == date(2015, 6, 1)


def test_chief_uses_lieutenant_promotion() -> None:
    calculator = ServiceCreditCalculator()
    profile = _profile(rank="Chief", promotion_date_lieutenant=date(2019, 6, 1))

    assert calculator.calculate(profile, as_of=AS_OF) == 5.0


def test_positive_override_wins() -> None:
    calculator = ServiceCreditCalculator(as_of=AS_OF)

    assert calculator.calculate(_profile(service_credit_override=12.5)) == 12.5
    assert calculator.calculate(_profile(service_credit_override=0)) == 9.0


def test_credit_is_never_negative() -> None:
    calculator = ServiceCreditCalculator(as_of=AS_OF)

    assert calculator.calculate(_profile(hire_date=date(2025, 1, 1))) == 0.0
    assert calculator.calculate(_profile(hire_date=None)) == 0.0
