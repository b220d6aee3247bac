"""Interest earned by savings deposits"""

from rosca_ledger.domain.models import SavingInterest
from rosca_ledger.domain.exceptions import InvalidSavingPeriodError


def calculate_saving_interest(
    amount: float,
    rate: float,
    period_index: int,
    total_duration_months: int,
) -> SavingInterest:
    """
    Interest a deposit earns from its period until the end of the cycle.

    The deposit accrues `rate` per remaining month, so a deposit made later in
    the cycle earns over a shorter window:

        multiplier = total_duration_months - period_index
        expected_interest_at_end = amount * rate * multiplier
        interest_per_month = expected_interest_at_end / multiplier

    Args:
        amount: Deposit amount
        rate: Cycle interest rate as a decimal fraction
        period_index: 0-based month of the deposit within the cycle
        total_duration_months: Cycle length in months

    Raises:
        InvalidSavingPeriodError: If the deposit falls on or after the last month

    Example:
        1000 at 0.1, period 0 of 6 -> 600 at end, 100 per month
    """
    multiplier = total_duration_months - period_index
    if multiplier <= 0:
        raise InvalidSavingPeriodError(
            f"Period {period_index} is outside a {total_duration_months}-month cycle"
        )

    expected_interest_at_end = amount * (rate * multiplier)
    interest_per_month = expected_interest_at_end / multiplier

    return SavingInterest(
        interest_per_month=interest_per_month,
        expected_interest_at_end=expected_interest_at_end,
    )
