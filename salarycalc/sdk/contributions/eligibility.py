"""Salary eligibility band evaluation (ESI).

Eligibility is a property of the salary alone. It is evaluated whether or
not the scheme is toggled on; the pipeline flags a scheme enabled on an
ineligible salary instead of switching it off.
"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict

from .rates import RateConfiguration, RateConfigurationError

EligibilityState = Literal["eligible", "below_minimum", "above_threshold"]


class EligibilityStatus(BaseModel):
    """Where a salary falls relative to a scheme's eligibility band."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    state: EligibilityState
    message: str

    @property
    def eligible(self) -> bool:
        return self.state == "eligible"


def _band(config: RateConfiguration) -> tuple:
    if not config.has_eligibility_band:
        raise RateConfigurationError("Scheme has no salary eligibility band configured")
    return (config.min_salary_threshold or Decimal("0"), config.salary_threshold)


def is_eligible(salary: Decimal, config: RateConfiguration) -> bool:
    """True iff min_salary_threshold <= salary <= salary_threshold (inclusive)."""
    low, high = _band(config)
    return low <= salary <= high


def eligibility_status(salary: Decimal, config: RateConfiguration) -> EligibilityStatus:
    """Describe the salary's position in the band, for messages and display."""
    low, high = _band(config)
    if salary < low:
        return EligibilityStatus(
            state="below_minimum",
            message=f"Salary is below the minimum of {low:,} for this scheme",
        )
    if salary > high:
        return EligibilityStatus(
            state="above_threshold",
            message=f"Salary exceeds the eligibility limit of {high:,}",
        )
    return EligibilityStatus(
        state="eligible",
        message=f"Eligible (salary between {low:,} and {high:,})",
    )
