"""Employee/employer contribution calculations.

Pure calculation - receives typed inputs, returns a ContributionResult.
No form values, no validation errors. Out-of-range rates are reported
through is_compliant and never clamped.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Tuple

from ..schemas import ZERO, ContributionResult, ContributionScheme, SalaryProfile
from .eligibility import is_eligible
from .rates import RateConfiguration, require_config

CENT = Decimal("0.01")


def round2(amount: Decimal) -> Decimal:
    """Round to 2 decimal places, half up.

    Example: 187.125 -> 187.13 (banker's rounding would give 187.12)
    """
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def is_rate_compliant(
    employee_rate: Optional[Decimal],
    additional_rate: Decimal,
    config: RateConfiguration,
) -> bool:
    """Check both rate bands and the total-rate cap.

    A missing employee rate is never compliant.
    """
    if employee_rate is None:
        return False
    if not config.min_employee_rate <= employee_rate <= config.max_employee_rate:
        return False
    if not config.min_additional_rate <= additional_rate <= config.max_additional_rate:
        return False
    return employee_rate + additional_rate <= config.max_total_rate


def compute_contribution(
    profile: SalaryProfile,
    scheme: ContributionScheme,
    config: Optional[RateConfiguration],
) -> ContributionResult:
    """Compute one scheme's contributions for a salary.

    Args:
        profile: Salary fields (salary_amount is the base)
        scheme: Scheme toggle and rates
        config: Statutory constants for this scheme

    Returns:
        ContributionResult. Zeroed and non-compliant when the scheme is
        disabled or the salary is zero.

    Raises:
        RateConfigurationError: If config is None
    """
    config = require_config(config, scheme.scheme)
    salary = profile.salary_amount or ZERO

    eligible = is_eligible(salary, config) if config.has_eligibility_band else None

    if not scheme.enabled or salary <= 0:
        return ContributionResult.zero(scheme.scheme, is_eligible=eligible)

    employee_rate = scheme.employee_rate if scheme.employee_rate is not None else ZERO
    employee = round2(salary * employee_rate / 100)
    employer = round2(salary * config.employer_rate / 100)

    return ContributionResult(
        scheme=scheme.scheme,
        employee_rate=employee_rate,
        additional_rate=scheme.additional_rate,
        employer_rate=config.employer_rate,
        total_rate=employee_rate + scheme.additional_rate,
        employee_contribution=employee,
        employer_contribution=employer,
        total_contribution=employee + employer,
        is_compliant=is_rate_compliant(scheme.employee_rate, scheme.additional_rate, config),
        is_eligible=eligible,
    )


def compute_contributions(
    profile: SalaryProfile,
    pf_scheme: ContributionScheme,
    esi_scheme: ContributionScheme,
    pf_config: Optional[RateConfiguration],
    esi_config: Optional[RateConfiguration],
) -> Tuple[ContributionResult, ContributionResult]:
    """Compute PF and ESI contributions together.

    Returns:
        Tuple of (pf_result, esi_result)
    """
    return (
        compute_contribution(profile, pf_scheme, pf_config),
        compute_contribution(profile, esi_scheme, esi_config),
    )
