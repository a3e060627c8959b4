"""Payroll analytics derived from a salary and both contribution results.

Pure aggregation. Every figure is recomputed together into one frozen
snapshot; there is no incremental update path.
"""

from decimal import Decimal
from typing import Optional

from .contributions.calculator import round2
from .schemas import (
    ZERO,
    ContributionResult,
    DeductionPercentages,
    PayrollAnalyticsSnapshot,
    SalaryProfile,
    SchemeBreakdown,
)

# Pay periods per year by salary basis
PERIODS_PER_YEAR = {
    "Weekly": 52,
    "Monthly": 12,
}


def percent_of(part: Decimal, whole: Decimal) -> Decimal:
    """part as a percentage of whole, rounded to 2 places. 0 when whole is 0."""
    if whole == 0:
        return round2(ZERO)
    return round2(part / whole * 100)


def _breakdown(result: ContributionResult) -> SchemeBreakdown:
    return SchemeBreakdown(
        employee=result.employee_contribution,
        employer=result.employer_contribution,
        total=result.total_contribution,
    )


def derive_analytics(
    profile: SalaryProfile,
    pf_result: ContributionResult,
    esi_result: ContributionResult,
) -> PayrollAnalyticsSnapshot:
    """Derive gross, deductions, net, take-home % and cost-to-company.

    Args:
        profile: Salary fields (gross is salary_amount)
        pf_result: PF contribution result
        esi_result: ESI contribution result

    Returns:
        PayrollAnalyticsSnapshot
    """
    gross = profile.salary_amount or ZERO

    deductions = pf_result.employee_contribution + esi_result.employee_contribution
    employer = pf_result.employer_contribution + esi_result.employer_contribution
    net = gross - deductions
    ctc = gross + employer

    periods: Optional[int] = PERIODS_PER_YEAR.get(profile.salary_basis or "")
    annual_ctc = ctc * periods if periods else None

    return PayrollAnalyticsSnapshot(
        gross_salary=gross,
        total_deductions=deductions,
        net_salary=net,
        take_home_percentage=percent_of(net, gross),
        cost_to_company=ctc,
        employer_contribution=employer,
        pf_breakdown=_breakdown(pf_result),
        esi_breakdown=_breakdown(esi_result),
        deduction_percentages=DeductionPercentages(
            pf=percent_of(pf_result.employee_contribution, gross),
            esi=percent_of(esi_result.employee_contribution, gross),
            total=percent_of(deductions, gross),
        ),
        annual_cost_to_company=annual_ctc,
    )
