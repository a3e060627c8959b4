"""Pydantic schemas for salary-calc data.

All schemas use extra='forbid' to reject unknown fields. Results are
frozen: the engine never mutates a result in place, it replaces it.

Form values (the record under edit) are a plain dict of field name to raw
value, as typed by the user. build_profile() and build_scheme() turn them
into typed models leniently, so a best-effort snapshot always exists even
while some fields are invalid.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


SalaryBasis = Literal["Hourly", "Daily", "Weekly", "Monthly"]
PaymentType = Literal["Bank Transfer", "Check", "Cash"]

SALARY_BASES = ("Hourly", "Daily", "Weekly", "Monthly")
PAYMENT_TYPES = ("Bank Transfer", "Check", "Cash")

ZERO = Decimal("0")

# Rates are percentages; anything larger is unusable input
MAX_RATE_PERCENT = Decimal("100")

# Form field names per scheme
SCHEME_FIELDS = {
    "pf": {
        "toggle": "pf_contribution",
        "number": "pf_number",
        "employee_rate": "pf_employee_rate",
        "additional_rate": "pf_additional_rate",
        "total_rate": "pf_total_rate",
    },
    "esi": {
        "toggle": "esi_contribution",
        "number": "esi_number",
        "employee_rate": "esi_employee_rate",
        "additional_rate": "esi_additional_rate",
        "total_rate": "esi_total_rate",
    },
}

TRUE_STRINGS = {"true", "yes", "on", "1", "y"}
FALSE_STRINGS = {"false", "no", "off", "0", "n", ""}


# =============================================================================
# Lenient parsing helpers
# =============================================================================


def is_blank(value: Any) -> bool:
    """True for values the form treats as 'not entered'."""
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def parse_decimal(value: Any) -> Optional[Decimal]:
    """Parse a raw form value into a finite Decimal, or None.

    Booleans are rejected even though they are ints in Python.
    """
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip().replace(",", ""))
        except InvalidOperation:
            return None
    else:
        return None
    if not result.is_finite():
        return None
    return result


def parse_flag(value: Any) -> Optional[bool]:
    """Parse a toggle value. Returns None if it is not recognizable."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, Decimal)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    return None


# =============================================================================
# Form record models
# =============================================================================


class SalaryProfile(BaseModel):
    """Salary fields of the record under edit."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    salary_amount: Decimal = Field(default=ZERO, ge=0, description="Salary per basis period")
    salary_basis: Optional[SalaryBasis] = Field(default=None)
    payment_type: Optional[PaymentType] = Field(default=None)


class ContributionScheme(BaseModel):
    """User-entered settings of one contribution scheme (PF or ESI)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    scheme: Literal["pf", "esi"]
    enabled: bool = False
    statutory_number: str = ""
    employee_rate: Optional[Decimal] = Field(default=None, description="Employee rate (%)")
    additional_rate: Decimal = Field(default=ZERO, description="Additional rate (%)")

    @property
    def total_rate(self) -> Decimal:
        """Employee rate plus additional rate."""
        return (self.employee_rate or ZERO) + self.additional_rate


def build_profile(values: Dict[str, Any], max_salary: Optional[Decimal] = None) -> SalaryProfile:
    """Build a SalaryProfile from raw form values, best effort.

    A salary that is unparseable, negative or above max_salary computes as 0.
    """
    salary = parse_decimal(values.get("salary_amount"))
    if salary is None or salary < 0 or (max_salary is not None and salary > max_salary):
        salary = ZERO

    basis = values.get("salary_basis")
    payment = values.get("payment_type")

    return SalaryProfile(
        salary_amount=salary,
        salary_basis=basis if basis in SALARY_BASES else None,
        payment_type=payment if payment in PAYMENT_TYPES else None,
    )


def _parse_rate(value: Any) -> Optional[Decimal]:
    rate = parse_decimal(value)
    if rate is None or abs(rate) > MAX_RATE_PERCENT:
        return None
    return rate


def build_scheme(values: Dict[str, Any], scheme: str) -> ContributionScheme:
    """Build a ContributionScheme from raw form values, best effort.

    Rates beyond MAX_RATE_PERCENT in magnitude are treated as not entered.
    """
    names = SCHEME_FIELDS[scheme]
    number = values.get(names["number"])

    return ContributionScheme(
        scheme=scheme,
        enabled=bool(parse_flag(values.get(names["toggle"]))),
        statutory_number=number.strip() if isinstance(number, str) else "",
        employee_rate=_parse_rate(values.get(names["employee_rate"])),
        additional_rate=_parse_rate(values.get(names["additional_rate"])) or ZERO,
    )


# =============================================================================
# Result models
# =============================================================================


class ContributionResult(BaseModel):
    """Computed contributions for one scheme.

    A disabled scheme (or zero salary) yields a zeroed, non-compliant
    result. That is a defined state, not a failure.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    scheme: Literal["pf", "esi"]
    employee_rate: Decimal = ZERO
    additional_rate: Decimal = ZERO
    employer_rate: Decimal = ZERO
    total_rate: Decimal = ZERO
    employee_contribution: Decimal = ZERO
    employer_contribution: Decimal = ZERO
    total_contribution: Decimal = ZERO
    is_compliant: bool = False
    is_eligible: Optional[bool] = Field(
        default=None, description="Salary inside the eligibility band (ESI only)"
    )

    @classmethod
    def zero(cls, scheme: str, is_eligible: Optional[bool] = None) -> "ContributionResult":
        """Zeroed result for a disabled scheme or absent salary."""
        return cls(scheme=scheme, is_eligible=is_eligible)


class SchemeBreakdown(BaseModel):
    """Employee/employer split of one scheme for analytics display."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    employee: Decimal = ZERO
    employer: Decimal = ZERO
    total: Decimal = ZERO


class DeductionPercentages(BaseModel):
    """Employee deductions as a percentage of gross salary."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    pf: Decimal = ZERO
    esi: Decimal = ZERO
    total: Decimal = ZERO


class PayrollAnalyticsSnapshot(BaseModel):
    """Derived payroll figures. Always a pure function of its inputs."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    gross_salary: Decimal
    total_deductions: Decimal
    net_salary: Decimal
    take_home_percentage: Decimal
    cost_to_company: Decimal
    employer_contribution: Decimal
    pf_breakdown: SchemeBreakdown
    esi_breakdown: SchemeBreakdown
    deduction_percentages: DeductionPercentages
    annual_cost_to_company: Optional[Decimal] = Field(
        default=None, description="CTC x periods per year (Monthly/Weekly basis only)"
    )
