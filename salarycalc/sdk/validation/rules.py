"""Validation taxonomy and the declarative field rule table.

Every form field maps to one FieldRule descriptor. The descriptors are
data; fields.py interprets them. Rate bounds, patterns and salary limits
come from the rate configuration, so the table is built per StatutoryRates.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..contributions.rates import StatutoryRates
from ..schemas import PAYMENT_TYPES, SALARY_BASES, SCHEME_FIELDS


class ErrorCategory(str, Enum):
    """What kind of rule produced an error.

    DUPLICATE, RELATIONSHIP, AGE and PHONE are reserved for the family
    member validator and are never produced here.
    """

    REQUIRED = "Required"
    FORMAT = "Format"
    DUPLICATE = "Duplicate"
    BUSINESS_RULE = "BusinessRule"
    RELATIONSHIP = "Relationship"
    AGE = "Age"
    PHONE = "Phone"
    OTHER = "Other"


class Severity(str, Enum):
    ERROR = "Error"
    WARNING = "Warning"
    INFO = "Info"


# Lower sorts first
SEVERITY_RANK = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}
CATEGORY_RANK = {
    ErrorCategory.REQUIRED: 0,
    ErrorCategory.BUSINESS_RULE: 1,
    ErrorCategory.FORMAT: 2,
    ErrorCategory.DUPLICATE: 3,
    ErrorCategory.RELATIONSHIP: 4,
    ErrorCategory.AGE: 5,
    ErrorCategory.PHONE: 6,
    ErrorCategory.OTHER: 7,
}


class ValidationError(BaseModel):
    """A single validation finding for one field.

    Findings are data, never raised. The pipeline replaces a field's
    finding wholesale on every pass.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str = Field(..., description="Form field name (e.g., 'pf_number')")
    message: str = Field(..., description="Human-readable message")
    category: ErrorCategory = Field(..., description="Rule family that produced it")
    severity: Severity = Field(default=Severity.ERROR)
    source: Literal["field", "cross_field"] = Field(
        default="field", description="Field rule or cross-field rule"
    )


FieldKind = Literal["number", "text", "choice", "flag", "derived"]
Section = Literal["salary", "pf", "esi"]


@dataclass(frozen=True)
class FieldRule:
    """Declarative checks for one form field, evaluated in order:
    required, format (choices/flag/parse/decimals/pattern/step), bounds.
    """

    name: str
    label: str
    section: Section
    kind: FieldKind
    required: bool = False
    enabled_by: Optional[str] = None
    choices: Tuple[str, ...] = ()
    pattern: Optional[str] = None
    pattern_example: Optional[str] = None
    min_value: Optional[Decimal] = None
    max_value: Optional[Decimal] = None
    step: Optional[Decimal] = None
    max_decimals: Optional[int] = None


def _scheme_rules(rates: StatutoryRates, scheme: str) -> Dict[str, FieldRule]:
    config = rates.for_scheme(scheme)
    names = SCHEME_FIELDS[scheme]
    label = scheme.upper()

    return {
        names["toggle"]: FieldRule(
            name=names["toggle"],
            label=f"{label} Contribution",
            section=scheme,
            kind="flag",
        ),
        names["number"]: FieldRule(
            name=names["number"],
            label=f"{label} Number",
            section=scheme,
            kind="text",
            enabled_by=names["toggle"],
            pattern=config.number_pattern,
            pattern_example=config.number_example,
        ),
        names["employee_rate"]: FieldRule(
            name=names["employee_rate"],
            label=f"Employee {label} Rate",
            section=scheme,
            kind="number",
            enabled_by=names["toggle"],
            min_value=config.min_employee_rate,
            max_value=config.max_employee_rate,
            step=config.employee_rate_step,
        ),
        names["additional_rate"]: FieldRule(
            name=names["additional_rate"],
            label=f"Additional {label} Rate",
            section=scheme,
            kind="number",
            enabled_by=names["toggle"],
            min_value=config.min_additional_rate,
            max_value=config.max_additional_rate,
        ),
        names["total_rate"]: FieldRule(
            name=names["total_rate"],
            label=f"Total {label} Rate",
            section=scheme,
            kind="derived",
            enabled_by=names["toggle"],
        ),
    }


def build_field_rules(rates: StatutoryRates) -> Dict[str, FieldRule]:
    """Build the ordered field rule table for a rate configuration.

    Order is form order; it is also the display order for errors.
    """
    rules = {
        "salary_amount": FieldRule(
            name="salary_amount",
            label="Salary Amount",
            section="salary",
            kind="number",
            required=True,
            min_value=Decimal("0"),
            max_value=rates.limits.max_salary_amount,
            max_decimals=rates.limits.salary_decimal_places,
        ),
        "salary_basis": FieldRule(
            name="salary_basis",
            label="Salary Basis",
            section="salary",
            kind="choice",
            required=True,
            choices=SALARY_BASES,
        ),
        "payment_type": FieldRule(
            name="payment_type",
            label="Payment Type",
            section="salary",
            kind="choice",
            required=True,
            choices=PAYMENT_TYPES,
        ),
    }
    rules.update(_scheme_rules(rates, "pf"))
    rules.update(_scheme_rules(rates, "esi"))
    return rules
