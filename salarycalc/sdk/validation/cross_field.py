"""Rules that span more than one form field.

Rules are descriptors with declared inputs (fields they read) and targets
(fields they report on). The engine interprets them and derives from the
declarations which fields must be revalidated when another changes, and
which fields make up a field's cache context.

Precedence: when a field has both a field-level error and a cross-field
error, the cross-field error wins. It reflects a state inconsistency that
is true right now, whereas a format error may become moot once the
controlling toggle changes.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Set, Tuple

from ..contributions.eligibility import eligibility_status
from ..contributions.rates import RateConfiguration, StatutoryRates
from ..schemas import SCHEME_FIELDS, ZERO, is_blank, parse_decimal, parse_flag
from .rules import ErrorCategory, FieldRule, Severity, ValidationError

logger = logging.getLogger(__name__)


def _enabled(values: Dict[str, Any], toggle: str) -> bool:
    return bool(parse_flag(values.get(toggle)))


@dataclass(frozen=True)
class ConditionalRequirement:
    """Fields become required exactly when a toggle is on."""

    toggle: str
    fields: Tuple[str, ...]

    @property
    def inputs(self) -> Tuple[str, ...]:
        return (self.toggle,)

    @property
    def targets(self) -> Tuple[str, ...]:
        return self.fields

    def evaluate(self, values: Dict[str, Any], labels: Dict[str, str]) -> List[ValidationError]:
        if not _enabled(values, self.toggle):
            return []
        return [
            ValidationError(
                field=name,
                message=f"{labels.get(name, name)} is required when {labels.get(self.toggle, self.toggle)} is enabled",
                category=ErrorCategory.REQUIRED,
                source="cross_field",
            )
            for name in self.fields
            if is_blank(values.get(name))
        ]


@dataclass(frozen=True)
class RateSumRule:
    """employee + additional must not exceed the scheme's total cap.

    Reported on the synthetic total-rate field, never on either rate field.
    """

    toggle: str
    employee_field: str
    additional_field: str
    target: str
    max_total: Decimal

    @property
    def inputs(self) -> Tuple[str, ...]:
        return (self.toggle, self.employee_field, self.additional_field)

    @property
    def targets(self) -> Tuple[str, ...]:
        return (self.target,)

    def evaluate(self, values: Dict[str, Any], labels: Dict[str, str]) -> List[ValidationError]:
        if not _enabled(values, self.toggle):
            return []
        employee = parse_decimal(values.get(self.employee_field))
        raw_additional = values.get(self.additional_field)
        additional = parse_decimal(raw_additional)
        # Unparseable rates are reported by the field rules
        if employee is None or (additional is None and not is_blank(raw_additional)):
            return []
        total = employee + (additional or ZERO)
        if total <= self.max_total:
            return []
        return [
            ValidationError(
                field=self.target,
                message=(
                    f"{labels.get(self.target, self.target)} ({total:f}%) exceeds "
                    f"the maximum of {self.max_total:f}%"
                ),
                category=ErrorCategory.BUSINESS_RULE,
                severity=Severity.ERROR,
                source="cross_field",
            )
        ]


@dataclass(frozen=True)
class EligibilityRule:
    """A scheme switched on for a salary outside its eligibility band."""

    toggle: str
    salary_field: str
    target: str
    config: RateConfiguration

    @property
    def inputs(self) -> Tuple[str, ...]:
        return (self.toggle, self.salary_field)

    @property
    def targets(self) -> Tuple[str, ...]:
        return (self.target,)

    def evaluate(self, values: Dict[str, Any], labels: Dict[str, str]) -> List[ValidationError]:
        if not _enabled(values, self.toggle):
            return []
        salary = parse_decimal(values.get(self.salary_field))
        if salary is None:
            return []
        status = eligibility_status(salary, self.config)
        if status.eligible:
            return []
        logger.warning(f"{self.toggle} enabled for ineligible salary {salary}")
        return [
            ValidationError(
                field=self.target,
                message=f"{labels.get(self.target, self.target)} cannot be applied: {status.message}",
                category=ErrorCategory.BUSINESS_RULE,
                severity=Severity.ERROR,
                source="cross_field",
            )
        ]


def build_cross_field_rules(rates: StatutoryRates) -> list:
    """Cross-field rule table for both schemes."""
    rules = []
    for scheme in ("pf", "esi"):
        names = SCHEME_FIELDS[scheme]
        config = rates.for_scheme(scheme)
        rules.append(ConditionalRequirement(
            toggle=names["toggle"],
            fields=(names["number"], names["employee_rate"]),
        ))
        rules.append(RateSumRule(
            toggle=names["toggle"],
            employee_field=names["employee_rate"],
            additional_field=names["additional_rate"],
            target=names["total_rate"],
            max_total=config.max_total_rate,
        ))
        if config.has_eligibility_band:
            rules.append(EligibilityRule(
                toggle=names["toggle"],
                salary_field="salary_amount",
                target=names["toggle"],
                config=config,
            ))
    return rules


class CrossFieldRuleEngine:
    """Interpreter for cross-field rule descriptors."""

    def __init__(self, rules: list, field_rules: Dict[str, FieldRule]):
        self.rules = list(rules)
        self.field_rules = field_rules
        self.labels = {name: rule.label for name, rule in field_rules.items()}

        self._dependents: Dict[str, Set[str]] = {}
        self._context: Dict[str, Set[str]] = {}
        for rule in self.rules:
            for source in rule.inputs:
                self._dependents.setdefault(source, set()).update(rule.targets)
            for target in rule.targets:
                self._context.setdefault(target, set()).update(
                    f for f in rule.inputs if f != target
                )
        for name, field_rule in field_rules.items():
            if field_rule.enabled_by:
                self._dependents.setdefault(field_rule.enabled_by, set()).add(name)
                self._context.setdefault(name, set()).add(field_rule.enabled_by)

    @classmethod
    def from_rates(cls, rates: StatutoryRates, field_rules: Dict[str, FieldRule]) -> "CrossFieldRuleEngine":
        return cls(build_cross_field_rules(rates), field_rules)

    def is_active(self, field: str, values: Dict[str, Any]) -> bool:
        """False while the field's controlling toggle is off."""
        rule = self.field_rules.get(field)
        if rule is None or rule.enabled_by is None:
            return True
        return _enabled(values, rule.enabled_by)

    def is_required(self, field: str, values: Dict[str, Any]) -> bool:
        """Static requirement or an active conditional requirement."""
        rule = self.field_rules.get(field)
        if rule is not None and rule.required:
            return True
        for cross in self.rules:
            if isinstance(cross, ConditionalRequirement) and field in cross.fields:
                if _enabled(values, cross.toggle):
                    return True
        return False

    def dependents_of(self, field: str) -> Set[str]:
        """Fields whose result can change when `field` changes (excluding itself)."""
        return self._dependents.get(field, set()) - {field}

    def context_fields(self, field: str) -> Tuple[str, ...]:
        """Other fields a field's result depends on, in stable order."""
        return tuple(sorted(self._context.get(field, set())))

    def evaluate(
        self,
        values: Dict[str, Any],
        fields: Optional[Set[str]] = None,
    ) -> Dict[str, ValidationError]:
        """Evaluate rules, optionally only those targeting `fields`.

        Returns:
            Dict of field -> first cross-field error for that field
        """
        errors: Dict[str, ValidationError] = {}
        for rule in self.rules:
            if fields is not None and not fields.intersection(rule.targets):
                continue
            for error in rule.evaluate(values, self.labels):
                if fields is not None and error.field not in fields:
                    continue
                errors.setdefault(error.field, error)
        return errors


def merge_errors(
    field_error: Optional[ValidationError],
    cross_error: Optional[ValidationError],
) -> Optional[ValidationError]:
    """Pick the error to show for a field. Cross-field errors win."""
    return cross_error if cross_error is not None else field_error
