"""Validation pipeline for the salary form.

Orchestrates field rules, cross-field rules and eligibility over the whole
form, with per-field state, a result cache and debounced re-evaluation.

Field state machine:
    untouched -> valid | invalid   (on field_changed, field_blurred, form_submitted)

Real-time path (per keystroke):
    field_changed() schedules validation of the field and every field that
    depends on it. A newer edit of the same field within the debounce window
    supersedes the pending request; run_pending() executes what is due.

Blur path:
    field_blurred() cancels the pending request and validates immediately.

Submit path:
    validate_all() / form_submitted() bypass the cache, validate every field
    and aggregate all errors. One invalid field never hides another.

A field's error is replaced wholesale on every pass. A field that stops
being active (its scheme toggled off) loses its error in the same pass.

Usage:
    from salarycalc.sdk.validation import ValidationPipeline

    pipeline = ValidationPipeline(rates)
    errors = pipeline.validate_all(values)
    for error in prioritize_errors(errors.values(), pipeline.field_order):
        print(error.field, error.message)
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..config import DEFAULT_DEBOUNCE_MS
from ..contributions.calculator import round2
from ..contributions.rates import StatutoryRates
from ..schemas import is_blank
from .cache import ValidationCache
from .cross_field import CrossFieldRuleEngine, merge_errors
from .fields import validate_value
from .rules import (
    CATEGORY_RANK,
    SEVERITY_RANK,
    ErrorCategory,
    FieldRule,
    Severity,
    ValidationError,
    build_field_rules,
)
from .scheduler import Debouncer

logger = logging.getLogger(__name__)


class FieldState(str, Enum):
    UNTOUCHED = "untouched"
    VALID = "valid"
    INVALID = "invalid"


class ValidationSummary(BaseModel):
    """Aggregate view of a validation pass, for a summary panel."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    total: int = Field(..., ge=0, description="Number of fields with a finding")
    critical: int = Field(..., ge=0, description="Findings with Error severity")
    warnings: int = Field(..., ge=0)
    info: int = Field(..., ge=0)
    completion_percentage: Decimal = Field(
        ..., description="Filled share of required and conditionally required fields"
    )
    is_valid: bool
    overall_status: Literal["error", "warning", "success", "info"]


def prioritize_errors(
    errors: Iterable[ValidationError],
    field_order: Sequence[str] = (),
) -> List[ValidationError]:
    """Sort errors for display: severity, then category, then form order."""
    position = {name: i for i, name in enumerate(field_order)}
    return sorted(
        errors,
        key=lambda e: (
            SEVERITY_RANK[e.severity],
            CATEGORY_RANK[e.category],
            position.get(e.field, len(position)),
        ),
    )


def categorize_errors(
    errors: Iterable[ValidationError],
    field_rules: Dict[str, FieldRule],
) -> Dict[str, List[ValidationError]]:
    """Group errors into salary / pf / esi / business sections.

    Cross-field business-rule violations (rate caps, eligibility) go to
    'business'; everything else goes to the section of its field.
    """
    groups: Dict[str, List[ValidationError]] = {
        "salary": [],
        "pf": [],
        "esi": [],
        "business": [],
    }
    for error in errors:
        rule = field_rules.get(error.field)
        if error.source == "cross_field" and error.category == ErrorCategory.BUSINESS_RULE:
            groups["business"].append(error)
        elif rule is not None:
            groups[rule.section].append(error)
        else:
            groups["business"].append(error)
    return groups


class ValidationPipeline:
    """Stateful orchestrator of field and cross-field validation."""

    def __init__(
        self,
        rates: StatutoryRates,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        clock: Optional[Callable[[], float]] = None,
        cache: Optional[ValidationCache] = None,
    ):
        self.rates = rates
        self.field_rules = build_field_rules(rates)
        self.cross = CrossFieldRuleEngine.from_rates(rates, self.field_rules)
        self.cache = cache if cache is not None else ValidationCache()
        self.debouncer = Debouncer(debounce_ms, clock)
        self.states: Dict[str, FieldState] = {
            name: FieldState.UNTOUCHED for name in self.field_rules
        }
        self._errors: Dict[str, ValidationError] = {}

    @property
    def field_order(self) -> List[str]:
        return list(self.field_rules)

    @property
    def errors(self) -> Dict[str, ValidationError]:
        """Current error set, in form order. A copy; safe to hold."""
        return {name: self._errors[name] for name in self.field_rules if name in self._errors}

    def _rule(self, field: str) -> FieldRule:
        try:
            return self.field_rules[field]
        except KeyError:
            raise ValueError(f"Unknown form field: {field!r}")

    def _context(self, field: str, values: Dict[str, Any]) -> tuple:
        return tuple((name, values.get(name)) for name in self.cross.context_fields(field))

    def _check(self, field: str, values: Dict[str, Any]) -> Optional[ValidationError]:
        """Uncached validation of one field against a full snapshot."""
        rule = self._rule(field)
        if not self.cross.is_active(field, values):
            return None
        field_error = validate_value(rule, values.get(field), self.cross.is_required(field, values))
        cross_error = self.cross.evaluate(values, {field}).get(field)
        return merge_errors(field_error, cross_error)

    def _record(self, field: str, error: Optional[ValidationError]) -> None:
        if error is None:
            self._errors.pop(field, None)
            self.states[field] = FieldState.VALID
        else:
            self._errors[field] = error
            self.states[field] = FieldState.INVALID

    def affected_fields(self, field: str) -> List[str]:
        """The field plus every field depending on it, in form order."""
        self._rule(field)
        affected = {field} | self.cross.dependents_of(field)
        return [name for name in self.field_rules if name in affected]

    # -------------------------------------------------------------------------
    # Single field
    # -------------------------------------------------------------------------

    def validate_field(
        self,
        field: str,
        value: Any,
        values: Dict[str, Any],
    ) -> Optional[ValidationError]:
        """Validate one field with `value` substituted into the snapshot.

        Cached by (field, value, context). Does not touch field state.
        """
        self._rule(field)
        snapshot = dict(values)
        snapshot[field] = value
        context = self._context(field, snapshot)

        cached = self.cache.get(field, value, context)
        if not ValidationCache.is_miss(cached):
            return cached

        result = self._check(field, snapshot)
        self.cache.put(field, value, context, result)
        return result

    def _validate_fields(
        self,
        fields: List[str],
        values: Dict[str, Any],
    ) -> Dict[str, Optional[ValidationError]]:
        results = {}
        for name in fields:
            error = self.validate_field(name, values.get(name), values)
            self._record(name, error)
            results[name] = error
        return results

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def field_changed(self, field: str, values: Dict[str, Any]) -> None:
        """Schedule debounced validation after an edit of `field`.

        Args:
            field: Edited field
            values: Form values after the edit (copied)
        """
        fields = self.affected_fields(field)
        self.debouncer.submit(field, self._validate_fields, fields, dict(values))

    def field_blurred(self, field: str, values: Dict[str, Any]) -> Dict[str, Optional[ValidationError]]:
        """Validate `field` and its dependents now, dropping any pending request."""
        self.debouncer.cancel(field)
        return self._validate_fields(self.affected_fields(field), dict(values))

    def run_pending(self, now: Optional[float] = None) -> List[Dict[str, Optional[ValidationError]]]:
        """Run debounced requests whose window has elapsed."""
        return self.debouncer.run_due(now)

    def flush(self) -> List[Dict[str, Optional[ValidationError]]]:
        """Run every pending debounced request now."""
        return self.debouncer.flush()

    def validate_all(self, values: Dict[str, Any]) -> Dict[str, ValidationError]:
        """Validate every field, bypassing the cache.

        Pending debounced requests are dropped; this pass supersedes them.

        Returns:
            Dict of field -> error for every field with a finding, in form order
        """
        for key in self.debouncer.pending:
            self.debouncer.cancel(key)

        snapshot = dict(values)
        cross_errors = self.cross.evaluate(snapshot)
        for name in self.field_rules:
            error = None
            if self.cross.is_active(name, snapshot):
                field_error = validate_value(
                    self.field_rules[name],
                    snapshot.get(name),
                    self.cross.is_required(name, snapshot),
                )
                error = merge_errors(field_error, cross_errors.get(name))
            self._record(name, error)

        logger.debug(f"validate_all: {len(self._errors)} field(s) with errors")
        return self.errors

    def form_submitted(self, values: Dict[str, Any]) -> Dict[str, ValidationError]:
        """Submit event: exhaustive validation of the whole form."""
        return self.validate_all(values)

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def prioritized(self) -> List[ValidationError]:
        return prioritize_errors(self._errors.values(), self.field_order)

    def categorized(self) -> Dict[str, List[ValidationError]]:
        return categorize_errors(self.prioritized(), self.field_rules)

    def completion_percentage(self, values: Dict[str, Any]) -> Decimal:
        """Share of required (incl. conditionally required) fields filled in."""
        required = [
            name for name in self.field_rules
            if self.cross.is_active(name, values) and self.cross.is_required(name, values)
        ]
        if not required:
            return round2(Decimal("0"))
        filled = sum(1 for name in required if not is_blank(values.get(name)))
        return round2(Decimal(filled) / Decimal(len(required)) * 100)

    def summary(self, values: Dict[str, Any]) -> ValidationSummary:
        """Summarize the current error set for `values`."""
        errors = list(self._errors.values())
        critical = sum(1 for e in errors if e.severity == Severity.ERROR)
        warnings = sum(1 for e in errors if e.severity == Severity.WARNING)
        info = sum(1 for e in errors if e.severity == Severity.INFO)
        completion = self.completion_percentage(values)
        is_valid = critical == 0

        if critical:
            status = "error"
        elif errors:
            status = "warning"
        elif completion == 100:
            status = "success"
        else:
            status = "info"

        return ValidationSummary(
            total=len(errors),
            critical=critical,
            warnings=warnings,
            info=info,
            completion_percentage=completion,
            is_valid=is_valid,
            overall_status=status,
        )
