"""Salary engine - the call contracts used by form callers.

SDK layer - pure logic, returns models. No CLI or presentation.

The caller owns the form values (a dict of field name -> raw value) and
serializes all writes to it. After each edit it calls recompute() (or
on_change(), which also applies dependent-field updates and schedules
debounced validation) and swaps in the returned EngineSnapshot. Snapshots
are frozen, so a reader never sees a half-updated state.

Usage:
    from salarycalc.sdk.engine import SalaryEngine

    engine = SalaryEngine()
    snapshot = engine.recompute({"salary_amount": "50000", "pf_contribution": True, ...})
    print(snapshot.analytics.net_salary, snapshot.errors)
"""

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .analytics import derive_analytics
from .config import get_debounce_ms
from .contributions.calculator import compute_contributions
from .contributions.rates import StatutoryRates, load_rates
from .schemas import (
    SCHEME_FIELDS,
    ZERO,
    ContributionResult,
    ContributionScheme,
    PayrollAnalyticsSnapshot,
    SalaryProfile,
    build_profile,
    build_scheme,
    parse_decimal,
    parse_flag,
)
from .validation.fields import format_statutory_number
from .validation.pipeline import ValidationPipeline, ValidationSummary
from .validation.rules import ValidationError

logger = logging.getLogger(__name__)


class EngineSnapshot(BaseModel):
    """Everything the caller displays after one recomputation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    profile: SalaryProfile
    pf_scheme: ContributionScheme
    esi_scheme: ContributionScheme
    pf_result: ContributionResult
    esi_result: ContributionResult
    analytics: PayrollAnalyticsSnapshot
    errors: Dict[str, ValidationError]
    summary: ValidationSummary


def apply_change(values: Dict[str, Any], field: str, value: Any) -> Dict[str, Any]:
    """Apply one edit and the dependent-field updates it implies.

    - Statutory numbers are normalized as typed.
    - Switching a scheme off clears its number and rates.
    - Editing a rate refreshes the derived total rate.

    Returns:
        New form values dict (input is not modified)
    """
    updated = dict(values)

    for scheme, names in SCHEME_FIELDS.items():
        if field == names["number"] and isinstance(value, str):
            value = format_statutory_number(value, scheme)

    updated[field] = value

    for names in SCHEME_FIELDS.values():
        if field == names["toggle"] and parse_flag(value) is False:
            updated[names["number"]] = ""
            updated[names["employee_rate"]] = None
            updated[names["additional_rate"]] = None
            updated[names["total_rate"]] = None
        elif field in (names["employee_rate"], names["additional_rate"], names["toggle"]):
            updated[names["total_rate"]] = derive_total_rate(updated, names)

    return updated


def derive_total_rate(values: Dict[str, Any], names: Dict[str, str]):
    """employee + additional rate, or None while the employee rate is unusable."""
    employee = parse_decimal(values.get(names["employee_rate"]))
    if employee is None:
        return None
    additional = parse_decimal(values.get(names["additional_rate"])) or ZERO
    return employee + additional


class SalaryEngine:
    """Computation and validation for one open salary form."""

    def __init__(
        self,
        rates: Optional[StatutoryRates] = None,
        debounce_ms: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.rates = rates if rates is not None else load_rates()
        if debounce_ms is None:
            debounce_ms = get_debounce_ms()
        self.pipeline = ValidationPipeline(self.rates, debounce_ms=debounce_ms, clock=clock)

    def compute(
        self,
        values: Dict[str, Any],
    ) -> Tuple[SalaryProfile, ContributionScheme, ContributionScheme, ContributionResult, ContributionResult]:
        """Build typed models from form values and compute both schemes."""
        profile = build_profile(values, max_salary=self.rates.limits.max_salary_amount)
        pf_scheme = build_scheme(values, "pf")
        esi_scheme = build_scheme(values, "esi")
        pf_result, esi_result = compute_contributions(
            profile, pf_scheme, esi_scheme, self.rates.pf, self.rates.esi
        )
        return profile, pf_scheme, esi_scheme, pf_result, esi_result

    def recompute(self, values: Dict[str, Any], validate: bool = True) -> EngineSnapshot:
        """Recompute contributions, analytics and (optionally) all errors.

        Args:
            values: Current form values
            validate: Run exhaustive validation. When False the snapshot
                carries the pipeline's current error set, as left by the
                last debounced or blur validation.
        """
        profile, pf_scheme, esi_scheme, pf_result, esi_result = self.compute(values)
        if validate:
            self.pipeline.validate_all(values)

        return EngineSnapshot(
            profile=profile,
            pf_scheme=pf_scheme,
            esi_scheme=esi_scheme,
            pf_result=pf_result,
            esi_result=esi_result,
            analytics=derive_analytics(profile, pf_result, esi_result),
            errors=self.pipeline.errors,
            summary=self.pipeline.summary(values),
        )

    def on_change(
        self,
        values: Dict[str, Any],
        field: str,
        value: Any,
    ) -> Tuple[Dict[str, Any], EngineSnapshot]:
        """Apply an edit, schedule debounced validation and recompute.

        Returns:
            Tuple of (new form values, snapshot)
        """
        updated = apply_change(values, field, value)
        self.pipeline.field_changed(field, updated)
        return updated, self.recompute(updated, validate=False)

    def validate_field(self, field: str, value: Any, values: Dict[str, Any]) -> Optional[ValidationError]:
        return self.pipeline.validate_field(field, value, values)

    def validate_all(self, values: Dict[str, Any]) -> Dict[str, ValidationError]:
        return self.pipeline.validate_all(values)


_default_engine: Optional[SalaryEngine] = None


def get_default_engine() -> SalaryEngine:
    """Engine built from the rates in effect, created on first use."""
    global _default_engine
    if _default_engine is None:
        _default_engine = SalaryEngine()
    return _default_engine


def validate_field(field: str, value: Any, values: Dict[str, Any]) -> Optional[ValidationError]:
    """Validate a single field against a form snapshot (cached)."""
    return get_default_engine().validate_field(field, value, values)


def validate_all(values: Dict[str, Any]) -> Dict[str, ValidationError]:
    """Validate the whole form (uncached, exhaustive)."""
    return get_default_engine().validate_all(values)


__all__ = [
    "EngineSnapshot",
    "SalaryEngine",
    "apply_change",
    "derive_total_rate",
    "get_default_engine",
    "compute_contributions",
    "derive_analytics",
    "validate_field",
    "validate_all",
]
