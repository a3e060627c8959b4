"""Tests for the validation pipeline: state, debouncing, caching, aggregation.

Debounce timing uses an injected fake clock, so nothing sleeps.
"""

from decimal import Decimal

import pytest

from salarycalc.sdk.engine import apply_change
from salarycalc.sdk.validation import ValidationPipeline, prioritize_errors
from salarycalc.sdk.validation.cache import ValidationCache, freeze
from salarycalc.sdk.validation.pipeline import FieldState
from salarycalc.sdk.validation.rules import ErrorCategory, Severity, ValidationError
from salarycalc.sdk.validation.scheduler import Debouncer


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def pipeline(rates, clock):
    return ValidationPipeline(rates, debounce_ms=300, clock=clock)


class TestValidateAll:

    def test_valid_form_has_no_errors(self, pipeline, pf_form):
        assert pipeline.validate_all(pf_form) == {}
        assert pipeline.states["pf_number"] == FieldState.VALID

    def test_missing_pf_number_single_error(self, pipeline, pf_form):
        pf_form["pf_number"] = ""

        errors = pipeline.validate_all(pf_form)

        assert list(errors) == ["pf_number"]
        assert errors["pf_number"].category == ErrorCategory.REQUIRED
        assert pipeline.states["pf_number"] == FieldState.INVALID

    def test_ineligible_esi_is_business_rule(self, pipeline, esi_form):
        esi_form["salary_amount"] = "25000"

        errors = pipeline.validate_all(esi_form)

        assert list(errors) == ["esi_contribution"]
        assert errors["esi_contribution"].category == ErrorCategory.BUSINESS_RULE
        assert "esi_employee_rate" not in errors

    def test_non_ascii_esi_number(self, pipeline, esi_form):
        esi_form["esi_number"] = "١٢٣٤٥٦٧٨٩٠"

        errors = pipeline.validate_all(esi_form)

        assert errors["esi_number"].category == ErrorCategory.FORMAT

    def test_huge_rate_is_a_field_error(self, pipeline, pf_form):
        pf_form["pf_employee_rate"] = "1e30"

        errors = pipeline.validate_all(pf_form)

        assert errors["pf_employee_rate"].category == ErrorCategory.BUSINESS_RULE

    def test_rate_sum_on_total_not_employee_rate(self, pipeline, pf_form):
        pf_form["pf_employee_rate"] = "9"
        pf_form["pf_additional_rate"] = "9"
        assert pipeline.validate_all(pf_form) == {}

        pf_form["pf_additional_rate"] = "12"
        errors = pipeline.validate_all(pf_form)

        assert errors["pf_total_rate"].source == "cross_field"
        assert "pf_employee_rate" not in errors
        # Additional rate is also outside its own 0 - 10 band
        assert errors["pf_additional_rate"].category == ErrorCategory.BUSINESS_RULE

    def test_every_invalid_field_reported(self, pipeline):
        errors = pipeline.validate_all({
            "salary_amount": "abc",
            "salary_basis": "Yearly",
            "payment_type": None,
            "pf_contribution": True,
            "pf_number": "123",
            "pf_employee_rate": "13",
        })

        assert set(errors) == {
            "salary_amount",
            "salary_basis",
            "payment_type",
            "pf_number",
            "pf_employee_rate",
        }

    def test_deterministic(self, pipeline, pf_form):
        pf_form["pf_number"] = "bad"
        pf_form["salary_amount"] = "-1"

        first = pipeline.validate_all(pf_form)
        second = pipeline.validate_all(pf_form)

        assert first == second

    def test_cross_field_error_wins_over_field_error(self, pipeline, pf_form):
        pf_form["pf_number"] = ""

        errors = pipeline.validate_all(pf_form)

        assert errors["pf_number"].source == "cross_field"
        assert "when PF Contribution is enabled" in errors["pf_number"].message


class TestToggleOff:
    """Switching a scheme off clears its errors in the next pass."""

    def test_validate_all_after_disable(self, pipeline, pf_form):
        pf_form["pf_number"] = ""
        assert "pf_number" in pipeline.validate_all(pf_form)

        values = apply_change(pf_form, "pf_contribution", False)

        assert pipeline.validate_all(values) == {}
        assert pipeline.errors == {}

    def test_debounced_toggle_clears_dependents(self, pipeline, pf_form):
        pf_form["pf_number"] = ""
        pf_form["pf_employee_rate"] = "13"
        pipeline.validate_all(pf_form)
        assert set(pipeline.errors) == {"pf_number", "pf_employee_rate"}

        values = apply_change(pf_form, "pf_contribution", False)
        pipeline.field_changed("pf_contribution", values)
        pipeline.flush()

        assert pipeline.errors == {}


class TestDebounce:

    def test_latest_edit_wins(self, pipeline, clock):
        pipeline.field_changed("salary_amount", {"salary_amount": "abc"})
        clock.now = 0.1
        pipeline.field_changed("salary_amount", {"salary_amount": "500"})

        assert pipeline.run_pending(now=0.35) == []
        assert pipeline.states["salary_amount"] == FieldState.UNTOUCHED

        results = pipeline.run_pending(now=0.5)

        assert len(results) == 1
        assert results[0]["salary_amount"] is None
        assert pipeline.states["salary_amount"] == FieldState.VALID

    def test_dependents_revalidated(self, pipeline, esi_form, clock):
        pipeline.validate_all(esi_form)
        assert pipeline.errors == {}

        values = apply_change(esi_form, "salary_amount", "25000")
        pipeline.field_changed("salary_amount", values)
        clock.now = 1.0
        pipeline.run_pending()

        assert list(pipeline.errors) == ["esi_contribution"]

    def test_blur_cancels_pending(self, pipeline):
        pipeline.field_changed("salary_amount", {"salary_amount": "abc"})

        results = pipeline.field_blurred("salary_amount", {"salary_amount": "750"})

        assert results["salary_amount"] is None
        assert pipeline.debouncer.pending == []
        assert pipeline.flush() == []

    def test_submit_supersedes_pending(self, pipeline, pf_form):
        pipeline.field_changed("pf_number", dict(pf_form, pf_number="bad"))

        pipeline.form_submitted(pf_form)

        assert pipeline.flush() == []
        assert pipeline.errors == {}

    def test_unknown_field_rejected(self, pipeline):
        with pytest.raises(ValueError, match="Unknown form field"):
            pipeline.field_changed("bonus", {})


class TestDebouncer:

    def test_cancel(self, clock):
        calls = []
        debouncer = Debouncer(100, clock)
        debouncer.submit("a", calls.append, 1)

        assert debouncer.cancel("a") is True
        assert debouncer.cancel("a") is False
        assert debouncer.flush() == []
        assert calls == []

    def test_runs_in_submit_order(self, clock):
        calls = []
        debouncer = Debouncer(100, clock)
        debouncer.submit("b", calls.append, "b")
        debouncer.submit("a", calls.append, "a")

        debouncer.run_due(now=0.1)

        assert calls == ["b", "a"]


class TestValidationCache:

    def test_repeat_lookup_hits(self, pipeline, pf_form):
        first = pipeline.validate_field("pf_number", "bad", pf_form)
        second = pipeline.validate_field("pf_number", "bad", pf_form)

        assert first == second
        assert first.category == ErrorCategory.FORMAT
        assert pipeline.cache.hits == 1

    def test_context_change_invalidates(self, pipeline, pf_form):
        assert pipeline.validate_field("pf_number", "bad", pf_form) is not None

        off = dict(pf_form, pf_contribution=False)
        assert pipeline.validate_field("pf_number", "bad", off) is None

        assert pipeline.validate_field("pf_number", "bad", pf_form) is not None
        assert pipeline.cache.hits == 0

    def test_cached_none_is_not_a_miss(self):
        cache = ValidationCache()
        cache.put("salary_amount", "100", (), None)

        result = cache.get("salary_amount", "100", ())

        assert not ValidationCache.is_miss(result)
        assert result is None

    def test_bounded(self):
        cache = ValidationCache(max_entries=2)
        for value in ("1", "2", "3"):
            cache.put("salary_amount", value, (), None)

        assert len(cache) == 2
        assert ValidationCache.is_miss(cache.get("salary_amount", "1", ()))

    def test_freeze_keeps_types_apart(self):
        assert freeze(1) != freeze("1")
        assert freeze(True) != freeze(1)
        assert freeze(Decimal("1.0")) == freeze(Decimal("1.0"))


class TestReporting:

    def test_prioritize_by_severity_then_category(self, pipeline):
        errors = [
            ValidationError(field="pf_number", message="f", category=ErrorCategory.FORMAT),
            ValidationError(field="esi_number", message="w", category=ErrorCategory.REQUIRED,
                            severity=Severity.WARNING),
            ValidationError(field="salary_basis", message="r", category=ErrorCategory.REQUIRED),
        ]

        ordered = prioritize_errors(errors, pipeline.field_order)

        assert [e.field for e in ordered] == ["salary_basis", "pf_number", "esi_number"]

    def test_categorized_sections(self, pipeline, esi_form):
        esi_form["salary_amount"] = "25000"
        esi_form["esi_number"] = "12"
        esi_form["payment_type"] = ""
        pipeline.validate_all(esi_form)

        groups = pipeline.categorized()

        assert [e.field for e in groups["salary"]] == ["payment_type"]
        assert [e.field for e in groups["esi"]] == ["esi_number"]
        assert [e.field for e in groups["business"]] == ["esi_contribution"]
        assert groups["pf"] == []

    def test_summary_for_complete_form(self, pipeline, pf_form):
        pipeline.validate_all(pf_form)

        summary = pipeline.summary(pf_form)

        assert summary.is_valid is True
        assert summary.total == 0
        assert summary.completion_percentage == 100
        assert summary.overall_status == "success"

    def test_summary_with_errors(self, pipeline, pf_form):
        pf_form["pf_number"] = ""
        pipeline.validate_all(pf_form)

        summary = pipeline.summary(pf_form)

        assert summary.is_valid is False
        assert summary.critical == 1
        assert summary.overall_status == "error"
        # 4 of 5 required fields filled
        assert summary.completion_percentage == Decimal("80.00")
