"""Tests for the ESI salary eligibility band."""

from decimal import Decimal

import pytest

from salarycalc.sdk.contributions import RateConfigurationError, eligibility_status, is_eligible


class TestIsEligible:

    def test_band_is_inclusive(self, rates):
        assert is_eligible(Decimal("0"), rates.esi) is True
        assert is_eligible(Decimal("21000"), rates.esi) is True

    def test_above_threshold(self, rates):
        assert is_eligible(Decimal("21000.01"), rates.esi) is False
        assert is_eligible(Decimal("25000"), rates.esi) is False

    def test_scheme_without_band_raises(self, rates):
        with pytest.raises(RateConfigurationError):
            is_eligible(Decimal("1000"), rates.pf)


class TestEligibilityStatus:

    def test_above_threshold_message(self, rates):
        status = eligibility_status(Decimal("25000"), rates.esi)

        assert status.state == "above_threshold"
        assert status.eligible is False
        assert "21,000" in status.message

    def test_below_minimum(self, rates):
        config = rates.esi.model_copy(update={"min_salary_threshold": Decimal("500")})

        status = eligibility_status(Decimal("100"), config)

        assert status.state == "below_minimum"

    def test_eligible(self, rates):
        assert eligibility_status(Decimal("18000"), rates.esi).eligible is True
