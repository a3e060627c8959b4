"""Shared fixtures for salary-calc unit tests.

Every test runs against an isolated config directory via
SALARY_CALC_CONFIG_PATH so a developer's own settings.json or rates.yaml
never leaks into results.
"""

import pytest

from salarycalc.sdk.contributions.rates import load_rates
from salarycalc.sdk.config import get_default_rates_path


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the SDK at an empty config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("SALARY_CALC_CONFIG_PATH", str(config_dir))
    return config_dir


@pytest.fixture
def rates():
    """Bundled default rates (PF 12% employer, ESI 4.75% up to 21000)."""
    return load_rates(get_default_rates_path())


@pytest.fixture
def pf_form():
    """Complete, valid form with PF on and ESI off."""
    return {
        "salary_amount": "50000",
        "salary_basis": "Monthly",
        "payment_type": "Bank Transfer",
        "pf_contribution": True,
        "pf_number": "DL/DLI/1234567/123/1234567",
        "pf_employee_rate": "12",
        "pf_additional_rate": "0",
        "esi_contribution": False,
    }


@pytest.fixture
def esi_form():
    """Complete, valid form with ESI on (eligible salary) and PF off."""
    return {
        "salary_amount": "18000",
        "salary_basis": "Monthly",
        "payment_type": "Cash",
        "pf_contribution": False,
        "esi_contribution": True,
        "esi_number": "1234567890",
        "esi_employee_rate": "0.75",
        "esi_additional_rate": "",
    }
