"""Tests for settings.json handling and rate file resolution/loading.

Uses isolated directories via tmp_path and SALARY_CALC_CONFIG_PATH
(see conftest.isolated_config).
"""

import json
from decimal import Decimal

import pytest
import yaml

from salarycalc.sdk.config import (
    DEFAULT_DEBOUNCE_MS,
    get_config_dir,
    get_debounce_ms,
    get_default_rates_path,
    get_rates_path,
    load_settings,
    set_setting,
)
from salarycalc.sdk.contributions.rates import RateConfigurationError, load_rates


def write_rates(path, **overrides):
    """Write a rates file based on the bundled one, with overrides per section."""
    data = yaml.safe_load(get_default_rates_path().read_text())
    for section, values in overrides.items():
        if values is None:
            del data[section]
        else:
            data[section].update(values)
    path.write_text(yaml.safe_dump(data))
    return path


class TestSettings:

    def test_config_dir_from_env(self, isolated_config):
        assert get_config_dir() == isolated_config

    def test_no_settings_file(self):
        assert load_settings() == {}

    def test_set_and_read(self, isolated_config):
        set_setting("debounce_ms", 150)

        assert json.loads((isolated_config / "settings.json").read_text()) == {"debounce_ms": 150}
        assert get_debounce_ms() == 150

    def test_debounce_default(self):
        assert get_debounce_ms() == DEFAULT_DEBOUNCE_MS

    def test_debounce_not_an_int(self):
        set_setting("debounce_ms", "soon")

        assert get_debounce_ms() == DEFAULT_DEBOUNCE_MS


class TestRatesResolution:

    def test_bundled_default(self):
        assert get_rates_path() == get_default_rates_path()

    def test_config_dir_override(self, isolated_config):
        local = write_rates(isolated_config / "rates.yaml", pf={"employer_rate": 10})

        assert get_rates_path() == local
        assert load_rates().pf.employer_rate == Decimal("10")

    def test_settings_path_wins(self, isolated_config, tmp_path):
        write_rates(isolated_config / "rates.yaml", pf={"employer_rate": 10})
        custom = write_rates(tmp_path / "custom.yaml", pf={"employer_rate": 11})
        set_setting("rates", str(custom))

        assert load_rates().pf.employer_rate == Decimal("11")

    def test_missing_configured_path(self, tmp_path):
        set_setting("rates", str(tmp_path / "nope.yaml"))

        with pytest.raises(RateConfigurationError, match="settings rates --clear"):
            load_rates()


class TestLoadRates:

    def test_bundled_values(self, rates):
        assert rates.pf.employer_rate == Decimal("12")
        assert rates.esi.employer_rate == Decimal("4.75")
        assert rates.esi.salary_threshold == Decimal("21000")
        assert rates.pf.has_eligibility_band is False
        assert rates.limits.max_salary_amount == Decimal("10000000")

    def test_not_yaml(self, tmp_path):
        path = tmp_path / "rates.yaml"
        path.write_text("pf: [unclosed")

        with pytest.raises(RateConfigurationError, match="not valid YAML"):
            load_rates(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "rates.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(RateConfigurationError, match="mapping"):
            load_rates(path)

    def test_inverted_band(self, tmp_path):
        path = write_rates(tmp_path / "rates.yaml", pf={"min_employee_rate": 15})

        with pytest.raises(RateConfigurationError, match="min_employee_rate"):
            load_rates(path)

    def test_esi_requires_threshold(self, tmp_path):
        path = write_rates(tmp_path / "rates.yaml", esi={"salary_threshold": None})

        with pytest.raises(RateConfigurationError, match="salary_threshold"):
            load_rates(path)

    def test_bad_number_pattern(self, tmp_path):
        path = write_rates(tmp_path / "rates.yaml", esi={"number_pattern": "[0-9"})

        with pytest.raises(RateConfigurationError, match="number_pattern"):
            load_rates(path)

    def test_unknown_key_rejected(self, tmp_path):
        path = write_rates(tmp_path / "rates.yaml", pf={"tier": 2})

        with pytest.raises(RateConfigurationError):
            load_rates(path)

    def test_missing_scheme(self, tmp_path):
        path = write_rates(tmp_path / "rates.yaml", pf=None)

        with pytest.raises(RateConfigurationError):
            load_rates(path)

    def test_unknown_scheme_lookup(self, rates):
        with pytest.raises(RateConfigurationError, match="Unknown contribution scheme"):
            rates.for_scheme("gratuity")
