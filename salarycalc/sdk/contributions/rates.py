"""Pydantic schemas and loading for statutory rate configuration.

These schemas validate the rates YAML (bundled default or user override)
and provide typed access to rate bands, salary thresholds and statutory
number patterns for each scheme.
"""

import logging
import re
from decimal import Decimal
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..config import ConfigNotFoundError, get_rates_path

logger = logging.getLogger(__name__)

SchemeName = Literal["pf", "esi"]
SCHEMES = ("pf", "esi")
SCHEME_LABELS = {"pf": "PF", "esi": "ESI"}


class RateConfigurationError(Exception):
    """Raised when rate configuration is missing or invalid.

    This is a misconfiguration, not a user input problem, so it is never
    reported as a ValidationError.
    """
    pass


class RateConfiguration(BaseModel):
    """Statutory constants for one contribution scheme."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    employer_rate: Decimal = Field(..., ge=0, le=100, description="Fixed employer rate (%)")
    min_employee_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    max_employee_rate: Decimal = Field(..., ge=0, le=100)
    employee_rate_step: Optional[Decimal] = Field(
        default=None, gt=0, description="Allowed employee rate increment (e.g. 1 = whole percent)"
    )
    min_additional_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    max_additional_rate: Decimal = Field(..., ge=0, le=100)
    max_total_rate: Decimal = Field(
        ..., ge=0, le=100, description="Cap on employee + additional rate, enforced separately"
    )
    number_pattern: str = Field(..., description="Regex for the statutory number")
    number_example: Optional[str] = Field(default=None, description="Example shown in format errors")
    # Eligibility band (ESI only)
    min_salary_threshold: Optional[Decimal] = Field(default=None, ge=0)
    salary_threshold: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("number_pattern")
    @classmethod
    def pattern_compiles(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"number_pattern is not a valid regex: {e}")
        return v

    @model_validator(mode="after")
    def check_bands(self) -> "RateConfiguration":
        """Validate min/max ordering of each band."""
        errors = []
        if self.min_employee_rate > self.max_employee_rate:
            errors.append(
                f"min_employee_rate ({self.min_employee_rate}) > "
                f"max_employee_rate ({self.max_employee_rate})"
            )
        if self.min_additional_rate > self.max_additional_rate:
            errors.append(
                f"min_additional_rate ({self.min_additional_rate}) > "
                f"max_additional_rate ({self.max_additional_rate})"
            )
        if (self.min_salary_threshold is not None and self.salary_threshold is not None
                and self.min_salary_threshold > self.salary_threshold):
            errors.append(
                f"min_salary_threshold ({self.min_salary_threshold}) > "
                f"salary_threshold ({self.salary_threshold})"
            )
        if errors:
            raise ValueError("; ".join(errors))
        return self

    @property
    def has_eligibility_band(self) -> bool:
        """True if this scheme only applies within a salary band."""
        return self.salary_threshold is not None

    @property
    def number_regex(self) -> "re.Pattern[str]":
        return re.compile(self.number_pattern, re.ASCII)


class SalaryLimits(BaseModel):
    """Limits on the salary amount field."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_salary_amount: Decimal = Field(..., gt=0)
    salary_decimal_places: int = Field(default=2, ge=0, le=4)


class StatutoryRates(BaseModel):
    """Complete rate configuration (salary limits plus both schemes)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    limits: SalaryLimits
    pf: RateConfiguration
    esi: RateConfiguration

    @model_validator(mode="after")
    def esi_has_band(self) -> "StatutoryRates":
        if not self.esi.has_eligibility_band:
            raise ValueError("esi.salary_threshold is required")
        return self

    def for_scheme(self, scheme: str) -> RateConfiguration:
        """Get the rate configuration for a scheme ('pf' or 'esi')."""
        if scheme not in SCHEMES:
            raise RateConfigurationError(f"Unknown contribution scheme: {scheme!r}")
        return getattr(self, scheme)


def load_rates(path: Optional[Path] = None) -> StatutoryRates:
    """Load and validate the rates YAML.

    Args:
        path: Explicit rates file. Defaults to the resolved path from
            settings.json, the config directory, or the bundled file.

    Raises:
        RateConfigurationError: If the file is missing, unreadable or invalid
    """
    if path is None:
        try:
            path = get_rates_path(require_exists=True)
        except ConfigNotFoundError as e:
            raise RateConfigurationError(str(e))
    path = Path(path)

    if not path.exists():
        raise RateConfigurationError(f"Rates file not found: {path}")

    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RateConfigurationError(f"Rates file is not valid YAML: {path}\n{e}")

    if not isinstance(raw, dict):
        raise RateConfigurationError(f"Rates file must contain a mapping: {path}")

    try:
        rates = StatutoryRates.model_validate(raw)
    except PydanticValidationError as e:
        raise RateConfigurationError(f"Invalid rates file {path}:\n{e}")

    logger.debug(f"loaded rates from {path}")
    return rates


def require_config(config: Optional[RateConfiguration], scheme: str = "") -> RateConfiguration:
    """Return config or fail loudly if it is missing."""
    if config is None:
        label = SCHEME_LABELS.get(scheme, scheme) or "scheme"
        raise RateConfigurationError(f"No rate configuration supplied for {label}")
    return config
