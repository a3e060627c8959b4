"""Salary Calc SDK - Statutory contribution calculation and form validation."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_rates_path,
    get_default_rates_path,
    get_debounce_ms,
    ConfigNotFoundError,
)

from .schemas import (
    SalaryProfile,
    ContributionScheme,
    ContributionResult,
    SchemeBreakdown,
    DeductionPercentages,
    PayrollAnalyticsSnapshot,
    build_profile,
    build_scheme,
)

from .contributions import (
    RateConfiguration,
    RateConfigurationError,
    StatutoryRates,
    load_rates,
    compute_contribution,
    compute_contributions,
    is_eligible,
    eligibility_status,
)

from .analytics import derive_analytics

from .validation import (
    ErrorCategory,
    Severity,
    ValidationError,
    ValidationPipeline,
    ValidationSummary,
    prioritize_errors,
    categorize_errors,
)

from .engine import (
    EngineSnapshot,
    SalaryEngine,
    apply_change,
    validate_field,
    validate_all,
)

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "get_rates_path",
    "get_default_rates_path",
    "get_debounce_ms",
    "ConfigNotFoundError",
    # Schemas
    "SalaryProfile",
    "ContributionScheme",
    "ContributionResult",
    "SchemeBreakdown",
    "DeductionPercentages",
    "PayrollAnalyticsSnapshot",
    "build_profile",
    "build_scheme",
    # Contributions
    "RateConfiguration",
    "RateConfigurationError",
    "StatutoryRates",
    "load_rates",
    "compute_contribution",
    "compute_contributions",
    "is_eligible",
    "eligibility_status",
    # Analytics
    "derive_analytics",
    # Validation
    "ErrorCategory",
    "Severity",
    "ValidationError",
    "ValidationPipeline",
    "ValidationSummary",
    "prioritize_errors",
    "categorize_errors",
    # Engine
    "EngineSnapshot",
    "SalaryEngine",
    "apply_change",
    "validate_field",
    "validate_all",
]
