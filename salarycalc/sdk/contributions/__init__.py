"""contributions - Statutory contribution calculation logic.

Scope:
- Rate configuration schemas and loading (rates.py, rates.yaml)
- Employee/employer contribution amounts and compliance (calculator.py)
- Salary eligibility band for ESI (eligibility.py)

Constraints:
- Pure calculation - no form values, no validation errors
- Rates are static configuration, loaded once before first computation
- Missing configuration is a misconfiguration and raises RateConfigurationError

Usage:
    from salarycalc.sdk.contributions import load_rates, compute_contributions

    rates = load_rates()
    pf, esi = compute_contributions(profile, pf_scheme, esi_scheme, rates.pf, rates.esi)
"""

from .rates import (
    RateConfiguration,
    RateConfigurationError,
    SalaryLimits,
    StatutoryRates,
    SCHEMES,
    SCHEME_LABELS,
    load_rates,
    require_config,
)

from .calculator import (
    round2,
    is_rate_compliant,
    compute_contribution,
    compute_contributions,
)

from .eligibility import (
    EligibilityStatus,
    is_eligible,
    eligibility_status,
)

__all__ = [
    # Rates
    "RateConfiguration",
    "RateConfigurationError",
    "SalaryLimits",
    "StatutoryRates",
    "SCHEMES",
    "SCHEME_LABELS",
    "load_rates",
    "require_config",
    # Calculator
    "round2",
    "is_rate_compliant",
    "compute_contribution",
    "compute_contributions",
    # Eligibility
    "EligibilityStatus",
    "is_eligible",
    "eligibility_status",
]
