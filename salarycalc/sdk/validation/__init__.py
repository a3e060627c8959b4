"""validation - Salary form validation.

Scope:
- Error taxonomy and declarative field rule table (rules.py)
- Stateless per-field checks (fields.py)
- Conditional requirement, rate-sum and eligibility rules (cross_field.py)
- Debounced, cached orchestration over the whole form (pipeline.py)

Constraints:
- Findings are ValidationError data, never exceptions
- At most one finding per field per pass; cross-field findings win
- Uses contributions/ for rate bands and eligibility, never computes amounts
"""

from .rules import (
    ErrorCategory,
    Severity,
    ValidationError,
    FieldRule,
    build_field_rules,
)

from .fields import (
    validate_value,
    format_statutory_number,
)

from .cross_field import (
    ConditionalRequirement,
    RateSumRule,
    EligibilityRule,
    CrossFieldRuleEngine,
    build_cross_field_rules,
    merge_errors,
)

from .cache import ValidationCache
from .scheduler import Debouncer

from .pipeline import (
    FieldState,
    ValidationSummary,
    ValidationPipeline,
    prioritize_errors,
    categorize_errors,
)

__all__ = [
    # Taxonomy and rules
    "ErrorCategory",
    "Severity",
    "ValidationError",
    "FieldRule",
    "build_field_rules",
    # Field checks
    "validate_value",
    "format_statutory_number",
    # Cross-field
    "ConditionalRequirement",
    "RateSumRule",
    "EligibilityRule",
    "CrossFieldRuleEngine",
    "build_cross_field_rules",
    "merge_errors",
    # Pipeline
    "ValidationCache",
    "Debouncer",
    "FieldState",
    "ValidationSummary",
    "ValidationPipeline",
    "prioritize_errors",
    "categorize_errors",
]
