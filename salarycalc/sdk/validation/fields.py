"""Stateless per-field validation driven by FieldRule descriptors.

Each check either passes or yields exactly one ValidationError; the first
failing check wins, so a field never carries more than one finding per pass.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..schemas import is_blank, parse_decimal, parse_flag
from .rules import ErrorCategory, FieldRule, ValidationError


def _error(rule: FieldRule, message: str, category: ErrorCategory) -> ValidationError:
    return ValidationError(field=rule.name, message=message, category=category)


def _decimal_places(value: Decimal) -> int:
    exponent = value.normalize().as_tuple().exponent
    return -exponent if isinstance(exponent, int) and exponent < 0 else 0


def _off_step(number: Decimal, step: Decimal) -> bool:
    try:
        return number % step != 0
    except InvalidOperation:
        # Too large to divide exactly; the bounds check reports it
        return False


def _fmt(value: Decimal) -> str:
    """Render a bound without trailing zeros (12.00 -> 12, 0.75 -> 0.75)."""
    normalized = value.normalize()
    if normalized == normalized.to_integral_value():
        return f"{normalized.to_integral_value():f}"
    return f"{normalized:f}"


def validate_value(rule: FieldRule, value: Any, required: bool) -> Optional[ValidationError]:
    """Validate one raw value against its rule.

    Args:
        rule: Field rule descriptor
        value: Raw form value
        required: Whether the field is currently required (static rule
            or conditional requirement resolved by the caller)

    Returns:
        ValidationError for the first failing check, or None
    """
    if rule.kind == "derived":
        return None

    # 1. Required-ness
    if rule.kind == "flag":
        if parse_flag(value) is None:
            return _error(rule, f"{rule.label} must be yes or no", ErrorCategory.FORMAT)
        return None

    if is_blank(value):
        if required:
            return _error(rule, f"{rule.label} is required", ErrorCategory.REQUIRED)
        return None

    # 2. Format
    if rule.kind == "choice":
        if value not in rule.choices:
            options = ", ".join(rule.choices)
            return _error(rule, f"{rule.label} must be one of: {options}", ErrorCategory.FORMAT)
        return None

    if rule.kind == "text":
        if not isinstance(value, str):
            return _error(rule, f"{rule.label} must be text", ErrorCategory.FORMAT)
        if rule.pattern and not re.match(rule.pattern, value.strip(), re.ASCII):
            message = f"Invalid {rule.label} format"
            if rule.pattern_example:
                message += f" (expected e.g. {rule.pattern_example})"
            return _error(rule, message, ErrorCategory.FORMAT)
        return None

    number = parse_decimal(value)
    if number is None:
        return _error(rule, f"Please enter a valid {rule.label.lower()}", ErrorCategory.FORMAT)

    if rule.max_decimals is not None and _decimal_places(number) > rule.max_decimals:
        return _error(
            rule,
            f"{rule.label} can have at most {rule.max_decimals} decimal places",
            ErrorCategory.FORMAT,
        )

    if rule.step is not None and _off_step(number, rule.step):
        return _error(
            rule,
            f"{rule.label} must be in steps of {_fmt(rule.step)}",
            ErrorCategory.FORMAT,
        )

    # 3. Bounds
    low, high = rule.min_value, rule.max_value
    if (low is not None and number < low) or (high is not None and number > high):
        if low is not None and high is not None:
            message = f"{rule.label} must be between {_fmt(low)} and {_fmt(high)}"
        elif low is not None:
            message = f"{rule.label} must be at least {_fmt(low)}"
        else:
            message = f"{rule.label} must be at most {_fmt(high)}"
        return _error(rule, message, ErrorCategory.BUSINESS_RULE)

    return None


def format_statutory_number(value: str, scheme: str) -> str:
    """Normalize a statutory number as it is typed.

    PF: keep letters/digits and insert slashes (DL/DLI/1234567/123/1234567).
    ESI: keep digits only, at most ten.
    """
    if scheme == "esi":
        return re.sub(r"[^0-9]", "", value)[:10]

    cleaned = re.sub(r"[^a-zA-Z0-9]", "", value)
    if len(cleaned) < 2:
        return cleaned

    # Segment boundaries of the PF number
    bounds = [(0, 2), (2, 5), (5, 12), (12, 15), (15, 22)]
    parts = [cleaned[start:end] for start, end in bounds if len(cleaned) > start]
    return "/".join(parts)
