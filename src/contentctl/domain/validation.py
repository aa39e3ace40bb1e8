"""Declarative field validation.

A rule table maps field names to :class:`FieldRule`. :func:`validate_fields`
walks the table and collects every violation; it never raises and never
touches anything outside the mapping it is given.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ValidationResult:
    """Result of a validation pass."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.valid


@dataclass(frozen=True)
class FieldRule:
    """Constraints for a single field.

    Length bounds apply to strings and lists. ``number`` switches on the
    numeric checks (``minimum`` / ``maximum``).
    """

    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    choices: tuple[str, ...] | None = None
    pattern: re.Pattern[str] | None = None
    number: bool = False
    minimum: float | None = None
    maximum: float | None = None


def is_blank(value: Any) -> bool:
    """Return True for values that count as absent for a required field."""
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def _check_field(name: str, value: Any, rule: FieldRule) -> list[str]:
    errors: list[str] = []

    if hasattr(value, "__len__") and not isinstance(value, dict):
        if rule.min_length is not None and len(value) < rule.min_length:
            errors.append(f"{name} must be at least {rule.min_length} characters")
        if rule.max_length is not None and len(value) > rule.max_length:
            errors.append(f"{name} must not exceed {rule.max_length} characters")

    if rule.choices is not None and value not in rule.choices:
        errors.append(f"{name} must be one of: {', '.join(rule.choices)}")

    if rule.pattern is not None and not rule.pattern.search(str(value)):
        errors.append(f"{name} format is invalid")

    if rule.number:
        try:
            number = float(value)
        except (TypeError, ValueError):
            errors.append(f"{name} must be a number")
        else:
            if rule.minimum is not None and number < rule.minimum:
                errors.append(f"{name} must be at least {_fmt(rule.minimum)}")
            if rule.maximum is not None and number > rule.maximum:
                errors.append(f"{name} must not exceed {_fmt(rule.maximum)}")

    return errors


def _fmt(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)


def validate_fields(
    data: Mapping[str, Any],
    rules: Mapping[str, FieldRule],
) -> ValidationResult:
    """Validate *data* against a rule table.

    A required field that is absent yields exactly one error and its
    remaining checks are skipped. Every other violation is reported
    independently, so one field can contribute several errors. Fields
    without a rule are ignored.
    """
    errors: list[str] = []
    for name, rule in rules.items():
        value = data.get(name)
        if is_blank(value):
            if rule.required:
                errors.append(f"{name} is required")
            continue
        errors.extend(_check_field(name, value, rule))
    return ValidationResult(valid=not errors, errors=errors)
