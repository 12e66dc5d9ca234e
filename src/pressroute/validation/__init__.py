"""Input validation: composable rules, clean results.

Usage::

    from pressroute.validation import validate, required, max_length, email

    result = validate(envelope.all(), {
        "title": [required, max_length(200)],
        "email": ["required", "email"],
    })
    if not result:
        return validation_failed(result.errors)
    # result.data has the accepted values
"""

from collections.abc import Iterable, Mapping
from typing import Any

from pressroute.validation.result import ValidationResult
from pressroute.validation.rules import (
    RULES,
    Rule,
    between,
    email,
    integer,
    lookup,
    matches,
    max_length,
    min_length,
    number,
    one_of,
    required,
    rule_name,
    slug,
    url,
)

__all__ = [
    "RULES",
    "Rule",
    "RuleSpec",
    "ValidationResult",
    "between",
    "email",
    "integer",
    "lookup",
    "matches",
    "max_length",
    "min_length",
    "number",
    "one_of",
    "required",
    "slug",
    "url",
    "validate",
]

type RuleSpec = Rule | str


def _normalize(rules: RuleSpec | Iterable[RuleSpec]) -> list[RuleSpec]:
    if isinstance(rules, str) or callable(rules):
        return [rules]
    return list(rules)


def _label(rule: RuleSpec) -> str:
    if isinstance(rule, str):
        return rule_name(rule)
    return getattr(rule, "__name__", "rule")


def validate(
    data: Mapping[str, Any],
    rules: Mapping[str, RuleSpec | Iterable[RuleSpec]],
    messages: Mapping[str, str] | None = None,
    attributes: Mapping[str, str] | None = None,
) -> ValidationResult:
    """Validate data against a set of rules.

    Args:
        data: Field name -> value (usually ``envelope.all()``).
        rules: Field name -> rule, rule name, or a list of either. Rule
            names resolve through ``pressroute.validation.rules.lookup``.
        messages: Overrides keyed ``"field.rule"`` (or just ``"field"``).
            ``{attribute}`` in a message becomes the field's display name.
        attributes: Field name -> display name for ``{attribute}``.

    Fields that are absent or empty skip every rule except ``required``.
    A failed ``required`` check stops the remaining rules for that field.

    Raises ``KeyError`` when a rule name is unknown.
    """
    messages = messages or {}
    attributes = attributes or {}
    errors: dict[str, list[str]] = {}
    cleaned: dict[str, Any] = {}

    for field_name, field_rules in rules.items():
        specs = _normalize(field_rules)
        value = data.get(field_name)
        is_empty = value is None or value == ""
        field_errors: list[str] = []

        for spec in specs:
            check = lookup(spec) if isinstance(spec, str) else spec
            is_presence = check is required
            if is_empty and not is_presence:
                continue
            error = check(value)
            if error is not None:
                label = _label(spec)
                message = messages.get(f"{field_name}.{label}") or messages.get(field_name) or error
                field_errors.append(message.replace("{attribute}", attributes.get(field_name, field_name)))
                if is_presence:
                    break

        if field_errors:
            errors[field_name] = field_errors
        elif field_name in data:
            cleaned[field_name] = value

    return ValidationResult(data=cleaned, errors=errors)
