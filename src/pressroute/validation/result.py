"""Validation result: immutable container for accepted data or errors."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """The outcome of validating request input against a set of rules.

    The result is falsy when invalid, so you can write::

        result = validate(envelope.all(), rules)
        if not result:
            return validation_failed(result.errors)

    ``data`` holds the accepted value of every validated field that was
    present. ``errors`` maps field names to lists of messages::

        {"title": ["The title field is required."]}
    """

    data: dict[str, Any]
    errors: dict[str, list[str]]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.is_valid
