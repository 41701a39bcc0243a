"""Static sign-in validation schema and the pure validator built on it.

Every call re-validates all fields from scratch, so one field's verdict can
never go stale relative to another's. The validator never raises: schema
violations come back as per-field messages on ``ValidationResult``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from signin.types import FieldName

FIELD_NAMES: tuple[FieldName, ...] = ("email", "password")
PASSWORD_MIN_LENGTH = 6

# local-part@domain, no leading/doubled dots, dotted domain ending in a 2+ letter TLD.
EMAIL_PATTERN = re.compile(
    r"^(?!\.)(?!.*\.\.)[A-Z0-9_'+\-.]*[A-Z0-9_+\-]@(?:[A-Z0-9][A-Z0-9\-]*\.)+[A-Z]{2,}$",
    re.IGNORECASE,
)

REQUIRED_MESSAGE = "required"
INVALID_FORMAT_MESSAGE = "invalid format"
TOO_SHORT_MESSAGE = "too short"


class SignInSchema(BaseModel):
    """Field rules for the sign-in form."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        """Require a non-empty, well-formed email address."""
        if not value:
            raise PydanticCustomError("required", REQUIRED_MESSAGE)
        if EMAIL_PATTERN.fullmatch(value) is None:
            raise PydanticCustomError("invalid_format", INVALID_FORMAT_MESSAGE)
        return value

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        """Require the minimum password length."""
        if len(value) < PASSWORD_MIN_LENGTH:
            raise PydanticCustomError("too_short", TOO_SHORT_MESSAGE)
        return value


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Per-field error messages; ``None`` marks a valid field."""

    errors: Mapping[FieldName, str | None]

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", MappingProxyType(dict(self.errors)))

    @property
    def is_valid(self) -> bool:
        """Return True when every field passed."""
        return all(message is None for message in self.errors.values())

    def error_for(self, field: FieldName) -> str | None:
        """Return the error message for one field, if any."""
        return self.errors.get(field)


def validate(values: Mapping[str, Any]) -> ValidationResult:
    """Validate raw field values against the sign-in schema."""
    payload = {name: values.get(name) or "" for name in FIELD_NAMES}
    errors: dict[FieldName, str | None] = dict.fromkeys(FIELD_NAMES)
    try:
        SignInSchema.model_validate(payload)
    except ValidationError as exc:
        for error in exc.errors():
            field = error["loc"][0] if error["loc"] else None
            if field in errors and errors[field] is None:
                errors[field] = error["msg"]
    return ValidationResult(errors=errors)
