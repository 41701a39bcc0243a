"""Public sign-in form exports."""

from signin.client import AuthSubmitter, DemoAuthSubmitter, HttpAuthSubmitter
from signin.controller import FormController, FormPhase, FormState
from signin.validation import ValidationResult, validate

__all__ = [
    "AuthSubmitter",
    "DemoAuthSubmitter",
    "FormController",
    "FormPhase",
    "FormState",
    "HttpAuthSubmitter",
    "ValidationResult",
    "validate",
]
