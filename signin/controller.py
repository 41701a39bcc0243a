"""Sign-in form state machine.

The controller owns field values, derived validity, the dirty/submitting
flags and the banner message. It exposes three transitions:

- ``on_field_change``: user edits a field (ignored while submitting).
- ``on_submit_attempt``: guarded submit that awaits the auth collaborator.
- ``on_settled``: applies the collaborator's outcome.

Nothing here depends on a rendering layer; a UI reads ``state`` after each
transition and renders it.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType

import structlog

from signin.client import AuthSubmitter
from signin.exceptions import InvalidCredentialsError, SignInError
from signin.types import Credentials, FieldName, SubmissionOutcome
from signin.validation import FIELD_NAMES, ValidationResult, validate

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password. Please try again."
SERVICE_ERROR_MESSAGE = "Something went wrong. Please try again later."
SUBMIT_LABEL = "Login"
SUBMITTING_LABEL = "Signing In..."

logger = structlog.get_logger(__name__)


class FormPhase(str, Enum):
    """Lifecycle phase of a mounted form."""

    IDLE = "idle"
    EDITING = "editing"
    SUBMITTING = "submitting"
    SETTLED = "settled"


def _empty_values() -> dict[FieldName, str]:
    return {name: "" for name in FIELD_NAMES}


@dataclass(frozen=True, slots=True)
class FormState:
    """Immutable snapshot of everything a view needs to render the form."""

    values: Mapping[FieldName, str] = field(default_factory=_empty_values)
    validation: ValidationResult = field(default_factory=lambda: validate(_empty_values()))
    is_dirty: bool = False
    is_submitting: bool = False
    global_message: str | None = None
    password_visible: bool = False
    phase: FormPhase = FormPhase.IDLE

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @property
    def is_valid(self) -> bool:
        """Return True when every field passes validation."""
        return self.validation.is_valid

    @property
    def can_submit(self) -> bool:
        """Submit control is enabled only for valid, edited, idle forms."""
        return self.is_valid and self.is_dirty and not self.is_submitting

    @property
    def submit_label(self) -> str:
        """Caption for the submit control."""
        return SUBMITTING_LABEL if self.is_submitting else SUBMIT_LABEL

    def error_for(self, field_name: FieldName) -> str | None:
        """Return the inline error for one field, if any."""
        return self.validation.error_for(field_name)


class FormController:
    """Drive one mounted sign-in form through its submission lifecycle."""

    def __init__(
        self,
        submitter: AuthSubmitter,
        *,
        on_success: Callable[[str], None] | None = None,
    ) -> None:
        self._submitter = submitter
        self._on_success = on_success
        self._state = FormState()

    @property
    def state(self) -> FormState:
        """Current form snapshot."""
        return self._state

    @property
    def validation(self) -> ValidationResult:
        return self._state.validation

    @property
    def is_dirty(self) -> bool:
        return self._state.is_dirty

    @property
    def is_submitting(self) -> bool:
        return self._state.is_submitting

    @property
    def global_message(self) -> str | None:
        return self._state.global_message

    @property
    def can_submit(self) -> bool:
        return self._state.can_submit

    def on_field_change(self, field_name: FieldName, value: str) -> bool:
        """Apply one user edit; returns False when the edit was ignored."""
        if field_name not in FIELD_NAMES:
            raise ValueError(f"Unknown form field: {field_name!r}.")
        if self._state.is_submitting:
            logger.debug("field_change_ignored", field=field_name, reason="submitting")
            return False

        values = dict(self._state.values)
        values[field_name] = value
        self._state = replace(
            self._state,
            values=values,
            validation=validate(values),
            is_dirty=True,
            phase=FormPhase.EDITING,
        )
        return True

    def toggle_password_visibility(self) -> bool:
        """Flip the cosmetic password visibility flag and return the new value."""
        visible = not self._state.password_visible
        self._state = replace(self._state, password_visible=visible)
        return visible

    def reset(self) -> bool:
        """Return to the mount-time state; ignored while a submission is outstanding."""
        if self._state.is_submitting:
            return False
        self._state = FormState(password_visible=self._state.password_visible)
        return True

    async def on_submit_attempt(self) -> SubmissionOutcome | None:
        """Submit current values when the form allows it.

        Returns ``None`` without side effects when the guard fails, otherwise
        the outcome that settled the attempt. Submitter failures are converted
        into a ``service_error`` outcome and never propagate.
        """
        if not self._state.can_submit:
            logger.debug(
                "submit_attempt_rejected",
                is_valid=self._state.is_valid,
                is_dirty=self._state.is_dirty,
                is_submitting=self._state.is_submitting,
            )
            return None

        credentials: Credentials = {
            "email": self._state.values["email"],
            "password": self._state.values["password"],
        }
        self._state = replace(
            self._state,
            global_message=None,
            is_submitting=True,
            phase=FormPhase.SUBMITTING,
        )
        logger.info("submission_started", email=credentials["email"])

        outcome: SubmissionOutcome
        try:
            outcome = await self._submitter.submit(credentials)
        except asyncio.CancelledError:
            self._state = replace(self._state, is_submitting=False, phase=FormPhase.EDITING)
            logger.warning("submission_cancelled")
            raise
        except InvalidCredentialsError:
            outcome = {"outcome": "invalid_credentials"}
        except SignInError as exc:
            logger.warning("submission_failed", error=type(exc).__name__, detail=str(exc))
            outcome = {"outcome": "service_error", "detail": str(exc) or type(exc).__name__}
        except Exception as exc:
            logger.exception("submission_failed", error=type(exc).__name__)
            outcome = {"outcome": "service_error", "detail": str(exc) or type(exc).__name__}

        self.on_settled(outcome)
        return outcome

    def on_settled(self, outcome: SubmissionOutcome) -> None:
        """Apply the outcome of the outstanding submission."""
        if not self._state.is_submitting:
            logger.warning("settle_without_submission", outcome=outcome["outcome"])
            return

        if outcome["outcome"] == "success":
            self._state = replace(self._state, is_submitting=False, phase=FormPhase.SETTLED)
            logger.info("submission_settled", outcome="success")
            if self._on_success is not None:
                try:
                    self._on_success(self._state.values["email"])
                except Exception:
                    logger.exception("success_handoff_failed")
            return

        if outcome["outcome"] == "invalid_credentials":
            message = INVALID_CREDENTIALS_MESSAGE
        else:
            message = SERVICE_ERROR_MESSAGE

        # Emptied password becomes the new baseline, so the form is clean again.
        values: dict[FieldName, str] = {"email": self._state.values["email"], "password": ""}
        self._state = replace(
            self._state,
            values=values,
            validation=validate(values),
            is_dirty=False,
            is_submitting=False,
            global_message=message,
            phase=FormPhase.SETTLED,
        )
        logger.info(
            "submission_settled",
            outcome=outcome["outcome"],
            detail=outcome.get("detail"),
        )
