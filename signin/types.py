"""Sign-in form data contract types."""

from __future__ import annotations

from typing import Literal, TypedDict

FieldName = Literal["email", "password"]


class Credentials(TypedDict):
    """Field values handed to the auth collaborator on submit."""

    email: str
    password: str


class SubmissionSuccess(TypedDict):
    """Auth service accepted the credentials."""

    outcome: Literal["success"]


class SubmissionRejected(TypedDict):
    """Auth service rejected the credentials."""

    outcome: Literal["invalid_credentials"]


class SubmissionFailed(TypedDict):
    """Auth service could not process the attempt."""

    outcome: Literal["service_error"]
    detail: str


SubmissionOutcome = SubmissionSuccess | SubmissionRejected | SubmissionFailed
