"""Auth collaborators the form controller submits credentials to."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import httpx
import structlog

from signin.exceptions import AuthServiceResponseError, AuthServiceUnavailableError
from signin.types import Credentials, SubmissionOutcome

DEFAULT_TIMEOUT = httpx.Timeout(connect=2.0, read=5.0, write=5.0, pool=5.0)
_REJECTION_STATUSES = {400, 422}

logger = structlog.get_logger(__name__)


class AuthSubmitter(Protocol):
    """Opaque auth backend: one call, exactly one outcome."""

    async def submit(self, credentials: Credentials) -> SubmissionOutcome:
        """Attempt to authenticate the given credentials."""
        ...


class HttpAuthSubmitter:
    """Submit credentials to an auth service password-login endpoint."""

    def __init__(
        self,
        base_url: str,
        login_path: str = "/auth/login",
        timeout: httpx.Timeout | float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create submitter with sane defaults and optional injected transport."""
        self._login_path = login_path
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout or DEFAULT_TIMEOUT,
        )

    async def submit(self, credentials: Credentials) -> SubmissionOutcome:
        """POST credentials once and classify the response."""
        response = await self._request(
            "POST",
            self._login_path,
            json={"email": credentials["email"], "password": credentials["password"]},
        )
        status_code = response.status_code
        if status_code < 300:
            return {"outcome": "success"}
        if status_code == 401:
            return {"outcome": "invalid_credentials"}
        if status_code in _REJECTION_STATUSES and self._error_code(response) == "invalid_credentials":
            return {"outcome": "invalid_credentials"}
        if status_code == 429:
            return {
                "outcome": "service_error",
                "detail": f"Auth service request failed with status {status_code}.",
            }
        raise AuthServiceResponseError(
            f"Auth service request failed with status {status_code}.",
            status_code,
        )

    async def aclose(self) -> None:
        """Close underlying HTTP client if owned by this instance."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpAuthSubmitter:
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        """Exit async context manager and close managed resources."""
        del exc_type, exc, tb
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Execute request and normalize upstream failures."""
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            logger.warning("auth_service_unreachable", error=type(exc).__name__)
            raise AuthServiceUnavailableError("Auth service unavailable.") from exc

        if response.status_code >= 500:
            raise AuthServiceUnavailableError(
                f"Auth service request failed with status {response.status_code}."
            )
        return response

    @staticmethod
    def _error_code(response: httpx.Response) -> str | None:
        """Return the machine-readable error code from an error body, if any."""
        try:
            payload = response.json()
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
        code = payload.get("code")
        return str(code) if code is not None else None


class DemoAuthSubmitter:
    """Stand-in backend that waits, then rejects every credential pair."""

    def __init__(self, latency_seconds: float = 0.7) -> None:
        self._latency_seconds = latency_seconds
        self.calls = 0

    async def submit(self, credentials: Credentials) -> SubmissionOutcome:
        """Simulate a round trip and report invalid credentials."""
        del credentials
        self.calls += 1
        await asyncio.sleep(self._latency_seconds)
        return {"outcome": "invalid_credentials"}
