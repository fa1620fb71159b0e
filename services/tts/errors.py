"""
Typed failures for the speech service boundary.

Every call to the OAuth or synthesis endpoint ends either with a value
or with one of these. Nothing else escapes the clients.
"""

from typing import Optional

# Response bodies are logged, never shown to users
BODY_PREVIEW_CHARS = 200


def truncate_body(body: str, limit: int = BODY_PREVIEW_CHARS) -> str:
    if len(body) <= limit:
        return body
    return body[:limit] + "…"


class SpeechServiceError(Exception):
    """Base class for speech service failures."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation}: {message}")


class TransportError(SpeechServiceError):
    """Endpoint could not be reached (DNS, connect, TLS, timeout)."""


class UpstreamRejected(SpeechServiceError):
    """Endpoint answered with a non-success status."""

    def __init__(self, operation: str, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(
            operation, f"bad response status {status_code}: {truncate_body(body)}"
        )

    @property
    def is_auth_rejection(self) -> bool:
        """True when the status suggests an expired or invalid credential."""
        return self.status_code in (401, 403)


class DecodeError(SpeechServiceError):
    """A request or response body could not be encoded or interpreted."""


class CredentialAcquisitionFailed(Exception):
    """Initial token could not be obtained at startup."""

    def __init__(self, cause: Optional[SpeechServiceError] = None):
        self.cause = cause
        super().__init__(f"failed to acquire speech credential: {cause}")
