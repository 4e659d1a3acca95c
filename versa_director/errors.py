from __future__ import annotations

from typing import Optional


class DirectorError(Exception):
    """Base class for every error raised by the Versa Director client."""


class ConfigError(DirectorError):
    """A required scope or credential value is missing or empty."""


class AuthError(DirectorError):
    """OAuth2 token acquisition failed."""


class ValidationError(DirectorError):
    """Caller input was rejected before any request was sent."""


class DecodeError(DirectorError):
    """A response body could not be decoded as the expected JSON shape."""


class TransportError(DirectorError):
    """Network failure or an unexpected HTTP status from the Director."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ):
        self.status_code = status_code
        self.reason = reason
        self.method = method
        self.url = url

        detail = ""
        if status_code is not None:
            detail = f"HTTP {status_code}"
            if reason:
                detail += f" {reason}"
        if method and url:
            detail += f" on {method} {url}" if detail else f"{method} {url}"

        super().__init__(f"{message}: {detail}" if detail else message)

    @property
    def status_line(self) -> Optional[str]:
        if self.status_code is None:
            return None
        return f"{self.status_code} {self.reason or ''}".strip()

    @property
    def is_network_error(self) -> bool:
        return self.status_code is None

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    @property
    def is_conflict(self) -> bool:
        return self.status_code == 409
