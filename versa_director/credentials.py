from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from pydantic import Field, ValidationError as ModelError, field_validator

from .config import DirectorConfig
from .errors import AuthError
from .models import WireModel

logger = logging.getLogger(__name__)

TOKEN_PATH = "auth/token"
NON_EXPIRING = "-1"


class TokenUser(WireModel):
    name: str = ""
    is_external_user: bool = False
    enable_two_factor: bool = False
    idle_time_out: int = 0
    roles: List[str] = Field(default_factory=list)
    primaryrole: str = ""


class Token(WireModel):
    access_token: str
    token_type: str = ""
    expires_in: str = ""
    refresh_token: str = ""
    issued_at: str = ""
    user: TokenUser = Field(default_factory=TokenUser)

    model_config = {"frozen": True}

    @field_validator("expires_in", "issued_at", mode="before")
    @classmethod
    def coerce_str(cls, v):
        return "" if v is None else str(v)

    @property
    def owner_user(self) -> str:
        return self.user.name

    def is_fresh(self) -> bool:
        # The Director marks usable tokens with expires_in == "-1"; anything
        # else is treated as already expired. No timestamp arithmetic.
        return self.expires_in == NON_EXPIRING


def _mask(secret: str) -> str:
    if len(secret) <= 8:
        return "***"
    return f"{secret[:4]}...{secret[-4:]}"


def _log_token(token: Token) -> None:
    logger.debug(
        "OAuth token: access=%s type=%s issued_at=%s expires_in=%s refresh=%s user=%s roles=%s primary_role=%s",
        _mask(token.access_token),
        token.token_type,
        token.issued_at,
        token.expires_in,
        _mask(token.refresh_token),
        token.user.name,
        token.user.roles,
        token.user.primaryrole,
    )


class CredentialStore:
    """Owns the OAuth2 configuration and the current bearer token.

    A cached token is picked up from ``token_cache_path`` on construction when
    it is still usable. Otherwise :meth:`ensure_token` obtains a new one with a
    single password-grant POST to ``/auth/token``. Acquisition is serialized so
    concurrent callers never refresh twice for the same miss.
    """

    def __init__(self, cfg: DirectorConfig):
        self._cfg = cfg
        self._lock = threading.Lock()
        self._token: Optional[Token] = None
        self._cache_path = Path(cfg.token_cache_path) if cfg.token_cache_path else None
        self._token = self.load_cached_token()

    @property
    def token(self) -> Optional[Token]:
        return self._token

    @property
    def has_token(self) -> bool:
        return self._token is not None

    def load_cached_token(self) -> Optional[Token]:
        """Return the cached token if it is present and usable, else None."""
        if self._cache_path is None:
            return None
        try:
            raw = self._cache_path.read_bytes()
        except OSError as e:
            logger.debug("No token cache at %s: %s", self._cache_path, e)
            return None
        try:
            token = Token.model_validate(json.loads(raw))
        except (ValueError, ModelError) as e:
            logger.debug("Ignoring unreadable token cache %s: %s", self._cache_path, e)
            return None
        if not token.is_fresh():
            logger.info("Cached token expired (expires_in=%s), a new one is needed", token.expires_in)
            return None
        logger.info("Using cached OAuth token from %s", self._cache_path)
        _log_token(token)
        return token

    def _oauth_params(self) -> Dict[str, Any]:
        return {
            "client_id": self._cfg.client_id,
            "client_secret": self._cfg.client_secret,
            "grant_type": self._cfg.grant_type,
            "username": self._cfg.username,
            "password": self._cfg.password,
        }

    def acquire_token(self) -> Token:
        """Request a new token from the Director and replace the current one."""
        with self._lock:
            return self._acquire_locked()

    def _acquire_locked(self) -> Token:
        url = f"{self._cfg.base_url}/{TOKEN_PATH}"
        logger.info("Requesting OAuth token from %s for user %s", url, self._cfg.username)
        try:
            r = requests.post(
                url,
                json=self._oauth_params(),
                headers={"Content-Type": "application/json", "Accept": "application/json"},
                verify=self._cfg.verify,
                timeout=self._cfg.timeout_s,
            )
        except requests.RequestException as e:
            raise AuthError(f"Unable to reach OAuth server at {url}: {e}") from e

        if not r.ok:
            raise AuthError(f"OAuth token request rejected: HTTP {r.status_code} {r.reason}")

        body = r.content
        try:
            token = Token.model_validate(json.loads(body))
        except (ValueError, ModelError) as e:
            raise AuthError(f"Malformed token response from {url}: {e}") from e
        if not token.access_token:
            raise AuthError(f"Token response from {url} carried no access_token")

        self._token = token
        _log_token(token)
        self._write_cache(body)
        return token

    def _write_cache(self, body: bytes) -> None:
        if self._cache_path is None:
            return
        try:
            fd = os.open(self._cache_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "wb") as f:
                # An existing file keeps its old mode through O_CREAT.
                os.chmod(self._cache_path, 0o600)
                f.write(body)
        except OSError as e:
            logger.warning("Failed to write token cache %s: %s", self._cache_path, e)

    def ensure_token(self) -> Token:
        """Return the current token, acquiring one if none is held."""
        with self._lock:
            if self._token is not None:
                return self._token
            return self._acquire_locked()

    def invalidate(self) -> None:
        with self._lock:
            self._token = None

    def authorization_header(self) -> Dict[str, str]:
        token = self.ensure_token()
        return {"Authorization": f"Bearer {token.access_token}"}
