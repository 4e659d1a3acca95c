from __future__ import annotations

import os
from typing import Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from .errors import ConfigError

DEFAULT_PORT = 9182
DEFAULT_TOKEN_CACHE = "vOauth2Token.json"

DEVICE_NAME_ENV = "VERSA_VOS_DEVICE_NAME"
ORGANIZATION_NAME_ENV = "VERSA_VOS_ORGANIZATION_NAME"


class DirectorConfig(BaseModel):
    host: str
    port: int = DEFAULT_PORT
    username: str
    password: str
    grant_type: str = "password"
    client_id: str
    client_secret: str
    # Trust-everything TLS: server certificates are NOT validated when set.
    # Only meant for lab directors running self-signed certificates.
    insecure_skip_verify: bool = False
    ca_bundle: Optional[str] = None
    timeout_s: float = 10.0
    token_cache_path: Optional[str] = Field(default=DEFAULT_TOKEN_CACHE)

    model_config = {"frozen": True}

    @field_validator("host", "username", "password", "client_id", "client_secret")
    @classmethod
    def not_blank(cls, v: str, info: ValidationInfo) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        # Credentials are sent verbatim; only the host is trimmed.
        return v.strip() if info.field_name == "host" else v

    @property
    def base_url(self) -> str:
        return f"https://{self.host}:{self.port}"

    @property
    def verify(self):
        """Value handed to ``requests`` for certificate verification."""
        if self.insecure_skip_verify:
            return False
        return self.ca_bundle or True


def _truthy(v: str) -> bool:
    return v.lower() in {"1", "true", "yes"}


def _required(name: str) -> str:
    v = os.getenv(name, "")
    if not v.strip():
        raise ConfigError(
            f"Missing or empty value for {name}. Set it in the environment or a .env file."
        )
    return v


def load_config() -> DirectorConfig:
    load_dotenv()

    port_raw = os.getenv("VERSA_DIRECTOR_PORT", str(DEFAULT_PORT)).strip() or str(DEFAULT_PORT)
    try:
        port = int(port_raw)
    except ValueError as exc:
        raise ConfigError(f"VERSA_DIRECTOR_PORT must be an integer, got {port_raw!r}") from exc

    timeout_raw = os.getenv("VERSA_DIRECTOR_TIMEOUT_S", "10")
    try:
        timeout_s = float(timeout_raw)
    except ValueError as exc:
        raise ConfigError(f"VERSA_DIRECTOR_TIMEOUT_S must be a number, got {timeout_raw!r}") from exc

    return DirectorConfig(
        host=_required("VERSA_DIRECTOR_HOST"),
        port=port,
        username=_required("VERSA_DIRECTOR_USERNAME"),
        password=_required("VERSA_DIRECTOR_PASSWORD"),
        grant_type=_required("VERSA_DIRECTOR_OAUTH_GRANT_TYPE"),
        client_id=_required("VERSA_DIRECTOR_OAUTH_CLIENT_ID"),
        client_secret=_required("VERSA_DIRECTOR_OAUTH_CLIENT_SECRET"),
        insecure_skip_verify=_truthy(os.getenv("VERSA_DIRECTOR_INSECURE", "false")),
        ca_bundle=os.getenv("VERSA_DIRECTOR_CA_BUNDLE") or None,
        timeout_s=timeout_s,
        token_cache_path=os.getenv("VERSA_DIRECTOR_TOKEN_CACHE", DEFAULT_TOKEN_CACHE) or None,
    )


def resolve_scope(device_name: Optional[str], organization_name: Optional[str]) -> Tuple[str, str]:
    """Fill an empty device/organization from the environment.

    Raises ConfigError for any value still empty afterwards.
    """
    device = (device_name or "").strip() or os.getenv(DEVICE_NAME_ENV, "").strip()
    if not device:
        raise ConfigError(
            f"Missing device name. Set device_name in the configuration or use the {DEVICE_NAME_ENV} "
            "environment variable."
        )
    org = (organization_name or "").strip() or os.getenv(ORGANIZATION_NAME_ENV, "").strip()
    if not org:
        raise ConfigError(
            f"Missing organization name. Set organization_name in the configuration or use the "
            f"{ORGANIZATION_NAME_ENV} environment variable."
        )
    return device, org
