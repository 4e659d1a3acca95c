from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from .config import DirectorConfig
from .credentials import CredentialStore
from .errors import DecodeError, TransportError

logger = logging.getLogger(__name__)

MAX_BODY_BYTES = 0x10000

# Accepted status codes per verb.
EXPECTED_STATUS = {
    "GET": frozenset({200}),
    "POST": frozenset({201}),
    "PUT": frozenset({200, 204}),
    "DELETE": frozenset({200, 204}),
}


def join_path(*segments: str) -> str:
    """Join path segments, percent-encoding each one."""
    return "/".join(quote(str(s), safe="") for s in segments)


def decode_json(body: bytes, what: str) -> Any:
    try:
        return json.loads(body)
    except ValueError as e:
        raise DecodeError(f"Malformed JSON in {what} response: {e}") from e


class TransportGateway:
    """Signed JSON requests against the Director REST API.

    Every request carries the bearer token from the credential store. No
    retries: any network error or unexpected status is raised to the caller.
    """

    def __init__(self, cfg: DirectorConfig, credentials: CredentialStore):
        self._cfg = cfg
        self._credentials = credentials
        self._session = requests.Session()
        self._session.verify = cfg.verify
        self._timeout = cfg.timeout_s
        self._base = cfg.base_url
        if cfg.insecure_skip_verify:
            urllib3.disable_warnings(InsecureRequestWarning)
            logger.warning("TLS certificate validation is DISABLED for %s", self._base)

    @property
    def base_url(self) -> str:
        return self._base

    def url(self, path: str) -> str:
        return f"{self._base}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        headers.update(self._credentials.authorization_header())
        return headers

    @staticmethod
    def _read_capped(r: requests.Response) -> bytes:
        chunks = []
        remaining = MAX_BODY_BYTES
        for chunk in r.iter_content(chunk_size=8192):
            if not chunk:
                continue
            chunks.append(chunk[:remaining])
            remaining -= len(chunks[-1])
            if remaining <= 0:
                break
        return b"".join(chunks)

    def _check_response(self, r: requests.Response, method: str, url: str) -> None:
        if r.status_code in EXPECTED_STATUS[method]:
            return
        raise TransportError(
            "Unexpected response",
            status_code=r.status_code,
            reason=r.reason,
            method=method,
            url=url,
        )

    def _request(self, method: str, path: str, *, params: Optional[Dict[str, Any]] = None,
                 json_body: Optional[Any] = None) -> bytes:
        url = self.url(path)
        logger.debug("%s %s params=%s", method, url, params)
        if json_body is not None:
            logger.debug("%s body: %s", method, json_body)
        try:
            r = self._session.request(
                method,
                url,
                headers=self._headers(),
                params=params,
                json=json_body,
                timeout=self._timeout,
                stream=True,
            )
        except requests.RequestException as e:
            raise TransportError(f"Unable to send request: {e}", method=method, url=url) from e

        try:
            body = self._read_capped(r)
        except requests.RequestException as e:
            raise TransportError(f"Failed to read response: {e}", method=method, url=url) from e
        finally:
            r.close()

        self._check_response(r, method, url)
        logger.debug("%s %s -> %d (%d bytes)", method, url, r.status_code, len(body))
        return body

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> bytes:
        return self._request("GET", path, params=params)

    def post(self, path: str, json_body: Any, params: Optional[Dict[str, Any]] = None) -> bytes:
        return self._request("POST", path, params=params, json_body=json_body)

    def put(self, path: str, json_body: Any, params: Optional[Dict[str, Any]] = None) -> bytes:
        return self._request("PUT", path, params=params, json_body=json_body)

    def delete(self, path: str, json_body: Optional[Any] = None,
               params: Optional[Dict[str, Any]] = None) -> bytes:
        return self._request("DELETE", path, params=params, json_body=json_body)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "TransportGateway":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
