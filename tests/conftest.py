import json
from unittest.mock import MagicMock

import pytest

from versa_director.config import DirectorConfig
from versa_director.credentials import CredentialStore
from versa_director.transport import TransportGateway

FRESH_TOKEN = {
    "access_token": "abc123def456ghi789",
    "issued_at": "1700000000",
    "expires_in": "-1",
    "token_type": "Bearer",
    "refresh_token": "refresh-0001-0002",
    "user": {"name": "admin", "roles": ["ProviderDataCenterSystemAdmin"], "primaryrole": "admin"},
}


def make_response(status_code=200, body=b"", reason=None):
    if not isinstance(body, bytes):
        body = json.dumps(body).encode()
    r = MagicMock()
    r.status_code = status_code
    r.reason = reason or {200: "OK", 201: "Created", 204: "No Content"}.get(status_code, "Error")
    r.ok = status_code < 400
    r.content = body
    r.iter_content.return_value = [body]
    return r


@pytest.fixture
def cache_path(tmp_path):
    return tmp_path / "token.json"


@pytest.fixture
def cfg(cache_path):
    return DirectorConfig(
        host="director.example.net",
        port=9182,
        username="admin",
        password="secret",
        grant_type="password",
        client_id="voae_rest",
        client_secret="client-secret",
        token_cache_path=str(cache_path),
    )


@pytest.fixture
def store(cfg, cache_path):
    cache_path.write_text(json.dumps(FRESH_TOKEN))
    return CredentialStore(cfg)


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def gateway(cfg, store, session):
    gw = TransportGateway(cfg, store)
    gw._session = session
    return gw


@pytest.fixture
def respond():
    return make_response
