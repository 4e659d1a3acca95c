"""Tests for environment configuration and scope resolution."""
import pytest
from pydantic import ValidationError as ModelError

from versa_director.config import DirectorConfig, load_config, resolve_scope
from versa_director.errors import ConfigError

ENV = {
    "VERSA_DIRECTOR_HOST": "10.40.73.242",
    "VERSA_DIRECTOR_PORT": "9182",
    "VERSA_DIRECTOR_USERNAME": "admin",
    "VERSA_DIRECTOR_PASSWORD": "secret",
    "VERSA_DIRECTOR_OAUTH_GRANT_TYPE": "password",
    "VERSA_DIRECTOR_OAUTH_CLIENT_ID": "voae_rest",
    "VERSA_DIRECTOR_OAUTH_CLIENT_SECRET": "client-secret",
}


@pytest.fixture
def env(monkeypatch):
    for k in list(ENV) + ["VERSA_DIRECTOR_INSECURE", "VERSA_DIRECTOR_TOKEN_CACHE",
                          "VERSA_DIRECTOR_CA_BUNDLE", "VERSA_DIRECTOR_TIMEOUT_S"]:
        monkeypatch.delenv(k, raising=False)
    for k, v in ENV.items():
        monkeypatch.setenv(k, v)
    return monkeypatch


class TestLoadConfig:
    def test_defaults(self, env):
        cfg = load_config()
        assert cfg.host == "10.40.73.242"
        assert cfg.port == 9182
        assert cfg.base_url == "https://10.40.73.242:9182"
        assert cfg.insecure_skip_verify is False
        assert cfg.verify is True
        assert cfg.timeout_s == 10.0
        assert cfg.token_cache_path == "vOauth2Token.json"

    def test_insecure_flag(self, env):
        env.setenv("VERSA_DIRECTOR_INSECURE", "yes")
        cfg = load_config()
        assert cfg.insecure_skip_verify is True
        assert cfg.verify is False

    def test_ca_bundle(self, env):
        env.setenv("VERSA_DIRECTOR_CA_BUNDLE", "/etc/ssl/director.pem")
        assert load_config().verify == "/etc/ssl/director.pem"

    @pytest.mark.parametrize("name", sorted(set(ENV) - {"VERSA_DIRECTOR_PORT"}))
    def test_missing_required_value(self, env, name):
        env.setenv(name, "  ")
        with pytest.raises(ConfigError, match=name):
            load_config()

    def test_bad_port(self, env):
        env.setenv("VERSA_DIRECTOR_PORT", "nine")
        with pytest.raises(ConfigError):
            load_config()

    def test_config_is_immutable(self, env):
        cfg = load_config()
        with pytest.raises(ModelError):
            cfg.host = "other"


class TestDirectorConfig:
    def test_blank_values_rejected(self):
        with pytest.raises(ModelError):
            DirectorConfig(host="h", username="", password="p", client_id="c", client_secret="s")


class TestResolveScope:
    def test_explicit_values(self, monkeypatch):
        monkeypatch.setenv("VERSA_VOS_DEVICE_NAME", "env-dev")
        assert resolve_scope("Branch-1", "ACME") == ("Branch-1", "ACME")

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("VERSA_VOS_DEVICE_NAME", "Branch-2")
        monkeypatch.setenv("VERSA_VOS_ORGANIZATION_NAME", "Tenant")
        assert resolve_scope("", None) == ("Branch-2", "Tenant")

    def test_missing_device(self, monkeypatch):
        monkeypatch.delenv("VERSA_VOS_DEVICE_NAME", raising=False)
        with pytest.raises(ConfigError, match="device"):
            resolve_scope("", "ACME")

    def test_missing_organization(self, monkeypatch):
        monkeypatch.delenv("VERSA_VOS_ORGANIZATION_NAME", raising=False)
        with pytest.raises(ConfigError, match="organization"):
            resolve_scope("Branch-1", "")


class TestCredentialWhitespace:
    def test_credentials_kept_verbatim(self):
        cfg = DirectorConfig(host=" director.example.net ", username="admin", password=" pa ss ",
                             client_id="c", client_secret="s ")
        assert cfg.host == "director.example.net"
        assert cfg.password == " pa ss "
        assert cfg.client_secret == "s "

    def test_env_password_kept_verbatim(self, env):
        env.setenv("VERSA_DIRECTOR_PASSWORD", " pa ss ")
        assert load_config().password == " pa ss "
