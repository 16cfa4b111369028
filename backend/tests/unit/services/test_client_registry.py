# tests/unit/services/test_client_registry.py
from __future__ import annotations

import json

import pytest
from idserver.services._shared.errors import (
    ClientNotRegistered,
    ConfigurationError,
    RedirectMismatch,
    ScopeNotGranted,
)
from idserver.services.oauth.dto import Scope, normalize_redirect_uri
from idserver.services.oauth.registry import (
    DEFAULT_CLIENTS,
    ClientData,
    ClientRegistry,
    parse_client_data,
)

DASHBOARD_URI = "https://dash.purduehackers.com/api/callback"


def test_default_registry_lists_every_builtin_client(registry):
    assert len(registry) == len(DEFAULT_CLIENTS) == 7
    assert set(registry.client_ids()) == {
        "dashboard",
        "passports",
        "authority",
        "auth-test",
        "vulcan-auth",
        "shad-moe",
        "shquid",
    }


def test_lookup_returns_registered_client(registry):
    client = registry.lookup("passports")
    assert client is not None
    assert client.redirect_uri == "https://passports.purduehackers.com/callback"
    assert client.scope == Scope.parse("user user:read")


def test_lookup_unknown_client_is_none(registry):
    assert registry.lookup("nope") is None


def test_check_defaults_redirect_and_scope(registry):
    pre = registry.check("dashboard")
    assert pre.redirect_uri == DASHBOARD_URI
    assert str(pre.scope) == "user:read"
    assert pre.state is None


def test_check_accepts_semantically_equal_redirect(registry):
    pre = registry.check(
        "dashboard",
        redirect_uri="HTTPS://Dash.PurdueHackers.com:443/api/callback",
        state="xyz",
    )
    assert pre.redirect_uri == DASHBOARD_URI
    assert pre.state == "xyz"


def test_check_custom_scheme_redirect(registry):
    pre = registry.check("authority", redirect_uri="authority://callback", scope="admin:read")
    assert str(pre.scope) == "admin:read"


def test_check_unknown_client(registry):
    with pytest.raises(ClientNotRegistered) as exc:
        registry.check("evil")
    assert exc.value.error == "invalid_client"


def test_check_redirect_mismatch(registry):
    with pytest.raises(RedirectMismatch):
        registry.check("dashboard", redirect_uri="https://evil.example.com/api/callback")


@pytest.mark.parametrize("scope", ["admin", "user:read admin", "user"])
def test_check_scope_not_granted(registry, scope):
    with pytest.raises(ScopeNotGranted) as exc:
        registry.check("dashboard", scope=scope)
    assert exc.value.error == "invalid_scope"


def test_check_malformed_scope(registry):
    with pytest.raises(ScopeNotGranted):
        registry.check("dashboard", scope='user:read "quoted"')


def test_scope_subset_of_multi_token_grant(registry):
    pre = registry.check("passports", scope="user")
    assert pre.scope == Scope.parse("user")


def test_from_config_parses_json():
    raw = json.dumps(
        [{"client_id": "local", "redirect_uri": "http://localhost:3000/cb", "scope": "user:read"}]
    )
    registry = ClientRegistry.from_config(raw)
    assert registry.client_ids() == ["local"]
    assert registry.lookup("local").accepts_redirect("http://LOCALHOST:3000/cb")


@pytest.mark.parametrize("value", [None, ""])
def test_from_config_empty_uses_defaults(value):
    assert len(ClientRegistry.from_config(value)) == len(DEFAULT_CLIENTS)


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        '{"client_id": "x"}',
        '[{"client_id": "x"}]',
    ],
)
def test_malformed_configuration(raw):
    with pytest.raises(ConfigurationError):
        parse_client_data(raw)


def test_duplicate_client_ids_rejected():
    entry = ClientData("dup", "https://a.example/cb", "user:read")
    with pytest.raises(ConfigurationError):
        ClientRegistry([entry, entry])


def test_normalize_redirect_uri_keeps_non_default_port_and_path():
    assert normalize_redirect_uri("http://Example.com:8080") == "http://example.com:8080/"
    assert normalize_redirect_uri("authority://callback") == "authority://callback"


@pytest.mark.parametrize(
    "uri",
    [
        "https://dash.purduehackers.com:abc/api/callback",
        "https://dash.purduehackers.com:70000/api/callback",
        "https://[dash.purduehackers.com/api/callback",
    ],
)
def test_malformed_redirect_uri_is_a_mismatch(registry, uri):
    with pytest.raises(ValueError):
        normalize_redirect_uri(uri)
    assert not registry.lookup("dashboard").accepts_redirect(uri)
    with pytest.raises(RedirectMismatch):
        registry.check("dashboard", redirect_uri=uri)
