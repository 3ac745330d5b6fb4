from datetime import datetime, timedelta
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlsplit

import pytest

from priceloop.labs.nocode_connector.errors import UserError
from priceloop.labs.nocode_connector.libs.auth import (
    OAuth2TokenProvider,
    StaticTokenProvider,
    build_auth_provider,
    load_app_config,
)
from priceloop.labs.nocode_connector.libs.config import ConnectorOptions
from priceloop.labs.nocode_connector.libs.simulated_source.api import SimulatedNocodeAPI
from priceloop.labs.nocode_connector.sources.nocode.nocode_client import NocodeAPIClient

HOST = "nocode.test"


@pytest.fixture
def sim() -> SimulatedNocodeAPI:
    return SimulatedNocodeAPI(client_id="pool-client", api_scopes="api/read")


def _oauth_provider(sim, refresh_token="refresh-1") -> OAuth2TokenProvider:
    options = ConnectorOptions(host_name=HOST)
    return OAuth2TokenProvider(
        token_url=options.token_url,
        authorization_url=options.authorization_url,
        client_id="pool-client",
        refresh_token=refresh_token,
        scopes="api/read",
        session=sim,
    )


def test_static_provider():
    provider = StaticTokenProvider("abc")
    assert provider.has_access()
    assert provider.get_access_token() == "abc"

    provider.reset()

    assert not provider.has_access()
    with pytest.raises(UserError):
        provider.get_access_token()


def test_oauth_provider_exchanges_refresh_token(sim):
    provider = _oauth_provider(sim)

    assert provider.get_access_token() == sim.issued_access_token

    call = sim.calls[-1]
    assert call["url"] == f"https://auth.{HOST}/oauth2/token"
    assert call["params"]["grant_type"] == "refresh_token"
    assert call["params"]["refresh_token"] == "refresh-1"
    assert call["params"]["client_secret"] == "_"


def test_oauth_provider_caches_token(sim):
    provider = _oauth_provider(sim)
    provider.get_access_token()
    provider.get_access_token()

    assert len(sim.calls) == 1


def test_oauth_provider_refreshes_near_expiry(sim):
    provider = _oauth_provider(sim)
    provider.get_access_token()
    provider._token_expires_at = datetime.now() + timedelta(minutes=1)

    provider.get_access_token()

    assert len(sim.calls) == 2


def test_oauth_provider_rejected_grant(sim):
    provider = _oauth_provider(sim)
    provider.client_id = "someone-else"

    with pytest.raises(UserError, match="oauth2/token"):
        provider.get_access_token()


def test_oauth_provider_reset(sim):
    provider = _oauth_provider(sim)
    provider.get_access_token()

    provider.reset()

    assert not provider.has_access()
    with pytest.raises(UserError, match="Not authorized"):
        provider.get_access_token()


def test_authorization_url(sim):
    url = _oauth_provider(sim).get_authorization_url("https://host/callback", state="s1")

    parts = urlsplit(url)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == f"https://auth.{HOST}/login"
    assert parse_qs(parts.query) == {
        "response_type": ["code"],
        "client_id": ["pool-client"],
        "redirect_uri": ["https://host/callback"],
        "scope": ["api/read"],
        "state": ["s1"],
    }


def test_load_app_config_is_unauthenticated(sim):
    options = ConnectorOptions(host_name=HOST)
    client = NocodeAPIClient(options.api_base_url, session=sim)

    config = load_app_config(client, options)

    assert config.auth.client_id == "pool-client"
    assert sim.calls[-1]["url"] == f"https://{HOST}/app_config.json"
    assert "Authorization" not in sim.calls[-1]["headers"]


def test_load_app_config_rejects_unexpected_body():
    client = MagicMock()
    client.fetch_json.return_value = {"auth": {}}

    with pytest.raises(UserError, match="Unexpected app config"):
        load_app_config(client, ConnectorOptions(host_name=HOST))


def test_build_auth_provider_static():
    options = ConnectorOptions(access_token="abc")
    provider = build_auth_provider(options, client=MagicMock())
    assert isinstance(provider, StaticTokenProvider)


def test_build_auth_provider_bootstraps_client_id(sim):
    options = ConnectorOptions(host_name=HOST, refresh_token="refresh-1")
    client = NocodeAPIClient(options.api_base_url, session=sim)

    provider = build_auth_provider(options, client, session=sim)

    assert isinstance(provider, OAuth2TokenProvider)
    assert provider.client_id == "pool-client"
    assert provider.scopes == "api/read"
    assert provider.get_access_token() == sim.issued_access_token
