"""
Authorization providers for the nocode API.

The token lifecycle belongs to the host's OAuth2 machinery; the connector
only needs something that hands out a bearer token. Two providers cover the
common setups: a pre-issued token, and a refresh-token exchange against the
nocode user pool.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import urlencode

import requests

from priceloop.labs.nocode_connector.errors import UserError
from priceloop.labs.nocode_connector.interface import AuthorizationProvider
from priceloop.labs.nocode_connector.libs.config import AppConfig, ConnectorOptions

logger = logging.getLogger(__name__)

# The user pool app client has no secret, but the token endpoint rejects an
# empty one.
_PLACEHOLDER_CLIENT_SECRET = "_"


class StaticTokenProvider(AuthorizationProvider):
    """Serves a token that was issued out of band."""

    def __init__(self, access_token: Optional[str]) -> None:
        self._access_token = access_token

    def get_access_token(self) -> str:
        if not self._access_token:
            raise UserError("Not authorized. Connect your nocode account and try again.")
        return self._access_token

    def has_access(self) -> bool:
        return bool(self._access_token)

    def reset(self) -> None:
        self._access_token = None


class OAuth2TokenProvider(AuthorizationProvider):
    """
    Exchanges a refresh token for access tokens at the nocode OAuth2 endpoint.

    Access tokens are cached until five minutes before they expire.
    """

    def __init__(
        self,
        token_url: str,
        authorization_url: str,
        client_id: str,
        refresh_token: Optional[str],
        scopes: str = "",
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ) -> None:
        self.token_url = token_url
        self.authorization_url = authorization_url
        self.client_id = client_id
        self.refresh_token = refresh_token
        self.scopes = scopes
        self.timeout = timeout
        self._session = session or requests.Session()

        self._access_token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None

    def get_access_token(self) -> str:
        if self._access_token and self._token_expires_at:
            if datetime.now() < self._token_expires_at - timedelta(minutes=5):
                return self._access_token

        if not self.refresh_token:
            raise UserError("Not authorized. Connect your nocode account and try again.")

        data = {
            "grant_type": "refresh_token",
            "refresh_token": self.refresh_token,
            "client_id": self.client_id,
            "client_secret": _PLACEHOLDER_CLIENT_SECRET,
        }
        try:
            response = self._session.post(self.token_url, data=data, timeout=self.timeout)
            response.raise_for_status()
            token_data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise UserError(f'Error querying "{self.token_url}": {e}') from e
        if "access_token" not in token_data:
            raise UserError(f'Error querying "{self.token_url}": token response missing access_token')

        self._access_token = token_data["access_token"]
        self._token_expires_at = datetime.now() + timedelta(seconds=token_data.get("expires_in", 3600))
        if "refresh_token" in token_data:
            self.refresh_token = token_data["refresh_token"]
        logger.debug("Obtained access token valid until %s", self._token_expires_at)
        return self._access_token

    def has_access(self) -> bool:
        return bool(self._access_token or self.refresh_token)

    def reset(self) -> None:
        self._access_token = None
        self._token_expires_at = None
        self.refresh_token = None

    def get_authorization_url(self, redirect_uri: str, state: str = "") -> str:
        """URL the user opens to start the interactive authorization."""
        query = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "scope": self.scopes,
        }
        if state:
            query["state"] = state
        return f"{self.authorization_url}?{urlencode(query)}"


def load_app_config(client, options: ConnectorOptions) -> AppConfig:
    """
    Fetch the public ``app_config.json`` of the nocode instance.

    This is the one request made without a bearer token: it is needed to
    learn the OAuth client id before any token exists.
    """
    body = client.fetch_json(options.app_config_url, require_auth=False)
    try:
        return AppConfig.model_validate(body)
    except ValueError as e:
        raise UserError(f'Unexpected app config at "{options.app_config_url}": {e}') from e


def build_auth_provider(options: ConnectorOptions, client, session=None) -> AuthorizationProvider:
    """Choose the provider that matches the configured credentials."""
    if options.refresh_token:
        client_id = options.client_id
        scopes = ""
        if not client_id:
            app_config = load_app_config(client, options)
            client_id = app_config.auth.client_id
            scopes = app_config.auth.api_scopes
        return OAuth2TokenProvider(
            token_url=options.token_url,
            authorization_url=options.authorization_url,
            client_id=client_id,
            refresh_token=options.refresh_token,
            scopes=scopes,
            session=session,
            timeout=options.timeout,
        )
    return StaticTokenProvider(options.access_token)
