import pytest

from priceloop.labs.nocode_connector.errors import ConfigurationError
from priceloop.labs.nocode_connector.libs.config import AppConfig, ConnectorOptions, DataRequest


def test_defaults():
    options = ConnectorOptions.from_options({})

    assert options.host_name == "alpha.priceloop.ai"
    assert options.page_size == 500
    assert options.api_base_url == "https://api.alpha.priceloop.ai/api/v1.0"
    assert options.app_config_url == "https://alpha.priceloop.ai/app_config.json"
    assert options.token_url == "https://auth.alpha.priceloop.ai/oauth2/token"
    assert options.authorization_url == "https://auth.alpha.priceloop.ai/login"


def test_string_options_are_coerced():
    options = ConnectorOptions.from_options({"host_name": "beta.example.com/", "page_size": "250", "timeout": "5"})

    assert options.host_name == "beta.example.com"
    assert options.page_size == 250
    assert options.timeout == 5.0
    assert options.api_base_url == "https://api.beta.example.com/api/v1.0"


def test_unknown_options_are_kept():
    options = ConnectorOptions.from_options({"workspaceTable": "a/b"})
    assert options.model_extra == {"workspaceTable": "a/b"}


@pytest.mark.parametrize(
    "raw",
    [{"page_size": "0"}, {"page_size": "many"}, {"timeout": "-1"}, {"host_name": "a b"}, {"host_name": ""}],
)
def test_invalid_options(raw):
    with pytest.raises(ConfigurationError, match="Invalid connector options"):
        ConnectorOptions.from_options(raw)


def test_data_request_parsing():
    request = DataRequest.parse(
        {"configParams": {"workspaceTable": "shop/items"}, "fields": [{"name": "3"}, {"name": "1"}]}
    )

    assert request.config_params.workspace_name == "shop"
    assert request.config_params.table_name == "items"
    assert request.field_ids == ["3", "1"]


def test_schema_request_has_no_fields():
    assert DataRequest.parse({"configParams": {"workspaceTable": "a/b"}}).field_ids == []


def test_app_config():
    config = AppConfig.model_validate({"auth": {"clientId": "abc", "apiScopes": "x/read x/write"}, "other": 1})
    assert config.auth.client_id == "abc"
    assert config.auth.api_scopes == "x/read x/write"
