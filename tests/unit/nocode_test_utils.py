"""Constants and builders shared by the nocode connector tests."""

from priceloop.labs.nocode_connector.libs.simulated_source.api import SimulatedNocodeAPI
from priceloop.labs.nocode_connector.sources.nocode.nocode import NocodeStudioConnect

TEST_TOKEN = "test_token"
TEST_HOST = "nocode.test"
API_BASE_URL = f"https://api.{TEST_HOST}/api/v1.0"

# The end-to-end table: id (number), label (string), ts (date)
SAMPLE_COLUMNS = [
    {"name": "id", "tpe": "number"},
    {"name": "label", "tpe": "string"},
    {"name": "ts", "tpe": "date"},
]


def make_api(type_encoding: str = "name") -> SimulatedNocodeAPI:
    """Simulated API with a ``shop`` workspace holding a small ``items`` table."""
    api = SimulatedNocodeAPI(valid_tokens={TEST_TOKEN}, type_encoding=type_encoding)
    api.store.register_table("shop", "items", SAMPLE_COLUMNS)
    api.store.insert_rows(
        "shop",
        "items",
        [
            [42.0, "hello", "2020-01-02T03:04:05Z"],
            [7, "world", None],
            [None, None, "2021-03-05T07:08:09Z"],
        ],
    )
    api.store.register_table("shop", "empty", [{"name": "label", "tpe": "string"}])
    api.store.register_workspace("archive")
    return api


def make_connector(api: SimulatedNocodeAPI, **options) -> NocodeStudioConnect:
    """Build a connector against ``api`` with a static token."""
    opts = {"host_name": TEST_HOST, "access_token": TEST_TOKEN}
    opts.update({k: str(v) for k, v in options.items()})
    return NocodeStudioConnect(opts, session=api)


def data_request(workspace_table: str, field_ids=None) -> dict:
    request = {"configParams": {"workspaceTable": workspace_table}}
    if field_ids is not None:
        request["fields"] = [{"name": f} for f in field_ids]
    return request
