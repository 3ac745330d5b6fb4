# Shared fixtures for the nocode connector unit tests.
# Pytest auto-discovers fixtures here for tests in this directory and subdirectories.

import pytest

from priceloop.labs.nocode_connector.libs.simulated_source.api import SimulatedNocodeAPI
from priceloop.labs.nocode_connector.sources.nocode.nocode import NocodeStudioConnect
from tests.unit.nocode_test_utils import make_api, make_connector


@pytest.fixture
def api() -> SimulatedNocodeAPI:
    return make_api()


@pytest.fixture
def connector(api) -> NocodeStudioConnect:
    return make_connector(api)
