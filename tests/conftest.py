import pytest

from lnscan.parser import InputParser
from lnscan.settings import Settings
from lnscan.settings import settings as lnscan_settings
from tests.mocks import MockDnsResolver, MockRestClient


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def settings():
    # override settings for tests, restored afterwards
    original = lnscan_settings.model_dump()
    lnscan_settings.dns_require_dnssec = False
    lnscan_settings.user_agent = "lnscan-tests"

    yield lnscan_settings

    for key, value in original.items():
        setattr(lnscan_settings, key, value)


@pytest.fixture()
def rest_client() -> MockRestClient:
    return MockRestClient()


@pytest.fixture()
def dns_resolver() -> MockDnsResolver:
    return MockDnsResolver()


@pytest.fixture()
def input_parser(
    rest_client: MockRestClient, dns_resolver: MockDnsResolver
) -> InputParser:
    return InputParser(rest_client=rest_client, dns_resolver=dns_resolver)


@pytest.fixture()
def fresh_settings() -> Settings:
    return Settings()
