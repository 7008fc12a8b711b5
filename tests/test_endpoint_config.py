"""Tests for endpoint_config.py and connectivity.py."""

import httpx
import pytest

from accounts import AccountServiceConnector, ConfigError, ConnectionStatus, normalize_endpoint
from connectivity import ConnectivityProber
from endpoint_config import EndpointConfigStore

from conftest import BASE_URL


@pytest.fixture
def prober(connector):
    return ConnectivityProber(connector)


@pytest.fixture
def endpoint_store(prober):
    return EndpointConfigStore(prober)


def test_normalize_endpoint_trims_and_strips_one_slash():
    assert normalize_endpoint("  http://127.0.0.1:5000/ ") == "http://127.0.0.1:5000"
    assert normalize_endpoint("http://host//") == "http://host/"
    assert normalize_endpoint("https://api.example.com") == "https://api.example.com"


@pytest.mark.parametrize("raw", ["", "   ", None, "/"])
def test_normalize_endpoint_rejects_empty(raw):
    with pytest.raises(ConfigError) as exc:
        normalize_endpoint(raw)
    assert exc.value.code == ConfigError.EMPTY_ENDPOINT


@pytest.mark.parametrize("raw", ["not a url", "127.0.0.1:5000", "ftp://files.example.com", "http://"])
def test_normalize_endpoint_rejects_urls_without_http_scheme(raw):
    with pytest.raises(ConfigError) as exc:
        normalize_endpoint(raw)
    assert exc.value.code == ConfigError.INVALID_ENDPOINT


def test_default_endpoint_is_local_development_address(endpoint_store):
    assert endpoint_store.get_endpoint() == "http://127.0.0.1:5000"


@pytest.mark.asyncio
async def test_prober_starts_unknown_then_online(prober, service):
    assert prober.status is ConnectionStatus.UNKNOWN

    status = await prober.probe(BASE_URL)

    assert status is ConnectionStatus.ONLINE
    assert prober.platform_label == "MetaTrader 5"
    assert service.requests[-1].url == httpx.URL(f"{BASE_URL}/health")


@pytest.mark.asyncio
async def test_prober_non_success_is_offline(prober, service):
    service.health_status = 503

    assert await prober.probe(BASE_URL) is ConnectionStatus.OFFLINE
    assert "503" in prober.last_error


@pytest.mark.asyncio
async def test_prober_online_without_body(prober, service):
    service.health_body = None

    assert await prober.probe(BASE_URL) is ConnectionStatus.ONLINE
    assert prober.platform_label is None


@pytest.mark.asyncio
async def test_prober_timeout_is_offline_and_never_raises():
    def hang(request):
        raise httpx.ReadTimeout("timed out", request=request)

    async with AccountServiceConnector(transport=httpx.MockTransport(hang)) as conn:
        prober = ConnectivityProber(conn)
        assert await prober.probe("http://127.0.0.1:5000") is ConnectionStatus.OFFLINE


@pytest.mark.asyncio
async def test_prober_garbage_url_is_offline(prober):
    assert await prober.probe("not a url") is ConnectionStatus.OFFLINE


@pytest.mark.asyncio
async def test_prober_on_closed_connector_is_offline(service):
    conn = AccountServiceConnector(transport=service.transport())
    await conn.close()

    prober = ConnectivityProber(conn)

    assert await prober.probe(BASE_URL) is ConnectionStatus.OFFLINE
    assert prober.last_error


@pytest.mark.asyncio
async def test_set_endpoint_rejects_schemeless_url_without_network(endpoint_store, service):
    with pytest.raises(ConfigError):
        await endpoint_store.set_endpoint("localhost:5000")
    assert service.requests == []


@pytest.mark.asyncio
async def test_latest_probe_wins(prober, service):
    assert await prober.probe(BASE_URL) is ConnectionStatus.ONLINE
    service.offline = True
    assert await prober.probe(BASE_URL) is ConnectionStatus.OFFLINE
    service.offline = False
    assert await prober.probe(BASE_URL) is ConnectionStatus.ONLINE
    assert prober.status is ConnectionStatus.ONLINE


@pytest.mark.asyncio
async def test_set_endpoint_rejects_empty_without_network(endpoint_store, service):
    with pytest.raises(ConfigError):
        await endpoint_store.set_endpoint("   ")
    assert service.requests == []
    assert endpoint_store.get_endpoint() == "http://127.0.0.1:5000"


@pytest.mark.asyncio
async def test_set_endpoint_commits_after_successful_probe(endpoint_store, prober, service):
    status = await endpoint_store.set_endpoint(" http://localhost:5000/ ")

    assert status is ConnectionStatus.ONLINE
    assert endpoint_store.get_endpoint() == "http://localhost:5000"
    assert service.requests[-1].url == httpx.URL("http://localhost:5000/health")
    # commit forces the next probe to start fresh
    assert prober.status is ConnectionStatus.UNKNOWN


@pytest.mark.asyncio
async def test_set_endpoint_keeps_previous_value_when_unreachable(endpoint_store, service):
    service.offline = True

    status = await endpoint_store.set_endpoint("http://localhost:5000")

    assert status is ConnectionStatus.OFFLINE
    assert endpoint_store.get_endpoint() == "http://127.0.0.1:5000"
