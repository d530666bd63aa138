import pytest
from fastapi.testclient import TestClient

from llmproxify.providers import build_registry
from llmproxify.proxy import UpstreamForwarder
from llmproxify.utils_tests.upstream import FakeUpstream


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def forwarder(upstream):
    return UpstreamForwarder(transport=upstream.transport)


@pytest.fixture
def test_client(upstream):
    """TestClient whose provider table is the defaults and whose upstream is fake."""
    from llmproxify.routes import get_forwarder, get_provider_registry
    from llmproxify.server import app

    app.dependency_overrides[get_provider_registry] = lambda: build_registry()
    app.dependency_overrides[get_forwarder] = lambda: UpstreamForwarder(
        transport=upstream.transport
    )
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
