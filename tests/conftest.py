"""Pytest configuration for jsonstub."""
import os

import pytest
from httpx import ASGITransport, AsyncClient

from jsonstub.base.config import StorageConfig, StubConfig, WatchConfig, get_config, set_config
from jsonstub.data.config_store import ConfigStore
from jsonstub.data.content_store import ContentStore
from jsonstub.data.route_table import RouteTable


def pytest_configure():
    # No background polling while tests create and delete files.
    os.environ.setdefault("JSONSTUB_WATCH", "false")


@pytest.fixture(autouse=True)
def _restore_global_config():
    original = get_config()
    yield
    set_config(original)


@pytest.fixture
def stub_config(tmp_path):
    return StubConfig(
        storage=StorageConfig(base_dir=tmp_path),
        watch=WatchConfig(enabled=False),
    )


@pytest.fixture
def content_dir(stub_config):
    path = stub_config.storage.content_dir
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def config_store(stub_config):
    return ConfigStore(stub_config.storage.config_dir)


@pytest.fixture
def route_table(config_store):
    return RouteTable(config_store)


@pytest.fixture
def content_store(content_dir):
    return ContentStore(content_dir)


@pytest.fixture
def app(stub_config, content_dir):
    from jsonstub.server.api import create_app

    return create_app(stub_config)


@pytest.fixture
def state(app):
    return app.state.stub


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
