import pytest


@pytest.mark.asyncio
async def test_config_summary_defaults(client):
    response = await client.get("/config")
    assert response.status_code == 200
    assert response.headers["cache-control"] == "no-store"
    assert response.json() == {
        "refresh_endpoint": "/api/v1/authentication/refresh",
        "ping_endpoint": "/api/v1/ping",
        "log_enabled": True,
        "log_ignore": ["/", "/events"],
        "routes": [],
    }


@pytest.mark.asyncio
async def test_add_and_replace_mapping(client):
    response = await client.post(
        "/config/route-mapping",
        data={"method": "get", "path": "/api/x", "file": "/json/a/b.json"},
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/json"

    await client.post("/config/route-mapping", data={"method": "GET", "path": "/api/x", "file": "a/c.json"})

    routes = (await client.get("/config")).json()["routes"]
    assert routes == [{"method": "GET", "path": "/api/x", "file": "a/c.json"}]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "form, code",
    [
        ({"method": "PUT", "path": "/api/x", "file": "a.json"}, "ROUTE_001"),
        ({"method": "GET", "path": "/v1/x", "file": "a.json"}, "ROUTE_002"),
        ({"method": "GET", "path": "/api/../x", "file": "a.json"}, "ROUTE_002"),
        ({"method": "GET", "path": "/api/x", "file": "../../etc/passwd"}, "ROUTE_003"),
        ({"method": "GET", "path": "/api/x"}, "FORM_001"),
    ],
)
async def test_invalid_mapping_rejected(client, form, code):
    response = await client.post("/config/route-mapping", data=form)
    assert response.status_code == 400
    assert response.json()["code"] == code
    assert (await client.get("/config")).json()["routes"] == []


@pytest.mark.asyncio
async def test_delete_mapping(client, state):
    state.routes.set("GET", "/api/x", "x.json")

    response = await client.post("/config/route-mapping/delete", data={"method": "GET", "path": "/api/x"})
    assert response.status_code == 303
    assert state.routes.all() == []

    response = await client.post("/config/route-mapping/delete", data={"method": "GET", "path": "/api/x"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_endpoints_validated(client, state):
    response = await client.post("/config/refresh-endpoint", data={"path": "/v1/refresh"})
    assert response.status_code == 400
    assert response.json()["code"] == "ROUTE_004"

    response = await client.post("/config/refresh-endpoint", data={"path": " /api/auth/renew "})
    assert response.status_code == 303
    assert state.config_store.refresh_endpoint() == "/api/auth/renew"

    response = await client.post("/config/ping-endpoint", data={})
    assert response.status_code == 400
    assert response.json()["code"] == "FORM_001"


@pytest.mark.asyncio
async def test_log_settings(client, state):
    response = await client.post("/config/log-ignore", data={"patterns": "json/*\n/health\n/bad*\n"})
    assert response.status_code == 303
    assert state.config_store.configured_log_ignore_patterns() == ["/json/*", "/health"]

    response = await client.post("/config/log-toggle", data={"enabled": "off"})
    assert response.status_code == 303
    assert state.config_store.log_enabled() is False

    await client.post("/config/log-toggle", data={"enabled": "ON"})
    assert state.config_store.log_enabled() is True


@pytest.mark.asyncio
async def test_write_failure_is_500(tmp_path):
    from httpx import ASGITransport, AsyncClient

    from jsonstub.base.config import StorageConfig, StubConfig, WatchConfig
    from jsonstub.server.api import create_app

    blocker = tmp_path / "config-file"
    blocker.write_text("")
    config = StubConfig(
        storage=StorageConfig(base_dir=tmp_path, config_dir_override=blocker),
        watch=WatchConfig(enabled=False),
    )
    app = create_app(config)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        response = await c.post("/config/ping-endpoint", data={"path": "/api/v2/ping"})

    assert response.status_code == 500
    assert response.json()["code"] == "CONFIG_001"


@pytest.mark.asyncio
async def test_newline_in_form_field_cannot_add_a_second_mapping(client, state):
    state.routes.set("GET", "/api/x", "good.json")

    response = await client.post(
        "/config/route-mapping",
        data={"method": "POST", "path": "/api/y", "file": "a.json\nGET /api/x evil.json"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "ROUTE_003"

    response = await client.post(
        "/config/route-mapping",
        data={"method": "GET", "path": "/api/a b", "file": "f.json"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "ROUTE_002"

    routes = (await client.get("/config")).json()["routes"]
    assert routes == [{"method": "GET", "path": "/api/x", "file": "good.json"}]


@pytest.mark.asyncio
async def test_endpoint_with_space_rejected(client, state):
    response = await client.post("/config/ping-endpoint", data={"path": "/api/v1/ping now"})
    assert response.status_code == 400
    assert response.json()["code"] == "ROUTE_004"
    assert state.config_store.ping_endpoint() == "/api/v1/ping"
