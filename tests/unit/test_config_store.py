import logging

import pytest

from jsonstub.data.config_store import (
    DEFAULT_LOG_IGNORE_PATTERNS,
    DEFAULT_PING_ENDPOINT,
    DEFAULT_REFRESH_ENDPOINT,
    ConfigStore,
    matches_ignore_pattern,
    normalize_log_pattern,
)
from jsonstub.data.route_table import RouteMapping
from jsonstub.errors import ErrorCode, StubError


def test_defaults_when_directory_missing(tmp_path):
    store = ConfigStore(tmp_path / "does-not-exist")
    assert store.ping_endpoint() == DEFAULT_PING_ENDPOINT
    assert store.refresh_endpoint() == DEFAULT_REFRESH_ENDPOINT
    assert store.log_enabled() is True
    assert store.read_log_ignore_patterns() == list(DEFAULT_LOG_IGNORE_PATTERNS)
    assert store.read_route_table() == []


def test_scalar_written_and_reread(config_store):
    config_store.write_scalar("ping_endpoint", "/api/v2/ping")
    assert config_store.read_scalar("ping_endpoint") == "/api/v2/ping"
    assert (config_store.config_dir / "ping_endpoint.txt").read_text() == "/api/v2/ping"


def test_hand_edits_are_seen_without_restart(config_store):
    config_store.config_dir.mkdir(parents=True)
    (config_store.config_dir / "refresh_endpoint.txt").write_text("  /api/auth/renew \n")
    assert config_store.refresh_endpoint() == "/api/auth/renew"

    (config_store.config_dir / "refresh_endpoint.txt").write_text("   \n")
    assert config_store.refresh_endpoint() == DEFAULT_REFRESH_ENDPOINT


def test_set_endpoint_rejects_unsafe_path(config_store):
    with pytest.raises(StubError) as exc:
        config_store.set_ping_endpoint("/etc/passwd")
    assert exc.value.code is ErrorCode.ENDPOINT_INVALID
    assert not (config_store.config_dir / "ping_endpoint.txt").exists()
    assert config_store.ping_endpoint() == DEFAULT_PING_ENDPOINT


@pytest.mark.parametrize(
    "raw, expected",
    [("on", True), ("ON", True), ("true", True), ("1", True), ("", True),
     ("off", False), ("false", False), ("no", False)],
)
def test_log_enabled_values(config_store, raw, expected):
    config_store.write_scalar("log_enabled", raw)
    assert config_store.log_enabled() is expected


def test_set_log_enabled_round_trip(config_store):
    config_store.set_log_enabled(False)
    assert config_store.log_enabled() is False
    assert config_store.should_log("/api/v1/items") is False

    config_store.set_log_enabled(True)
    assert config_store.should_log("/api/v1/items") is True


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("/health", "/health"),
        ("health", "/health"),
        ("  json/*  ", "/json/*"),
        ("", None),
        ("   ", None),
        ("/a\\b", None),
        ("/a*b", None),
        ("/a*/*", None),
        ("*", "/*"),
    ],
)
def test_normalize_log_pattern(raw, expected):
    assert normalize_log_pattern(raw) == expected


def test_prefix_pattern_matching():
    patterns = ["/json/*"]
    assert matches_ignore_pattern("/json", patterns) is True
    assert matches_ignore_pattern("/json/", patterns) is True
    assert matches_ignore_pattern("/json/users/a.json", patterns) is True
    assert matches_ignore_pattern("/jsonx", patterns) is False

    assert matches_ignore_pattern("/health", ["/health"]) is True
    assert matches_ignore_pattern("/health/deep", ["/health"]) is False


def test_builtin_ignores_always_apply(config_store):
    assert config_store.is_log_ignored("/") is True
    assert config_store.is_log_ignored("/events") is True
    assert config_store.is_log_ignored("/api/v1/ping") is False

    config_store.write_log_ignore_patterns(["/api/*"])
    assert config_store.is_log_ignored("/events") is True
    assert config_store.is_log_ignored("/api/v1/ping") is True


def test_write_log_ignore_patterns_drops_invalid(config_store):
    saved = config_store.write_log_ignore_patterns(["json/*", "/health", "bad\\x", "/a*b", "  "])
    assert saved == ["/json/*", "/health"]
    assert config_store.configured_log_ignore_patterns() == ["/json/*", "/health"]
    assert config_store.read_log_ignore_patterns() == ["/", "/events", "/json/*", "/health"]


def test_invalid_hand_edited_ignore_lines_reported(config_store, caplog):
    config_store.config_dir.mkdir(parents=True)
    (config_store.config_dir / "log_ignore.txt").write_text("/ok\n/bad*\n\n")

    with caplog.at_level(logging.WARNING, logger="jsonstub.data.config_store"):
        patterns = config_store.configured_log_ignore_patterns()

    assert patterns == ["/ok"]
    assert "Ignored 1 invalid line(s)" in caplog.text


def test_route_table_round_trip(config_store):
    mappings = [
        RouteMapping("GET", "/api/users", "users/all.json"),
        RouteMapping("POST", "/api/users", "users/created.json"),
    ]
    config_store.write_route_table(mappings)
    assert config_store.read_route_table() == mappings
    assert (config_store.config_dir / "routes.txt").read_text() == (
        "GET /api/users users/all.json\nPOST /api/users users/created.json\n"
    )


def test_malformed_route_lines_dropped_individually(config_store, caplog):
    config_store.config_dir.mkdir(parents=True)
    (config_store.config_dir / "routes.txt").write_text(
        "GET /api/a a.json\n"
        "# a comment\n"
        "\n"
        "PUT /api/b b.json\n"
        "GET /etc x.json\n"
        "GET /api/c\n"
        "POST /api/d ../x.json\n"
        "post /api/e json/e.json extra\n"
    )

    with caplog.at_level(logging.WARNING, logger="jsonstub.data.config_store"):
        mappings = config_store.read_route_table()

    assert mappings == [
        RouteMapping("GET", "/api/a", "a.json"),
        RouteMapping("POST", "/api/e", "json/e.json"),
    ]
    assert "Ignored 4 invalid line(s)" in caplog.text


def test_write_failure_raises_config_error(tmp_path):
    blocker = tmp_path / "config"
    blocker.write_text("not a directory")
    store = ConfigStore(blocker)

    with pytest.raises(StubError) as exc:
        store.set_ping_endpoint("/api/v2/ping")
    assert exc.value.code is ErrorCode.CONFIG_WRITE_FAILED
    assert exc.value.http_status == 500

    # Reads still fall back to defaults
    assert store.ping_endpoint() == DEFAULT_PING_ENDPOINT


def test_stored_json_prefixed_file_kept_as_written(config_store):
    mappings = [RouteMapping("GET", "/api/x", "json/a.json")]
    config_store.write_route_table(mappings)
    assert config_store.read_route_table() == mappings
