import logging
from pathlib import Path

from jsonstub.base.config import LogConfig, StubConfig, get_config, set_config, setup_logging


def test_defaults():
    config = StubConfig()
    assert config.api_port == 3000
    assert config.api_host == "127.0.0.1"
    assert config.log_hub.history_size == 200
    assert config.storage.content_dir == config.storage.base_dir / "json"
    assert config.storage.config_dir == config.storage.base_dir / "config"


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("JSONSTUB_BASE_DIR", str(tmp_path))
    monkeypatch.setenv("JSONSTUB_CONFIG_DIR", str(tmp_path / "elsewhere"))
    monkeypatch.setenv("JSONSTUB_API_PORT", "4000")
    monkeypatch.setenv("JSONSTUB_WATCH", "false")
    monkeypatch.setenv("JSONSTUB_LOG_HISTORY", "50")
    monkeypatch.setenv("JSONSTUB_DEBUG", "yes")

    config = StubConfig.from_env()
    assert config.storage.content_dir == tmp_path / "json"
    assert config.storage.config_dir == Path(tmp_path / "elsewhere")
    assert config.api_port == 4000
    assert config.watch.enabled is False
    assert config.log_hub.history_size == 50
    assert config.debug is True


def test_set_config_replaces_global(stub_config):
    set_config(stub_config)
    assert get_config() is stub_config


def test_setup_logging_with_file(stub_config):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    config = StubConfig(
        storage=stub_config.storage,
        log=LogConfig(file_enabled=True),
        debug=True,
    )
    try:
        setup_logging(config)
        logging.getLogger("jsonstub.test").debug("hello file")
        for handler in root.handlers:
            handler.flush()
        assert root.level == logging.DEBUG
        log_file = config.storage.base_dir / "jsonstub.log"
        assert "hello file" in log_file.read_text()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
