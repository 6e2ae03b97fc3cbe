from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request

from jsonstub.base.config import StubConfig
from jsonstub.data.config_store import ConfigStore
from jsonstub.data.content_store import ContentStore
from jsonstub.data.content_watcher import ContentWatcher
from jsonstub.data.route_table import RouteTable
from jsonstub.events.log_hub import LogHub

logger = logging.getLogger(__name__)


class ApplicationState:
    """Everything a request handler needs, built once per app."""

    def __init__(self, config: StubConfig):
        self.config = config
        self.config_store = ConfigStore(config.storage.config_dir)
        self.routes = RouteTable(self.config_store)
        self.content = ContentStore(config.storage.content_dir)
        self.watcher = ContentWatcher(config.storage.content_dir, config.watch.poll_interval)
        self._log_hub: Optional[LogHub] = None

    def init_log_hub(self) -> LogHub:
        """Create the LogHub. Later calls return the same instance."""
        if self._log_hub is None:
            self._log_hub = LogHub(
                self.config_store,
                history_size=self.config.log_hub.history_size,
                subscriber_buffer=self.config.log_hub.subscriber_buffer,
            )
            logger.debug("[State] LogHub initialised")
        return self._log_hub

    @property
    def log_hub(self) -> LogHub:
        if self._log_hub is None:
            raise RuntimeError("LogHub used before init_log_hub()")
        return self._log_hub


def get_state(request: Request) -> ApplicationState:
    """FastAPI dependency: the state object attached by create_app()."""
    return request.app.state.stub
