"""
Router initialization module.

Exports all routers for the jsonstub server.
"""
from jsonstub.server.routers import config, content, realtime, stub_api

__all__ = [
    "config",
    "content",
    "realtime",
    "stub_api",
]
