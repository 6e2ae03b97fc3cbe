from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, Response
from pydantic import BaseModel

from jsonstub.errors import ErrorCode, StubError
from jsonstub.server.responses import NO_STORE, see_other
from jsonstub.server.state import ApplicationState, get_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/config", tags=["config"])

# Handlers are sync: FastAPI runs them in its threadpool, which keeps the
# config file I/O off the event loop.


def _require(value: Optional[str], field: str) -> str:
    if value is None:
        raise StubError(
            ErrorCode.FORM_FIELD_MISSING,
            f"Missing form field: {field}",
            details={"field": field},
        )
    return value


class RouteMappingOut(BaseModel):
    method: str
    path: str
    file: str


class ConfigSummary(BaseModel):
    refresh_endpoint: str
    ping_endpoint: str
    log_enabled: bool
    log_ignore: List[str]
    routes: List[RouteMappingOut]


@router.get("", response_model=ConfigSummary)
def get_config_summary(response: Response, state: ApplicationState = Depends(get_state)):
    """Current operator configuration, defaults applied."""
    store = state.config_store
    response.headers.update(NO_STORE)
    return ConfigSummary(
        refresh_endpoint=store.refresh_endpoint(),
        ping_endpoint=store.ping_endpoint(),
        log_enabled=store.log_enabled(),
        log_ignore=store.read_log_ignore_patterns(),
        routes=[RouteMappingOut(**m.to_dict()) for m in state.routes.all()],
    )


@router.post("/refresh-endpoint")
def set_refresh_endpoint(
    path: Optional[str] = Form(None),
    state: ApplicationState = Depends(get_state),
):
    state.config_store.set_refresh_endpoint(_require(path, "path"))
    return see_other("/json")


@router.post("/ping-endpoint")
def set_ping_endpoint(
    path: Optional[str] = Form(None),
    state: ApplicationState = Depends(get_state),
):
    state.config_store.set_ping_endpoint(_require(path, "path"))
    return see_other("/json")


@router.post("/route-mapping")
def set_route_mapping(
    method: Optional[str] = Form(None),
    path: Optional[str] = Form(None),
    file: Optional[str] = Form(None),
    state: ApplicationState = Depends(get_state),
):
    """Insert or replace the mapping for (method, path)."""
    state.routes.set(
        _require(method, "method"),
        _require(path, "path"),
        _require(file, "file"),
    )
    return see_other("/json")


@router.post("/route-mapping/delete")
def delete_route_mapping(
    method: Optional[str] = Form(None),
    path: Optional[str] = Form(None),
    state: ApplicationState = Depends(get_state),
):
    removed = state.routes.remove(_require(method, "method"), _require(path, "path"))
    if not removed:
        raise StubError(
            ErrorCode.ROUTE_NOT_FOUND,
            "No such mapping",
            details={"method": method, "path": path},
        )
    return see_other("/json")


@router.post("/log-ignore")
def set_log_ignore(
    patterns: Optional[str] = Form(None),
    state: ApplicationState = Depends(get_state),
):
    """Replace the ignore list; invalid lines are dropped, defaults stay implicit."""
    saved = state.config_store.write_log_ignore_patterns(_require(patterns, "patterns").splitlines())
    logger.info(f"[Config] {len(saved)} log ignore pattern(s) saved")
    return see_other("/json")


@router.post("/log-toggle")
def set_log_toggle(
    enabled: Optional[str] = Form(None),
    state: ApplicationState = Depends(get_state),
):
    state.config_store.set_log_enabled(_require(enabled, "enabled").strip().lower() == "on")
    return see_other("/json")
