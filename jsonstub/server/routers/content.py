from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from starlette.datastructures import UploadFile

from jsonstub.base.path_guard import is_safe_segment, require_segment
from jsonstub.errors import ErrorCode, StubError
from jsonstub.server.pages import IndexView, render_folder, render_index
from jsonstub.server.responses import NO_STORE, json_bytes, see_other
from jsonstub.server.state import ApplicationState, get_state

logger = logging.getLogger(__name__)

router = APIRouter(tags=["content"])


def _html(body: str) -> HTMLResponse:
    return HTMLResponse(body, headers=NO_STORE)


def _index_view(state: ApplicationState) -> IndexView:
    store = state.config_store
    return IndexView(
        refresh_endpoint=store.refresh_endpoint(),
        ping_endpoint=store.ping_endpoint(),
        mappings=state.routes.all(),
        log_patterns=store.configured_log_ignore_patterns(),
        log_enabled=store.log_enabled(),
        log_lines=state.log_hub.snapshot(),
        files=state.content.list_files(),
        folders=state.content.list_folders(),
        history_size=state.config.log_hub.history_size,
    )


@router.get("/")
@router.get("/json")
@router.get("/json/")
async def index(state: ApplicationState = Depends(get_state)):
    """Main dashboard."""
    view = await asyncio.to_thread(_index_view, state)
    return _html(render_index(view))


# Folder management is registered before /json/{subdir} so the fixed paths win.

@router.post("/json/create")
def create_folder(
    name: Optional[str] = Form(None),
    state: ApplicationState = Depends(get_state),
):
    state.content.create_folder(name)
    return see_other("/json")


@router.post("/json/delete")
def delete_folder(
    name: Optional[str] = Form(None),
    state: ApplicationState = Depends(get_state),
):
    """Remove a folder and every route mapping pointing inside it."""
    name = require_segment(name)
    state.content.delete_folder(name)
    removed = state.routes.remove_under(name)
    if removed:
        logger.info(f"[Content] Folder {name} deleted, {removed} mapping(s) dropped with it")
    return see_other("/json")


@router.post("/json/rename")
def rename_folder(
    source: Optional[str] = Form(None, alias="from"),
    target: Optional[str] = Form(None, alias="to"),
    state: ApplicationState = Depends(get_state),
):
    state.content.rename_folder(source, target)
    return see_other("/json")


@router.get("/json/{subdir}")
async def folder_page(subdir: str, state: ApplicationState = Depends(get_state)):
    subdir = require_segment(subdir, "folder")
    files = await asyncio.to_thread(state.content.list_folder, subdir)
    return _html(render_folder(subdir, files))


@router.post("/json/{subdir}")
async def upload_files(subdir: str, request: Request, state: ApplicationState = Depends(get_state)):
    """
    Save every uploaded file in the multipart body into json/<subdir>.

    Parts without a file name or with an unsafe one are skipped; if nothing
    was saved the request is rejected.
    """
    subdir = require_segment(subdir, "folder")
    form = await request.form()
    saved = 0
    try:
        for _field, value in form.multi_items():
            if not isinstance(value, UploadFile) or not value.filename:
                continue
            if not is_safe_segment(value.filename):
                logger.warning(f"[Content] Skipping unsafe upload name: {value.filename!r}")
                continue
            data = await value.read()
            await asyncio.to_thread(state.content.save_file, subdir, value.filename, data)
            saved += 1
    finally:
        await form.close()

    if not saved:
        raise StubError(
            ErrorCode.UPLOAD_EMPTY,
            "No valid files in upload",
            details={"folder": subdir},
        )
    return see_other(f"/json/{subdir}")


@router.get("/json/{subdir}/{path:path}")
async def get_json(subdir: str, path: str, state: ApplicationState = Depends(get_state)):
    """Raw file bytes from json/<subdir>/<path>."""
    subdir = require_segment(subdir, "folder")
    body = await state.content.read(f"{subdir}/{path}")
    return json_bytes(body)
