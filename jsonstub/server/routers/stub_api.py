from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends

from jsonstub.data.route_table import Resolution, ResolutionKind
from jsonstub.errors import ErrorCode, StubError
from jsonstub.server.responses import json_bytes
from jsonstub.server.state import ApplicationState, get_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["stub"])


async def _respond(state: ApplicationState, method: str, api_path: str):
    resolution: Resolution = await asyncio.to_thread(state.routes.resolve, method, api_path)

    if resolution.kind is ResolutionKind.NOT_FOUND:
        raise StubError(
            ErrorCode.ROUTE_NOT_FOUND,
            "No mapping for this endpoint",
            details={"method": method, "path": api_path},
        )

    if resolution.fallback is not None:
        # ping / refresh: the override file is optional
        body = await state.content.read_or_fallback(resolution.file, resolution.fallback)
    else:
        body = await state.content.read(resolution.file)

    logger.debug(f"[Stub] {method} {api_path} -> {resolution.kind.value} {resolution.file}")
    return json_bytes(body)


@router.get("/{path:path}")
async def api_get(path: str, state: ApplicationState = Depends(get_state)):
    """Ping endpoint first, then GET mappings."""
    return await _respond(state, "GET", f"/api/{path}")


@router.post("/{path:path}")
async def api_post(path: str, state: ApplicationState = Depends(get_state)):
    """Refresh endpoint first, then POST mappings. The request body is ignored."""
    return await _respond(state, "POST", f"/api/{path}")
