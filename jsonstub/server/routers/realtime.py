from __future__ import annotations

import logging
from typing import AsyncIterator, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sse_starlette.sse import EventSourceResponse

from jsonstub.events.log_hub import LogHub, SubscriberLagged
from jsonstub.server.state import ApplicationState, get_state

router = APIRouter(tags=["events"])

logger = logging.getLogger(__name__)


async def log_event_generator(hub: LogHub) -> AsyncIterator[Dict[str, str]]:
    """
    One SSE message per published log line.

    Only lines published after the client connects are sent; the dashboard
    renders the history snapshot itself. Lines lost to lag are skipped.
    """
    sub = hub.subscribe()
    try:
        while True:
            try:
                line = await sub.get()
            except SubscriberLagged as e:
                logger.debug(f"[SSE] {e}")
                continue
            yield {"data": line}
    finally:
        sub.close()


@router.get("/events")
async def sse_logs(state: ApplicationState = Depends(get_state)):
    """Server-Sent Events stream of the live request log."""
    return EventSourceResponse(log_event_generator(state.log_hub))


class LogHubStats(BaseModel):
    lines_stored: int
    history_size: int
    active_subscribers: int
    subscriber_buffer: int


@router.get("/events/stats", response_model=LogHubStats)
async def events_stats(state: ApplicationState = Depends(get_state)):
    """Diagnostic stats about the log hub."""
    return state.log_hub.stats()
