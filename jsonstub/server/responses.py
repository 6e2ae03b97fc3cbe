"""Response helpers shared by the routers."""

from fastapi import Response
from fastapi.responses import RedirectResponse

NO_STORE = {"Cache-Control": "no-store"}


def json_bytes(body: bytes) -> Response:
    """Stored JSON is opaque: serve the bytes as-is, never cached."""
    return Response(content=body, media_type="application/json", headers=NO_STORE)


def see_other(url: str) -> RedirectResponse:
    # Form posts land back on a GET page
    return RedirectResponse(url=url, status_code=303)
