"""Realtime event stream (SSE)."""

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from ..realtime import sse_event_stream


router = APIRouter(tags=["events"])


@router.get("/events/stream")
async def stream_events() -> StreamingResponse:
    """Follow minted/burned events as Server-Sent Events."""
    return StreamingResponse(
        sse_event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
