"""
Server-Sent Events endpoint
"""
from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from buzzhub import state
from buzzhub.core import quiz as quiz_core


router = APIRouter(tags=["events"])

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/events")
async def events(request: Request):
    """
    Push stream of quiz_state, buzz, chat and ping events

    Every client receives the current quiz_state right after connecting.
    """
    client = state.BROADCASTER.connect()
    stream = state.BROADCASTER.stream(
        client,
        initial_state=lambda: quiz_core.public_state().to_wire(),
        ping_interval=state.CONFIG.ping_interval,
        is_disconnected=request.is_disconnected,
    )
    return StreamingResponse(stream, media_type="text/event-stream", headers=SSE_HEADERS)
