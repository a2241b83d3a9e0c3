"""Chat endpoint"""
from fastapi import APIRouter, HTTPException, Request

from buzzhub import state
from buzzhub.models import ChatMessage
from buzzhub.utils import clean_text, now_ms, read_json


MESSAGE_MAX_LEN = 500

router = APIRouter(tags=["chat"])


@router.post("/chat")
async def post_chat(request: Request):
    body = await read_json(request, state.CONFIG.max_body_bytes)
    name = clean_text(body.get("name") or "anon", 24)
    message = str(body.get("message") or "")[:MESSAGE_MAX_LEN]
    if not message.strip():
        raise HTTPException(status_code=400, detail="empty_message")
    payload = ChatMessage(name=name, message=message, ts=now_ms())
    state.BROADCASTER.publish("chat", payload.to_wire())
    return {"ok": True}
