"""
Round control endpoints (master) and participant actions (users)
"""
from fastapi import APIRouter, HTTPException, Request
import logging

from buzzhub import state
from buzzhub.core import quiz as quiz_core
from buzzhub.utils import parse_ms, read_json


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quiz", tags=["quiz"])


async def _body(request: Request, optional: bool = False) -> dict:
    return await read_json(request, state.CONFIG.max_body_bytes, optional=optional)


@router.get("/state")
async def get_state():
    """Current public round state"""
    return quiz_core.public_state().to_wire()


@router.post("/config")
async def configure(request: Request):
    """
    Master: load an ad-hoc question and switch to choice mode

    Request:
        {"text": "...", "options": ["A", "B", "C", "D"], "correct": 1}
    """
    body = await _body(request)
    try:
        quiz_core.configure_question(body.get("text"), body.get("options"), body.get("correct"))
    except quiz_core.InvalidConfigError:
        raise HTTPException(status_code=400, detail="invalid_config")
    return {"ok": True}


@router.post("/open")
async def open_round(request: Request):
    """
    Master: open the answer window

    Request (optional):
        {"durationMs": 20000}
    """
    body = await _body(request, optional=True)
    try:
        duration_ms = parse_ms(body.get("durationMs") or 0)
    except (TypeError, ValueError):
        duration_ms = 0
    quiz_core.open_round(duration_ms if duration_ms > 0 else None)
    return {"ok": True}


@router.post("/close")
async def close_round():
    """Master: close the answer window now"""
    quiz_core.close_round()
    return {"ok": True}


@router.post("/reset")
async def reset_round():
    """Master: clear presses and answers"""
    quiz_core.reset_round()
    return {"ok": True}


@router.post("/auto")
async def set_auto(request: Request):
    """
    Master: configure auto-advance

    Request:
        {"enabled": true, "betweenMs": 5000, "choiceDurationMs": 15000}
    """
    body = await _body(request)
    try:
        auto = quiz_core.set_auto(
            body.get("enabled"),
            between_ms=body.get("betweenMs"),
            choice_duration_ms=body.get("choiceDurationMs"),
        )
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="invalid_auto")
    return {"ok": True, "auto": auto.to_wire()}


@router.post("/buzz")
async def buzz(request: Request):
    """
    User: press the buzzer

    Request:
        {"name": "taro"}

    Response:
        {"ok": true} | {"ok": false, "reason": "closed" | "duplicate"}
    """
    body = await _body(request)
    return quiz_core.buzz(body.get("name"))


@router.post("/answer")
async def answer(request: Request):
    """
    User: answer the current multiple-choice question

    Request:
        {"name": "taro", "choice": 2}

    Response:
        {"ok": true} | {"ok": false, "reason": "not_choice" | "closed" | "duplicate"}
    """
    body = await _body(request)
    try:
        return quiz_core.answer(body.get("name"), body.get("choice"))
    except quiz_core.InvalidChoiceError:
        raise HTTPException(status_code=400, detail="invalid_choice")


@router.post("/playlist")
async def set_playlist(request: Request):
    """
    Master: set the question order for /quiz/next and auto-advance

    Request:
        {"ids": ["..."], "shuffle": true}   # ids optional, default all
    """
    body = await _body(request)
    count = quiz_core.set_playlist(body.get("ids"), shuffle=bool(body.get("shuffle")))
    return {"ok": True, "count": count}


@router.post("/next")
async def next_question():
    """Master: load the next playlist question"""
    if not quiz_core.next_question():
        raise HTTPException(status_code=404, detail="no_question")
    quiz_core.broadcast_state()
    return {"ok": True, "question": quiz_core.quiz.question.to_wire()}
