"""
Question bank CRUD endpoints
"""
from fastapi import APIRouter, HTTPException, Request

from buzzhub import state
from buzzhub.core import question_store
from buzzhub.core import quiz as quiz_core
from buzzhub.utils import read_json


router = APIRouter(prefix="/questions", tags=["questions"])


def _store_path() -> str:
    path = state.CONFIG.questions_file
    question_store.ensure_data_store(path)
    return path


@router.get("")
async def list_questions():
    """List all stored questions"""
    questions = question_store.load_questions(_store_path())
    return {"questions": [q.to_wire() for q in questions]}


@router.post("")
async def create_question(request: Request):
    """
    Add a question

    Request:
        {"text": "...", "options": ["A", "B", "C", "D"], "correct": 0}
    """
    path = _store_path()
    body = await read_json(request, state.CONFIG.max_body_bytes)
    try:
        question = question_store.create_question(path, body)
    except question_store.QuestionValidationError:
        raise HTTPException(status_code=400, detail="invalid")
    return {"ok": True, "question": question.to_wire()}


@router.put("/{question_id}")
async def update_question(question_id: str, request: Request):
    """Update text, options and/or correct index of a question"""
    path = _store_path()
    body = await read_json(request, state.CONFIG.max_body_bytes)
    try:
        question = question_store.update_question(path, question_id, body)
    except question_store.QuestionValidationError:
        raise HTTPException(status_code=400, detail="invalid")
    if question is None:
        raise HTTPException(status_code=404, detail="not_found")
    return {"ok": True, "question": question.to_wire()}


@router.delete("/{question_id}")
async def delete_question(question_id: str):
    question_store.delete_question(_store_path(), question_id)
    return {"ok": True}


@router.post("/{question_id}/use")
async def use_question(question_id: str):
    """Load a stored question into the live round"""
    question = question_store.get_question(_store_path(), question_id)
    if question is None:
        raise HTTPException(status_code=404, detail="not_found")
    quiz_core.use_question(question)
    return {"ok": True}
