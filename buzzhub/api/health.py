"""
Health check and system status endpoints
"""
from fastapi import APIRouter

from buzzhub import state
from buzzhub.config import VERSION
from buzzhub.core import question_store


router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "ok": True,
        "status": "ok",
        "version": VERSION,
        "clients": len(state.BROADCASTER),
        "questions": len(question_store.load_questions(state.CONFIG.questions_file)),
    }
