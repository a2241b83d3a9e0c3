"""
Question bank stored as a JSON file

File format:
    {
      "questions": [
        {"id": "...", "text": "...", "options": ["A", "B", "C", "D"],
         "correct": 2, "createdAt": 1700000000000, "updatedAt": 1700000000000}
      ]
    }
"""
import json
import logging
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from buzzhub.models import Question
from buzzhub.utils import clean_options, clean_text, new_id, now_ms, parse_option_index


TEXT_MAX_LEN = 2000
OPTION_MAX_LEN = 200
OPTION_COUNT = 4

logger = logging.getLogger(__name__)


class QuestionValidationError(ValueError):
    """Question payload is missing text or has bad options"""


def ensure_data_store(path: str) -> None:
    """Create the data directory and an empty question file if missing"""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if not file_path.exists():
        save_questions(path, [])
        logger.info(f"📁 Created empty question store at {path}")


def _read_records(path: str) -> list:
    """
    Raw records as stored on disk

    A missing, unreadable or malformed file gives an empty list.
    """
    file_path = Path(path)
    if not file_path.exists():
        return []

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"⚠️ Could not read question store {path}: {e}")
        return []

    records = data.get("questions") if isinstance(data, dict) else None
    if not isinstance(records, list):
        logger.warning(f"⚠️ Question store {path} has no 'questions' list")
        return []
    return records


def _write_records(path: str, records: list) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        json.dump({"questions": records}, f, indent=2, ensure_ascii=False)


def _record_id(record) -> Optional[str]:
    return record.get("id") if isinstance(record, dict) else None


def load_questions(path: str) -> List[Question]:
    """
    Load all questions

    Records that do not parse are left out of the result but stay in
    the file; writes carry them through untouched.
    """
    questions = []
    for record in _read_records(path):
        try:
            questions.append(Question.model_validate(record))
        except ValidationError as e:
            logger.warning(f"⚠️ Skipping malformed question record: {e.error_count()} error(s)")
    return questions


def save_questions(path: str, questions: List[Question]) -> None:
    """Write the whole question list back to disk"""
    _write_records(path, [q.to_wire() for q in questions])


def _validated_options(values) -> List[str]:
    options = clean_options(values, OPTION_MAX_LEN)
    if len(options) != OPTION_COUNT or not all(options):
        raise QuestionValidationError("exactly four non-empty options required")
    return options


def create_question(path: str, payload: dict) -> Question:
    """
    Validate a payload and append it as a new question

    Raises:
        QuestionValidationError: Empty text or bad options
    """
    text = clean_text(payload.get("text"), TEXT_MAX_LEN)
    if not text:
        raise QuestionValidationError("text required")
    options = _validated_options(payload.get("options"))

    now = now_ms()
    question = Question(
        id=new_id(),
        text=text,
        options=options,
        correct=parse_option_index(payload.get("correct")),
        created_at=now,
        updated_at=now,
    )
    records = _read_records(path)
    records.append(question.to_wire())
    _write_records(path, records)
    logger.info(f"📝 Created question {question.id}")
    return question


def update_question(path: str, question_id: str, payload: dict) -> Optional[Question]:
    """
    Partially update a question

    Only non-null keys in the payload change; `correct` changes only to
    a valid index.

    Returns:
        Updated question, or None if the id is unknown

    Raises:
        QuestionValidationError: Bad text or options, or the stored
            record itself does not parse
    """
    records = _read_records(path)
    for idx, record in enumerate(records):
        if _record_id(record) != question_id:
            continue

        try:
            question = Question.model_validate(record)
        except ValidationError:
            raise QuestionValidationError(f"stored question {question_id} is malformed")

        changes = {}
        if payload.get("text") is not None:
            text = clean_text(payload["text"], TEXT_MAX_LEN)
            if not text:
                raise QuestionValidationError("text required")
            changes["text"] = text
        if payload.get("options") is not None:
            changes["options"] = _validated_options(payload["options"])
        correct = parse_option_index(payload.get("correct"))
        if correct is not None:
            changes["correct"] = correct
        changes["updated_at"] = now_ms()

        updated = question.model_copy(update=changes)
        records[idx] = {**record, **updated.to_wire()}
        _write_records(path, records)
        logger.info(f"📝 Updated question {question_id}")
        return updated
    return None


def delete_question(path: str, question_id: str) -> bool:
    """Remove a question; True if one was removed"""
    records = _read_records(path)
    remaining = [r for r in records if _record_id(r) != question_id]
    _write_records(path, remaining)
    removed = len(remaining) != len(records)
    if removed:
        logger.info(f"🗑️ Deleted question {question_id}")
    return removed


def get_question(path: str, question_id: str) -> Optional[Question]:
    for question in load_questions(path):
        if question.id == question_id:
            return question
    return None
