"""
Round state machine for the buzzer / multiple-choice quiz

One round is live at a time. Two modes:
- buzzer: participants press; the first press closes the round
- choice: participants pick one of four options until the deadline

Every mutation broadcasts the public state to all SSE clients. All
calls happen on the server's event loop, so requests and timer
callbacks never interleave.
"""
import asyncio
import logging
from typing import Dict, List, Optional

from buzzhub import state
from buzzhub.core import question_store
from buzzhub.models import (
    AnswerEntry, AutoSettings, BuzzEntry, PlayState, PublicQuizState,
    Question, QuizQuestion, QuizRound
)
from buzzhub.utils import (
    clean_name, clean_options, clean_text, now_ms, parse_ms, parse_option_index, shuffled
)


CONFIG_TEXT_MAX_LEN = 200
CONFIG_OPTION_MAX_LEN = 100
MIN_CHOICE_DURATION_MS = 1000

logger = logging.getLogger(__name__)


class InvalidConfigError(ValueError):
    """Question text or options are not usable"""


class InvalidChoiceError(ValueError):
    """Answer is not an option index 0..3"""


# Global storage: the live round
quiz: QuizRound = QuizRound()

# Pending timers: "close" (choice deadline) and "next" (auto-advance)
_timers: Dict[str, Optional[asyncio.TimerHandle]] = {"close": None, "next": None}


def _clear_timer(key: str) -> None:
    handle = _timers.get(key)
    if handle is not None:
        handle.cancel()
        _timers[key] = None


def _set_timer(key: str, delay_ms: int, callback) -> None:
    _clear_timer(key)
    loop = asyncio.get_running_loop()
    _timers[key] = loop.call_later(delay_ms / 1000.0, callback)


def has_timer(key: str) -> bool:
    handle = _timers.get(key)
    return handle is not None and not handle.cancelled()


def public_state() -> PublicQuizState:
    """Snapshot of the round as clients see it"""
    counts = [0, 0, 0, 0]
    for entry in quiz.answers.values():
        if 0 <= entry.choice < 4:
            counts[entry.choice] += 1
    return PublicQuizState(
        mode=quiz.mode,
        is_open=quiz.is_open,
        first=quiz.first,
        order=list(quiz.order),
        question=quiz.question,
        counts=counts,
        deadline_ts=quiz.deadline_ts,
        auto=quiz.auto.model_copy(),
    )


def broadcast_state() -> None:
    state.BROADCASTER.publish("quiz_state", public_state().to_wire())


def open_round(duration_ms: Optional[int] = None) -> None:
    """
    Open the answer window

    Buzzer mode clears the previous press order. Choice mode clears the
    previous answers and arms a close timer for duration_ms (falls back
    to the auto choice duration).
    """
    quiz.is_open = True
    if quiz.mode == "buzzer":
        quiz.first = None
        quiz.order = []
        quiz.pressed_by = set()
        quiz.deadline_ts = None
        _clear_timer("close")
    else:
        quiz.answers = {}
        ms = int(duration_ms or quiz.auto.choice_duration_ms or 0)
        if ms > 0:
            quiz.deadline_ts = now_ms() + ms
            _set_timer("close", ms, close_round)
        else:
            quiz.deadline_ts = None
    logger.info(f"🟢 Round opened ({quiz.mode}, deadline={quiz.deadline_ts})")
    broadcast_state()


def close_round() -> None:
    """Close the answer window; queues the next round when auto is on"""
    quiz.is_open = False
    quiz.deadline_ts = None
    _clear_timer("close")
    logger.info(f"🛑 Round closed ({quiz.mode})")
    broadcast_state()
    if quiz.auto.enabled:
        schedule_next_open()


def reset_round() -> None:
    """Clear presses and answers; mode, question, auto and playlist stay"""
    quiz.is_open = False
    quiz.first = None
    quiz.order = []
    quiz.pressed_by = set()
    quiz.answers = {}
    quiz.deadline_ts = None
    _clear_timer("close")
    logger.info("🔄 Round reset")
    broadcast_state()


def _install_question(question: QuizQuestion) -> None:
    quiz.mode = "choice"
    quiz.question = question
    quiz.answers = {}


def configure_question(text, options, correct=None) -> QuizQuestion:
    """
    Load an ad-hoc multiple-choice question and switch to choice mode

    Raises:
        InvalidConfigError: Empty text, or not exactly four non-empty options
    """
    clean = clean_text(text, CONFIG_TEXT_MAX_LEN)
    opts = clean_options(options, CONFIG_OPTION_MAX_LEN)
    if not clean or len(opts) != 4 or not all(opts):
        raise InvalidConfigError("invalid_config")
    question = QuizQuestion(text=clean, options=opts, correct=parse_option_index(correct))
    _install_question(question)
    logger.info(f"❓ Question configured: {clean[:40]}")
    broadcast_state()
    return question


def use_question(question: Question) -> None:
    """Load a stored question into the round"""
    _install_question(QuizQuestion(
        text=question.text,
        options=list(question.options),
        correct=question.correct,
    ))
    logger.info(f"❓ Using stored question {question.id}")
    broadcast_state()


def buzz(name) -> dict:
    """
    Register a buzzer press

    Returns:
        {"ok": True} or {"ok": False, "reason": "closed" | "duplicate"}
    """
    name = clean_name(name)
    if not quiz.is_open:
        return {"ok": False, "reason": "closed"}
    if name in quiz.pressed_by:
        return {"ok": False, "reason": "duplicate"}

    entry = BuzzEntry(name=name, ts=now_ms())
    quiz.pressed_by.add(name)
    quiz.order.append(entry)

    if quiz.first is None:
        quiz.first = entry
        logger.info(f"🔔 First buzz: {name}")
        if quiz.mode == "buzzer":
            quiz.is_open = False
            quiz.deadline_ts = None
            _clear_timer("close")
            if quiz.auto.enabled:
                schedule_next_open()

    state.BROADCASTER.publish("buzz", entry.to_wire())
    broadcast_state()
    return {"ok": True}


def _parse_choice(value) -> int:
    if isinstance(value, bool):
        raise InvalidChoiceError("invalid_choice")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidChoiceError("invalid_choice")
    if not number.is_integer() or not 0 <= number < 4:
        raise InvalidChoiceError("invalid_choice")
    return int(number)


def answer(name, choice) -> dict:
    """
    Record a multiple-choice answer

    Returns:
        {"ok": True} or {"ok": False, "reason": "not_choice" | "closed" | "duplicate"}

    Raises:
        InvalidChoiceError: choice is not an integer 0..3
    """
    name = clean_name(name)
    if quiz.mode != "choice" or quiz.question is None:
        return {"ok": False, "reason": "not_choice"}
    if not quiz.is_open:
        return {"ok": False, "reason": "closed"}
    index = _parse_choice(choice)
    if name in quiz.answers:
        return {"ok": False, "reason": "duplicate"}

    quiz.answers[name] = AnswerEntry(choice=index, ts=now_ms())
    broadcast_state()
    return {"ok": True}


def set_auto(enabled, between_ms=None, choice_duration_ms=None) -> AutoSettings:
    """
    Configure auto-advance

    Raises:
        ValueError: A duration is not a number
    """
    between = quiz.auto.between_ms if between_ms is None else max(0, parse_ms(between_ms))
    duration = (
        quiz.auto.choice_duration_ms
        if choice_duration_ms is None
        else max(MIN_CHOICE_DURATION_MS, parse_ms(choice_duration_ms))
    )
    quiz.auto = AutoSettings(enabled=bool(enabled), between_ms=between, choice_duration_ms=duration)
    _clear_timer("next")
    logger.info(f"⏱️ Auto {'on' if quiz.auto.enabled else 'off'} (between={between}ms, duration={duration}ms)")
    if quiz.auto.enabled and not quiz.is_open:
        schedule_next_open()
    broadcast_state()
    return quiz.auto


def schedule_next_open() -> None:
    """Open the next round after the auto pause"""
    wait = max(0, int(quiz.auto.between_ms or 0))
    _set_timer("next", wait, _auto_open)


def _auto_open() -> None:
    _timers["next"] = None
    if quiz.mode == "choice":
        next_question()
        open_round(quiz.auto.choice_duration_ms)
    else:
        open_round()


def set_playlist(ids=None, shuffle: bool = False) -> int:
    """
    Set the order in which next_question walks the bank

    Args:
        ids: Question ids; anything but a list means every stored question
        shuffle: Randomise the order

    Returns:
        Number of entries in the playlist
    """
    if isinstance(ids, list):
        order = [str(i) for i in ids]
    else:
        order = [q.id for q in question_store.load_questions(state.CONFIG.questions_file)]
    if shuffle:
        order = shuffled(order)
    quiz.play = PlayState(order=order, idx=-1)
    logger.info(f"📋 Playlist set ({len(order)} questions)")
    return len(order)


def next_question() -> bool:
    """
    Advance the playlist and load that question

    The cursor wraps to the start past the end. An id that no longer
    exists loads the first stored question instead.

    Returns:
        False if the bank is empty
    """
    questions: List[Question] = question_store.load_questions(state.CONFIG.questions_file)
    if not questions:
        return False
    if not quiz.play.order:
        quiz.play = PlayState(order=[q.id for q in questions], idx=-1)

    next_idx = quiz.play.idx + 1
    if next_idx >= len(quiz.play.order):
        next_idx = 0
    wanted = quiz.play.order[next_idx]
    found = next((q for q in questions if q.id == wanted), questions[0])
    quiz.play.idx = next_idx

    _install_question(QuizQuestion(text=found.text, options=list(found.options), correct=found.correct))
    logger.info(f"⏭️ Next question {found.id} ({next_idx + 1}/{len(quiz.play.order)})")
    return True


def reset_all(auto: Optional[AutoSettings] = None) -> None:
    """Drop all round state and timers (startup and tests)"""
    for key in list(_timers):
        _clear_timer(key)
    fresh = QuizRound(auto=auto or AutoSettings())
    for field in QuizRound.model_fields:
        setattr(quiz, field, getattr(fresh, field))
