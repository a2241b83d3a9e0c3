"""
Data models for the quiz/buzzer server
"""
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Dict, Optional, Set, Literal


class WireModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class BuzzEntry(WireModel):
    """One press of the buzzer"""
    name: str
    ts: int  # epoch ms


class AnswerEntry(WireModel):
    """One multiple-choice answer"""
    choice: int  # 0..3
    ts: int


class QuizQuestion(WireModel):
    """Question currently loaded into the round"""
    text: str
    options: List[str]
    correct: Optional[int] = None


class AutoSettings(WireModel):
    """Auto-advance settings"""
    enabled: bool = False
    between_ms: int = 5000          # pause between close and next open
    choice_duration_ms: int = 15000  # answer window in choice mode


class PlayState(WireModel):
    """Playlist cursor"""
    order: List[str] = []
    idx: int = -1


class QuizRound(WireModel):
    """Server-side state of the running round"""
    mode: Literal["buzzer", "choice"] = "buzzer"
    is_open: bool = False
    # buzzer
    first: Optional[BuzzEntry] = None
    order: List[BuzzEntry] = []
    pressed_by: Set[str] = set()
    # choice
    question: Optional[QuizQuestion] = None
    answers: Dict[str, AnswerEntry] = {}
    # timers / auto
    deadline_ts: Optional[int] = None
    auto: AutoSettings = Field(default_factory=AutoSettings)
    play: PlayState = Field(default_factory=PlayState)


class PublicQuizState(WireModel):
    """Round state as pushed to every client"""
    mode: str
    is_open: bool
    first: Optional[BuzzEntry] = None
    order: List[BuzzEntry] = []
    question: Optional[QuizQuestion] = None
    counts: List[int] = [0, 0, 0, 0]
    deadline_ts: Optional[int] = None
    auto: AutoSettings


class Question(WireModel):
    """Stored question record"""
    id: str
    text: str
    options: List[str]
    correct: Optional[int] = None
    created_at: int = 0  # hand-written records may omit timestamps
    updated_at: int = 0


class ChatMessage(WireModel):
    name: str
    message: str
    ts: int


class AutoDefaults(BaseModel):
    """Initial auto-advance settings"""
    enabled: bool = False
    between_ms: int = 5000
    choice_duration_ms: int = 15000


class ServerConfig(BaseModel):
    """Server configuration (config/server.yaml)"""
    host: str = "0.0.0.0"
    port: int = 3000
    data_dir: str = "data"
    static_dirs: List[str] = ["web/dist", "public"]
    ping_interval: float = 30.0     # seconds of silence before an SSE ping
    client_queue_size: int = 100    # pending events per SSE client
    max_body_bytes: int = 1_000_000
    log_level: str = "INFO"
    show_qr: bool = True
    auto: AutoDefaults = Field(default_factory=AutoDefaults)

    @property
    def questions_file(self) -> str:
        return str(Path(self.data_dir) / "questions.json")
