"""WebSocket message contract.

Inbound messages are a closed union tagged by ``type``; anything that does not
validate against one of the variants is rejected before it reaches the
session. Outbound notifications are built as models and serialized with
``model_dump(mode="json")`` by the gateway.
"""
from datetime import datetime
from typing import Annotated, Dict, List, Literal, Optional, Union
import re

from pydantic import BaseModel, Field, TypeAdapter, field_validator


def sanitize_text(text: str) -> str:
    """Strip HTML tags and control characters (keep newlines, tabs)."""
    text = re.sub(r'<[^>]+>', '', text)
    return re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)


# ---------------------------------------------------------------------------
# Inbound (client -> server)
# ---------------------------------------------------------------------------

class Join(BaseModel):
    type: Literal["JOIN"]
    player_name: str

    @field_validator('player_name')
    @classmethod
    def clean_name(cls, v: str) -> str:
        return sanitize_text(v).strip()


class StartRound(BaseModel):
    type: Literal["START_ROUND"]
    prompt: str
    answer: str

    @field_validator('prompt')
    @classmethod
    def clean_prompt(cls, v: str) -> str:
        return sanitize_text(v).strip()

    # Guesses are compared raw, so the answer is only trimmed.
    @field_validator('answer')
    @classmethod
    def trim_answer(cls, v: str) -> str:
        return v.strip()


class SubmitAnswer(BaseModel):
    type: Literal["SUBMIT_ANSWER"]
    player_name: Optional[str] = None
    guess: str


class SendChat(BaseModel):
    type: Literal["SEND_CHAT"]
    player_name: Optional[str] = None
    text: str

    @field_validator('text')
    @classmethod
    def clean_text(cls, v: str) -> str:
        return sanitize_text(v).strip()


class Leave(BaseModel):
    type: Literal["LEAVE"]


InboundMessage = Annotated[
    Union[Join, StartRound, SubmitAnswer, SendChat, Leave],
    Field(discriminator="type"),
]

inbound_adapter = TypeAdapter(InboundMessage)


def parse_inbound(data: str):
    """Parse and validate a raw JSON frame. Raises pydantic.ValidationError."""
    return inbound_adapter.validate_json(data)


# ---------------------------------------------------------------------------
# Outbound (server -> clients)
# ---------------------------------------------------------------------------

class RoomState(BaseModel):
    type: Literal["ROOM_STATE"] = "ROOM_STATE"
    players: List[str]
    scores: Dict[str, int]
    master: Optional[str]
    round: int
    state: str
    seconds_remaining: Optional[int] = None


class RoundStarted(BaseModel):
    type: Literal["ROUND_STARTED"] = "ROUND_STARTED"
    prompt: str
    seconds_remaining: int
    round: int
    master: str


class Tick(BaseModel):
    type: Literal["TICK"] = "TICK"
    seconds_remaining: int


class WrongGuess(BaseModel):
    type: Literal["WRONG_GUESS"] = "WRONG_GUESS"
    attempts_remaining: int
    message: str


class AttemptsExhausted(BaseModel):
    type: Literal["ATTEMPTS_EXHAUSTED"] = "ATTEMPTS_EXHAUSTED"
    message: str


class RoundEnded(BaseModel):
    type: Literal["ROUND_ENDED"] = "ROUND_ENDED"
    winner: Optional[str]
    canonical_answer: str
    scores: Dict[str, int]
    new_master: Optional[str]
    round: int
    was_master_winner: bool
    time_expired: bool


class ChatMessage(BaseModel):
    type: Literal["CHAT_MESSAGE"] = "CHAT_MESSAGE"
    author: str
    text: str
    timestamp: datetime


class ChatHistory(BaseModel):
    type: Literal["CHAT_HISTORY"] = "CHAT_HISTORY"
    messages: List[ChatMessage]


class ActionRejected(BaseModel):
    type: Literal["ACTION_REJECTED"] = "ACTION_REJECTED"
    code: str
    message: str


OutboundMessage = Union[
    RoomState, RoundStarted, Tick, WrongGuess, AttemptsExhausted,
    RoundEnded, ChatMessage, ChatHistory, ActionRejected,
]
