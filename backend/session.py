"""The trivia room: membership, master rotation and the round lifecycle.

A round moves IDLE -> ACTIVE when the game master poses a question, and back
to IDLE when somebody guesses the answer or the countdown runs out. Every
operation runs under one session lock, and round resolution is guarded so a
correct guess and the final timer tick can never both resolve the same round.

Notifications go out through a notifier object providing two coroutines:
``broadcast(message)`` to every connected client and ``send(player_name,
message)`` to a single player.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
import asyncio
import logging

import config
from errors import (
    InsufficientPlayers, InvalidMessage, InvalidQuestion, NotGameMaster,
    PlayerNotFound, RoundAlreadyActive,
)
from messages import (
    AttemptsExhausted, ChatHistory, ChatMessage, RoomState, RoundEnded,
    RoundStarted, Tick, WrongGuess,
)
from question_holder import QuestionHolder
from roster import Player, Roster
from round_timer import RoundTimer

logger = logging.getLogger(__name__)


class RoundStatus(str, Enum):
    IDLE = "IDLE"
    ACTIVE = "ACTIVE"
    RESOLVED = "RESOLVED"


@dataclass
class Round:
    number: int = 1
    status: RoundStatus = RoundStatus.IDLE
    posed_by: Optional[str] = None  # master who asked this round's question
    winner: Optional[str] = None


@dataclass
class ChatEntry:
    author: str
    text: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_message(self) -> ChatMessage:
        return ChatMessage(author=self.author, text=self.text, timestamp=self.timestamp)


class SessionController:
    def __init__(self, notifier,
                 max_players: int = config.MAX_PLAYERS,
                 min_players: int = config.MIN_PLAYERS,
                 time_limit: int = config.TIME_LIMIT,
                 max_attempts: int = config.MAX_ATTEMPTS,
                 points_per_win: int = config.POINTS_PER_WIN,
                 tick_interval: float = config.TICK_INTERVAL):
        self.notifier = notifier
        self.min_players = min_players
        self.time_limit = time_limit
        self.max_attempts = max_attempts
        self.points_per_win = points_per_win
        self.lock = asyncio.Lock()
        self.roster = Roster(max_players)
        self.question = QuestionHolder()
        self.timer = RoundTimer(tick_interval)
        self.master: Optional[str] = None
        self.round = Round()
        self.chat_log: List[ChatEntry] = []

    # --- Snapshots -------------------------------------------------------

    def room_state(self) -> RoomState:
        active = self.round.status is RoundStatus.ACTIVE
        return RoomState(
            players=self.roster.snapshot_players(),
            scores=self.roster.snapshot_scores(),
            master=self.master,
            round=self.round.number,
            state=self.round.status.value,
            seconds_remaining=self.timer.remaining() if active else None,
        )

    def chat_history(self) -> ChatHistory:
        return ChatHistory(messages=[entry.to_message() for entry in self.chat_log])

    # --- Membership ------------------------------------------------------

    async def join(self, name: str) -> Player:
        async with self.lock:
            player = self.roster.join(name)
            if self.master is None:
                self.master = player.name
                logger.info("'%s' is now game master", player.name)
            if self.round.status is RoundStatus.ACTIVE:
                # Late joiners sit out the round in progress.
                self.roster.exhaust_attempts(player.name, self.max_attempts)
            logger.info("Player '%s' joined (%d/%d)", player.name,
                        self.roster.size(), self.roster.max_players)
            await self.notifier.broadcast(self.room_state())
            return player

    async def leave(self, name: str):
        async with self.lock:
            await self._remove_player(name)

    async def disconnect(self, name: str):
        """Connection loss. A player who is already gone is ignored."""
        async with self.lock:
            if not self.roster.contains(name):
                logger.debug("Disconnect for unknown player '%s' ignored", name)
                return
            await self._remove_player(name)

    async def _remove_player(self, name: str):
        if not self.roster.contains(name):
            raise PlayerNotFound(f"Player '{name}' not found")
        successor = self.roster.next_master(name) if name == self.master else self.master
        self.roster.leave(name)
        logger.info("Player '%s' left", name)

        if self.roster.size() == 0:
            self._reset()
        elif name == self.master:
            self.master = successor
            logger.info("Game master '%s' left, '%s' is now game master", name, successor)
        await self.notifier.broadcast(self.room_state())

    def _reset(self):
        self.timer.stop()
        self.question.clear()
        self.roster.clear()
        self.master = None
        self.round = Round()
        self.chat_log = []
        logger.info("Room is empty, session reset")

    # --- Rounds ----------------------------------------------------------

    async def start_round(self, requester: str, prompt: str, answer: str):
        async with self.lock:
            if not self.roster.contains(requester):
                raise PlayerNotFound(f"Player '{requester}' not found")
            if self.round.status is not RoundStatus.IDLE:
                raise RoundAlreadyActive()
            if requester != self.master:
                raise NotGameMaster()
            if self.roster.size() < self.min_players:
                raise InsufficientPlayers(f"Need at least {self.min_players} players to start the game")
            prompt = (prompt or "").strip()
            answer = (answer or "").strip()
            if not prompt or not answer:
                raise InvalidQuestion()
            if len(prompt) > config.MAX_PROMPT_LENGTH or len(answer) > config.MAX_ANSWER_LENGTH:
                raise InvalidQuestion(
                    f"Question must be 1-{config.MAX_PROMPT_LENGTH} characters "
                    f"and answer 1-{config.MAX_ANSWER_LENGTH} characters"
                )

            self.question.set(prompt, answer)
            self.roster.reset_attempts()
            self.round.status = RoundStatus.ACTIVE
            self.round.posed_by = requester
            self.round.winner = None

            number = self.round.number
            self.timer.stop()
            self.timer.start(self.time_limit, lambda remaining: self._on_tick(number, remaining))
            logger.info("Round %d started by '%s'", number, requester)

            await self.notifier.broadcast(RoundStarted(
                prompt=prompt,
                seconds_remaining=self.time_limit,
                round=number,
                master=requester,
            ))
            await self._post(config.SYSTEM_AUTHOR, f"Round {number} started! Question: {prompt}")

    async def submit_answer(self, player: str, guess: str):
        """Consume one attempt. Ignored outside an active round or past the attempt limit."""
        async with self.lock:
            if self.round.status is not RoundStatus.ACTIVE or not self.question.is_set():
                return
            if not self.roster.contains(player):
                return
            if self.roster.attempts(player) >= self.max_attempts:
                return

            used = self.roster.consume_attempt(player)
            if self.question.check(guess):
                await self._resolve_round(player)
                return

            attempts_left = self.max_attempts - used
            await self.notifier.send(player, WrongGuess(
                attempts_remaining=attempts_left,
                message=f"Incorrect! {attempts_left} attempts left.",
            ))
            if used >= self.max_attempts:
                await self.notifier.send(player, AttemptsExhausted(message="No more attempts left!"))

    async def _on_tick(self, round_number: int, remaining: int):
        async with self.lock:
            if self.round.status is not RoundStatus.ACTIVE or self.round.number != round_number:
                return
            await self.notifier.broadcast(Tick(seconds_remaining=remaining))
            if remaining <= 0:
                await self._resolve_round(None)

    async def _resolve_round(self, winner: Optional[str]):
        # Guard against double resolution (final tick + correct guess)
        if self.round.status is not RoundStatus.ACTIVE:
            return

        self.timer.stop()
        self.round.status = RoundStatus.RESOLVED
        self.round.winner = winner
        number = self.round.number
        posed_by = self.round.posed_by
        answer = self.question.display_answer or ""
        master_won = winner is not None and winner == posed_by

        if winner is not None and not master_won:
            self.roster.award(winner, self.points_per_win)
        # If the asking master left mid-round the role has already moved on
        # and is not rotated again: A poses, A leaves, B takes over and keeps it.
        if self.master == posed_by:
            self.master = self.roster.next_master(self.master)

        if master_won:
            text = f"Game master {winner} guessed correctly! The answer was: {answer}"
        elif winner is not None:
            text = f"{winner} won round {number}! The answer was: {answer}"
        else:
            text = f"Time's up for round {number}! The answer was: {answer}"
        await self._post(config.SYSTEM_AUTHOR, text)

        await self.notifier.broadcast(RoundEnded(
            winner=winner,
            canonical_answer=answer,
            scores=self.roster.snapshot_scores(),
            new_master=self.master,
            round=number,
            was_master_winner=master_won,
            time_expired=winner is None,
        ))

        self.question.clear()
        self.roster.reset_attempts()
        self.round = Round(number=number + 1)
        if winner is None:
            logger.info("Round %d timed out, '%s' is now game master", number, self.master)
        else:
            logger.info("Round %d won by '%s', '%s' is now game master", number, winner, self.master)
        await self.notifier.broadcast(self.room_state())

    # --- Chat ------------------------------------------------------------

    async def send_chat(self, player: str, text: str):
        async with self.lock:
            if not self.roster.contains(player):
                raise PlayerNotFound(f"Player '{player}' not found")
            text = (text or "").strip()
            if not text or len(text) > config.MAX_CHAT_LENGTH:
                raise InvalidMessage(f"Message must be 1-{config.MAX_CHAT_LENGTH} characters")
            await self._post(player, text)

    async def _post(self, author: str, text: str):
        entry = ChatEntry(author=author, text=text)
        self.chat_log.append(entry)
        await self.notifier.broadcast(entry.to_message())
