"""Room membership: join order, scores, attempt counters and master rotation."""
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

import config
from errors import InvalidName, NameTaken, RoomFull, PlayerNotFound


@dataclass
class Player:
    name: str
    score: int = 0
    attempts: int = 0


def next_in_rotation(names: List[str], current: Optional[str]) -> Optional[str]:
    """Return the name after ``current`` in join order, wrapping to the front.

    An unknown or missing ``current`` restarts the rotation at the head.
    """
    if not names:
        return None
    if current not in names:
        return names[0]
    return names[(names.index(current) + 1) % len(names)]


class Roster:
    def __init__(self, max_players: int = config.MAX_PLAYERS,
                 max_name_length: int = config.MAX_NAME_LENGTH):
        self.max_players = max_players
        self.max_name_length = max_name_length
        self._players: List[Player] = []  # join order drives master rotation

    def _find(self, name: str) -> Optional[Player]:
        for player in self._players:
            if player.name == name:
                return player
        return None

    def _get(self, name: str) -> Player:
        player = self._find(name)
        if player is None:
            raise PlayerNotFound(f"Player '{name}' not found")
        return player

    def join(self, name: str) -> Player:
        if not isinstance(name, str) or not name.strip():
            raise InvalidName()
        name = name.strip()
        if len(name) > self.max_name_length:
            raise InvalidName(f"Name must be 1-{self.max_name_length} characters")
        if len(self._players) >= self.max_players:
            raise RoomFull()
        if self._find(name) is not None:
            raise NameTaken()
        player = Player(name=name)
        self._players.append(player)
        return replace(player)

    def leave(self, name: str):
        self._players.remove(self._get(name))

    def next_master(self, current_master: Optional[str]) -> Optional[str]:
        return next_in_rotation(self.snapshot_players(), current_master)

    def award(self, name: str, points: int = config.POINTS_PER_WIN) -> int:
        player = self._get(name)
        player.score += points
        return player.score

    def attempts(self, name: str) -> int:
        return self._get(name).attempts

    def consume_attempt(self, name: str) -> int:
        """Use up one attempt and return how many have been used."""
        player = self._get(name)
        player.attempts += 1
        return player.attempts

    def exhaust_attempts(self, name: str, ceiling: int = config.MAX_ATTEMPTS):
        self._get(name).attempts = ceiling

    def reset_attempts(self):
        for player in self._players:
            player.attempts = 0

    def contains(self, name: str) -> bool:
        return self._find(name) is not None

    def size(self) -> int:
        return len(self._players)

    def get(self, name: str) -> Player:
        return replace(self._get(name))

    def snapshot_players(self) -> List[str]:
        return [p.name for p in self._players]

    def snapshot_scores(self) -> Dict[str, int]:
        return {p.name: p.score for p in self._players}

    def clear(self):
        self._players = []
