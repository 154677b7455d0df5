"""Errors raised by room operations.

Every error carries a stable ``code`` for clients and a human ``message``.
They are only ever reported to the connection that caused them.
"""


class GameError(Exception):
    code = "GAME_ERROR"
    default_message = "Action not allowed"

    def __init__(self, message: str = ""):
        self.message = message or self.default_message
        super().__init__(self.message)


# --- Validation: bad input, session unchanged ---

class ValidationError(GameError):
    code = "VALIDATION_ERROR"


class InvalidName(ValidationError):
    code = "INVALID_NAME"
    default_message = "Invalid player name"


class NameTaken(ValidationError):
    code = "NAME_TAKEN"
    default_message = "Player name already taken"


class RoomFull(ValidationError):
    code = "ROOM_FULL"
    default_message = "Game is full"


class InvalidQuestion(ValidationError):
    code = "INVALID_QUESTION"
    default_message = "Question and answer must not be empty"


class InvalidMessage(ValidationError):
    code = "INVALID_MESSAGE"
    default_message = "Invalid message"


# --- Preconditions: action not allowed right now ---

class PreconditionError(GameError):
    code = "PRECONDITION_FAILED"


class NotGameMaster(PreconditionError):
    code = "NOT_GAME_MASTER"
    default_message = "Only the game master can start the game"


class InsufficientPlayers(PreconditionError):
    code = "INSUFFICIENT_PLAYERS"
    default_message = "Need at least 3 players to start the game"


class RoundAlreadyActive(PreconditionError):
    code = "ROUND_ALREADY_ACTIVE"
    default_message = "A round is already in progress"


class AlreadyRunning(PreconditionError):
    code = "ALREADY_RUNNING"
    default_message = "Timer is already running"


# --- Not found ---

class NotFoundError(GameError):
    code = "NOT_FOUND"


class PlayerNotFound(NotFoundError):
    code = "PLAYER_NOT_FOUND"
    default_message = "Player not found"
