from fastapi import WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ValidationError
from typing import Dict, List, Optional
import time
import logging

import config
from errors import GameError
from messages import (
    ActionRejected, Join, Leave, SendChat, StartRound, SubmitAnswer, parse_inbound,
    sanitize_text,
)
from session import SessionController

logger = logging.getLogger(__name__)


class SocketManager:
    """Delivers client intents to the session and fans its notifications out.

    Only the session mutates room state; this class keeps the connection
    bookkeeping (which socket belongs to which player) and nothing else.
    """

    def __init__(self):
        self.connections: Dict[str, WebSocket] = {}  # client_id -> ws
        self.player_names: Dict[str, str] = {}  # client_id -> joined player name
        # WS rate limiting: client_id -> list of timestamps
        self.msg_timestamps: Dict[str, list] = {}
        self.allowed_origins: List[str] = []
        self.session = SessionController(notifier=self)

    def reset(self, **session_options):
        """Drop all connections and start a fresh session."""
        self.connections.clear()
        self.player_names.clear()
        self.msg_timestamps.clear()
        self.session = SessionController(notifier=self, **session_options)

    def _connection_for(self, player_name: str) -> Optional[WebSocket]:
        for client_id, name in self.player_names.items():
            if name == player_name:
                return self.connections.get(client_id)
        return None

    # --- Notifier ---------------------------------------------------------

    async def broadcast(self, message: BaseModel):
        data = message.model_dump(mode="json")
        disconnected = []
        for client_id, ws in list(self.connections.items()):
            try:
                await ws.send_json(data)
            except Exception:
                disconnected.append(client_id)
        # The receive loop of a dead socket reports the disconnect itself.
        for client_id in disconnected:
            self.connections.pop(client_id, None)

    async def send(self, player_name: str, message: BaseModel):
        ws = self._connection_for(player_name)
        if ws is None:
            return
        try:
            await ws.send_json(message.model_dump(mode="json"))
        except Exception:
            logger.warning("Could not deliver %s to '%s'", message.type, player_name)

    async def _reject(self, websocket: WebSocket, code: str, message: str):
        await websocket.send_json(ActionRejected(code=code, message=message).model_dump(mode="json"))

    # --- Connection lifecycle ---------------------------------------------

    async def connect(self, websocket: WebSocket, client_id: str):
        # Validate WebSocket origin
        origin = websocket.headers.get("origin", "")
        if self.allowed_origins and origin not in self.allowed_origins:
            logger.warning("Rejected WebSocket from unauthorized origin: %s", origin)
            await websocket.close(code=1008)
            return

        await websocket.accept()
        if client_id in self.connections:
            await self._reject(websocket, "CLIENT_ID_IN_USE", "Client id already connected")
            await websocket.close(code=1008)
            return

        self.connections[client_id] = websocket
        await websocket.send_json(self.session.room_state().model_dump(mode="json"))

        try:
            while True:
                data = await websocket.receive_text()

                # Enforce message size limit
                if len(data) > config.MAX_WS_MESSAGE_SIZE:
                    await self._reject(websocket, "MESSAGE_TOO_LARGE", "Message too large")
                    continue

                # Per-client rate limiting
                now = time.time()
                timestamps = self.msg_timestamps.setdefault(client_id, [])
                timestamps[:] = [t for t in timestamps if now - t < 1.0]
                if len(timestamps) >= config.WS_RATE_LIMIT_PER_SEC:
                    await self._reject(websocket, "RATE_LIMITED", "Too many messages")
                    continue
                timestamps.append(now)

                try:
                    message = parse_inbound(data)
                except ValidationError:
                    logger.warning("Malformed message from client %s: %s", client_id, data[:100])
                    await self._reject(websocket, "INVALID_MESSAGE", "Invalid message format")
                    continue

                try:
                    await self.handle_message(client_id, websocket, message)
                except GameError as e:
                    logger.info("Rejected %s from client %s: %s", message.type, client_id, e.code)
                    await self._reject(websocket, e.code, e.message)
                except Exception:
                    logger.exception("Error handling %s from client %s", message.type, client_id)
                    await self._reject(websocket, "INTERNAL_ERROR", "Something went wrong")
        except WebSocketDisconnect:
            logger.info("Client %s disconnected", client_id)
        except Exception:
            logger.exception("WebSocket error for client %s", client_id)
        finally:
            self.connections.pop(client_id, None)
            self.msg_timestamps.pop(client_id, None)
            player_name = self.player_names.pop(client_id, None)
            if player_name:
                try:
                    await self.session.disconnect(player_name)
                except Exception:
                    logger.exception("Error removing '%s' after disconnect", player_name)

    @staticmethod
    def _is_self(claimed: Optional[str], player_name: str) -> bool:
        """Payload names are cleaned the same way JOIN cleans them."""
        return not claimed or sanitize_text(claimed).strip() == player_name

    async def handle_message(self, client_id: str, websocket: WebSocket, message):
        player_name = self.player_names.get(client_id)

        if isinstance(message, Join):
            if player_name:
                await self._reject(websocket, "ALREADY_JOINED", f"Already joined as '{player_name}'")
                return
            player = await self.session.join(message.player_name)
            self.player_names[client_id] = player.name
            await websocket.send_json(self.session.chat_history().model_dump(mode="json"))
            return

        if not player_name:
            await self._reject(websocket, "NOT_JOINED", "Join the game first")
            return

        if isinstance(message, StartRound):
            await self.session.start_round(player_name, message.prompt, message.answer)

        elif isinstance(message, SubmitAnswer):
            if not self._is_self(message.player_name, player_name):
                await self._reject(websocket, "PLAYER_MISMATCH", "You can only answer for yourself")
                return
            await self.session.submit_answer(player_name, message.guess)

        elif isinstance(message, SendChat):
            if not self._is_self(message.player_name, player_name):
                await self._reject(websocket, "PLAYER_MISMATCH", "You can only chat as yourself")
                return
            await self.session.send_chat(player_name, message.text)

        elif isinstance(message, Leave):
            del self.player_names[client_id]
            await self.session.leave(player_name)


socket_manager = SocketManager()
