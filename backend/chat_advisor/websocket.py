"""
WebSocket connection manager and renderer binding.
Handles WebSocket lifecycle, per-session controllers and render signal delivery.
"""

import logging
import uuid
import time
from typing import Dict
from fastapi import WebSocket, WebSocketDisconnect

from chat_advisor.models import (
    Role,
    SessionReadyMessage, SessionReadyData,
    DisplayMessage, DisplayMessageData,
    TypingIndicatorMessage, TypingIndicatorData,
    StateChangeMessage, StateChangeData,
    ErrorMessage, ErrorData,
    PongMessage,
)
from chat_advisor.state_machine import UIState

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class ConnectionManager:
    """
    Manages active WebSocket connections and message routing.

    Responsibilities:
    - Track active connections (session_id → websocket)
    - Handle connection lifecycle (connect, disconnect, cleanup)
    - Send typed messages to specific sessions
    """

    def __init__(self):
        """Initialize connection manager."""
        # Active connections: session_id → WebSocket
        self.active_connections: Dict[str, WebSocket] = {}

        # Session metadata: session_id → metadata dict
        self.session_metadata: Dict[str, dict] = {}

        logger.info("ConnectionManager initialized")

    async def connect(self, websocket: WebSocket) -> str:
        """
        Accept new WebSocket connection and create session.

        Args:
            websocket: WebSocket connection

        Returns:
            session_id: UUID of created session
        """
        await websocket.accept()

        session_id = str(uuid.uuid4())
        self.active_connections[session_id] = websocket
        self.session_metadata[session_id] = {
            "connected_at": _now_ms(),
            "client_info": websocket.client,
            "total_messages": 0,
        }

        logger.info(
            f"WebSocket connected: session_id={session_id}, "
            f"client={websocket.client}, "
            f"total_connections={len(self.active_connections)}"
        )

        await self.send_session_ready(session_id)
        return session_id

    async def disconnect(self, session_id: str):
        """
        Handle WebSocket disconnection and cleanup.

        Args:
            session_id: Session ID to disconnect
        """
        if session_id not in self.active_connections:
            logger.warning(f"Attempted to disconnect non-existent session: {session_id}")
            return

        self.active_connections.pop(session_id, None)
        metadata = self.session_metadata.pop(session_id, {})

        if metadata:
            session_duration = _now_ms() - metadata.get("connected_at", 0)
            logger.info(
                f"WebSocket disconnected: session_id={session_id}, "
                f"duration_ms={session_duration}, "
                f"total_messages={metadata.get('total_messages', 0)}, "
                f"remaining_connections={len(self.active_connections)}"
            )

    async def send_message(self, session_id: str, message: dict) -> bool:
        """
        Send JSON message to specific session.

        Args:
            session_id: Target session ID
            message: Message dict to send

        Returns:
            True if sent successfully, False otherwise
        """
        if session_id not in self.active_connections:
            logger.warning(f"Attempted to send message to non-existent session: {session_id}")
            return False

        websocket = self.active_connections[session_id]

        try:
            await websocket.send_json(message)

            if session_id in self.session_metadata:
                self.session_metadata[session_id]["total_messages"] += 1

            logger.debug(f"Message sent to session {session_id}: type={message.get('type', 'unknown')}")
            return True

        except WebSocketDisconnect:
            logger.warning(f"WebSocket disconnected while sending to session: {session_id}")
            await self.disconnect(session_id)
            return False
        except Exception as e:
            logger.error(f"Error sending message to session {session_id}: {e}", exc_info=True)
            return False

    async def send_session_ready(self, session_id: str):
        """Send session_ready message to newly connected client."""
        message = SessionReadyMessage(
            data=SessionReadyData(session_id=session_id, timestamp=_now_ms())
        )
        await self.send_message(session_id, message.model_dump(mode="json"))

    async def send_display_message(self, session_id: str, text: str, role: Role):
        """Send a chat bubble to the client."""
        message = DisplayMessage(data=DisplayMessageData(text=text, role=role))
        await self.send_message(session_id, message.model_dump(mode="json"))

    async def send_typing_indicator(self, session_id: str, visible: bool):
        """Show or hide the typing bubble on the client."""
        message = TypingIndicatorMessage(data=TypingIndicatorData(visible=visible))
        await self.send_message(session_id, message.model_dump(mode="json"))

    async def send_state_change(
        self,
        session_id: str,
        from_state: UIState,
        to_state: UIState
    ):
        """
        Send state_change message to client.

        Args:
            session_id: Session ID
            from_state: Previous state
            to_state: New state
        """
        message = StateChangeMessage(
            data=StateChangeData(
                from_state=from_state,
                to_state=to_state,
                timestamp=_now_ms()
            )
        )
        await self.send_message(session_id, message.model_dump(mode="json"))

    async def send_error(
        self,
        session_id: str,
        code: str,
        message_text: str,
        recoverable: bool = True
    ):
        """
        Send error message to client.

        Args:
            session_id: Session ID
            code: Error code
            message_text: Error message
            recoverable: Whether the session can continue
        """
        message = ErrorMessage(
            data=ErrorData(
                code=code,
                message=message_text,
                recoverable=recoverable,
                timestamp=_now_ms()
            )
        )
        await self.send_message(session_id, message.model_dump(mode="json"))

    async def send_pong(self, session_id: str):
        """Answer a client heartbeat."""
        await self.send_message(session_id, PongMessage().model_dump(mode="json"))


class WebSocketRenderer:
    """
    Renderer that relays controller signals to one WebSocket session.
    """

    def __init__(self, manager: ConnectionManager, session_id: str):
        self.manager = manager
        self.session_id = session_id

    async def display_message(self, text: str, role: Role) -> None:
        await self.manager.send_display_message(self.session_id, text, role)

    async def show_pending_indicator(self) -> None:
        await self.manager.send_typing_indicator(self.session_id, True)

    async def clear_pending_indicator(self) -> None:
        await self.manager.send_typing_indicator(self.session_id, False)

    async def on_state_change(self, from_state: UIState, to_state: UIState) -> None:
        await self.manager.send_state_change(self.session_id, from_state, to_state)


# Global connection manager instance
connection_manager = ConnectionManager()
