"""
Pydantic models for conversation messages, worker payloads and WebSocket frames.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Sequence
from enum import Enum

from chat_advisor.state_machine import UIState


# ============================================================================
# Enums
# ============================================================================

class Role(str, Enum):
    """Conversation roles."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


# ============================================================================
# Conversation
# ============================================================================

class Message(BaseModel):
    """
    A single conversational turn.
    Frozen: a message never changes once it is in the transcript.
    """
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class RequestPayload(BaseModel):
    """
    Body sent to the completion worker.
    Directive first, then the transcript in insertion order.
    """
    model_config = ConfigDict(frozen=True)

    messages: tuple[Message, ...]

    @classmethod
    def build(cls, directive: Message, transcript: Sequence[Message]) -> "RequestPayload":
        """Prepend the directive to a transcript snapshot."""
        return cls(messages=(directive, *transcript))

    def to_body(self) -> dict:
        """Serialize to {"messages": [{"role", "content"}, ...]}."""
        return {
            "messages": [
                {"role": message.role.value, "content": message.content}
                for message in self.messages
            ]
        }


# ============================================================================
# Client → Server Messages
# ============================================================================

class UserMessageData(BaseModel):
    """User message data payload."""
    text: str = Field(
        ...,
        description="Raw text typed by the user"
    )


class UserMessage(BaseModel):
    """
    Sent when the user submits the chat form.
    """
    type: Literal["user_message"] = "user_message"
    data: UserMessageData


class PingMessage(BaseModel):
    """
    Heartbeat ping message.
    """
    type: Literal["ping"] = "ping"
    data: dict = Field(default_factory=dict)


# ============================================================================
# Server → Client Messages
# ============================================================================

class SessionReadyData(BaseModel):
    """Session ready data payload."""
    session_id: str = Field(
        ...,
        description="UUID of the session"
    )
    timestamp: int = Field(
        ...,
        description="Unix timestamp in milliseconds"
    )


class SessionReadyMessage(BaseModel):
    """
    Sent once the WebSocket is accepted.
    """
    type: Literal["session_ready"] = "session_ready"
    data: SessionReadyData


class DisplayMessageData(BaseModel):
    """Display message data payload."""
    text: str
    role: Role


class DisplayMessage(BaseModel):
    """
    Sent for every chat bubble the UI should append and scroll to.
    """
    type: Literal["display_message"] = "display_message"
    data: DisplayMessageData


class TypingIndicatorData(BaseModel):
    """Typing indicator data payload."""
    visible: bool


class TypingIndicatorMessage(BaseModel):
    """
    Sent to show or remove the placeholder typing bubble.
    """
    type: Literal["typing_indicator"] = "typing_indicator"
    data: TypingIndicatorData


class StateChangeData(BaseModel):
    """State change data payload."""
    from_state: UIState
    to_state: UIState
    timestamp: int = Field(
        ...,
        description="Unix timestamp in milliseconds"
    )


class StateChangeMessage(BaseModel):
    """
    Sent on every IDLE/PENDING transition so the UI can lock the form.
    """
    type: Literal["state_change"] = "state_change"
    data: StateChangeData


class PongMessage(BaseModel):
    """
    Heartbeat pong message.
    """
    type: Literal["pong"] = "pong"
    data: dict = Field(default_factory=dict)


class ErrorData(BaseModel):
    """Error data payload."""
    code: str = Field(
        ...,
        description="Error code"
    )
    message: str = Field(
        ...,
        description="Human-readable error message"
    )
    recoverable: bool = Field(
        ...,
        description="True if the session can continue"
    )
    timestamp: int = Field(
        ...,
        description="Unix timestamp in milliseconds"
    )


class ErrorMessage(BaseModel):
    """
    Sent when a client frame cannot be handled.
    """
    type: Literal["error"] = "error"
    data: ErrorData


# ============================================================================
# Union Types for Message Routing
# ============================================================================

# All possible client messages
ClientMessage = (
    UserMessage |
    PingMessage
)

# All possible server messages
ServerMessage = (
    SessionReadyMessage |
    DisplayMessage |
    TypingIndicatorMessage |
    StateChangeMessage |
    PongMessage |
    ErrorMessage
)
