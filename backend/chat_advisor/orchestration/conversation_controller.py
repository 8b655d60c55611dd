"""
Conversation Controller - drives one submit-to-settle cycle per user action.

Coordinates:
- Transcript appends (user turn, then assistant turn on success)
- IDLE/PENDING transitions through the state machine
- The single outbound worker call
- Render signals (user echo, typing indicator, reply or failure notice)

Only extracted assistant replies are stored; failure notices are shown but
never become part of the history sent with later requests.
"""

import logging
from enum import Enum
from typing import Any, Optional, Protocol

from chat_advisor.config import settings
from chat_advisor.errors import (
    ChatAdvisorError,
    ConfigurationError,
    ContentExtractionError,
    TransportError,
)
from chat_advisor.llm.completion_client import CompletionClient
from chat_advisor.llm.extraction import extract_reply
from chat_advisor.models import Message, RequestPayload, Role
from chat_advisor.orchestration.renderer import Renderer
from chat_advisor.orchestration.transcript import Transcript
from chat_advisor.state_machine import StateMachine, UIState

logger = logging.getLogger(__name__)


class SubmitOutcome(str, Enum):
    """How a submit call settled."""
    IGNORED_EMPTY = "ignored_empty"
    REJECTED_BUSY = "rejected_busy"
    REPLIED = "replied"
    NO_CONTENT = "no_content"
    TRANSPORT_ERROR = "transport_error"
    CONFIGURATION_ERROR = "configuration_error"


def _override(value: Optional[str], default: str) -> str:
    """Explicit arguments win, including empty strings; None means use settings."""
    return value if value is not None else default


class CompletionBackend(Protocol):
    async def complete(self, payload: RequestPayload) -> Any:
        ...


class ConversationController:
    """
    Owns the transcript and UI state for one chat session.

    State Flow:
    IDLE --submit(non-empty)--> PENDING --settle--> IDLE

    A submit while PENDING is rejected without touching the transcript, so
    replies can never be recorded out of order with their user turns.
    """

    def __init__(
        self,
        renderer: Renderer,
        client: Optional[CompletionBackend] = None,
        directive: Optional[str] = None,
        greeting_message: Optional[str] = None,
        apology_message: Optional[str] = None,
        transport_error_message: Optional[str] = None,
        configuration_error_message: Optional[str] = None,
    ):
        self.renderer = renderer
        self.client = client or CompletionClient(
            settings.worker_endpoint,
            placeholder_token=settings.worker_url_placeholder,
        )

        self.directive = Message(
            role=Role.SYSTEM,
            content=_override(directive, settings.system_directive),
        )
        self.greeting_message = _override(greeting_message, settings.greeting_message)
        self.apology_message = _override(apology_message, settings.apology_message)
        self.transport_error_message = _override(
            transport_error_message, settings.transport_error_message
        )
        self.configuration_error_message = _override(
            configuration_error_message, settings.configuration_error_message
        )

        self.transcript = Transcript()
        self.state_machine = StateMachine()

    @property
    def state(self) -> UIState:
        return self.state_machine.current_state

    @property
    def is_pending(self) -> bool:
        return self.state_machine.current_state == UIState.PENDING

    async def greet(self) -> None:
        """Show the welcome message. It is not part of the transcript."""
        await self.renderer.display_message(self.greeting_message, Role.ASSISTANT)

    async def submit(self, raw_text: Optional[str]) -> SubmitOutcome:
        """
        Handle one user submission.

        Args:
            raw_text: Text as typed; surrounding whitespace is ignored

        Returns:
            SubmitOutcome describing how the cycle settled
        """
        text = (raw_text or "").strip()
        if not text:
            return SubmitOutcome.IGNORED_EMPTY

        if self.is_pending:
            logger.warning("Submit ignored: a request is already in flight")
            return SubmitOutcome.REJECTED_BUSY

        # Append and enter PENDING before the first await so a concurrent
        # submit sees the busy state.
        self.transcript.append(Message(role=Role.USER, content=text))
        await self.state_machine.transition(UIState.PENDING, reason="submit")

        try:
            await self.renderer.display_message(text, Role.USER)
            await self.renderer.show_pending_indicator()

            payload = RequestPayload.build(self.directive, self.transcript.snapshot())
            return await self._settle(payload)
        finally:
            await self.state_machine.transition(UIState.IDLE, reason="settled")

    async def _settle(self, payload: RequestPayload) -> SubmitOutcome:
        error: Optional[ChatAdvisorError] = None
        reply = ""
        try:
            reply = await self._request_reply(payload)
        except ChatAdvisorError as e:
            error = e
        except Exception as e:
            error = TransportError(f"Unexpected error during worker call: {e}", cause=e)

        await self.renderer.clear_pending_indicator()

        if error is not None:
            return await self._report_failure(error)

        self.transcript.append(Message(role=Role.ASSISTANT, content=reply))
        await self.renderer.display_message(reply, Role.ASSISTANT)
        logger.info(f"Assistant replied ({len(reply)} chars), transcript={len(self.transcript)}")
        return SubmitOutcome.REPLIED

    async def _request_reply(self, payload: RequestPayload) -> str:
        data = await self.client.complete(payload)
        result = extract_reply(data)
        if not result.ok:
            raise ContentExtractionError(result.reason or "no reply", raw_response=data)
        return result.reply

    async def _report_failure(self, error: ChatAdvisorError) -> SubmitOutcome:
        if isinstance(error, ConfigurationError):
            logger.error(f"Configuration error: {error} (endpoint={error.endpoint!r})")
            await self.renderer.display_message(self.configuration_error_message, Role.ASSISTANT)
            return SubmitOutcome.CONFIGURATION_ERROR

        if isinstance(error, ContentExtractionError):
            logger.error(f"Invalid response from worker ({error}): {error.raw_response!r}")
            await self.renderer.display_message(self.apology_message, Role.ASSISTANT)
            return SubmitOutcome.NO_CONTENT

        cause = getattr(error, "cause", None)
        logger.error(f"Worker call failed: {error}", exc_info=cause or error)
        await self.renderer.display_message(self.transport_error_message, Role.ASSISTANT)
        return SubmitOutcome.TRANSPORT_ERROR
