"""Pytest configuration and shared fixtures."""

import pytest

from chat_advisor.models import Role


class RecordingRenderer:
    """Renderer that records every signal it receives."""

    def __init__(self):
        self.calls: list[tuple] = []

    async def display_message(self, text: str, role: Role) -> None:
        self.calls.append(("display", text, role))

    async def show_pending_indicator(self) -> None:
        self.calls.append(("show_pending",))

    async def clear_pending_indicator(self) -> None:
        self.calls.append(("clear_pending",))

    @property
    def displayed(self) -> list[tuple[str, Role]]:
        return [(call[1], call[2]) for call in self.calls if call[0] == "display"]

    def displayed_text(self, role: Role) -> list[str]:
        return [text for text, r in self.displayed if r == role]


class StubCompletionClient:
    """Completion client returning queued responses or raising queued errors."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.payloads = []

    async def complete(self, payload):
        self.payloads.append(payload)
        response = self.responses.pop(0) if self.responses else {}
        if isinstance(response, BaseException):
            raise response
        return response


def reply(content):
    """Build a chat-completion shaped response."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def renderer():
    """Fresh recording renderer."""
    return RecordingRenderer()


@pytest.fixture
def make_client():
    """Factory for stub completion clients."""
    return StubCompletionClient


@pytest.fixture
def make_reply():
    """Factory for successful worker responses."""
    return reply
