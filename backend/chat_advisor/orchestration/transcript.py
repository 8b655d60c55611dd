"""
Transcript store for the current chat session.

Append-only, ordered list of user/assistant messages. The system directive is
never stored here; it is prepended when a request is built.
"""

from typing import Iterator, List, Optional, Tuple

from chat_advisor.models import Message


class Transcript:
    """
    Tracks the full turn-based conversation.

    Unbounded and in-memory only; it lives as long as the session.
    """

    def __init__(self) -> None:
        self._messages: List[Message] = []

    def append(self, message: Message) -> None:
        """
        Add a message to the end of the transcript.

        Args:
            message: User or assistant message
        """
        self._messages.append(message)

    def snapshot(self) -> Tuple[Message, ...]:
        """
        Get the full ordered transcript.

        Returns:
            Immutable copy reflecting every append made so far
        """
        return tuple(self._messages)

    def last(self) -> Optional[Message]:
        """Get the most recent message, if any."""
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.snapshot())
