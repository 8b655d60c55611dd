"""
Renderer interface used by the conversation controller.

The renderer owns everything visual. Every displayed message also implies
scrolling to the latest entry.
"""

from typing import Protocol

from chat_advisor.models import Role


class Renderer(Protocol):
    async def display_message(self, text: str, role: Role) -> None:
        """Append a chat bubble and scroll to it."""
        ...

    async def show_pending_indicator(self) -> None:
        """Show the placeholder typing bubble."""
        ...

    async def clear_pending_indicator(self) -> None:
        """Remove the typing bubble."""
        ...
