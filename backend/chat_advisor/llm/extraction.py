"""
Reply extraction for chat-completion shaped responses.

Looks up choices[0].message.content with an explicit fallback for every
missing or malformed level instead of chained lookups.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of looking for the assistant reply in a worker response."""
    reply: Optional[str] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.reply is not None


def _missing(reason: str) -> ExtractionResult:
    return ExtractionResult(reply=None, reason=reason)


def extract_reply(data: Any) -> ExtractionResult:
    """
    Extract the assistant reply from a decoded response body.

    Args:
        data: Decoded JSON body returned by the worker

    Returns:
        ExtractionResult with the reply text, or a reason when there is none
    """
    if not isinstance(data, dict):
        return _missing("response is not an object")

    choices = data.get("choices")
    if choices is None:
        return _missing("choices missing")
    if not isinstance(choices, list):
        return _missing("choices is not a list")
    if not choices:
        return _missing("choices is empty")

    first = choices[0]
    if not isinstance(first, dict):
        return _missing("first choice is not an object")

    message = first.get("message")
    if not isinstance(message, dict):
        return _missing("choices[0].message missing")

    content = message.get("content")
    if content is None:
        return _missing("choices[0].message.content is null")
    if not isinstance(content, str):
        return _missing("choices[0].message.content is not a string")
    if not content:
        return _missing("choices[0].message.content is empty")

    return ExtractionResult(reply=content)
