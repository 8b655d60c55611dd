# errors.py

from typing import Any, Optional


class ChatAdvisorError(Exception):
    """Base class for all conversation errors."""
    pass


class ConfigurationError(ChatAdvisorError):
    """Raised before any network call when the worker URL is unset or a placeholder."""
    def __init__(self, message: str, endpoint: Optional[str] = None):
        super().__init__(message)
        self.endpoint = endpoint


class TransportError(ChatAdvisorError):
    """Raised when the worker call fails or its body is not JSON."""
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ContentExtractionError(ChatAdvisorError):
    """Raised when a well-formed response carries no reply text."""
    def __init__(self, message: str, raw_response: Any = None):
        super().__init__(message)
        self.raw_response = raw_response
