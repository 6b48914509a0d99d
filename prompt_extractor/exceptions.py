"""Custom exceptions for the prompt-extractor library."""

from typing import Optional


class PromptExtractorError(Exception):
    """Base exception for all prompt-extractor errors."""
    pass


class MalformedCommandError(PromptExtractorError):
    """Raised when a curl command has no locatable URL."""
    pass


class BodyDecodeError(PromptExtractorError):
    """Raised when a request body cannot be decoded into a JSON object.

    The extractor recovers from this error and records it as a warning on
    the parsed request instead of failing the whole parse.
    """
    pass


class ConfigurationError(PromptExtractorError):
    """Raised when configuration is invalid or incomplete."""
    pass


class ApiCallError(PromptExtractorError):
    """Raised when a chat-completion endpoint answers with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def is_auth_error(self) -> bool:
        return self.status_code == 401


class ApiTimeoutError(ApiCallError):
    """Raised when a chat-completion request times out."""
    pass
