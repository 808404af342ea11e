"""
Exception hierarchy for the TweetStream client.

This module defines all exceptions that can be raised by the library or
handed to an ``on_error`` handler.
"""

from typing import Any


class TweetStreamError(Exception):
    """
    Base exception for all TweetStream errors.

    Attributes:
        message: Human-readable error message
        details: Additional error details
    """

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r})"


class ConfigurationError(TweetStreamError):
    """
    Exception raised when the client cannot build a valid request.

    This is raised from start() before any connection attempt, e.g. when no
    auth method is configured or the configured credentials are incomplete.
    """


class SessionActiveError(ConfigurationError):
    """
    Exception raised when start() is called while a session is still active.

    Only one stream session may be open per client at a time. Call stop()
    first, or use a separate client.
    """

    def __init__(self, message: str = "A stream session is already active") -> None:
        super().__init__(message)


class StreamDecodeError(TweetStreamError):
    """
    Exception describing an item that could not be decoded as JSON.

    This is never raised out of the session; it is passed to the error
    handler and the offending item is skipped.

    Attributes:
        raw: The raw item as delivered by the transport
    """

    def __init__(self, raw: str, message: str | None = None) -> None:
        super().__init__(message or f"Could not decode JSON in stream: {raw}")
        self.raw = raw


class UnexpectedPayloadError(StreamDecodeError):
    """
    Exception describing an item that decoded to something other than an object.
    """

    def __init__(self, raw: str) -> None:
        super().__init__(raw, f"Unexpected JSON object in stream: {raw}")


class TransportError(TweetStreamError):
    """
    Exception for connection-level failures reported by the transport.

    The transport reconnects on its own; these are surfaced to the error
    handler for reference only.

    Attributes:
        status: HTTP status code (None for network errors)
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.message} (status={self.status})"
        return self.message


class ReconnectError(TweetStreamError):
    """
    Exception raised when the transport has given up reconnecting.

    This terminates the session and propagates out of start().

    Attributes:
        timeout: The last backoff delay that was scheduled, in seconds
        retries: The number of reconnect attempts made
    """

    def __init__(self, timeout: float, retries: int) -> None:
        super().__init__(
            f"Failed to reconnect after {retries} tries (last timeout {timeout}s)"
        )
        self.timeout = timeout
        self.retries = retries

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"timeout={self.timeout!r}, "
            f"retries={self.retries!r})"
        )
