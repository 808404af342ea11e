"""
TweetStream Python Client

A client for the Twitter Streaming API: one persistent connection, delivered
as typed events to your handlers.

Example usage:
    >>> from tweetstream import Client
    >>>
    >>> client = Client(auth_method="basic", username="user", password="pass")
    >>> client.on_delete(lambda notice: print("deleted", notice.status_id))
    >>> client.track("python", on_status=lambda status: print(status.text))
"""

import logging
from importlib.metadata import PackageNotFoundError, version

from tweetstream._classify import classify
from tweetstream._config import Configuration
from tweetstream._errors import (
    ConfigurationError,
    ReconnectError,
    SessionActiveError,
    StreamDecodeError,
    TransportError,
    TweetStreamError,
    UnexpectedPayloadError,
)
from tweetstream._handlers import Callback, HandlerRegistry, with_client
from tweetstream._request import build_request
from tweetstream._session import Session, SessionState
from tweetstream._transport import (
    HttpxStreamHandle,
    HttpxTransport,
    StreamHandle,
    Transport,
)
from tweetstream._types import (
    BackoffOptions,
    ClassifiedEvent,
    DeletionNotice,
    DirectMessage,
    LimitNotice,
    OAuthCredentials,
    RequestDescriptor,
    Status,
    Unrecognized,
    User,
)
from tweetstream.client import Client

__all__ = [
    # Types
    "BackoffOptions",
    "ClassifiedEvent",
    "DeletionNotice",
    "DirectMessage",
    "LimitNotice",
    "OAuthCredentials",
    "RequestDescriptor",
    "Status",
    "Unrecognized",
    "User",
    # Errors
    "TweetStreamError",
    "ConfigurationError",
    "SessionActiveError",
    "StreamDecodeError",
    "UnexpectedPayloadError",
    "TransportError",
    "ReconnectError",
    # Handlers
    "Callback",
    "HandlerRegistry",
    "with_client",
    # Sessions and transports
    "Session",
    "SessionState",
    "StreamHandle",
    "Transport",
    "HttpxStreamHandle",
    "HttpxTransport",
    # Functions
    "build_request",
    "classify",
    # Client
    "Client",
    "Configuration",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Use importlib.metadata for version (works with installed package)
# Fall back to hard-coded version for editable installs
try:
    __version__ = version("tweetstream")
except PackageNotFoundError:
    __version__ = "0.1.0"
