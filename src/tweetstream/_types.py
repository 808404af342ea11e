"""
Core types for the TweetStream client.

This module defines the request descriptor handed to transports, the typed
events produced by classification, and the protocol constants.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

# Auth modes a Configuration can select
AuthMethod = Literal["basic", "oauth"]

# A decoder turns one raw item into a generic JSON value
Decoder = Callable[[str], Any]

# Type for operation query/body parameters
ParamsLike = Mapping[str, Any]


# Protocol constants
API_VERSION = "1"
STREAM_HOST = "stream.twitter.com"
USER_STREAM_HOST = "userstream.twitter.com"
USER_STREAM_PATH = "/2/user.json"
DEFAULT_USER_AGENT = "TweetStream Python Client"

# Filter parameters that accept lists and are sent comma-joined
FILTER_PARAMS = ("follow", "track", "locations")


@dataclass(frozen=True, slots=True)
class OAuthCredentials:
    """
    OAuth 1.0a consumer and access token pair.

    Attributes:
        consumer_key: Application consumer key
        consumer_secret: Application consumer secret
        access_key: User access token
        access_secret: User access token secret
    """

    consumer_key: str
    consumer_secret: str
    access_key: str
    access_secret: str

    def __repr__(self) -> str:
        return f"OAuthCredentials(consumer_key={self.consumer_key!r}, ...)"


@dataclass(frozen=True, slots=True)
class BackoffOptions:
    """
    Reconnect policy for the default transport.

    Network failures back off linearly, HTTP error statuses back off
    exponentially. After ``max_retries`` consecutive failures the transport
    gives up.
    """

    network_start: float = 0.25
    network_step: float = 0.25
    network_max: float = 16.0
    http_start: float = 10.0
    http_max: float = 240.0
    max_retries: int = 10


DEFAULT_BACKOFF = BackoffOptions()


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """
    Everything a transport needs to open one stream connection.

    Built fresh by every start() call and never mutated afterwards.

    Attributes:
        path: Request path, including the query string for GET requests
        method: HTTP method ("GET" or "POST")
        params: Normalized operation parameters (comma-joined filters)
        user_agent: User-Agent header value
        auth: "username:password" for basic auth, else None
        oauth: OAuth credentials for oauth, else None
        filters: Copy of the ``track`` keywords, for transports that pre-filter
        host: Stream host
        port: Explicit port, or None for the scheme default
        ssl: Whether to connect over TLS
        extra: Overrides that do not map to a field above. HttpxTransport
            ignores these; they are passed through for custom transports.
    """

    path: str
    method: str = "GET"
    params: Mapping[str, str] = field(default_factory=dict)
    user_agent: str = DEFAULT_USER_AGENT
    auth: str | None = None
    oauth: OAuthCredentials | None = None
    filters: str | None = None
    host: str = STREAM_HOST
    port: int | None = None
    ssl: bool = True
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def body(self) -> str | None:
        """Form-encoded request body for POST requests, None otherwise."""
        if self.method != "POST":
            return None
        from tweetstream._params import build_post_body

        return build_post_body(self.params)

    @property
    def url(self) -> str:
        """Absolute URL for this request."""
        scheme = "https" if self.ssl else "http"
        netloc = self.host if self.port is None else f"{self.host}:{self.port}"
        return f"{scheme}://{netloc}{self.path}"


# === Events ===


def _present(value: Any) -> bool:
    """True when a JSON field is set: not missing, null or false."""
    return value is not None and value is not False


class _RawAccess:
    """Mapping-style read access to the underlying JSON object."""

    __slots__ = ()

    raw: Mapping[str, Any]

    def __getitem__(self, key: str) -> Any:
        return self.raw[key]

    def __contains__(self, key: object) -> bool:
        return key in self.raw

    def __iter__(self) -> Iterator[str]:
        return iter(self.raw)

    def get(self, key: str, default: Any = None) -> Any:
        return self.raw.get(key, default)


@dataclass(frozen=True, slots=True)
class User(_RawAccess):
    """A user object embedded in a status or direct message."""

    id: int | None
    screen_name: str | None
    name: str | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: Any) -> User | None:
        if not isinstance(data, Mapping):
            return None
        return cls(
            id=data.get("id"),
            screen_name=data.get("screen_name"),
            name=data.get("name"),
            raw=data,
        )


@dataclass(frozen=True, slots=True)
class Status(_RawAccess):
    """
    A status (tweet) from the stream.

    Attributes:
        id: Status id
        text: Status text
        user: Author of the status
        created_at: Creation timestamp as sent by the server
        raw: The full decoded object
    """

    id: int | None
    text: str
    user: User
    created_at: str | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Status | None:
        if not (_present(data.get("text")) and _present(data.get("user"))):
            return None
        user = User.from_json(data["user"])
        if user is None:
            return None
        return cls(
            id=data.get("id"),
            text=str(data["text"]),
            user=user,
            created_at=data.get("created_at"),
            raw=data,
        )


@dataclass(frozen=True, slots=True)
class DirectMessage(_RawAccess):
    """A direct message delivered on a user stream."""

    id: int | None
    text: str | None
    sender: User | None = None
    recipient: User | None = None
    created_at: str | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> DirectMessage | None:
        message = data.get("direct_message")
        if not isinstance(message, Mapping):
            return None
        return cls(
            id=message.get("id"),
            text=message.get("text"),
            sender=User.from_json(message.get("sender")),
            recipient=User.from_json(message.get("recipient")),
            created_at=message.get("created_at"),
            raw=message,
        )


@dataclass(frozen=True, slots=True)
class DeletionNotice:
    """Notice that a status has been deleted and should be removed."""

    status_id: int | None
    user_id: int | None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> DeletionNotice | None:
        delete = data.get("delete")
        if not isinstance(delete, Mapping):
            return None
        status = delete.get("status")
        if not isinstance(status, Mapping):
            return None
        return cls(status_id=status.get("id"), user_id=status.get("user_id"))


@dataclass(frozen=True, slots=True)
class LimitNotice:
    """Notice that ``discarded_count`` matching statuses were not delivered."""

    discarded_count: int

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> LimitNotice | None:
        limit = data.get("limit")
        if not isinstance(limit, Mapping) or not _present(limit.get("track")):
            return None
        track = limit["track"]
        if isinstance(track, bool):
            return None
        try:
            return cls(discarded_count=int(track))
        except (TypeError, ValueError):
            return None


@dataclass(frozen=True, slots=True)
class Unrecognized:
    """An object that matched none of the known event shapes."""

    raw: Mapping[str, Any] = field(default_factory=dict)


ClassifiedEvent = Status | DeletionNotice | LimitNotice | DirectMessage | Unrecognized
