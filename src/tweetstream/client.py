"""
Client - the stream session controller.

Opens one streaming connection per session, decodes and classifies every
item the transport delivers, and dispatches the resulting events to the
registered handlers.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from tweetstream._classify import classify
from tweetstream._config import Configuration
from tweetstream._decode import resolve_decoder
from tweetstream._errors import (
    ReconnectError,
    SessionActiveError,
    StreamDecodeError,
    TransportError,
    TweetStreamError,
    UnexpectedPayloadError,
)
from tweetstream._handlers import Callback, HandlerRegistry, as_callback
from tweetstream._request import build_request
from tweetstream._session import Session, SessionState
from tweetstream._transport import HttpxTransport, Transport
from tweetstream._types import (
    USER_STREAM_HOST,
    USER_STREAM_PATH,
    Decoder,
    DeletionNotice,
    DirectMessage,
    LimitNotice,
    ParamsLike,
    Status,
    Unrecognized,
)

logger = logging.getLogger(__name__)

HandlerLike = Callable[..., Any] | Callback

# Handler slot receiving each non-status event type
_EVENT_SLOTS: dict[type, str] = {
    DeletionNotice: "delete",
    LimitNotice: "limit",
    DirectMessage: "direct_message",
}


def _handler_overrides(handlers: Mapping[str, HandlerLike | None]) -> dict[str, Any]:
    """Map ``on_<slot>=`` keyword arguments to slot names."""
    overrides: dict[str, Any] = {}
    for key, value in handlers.items():
        if not key.startswith("on_"):
            raise TypeError(f"Unexpected keyword argument {key!r}")
        overrides[key[3:]] = value
    return overrides


class Client:
    """
    A client for the streaming API.

    Each operation (sample(), track(), ...) opens a session and blocks until
    the session ends, calling ``on_status`` for every status received. Call
    stop() from a handler, another thread or a signal handler to end it.

    Example:
        >>> client = Client(auth_method="basic", username="user", password="pass")
        >>> client.on_error(lambda error: print("error:", error))
        >>> client.track("python", "httpx", on_status=lambda s: print(s.text))
    """

    def __init__(
        self,
        config: Configuration | None = None,
        *,
        transport: Transport | None = None,
        **options: Any,
    ) -> None:
        """
        Create a client.

        No network IO is performed by the constructor.

        Args:
            config: Base configuration (defaults to Configuration())
            transport: Transport to open streams with (defaults to HttpxTransport)
            **options: Configuration fields overriding ``config``
        """
        self._config = (config or Configuration()).merge(**options)
        self._own_transport = transport is None
        self._transport: Transport = transport or HttpxTransport(
            timeout=self._config.timeout
        )
        self._handlers = HandlerRegistry()
        self._lock = threading.RLock()
        self._session: Session | None = None

    @property
    def config(self) -> Configuration:
        return self._config

    @property
    def handlers(self) -> HandlerRegistry:
        return self._handlers

    @property
    def json_parser(self) -> Decoder:
        """The decode function selected by the ``parser`` option."""
        return resolve_decoder(self._config.parser)

    @property
    def session(self) -> Session | None:
        """The current (or most recent) session."""
        return self._session

    @property
    def running(self) -> bool:
        session = self._session
        return session is not None and session.active

    @property
    def last_status(self) -> Status | None:
        """The most recent status seen by the current or last session."""
        session = self._session
        return session.last_status if session is not None else None

    def close(self) -> None:
        """Stop any running session and release the transport."""
        self.stop()
        if self._own_transport:
            self._transport.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # === Operations ===

    def firehose(
        self,
        params: ParamsLike | None = None,
        on_status: HandlerLike | None = None,
        **handlers: HandlerLike | None,
    ) -> Status | None:
        """Stream all public statuses (requires elevated access)."""
        return self.start("statuses/firehose", params, on_status, **handlers)

    def retweet(
        self,
        params: ParamsLike | None = None,
        on_status: HandlerLike | None = None,
        **handlers: HandlerLike | None,
    ) -> Status | None:
        """Stream all retweets (requires elevated access)."""
        return self.start("statuses/retweet", params, on_status, **handlers)

    def sample(
        self,
        params: ParamsLike | None = None,
        on_status: HandlerLike | None = None,
        **handlers: HandlerLike | None,
    ) -> Status | None:
        """Stream a random sample of all public statuses."""
        return self.start("statuses/sample", params, on_status, **handlers)

    def track(
        self,
        *keywords: Any,
        params: ParamsLike | None = None,
        on_status: HandlerLike | None = None,
        **handlers: HandlerLike | None,
    ) -> Status | None:
        """
        Stream statuses matching any of the given keywords.

        Keywords are case-insensitive and ORed together.
        """
        return self.filter(
            {**(params or {}), "track": list(keywords)}, on_status, **handlers
        )

    def follow(
        self,
        *user_ids: Any,
        params: ParamsLike | None = None,
        on_status: HandlerLike | None = None,
        **handlers: HandlerLike | None,
    ) -> Status | None:
        """Stream statuses from, or in reply to, the given user ids."""
        return self.filter(
            {**(params or {}), "follow": list(user_ids)}, on_status, **handlers
        )

    def locations(
        self,
        *boxes: Any,
        params: ParamsLike | None = None,
        on_status: HandlerLike | None = None,
        **handlers: HandlerLike | None,
    ) -> Status | None:
        """
        Stream geotagged statuses placed inside the given bounding boxes.

        Each box is ``(sw_longitude, sw_latitude, ne_longitude, ne_latitude)``.
        """
        return self.filter(
            {**(params or {}), "locations": list(boxes)}, on_status, **handlers
        )

    def filter(
        self,
        params: ParamsLike | None = None,
        on_status: HandlerLike | None = None,
        **handlers: HandlerLike | None,
    ) -> Status | None:
        """
        Stream statuses matching ``track``, ``follow`` and/or ``locations``.

        Combining filters in one call uses a single connection.
        """
        return self.start(
            "statuses/filter", params, on_status, method="POST", **handlers
        )

    def user_stream(
        self,
        on_status: HandlerLike | None = None,
        **handlers: HandlerLike | None,
    ) -> Status | None:
        """Stream events for the authenticated user, including direct messages."""
        return self.start(
            "",
            None,
            on_status,
            extra_stream_parameters={"host": USER_STREAM_HOST, "path": USER_STREAM_PATH},
            **handlers,
        )

    # === Handler slots ===

    def _get_or_set(
        self, name: str, handler: HandlerLike | None, pass_client: bool
    ) -> Any:
        if handler is None:
            return self._handlers.get(name)
        self._handlers.set(name, handler, pass_client=pass_client)
        return self

    def on_delete(
        self, handler: HandlerLike | None = None, *, pass_client: bool = False
    ) -> Any:
        """
        Get or set the handler for deletion notices.

        The handler receives a DeletionNotice (and the client, with
        ``pass_client=True``). Setting returns the client for chaining;
        calling without a handler returns the current one, exactly as it
        was registered (a with_client() wrapper reads back as that wrapper).
        """
        return self._get_or_set("delete", handler, pass_client)

    def on_limit(
        self, handler: HandlerLike | None = None, *, pass_client: bool = False
    ) -> Any:
        """Get or set the handler for limit notices (receives a LimitNotice)."""
        return self._get_or_set("limit", handler, pass_client)

    def on_error(
        self, handler: HandlerLike | None = None, *, pass_client: bool = False
    ) -> Any:
        """
        Get or set the error handler.

        The handler receives a TweetStreamError: a StreamDecodeError for an
        item that could not be decoded, or a TransportError for a connection
        problem. The transport reconnects on its own; this is for reference.
        """
        return self._get_or_set("error", handler, pass_client)

    def on_direct_message(
        self, handler: HandlerLike | None = None, *, pass_client: bool = False
    ) -> Any:
        """Get or set the handler for direct messages (receives a DirectMessage)."""
        return self._get_or_set("direct_message", handler, pass_client)

    def on_inited(
        self, handler: HandlerLike | None = None, *, pass_client: bool = False
    ) -> Any:
        """Get or set the handler called with no event once connected."""
        return self._get_or_set("inited", handler, pass_client)

    # === Session lifecycle ===

    def start(
        self,
        path: str,
        params: ParamsLike | None = None,
        on_status: HandlerLike | None = None,
        *,
        method: str = "GET",
        extra_stream_parameters: Mapping[str, Any] | None = None,
        **handlers: HandlerLike | None,
    ) -> Status | None:
        """
        Open a stream session and run it until it ends.

        Blocks until stop() is called or the transport gives up.

        Args:
            path: Operation path, e.g. "statuses/sample"
            params: Operation parameters
            on_status: Handler for each Status
            method: HTTP method
            extra_stream_parameters: Transport overrides (host, path, ...)
            **handlers: ``on_delete``, ``on_limit``, ``on_error``,
                ``on_direct_message`` or ``on_inited`` overrides for this
                session

        Returns:
            The last Status received, or None

        Raises:
            ConfigurationError: If the configuration is invalid
            SessionActiveError: If a session is already active
            ReconnectError: If the transport ran out of reconnect attempts
        """
        overrides = _handler_overrides(handlers)

        with self._lock:
            if self._session is not None and self._session.active:
                raise SessionActiveError()
            decoder = resolve_decoder(self._config.parser)
            request = build_request(
                path,
                params,
                method=method,
                config=self._config,
                extra_stream_parameters=extra_stream_parameters,
            )
            session = Session(
                request=request,
                handlers=self._handlers.resolve(overrides),
                on_status=as_callback(on_status),
            )
            self._session = session

        logger.info("Starting %s stream session: %s", request.method, request.url)
        try:
            handle = self._transport.connect(
                request, on_inited=lambda: self._handle_inited(session)
            )
            handle.each_item(lambda item: self._handle_item(session, decoder, item))
            handle.on_error(lambda error: self._handle_transport_error(session, error))
            handle.on_max_reconnects(
                lambda timeout, retries: self._handle_max_reconnects(
                    session, timeout, retries
                )
            )

            with self._lock:
                if session.state is SessionState.STOPPED:
                    return session.last_status
                session.handle = handle
                session.state = SessionState.RUNNING

            handle.run()
        finally:
            with self._lock:
                session.state = SessionState.STOPPED
            logger.info("Stream session ended: %s", request.url)

        return session.last_status

    def stop(self) -> Status | None:
        """
        Stop the running session.

        Safe to call from a handler, another thread or a signal handler.
        Calling it when no session is running does nothing.

        Returns:
            The last Status received by the session, or None
        """
        with self._lock:
            session = self._session
            if session is None:
                return None
            if session.state is SessionState.STOPPED:
                return session.last_status
            session.state = SessionState.STOPPED
            handle = session.handle

        logger.info("Stopping stream session")
        if handle is not None:
            handle.stop()
        return session.last_status

    # === Dispatch ===

    def _handle_inited(self, session: Session) -> None:
        callback = session.handler("inited")
        if callback is not None:
            callback.invoke(self)

    def _report_error(self, session: Session, error: TweetStreamError) -> None:
        callback = session.handler("error")
        if callback is not None:
            callback.invoke(self, error)

    def _handle_item(self, session: Session, decoder: Decoder, item: str) -> None:
        if session.state is SessionState.STOPPED:
            return

        try:
            decoded = decoder(item)
        except (ValueError, RecursionError):
            self._report_error(session, StreamDecodeError(item))
            return

        if not isinstance(decoded, Mapping):
            self._report_error(session, UnexpectedPayloadError(item))
            return

        event = classify(decoded)

        if isinstance(event, Status):
            session.last_status = event
            if session.on_status is not None:
                session.on_status.invoke(self, event)
        elif isinstance(event, Unrecognized):
            logger.debug("Dropping unrecognized item: %.200s", item)
        else:
            callback = session.handler(_EVENT_SLOTS[type(event)])
            if callback is not None:
                callback.invoke(self, event)

    def _handle_transport_error(self, session: Session, error: Any) -> None:
        if not isinstance(error, Exception):
            error = TransportError(str(error))
        self._report_error(session, error)

    def _handle_max_reconnects(
        self, session: Session, timeout: float, retries: int
    ) -> None:
        with self._lock:
            session.state = SessionState.STOPPED
        raise ReconnectError(timeout, retries)
