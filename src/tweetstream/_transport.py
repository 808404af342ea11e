"""
Transports deliver raw items from one persistent stream connection.

The client only depends on the Transport and StreamHandle protocols.
HttpxTransport is the default implementation: it streams newline-delimited
items over httpx and reconnects with backoff on its own.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import httpx
from authlib.integrations.httpx_client import OAuth1Auth

from tweetstream._errors import TransportError
from tweetstream._types import DEFAULT_BACKOFF, BackoffOptions, RequestDescriptor

logger = logging.getLogger(__name__)

ItemCallback = Callable[[str], None]
ErrorCallback = Callable[[Any], None]
MaxReconnectsCallback = Callable[[float, int], None]


@runtime_checkable
class StreamHandle(Protocol):
    """One connected stream, driven by a blocking run() loop."""

    def each_item(self, fn: ItemCallback) -> None:
        """Set the callback receiving each raw item."""
        ...

    def on_error(self, fn: ErrorCallback) -> None:
        """Set the callback receiving connection-level errors."""
        ...

    def on_max_reconnects(self, fn: MaxReconnectsCallback) -> None:
        """Set the callback fired with (timeout, retries) when retries run out."""
        ...

    def run(self) -> None:
        """Deliver items until stop() is called or the loop gives up."""
        ...

    def stop(self) -> None:
        """End the loop. Must be safe to call from any thread."""
        ...


@runtime_checkable
class Transport(Protocol):
    """Factory for stream handles."""

    def connect(
        self,
        request: RequestDescriptor,
        *,
        on_inited: Callable[[], None] | None = None,
    ) -> StreamHandle: ...

    def close(self) -> None: ...


def auth_for_request(request: RequestDescriptor) -> httpx.Auth | None:
    """
    Build the httpx auth flow for a request.

    Args:
        request: The request descriptor

    Returns:
        Basic auth, OAuth 1.0a signing, or None when neither is set
    """
    if request.oauth is not None:
        return OAuth1Auth(
            client_id=request.oauth.consumer_key,
            client_secret=request.oauth.consumer_secret,
            token=request.oauth.access_key,
            token_secret=request.oauth.access_secret,
        )
    if request.auth is not None:
        username, _, password = request.auth.partition(":")
        return httpx.BasicAuth(username, password)
    return None


class HttpxStreamHandle:
    """
    Stream handle backed by an httpx streaming response.

    Items are the non-blank lines of the response body. When the connection
    fails or the server ends the stream, the handle reconnects after a
    backoff delay; network failures back off linearly, HTTP error statuses
    exponentially.
    """

    def __init__(
        self,
        client: httpx.Client,
        request: RequestDescriptor,
        *,
        on_inited: Callable[[], None] | None = None,
        backoff: BackoffOptions = DEFAULT_BACKOFF,
    ) -> None:
        self._client = client
        self._request = request
        self._on_inited = on_inited
        self._backoff = backoff
        self._auth = auth_for_request(request)

        self._on_item: ItemCallback | None = None
        self._on_error: ErrorCallback | None = None
        self._on_max_reconnects: MaxReconnectsCallback | None = None

        self._stopped = threading.Event()
        self._lock = threading.RLock()
        self._response: httpx.Response | None = None

        self._retries = 0
        self._network_timeout = 0.0
        self._http_timeout = 0.0

    @property
    def request(self) -> RequestDescriptor:
        return self._request

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    @property
    def retries(self) -> int:
        """Consecutive failed attempts since the last successful connection."""
        return self._retries

    def each_item(self, fn: ItemCallback) -> None:
        self._on_item = fn

    def on_error(self, fn: ErrorCallback) -> None:
        self._on_error = fn

    def on_max_reconnects(self, fn: MaxReconnectsCallback) -> None:
        self._on_max_reconnects = fn

    def stop(self) -> None:
        """Stop the loop and close the open response, if any."""
        self._stopped.set()
        with self._lock:
            response = self._response
        if response is not None:
            response.close()

    def run(self) -> None:
        try:
            while not self._stopped.is_set():
                try:
                    status = self._stream_once()
                except (httpx.HTTPError, httpx.StreamError) as e:
                    if self._stopped.is_set():
                        break
                    self._emit_error(TransportError(f"Connection failed: {e}"))
                    status = None

                if self._stopped.is_set():
                    break
                if not self._schedule_reconnect(http_error=status is not None):
                    break
        finally:
            self._stopped.set()

    def _build_headers(self) -> dict[str, str]:
        headers = {"User-Agent": self._request.user_agent}
        if self._request.method == "POST":
            headers["Content-Type"] = "application/x-www-form-urlencoded"
        return headers

    def _stream_once(self) -> int | None:
        """
        Open one connection and deliver its items.

        Returns:
            The HTTP status code if the server rejected the request, or None
            if the connection was established and later ended
        """
        request = self._client.build_request(
            self._request.method,
            self._request.url,
            headers=self._build_headers(),
            content=self._request.body,
        )
        response = self._client.send(request, stream=True, auth=self._auth)
        with self._lock:
            self._response = response

        try:
            if not response.is_success:
                body = response.read().decode("utf-8", errors="replace")
                self._emit_error(
                    TransportError(
                        f"Invalid status code {response.status_code}: {body}",
                        status=response.status_code,
                    )
                )
                return response.status_code

            logger.info("Connected to %s", self._request.url)
            self._reset_backoff()
            if self._on_inited is not None:
                self._on_inited()

            for line in response.iter_lines():
                if self._stopped.is_set():
                    break
                item = line.strip()
                # Blank lines are keep-alives
                if item and self._on_item is not None:
                    self._on_item(item)

            if not self._stopped.is_set():
                logger.warning("Stream closed by server: %s", self._request.url)
            return None
        finally:
            with self._lock:
                self._response = None
            response.close()

    def _emit_error(self, error: TransportError) -> None:
        logger.warning("Stream error: %s", error)
        if self._on_error is not None:
            self._on_error(error)

    def _reset_backoff(self) -> None:
        self._retries = 0
        self._network_timeout = 0.0
        self._http_timeout = 0.0

    def _next_timeout(self, http_error: bool) -> float:
        b = self._backoff
        if http_error:
            if self._http_timeout == 0:
                self._http_timeout = b.http_start
            else:
                self._http_timeout = min(self._http_timeout * 2, b.http_max)
            return self._http_timeout

        if self._network_timeout == 0:
            self._network_timeout = b.network_start
        else:
            self._network_timeout = min(
                self._network_timeout + b.network_step, b.network_max
            )
        return self._network_timeout

    def _schedule_reconnect(self, http_error: bool) -> bool:
        """
        Wait out the next backoff delay.

        Returns:
            True to reconnect, False if stopped or out of retries
        """
        timeout = self._next_timeout(http_error)

        if self._retries >= self._backoff.max_retries:
            logger.error(
                "Giving up on %s after %d retries", self._request.url, self._retries
            )
            if self._on_max_reconnects is not None:
                self._on_max_reconnects(timeout, self._retries)
            return False

        self._retries += 1
        logger.warning(
            "Reconnecting in %ss (attempt %d/%d)",
            timeout,
            self._retries,
            self._backoff.max_retries,
        )
        return not self._stopped.wait(timeout)


class HttpxTransport:
    """
    Default transport: one httpx client shared by every connection.

    Args:
        client: Optional httpx.Client to use (will not be closed)
        timeout: Connect/read timeout for a client created here
        backoff: Reconnect policy
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        timeout: float | httpx.Timeout | None = None,
        backoff: BackoffOptions | None = None,
    ) -> None:
        self._own_client = client is None
        self._client = client or httpx.Client(timeout=timeout or 90.0)
        self._backoff = backoff or DEFAULT_BACKOFF

    def connect(
        self,
        request: RequestDescriptor,
        *,
        on_inited: Callable[[], None] | None = None,
    ) -> HttpxStreamHandle:
        return HttpxStreamHandle(
            self._client,
            request,
            on_inited=on_inited,
            backoff=self._backoff,
        )

    def close(self) -> None:
        """Close the transport and release resources."""
        if self._own_client:
            self._client.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
