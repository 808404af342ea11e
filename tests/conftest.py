"""
Pytest configuration and fixtures for tweetstream tests.

FakeTransport stands in for the network: each handle replays a script of
raw items and transport signals.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

import pytest

from tweetstream import Client, Configuration, RequestDescriptor

BASIC_CONFIG = Configuration(auth_method="basic", username="user", password="pass")

STATUS_JSON = (
    '{"id": 1, "text": "hello world", "created_at": "Mon Oct 05 12:00:00 +0000 2009",'
    ' "user": {"id": 42, "screen_name": "alice", "name": "Alice"}}'
)


class TransportSignal:
    """A scripted transport-level signal (not an item)."""

    def __init__(self, kind: str, *args: Any) -> None:
        self.kind = kind
        self.args = args


def error_signal(message: Any) -> TransportSignal:
    return TransportSignal("error", message)


def max_reconnects_signal(timeout: float, retries: int) -> TransportSignal:
    return TransportSignal("max_reconnects", timeout, retries)


class FakeHandle:
    """StreamHandle that replays a script, then optionally blocks until stopped."""

    def __init__(
        self,
        request: RequestDescriptor,
        script: list[Any],
        *,
        on_inited: Callable[[], None] | None = None,
        block: bool = False,
    ) -> None:
        self.request = request
        self.script = script
        self.on_inited = on_inited
        self.block = block
        self.stopped = threading.Event()
        self.running = threading.Event()
        self.stop_calls = 0
        self._on_item: Callable[[str], None] | None = None
        self._on_error: Callable[[Any], None] | None = None
        self._on_max_reconnects: Callable[[float, int], None] | None = None

    def each_item(self, fn: Callable[[str], None]) -> None:
        self._on_item = fn

    def on_error(self, fn: Callable[[Any], None]) -> None:
        self._on_error = fn

    def on_max_reconnects(self, fn: Callable[[float, int], None]) -> None:
        self._on_max_reconnects = fn

    def run(self) -> None:
        self.running.set()
        if self.on_inited is not None:
            self.on_inited()
        for entry in self.script:
            if self.stopped.is_set():
                return
            if isinstance(entry, TransportSignal):
                if entry.kind == "error" and self._on_error is not None:
                    self._on_error(*entry.args)
                elif entry.kind == "max_reconnects":
                    if self._on_max_reconnects is not None:
                        self._on_max_reconnects(*entry.args)
                    return
            elif self._on_item is not None:
                self._on_item(entry)
        if self.block:
            self.stopped.wait(5.0)

    def stop(self) -> None:
        self.stop_calls += 1
        self.stopped.set()


class FakeTransport:
    """Transport whose handles replay ``script``."""

    def __init__(self, script: list[Any] | None = None, *, block: bool = False) -> None:
        self.script = script or []
        self.block = block
        self.handles: list[FakeHandle] = []
        self.closed = False

    @property
    def requests(self) -> list[RequestDescriptor]:
        return [handle.request for handle in self.handles]

    def connect(
        self,
        request: RequestDescriptor,
        *,
        on_inited: Callable[[], None] | None = None,
    ) -> FakeHandle:
        handle = FakeHandle(
            request, list(self.script), on_inited=on_inited, block=self.block
        )
        self.handles.append(handle)
        return handle

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport: FakeTransport) -> Client:
    return Client(BASIC_CONFIG, transport=transport)
