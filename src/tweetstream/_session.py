"""
Per-connection session state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from tweetstream._handlers import Callback
from tweetstream._types import RequestDescriptor, Status

if TYPE_CHECKING:
    from tweetstream._transport import StreamHandle


class SessionState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass
class Session:
    """
    The single active streaming connection of a client.

    Created by start() and finished by stop(), by a fatal transport error,
    or by the transport loop ending.

    Attributes:
        request: The request the session was opened with
        handlers: Effective handler per slot name (None when unset)
        on_status: Handler for Status events
        state: Lifecycle state
        last_status: Most recent Status seen on this session
        handle: The transport handle, once connected
    """

    request: RequestDescriptor
    handlers: dict[str, Callback | None] = field(default_factory=dict)
    on_status: Callback | None = None
    state: SessionState = SessionState.STARTING
    last_status: Status | None = None
    handle: StreamHandle | None = None

    @property
    def active(self) -> bool:
        return self.state in (SessionState.STARTING, SessionState.RUNNING)

    def handler(self, name: str) -> Callback | None:
        return self.handlers.get(name)
