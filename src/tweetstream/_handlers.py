"""
Handler slots and the callback wrapper.

Handlers come in two explicit shapes: called with the event only, or with
the event followed by the client. The shape is chosen when the handler is
registered (``pass_client=True`` or with_client()), never inferred from the
function signature.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

# Named slots stored in a HandlerRegistry. The per-status handler is passed
# to each operation instead.
HANDLER_NAMES = ("delete", "limit", "error", "direct_message", "inited")


@dataclass(frozen=True, slots=True)
class Callback:
    """
    A handler function tagged with its calling convention.

    Attributes:
        fn: The user function
        pass_client: Call as ``fn(*event, client)`` instead of ``fn(*event)``
    """

    fn: Callable[..., Any]
    pass_client: bool = False

    def invoke(self, client: Any, *event: Any) -> Any:
        if self.pass_client:
            return self.fn(*event, client)
        return self.fn(*event)


def with_client(fn: Callable[..., Any]) -> Callback:
    """
    Mark a handler as taking the client as its last argument.

    Example:
        >>> def on_status(status, client):
        ...     if status.text == "stop":
        ...         client.stop()
        >>> client.sample(on_status=with_client(on_status))
    """
    return Callback(fn, pass_client=True)


def as_callback(handler: Callable[..., Any] | Callback | None) -> Callback | None:
    """Wrap a plain callable as a single-argument Callback."""
    if handler is None or isinstance(handler, Callback):
        return handler
    if not callable(handler):
        raise TypeError(f"Handler must be callable, got {type(handler).__name__}")
    return Callback(handler)


def _check_name(name: str) -> None:
    if name not in HANDLER_NAMES:
        raise TypeError(
            f"Unknown handler {name!r}; expected one of {', '.join(HANDLER_NAMES)}"
        )


class HandlerRegistry:
    """
    Named handler slots with last-write-wins semantics.

    Reading a slot that was never set returns None.
    """

    def __init__(self) -> None:
        self._slots: dict[str, Callback] = {}
        self._registered: dict[str, Callable[..., Any] | Callback] = {}

    def set(
        self,
        name: str,
        handler: Callable[..., Any] | Callback,
        *,
        pass_client: bool = False,
    ) -> HandlerRegistry:
        """Store a handler under ``name`` and return the registry."""
        _check_name(name)
        callback = as_callback(handler)
        if pass_client and callback is not None:
            callback = Callback(callback.fn, pass_client=True)
        if callback is None:
            self._slots.pop(name, None)
            self._registered.pop(name, None)
        else:
            self._slots[name] = callback
            self._registered[name] = handler
        return self

    def get(self, name: str) -> Callable[..., Any] | Callback | None:
        """Return the handler exactly as it was passed to set(), or None."""
        _check_name(name)
        return self._registered.get(name)

    def get_callback(self, name: str) -> Callback | None:
        _check_name(name)
        return self._slots.get(name)

    def resolve(
        self, overrides: Mapping[str, Callable[..., Any] | Callback | None] | None = None
    ) -> dict[str, Callback | None]:
        """
        Compute the effective handlers for one session.

        Explicit overrides win over registered handlers; slots with neither
        resolve to None.

        Raises:
            TypeError: If an override names an unknown slot
        """
        overrides = overrides or {}
        for name in overrides:
            _check_name(name)

        resolved: dict[str, Callback | None] = {}
        for name in HANDLER_NAMES:
            override = as_callback(overrides.get(name))
            resolved[name] = override or self._slots.get(name)
        return resolved
