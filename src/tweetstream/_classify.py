"""
Event classification for decoded stream objects.

Each decoded object is matched against an ordered list of event shapes; the
first shape that matches wins. Objects matching no shape are Unrecognized.
"""

from collections.abc import Callable, Mapping
from typing import Any

from tweetstream._types import (
    ClassifiedEvent,
    DeletionNotice,
    DirectMessage,
    LimitNotice,
    Status,
    Unrecognized,
)

# Order matters: an object carrying several shapes is classified by the
# first entry that accepts it.
CLASSIFIERS: tuple[Callable[[Mapping[str, Any]], ClassifiedEvent | None], ...] = (
    DeletionNotice.from_json,
    LimitNotice.from_json,
    DirectMessage.from_json,
    Status.from_json,
)


def classify(decoded: Mapping[str, Any]) -> ClassifiedEvent:
    """
    Classify a decoded JSON object.

    Args:
        decoded: A JSON object from the stream

    Returns:
        The typed event for the first matching shape, or Unrecognized
    """
    for classifier in CLASSIFIERS:
        event = classifier(decoded)
        if event is not None:
            return event
    return Unrecognized(raw=decoded)
