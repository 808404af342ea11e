"""
JSON decoder selection.

A decoder takes one raw item from the stream and returns the decoded value.
It must raise ValueError (json.JSONDecodeError is one) on malformed input.
"""

import json

from tweetstream._errors import ConfigurationError
from tweetstream._types import Decoder

DECODERS: dict[str, Decoder] = {
    "json": json.loads,
}


def resolve_decoder(parser: str | Decoder) -> Decoder:
    """
    Resolve a decoder engine name (or callable) to a decode function.

    Args:
        parser: An engine name from DECODERS, or a callable

    Returns:
        The decode function

    Raises:
        ConfigurationError: If the engine name is unknown
    """
    if callable(parser):
        return parser
    try:
        return DECODERS[parser]
    except KeyError:
        raise ConfigurationError(
            f"Unknown JSON parser {parser!r}; expected one of {sorted(DECODERS)}"
        ) from None
