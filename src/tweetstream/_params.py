"""
Parameter normalization and serialization for stream requests.

Filter parameters (``follow``, ``track``, ``locations``) may be given as
nested lists; the streaming API expects them comma-joined.
"""

from collections.abc import Iterable, Iterator, Mapping
from typing import Any
from urllib.parse import quote_plus

from tweetstream._types import API_VERSION, FILTER_PARAMS, ParamsLike


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _flatten(values: Iterable[Any]) -> Iterator[Any]:
    for value in values:
        if _is_sequence(value):
            yield from _flatten(value)
        else:
            yield value


def stringify(value: Any) -> str:
    """
    Render a parameter value in its wire form.

    Sequences are flattened (at any depth) and comma-joined; booleans are
    lowercased; everything else uses str().

    Args:
        value: The parameter value

    Returns:
        The value as a string
    """
    if _is_sequence(value):
        return ",".join(stringify(item) for item in _flatten(value))
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def normalize_filter_parameters(params: ParamsLike | None) -> dict[str, Any]:
    """
    Canonicalize the filter parameters of an operation.

    For each of ``follow``, ``track`` and ``locations``: a sequence is
    flattened, stringified and comma-joined, a scalar is stringified, and an
    absent (or None) value is left out. Other parameters pass through
    untouched. The input mapping is not modified.

    Args:
        params: Operation parameters

    Returns:
        A new dict with the filter parameters normalized, insertion order kept
    """
    if params is None:
        return {}

    normalized: dict[str, Any] = {}
    for key, value in params.items():
        if key in FILTER_PARAMS:
            if value is None:
                continue
            normalized[key] = stringify(value)
        else:
            normalized[key] = value
    return normalized


def build_post_body(params: Mapping[str, Any] | None) -> str:
    """
    Serialize parameters as an ``application/x-www-form-urlencoded`` string.

    Pairs are joined with ``&`` in insertion order. Values are rendered with
    stringify() and percent-encoded; None values are skipped.

    Args:
        params: Parameters to serialize

    Returns:
        Encoded string ("" for no parameters)
    """
    if not params:
        return ""

    pairs = []
    for key, value in params.items():
        if value is None:
            continue
        pairs.append(f"{key}={quote_plus(stringify(value))}")
    return "&".join(pairs)


def build_query_parameters(params: Mapping[str, Any] | None) -> str:
    """Return ``?<body>`` for a non-empty parameter set, else ""."""
    body = build_post_body(params)
    return f"?{body}" if body else ""


def build_uri(path: str, params: Mapping[str, Any] | None = None) -> str:
    """
    Build a versioned request path.

    Example:
        >>> build_uri("statuses/sample", {"count": 10})
        '/1/statuses/sample.json?count=10'
    """
    return f"/{API_VERSION}/{path}.json{build_query_parameters(params)}"
