"""
Request construction for stream operations.

Turns an operation path and its parameters into a RequestDescriptor the
transport can connect with.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from typing import Any

from tweetstream._config import Configuration
from tweetstream._params import build_uri, normalize_filter_parameters
from tweetstream._types import ParamsLike, RequestDescriptor

logger = logging.getLogger(__name__)

_DESCRIPTOR_FIELDS = frozenset(
    f.name for f in dataclasses.fields(RequestDescriptor) if f.name != "extra"
)


def build_request(
    path: str,
    params: ParamsLike | None = None,
    *,
    method: str = "GET",
    config: Configuration,
    extra_stream_parameters: Mapping[str, Any] | None = None,
) -> RequestDescriptor:
    """
    Build the request for one stream session.

    GET operations carry their parameters in the query string; POST
    operations leave the path bare and send the parameters as a form body
    (see RequestDescriptor.body).

    Args:
        path: Operation path, e.g. "statuses/filter"
        params: Operation parameters
        method: HTTP method
        config: Client configuration (auth, user agent, host)
        extra_stream_parameters: Transport overrides. Keys naming a
            RequestDescriptor field (``host``, ``path``, ...) replace that
            field; anything else is kept in ``extra``.

    Returns:
        An immutable RequestDescriptor

    Raises:
        ConfigurationError: If the auth configuration is missing or invalid
    """
    method = method.upper()
    auth, oauth = config.auth_params()

    normalized = normalize_filter_parameters(params)
    uri = build_uri(path, normalized) if method == "GET" else build_uri(path)

    fields: dict[str, Any] = {
        "path": uri,
        "method": method,
        "params": normalized,
        "user_agent": config.user_agent,
        "auth": auth,
        "oauth": oauth,
        "filters": normalized.get("track"),
        "host": config.host,
        "ssl": True,
    }

    extra: dict[str, Any] = {}
    for key, value in (extra_stream_parameters or {}).items():
        if key in _DESCRIPTOR_FIELDS:
            fields[key] = value
        else:
            extra[key] = value

    request = RequestDescriptor(**fields, extra=extra)
    logger.debug("Built %s request for %s", request.method, request.url)
    return request
