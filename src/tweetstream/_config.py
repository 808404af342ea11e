"""
Client configuration.

A Configuration is an immutable bundle of credentials and client options.
Clients take one at construction time; there is no process-wide state.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from tweetstream._errors import ConfigurationError
from tweetstream._types import (
    DEFAULT_USER_AGENT,
    STREAM_HOST,
    AuthMethod,
    Decoder,
    OAuthCredentials,
)

_AUTH_METHODS = ("basic", "oauth")


@dataclass(frozen=True)
class Configuration:
    """
    Options for a TweetStream client.

    Attributes:
        username: Account name for basic auth
        password: Account password for basic auth
        auth_method: "basic" or "oauth"; must be set before starting a stream
        consumer_key: OAuth consumer key
        consumer_secret: OAuth consumer secret
        oauth_token: OAuth access token
        oauth_token_secret: OAuth access token secret
        parser: JSON decoder engine name, or a callable taking the raw item
        user_agent: User-Agent sent with every request
        host: Stream host for the statuses/* operations
        timeout: Connect/read timeout for the default transport, in seconds
    """

    username: str | None = None
    password: str | None = None
    auth_method: AuthMethod | None = None
    consumer_key: str | None = None
    consumer_secret: str | None = None
    oauth_token: str | None = None
    oauth_token_secret: str | None = None
    parser: str | Decoder = "json"
    user_agent: str = DEFAULT_USER_AGENT
    host: str = STREAM_HOST
    timeout: float | None = 90.0

    def __repr__(self) -> str:
        return (
            f"Configuration(auth_method={self.auth_method!r}, "
            f"username={self.username!r}, host={self.host!r})"
        )

    def merge(self, **options: Any) -> Configuration:
        """
        Return a copy with the given options replaced.

        Raises:
            TypeError: If an option name is not a Configuration field
        """
        if not options:
            return self
        return dataclasses.replace(self, **options)

    @property
    def oauth_fields(self) -> tuple[str | None, ...]:
        return (
            self.consumer_key,
            self.consumer_secret,
            self.oauth_token,
            self.oauth_token_secret,
        )

    def auth_params(self) -> tuple[str | None, OAuthCredentials | None]:
        """
        Select the auth payload for the configured auth method.

        Returns:
            ``(auth, oauth)`` where exactly one element is set: the
            "username:password" credential string for basic auth, or the
            OAuth credentials for oauth

        Raises:
            ConfigurationError: If no auth method is set, the method is
                unknown, its credentials are incomplete, or credentials for
                both methods are present
        """
        if self.auth_method is None:
            raise ConfigurationError(
                "No auth method configured; set auth_method to 'basic' or 'oauth'"
            )
        if self.auth_method not in _AUTH_METHODS:
            raise ConfigurationError(f"Unknown auth method: {self.auth_method!r}")

        if self.auth_method == "basic":
            if not self.username or self.password is None:
                raise ConfigurationError(
                    "Basic auth requires both username and password"
                )
            if any(self.oauth_fields):
                raise ConfigurationError(
                    "Basic auth selected but OAuth credentials are also set"
                )
            return f"{self.username}:{self.password}", None

        if not all(self.oauth_fields):
            raise ConfigurationError(
                "OAuth requires consumer_key, consumer_secret, "
                "oauth_token and oauth_token_secret"
            )
        if self.username or self.password:
            raise ConfigurationError(
                "OAuth selected but basic credentials are also set"
            )
        return None, OAuthCredentials(
            consumer_key=self.consumer_key,  # type: ignore[arg-type]
            consumer_secret=self.consumer_secret,  # type: ignore[arg-type]
            access_key=self.oauth_token,  # type: ignore[arg-type]
            access_secret=self.oauth_token_secret,  # type: ignore[arg-type]
        )
