"""Process-wide Bitbucket settings, read once from the environment at startup.

The resulting :class:`BitbucketConfig` is immutable and shared read-only by
every tool call; nothing re-reads the environment after ``load_config()``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from bitbucket_mcp.errors import invalid_params

REST_API_PATH = "/rest/api/1.0"
DEFAULT_TIMEOUT_SECONDS = 30.0

PROJECT_REQUIRED_MESSAGE = (
    "Project must be provided either as a parameter or through BITBUCKET_DEFAULT_PROJECT environment variable"
)


class ConfigError(ValueError):
    """Raised when the environment cannot produce a usable configuration."""


@dataclass(frozen=True)
class BearerAuth:
    token: str

    def __repr__(self) -> str:
        return "BearerAuth(token='***')"


@dataclass(frozen=True)
class BasicAuth:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"BasicAuth(username={self.username!r}, password='***')"


Credential = BearerAuth | BasicAuth


@dataclass(frozen=True)
class BitbucketConfig:
    base_url: str
    credential: Credential
    default_project: str | None = None
    log_dir: Path = Path(".")
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def api_url(self) -> str:
        return self.base_url.rstrip("/") + REST_API_PATH

    @property
    def auth_mode(self) -> str:
        return "token" if isinstance(self.credential, BearerAuth) else "basic"

    def resolve_project(self, provided: str | None = None) -> str:
        """Return *provided* if non-empty, else the default project.

        Raises an ``invalid_params`` ToolError when neither is set.
        """
        if provided:
            return provided
        if self.default_project:
            return self.default_project
        raise invalid_params(PROJECT_REQUIRED_MESSAGE)


def _get(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key, "").strip()
    return value or None


def load_config(env: Mapping[str, str] | None = None) -> BitbucketConfig:
    """Build a :class:`BitbucketConfig` from *env* (defaults to ``os.environ``).

    Raises ConfigError when the base URL is missing or no complete
    credential is present. A token wins over a username/password pair.
    """
    if env is None:
        env = os.environ

    base_url = _get(env, "BITBUCKET_URL")
    if not base_url:
        msg = "BITBUCKET_URL is required"
        raise ConfigError(msg)

    token = _get(env, "BITBUCKET_TOKEN")
    username = _get(env, "BITBUCKET_USERNAME")
    password = env.get("BITBUCKET_PASSWORD") or None
    credential: Credential
    if token:
        credential = BearerAuth(token)
    elif username and password:
        credential = BasicAuth(username, password)
    else:
        msg = "Either BITBUCKET_TOKEN or BITBUCKET_USERNAME/PASSWORD is required"
        raise ConfigError(msg)

    timeout = DEFAULT_TIMEOUT_SECONDS
    raw_timeout = _get(env, "BITBUCKET_TIMEOUT")
    if raw_timeout is not None:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            msg = f"BITBUCKET_TIMEOUT must be a number, got {raw_timeout!r}"
            raise ConfigError(msg) from None
        if timeout <= 0:
            msg = f"BITBUCKET_TIMEOUT must be positive, got {raw_timeout!r}"
            raise ConfigError(msg)

    log_dir = _get(env, "BITBUCKET_LOG_DIR")

    return BitbucketConfig(
        base_url=base_url,
        credential=credential,
        default_project=_get(env, "BITBUCKET_DEFAULT_PROJECT"),
        log_dir=Path(log_dir) if log_dir else Path.cwd(),
        timeout=timeout,
    )
