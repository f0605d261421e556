from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast
from urllib.parse import urlparse

import yaml
from dotenv import load_dotenv as _load_dotenv_file

from .errors import ConfigError
from .logging import get_logger

ENV_BASE_URL = "JIRA_BASE_URL"
ENV_EMAIL = "JIRA_EMAIL"
ENV_API_TOKEN = "JIRA_API_TOKEN"
ENV_PAT = "JIRA_PAT"
ENV_USERNAME = "JIRA_USERNAME"
ENV_PASSWORD = "JIRA_PASSWORD"
ENV_TIMEOUT = "JIRA_TIMEOUT"
ENV_USER_AGENT = "JIRA_USER_AGENT"

DEFAULT_TIMEOUT = 30


@dataclass
class ClientConfig:
    base_url: str
    email: str | None = None
    api_token: str | None = None
    pat: str | None = None
    username: str | None = None
    password: str | None = None
    timeout: int = DEFAULT_TIMEOUT
    user_agent: str | None = None
    # Logging configuration
    logging_json_enabled: bool = False
    logging_level: str = "INFO"

    def auth_method(self) -> str:
        """Credential kind in priority order: api_token, pat, basic."""
        if self.email and self.api_token:
            return "api_token"
        if self.pat:
            return "pat"
        if self.username and self.password:
            return "basic"
        raise ConfigError(
            "no valid credentials; set email + api_token, a personal access token, "
            "or username + password"
        )

    def validate(self) -> ClientConfig:
        _check_base_url(self.base_url)
        self.timeout = _check_timeout(self.timeout, "timeout")
        self.auth_method()
        return self


def _check_base_url(value: Any) -> str:
    if not value or not isinstance(value, str):
        raise ConfigError("base URL is required")
    scheme = urlparse(value).scheme
    if scheme not in ("http", "https"):
        raise ConfigError(f"base URL must use http or https scheme: {value!r}")
    return value


def _check_timeout(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"invalid {name}: must be an integer (seconds)")
    try:
        seconds = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid {name}: must be an integer (seconds)") from exc
    if isinstance(value, float) and value != seconds:
        raise ConfigError(f"invalid {name}: must be an integer (seconds)")
    if seconds <= 0:
        raise ConfigError(f"invalid {name}: must be positive")
    return seconds


def _resolve_env_var(value: Any) -> Any:
    """Resolve environment variable if value starts with $."""
    if isinstance(value, str) and value.startswith("$"):
        return os.getenv(value[1:], value)  # Fallback to original if not found
    return value


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    section = raw.get(name, {}) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"config section '{name}' must be a mapping")
    return cast(dict[str, Any], section)


def load_config(path: str | Path) -> ClientConfig:
    """Load client settings from a YAML file.

    Layout::

        server:
          base_url: https://example.atlassian.net
        auth:
          email: $JIRA_EMAIL
          api_token: $JIRA_API_TOKEN
        client:
          timeout: 30
        logging:
          json_enabled: false
          level: INFO
    """
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Configuration file not found: {p}")
    try:
        raw = yaml.safe_load(p.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {p}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration root must be a mapping: {p}")
    server = _section(raw, "server")
    auth = _section(raw, "auth")
    client = _section(raw, "client")
    logging_config = _section(raw, "logging")

    cfg = ClientConfig(
        base_url=_resolve_env_var(server.get("base_url")),
        email=_resolve_env_var(auth.get("email")),
        api_token=_resolve_env_var(auth.get("api_token")),
        pat=_resolve_env_var(auth.get("pat")),
        username=_resolve_env_var(auth.get("username")),
        password=_resolve_env_var(auth.get("password")),
        timeout=_resolve_env_var(client.get("timeout", DEFAULT_TIMEOUT)),
        user_agent=_resolve_env_var(client.get("user_agent")),
        logging_json_enabled=bool(logging_config.get("json_enabled", False)),
        logging_level=str(logging_config.get("level", "INFO")),
    )
    return cfg.validate()


def _load_dotenv(dotenv_path: str | None) -> bool:
    candidates = [dotenv_path] if dotenv_path else [".env", ".env.local"]
    for location in candidates:
        env_file = Path(location)
        if env_file.exists():
            _load_dotenv_file(str(env_file))
            get_logger().debug(f"Loaded environment variables from {env_file}")
            return True
    return False


def config_from_env(load_dotenv: bool = True, dotenv_path: str | None = None) -> ClientConfig:
    """Build a :class:`ClientConfig` from ``JIRA_*`` environment variables.

    Variables already set in the process environment take precedence over
    values from the ``.env`` file.
    """
    if load_dotenv:
        _load_dotenv(dotenv_path)

    base_url = os.getenv(ENV_BASE_URL)
    if not base_url:
        raise ConfigError(f"environment variable {ENV_BASE_URL} is required")

    cfg = ClientConfig(base_url=base_url)
    email, api_token = os.getenv(ENV_EMAIL), os.getenv(ENV_API_TOKEN)
    pat = os.getenv(ENV_PAT)
    username, password = os.getenv(ENV_USERNAME), os.getenv(ENV_PASSWORD)
    if email and api_token:
        cfg.email, cfg.api_token = email, api_token
    elif pat:
        cfg.pat = pat
    elif username and password:
        cfg.username, cfg.password = username, password
    else:
        raise ConfigError(
            "no valid authentication credentials found in environment variables; "
            f"set either ({ENV_EMAIL} + {ENV_API_TOKEN}) for API token, {ENV_PAT} for PAT, "
            f"or ({ENV_USERNAME} + {ENV_PASSWORD}) for basic auth"
        )

    timeout = os.getenv(ENV_TIMEOUT)
    if timeout:
        cfg.timeout = _check_timeout(timeout, ENV_TIMEOUT)
    cfg.user_agent = os.getenv(ENV_USER_AGENT) or None
    return cfg.validate()


__all__ = ["ClientConfig", "ConfigError", "config_from_env", "load_config"]
