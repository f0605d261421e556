from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import requests
from requests.auth import HTTPBasicAuth

from .config import DEFAULT_TIMEOUT, ClientConfig
from .errors import TrackerAPIError, redact
from .logging import get_logger
from .models import Issue, IssueFields
from .serialization import decode_issue, encode_field_value, encode_issue_fields

USER_AGENT = "ticketsuite/0.1.0"
HTTP_ERROR_STATUS = 400
ISSUE_PATH = "/rest/api/3/issue"


def _error_from_response(method: str, url: str, response: requests.Response) -> TrackerAPIError:
    status = response.status_code
    text = redact(response.text or "")
    message = ""
    error_messages: list[str] = []
    errors: dict[str, str] = {}
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = str(body.get("message") or "")
        raw_messages = body.get("errorMessages")
        if isinstance(raw_messages, list):
            error_messages = [str(m) for m in raw_messages]
        raw_errors = body.get("errors")
        if isinstance(raw_errors, dict):
            errors = {str(k): str(v) for k, v in raw_errors.items()}
    elif text:
        message = text
    if message:
        detail = message
    elif error_messages:
        detail = error_messages[0]
    elif errors:
        name, msg = next(iter(errors.items()))
        detail = f"{name}: {msg}"
    else:
        detail = ""
    summary = f"API {method} {url} failed with {status}"
    return TrackerAPIError(
        f"{summary}: {redact(detail)}" if detail else summary,
        status=status,
        error_messages=error_messages,
        errors=errors,
        response_text=text,
    )


@dataclass
class TrackerRestClient:
    """Thin JSON client for the tracker REST API.

    Authenticates with HTTP basic (email + API token, or legacy username +
    password) or with a bearer personal access token.
    """

    base_url: str
    email: str | None = None
    api_token: str | None = None
    pat: str | None = None
    user_agent: str = USER_AGENT
    timeout: int = DEFAULT_TIMEOUT
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        if self.email and self.api_token:
            self._session.auth = HTTPBasicAuth(self.email, self.api_token)
        elif self.pat:
            self._session.headers.setdefault("Authorization", f"Bearer {self.pat}")
        self._session.headers.setdefault("Accept", "application/json")
        self._session.headers.setdefault("Content-Type", "application/json")
        self._session.headers.setdefault("User-Agent", self.user_agent)

    @classmethod
    def from_config(
        cls, cfg: ClientConfig, *, session: requests.Session | None = None
    ) -> TrackerRestClient:
        method = cfg.auth_method()
        if method == "api_token":
            email, secret = cfg.email, cfg.api_token
        elif method == "basic":
            email, secret = cfg.username, cfg.password
        else:
            email, secret = None, None
        return cls(
            base_url=cfg.base_url,
            email=email,
            api_token=secret,
            pat=cfg.pat if method == "pat" else None,
            user_agent=cfg.user_agent or USER_AGENT,
            timeout=cfg.timeout,
            session=session,
        )

    def _url(self, path: str) -> str:
        if path.startswith("http"):
            return path
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Any:
        """Send one request; return decoded JSON, raw text, or None for an empty body."""
        url = self._url(path)
        logger = get_logger()
        start = time.perf_counter()
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self._session.headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.log_request(method, path, None, (time.perf_counter() - start) * 1000)
            logger.log_error(f"{method} {path} failed", error=str(exc))
            raise
        logger.log_request(method, path, response.status_code, (time.perf_counter() - start) * 1000)
        if response.status_code >= HTTP_ERROR_STATUS:
            raise _error_from_response(method, url, response)
        if response.text:
            try:
                return response.json()
            except ValueError:
                return response.text
        return None


def _require_key(key: str, what: str = "issue key or ID") -> str:
    if not key or not key.strip():
        raise ValueError(f"{what} is required")
    return key


def _encode_fields(fields: IssueFields | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(fields, IssueFields):
        return encode_issue_fields(fields)
    return {key: encode_field_value(value) for key, value in fields.items()}


@dataclass
class IssueService:
    """Issue resource operations built on :class:`TrackerRestClient`."""

    client: TrackerRestClient

    def get(
        self,
        key: str,
        *,
        fields: Iterable[str] | None = None,
        expand: Iterable[str] | None = None,
    ) -> Issue:
        _require_key(key)
        params: dict[str, Any] = {}
        if fields:
            params["fields"] = ",".join(fields)
        if expand:
            params["expand"] = ",".join(expand)
        data = self.client.request("GET", f"{ISSUE_PATH}/{key}", params=params or None)
        return decode_issue(data if data is not None else {})

    def create(self, fields: IssueFields) -> Issue:
        """Create an issue; project, summary and issue type are required."""
        if fields is None:
            raise ValueError("issue fields are required")
        if fields.project is None:
            raise ValueError("project is required")
        if not fields.summary:
            raise ValueError("summary is required")
        if fields.issue_type is None:
            raise ValueError("issue type is required")
        data = self.client.request(
            "POST", ISSUE_PATH, json_body={"fields": encode_issue_fields(fields)}
        )
        return decode_issue(data if data is not None else {})

    def update(self, key: str, fields: IssueFields | Mapping[str, Any]) -> None:
        _require_key(key)
        if fields is None:
            raise ValueError("update fields are required")
        self.client.request("PUT", f"{ISSUE_PATH}/{key}", json_body={"fields": _encode_fields(fields)})

    def delete(self, key: str) -> None:
        _require_key(key)
        self.client.request("DELETE", f"{ISSUE_PATH}/{key}")

    def transition(
        self,
        key: str,
        transition_id: str,
        fields: IssueFields | Mapping[str, Any] | None = None,
    ) -> None:
        _require_key(key)
        _require_key(transition_id, "transition ID")
        payload: dict[str, Any] = {"transition": {"id": transition_id}}
        if fields:
            encoded = _encode_fields(fields)
            if encoded:
                payload["fields"] = encoded
        self.client.request("POST", f"{ISSUE_PATH}/{key}/transitions", json_body=payload)


__all__ = ["IssueService", "TrackerRestClient", "USER_AGENT"]
