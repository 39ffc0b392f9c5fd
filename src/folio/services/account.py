"""Async client for the remote book-hosting account service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .settings import DEFAULT_HOST, redact_secret

__all__ = [
    "AccountAuth",
    "AccountClient",
    "AccountConfig",
    "AccountError",
    "AuthenticationError",
]

LOGGER = logging.getLogger(__name__)
_ACCOUNT_ENDPOINT = "/api/account"


class AccountError(RuntimeError):
    """Raised when the account service cannot complete a request."""


class AuthenticationError(AccountError):
    """Raised when the account service rejects the supplied credentials."""


@dataclass(slots=True)
class AccountAuth:
    """Identity snapshot; ``password`` holds the API token after login."""

    username: str = ""
    password: str = ""


@dataclass(slots=True)
class AccountConfig:
    host: str = DEFAULT_HOST
    auth: AccountAuth | None = None
    timeout: float = 30.0
    retry_min_seconds: float = 0.5
    retry_max_seconds: float = 4.0


class AccountClient:
    """Authenticate against the account service over HTTPS.

    After a successful :meth:`login`, ``config.auth`` carries the account's
    username and API token.
    """

    def __init__(
        self,
        config: AccountConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = 3,
    ) -> None:
        self.config = config or AccountConfig()
        self._max_retries = max(1, int(max_retries))
        self._client = httpx.AsyncClient(
            base_url=self.config.host.rstrip("/"),
            timeout=self.config.timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @property
    def is_authenticated(self) -> bool:
        auth = self.config.auth
        return bool(auth and auth.password)

    async def login(self, username: str, password: str) -> None:
        """Verify credentials and store the account identity on success."""

        if not username or not password:
            raise AuthenticationError("Username and password are required")

        response = await self._request("GET", _ACCOUNT_ENDPOINT, auth=(username, password))
        if response.status_code in (401, 403):
            raise AuthenticationError("Invalid username or password")
        if response.is_error:
            raise AccountError(
                f"Account service returned HTTP {response.status_code}: {_error_detail(response)}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise AccountError("Account service returned an invalid response") from exc

        token = str(payload.get("token") or "") if isinstance(payload, dict) else ""
        if not token:
            raise AccountError("Account service did not return an API token")
        account_name = str(payload.get("username") or username)
        self.config.auth = AccountAuth(username=account_name, password=token)
        LOGGER.info("Logged in as %s (token %s)", account_name, redact_secret(token))

    def logout(self) -> None:
        self.config.auth = None

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            async for attempt in self._retrying():
                with attempt:
                    return await self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            raise AccountError(f"Unable to reach {self.config.host}: {exc}") from exc
        raise AccountError("Account request was not attempted")  # pragma: no cover

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(
                multiplier=self.config.retry_min_seconds,
                max=self.config.retry_max_seconds,
            ),
            retry=retry_if_exception_type(httpx.TransportError),
        )


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    if isinstance(payload, dict):
        return str(payload.get("error") or payload.get("message") or payload)
    return str(payload)
