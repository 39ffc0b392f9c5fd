"""Application workflows chaining a fields dialog into settings and account side effects."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from .builders import Dialogs
from .errors import DialogCancelled
from .models import FieldDescriptor, FieldType, ValueMap

__all__ = [
    "AccountService",
    "DialogWorkflows",
    "SettingsBackend",
    "SETTINGS_FIELDS",
    "ACCOUNT_FIELDS",
]

LOGGER = logging.getLogger(__name__)

SETTINGS_FIELDS: Mapping[str, FieldDescriptor] = {
    "auto_file_management": FieldDescriptor("Auto file management", FieldType.CHECKBOX),
    "username": FieldDescriptor("Username", FieldType.TEXT),
    "token": FieldDescriptor("Token", FieldType.TEXT),
    "host": FieldDescriptor("Host", FieldType.TEXT),
}

ACCOUNT_FIELDS: Mapping[str, FieldDescriptor] = {
    "username": FieldDescriptor("Username or Email", FieldType.TEXT),
    "password": FieldDescriptor("Password", FieldType.PASSWORD),
}


class SettingsBackend(Protocol):
    """Key/value settings store with an explicit flush step."""

    def to_dict(self) -> dict[str, Any]:
        ...

    def set(self, key: str | Mapping[str, Any], value: Any = None) -> None:
        ...

    def persist(self) -> Any:
        ...


class _AuthSnapshot(Protocol):
    username: str
    password: str


class _AccountConfig(Protocol):
    auth: _AuthSnapshot | None


class AccountService(Protocol):
    """Remote account collaborator used by :meth:`DialogWorkflows.connect_account`."""

    config: _AccountConfig

    async def login(self, username: str, password: str) -> None:
        ...


class DialogWorkflows:
    """Settings and account workflows built on :class:`Dialogs`.

    Dismissing the first dialog of a workflow is a no-op. Any failure after it
    is shown through :meth:`Dialogs.error` and re-raised to the caller.
    """

    __slots__ = ("_dialogs", "_settings", "_account")

    def __init__(
        self,
        dialogs: Dialogs,
        settings: SettingsBackend,
        account: AccountService | None = None,
    ) -> None:
        self._dialogs = dialogs
        self._settings = settings
        self._account = account

    async def settings(self) -> None:
        """Edit the advanced settings and persist them on confirmation."""

        values = await self._ask(
            "Advanced Settings", SETTINGS_FIELDS, self._settings.to_dict()
        )
        if values is None:
            return
        try:
            self._settings.set(values)
            self._settings.persist()
        except Exception as exc:
            await self._dialogs.error(exc)
        LOGGER.info("Advanced settings updated (%s)", ", ".join(sorted(values)))

    async def connect_account(self) -> None:
        """Sign in to the remote account and store the resulting token."""

        if self._account is None:
            raise RuntimeError("connect_account requires an account service")
        credentials = await self._ask("Connect your account", ACCOUNT_FIELDS, {})
        if credentials is None:
            return
        try:
            await self._account.login(
                str(credentials.get("username") or ""),
                str(credentials.get("password") or ""),
            )
            auth = self._account.config.auth
            if auth is None:
                raise RuntimeError("Account service did not report an identity after login")
            self._settings.set("username", auth.username)
            self._settings.set("token", auth.password)
            self._settings.persist()
        except Exception as exc:
            await self._dialogs.error(exc)
        LOGGER.info("Account connected for %s", auth.username)
        self._dialogs.show_detached(
            self._dialogs.alert(
                "Account connected", "Your account is now connected to this computer."
            )
        )

    async def _ask(
        self, title: str, fields: Mapping[str, FieldDescriptor], values: Mapping[str, Any]
    ) -> ValueMap | None:
        try:
            return await self._dialogs.fields(title, fields, values)
        except DialogCancelled:
            LOGGER.debug("%s dialog dismissed", title)
            return None
