"""Shared test helpers and stub classes.

Reusable fakes for the dialog view contract and the settings/account
collaborators. Import from here instead of duplicating them per test module.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Callable, Iterable

from folio.dialogs.models import DialogConfig


class FakeSignal:
    """Minimal stand-in for a Qt signal: ``connect`` + ``emit``."""

    def __init__(self) -> None:
        self._slots: list[Callable[..., Any]] = []

    def connect(self, slot: Callable[..., Any]) -> None:
        self._slots.append(slot)

    def emit(self, *args: Any) -> None:
        for slot in list(self._slots):
            slot(*args)

    @property
    def slot_count(self) -> int:
        return len(self._slots)


class FakeInput:
    """Widget double exposing the Qt accessors the extractors rely on."""

    def __init__(self, value: Any = "", *, checked: bool = False, data: Any = None) -> None:
        self._value = value
        self._checked = checked
        self._data = data

    def text(self) -> Any:
        return self._value

    def toPlainText(self) -> Any:  # noqa: N802 - Qt naming
        return self._value

    def currentText(self) -> Any:  # noqa: N802 - Qt naming
        return self._value

    def currentData(self) -> Any:  # noqa: N802 - Qt naming
        return self._data

    def isChecked(self) -> bool:  # noqa: N802 - Qt naming
        return self._checked


class FakeDialogView:
    """Dialog view double following the controller's view contract."""

    events: list[str] = []

    def __init__(self, config: DialogConfig, parent: Any = None) -> None:
        self.config = config
        self.parent = parent
        self.closed = FakeSignal()
        self.failed = FakeSignal()
        self.presented = False
        self.rejected = False
        self.inputs: dict[str, Any] = {}
        FakeDialogView.events.append("construct")

    def present(self) -> None:
        self.presented = True
        FakeDialogView.events.append("present")

    def field_input(self, key: str) -> Any:
        return self.inputs[key]

    def close_with(self, result: Any, source: str = "accept") -> None:
        self.closed.emit(result, source)

    def fail_with(self, exc: Exception) -> None:
        self.failed.emit(exc)

    def reject(self) -> None:
        self.rejected = True
        self.closed.emit(None, "reject")


class ScriptedViews:
    """View factory that records every opened view and can auto-close them.

    Each queued response is consumed by the next presented view. A response
    may be a plain result or a callable receiving the view.
    """

    def __init__(self, responses: Iterable[Any] = ()) -> None:
        self.responses: deque[Any] = deque(responses)
        self.views: list[FakeDialogView] = []

    def __call__(self, config: DialogConfig, parent: Any = None) -> FakeDialogView:
        factory = self

        class _ScriptedView(FakeDialogView):
            def present(self) -> None:
                super().present()
                if factory.responses:
                    response = factory.responses.popleft()
                    result = response(self) if callable(response) else response
                    self.close_with(result)

        view = _ScriptedView(config, parent)
        self.views.append(view)
        return view

    @property
    def configs(self) -> list[DialogConfig]:
        return [view.config for view in self.views]


class RecordingSettings:
    """Settings collaborator double recording every call in order."""

    def __init__(self, values: dict[str, Any] | None = None, *, fail_persist: Exception | None = None) -> None:
        self.values: dict[str, Any] = dict(values or {})
        self.calls: list[tuple[str, Any]] = []
        self._fail_persist = fail_persist

    def to_dict(self) -> dict[str, Any]:
        return dict(self.values)

    def set(self, key: Any, value: Any = None) -> None:
        if isinstance(key, dict):
            self.calls.append(("set", dict(key)))
            self.values.update(key)
        else:
            self.calls.append(("set", {key: value}))
            self.values[key] = value

    def persist(self) -> None:
        self.calls.append(("persist", None))
        if self._fail_persist is not None:
            raise self._fail_persist


class FakeAuth:
    def __init__(self, username: str, password: str) -> None:
        self.username = username
        self.password = password


class FakeAccountConfig:
    def __init__(self) -> None:
        self.auth: FakeAuth | None = None


class FakeAccountService:
    """Account collaborator double; ``error`` makes ``login`` fail."""

    def __init__(self, *, error: Exception | None = None, token: str = "tok-123") -> None:
        self.config = FakeAccountConfig()
        self.logins: list[tuple[str, str]] = []
        self._error = error
        self._token = token

    async def login(self, username: str, password: str) -> None:
        self.logins.append((username, password))
        if self._error is not None:
            raise self._error
        self.config.auth = FakeAuth(f"{username}-account", self._token)
