"""Exception hierarchy for dialog outcomes and dialog configuration defects."""

from __future__ import annotations

from typing import Any

__all__ = [
    "DialogError",
    "DialogCancelled",
    "NoFileSelectedError",
    "DialogConfigurationError",
    "UnknownFieldTypeError",
    "UnknownSelectorError",
]


class DialogError(Exception):
    """Base class for every failure surfaced by the dialog layer."""


class DialogCancelled(DialogError):
    """Raised when a dialog closes without an affirmative result.

    Cancellation is modelled as a failed outcome. ``result`` keeps the raw value
    the view closed with (``None`` for every built-in view).
    """

    def __init__(self, result: Any = None, message: str = "Dialog dismissed") -> None:
        super().__init__(message)
        self.result = result


class NoFileSelectedError(DialogError):
    """Raised when the native file surface reports no selection."""

    def __init__(self, message: str = "No file selected") -> None:
        super().__init__(message)


class DialogConfigurationError(DialogError):
    """Programming error in a dialog configuration; never a user condition."""


class UnknownFieldTypeError(DialogConfigurationError):
    """A field declared a type with no registered extractor."""

    def __init__(self, field_type: Any, key: str | None = None) -> None:
        target = f" for field '{key}'" if key else ""
        super().__init__(f"Unknown field type {field_type!r}{target}")
        self.field_type = field_type
        self.key = key


class UnknownSelectorError(DialogConfigurationError):
    """A named value selector could not be resolved by the dialog view."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown value selector '{name}'")
        self.name = name
