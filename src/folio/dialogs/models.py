"""Immutable configuration types shared by dialog builders, views, and the controller."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Sequence, Union

from .errors import UnknownFieldTypeError

__all__ = [
    "FieldType",
    "FieldDescriptor",
    "FieldSchema",
    "ValueMap",
    "DialogKind",
    "NamedSelector",
    "CustomSelector",
    "ValueSelector",
    "PROMPT_SELECTOR",
    "DialogConfig",
    "FilePickerOptions",
    "normalize_choices",
]


class FieldType(str, Enum):
    """Input kinds a ``fields`` dialog knows how to render and read."""

    TEXT = "text"
    PASSWORD = "password"
    TEXTAREA = "textarea"
    NUMBER = "number"
    SELECT = "select"
    CHECKBOX = "checkbox"
    ACTION = "action"


class DialogKind(str, Enum):
    """Dialog variants understood by :class:`~folio.dialogs.views.DialogView`."""

    FIELDS = "fields"
    PROMPT = "prompt"
    SELECT = "select"
    CONFIRM = "confirm"
    ALERT = "alert"


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Declaration of a single form input.

    ``type`` accepts a :class:`FieldType` or its string value. ``constraints``
    carries per-type rendering hints (``placeholder``, ``options``,
    ``minimum``/``maximum``/``decimals``).
    """

    label: str
    type: FieldType
    constraints: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        try:
            field_type = FieldType(self.type)
        except ValueError as exc:
            raise UnknownFieldTypeError(self.type) from exc
        object.__setattr__(self, "type", field_type)
        object.__setattr__(self, "constraints", MappingProxyType(dict(self.constraints or {})))


FieldSchema = Mapping[str, FieldDescriptor]
ValueMap = dict[str, Union[str, bool, None]]


@dataclass(frozen=True, slots=True)
class NamedSelector:
    """Selector strategy resolved by name on the live view at close time."""

    name: str


@dataclass(frozen=True, slots=True)
class CustomSelector:
    """Selector strategy supplied as a callable receiving the live view."""

    extract: Callable[[Any], Any]

    def __call__(self, view: Any) -> Any:
        return self.extract(view)


ValueSelector = Union[NamedSelector, CustomSelector]
PROMPT_SELECTOR = NamedSelector("prompt")


def normalize_choices(raw: Mapping[str, Any] | Sequence[Any] | None) -> tuple[tuple[str, str], ...]:
    """Return ``(value, label)`` pairs from a mapping or a flat sequence."""

    if not raw:
        return ()
    if isinstance(raw, Mapping):
        return tuple((str(value), str(label)) for value, label in raw.items())
    pairs: list[tuple[str, str]] = []
    for item in raw:
        if isinstance(item, (tuple, list)) and len(item) == 2:
            pairs.append((str(item[0]), str(item[1])))
        else:
            pairs.append((str(item), str(item)))
    return tuple(pairs)


@dataclass(frozen=True, slots=True)
class DialogConfig:
    """Everything a dialog view needs to render itself and produce an outcome.

    A config is built fresh for every dialog and frozen on creation; ``fields``
    and ``values`` are exposed through read-only mappings.
    """

    kind: DialogKind
    title: str | None = None
    message: str | None = None
    fields: FieldSchema = field(default_factory=dict)
    values: Mapping[str, Any] = field(default_factory=dict)
    default: Any = None
    choices: tuple[tuple[str, str], ...] = ()
    auto_focus: bool = False
    value_selector: ValueSelector | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", DialogKind(self.kind))
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields or {})))
        object.__setattr__(self, "values", MappingProxyType(dict(self.values or {})))
        object.__setattr__(self, "choices", normalize_choices(self.choices))


@dataclass(frozen=True, slots=True)
class FilePickerOptions:
    """Properties injected into the native file-selection surface."""

    save_as: str | None = None
    working_dir: str | None = None
    directory: bool = False
    caption: str = ""
    file_filter: str | None = None
