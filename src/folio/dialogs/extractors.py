"""Per-field-type value extraction for ``fields`` dialogs.

Each :class:`~folio.dialogs.models.FieldType` maps to exactly one extractor
that reads the pending value from the live input widget. Extractors only rely
on the Qt accessor names (``text``, ``toPlainText``, ``currentData``,
``currentText``, ``isChecked``), so any object exposing them can stand in for
a widget.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Protocol

from .errors import UnknownFieldTypeError
from .models import FieldSchema, FieldType, ValueMap

__all__ = [
    "NO_VALUE",
    "Extractor",
    "FIELD_EXTRACTORS",
    "FieldHost",
    "extract_field_values",
]

LOGGER = logging.getLogger(__name__)


class _NoValue:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_VALUE"

    def __bool__(self) -> bool:
        return False


NO_VALUE: Any = _NoValue()
"""Sentinel returned by extractors for fields that never contribute a value."""

Extractor = Callable[[Any], Any]


class FieldHost(Protocol):
    """Anything that can hand out the live input widget for a field key."""

    def field_input(self, key: str) -> Any:
        ...


def _read_text(widget: Any) -> str:
    return widget.text()


def _read_plain_text(widget: Any) -> str:
    return widget.toPlainText()


def _read_choice(widget: Any) -> str:
    data = widget.currentData()
    if data is None:
        return widget.currentText()
    return data


def _read_checked(widget: Any) -> bool:
    return bool(widget.isChecked())


def _read_nothing(widget: Any) -> Any:
    return NO_VALUE


FIELD_EXTRACTORS: Mapping[FieldType, Extractor] = {
    FieldType.TEXT: _read_text,
    FieldType.PASSWORD: _read_text,
    FieldType.TEXTAREA: _read_plain_text,
    FieldType.NUMBER: _read_text,
    FieldType.SELECT: _read_choice,
    FieldType.CHECKBOX: _read_checked,
    FieldType.ACTION: _read_nothing,
}

_MISSING = set(FieldType) - set(FIELD_EXTRACTORS)
if _MISSING:  # pragma: no cover - guards future FieldType additions
    raise RuntimeError(f"Field extractors missing for {sorted(t.value for t in _MISSING)}")


def extract_field_values(
    schema: FieldSchema,
    view: FieldHost,
    *,
    registry: Mapping[FieldType, Extractor] = FIELD_EXTRACTORS,
) -> ValueMap:
    """Collect the value of every field in ``schema`` from ``view``.

    Fields are visited in schema order. Fields whose extractor yields
    :data:`NO_VALUE` are left out of the result. A field type missing from
    ``registry`` raises :class:`UnknownFieldTypeError`.
    """

    values: ValueMap = {}
    for key, descriptor in schema.items():
        extractor = registry.get(descriptor.type)
        if extractor is None:
            raise UnknownFieldTypeError(descriptor.type, key)
        value = extractor(view.field_input(key))
        if value is NO_VALUE:
            continue
        values[key] = value
    LOGGER.debug("Extracted %d of %d field value(s)", len(values), len(schema))
    return values
