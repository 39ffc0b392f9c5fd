"""Qt dialog view implementing the controller's view contract for every dialog kind."""

from __future__ import annotations

import logging
from typing import Any, Callable

from PySide6.QtCore import Signal
from PySide6.QtGui import QDoubleValidator
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from .errors import UnknownFieldTypeError, UnknownSelectorError
from .extractors import extract_field_values
from .models import (
    CustomSelector,
    DialogConfig,
    DialogKind,
    FieldDescriptor,
    FieldType,
    NamedSelector,
    normalize_choices,
)

__all__ = ["DialogView"]

LOGGER = logging.getLogger(__name__)

PROMPT_INPUT_NAME = "prompt_input"
MESSAGE_LABEL_NAME = "message_label"
BUTTON_BOX_NAME = "dialog_buttons"


class DialogView(QDialog):
    """Window-modal dialog rendering a :class:`DialogConfig`.

    ``closed`` fires exactly once with ``(result, source)`` where ``source`` is
    ``"accept"`` or ``"reject"``. Rejections always carry ``None``. When the
    value selector raises, ``failed`` fires with the exception instead and the
    dialog closes. After either signal the view schedules its own deletion.
    """

    closed = Signal(object, object)
    failed = Signal(object)
    action_triggered = Signal(str)

    def __init__(self, config: DialogConfig, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._config = config
        self._closed_emitted = False
        self._inputs: dict[str, QWidget] = {}
        self._prompt_input: QLineEdit | QComboBox | None = None
        self._named_selectors: dict[str, Callable[[], Any]] = {
            "prompt": self._select_prompt_value,
        }

        self.setObjectName(f"{config.kind.value}_dialog")
        self.setWindowTitle(config.title or "")
        self.setModal(True)
        self._build_layout()

    @property
    def config(self) -> DialogConfig:
        return self._config

    @property
    def has_closed(self) -> bool:
        return self._closed_emitted

    def present(self) -> None:
        """Show the dialog without blocking the event loop."""

        self.open()
        if self._config.auto_focus:
            target = self._first_focusable()
            if target is not None:
                target.setFocus()

    def field_input(self, key: str) -> QWidget:
        """Return the live input widget rendered for field ``key``."""

        try:
            return self._inputs[key]
        except KeyError:
            raise KeyError(f"Dialog has no field named '{key}'") from None

    def prompt_input(self) -> QLineEdit | QComboBox | None:
        return self._prompt_input

    def accept(self) -> None:  # noqa: D401 - Qt override
        if not self._closed_emitted:
            try:
                result = self._resolve_result()
            except Exception as exc:
                self._emit_failed(exc)
                super().reject()
                return
            self._emit_closed(result, "accept")
        super().accept()

    def reject(self) -> None:  # noqa: D401 - Qt override
        self._emit_closed(None, "reject")
        super().reject()

    # ------------------------------------------------------------------
    # Result resolution
    # ------------------------------------------------------------------
    def _resolve_result(self) -> Any:
        selector = self._config.value_selector
        if isinstance(selector, CustomSelector):
            return selector(self)
        if isinstance(selector, NamedSelector):
            strategy = self._named_selectors.get(selector.name)
            if strategy is None:
                raise UnknownSelectorError(selector.name)
            return strategy()
        kind = self._config.kind
        if kind is DialogKind.FIELDS:
            return extract_field_values(self._config.fields, self)
        if kind in (DialogKind.PROMPT, DialogKind.SELECT):
            return self._select_prompt_value()
        return True

    def _select_prompt_value(self) -> str | None:
        widget = self._prompt_input
        if isinstance(widget, QComboBox):
            data = widget.currentData()
            return widget.currentText() if data is None else data
        if isinstance(widget, QLineEdit):
            return widget.text()
        return None

    def _emit_closed(self, result: Any, source: str) -> None:
        if self._closed_emitted:
            return
        self._closed_emitted = True
        LOGGER.debug("%s closed via %s", self.objectName(), source)
        self.closed.emit(result, source)
        self.deleteLater()

    def _emit_failed(self, exc: Exception) -> None:
        if self._closed_emitted:
            return
        self._closed_emitted = True
        LOGGER.error("%s could not produce a result: %s", self.objectName(), exc)
        self.failed.emit(exc)
        self.deleteLater()

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    def _build_layout(self) -> None:
        layout = QVBoxLayout(self)
        config = self._config

        if config.message:
            message = QLabel(config.message)
            message.setObjectName(MESSAGE_LABEL_NAME)
            message.setWordWrap(True)
            layout.addWidget(message)

        if config.kind is DialogKind.FIELDS:
            layout.addLayout(self._build_form())
        elif config.kind is DialogKind.PROMPT:
            prompt = QLineEdit(_as_text(config.default))
            prompt.setObjectName(PROMPT_INPUT_NAME)
            self._prompt_input = prompt
            layout.addWidget(prompt)
        elif config.kind is DialogKind.SELECT:
            combo = QComboBox()
            combo.setObjectName(PROMPT_INPUT_NAME)
            _populate_combo(combo, config.choices, config.default)
            self._prompt_input = combo
            layout.addWidget(combo)

        if config.kind is DialogKind.ALERT:
            buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok)
        else:
            buttons = QDialogButtonBox(
                QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
            )
        buttons.setObjectName(BUTTON_BOX_NAME)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def _build_form(self) -> QFormLayout:
        form = QFormLayout()
        for key, descriptor in self._config.fields.items():
            initial = self._config.values.get(key)
            widget = self._build_field_input(key, descriptor, initial)
            widget.setObjectName(key)
            self._inputs[key] = widget
            if descriptor.type in (FieldType.CHECKBOX, FieldType.ACTION):
                form.addRow(widget)
            else:
                form.addRow(descriptor.label, widget)
        return form

    def _build_field_input(self, key: str, descriptor: FieldDescriptor, initial: Any) -> QWidget:
        builder = _FIELD_BUILDERS.get(descriptor.type)
        if builder is None:
            raise UnknownFieldTypeError(descriptor.type, key)
        widget = builder(descriptor, initial)
        if isinstance(widget, QPushButton):
            widget.clicked.connect(lambda _checked=False, name=key: self.action_triggered.emit(name))
        return widget

    def _first_focusable(self) -> QWidget | None:
        if self._prompt_input is not None:
            return self._prompt_input
        for widget in self._inputs.values():
            if not isinstance(widget, QPushButton):
                return widget
        return None


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def _populate_combo(combo: QComboBox, choices: tuple[tuple[str, str], ...], current: Any) -> None:
    for value, label in choices:
        combo.addItem(label, value)
    if current is None:
        return
    index = combo.findData(str(current))
    if index >= 0:
        combo.setCurrentIndex(index)


def _line_edit(descriptor: FieldDescriptor, initial: Any) -> QLineEdit:
    widget = QLineEdit(_as_text(initial))
    placeholder = descriptor.constraints.get("placeholder")
    if placeholder:
        widget.setPlaceholderText(str(placeholder))
    return widget


def _password_edit(descriptor: FieldDescriptor, initial: Any) -> QLineEdit:
    widget = _line_edit(descriptor, initial)
    widget.setEchoMode(QLineEdit.EchoMode.Password)
    return widget


def _number_edit(descriptor: FieldDescriptor, initial: Any) -> QLineEdit:
    widget = _line_edit(descriptor, initial)
    constraints = descriptor.constraints
    validator = QDoubleValidator(widget)
    if "minimum" in constraints:
        validator.setBottom(float(constraints["minimum"]))
    if "maximum" in constraints:
        validator.setTop(float(constraints["maximum"]))
    if "decimals" in constraints:
        validator.setDecimals(int(constraints["decimals"]))
    widget.setValidator(validator)
    return widget


def _text_area(descriptor: FieldDescriptor, initial: Any) -> QPlainTextEdit:
    widget = QPlainTextEdit()
    widget.setPlainText(_as_text(initial))
    placeholder = descriptor.constraints.get("placeholder")
    if placeholder:
        widget.setPlaceholderText(str(placeholder))
    return widget


def _choice_box(descriptor: FieldDescriptor, initial: Any) -> QComboBox:
    widget = QComboBox()
    _populate_combo(widget, normalize_choices(descriptor.constraints.get("options")), initial)
    return widget


def _check_box(descriptor: FieldDescriptor, initial: Any) -> QCheckBox:
    widget = QCheckBox(descriptor.label)
    widget.setChecked(bool(initial))
    return widget


def _action_button(descriptor: FieldDescriptor, initial: Any) -> QPushButton:
    return QPushButton(descriptor.label)


_FIELD_BUILDERS: dict[FieldType, Callable[[FieldDescriptor, Any], QWidget]] = {
    FieldType.TEXT: _line_edit,
    FieldType.PASSWORD: _password_edit,
    FieldType.TEXTAREA: _text_area,
    FieldType.NUMBER: _number_edit,
    FieldType.SELECT: _choice_box,
    FieldType.CHECKBOX: _check_box,
    FieldType.ACTION: _action_button,
}
