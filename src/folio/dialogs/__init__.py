"""Modal dialog orchestration for the editor shell.

Dialog builders return awaitable outcomes backed by a lifecycle controller:

    - DialogController: runs one view to a single resolved/rejected outcome
    - DialogView: Qt view rendering every dialog kind
    - FilePicker: single-instance native file-selection surface
    - Dialogs: typed builders (fields, prompt, select, confirm, alert, file, ...)
    - DialogWorkflows: settings and account workflows
"""

from __future__ import annotations

from .builders import Dialogs
from .controller import DialogController
from .errors import (
    DialogCancelled,
    DialogConfigurationError,
    DialogError,
    NoFileSelectedError,
    UnknownFieldTypeError,
    UnknownSelectorError,
)
from .extractors import FIELD_EXTRACTORS, NO_VALUE, extract_field_values
from .file_picker import FilePicker
from .models import (
    PROMPT_SELECTOR,
    CustomSelector,
    DialogConfig,
    DialogKind,
    FieldDescriptor,
    FieldSchema,
    FieldType,
    FilePickerOptions,
    NamedSelector,
    ValueMap,
)
from .views import DialogView
from .workflows import DialogWorkflows

__all__: list[str] = [
    "CustomSelector",
    "DialogCancelled",
    "DialogConfig",
    "DialogConfigurationError",
    "DialogController",
    "DialogError",
    "DialogKind",
    "DialogView",
    "DialogWorkflows",
    "Dialogs",
    "FIELD_EXTRACTORS",
    "FieldDescriptor",
    "FieldSchema",
    "FieldType",
    "FilePicker",
    "FilePickerOptions",
    "NO_VALUE",
    "NamedSelector",
    "NoFileSelectedError",
    "PROMPT_SELECTOR",
    "UnknownFieldTypeError",
    "UnknownSelectorError",
    "ValueMap",
    "extract_field_values",
]
