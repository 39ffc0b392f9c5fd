"""Typed dialog builders layered over :class:`DialogController` and :class:`FilePicker`."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any, Mapping, NoReturn, Sequence

from .controller import DialogController, ReadyListener, ViewFactory
from .extractors import extract_field_values
from .file_picker import FilePicker
from .models import (
    PROMPT_SELECTOR,
    CustomSelector,
    DialogConfig,
    DialogKind,
    FieldSchema,
    FilePickerOptions,
    ValueMap,
)

__all__ = ["Dialogs", "ERROR_TITLE"]

LOGGER = logging.getLogger(__name__)

ERROR_TITLE = "Error:"


class Dialogs:
    """Entry point for opening modal dialogs from application code.

    Every builder assembles a fresh :class:`DialogConfig` and returns an
    awaitable outcome. Dismissing a dialog fails the outcome with
    :class:`~folio.dialogs.errors.DialogCancelled`.

    Example::

        dialogs = Dialogs()
        name = await dialogs.prompt("Rename", "New chapter title", "Untitled")
        target = await dialogs.save_as("book.md", str(Path.home()))
    """

    __slots__ = ("_controller", "_file_picker")

    def __init__(
        self,
        controller: DialogController | None = None,
        file_picker: FilePicker | None = None,
    ) -> None:
        self._controller = controller or DialogController()
        self._file_picker = file_picker or FilePicker()

    @property
    def controller(self) -> DialogController:
        return self._controller

    @property
    def file_picker(self) -> FilePicker:
        return self._file_picker

    def open(
        self,
        config: DialogConfig,
        view_cls: ViewFactory | None = None,
        *,
        on_ready: ReadyListener | None = None,
    ) -> asyncio.Future[Any]:
        """Open an arbitrary dialog configuration."""

        return self._controller.open(config, view_cls, on_ready=on_ready)

    def fields(
        self,
        title: str | None,
        fields: FieldSchema,
        values: Mapping[str, Any] | None = None,
    ) -> asyncio.Future[ValueMap]:
        """Open a form with one input per entry of ``fields``.

        Resolves with the extracted :data:`~folio.dialogs.models.ValueMap`.
        """

        return self.open(
            DialogConfig(
                kind=DialogKind.FIELDS,
                title=title,
                fields=fields,
                values=values or {},
                auto_focus=True,
                value_selector=CustomSelector(partial(extract_field_values, fields)),
            )
        )

    def prompt(
        self,
        title: str | None,
        message: str | None,
        default: str | None = None,
    ) -> asyncio.Future[str]:
        return self.open(
            DialogConfig(
                kind=DialogKind.PROMPT,
                title=title,
                message=message,
                default=default,
                auto_focus=True,
                value_selector=PROMPT_SELECTOR,
            )
        )

    def select(
        self,
        title: str | None,
        message: str | None,
        choices: Mapping[str, str] | Sequence[str],
        default: str | None = None,
    ) -> asyncio.Future[str]:
        """Ask the user to pick one of ``choices`` (values or value->label map)."""

        return self.open(
            DialogConfig(
                kind=DialogKind.SELECT,
                title=title,
                message=message,
                default=default,
                choices=choices,
                auto_focus=True,
                value_selector=PROMPT_SELECTOR,
            )
        )

    def confirm(self, title: str | None, message: str | None = None) -> asyncio.Future[Any]:
        """Ask for confirmation; ``confirm("Sure?")`` means a message without title."""

        if not message:
            title, message = None, title
        return self.open(DialogConfig(kind=DialogKind.CONFIRM, title=title, message=message))

    def alert(self, title: str | None, message: str | None = None) -> asyncio.Future[Any]:
        return self.open(DialogConfig(kind=DialogKind.ALERT, title=title, message=message))

    def file(self, options: FilePickerOptions | None = None) -> asyncio.Future[str]:
        """Show the native file picker and resolve with the chosen path."""

        return self._file_picker.pick(options)

    def save_as(self, path: str, base_path: str | None = None) -> asyncio.Future[str]:
        return self.file(FilePickerOptions(save_as=path, working_dir=base_path))

    def folder(self) -> asyncio.Future[str]:
        return self.file(FilePickerOptions(directory=True))

    async def error(self, err: BaseException) -> NoReturn:
        """Show ``err`` in an alert, then raise it again.

        The alert is not awaited; the caller sees the failure immediately.
        """

        message = str(err) or type(err).__name__
        LOGGER.warning("Surfacing error to user: %s", message)
        self.show_detached(self.alert(ERROR_TITLE, message))
        raise err

    @staticmethod
    def show_detached(outcome: asyncio.Future[Any]) -> asyncio.Future[Any]:
        """Let ``outcome`` finish on its own, consuming its result or failure."""

        outcome.add_done_callback(_consume_outcome)
        return outcome


def _consume_outcome(outcome: asyncio.Future[Any]) -> None:
    if outcome.cancelled():
        return
    exc = outcome.exception()
    if exc is not None:
        LOGGER.debug("Detached dialog finished with %s", type(exc).__name__)
