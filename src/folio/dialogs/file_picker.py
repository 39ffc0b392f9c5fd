"""Single-instance native file-selection surface.

Only one surface exists at a time: every :meth:`FilePicker.pick` call first
evicts the previous one, failing its pending outcome with
:class:`NoFileSelectedError`. A surface is hidden until triggered, reports one
selection, and is torn down right after.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from PySide6.QtWidgets import QFileDialog, QWidget

from .errors import NoFileSelectedError
from .models import FilePickerOptions

__all__ = ["FilePicker", "SurfaceFactory", "default_surface_factory"]

LOGGER = logging.getLogger(__name__)

SURFACE_OBJECT_NAME = "file_dialog"

SurfaceFactory = Callable[["QWidget | None"], QFileDialog]


def default_surface_factory(parent: QWidget | None) -> QFileDialog:
    return QFileDialog(parent)


class _PickerSession:
    """Wires one surface to one outcome and tears both down together."""

    def __init__(
        self,
        surface: QFileDialog,
        outcome: asyncio.Future[str],
        on_finished: Callable[["_PickerSession"], None],
    ) -> None:
        self.surface = surface
        self.outcome = outcome
        self._on_finished = on_finished
        surface.fileSelected.connect(self._handle_change)
        surface.rejected.connect(self._handle_dismissed)

    def _handle_change(self, path: str) -> None:
        if self.outcome.done():
            return
        if path:
            LOGGER.debug("File surface selected %s", path)
            self.outcome.set_result(path)
        else:
            self.outcome.set_exception(NoFileSelectedError())
        self.dispose()

    def _handle_dismissed(self) -> None:
        self._handle_change("")

    def dispose(self, *, close: bool = False) -> None:
        surface = self.surface
        surface.fileSelected.disconnect(self._handle_change)
        surface.rejected.disconnect(self._handle_dismissed)
        if close:
            surface.hide()
        surface.deleteLater()
        self._on_finished(self)


class FilePicker:
    """Drive the native file dialog and expose its selection as a future."""

    __slots__ = ("_surface_factory", "_parent_provider", "_session")

    def __init__(
        self,
        surface_factory: SurfaceFactory | None = None,
        *,
        parent_provider: Callable[[], QWidget | None] | None = None,
    ) -> None:
        self._surface_factory = surface_factory or default_surface_factory
        self._parent_provider = parent_provider
        self._session: _PickerSession | None = None

    @property
    def active_surface(self) -> QFileDialog | None:
        """Return the surface currently awaiting a selection, if any."""

        return self._session.surface if self._session is not None else None

    def pick(self, options: FilePickerOptions | None = None) -> asyncio.Future[str]:
        """Open a fresh surface configured by ``options`` and return its outcome."""

        loop = asyncio.get_running_loop()
        self._evict_stale_surface()

        parent = self._parent_provider() if self._parent_provider else None
        surface = self._surface_factory(parent)
        surface.setObjectName(SURFACE_OBJECT_NAME)
        surface.hide()
        _apply_options(surface, options or FilePickerOptions())

        outcome: asyncio.Future[str] = loop.create_future()
        self._session = _PickerSession(surface, outcome, self._forget)
        surface.open()
        return outcome

    def _evict_stale_surface(self) -> None:
        session = self._session
        if session is None:
            return
        LOGGER.debug("Evicting stale file surface")
        if not session.outcome.done():
            session.outcome.add_done_callback(_consume_evicted)
            session.outcome.set_exception(NoFileSelectedError())
        session.dispose(close=True)

    def _forget(self, session: _PickerSession) -> None:
        if self._session is session:
            self._session = None


def _consume_evicted(outcome: asyncio.Future[str]) -> None:
    # The caller may have dropped this future already.
    if not outcome.cancelled():
        outcome.exception()


def _apply_options(surface: QFileDialog, options: FilePickerOptions) -> None:
    if options.caption:
        surface.setWindowTitle(options.caption)
    if options.working_dir:
        surface.setDirectory(options.working_dir)
    if options.file_filter:
        surface.setNameFilter(options.file_filter)
    if options.directory:
        surface.setFileMode(QFileDialog.FileMode.Directory)
        surface.setOption(QFileDialog.Option.ShowDirsOnly, True)
    elif options.save_as is not None:
        surface.setAcceptMode(QFileDialog.AcceptMode.AcceptSave)
        surface.setFileMode(QFileDialog.FileMode.AnyFile)
        if options.save_as:
            surface.selectFile(options.save_as)
    else:
        surface.setFileMode(QFileDialog.FileMode.ExistingFile)
