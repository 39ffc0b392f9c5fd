"""Dialog lifecycle controller.

Runs one dialog view to completion and exposes the completion as an
``asyncio.Future``. The view contract is small:

* ``view_cls(config, parent=None)`` constructs the view,
* ``view.closed`` is a signal with ``connect`` emitting ``(result, source)``,
* ``view.present()`` renders the view and shows it.

A view may also expose a ``failed`` signal emitting an exception raised while
producing its result; the outcome then fails with that exception.

Any Qt ``QDialog`` subclass following that contract works, as does a plain
Python object with a signal-like ``closed`` attribute.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from .errors import DialogCancelled
from .models import DialogConfig

__all__ = ["DialogController", "ReadyListener", "ViewFactory"]

LOGGER = logging.getLogger(__name__)

ViewFactory = Callable[..., Any]
ReadyListener = Callable[[Any], None]


class _Completion:
    """One-shot bridge between a view's ``closed`` signal and a future.

    The first close settles the future; later closes are ignored and logged.
    """

    __slots__ = ("_future", "_label", "_settled", "__weakref__")

    def __init__(self, future: asyncio.Future[Any], label: str) -> None:
        self._future = future
        self._label = label
        self._settled = False

    def __call__(self, result: Any = None, source: Any = None) -> None:
        if self._settled:
            LOGGER.debug("Ignoring repeated close for %s dialog (source=%s)", self._label, source)
            return
        self._settled = True
        if self._future.done():
            return
        if result is not None:
            LOGGER.debug("%s dialog resolved (source=%s)", self._label, source)
            self._future.set_result(result)
        else:
            LOGGER.debug("%s dialog dismissed (source=%s)", self._label, source)
            self._future.set_exception(DialogCancelled(result))

    def fail(self, exc: BaseException) -> None:
        if self._settled:
            LOGGER.debug("Ignoring failure after close for %s dialog: %s", self._label, exc)
            return
        self._settled = True
        if not self._future.done():
            self._future.set_exception(exc)

    @property
    def settled(self) -> bool:
        return self._settled


class DialogController:
    """Open dialog views and turn their close signal into a single outcome.

    Example::

        controller = DialogController()
        values = await controller.open(DialogConfig(kind=DialogKind.ALERT, message="Saved"))
    """

    __slots__ = ("_view_cls", "_parent_provider", "_ready_listeners")

    def __init__(
        self,
        view_cls: ViewFactory | None = None,
        *,
        parent_provider: Callable[[], Any] | None = None,
    ) -> None:
        self._view_cls = view_cls
        self._parent_provider = parent_provider
        self._ready_listeners: list[ReadyListener] = []

    def add_ready_listener(self, listener: ReadyListener) -> None:
        """Register ``listener`` to receive every view once it is constructed."""

        self._ready_listeners.append(listener)

    def remove_ready_listener(self, listener: ReadyListener) -> None:
        if listener in self._ready_listeners:
            self._ready_listeners.remove(listener)

    def open(
        self,
        config: DialogConfig,
        view_cls: ViewFactory | None = None,
        *,
        on_ready: ReadyListener | None = None,
    ) -> asyncio.Future[Any]:
        """Construct a view for ``config`` and return its pending outcome.

        The view is built, exposed to ready listeners, then presented, in that
        order. The returned future resolves with any non-``None`` close result
        (including ``0``, ``""`` and ``False``) and fails with
        :class:`DialogCancelled` when the view closes with ``None``. A view that
        reports ``failed`` fails the future with the reported exception.
        Cancelling the future dismisses the view.
        """

        loop = asyncio.get_running_loop()
        outcome: asyncio.Future[Any] = loop.create_future()
        factory = view_cls or self._view_cls or _default_view_cls()
        parent = self._parent_provider() if self._parent_provider else None

        view = factory(config, parent=parent)
        completion = _Completion(outcome, config.kind.value)
        view.closed.connect(completion)
        failed = getattr(view, "failed", None)
        if failed is not None:
            failed.connect(completion.fail)
        outcome.add_done_callback(lambda future: _dismiss_if_cancelled(future, view, completion))

        listeners = list(self._ready_listeners)
        if on_ready is not None:
            listeners.append(on_ready)
        for listener in listeners:
            try:
                listener(view)
            except Exception:
                LOGGER.exception("Dialog ready listener %r failed", listener)

        view.present()
        return outcome


def _dismiss_if_cancelled(future: asyncio.Future[Any], view: Any, completion: _Completion) -> None:
    if not future.cancelled() or completion.settled:
        return
    LOGGER.debug("Outcome cancelled by caller; dismissing %s", type(view).__name__)
    reject = getattr(view, "reject", None)
    if callable(reject):
        reject()


def _default_view_cls() -> ViewFactory:
    from .views import DialogView

    return DialogView
