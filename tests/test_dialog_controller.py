"""Tests for the dialog lifecycle controller."""

from __future__ import annotations

import asyncio

import pytest

from folio.dialogs.controller import DialogController
from folio.dialogs.errors import DialogCancelled, UnknownSelectorError
from folio.dialogs.models import DialogConfig, DialogKind
from tests.helpers import FakeDialogView


def _config(kind: DialogKind = DialogKind.CONFIRM) -> DialogConfig:
    return DialogConfig(kind=kind, title="Title", message="Message")


def _open(controller: DialogController, **kwargs) -> tuple[asyncio.Future, FakeDialogView]:
    captured: list[FakeDialogView] = []
    outcome = controller.open(_config(), on_ready=captured.append, **kwargs)
    return outcome, captured[0]


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"name": "x"}, "text", 0, "", False, True, []])
async def test_open_resolves_with_any_non_none_payload(payload) -> None:
    controller = DialogController(FakeDialogView)
    outcome, view = _open(controller)

    view.close_with(payload)

    assert await outcome == payload


@pytest.mark.asyncio
async def test_open_rejects_when_dialog_closes_with_none() -> None:
    controller = DialogController(FakeDialogView)
    outcome, view = _open(controller)

    view.close_with(None, "reject")

    with pytest.raises(DialogCancelled) as excinfo:
        await outcome
    assert excinfo.value.result is None


@pytest.mark.asyncio
async def test_second_close_is_ignored() -> None:
    controller = DialogController(FakeDialogView)
    outcome, view = _open(controller)

    view.close_with("first")
    view.close_with(None)
    view.close_with("second")

    assert await outcome == "first"


@pytest.mark.asyncio
async def test_view_failure_rejects_outcome_with_reported_exception() -> None:
    controller = DialogController(FakeDialogView)
    outcome, view = _open(controller)
    failure = UnknownSelectorError("nope")

    view.fail_with(failure)
    view.close_with("late")

    with pytest.raises(UnknownSelectorError) as excinfo:
        await outcome
    assert excinfo.value is failure
    assert view.failed.slot_count == 1


@pytest.mark.asyncio
async def test_outcome_stays_pending_until_view_closes() -> None:
    controller = DialogController(FakeDialogView)
    outcome, view = _open(controller)

    await asyncio.sleep(0)

    assert not outcome.done()
    view.close_with("done")
    assert await outcome == "done"


@pytest.mark.asyncio
async def test_lifecycle_order_is_construct_ready_present() -> None:
    controller = DialogController(FakeDialogView)
    controller.add_ready_listener(lambda view: FakeDialogView.events.append("ready"))

    outcome = controller.open(_config())

    assert FakeDialogView.events == ["construct", "ready", "present"]
    outcome.cancel()


@pytest.mark.asyncio
async def test_subscribes_to_close_exactly_once() -> None:
    controller = DialogController(FakeDialogView)
    outcome, view = _open(controller)

    assert view.closed.slot_count == 1
    assert view.presented is True
    outcome.cancel()


@pytest.mark.asyncio
async def test_ready_listeners_receive_live_view_and_failures_are_contained() -> None:
    controller = DialogController(FakeDialogView)
    seen: list[FakeDialogView] = []

    def broken(view: FakeDialogView) -> None:
        raise RuntimeError("boom")

    controller.add_ready_listener(broken)
    controller.add_ready_listener(seen.append)
    outcome = controller.open(_config())

    assert len(seen) == 1
    assert seen[0].config.kind is DialogKind.CONFIRM
    assert seen[0].presented is True

    controller.remove_ready_listener(seen.append)
    controller.remove_ready_listener(seen.append)
    seen[0].close_with(True)
    assert await outcome is True


@pytest.mark.asyncio
async def test_per_call_view_class_overrides_default() -> None:
    class OtherView(FakeDialogView):
        pass

    controller = DialogController(FakeDialogView, parent_provider=lambda: "main-window")
    captured: list[FakeDialogView] = []

    outcome = controller.open(_config(), OtherView, on_ready=captured.append)

    assert isinstance(captured[0], OtherView)
    assert captured[0].parent == "main-window"
    captured[0].close_with("ok")
    assert await outcome == "ok"


@pytest.mark.asyncio
async def test_cancelling_outcome_dismisses_view() -> None:
    controller = DialogController(FakeDialogView)
    outcome, view = _open(controller)

    outcome.cancel()
    await asyncio.sleep(0)

    assert view.rejected is True
    assert outcome.cancelled()


@pytest.mark.asyncio
async def test_each_open_builds_a_new_view() -> None:
    controller = DialogController(FakeDialogView)
    first, first_view = _open(controller)
    second, second_view = _open(controller)

    assert first_view is not second_view
    first_view.close_with("a")
    second_view.close_with("b")
    assert (await first, await second) == ("a", "b")
