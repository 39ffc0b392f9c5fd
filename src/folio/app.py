"""Application bootstrap helpers for the Folio dialog workflows."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence, cast

from .dialogs import DialogController, Dialogs, DialogWorkflows, FilePicker
from .services.account import AccountClient, AccountConfig
from .services.settings import Settings, SettingsSession, SettingsStore
from .utils import logging as logging_utils

_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}
_LOGGER = logging.getLogger(__name__)
_WORKFLOWS = ("settings", "connect-account")
_LOG_DIR_ENV = "FOLIO_LOG_DIR"
_LOG_FILENAME = "folio.log"
_NOISY_LOGGERS = ("asyncio", "qasync", "httpx", "httpcore")


@dataclass(slots=True)
class QtRuntime:
    """Container returned by :func:`create_qapp`."""

    app: Any
    loop: asyncio.AbstractEventLoop


@dataclass(slots=True)
class DialogServices:
    """Wiring produced by :func:`build_services`."""

    session: SettingsSession
    dialogs: Dialogs
    account: AccountClient
    workflows: DialogWorkflows


def configure_logging(debug: bool = False, *, force: bool = False) -> Path:
    """Send application logs to the rotating log file and the console."""

    level = logging.DEBUG if debug else logging.INFO
    log_path = logging_utils.setup_logging(
        resolve_log_path(), level, quiet=_NOISY_LOGGERS, force=force
    )
    _LOGGER.debug("Logging to %s (level=%s)", log_path, logging.getLevelName(level))
    return log_path


def resolve_log_path() -> Path:
    """Return the log file, honouring ``FOLIO_LOG_DIR``."""

    log_dir = os.environ.get(_LOG_DIR_ENV) or Path.home() / ".folio" / "logs"
    return Path(log_dir).expanduser() / _LOG_FILENAME


def load_settings(
    path: Optional[Path] = None,
    *,
    store: SettingsStore | None = None,
) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    try:
        return active_store.load()
    except (OSError, ValueError) as exc:
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        return Settings()


def build_services(session: SettingsSession, *, parent: Any = None) -> DialogServices:
    """Wire dialogs, the account client, and workflows around ``session``."""

    parent_provider = (lambda: parent) if parent is not None else None
    dialogs = Dialogs(
        DialogController(parent_provider=parent_provider),
        FilePicker(parent_provider=parent_provider),
    )
    account = AccountClient(AccountConfig(host=session.settings.host))
    workflows = DialogWorkflows(dialogs, session, account)
    return DialogServices(session=session, dialogs=dialogs, account=account, workflows=workflows)


def create_qapp() -> QtRuntime:
    """Create a qasync-powered QApplication instance."""

    try:  # Local import to avoid mandatory PySide6 dependency at import time.
        from PySide6.QtWidgets import QApplication
    except ImportError as exc:  # pragma: no cover - depends on desktop stack
        raise RuntimeError("PySide6 must be installed to launch Folio dialogs.") from exc

    try:
        from qasync import QEventLoop
    except ImportError as exc:  # pragma: no cover - depends on env setup
        raise RuntimeError("qasync is required to run the async Qt event loop.") from exc

    app = cast(Any, QApplication.instance() or QApplication(sys.argv))
    app.setApplicationName("Folio")
    app.setQuitOnLastWindowClosed(False)

    loop = QEventLoop(app)
    asyncio.set_event_loop(loop)
    return QtRuntime(app=app, loop=loop)


async def run_workflow(name: str, services: DialogServices) -> int:
    """Run the named workflow and return a process exit code."""

    workflows = services.workflows
    try:
        if name == "settings":
            await workflows.settings()
        elif name == "connect-account":
            await workflows.connect_account()
        else:
            raise ValueError(f"Unknown workflow '{name}'")
    except Exception as exc:
        _LOGGER.error("Workflow %s failed: %s", name, exc)
        return 1
    finally:
        await services.account.aclose()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point invoked by the `folio-dialogs` console script."""

    args = _parse_cli_args(argv)
    debug = args.debug or _env_flag("FOLIO_DEBUG", default=False)
    configure_logging(debug)

    settings_path = args.settings_path or os.environ.get("FOLIO_SETTINGS_PATH")
    resolved_path = Path(settings_path).expanduser() if settings_path else None
    store = SettingsStore(resolved_path)
    session = SettingsSession(store, load_settings(resolved_path, store=store))
    if session.settings.debug_logging and not debug:
        configure_logging(True, force=True)

    runtime = create_qapp()
    services = build_services(session)
    loop = runtime.loop
    try:
        with loop:
            return loop.run_until_complete(run_workflow(args.workflow, services))
    except KeyboardInterrupt:  # pragma: no cover - manual shutdown path
        _LOGGER.info("Shutdown requested by user.")
        return 130
    finally:
        with contextlib.suppress(RuntimeError):
            runtime.app.quit()
        logging_utils.shutdown_logging()


def _parse_cli_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="folio-dialogs", description="Run a Folio dialog workflow.")
    parser.add_argument("workflow", choices=_WORKFLOWS, help="Workflow to run.")
    parser.add_argument("--settings-path", dest="settings_path", help="Path to settings.json.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser.parse_args(list(argv) if argv is not None else None)


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
