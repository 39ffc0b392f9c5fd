"""Settings dataclass, on-disk persistence, and the live settings session."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

from cryptography.fernet import Fernet, InvalidToken

__all__ = [
    "Settings",
    "SettingsStore",
    "SettingsSession",
    "SecretVault",
    "DEFAULT_HOST",
    "redact_secret",
]

LOGGER = logging.getLogger(__name__)
_SETTINGS_DIR = Path.home() / ".folio"
_DEFAULT_SETTINGS_PATH = _SETTINGS_DIR / "settings.json"
_SETTINGS_VERSION = 1
_ENV_OVERRIDES: Mapping[str, str] = {
    "FOLIO_HOST": "host",
    "FOLIO_USERNAME": "username",
    "FOLIO_TOKEN": "token",
}
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "FOLIO_AUTO_FILE_MANAGEMENT": "auto_file_management",
    "FOLIO_DEBUG_LOGGING": "debug_logging",
}
_TRUE_VALUES = {"1", "true", "yes", "on"}
_TOKEN_FIELD = "token_ciphertext"
DEFAULT_HOST = "https://www.gitbook.com"


@dataclass(slots=True)
class Settings:
    """User-configurable settings persisted between sessions."""

    auto_file_management: bool = True
    username: str = ""
    token: str = ""
    host: str = DEFAULT_HOST
    debug_logging: bool = False


_FIELD_DEFAULTS: Dict[str, Any] = {
    item.name: item.default for item in fields(Settings)
}


class SettingsStore:
    """Persistence adapter for :class:`Settings`."""

    def __init__(self, path: Path | None = None, *, vault: SecretVault | None = None) -> None:
        self._path = path or _DEFAULT_SETTINGS_PATH
        self._vault = vault or SecretVault(key_path=self._path.with_suffix(".key"))

    @property
    def path(self) -> Path:
        """Return the resolved path backing this store."""

        return self._path

    @property
    def vault(self) -> SecretVault:
        return self._vault

    def load(self) -> Settings:
        """Load settings from disk, then apply ``FOLIO_*`` environment overrides."""

        payload = self._read_payload()
        settings = Settings()
        needs_migration = False

        if payload:
            token, migrated = self._decrypt_token(payload.pop(_TOKEN_FIELD, None), payload.pop("token", None))
            needs_migration = migrated
            data = _filter_fields(payload)
            try:
                settings = Settings(**data)
            except TypeError as exc:
                LOGGER.warning("Settings payload contained unexpected data: %s", exc)
                settings = Settings()
            if token:
                settings = replace(settings, token=token)

        version_mismatch = bool(payload) and payload.get("version") != _SETTINGS_VERSION
        if needs_migration or version_mismatch:
            try:
                self.save(settings)
            except OSError as exc:  # pragma: no cover - read-only profile dirs
                LOGGER.warning("Failed to migrate settings payload: %s", exc)

        settings = self._apply_env_overrides(settings)
        LOGGER.debug("Settings loaded from %s (user=%s)", self._path, settings.username or "-")
        return settings

    def save(self, settings: Settings) -> Path:
        """Persist settings to disk with atomic file writes."""

        payload = self._serialize(settings)
        body = json.dumps(payload, indent=2, sort_keys=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(self._path)
        LOGGER.debug("Settings saved to %s", self._path)
        return self._path

    def _serialize(self, settings: Settings) -> Dict[str, Any]:
        data = asdict(settings)
        token = data.pop("token", "") or ""
        if token:
            data[_TOKEN_FIELD] = self._vault.encrypt(token)
        data["version"] = _SETTINGS_VERSION
        return data

    def _read_payload(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self._path, exc)
            return {}
        if not isinstance(payload, dict):
            LOGGER.warning("Settings file %s does not contain an object", self._path)
            return {}
        return payload

    def _apply_env_overrides(self, settings: Settings) -> Settings:
        overrides: Dict[str, Any] = {}
        for env_name, field_name in _ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value
        for env_name, field_name in _BOOL_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value.strip().lower() in _TRUE_VALUES
        if overrides:
            settings = _apply_overrides(settings, overrides)
        return settings

    def _decrypt_token(self, ciphertext: str | None, legacy_plaintext: str | None) -> tuple[str, bool]:
        if ciphertext:
            try:
                return self._vault.decrypt(ciphertext), False
            except ValueError as exc:
                LOGGER.warning("Unable to decrypt account token: %s", exc)
                return "", False
        if legacy_plaintext:
            LOGGER.info("Detected legacy plaintext token; migrating to encrypted storage.")
            return legacy_plaintext, True
        return "", False


class SettingsSession:
    """Live, explicitly passed settings state with a get/set/persist contract.

    ``set`` accepts either a single key and value or a mapping of updates and
    coerces values to the type of the matching :class:`Settings` field.
    Nothing reaches disk until :meth:`persist` runs.
    """

    __slots__ = ("_store", "_settings")

    def __init__(self, store: SettingsStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings if settings is not None else store.load()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def store(self) -> SettingsStore:
        return self._store

    def to_dict(self) -> dict[str, Any]:
        return asdict(self._settings)

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self._settings, key, default)

    def set(self, key: str | Mapping[str, Any], value: Any = None) -> None:
        updates = dict(key) if isinstance(key, Mapping) else {key: value}
        unknown = sorted(name for name in updates if name not in _FIELD_DEFAULTS)
        if unknown:
            raise KeyError(f"Unknown setting(s): {', '.join(unknown)}")
        coerced = {name: _coerce_value(name, item) for name, item in updates.items()}
        self._settings = replace(self._settings, **coerced)

    def persist(self) -> Path:
        return self._store.save(self._settings)


class SecretVault:
    """Encrypts and decrypts sensitive strings with a Fernet key kept on disk."""

    strategy = "fernet"

    def __init__(self, *, key_path: Path | None = None) -> None:
        self._key_path = key_path or (_SETTINGS_DIR / "settings.key")
        self._fernet: Fernet | None = None

    def encrypt(self, secret: str) -> str:
        if not secret:
            return ""
        token = self._get_fernet().encrypt(secret.encode("utf-8")).decode("ascii")
        return f"{self.strategy}:{token}"

    def decrypt(self, token: str | None) -> str:
        if not token:
            return ""
        prefix, _, payload = token.partition(":")
        if not payload:
            payload = prefix
        elif prefix != self.strategy:
            raise ValueError(f"Unsupported secret backend '{prefix}'")
        try:
            return self._get_fernet().decrypt(payload.encode("ascii")).decode("utf-8")
        except InvalidToken as exc:
            raise ValueError("Invalid Fernet token") from exc

    def _get_fernet(self) -> Fernet:
        if self._fernet is None:
            self._fernet = Fernet(self._load_or_create_key())
        return self._fernet

    def _load_or_create_key(self) -> bytes:
        path = self._key_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists():
            return path.read_bytes().strip()
        key = Fernet.generate_key()
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_bytes(key)
        if os.name != "nt":  # pragma: no cover - depends on OS
            os.chmod(tmp_path, 0o600)
        tmp_path.replace(path)
        return key


def _filter_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    allowed = set(_FIELD_DEFAULTS) - {"token"}
    return {key: value for key, value in payload.items() if key in allowed}


def _apply_overrides(settings: Settings, overrides: Mapping[str, Any]) -> Settings:
    filtered = {
        key: _coerce_value(key, value)
        for key, value in overrides.items()
        if key in _FIELD_DEFAULTS and value is not None
    }
    if filtered:
        LOGGER.debug("Applying environment settings overrides: %s", sorted(filtered))
        settings = replace(settings, **filtered)
    return settings


def _coerce_value(name: str, value: Any) -> Any:
    default = _FIELD_DEFAULTS.get(name)
    if isinstance(default, bool):
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_VALUES
        return bool(value)
    if isinstance(default, str):
        return "" if value is None else str(value)
    return value


def redact_secret(value: str) -> str:
    stripped = (value or "").strip()
    if not stripped:
        return ""
    if len(stripped) <= 4:
        return "*" * len(stripped)
    return f"{stripped[:2]}{'*' * (len(stripped) - 4)}{stripped[-2:]}"
