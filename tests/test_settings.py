"""Tests for the settings persistence layer."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from folio.services.settings import (
    DEFAULT_HOST,
    SecretVault,
    Settings,
    SettingsSession,
    SettingsStore,
    redact_secret,
)


def test_load_returns_defaults_when_file_missing(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "settings.json", vault=SecretVault(key_path=tmp_path / "key"))

    settings = store.load()

    assert settings == Settings()
    assert settings.host == DEFAULT_HOST
    assert settings.auto_file_management is True
    assert not (tmp_path / "settings.json").exists()


def test_save_and_load_roundtrip(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    store = SettingsStore(path)
    original = Settings(
        auto_file_management=False,
        username="ada",
        token="api-token",
        host="https://books.example.com",
        debug_logging=True,
    )

    store.save(original)
    reloaded = SettingsStore(path).load()

    assert reloaded == original


def test_token_is_encrypted_on_disk(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    SettingsStore(path).save(Settings(username="ada", token="api-token"))

    payload = json.loads(path.read_text(encoding="utf-8"))

    assert "token" not in payload
    assert payload["token_ciphertext"].startswith("fernet:")
    assert "api-token" not in path.read_text(encoding="utf-8")
    assert payload["version"] == 1


def test_load_legacy_plaintext_token_migrates(tmp_path: Path) -> None:
    target = tmp_path / "settings.json"
    target.write_text(json.dumps({"username": "ada", "token": "plain-token"}), encoding="utf-8")

    loaded = SettingsStore(target).load()

    assert loaded.token == "plain-token"
    assert loaded.username == "ada"
    payload = json.loads(target.read_text(encoding="utf-8"))
    assert "token" not in payload
    assert payload["token_ciphertext"].startswith("fernet:")
    assert payload["version"] == 1


def test_undecryptable_token_is_dropped(tmp_path: Path) -> None:
    target = tmp_path / "settings.json"
    target.write_text(
        json.dumps({"username": "ada", "token_ciphertext": "fernet:not-a-token", "version": 1}),
        encoding="utf-8",
    )

    loaded = SettingsStore(target).load()

    assert loaded.username == "ada"
    assert loaded.token == ""


def test_invalid_json_falls_back_to_defaults(tmp_path: Path) -> None:
    target = tmp_path / "settings.json"
    target.write_text("{not json", encoding="utf-8")

    assert SettingsStore(target).load() == Settings()


def test_unknown_keys_are_ignored(tmp_path: Path) -> None:
    target = tmp_path / "settings.json"
    payload = {"username": "ada", "theme": "dark", "recent_files": ["a.md"], "version": 1}
    target.write_text(json.dumps(payload), encoding="utf-8")

    loaded = SettingsStore(target).load()

    assert loaded.username == "ada"


def test_env_overrides_take_precedence(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    SettingsStore(path).save(Settings(host="https://local", token="abc"))
    monkeypatch.setenv("FOLIO_HOST", "https://env-host")
    monkeypatch.setenv("FOLIO_TOKEN", "env-token")

    overridden = SettingsStore(path).load()

    assert overridden.host == "https://env-host"
    assert overridden.token == "env-token"


def test_bool_env_override_disables_auto_file_management(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    SettingsStore(path).save(Settings())
    monkeypatch.setenv("FOLIO_AUTO_FILE_MANAGEMENT", "0")
    monkeypatch.setenv("FOLIO_DEBUG_LOGGING", "yes")

    overridden = SettingsStore(path).load()

    assert overridden.auto_file_management is False
    assert overridden.debug_logging is True


def test_env_override_for_username(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    store = SettingsStore(path)
    store.save(Settings(username="stored"))
    monkeypatch.setenv("FOLIO_USERNAME", "env-user")

    loaded = store.load()

    assert loaded.username == "env-user"
    assert json.loads(path.read_text(encoding="utf-8"))["username"] == "stored"


def test_secret_vault_roundtrip_and_rejects_foreign_backend(tmp_path: Path) -> None:
    vault = SecretVault(key_path=tmp_path / "settings.key")

    token = vault.encrypt("super-secret")

    assert token.startswith("fernet:")
    assert vault.decrypt(token) == "super-secret"
    assert vault.encrypt("") == ""
    assert vault.decrypt(None) == ""
    assert SecretVault(key_path=tmp_path / "settings.key").decrypt(token) == "super-secret"
    with pytest.raises(ValueError):
        vault.decrypt("dpapi:abc")


def test_session_set_coerces_values_and_defers_persistence(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    session = SettingsSession(SettingsStore(path))

    session.set({"auto_file_management": "false", "username": "ada", "host": None})
    session.set("token", "tok-1")

    assert session.get("auto_file_management") is False
    assert session.get("username") == "ada"
    assert session.get("host") == ""
    assert session.get("token") == "tok-1"
    assert not path.exists()

    session.persist()

    reloaded = SettingsStore(path).load()
    assert reloaded.username == "ada"
    assert reloaded.token == "tok-1"
    assert reloaded.auto_file_management is False


def test_session_rejects_unknown_keys(tmp_path: Path) -> None:
    session = SettingsSession(SettingsStore(tmp_path / "settings.json"), Settings(username="ada"))

    with pytest.raises(KeyError):
        session.set({"username": "bob", "colour": "red"})

    assert session.get("username") == "ada"


def test_session_to_dict_exposes_workflow_keys(tmp_path: Path) -> None:
    session = SettingsSession(
        SettingsStore(tmp_path / "settings.json"),
        Settings(username="ada", token="tok", host="https://h"),
    )

    data = session.to_dict()

    assert data["auto_file_management"] is True
    assert (data["username"], data["token"], data["host"]) == ("ada", "tok", "https://h")
    data["username"] = "mutated"
    assert session.get("username") == "ada"


@pytest.mark.parametrize(
    ("secret", "expected"),
    [("", ""), ("abc", "***"), ("abcdefgh", "ab****gh")],
)
def test_redact_secret(secret: str, expected: str) -> None:
    assert redact_secret(secret) == expected
