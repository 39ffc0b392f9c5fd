"""Service layer helpers (settings persistence, remote account)."""

from .account import AccountAuth, AccountClient, AccountConfig, AccountError, AuthenticationError
from .settings import SecretVault, Settings, SettingsSession, SettingsStore

__all__ = [
    "AccountAuth",
    "AccountClient",
    "AccountConfig",
    "AccountError",
    "AuthenticationError",
    "SecretVault",
    "Settings",
    "SettingsSession",
    "SettingsStore",
]
