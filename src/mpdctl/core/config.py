"""Configuration manager using QSettings for persistent storage."""

import logging
from dataclasses import dataclass

from PySide6.QtCore import QSettings

from mpdctl.api.mpd import DEFAULT_PORT, DEFAULT_TIMEOUT_MS

logger = logging.getLogger(__name__)

# Settings keys
_KEY_MPD_HOST = "mpd/host"
_KEY_MPD_PORT = "mpd/port"
_KEY_MPD_TIMEOUT_MS = "mpd/timeout_ms"
_KEY_MPD_PASSWORD = "mpd/password"

_DEFAULT_HOST = "localhost"
_MIN_TIMEOUT_MS = 100
_MAX_TIMEOUT_MS = 600_000


@dataclass(frozen=True, slots=True)
class ConnectionSettings:
    """Saved defaults for opening an MPD connection.

    Attributes:
        host: MPD host.
        port: MPD port.
        timeout_ms: Timeout in milliseconds.
        password: Password, empty for none.
    """

    host: str = _DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    password: str = ""


class ConfigManager:
    """Wrapper around QSettings for type-safe config access.

    QSettings stores config in platform-specific locations:
    - Windows: HKEY_CURRENT_USER\\Software\\mpdctl\\mpdctl
    - macOS: ~/Library/Preferences/com.mpdctl.mpdctl.plist
    - Linux: ~/.config/mpdctl/mpdctl.conf

    Example:
        config = ConfigManager()
        settings = config.get_connection_settings()
        conn = connect(settings.host, settings.port, settings.timeout_ms)
    """

    def __init__(self, organization: str = "mpdctl", application: str = "mpdctl") -> None:
        """Initialize the config manager.

        Args:
            organization: Organization name for QSettings.
            application: Application name for QSettings.
        """
        self._settings = QSettings(organization, application)

    def get_mpd_host(self) -> str:
        """Return the MPD host.

        Returns:
            Host string (default "localhost").
        """
        value = self._settings.value(_KEY_MPD_HOST, _DEFAULT_HOST, str)
        return str(value) if value else _DEFAULT_HOST

    def set_mpd_host(self, host: str) -> None:
        """Set the MPD host.

        Args:
            host: Hostname or IP, or empty string for "localhost".
        """
        self._settings.setValue(_KEY_MPD_HOST, host)

    def get_mpd_port(self) -> int:
        """Return the MPD port.

        Returns:
            Port number (default 6600).
        """
        value = self._settings.value(_KEY_MPD_PORT, DEFAULT_PORT, int)
        return max(1, min(65535, int(value)))  # type: ignore[arg-type]

    def set_mpd_port(self, port: int) -> None:
        """Set the MPD port.

        Args:
            port: Port number (1-65535).
        """
        self._settings.setValue(_KEY_MPD_PORT, max(1, min(65535, port)))

    def get_mpd_timeout_ms(self) -> int:
        """Return the MPD timeout in milliseconds.

        Returns:
            Timeout in milliseconds (default 30000).
        """
        value = self._settings.value(_KEY_MPD_TIMEOUT_MS, DEFAULT_TIMEOUT_MS, int)
        return max(_MIN_TIMEOUT_MS, min(_MAX_TIMEOUT_MS, int(value)))  # type: ignore[arg-type]

    def set_mpd_timeout_ms(self, timeout_ms: int) -> None:
        """Set the MPD timeout.

        Args:
            timeout_ms: Timeout in milliseconds (100-600000).
        """
        self._settings.setValue(
            _KEY_MPD_TIMEOUT_MS, max(_MIN_TIMEOUT_MS, min(_MAX_TIMEOUT_MS, timeout_ms))
        )

    def get_mpd_password(self) -> str:
        """Return the MPD password, or empty string for none."""
        value = self._settings.value(_KEY_MPD_PASSWORD, "", str)
        return str(value) if value else ""

    def set_mpd_password(self, password: str) -> None:
        """Set the MPD password (empty string to clear)."""
        self._settings.setValue(_KEY_MPD_PASSWORD, password)

    def get_connection_settings(self) -> ConnectionSettings:
        """Return all connection defaults at once."""
        return ConnectionSettings(
            host=self.get_mpd_host(),
            port=self.get_mpd_port(),
            timeout_ms=self.get_mpd_timeout_ms(),
            password=self.get_mpd_password(),
        )

    def save_connection_settings(self, settings: ConnectionSettings) -> None:
        """Persist all connection defaults at once."""
        self.set_mpd_host(settings.host)
        self.set_mpd_port(settings.port)
        self.set_mpd_timeout_ms(settings.timeout_ms)
        self.set_mpd_password(settings.password)
        logger.debug("Saved MPD connection settings for %s:%d", settings.host, settings.port)

    # -- General settings ------------------------------------------------------

    def clear(self) -> None:
        """Clear all settings (useful for testing or reset)."""
        self._settings.clear()

    def sync(self) -> None:
        """Force settings to be written to disk."""
        self._settings.sync()
