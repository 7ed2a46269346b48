"""Tests for ConfigManager using QSettings."""

import pytest

from mpdctl.core.config import ConfigManager, ConnectionSettings


@pytest.fixture
def config() -> ConfigManager:
    """Return a fresh ConfigManager for each test."""
    # Use unique organization/app to avoid test interference
    config = ConfigManager("MpdctlTest", "TestConfig")
    config.clear()
    return config


class TestConfigManagerDefaults:
    """Test default values."""

    def test_defaults(self, config: ConfigManager) -> None:
        """Test values before anything is saved."""
        assert config.get_mpd_host() == "localhost"
        assert config.get_mpd_port() == 6600
        assert config.get_mpd_timeout_ms() == 30000
        assert config.get_mpd_password() == ""

    def test_default_settings_object(self, config: ConfigManager) -> None:
        """Test the bundled settings match the dataclass defaults."""
        assert config.get_connection_settings() == ConnectionSettings()


class TestConfigManagerMpd:
    """Test MPD connection settings."""

    def test_host(self, config: ConfigManager) -> None:
        """Test saving the host."""
        config.set_mpd_host("192.168.1.50")
        assert config.get_mpd_host() == "192.168.1.50"

    def test_empty_host_falls_back(self, config: ConfigManager) -> None:
        """Test an empty host means localhost."""
        config.set_mpd_host("")
        assert config.get_mpd_host() == "localhost"

    def test_port_clamped(self, config: ConfigManager) -> None:
        """Test the port is kept in range."""
        config.set_mpd_port(70000)
        assert config.get_mpd_port() == 65535
        config.set_mpd_port(0)
        assert config.get_mpd_port() == 1
        config.set_mpd_port(6601)
        assert config.get_mpd_port() == 6601

    def test_timeout_clamped(self, config: ConfigManager) -> None:
        """Test the timeout is kept in range."""
        config.set_mpd_timeout_ms(5)
        assert config.get_mpd_timeout_ms() == 100
        config.set_mpd_timeout_ms(5000)
        assert config.get_mpd_timeout_ms() == 5000

    def test_password(self, config: ConfigManager) -> None:
        """Test saving and clearing the password."""
        config.set_mpd_password("hunter2")
        assert config.get_mpd_password() == "hunter2"
        config.set_mpd_password("")
        assert config.get_mpd_password() == ""

    def test_settings_round_trip(self, config: ConfigManager) -> None:
        """Test saving all connection settings at once."""
        settings = ConnectionSettings(host="mpd.lan", port=6610, timeout_ms=2500, password="pw")
        config.save_connection_settings(settings)
        config.sync()
        assert config.get_connection_settings() == settings

    def test_clear(self, config: ConfigManager) -> None:
        """Test clear() restores defaults."""
        config.set_mpd_host("elsewhere")
        config.clear()
        assert config.get_mpd_host() == "localhost"

    def test_persists_across_instances(self, config: ConfigManager) -> None:
        """Test values are visible to a second manager with the same names."""
        config.set_mpd_port(6700)
        config.sync()
        other = ConfigManager("MpdctlTest", "TestConfig")
        assert other.get_mpd_port() == 6700
