"""
Settings tests
"""

import logging

import pytest

from ..config import Settings
from ..errors import ConfigError


@pytest.fixture
def settings():
    return Settings()


class TestSettings:
    """Settings validation"""

    def test_log_level(self, settings, monkeypatch):
        monkeypatch.setattr(settings, "LOG_LEVEL", "DEBUG")
        assert settings.log_level() == logging.DEBUG

    def test_unknown_log_level(self, settings, monkeypatch):
        monkeypatch.setattr(settings, "LOG_LEVEL", "CHATTY")
        with pytest.raises(ConfigError):
            settings.log_level()

    def test_valid(self, settings, monkeypatch):
        monkeypatch.setattr(settings, "LOG_LEVEL", "INFO")
        monkeypatch.setattr(settings, "DEFAULT_SLIPPAGE", 10_000)
        monkeypatch.setattr(settings, "SWAP_TICK_ARRAYS", 3)
        settings.validate()

    @pytest.mark.parametrize("slippage", [-1, 1_000_001])
    def test_slippage_range(self, settings, monkeypatch, slippage):
        monkeypatch.setattr(settings, "LOG_LEVEL", "INFO")
        monkeypatch.setattr(settings, "DEFAULT_SLIPPAGE", slippage)
        with pytest.raises(ConfigError):
            settings.validate()

    @pytest.mark.parametrize("count", [0, 4])
    def test_tick_array_count(self, settings, monkeypatch, count):
        monkeypatch.setattr(settings, "LOG_LEVEL", "INFO")
        monkeypatch.setattr(settings, "DEFAULT_SLIPPAGE", 10_000)
        monkeypatch.setattr(settings, "SWAP_TICK_ARRAYS", count)
        with pytest.raises(ConfigError):
            settings.validate()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
