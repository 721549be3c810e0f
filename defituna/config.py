"""
Configuration settings for the quoting CLI

Loads environment variables (and a local .env file) and provides
defaults used when a request leaves a value unset.
"""
import logging
import os

from dotenv import load_dotenv

from .constants import HUNDRED_PERCENT
from .errors import ConfigError

# Load environment variables from .env file
load_dotenv()


class Settings:
    """Application settings"""

    # Logging
    LOG_LEVEL: str = os.getenv("TUNA_LOG_LEVEL", "WARNING").upper()

    # Default max amount slippage for liquidity quotes (HUNDRED_PERCENT scale)
    DEFAULT_SLIPPAGE: int = int(os.getenv("TUNA_DEFAULT_SLIPPAGE", HUNDRED_PERCENT // 100))

    # Number of tick arrays synthesised around the price when a pool file has none
    SWAP_TICK_ARRAYS: int = int(os.getenv("TUNA_SWAP_TICK_ARRAYS", 5))

    def log_level(self) -> int:
        """Numeric logging level for LOG_LEVEL"""
        level = logging.getLevelName(self.LOG_LEVEL)
        if not isinstance(level, int):
            raise ConfigError(f"Unknown log level: {self.LOG_LEVEL}")
        return level

    def validate(self) -> None:
        """Raise ConfigError if any setting is out of range"""
        self.log_level()
        if self.DEFAULT_SLIPPAGE < 0 or self.DEFAULT_SLIPPAGE > HUNDRED_PERCENT:
            raise ConfigError(
                "TUNA_DEFAULT_SLIPPAGE must be in range [0; HUNDRED_PERCENT]",
                {"value": self.DEFAULT_SLIPPAGE},
            )
        if self.SWAP_TICK_ARRAYS < 1 or self.SWAP_TICK_ARRAYS % 2 == 0:
            raise ConfigError(
                "TUNA_SWAP_TICK_ARRAYS must be a positive odd number",
                {"value": self.SWAP_TICK_ARRAYS},
            )


# Create global settings instance
settings = Settings()
