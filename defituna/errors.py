"""
Quote errors

Every precondition violation raises a subclass of TunaQuoteError
immediately. The base class derives from ValueError so code that
guards math calls with ``except ValueError`` keeps working.
"""

from typing import Any, Dict, Optional


class TunaQuoteError(ValueError):
    """Base exception for all quoting errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class InvalidTickRangeError(TunaQuoteError):
    """Position tick bounds are out of order"""


class InvalidTickIndexError(TunaQuoteError):
    """Tick index outside the pool's tick range"""


class InvalidSqrtPriceError(TunaQuoteError):
    """Sqrt price outside the supported range or on the wrong side of a range"""


class InvalidSlippageError(TunaQuoteError):
    """Slippage tolerance outside [0; HUNDRED_PERCENT]"""


class InvalidFeeRateError(TunaQuoteError):
    """Protocol or swap fee rate outside its allowed range"""


class InvalidLeverageError(TunaQuoteError):
    """Leverage below 1.0"""


class InvalidAmountError(TunaQuoteError):
    """Non-positive or otherwise unusable token amount"""


class AmbiguousComputedAmountError(TunaQuoteError):
    """Both collateral sides were asked to be derived"""


class InvalidLiquidationThresholdError(TunaQuoteError):
    """Liquidation threshold outside its allowed range"""


class InvalidPositionError(TunaQuoteError):
    """Existing position state is inconsistent with the request"""


class SwapError(TunaQuoteError):
    """Swap simulation could not complete"""


class TickArraySequenceError(TunaQuoteError):
    """Tick arrays are missing, unevenly spaced or do not cover a tick"""


class ConfigError(TunaQuoteError):
    """Invalid configuration value"""
