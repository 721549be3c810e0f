"""
Tuna quoting constants

Two fixed-point scales coexist and must never be mixed:
- HUNDRED_PERCENT: protocol percentages (fee rates, slippage, liquidation
  threshold) in hundredths of a basis point.
- FEE_RATE_DENOMINATOR: pool swap fee rates in parts per million.

Sqrt prices are Q64.64 unsigned integers.
"""

from typing import NewType

# Protocol percentage scale (0.01% = 100, 100% = 1_000_000)
HUNDRED_PERCENT: int = 1_000_000

# Pool swap fee scale (ppm)
FEE_RATE_DENOMINATOR: int = 1_000_000

# Slippage scale used by swap quotes (basis points)
BPS_DENOMINATOR: int = 10_000

# Default slippage for liquidity increase quotes when 0 is passed
DEFAULT_MAX_AMOUNT_SLIPPAGE: int = HUNDRED_PERCENT // 2

# u64 limits; COMPUTED_AMOUNT is the on-wire "derive this side" marker
U64_MAX: int = 2 ** 64 - 1
COMPUTED_AMOUNT: int = U64_MAX

# Q64.64 fixed point
Q64: int = 2 ** 64
Q128: int = 2 ** 128
Q64_RESOLUTION: float = 18446744073709551616.0

# Tick range of the concentrated-liquidity pool
MIN_TICK_INDEX: int = -443636
MAX_TICK_INDEX: int = 443636
MIN_SQRT_PRICE: int = 4295048016
MAX_SQRT_PRICE: int = 79226673515401279992447579055

# Ticks per tick array account
TICK_ARRAY_SIZE: int = 88

# Distinct integer kinds for the two percentage scales
PercentageBp = NewType("PercentageBp", int)
FeeRatePpm = NewType("FeeRatePpm", int)
