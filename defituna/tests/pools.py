"""
Pool builders shared by the swap and quote tests

A SOL/USDC-like pool at price 200 (decimals 9/6) with constant liquidity
and five fully initialized tick arrays around the price.
"""

from ..amm.types import FusionPool, uniform_tick_array
from ..constants import TICK_ARRAY_SIZE
from ..math.sqrt_price_math import price_to_sqrt_price
from ..math.tick_math import get_tick_array_start_tick_index, sqrt_price_to_tick_index

POOL_LIQUIDITY = 10_000_000_000_000
POOL_FEE_RATE = 3000
POOL_TICK_SPACING = 2


def make_pool(sqrt_price=None) -> FusionPool:
    if sqrt_price is None:
        sqrt_price = price_to_sqrt_price(200.0, 9, 6)
    return FusionPool(
        sqrt_price=sqrt_price,
        tick_current_index=sqrt_price_to_tick_index(sqrt_price),
        tick_spacing=POOL_TICK_SPACING,
        fee_rate=POOL_FEE_RATE,
        liquidity=POOL_LIQUIDITY,
    )


def make_tick_arrays(pool: FusionPool):
    start = get_tick_array_start_tick_index(pool.tick_current_index, pool.tick_spacing)
    step = TICK_ARRAY_SIZE * pool.tick_spacing
    return [uniform_tick_array(start + offset * step) for offset in (0, 1, 2, -1, -2)]
