"""
Tick Math - Tick <-> sqrt price conversion

Integer-only tick math for the concentrated-liquidity pool. Sqrt prices are
Q64.64 fixed point.

Key formulas:
    price = 1.0001^tick
    sqrt_price = sqrt(price) * 2^64
"""

import math
from typing import NamedTuple, Optional

from ..constants import (
    MAX_SQRT_PRICE,
    MAX_TICK_INDEX,
    MIN_SQRT_PRICE,
    MIN_TICK_INDEX,
    Q64_RESOLUTION,
    TICK_ARRAY_SIZE,
)
from ..errors import InvalidSqrtPriceError, InvalidTickIndexError
from .sqrt_price_math import price_to_sqrt_price, sqrt_price_to_price


LOG_SQRT_TICK_BASE: float = math.log(1.0001) / 2


class TickRange(NamedTuple):
    """Ordered tick bounds of a position"""
    tick_lower_index: int
    tick_upper_index: int


def tick_index_to_sqrt_price(tick_index: int) -> int:
    """Q64.64 sqrt price at a tick

    sqrt(1.0001^|tick|) is built bit by bit from precomputed Q128.128
    factors, inverted for positive ticks and shifted down to Q64.64.

    Args:
        tick_index: tick (MIN_TICK_INDEX ~ MAX_TICK_INDEX)

    Returns:
        sqrt price (Q64.64)

    Raises:
        InvalidTickIndexError: tick outside the valid range
    """
    if tick_index < MIN_TICK_INDEX or tick_index > MAX_TICK_INDEX:
        raise InvalidTickIndexError(
            f"Tick index out of range: {tick_index} (range: {MIN_TICK_INDEX} ~ {MAX_TICK_INDEX})"
        )

    abs_tick = abs(tick_index)

    ratio = 0x100000000000000000000000000000000 if abs_tick & 0x1 == 0 \
        else 0xfffcb933bd6fad37aa2d162d1a594001

    if abs_tick & 0x2:
        ratio = (ratio * 0xfff97272373d413259a46990580e213a) >> 128
    if abs_tick & 0x4:
        ratio = (ratio * 0xfff2e50f5f656932ef12357cf3c7fdcc) >> 128
    if abs_tick & 0x8:
        ratio = (ratio * 0xffe5caca7e10e4e61c3624eaa0941cd0) >> 128
    if abs_tick & 0x10:
        ratio = (ratio * 0xffcb9843d60f6159c9db58835c926644) >> 128
    if abs_tick & 0x20:
        ratio = (ratio * 0xff973b41fa98c081472e6896dfb254c0) >> 128
    if abs_tick & 0x40:
        ratio = (ratio * 0xff2ea16466c96a3843ec78b326b52861) >> 128
    if abs_tick & 0x80:
        ratio = (ratio * 0xfe5dee046a99a2a811c461f1969c3053) >> 128
    if abs_tick & 0x100:
        ratio = (ratio * 0xfcbe86c7900a88aedcffc83b479aa3a4) >> 128
    if abs_tick & 0x200:
        ratio = (ratio * 0xf987a7253ac413176f2b074cf7815e54) >> 128
    if abs_tick & 0x400:
        ratio = (ratio * 0xf3392b0822b70005940c7a398e4b70f3) >> 128
    if abs_tick & 0x800:
        ratio = (ratio * 0xe7159475a2c29b7443b29c7fa6e889d9) >> 128
    if abs_tick & 0x1000:
        ratio = (ratio * 0xd097f3bdfd2022b8845ad8f792aa5825) >> 128
    if abs_tick & 0x2000:
        ratio = (ratio * 0xa9f746462d870fdf8a65dc1f90e061e5) >> 128
    if abs_tick & 0x4000:
        ratio = (ratio * 0x70d869a156d2a1b890bb3df62baf32f7) >> 128
    if abs_tick & 0x8000:
        ratio = (ratio * 0x31be135f97d08fd981231505542fcfa6) >> 128
    if abs_tick & 0x10000:
        ratio = (ratio * 0x9aa508b5b7a84e1c677de54f3e99bc9) >> 128
    if abs_tick & 0x20000:
        ratio = (ratio * 0x5d6af8dedb81196699c329225ee604) >> 128
    if abs_tick & 0x40000:
        ratio = (ratio * 0x2216e584f5fa1ea926041bedfe98) >> 128

    if tick_index > 0:
        ratio = (2**256 - 1) // ratio

    # Q128.128 -> Q64.64
    return ratio >> 64


def sqrt_price_to_tick_index(sqrt_price: int) -> int:
    """Greatest tick whose sqrt price does not exceed sqrt_price

    A float logarithm gives the starting guess, exact integer comparisons
    settle the last step.

    Args:
        sqrt_price: Q64.64 sqrt price

    Returns:
        tick index

    Raises:
        InvalidSqrtPriceError: sqrt price outside [MIN_SQRT_PRICE, MAX_SQRT_PRICE]
    """
    if sqrt_price < MIN_SQRT_PRICE or sqrt_price > MAX_SQRT_PRICE:
        raise InvalidSqrtPriceError(
            f"Sqrt price out of range: {sqrt_price}",
            {"min": MIN_SQRT_PRICE, "max": MAX_SQRT_PRICE},
        )

    estimate = math.floor(math.log(sqrt_price / Q64_RESOLUTION) / LOG_SQRT_TICK_BASE)
    tick = min(max(estimate, MIN_TICK_INDEX), MAX_TICK_INDEX)

    while tick > MIN_TICK_INDEX and tick_index_to_sqrt_price(tick) > sqrt_price:
        tick -= 1
    while tick < MAX_TICK_INDEX and tick_index_to_sqrt_price(tick + 1) <= sqrt_price:
        tick += 1

    return tick


def price_to_tick_index(price: float, decimals_a: int, decimals_b: int) -> int:
    """Human-readable price (B per A) to the tick at or below it"""
    return sqrt_price_to_tick_index(price_to_sqrt_price(price, decimals_a, decimals_b))


def tick_index_to_price(tick_index: int, decimals_a: int, decimals_b: int) -> float:
    """Tick to human-readable price (B per A)"""
    return sqrt_price_to_price(tick_index_to_sqrt_price(tick_index), decimals_a, decimals_b)


def get_initializable_tick_index(tick_index: int, tick_spacing: int, round_up: Optional[bool] = None) -> int:
    """Snap a tick onto the spacing grid

    Args:
        tick_index: tick to snap
        tick_spacing: pool tick spacing
        round_up: True rounds up, False rounds down, None rounds to nearest

    Returns:
        initializable tick index
    """
    remainder = tick_index % tick_spacing
    result = tick_index - remainder

    if round_up is None:
        should_round_up = remainder >= tick_spacing // 2
    else:
        should_round_up = round_up and remainder > 0

    if should_round_up:
        return result + tick_spacing
    return result


def get_next_initializable_tick_index(tick_index: int, tick_spacing: int) -> int:
    """First grid tick strictly above tick_index"""
    return tick_index - tick_index % tick_spacing + tick_spacing


def get_prev_initializable_tick_index(tick_index: int, tick_spacing: int) -> int:
    """First grid tick strictly below tick_index"""
    remainder = tick_index % tick_spacing
    if remainder == 0:
        return tick_index - tick_spacing
    return tick_index - remainder


def get_tick_array_start_tick_index(tick_index: int, tick_spacing: int) -> int:
    """Start tick of the tick array that holds tick_index"""
    ticks_in_array = TICK_ARRAY_SIZE * tick_spacing
    return (tick_index // ticks_in_array) * ticks_in_array


def order_tick_indexes(tick_index_1: int, tick_index_2: int) -> TickRange:
    if tick_index_1 < tick_index_2:
        return TickRange(tick_index_1, tick_index_2)
    return TickRange(tick_index_2, tick_index_1)


def is_position_in_range(sqrt_price: int, tick_index_1: int, tick_index_2: int) -> bool:
    """True if the price lies inside [lower, upper) of the position"""
    tick_range = order_tick_indexes(tick_index_1, tick_index_2)
    lower = tick_index_to_sqrt_price(tick_range.tick_lower_index)
    upper = tick_index_to_sqrt_price(tick_range.tick_upper_index)
    return lower <= sqrt_price < upper
