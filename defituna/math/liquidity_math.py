"""
Liquidity Math - concentrated liquidity <-> token amounts

Conversions between position liquidity and token amounts over a sqrt
price interval, all in Q64.64 integer arithmetic.

Key formulas:
    Δx = L * (√P_upper - √P_lower) / (√P_lower * √P_upper)   # token A
    Δy = L * (√P_upper - √P_lower)                           # token B
    L  = Δx * √P_lower * √P_upper / (√P_upper - √P_lower)
    L  = Δy / (√P_upper - √P_lower)
"""

from typing import NamedTuple

from ..constants import Q64, U64_MAX
from .fixed import div_round_up_if
from .tick_math import order_tick_indexes, tick_index_to_sqrt_price


# Liquidity used to sample a range's token split in position_ratio_x64
RATIO_SAMPLE_LIQUIDITY: int = 10 ** 18


class TokenPair(NamedTuple):
    """Amounts of token A and token B"""
    a: int
    b: int


class PositionRatio(NamedTuple):
    """Share of a position's value held in each token, Q64 (ratio_a + ratio_b == 2^64)"""
    ratio_a: int
    ratio_b: int


def get_amount_delta_a(
    sqrt_price_1: int,
    sqrt_price_2: int,
    liquidity: int,
    round_up: bool
) -> int:
    """Token A amount for a liquidity between two sqrt prices

    Formula: Δx = (L << 64) * (√P_b - √P_a) / (√P_a * √P_b)

    Args:
        sqrt_price_1: first sqrt price (Q64.64)
        sqrt_price_2: second sqrt price (Q64.64)
        liquidity: liquidity
        round_up: ceil instead of floor

    Returns:
        token A amount (native units)
    """
    if sqrt_price_1 > sqrt_price_2:
        sqrt_price_1, sqrt_price_2 = sqrt_price_2, sqrt_price_1

    numerator = (liquidity * (sqrt_price_2 - sqrt_price_1)) << 64
    denominator = sqrt_price_1 * sqrt_price_2

    return div_round_up_if(numerator, denominator, round_up)


def get_amount_delta_b(
    sqrt_price_1: int,
    sqrt_price_2: int,
    liquidity: int,
    round_up: bool
) -> int:
    """Token B amount for a liquidity between two sqrt prices

    Formula: Δy = L * (√P_b - √P_a) >> 64

    Args:
        sqrt_price_1: first sqrt price (Q64.64)
        sqrt_price_2: second sqrt price (Q64.64)
        liquidity: liquidity
        round_up: ceil instead of floor

    Returns:
        token B amount (native units)
    """
    if sqrt_price_1 > sqrt_price_2:
        sqrt_price_1, sqrt_price_2 = sqrt_price_2, sqrt_price_1

    product = liquidity * (sqrt_price_2 - sqrt_price_1)
    result = product >> 64

    if round_up and product & U64_MAX:
        return result + 1
    return result


def get_liquidity_from_a(amount: int, sqrt_price_lower: int, sqrt_price_upper: int) -> int:
    """Liquidity provided by a token A amount over [lower, upper]"""
    if sqrt_price_lower > sqrt_price_upper:
        sqrt_price_lower, sqrt_price_upper = sqrt_price_upper, sqrt_price_lower
    # Empty interval holds no liquidity
    if sqrt_price_upper == sqrt_price_lower:
        return 0

    product = amount * sqrt_price_lower * sqrt_price_upper
    return (product // (sqrt_price_upper - sqrt_price_lower)) >> 64


def get_liquidity_from_b(amount: int, sqrt_price_lower: int, sqrt_price_upper: int) -> int:
    """Liquidity provided by a token B amount over [lower, upper]"""
    if sqrt_price_lower > sqrt_price_upper:
        sqrt_price_lower, sqrt_price_upper = sqrt_price_upper, sqrt_price_lower
    # Empty interval holds no liquidity
    if sqrt_price_upper == sqrt_price_lower:
        return 0

    return (amount << 64) // (sqrt_price_upper - sqrt_price_lower)


def get_token_a_from_liquidity(
    liquidity: int,
    sqrt_price_lower: int,
    sqrt_price_upper: int,
    round_up: bool
) -> int:
    return get_amount_delta_a(sqrt_price_lower, sqrt_price_upper, liquidity, round_up)


def get_token_b_from_liquidity(
    liquidity: int,
    sqrt_price_lower: int,
    sqrt_price_upper: int,
    round_up: bool
) -> int:
    return get_amount_delta_b(sqrt_price_lower, sqrt_price_upper, liquidity, round_up)


def get_liquidity_from_amounts(
    sqrt_price: int,
    sqrt_price_lower: int,
    sqrt_price_upper: int,
    amount_a: int,
    amount_b: int
) -> int:
    """Largest liquidity mintable from both token amounts

    Args:
        sqrt_price: current sqrt price
        sqrt_price_lower: lower bound sqrt price
        sqrt_price_upper: upper bound sqrt price
        amount_a: token A amount
        amount_b: token B amount

    Returns:
        liquidity (the smaller of the two constraints inside the range)
    """
    if sqrt_price_lower > sqrt_price_upper:
        sqrt_price_lower, sqrt_price_upper = sqrt_price_upper, sqrt_price_lower

    if sqrt_price <= sqrt_price_lower:
        # Below range: token A only
        return get_liquidity_from_a(amount_a, sqrt_price_lower, sqrt_price_upper)

    elif sqrt_price < sqrt_price_upper:
        liquidity_a = get_liquidity_from_a(amount_a, sqrt_price, sqrt_price_upper)
        liquidity_b = get_liquidity_from_b(amount_b, sqrt_price_lower, sqrt_price)
        return min(liquidity_a, liquidity_b)

    else:
        # Above range: token B only
        return get_liquidity_from_b(amount_b, sqrt_price_lower, sqrt_price_upper)


def get_amounts_from_liquidity(
    liquidity: int,
    sqrt_price: int,
    sqrt_price_lower: int,
    sqrt_price_upper: int,
    round_up: bool
) -> TokenPair:
    """Token amounts held by a position at the current price

    Args:
        liquidity: position liquidity
        sqrt_price: current sqrt price
        sqrt_price_lower: lower bound sqrt price
        sqrt_price_upper: upper bound sqrt price
        round_up: ceil instead of floor

    Returns:
        TokenPair(a, b)
    """
    if sqrt_price_lower > sqrt_price_upper:
        sqrt_price_lower, sqrt_price_upper = sqrt_price_upper, sqrt_price_lower

    if sqrt_price <= sqrt_price_lower:
        amount_a = get_amount_delta_a(sqrt_price_lower, sqrt_price_upper, liquidity, round_up)
        amount_b = 0

    elif sqrt_price < sqrt_price_upper:
        amount_a = get_amount_delta_a(sqrt_price, sqrt_price_upper, liquidity, round_up)
        amount_b = get_amount_delta_b(sqrt_price_lower, sqrt_price, liquidity, round_up)

    else:
        amount_a = 0
        amount_b = get_amount_delta_b(sqrt_price_lower, sqrt_price_upper, liquidity, round_up)

    return TokenPair(amount_a, amount_b)


def position_ratio_x64(sqrt_price: int, tick_index_1: int, tick_index_2: int) -> PositionRatio:
    """Value split between token A and token B for a range at a price

    The split is sampled with a large liquidity; token A is valued in B
    at the current price:

        value_a = amount_a * √P^2 >> 128
        ratio_a = value_a << 64 / (value_a + amount_b)

    Below the range the position is all token A, above it all token B.

    Args:
        sqrt_price: current sqrt price (Q64.64)
        tick_index_1: one bound of the range
        tick_index_2: the other bound

    Returns:
        PositionRatio(ratio_a, ratio_b), Q64
    """
    tick_range = order_tick_indexes(tick_index_1, tick_index_2)
    amounts = get_amounts_from_liquidity(
        RATIO_SAMPLE_LIQUIDITY,
        sqrt_price,
        tick_index_to_sqrt_price(tick_range.tick_lower_index),
        tick_index_to_sqrt_price(tick_range.tick_upper_index),
        True,
    )

    value_a = (amounts.a * sqrt_price * sqrt_price) >> 128
    total_value = value_a + amounts.b

    if total_value == 0:
        return PositionRatio(0, 0)

    ratio_a = (value_a << 64) // total_value
    return PositionRatio(ratio_a, Q64 - ratio_a)
