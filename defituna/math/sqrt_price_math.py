"""
Sqrt Price Math - Q64.64 sqrt price calculations

Pool prices are stored as sqrt_price = sqrt(price) * 2^64, where price is
token B per token A in native units.

Floats appear only in the display conversions; every amount-critical path
stays in integers.
"""

import math

from ..constants import MAX_SQRT_PRICE, MIN_SQRT_PRICE, Q64_RESOLUTION, U64_MAX
from ..errors import InvalidSqrtPriceError
from .fixed import div_round_up_if


def price_to_sqrt_price(price: float, decimals_a: int, decimals_b: int) -> int:
    """Human-readable price to Q64.64 sqrt price

    sqrt_price = floor(sqrt(price / 10^(decimals_a - decimals_b)) * 2^64)

    Args:
        price: token B per token A, in whole tokens
        decimals_a: decimals of token A
        decimals_b: decimals of token B

    Returns:
        sqrt price (Q64.64)
    """
    power = 10.0 ** (decimals_a - decimals_b)
    return int(math.sqrt(price / power) * Q64_RESOLUTION)


def sqrt_price_to_price(sqrt_price: int, decimals_a: int, decimals_b: int) -> float:
    """Q64.64 sqrt price to human-readable price (display only)

    price = (sqrt_price / 2^64)^2 * 10^(decimals_a - decimals_b)
    """
    power = 10.0 ** (decimals_a - decimals_b)
    return (sqrt_price / Q64_RESOLUTION) ** 2 * power


def sqrt_price_x64_to_price_x64(sqrt_price: int) -> int:
    """Q64.64 sqrt price to Q64.64 price (truncating)"""
    return (sqrt_price * sqrt_price) >> 64


def get_next_sqrt_price_from_a_round_up(
    sqrt_price: int,
    liquidity: int,
    amount: int,
    specified_input: bool,
) -> int:
    """Sqrt price after adding (or removing) token A

    Formula: √P' = L·√P / (L ± Δx·√P), rounded up

    Raises:
        InvalidSqrtPriceError: the result leaves the supported price range
    """
    if amount == 0:
        return sqrt_price

    product = sqrt_price * amount
    numerator = (liquidity * sqrt_price) << 64
    liquidity_shifted = liquidity << 64

    if specified_input:
        denominator = liquidity_shifted + product
    else:
        denominator = liquidity_shifted - product
        if denominator <= 0:
            raise InvalidSqrtPriceError(
                "Not enough liquidity to output the requested token A amount",
                {"amount": amount, "liquidity": liquidity},
            )

    result = div_round_up_if(numerator, denominator, True)

    if result < MIN_SQRT_PRICE or result > MAX_SQRT_PRICE:
        raise InvalidSqrtPriceError(f"Next sqrt price out of bounds: {result}")

    return result


def get_next_sqrt_price_from_b_round_down(
    sqrt_price: int,
    liquidity: int,
    amount: int,
    specified_input: bool,
) -> int:
    """Sqrt price after adding (or removing) token B

    Formula: √P' = √P ± Δy / L, rounded down

    Raises:
        InvalidSqrtPriceError: the result leaves the supported price range
    """
    if amount == 0:
        return sqrt_price

    delta = div_round_up_if(amount << 64, liquidity, not specified_input)

    if specified_input:
        result = sqrt_price + delta
    else:
        result = sqrt_price - delta

    if result < MIN_SQRT_PRICE or result > MAX_SQRT_PRICE:
        raise InvalidSqrtPriceError(f"Next sqrt price out of bounds: {result}")

    return result


def get_next_sqrt_price(
    sqrt_price: int,
    liquidity: int,
    amount: int,
    a_to_b: bool,
    specified_input: bool,
) -> int:
    """Sqrt price reached by swapping `amount` of the specified token

    Exact-input A->B and exact-output B->A move the price along token A,
    the other two cases along token B.
    """
    if amount > U64_MAX:
        raise InvalidSqrtPriceError(f"Swap amount exceeds u64: {amount}")

    if specified_input == a_to_b:
        return get_next_sqrt_price_from_a_round_up(sqrt_price, liquidity, amount, specified_input)
    return get_next_sqrt_price_from_b_round_down(sqrt_price, liquidity, amount, specified_input)
