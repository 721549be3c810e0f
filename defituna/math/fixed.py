"""
Fixed Point - integer multiply/divide

All protocol arithmetic funnels through mul_div so that the product is
formed before the single division, matching the program's rounding.
Python integers are unbounded, so x * y never overflows.
"""

import math


def mul_div(x: int, y: int, d: int, round_up: bool = False) -> int:
    """x * y / d, floored or ceiled

    Args:
        x: non-negative multiplicand
        y: non-negative multiplier
        d: positive divisor (zero is a caller bug and raises ZeroDivisionError)
        round_up: ceil instead of floor

    Returns:
        floor(x*y/d) or ceil(x*y/d)
    """
    if not round_up:
        return (x * y) // d
    return (x * y + (d - 1)) // d


def div_round_up_if(numerator: int, denominator: int, round_up: bool) -> int:
    """numerator / denominator, ceiled only when round_up is set"""
    quotient, remainder = divmod(numerator, denominator)
    if round_up and remainder != 0:
        return quotient + 1
    return quotient


def js_round(value: float) -> int:
    """Round half up, the way JavaScript's Math.round does

    Python's round() rounds half to even, which differs on exact .5 values.
    """
    floor = math.floor(value)
    if value - floor >= 0.5:
        return floor + 1
    return floor
