"""
Tick Math tests

Tick <-> sqrt price conversion and tick grid helpers.
"""

import pytest

from ..constants import MAX_SQRT_PRICE, MAX_TICK_INDEX, MIN_SQRT_PRICE, MIN_TICK_INDEX, Q64
from ..errors import InvalidSqrtPriceError, InvalidTickIndexError
from ..math.tick_math import (
    get_initializable_tick_index,
    get_next_initializable_tick_index,
    get_prev_initializable_tick_index,
    get_tick_array_start_tick_index,
    is_position_in_range,
    order_tick_indexes,
    price_to_tick_index,
    sqrt_price_to_tick_index,
    tick_index_to_price,
    tick_index_to_sqrt_price,
)


class TestTickIndexToSqrtPrice:
    """tick_index_to_sqrt_price tests"""

    def test_tick_0(self):
        """Price 1.0 is exactly 2^64"""
        assert tick_index_to_sqrt_price(0) == Q64

    def test_min_tick(self):
        assert tick_index_to_sqrt_price(MIN_TICK_INDEX) == pytest.approx(MIN_SQRT_PRICE, rel=1e-8)

    def test_max_tick(self):
        assert tick_index_to_sqrt_price(MAX_TICK_INDEX) == pytest.approx(MAX_SQRT_PRICE, rel=1e-9)

    def test_symmetry(self):
        """sqrt(1.0001^t) * sqrt(1.0001^-t) == 1"""
        product = tick_index_to_sqrt_price(1000) * tick_index_to_sqrt_price(-1000)
        assert product == pytest.approx(Q64 * Q64, rel=1e-15)

    def test_monotonic(self):
        ticks = [-200000, -1000, -1, 0, 1, 1000, 200000]
        sqrt_prices = [tick_index_to_sqrt_price(t) for t in ticks]
        assert sqrt_prices == sorted(sqrt_prices)
        assert len(set(sqrt_prices)) == len(ticks)

    def test_invalid_tick_too_low(self):
        with pytest.raises(InvalidTickIndexError):
            tick_index_to_sqrt_price(MIN_TICK_INDEX - 1)

    def test_invalid_tick_too_high(self):
        with pytest.raises(InvalidTickIndexError):
            tick_index_to_sqrt_price(MAX_TICK_INDEX + 1)


class TestSqrtPriceToTickIndex:
    """sqrt_price_to_tick_index tests"""

    def test_q64_is_tick_0(self):
        assert sqrt_price_to_tick_index(Q64) == 0

    def test_min_sqrt_price(self):
        assert sqrt_price_to_tick_index(MIN_SQRT_PRICE) == MIN_TICK_INDEX

    def test_roundtrip(self):
        for tick in [-300000, -12345, -1, 0, 1, 12345, 300000]:
            assert sqrt_price_to_tick_index(tick_index_to_sqrt_price(tick)) == tick

    def test_between_ticks_rounds_down(self):
        assert sqrt_price_to_tick_index(tick_index_to_sqrt_price(10) + 1) == 10
        assert sqrt_price_to_tick_index(tick_index_to_sqrt_price(-10) - 1) == -11

    def test_out_of_range(self):
        with pytest.raises(InvalidSqrtPriceError):
            sqrt_price_to_tick_index(MIN_SQRT_PRICE - 1)
        with pytest.raises(InvalidSqrtPriceError):
            sqrt_price_to_tick_index(MAX_SQRT_PRICE + 1)


class TestPriceConversion:
    """Human-readable price <-> tick"""

    def test_price_one(self):
        assert price_to_tick_index(1.0, 6, 6) == 0
        assert tick_index_to_price(0, 6, 6) == 1.0

    def test_tick_to_price(self):
        assert tick_index_to_price(100, 6, 6) == pytest.approx(1.0001 ** 100, rel=1e-9)

    def test_decimals(self):
        """SOL/USDC style: 9 and 6 decimals"""
        tick = price_to_tick_index(200.0, 9, 6)
        assert tick_index_to_price(tick, 9, 6) <= 200.0
        assert tick_index_to_price(tick + 1, 9, 6) > 200.0


class TestTickGrid:
    """Tick spacing helpers"""

    def test_initializable_nearest(self):
        assert get_initializable_tick_index(5, 4) == 4
        assert get_initializable_tick_index(6, 4) == 8

    def test_initializable_directed(self):
        assert get_initializable_tick_index(5, 4, True) == 8
        assert get_initializable_tick_index(5, 4, False) == 4
        assert get_initializable_tick_index(8, 4, True) == 8

    def test_initializable_negative(self):
        assert get_initializable_tick_index(-5, 4, False) == -8
        assert get_initializable_tick_index(-5, 4, True) == -4

    def test_next_and_prev(self):
        assert get_next_initializable_tick_index(5, 4) == 8
        assert get_next_initializable_tick_index(8, 4) == 12
        assert get_prev_initializable_tick_index(8, 4) == 4
        assert get_prev_initializable_tick_index(5, 4) == 4

    def test_tick_array_start(self):
        assert get_tick_array_start_tick_index(100, 2) == 0
        assert get_tick_array_start_tick_index(176, 2) == 176
        assert get_tick_array_start_tick_index(-1, 2) == -176


class TestTickRange:
    """Position range helpers"""

    def test_order(self):
        tick_range = order_tick_indexes(5, -5)
        assert tick_range.tick_lower_index == -5
        assert tick_range.tick_upper_index == 5

    def test_in_range(self):
        assert is_position_in_range(Q64, -10, 10)
        assert is_position_in_range(Q64, 0, 10)
        assert not is_position_in_range(Q64, -10, 0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
