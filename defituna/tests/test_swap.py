"""
Swap simulation tests

Tick array sequence traversal, single swap steps and full swap quotes.
"""

import pytest

from ..amm.swap import (
    compute_swap_step,
    swap_quote_by_input_token,
    swap_quote_by_output_token,
)
from ..amm.tick_sequence import TickArraySequence
from ..amm.types import TickArray, empty_tick_array, uniform_tick_array
from ..constants import Q64
from ..errors import InvalidSlippageError, SwapError, TickArraySequenceError
from .pools import make_pool, make_tick_arrays


class TestTickArraySequence:
    """TickArraySequence tests"""

    def test_sorted_bounds(self):
        sequence = TickArraySequence([empty_tick_array(176), empty_tick_array(0), None], 2)
        assert sequence.start_index() == 0
        assert sequence.end_index() == 351

    def test_empty(self):
        with pytest.raises(TickArraySequenceError):
            TickArraySequence([], 2)

    def test_gap(self):
        with pytest.raises(TickArraySequenceError):
            TickArraySequence([empty_tick_array(0), empty_tick_array(352)], 2)

    def test_tick_outside(self):
        sequence = TickArraySequence([empty_tick_array(0)], 2)
        with pytest.raises(TickArraySequenceError):
            sequence.tick(176)

    def test_tick_off_spacing(self):
        sequence = TickArraySequence([empty_tick_array(0)], 2)
        with pytest.raises(TickArraySequenceError):
            sequence.tick(3)

    def test_next_initialized(self):
        sequence = TickArraySequence([uniform_tick_array(0)], 2)
        tick, index = sequence.next_initialized_tick(5)
        assert tick is not None
        assert index == 6

    def test_prev_initialized_includes_current(self):
        sequence = TickArraySequence([uniform_tick_array(0)], 2)
        tick, index = sequence.prev_initialized_tick(6)
        assert tick is not None
        assert index == 6

    def test_uninitialized_runs_to_the_end(self):
        sequence = TickArraySequence([empty_tick_array(0), empty_tick_array(176)], 2)
        assert sequence.next_initialized_tick(10) == (None, 351)
        assert sequence.prev_initialized_tick(300) == (None, 0)


class TestComputeSwapStep:
    """One swap step"""

    def test_exact_in_stops_short_of_target(self):
        step = compute_swap_step(1_000_000, 3000, 10 ** 12, Q64, Q64 // 2, True, True)
        assert step.amount_in + step.fee_amount == 1_000_000
        assert step.fee_amount >= 3000
        assert Q64 // 2 < step.next_sqrt_price < Q64

    def test_exact_in_reaches_target(self):
        target = Q64 - Q64 // 10 ** 6
        step = compute_swap_step(10 ** 18, 3000, 10 ** 12, Q64, target, True, True)
        assert step.next_sqrt_price == target
        assert step.amount_in + step.fee_amount < 10 ** 18

    def test_exact_out_caps_output(self):
        step = compute_swap_step(1_000_000, 3000, 10 ** 12, Q64, 2 * Q64, False, False)
        assert step.amount_out == 1_000_000
        assert step.amount_in > 1_000_000


class TestSwapQuoteByInputToken:
    """Exact-input swap quotes"""

    def test_a_to_b(self):
        pool = make_pool()
        quote = swap_quote_by_input_token(1_000_000_000, True, 100, pool, make_tick_arrays(pool))

        # 1 SOL at ~200 USDC minus the 0.3% fee and a little price impact
        assert quote.token_in == 1_000_000_000
        assert 199_000_000 < quote.token_est_out < 199_400_000
        assert quote.token_min_out == quote.token_est_out * 9900 // 10000
        assert quote.trade_fee == pytest.approx(3_000_000, rel=1e-4)
        assert quote.next_sqrt_price < pool.sqrt_price

    def test_b_to_a(self):
        pool = make_pool()
        quote = swap_quote_by_input_token(200_000_000, False, 0, pool, make_tick_arrays(pool))
        assert 990_000_000 < quote.token_est_out < 997_000_000
        assert quote.token_min_out == quote.token_est_out
        assert quote.next_sqrt_price > pool.sqrt_price

    def test_accepts_a_sequence(self):
        pool = make_pool()
        sequence = TickArraySequence(make_tick_arrays(pool), pool.tick_spacing)
        from_list = swap_quote_by_input_token(1_000_000, True, 0, pool, make_tick_arrays(pool))
        from_sequence = swap_quote_by_input_token(1_000_000, True, 0, pool, sequence)
        assert from_list == from_sequence

    def test_zero_amount(self):
        pool = make_pool()
        with pytest.raises(SwapError):
            swap_quote_by_input_token(0, True, 0, pool, make_tick_arrays(pool))

    def test_past_loaded_tick_arrays(self):
        pool = make_pool()
        with pytest.raises(SwapError):
            swap_quote_by_input_token(10 ** 13, True, 0, pool, make_tick_arrays(pool))

    def test_invalid_slippage(self):
        pool = make_pool()
        with pytest.raises(InvalidSlippageError):
            swap_quote_by_input_token(1000, True, 10001, pool, make_tick_arrays(pool))


class TestSwapQuoteByOutputToken:
    """Exact-output swap quotes"""

    def test_receive_b(self):
        pool = make_pool()
        quote = swap_quote_by_output_token(200_000_000, False, 100, pool, make_tick_arrays(pool))

        assert quote.token_out == 200_000_000
        # ~1 SOL plus the 0.3% fee
        assert 1_003_000_000 < quote.token_est_in < 1_005_000_000
        assert quote.token_max_in == -(-quote.token_est_in * 10100 // 10000)
        assert quote.next_sqrt_price < pool.sqrt_price

    def test_receive_a(self):
        pool = make_pool()
        quote = swap_quote_by_output_token(1_000_000_000, True, 0, pool, make_tick_arrays(pool))
        assert quote.token_out == 1_000_000_000
        assert 200_600_000 < quote.token_est_in < 201_000_000
        assert quote.next_sqrt_price > pool.sqrt_price

    def test_output_inverts_input(self):
        """Paying the quoted input buys back at least the requested output"""
        pool = make_pool()
        tick_arrays = make_tick_arrays(pool)
        out_quote = swap_quote_by_output_token(50_000_000, False, 0, pool, tick_arrays)
        in_quote = swap_quote_by_input_token(out_quote.token_est_in, True, 0, pool, tick_arrays)
        assert in_quote.token_est_out >= 50_000_000


class TestPoolTypes:
    """Pool dataclasses"""

    def test_tick_array_size(self):
        with pytest.raises(ValueError):
            TickArray(start_tick_index=0, ticks=[])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
