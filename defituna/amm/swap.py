"""
Swap simulation

Off-chain replay of the pool's swap loop over a tick array sequence. No
state is modified: the result reports the amounts, the fee and the price
the pool would end at.

Each step moves the price toward the next initialized tick (or the price
limit), consuming the remaining amount. Crossing an initialized tick
applies its liquidity_net.
"""

import logging
from typing import Iterable, NamedTuple, Optional, Union

from ..constants import BPS_DENOMINATOR, MAX_SQRT_PRICE, MIN_SQRT_PRICE, U64_MAX
from ..errors import InvalidSlippageError, SwapError
from ..math.fees import try_apply_swap_fee, try_reverse_apply_swap_fee
from ..math.fixed import mul_div
from ..math.liquidity_math import get_amount_delta_a, get_amount_delta_b
from ..math.sqrt_price_math import get_next_sqrt_price
from ..math.tick_math import sqrt_price_to_tick_index, tick_index_to_sqrt_price
from .tick_sequence import TickArraySequence
from .types import FusionPool, Tick, TickArray

logger = logging.getLogger(__name__)


class SwapStepQuote(NamedTuple):
    amount_in: int
    amount_out: int
    next_sqrt_price: int
    fee_amount: int


class SwapResult(NamedTuple):
    token_a: int
    token_b: int
    next_sqrt_price: int
    next_tick_index: int
    trade_fee: int


class ExactInSwapQuote(NamedTuple):
    """Quote for swapping a known input amount"""
    token_in: int
    token_est_out: int
    token_min_out: int
    trade_fee: int
    next_sqrt_price: int


class ExactOutSwapQuote(NamedTuple):
    """Quote for receiving a known output amount"""
    token_out: int
    token_est_in: int
    token_max_in: int
    trade_fee: int
    next_sqrt_price: int


TickArrays = Union[TickArraySequence, Iterable[Optional[TickArray]]]


def _amount_fixed_delta(
    current_sqrt_price: int,
    target_sqrt_price: int,
    liquidity: int,
    a_to_b: bool,
    specified_input: bool,
) -> int:
    if a_to_b == specified_input:
        return get_amount_delta_a(current_sqrt_price, target_sqrt_price, liquidity, specified_input)
    return get_amount_delta_b(current_sqrt_price, target_sqrt_price, liquidity, specified_input)


def _amount_unfixed_delta(
    current_sqrt_price: int,
    target_sqrt_price: int,
    liquidity: int,
    a_to_b: bool,
    specified_input: bool,
) -> int:
    if a_to_b == specified_input:
        return get_amount_delta_b(current_sqrt_price, target_sqrt_price, liquidity, not specified_input)
    return get_amount_delta_a(current_sqrt_price, target_sqrt_price, liquidity, not specified_input)


def compute_swap_step(
    amount_remaining: int,
    fee_rate: int,
    liquidity: int,
    current_sqrt_price: int,
    target_sqrt_price: int,
    a_to_b: bool,
    specified_input: bool,
) -> SwapStepQuote:
    """One swap step within a single liquidity interval

    The fixed side is the specified token (input for exact-in, output for
    exact-out). If the remaining amount is enough to reach the target
    price the step ends there, otherwise it ends where the amount runs out.

    Args:
        amount_remaining: specified token amount still to swap
        fee_rate: pool fee rate (ppm)
        liquidity: active liquidity in the interval
        current_sqrt_price: start of the step
        target_sqrt_price: next tick or price limit
        a_to_b: swap direction
        specified_input: exact-in if True, exact-out if False

    Returns:
        SwapStepQuote
    """
    initial_fixed_delta = _amount_fixed_delta(
        current_sqrt_price, target_sqrt_price, liquidity, a_to_b, specified_input
    )
    fixed_overflow = initial_fixed_delta > U64_MAX

    if specified_input:
        amount_calculated = try_apply_swap_fee(amount_remaining, fee_rate)
    else:
        amount_calculated = amount_remaining

    if not fixed_overflow and initial_fixed_delta <= amount_calculated:
        next_sqrt_price = target_sqrt_price
    else:
        next_sqrt_price = get_next_sqrt_price(
            current_sqrt_price, liquidity, amount_calculated, a_to_b, specified_input
        )

    is_max_swap = next_sqrt_price == target_sqrt_price

    amount_unfixed_delta = _amount_unfixed_delta(
        current_sqrt_price, next_sqrt_price, liquidity, a_to_b, specified_input
    )

    # Short of the target, recompute the fixed side for the actual end price
    if not is_max_swap or fixed_overflow:
        amount_fixed_delta = _amount_fixed_delta(
            current_sqrt_price, next_sqrt_price, liquidity, a_to_b, specified_input
        )
    else:
        amount_fixed_delta = initial_fixed_delta

    if specified_input:
        amount_in, amount_out = amount_fixed_delta, amount_unfixed_delta
    else:
        amount_in, amount_out = amount_unfixed_delta, amount_fixed_delta
        amount_out = min(amount_out, amount_remaining)

    if specified_input and not is_max_swap:
        fee_amount = amount_remaining - amount_in
    else:
        fee_amount = try_reverse_apply_swap_fee(amount_in, fee_rate) - amount_in

    return SwapStepQuote(amount_in, amount_out, next_sqrt_price, fee_amount)


def _next_liquidity(liquidity: int, tick: Optional[Tick], a_to_b: bool) -> int:
    liquidity_net = tick.liquidity_net if tick is not None else 0
    if a_to_b:
        return liquidity - liquidity_net
    return liquidity + liquidity_net


def compute_swap(
    token_amount: int,
    sqrt_price_limit: int,
    pool: FusionPool,
    tick_sequence: TickArraySequence,
    a_to_b: bool,
    specified_input: bool,
) -> SwapResult:
    """Simulate a full swap against the pool

    Args:
        token_amount: specified token amount
        sqrt_price_limit: price the swap may not cross (0 for none)
        pool: pool state
        tick_sequence: tick arrays around the current price
        a_to_b: swap direction
        specified_input: exact-in if True, exact-out if False

    Returns:
        SwapResult with the amounts of both tokens and the final price

    Raises:
        SwapError: bad limit, zero amount, or the arrays run out
    """
    if sqrt_price_limit == 0:
        sqrt_price_limit = MIN_SQRT_PRICE if a_to_b else MAX_SQRT_PRICE

    if sqrt_price_limit < MIN_SQRT_PRICE or sqrt_price_limit > MAX_SQRT_PRICE:
        raise SwapError(f"Sqrt price limit out of bounds: {sqrt_price_limit}")

    if (a_to_b and sqrt_price_limit > pool.sqrt_price) or (not a_to_b and sqrt_price_limit < pool.sqrt_price):
        raise SwapError(
            "Sqrt price limit is on the wrong side of the current price",
            {"sqrt_price_limit": sqrt_price_limit, "sqrt_price": pool.sqrt_price, "a_to_b": a_to_b},
        )

    if token_amount == 0:
        raise SwapError("Swap amount must be greater than zero")

    amount_remaining = token_amount
    amount_calculated = 0
    current_sqrt_price = pool.sqrt_price
    current_tick_index = pool.tick_current_index
    current_liquidity = pool.liquidity
    trade_fee = 0

    while amount_remaining > 0 and sqrt_price_limit != current_sqrt_price:
        if a_to_b:
            next_tick, next_tick_index = tick_sequence.prev_initialized_tick(current_tick_index)
        else:
            next_tick, next_tick_index = tick_sequence.next_initialized_tick(current_tick_index)

        next_tick_sqrt_price = tick_index_to_sqrt_price(next_tick_index)
        if a_to_b:
            target_sqrt_price = max(next_tick_sqrt_price, sqrt_price_limit)
        else:
            target_sqrt_price = min(next_tick_sqrt_price, sqrt_price_limit)

        step = compute_swap_step(
            amount_remaining,
            pool.fee_rate,
            current_liquidity,
            current_sqrt_price,
            target_sqrt_price,
            a_to_b,
            specified_input,
        )

        trade_fee += step.fee_amount

        if specified_input:
            amount_remaining -= step.amount_in + step.fee_amount
            amount_calculated += step.amount_out
        else:
            amount_remaining -= step.amount_out
            amount_calculated += step.amount_in + step.fee_amount

        if step.next_sqrt_price == next_tick_sqrt_price:
            if next_tick is None and amount_remaining > 0 and step.next_sqrt_price != sqrt_price_limit:
                raise SwapError(
                    "Swap runs past the loaded tick arrays",
                    {"tick_index": next_tick_index, "amount_remaining": amount_remaining},
                )
            current_liquidity = _next_liquidity(current_liquidity, next_tick, a_to_b)
            current_tick_index = next_tick_index - 1 if a_to_b else next_tick_index
        elif step.next_sqrt_price != current_sqrt_price:
            current_tick_index = sqrt_price_to_tick_index(step.next_sqrt_price)

        current_sqrt_price = step.next_sqrt_price

        logger.debug(
            "swap step: in=%d out=%d fee=%d sqrt_price=%d tick=%d",
            step.amount_in, step.amount_out, step.fee_amount, current_sqrt_price, current_tick_index,
        )

    swapped_amount = token_amount - amount_remaining
    if a_to_b == specified_input:
        token_a, token_b = swapped_amount, amount_calculated
    else:
        token_a, token_b = amount_calculated, swapped_amount

    return SwapResult(token_a, token_b, current_sqrt_price, current_tick_index, trade_fee)


def _as_sequence(tick_arrays: TickArrays, tick_spacing: int) -> TickArraySequence:
    if isinstance(tick_arrays, TickArraySequence):
        return tick_arrays
    return TickArraySequence(tick_arrays, tick_spacing)


def _check_slippage_bps(slippage_tolerance_bps: int) -> None:
    if slippage_tolerance_bps < 0 or slippage_tolerance_bps > BPS_DENOMINATOR:
        raise InvalidSlippageError(
            f"Slippage tolerance must be in range [0; {BPS_DENOMINATOR}] bps, got {slippage_tolerance_bps}"
        )


def swap_quote_by_input_token(
    token_in: int,
    specified_token_a: bool,
    slippage_tolerance_bps: int,
    pool: FusionPool,
    tick_arrays: TickArrays,
) -> ExactInSwapQuote:
    """Quote an exact-input swap

    Args:
        token_in: input amount
        specified_token_a: True if the input is token A (an A->B swap)
        slippage_tolerance_bps: tolerance for token_min_out, in bps
        pool: pool state
        tick_arrays: tick arrays around the current price

    Returns:
        ExactInSwapQuote
    """
    _check_slippage_bps(slippage_tolerance_bps)
    tick_sequence = _as_sequence(tick_arrays, pool.tick_spacing)

    result = compute_swap(token_in, 0, pool, tick_sequence, specified_token_a, True)
    if specified_token_a:
        swapped_in, token_est_out = result.token_a, result.token_b
    else:
        swapped_in, token_est_out = result.token_b, result.token_a

    token_min_out = mul_div(token_est_out, BPS_DENOMINATOR - slippage_tolerance_bps, BPS_DENOMINATOR)

    return ExactInSwapQuote(
        token_in=swapped_in,
        token_est_out=token_est_out,
        token_min_out=token_min_out,
        trade_fee=result.trade_fee,
        next_sqrt_price=result.next_sqrt_price,
    )


def swap_quote_by_output_token(
    token_out: int,
    specified_token_a: bool,
    slippage_tolerance_bps: int,
    pool: FusionPool,
    tick_arrays: TickArrays,
) -> ExactOutSwapQuote:
    """Quote an exact-output swap

    Args:
        token_out: output amount
        specified_token_a: True if the output is token A (a B->A swap)
        slippage_tolerance_bps: tolerance for token_max_in, in bps
        pool: pool state
        tick_arrays: tick arrays around the current price

    Returns:
        ExactOutSwapQuote
    """
    _check_slippage_bps(slippage_tolerance_bps)
    tick_sequence = _as_sequence(tick_arrays, pool.tick_spacing)

    result = compute_swap(token_out, 0, pool, tick_sequence, not specified_token_a, False)
    if specified_token_a:
        swapped_out, token_est_in = result.token_a, result.token_b
    else:
        swapped_out, token_est_in = result.token_b, result.token_a

    token_max_in = mul_div(token_est_in, BPS_DENOMINATOR + slippage_tolerance_bps, BPS_DENOMINATOR, True)

    return ExactOutSwapQuote(
        token_out=swapped_out,
        token_est_in=token_est_in,
        token_max_in=token_max_in,
        trade_fee=result.trade_fee,
        next_sqrt_price=result.next_sqrt_price,
    )
