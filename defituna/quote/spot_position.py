"""
Spot position quotes

A spot position holds a single token (the position token), bought with the
user's collateral plus funds borrowed in the opposite token, and sized by a
leverage multiplier L:

    borrow = total * (L - 1) / L

Opening, growing, shrinking and flipping such a position always runs through
one pool swap; its effect on the pool price is reported as price impact.

Amounts derived from the pool price are computed on IEEE doubles with
ceil / floor / round-half-up, the same way the web client computes them, so
quotes match the client to the unit.

Key formulas:
    tradable = C·Fc·Fs / (1 - Fb·Fs·(L - 1) / L)
    liquidation price (position A) = debt / (amount · threshold)
    liquidation price (position B) = amount · threshold / debt
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from ..amm.swap import swap_quote_by_input_token, swap_quote_by_output_token
from ..amm.tick_sequence import TickArraySequence
from ..amm.types import FusionPool, TickArray
from ..constants import FEE_RATE_DENOMINATOR, HUNDRED_PERCENT, PercentageBp
from ..errors import (
    InvalidAmountError,
    InvalidFeeRateError,
    InvalidLeverageError,
    InvalidLiquidationThresholdError,
    InvalidPositionError,
)
from ..math.fees import (
    apply_swap_fee,
    apply_tuna_protocol_fee,
    reverse_apply_swap_fee,
    reverse_apply_tuna_protocol_fee,
)
from ..math.fixed import js_round
from ..math.liquidity_math import TokenPair
from ..math.sqrt_price_math import sqrt_price_to_price
from .types import PoolToken

logger = logging.getLogger(__name__)

TickArrays = Union[TickArraySequence, Iterable[Optional[TickArray]]]


@dataclass
class IncreaseSpotPositionQuoteArgs:
    """
    Attributes:
        increase_amount: position size increase, in the collateral token
        collateral_token: token the user pays with
        position_token: token the position holds
        leverage: [1.0 .. 100.0]
        protocol_fee_rate: market fee on borrowed funds (HUNDRED_PERCENT scale)
        protocol_fee_rate_on_collateral: market fee on collateral (HUNDRED_PERCENT scale)
        pool: pool state
        tick_arrays: tick arrays around the current price
    """
    increase_amount: int
    collateral_token: PoolToken
    position_token: PoolToken
    leverage: float
    protocol_fee_rate: PercentageBp
    protocol_fee_rate_on_collateral: PercentageBp
    pool: FusionPool
    tick_arrays: TickArrays


@dataclass
class IncreaseSpotPositionQuoteResult:
    collateral: int
    borrow: int
    estimated_amount: int
    swap_input_amount: int
    protocol_fee_a: int
    protocol_fee_b: int
    price_impact: float


@dataclass
class DecreaseSpotPositionQuoteArgs:
    """
    Attributes:
        decrease_amount: decrease, in the collateral token
        collateral_token: token the user was paid collateral in
        position_token: token the position holds
        leverage: leverage of the opposite position opened on a flip
        position_amount: current position amount, in the position token
        position_debt: current debt, in the token opposite to the position token
        reduce_only: never decrease past the current position
        protocol_fee_rate: market fee on borrowed funds
        protocol_fee_rate_on_collateral: market fee on collateral
        pool: pool state
        tick_arrays: tick arrays around the current price
    """
    decrease_amount: int
    collateral_token: PoolToken
    position_token: PoolToken
    leverage: float
    position_amount: int
    position_debt: int
    reduce_only: bool
    protocol_fee_rate: PercentageBp
    protocol_fee_rate_on_collateral: PercentageBp
    pool: FusionPool
    tick_arrays: TickArrays


@dataclass
class DecreaseSpotPositionQuoteResult:
    decrease_percent: int
    collateral_token: PoolToken
    position_token: PoolToken
    collateral: int
    borrow: int
    swap_input_amount: int
    estimated_amount: int
    protocol_fee_a: int
    protocol_fee_b: int
    price_impact: float


@dataclass
class TradableAmountArgs:
    """
    Attributes:
        collateral_token: token the user pays with
        new_position_token: token of the position after the trade
        position_token: token of the existing position (new_position_token
            when there is none)
        position_amount: existing position amount, in position_token
        position_debt: existing debt, in the opposite token
        reduce_only: only allow reducing the existing position
        leverage: [1.0 .. 100.0]
        available_balance: wallet balance in the collateral token
        protocol_fee_rate: market fee on borrowed funds
        protocol_fee_rate_on_collateral: market fee on collateral
        pool: pool state
        tick_arrays: tick arrays around the current price
    """
    collateral_token: PoolToken
    new_position_token: PoolToken
    position_token: PoolToken
    position_amount: int
    position_debt: int
    reduce_only: bool
    leverage: float
    available_balance: int
    protocol_fee_rate: PercentageBp
    protocol_fee_rate_on_collateral: PercentageBp
    pool: FusionPool
    tick_arrays: TickArrays


def _check_leverage_and_fees(leverage: float, protocol_fee_rate: int, protocol_fee_rate_on_collateral: int) -> None:
    if leverage < 1.0:
        raise InvalidLeverageError("leverage must be greater or equal than 1.0", {"leverage": leverage})

    for rate in (protocol_fee_rate, protocol_fee_rate_on_collateral):
        if rate < 0 or rate >= HUNDRED_PERCENT:
            raise InvalidFeeRateError(
                "protocolFeeRate must be greater or equal than zero and less than HUNDRED_PERCENT",
                {"protocol_fee_rate": rate},
            )


def _price(sqrt_price: int) -> float:
    return sqrt_price_to_price(sqrt_price, 1, 1)


def _price_impact(old_sqrt_price: int, new_sqrt_price: int) -> float:
    """Relative price move, in percents"""
    return abs(_price(new_sqrt_price) / _price(old_sqrt_price) - 1.0) * 100


def calculate_tuna_spot_position_protocol_fee(
    collateral_token: PoolToken,
    borrowed_token: PoolToken,
    collateral: int,
    borrow: int,
    protocol_fee_rate_on_collateral: PercentageBp,
    protocol_fee_rate: PercentageBp,
) -> TokenPair:
    """Protocol fee per pool token for a spot deposit

    The collateral fee lands on collateral_token, the borrow fee on
    borrowed_token; both may be the same token.
    """
    collateral_fee = collateral - apply_tuna_protocol_fee(collateral, protocol_fee_rate_on_collateral)
    borrow_fee = borrow - apply_tuna_protocol_fee(borrow, protocol_fee_rate)

    fee_a = (collateral_fee if collateral_token == PoolToken.A else 0) + (
        borrow_fee if borrowed_token == PoolToken.A else 0
    )
    fee_b = (collateral_fee if collateral_token == PoolToken.B else 0) + (
        borrow_fee if borrowed_token == PoolToken.B else 0
    )
    return TokenPair(fee_a, fee_b)


def get_increase_spot_position_quote(args: IncreaseSpotPositionQuoteArgs) -> IncreaseSpotPositionQuoteResult:
    """Quote opening or growing a spot position

    When the collateral is already the position token, only the borrowed
    part goes through the swap; otherwise the whole increase is swapped.

    Args:
        args: IncreaseSpotPositionQuoteArgs

    Returns:
        IncreaseSpotPositionQuoteResult

    Raises:
        InvalidLeverageError: leverage below 1.0
        InvalidFeeRateError: a fee rate outside [0; HUNDRED_PERCENT)
        InvalidAmountError: non-positive increase amount
        SwapError: the swap does not fit the loaded tick arrays
    """
    _check_leverage_and_fees(args.leverage, args.protocol_fee_rate, args.protocol_fee_rate_on_collateral)
    if args.increase_amount <= 0:
        raise InvalidAmountError("increaseAmount must be greater than zero")

    pool = args.pool
    leverage = args.leverage
    increase_amount = args.increase_amount
    next_sqrt_price = pool.sqrt_price
    price = _price(pool.sqrt_price)

    if args.position_token != args.collateral_token:
        borrow = math.ceil(float(increase_amount) * (leverage - 1) / leverage)
        collateral = increase_amount - apply_swap_fee(
            apply_tuna_protocol_fee(borrow, args.protocol_fee_rate), pool.fee_rate
        )
        collateral = reverse_apply_swap_fee(collateral, pool.fee_rate, False)
        collateral = reverse_apply_tuna_protocol_fee(collateral, args.protocol_fee_rate_on_collateral, False)

        swap_input_amount = increase_amount
        if args.collateral_token == PoolToken.A:
            estimated_amount = js_round(float(increase_amount) * price)
        else:
            estimated_amount = js_round(float(increase_amount) / price)
    else:
        position_to_borrowed_token_price = price if args.collateral_token == PoolToken.A else 1.0 / price

        borrow_in_position_token = math.ceil(float(increase_amount) * (leverage - 1) / leverage)
        borrow = math.ceil(borrow_in_position_token * position_to_borrowed_token_price)

        borrow_in_position_token_with_fees = apply_swap_fee(
            apply_tuna_protocol_fee(borrow_in_position_token, args.protocol_fee_rate), pool.fee_rate
        )
        collateral = increase_amount - borrow_in_position_token_with_fees
        collateral = reverse_apply_tuna_protocol_fee(collateral, args.protocol_fee_rate_on_collateral, False)

        swap_input_amount = apply_tuna_protocol_fee(borrow, args.protocol_fee_rate)
        estimated_amount = increase_amount

    if swap_input_amount > 0:
        # Input is the borrowed token, i.e. token A when the position is B
        quote = swap_quote_by_input_token(
            swap_input_amount, args.position_token == PoolToken.B, 0, pool, args.tick_arrays
        )
        next_sqrt_price = quote.next_sqrt_price

    fees = calculate_tuna_spot_position_protocol_fee(
        args.collateral_token,
        args.position_token.opposite,
        collateral,
        borrow,
        args.protocol_fee_rate_on_collateral,
        args.protocol_fee_rate,
    )

    logger.debug(
        "spot increase: collateral=%d borrow=%d swap_input=%d estimated=%d",
        collateral, borrow, swap_input_amount, estimated_amount,
    )

    return IncreaseSpotPositionQuoteResult(
        collateral=collateral,
        borrow=borrow,
        estimated_amount=estimated_amount,
        swap_input_amount=swap_input_amount,
        protocol_fee_a=fees.a,
        protocol_fee_b=fees.b,
        price_impact=_price_impact(pool.sqrt_price, next_sqrt_price),
    )


def get_decrease_spot_position_quote(args: DecreaseSpotPositionQuoteArgs) -> DecreaseSpotPositionQuoteResult:
    """Quote shrinking, closing or flipping a spot position

    A decrease up to the position amount closes that share of the position
    and repays the same share of the debt. A larger decrease (unless
    reduce_only) closes the position and opens the opposite one with the
    remainder at the given leverage.

    Args:
        args: DecreaseSpotPositionQuoteArgs

    Returns:
        DecreaseSpotPositionQuoteResult; on a flip position_token is the
        new position's token

    Raises:
        InvalidLeverageError: leverage below 1.0
        InvalidFeeRateError: a fee rate outside [0; HUNDRED_PERCENT)
        InvalidAmountError: non-positive decrease amount
        SwapError: the swap does not fit the loaded tick arrays
    """
    _check_leverage_and_fees(args.leverage, args.protocol_fee_rate, args.protocol_fee_rate_on_collateral)
    if args.decrease_amount <= 0:
        raise InvalidAmountError("decreaseAmount must be greater than zero")

    pool = args.pool
    tick_arrays = args.tick_arrays
    leverage = args.leverage
    position_token = args.position_token
    collateral_token = args.collateral_token
    position_amount = args.position_amount
    position_debt = args.position_debt

    collateral = 0
    borrow = 0
    swap_input_amount = 0
    estimated_amount = 0
    next_sqrt_price = pool.sqrt_price
    new_position_token = position_token

    price = _price(pool.sqrt_price)
    position_to_opposite_token_price = price if position_token == PoolToken.A else 1.0 / price

    if collateral_token == position_token:
        decrease_amount_in_position_token = args.decrease_amount
    else:
        decrease_amount_in_position_token = js_round(
            float(args.decrease_amount) / position_to_opposite_token_price
        )

    if args.reduce_only and decrease_amount_in_position_token > position_amount:
        decrease_amount_in_position_token = position_amount

    if decrease_amount_in_position_token <= position_amount:
        if position_amount == 0:
            decrease_percent = HUNDRED_PERCENT
        else:
            decrease_percent = min(
                math.floor(float(decrease_amount_in_position_token) * HUNDRED_PERCENT / float(position_amount)),
                HUNDRED_PERCENT,
            )

        estimated_amount = position_amount - decrease_amount_in_position_token

        if collateral_token == position_token:
            if position_debt > 0:
                swap_out = math.floor(float(position_debt) * decrease_percent / HUNDRED_PERCENT)
                if swap_out > 0:
                    quote = swap_quote_by_output_token(
                        swap_out, position_token == PoolToken.B, 0, pool, tick_arrays
                    )
                    next_sqrt_price = quote.next_sqrt_price
                    swap_input_amount = quote.token_est_in
        else:
            swap_input_amount = position_amount - math.floor(
                float(position_amount) * (HUNDRED_PERCENT - decrease_percent) / HUNDRED_PERCENT
            )
            if swap_input_amount > 0:
                quote = swap_quote_by_input_token(
                    swap_input_amount, position_token == PoolToken.A, 0, pool, tick_arrays
                )
                next_sqrt_price = quote.next_sqrt_price

        logger.debug("spot decrease: percent=%d swap_input=%d", decrease_percent, swap_input_amount)
    else:
        decrease_percent = HUNDRED_PERCENT
        new_position_token = position_token.opposite
        increase_amount = decrease_amount_in_position_token - position_amount

        # Size of the new position, in its own token
        estimated_amount = js_round(float(increase_amount) * position_to_opposite_token_price)

        # Borrowed in the old position token
        borrow = js_round(float(increase_amount) * (leverage - 1) / leverage)
        borrow_with_fees = apply_swap_fee(apply_tuna_protocol_fee(borrow, args.protocol_fee_rate), pool.fee_rate)
        collateral = increase_amount - borrow_with_fees

        if position_token == collateral_token:
            # The old debt is bought back first
            if position_debt > 0:
                quote = swap_quote_by_output_token(
                    position_debt, position_token != PoolToken.A, 0, pool, tick_arrays
                )
                swap_input_amount = quote.token_est_in

            swap_input_amount += collateral + apply_tuna_protocol_fee(borrow, args.protocol_fee_rate)
            quote = swap_quote_by_input_token(
                swap_input_amount, position_token == PoolToken.A, 0, pool, tick_arrays
            )
            next_sqrt_price = quote.next_sqrt_price

            collateral = reverse_apply_tuna_protocol_fee(collateral, args.protocol_fee_rate_on_collateral, False)
        else:
            collateral = js_round(float(collateral) * position_to_opposite_token_price)
            collateral = reverse_apply_tuna_protocol_fee(collateral, args.protocol_fee_rate_on_collateral, False)

            swap_input_amount = position_amount + apply_tuna_protocol_fee(borrow, args.protocol_fee_rate)
            quote = swap_quote_by_input_token(
                swap_input_amount, position_token == PoolToken.A, 0, pool, tick_arrays
            )
            next_sqrt_price = quote.next_sqrt_price

        logger.debug(
            "spot flip: %s -> %s collateral=%d borrow=%d swap_input=%d",
            position_token.name, new_position_token.name, collateral, borrow, swap_input_amount,
        )

    fees = calculate_tuna_spot_position_protocol_fee(
        collateral_token,
        position_token.opposite,
        collateral,
        borrow,
        args.protocol_fee_rate_on_collateral,
        args.protocol_fee_rate,
    )

    return DecreaseSpotPositionQuoteResult(
        decrease_percent=decrease_percent,
        collateral_token=collateral_token,
        position_token=new_position_token,
        collateral=collateral,
        borrow=borrow,
        swap_input_amount=swap_input_amount,
        estimated_amount=estimated_amount,
        protocol_fee_a=fees.a,
        protocol_fee_b=fees.b,
        price_impact=_price_impact(pool.sqrt_price, next_sqrt_price),
    )


def get_tradable_amount(args: TradableAmountArgs) -> int:
    """Maximum trade size, in the collateral token

    Solves T = C·Fc·Fs + B·Fb·Fs with B = T·(L - 1) / L for T, where
    Fc, Fb and Fs are the collateral, borrow and swap fee multipliers.
    Flipping an existing position adds its value and the collateral it
    releases.

    Raises:
        InvalidLeverageError: leverage below 1.0
        InvalidFeeRateError: a fee rate outside [0; HUNDRED_PERCENT)
        InvalidPositionError: position_token differs from
            new_position_token on an empty position
    """
    _check_leverage_and_fees(args.leverage, args.protocol_fee_rate, args.protocol_fee_rate_on_collateral)

    if args.position_amount == 0 and args.new_position_token != args.position_token:
        raise InvalidPositionError("positionToken must be set to newPositionToken if positionAmount is zero")

    pool = args.pool
    leverage = args.leverage
    position_token = args.position_token
    position_amount = args.position_amount

    def add_leverage(collateral: int) -> int:
        collateral = apply_tuna_protocol_fee(collateral, args.protocol_fee_rate_on_collateral)
        if args.collateral_token != args.new_position_token:
            collateral = apply_swap_fee(collateral, pool.fee_rate)

        fee_multiplier = (1 - args.protocol_fee_rate / HUNDRED_PERCENT) * (1 - pool.fee_rate / FEE_RATE_DENOMINATOR)
        return math.floor(float(collateral) / (1 - fee_multiplier * (leverage - 1) / leverage))

    if args.new_position_token == position_token:
        return add_leverage(args.available_balance)

    price = _price(pool.sqrt_price)
    position_to_opposite_token_price = price if position_token == PoolToken.A else 1.0 / price

    if args.collateral_token == position_token:
        position_amount_in_collateral_token = position_amount
    else:
        position_amount_in_collateral_token = js_round(float(position_amount) * position_to_opposite_token_price)

    if args.reduce_only:
        return position_amount_in_collateral_token

    if args.collateral_token == position_token:
        repay_cost = 0
        if args.position_debt > 0:
            repay_cost = swap_quote_by_output_token(
                args.position_debt, position_token == PoolToken.B, 0, pool, args.tick_arrays
            ).token_est_in
        position_collateral = position_amount - repay_cost
    elif position_amount > 0:
        position_collateral = swap_quote_by_input_token(
            position_amount, position_token == PoolToken.A, 0, pool, args.tick_arrays
        ).token_est_out - args.position_debt
    else:
        position_collateral = 0

    position_collateral = max(position_collateral, 0)

    # The released collateral is added to the wallet balance
    return position_amount_in_collateral_token + add_leverage(args.available_balance + position_collateral)


def get_liquidation_price(
    position_token: PoolToken,
    amount: float,
    debt: float,
    liquidation_threshold: float,
) -> float:
    """Pool price (B per A, native units) at which a spot position is liquidated

    Args:
        position_token: token the position holds
        amount: position amount
        debt: debt in the opposite token
        liquidation_threshold: (0, 1)

    Returns:
        liquidation price, 0.0 when there is no debt or no position

    Raises:
        InvalidAmountError: negative debt or amount
        InvalidLiquidationThresholdError: threshold outside (0, 1)
    """
    if debt < 0:
        raise InvalidAmountError("debt must be greater or equal than zero")

    if amount < 0:
        raise InvalidAmountError("position amount must be greater or equal than zero")

    if liquidation_threshold <= 0 or liquidation_threshold >= 1.0:
        raise InvalidLiquidationThresholdError("liquidationThreshold must be greater than zero and less than one")

    if debt == 0 or amount == 0:
        return 0.0

    if position_token == PoolToken.A:
        return debt / (amount * liquidation_threshold)
    return (amount * liquidation_threshold) / debt


def get_spot_position_liquidation_price_bps(
    position_token: PoolToken,
    amount: int,
    debt: int,
    liquidation_threshold: PercentageBp,
) -> float:
    """get_liquidation_price with the market threshold on the HUNDRED_PERCENT scale"""
    if liquidation_threshold <= 0 or liquidation_threshold >= HUNDRED_PERCENT:
        raise InvalidLiquidationThresholdError(
            "Incorrect liquidation_threshold value.", {"liquidation_threshold": liquidation_threshold}
        )

    return get_liquidation_price(position_token, amount, debt, liquidation_threshold / HUNDRED_PERCENT)
