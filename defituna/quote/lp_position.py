"""
Liquidity position quotes

Sizing of a leveraged concentrated-liquidity position: how much of each
token the position ends up holding after protocol fees and the internal
rebalancing swap, the minimum totals to enforce at execution time and the
collateral ceiling to authorize.

Also: liquidation prices of an LP position, leverage, and the quote for
repaying part of a position's debt.
"""

import logging
import math
from dataclasses import dataclass
from typing import NamedTuple, Optional, Union

from ..constants import DEFAULT_MAX_AMOUNT_SLIPPAGE, HUNDRED_PERCENT, Q64_RESOLUTION, FeeRatePpm, PercentageBp
from ..errors import (
    AmbiguousComputedAmountError,
    InvalidAmountError,
    InvalidLiquidationThresholdError,
    InvalidPositionError,
    InvalidSlippageError,
    InvalidSqrtPriceError,
    InvalidTickRangeError,
)
from ..math.fees import calculate_tuna_protocol_fee, try_apply_swap_fee
from ..math.liquidity_math import (
    get_amounts_from_liquidity,
    get_liquidity_from_a,
    get_liquidity_from_amounts,
    get_liquidity_from_b,
    get_token_a_from_liquidity,
    get_token_b_from_liquidity,
    position_ratio_x64,
)
from ..math.sqrt_price_math import sqrt_price_x64_to_price_x64
from ..math.tick_math import tick_index_to_sqrt_price
from .types import Amount, Computed, to_amount

logger = logging.getLogger(__name__)


class LiquidationPrices(NamedTuple):
    """Prices (B per A, native units) at which the position gets liquidated; 0.0 if none"""
    lower: float
    upper: float


@dataclass
class IncreaseLiquidityQuoteArgs:
    """Inputs of a liquidity increase quote

    Attributes:
        collateral_a: collateral in token A, or COMPUTED
        collateral_b: collateral in token B, or COMPUTED
        borrow_a: borrow in token A; COMPUTED iff collateral_a is
        borrow_b: borrow in token B; COMPUTED iff collateral_b is
        protocol_fee_rate: market fee on borrowed funds (HUNDRED_PERCENT scale)
        protocol_fee_rate_on_collateral: market fee on collateral (HUNDRED_PERCENT scale)
        swap_fee_rate: pool fee rate (ppm)
        sqrt_price: current pool sqrt price (Q64.64)
        tick_lower_index: position lower tick
        tick_upper_index: position upper tick
        max_amount_slippage: slippage of the totals (HUNDRED_PERCENT scale, 0 = default 50%)
        liquidation_threshold: market liquidation threshold; when set the result
            also carries leverage and liquidation prices
    """
    collateral_a: Union[Amount, int]
    collateral_b: Union[Amount, int]
    borrow_a: Union[Amount, int]
    borrow_b: Union[Amount, int]
    protocol_fee_rate: PercentageBp
    protocol_fee_rate_on_collateral: PercentageBp
    swap_fee_rate: FeeRatePpm
    sqrt_price: int
    tick_lower_index: int
    tick_upper_index: int
    max_amount_slippage: PercentageBp
    liquidation_threshold: Optional[PercentageBp] = None

    def __post_init__(self):
        self.collateral_a = to_amount(self.collateral_a)
        self.collateral_b = to_amount(self.collateral_b)
        self.borrow_a = to_amount(self.borrow_a)
        self.borrow_b = to_amount(self.borrow_b)


@dataclass
class IncreaseLiquidityQuoteResult:
    collateral_a: int
    collateral_b: int
    max_collateral_a: int
    max_collateral_b: int
    borrow_a: int
    borrow_b: int
    total_a: int
    total_b: int
    min_total_a: int
    min_total_b: int
    swap_input: int
    swap_output: int
    swap_a_to_b: bool
    protocol_fee_a: int
    protocol_fee_b: int
    liquidity: Optional[int] = None
    leverage: Optional[float] = None
    liquidation_lower_price: Optional[float] = None
    liquidation_upper_price: Optional[float] = None


def _split_derived(amount: int, collateral: int, borrow: int):
    """Split a derived amount into collateral/borrow in the other side's proportion"""
    if collateral + borrow == 0:
        return 0, 0
    derived_collateral = amount * collateral // (collateral + borrow)
    return derived_collateral, amount - derived_collateral


def get_liquidity_increase_quote(args: IncreaseLiquidityQuoteArgs) -> IncreaseLiquidityQuoteResult:
    """Quote a leveraged liquidity increase

    1. At most one side may be COMPUTED; that side is derived from the
       liquidity the other side provides at the current price.
    2. Protocol fees are charged per side on collateral and borrow.
    3. With both sides explicit, the surplus token is swapped (after the
       pool fee) so the totals match the range's value ratio.
    4. min_total = total - total * slippage / S
       max_collateral = collateral + collateral * slippage / S

    Args:
        args: IncreaseLiquidityQuoteArgs

    Returns:
        IncreaseLiquidityQuoteResult

    Raises:
        InvalidTickRangeError: lower tick above upper tick
        InvalidSlippageError: max_amount_slippage outside [0; HUNDRED_PERCENT]
        AmbiguousComputedAmountError: both collateral sides COMPUTED
        InvalidAmountError: borrow and collateral of one side disagree on COMPUTED
        InvalidSqrtPriceError: the price makes the COMPUTED side underivable
        InvalidFeeRateError: a protocol fee rate above HUNDRED_PERCENT
    """
    sqrt_price = args.sqrt_price

    if args.tick_lower_index > args.tick_upper_index:
        raise InvalidTickRangeError(
            "Incorrect position tick index order: the lower tick must be less or equal the upper tick.",
            {"tick_lower_index": args.tick_lower_index, "tick_upper_index": args.tick_upper_index},
        )

    if args.max_amount_slippage < 0 or args.max_amount_slippage > HUNDRED_PERCENT:
        raise InvalidSlippageError("maxAmountSlippage must be in range [0; HUNDRED_PERCENT]")

    a_computed = isinstance(args.collateral_a, Computed)
    b_computed = isinstance(args.collateral_b, Computed)

    if a_computed and b_computed:
        raise AmbiguousComputedAmountError("Both collateral amounts can't be set to COMPUTED_AMOUNT")

    if a_computed != isinstance(args.borrow_a, Computed):
        raise InvalidAmountError("borrow_a must be COMPUTED exactly when collateral_a is COMPUTED")
    if b_computed != isinstance(args.borrow_b, Computed):
        raise InvalidAmountError("borrow_b must be COMPUTED exactly when collateral_b is COMPUTED")

    max_amount_slippage = args.max_amount_slippage if args.max_amount_slippage > 0 else DEFAULT_MAX_AMOUNT_SLIPPAGE

    collateral_a = 0 if a_computed else args.collateral_a.value
    collateral_b = 0 if b_computed else args.collateral_b.value
    borrow_a = 0 if a_computed else args.borrow_a.value
    borrow_b = 0 if b_computed else args.borrow_b.value
    max_collateral_a = collateral_a
    max_collateral_b = collateral_b

    lower_sqrt_price = tick_index_to_sqrt_price(args.tick_lower_index)
    upper_sqrt_price = tick_index_to_sqrt_price(args.tick_upper_index)

    if a_computed:
        if sqrt_price <= lower_sqrt_price:
            raise InvalidSqrtPriceError(
                "sqrtPrice must be greater than lowerSqrtPrice if collateral A is computed.",
                {"sqrt_price": sqrt_price, "lower_sqrt_price": lower_sqrt_price},
            )
        elif sqrt_price < upper_sqrt_price:
            liquidity = get_liquidity_from_b(collateral_b + borrow_b, lower_sqrt_price, sqrt_price)
            amount_a = get_token_a_from_liquidity(liquidity, sqrt_price, upper_sqrt_price, False)
            collateral_a, borrow_a = _split_derived(amount_a, collateral_b, borrow_b)
            max_collateral_a = collateral_a + collateral_a * max_amount_slippage // HUNDRED_PERCENT
        # Above the range the position holds no token A

    elif b_computed:
        if sqrt_price <= lower_sqrt_price:
            # Below the range the position holds no token B
            pass
        elif sqrt_price < upper_sqrt_price:
            liquidity = get_liquidity_from_a(collateral_a + borrow_a, sqrt_price, upper_sqrt_price)
            amount_b = get_token_b_from_liquidity(liquidity, lower_sqrt_price, sqrt_price, False)
            collateral_b, borrow_b = _split_derived(amount_b, collateral_a, borrow_a)
            max_collateral_b = collateral_b + collateral_b * max_amount_slippage // HUNDRED_PERCENT
        else:
            raise InvalidSqrtPriceError(
                "sqrtPrice must be less than upperSqrtPrice if collateral B is computed.",
                {"sqrt_price": sqrt_price, "upper_sqrt_price": upper_sqrt_price},
            )

    protocol_fee_a = calculate_tuna_protocol_fee(
        collateral_a, borrow_a, args.protocol_fee_rate_on_collateral, args.protocol_fee_rate
    )
    provided_a = collateral_a + borrow_a - protocol_fee_a

    protocol_fee_b = calculate_tuna_protocol_fee(
        collateral_b, borrow_b, args.protocol_fee_rate_on_collateral, args.protocol_fee_rate
    )
    provided_b = collateral_b + borrow_b - protocol_fee_b

    swap_input = 0
    swap_output = 0
    swap_a_to_b = False
    total_a = provided_a
    total_b = provided_b

    if not a_computed and not b_computed:
        ratio = position_ratio_x64(sqrt_price, args.tick_lower_index, args.tick_upper_index)
        price_x128 = sqrt_price * sqrt_price

        # Estimated total position size, in token B
        total = ((provided_a * price_x128) >> 128) + provided_b
        total_a = ((total * ratio.ratio_a) << 64) // price_x128
        total_b = (total * ratio.ratio_b) >> 64

        fee_a = 0
        fee_b = 0

        if total_a < provided_a:
            swap_input = provided_a - total_a
            fee_a = swap_input - try_apply_swap_fee(swap_input, args.swap_fee_rate)
            swap_output = ((swap_input - fee_a) * price_x128) >> 128
            swap_a_to_b = True
        elif total_b < provided_b:
            swap_input = provided_b - total_b
            fee_b = swap_input - try_apply_swap_fee(swap_input, args.swap_fee_rate)
            swap_output = ((swap_input - fee_b) << 128) // price_x128
            swap_a_to_b = False

        # Totals after the swap fee
        total = (((provided_a - fee_a) * price_x128) >> 128) + provided_b - fee_b
        total_a = ((total * ratio.ratio_a) << 64) // price_x128
        total_b = (total * ratio.ratio_b) >> 64

        logger.debug(
            "rebalancing swap: input=%d output=%d a_to_b=%s", swap_input, swap_output, swap_a_to_b
        )

    min_total_a = total_a - total_a * max_amount_slippage // HUNDRED_PERCENT
    min_total_b = total_b - total_b * max_amount_slippage // HUNDRED_PERCENT

    result = IncreaseLiquidityQuoteResult(
        collateral_a=collateral_a,
        collateral_b=collateral_b,
        max_collateral_a=max_collateral_a,
        max_collateral_b=max_collateral_b,
        borrow_a=borrow_a,
        borrow_b=borrow_b,
        total_a=total_a,
        total_b=total_b,
        min_total_a=min_total_a,
        min_total_b=min_total_b,
        swap_input=swap_input,
        swap_output=swap_output,
        swap_a_to_b=swap_a_to_b,
        protocol_fee_a=protocol_fee_a,
        protocol_fee_b=protocol_fee_b,
    )

    if args.liquidation_threshold is not None:
        result.liquidity = get_liquidity_from_amounts(
            sqrt_price, lower_sqrt_price, upper_sqrt_price, total_a, total_b
        )
        result.leverage = compute_leverage(total_a, total_b, borrow_a, borrow_b, sqrt_price)
        liquidation_prices = get_lp_position_liquidation_prices(
            args.tick_lower_index,
            args.tick_upper_index,
            result.liquidity,
            0,
            0,
            borrow_a,
            borrow_b,
            args.liquidation_threshold,
        )
        result.liquidation_lower_price = liquidation_prices.lower
        result.liquidation_upper_price = liquidation_prices.upper

    return result


def _liquidation_prices_inside(
    lower_sqrt_price: int,
    upper_sqrt_price: int,
    liquidity: int,
    leftovers_a: int,
    leftovers_b: int,
    debt_a: int,
    debt_b: int,
    liquidation_threshold: PercentageBp,
) -> LiquidationPrices:
    """Liquidation prices while the price is inside the range

    With x = √P, u = √P_upper, l = √P_lower and threshold t:

        t = (Dx·P + Dy) / (Δx·P + Lx·P + Δy + Ly)
        Δx = L·(1/x - 1/u),  Δy = L·(x - l)

    which is a quadratic a·x² + b·x + c = 0 in x.
    """
    t = liquidation_threshold / HUNDRED_PERCENT
    liquidity_f = float(liquidity)
    lower_sqrt_price_f = lower_sqrt_price / Q64_RESOLUTION
    upper_sqrt_price_f = upper_sqrt_price / Q64_RESOLUTION

    a = debt_a + t * (liquidity_f / upper_sqrt_price_f - leftovers_a)
    b = -2.0 * t * liquidity_f
    c = debt_b + t * (liquidity_f * lower_sqrt_price_f - leftovers_b)
    d = b * b - 4.0 * a * c

    lower_sqrt = 0.0
    upper_sqrt = 0.0

    if d >= 0.0 and a != 0.0:
        lower_sqrt = (-b - math.sqrt(d)) / (2.0 * a)
        upper_sqrt = (-b + math.sqrt(d)) / (2.0 * a)
        if lower_sqrt < 0.0 or lower_sqrt < lower_sqrt_price_f:
            lower_sqrt = 0.0
        if upper_sqrt < 0.0 or upper_sqrt > upper_sqrt_price_f:
            upper_sqrt = 0.0

    return LiquidationPrices(lower_sqrt * lower_sqrt, upper_sqrt * upper_sqrt)


def _liquidation_price_outside(
    amount_a: int,
    amount_b: int,
    leftovers_a: int,
    leftovers_b: int,
    debt_a: int,
    debt_b: int,
    liquidation_threshold: PercentageBp,
) -> float:
    """Liquidation price once the position is entirely one token

    Below the range (all A):  P = (Dy - t·Ly) / (t·(X + Lx) - Dx)
    Above the range (all B):  P = (t·(Y + Ly) - Dy) / (Dx - t·Lx)
    """
    t = liquidation_threshold / HUNDRED_PERCENT

    if amount_a == 0 and amount_b == 0:
        return 0.0

    if amount_b == 0:
        numerator = debt_b - t * leftovers_b
        denominator = t * (amount_a + leftovers_a) - debt_a
    elif amount_a == 0:
        numerator = t * (amount_b + leftovers_b) - debt_b
        denominator = debt_a - t * leftovers_a
    else:
        raise InvalidAmountError("Exactly one of amount_a and amount_b must be non-zero")

    if denominator == 0.0:
        return 0.0
    return numerator / denominator


def get_lp_position_liquidation_prices(
    tick_lower_index: int,
    tick_upper_index: int,
    liquidity: int,
    leftovers_a: int,
    leftovers_b: int,
    debt_a: int,
    debt_b: int,
    liquidation_threshold: PercentageBp,
) -> LiquidationPrices:
    """Lower and upper liquidation prices of an LP position

    The in-range solution is used where it exists, otherwise the price at
    which the fully converted (one-sided) position hits the threshold.

    Args:
        tick_lower_index: position lower tick
        tick_upper_index: position upper tick
        liquidity: position liquidity
        leftovers_a: token A held by the position outside the liquidity
        leftovers_b: token B held by the position outside the liquidity
        debt_a: borrowed token A
        debt_b: borrowed token B
        liquidation_threshold: market threshold (HUNDRED_PERCENT scale)

    Returns:
        LiquidationPrices; 0.0 where no liquidation happens

    Raises:
        InvalidTickRangeError: lower tick not below upper tick
        InvalidLiquidationThresholdError: threshold of 100% or more
    """
    if tick_lower_index >= tick_upper_index:
        raise InvalidTickRangeError(
            "Incorrect position tick index order: the lower tick must be less then the upper tick.",
            {"tick_lower_index": tick_lower_index, "tick_upper_index": tick_upper_index},
        )

    if liquidation_threshold >= HUNDRED_PERCENT:
        raise InvalidLiquidationThresholdError(
            "Incorrect liquidation_threshold value.", {"liquidation_threshold": liquidation_threshold}
        )

    lower_sqrt_price = tick_index_to_sqrt_price(tick_lower_index)
    upper_sqrt_price = tick_index_to_sqrt_price(tick_upper_index)

    inside = _liquidation_prices_inside(
        lower_sqrt_price, upper_sqrt_price, liquidity,
        leftovers_a, leftovers_b, debt_a, debt_b, liquidation_threshold,
    )

    amount_a = get_token_a_from_liquidity(liquidity, lower_sqrt_price, upper_sqrt_price, False)
    amount_b = get_token_b_from_liquidity(liquidity, lower_sqrt_price, upper_sqrt_price, False)

    outside_lower = _liquidation_price_outside(
        amount_a, 0, leftovers_a, leftovers_b, debt_a, debt_b, liquidation_threshold
    )
    outside_upper = _liquidation_price_outside(
        0, amount_b, leftovers_a, leftovers_b, debt_a, debt_b, liquidation_threshold
    )

    if outside_lower < 0.0 or outside_lower > (lower_sqrt_price / Q64_RESOLUTION) ** 2:
        outside_lower = 0.0
    if outside_upper < 0.0 or outside_upper < (upper_sqrt_price / Q64_RESOLUTION) ** 2:
        outside_upper = 0.0

    return LiquidationPrices(
        lower=inside.lower if inside.lower > 0.0 else outside_lower,
        upper=inside.upper if inside.upper > 0.0 else outside_upper,
    )


def compute_leverage(total_a: int, total_b: int, debt_a: int, debt_b: int, sqrt_price: int) -> float:
    """Position leverage: total value / (total value - debt value)

    Values are in token B at the current price. An empty position has
    leverage 1.0.

    Raises:
        InvalidPositionError: debt is not below the position value
    """
    price_x64 = sqrt_price_x64_to_price_x64(sqrt_price)

    total = ((total_a * price_x64) >> 64) + total_b
    debt = ((debt_a * price_x64) >> 64) + debt_b

    if total == 0:
        return 1.0

    if debt >= total:
        raise InvalidPositionError(
            "The debt is greater than the total size", {"total": total, "debt": debt}
        )

    return total / (total - debt)


@dataclass
class RepayLpPositionDebtQuoteArgs:
    liquidity: int
    debt_a: int
    debt_b: int
    leftovers_a: int
    leftovers_b: int
    tick_lower_index: int
    tick_upper_index: int
    repay_a: int
    repay_b: int
    sqrt_price: int
    liquidation_threshold: PercentageBp


@dataclass
class RepayLpPositionDebtQuoteResult:
    debt_a: int
    debt_b: int
    leverage: float
    liquidation_lower_price: float
    liquidation_upper_price: float


def get_repay_lp_position_debt_quote(args: RepayLpPositionDebtQuoteArgs) -> RepayLpPositionDebtQuoteResult:
    """Debt, leverage and liquidation prices after repaying part of the debt

    Raises:
        InvalidPositionError: zero liquidity
        InvalidAmountError: repayment larger than the debt
    """
    if args.liquidity == 0:
        raise InvalidPositionError("Position liquidity can't be zero.")

    if args.debt_a < args.repay_a:
        raise InvalidAmountError(
            "Position debt A is less than the repaid amount.",
            {"debt_a": args.debt_a, "repay_a": args.repay_a},
        )
    if args.debt_b < args.repay_b:
        raise InvalidAmountError(
            "Position debt B is less than the repaid amount.",
            {"debt_b": args.debt_b, "repay_b": args.repay_b},
        )

    debt_a = args.debt_a - args.repay_a
    debt_b = args.debt_b - args.repay_b

    liquidation_prices = get_lp_position_liquidation_prices(
        args.tick_lower_index,
        args.tick_upper_index,
        args.liquidity,
        args.leftovers_a,
        args.leftovers_b,
        debt_a,
        debt_b,
        args.liquidation_threshold,
    )

    total = get_amounts_from_liquidity(
        args.liquidity,
        args.sqrt_price,
        tick_index_to_sqrt_price(args.tick_lower_index),
        tick_index_to_sqrt_price(args.tick_upper_index),
        False,
    )
    leverage = compute_leverage(
        total.a + args.leftovers_a, total.b + args.leftovers_b, debt_a, debt_b, args.sqrt_price
    )

    return RepayLpPositionDebtQuoteResult(
        debt_a=debt_a,
        debt_b=debt_b,
        leverage=leverage,
        liquidation_lower_price=liquidation_prices.lower,
        liquidation_upper_price=liquidation_prices.upper,
    )
