"""
Position quotes: leveraged liquidity (LP) positions and spot positions
"""

from .types import COMPUTED, Amount, Computed, Explicit, PoolToken, to_amount
from .lp_position import (
    IncreaseLiquidityQuoteArgs,
    IncreaseLiquidityQuoteResult,
    LiquidationPrices,
    RepayLpPositionDebtQuoteArgs,
    RepayLpPositionDebtQuoteResult,
    compute_leverage,
    get_liquidity_increase_quote,
    get_lp_position_liquidation_prices,
    get_repay_lp_position_debt_quote,
)
from .spot_position import (
    DecreaseSpotPositionQuoteArgs,
    DecreaseSpotPositionQuoteResult,
    IncreaseSpotPositionQuoteArgs,
    IncreaseSpotPositionQuoteResult,
    TradableAmountArgs,
    calculate_tuna_spot_position_protocol_fee,
    get_decrease_spot_position_quote,
    get_increase_spot_position_quote,
    get_liquidation_price,
    get_spot_position_liquidation_price_bps,
    get_tradable_amount,
)
