"""
Tuna position quoting

Client-side math for leveraged positions on the Tuna lending protocol:
liquidity (LP) position sizing, spot position sizing, tradable amounts and
liquidation prices, all computed against a snapshot of the pool state.
"""

__version__ = "0.1.0"

from .constants import COMPUTED_AMOUNT, HUNDRED_PERCENT
from .errors import TunaQuoteError
from .quote import (
    COMPUTED,
    Explicit,
    PoolToken,
    get_decrease_spot_position_quote,
    get_increase_spot_position_quote,
    get_liquidation_price,
    get_liquidity_increase_quote,
    get_tradable_amount,
)
