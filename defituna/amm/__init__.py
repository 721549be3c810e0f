"""
Concentrated-liquidity pool model: pool state, tick arrays and swap quotes
"""

from .types import FusionPool, Tick, TickArray, empty_tick_array, uniform_tick_array
from .tick_sequence import TickArraySequence
from .swap import (
    ExactInSwapQuote,
    ExactOutSwapQuote,
    compute_swap,
    swap_quote_by_input_token,
    swap_quote_by_output_token,
)
