"""
Math layer for Tuna position quotes

Integer fixed-point functions matching on-chain rounding:
- fixed: mul_div and rounding helpers
- lending: vault shares <-> funds, borrow curve, interest accrual
- fees: protocol and swap fee application
- tick_math: tick <-> Q64.64 sqrt price
- sqrt_price_math: price conversions and next sqrt price after a swap
- liquidity_math: liquidity <-> token amounts, position ratio
"""

from .fixed import (
    mul_div,
    js_round,
)
from .lending import (
    shares_to_funds,
    funds_to_shares,
    borrow_rate_multiplier,
    VaultState,
)
from .fees import (
    apply_tuna_protocol_fee,
    reverse_apply_tuna_protocol_fee,
    apply_swap_fee,
    reverse_apply_swap_fee,
    calculate_tuna_protocol_fee,
)
from .sqrt_price_math import (
    price_to_sqrt_price,
    sqrt_price_to_price,
)
from .tick_math import (
    tick_index_to_sqrt_price,
    sqrt_price_to_tick_index,
    price_to_tick_index,
    tick_index_to_price,
    get_tick_array_start_tick_index,
)
from .liquidity_math import (
    get_liquidity_from_a,
    get_liquidity_from_b,
    get_token_a_from_liquidity,
    get_token_b_from_liquidity,
    get_amounts_from_liquidity,
    get_liquidity_from_amounts,
    position_ratio_x64,
)
