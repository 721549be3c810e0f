"""
Pool data types

Snapshots of the concentrated-liquidity pool state a quote runs against.
Numeric fields are ints to keep on-chain precision. JSON input is parsed
by the request schemas, which build these dataclasses.
"""

from dataclasses import dataclass, field
from typing import List

from ..constants import TICK_ARRAY_SIZE, FeeRatePpm


@dataclass
class FusionPool:
    """Pool global state

    - sqrt_price: current √price (Q64.64)
    - tick_current_index: tick containing the current price
    - tick_spacing: distance between initializable ticks
    - fee_rate: swap fee in parts per million
    - liquidity: active liquidity at the current price
    """
    sqrt_price: int
    tick_current_index: int
    tick_spacing: int
    fee_rate: FeeRatePpm
    liquidity: int


@dataclass
class Tick:
    """Tick-indexed state

    - initialized: the tick bounds at least one position
    - liquidity_net: liquidity change when the price crosses upward (ΔL)
    """
    initialized: bool = False
    liquidity_net: int = 0


@dataclass
class TickArray:
    """TICK_ARRAY_SIZE consecutive ticks starting at start_tick_index"""
    start_tick_index: int
    ticks: List[Tick] = field(default_factory=lambda: [Tick() for _ in range(TICK_ARRAY_SIZE)])

    def __post_init__(self):
        if len(self.ticks) != TICK_ARRAY_SIZE:
            raise ValueError(f"A tick array holds {TICK_ARRAY_SIZE} ticks, got {len(self.ticks)}")


def empty_tick_array(start_tick_index: int) -> TickArray:
    """Tick array with no initialized ticks"""
    return TickArray(start_tick_index=start_tick_index)


def uniform_tick_array(start_tick_index: int, liquidity_net: int = 0) -> TickArray:
    """Tick array whose ticks are all initialized with the same liquidity_net"""
    return TickArray(
        start_tick_index=start_tick_index,
        ticks=[Tick(initialized=True, liquidity_net=liquidity_net) for _ in range(TICK_ARRAY_SIZE)],
    )
