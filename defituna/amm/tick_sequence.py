"""
Tick array sequence

A contiguous run of tick arrays around the current price. The swap
simulator walks it to find the next initialized tick in either direction.
"""

from typing import Iterable, List, Optional, Tuple

from ..constants import TICK_ARRAY_SIZE
from ..errors import TickArraySequenceError
from ..math.tick_math import (
    get_initializable_tick_index,
    get_next_initializable_tick_index,
    get_prev_initializable_tick_index,
)
from .types import Tick, TickArray


class TickArraySequence:
    """Sorted, evenly spaced tick arrays

    Raises:
        TickArraySequenceError: no arrays given, or arrays leave a gap
    """

    def __init__(self, tick_arrays: Iterable[Optional[TickArray]], tick_spacing: int):
        arrays: List[TickArray] = sorted(
            (a for a in tick_arrays if a is not None),
            key=lambda a: a.start_tick_index,
        )
        if not arrays:
            raise TickArraySequenceError("At least one tick array is required")

        required_spacing = TICK_ARRAY_SIZE * tick_spacing
        for current, following in zip(arrays, arrays[1:]):
            if following.start_tick_index - current.start_tick_index != required_spacing:
                raise TickArraySequenceError(
                    "Tick arrays are not evenly spaced",
                    {
                        "start_tick_index": current.start_tick_index,
                        "next_start_tick_index": following.start_tick_index,
                        "expected_spacing": required_spacing,
                    },
                )

        self.tick_arrays = arrays
        self.tick_spacing = tick_spacing

    def start_index(self) -> int:
        return self.tick_arrays[0].start_tick_index

    def end_index(self) -> int:
        return self.tick_arrays[-1].start_tick_index + TICK_ARRAY_SIZE * self.tick_spacing - 1

    def tick(self, tick_index: int) -> Tick:
        if tick_index < self.start_index() or tick_index > self.end_index():
            raise TickArraySequenceError(
                f"Tick index {tick_index} is outside the loaded tick arrays",
                {"start": self.start_index(), "end": self.end_index()},
            )
        if tick_index % self.tick_spacing != 0:
            raise TickArraySequenceError(
                f"Tick index {tick_index} is not a multiple of the tick spacing {self.tick_spacing}"
            )

        ticks_in_array = TICK_ARRAY_SIZE * self.tick_spacing
        tick_array = self.tick_arrays[(tick_index - self.start_index()) // ticks_in_array]
        return tick_array.ticks[(tick_index - tick_array.start_tick_index) // self.tick_spacing]

    def next_initialized_tick(self, tick_index: int) -> Tuple[Optional[Tick], int]:
        """First initialized tick above tick_index

        Returns (None, end_index) when the loaded arrays run out.
        """
        end_index = self.end_index()
        next_index = tick_index
        while True:
            next_index = get_next_initializable_tick_index(next_index, self.tick_spacing)
            if next_index > end_index:
                return None, end_index
            tick = self.tick(next_index)
            if tick.initialized:
                return tick, next_index

    def prev_initialized_tick(self, tick_index: int) -> Tuple[Optional[Tick], int]:
        """Initialized tick at or below tick_index

        Returns (None, start_index) when the loaded arrays run out.
        """
        start_index = self.start_index()
        prev_index = get_initializable_tick_index(tick_index, self.tick_spacing, False)
        while True:
            if prev_index < start_index:
                return None, start_index
            tick = self.tick(prev_index)
            if tick.initialized:
                return tick, prev_index
            prev_index = get_prev_initializable_tick_index(prev_index, self.tick_spacing)
