"""
Quote value types

PoolToken names one side of a pool. Amount is a tagged value for
collateral and borrow inputs: Explicit(value) for a concrete amount, or
COMPUTED to have the quote derive that side from the other.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from ..constants import COMPUTED_AMOUNT
from ..errors import InvalidAmountError


class PoolToken(Enum):
    A = 0
    B = 1

    @property
    def opposite(self) -> "PoolToken":
        return PoolToken.B if self is PoolToken.A else PoolToken.A

    @classmethod
    def parse(cls, value: Union["PoolToken", str, int]) -> "PoolToken":
        """Accept a PoolToken, 'A'/'B' or the on-chain 0/1"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls[value.strip().upper()]
        return cls(value)


@dataclass(frozen=True)
class Explicit:
    """A concrete token amount"""
    value: int

    def __post_init__(self):
        if self.value < 0:
            raise InvalidAmountError(f"Token amount must be non-negative, got {self.value}")
        if self.value == COMPUTED_AMOUNT:
            raise InvalidAmountError("COMPUTED_AMOUNT is not a concrete amount; use COMPUTED")


@dataclass(frozen=True)
class Computed:
    """Derive this amount from the other side of the position"""

    def __repr__(self) -> str:
        return "COMPUTED"


COMPUTED = Computed()

Amount = Union[Explicit, Computed]


def to_amount(value: Union[Amount, int]) -> Amount:
    """Normalize an int (COMPUTED_AMOUNT marks a derived side) or tagged amount"""
    if isinstance(value, (Explicit, Computed)):
        return value
    if value == COMPUTED_AMOUNT:
        return COMPUTED
    return Explicit(value)


def to_wire(amount: Amount) -> int:
    """Tagged amount to its on-wire u64 form"""
    if isinstance(amount, Computed):
        return COMPUTED_AMOUNT
    return amount.value
