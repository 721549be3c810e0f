"""
Fee Math - protocol and swap fees

Protocol fees are charged by the lending market on the collateral and the
borrowed funds of a position, on the HUNDRED_PERCENT scale. Swap fees are
charged by the pool on the swap input, in parts per million.

Key formulas:
    net   = amount * (S - rate) / S
    gross = amount * S / (S - rate)
"""

from ..constants import FEE_RATE_DENOMINATOR, HUNDRED_PERCENT, FeeRatePpm, PercentageBp
from ..errors import InvalidFeeRateError
from .fixed import div_round_up_if, mul_div


def apply_tuna_protocol_fee(amount: int, protocol_fee_rate: PercentageBp, round_up: bool = False) -> int:
    """Amount left after the protocol fee is taken"""
    return mul_div(amount, HUNDRED_PERCENT - protocol_fee_rate, HUNDRED_PERCENT, round_up)


def reverse_apply_tuna_protocol_fee(amount: int, protocol_fee_rate: PercentageBp, round_up: bool = True) -> int:
    """Gross amount needed so that `amount` is left after the protocol fee"""
    return mul_div(amount, HUNDRED_PERCENT, HUNDRED_PERCENT - protocol_fee_rate, round_up)


def apply_swap_fee(amount: int, fee_rate: FeeRatePpm, round_up: bool = False) -> int:
    """Swap input left after the pool fee is taken"""
    return mul_div(amount, FEE_RATE_DENOMINATOR - fee_rate, FEE_RATE_DENOMINATOR, round_up)


def reverse_apply_swap_fee(amount: int, fee_rate: FeeRatePpm, round_up: bool = True) -> int:
    """Swap input needed so that `amount` is left after the pool fee"""
    return mul_div(amount, FEE_RATE_DENOMINATOR, FEE_RATE_DENOMINATOR - fee_rate, round_up)


def calculate_tuna_protocol_fee(
    collateral: int,
    borrow: int,
    protocol_fee_rate_on_collateral: PercentageBp,
    protocol_fee_rate: PercentageBp,
) -> int:
    """Protocol fee for a deposit of collateral plus borrowed funds

    Each term is floored separately:
        fee = collateral * rate_on_collateral / S + borrow * rate / S

    Args:
        collateral: amount supplied by the user
        borrow: amount borrowed from the vault
        protocol_fee_rate_on_collateral: fee rate applied to the collateral
        protocol_fee_rate: fee rate applied to the borrowed amount

    Returns:
        protocol fee in the same token

    Raises:
        InvalidFeeRateError: a rate exceeds HUNDRED_PERCENT
    """
    if protocol_fee_rate_on_collateral > HUNDRED_PERCENT or protocol_fee_rate > HUNDRED_PERCENT:
        raise InvalidFeeRateError(
            "Protocol fee rate must be between 0 and HUNDRED_PERCENT",
            {
                "protocol_fee_rate_on_collateral": protocol_fee_rate_on_collateral,
                "protocol_fee_rate": protocol_fee_rate,
            },
        )

    return (
        collateral * protocol_fee_rate_on_collateral // HUNDRED_PERCENT
        + borrow * protocol_fee_rate // HUNDRED_PERCENT
    )


def try_apply_swap_fee(amount: int, fee_rate: FeeRatePpm) -> int:
    """Pool-side fee application (always floors)"""
    return amount * (FEE_RATE_DENOMINATOR - fee_rate) // FEE_RATE_DENOMINATOR


def try_reverse_apply_swap_fee(amount: int, fee_rate: FeeRatePpm) -> int:
    """Pool-side fee reversal (always ceils)"""
    return div_round_up_if(amount * FEE_RATE_DENOMINATOR, FEE_RATE_DENOMINATOR - fee_rate, True)
