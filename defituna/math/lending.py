"""
Lending - vault shares and funds

A lending vault tracks deposits (and debt) as shares of a growing pool of
funds:

    funds  = shares * total_funds / total_shares
    shares = funds * total_shares / total_funds

An empty vault is bootstrapped 1:1. Interest accrues to both sides of the
vault at a rate scaled by the borrow curve.
"""

from dataclasses import dataclass, replace

from .fixed import mul_div


# Interest is not accrued more often than this (seconds)
INTEREST_ACCRUE_MIN_INTERVAL: int = 60

# Borrow curve kink and the multiplier at 100% utilization
BORROW_CURVE_TARGET_UTILIZATION: float = 0.9
BORROW_CURVE_MAX_MULTIPLIER: float = 4.0


def shares_to_funds(shares: int, total_funds: int, total_shares: int, round_up: bool = False) -> int:
    """Convert vault shares to the underlying token amount"""
    if total_shares > 0:
        return mul_div(shares, total_funds, total_shares, round_up)
    return shares


def funds_to_shares(funds: int, total_funds: int, total_shares: int, round_up: bool = False) -> int:
    """Convert an underlying token amount to vault shares"""
    if total_funds > 0:
        return mul_div(funds, total_shares, total_funds, round_up)
    return funds


def borrow_rate_multiplier(utilization: float) -> float:
    """Multiplier applied to the vault's base interest rate

    Piecewise linear through three points:
        0.25 at 0% utilization
        1.0  at 90% utilization
        4.0  at 100% utilization

    Args:
        utilization: borrowed funds / deposited funds (1.0 = 100%)

    Returns:
        borrow rate multiplier
    """
    target = BORROW_CURVE_TARGET_UTILIZATION
    k = BORROW_CURVE_MAX_MULTIPLIER

    if utilization > 1.0:
        return k
    if utilization <= 0.0:
        return 1.0 / k
    if utilization > target:
        return (utilization - target) * (k - 1.0) / (1.0 - target) + 1.0
    return 1.0 - (target - utilization) * (1.0 - 1.0 / k) / target


def compounded_interest_rate(rate: float) -> float:
    """e^r - 1 approximated by the first three Taylor terms"""
    t1 = rate
    t2 = rate * rate / 2.0
    t3 = t2 * rate / 3.0
    return t1 + t2 + t3


@dataclass(frozen=True)
class VaultState:
    """Lending vault balances

    Attributes:
        deposited_funds: tokens supplied by lenders, including accrued interest
        deposited_shares: lender shares outstanding
        borrowed_funds: tokens lent out, including accrued interest
        borrowed_shares: borrower shares outstanding
        interest_rate: base interest rate per second
        last_update_timestamp: unix time of the last accrual
    """
    deposited_funds: int = 0
    deposited_shares: int = 0
    borrowed_funds: int = 0
    borrowed_shares: int = 0
    interest_rate: float = 0.0
    last_update_timestamp: int = 0

    @property
    def utilization(self) -> float:
        if self.deposited_funds > 0:
            return self.borrowed_funds / self.deposited_funds
        return 1.0

    def deposited_shares_for(self, funds: int, round_up: bool = False) -> int:
        return funds_to_shares(funds, self.deposited_funds, self.deposited_shares, round_up)

    def deposited_funds_for(self, shares: int, round_up: bool = False) -> int:
        return shares_to_funds(shares, self.deposited_funds, self.deposited_shares, round_up)

    def borrowed_shares_for(self, funds: int, round_up: bool = False) -> int:
        return funds_to_shares(funds, self.borrowed_funds, self.borrowed_shares, round_up)

    def borrowed_funds_for(self, shares: int, round_up: bool = False) -> int:
        return shares_to_funds(shares, self.borrowed_funds, self.borrowed_shares, round_up)

    def accrue_interest(self, timestamp: int) -> "VaultState":
        """Return the vault state with interest accrued up to timestamp

        Raises:
            ValueError: timestamp is older than the last update
        """
        elapsed = timestamp - self.last_update_timestamp
        if elapsed < 0:
            raise ValueError(
                f"timestamp {timestamp} is older than the last update {self.last_update_timestamp}"
            )

        if self.borrowed_funds == 0:
            return replace(self, last_update_timestamp=timestamp)

        # Too frequent accruals lose precision
        if elapsed < INTEREST_ACCRUE_MIN_INTERVAL:
            return self

        rate = self.interest_rate * borrow_rate_multiplier(self.utilization)
        interest = compounded_interest_rate(rate * elapsed)
        interest_amount = int(interest * self.borrowed_funds)

        return replace(
            self,
            borrowed_funds=self.borrowed_funds + interest_amount,
            deposited_funds=self.deposited_funds + interest_amount,
            last_update_timestamp=timestamp,
        )
