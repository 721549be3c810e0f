"""
Lending tests

Vault share conversions, the borrow curve and interest accrual.
"""

import random

import pytest

from ..math.lending import (
    INTEREST_ACCRUE_MIN_INTERVAL,
    VaultState,
    borrow_rate_multiplier,
    compounded_interest_rate,
    funds_to_shares,
    shares_to_funds,
)


def _round_trip_cases(count=200, seed=7):
    rng = random.Random(seed)
    cases = []
    for _ in range(count):
        total_shares = rng.randint(1, 10**12)
        total_funds = rng.randint(1, 10**12)
        cases.append((rng.randint(0, total_shares), total_funds, total_shares))
    return cases


ROUND_TRIP_CASES = _round_trip_cases()


class TestSharesConversion:
    """shares <-> funds"""

    def test_empty_vault_is_one_to_one(self):
        assert shares_to_funds(1000, 0, 0) == 1000
        assert funds_to_shares(1000, 0, 0) == 1000

    def test_shares_to_funds(self):
        assert shares_to_funds(100, 2000, 1000) == 200

    def test_funds_to_shares(self):
        assert funds_to_shares(200, 2000, 1000) == 100

    def test_rounding(self):
        assert shares_to_funds(1, 2, 3) == 0
        assert shares_to_funds(1, 2, 3, True) == 1
        assert funds_to_shares(1, 3, 2) == 0
        assert funds_to_shares(1, 3, 2, True) == 1

    @pytest.mark.parametrize("shares, total_funds, total_shares", ROUND_TRIP_CASES)
    def test_round_trip_never_gains(self, shares, total_funds, total_shares):
        funds = shares_to_funds(shares, total_funds, total_shares)
        back = funds_to_shares(funds, total_funds, total_shares)
        assert back <= shares
        if shares * total_funds % total_shares == 0:
            assert back == shares

    def test_round_trip_exact(self):
        # 3 shares worth 6 funds
        assert funds_to_shares(shares_to_funds(3, 2000, 1000), 2000, 1000) == 3


class TestBorrowRateMultiplier:
    """Borrow curve"""

    def test_zero_utilization(self):
        assert borrow_rate_multiplier(0.0) == pytest.approx(0.25)

    def test_target_utilization(self):
        assert borrow_rate_multiplier(0.9) == pytest.approx(1.0)

    def test_full_utilization(self):
        assert borrow_rate_multiplier(1.0) == pytest.approx(4.0)

    def test_over_utilized(self):
        assert borrow_rate_multiplier(1.5) == 4.0

    def test_monotonic(self):
        samples = [borrow_rate_multiplier(u / 20) for u in range(21)]
        assert samples == sorted(samples)


class TestCompoundedInterestRate:
    """Taylor approximation of e^r - 1"""

    def test_zero(self):
        assert compounded_interest_rate(0.0) == 0.0

    def test_small_rate(self):
        assert compounded_interest_rate(0.01) == pytest.approx(0.0100501666667, rel=1e-9)


class TestVaultState:
    """VaultState tests"""

    def test_utilization(self):
        vault = VaultState(deposited_funds=1000, borrowed_funds=450)
        assert vault.utilization == pytest.approx(0.45)

    def test_utilization_empty(self):
        assert VaultState().utilization == 1.0

    def test_share_helpers(self):
        vault = VaultState(deposited_funds=2000, deposited_shares=1000, borrowed_funds=300, borrowed_shares=100)
        assert vault.deposited_shares_for(200) == 100
        assert vault.deposited_funds_for(100) == 200
        assert vault.borrowed_shares_for(30) == 10
        assert vault.borrowed_funds_for(10) == 30

    def test_accrue_without_borrows_only_moves_timestamp(self):
        vault = VaultState(deposited_funds=1000, deposited_shares=1000, interest_rate=1e-8)
        accrued = vault.accrue_interest(1000)
        assert accrued.last_update_timestamp == 1000
        assert accrued.deposited_funds == 1000

    def test_accrue_too_soon(self):
        vault = VaultState(deposited_funds=1000, borrowed_funds=500, interest_rate=1e-8)
        assert vault.accrue_interest(INTEREST_ACCRUE_MIN_INTERVAL - 1) is vault

    def test_accrue_interest(self):
        vault = VaultState(
            deposited_funds=10_000_000_000,
            deposited_shares=10_000_000_000,
            borrowed_funds=9_000_000_000,
            borrowed_shares=9_000_000_000,
            interest_rate=1e-9,
        )
        accrued = vault.accrue_interest(86400)
        interest = accrued.borrowed_funds - vault.borrowed_funds
        assert interest > 0
        assert accrued.deposited_funds - vault.deposited_funds == interest
        assert accrued.borrowed_shares == vault.borrowed_shares
        # ~1e-9 * 1.0 * 86400 of 9e9
        assert interest == pytest.approx(777_600, rel=1e-3)

    def test_accrue_backwards_in_time(self):
        vault = VaultState(last_update_timestamp=100)
        with pytest.raises(ValueError):
            vault.accrue_interest(50)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
