"""
Fee math tests
"""

from typing import get_type_hints

import pytest

from ..constants import HUNDRED_PERCENT, FeeRatePpm, PercentageBp
from ..errors import InvalidFeeRateError
from ..math.fees import (
    apply_swap_fee,
    apply_tuna_protocol_fee,
    calculate_tuna_protocol_fee,
    reverse_apply_swap_fee,
    reverse_apply_tuna_protocol_fee,
    try_apply_swap_fee,
    try_reverse_apply_swap_fee,
)


class TestProtocolFee:
    """Protocol fee application"""

    def test_apply(self):
        # 1% fee
        assert apply_tuna_protocol_fee(1_000_000, 10_000) == 990_000

    def test_apply_floors(self):
        assert apply_tuna_protocol_fee(999, 10_000) == 989

    def test_reverse_rounds_up_by_default(self):
        assert reverse_apply_tuna_protocol_fee(989, 10_000) == 999

    def test_reverse_floor(self):
        assert reverse_apply_tuna_protocol_fee(989, 10_000, False) == 998

    def test_zero_rate(self):
        assert apply_tuna_protocol_fee(12345, 0) == 12345
        assert reverse_apply_tuna_protocol_fee(12345, 0) == 12345

    @pytest.mark.parametrize("rate", [1, 100, 5_000, 10_000, 333_333, 600_000, 999_999, HUNDRED_PERCENT])
    @pytest.mark.parametrize("amount", [1, 4, 999, 1_000_000, 123_456_789_012, 2**64 - 2])
    def test_apply_takes_something(self, amount, rate):
        assert apply_tuna_protocol_fee(amount, rate) < amount

    @pytest.mark.parametrize("amount", [0, 1, 4, 999, 123_456_789_012])
    def test_apply_never_exceeds_amount(self, amount):
        for rate in range(0, HUNDRED_PERCENT + 1, 12_500):
            assert apply_tuna_protocol_fee(amount, rate) <= amount


class TestSwapFee:
    """Swap fee application (ppm)"""

    def test_apply(self):
        assert apply_swap_fee(1_000_000, 3000) == 997_000

    def test_reverse(self):
        assert reverse_apply_swap_fee(997_000, 3000) == 1_000_000

    def test_pool_side_helpers(self):
        assert try_apply_swap_fee(1001, 3000) == 997
        assert try_reverse_apply_swap_fee(997, 3000) == 1000


class TestCalculateTunaProtocolFee:
    """Fee on collateral plus borrow"""

    def test_separate_rates(self):
        fee = calculate_tuna_protocol_fee(1_000_000, 2_000_000, 1000, 5000)
        assert fee == 1000 + 10000

    def test_each_term_floored(self):
        assert calculate_tuna_protocol_fee(999, 999, 1000, 1000) == 0

    def test_full_rate_allowed(self):
        assert calculate_tuna_protocol_fee(100, 0, HUNDRED_PERCENT, 0) == 100

    def test_rate_above_hundred_percent(self):
        with pytest.raises(InvalidFeeRateError):
            calculate_tuna_protocol_fee(100, 100, HUNDRED_PERCENT + 1, 0)


class TestRateKinds:
    """Protocol rates and pool fee rates are separate integer kinds"""

    def test_protocol_fee_rate_kind(self):
        assert get_type_hints(apply_tuna_protocol_fee)["protocol_fee_rate"] is PercentageBp
        assert get_type_hints(calculate_tuna_protocol_fee)["protocol_fee_rate_on_collateral"] is PercentageBp

    def test_swap_fee_rate_kind(self):
        assert get_type_hints(apply_swap_fee)["fee_rate"] is FeeRatePpm
        assert get_type_hints(try_apply_swap_fee)["fee_rate"] is FeeRatePpm

    def test_kinds_are_plain_ints(self):
        assert apply_tuna_protocol_fee(1_000_000, PercentageBp(10_000)) == 990_000
        assert apply_swap_fee(1_000_000, FeeRatePpm(3000)) == 997_000


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
