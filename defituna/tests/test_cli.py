"""
tuna-quote CLI tests
"""

import json

import pytest

from ..cli import build_parser, main

POOL = {"price": 200.0, "decimals_a": 9, "decimals_b": 6, "tick_spacing": 2, "fee_rate": 3000,
        "liquidity": 10_000_000_000_000}


def write_request(tmp_path, payload):
    path = tmp_path / "request.json"
    path.write_text(json.dumps(payload))
    return str(path)


class TestCli:
    """main()"""

    def test_parser_commands(self):
        args = build_parser().parse_args(["spot-increase", "request.json"])
        assert args.command == "spot-increase"
        assert args.request == "request.json"

    def test_request_defaults_to_stdin(self):
        args = build_parser().parse_args(["tradable"])
        assert args.request == "-"

    def test_no_command(self, capsys):
        assert main([]) == 1

    def test_spot_increase(self, tmp_path, capsys):
        path = write_request(tmp_path, {
            "increase_amount": 5_000_000_000,
            "collateral_token": "B",
            "position_token": "A",
            "leverage": 5.0,
            "pool": POOL,
        })

        assert main(["spot-increase", path]) == 0
        result = json.loads(capsys.readouterr().out)
        assert result["collateral"] == 1_015_045_135
        assert result["borrow"] == 4_000_000_000
        assert result["estimated_amount"] == 25_000_000_000

    def test_spot_decrease_flip(self, tmp_path, capsys):
        path = write_request(tmp_path, {
            "decrease_amount": 6_000_000_000,
            "collateral_token": "A",
            "position_token": "A",
            "leverage": 5.0,
            "position_amount": 5_000_000_000,
            "position_debt": 800_000_000,
            "pool": POOL,
        })

        assert main(["spot-decrease", path]) == 0
        result = json.loads(capsys.readouterr().out)
        assert result["decrease_percent"] == 1_000_000
        assert result["position_token"] == "B"
        assert result["collateral_token"] == "A"

    def test_tradable(self, tmp_path, capsys):
        path = write_request(tmp_path, {
            "collateral_token": "B",
            "new_position_token": "A",
            "leverage": 1.0,
            "available_balance": 200_000_000,
            "pool": POOL,
        })

        assert main(["tradable", path]) == 0
        assert json.loads(capsys.readouterr().out) == {"tradable_amount": 199_400_000}

    def test_lp_increase(self, tmp_path, capsys):
        path = write_request(tmp_path, {
            "collateral_a": 1_000_000,
            "collateral_b": "COMPUTED",
            "borrow_a": 2_000_000,
            "borrow_b": "COMPUTED",
            "tick_lower_index": -100,
            "tick_upper_index": 100,
            "max_amount_slippage": 100_000,
            "pool": {"sqrt_price": 18446744073709551616, "tick_spacing": 1, "fee_rate": 0},
        })

        assert main(["lp-increase", path]) == 0
        result = json.loads(capsys.readouterr().out)
        assert result["collateral_a"] == 1_000_000
        assert result["total_a"] == 3_000_000
        assert result["total_b"] > 0
        assert result["liquidity"] is None

    def test_liquidation_price(self, tmp_path, capsys):
        path = write_request(tmp_path, {
            "position_token": "B", "amount": 1000, "debt": 4, "liquidation_threshold": 0.85,
        })

        assert main(["--indent", "0", "liquidation-price", path]) == 0
        assert json.loads(capsys.readouterr().out) == {"liquidation_price": pytest.approx(212.5)}

    def test_invalid_request(self, tmp_path, capsys):
        path = write_request(tmp_path, {"position_token": "A"})

        assert main(["liquidation-price", path]) == 2
        assert "Invalid request" in capsys.readouterr().err

    def test_quote_error(self, tmp_path, capsys):
        path = write_request(tmp_path, {
            "collateral_a": "COMPUTED",
            "collateral_b": "COMPUTED",
            "borrow_a": "COMPUTED",
            "borrow_b": "COMPUTED",
            "tick_lower_index": -100,
            "tick_upper_index": 100,
            "pool": {"sqrt_price": 18446744073709551616, "tick_spacing": 1, "fee_rate": 0},
        })

        assert main(["lp-increase", path]) == 1
        assert "COMPUTED" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main(["tradable", str(tmp_path / "missing.json")]) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
