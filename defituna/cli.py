"""
Tuna quote CLI

Reads a JSON request (file or stdin) and prints the quote as JSON.

Usage:
    tuna-quote lp-increase request.json
    tuna-quote spot-increase request.json
    tuna-quote spot-decrease - < request.json
    tuna-quote tradable request.json
    tuna-quote liquidation-price request.json
"""

import argparse
import dataclasses
import json
import logging
import sys
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from . import __version__
from .config import settings
from .errors import ConfigError, TunaQuoteError
from .quote.lp_position import get_liquidity_increase_quote
from .quote.spot_position import (
    get_decrease_spot_position_quote,
    get_increase_spot_position_quote,
    get_liquidation_price,
    get_tradable_amount,
)
from .quote.types import PoolToken
from .schemas import (
    LiquidationPriceRequest,
    LpIncreaseRequest,
    SpotDecreaseRequest,
    SpotIncreaseRequest,
    TradableAmountRequest,
)

logger = logging.getLogger(__name__)


def _to_json(value: Any) -> Any:
    """Quote results to JSON-compatible values"""
    if dataclasses.is_dataclass(value):
        return {k: _to_json(v) for k, v in dataclasses.asdict(value).items()}
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, dict):
        return {k: _to_json(v) for k, v in value.items()}
    return value


def _lp_increase(request: LpIncreaseRequest) -> Dict[str, Any]:
    return _to_json(get_liquidity_increase_quote(request.to_args()))


def _spot_increase(request: SpotIncreaseRequest) -> Dict[str, Any]:
    return _to_json(get_increase_spot_position_quote(request.to_args()))


def _spot_decrease(request: SpotDecreaseRequest) -> Dict[str, Any]:
    return _to_json(get_decrease_spot_position_quote(request.to_args()))


def _tradable(request: TradableAmountRequest) -> Dict[str, Any]:
    return {"tradable_amount": get_tradable_amount(request.to_args())}


def _liquidation_price(request: LiquidationPriceRequest) -> Dict[str, Any]:
    price = get_liquidation_price(
        PoolToken.parse(request.position_token),
        request.amount,
        request.debt,
        request.liquidation_threshold,
    )
    return {"liquidation_price": price}


COMMANDS: Dict[str, tuple] = {
    "lp-increase": (LpIncreaseRequest, _lp_increase, "Quote a leveraged liquidity increase"),
    "spot-increase": (SpotIncreaseRequest, _spot_increase, "Quote opening or growing a spot position"),
    "spot-decrease": (SpotDecreaseRequest, _spot_decrease, "Quote shrinking, closing or flipping a spot position"),
    "tradable": (TradableAmountRequest, _tradable, "Maximum tradable amount for a wallet balance"),
    "liquidation-price": (LiquidationPriceRequest, _liquidation_price, "Spot position liquidation price"),
}


def _read_request(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path) as f:
        return f.read()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tuna-quote",
        description="Tuna leveraged position quotes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s lp-increase request.json        Liquidity increase quote
  %(prog)s spot-increase - < request.json  Spot increase quote from stdin

Environment Variables:
  TUNA_LOG_LEVEL          Logging level (default: WARNING)
  TUNA_DEFAULT_SLIPPAGE   Liquidity quote slippage when a request omits it
  TUNA_SWAP_TICK_ARRAYS   Tick arrays synthesised around the price (default: 5)
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation (default: 2)")

    subparsers = parser.add_subparsers(dest="command", help="Quote to compute")
    for name, (_, _, help_text) in COMMANDS.items():
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("request", nargs="?", default="-", help="JSON request file, '-' for stdin")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        settings.validate()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=settings.log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    model: Type[BaseModel]
    handler: Callable[[Any], Dict[str, Any]]
    model, handler, _ = COMMANDS[args.command]

    try:
        request = model.model_validate_json(_read_request(args.request))
        logger.debug("%s request: %s", args.command, request)
        result = handler(request)
    except ValidationError as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        return 2
    except (TunaQuoteError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=args.indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
