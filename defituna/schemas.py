"""
Request Schemas using Pydantic

Defines the JSON documents accepted by the tuna-quote CLI and converts
them into the argument dataclasses of the quote functions.
"""
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from .amm.types import FusionPool, Tick, TickArray, empty_tick_array
from .config import settings
from .constants import FEE_RATE_DENOMINATOR, HUNDRED_PERCENT, TICK_ARRAY_SIZE
from .math.sqrt_price_math import price_to_sqrt_price
from .math.tick_math import get_tick_array_start_tick_index, sqrt_price_to_tick_index
from .quote.lp_position import IncreaseLiquidityQuoteArgs
from .quote.spot_position import (
    DecreaseSpotPositionQuoteArgs,
    IncreaseSpotPositionQuoteArgs,
    TradableAmountArgs,
)
from .quote.types import COMPUTED, Amount, PoolToken, to_amount

TokenName = Literal["A", "B"]
AmountValue = Union[Literal["COMPUTED"], int]


def _amount(value: AmountValue) -> Amount:
    if value == "COMPUTED":
        return COMPUTED
    return to_amount(value)


class TickModel(BaseModel):
    """One tick of a tick array"""
    initialized: bool = Field(default=False, description="Tick bounds at least one position")
    liquidity_net: int = Field(default=0, description="Liquidity change when crossing upward")


class TickArrayModel(BaseModel):
    """TICK_ARRAY_SIZE consecutive ticks"""
    start_tick_index: int = Field(..., description="First tick index of the array")
    ticks: List[TickModel] = Field(..., min_length=TICK_ARRAY_SIZE, max_length=TICK_ARRAY_SIZE)

    def to_tick_array(self) -> TickArray:
        return TickArray(
            start_tick_index=self.start_tick_index,
            ticks=[Tick(initialized=t.initialized, liquidity_net=t.liquidity_net) for t in self.ticks],
        )


class PoolState(BaseModel):
    """Pool snapshot a quote runs against"""
    sqrt_price: Optional[int] = Field(default=None, description="Q64.64 sqrt price", gt=0)
    price: Optional[float] = Field(default=None, description="Token B per token A, in whole tokens", gt=0)
    decimals_a: int = Field(default=0, description="Token A decimals (used with price)", ge=0)
    decimals_b: int = Field(default=0, description="Token B decimals (used with price)", ge=0)
    tick_spacing: int = Field(..., description="Pool tick spacing", gt=0)
    fee_rate: int = Field(..., description="Swap fee in parts per million", ge=0, lt=FEE_RATE_DENOMINATOR)
    liquidity: int = Field(default=0, description="Active liquidity at the current price", ge=0)
    tick_current_index: Optional[int] = Field(default=None, description="Defaults to the tick of sqrt_price")
    tick_arrays: Optional[List[TickArrayModel]] = Field(
        default=None, description="Tick arrays around the price; synthesised when omitted"
    )

    @model_validator(mode="after")
    def check_price(self):
        """Require either sqrt_price or price"""
        if self.sqrt_price is None and self.price is None:
            raise ValueError("Either sqrt_price or price must be set")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "price": 200.0,
                "decimals_a": 9,
                "decimals_b": 6,
                "tick_spacing": 2,
                "fee_rate": 3000,
                "liquidity": 10000000000000
            }
        }

    def resolved_sqrt_price(self) -> int:
        if self.sqrt_price is not None:
            return self.sqrt_price
        return price_to_sqrt_price(self.price, self.decimals_a, self.decimals_b)

    def to_fusion_pool(self) -> FusionPool:
        sqrt_price = self.resolved_sqrt_price()
        tick_current_index = self.tick_current_index
        if tick_current_index is None:
            tick_current_index = sqrt_price_to_tick_index(sqrt_price)
        return FusionPool(
            sqrt_price=sqrt_price,
            tick_current_index=tick_current_index,
            tick_spacing=self.tick_spacing,
            fee_rate=self.fee_rate,
            liquidity=self.liquidity,
        )

    def to_tick_arrays(self, count: Optional[int] = None) -> List[TickArray]:
        """Tick arrays from the request, or `count` empty arrays centered on the price"""
        if self.tick_arrays is not None:
            return [t.to_tick_array() for t in self.tick_arrays]

        count = count or settings.SWAP_TICK_ARRAYS
        pool = self.to_fusion_pool()
        ticks_in_array = TICK_ARRAY_SIZE * self.tick_spacing
        start = get_tick_array_start_tick_index(pool.tick_current_index, self.tick_spacing)
        offsets = range(-(count // 2), count // 2 + 1)
        return [empty_tick_array(start + offset * ticks_in_array) for offset in offsets]


class LpIncreaseRequest(BaseModel):
    """Leveraged liquidity increase"""
    collateral_a: AmountValue = Field(..., description="Collateral in token A, or \"COMPUTED\"")
    collateral_b: AmountValue = Field(..., description="Collateral in token B, or \"COMPUTED\"")
    borrow_a: AmountValue = Field(..., description="Borrow in token A, or \"COMPUTED\"")
    borrow_b: AmountValue = Field(..., description="Borrow in token B, or \"COMPUTED\"")
    protocol_fee_rate: int = Field(default=0, ge=0, le=HUNDRED_PERCENT)
    protocol_fee_rate_on_collateral: int = Field(default=0, ge=0, le=HUNDRED_PERCENT)
    tick_lower_index: int = Field(..., description="Position lower tick")
    tick_upper_index: int = Field(..., description="Position upper tick")
    max_amount_slippage: Optional[int] = Field(
        default=None, description="HUNDRED_PERCENT scale; TUNA_DEFAULT_SLIPPAGE when omitted", ge=0, le=HUNDRED_PERCENT
    )
    liquidation_threshold: Optional[int] = Field(
        default=None, description="Market liquidation threshold; adds leverage and liquidation prices", gt=0
    )
    pool: PoolState

    class Config:
        json_schema_extra = {
            "example": {
                "collateral_a": 1000000,
                "collateral_b": 1000000,
                "borrow_a": 2000000,
                "borrow_b": 2000000,
                "tick_lower_index": -4055,
                "tick_upper_index": 4055,
                "max_amount_slippage": 100000,
                "pool": {"sqrt_price": 18446744073709551616, "tick_spacing": 1, "fee_rate": 10000}
            }
        }

    def to_args(self) -> IncreaseLiquidityQuoteArgs:
        slippage = self.max_amount_slippage
        if slippage is None:
            slippage = settings.DEFAULT_SLIPPAGE
        return IncreaseLiquidityQuoteArgs(
            collateral_a=_amount(self.collateral_a),
            collateral_b=_amount(self.collateral_b),
            borrow_a=_amount(self.borrow_a),
            borrow_b=_amount(self.borrow_b),
            protocol_fee_rate=self.protocol_fee_rate,
            protocol_fee_rate_on_collateral=self.protocol_fee_rate_on_collateral,
            swap_fee_rate=self.pool.fee_rate,
            sqrt_price=self.pool.resolved_sqrt_price(),
            tick_lower_index=self.tick_lower_index,
            tick_upper_index=self.tick_upper_index,
            max_amount_slippage=slippage,
            liquidation_threshold=self.liquidation_threshold,
        )


class SpotIncreaseRequest(BaseModel):
    """Open or grow a spot position"""
    increase_amount: int = Field(..., description="Position size increase in the collateral token", gt=0)
    collateral_token: TokenName
    position_token: TokenName
    leverage: float = Field(..., description="Leverage [1.0 .. 100.0]", ge=1.0, le=100.0)
    protocol_fee_rate: int = Field(default=0, ge=0, lt=HUNDRED_PERCENT)
    protocol_fee_rate_on_collateral: int = Field(default=0, ge=0, lt=HUNDRED_PERCENT)
    pool: PoolState

    class Config:
        json_schema_extra = {
            "example": {
                "increase_amount": 5000000000,
                "collateral_token": "A",
                "position_token": "A",
                "leverage": 5.0,
                "protocol_fee_rate": 100,
                "protocol_fee_rate_on_collateral": 100,
                "pool": PoolState.Config.json_schema_extra["example"]
            }
        }

    def to_args(self) -> IncreaseSpotPositionQuoteArgs:
        return IncreaseSpotPositionQuoteArgs(
            increase_amount=self.increase_amount,
            collateral_token=PoolToken.parse(self.collateral_token),
            position_token=PoolToken.parse(self.position_token),
            leverage=self.leverage,
            protocol_fee_rate=self.protocol_fee_rate,
            protocol_fee_rate_on_collateral=self.protocol_fee_rate_on_collateral,
            pool=self.pool.to_fusion_pool(),
            tick_arrays=self.pool.to_tick_arrays(),
        )


class SpotDecreaseRequest(BaseModel):
    """Shrink, close or flip a spot position"""
    decrease_amount: int = Field(..., description="Decrease in the collateral token", gt=0)
    collateral_token: TokenName
    position_token: TokenName
    leverage: float = Field(default=1.0, description="Leverage of the flipped position", ge=1.0, le=100.0)
    position_amount: int = Field(..., description="Current position amount", ge=0)
    position_debt: int = Field(default=0, description="Current debt in the opposite token", ge=0)
    reduce_only: bool = Field(default=False, description="Never decrease past the position")
    protocol_fee_rate: int = Field(default=0, ge=0, lt=HUNDRED_PERCENT)
    protocol_fee_rate_on_collateral: int = Field(default=0, ge=0, lt=HUNDRED_PERCENT)
    pool: PoolState

    class Config:
        json_schema_extra = {
            "example": {
                "decrease_amount": 1000000000,
                "collateral_token": "A",
                "position_token": "A",
                "leverage": 5.0,
                "position_amount": 5000000000,
                "position_debt": 800000000,
                "reduce_only": False,
                "pool": PoolState.Config.json_schema_extra["example"]
            }
        }

    def to_args(self) -> DecreaseSpotPositionQuoteArgs:
        return DecreaseSpotPositionQuoteArgs(
            decrease_amount=self.decrease_amount,
            collateral_token=PoolToken.parse(self.collateral_token),
            position_token=PoolToken.parse(self.position_token),
            leverage=self.leverage,
            position_amount=self.position_amount,
            position_debt=self.position_debt,
            reduce_only=self.reduce_only,
            protocol_fee_rate=self.protocol_fee_rate,
            protocol_fee_rate_on_collateral=self.protocol_fee_rate_on_collateral,
            pool=self.pool.to_fusion_pool(),
            tick_arrays=self.pool.to_tick_arrays(),
        )


class TradableAmountRequest(BaseModel):
    """Maximum trade size for a wallet balance"""
    collateral_token: TokenName
    new_position_token: TokenName
    position_token: Optional[TokenName] = Field(default=None, description="Defaults to new_position_token")
    position_amount: int = Field(default=0, ge=0)
    position_debt: int = Field(default=0, ge=0)
    reduce_only: bool = False
    leverage: float = Field(..., ge=1.0, le=100.0)
    available_balance: int = Field(..., description="Wallet balance in the collateral token", ge=0)
    protocol_fee_rate: int = Field(default=0, ge=0, lt=HUNDRED_PERCENT)
    protocol_fee_rate_on_collateral: int = Field(default=0, ge=0, lt=HUNDRED_PERCENT)
    pool: PoolState

    def to_args(self) -> TradableAmountArgs:
        position_token = self.position_token or self.new_position_token
        return TradableAmountArgs(
            collateral_token=PoolToken.parse(self.collateral_token),
            new_position_token=PoolToken.parse(self.new_position_token),
            position_token=PoolToken.parse(position_token),
            position_amount=self.position_amount,
            position_debt=self.position_debt,
            reduce_only=self.reduce_only,
            leverage=self.leverage,
            available_balance=self.available_balance,
            protocol_fee_rate=self.protocol_fee_rate,
            protocol_fee_rate_on_collateral=self.protocol_fee_rate_on_collateral,
            pool=self.pool.to_fusion_pool(),
            tick_arrays=self.pool.to_tick_arrays(),
        )


class LiquidationPriceRequest(BaseModel):
    """Spot position liquidation price"""
    position_token: TokenName
    amount: float = Field(..., description="Position amount", ge=0)
    debt: float = Field(..., description="Debt in the opposite token", ge=0)
    liquidation_threshold: float = Field(..., description="Threshold in (0, 1)", gt=0, lt=1)

    class Config:
        json_schema_extra = {
            "example": {
                "position_token": "A",
                "amount": 5.0,
                "debt": 800.0,
                "liquidation_threshold": 0.85
            }
        }
