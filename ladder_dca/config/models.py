"""
Configuration models using Pydantic for validation.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ExchangeProvider(str, Enum):
    """Venues the bot can trade on."""

    SIMULATED = "SIMULATED"
    BINANCE = "BINANCE"
    BYBIT = "BYBIT"
    KUCOIN = "KUCOIN"
    OKX = "OKX"
    COINBASE = "COINBASE"
    KRAKEN = "KRAKEN"


class DailyLossReset(str, Enum):
    """When the accumulated daily loss counter is cleared."""

    NEVER = "never"
    UTC_DAY = "utc_day"


class ApiCredentials(BaseModel):
    """Exchange API credentials."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    api_key: str = Field(default="", repr=False)
    api_secret: str = Field(default="", repr=False)
    passphrase: Optional[str] = Field(default=None, repr=False)

    @property
    def is_empty(self) -> bool:
        return not (self.api_key and self.api_secret)


class TradingConfig(BaseModel):
    """Configuration model for the ladder DCA strategy."""

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid"
    )

    symbol: str = Field(default="BTCUSDT", min_length=1, description="Trading pair, e.g. BTCUSDT")
    initial_capital: float = Field(
        default=100.0,
        gt=0.0,
        description="Quote-currency capital the ledger starts with"
    )
    allocation_rate: float = Field(
        default=0.05,
        gt=0.0,
        le=1.0,
        description="Fraction of free balance spent on each buy"
    )
    dip_trigger_percent: float = Field(
        default=2.0,
        gt=0.0,
        lt=100.0,
        description="Drop below the latest entry price that opens a new lot"
    )
    take_profit_percent: float = Field(
        default=2.0,
        gt=0.0,
        description="Gain above entry price that closes a lot"
    )
    enable_stop_loss: bool = Field(default=True, description="Arm a stop-loss on new lots")
    stop_loss_percent: float = Field(
        default=10.0,
        gt=0.0,
        lt=100.0,
        description="Loss below entry price that closes a lot"
    )
    max_dca_levels: int = Field(
        default=20,
        ge=1,
        description="Fixed cap on simultaneously open lots"
    )
    use_dynamic_dca_levels: bool = Field(
        default=False,
        description="If True, derive the lot cap from equity instead of max_dca_levels"
    )
    dca_levels_equity_percent: float = Field(
        default=20.0,
        gt=0.0,
        description="Percent of equity used as the dynamic lot cap"
    )
    enable_dca: bool = Field(default=True, description="Allow new lots to be opened")
    min_notional: float = Field(
        default=1.0,
        ge=0.0,
        description="Smallest order, in quote currency, the bot will place"
    )
    enable_global_drawdown: bool = Field(default=True, description="Liquidate on equity drawdown")
    max_drawdown_percent: float = Field(
        default=20.0,
        gt=0.0,
        le=100.0,
        description="Drawdown from peak equity that liquidates and pauses"
    )
    max_daily_loss_limit: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Accumulated realized loss that liquidates and pauses"
    )
    daily_loss_reset: DailyLossReset = Field(
        default=DailyLossReset.NEVER,
        description="When the daily loss counter is cleared"
    )
    polling_interval_ms: int = Field(
        default=1000,
        ge=1,
        description="Delay between price polls; advisory to the runner"
    )
    exchange: ExchangeProvider = Field(default=ExchangeProvider.SIMULATED)
    is_live_mode: bool = Field(default=False, description="Send real orders to the exchange")
    credentials: ApiCredentials = Field(default_factory=ApiCredentials)
    emergency_stop: bool = Field(default=False, description="Halt all tick processing")
    simulated_slippage_percent: float = Field(
        default=0.0,
        ge=0.0,
        lt=100.0,
        description="Adverse slippage applied to paper fills"
    )

    @model_validator(mode="after")
    def _check_live_mode(self) -> "TradingConfig":
        if self.is_live_mode and self.exchange == ExchangeProvider.SIMULATED:
            raise ValueError("live mode requires a real exchange")
        return self
