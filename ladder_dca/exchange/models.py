"""
Data models for exchange fills.
"""

from pydantic import BaseModel, ConfigDict, Field


class BuyFill(BaseModel):
    """Result of a market buy."""

    model_config = ConfigDict(frozen=True)

    order_id: str
    filled_quantity: float = Field(gt=0.0)
    fill_price: float = Field(gt=0.0)
    cost: float = Field(gt=0.0)


class SellFill(BaseModel):
    """Result of a market sell."""

    model_config = ConfigDict(frozen=True)

    order_id: str
    proceeds: float = Field(ge=0.0)
    fill_price: float = Field(gt=0.0)
