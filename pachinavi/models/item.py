"""LineItem data model."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class LineItem(BaseModel):
    """Represents one line of a trade statement."""

    line_id: str = Field(..., min_length=1, description="Line identifier")
    maker: Optional[str] = Field(default=None, description="Machine maker")
    item_name: str = Field(..., description="Item name")
    category: Optional[str] = Field(
        default=None, description="Category (e.g., 'body', 'shipping', 'handling')"
    )
    quantity: int = Field(default=1, ge=0, description="Quantity")
    unit_price: Decimal = Field(default=Decimal(0), ge=0, description="Unit price (tax excluded)")
    amount: Optional[Decimal] = Field(
        default=None, description="Explicit line amount (overrides quantity x unit price)"
    )
    note: Optional[str] = Field(default=None, description="Free-form note")
    is_taxable: bool = Field(default=True, description="Whether the line is subject to tax")

    model_config = {"frozen": True}
