"""Listing snapshot data models."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class StorageLocation(BaseModel):
    """Where the listed machines are stored."""

    name: str = Field(default="", description="Location name")
    address: str = Field(default="", description="Location address")

    model_config = {"frozen": True}

    def describe(self) -> Optional[str]:
        """Return the display string for this location."""
        name = self.name.strip()
        address = self.address.strip()
        if name and address and name != address:
            return f"{name} {address}"
        return name or address or None


class ListingSnapshot(BaseModel):
    """Immutable copy of listing terms captured when the offer was made."""

    listing_id: str = Field(..., min_length=1, description="Originating listing ID")
    title: str = Field(default="", description="Listing title (machine name)")
    quantity: int = Field(default=0, ge=0, description="Listed quantity")
    unit_price: Optional[Decimal] = Field(
        default=None, ge=0, description="Listed unit price; None means negotiable"
    )
    storage_location: Optional[StorageLocation] = Field(
        default=None, description="Storage location at listing time"
    )
    shipping_count: int = Field(default=0, ge=0, description="Shipping fee lines at listing time")
    handling_fee_count: int = Field(
        default=0, ge=0, description="Handling fee lines at listing time"
    )
    captured_at: datetime = Field(
        default_factory=datetime.now, description="Snapshot capture timestamp"
    )

    model_config = {"frozen": True}
