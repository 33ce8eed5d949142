"""Trade aggregate data model."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from pachinavi.models.item import LineItem
from pachinavi.models.listing import ListingSnapshot
from pachinavi.models.party import Party, ShippingInfo


class TradeStatus(str, Enum):
    """Closed set of trade statuses, in forward order."""

    APPROVAL_REQUIRED = "APPROVAL_REQUIRED"
    PAYMENT_REQUIRED = "PAYMENT_REQUIRED"
    CONFIRM_REQUIRED = "CONFIRM_REQUIRED"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"

    @property
    def is_terminal(self) -> bool:
        return self in (TradeStatus.COMPLETED, TradeStatus.CANCELED)


class Role(str, Enum):
    """Role a participant plays in a trade."""

    BUYER = "buyer"
    SELLER = "seller"


class Trade(BaseModel):
    """A bound buyer-seller transaction tracked through settlement."""

    id: str = Field(..., min_length=1, description="Trade ID")
    navi_id: Optional[int] = Field(
        default=None, description="External reference number used by messaging"
    )
    seller: Party = Field(..., description="Selling party")
    buyer: Party = Field(..., description="Buying party")
    items: tuple[LineItem, ...] = Field(default=(), description="Ordered line items")

    # Commercial terms
    tax_rate: Decimal = Field(default=Decimal("0.10"), ge=0, description="Tax rate")
    payment_method: Optional[str] = Field(default=None, description="Payment method")
    payment_terms: Optional[str] = Field(default=None, description="Payment terms text")
    terms_text: Optional[str] = Field(default=None, description="Free-form terms")
    remarks: Optional[str] = Field(default=None, description="Remarks")
    storage_location_name: Optional[str] = Field(
        default=None, description="Agreed storage/pick-up location"
    )

    # Schedule
    contract_date: Optional[date] = Field(default=None, description="Contract date")
    shipment_date: Optional[date] = Field(default=None, description="Machine shipment date")
    document_sent_date: Optional[date] = Field(default=None, description="Documents sent")
    document_received_date: Optional[date] = Field(
        default=None, description="Documents received"
    )
    payment_date: Optional[datetime] = Field(default=None, description="Payment reported at")
    payment_amount: Optional[Decimal] = Field(default=None, description="Amount reported paid")

    status: TradeStatus = Field(default=TradeStatus.APPROVAL_REQUIRED, description="Status")
    listing_snapshot: Optional[ListingSnapshot] = Field(
        default=None, description="Listing terms captured at offer time"
    )
    shipping: ShippingInfo = Field(default_factory=ShippingInfo, description="Shipping info")

    created_at: datetime = Field(default_factory=datetime.now, description="Created at")
    updated_at: datetime = Field(default_factory=datetime.now, description="Updated at")
    completed_at: Optional[datetime] = Field(default=None, description="Completed at")
    canceled_at: Optional[datetime] = Field(default=None, description="Canceled at")
    canceled_by: Optional[Role] = Field(default=None, description="Role that canceled")

    version: int = Field(default=0, ge=0, description="Optimistic lock version")

    model_config = {"frozen": True}

    @property
    def is_open(self) -> bool:
        return not self.status.is_terminal

    @property
    def primary_item(self) -> Optional[LineItem]:
        return self.items[0] if self.items else None

    def party_for(self, role: Role) -> Party:
        """Return the party bound to the given role."""
        return self.buyer if Role(role) is Role.BUYER else self.seller

    def role_of(self, user_id: str) -> Optional[Role]:
        """Return the role the user plays in this trade, if any."""
        if user_id and user_id == self.buyer.user_id:
            return Role.BUYER
        if user_id and user_id == self.seller.user_id:
            return Role.SELLER
        return None
