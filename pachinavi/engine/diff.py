"""Listing snapshot vs. negotiated terms diff detection.

Compares what was listed when the offer was made against what the trade
currently says, and produces short notes shown next to the drifted field on
the settlement document. Notes never block a transition.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import BaseModel, Field

from pachinavi.engine.totals import line_amount
from pachinavi.models import ListingSnapshot, Trade

SHIPPING_CATEGORIES = frozenset({"shipping", "送料"})
HANDLING_CATEGORIES = frozenset({"handling", "手数料", "出庫手数料"})


class NegotiatedTerms(BaseModel):
    """Plain copy of the trade fields that are compared against the listing."""

    quantity: Optional[int] = Field(default=None, description="Primary line quantity")
    unit_price: Optional[Decimal] = Field(default=None, description="Primary line unit price")
    storage_location: Optional[str] = Field(default=None, description="Agreed storage location")
    shipping_count: int = Field(default=0, ge=0, description="Non-zero shipping fee lines")
    handling_count: int = Field(default=0, ge=0, description="Non-zero handling fee lines")

    model_config = {"frozen": True}

    @classmethod
    def from_trade(cls, trade: Trade) -> "NegotiatedTerms":
        primary = trade.primary_item
        location = (trade.storage_location_name or "").strip() or None
        return cls(
            quantity=primary.quantity if primary else None,
            unit_price=primary.unit_price if primary else None,
            storage_location=location,
            shipping_count=_count_fee_lines(trade, SHIPPING_CATEGORIES),
            handling_count=_count_fee_lines(trade, HANDLING_CATEGORIES),
        )


class DiffNotes(BaseModel):
    """Discrepancy notes, one optional note per tracked field."""

    quantity_note: Optional[str] = None
    unit_price_note: Optional[str] = None
    storage_note: Optional[str] = None
    shipping_count_note: Optional[str] = None
    handling_count_note: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return not self.as_dict()

    def as_dict(self) -> dict[str, str]:
        """Return only the notes that are present."""
        return self.model_dump(exclude_none=True)


def _count_fee_lines(trade: Trade, categories: frozenset[str]) -> int:
    count = 0
    for item in trade.items:
        label = (item.category or item.item_name or "").strip().lower()
        if label in categories and line_amount(item) != 0:
            count += 1
    return count


def _whole_yen(value: Decimal) -> Decimal:
    return value.to_integral_value(rounding=ROUND_HALF_UP)


def compare_terms(terms: NegotiatedTerms, snapshot: Optional[ListingSnapshot]) -> DiffNotes:
    """Compare negotiated terms with a listing snapshot.

    A note is produced for quantity, unit price and storage location only
    when both sides carry a value and the values differ.

    Args:
        terms: Current negotiated terms.
        snapshot: Listing snapshot captured at offer time, or None.

    Returns:
        DiffNotes; empty when there is no snapshot.
    """
    if snapshot is None:
        return DiffNotes()

    notes: dict[str, str] = {}

    if terms.quantity is not None and snapshot.quantity and snapshot.quantity != terms.quantity:
        notes["quantity_note"] = (
            "listing quantity differs from agreed quantity: "
            f"snapshot {snapshot.quantity} vs current {terms.quantity}"
        )

    if (
        terms.unit_price is not None
        and snapshot.unit_price is not None
        and _whole_yen(snapshot.unit_price) != _whole_yen(terms.unit_price)
    ):
        notes["unit_price_note"] = (
            "listing unit price differs from agreed unit price: "
            f"snapshot {_whole_yen(snapshot.unit_price)} vs current {_whole_yen(terms.unit_price)}"
        )

    listed_location = snapshot.storage_location.describe() if snapshot.storage_location else None
    if terms.storage_location and listed_location and listed_location != terms.storage_location:
        notes["storage_note"] = (
            "listing storage location differs from agreed location: "
            f"snapshot {listed_location} vs current {terms.storage_location}"
        )

    if snapshot.shipping_count > 0 and snapshot.shipping_count != terms.shipping_count:
        notes["shipping_count_note"] = (
            f"listing had {snapshot.shipping_count} shipping fee line(s), "
            f"current has {terms.shipping_count}"
        )

    if snapshot.handling_fee_count > 0 and snapshot.handling_fee_count != terms.handling_count:
        notes["handling_count_note"] = (
            f"listing had {snapshot.handling_fee_count} handling fee line(s), "
            f"current has {terms.handling_count}"
        )

    return DiffNotes(**notes)


def build_diff_notes(trade: Trade, snapshot: Optional[ListingSnapshot]) -> DiffNotes:
    """Build diff notes for a trade against a listing snapshot.

    Returns empty notes when ``snapshot`` is None, whatever the trade holds.
    """
    if snapshot is None:
        return DiffNotes()
    return compare_terms(NegotiatedTerms.from_trade(trade), snapshot)


def diff_trade(trade: Trade) -> DiffNotes:
    """Build diff notes against the snapshot captured on the trade itself."""
    return build_diff_notes(trade, trade.listing_snapshot)
