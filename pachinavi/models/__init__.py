"""Data models for PachiNavi."""

from pachinavi.models.item import LineItem
from pachinavi.models.listing import ListingSnapshot, StorageLocation
from pachinavi.models.message import TradeMessage
from pachinavi.models.party import Contact, Party, ShippingInfo
from pachinavi.models.trade import Role, Trade, TradeStatus

__all__ = [
    "Contact",
    "LineItem",
    "ListingSnapshot",
    "Party",
    "Role",
    "ShippingInfo",
    "StorageLocation",
    "Trade",
    "TradeMessage",
    "TradeStatus",
]
