"""Shared fixtures for PachiNavi tests."""

import tempfile
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest

from pachinavi.db.store import TradeDataStore
from pachinavi.models import (
    LineItem,
    ListingSnapshot,
    Party,
    ShippingInfo,
    StorageLocation,
    Trade,
    TradeStatus,
)
from pachinavi.services import TradeLifecycleService

BUYER_ID = "buyer-1"
SELLER_ID = "seller-1"
FIXED_NOW = datetime(2025, 12, 1, 10, 0)


def build_trade(**overrides) -> Trade:
    """Build a fresh trade with a complete shipping destination."""
    values = dict(
        id="T-1",
        navi_id=1001,
        seller=Party(user_id=SELLER_ID, company_name="Seller Co."),
        buyer=Party(user_id=BUYER_ID, company_name="Buyer Co."),
        items=(
            LineItem(
                line_id="line-1",
                maker="SANKYO",
                item_name="P Machine",
                category="body",
                quantity=10,
                unit_price=Decimal(128000),
            ),
        ),
        storage_location_name="Tokyo Warehouse",
        listing_snapshot=ListingSnapshot(
            listing_id="L-1",
            title="P Machine",
            quantity=10,
            unit_price=Decimal(128000),
            storage_location=StorageLocation(name="Tokyo Warehouse"),
        ),
        shipping=ShippingInfo(
            company_name="Buyer Co.",
            postal_code="100-0001",
            address="1-1 Chiyoda, Tokyo",
            tel="03-0000-0000",
            person_name="Taro Tanaka",
        ),
        status=TradeStatus.APPROVAL_REQUIRED,
        created_at=datetime(2025, 11, 20, 9, 0),
        updated_at=datetime(2025, 11, 20, 9, 0),
    )
    values.update(overrides)
    return Trade(**values)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_db(temp_dir: Path) -> TradeDataStore:
    """Create a temporary database for testing."""
    return TradeDataStore(temp_dir / "test.db")


@pytest.fixture
def service(temp_db: TradeDataStore) -> TradeLifecycleService:
    """Lifecycle service over a temporary database with a fixed clock."""
    return TradeLifecycleService(temp_db, clock=lambda: FIXED_NOW)
