"""Demo trades for trying out the CLI."""

from datetime import date, datetime
from decimal import Decimal

from pachinavi.models import (
    LineItem,
    ListingSnapshot,
    Party,
    ShippingInfo,
    StorageLocation,
    Trade,
    TradeStatus,
)

DEMO_COMPANIES = {
    "user-a": Party(
        user_id="user-a",
        company_name="Pachitech Co., Ltd.",
        address="1-1-1 Marunouchi, Chiyoda-ku, Tokyo",
        tel="03-1234-5678",
        fax="03-1234-5679",
        contact_name="Taro Tanaka",
    ),
    "user-b": Party(
        user_id="user-b",
        company_name="Trade Rengo Inc.",
        address="1-2-3 Umeda, Kita-ku, Osaka",
        tel="06-9876-5432",
        fax="06-9876-5433",
        contact_name="Hanako Sato",
    ),
}


def demo_trades() -> list[Trade]:
    """Build the demo trades, all freshly opened."""
    created = datetime(2025, 11, 20, 9, 30)
    return [
        Trade(
            id="T-REQ-5001",
            navi_id=5001,
            seller=DEMO_COMPANIES["user-b"],
            buyer=DEMO_COMPANIES["user-a"],
            items=(
                LineItem(
                    line_id="line-1",
                    maker="SANKYO",
                    item_name="P Fever Mobile Suit Gundam SEED",
                    category="body",
                    quantity=2,
                    unit_price=Decimal(180000),
                ),
                LineItem(
                    line_id="line-2",
                    item_name="Shipping",
                    category="shipping",
                    quantity=1,
                    unit_price=Decimal(20000),
                ),
                LineItem(
                    line_id="line-3",
                    item_name="Handling fee",
                    category="handling",
                    quantity=1,
                    unit_price=Decimal(10000),
                ),
            ),
            payment_terms="Transfer within 5 business days of invoice",
            terms_text="Only initial defects reported within 7 days of delivery are covered.",
            remarks="Attendance required at removal.",
            storage_location_name="Tokyo Warehouse",
            contract_date=date(2025, 11, 21),
            shipment_date=date(2025, 11, 28),
            listing_snapshot=ListingSnapshot(
                listing_id="L-1001",
                title="P Fever Mobile Suit Gundam SEED",
                quantity=3,
                unit_price=Decimal(180000),
                storage_location=StorageLocation(name="Tokyo Warehouse"),
                shipping_count=1,
                handling_fee_count=1,
                captured_at=created,
            ),
            shipping=ShippingInfo(
                company_name="Pachitech Co., Ltd.",
                postal_code="100-0005",
                address="1-1-1 Marunouchi, Chiyoda-ku, Tokyo (logistics center)",
                tel="03-1000-2000",
                person_name="Taro Tanaka",
            ),
            status=TradeStatus.APPROVAL_REQUIRED,
            created_at=created,
            updated_at=created,
        ),
        Trade(
            id="T-REQ-5002",
            navi_id=5002,
            seller=DEMO_COMPANIES["user-a"],
            buyer=DEMO_COMPANIES["user-b"],
            items=(
                LineItem(
                    line_id="line-1",
                    maker="Newgin",
                    item_name="P Shin Hana no Keiji 3",
                    category="body",
                    quantity=4,
                    unit_price=Decimal(170000),
                ),
                LineItem(
                    line_id="line-2",
                    item_name="Shipping",
                    category="shipping",
                    quantity=1,
                    unit_price=Decimal(15000),
                ),
            ),
            payment_terms="Payment within 3 business days of delivery",
            remarks="Packing materials arranged by the seller.",
            shipment_date=date(2025, 11, 30),
            shipping=ShippingInfo(
                company_name="Trade Rengo Inc.",
                postal_code="530-0001",
                address="1-2-3 Umeda, Kita-ku, Osaka (west warehouse B)",
                tel="06-1111-2222",
            ),
            status=TradeStatus.APPROVAL_REQUIRED,
            created_at=created,
            updated_at=created,
        ),
    ]
