"""Tests for listing snapshot diff notes."""

from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from pachinavi.engine.diff import (
    DiffNotes,
    NegotiatedTerms,
    build_diff_notes,
    compare_terms,
    diff_trade,
)
from pachinavi.models import LineItem, ListingSnapshot, StorageLocation

from conftest import build_trade


def snapshot(**overrides) -> ListingSnapshot:
    values = dict(
        listing_id="L-1",
        quantity=10,
        unit_price=Decimal(128000),
        storage_location=StorageLocation(name="Tokyo Warehouse"),
    )
    values.update(overrides)
    return ListingSnapshot(**values)


class TestDiffNotes:
    """Snapshot vs. negotiated terms."""

    def test_no_snapshot_means_no_notes(self):
        trade = build_trade()
        notes = build_diff_notes(trade, None)
        assert notes == DiffNotes()
        assert notes.is_empty

    def test_matching_terms(self):
        trade = build_trade()
        assert diff_trade(trade).is_empty

    def test_quantity_only(self):
        """Listed 10, agreed 8, same price: only a quantity note."""
        trade = build_trade(
            items=(
                LineItem(
                    line_id="line-1",
                    item_name="P Machine",
                    quantity=8,
                    unit_price=Decimal(128000),
                ),
            )
        )
        notes = build_diff_notes(trade, snapshot(quantity=10))

        assert notes.quantity_note is not None
        assert "10" in notes.quantity_note
        assert "8" in notes.quantity_note
        assert notes.unit_price_note is None
        assert notes.storage_note is None
        assert list(notes.as_dict()) == ["quantity_note"]

    def test_unit_price(self):
        notes = build_diff_notes(build_trade(), snapshot(unit_price=Decimal(130000)))
        assert notes.unit_price_note is not None
        assert "130000" in notes.unit_price_note
        assert notes.quantity_note is None

    def test_unit_price_compared_in_whole_yen(self):
        notes = build_diff_notes(build_trade(), snapshot(unit_price=Decimal("128000.4")))
        assert notes.unit_price_note is None

    def test_negotiable_price_has_no_note(self):
        notes = build_diff_notes(build_trade(), snapshot(unit_price=None))
        assert notes.unit_price_note is None

    def test_storage_location(self):
        notes = build_diff_notes(
            build_trade(), snapshot(storage_location=StorageLocation(name="Osaka Depot"))
        )
        assert notes.storage_note is not None
        assert "Osaka Depot" in notes.storage_note

    def test_storage_location_with_address(self):
        location = StorageLocation(name="Tokyo Warehouse", address="Koto-ku")
        trade = build_trade(storage_location_name="Tokyo Warehouse Koto-ku")
        assert build_diff_notes(trade, snapshot(storage_location=location)).storage_note is None

    def test_missing_current_location_has_no_note(self):
        trade = build_trade(storage_location_name=None)
        notes = build_diff_notes(trade, snapshot(storage_location=StorageLocation(name="X")))
        assert notes.storage_note is None

    def test_fee_line_counts(self):
        trade = build_trade(
            items=(
                LineItem(line_id="l1", item_name="P Machine", quantity=10, unit_price=Decimal(128000)),
                LineItem(line_id="l2", item_name="Shipping", category="shipping", unit_price=Decimal(20000)),
            )
        )
        notes = build_diff_notes(trade, snapshot(shipping_count=2, handling_fee_count=1))

        assert notes.shipping_count_note is not None
        assert notes.handling_count_note is not None
        assert NegotiatedTerms.from_trade(trade).shipping_count == 1
        assert NegotiatedTerms.from_trade(trade).handling_count == 0

    def test_zero_fee_lines_not_counted(self):
        trade = build_trade(
            items=(
                LineItem(line_id="l1", item_name="P Machine", quantity=10, unit_price=Decimal(128000)),
                LineItem(line_id="l2", item_name="送料", unit_price=Decimal(0)),
            )
        )
        assert NegotiatedTerms.from_trade(trade).shipping_count == 0

    def test_notes_never_mutate_trade(self):
        trade = build_trade()
        before = trade.model_dump()
        build_diff_notes(trade, snapshot(quantity=3))
        assert trade.model_dump() == before


class TestDiffProperties:
    """
    *For any* pair of quantities, a quantity note exists exactly when both
    are present and differ.
    """

    @given(
        st.integers(min_value=0, max_value=50),
        st.integers(min_value=0, max_value=50),
    )
    @settings(max_examples=100)
    def test_quantity_note_iff_differs(self, listed, agreed):
        terms = NegotiatedTerms(quantity=agreed, unit_price=Decimal(1000))
        notes = compare_terms(terms, snapshot(quantity=listed, unit_price=Decimal(1000)))

        assert (notes.quantity_note is not None) == (listed != 0 and listed != agreed)
        assert notes.unit_price_note is None


class TestDiffLargeValues:
    """Prices beyond the default Decimal precision."""

    def test_huge_unit_price_is_reported(self):
        item = LineItem(line_id="line-1", item_name="P Machine", quantity=10, unit_price=Decimal("1e30"))
        notes = build_diff_notes(build_trade(items=(item,)), snapshot())

        assert notes.unit_price_note is not None
        assert "1E+30" in notes.unit_price_note

    def test_equal_huge_prices_match(self):
        item = LineItem(line_id="line-1", item_name="P Machine", quantity=10, unit_price=Decimal("1e30"))
        notes = build_diff_notes(build_trade(items=(item,)), snapshot(unit_price=Decimal("1e30")))
        assert notes.unit_price_note is None
