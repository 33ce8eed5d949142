"""Tests for the trade status state machine."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from pachinavi.engine.status import (
    TRANSITIONS,
    Transition,
    allowed_transitions,
    apply_transition,
    can_transition,
    check_guard,
    find_transition,
)
from pachinavi.exceptions import IllegalTransitionError, ValidationFailedError
from pachinavi.models import Role, ShippingInfo, TradeStatus

from conftest import FIXED_NOW, build_trade

ORDER = [
    TradeStatus.APPROVAL_REQUIRED,
    TradeStatus.PAYMENT_REQUIRED,
    TradeStatus.CONFIRM_REQUIRED,
    TradeStatus.COMPLETED,
]


class TestTransitionTable:
    """The transition graph."""

    def test_forward_path(self):
        assert find_transition(TradeStatus.APPROVAL_REQUIRED, Transition.APPROVE).target is (
            TradeStatus.PAYMENT_REQUIRED
        )
        assert find_transition(TradeStatus.PAYMENT_REQUIRED, Transition.MARK_PAID).target is (
            TradeStatus.CONFIRM_REQUIRED
        )
        assert find_transition(TradeStatus.CONFIRM_REQUIRED, Transition.MARK_COMPLETED).target is (
            TradeStatus.COMPLETED
        )

    def test_actors(self):
        assert can_transition(TradeStatus.APPROVAL_REQUIRED, Transition.APPROVE, Role.BUYER)
        assert not can_transition(TradeStatus.APPROVAL_REQUIRED, Transition.APPROVE, Role.SELLER)
        assert can_transition(TradeStatus.PAYMENT_REQUIRED, Transition.MARK_PAID, Role.BUYER)
        assert can_transition(TradeStatus.CONFIRM_REQUIRED, Transition.MARK_COMPLETED, Role.SELLER)
        assert not can_transition(TradeStatus.CONFIRM_REQUIRED, Transition.MARK_COMPLETED, Role.BUYER)

    def test_terminal_statuses_have_no_transitions(self):
        assert allowed_transitions(TradeStatus.COMPLETED) == []
        assert allowed_transitions(TradeStatus.CANCELED) == []

    def test_cancel_from_every_open_status(self):
        for status in TradeStatus:
            assert can_transition(status, Transition.CANCEL) == (not status.is_terminal)

    def test_no_backward_transitions(self):
        """Every edge except cancel moves strictly forward."""
        for (status, transition), rule in TRANSITIONS.items():
            if transition is Transition.CANCEL:
                assert rule.target is TradeStatus.CANCELED
                continue
            assert ORDER.index(rule.target) == ORDER.index(status) + 1

    @given(st.sampled_from(list(TradeStatus)), st.sampled_from(list(Transition)))
    @settings(max_examples=50)
    def test_lookup_miss_raises(self, status, transition):
        if (status, transition) in TRANSITIONS:
            assert find_transition(status, transition) is TRANSITIONS[(status, transition)]
        else:
            with pytest.raises(IllegalTransitionError):
                find_transition(status, transition)


class TestGuards:
    """Approve requires a complete shipping destination."""

    def test_missing_person_name(self):
        trade = build_trade(shipping=ShippingInfo(company_name="B", address="A", tel="T"))
        with pytest.raises(ValidationFailedError) as exc_info:
            check_guard(trade, Transition.APPROVE)
        assert exc_info.value.fields == ["person_name"]

    def test_blank_fields_are_missing(self):
        trade = build_trade(shipping=ShippingInfo(company_name=" ", address="A", tel="", person_name="P"))
        with pytest.raises(ValidationFailedError) as exc_info:
            check_guard(trade, Transition.APPROVE)
        assert exc_info.value.fields == ["company_name", "tel"]

    def test_supplied_shipping_is_checked(self):
        trade = build_trade()
        with pytest.raises(ValidationFailedError):
            check_guard(trade, Transition.APPROVE, ShippingInfo())

    def test_other_transitions_have_no_guard(self):
        trade = build_trade(shipping=ShippingInfo())
        check_guard(trade, Transition.CANCEL)


class TestApplyTransition:
    """Side effects of each transition."""

    def test_approve_sets_contract_date_and_shipping(self):
        trade = build_trade(contract_date=None)
        shipping = trade.shipping.model_copy(update={"person_name": "Hanako Sato"})

        updated = apply_transition(
            trade, Transition.APPROVE, role=Role.BUYER, now=FIXED_NOW, shipping=shipping
        )

        assert updated.status is TradeStatus.PAYMENT_REQUIRED
        assert updated.contract_date == FIXED_NOW.date()
        assert updated.shipping.person_name == "Hanako Sato"
        assert updated.updated_at == FIXED_NOW

    def test_approve_keeps_existing_contract_date(self):
        trade = build_trade(contract_date=date(2025, 11, 1))
        updated = apply_transition(trade, Transition.APPROVE, role=Role.BUYER, now=FIXED_NOW)
        assert updated.contract_date == date(2025, 11, 1)

    def test_mark_paid_records_payment(self):
        trade = build_trade(status=TradeStatus.PAYMENT_REQUIRED)
        updated = apply_transition(trade, Transition.MARK_PAID, role=Role.BUYER, now=FIXED_NOW)

        assert updated.status is TradeStatus.CONFIRM_REQUIRED
        assert updated.payment_date == FIXED_NOW
        assert updated.payment_amount == Decimal(1408000)
        assert updated.payment_method == "bank transfer"

    def test_mark_paid_keeps_existing_payment_date(self):
        paid_at = datetime(2025, 11, 30, 15, 0)
        trade = build_trade(
            status=TradeStatus.PAYMENT_REQUIRED, payment_date=paid_at, payment_method="cash"
        )
        updated = apply_transition(trade, Transition.MARK_PAID, role=Role.BUYER, now=FIXED_NOW)
        assert updated.payment_date == paid_at
        assert updated.payment_method == "cash"

    def test_mark_completed(self):
        trade = build_trade(status=TradeStatus.CONFIRM_REQUIRED)
        updated = apply_transition(trade, Transition.MARK_COMPLETED, role=Role.SELLER, now=FIXED_NOW)
        assert updated.status is TradeStatus.COMPLETED
        assert updated.completed_at == FIXED_NOW

    def test_cancel_records_role(self):
        trade = build_trade(status=TradeStatus.PAYMENT_REQUIRED)
        updated = apply_transition(trade, Transition.CANCEL, role=Role.SELLER, now=FIXED_NOW)
        assert updated.status is TradeStatus.CANCELED
        assert updated.canceled_at == FIXED_NOW
        assert updated.canceled_by is Role.SELLER
        assert not updated.is_open
        assert trade.is_open

    def test_input_is_not_modified(self):
        trade = build_trade()
        before = trade.model_dump()
        apply_transition(trade, Transition.APPROVE, role=Role.BUYER, now=FIXED_NOW)
        assert trade.model_dump() == before

    def test_illegal_transition_raises(self):
        trade = build_trade(status=TradeStatus.COMPLETED)
        with pytest.raises(IllegalTransitionError):
            apply_transition(trade, Transition.CANCEL, role=Role.BUYER)

    def test_failed_guard_changes_nothing(self):
        trade = build_trade(shipping=ShippingInfo(company_name="B"))
        with pytest.raises(ValidationFailedError) as exc_info:
            apply_transition(trade, Transition.APPROVE, role=Role.BUYER)
        assert set(exc_info.value.fields) == {"address", "tel", "person_name"}
        assert trade.status is TradeStatus.APPROVAL_REQUIRED
