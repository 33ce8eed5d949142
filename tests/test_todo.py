"""Tests for role-aware todo derivation."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from pachinavi.engine.status import Transition, can_transition
from pachinavi.engine.todo import (
    SECTION_ORDER,
    Section,
    TodoKind,
    derive_presentation,
    group_by_section,
)
from pachinavi.models import Party, Role, TradeStatus

from conftest import BUYER_ID, SELLER_ID, build_trade


class TestPresentation:
    """Presentation per status and role."""

    def test_payment_required_role_symmetry(self):
        trade = build_trade(status=TradeStatus.PAYMENT_REQUIRED)
        buyer = derive_presentation(trade, Role.BUYER)
        seller = derive_presentation(trade, Role.SELLER)

        assert buyer.todo_kind is seller.todo_kind is TodoKind.APPLICATION_APPROVED
        assert buyer.section is seller.section is Section.PAYMENT
        assert buyer.title == "awaiting your payment"
        assert seller.title == "awaiting buyer payment"
        assert buyer.primary_action is not None
        assert buyer.primary_action.transition is Transition.MARK_PAID
        assert seller.primary_action is None
        assert buyer.assignee is seller.assignee is Role.BUYER

    def test_confirmation_action_belongs_to_seller(self):
        trade = build_trade(status=TradeStatus.CONFIRM_REQUIRED)
        seller = derive_presentation(trade, Role.SELLER)
        buyer = derive_presentation(trade, Role.BUYER)

        assert seller.section is Section.CONFIRMATION
        assert seller.primary_action is not None
        assert seller.primary_action.transition is Transition.MARK_COMPLETED
        assert buyer.primary_action is None

    def test_approval_section(self):
        trade = build_trade()
        buyer = derive_presentation(trade, Role.BUYER)
        assert buyer.todo_kind is TodoKind.APPLICATION_SENT
        assert buyer.section is Section.APPROVAL
        assert buyer.primary_action.label == "approve"
        assert derive_presentation(trade, Role.SELLER).title == "awaiting buyer approval"

    @pytest.mark.parametrize(
        "status,section",
        [
            (TradeStatus.COMPLETED, Section.COMPLETED),
            (TradeStatus.CANCELED, Section.CANCELED),
        ],
    )
    def test_terminal_statuses(self, status, section):
        trade = build_trade(status=status)
        for role in Role:
            presentation = derive_presentation(trade, role)
            assert presentation.section is section
            assert presentation.primary_action is None
            assert presentation.assignee is None
            assert presentation.is_open is False


class TestPresentationProperties:
    """
    *For any* status and role, the presentation is deterministic, open
    exactly for non-terminal statuses, and only offers an action the state
    machine allows for that role.
    """

    @given(st.sampled_from(list(TradeStatus)), st.sampled_from(list(Role)))
    @settings(max_examples=50)
    def test_consistent_with_state_machine(self, status, role):
        trade = build_trade(status=status)
        presentation = derive_presentation(trade, role)

        assert presentation == derive_presentation(trade, role)
        assert presentation.is_open == (not status.is_terminal)
        if presentation.primary_action is not None:
            assert presentation.primary_action.role is role
            assert can_transition(status, presentation.primary_action.transition, role)


class TestGroupBySection:
    """List view bucketing."""

    def test_groups_in_workflow_order(self):
        trades = [
            build_trade(id="T-done", status=TradeStatus.COMPLETED),
            build_trade(id="T-new"),
            build_trade(id="T-pay", status=TradeStatus.PAYMENT_REQUIRED),
        ]
        groups = group_by_section(trades, BUYER_ID)

        assert list(groups) == SECTION_ORDER
        assert [t.id for t, _ in groups[Section.APPROVAL]] == ["T-new"]
        assert [t.id for t, _ in groups[Section.PAYMENT]] == ["T-pay"]
        assert [t.id for t, _ in groups[Section.COMPLETED]] == ["T-done"]
        assert groups[Section.CANCELED] == []

    def test_role_resolved_per_trade(self):
        as_buyer = build_trade(id="T-b", status=TradeStatus.CONFIRM_REQUIRED)
        as_seller = build_trade(
            id="T-s",
            status=TradeStatus.CONFIRM_REQUIRED,
            seller=Party(user_id=BUYER_ID, company_name="Buyer Co."),
            buyer=Party(user_id=SELLER_ID, company_name="Seller Co."),
        )
        entries = group_by_section([as_buyer, as_seller], BUYER_ID)[Section.CONFIRMATION]
        titles = {t.id: p.title for t, p in entries}

        assert titles == {
            "T-b": "awaiting seller confirmation",
            "T-s": "awaiting your confirmation",
        }

    def test_non_party_trades_skipped(self):
        groups = group_by_section([build_trade()], "stranger")
        assert all(entries == [] for entries in groups.values())
