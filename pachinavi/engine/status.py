"""Trade status state machine.

The transition graph is data: a lookup from ``(status, transition)`` to the
rule that applies. A transition that is not in the table is illegal, which
covers terminal statuses and re-invoking a transition already consumed.

    APPROVAL_REQUIRED --approve--> PAYMENT_REQUIRED --mark_paid--> CONFIRM_REQUIRED
        --mark_completed--> COMPLETED

    any non-terminal --cancel--> CANCELED
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from pachinavi.engine.totals import compute_totals
from pachinavi.exceptions import IllegalTransitionError, ValidationFailedError
from pachinavi.models import Role, ShippingInfo, Trade, TradeStatus

DEFAULT_PAYMENT_METHOD = "bank transfer"


class Transition(str, Enum):
    """Commands that move a trade between statuses."""

    APPROVE = "approve"
    MARK_PAID = "mark_paid"
    MARK_COMPLETED = "mark_completed"
    CANCEL = "cancel"


class TransitionRule(BaseModel):
    """Target status and permitted actors for one edge of the graph."""

    target: TradeStatus = Field(..., description="Status after the transition")
    actors: frozenset[Role] = Field(..., description="Roles allowed to perform it")
    notes: str = Field(default="", description="Human-readable description")

    model_config = {"frozen": True}


_BUYER = frozenset({Role.BUYER})
_SELLER = frozenset({Role.SELLER})
_EITHER = frozenset({Role.BUYER, Role.SELLER})

TRANSITIONS: dict[tuple[TradeStatus, Transition], TransitionRule] = {
    (TradeStatus.APPROVAL_REQUIRED, Transition.APPROVE): TransitionRule(
        target=TradeStatus.PAYMENT_REQUIRED,
        actors=_BUYER,
        notes="Buyer accepts the conditions and fixes the shipping destination.",
    ),
    (TradeStatus.PAYMENT_REQUIRED, Transition.MARK_PAID): TransitionRule(
        target=TradeStatus.CONFIRM_REQUIRED,
        actors=_BUYER,
        notes="Buyer reports payment; payment date and amount are recorded.",
    ),
    (TradeStatus.CONFIRM_REQUIRED, Transition.MARK_COMPLETED): TransitionRule(
        target=TradeStatus.COMPLETED,
        actors=_SELLER,
        notes="Seller confirms receipt of payment and closes the trade.",
    ),
}

for _status in TradeStatus:
    if not _status.is_terminal:
        TRANSITIONS[(_status, Transition.CANCEL)] = TransitionRule(
            target=TradeStatus.CANCELED,
            actors=_EITHER,
            notes="Either party aborts the trade.",
        )


def find_transition(status: TradeStatus, transition: Transition) -> TransitionRule:
    """Look up the rule for a transition.

    Raises:
        IllegalTransitionError: If the transition is not defined from ``status``.
    """
    rule = TRANSITIONS.get((TradeStatus(status), Transition(transition)))
    if rule is None:
        raise IllegalTransitionError(TradeStatus(status).value, Transition(transition).value)
    return rule


def allowed_transitions(status: TradeStatus) -> list[Transition]:
    """Return the transitions that are legal from ``status``."""
    return [t for (s, t) in TRANSITIONS if s == TradeStatus(status)]


def can_transition(status: TradeStatus, transition: Transition, role: Optional[Role] = None) -> bool:
    """Check whether a transition is legal, optionally for a given role."""
    rule = TRANSITIONS.get((TradeStatus(status), Transition(transition)))
    if rule is None:
        return False
    return role is None or Role(role) in rule.actors


def check_guard(
    trade: Trade,
    transition: Transition,
    shipping: Optional[ShippingInfo] = None,
) -> None:
    """Verify the preconditions of a transition.

    Raises:
        ValidationFailedError: Naming every missing field.
    """
    if Transition(transition) is Transition.APPROVE:
        missing = (shipping or trade.shipping).missing_fields()
        if missing:
            raise ValidationFailedError(missing)


def apply_transition(
    trade: Trade,
    transition: Transition,
    *,
    role: Role,
    now: Optional[datetime] = None,
    shipping: Optional[ShippingInfo] = None,
    default_payment_method: str = DEFAULT_PAYMENT_METHOD,
) -> Trade:
    """Apply a transition and return the updated trade.

    The input trade is never modified. Legality and guards are checked first,
    so on any error nothing has changed.

    Args:
        trade: Trade to transition.
        transition: Transition to apply.
        role: Role performing the transition (recorded on cancel).
        now: Timestamp for the effects; defaults to the current time.
        shipping: Shipping info to persist on approve.
        default_payment_method: Payment method recorded when none is set.

    Returns:
        The trade in its new status.
    """
    transition = Transition(transition)
    rule = find_transition(trade.status, transition)
    check_guard(trade, transition, shipping)
    now = now or datetime.now()

    update: dict = {"status": rule.target, "updated_at": now}

    if transition is Transition.APPROVE:
        update["shipping"] = shipping or trade.shipping
        if trade.contract_date is None:
            update["contract_date"] = now.date()
    elif transition is Transition.MARK_PAID:
        totals = compute_totals(trade.items, trade.tax_rate)
        if trade.payment_date is None:
            update["payment_date"] = now
        update["payment_amount"] = totals.total
        update["payment_method"] = trade.payment_method or default_payment_method
    elif transition is Transition.MARK_COMPLETED:
        if trade.completed_at is None:
            update["completed_at"] = now
    elif transition is Transition.CANCEL:
        update["canceled_at"] = now
        update["canceled_by"] = Role(role)

    return trade.model_copy(update=update)
