"""Role-aware todo derivation.

Maps ``(status, viewer role)`` to what the viewer should see: the pending
todo, the list-view section, a description and, for the role whose turn it
is, the primary action.

Precedence is fixed: the trade status alone decides the todo kind, the
section and ``is_open``; the primary action depends only on the todo kind
and the viewer role.
"""

from collections.abc import Iterable
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from pachinavi.engine.status import Transition
from pachinavi.models import Role, Trade, TradeStatus


class TodoKind(str, Enum):
    """Pending step of a trade, one per status."""

    APPLICATION_SENT = "application_sent"
    APPLICATION_APPROVED = "application_approved"
    PAYMENT_CONFIRMED = "payment_confirmed"
    TRADE_COMPLETED = "trade_completed"
    TRADE_CANCELED = "trade_canceled"


class Section(str, Enum):
    """List-view bucket."""

    APPROVAL = "approval"
    PAYMENT = "payment"
    CONFIRMATION = "confirmation"
    COMPLETED = "completed"
    CANCELED = "canceled"


class PrimaryAction(BaseModel):
    """Actionable button offered to the role whose turn it is."""

    label: str = Field(..., description="Short action label")
    role: Role = Field(..., description="Role that may perform the action")
    transition: Transition = Field(..., description="Transition the action triggers")

    model_config = {"frozen": True}


class TodoUi(BaseModel):
    """Presentation definition of one todo kind."""

    section: Section
    title: dict[Role, str]
    description: dict[Role, str]
    primary_action: Optional[PrimaryAction] = None

    model_config = {"frozen": True}


class Presentation(BaseModel):
    """What a given role sees for a trade."""

    todo_kind: TodoKind = Field(..., description="Current todo kind")
    title: str = Field(..., description="Role-relative label of the todo")
    section: Section = Field(..., description="List-view bucket")
    description: str = Field(..., description="Role-relative description")
    primary_action: Optional[PrimaryAction] = Field(
        default=None, description="Action for the viewer, if it is their turn"
    )
    assignee: Optional[Role] = Field(default=None, description="Role whose turn it is")
    is_open: bool = Field(..., description="True while the trade is in progress")

    model_config = {"frozen": True}


STATUS_TO_TODO: dict[TradeStatus, TodoKind] = {
    TradeStatus.APPROVAL_REQUIRED: TodoKind.APPLICATION_SENT,
    TradeStatus.PAYMENT_REQUIRED: TodoKind.APPLICATION_APPROVED,
    TradeStatus.CONFIRM_REQUIRED: TodoKind.PAYMENT_CONFIRMED,
    TradeStatus.COMPLETED: TodoKind.TRADE_COMPLETED,
    TradeStatus.CANCELED: TodoKind.TRADE_CANCELED,
}

TODO_UI: dict[TodoKind, TodoUi] = {
    TodoKind.APPLICATION_SENT: TodoUi(
        section=Section.APPROVAL,
        title={
            Role.BUYER: "awaiting your approval",
            Role.SELLER: "awaiting buyer approval",
        },
        description={
            Role.BUYER: "The seller sent a request. Enter the shipping destination "
            "and contact person, then approve.",
            Role.SELLER: "Request sent. Please wait for the buyer to approve.",
        },
        primary_action=PrimaryAction(
            label="approve", role=Role.BUYER, transition=Transition.APPROVE
        ),
    ),
    TodoKind.APPLICATION_APPROVED: TodoUi(
        section=Section.PAYMENT,
        title={
            Role.BUYER: "awaiting your payment",
            Role.SELLER: "awaiting buyer payment",
        },
        description={
            Role.BUYER: "Please transfer the payment before the shipment date.",
            Role.SELLER: "Please wait for the buyer's payment.",
        },
        primary_action=PrimaryAction(
            label="mark paid", role=Role.BUYER, transition=Transition.MARK_PAID
        ),
    ),
    TodoKind.PAYMENT_CONFIRMED: TodoUi(
        section=Section.CONFIRMATION,
        title={
            Role.BUYER: "awaiting seller confirmation",
            Role.SELLER: "awaiting your confirmation",
        },
        description={
            Role.BUYER: "Payment reported. Please wait for the seller to confirm receipt.",
            Role.SELLER: "The buyer reported payment. Confirm receipt and complete the trade.",
        },
        primary_action=PrimaryAction(
            label="mark completed", role=Role.SELLER, transition=Transition.MARK_COMPLETED
        ),
    ),
    TodoKind.TRADE_COMPLETED: TodoUi(
        section=Section.COMPLETED,
        title={Role.BUYER: "completed", Role.SELLER: "completed"},
        description={
            Role.BUYER: "The trade is complete.",
            Role.SELLER: "The trade is complete.",
        },
    ),
    TodoKind.TRADE_CANCELED: TodoUi(
        section=Section.CANCELED,
        title={Role.BUYER: "canceled", Role.SELLER: "canceled"},
        description={
            Role.BUYER: "This trade was canceled.",
            Role.SELLER: "This trade was canceled.",
        },
    ),
}

SECTION_ORDER = [
    Section.APPROVAL,
    Section.PAYMENT,
    Section.CONFIRMATION,
    Section.COMPLETED,
    Section.CANCELED,
]


def todo_kind_for(status: TradeStatus) -> TodoKind:
    return STATUS_TO_TODO[TradeStatus(status)]


def derive_presentation(trade: Trade, viewer_role: Role) -> Presentation:
    """Derive the presentation of a trade for one role.

    Args:
        trade: Trade to present.
        viewer_role: Role of the viewer (buyer or seller).

    Returns:
        Presentation; identical for identical inputs.
    """
    role = Role(viewer_role)
    kind = todo_kind_for(trade.status)
    ui = TODO_UI[kind]
    action = ui.primary_action
    return Presentation(
        todo_kind=kind,
        title=ui.title[role],
        section=ui.section,
        description=ui.description[role],
        primary_action=action if action is not None and action.role is role else None,
        assignee=action.role if action is not None else None,
        is_open=not trade.status.is_terminal,
    )


def group_by_section(
    trades: Iterable[Trade], viewer_id: str
) -> dict[Section, list[tuple[Trade, Presentation]]]:
    """Bucket a user's trades by section for list views, in workflow order.

    The viewer's role is resolved per trade; trades the user is not a party
    to are skipped.
    """
    groups: dict[Section, list[tuple[Trade, Presentation]]] = {s: [] for s in SECTION_ORDER}
    for trade in trades:
        role = trade.role_of(viewer_id)
        if role is None:
            continue
        presentation = derive_presentation(trade, role)
        groups[presentation.section].append((trade, presentation))
    return groups
