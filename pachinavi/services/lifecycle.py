"""Trade lifecycle service.

Applies buyer/seller commands to stored trades. Every command follows the
same steps: load the trade, check that the actor is the party bound to the
claimed role, check the state machine and its guard, apply, persist, and
return the updated trade. Any failure leaves the stored trade as it was.
"""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from pachinavi.engine.diff import DiffNotes, diff_trade
from pachinavi.engine.status import (
    DEFAULT_PAYMENT_METHOD,
    Transition,
    apply_transition,
    find_transition,
)
from pachinavi.engine.todo import Presentation, derive_presentation
from pachinavi.engine.totals import Totals, compute_totals
from pachinavi.exceptions import (
    IllegalTransitionError,
    NotFoundError,
    TradeEngineError,
    UnauthorizedError,
    ValidationFailedError,
)
from pachinavi.models import (
    Contact,
    Role,
    ShippingInfo,
    Trade,
    TradeMessage,
    TradeStatus,
)
from pachinavi.services.ports import IdentityDirectory, MessageSource, TradeStore

logger = logging.getLogger(__name__)


class Statement(BaseModel):
    """Data behind the settlement document, as seen by one party."""

    trade: Trade
    role: Role
    totals: Totals
    diff_notes: DiffNotes
    presentation: Presentation
    contacts: list[Contact] = Field(default_factory=list)
    seller_name: str
    buyer_name: str

    model_config = {"frozen": True}


class TradeLifecycleService:
    """Orchestrates trade transitions against an injected store.

    The acting user and the role they act in are always passed in
    explicitly; the service never looks up a "current user".
    """

    def __init__(
        self,
        store: TradeStore,
        directory: Optional[IdentityDirectory] = None,
        messages: Optional[MessageSource] = None,
        clock: Optional[Callable[[], datetime]] = None,
        default_payment_method: str = DEFAULT_PAYMENT_METHOD,
    ):
        """Initialize the service.

        Args:
            store: Trade persistence.
            directory: Optional identity directory for company names.
            messages: Optional message source; defaults to ``store`` when it
                also implements MessageSource.
            clock: Returns the current time; injectable for tests.
            default_payment_method: Payment method recorded on mark paid.
        """
        self._store = store
        self._directory = directory
        if messages is None and isinstance(store, MessageSource):
            messages = store
        self._messages = messages
        self._clock = clock or datetime.now
        self._default_payment_method = default_payment_method

    # ==================== Helpers ====================

    def _load(self, trade_id: str) -> Trade:
        trade = self._store.load_trade(trade_id)
        if trade is None:
            raise NotFoundError("Trade", trade_id)
        return trade

    def _authorize(self, trade: Trade, actor_id: str, role: Role) -> Role:
        """Check that ``actor_id`` is the party bound to ``role``."""
        try:
            role = Role(role)
        except ValueError:
            raise UnauthorizedError(trade.id, actor_id, f"unknown role {role!r}") from None
        if not actor_id or trade.party_for(role).user_id != actor_id:
            raise UnauthorizedError(trade.id, actor_id, f"not the {role.value} of this trade")
        return role

    def _transition(
        self,
        trade_id: str,
        actor_id: str,
        role: Role,
        transition: Transition,
        shipping: Optional[ShippingInfo] = None,
    ) -> Trade:
        trade = self._load(trade_id)
        role = self._authorize(trade, actor_id, role)
        try:
            rule = find_transition(trade.status, transition)
            if role not in rule.actors:
                raise UnauthorizedError(
                    trade.id, actor_id, f"a {role.value} cannot {transition.value}"
                )
            updated = apply_transition(
                trade,
                transition,
                role=role,
                now=self._clock(),
                shipping=shipping,
                default_payment_method=self._default_payment_method,
            )
        except TradeEngineError:
            logger.warning(
                "Rejected %s on trade %s by %s (%s)",
                transition.value,
                trade.id,
                actor_id,
                trade.status.value,
            )
            raise

        saved = self._store.save_trade(updated)
        logger.info(
            "Trade %s: %s -> %s by %s %s",
            trade.id,
            trade.status.value,
            saved.status.value,
            role.value,
            actor_id,
        )
        return saved

    @staticmethod
    def _new_contact(name: str) -> Contact:
        return Contact(contact_id=f"contact-{uuid.uuid4().hex[:12]}", name=name)

    def _register_contact(self, trade_id: str, name: str) -> bool:
        """Append a contact unless one with the same name exists."""
        return self._store.append_contact(trade_id, self._new_contact(name), unique_name=True)

    # ==================== Commands ====================

    def open_trade(self, trade: Trade) -> Trade:
        """Register a newly created trade.

        Args:
            trade: Trade in APPROVAL_REQUIRED.

        Returns:
            The stored trade.

        Raises:
            ValidationFailedError: If the trade is not in APPROVAL_REQUIRED or
                binds the same user as buyer and seller.
        """
        if trade.status is not TradeStatus.APPROVAL_REQUIRED:
            raise ValidationFailedError(
                ["status"], f"New trades must start in APPROVAL_REQUIRED, got {trade.status.value}"
            )
        if trade.buyer.user_id == trade.seller.user_id:
            raise ValidationFailedError(["buyer"], "Buyer and seller must be different users")
        stored = self._store.insert_trade(trade)
        if trade.shipping.person_name:
            self._register_contact(trade.id, trade.shipping.person_name)
        logger.info("Opened trade %s", trade.id)
        return stored

    def approve(
        self,
        trade_id: str,
        actor_id: str,
        role: Role,
        shipping: Optional[ShippingInfo] = None,
        contacts: Optional[list[Contact]] = None,
    ) -> Trade:
        """Approve a trade as the buyer.

        Args:
            trade_id: Trade ID.
            actor_id: Acting user ID.
            role: Role the actor acts in (must be buyer).
            shipping: Shipping info to persist; defaults to the trade's.
            contacts: Contacts to register along with the approval.

        Returns:
            The trade in PAYMENT_REQUIRED.
        """
        updated = self._transition(trade_id, actor_id, role, Transition.APPROVE, shipping)

        for contact in contacts or ():
            self._store.append_contact(trade_id, contact)
        self._register_contact(trade_id, updated.shipping.person_name)
        return updated

    def mark_paid(self, trade_id: str, actor_id: str, role: Role = Role.BUYER) -> Trade:
        """Report payment as the buyer."""
        return self._transition(trade_id, actor_id, role, Transition.MARK_PAID)

    def mark_completed(self, trade_id: str, actor_id: str, role: Role = Role.SELLER) -> Trade:
        """Confirm payment receipt and complete the trade as the seller."""
        return self._transition(trade_id, actor_id, role, Transition.MARK_COMPLETED)

    def cancel(self, trade_id: str, actor_id: str, role: Role) -> Trade:
        """Cancel a trade that is still in progress, as either party."""
        return self._transition(trade_id, actor_id, role, Transition.CANCEL)

    def update_shipping(
        self, trade_id: str, actor_id: str, role: Role, shipping: ShippingInfo
    ) -> Trade:
        """Edit the shipping destination before approval.

        Incomplete shipping info is accepted here; completeness is only
        required at approval.

        Raises:
            UnauthorizedError: If the actor is not the buyer.
            IllegalTransitionError: If the trade is past approval.
        """
        trade = self._load(trade_id)
        role = self._authorize(trade, actor_id, role)
        if role is not Role.BUYER:
            raise UnauthorizedError(trade.id, actor_id, "only the buyer edits shipping info")
        if trade.status is not TradeStatus.APPROVAL_REQUIRED:
            raise IllegalTransitionError(trade.status.value, "update_shipping")

        updated = trade.model_copy(update={"shipping": shipping, "updated_at": self._clock()})
        saved = self._store.save_trade(updated)
        if shipping.person_name:
            self._register_contact(trade_id, shipping.person_name)
        logger.info("Trade %s: shipping info updated by %s", trade.id, actor_id)
        return saved

    def add_contact(self, trade_id: str, actor_id: str, role: Role, name: str) -> Contact:
        """Register a new buyer-side contact.

        Returns:
            The new contact.

        Raises:
            ValidationFailedError: If the name is blank.
        """
        trade = self._load(trade_id)
        role = self._authorize(trade, actor_id, role)
        if role is not Role.BUYER:
            raise UnauthorizedError(trade.id, actor_id, "only the buyer registers contacts")
        name = (name or "").strip()
        if not name:
            raise ValidationFailedError(["name"])

        contact = self._new_contact(name)
        self._store.append_contact(trade_id, contact)
        return contact

    # ==================== Queries ====================

    def get_trade(self, trade_id: str) -> Trade:
        """Get a trade.

        Raises:
            NotFoundError: If the trade does not exist.
        """
        return self._load(trade_id)

    def list_trades(self, user_id: str) -> list[Trade]:
        """List the trades a user is party to, newest first."""
        return self._store.list_trades(user_id)

    def todo_list(self, user_id: str, open_only: bool = False) -> list[tuple[Trade, Presentation]]:
        """Pair each of a user's trades with its presentation for that user."""
        result = []
        for trade in self._store.list_trades(user_id):
            role = trade.role_of(user_id)
            if role is None:
                continue
            presentation = derive_presentation(trade, role)
            if open_only and not presentation.is_open:
                continue
            result.append((trade, presentation))
        return result

    def statement(self, trade_id: str, actor_id: str) -> Statement:
        """Build the settlement statement for one of the parties.

        Raises:
            NotFoundError: If the trade does not exist.
            UnauthorizedError: If the actor is not a party.
        """
        trade = self._load(trade_id)
        role = trade.role_of(actor_id)
        if role is None:
            raise UnauthorizedError(trade.id, actor_id, "not a party to this trade")

        return Statement(
            trade=trade,
            role=role,
            totals=compute_totals(trade.items, trade.tax_rate),
            diff_notes=diff_trade(trade),
            presentation=derive_presentation(trade, role),
            contacts=self._store.load_contacts(trade.id),
            seller_name=self._company_name(trade, Role.SELLER),
            buyer_name=self._company_name(trade, Role.BUYER),
        )

    def messages(self, trade_id: str, actor_id: str) -> list[TradeMessage]:
        """Get the messages exchanged about a trade.

        Returns:
            Messages oldest first; empty when the trade has no reference number
            or no message source is configured.
        """
        trade = self._load(trade_id)
        if trade.role_of(actor_id) is None:
            raise UnauthorizedError(trade.id, actor_id, "not a party to this trade")
        if trade.navi_id is None or self._messages is None:
            return []
        return self._messages.get_messages(trade.navi_id)

    def _company_name(self, trade: Trade, role: Role) -> str:
        party = trade.party_for(role)
        if self._directory is not None:
            name = self._directory.company_name(party.user_id)
            if name:
                return name
        return party.company_name
