"""Collaborator interfaces consumed by the trade lifecycle service."""

from abc import ABC, abstractmethod
from typing import Optional

from pachinavi.models import Contact, Trade, TradeMessage


class TradeStore(ABC):
    """Abstract persistence for trade aggregates.

    Implementations must give read-your-writes consistency per trade id and
    must reject a save whose ``version`` no longer matches the stored one.
    """

    @abstractmethod
    def load_trade(self, trade_id: str) -> Optional[Trade]:
        """Load a trade.

        Args:
            trade_id: Trade ID.

        Returns:
            The trade, or None if it does not exist.
        """
        pass

    @abstractmethod
    def insert_trade(self, trade: Trade) -> Trade:
        """Store a new trade.

        Args:
            trade: Trade to store.

        Returns:
            The stored trade.

        Raises:
            ValueError: If a trade with the same ID exists.
        """
        pass

    @abstractmethod
    def save_trade(self, trade: Trade) -> Trade:
        """Save an existing trade.

        Args:
            trade: Trade as loaded and modified; its ``version`` is the one read.

        Returns:
            The stored trade with its new version.

        Raises:
            NotFoundError: If the trade does not exist.
            ConcurrentModificationError: If the trade changed since it was read.
        """
        pass

    @abstractmethod
    def list_trades(self, user_id: Optional[str] = None) -> list[Trade]:
        """List trades, optionally only those a user is party to.

        Args:
            user_id: Optional buyer or seller user ID filter.

        Returns:
            List of trades, newest first.
        """
        pass

    @abstractmethod
    def load_contacts(self, trade_id: str) -> list[Contact]:
        """Load the buyer-side contacts of a trade.

        Args:
            trade_id: Trade ID.

        Returns:
            Contacts in registration order.
        """
        pass

    @abstractmethod
    def save_contacts(self, trade_id: str, contacts: list[Contact]) -> None:
        """Replace the contacts of a trade.

        Args:
            trade_id: Trade ID.
            contacts: Full contact list.
        """
        pass

    @abstractmethod
    def append_contact(self, trade_id: str, contact: Contact, unique_name: bool = False) -> bool:
        """Add one contact to a trade without rewriting the others.

        Args:
            trade_id: Trade ID.
            contact: Contact to add. An existing ``contact_id`` is left alone.
            unique_name: Skip the insert when a contact with the same name exists.

        Returns:
            True if the contact was stored.
        """
        pass


class MessageSource(ABC):
    """Source of messages exchanged about a trade."""

    @abstractmethod
    def get_messages(self, navi_id: int) -> list[TradeMessage]:
        """Get messages for a trade reference number.

        Args:
            navi_id: External trade reference number.

        Returns:
            Messages ordered oldest first.
        """
        pass


class IdentityDirectory(ABC):
    """Resolves display information for user IDs."""

    @abstractmethod
    def company_name(self, user_id: str) -> Optional[str]:
        """Get the company name of a user.

        Args:
            user_id: User ID.

        Returns:
            Company name, or None if unknown.
        """
        pass
