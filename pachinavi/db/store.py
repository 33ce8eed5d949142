"""SQLite data store for PachiNavi."""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from pachinavi.exceptions import ConcurrentModificationError, NotFoundError
from pachinavi.models import Contact, Trade, TradeMessage
from pachinavi.services.ports import MessageSource, TradeStore

logger = logging.getLogger(__name__)


class TradeDataStore(TradeStore, MessageSource):
    """SQLite-based store for trades, buyer contacts and trade messages.

    Each trade row keeps the full aggregate as JSON next to a few indexed
    columns. Writes are guarded by a version column so that two writers who
    read the same version cannot both succeed.
    """

    REQUIRED_TABLES = [
        "trades",
        "contacts",
        "messages",
    ]

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            # Trades table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trades (
                    id TEXT PRIMARY KEY,
                    navi_id INTEGER,
                    seller_user_id TEXT NOT NULL,
                    buyer_user_id TEXT NOT NULL,
                    status TEXT NOT NULL,
                    version INTEGER NOT NULL DEFAULT 0,
                    payload TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            # Contacts table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS contacts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    trade_id TEXT NOT NULL,
                    contact_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    UNIQUE(trade_id, contact_id)
                )
            """)

            # Messages table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS messages (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    navi_id INTEGER NOT NULL,
                    sender_user_id TEXT NOT NULL,
                    receiver_user_id TEXT NOT NULL,
                    body TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Trades ====================

    @staticmethod
    def _row_to_trade(row: sqlite3.Row) -> Trade:
        trade = Trade.model_validate_json(row["payload"])
        return trade.model_copy(update={"version": row["version"]})

    def load_trade(self, trade_id: str) -> Optional[Trade]:
        """Load a trade by ID.

        Args:
            trade_id: Trade ID.

        Returns:
            Trade if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT payload, version FROM trades WHERE id = ?",
                (trade_id,),
            )
            row = cursor.fetchone()
            if row:
                return self._row_to_trade(row)
            return None
        finally:
            conn.close()

    def insert_trade(self, trade: Trade) -> Trade:
        """Insert a new trade.

        Args:
            trade: Trade to insert.

        Returns:
            The stored trade at version 0.

        Raises:
            ValueError: If a trade with the same ID already exists.
        """
        stored = trade.model_copy(update={"version": 0})
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    """
                    INSERT INTO trades
                    (id, navi_id, seller_user_id, buyer_user_id, status, version,
                     payload, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, 0, ?, ?, ?)
                    """,
                    (
                        stored.id,
                        stored.navi_id,
                        stored.seller.user_id,
                        stored.buyer.user_id,
                        stored.status.value,
                        stored.model_dump_json(exclude={"version"}),
                        stored.created_at.isoformat(),
                        stored.updated_at.isoformat(),
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise ValueError(f"Trade already exists: {trade.id}") from e
            conn.commit()
            logger.debug("Inserted trade %s (%s)", stored.id, stored.status.value)
            return stored
        finally:
            conn.close()

    def save_trade(self, trade: Trade) -> Trade:
        """Save an existing trade if nobody else saved it since it was read.

        Args:
            trade: Trade to save, carrying the version it was loaded with.

        Returns:
            The stored trade with its version incremented.

        Raises:
            NotFoundError: If the trade does not exist.
            ConcurrentModificationError: If the stored version moved on.
        """
        stored = trade.model_copy(update={"version": trade.version + 1})
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE trades
                SET navi_id = ?, status = ?, version = ?, payload = ?, updated_at = ?
                WHERE id = ? AND version = ?
                """,
                (
                    stored.navi_id,
                    stored.status.value,
                    stored.version,
                    stored.model_dump_json(exclude={"version"}),
                    stored.updated_at.isoformat(),
                    trade.id,
                    trade.version,
                ),
            )
            if cursor.rowcount == 0:
                conn.rollback()
                cursor.execute("SELECT 1 FROM trades WHERE id = ?", (trade.id,))
                if cursor.fetchone() is None:
                    raise NotFoundError("Trade", trade.id)
                raise ConcurrentModificationError(trade.id, trade.version)
            conn.commit()
            logger.debug(
                "Saved trade %s (%s) at version %d", stored.id, stored.status.value, stored.version
            )
            return stored
        finally:
            conn.close()

    def list_trades(self, user_id: Optional[str] = None) -> list[Trade]:
        """List trades, newest first.

        Args:
            user_id: Optional filter; only trades where the user is buyer or seller.

        Returns:
            List of trades.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            if user_id:
                cursor.execute(
                    """
                    SELECT payload, version
                    FROM trades
                    WHERE buyer_user_id = ? OR seller_user_id = ?
                    ORDER BY updated_at DESC, id
                    """,
                    (user_id, user_id),
                )
            else:
                cursor.execute(
                    """
                    SELECT payload, version
                    FROM trades
                    ORDER BY updated_at DESC, id
                    """
                )
            return [self._row_to_trade(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Contacts ====================

    def load_contacts(self, trade_id: str) -> list[Contact]:
        """Load the contacts of a trade.

        Args:
            trade_id: Trade ID.

        Returns:
            Contacts in registration order.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT contact_id, name
                FROM contacts
                WHERE trade_id = ?
                ORDER BY id
                """,
                (trade_id,),
            )
            return [
                Contact(contact_id=row["contact_id"], name=row["name"])
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()

    def save_contacts(self, trade_id: str, contacts: list[Contact]) -> None:
        """Replace the contacts of a trade.

        Args:
            trade_id: Trade ID.
            contacts: Full contact list, in order.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM contacts WHERE trade_id = ?", (trade_id,))
            for contact in contacts:
                cursor.execute(
                    """
                    INSERT OR IGNORE INTO contacts (trade_id, contact_id, name)
                    VALUES (?, ?, ?)
                    """,
                    (trade_id, contact.contact_id, contact.name),
                )
            conn.commit()
        finally:
            conn.close()

    def append_contact(self, trade_id: str, contact: Contact, unique_name: bool = False) -> bool:
        """Add one contact to a trade in a single statement.

        Args:
            trade_id: Trade ID.
            contact: Contact to add. An existing ``contact_id`` is left alone.
            unique_name: Skip the insert when a contact with the same name exists.

        Returns:
            True if the contact was stored.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            if unique_name:
                cursor.execute(
                    """
                    INSERT OR IGNORE INTO contacts (trade_id, contact_id, name)
                    SELECT ?, ?, ?
                    WHERE NOT EXISTS (
                        SELECT 1 FROM contacts WHERE trade_id = ? AND name = ?
                    )
                    """,
                    (trade_id, contact.contact_id, contact.name, trade_id, contact.name),
                )
            else:
                cursor.execute(
                    """
                    INSERT OR IGNORE INTO contacts (trade_id, contact_id, name)
                    VALUES (?, ?, ?)
                    """,
                    (trade_id, contact.contact_id, contact.name),
                )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    # ==================== Messages ====================

    def post_message(
        self,
        navi_id: int,
        sender_user_id: str,
        receiver_user_id: str,
        body: str,
        created_at: Optional[datetime] = None,
    ) -> TradeMessage:
        """Store a message about a trade.

        Args:
            navi_id: External trade reference number.
            sender_user_id: Sender user ID.
            receiver_user_id: Receiver user ID.
            body: Message body.
            created_at: Optional timestamp, defaults to now.

        Returns:
            The stored message.
        """
        timestamp = created_at or datetime.now()
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO messages (navi_id, sender_user_id, receiver_user_id, body, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (navi_id, sender_user_id, receiver_user_id, body, timestamp.isoformat()),
            )
            conn.commit()
            return TradeMessage(sender=sender_user_id, body=body, timestamp=timestamp)
        finally:
            conn.close()

    def get_messages(self, navi_id: int) -> list[TradeMessage]:
        """Get messages for a trade reference number.

        Args:
            navi_id: External trade reference number.

        Returns:
            Messages, oldest first.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT sender_user_id, body, created_at
                FROM messages
                WHERE navi_id = ?
                ORDER BY created_at, id
                """,
                (navi_id,),
            )
            return [
                TradeMessage(
                    sender=row["sender_user_id"],
                    body=row["body"],
                    timestamp=datetime.fromisoformat(row["created_at"]),
                )
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()

    # ==================== Stats ====================

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with table record counts.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            stats = {}
            for table in self.REQUIRED_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                stats[table] = cursor.fetchone()["count"]
            return stats
        finally:
            conn.close()
