"""SQLite persistence layer for negotiations.

Provides persistent storage for:
- Negotiation sessions (full JSON snapshot plus indexed summary columns)
- Narrative events (campaign history written when a negotiation concludes)

Storage location: ``settings.storage.database_path`` (data/negotiations.db).
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Generator
from uuid import UUID

from negotiation_engine.core.exceptions import InvalidStateError, StorageError
from negotiation_engine.core.logging import get_logger
from negotiation_engine.models.enums import NegotiationOutcome, NegotiationStatus
from negotiation_engine.models.narrative import NarrativeEvent
from negotiation_engine.models.negotiation import NegotiationSession, session_from_dict


logger = get_logger(__name__)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class NegotiationRecord:
    """Row of the negotiation_sessions table.

    Attributes:
        id: Negotiation ID.
        name: Encounter name.
        npc_name: NPC being negotiated with.
        status: Lifecycle status.
        outcome: Final outcome, if completed.
        session_json: Serialized NegotiationSession.
        created_at: When the negotiation was created.
        updated_at: When the negotiation was last saved.
        completed_at: When the negotiation completed.
    """

    id: str
    name: str
    npc_name: str
    status: NegotiationStatus
    outcome: NegotiationOutcome | None
    session_json: str
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> NegotiationRecord:
        """Create from database row."""
        return cls(
            id=row[0],
            name=row[1],
            npc_name=row[2],
            status=NegotiationStatus(row[3]),
            outcome=NegotiationOutcome(row[4]) if row[4] else None,
            session_json=row[5],
            created_at=datetime.fromisoformat(row[6]),
            updated_at=datetime.fromisoformat(row[7]),
            completed_at=datetime.fromisoformat(row[8]) if row[8] else None,
        )

    def to_session(self) -> NegotiationSession:
        """Parse the stored snapshot."""
        return session_from_dict(json.loads(self.session_json))


def _event_from_row(row: tuple[Any, ...]) -> NarrativeEvent:
    return NarrativeEvent(
        id=UUID(row[0]),
        event_type=row[1],
        source_id=UUID(row[2]),
        name=row[3],
        description=row[4] or "",
        outcome=NegotiationOutcome(row[5]),
        created_at=datetime.fromisoformat(row[6]),
    )


_SESSION_COLUMNS = """
    id, name, npc_name, status, outcome, session_json,
    created_at, updated_at, completed_at
"""

_EVENT_COLUMNS = "id, event_type, source_id, name, description, outcome, created_at"


# =============================================================================
# Database Class
# =============================================================================


class Database:
    """SQLite database for negotiation persistence.

    Manages storage of:
    - Negotiation sessions
    - Narrative events
    """

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path | None = None) -> None:
        """Initialize database.

        Args:
            db_path: Path to database file. If None, uses the configured path.
        """
        if db_path is None:
            self.db_path = self._get_default_path()
        else:
            self.db_path = Path(db_path)

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

        logger.info("Database initialized", db_path=str(self.db_path))

    @staticmethod
    def _get_default_path() -> Path:
        """Get the configured database path."""
        from negotiation_engine.core.config import get_settings

        return get_settings().storage.database_path

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with proper cleanup.

        Raises:
            StorageError: If SQLite reports an error.
        """
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot open database: {exc}", db_path=str(self.db_path)) from exc

        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(f"Database operation failed: {exc}", db_path=str(self.db_path)) from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS negotiation_sessions (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    npc_name TEXT NOT NULL,
                    status TEXT NOT NULL,
                    outcome TEXT,
                    session_json TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    completed_at TEXT
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS narrative_events (
                    id TEXT PRIMARY KEY,
                    event_type TEXT NOT NULL,
                    source_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    description TEXT DEFAULT '',
                    outcome TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_negotiations_status_updated
                ON negotiation_sessions(status, updated_at DESC)
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_narrative_events_source
                ON narrative_events(source_id)
            """)

            cursor.execute("""
                INSERT OR REPLACE INTO schema_version (version) VALUES (?)
            """, (self.SCHEMA_VERSION,))

    # =========================================================================
    # Negotiation Operations
    # =========================================================================

    def save_negotiation(self, session: NegotiationSession) -> NegotiationRecord:
        """Insert or update a negotiation snapshot.

        A stored completed negotiation can be saved again only with the
        same status and outcome.

        Args:
            session: Snapshot to store.

        Returns:
            The stored record.

        Raises:
            InvalidStateError: If the snapshot would reopen or re-decide a
                completed negotiation.
            StorageError: If SQLite reports an error.
        """
        session_id = str(session.id)
        session_json = session.model_dump_json()
        outcome = session.outcome.value if session.outcome else None
        completed_at = session.completed_at.isoformat() if session.completed_at else None

        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT status, outcome FROM negotiation_sessions WHERE id = ?",
                (session_id,),
            )
            row = cursor.fetchone()
            if row and row[0] == NegotiationStatus.COMPLETED.value:
                if session.status is not NegotiationStatus.COMPLETED or outcome != row[1]:
                    raise InvalidStateError(
                        "A completed negotiation cannot be overwritten",
                        current_state=row[0],
                        details={"negotiation_id": session_id, "stored_outcome": row[1]},
                    )

            cursor.execute("""
                INSERT INTO negotiation_sessions
                (id, name, npc_name, status, outcome, session_json,
                 created_at, updated_at, completed_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    npc_name = excluded.npc_name,
                    status = excluded.status,
                    outcome = excluded.outcome,
                    session_json = excluded.session_json,
                    updated_at = excluded.updated_at,
                    completed_at = excluded.completed_at
            """, (
                session_id,
                session.name,
                session.npc_name,
                session.status.value,
                outcome,
                session_json,
                session.created_at.isoformat(),
                session.updated_at.isoformat(),
                completed_at,
            ))

        logger.debug("Saved negotiation", negotiation_id=session_id, status=session.status.value)

        return NegotiationRecord(
            id=session_id,
            name=session.name,
            npc_name=session.npc_name,
            status=session.status,
            outcome=session.outcome,
            session_json=session_json,
            created_at=session.created_at,
            updated_at=session.updated_at,
            completed_at=session.completed_at,
        )

    def get_negotiation(self, negotiation_id: UUID | str) -> NegotiationSession | None:
        """Get a negotiation by ID.

        Args:
            negotiation_id: Negotiation ID.

        Returns:
            The stored session if found, None otherwise.
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {_SESSION_COLUMNS} FROM negotiation_sessions WHERE id = ?",
                (str(negotiation_id),),
            )
            row = cursor.fetchone()

        if row:
            return NegotiationRecord.from_row(tuple(row)).to_session()
        return None

    def list_negotiations(self, status: NegotiationStatus | None = None) -> list[NegotiationSession]:
        """Get stored negotiations, most recently updated first.

        Args:
            status: Only return negotiations with this status.

        Returns:
            List of sessions.
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            if status is None:
                cursor.execute(
                    f"SELECT {_SESSION_COLUMNS} FROM negotiation_sessions ORDER BY updated_at DESC"
                )
            else:
                cursor.execute(
                    f"SELECT {_SESSION_COLUMNS} FROM negotiation_sessions "
                    "WHERE status = ? ORDER BY updated_at DESC",
                    (NegotiationStatus(status).value,),
                )
            rows = cursor.fetchall()

        return [NegotiationRecord.from_row(tuple(row)).to_session() for row in rows]

    def delete_negotiation(self, negotiation_id: UUID | str) -> bool:
        """Delete a negotiation.

        Narrative events that came from it are kept.

        Args:
            negotiation_id: ID of negotiation to delete.

        Returns:
            True if deleted, False if not found.
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM negotiation_sessions WHERE id = ?", (str(negotiation_id),))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info("Deleted negotiation", negotiation_id=str(negotiation_id))

        return deleted

    def get_negotiation_count(self) -> int:
        """Get total number of stored negotiations."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM negotiation_sessions")
            return cursor.fetchone()[0]

    # =========================================================================
    # Narrative Operations
    # =========================================================================

    def add_narrative_event(self, event: NarrativeEvent) -> NarrativeEvent:
        """Append an event to the narrative history.

        Args:
            event: The event to store.

        Returns:
            The stored event.
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"""
                INSERT INTO narrative_events ({_EVENT_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (
                str(event.id),
                event.event_type,
                str(event.source_id),
                event.name,
                event.description,
                event.outcome.value,
                event.created_at.isoformat(),
            ))

        logger.info(
            "Added narrative event",
            event_id=str(event.id),
            source_id=str(event.source_id),
            outcome=event.outcome.value,
        )
        return event

    def get_narrative_events(self, source_id: UUID | str | None = None) -> list[NarrativeEvent]:
        """Get narrative events, oldest first.

        Args:
            source_id: Only return events from this negotiation.

        Returns:
            List of events.
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            if source_id is None:
                cursor.execute(
                    f"SELECT {_EVENT_COLUMNS} FROM narrative_events ORDER BY created_at"
                )
            else:
                cursor.execute(
                    f"SELECT {_EVENT_COLUMNS} FROM narrative_events "
                    "WHERE source_id = ? ORDER BY created_at",
                    (str(source_id),),
                )
            rows = cursor.fetchall()

        return [_event_from_row(tuple(row)) for row in rows]


# =============================================================================
# Singleton Instance
# =============================================================================


_database_instance: Database | None = None


def get_database() -> Database:
    """Get the global database instance.

    Returns:
        Database singleton instance.
    """
    global _database_instance

    if _database_instance is None:
        _database_instance = Database()

    return _database_instance


def reset_database() -> None:
    """Drop the global instance so the next call reopens the configured path."""
    global _database_instance
    _database_instance = None


__all__ = [
    "Database",
    "NegotiationRecord",
    "get_database",
    "reset_database",
]
