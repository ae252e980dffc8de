"""Storage module for negotiation persistence.

Provides SQLite-based storage for:
- Negotiation sessions (persistent across table sessions)
- Narrative events (campaign history)
"""

from negotiation_engine.storage.database import (
    Database,
    NegotiationRecord,
    get_database,
    reset_database,
)

__all__ = [
    "Database",
    "NegotiationRecord",
    "get_database",
    "reset_database",
]
