"""History accessor: store calls wrapped as CallResult outcomes.

The agent decides what a failure means (fatal for the user turn and the
history fetch, logged-only for the assistant turn); this layer only
reports it.
"""

import structlog
from sqlalchemy.exc import SQLAlchemyError

from relay.core.database import get_recent_turns, save_turn
from relay.core.results import CallResult

logger = structlog.get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 20


class HistoryAccessor:
    """Record and fetch conversation turns through the database layer."""

    def record(self, conversation_id: str, role: str, content: str) -> CallResult:
        try:
            save_turn(conversation_id, role, content)
        except (SQLAlchemyError, RuntimeError, ValueError) as e:
            logger.error("history.record_failed", conversation_id=conversation_id,
                         role=role, error=str(e))
            return CallResult.failure(f"Failed to save {role} message: {e}")
        return CallResult.success()

    def fetch(self, conversation_id: str, limit: int = DEFAULT_HISTORY_LIMIT) -> CallResult:
        """Return the last ``limit`` turns, oldest first, as the result value."""
        try:
            turns = get_recent_turns(conversation_id, limit=limit)
        except (SQLAlchemyError, RuntimeError) as e:
            logger.error("history.fetch_failed", conversation_id=conversation_id, error=str(e))
            return CallResult.failure(f"Failed to fetch history: {e}")
        logger.info("history.fetched", conversation_id=conversation_id, turns=len(turns))
        return CallResult.success(turns)
