"""SQLAlchemy persistence for conversation turns.

Turns are append-only: this module inserts and reads them, never updates
or deletes.
"""

import os
from datetime import datetime, timezone

import structlog
from sqlalchemy import Column, DateTime, Integer, String, Text, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from relay.api.schemas import MessageRecord

logger = structlog.get_logger(__name__)

Base = declarative_base()

VALID_ROLES = ("user", "assistant", "system")


class ConversationTurn(Base):
    """Persistent conversation turn row."""
    __tablename__ = "conversation_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversation_id = Column(String, index=True, nullable=False)
    role = Column(String, nullable=False)  # "user", "assistant" or "system"
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))


_engine = None
_SessionLocal = None


def init_db(database_url: str | None = None) -> None:
    """Create engine + tables. Call once at startup.

    Args:
        database_url: SQLAlchemy connection string. Defaults to DATABASE_URL env var.
    """
    global _engine, _SessionLocal

    url = database_url or os.environ.get("DATABASE_URL", "sqlite:///relay.sqlite")
    if url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection so every request thread sees the same in-memory tables
        _engine = create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        _engine = create_engine(url, echo=False)
    _SessionLocal = sessionmaker(bind=_engine)

    Base.metadata.create_all(_engine)
    logger.info("db.initialized", url=url.split("://")[0] + "://***")


def get_session() -> Session:
    """Get a new database session."""
    if _SessionLocal is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _SessionLocal()


def save_turn(conversation_id: str, role: str, content: str) -> None:
    """Append a single turn to the conversation history.

    Args:
        conversation_id: Conversation the turn belongs to.
        role: "user", "assistant" or "system".
        content: Full message text, stored untruncated.

    Raises:
        ValueError: If role is not one of VALID_ROLES.
    """
    if role not in VALID_ROLES:
        raise ValueError(f"Invalid role: {role!r}")

    with get_session() as session:
        turn = ConversationTurn(
            conversation_id=conversation_id,
            role=role,
            content=content,
            created_at=datetime.now(timezone.utc),
        )
        session.add(turn)
        session.commit()
        logger.debug("db.turn_saved", conversation_id=conversation_id, role=role)


def get_recent_turns(conversation_id: str, limit: int = 20) -> list[MessageRecord]:
    """Fetch the most recent turns for a conversation.

    Args:
        conversation_id: Conversation to read.
        limit: Max number of turns to return (default 20).

    Returns:
        List of MessageRecord ordered oldest-first.
    """
    with get_session() as session:
        rows = (
            session.query(ConversationTurn)
            .filter(ConversationTurn.conversation_id == conversation_id)
            .order_by(ConversationTurn.created_at.desc(), ConversationTurn.id.desc())
            .limit(limit)
            .all()
        )
        # Reverse to get chronological order (oldest first)
        rows.reverse()
        return [_row_to_record(r) for r in rows]


def _row_to_record(row: ConversationTurn) -> MessageRecord:
    """Convert a SQLAlchemy row to a Pydantic MessageRecord."""
    return MessageRecord(
        role=row.role,
        content=row.content,
        created_at=row.created_at,
    )
