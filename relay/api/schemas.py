"""Pydantic models for the API layer.

Defines the chat turn request, the success/failure envelopes and the
history record shape shared with the database layer.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class TurnRequest(BaseModel):
    """Incoming chat turn from the messaging platform."""
    conversation_id: str = Field(..., min_length=1, description="Conversation identifier")
    new_message: str = Field(..., min_length=1, description="User message text")
    user_phone: str | None = Field(None, description="Destination phone for messaging tools")
    platform: str | None = Field(None, description="Free-text origin tag echoed in metadata")

    @field_validator("user_phone", "platform", mode="before")
    @classmethod
    def numbers_as_text(cls, value):
        # Some gateways send the phone as a JSON number
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class MessageRecord(BaseModel):
    """Single turn in a conversation history."""
    role: Literal["user", "assistant", "system"]
    content: str
    created_at: datetime


class TurnMetadata(BaseModel):
    """Execution details returned alongside the reply."""
    messages_in_history: int
    tool_calls_executed: int
    timestamp: str
    platform: str = "unknown"
    user_phone: str | None = None


class TurnResponse(BaseModel):
    """Outgoing reply envelope."""
    success: bool = True
    conversation_id: str
    response: str
    metadata: TurnMetadata


class ErrorResponse(BaseModel):
    """Failure envelope for internal errors."""
    success: bool = False
    error: str
