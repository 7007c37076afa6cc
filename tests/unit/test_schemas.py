"""Unit tests for Pydantic API schemas."""

import pytest
from datetime import datetime
from pydantic import ValidationError
from relay.api.schemas import ErrorResponse, MessageRecord, TurnMetadata, TurnRequest, TurnResponse


class TestTurnRequest:

    def test_valid_request(self):
        req = TurnRequest(conversation_id="c1", new_message="Quero HIIT iniciante")
        assert req.conversation_id == "c1"
        assert req.user_phone is None
        assert req.platform is None

    def test_optional_fields_passed_through(self):
        req = TurnRequest(conversation_id="c1", new_message="oi",
                          user_phone="not a phone", platform="whatsapp")
        assert req.user_phone == "not a phone"
        assert req.platform == "whatsapp"

    def test_numeric_phone_coerced_to_text(self):
        req = TurnRequest(conversation_id="c1", new_message="oi", user_phone=5511999998888, platform=1)
        assert req.user_phone == "5511999998888"
        assert req.platform == "1"

    def test_empty_message_rejected(self):
        with pytest.raises(ValidationError):
            TurnRequest(conversation_id="c1", new_message="")

    def test_empty_conversation_rejected(self):
        with pytest.raises(ValidationError):
            TurnRequest(conversation_id="", new_message="hello")

    def test_missing_fields_rejected(self):
        with pytest.raises(ValidationError):
            TurnRequest(new_message="hello")


class TestTurnResponse:

    def test_serialization(self):
        resp = TurnResponse(
            conversation_id="c1",
            response="Aqui estão alguns programas.",
            metadata=TurnMetadata(messages_in_history=3, tool_calls_executed=1,
                                  timestamp="2026-01-01T00:00:00+00:00"),
        )
        data = resp.model_dump()
        assert data["success"] is True
        assert data["metadata"]["platform"] == "unknown"
        assert data["metadata"]["user_phone"] is None

    def test_error_envelope(self):
        assert ErrorResponse(error="boom").model_dump() == {"success": False, "error": "boom"}


class TestMessageRecord:

    @pytest.mark.parametrize("role", ["user", "assistant", "system"])
    def test_valid_roles(self, role):
        rec = MessageRecord(role=role, content="hello", created_at=datetime.now())
        assert rec.role == role

    def test_invalid_role_rejected(self):
        with pytest.raises(ValidationError):
            MessageRecord(role="tool", content="hello", created_at=datetime.now())
