"""Unit tests for the n8n automation client (httpx MockTransport, no network)."""

import httpx
import pytest

from relay.core.automation import AutomationClient, normalize_webhook_base


class TestNormalizeWebhookBase:

    @pytest.mark.parametrize("raw, expected", [
        ("https://n8n.example/webhook", "https://n8n.example/webhook"),
        ("https://n8n.example/webhook/", "https://n8n.example/webhook"),
        ("https://n8n.example", "https://n8n.example/webhook"),
        ("https://n8n.example/", "https://n8n.example/webhook"),
        ("", ""),
        (None, ""),
    ])
    def test_normalization(self, raw, expected):
        assert normalize_webhook_base(raw) == expected


class TestCallTool:

    def test_posts_arguments_verbatim(self, automation, backend):
        backend.respond("/tool/search-programs", 200, json=[{"id": "p1"}])
        args = {"level": "Iniciante", "modality": "HIIT", "has_equipment": False}

        result = automation.call_tool("search-programs", args)

        assert result.ok
        assert result.value == [{"id": "p1"}]
        request = backend.requests[0]
        assert str(request.url) == "https://n8n.example/webhook/tool/search-programs"
        assert request.headers["x-n8n-api-key"] == "secret"
        assert backend.bodies()[0] == args

    def test_non_success_status(self, automation, backend):
        backend.respond("/tool/search-programs", 500, text="boom")
        result = automation.call_tool("search-programs", {})
        assert not result.ok
        assert result.status_code == 500
        assert result.error == "Internal Server Error"

    def test_invalid_json_is_failure(self, automation, backend):
        backend.respond("/tool/search-programs", 200, text="not json")
        result = automation.call_tool("search-programs", {})
        assert not result.ok
        assert "invalid JSON" in result.error

    def test_transport_error_is_failure(self):
        def raise_connect(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = AutomationClient("https://n8n.example", "k",
                                  client=httpx.Client(transport=httpx.MockTransport(raise_connect)))
        result = client.call_tool("search-programs", {})
        assert not result.ok
        assert result.status_code is None
        assert "connection refused" in result.error

    def test_unconfigured(self):
        client = AutomationClient(webhook_url="", api_key="")
        assert not client.is_configured()
        assert not client.call_tool("search-programs", {}).ok


class TestSendWhatsapp:

    def test_headers_and_path(self, automation, backend):
        backend.respond("/tool/send-whatsapp", 200, json={"ok": True})
        body = {"to": "+5511999998888", "message_type": "text", "payload": {"text": "Oi"}}

        result = automation.send_whatsapp(body, trace_id="trace-1")

        assert result.ok
        request = backend.requests[0]
        assert request.url.path == "/webhook/tool/send-whatsapp"
        assert request.headers["x-trace-id"] == "trace-1"
        assert request.headers["x-n8n-api-key"] == "secret"
        assert request.headers["x-idempotency-key"]
        assert backend.bodies()[0] == body

    def test_idempotency_key_unique_per_call(self, automation, backend):
        backend.respond("/tool/send-whatsapp", 200)
        automation.send_whatsapp({"to": "1"}, trace_id="t")
        automation.send_whatsapp({"to": "1"}, trace_id="t")
        keys = {r.headers["x-idempotency-key"] for r in backend.requests}
        assert len(keys) == 2

    def test_failure_carries_status_and_text(self, automation, backend):
        backend.respond("/tool/send-whatsapp", 502, text="bad gateway")
        result = automation.send_whatsapp({"to": "1"}, trace_id="t")
        assert not result.ok
        assert result.status_code == 502
        assert result.error == "bad gateway"
