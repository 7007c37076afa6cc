"""HTTP client for the n8n automation backend.

Two call shapes:
  POST {base}/tool/{slug}          generic tool, raw JSON arguments
  POST {base}/tool/send-whatsapp   messaging, with idempotency and trace headers

Both return CallResult; transport errors and non-2xx responses never raise.
"""

import os
import uuid

import httpx
import structlog

from relay.core.results import CallResult

logger = structlog.get_logger(__name__)

WEBHOOK_SEGMENT = "/webhook"
SEND_WHATSAPP_SLUG = "send-whatsapp"
NOT_CONFIGURED_ERROR = "automation backend not configured"


def normalize_webhook_base(url: str | None) -> str:
    """Strip trailing slashes and make sure the URL ends in /webhook."""
    base = (url or "").strip().rstrip("/")
    if not base:
        return ""
    if not base.endswith(WEBHOOK_SEGMENT):
        base += WEBHOOK_SEGMENT
    return base


class AutomationClient:
    """Posts tool invocations to the automation backend."""

    def __init__(
        self,
        webhook_url: str | None = None,
        api_key: str | None = None,
        client: httpx.Client | None = None,
    ):
        raw_url = webhook_url if webhook_url is not None else os.environ.get("N8N_WEBHOOK_URL", "")
        self.base_url = normalize_webhook_base(raw_url)
        self.api_key = api_key if api_key is not None else os.environ.get("N8N_API_KEY", "")
        self._client = client or httpx.Client()

    def is_configured(self) -> bool:
        return bool(self.base_url)

    def close(self) -> None:
        self._client.close()

    def call_tool(self, slug: str, arguments: dict) -> CallResult:
        """Forward arguments verbatim to a generic tool endpoint.

        Returns:
            CallResult whose value is the decoded JSON response.
        """
        if not self.is_configured():
            return CallResult.failure(NOT_CONFIGURED_ERROR)

        url = f"{self.base_url}/tool/{slug}"
        logger.info("automation.call_tool", tool=slug)
        try:
            response = self._client.post(url, json=arguments, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error("automation.call_tool_failed", tool=slug, error=str(e))
            return CallResult.failure(str(e))

        if not response.is_success:
            logger.error("automation.call_tool_status", tool=slug,
                         status=response.status_code, body=response.text[:200])
            return CallResult.failure(response.reason_phrase, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            logger.error("automation.call_tool_bad_json", tool=slug, error=str(e))
            return CallResult.failure(f"invalid JSON response: {e}", status_code=response.status_code)

        logger.debug("automation.call_tool_ok", tool=slug)
        return CallResult.success(payload)

    def send_whatsapp(self, body: dict, trace_id: str) -> CallResult:
        """Post a normalized WhatsApp payload to the messaging webhook.

        Failures carry the response text as ``error`` and the HTTP status,
        or no status for transport errors.
        """
        if not self.is_configured():
            return CallResult.failure(NOT_CONFIGURED_ERROR)

        url = f"{self.base_url}/tool/{SEND_WHATSAPP_SLUG}"
        headers = self._headers()
        headers["x-idempotency-key"] = str(uuid.uuid4())
        headers["x-trace-id"] = trace_id

        logger.info("automation.send_whatsapp", message_type=body.get("message_type"),
                    trace_id=trace_id)
        try:
            response = self._client.post(url, json=body, headers=headers)
        except httpx.HTTPError as e:
            logger.error("automation.send_whatsapp_failed", trace_id=trace_id, error=str(e))
            return CallResult.failure(str(e))

        if not response.is_success:
            logger.error("automation.send_whatsapp_status", trace_id=trace_id,
                         status=response.status_code)
            return CallResult.failure(response.text, status_code=response.status_code)
        return CallResult.success()

    def _headers(self) -> dict[str, str]:
        # n8n reads header names lowercase
        return {
            "content-type": "application/json",
            "x-n8n-api-key": self.api_key,
        }
