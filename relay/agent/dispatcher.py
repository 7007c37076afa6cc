"""Tool dispatcher: maps model tool calls to automation backend requests.

Every handler returns a string (the tool-role message content). Failures
are folded into that string; dispatch() never raises, so one broken tool
call cannot abort its siblings.
"""

import json
import uuid
from typing import Any, Callable

import structlog

from relay.core.automation import NOT_CONFIGURED_ERROR, AutomationClient
from relay.core.results import CallResult
from relay.core.whatsapp import (
    build_buttons_payload,
    build_list_payload,
    build_text_payload,
)

logger = structlog.get_logger(__name__)

SEARCH_PROGRAMS_SLUG = "search-programs"

Handler = Callable[[dict, str | None], str]


class ToolDispatcher:
    """Name-keyed dispatch table over the declared tools."""

    def __init__(self, automation: AutomationClient):
        self.automation = automation
        self._handlers: dict[str, Handler] = {
            "search_programs": self._search_programs,
            "send_message": self._send_text,
            "send_message_text": self._send_text,
            "send_message_buttons": self._send_buttons,
            "send_message_list": self._send_list,
        }

    def dispatch(self, name: str, arguments: dict[str, Any] | None, user_phone: str | None = None) -> str:
        """Execute one tool call and return its result text.

        Args:
            name: Tool name as emitted by the model.
            arguments: Parsed JSON arguments.
            user_phone: Request-level phone used when a messaging call omits ``to``.

        Returns:
            Result content for the tool-role message.
        """
        handler = self._handlers.get(name)
        if handler is None:
            logger.warning("tool.not_implemented", tool=name)
            return f"Tool not implemented: {name}"

        logger.info("tool.dispatch", tool=name)
        try:
            return handler(dict(arguments or {}), user_phone)
        except Exception as e:
            logger.error("tool.failed", tool=name, error=str(e))
            return f"Internal tool error: {e}"

    def _search_programs(self, args: dict, user_phone: str | None) -> str:
        result = self.automation.call_tool(SEARCH_PROGRAMS_SLUG, args)
        if not result.ok:
            if result.status_code is not None:
                return f"Tool error search_programs: HTTP {result.status_code} {result.error}"
            return f"Internal tool error: {result.error}"
        return json.dumps(result.value, ensure_ascii=False)

    def _send_text(self, args: dict, user_phone: str | None) -> str:
        body = build_text_payload(
            _resolve_to(args, user_phone), args.get("text"), reply_to=args.get("reply_to")
        )
        return self._send(body)

    def _send_buttons(self, args: dict, user_phone: str | None) -> str:
        body = build_buttons_payload(
            _resolve_to(args, user_phone),
            args.get("body"),
            args.get("buttons"),
            header=args.get("header"),
            footer=args.get("footer"),
        )
        return self._send(body)

    def _send_list(self, args: dict, user_phone: str | None) -> str:
        body = build_list_payload(
            _resolve_to(args, user_phone),
            args.get("body"),
            args.get("button"),
            args.get("sections"),
            header=args.get("header"),
            footer=args.get("footer"),
        )
        return self._send(body)

    def _send(self, body: dict) -> str:
        result = self.automation.send_whatsapp(body, trace_id=str(uuid.uuid4()))
        return json.dumps(_send_summary(result), ensure_ascii=False)


def _resolve_to(args: dict, user_phone: str | None) -> str | None:
    return args.get("to") or user_phone


def _send_summary(result: CallResult) -> dict:
    if result.ok:
        return {"ok": True}
    if result.status_code is not None:
        code = f"HTTP_{result.status_code}"
    elif result.error == NOT_CONFIGURED_ERROR:
        code = "NOT_CONFIGURED"
    else:
        code = "NETWORK_ERROR"
    return {"ok": False, "error": {"code": code, "detail": result.error or ""}}
