"""WhatsApp payload builders for the send-whatsapp webhook.

Every user-supplied text field is hard-truncated to the interactive
message limits; clipping never raises. Optional parts are left out of
the payload entirely instead of being sent as null.
"""

import re

COUNTRY_CODE = "55"

MAX_TEXT = 1024
MAX_BUTTON_TITLE = 20
MAX_LIST_TITLE = 24
MAX_HEADER_FOOTER = 60
MAX_ROW_DESCRIPTION = 72

MAX_BUTTONS = 3
MAX_SECTIONS = 10
MAX_ROWS = 10

_NON_DIGITS = re.compile(r"\D")


def truncate(text: str | None, limit: int = MAX_TEXT) -> str:
    """Clip text to at most ``limit`` characters. None becomes ""."""
    return (text or "")[:limit]


def normalize_phone(phone: str | None) -> str | None:
    """Normalize a phone number to +55 international form.

    Non-digits are stripped; the country code is prepended unless the digits
    already start with it. Input without any digit is returned unchanged.
    """
    digits = _NON_DIGITS.sub("", phone or "")
    if not digits:
        return phone
    if digits.startswith(COUNTRY_CODE):
        return f"+{digits}"
    return f"+{COUNTRY_CODE}{digits}"


def _header(text: str | None) -> dict | None:
    return {"type": "text", "text": truncate(text, MAX_HEADER_FOOTER)} if text else None


def _footer(text: str | None) -> dict | None:
    return {"text": truncate(text, MAX_HEADER_FOOTER)} if text else None


def _drop_empty(data: dict) -> dict:
    return {k: v for k, v in data.items() if v is not None}


def build_text_payload(to: str | None, text: str | None, reply_to: str | None = None) -> dict:
    """Plain text message body for the webhook."""
    return {
        "to": normalize_phone(to),
        "message_type": "text",
        "payload": _drop_empty({"text": truncate(text), "reply_to": reply_to}),
    }


def build_buttons_payload(
    to: str | None,
    body: str | None,
    buttons: list[dict] | None,
    header: str | None = None,
    footer: str | None = None,
) -> dict:
    """Interactive reply-button message. Buttons beyond the third are dropped."""
    interactive = _drop_empty({
        "type": "button",
        "header": _header(header),
        "body": {"text": truncate(body)},
        "footer": _footer(footer),
        "action": {
            "buttons": [
                {
                    "type": "reply",
                    "reply": {"id": b.get("id"), "title": truncate(b.get("text"), MAX_BUTTON_TITLE)},
                }
                for b in (buttons or [])[:MAX_BUTTONS]
            ],
        },
    })
    return {"to": normalize_phone(to), "message_type": "interactive", "payload": interactive}


def build_list_payload(
    to: str | None,
    body: str | None,
    button: str | None,
    sections: list[dict] | None,
    header: str | None = None,
    footer: str | None = None,
) -> dict:
    """Interactive list message, clipped to 10 sections of 10 rows each."""
    interactive = _drop_empty({
        "type": "list",
        "header": _header(header),
        "body": {"text": truncate(body)},
        "footer": _footer(footer),
        "action": {
            "button": truncate(button, MAX_BUTTON_TITLE),
            "sections": [
                {
                    "title": truncate(section.get("title"), MAX_LIST_TITLE),
                    "rows": [_list_row(row) for row in (section.get("rows") or [])[:MAX_ROWS]],
                }
                for section in (sections or [])[:MAX_SECTIONS]
            ],
        },
    })
    return {"to": normalize_phone(to), "message_type": "interactive", "payload": interactive}


def _list_row(row: dict) -> dict:
    description = row.get("description")
    return _drop_empty({
        "id": row.get("id"),
        "title": truncate(row.get("title"), MAX_LIST_TITLE),
        "description": truncate(description, MAX_ROW_DESCRIPTION) if description else None,
    })
