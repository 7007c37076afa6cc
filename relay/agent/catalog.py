"""Static tool declarations offered to the model.

Each entry is an OpenAI-format function declaration. The catalog is data;
the matching handlers live in the dispatcher's table, so adding a tool
means one entry here plus one mapping there.
"""

_TEXT_PARAMETERS = {
    "type": "object",
    "properties": {
        "to": {"type": "string", "description": "Telefone E.164: +55..."},
        "text": {"type": "string", "description": "Mensagem curta (<= 1024 chars)"},
        "reply_to": {"type": "string", "description": "Opcional: message_id para reply"},
    },
    "required": ["to", "text"],
    "additionalProperties": False,
}


def _function(name: str, description: str, parameters: dict) -> dict:
    return {
        "type": "function",
        "function": {"name": name, "description": description, "parameters": parameters},
    }


TOOL_CATALOG: list[dict] = [
    _function(
        "search_programs",
        "Busca programas de treino na plataforma Weburn com base no nível, "
        "modalidade e disponibilidade de equipamentos.",
        {
            "type": "object",
            "properties": {
                "level": {
                    "type": "string",
                    "description": "Nível do usuário (Iniciante, Intermediário, Avançado)",
                },
                "modality": {
                    "type": "string",
                    "description": "Modalidade de treino (ex.: HIIT, Yoga, Musculação, etc.)",
                },
                "has_equipment": {
                    "type": "boolean",
                    "description": "Se o usuário possui equipamentos em casa",
                },
            },
            "required": ["level", "modality", "has_equipment"],
            "additionalProperties": False,
        },
    ),
    # legacy name still emitted by older prompts
    _function(
        "send_message",
        "LEGADO: envia uma mensagem de texto simples via WhatsApp.",
        _TEXT_PARAMETERS,
    ),
    _function(
        "send_message_text",
        "Envia mensagem de texto simples pelo WhatsApp.",
        _TEXT_PARAMETERS,
    ),
    _function(
        "send_message_buttons",
        "Envia mensagem interativa com até 3 botões (reply).",
        {
            "type": "object",
            "properties": {
                "to": {"type": "string"},
                "body": {"type": "string"},
                "buttons": {
                    "type": "array",
                    "minItems": 1,
                    "maxItems": 3,
                    "items": {
                        "type": "object",
                        "properties": {
                            "id": {"type": "string"},
                            "text": {"type": "string", "description": "Rótulo curto (~20 chars)"},
                        },
                        "required": ["id", "text"],
                        "additionalProperties": False,
                    },
                },
                "header": {"type": "string"},
                "footer": {"type": "string"},
            },
            "required": ["to", "body", "buttons"],
            "additionalProperties": False,
        },
    ),
    _function(
        "send_message_list",
        "Envia lista interativa (seções/linhas).",
        {
            "type": "object",
            "properties": {
                "to": {"type": "string"},
                "body": {"type": "string"},
                "header": {"type": "string"},
                "footer": {"type": "string"},
                "button": {"type": "string", "description": "Texto do botão principal"},
                "sections": {
                    "type": "array",
                    "minItems": 1,
                    "maxItems": 10,
                    "items": {
                        "type": "object",
                        "properties": {
                            "title": {"type": "string"},
                            "rows": {
                                "type": "array",
                                "minItems": 1,
                                "maxItems": 10,
                                "items": {
                                    "type": "object",
                                    "properties": {
                                        "id": {"type": "string"},
                                        "title": {"type": "string"},
                                        "description": {"type": "string"},
                                    },
                                    "required": ["id", "title"],
                                    "additionalProperties": False,
                                },
                            },
                        },
                        "required": ["title", "rows"],
                        "additionalProperties": False,
                    },
                },
            },
            "required": ["to", "body", "button", "sections"],
            "additionalProperties": False,
        },
    ),
]


def tool_names() -> list[str]:
    """Names of all declared tools, in catalog order."""
    return [t["function"]["name"] for t in TOOL_CATALOG]
