"""Conversation turn agent.

Runs one chat turn end to end: persist the user message, load history,
call the model with the tool catalog, dispatch any tool calls, ask the
model for a final answer, persist that answer.
"""

import os
from dataclasses import dataclass

import structlog
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, ToolMessage

from relay.agent.catalog import TOOL_CATALOG, tool_names
from relay.agent.dispatcher import ToolDispatcher
from relay.agent.prompts import EMPTY_ANSWER_TEXT, FALLBACK_TEXT, build_system_prompt
from relay.api.schemas import MessageRecord
from relay.core.automation import AutomationClient
from relay.core.history import DEFAULT_HISTORY_LIMIT, HistoryAccessor
from relay.core.llm_adapter import LLMAdapter

logger = structlog.get_logger(__name__)


class RelayError(Exception):
    """A turn could not be processed; surfaces as an internal error response."""
    pass


class ConfigurationError(RelayError):
    """Required configuration (e.g. model provider key) is missing."""
    pass


class HistoryError(RelayError):
    """The history store rejected a write or read the turn depends on."""
    pass


@dataclass
class TurnResult:
    """Outcome of a processed turn.

    Attributes:
        text: Final agent reply (possibly the fallback text).
        messages_in_history: Number of turns fetched from the store.
        tool_calls_executed: Tool calls attempted, successful or not.
    """
    text: str
    messages_in_history: int = 0
    tool_calls_executed: int = 0


def build_messages(history: list[MessageRecord]) -> list[BaseMessage]:
    """System prompt followed by the user/assistant turns of the history."""
    messages: list[BaseMessage] = [SystemMessage(content=build_system_prompt())]
    for turn in history:
        if turn.role == "user":
            messages.append(HumanMessage(content=turn.content))
        elif turn.role == "assistant":
            messages.append(AIMessage(content=turn.content))
    return messages


class TurnAgent:
    """Stateless per-turn orchestrator over the store, the model and the tools."""

    def __init__(
        self,
        llm_adapter: LLMAdapter,
        dispatcher: ToolDispatcher,
        history: HistoryAccessor,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self.llm = llm_adapter
        self.dispatcher = dispatcher
        self.history = history
        self.history_limit = history_limit

    def handle_turn(self, conversation_id: str, new_message: str, user_phone: str | None = None) -> TurnResult:
        """Process one inbound message.

        Raises:
            ConfigurationError: No model provider key is configured.
            HistoryError: The user message could not be saved or history not read.
        """
        if not self.llm.is_healthy():
            raise ConfigurationError("No LLM provider API key configured")

        saved = self.history.record(conversation_id, "user", new_message)
        if not saved.ok:
            raise HistoryError(saved.error)

        fetched = self.history.fetch(conversation_id, limit=self.history_limit)
        if not fetched.ok:
            raise HistoryError(fetched.error)
        turns: list[MessageRecord] = fetched.value

        messages = build_messages(turns)
        text, tool_calls_executed = self._complete(messages, user_phone)

        logger.info("agent.reply", conversation_id=conversation_id,
                    tool_calls=tool_calls_executed, reply_len=len(text))

        stored = self.history.record(conversation_id, "assistant", text)
        if not stored.ok:
            logger.error("agent.assistant_persist_failed", conversation_id=conversation_id,
                         error=stored.error)

        return TurnResult(
            text=text,
            messages_in_history=len(turns),
            tool_calls_executed=tool_calls_executed,
        )

    def _complete(self, messages: list[BaseMessage], user_phone: str | None) -> tuple[str, int]:
        """Model call, optional tool round, optional finalizing call."""
        first = self.llm.complete(messages, tools=TOOL_CATALOG)
        if not first.ok:
            logger.error("agent.completion_failed", error=first.error)
            return FALLBACK_TEXT, 0

        reply: AIMessage = first.value
        if not reply.tool_calls and not reply.invalid_tool_calls:
            return _text_of(reply), 0

        # The model's own tool-call message must precede the tool results
        messages.append(reply)
        executed = self._run_tools(reply, messages, user_phone)

        final = self.llm.complete(messages)
        if not final.ok:
            logger.error("agent.final_completion_failed", error=final.error)
            return FALLBACK_TEXT, executed
        return _text_of(final.value), executed

    def _run_tools(self, reply: AIMessage, messages: list[BaseMessage], user_phone: str | None) -> int:
        executed = 0
        calls = _calls_in_model_order(reply)
        logger.info("agent.tool_calls", count=len(calls))

        for call, valid in calls:
            if valid:
                content = self.dispatcher.dispatch(call["name"], call.get("args"), user_phone=user_phone)
            else:
                # Arguments the model produced that were not valid JSON
                logger.warning("agent.invalid_tool_call", tool=call.get("name"), error=call.get("error"))
                content = f"Invalid arguments for tool {call.get('name')}: {call.get('error') or 'unparseable JSON'}"
            messages.append(ToolMessage(content=content, tool_call_id=call.get("id") or ""))
            executed += 1

        return executed


def _calls_in_model_order(reply: AIMessage) -> list[tuple[dict, bool]]:
    """Valid and invalid tool calls, interleaved as the provider returned them.

    LangChain splits them into two lists; the raw ``tool_calls`` entry in
    ``additional_kwargs`` keeps the original order by id.
    """
    calls = [(c, True) for c in reply.tool_calls] + [(c, False) for c in reply.invalid_tool_calls]
    raw = reply.additional_kwargs.get("tool_calls") or []
    position = {tc.get("id"): i for i, tc in enumerate(raw) if isinstance(tc, dict)}
    return sorted(calls, key=lambda item: position.get(item[0].get("id"), len(position)))


def _text_of(message: AIMessage) -> str:
    content = message.content
    if isinstance(content, list):
        content = "".join(
            part.get("text", "") if isinstance(part, dict) else str(part) for part in content
        )
    return content or EMPTY_ANSWER_TEXT


def create_agent(llm_adapter: LLMAdapter, automation: AutomationClient) -> TurnAgent:
    """Build the turn agent.

    Args:
        llm_adapter: Initialized LLM adapter with failover.
        automation: Client for the n8n automation backend.

    Returns:
        TurnAgent ready to handle requests.
    """
    limit = int(os.environ.get("HISTORY_LIMIT", str(DEFAULT_HISTORY_LIMIT)))
    agent = TurnAgent(llm_adapter, ToolDispatcher(automation), HistoryAccessor(), history_limit=limit)
    logger.info("agent.created", tools=tool_names(), history_limit=limit)
    return agent
