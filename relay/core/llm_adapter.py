"""LLM adapter with Cerebras → Groq failover.

Cerebras is the primary (fast inference). On timeout or 5xx, falls back to Groq.
4xx errors fail immediately without trying the fallback.
Providers without an API key are skipped.
"""

import os

import structlog
from langchain_cerebras import ChatCerebras
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_groq import ChatGroq
from openai import APIStatusError, APITimeoutError

from relay.core.results import CallResult

logger = structlog.get_logger(__name__)


class LLMError(Exception):
    """Non-retryable LLM error (e.g. 4xx bad request)."""
    pass


class LLMUnavailableError(Exception):
    """Both providers are down, timing out, or not configured."""
    pass


class LLMAdapter:
    """Wraps Cerebras + Groq with automatic failover."""

    def __init__(self):
        self.cerebras_key = os.environ.get("CEREBRAS_API_KEY", "")
        self.groq_key = os.environ.get("GROQ_API_KEY", "")

        self.cerebras_model_name = os.environ.get("CEREBRAS_MODEL", "gpt-oss-120b")
        self.groq_model_name = os.environ.get("GROQ_MODEL", "openai/gpt-oss-120b")

        self.temperature = float(os.environ.get("LLM_TEMPERATURE", "0.7"))
        self.max_tokens = int(os.environ.get("LLM_MAX_TOKENS", "1000"))
        self.timeout = int(os.environ.get("LLM_TIMEOUT", "30"))

        self.primary_llm: BaseChatModel | None = None
        if self.cerebras_key:
            self.primary_llm = ChatCerebras(
                api_key=self.cerebras_key,
                model=self.cerebras_model_name,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                timeout=self.timeout,
            )

        self.fallback_llm: BaseChatModel | None = None
        if self.groq_key:
            self.fallback_llm = ChatGroq(
                api_key=self.groq_key,
                model=self.groq_model_name,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                timeout=self.timeout,
            )

    def is_healthy(self) -> bool:
        """Check if at least one provider has a key configured.

        Returns:
            True if either Cerebras or Groq API key is set.
        """
        return bool(self.cerebras_key) or bool(self.groq_key)

    def complete(self, messages: list[BaseMessage], tools: list[dict] | None = None) -> CallResult:
        """Run one completion and report the outcome instead of raising.

        Args:
            messages: Ordered LangChain messages.
            tools: OpenAI-format tool declarations. When given, the model may
                answer with tool calls (tool_choice="auto").

        Returns:
            CallResult whose value is the AIMessage on success.
        """
        try:
            response = self.invoke_with_failover(messages, tools=tools)
        except (LLMError, LLMUnavailableError) as e:
            return CallResult.failure(str(e))
        return CallResult.success(response)

    def invoke_with_failover(
        self, messages: list[BaseMessage], tools: list[dict] | None = None
    ) -> AIMessage:
        """Try Cerebras first, fall back to Groq on timeout/5xx.

        Args:
            messages: List of LangChain message objects to send.
            tools: Optional tool declarations to bind.

        Returns:
            AI response message from whichever provider succeeds.

        Raises:
            LLMError: If Cerebras returns a 4xx (no fallback attempted).
            LLMUnavailableError: If both providers fail or none is configured.
        """
        if not self.is_healthy():
            raise LLMUnavailableError("No LLM provider configured")

        if self.primary_llm is not None:
            logger.debug("llm.invoke", provider="cerebras", model=self.cerebras_model_name)
            try:
                return self._bind(self.primary_llm, tools).invoke(messages)

            except APIStatusError as e:
                if 400 <= e.status_code < 500:
                    logger.error("llm.4xx", status=e.status_code)
                    raise LLMError(f"Cerebras API rejected request ({e.status_code}): {e}")

                logger.warning("llm.5xx_fallback", status=e.status_code)

            except APITimeoutError:
                logger.warning("llm.timeout_fallback", threshold=self.timeout)

            except Exception as e:
                logger.warning("llm.unknown_fallback", error=str(e))

        if self.fallback_llm is None:
            logger.error("llm.no_fallback")
            raise LLMUnavailableError("Primary LLM failed and no fallback is configured")

        logger.info("llm.groq_fallback", model=self.groq_model_name)
        try:
            response = self._bind(self.fallback_llm, tools).invoke(messages)
            logger.info("llm.groq_ok")
            return response

        except Exception as e:
            logger.error("llm.both_failed", error=str(e))
            raise LLMUnavailableError(f"Both primary and fallback LLMs failed: {e}")

    @staticmethod
    def _bind(model: BaseChatModel, tools: list[dict] | None):
        if not tools:
            return model
        return model.bind_tools(tools, tool_choice="auto")
