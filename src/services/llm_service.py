"""
LLM access: a thin ChatOpenAI wrapper with sync and async entry points.
"""

from __future__ import annotations

import logging
from typing import Sequence

import openai
from langchain_openai import ChatOpenAI

from config import DEFAULT_TEMPERATURE, OPENAI_MODEL

LOGGER = logging.getLogger("testme.llm")

Message = tuple[str, str]

KEY_REJECTED = "The API key was rejected. Please check your API key and try again."
QUOTA_EXHAUSTED = "The API quota is exhausted or requests are too frequent. Please try again later."
TEXT_TOO_LONG = "The study text is too long for the model. Try a shorter text or fewer PDF pages."


def _build_llm(api_key: str, temperature: float) -> ChatOpenAI:
    if not (api_key and api_key.strip()):
        raise ValueError("Please provide a valid API key.")
    return ChatOpenAI(
        model=OPENAI_MODEL,
        api_key=api_key.strip(),
        temperature=temperature,
    )


def _as_error(e: Exception) -> ValueError:
    """Map a provider exception to a user-facing ValueError."""
    err_msg = str(e).lower()
    if isinstance(e, openai.AuthenticationError):
        return ValueError(KEY_REJECTED)
    if isinstance(e, openai.RateLimitError):
        return ValueError(QUOTA_EXHAUSTED)
    if "context_length_exceeded" in err_msg or "maximum context length" in err_msg:
        return ValueError(TEXT_TOO_LONG)
    if isinstance(e, openai.APIError):
        return ValueError(f"Error calling the API: {e!s}")
    # Errors raised outside the OpenAI client only carry a message.
    if "incorrect api key" in err_msg or "invalid api key" in err_msg or "authentication" in err_msg:
        return ValueError(KEY_REJECTED)
    if "insufficient_quota" in err_msg or "rate limit" in err_msg:
        return ValueError(QUOTA_EXHAUSTED)
    return ValueError(f"Error calling the API: {e!s}")


def _content(response: object) -> str:
    content = getattr(response, "content", "")
    return content if isinstance(content, str) else str(content or "")


def _call_llm(messages: Sequence[Message], api_key: str, temperature: float = DEFAULT_TEMPERATURE) -> str:
    """
    Invoke OpenAI Chat with an ordered list of (role, content) turns.

    Args:
        messages: Turns such as ("system", ...), ("human", ...).
        api_key: OpenAI API key.
        temperature: Model temperature.

    Returns:
        Assistant response content.

    Raises:
        ValueError: If API key is missing, invalid, or quota insufficient.
    """
    llm = _build_llm(api_key, temperature)
    try:
        response = llm.invoke(list(messages))
    except Exception as e:
        LOGGER.warning("Chat completion failed: %s", type(e).__name__)
        raise _as_error(e) from e
    return _content(response)


async def _acall_llm(messages: Sequence[Message], api_key: str, temperature: float = DEFAULT_TEMPERATURE) -> str:
    """Async counterpart of _call_llm; same errors."""
    llm = _build_llm(api_key, temperature)
    try:
        response = await llm.ainvoke(list(messages))
    except Exception as e:
        LOGGER.warning("Async chat completion failed: %s", type(e).__name__)
        raise _as_error(e) from e
    return _content(response)


class LLMProcessor:
    """Sends chat turns to OpenAI and returns the completion text."""

    def invoke(self, system_prompt: str, user_message: str, api_key: str, temperature: float = DEFAULT_TEMPERATURE) -> str:
        """
        Invoke the LLM with one system and one user message.

        Args:
            system_prompt: System message.
            user_message: User message.
            api_key: OpenAI API key.
            temperature: Optional temperature.

        Returns:
            Assistant response text.
        """
        return _call_llm([("system", system_prompt), ("human", user_message)], api_key, temperature)

    async def ainvoke(
        self, system_prompt: str, user_message: str, api_key: str, temperature: float = DEFAULT_TEMPERATURE
    ) -> str:
        return await _acall_llm([("system", system_prompt), ("human", user_message)], api_key, temperature)
