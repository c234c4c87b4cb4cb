"""Chat-completion backends for the insight request.

Groq is used when GROQ_API_KEY is set, OpenAI otherwise. One attempt per
call; every failure surfaces as AiServiceError.
"""

import logging
from typing import Callable, Optional

from groq import Groq
from openai import OpenAI

from config import Config
from exceptions import AiServiceError

logger = logging.getLogger(__name__)

Completer = Callable[[str], str]


def _messages(prompt: str, system_prompt: Optional[str]):
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})
    return messages


def _content(response, provider: str) -> str:
    try:
        text = response.choices[0].message.content
    except (AttributeError, IndexError, TypeError) as e:
        raise AiServiceError("AI 返回了无法解析的内容", provider=provider, cause=e) from e
    return (text or "").strip()


def complete_with_groq(prompt: str, client=None, system_prompt: Optional[str] = Config.INSIGHT_SYSTEM_PROMPT) -> str:
    if client is None:
        if not Config.GROQ_API_KEY:
            raise AiServiceError("Groq not configured", provider="groq")
        client = Groq(api_key=Config.GROQ_API_KEY)
    try:
        response = client.chat.completions.create(
            model=Config.GROQ_MODEL,
            messages=_messages(prompt, system_prompt),
            temperature=Config.AI_TEMPERATURE,
            max_tokens=Config.AI_MAX_TOKENS,
        )
    except Exception as e:
        logger.error("Groq chat error: %s", e)
        raise AiServiceError("Groq request failed", provider="groq", cause=e) from e
    return _content(response, "groq")


def complete_with_openai(prompt: str, client=None, system_prompt: Optional[str] = Config.INSIGHT_SYSTEM_PROMPT) -> str:
    if client is None:
        if not Config.OPENAI_API_KEY:
            raise AiServiceError("OpenAI not configured", provider="openai")
        client = OpenAI(api_key=Config.OPENAI_API_KEY)
    try:
        response = client.chat.completions.create(
            model=Config.OPENAI_MODEL,
            messages=_messages(prompt, system_prompt),
            temperature=Config.AI_TEMPERATURE,
            max_tokens=Config.AI_MAX_TOKENS,
        )
    except Exception as e:
        logger.error("OpenAI chat error: %s", e)
        raise AiServiceError("OpenAI request failed", provider="openai", cause=e) from e
    return _content(response, "openai")


def _unconfigured(prompt: str) -> str:
    raise AiServiceError("No AI provider configured (set GROQ_API_KEY or OPENAI_API_KEY)")


def get_completer() -> Completer:
    if Config.GROQ_API_KEY:
        return complete_with_groq
    if Config.OPENAI_API_KEY:
        return complete_with_openai
    logger.warning("No AI provider configured; insight requests will fall back")
    return _unconfigured
