from __future__ import annotations
import asyncio
import logging
from typing import Dict, List, Optional, Sequence

from openai import OpenAI, OpenAIError

from wellness.config import (
    OPENAI_MODEL, OPENAI_BASE_URL, OPENAI_TIMEOUT_S,
    WELLNESS_COACH_SYSTEM_PROMPT, JOURNAL_ASSISTANT_SYSTEM_PROMPT,
)

logger = logging.getLogger(__name__)

COACH_FALLBACK = "I apologize, but I'm having trouble connecting right now. Please try again in a moment."
JOURNAL_REFLECTION_FALLBACK = "Could not generate AI insights"
MOOD_SUGGESTION_FALLBACK = "Take a moment to breathe and reflect on your feelings."

CONTEXT_MESSAGES = 3

_client: Optional[OpenAI] = None


def get_client() -> OpenAI:
    # created lazily so the app imports without OPENAI_API_KEY
    global _client
    if _client is None:
        _client = OpenAI(base_url=OPENAI_BASE_URL)
    return _client


async def complete(messages: List[Dict[str, str]]) -> str:
    """Single chat completion; raises on any transport or response problem."""
    def _call():
        return get_client().chat.completions.create(
            model=OPENAI_MODEL,
            messages=messages,
            timeout=OPENAI_TIMEOUT_S,
        )
    resp = await asyncio.to_thread(_call)
    content = resp.choices[0].message.content
    if not content:
        raise ValueError("LLM returned empty content")
    return content.strip()


async def _complete_or(fallback: str, messages: List[Dict[str, str]]) -> str:
    try:
        return await complete(messages)
    except (OpenAIError, ValueError, IndexError, AttributeError) as e:
        logger.warning("LLM completion failed, using fallback: %s", e)
        return fallback


async def coach_reply(message: str, recent: Sequence[str] = ()) -> str:
    """
    Wellness coach answer. The last few messages of the conversation go into
    the system prompt as context.
    """
    context = " | ".join(list(recent)[-CONTEXT_MESSAGES:])
    messages = [
        {
            "role": "system",
            "content": f"{WELLNESS_COACH_SYSTEM_PROMPT}\nCurrent conversation context: {context}",
        },
        {"role": "user", "content": message},
    ]
    return await _complete_or(COACH_FALLBACK, messages)


async def journal_reflection(content: str) -> str:
    messages = [
        {"role": "system", "content": JOURNAL_ASSISTANT_SYSTEM_PROMPT},
        {"role": "user", "content": content},
    ]
    return await _complete_or(JOURNAL_REFLECTION_FALLBACK, messages)


async def mood_suggestion(mood_label: str) -> str:
    messages = [{
        "role": "user",
        "content": (
            f"Generate a short, empathetic suggestion for someone feeling {mood_label.lower()}. "
            "Keep it under 50 words and make it actionable."
        ),
    }]
    return await _complete_or(MOOD_SUGGESTION_FALLBACK, messages)
