"""
OpenAI chat-completions client used by the recipe relay.
Streams text deltas for steps/nutrition and returns JSON for suggestions.
"""

import json
import logging
from typing import Any, AsyncIterator, Dict, List

from openai import AsyncOpenAI

from ..core.config import get_settings

log = logging.getLogger(__name__)


class OpenAIChatClient:
    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.settings = get_settings()
        self.model = model or self.settings.openai_model
        self.client = AsyncOpenAI(api_key=api_key or self.settings.openai_api_key)

    async def aclose(self):
        await self.client.close()
        log.info("🔌 OpenAI client closed")

    async def stream_text(self, messages: List[Dict[str, str]], temperature: float) -> AsyncIterator[str]:
        """
        Start a streamed completion and return an async iterator of text deltas.

        The request is sent before this coroutine returns, so connection and
        auth errors are raised here rather than from the iterator.
        """
        stream = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            stream=True,
        )
        log.info("🚀 Completion stream started")
        return self._deltas(stream)

    async def _deltas(self, stream) -> AsyncIterator[str]:
        count = 0
        async for chunk in stream:
            if not chunk.choices:
                continue
            if delta := chunk.choices[0].delta.content:
                count += 1
                log.debug(f"📝 Delta #{count}: {delta!r}")
                yield delta
        log.info(f"✅ Completion stream finished after {count} deltas")

    async def complete_json(self, messages: List[Dict[str, str]], temperature: float) -> Dict[str, Any]:
        completion = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            response_format={"type": "json_object"},
        )
        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            log.warning("⚠️ Empty JSON completion")
            return {}
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            log.error(f"❌ Failed to parse JSON completion: {e}")
            raise ValueError(f"Model returned invalid JSON: {e}") from e
