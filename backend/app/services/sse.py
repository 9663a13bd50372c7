"""
Server-sent-event framing for the relay, and the consumer that strips it
again before feeding text into a ParserSession.

Wire format: one ``data: {"content": "..."}`` event per model delta,
terminated by ``data: [DONE]``.
"""

import codecs
import json
import logging
from typing import AsyncIterable, Awaitable, Callable, List, Optional, Union

from ..models.recipe import Step
from .recipe_parser import ParserSession

log = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


def encode_event(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def encode_done() -> str:
    return f"data: {DONE_SENTINEL}\n\n"


class SSEDecoder:
    """Turns arbitrarily chunked SSE bytes back into content deltas."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""
        self.done = False

    def feed(self, chunk: Union[bytes, str]) -> List[str]:
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._pending += chunk

        lines = self._pending.split("\n")
        self._pending = lines.pop()

        deltas = []
        for line in lines:
            content = self._parse_line(line.rstrip("\r"))
            if content:
                deltas.append(content)
        return deltas

    def close(self) -> List[str]:
        """Decode whatever is left once the transport ends."""
        tail = self._decoder.decode(b"", final=True)
        return self.feed(tail + "\n")

    def _parse_line(self, line: str) -> Optional[str]:
        if self.done or not line.startswith("data:"):
            return None

        data = line[len("data:"):].strip()
        if data == DONE_SENTINEL:
            self.done = True
            return None
        if not data:
            return None

        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            log.warning(f"⚠️ Skipping malformed event payload: {data[:80]!r}")
            return None

        if not isinstance(payload, dict):
            return None
        if "error" in payload:
            log.error(f"❌ Relay reported error: {payload['error']}")
            return None
        content = payload.get("content")
        if content is not None and not isinstance(content, str):
            log.warning(f"⚠️ Skipping non-text content: {type(content).__name__}")
            return None
        return content or None


async def consume_step_stream(
    chunks: AsyncIterable[Union[bytes, str]],
    session: Optional[ParserSession] = None,
    on_step: Optional[Callable[[Step], Awaitable[None]]] = None,
) -> List[Step]:
    """Feed an SSE stream into ``session`` and return its final step list."""
    session = session or ParserSession()
    decoder = SSEDecoder()

    async def emit(steps: List[Step]):
        if on_step:
            for step in steps:
                await on_step(step)

    async for chunk in chunks:
        for delta in decoder.feed(chunk):
            await emit(session.ingest(delta).steps)
        if decoder.done:
            break
    else:
        for delta in decoder.close():
            await emit(session.ingest(delta).steps)

    await emit(session.flush())
    log.info(f"✅ Stream consumed: {len(session.steps)} steps")
    return session.steps
