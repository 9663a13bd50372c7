import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from ..models.recipe import Step

log = logging.getLogger(__name__)


class Intent(str, Enum):
    NEXT = "next"
    BACK = "back"
    REPEAT = "repeat"
    GOTO = "goto"


class StateMachine:
    """
    Walks the cook through the parsed steps.

    ``steps`` is read on every call, so it may be a session list that is
    still being filled by the stream.
    """

    def __init__(self, steps: List[Step], announce: Callable[[int, Step], Awaitable[None]]):
        self.steps = steps
        self.announce = announce
        self.idx = 0

    def current(self) -> Optional[Step]:
        if not self.steps:
            return None
        self.idx = self._clamp(self.idx)
        return self.steps[self.idx]

    def _clamp(self, index: int) -> int:
        return max(0, min(index, len(self.steps) - 1))

    async def handle(self, intent: Intent, index: Optional[int] = None) -> Optional[Step]:
        if not self.steps:
            log.warning(f"No steps yet, ignoring {intent.value}")
            return None

        if intent == Intent.NEXT:
            self.idx = self._clamp(self.idx + 1)
        elif intent == Intent.BACK:
            self.idx = self._clamp(self.idx - 1)
        elif intent == Intent.GOTO:
            self.idx = self._clamp(self.idx if index is None else index)

        step = self.current()
        await self.announce(self.idx, step)
        return step
