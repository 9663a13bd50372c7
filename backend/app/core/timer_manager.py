import asyncio
import logging
from datetime import timedelta
from typing import Awaitable, Callable, Dict, Optional, Tuple

from ..models.recipe import Timer

log = logging.getLogger(__name__)

# One day; also rejects NaN and inf, which fail the range check.
MAX_SECONDS = 24 * 3600


class TimerManager:
    """Countdown timers keyed by step index; starting one again replaces it."""

    def __init__(self, on_done: Callable[[Timer], Awaitable[None]]):
        self.on_done = on_done
        self.tasks: Dict[int, asyncio.Task] = {}
        self._deadlines: Dict[int, Tuple[float, Timer]] = {}

    def start(self, step_index: int, seconds: float, label: str = "Timer") -> Optional[Timer]:
        if isinstance(seconds, bool) or not seconds or not 0 < seconds <= MAX_SECONDS:
            log.warning(f"⚠️ Invalid timer duration for step {step_index}: {seconds}")
            return None

        self.stop(step_index)
        loop = asyncio.get_running_loop()
        timer = Timer(
            label=label,
            step_index=step_index,
            duration=timedelta(seconds=seconds),
            remaining_sec=int(seconds),
        )
        self._deadlines[step_index] = (loop.time() + seconds, timer)
        self.tasks[step_index] = asyncio.create_task(self._countdown(timer, seconds))
        log.info(f"⏱️ Timer started for step {step_index}: {seconds}s")
        return timer

    def stop(self, step_index: int) -> bool:
        self._deadlines.pop(step_index, None)
        task = self.tasks.pop(step_index, None)
        if task is None:
            return False
        task.cancel()
        log.info(f"🛑 Timer stopped for step {step_index}")
        return True

    def extend(self, step_index: int, seconds: float = 60) -> Optional[Timer]:
        remaining = self.remaining(step_index)
        if remaining is None:
            return None
        label = self._deadlines[step_index][1].label
        return self.start(step_index, remaining + seconds, label)

    def remaining(self, step_index: int) -> Optional[float]:
        entry = self._deadlines.get(step_index)
        if entry is None:
            return None
        return max(0.0, entry[0] - asyncio.get_running_loop().time())

    async def _countdown(self, timer: Timer, seconds: float):
        await asyncio.sleep(seconds)
        self.tasks.pop(timer.step_index, None)
        self._deadlines.pop(timer.step_index, None)
        log.info(f"🔔 Timer finished for step {timer.step_index}")
        await self.on_done(timer)

    async def cancel_all(self):
        for task in self.tasks.values():
            task.cancel()
        self.tasks.clear()
        self._deadlines.clear()
