"""
Incremental step extraction for streamed recipe text.

The model writes an optional ingredients block followed by numbered lines
("1. ...", "2) ...", "Step 3. ..."). A numbered step is only emitted once the
next ordinal marker has arrived, so a line that may still grow never leaves
the buffer until the stream is flushed.
"""

import re
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from ..core.time_resolver import resolve_seconds
from ..models.recipe import Recipe, Step, StreamResult


def dedupe_steps(steps: Iterable[Step], seen: Optional[Set[str]] = None) -> List[Step]:
    """Drop steps whose trimmed text was already seen; the first one wins."""
    seen = set() if seen is None else seen
    unique: List[Step] = []
    for step in steps:
        key = step.text.strip()
        if key in seen:
            continue
        seen.add(key)
        unique.append(step)
    return unique


class RecipeParser:
    # The character after "." or ")" must be present and must not be a digit,
    # so "1.5 cups" never opens a step.
    step_pattern = re.compile(r"^[ \t]*(?:step[ \t]*)?\d+[.)](?=\D)", re.M | re.I)

    @classmethod
    def is_numbered(cls, text: str) -> bool:
        return bool(cls.step_pattern.match(text + "\n"))

    @classmethod
    def extract_stream_steps(cls, buffer: str, scan_from: int = 0) -> StreamResult:
        """
        Emit the steps of ``buffer`` that are closed by a following marker.

        ``remaining`` starts at the last marker found (or is the whole buffer
        while none has been seen) and must be passed back with the next
        fragment appended. Text before ``scan_from`` is assumed to hold no
        marker other than one at position 0.
        """
        starts = cls._marker_starts(buffer, scan_from)
        if not starts:
            return StreamResult(steps=[], remaining=buffer)

        steps = [
            step
            for step in (cls._enrich(unit, numbered) for unit, numbered in cls._units(buffer, starts))
            if step is not None
        ]
        return StreamResult(steps=steps, remaining=buffer[starts[-1]:])

    @classmethod
    def parse_steps(cls, full_text: str) -> List[Step]:
        """One-shot parse: like streaming, except the last step is emitted too."""
        # The trailing newline lets a marker at the very end of the text count.
        src = full_text + "\n"
        starts = cls._marker_starts(src)
        if starts:
            units = list(cls._units(src, starts))
            units.append((src[starts[-1]:], True))
        else:
            units = [(src, False)]

        steps = [cls._enrich(unit, numbered) for unit, numbered in units]
        return dedupe_steps(step for step in steps if step is not None)

    @classmethod
    def parse(cls, raw: str, title: str = "Untitled") -> Recipe:
        steps = cls.parse_steps(raw)
        ingredients = None
        if steps and not cls.is_numbered(steps[0].text):
            ingredients = steps[0].text
        return Recipe(title=title, steps=steps, ingredients=ingredients)

    @classmethod
    def _marker_starts(cls, text: str, scan_from: int = 0) -> List[int]:
        starts = [m.start() for m in cls.step_pattern.finditer(text, scan_from)]
        if scan_from > 0 and cls.step_pattern.match(text):
            starts.insert(0, 0)
        return starts

    @staticmethod
    def _units(text: str, starts: List[int]) -> Iterator[Tuple[str, bool]]:
        """Yield ``(raw_text, numbered)`` for every unit closed by a marker."""
        if starts[0] > 0:
            yield text[:starts[0]], False
        for start, end in zip(starts, starts[1:]):
            yield text[start:end], True

    @staticmethod
    def _enrich(unit: str, numbered: bool) -> Optional[Step]:
        text = unit.strip()
        if not text:
            return None
        # The ingredients block never carries a timer.
        return Step(text=text, time=resolve_seconds(text) if numbered else None)


class ParserSession:
    """
    Parser state for one streamed recipe.

    Owns the pending buffer and the deduplicated step list. Calls must be
    serialized; create one session per request instead of sharing it.
    """

    def __init__(self) -> None:
        self.buffer = ""
        self.steps: List[Step] = []
        self._seen: Set[str] = set()

    def ingest(self, fragment: str) -> StreamResult:
        """Buffer ``fragment`` and return the steps it completed."""
        if not fragment:
            return StreamResult(steps=[], remaining=self.buffer)

        # Lines that ended before the last buffered newline were already scanned.
        scan_from = max(self.buffer.rfind("\n"), 0)
        self.buffer += fragment
        result = RecipeParser.extract_stream_steps(self.buffer, scan_from)
        self.buffer = result.remaining
        return StreamResult(steps=self._accept(result.steps), remaining=self.buffer)

    def flush(self) -> List[Step]:
        """End of stream: emit whatever is still buffered."""
        steps = RecipeParser.parse_steps(self.buffer) if self.buffer.strip() else []
        self.buffer = ""
        return self._accept(steps)

    def reset(self) -> None:
        self.buffer = ""
        self.steps = []
        self._seen.clear()

    def _accept(self, steps: List[Step]) -> List[Step]:
        fresh = dedupe_steps(steps, self._seen)
        self.steps.extend(fresh)
        return fresh
