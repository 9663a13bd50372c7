"""
Finds the first "<number> <unit>" expression in a line of recipe text and
converts it to seconds. Units cover English, Hindi, Telugu, Tamil and
Malayalam spellings.
"""

import re
from enum import Enum
from typing import Optional, Tuple


class Scale(int, Enum):
    SECONDS = 1
    MINUTES = 60
    HOURS = 3600


# Every token the scanner accepts after a number.
UNIT_TOKENS: Tuple[str, ...] = (
    # English
    "hours", "hour", "hrs", "hr",
    "minutes", "minute", "mins", "min",
    "seconds", "second", "secs", "sec",
    # Hindi
    "घंटा", "घंटे", "मिनट", "सेकंड",
    # Telugu
    "గంటలు", "గంట", "నిమిషాలు", "నిమిషం", "సెకన్లు", "సెకను",
    # Tamil
    "மணி நேரம்", "மணி", "நிமிடங்கள்", "நிமிடம்", "வினாடிகள்", "வினாடி",
    # Malayalam
    "മണിക്കൂർ", "മിനിറ്റ്", "സെക്കൻഡ്",
)

# Checked in order against the matched token; the first class with a hit wins,
# anything unclassified counts as seconds.
UNIT_CLASSES: Tuple[Tuple[Scale, Tuple[str, ...]], ...] = (
    (Scale.HOURS, ("hour", "hr", "గంట", "घंट", "மணி", "മണിക്കൂർ")),
    (Scale.MINUTES, ("min", "నిమిష", "मिनट", "நிமிட", "മിനിറ്റ്")),
)

TIME_PATTERN = re.compile(
    r"(\d+)\s*("
    + "|".join(re.escape(t) for t in sorted(UNIT_TOKENS, key=len, reverse=True))
    + ")",
    re.IGNORECASE,
)


def classify_unit(unit: str) -> Scale:
    unit = unit.lower()
    for scale, markers in UNIT_CLASSES:
        if any(marker in unit for marker in markers):
            return scale
    return Scale.SECONDS


def resolve_seconds(line: str) -> Optional[int]:
    """Return the duration of the leftmost time expression in ``line``, or None."""
    match = TIME_PATTERN.search(line)
    if not match:
        return None
    return int(match.group(1)) * classify_unit(match.group(2)).value
