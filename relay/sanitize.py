"""Strip emoji and pictographic symbols from untrusted text."""

import re
from typing import Any

# Inclusive code point ranges. Matching is per code point, so removing one
# can never make a neighbour start matching: clean() is idempotent.
EMOJI_RANGES: tuple[tuple[int, int], ...] = (
    (0x1F000, 0x1FAFF),  # mahjong, cards, enclosed, pictographs, emoticons, transport, symbols
    (0x2600, 0x27BF),  # misc symbols, dingbats
    (0x2300, 0x23FF),  # misc technical (watch, hourglass, media controls)
    (0x2B05, 0x2B07),
    (0x2B1B, 0x2B1C),
    (0x2B50, 0x2B50),
    (0x2B55, 0x2B55),
    (0x3030, 0x3030),
    (0x303D, 0x303D),
    (0x3297, 0x3297),
    (0x3299, 0x3299),
    (0x200D, 0x200D),  # zero width joiner
    (0x20E3, 0x20E3),  # combining enclosing keycap
    (0xFE0E, 0xFE0F),  # variation selectors
    (0xE0020, 0xE007F),  # tag characters
)


def _build_pattern(ranges: tuple[tuple[int, int], ...]) -> re.Pattern[str]:
    parts = []
    for start, end in ranges:
        if start == end:
            parts.append(re.escape(chr(start)))
        else:
            parts.append(f"{re.escape(chr(start))}-{re.escape(chr(end))}")
    return re.compile("[" + "".join(parts) + "]")


_EMOJI_RE = _build_pattern(EMOJI_RANGES)


def clean(text: Any) -> str:
    if not isinstance(text, str):
        return ""
    return _EMOJI_RE.sub("", text)
