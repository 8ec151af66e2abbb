# sidel/highlighter/output.py
"""
Terminal rendering of highlight spans using 24-bit ANSI escape codes.
"""

from functools import lru_cache
from typing import List, Tuple

from .constants import ANSI_FOREGROUND, ANSI_RESET
from .engine import Span


@lru_cache(maxsize=256)
def hex_to_rgb(color: str) -> Tuple[int, int, int]:
    """``#RGB``, ``#RRGGBB`` or ``#RRGGBBAA`` to an RGB tuple (alpha dropped)."""
    value = color.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def ansi_color(color: str) -> str:
    return ANSI_FOREGROUND.format(*hex_to_rgb(color))


def render_ansi(text: str, spans: List[Span]) -> str:
    """
    Wrap each span of ``text`` in its foreground color.

    Newlines are emitted outside the color sequences so that line-oriented
    pagers keep working.
    """
    result = []
    for span in spans:
        chunk = text[span.start:span.end]
        sequence = ansi_color(span.color)
        lines = chunk.split("\n")
        for index, line in enumerate(lines):
            if index:
                result.append("\n")
            if line:
                result.append(sequence)
                result.append(line)
                result.append(ANSI_RESET)
    return "".join(result)
