"""
Text fitting and vertical layout for OGP images.

Everything here is pure: widths come from a ``measure(text) -> float``
callable so the rules can be exercised without a font or a canvas.
"""
import math
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

Measure = Callable[[str], float]


def truncate_to_width(text: str, max_width: float, measure: Measure) -> str:
    """Cut characters off the end of ``text`` until it fits ``max_width``.

    No ellipsis is appended. The result may be empty.
    """
    if measure(text) <= max_width:
        return text

    current = text
    while current and measure(current) > max_width:
        current = current[:-1]
    return current


def wrap_by_character(text: str, max_width: float, measure: Measure) -> List[str]:
    """Wrap ``text`` into lines by accumulating one character at a time.

    A line is only broken when it already holds at least one character, so a
    character wider than ``max_width`` still lands on a line of its own.
    Always returns at least one line (an empty title yields ``[""]``).
    """
    lines: List[str] = []
    current = ""
    for char in text:
        candidate = current + char
        if measure(candidate) > max_width and len(current) > 0:
            lines.append(current)
            current = char
        else:
            current = candidate
    lines.append(current)
    return lines


@dataclass(frozen=True)
class FooterLine:
    text: str
    size: int


@dataclass(frozen=True)
class FooterLayout:
    top: float
    height: float
    baselines: Tuple[float, ...]


def footer_layout(
    lines: Sequence[FooterLine],
    panel_bottom: float,
    bottom_padding: float,
    line_height_multiplier: float,
) -> FooterLayout:
    """Place the footer block bottom-up against the panel bottom.

    Every line but the last occupies ``size * multiplier``; the last one only
    its font size. The first baseline sits on the block top.
    """
    height = 0.0
    for index, line in enumerate(lines):
        if index < len(lines) - 1:
            height += line.size * line_height_multiplier
        else:
            height += line.size
    top = panel_bottom - bottom_padding - height

    baselines = []
    baseline = top
    for index, line in enumerate(lines):
        if index > 0:
            baseline += lines[index - 1].size * line_height_multiplier
        baselines.append(baseline)
    return FooterLayout(top=top, height=height, baselines=tuple(baselines))


def visible_title_lines(line_count: int, start_baseline: float, line_height: float, max_baseline: float) -> int:
    """How many wrapped title lines get drawn.

    Line ``i`` is drawn, then drawing stops if line ``i + 1`` would have its
    baseline below ``max_baseline``. The first line is always drawn.
    """
    drawn = 0
    for i in range(line_count):
        drawn += 1
        if start_baseline + (i + 1) * line_height > max_baseline:
            break
    return drawn


def max_content_lines(start_baseline: float, line_height: float, footer_top: float) -> int:
    """Number of preview lines whose baselines stay at or above ``footer_top``."""
    return max(0, math.floor((footer_top - start_baseline + line_height) / line_height))
