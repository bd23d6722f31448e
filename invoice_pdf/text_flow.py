"""Greedy word wrap for drawing free text into a bounded width."""

from __future__ import annotations

from typing import List, Protocol

ALIGNMENTS = ("left", "center", "right")


class TextCanvas(Protocol):
    def text_width(self, text: str) -> float:
        ...

    def draw_text(self, x: float, y: float, text: str) -> None:
        ...


def wrap_lines(canvas: TextCanvas, text: str, max_width: float) -> List[str]:
    """Break text into lines no wider than max_width, measured in the current font.

    A single word wider than max_width is kept whole on its own line.
    """
    lines: List[str] = []
    current = ""
    for word in (text or "").split():
        candidate = word if not current else f"{current} {word}"
        if current and canvas.text_width(candidate) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def aligned_x(canvas: TextCanvas, line: str, x: float, max_width: float, align: str) -> float:
    if align == "left":
        return x
    if align == "center":
        return x + (max_width - canvas.text_width(line)) / 2.0
    if align == "right":
        return x + max_width - canvas.text_width(line)
    raise ValueError(f"Unsupported alignment {align!r}; expected one of {ALIGNMENTS}.")


def add_wrapped_text(
    canvas: TextCanvas,
    text: str,
    x: float,
    y: float,
    max_width: float,
    line_height: float = 5.0,
    align: str = "left",
) -> float:
    """Draw text wrapped to max_width and return the y just below the last line."""
    if align not in ALIGNMENTS:
        raise ValueError(f"Unsupported alignment {align!r}; expected one of {ALIGNMENTS}.")
    if not text or not text.strip():
        return y

    current_y = y
    for line in wrap_lines(canvas, text, max_width):
        canvas.draw_text(aligned_x(canvas, line, x, max_width, align), current_y, line)
        current_y += line_height
    return current_y


def wrapped_height(canvas: TextCanvas, text: str, max_width: float, line_height: float = 5.0) -> float:
    return len(wrap_lines(canvas, text, max_width)) * line_height
