"""Plain-text rendering of inputs and network outputs for terminals."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from ..core.types import Array

ASCII_SCALE = " .'`^\",:;Il!i><~+_-?][}{1)(|\\/tfjrxnuvczXYUJCLQ0OZmwqpdbkhao*#MW&8%B@$"


def render_image(values: Sequence[float] | Array, shape: Tuple[int, int]) -> str:
    """Draw a flattened ``[0, 1]`` image inside a box, two characters per pixel."""

    rows, cols = shape
    pixels = np.clip(np.asarray(values, dtype=np.float64).reshape(rows, cols), 0.0, 1.0)
    border = "+" + "--" * cols + "+"
    lines = [border]
    top = len(ASCII_SCALE) - 1
    for row in pixels:
        chars = (ASCII_SCALE[min(int(v * len(ASCII_SCALE)), top)] * 2 for v in row)
        lines.append("|" + "".join(chars) + "|")
    lines.append(border)
    return "\n".join(lines)


def render_confidence(
    outputs: Sequence[float] | Array, prediction: int, width: int = 20
) -> str:
    """One bar per output unit; the predicted class is marked with ``<``."""

    lines = []
    for idx, value in enumerate(np.asarray(outputs, dtype=np.float64)):
        filled = int(round(min(max(value, 0.0), 1.0) * width))
        bar = "#" * filled + "." * (width - filled)
        marker = " <" if idx == prediction else ""
        lines.append(f"{idx:>3} |{bar}| {value:.3f}{marker}")
    return "\n".join(lines)


__all__ = ["ASCII_SCALE", "render_confidence", "render_image"]
