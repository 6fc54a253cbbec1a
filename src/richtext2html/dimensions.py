"""Aspect-preserving image size capping."""

from __future__ import annotations

DEFAULT_MAX_SIDE = 400


def scaled_dimensions(
    width: float, height: float, max_side: float = DEFAULT_MAX_SIDE
) -> tuple[int, int]:
    """Cap *width* x *height* so the longer side is at most *max_side*.

    Dimensions already within the bound are returned unchanged.  Otherwise the
    longer side becomes *max_side* and the shorter one is rounded to the
    nearest integer.

    >>> scaled_dimensions(800, 400, 600)
    (600, 300)
    >>> scaled_dimensions(300, 200)
    (300, 200)
    """
    if width <= max_side and height <= max_side:
        return int(width), int(height)
    aspect_ratio = width / height
    if aspect_ratio > 1:
        return int(max_side), _round_half_up(max_side / aspect_ratio)
    return _round_half_up(max_side * aspect_ratio), int(max_side)


def _round_half_up(value: float) -> int:
    # builtin round() is banker's rounding; pixel sizes round .5 upwards
    return int(value + 0.5)
