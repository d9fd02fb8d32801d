# @TASK P1-T1.1 - 스트로크 압축/간소화
# @TEST tests/test_stroke_codec.py

"""Stroke compression for the wire.

Raw pointer samples are quantized (two decimals for coordinates, one for
pressure) and thinned before they leave the client.  Quantization uses
Python's :func:`round` (round-half-to-even) throughout.

Thinning is a single greedy pass: an interior point is kept only when it
lies more than ``threshold`` away from the raw sample immediately before
it.  Dropped points are never reconsidered, so this is not a globally
optimal simplification such as Douglas-Peucker.

None of these functions mutate their input.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from scripto.constants import COORDINATE_PRECISION, PRESSURE_PRECISION, STROKE_THINNING_THRESHOLD
from scripto.models import Rect, StrokePoint


def compress(point: StrokePoint) -> StrokePoint:
    """Quantize a point to its wire precision."""
    return StrokePoint(
        x=round(point.x, COORDINATE_PRECISION),
        y=round(point.y, COORDINATE_PRECISION),
        pressure=round(point.pressure, PRESSURE_PRECISION),
    )


def distance(a: StrokePoint, b: StrokePoint) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def optimize(
    points: Sequence[StrokePoint],
    threshold: float = STROKE_THINNING_THRESHOLD,
) -> list[StrokePoint]:
    """Thin and compress a stroke.

    The first and last samples are always kept.  Each interior sample is
    kept when its distance from the preceding *raw* sample exceeds
    *threshold*.

    Args:
        points: Raw samples in chronological order.
        threshold: Minimum distance (exclusive) for interior samples.

    Returns:
        The retained samples, compressed, in their original order.
    """
    if len(points) <= 2:
        return [compress(p) for p in points]

    kept = [compress(points[0])]
    for index in range(1, len(points) - 1):
        if distance(points[index], points[index - 1]) > threshold:
            kept.append(compress(points[index]))
    kept.append(compress(points[-1]))
    return kept


def compute_bounds(points: Sequence[StrokePoint]) -> Rect:
    """Return the minimal axis-aligned rectangle covering *points*."""
    return Rect.enclosing(points)
