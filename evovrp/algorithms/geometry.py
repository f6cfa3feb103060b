"""Plane geometry helpers."""

import math
import numpy as np
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class Point:
    x: float
    y: float


def get_max_curvature(values: Sequence[Point]) -> float:
    """
    Knee of a curve: y of the point farthest from the line joining the
    first and last points. Returns 0 for an empty curve.
    """
    if len(values) == 0:
        return 0.0

    xs = np.array([p.x for p in values], dtype=np.float64)
    ys = np.array([p.y for p in values], dtype=np.float64)
    first, last = values[0], values[-1]

    dx, dy = last.x - first.x, last.y - first.y
    length = math.hypot(dx, dy)
    if length == 0.0:
        distances = np.hypot(xs - first.x, ys - first.y)
    else:
        distances = np.abs(dy * xs - dx * ys + last.x * first.y - last.y * first.x) / length

    # argmax keeps the first maximum
    return float(ys[int(np.argmax(distances))])
