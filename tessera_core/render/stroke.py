from __future__ import annotations

import math
from typing import Sequence

from tessera_core.core.elements import LineEnd
from tessera_core.core.geometry import Point, add, close_seam, is_closed, normalize, perpendicular, scale, sub


ROUND_CAP_SEGMENTS = 32


def stroke_polygons(
    points: Sequence[Point],
    width: float,
    line_end: LineEnd = LineEnd.BUTT,
    closed: bool | None = None,
) -> list[list[Point]]:
    """Rebuild a stroke as convex polygons for backends without native strokes.

    One quad per segment, offset by half the width on both sides; every
    segment after the first starts half a width early so joints are covered.
    Open ends get a cap: `ROUND` adds a half disc, `BUTT` stops flat at the
    end point. Closed rings are extended past the seam and get no caps.
    """
    half = width / 2.0
    if half <= 0 or len(points) < 2:
        return []
    if closed is None:
        closed = is_closed(points)
    path = close_seam(points) if closed else list(points)

    segments: list[tuple[Point, Point, Point]] = []
    for a, b in zip(path, path[1:]):
        direction = normalize(sub(b, a))
        if direction is None:
            continue
        segments.append((a, b, direction))
    if not segments:
        return []

    polygons: list[list[Point]] = []
    for i, (a, b, direction) in enumerate(segments):
        thickness = scale(direction, half)
        offset = perpendicular(thickness)
        start = a if i == 0 else sub(a, thickness)
        polygons.append([add(start, offset), sub(start, offset), sub(b, offset), add(b, offset)])

    if not closed and line_end == LineEnd.ROUND:
        first_a, _, first_dir = segments[0]
        _, last_b, last_dir = segments[-1]
        polygons.append(round_cap(first_a, scale(first_dir, -1.0), half))
        polygons.append(round_cap(last_b, last_dir, half))
    return polygons


def round_cap(center: Point, outward: Point, radius: float, segments: int = ROUND_CAP_SEGMENTS) -> list[Point]:
    """Half disc at `center` bulging along the unit vector `outward`."""
    side = perpendicular(outward)
    points: list[Point] = []
    for n in range(segments + 1):
        theta = math.pi * n / segments
        points.append(
            (
                center[0] + radius * (math.cos(theta) * side[0] + math.sin(theta) * outward[0]),
                center[1] + radius * (math.cos(theta) * side[1] + math.sin(theta) * outward[1]),
            )
        )
    return points
