from __future__ import annotations

import math
from typing import Iterable, Sequence, TypeAlias


Point: TypeAlias = tuple[float, float]

ORIGIN: Point = (0.0, 0.0)


def as_point(value: Sequence[float]) -> Point:
    x, y = value
    return (float(x), float(y))


def add(a: Point, b: Point) -> Point:
    return (a[0] + b[0], a[1] + b[1])


def sub(a: Point, b: Point) -> Point:
    return (a[0] - b[0], a[1] - b[1])


def scale(p: Point, factor: float) -> Point:
    return (p[0] * factor, p[1] * factor)


def length(v: Point) -> float:
    return math.hypot(v[0], v[1])


def distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def normalize(v: Point) -> Point | None:
    n = length(v)
    if n == 0.0 or not math.isfinite(n):
        return None
    return (v[0] / n, v[1] / n)


def perpendicular(v: Point) -> Point:
    """Rotate a vector by +90 degrees."""
    return (-v[1], v[0])


def lerp(a: Point, b: Point, t: float) -> Point:
    return (a[0] - (a[0] - b[0]) * t, a[1] - (a[1] - b[1]) * t)


def rotate_point(p: Point, radians: float, about: Point = ORIGIN) -> Point:
    c = math.cos(radians)
    s = math.sin(radians)
    x = p[0] - about[0]
    y = p[1] - about[1]
    return (about[0] + x * c - y * s, about[1] + x * s + y * c)


def centroid(points: Sequence[Point]) -> Point:
    if not points:
        raise ValueError("centroid of an empty point list")
    n = float(len(points))
    return (sum(p[0] for p in points) / n, sum(p[1] for p in points) / n)


def signed_area(points: Sequence[Point]) -> float:
    total = 0.0
    count = len(points)
    for i, (x0, y0) in enumerate(points):
        x1, y1 = points[(i + 1) % count]
        total += x0 * y1 - x1 * y0
    return total / 2.0


def dedup_consecutive(points: Iterable[Point]) -> list[Point]:
    out: list[Point] = []
    for p in points:
        if out and out[-1] == p:
            continue
        out.append(p)
    return out


def is_closed(points: Sequence[Point]) -> bool:
    """Exact test: at least three points and first == last."""
    return len(points) >= 3 and points[0] == points[-1]


def regular_polygon_points(center: Point, sides: int, radius: float, rotation: float) -> list[Point]:
    """Vertices of a regular polygon, with the first vertex repeated to close it."""
    if sides < 3:
        raise ValueError(f"a regular polygon needs at least 3 sides, got {sides}")
    cx, cy = center
    points: list[Point] = []
    for n in range(sides):
        angle = rotation + 2.0 * math.pi * n / sides
        points.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    points.append(points[0])
    return points


def rect_polygon_points(corner_a: Point, corner_b: Point) -> list[Point]:
    (x0, y0), (x1, y1) = corner_a, corner_b
    return [(x0, y0), (x1, y0), (x1, y1), (x0, y1), (x0, y0)]


def ellipse_points(center: Point, radius: Point, rotation: float, segments: int) -> list[Point]:
    rx, ry = radius
    if rx == 0.0:
        return []
    ring = regular_polygon_points(ORIGIN, segments, rx, 0.0)
    ratio = ry / rx
    return [add(rotate_point((x, y * ratio), rotation), center) for x, y in ring]


def close_seam(points: Sequence[Point]) -> list[Point]:
    """Extend a closed ring one segment past its start so the seam gets a proper joint."""
    out = list(points)
    if len(out) > 3 and is_closed(out):
        out.append(out[1])
    return out
