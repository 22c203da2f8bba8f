from __future__ import annotations

import math
from typing import TYPE_CHECKING, Sequence

from .color import Color
from .elements import Stroke
from .geometry import ORIGIN, Point, as_point, distance, lerp

if TYPE_CHECKING:
    from .canvas import Canvas


class PathBuilder:
    """Pen-style builder that flattens lines and Bezier curves into point runs.

    Mostly used through `Canvas.draw_path`. The pen starts at the origin;
    every `move_to` starts a new run, and runs are never connected by a
    stroke.
    """

    def __init__(self, points_per_unit: int) -> None:
        if points_per_unit <= 0:
            raise ValueError("points_per_unit must be > 0")
        self._points_per_unit = points_per_unit
        self._runs: list[list[Point]] = []
        self._current: list[Point] = [ORIGIN]

    @property
    def points_per_unit(self) -> int:
        return self._points_per_unit

    @property
    def current_point(self) -> Point:
        return self._current[-1]

    def runs(self) -> list[list[Point]]:
        """Archived runs followed by the in-progress one (copies)."""
        return [list(run) for run in self._runs] + [list(self._current)]

    def move_to(self, point: Sequence[float]) -> "PathBuilder":
        if len(self._current) > 1:
            self._runs.append(self._current)
        self._current = [as_point(point)]
        return self

    def line_to(self, point: Sequence[float]) -> "PathBuilder":
        p = as_point(point)
        if self._current[-1] != p:
            self._current.append(p)
        return self

    def quadratic_bezier_to(self, end_point: Sequence[float], control_point: Sequence[float]) -> "PathBuilder":
        start = self._current[-1]
        end = as_point(end_point)
        control = as_point(control_point)
        count = self._point_count(distance(start, control) + distance(control, end))
        for i in range(1, count + 1):
            self._current.append(_quadratic(start, control, end, i / count))
        return self

    def cubic_bezier_to(
        self,
        end_point: Sequence[float],
        control_point_0: Sequence[float],
        control_point_1: Sequence[float],
    ) -> "PathBuilder":
        start = self._current[-1]
        end = as_point(end_point)
        c0 = as_point(control_point_0)
        c1 = as_point(control_point_1)
        count = self._point_count(distance(start, c0) + distance(c0, c1) + distance(c1, end))
        for i in range(1, count + 1):
            self._current.append(_cubic(start, c0, c1, end, i / count))
        return self

    def first_point(self) -> Point:
        if self._runs:
            return self._runs[0][0]
        return self._current[0]

    def close(self) -> "PathBuilder":
        return self.line_to(self.first_point())

    def build(
        self,
        canvas: "Canvas",
        stroke: Stroke | None = None,
        fill: Color | None = None,
        *,
        absolute: bool = False,
    ) -> None:
        runs = self._runs + [self._current]
        self._runs = []
        self._current = [ORIGIN]
        draw = canvas.draw_shape_absolute if absolute else canvas.draw_shape

        # One shape spanning every run so the fill covers disjoint sub-paths.
        if fill is not None:
            merged = [p for run in runs for p in run]
            draw(merged, None, fill)

        if stroke is None:
            return
        for run in runs:
            draw(run, stroke, None)

    def _point_count(self, curve_length: float) -> int:
        return int(math.ceil(curve_length * self._points_per_unit))


def _quadratic(start: Point, middle: Point, end: Point, t: float) -> Point:
    a = lerp(start, middle, t)
    b = lerp(middle, end, t)
    return lerp(a, b, t)


def _cubic(start: Point, second: Point, third: Point, end: Point, t: float) -> Point:
    a = lerp(start, second, t)
    b = lerp(second, third, t)
    c = lerp(third, end, t)
    d = lerp(a, b, t)
    e = lerp(b, c, t)
    return lerp(d, e, t)
