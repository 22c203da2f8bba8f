from __future__ import annotations

from contextlib import contextmanager
import logging
import math
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, Sequence, TypeVar

from .color import Color
from .config import CanvasConfig
from .elements import Cluster, Element, Ellipse, PostEffect, Shape, Stroke, map_element
from .geometry import Point, as_point, dedup_consecutive, rect_polygon_points, regular_polygon_points
from .path_builder import PathBuilder
from .transform import Camera

if TYPE_CHECKING:
    from tessera_core.targets.base import Renderer

LOGGER = logging.getLogger(__name__)

OutputT = TypeVar("OutputT")
PathFn = Callable[[PathBuilder], "PathBuilder | None"]


class Canvas:
    """In-memory scene of elements stored in world space, seen through a camera.

    Drawing calls take camera-relative coordinates (the view nominally spans
    -1..1 on both axes) and convert them to world space immediately, so later
    camera moves never affect shapes that were already drawn. The `_absolute`
    variants store coordinates as given.
    """

    def __init__(self, points_per_unit: int | None = None) -> None:
        if points_per_unit is None:
            points_per_unit = CanvasConfig.from_env().points_per_unit
        if points_per_unit <= 0:
            raise ValueError("points_per_unit must be > 0")
        self._points_per_unit = points_per_unit
        self._camera = Camera()
        self._elements: list[Element] = []
        self._cluster_stack: list[list[Element]] = []

    def __len__(self) -> int:
        return len(self._elements)

    @property
    def points_per_unit(self) -> int:
        return self._points_per_unit

    @property
    def camera(self) -> Camera:
        return self._camera

    # camera ------------------------------------------------------------

    def rotate_camera(self, radians: float) -> None:
        self._camera.rotate(radians)

    def move_camera(self, delta: Sequence[float]) -> None:
        self._camera.move(as_point(delta))

    def zoom_camera(self, factor: float) -> None:
        self._camera.zoom(factor)

    def reset_camera(self) -> None:
        self._camera.reset()

    def to_camera_space(self, point: Sequence[float]) -> Point:
        return self._camera.to_camera_space(as_point(point))

    def to_world_space(self, point: Sequence[float]) -> Point:
        return self._camera.to_world_space(as_point(point))

    # raw element access --------------------------------------------------

    def as_raw(self) -> tuple[Element, ...]:
        return tuple(self._elements)

    def as_raw_mut(self) -> list[Element]:
        return self._elements

    def to_raw(self) -> list[Element]:
        elements = self._elements
        self._elements = []
        return elements

    def clear(self) -> None:
        self._elements.clear()

    def undo(self) -> Element | None:
        if not self._elements:
            return None
        return self._elements.pop()

    # drawing -----------------------------------------------------------

    def draw_element(self, element: Element) -> None:
        """Add an element tree given in camera space."""
        camera = self._camera
        world = map_element(
            element,
            camera.as_affine().inverse(),
            length_scale=1.0 / camera.zoom_factor,
            point_fn=camera.to_world_space,
        )
        self._push(world)

    def draw_element_absolute(self, element: Element) -> None:
        self._push(element)

    def draw_shape(
        self,
        points: Iterable[Sequence[float]],
        stroke: Stroke | None = None,
        fill: Color | None = None,
    ) -> None:
        world = dedup_consecutive(self._camera.to_world_space(as_point(p)) for p in points)
        if len(world) <= 1:
            LOGGER.debug("dropping degenerate shape with %d distinct point(s)", len(world))
            return
        self._push(Shape(points=tuple(world), stroke=stroke, fill=fill))

    def draw_shape_absolute(
        self,
        points: Iterable[Sequence[float]],
        stroke: Stroke | None = None,
        fill: Color | None = None,
    ) -> None:
        raw = [as_point(p) for p in points]
        if len(raw) <= 1:
            LOGGER.debug("dropping degenerate shape with %d point(s)", len(raw))
            return
        self._push(Shape(points=tuple(raw), stroke=stroke, fill=fill))

    def draw_line(
        self,
        start: Sequence[float],
        end: Sequence[float],
        stroke: Stroke | None = None,
        fill: Color | None = None,
    ) -> None:
        a, b = as_point(start), as_point(end)
        if a == b:
            raise ValueError("a line needs two distinct end points")
        self.draw_shape([a, b], stroke, fill)

    def draw_polyline(self, points: Iterable[Sequence[float]], stroke: Stroke | None = None) -> None:
        self.draw_shape(points, stroke, None)

    def draw_polygon(
        self,
        points: Iterable[Sequence[float]],
        stroke: Stroke | None = None,
        fill: Color | None = None,
    ) -> None:
        ring = [as_point(p) for p in points]
        if len(ring) >= 2 and ring[0] != ring[-1]:
            ring.append(ring[0])
        self.draw_shape(ring, stroke, fill)

    def draw_rect(
        self,
        corner_a: Sequence[float],
        corner_b: Sequence[float],
        stroke: Stroke | None = None,
        fill: Color | None = None,
    ) -> None:
        self.draw_shape(rect_polygon_points(as_point(corner_a), as_point(corner_b)), stroke, fill)

    def draw_triangle(
        self,
        a: Sequence[float],
        b: Sequence[float],
        c: Sequence[float],
        stroke: Stroke | None = None,
        fill: Color | None = None,
    ) -> None:
        self.draw_polygon([a, b, c], stroke, fill)

    def draw_quad(
        self,
        a: Sequence[float],
        b: Sequence[float],
        c: Sequence[float],
        d: Sequence[float],
        stroke: Stroke | None = None,
        fill: Color | None = None,
    ) -> None:
        self.draw_polygon([a, b, c, d], stroke, fill)

    def draw_regular_polygon(
        self,
        center: Sequence[float],
        sides: int,
        radius: float,
        rotation: float = 0.0,
        stroke: Stroke | None = None,
        fill: Color | None = None,
    ) -> None:
        self.draw_shape(regular_polygon_points(as_point(center), sides, radius, rotation), stroke, fill)

    def draw_circle(
        self,
        center: Sequence[float],
        radius: float,
        stroke: Stroke | None = None,
        fill: Color | None = None,
    ) -> None:
        sides = int(2.0 * math.pi * radius * self._points_per_unit)
        if sides <= 2:
            LOGGER.debug("skipping circle of radius %s: too small at %d points/unit", radius, self._points_per_unit)
            return
        self.draw_regular_polygon(center, sides, radius, 0.0, stroke, fill)

    def draw_ellipse(
        self,
        center: Sequence[float],
        radius: Sequence[float],
        rotation: float = 0.0,
        stroke: Stroke | None = None,
        fill: Color | None = None,
    ) -> None:
        rx, ry = as_point(radius)
        if rx <= 0 or ry <= 0:
            LOGGER.debug("skipping ellipse with non-positive radius (%s, %s)", rx, ry)
            return
        self.draw_element(Ellipse(center=as_point(center), radius=(rx, ry), rotation=rotation, fill=fill, stroke=stroke))

    def draw_path(self, stroke: Stroke | None, fill: Color | None, build: PathFn) -> None:
        self._draw_path(stroke, fill, build, absolute=False)

    def draw_path_absolute(self, stroke: Stroke | None, fill: Color | None, build: PathFn) -> None:
        self._draw_path(stroke, fill, build, absolute=True)

    def draw_quadratic_bezier(
        self,
        start: Sequence[float],
        control: Sequence[float],
        end: Sequence[float],
        stroke: Stroke | None = None,
        fill: Color | None = None,
    ) -> None:
        self.draw_path(stroke, fill, lambda p: p.move_to(start).quadratic_bezier_to(end, control))

    def draw_cubic_bezier(
        self,
        start: Sequence[float],
        control_0: Sequence[float],
        control_1: Sequence[float],
        end: Sequence[float],
        stroke: Stroke | None = None,
        fill: Color | None = None,
    ) -> None:
        self.draw_path(stroke, fill, lambda p: p.move_to(start).cubic_bezier_to(end, control_0, control_1))

    @contextmanager
    def cluster(self, *post_effects: PostEffect) -> Iterator[None]:
        """Collect everything drawn inside the block into one `Cluster`.

        Post-effects apply to the composite of the children, never to each
        child on its own. Empty clusters are discarded.
        """
        self._cluster_stack.append([])
        try:
            yield
        finally:
            children = self._cluster_stack.pop()
        if children:
            self._push(Cluster(children=tuple(children), post_effects=tuple(post_effects)))

    # rendering ---------------------------------------------------------

    def render(self, renderer: "Renderer[object, OutputT]") -> OutputT:
        camera = self._camera
        space = camera.as_affine()
        for element in self._elements:
            renderer.render(
                map_element(element, space, length_scale=camera.zoom_factor, point_fn=camera.to_camera_space)
            )
        return renderer.finalize()

    def _draw_path(self, stroke: Stroke | None, fill: Color | None, build: PathFn, *, absolute: bool) -> None:
        builder = PathBuilder(self._points_per_unit)
        result = build(builder)
        if result is None:
            result = builder
        result.build(self, stroke, fill, absolute=absolute)

    def _push(self, element: Element) -> None:
        if self._cluster_stack:
            self._cluster_stack[-1].append(element)
        else:
            self._elements.append(element)
