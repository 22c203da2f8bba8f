from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Iterable, Sequence, TypeAlias

from .color import Color
from .geometry import Point, as_point, is_closed
from .transform import Affine2, Transform


class LineEnd(str, Enum):
    BUTT = "butt"
    ROUND = "round"


class ElementKind(str, Enum):
    BLANK = "blank"
    POLYLINE = "polyline"
    POLYGON = "polygon"
    ELLIPSE = "ellipse"
    CLUSTER = "cluster"


@dataclass(frozen=True)
class Stroke:
    """Outline style. `width` is scaled by the camera zoom at render time."""

    color: Color
    width: float
    line_end: LineEnd = LineEnd.BUTT

    def scaled(self, factor: float) -> "Stroke":
        return replace(self, width=self.width * factor)


@dataclass(frozen=True)
class GaussianBlur:
    std_dev: float

    def __post_init__(self) -> None:
        if self.std_dev < 0:
            raise ValueError("std_dev must be >= 0")


@dataclass(frozen=True)
class Adjust:
    affine: Affine2

    @classmethod
    def from_transform(cls, transform: Transform) -> "Adjust":
        return cls(affine=transform.to_affine())


PostEffect: TypeAlias = GaussianBlur | Adjust


@dataclass(frozen=True)
class Blank:
    post_effects: tuple[PostEffect, ...] = ()

    @property
    def kind(self) -> ElementKind:
        return ElementKind.BLANK


@dataclass(frozen=True)
class Shape:
    """Point sequence with an optional stroke and fill.

    A shape is a polygon iff it has at least three points and its first point
    equals its last one exactly; otherwise it is a polyline.
    """

    points: tuple[Point, ...]
    stroke: Stroke | None = None
    fill: Color | None = None
    post_effects: tuple[PostEffect, ...] = ()

    @property
    def is_polygon(self) -> bool:
        return is_closed(self.points)

    @property
    def kind(self) -> ElementKind:
        return ElementKind.POLYGON if self.is_polygon else ElementKind.POLYLINE


@dataclass(frozen=True)
class Ellipse:
    center: Point
    radius: Point
    rotation: float = 0.0
    fill: Color | None = None
    stroke: Stroke | None = None
    post_effects: tuple[PostEffect, ...] = ()

    @property
    def kind(self) -> ElementKind:
        return ElementKind.ELLIPSE


@dataclass(frozen=True)
class Cluster:
    children: tuple["Element", ...] = field(default_factory=tuple)
    post_effects: tuple[PostEffect, ...] = ()

    @property
    def kind(self) -> ElementKind:
        return ElementKind.CLUSTER


Element: TypeAlias = Blank | Shape | Ellipse | Cluster


def polyline(points: Iterable[Sequence[float]], stroke: Stroke) -> Shape:
    return Shape(points=tuple(as_point(p) for p in points), stroke=stroke)


def polygon(points: Iterable[Sequence[float]], fill: Color | None = None, stroke: Stroke | None = None) -> Shape:
    ring = [as_point(p) for p in points]
    if len(ring) >= 2 and ring[0] != ring[-1]:
        ring.append(ring[0])
    return Shape(points=tuple(ring), stroke=stroke, fill=fill)


def map_element(
    element: Element,
    space: Affine2,
    *,
    length_scale: float,
    point_fn: Callable[[Point], Point] | None = None,
) -> Element:
    """Copy an element tree into another coordinate space.

    `space` is the affine map between the two spaces; `point_fn` may replace
    its point mapping (for exact camera round trips). Stroke widths, ellipse
    radii and blur deviations are multiplied by `length_scale`.
    """
    map_point = point_fn or space.apply
    effects = tuple(_map_effect(effect, space, length_scale) for effect in element.post_effects)
    if isinstance(element, Shape):
        return Shape(
            points=tuple(map_point(p) for p in element.points),
            stroke=element.stroke.scaled(length_scale) if element.stroke else None,
            fill=element.fill,
            post_effects=effects,
        )
    if isinstance(element, Ellipse):
        rx, ry = element.radius
        return Ellipse(
            center=map_point(element.center),
            radius=(rx * length_scale, ry * length_scale),
            rotation=element.rotation + space.rotation_angle(),
            fill=element.fill,
            stroke=element.stroke.scaled(length_scale) if element.stroke else None,
            post_effects=effects,
        )
    if isinstance(element, Cluster):
        return Cluster(
            children=tuple(
                map_element(child, space, length_scale=length_scale, point_fn=point_fn)
                for child in element.children
            ),
            post_effects=effects,
        )
    if isinstance(element, Blank):
        return Blank(post_effects=effects)
    raise TypeError(f"unsupported canvas element: {type(element).__name__}")


def _map_effect(effect: PostEffect, space: Affine2, length_scale: float) -> PostEffect:
    if isinstance(effect, GaussianBlur):
        return GaussianBlur(std_dev=effect.std_dev * length_scale)
    if isinstance(effect, Adjust):
        return Adjust(affine=effect.affine.conjugate(space))
    raise TypeError(f"unsupported post effect: {type(effect).__name__}")
