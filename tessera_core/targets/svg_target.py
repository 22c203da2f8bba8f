from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Optional, Sequence
import xml.etree.ElementTree as ET

from tessera_core.core.color import Color
from tessera_core.core.elements import Adjust, Blank, Cluster, Element, Ellipse, GaussianBlur, PostEffect, Shape
from tessera_core.core.geometry import Point, centroid, distance
from tessera_core.render.svg import SvgDocument

from .base import DeviceMapping, Renderer

LOGGER = logging.getLogger(__name__)

CIRCLE_TOLERANCE = 0.1


@dataclass(frozen=True)
class SvgSettings:
    size: tuple[int, int] = (640, 480)
    background: Optional[Color] = None
    ints_only: bool = False
    preserve_height: bool = False
    circle_threshold: int = 32

    def __post_init__(self) -> None:
        width, height = self.size
        if width <= 0 or height <= 0:
            raise ValueError(f"SVG size must be > 0, got {width}x{height}")
        if self.circle_threshold < 3:
            raise ValueError("circle_threshold must be >= 3")


class SvgRenderer(Renderer[SvgSettings, str]):
    """Renders camera-space elements into an SVG string."""

    def __init__(self, settings: SvgSettings | None = None) -> None:
        super().__init__(settings or SvgSettings())
        width, height = self.settings.size
        self._mapping = DeviceMapping.from_size(width, height, self.settings.preserve_height)
        self._doc = SvgDocument(width, height, ints_only=self.settings.ints_only)
        if self.settings.background is not None:
            self._doc.background(self.settings.background)

    def _render(self, element: Element) -> None:
        self._emit(self._doc.root, element)

    def _finalize(self) -> str:
        LOGGER.debug("finalizing SVG document (%d top-level nodes)", len(self._doc.root))
        return self._doc.to_string()

    def _emit(self, parent: ET.Element, element: Element) -> None:
        parent = self._wrap_effects(parent, element.post_effects)
        if isinstance(element, Cluster):
            for child in element.children:
                self._emit(parent, child)
        elif isinstance(element, Shape):
            self._emit_shape(parent, element)
        elif isinstance(element, Ellipse):
            self._emit_ellipse(parent, element)
        elif not isinstance(element, Blank):
            raise TypeError(f"unsupported canvas element: {type(element).__name__}")

    def _wrap_effects(self, parent: ET.Element, effects: Sequence[PostEffect]) -> ET.Element:
        # The first effect applies first, so it wraps the content innermost.
        for effect in reversed(effects):
            if isinstance(effect, GaussianBlur):
                parent = self._doc.blur_group(parent, self._mapping.length(effect.std_dev))
            elif isinstance(effect, Adjust):
                device = self._mapping.to_device_affine(effect.affine)
                parent = self._doc.transform_group(parent, device.svg_matrix())
            else:
                raise TypeError(f"unsupported post effect: {type(effect).__name__}")
        return parent

    def _emit_shape(self, parent: ET.Element, shape: Shape) -> None:
        points = self._mapping.map_all(shape.points)
        stroke = shape.stroke.scaled(self._mapping.scale) if shape.stroke else None
        if not shape.is_polygon:
            self._doc.polyline(parent, points, stroke, shape.fill)
            return
        circle = near_circle(points, self.settings.circle_threshold)
        if circle is not None:
            center, radius = circle
            self._doc.circle(parent, center, radius, stroke, shape.fill)
            return
        self._doc.polygon(parent, points[:-1], stroke, shape.fill)

    def _emit_ellipse(self, parent: ET.Element, ellipse: Ellipse) -> None:
        center = self._mapping.map(ellipse.center)
        rx, ry = (self._mapping.length(r) for r in ellipse.radius)
        stroke = ellipse.stroke.scaled(self._mapping.scale) if ellipse.stroke else None
        if rx == ry:
            self._doc.circle(parent, center, rx, stroke, ellipse.fill)
            return
        rotation = math.degrees(self._mapping.ellipse_rotation(ellipse.rotation))
        self._doc.ellipse(parent, center, (rx, ry), rotation, stroke, ellipse.fill)


def near_circle(points: Sequence[Point], threshold: int) -> tuple[Point, float] | None:
    """Return `(center, radius)` when a closed ring is close enough to a circle.

    Needs at least `threshold` distinct vertices, every one of them within
    10% of the centroid-to-first-vertex distance.
    """
    ring = list(points[:-1]) if len(points) > 1 and points[0] == points[-1] else list(points)
    if len(ring) < threshold:
        return None
    center = centroid(ring)
    radius = distance(center, ring[0])
    if radius <= 0:
        return None
    limit = radius * CIRCLE_TOLERANCE
    if all(abs(distance(center, p) - radius) <= limit for p in ring):
        return center, radius
    return None
