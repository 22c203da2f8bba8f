from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional, Sequence

from PIL import Image

from tessera_core.core.color import Color
from tessera_core.core.elements import Adjust, Blank, Cluster, Element, Ellipse, GaussianBlur, Shape, Stroke
from tessera_core.core.geometry import Point
from tessera_core.render.framebuffer import FrameBuffer
from tessera_core.render.rasterize import coverage_mask, oriented
from tessera_core.render.stroke import stroke_polygons

from .base import DeviceMapping, Renderer, ellipse_outline

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RasterSettings:
    size: tuple[int, int] = (640, 480)
    background: Optional[Color] = None
    antialias: bool = True
    preserve_height: bool = False
    supersample: int = 4
    ellipse_segments: int = 64

    def __post_init__(self) -> None:
        width, height = self.size
        if not isinstance(width, int) or not isinstance(height, int):
            raise ValueError(f"raster size must be integers, got {self.size!r}")
        if width <= 0 or height <= 0:
            raise ValueError(f"raster size must be > 0, got {width}x{height}")
        if self.supersample < 1:
            raise ValueError("supersample must be >= 1")
        if self.ellipse_segments < 3:
            raise ValueError("ellipse_segments must be >= 3")

    @property
    def effective_supersample(self) -> int:
        return self.supersample if self.antialias else 1


class RasterRenderer(Renderer[RasterSettings, Image.Image]):
    """Rasterizes camera-space elements into an RGBA Pillow image.

    Fills and strokes use the non-zero winding rule. Elements carrying
    post-effects are drawn into their own transparent layer, which is
    blurred or transformed and then composited over its parent.
    """

    def __init__(self, settings: RasterSettings | None = None) -> None:
        super().__init__(settings or RasterSettings())
        width, height = self.settings.size
        self._mapping = DeviceMapping.from_size(width, height, self.settings.preserve_height)
        self._frame = FrameBuffer(width, height, self.settings.background)

    @property
    def frame(self) -> FrameBuffer:
        return self._frame

    def _render(self, element: Element) -> None:
        self._draw(self._frame, element)

    def _finalize(self) -> Image.Image:
        LOGGER.debug("finalizing %dx%d raster", self._frame.width, self._frame.height)
        return self._frame.to_image()

    def _draw(self, target: FrameBuffer, element: Element) -> None:
        if not element.post_effects:
            self._draw_content(target, element)
            return
        layer = target.new_layer()
        self._draw_content(layer, element)
        for effect in element.post_effects:
            if isinstance(effect, GaussianBlur):
                layer.gaussian_blur(self._mapping.length(effect.std_dev))
            elif isinstance(effect, Adjust):
                layer.transform(self._mapping.to_device_affine(effect.affine))
            else:
                raise TypeError(f"unsupported post effect: {type(effect).__name__}")
        target.composite(layer)

    def _draw_content(self, target: FrameBuffer, element: Element) -> None:
        if isinstance(element, Cluster):
            for child in element.children:
                self._draw(target, child)
        elif isinstance(element, Shape):
            points = self._mapping.map_all(element.points)
            self._paint(target, points, element.stroke, element.fill, closed=element.is_polygon)
        elif isinstance(element, Ellipse):
            points = self._mapping.map_all(ellipse_outline(element, self.settings.ellipse_segments))
            self._paint(target, points, element.stroke, element.fill, closed=True)
        elif not isinstance(element, Blank):
            raise TypeError(f"unsupported canvas element: {type(element).__name__}")

    def _paint(
        self,
        target: FrameBuffer,
        points: Sequence[Point],
        stroke: Stroke | None,
        fill: Color | None,
        *,
        closed: bool,
    ) -> None:
        if len(points) < 2:
            return
        if fill is not None:
            target.fill_coverage(self._coverage([points]), fill)
        if stroke is not None:
            pieces = stroke_polygons(points, self._mapping.length(stroke.width), stroke.line_end, closed=closed)
            if pieces:
                target.fill_coverage(self._coverage(oriented(pieces)), stroke.color)

    def _coverage(self, polygons: Sequence[Sequence[Point]]):
        return coverage_mask(
            polygons,
            self._frame.width,
            self._frame.height,
            self.settings.effective_supersample,
        )
