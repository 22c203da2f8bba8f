from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
from typing import Any, Optional, Sequence

import mapbox_earcut as earcut
import numpy as np

from tessera_core.core.color import Color
from tessera_core.core.display_runtime import DisplayRuntime
from tessera_core.core.elements import Blank, Element, Ellipse, Shape, Stroke
from tessera_core.core.geometry import Point, dedup_consecutive
from tessera_core.render.stroke import stroke_polygons

from .base import DeviceMapping, Renderer, ellipse_outline, has_post_effects, iter_leaf_elements

LOGGER = logging.getLogger(__name__)

SCENE_QUEUE_CAPACITY = 4


@dataclass(frozen=True)
class WindowSettings:
    window_size: tuple[int, int] = (640, 480)
    background: Optional[Color] = None
    preserve_height: bool = False
    window_title: str = "tessera"
    ellipse_segments: int = 64

    def __post_init__(self) -> None:
        width, height = self.window_size
        if width <= 0 or height <= 0:
            raise ValueError(f"window size must be > 0, got {width}x{height}")
        if self.ellipse_segments < 3:
            raise ValueError("ellipse_segments must be >= 3")


@dataclass(frozen=True)
class TriangleMesh:
    """Solid-coloured triangles; `vertices` holds x, y pairs, six values per triangle."""

    color: Color
    vertices: tuple[float, ...]

    @property
    def triangle_count(self) -> int:
        return len(self.vertices) // 6


@dataclass(frozen=True)
class WindowScene:
    """Immutable snapshot handed to the display thread. Coordinates are pixels, origin top-left."""

    window_size: tuple[int, int]
    window_title: str
    background: Optional[Color]
    meshes: tuple[TriangleMesh, ...]

    @property
    def triangle_count(self) -> int:
        return sum(mesh.triangle_count for mesh in self.meshes)


def triangulate(ring: Sequence[Point]) -> tuple[float, ...]:
    """Ear-clip a simple polygon ring into flat triangle coordinates."""
    points = dedup_consecutive(ring)
    if len(points) > 1 and points[0] == points[-1]:
        points = points[:-1]
    if len(points) < 3:
        return ()
    vertices = np.asarray(points, dtype=np.float32).reshape(-1, 2)
    ring_ends = np.asarray([len(points)], dtype=np.uint32)
    indices = earcut.triangulate_float32(vertices, ring_ends)
    out: list[float] = []
    for i in indices:
        x, y = points[int(i)]
        out.extend((x, y))
    return tuple(out)


def fan_triangles(polygon: Sequence[Point]) -> tuple[float, ...]:
    """Triangle fan over a convex polygon."""
    out: list[float] = []
    if len(polygon) < 3:
        return ()
    ax, ay = polygon[0]
    for (bx, by), (cx, cy) in zip(polygon[1:], polygon[2:]):
        out.extend((ax, ay, bx, by, cx, cy))
    return tuple(out)


class WindowRenderer(Renderer[WindowSettings, None]):
    """Shows the rendered scene in a live window.

    `finalize` returns right after queueing the scene for the display
    thread; it only blocks while the queue is full.
    """

    def __init__(
        self,
        settings: WindowSettings | None = None,
        runtime: DisplayRuntime[WindowScene] | None = None,
    ) -> None:
        super().__init__(settings or WindowSettings())
        width, height = self.settings.window_size
        self._mapping = DeviceMapping.from_size(width, height, self.settings.preserve_height)
        self._runtime = runtime
        self._meshes: list[TriangleMesh] = []
        self._warned_effects = False

    def _render(self, element: Element) -> None:
        if has_post_effects(element) and not self._warned_effects:
            LOGGER.warning("window backend ignores post-effects")
            self._warned_effects = True
        for leaf in iter_leaf_elements(element):
            if isinstance(leaf, Shape):
                points = self._mapping.map_all(leaf.points)
                self._add(points, leaf.stroke, leaf.fill, closed=leaf.is_polygon)
            elif isinstance(leaf, Ellipse):
                points = self._mapping.map_all(ellipse_outline(leaf, self.settings.ellipse_segments))
                self._add(points, leaf.stroke, leaf.fill, closed=True)
            elif not isinstance(leaf, Blank):
                raise TypeError(f"unsupported canvas element: {type(leaf).__name__}")

    def build_scene(self) -> WindowScene:
        return WindowScene(
            window_size=self.settings.window_size,
            window_title=self.settings.window_title,
            background=self.settings.background,
            meshes=tuple(self._meshes),
        )

    def _finalize(self) -> None:
        scene = self.build_scene()
        runtime = self._runtime or get_display_runtime()
        LOGGER.debug("queueing window scene with %d triangles", scene.triangle_count)
        runtime.submit(scene)

    def _add(
        self,
        points: Sequence[Point],
        stroke: Stroke | None,
        fill: Color | None,
        *,
        closed: bool,
    ) -> None:
        if len(points) < 2:
            return
        if fill is not None:
            fill_vertices = triangulate(points)
            if fill_vertices:
                self._meshes.append(TriangleMesh(color=fill, vertices=fill_vertices))
        if stroke is not None:
            stroke_vertices: list[float] = []
            for piece in stroke_polygons(points, self._mapping.length(stroke.width), stroke.line_end, closed=closed):
                stroke_vertices.extend(fan_triangles(piece))
            if stroke_vertices:
                self._meshes.append(TriangleMesh(color=stroke.color, vertices=tuple(stroke_vertices)))


class PygletScenePresenter:
    """Owns the pyglet window. Created and driven on the display thread only."""

    def __init__(self) -> None:
        self._pyglet: Any = None
        self._window: Any = None
        self._batch: Any = None
        self._shapes: list[Any] = []
        self._background: Color | None = None

    def start(self) -> None:
        import pyglet

        self._pyglet = pyglet

    def present(self, scene: WindowScene) -> None:
        width, height = scene.window_size
        window = self._window
        if window is None:
            # The window opens with the first scene, already at its size.
            window = self._pyglet.window.Window(
                width=width, height=height, caption=scene.window_title, resizable=False
            )
            self._window = window
        else:
            if (window.width, window.height) != (width, height):
                window.set_size(width, height)
            window.set_caption(scene.window_title)
        self._background = scene.background

        # pyglet puts the origin bottom-left, so flip y back.
        batch = self._pyglet.graphics.Batch()
        shapes: list[Any] = []
        for mesh in scene.meshes:
            color = mesh.color.to_rgba8()
            v = mesh.vertices
            for i in range(0, len(v) - 5, 6):
                shapes.append(
                    self._pyglet.shapes.Triangle(
                        v[i], height - v[i + 1],
                        v[i + 2], height - v[i + 3],
                        v[i + 4], height - v[i + 5],
                        color=color,
                        batch=batch,
                    )
                )
        self._batch = batch
        self._shapes = shapes
        self.redraw()

    def redraw(self) -> None:
        window = self._window
        if window is None or self._batch is None:
            return
        window.switch_to()
        bg = self._background.clamped() if self._background is not None else Color.transparent()
        self._pyglet.gl.glClearColor(bg.r, bg.g, bg.b, bg.a)
        window.clear()
        self._batch.draw()
        window.flip()

    def pump_events(self) -> None:
        if self._window is not None:
            self._window.dispatch_events()

    def should_close(self) -> bool:
        return self._window is not None and bool(self._window.has_exit)

    def stop(self) -> None:
        if self._window is not None:
            self._window.close()
            self._window = None
        self._shapes = []


_RUNTIME: DisplayRuntime[WindowScene] | None = None
_RUNTIME_LOCK = threading.Lock()


def get_display_runtime() -> DisplayRuntime[WindowScene]:
    """Process-wide display runtime, created on first use and kept until exit."""
    global _RUNTIME
    with _RUNTIME_LOCK:
        if _RUNTIME is None:
            _RUNTIME = DisplayRuntime(PygletScenePresenter, max_pending=SCENE_QUEUE_CAPACITY)
        return _RUNTIME
