from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Sequence

from tessera_core.core.color import Color
from tessera_core.core.elements import Blank, Element, Ellipse, Shape
from tessera_core.core.geometry import Point

from .base import Renderer, ellipse_outline, has_post_effects, iter_leaf_elements

LOGGER = logging.getLogger(__name__)

DEFAULT_MATERIAL = "black"


@dataclass(frozen=True)
class ObjSettings:
    z_offset: float = 0.01
    ellipse_face_count: int = 32
    mtl_filename: str = "canvas.mtl"

    def __post_init__(self) -> None:
        if not self.z_offset > 0:
            raise ValueError("z_offset must be > 0")
        if self.ellipse_face_count < 3:
            raise ValueError("ellipse_face_count must be >= 3")
        if not self.mtl_filename:
            raise ValueError("mtl_filename must not be empty")


class ObjRenderer(Renderer[ObjSettings, tuple[str, str]]):
    """Exports elements as flat Wavefront OBJ slices stacked along Z.

    Coordinates stay in camera space. Strokes, alpha and post-effects have
    no OBJ counterpart and are dropped; closed shapes without a fill use the
    shared `black` material.
    """

    def __init__(self, settings: ObjSettings | None = None) -> None:
        super().__init__(settings or ObjSettings())
        self._obj: list[str] = [f"mtllib {self.settings.mtl_filename}"]
        self._mtl: list[str] = []
        self._vertex_count = 0
        self._layer = 0
        self._face_index = 0
        self._default_material_declared = False
        self._warned_effects = False

    def _render(self, element: Element) -> None:
        if has_post_effects(element) and not self._warned_effects:
            LOGGER.warning("OBJ export ignores post-effects")
            self._warned_effects = True
        for leaf in iter_leaf_elements(element):
            if isinstance(leaf, Shape):
                self._emit_shape(leaf)
            elif isinstance(leaf, Ellipse):
                ring = ellipse_outline(leaf, self.settings.ellipse_face_count)
                self._emit_face(ring[:-1], leaf.fill)
            elif not isinstance(leaf, Blank):
                raise TypeError(f"unsupported canvas element: {type(leaf).__name__}")

    def _finalize(self) -> tuple[str, str]:
        LOGGER.debug("finalizing OBJ export: %d vertices, %d faces", self._vertex_count, self._face_index)
        return "\n".join(self._obj) + "\n", "\n".join(self._mtl) + ("\n" if self._mtl else "")

    def _emit_shape(self, shape: Shape) -> None:
        if shape.is_polygon:
            self._emit_face(shape.points[:-1], shape.fill)
        elif shape.fill is not None:
            self._emit_face(shape.points, shape.fill)
        else:
            indices = self._emit_vertices(shape.points)
            self._obj.append("l " + " ".join(indices))
            self._layer += 1

    def _emit_face(self, ring: Sequence[Point], fill: Color | None) -> None:
        if len(ring) < 3:
            LOGGER.debug("skipping face with %d vertices", len(ring))
            return
        indices = self._emit_vertices(ring)
        self._obj.append(f"usemtl {self._material(fill)}")
        self._obj.append("f " + " ".join(indices))
        self._face_index += 1
        self._layer += 1

    def _emit_vertices(self, points: Sequence[Point]) -> list[str]:
        z = self._layer * self.settings.z_offset
        first = self._vertex_count + 1
        for x, y in points:
            self._obj.append(f"v {_fmt(x)} {_fmt(y)} {_fmt(z)}")
        self._vertex_count += len(points)
        return [str(i) for i in range(first, self._vertex_count + 1)]

    def _material(self, fill: Color | None) -> str:
        if fill is None:
            if not self._default_material_declared:
                self._mtl.extend([f"newmtl {DEFAULT_MATERIAL}", "Kd 0 0 0"])
                self._default_material_declared = True
            return DEFAULT_MATERIAL
        name = f"f{self._face_index}"
        self._mtl.extend([f"newmtl {name}", f"Kd {_fmt(fill.r)} {_fmt(fill.g)} {_fmt(fill.b)}"])
        return name


def _fmt(value: float) -> str:
    text = format(float(value), ".6g")
    return "0" if text == "-0" else text
