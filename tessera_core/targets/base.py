from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, Iterator, Sequence, TypeVar

from tessera_core.core.elements import Cluster, Element, Ellipse
from tessera_core.core.geometry import Point, close_seam, ellipse_points
from tessera_core.core.transform import Affine2

__all__ = ["DeviceMapping", "Renderer", "close_seam", "ellipse_outline", "has_post_effects", "iter_leaf_elements"]


SettingsT = TypeVar("SettingsT")
OutputT = TypeVar("OutputT")


class Renderer(ABC, Generic[SettingsT, OutputT]):
    """Single-use backend: zero or more `render` calls, then one `finalize`.

    Every element handed to `render` is already in camera space.
    """

    def __init__(self, settings: SettingsT) -> None:
        self._settings = settings
        self._finalized = False

    @property
    def settings(self) -> SettingsT:
        return self._settings

    @property
    def finalized(self) -> bool:
        return self._finalized

    def render(self, element: Element) -> None:
        if self._finalized:
            raise RuntimeError(f"{type(self).__name__} was already finalized")
        self._render(element)

    def finalize(self) -> OutputT:
        if self._finalized:
            raise RuntimeError(f"{type(self).__name__} was already finalized")
        self._finalized = True
        return self._finalize()

    @abstractmethod
    def _render(self, element: Element) -> None:
        raise NotImplementedError

    @abstractmethod
    def _finalize(self) -> OutputT:
        raise NotImplementedError


@dataclass(frozen=True)
class DeviceMapping:
    """Camera space -> device space (pixels / SVG user units).

    Y is flipped because device origins sit at the top-left. The preserved
    axis always spans the full camera range -1..1.
    """

    scale: float
    center_offset: Point

    @classmethod
    def from_size(cls, width: float, height: float, preserve_height: bool = False) -> "DeviceMapping":
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be > 0")
        if preserve_height:
            scale = height / 2.0
            return cls(scale=scale, center_offset=(width / 2.0 / scale, 1.0))
        scale = width / 2.0
        return cls(scale=scale, center_offset=(1.0, height / 2.0 / scale))

    def map(self, point: Point) -> Point:
        x, y = point
        ox, oy = self.center_offset
        return ((x + ox) * self.scale, (-y + oy) * self.scale)

    def map_all(self, points: Sequence[Point]) -> list[Point]:
        return [self.map(p) for p in points]

    def length(self, value: float) -> float:
        return value * self.scale

    def as_affine(self) -> Affine2:
        ox, oy = self.center_offset
        s = self.scale
        return Affine2(a=s, b=0.0, c=0.0, d=-s, tx=ox * s, ty=oy * s)

    def to_device_affine(self, camera_affine: Affine2) -> Affine2:
        return camera_affine.conjugate(self.as_affine())

    def ellipse_rotation(self, rotation: float) -> float:
        return -rotation


def ellipse_outline(element: Ellipse, segments: int) -> list[Point]:
    return ellipse_points(element.center, element.radius, element.rotation, segments)


def iter_leaf_elements(element: Element) -> Iterator[Element]:
    if isinstance(element, Cluster):
        for child in element.children:
            yield from iter_leaf_elements(child)
    else:
        yield element


def has_post_effects(element: Element) -> bool:
    if element.post_effects:
        return True
    if isinstance(element, Cluster):
        return any(has_post_effects(child) for child in element.children)
    return False
