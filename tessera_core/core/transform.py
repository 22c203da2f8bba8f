from __future__ import annotations

from dataclasses import dataclass
import math

from .geometry import ORIGIN, Point


_SINGULAR_EPS = 1e-12


@dataclass(frozen=True)
class Affine2:
    """2D affine map `p -> L p + t` with linear part `[[a, b], [c, d]]`."""

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    @classmethod
    def identity(cls) -> "Affine2":
        return cls()

    @classmethod
    def translation(cls, offset: Point) -> "Affine2":
        return cls(tx=offset[0], ty=offset[1])

    @classmethod
    def rotation(cls, radians: float) -> "Affine2":
        cos = math.cos(radians)
        sin = math.sin(radians)
        return cls(a=cos, b=-sin, c=sin, d=cos)

    @classmethod
    def scaling(cls, sx: float, sy: float | None = None) -> "Affine2":
        return cls(a=sx, d=sx if sy is None else sy)

    def determinant(self) -> float:
        return (self.a * self.d) - (self.b * self.c)

    def compose(self, other: "Affine2") -> "Affine2":
        """Return `self . other`: `other` is applied first."""
        return Affine2(
            a=self.a * other.a + self.b * other.c,
            b=self.a * other.b + self.b * other.d,
            c=self.c * other.a + self.d * other.c,
            d=self.c * other.b + self.d * other.d,
            tx=self.a * other.tx + self.b * other.ty + self.tx,
            ty=self.c * other.tx + self.d * other.ty + self.ty,
        )

    def inverse(self) -> "Affine2":
        det = self.determinant()
        if abs(det) < _SINGULAR_EPS:
            raise ValueError("affine transform is singular")
        ia = self.d / det
        ib = -self.b / det
        ic = -self.c / det
        id_ = self.a / det
        return Affine2(
            a=ia,
            b=ib,
            c=ic,
            d=id_,
            tx=-(ia * self.tx + ib * self.ty),
            ty=-(ic * self.tx + id_ * self.ty),
        )

    def apply(self, point: Point) -> Point:
        x, y = point
        return (self.a * x + self.b * y + self.tx, self.c * x + self.d * y + self.ty)

    def apply_vector(self, vector: Point) -> Point:
        x, y = vector
        return (self.a * x + self.b * y, self.c * x + self.d * y)

    def rotation_angle(self) -> float:
        return math.atan2(self.c, self.a)

    def conjugate(self, basis: "Affine2") -> "Affine2":
        """Express this map in the space reached through `basis`: `B . self . B^-1`."""
        return basis.compose(self).compose(basis.inverse())

    def svg_matrix(self) -> tuple[float, float, float, float, float, float]:
        return (self.a, self.c, self.b, self.d, self.tx, self.ty)

    def pil_coefficients(self) -> tuple[float, float, float, float, float, float]:
        return (self.a, self.b, self.tx, self.c, self.d, self.ty)


@dataclass(frozen=True)
class Transform:
    """Element transform: scale, then rotate (radians), then translate."""

    translate: Point = ORIGIN
    rotation: float = 0.0
    scale: Point = (1.0, 1.0)

    @classmethod
    def one(cls) -> "Transform":
        return cls()

    @classmethod
    def identity(cls) -> "Transform":
        return cls()

    def extract_translate(self) -> "Transform":
        return Transform(translate=self.translate)

    def extract_rotation(self) -> "Transform":
        return Transform(rotation=self.rotation)

    def extract_scale(self) -> "Transform":
        return Transform(scale=self.scale)

    def to_affine(self) -> Affine2:
        return (
            Affine2.translation(self.translate)
            .compose(Affine2.rotation(self.rotation))
            .compose(Affine2.scaling(self.scale[0], self.scale[1]))
        )

    def __add__(self, other: "Transform") -> "Transform":
        return Transform(
            translate=(self.translate[0] + other.translate[0], self.translate[1] + other.translate[1]),
            rotation=self.rotation + other.rotation,
            scale=(self.scale[0] + other.scale[0], self.scale[1] + other.scale[1]),
        )

    def __sub__(self, other: "Transform") -> "Transform":
        return Transform(
            translate=(self.translate[0] - other.translate[0], self.translate[1] - other.translate[1]),
            rotation=self.rotation - other.rotation,
            scale=(self.scale[0] - other.scale[0], self.scale[1] - other.scale[1]),
        )


class Camera:
    """World <-> camera space mapping.

    Translation is stored in world units and is never zoom-scaled:

        camera = M . (world - translation)
        world  = M^-1 . camera + translation

    `M` is a uniform zoom times a rotation; rotations compose on the left.
    """

    def __init__(self) -> None:
        self._matrix = Affine2.identity()
        self._inverse = Affine2.identity()
        self._translation: Point = ORIGIN
        self._zoom = 1.0

    @property
    def matrix(self) -> Affine2:
        return self._matrix

    @property
    def inverse_matrix(self) -> Affine2:
        return self._inverse

    @property
    def translation(self) -> Point:
        return self._translation

    @property
    def zoom_factor(self) -> float:
        return self._zoom

    @property
    def rotation_angle(self) -> float:
        return self._matrix.rotation_angle()

    def rotate(self, radians: float) -> None:
        self._matrix = Affine2.rotation(radians).compose(self._matrix)
        self._inverse = self._matrix.inverse()

    def move(self, delta: Point) -> None:
        self._translation = (self._translation[0] + delta[0], self._translation[1] + delta[1])

    def zoom(self, factor: float) -> None:
        if not factor > 0.0:
            raise ValueError(f"zoom factor must be > 0, got {factor}")
        self._matrix = Affine2.scaling(factor).compose(self._matrix)
        self._inverse = self._matrix.inverse()
        self._zoom *= factor

    def reset(self) -> None:
        self._matrix = Affine2.identity()
        self._inverse = Affine2.identity()
        self._translation = ORIGIN
        self._zoom = 1.0

    def to_camera_space(self, point: Point) -> Point:
        x, y = point
        tx, ty = self._translation
        return self._matrix.apply((x - tx, y - ty))

    def to_world_space(self, point: Point) -> Point:
        x, y = self._inverse.apply(point)
        tx, ty = self._translation
        return (x + tx, y + ty)

    def as_affine(self) -> Affine2:
        """World -> camera map as a single affine transform."""
        return self._matrix.compose(Affine2.translation((-self._translation[0], -self._translation[1])))
