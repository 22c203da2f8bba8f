from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from PIL import Image, ImageFilter

from tessera_core.core.color import Color
from tessera_core.core.transform import Affine2


@dataclass
class FrameBuffer:
    """Premultiplied float RGBA layer of shape `(height, width, 4)`."""

    width: int
    height: int
    background: Optional[Color] = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"frame buffer size must be > 0, got {self.width}x{self.height}")
        self.pixels = np.zeros((self.height, self.width, 4), dtype=np.float32)
        self.clear(self.background)

    def clear(self, color: Color | None = None) -> None:
        if color is None:
            self.pixels.fill(0.0)
            return
        self.pixels[...] = _premultiplied(color)

    def new_layer(self) -> "FrameBuffer":
        return FrameBuffer(self.width, self.height)

    def fill_coverage(self, coverage: np.ndarray, color: Color) -> None:
        """Paint `color` over the buffer, weighted by a `(height, width)` coverage mask."""
        src = coverage[..., None] * _premultiplied(color)
        self._over(src)

    def composite(self, layer: "FrameBuffer") -> None:
        if (layer.width, layer.height) != (self.width, self.height):
            raise ValueError("layer size does not match the frame buffer")
        self._over(layer.pixels)

    def gaussian_blur(self, std_dev: float) -> None:
        if std_dev <= 0:
            return
        image = self._to_premultiplied_image().filter(ImageFilter.GaussianBlur(radius=std_dev))
        self._load_premultiplied_image(image)

    def transform(self, affine: Affine2) -> None:
        """Move the layer content through `affine` (pixel coordinates)."""
        # Pillow maps output pixels back to input pixels.
        inverse = affine.inverse()
        image = self._to_premultiplied_image().transform(
            (self.width, self.height),
            Image.Transform.AFFINE,
            data=inverse.pil_coefficients(),
            resample=Image.Resampling.BILINEAR,
        )
        self._load_premultiplied_image(image)

    def to_image(self) -> Image.Image:
        """Straight-alpha RGBA image of the buffer."""
        alpha = self.pixels[..., 3:4]
        rgb = np.divide(self.pixels[..., :3], alpha, out=np.zeros_like(self.pixels[..., :3]), where=alpha > 0)
        straight = np.concatenate([rgb, alpha], axis=2)
        return Image.fromarray(_to_uint8(straight))

    def _over(self, src: np.ndarray) -> None:
        src_alpha = src[..., 3:4]
        self.pixels *= 1.0 - src_alpha
        self.pixels += src

    def _to_premultiplied_image(self) -> Image.Image:
        # Channels are filtered independently, so premultiplied bytes go through unchanged.
        return Image.fromarray(_to_uint8(self.pixels))

    def _load_premultiplied_image(self, image: Image.Image) -> None:
        self.pixels = np.asarray(image, dtype=np.float32) / 255.0


def _premultiplied(color: Color) -> np.ndarray:
    c = color.clamped()
    return np.array([c.r * c.a, c.g * c.a, c.b * c.a, c.a], dtype=np.float32)


def _to_uint8(pixels: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(pixels * 255.0), 0, 255).astype(np.uint8)
