from __future__ import annotations

from dataclasses import dataclass, replace
import string

from .errors import InvalidHexDigitError, TruncatedHexError


_HEX_DIGITS = frozenset(string.hexdigits)


@dataclass(frozen=True)
class Color:
    """RGBA colour with floating point channels, canonically in 0..1."""

    r: float
    g: float
    b: float
    a: float = 1.0

    @classmethod
    def white(cls) -> "Color":
        return cls(1.0, 1.0, 1.0, 1.0)

    @classmethod
    def black(cls) -> "Color":
        return cls(0.0, 0.0, 0.0, 1.0)

    @classmethod
    def red(cls) -> "Color":
        return cls(1.0, 0.0, 0.0, 1.0)

    @classmethod
    def green(cls) -> "Color":
        return cls(0.0, 1.0, 0.0, 1.0)

    @classmethod
    def blue(cls) -> "Color":
        return cls(0.0, 0.0, 1.0, 1.0)

    @classmethod
    def transparent(cls) -> "Color":
        return cls(0.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_rgba8(cls, r: int, g: int, b: int, a: int = 255) -> "Color":
        return cls(r / 255.0, g / 255.0, b / 255.0, a / 255.0)

    @classmethod
    def from_hsv(cls, hue: float, saturation: float, value: float) -> "Color":
        """Build an opaque colour from HSV components, each in 0..1."""
        if hue + saturation + value > 3.0:
            raise ValueError("all HSV values must be <= 1.0")
        hp = hue / (1.0 / 6.0)
        c = saturation * value
        x = c * (1.0 - abs(hp % 2.0 - 1.0))
        m = value - c
        r = g = b = 0.0
        if hp <= 1.0:
            r, g = c, x
        elif hp <= 2.0:
            r, g = x, c
        elif hp <= 3.0:
            g, b = c, x
        elif hp <= 4.0:
            g, b = x, c
        elif hp <= 5.0:
            r, b = x, c
        else:
            r, b = c, x
        return cls(r + m, g + m, b + m, 1.0)

    @classmethod
    def from_hex(cls, text: str) -> "Color":
        """Parse `#RRGGBB`, `#RRGGBBAA`, `0xRRGGBB` or a bare digit string.

        Missing alpha defaults to fully opaque.
        """
        digits = text.strip()
        if digits.startswith("#"):
            digits = digits[1:]
        elif digits.startswith(("0x", "0X")):
            digits = digits[2:]
        bad = [ch for ch in digits if ch not in _HEX_DIGITS]
        if bad:
            raise InvalidHexDigitError(text, f"invalid hex digit `{bad[0]}`")
        if len(digits) < 6:
            raise TruncatedHexError(text, "expected at least 6 hex digits")
        if len(digits) == 7:
            raise TruncatedHexError(text, "alpha channel needs 2 hex digits")
        if len(digits) > 8:
            raise InvalidHexDigitError(text, "too many hex digits")
        channels = [int(digits[i : i + 2], 16) for i in range(0, len(digits), 2)]
        if len(channels) == 3:
            channels.append(255)
        return cls.from_rgba8(*channels)

    def as_hex(self, include_alpha: bool = False) -> str:
        r, g, b, a = self.to_rgba8()
        if include_alpha:
            return f"#{r:02X}{g:02X}{b:02X}{a:02X}"
        return f"#{r:02X}{g:02X}{b:02X}"

    def clamped(self) -> "Color":
        return Color(_clamp01(self.r), _clamp01(self.g), _clamp01(self.b), _clamp01(self.a))

    def to_rgba8(self) -> tuple[int, int, int, int]:
        c = self.clamped()
        return (
            int(round(c.r * 255.0)),
            int(round(c.g * 255.0)),
            int(round(c.b * 255.0)),
            int(round(c.a * 255.0)),
        )

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.r, self.g, self.b, self.a)

    def with_r(self, r: float) -> "Color":
        return replace(self, r=r)

    def with_g(self, g: float) -> "Color":
        return replace(self, g=g)

    def with_b(self, b: float) -> "Color":
        return replace(self, b=b)

    def with_a(self, a: float) -> "Color":
        return replace(self, a=a)

    def _zip(self, other: "Color | float", op) -> "Color":
        if isinstance(other, Color):
            return Color(op(self.r, other.r), op(self.g, other.g), op(self.b, other.b), op(self.a, other.a))
        if isinstance(other, (int, float)):
            return Color(op(self.r, other), op(self.g, other), op(self.b, other), op(self.a, other))
        return NotImplemented

    def __add__(self, other: "Color | float") -> "Color":
        return self._zip(other, lambda x, y: x + y)

    def __sub__(self, other: "Color | float") -> "Color":
        return self._zip(other, lambda x, y: x - y)

    def __mul__(self, other: "Color | float") -> "Color":
        return self._zip(other, lambda x, y: x * y)

    def __rmul__(self, other: float) -> "Color":
        return self._zip(other, lambda x, y: y * x)

    def __truediv__(self, other: "Color | float") -> "Color":
        return self._zip(other, lambda x, y: x / y)

    def __mod__(self, other: "Color | float") -> "Color":
        return self._zip(other, lambda x, y: x % y)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))
