from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
import tomllib
from typing import Any

from .color import Color
from .errors import ColorParseError, ConfigError


POINTS_PER_UNIT_ENV_VAR = "TESSERA_POINTS_PER_UNIT"
DEFAULT_POINTS_PER_UNIT = 100


@dataclass(frozen=True)
class CanvasConfig:
    points_per_unit: int = DEFAULT_POINTS_PER_UNIT

    def __post_init__(self) -> None:
        if self.points_per_unit <= 0:
            raise ValueError("points_per_unit must be > 0")

    @classmethod
    def from_env(cls, env_var: str = POINTS_PER_UNIT_ENV_VAR) -> "CanvasConfig":
        raw = os.getenv(env_var, "").strip()
        if raw == "":
            return cls()
        try:
            value = int(raw)
        except ValueError as exc:
            raise ConfigError(f"{env_var} must be an integer, got `{raw}`") from exc
        if value <= 0:
            raise ConfigError(f"{env_var} must be > 0, got {value}")
        return cls(points_per_unit=value)


@dataclass(frozen=True)
class TesseraConfig:
    """Settings bundle read from a TOML file.

    Each renderer table is kept as keyword arguments for that renderer's
    settings class; colours are already decoded from hex strings.
    """

    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    svg: dict[str, Any] = field(default_factory=dict)
    raster: dict[str, Any] = field(default_factory=dict)
    obj: dict[str, Any] = field(default_factory=dict)
    window: dict[str, Any] = field(default_factory=dict)


_RENDERER_KEYS: dict[str, dict[str, type | tuple[type, ...]]] = {
    "svg": {
        "size": list,
        "background": str,
        "ints_only": bool,
        "preserve_height": bool,
        "circle_threshold": int,
    },
    "raster": {
        "size": list,
        "background": str,
        "antialias": bool,
        "preserve_height": bool,
        "supersample": int,
        "ellipse_segments": int,
    },
    "obj": {
        "z_offset": (int, float),
        "ellipse_face_count": int,
        "mtl_filename": str,
    },
    "window": {
        "window_size": list,
        "background": str,
        "preserve_height": bool,
        "window_title": str,
        "ellipse_segments": int,
    },
}


def load_config(path: str | Path) -> TesseraConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"config file not found: {config_path}")
    with config_path.open("rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {config_path}: {exc}") from exc
    unknown = set(raw) - {"canvas", *_RENDERER_KEYS}
    if unknown:
        raise ConfigError(f"unknown config tables: {sorted(unknown)}")
    canvas = _parse_canvas(raw.get("canvas", {}))
    tables = {name: _parse_renderer_table(name, raw.get(name, {})) for name in _RENDERER_KEYS}
    return TesseraConfig(canvas=canvas, **tables)


def _parse_canvas(table: object) -> CanvasConfig:
    if not isinstance(table, dict):
        raise ConfigError("[canvas] must be a table")
    unknown = set(table) - {"points_per_unit"}
    if unknown:
        raise ConfigError(f"unknown [canvas] keys: {sorted(unknown)}")
    if "points_per_unit" not in table:
        return CanvasConfig.from_env()
    value = table["points_per_unit"]
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError("[canvas] points_per_unit must be a positive integer")
    return CanvasConfig(points_per_unit=value)


def _parse_renderer_table(name: str, table: object) -> dict[str, Any]:
    if not isinstance(table, dict):
        raise ConfigError(f"[{name}] must be a table")
    allowed = _RENDERER_KEYS[name]
    out: dict[str, Any] = {}
    for key, value in table.items():
        if key not in allowed:
            raise ConfigError(f"unknown [{name}] key: {key}")
        expected = allowed[key]
        if isinstance(value, bool) and expected is not bool:
            raise ConfigError(f"[{name}] {key} has the wrong type")
        if not isinstance(value, expected):
            raise ConfigError(f"[{name}] {key} has the wrong type")
        if key == "background":
            try:
                out[key] = Color.from_hex(value)
            except ColorParseError as exc:
                raise ConfigError(f"[{name}] background: {exc}") from exc
        elif key in ("size", "window_size"):
            out[key] = _parse_size(name, key, value)
        else:
            out[key] = value
    return out


def _parse_size(name: str, key: str, value: list[Any]) -> tuple[int, int]:
    if len(value) != 2 or not all(isinstance(v, int) and not isinstance(v, bool) for v in value):
        raise ConfigError(f"[{name}] {key} must be a [width, height] pair of integers")
    return (value[0], value[1])
