from __future__ import annotations

import os
from pathlib import Path
import tempfile
import unittest
from unittest import mock

from tessera_core.core.color import Color
from tessera_core.core.config import (
    DEFAULT_POINTS_PER_UNIT,
    POINTS_PER_UNIT_ENV_VAR,
    CanvasConfig,
    load_config,
)
from tessera_core.core.errors import ConfigError
from tessera_core.targets.raster_target import RasterSettings
from tessera_core.targets.svg_target import SvgSettings


class ConfigTests(unittest.TestCase):
    def _write(self, text: str) -> Path:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        path = Path(tmp.name) / "tessera.toml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_env_default(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(CanvasConfig.from_env().points_per_unit, DEFAULT_POINTS_PER_UNIT)

    def test_env_rejects_non_positive(self) -> None:
        with mock.patch.dict(os.environ, {POINTS_PER_UNIT_ENV_VAR: "0"}):
            with self.assertRaises(ConfigError):
                CanvasConfig.from_env()

    def test_load_full_config(self) -> None:
        path = self._write(
            """
[canvas]
points_per_unit = 250

[svg]
size = [200, 100]
background = "#ffffff"
ints_only = true

[raster]
size = [64, 32]
antialias = false

[obj]
z_offset = 0.5
mtl_filename = "scene.mtl"

[window]
window_title = "demo"
"""
        )
        config = load_config(path)
        self.assertEqual(config.canvas.points_per_unit, 250)
        self.assertEqual(config.svg["size"], (200, 100))
        self.assertEqual(config.svg["background"], Color.white())
        self.assertTrue(config.svg["ints_only"])
        self.assertEqual(config.obj, {"z_offset": 0.5, "mtl_filename": "scene.mtl"})
        self.assertEqual(config.window, {"window_title": "demo"})

        svg = SvgSettings(**config.svg)
        self.assertEqual(svg.size, (200, 100))
        raster = RasterSettings(**config.raster)
        self.assertFalse(raster.antialias)
        self.assertEqual(raster.effective_supersample, 1)

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_config("/nonexistent/tessera.toml")

    def test_invalid_toml(self) -> None:
        with self.assertRaises(ConfigError):
            load_config(self._write("[svg\nsize = "))

    def test_unknown_table_and_key(self) -> None:
        with self.assertRaises(ConfigError):
            load_config(self._write("[skia]\nsize = [1, 1]\n"))
        with self.assertRaises(ConfigError):
            load_config(self._write("[svg]\ncolour = 1\n"))

    def test_wrong_value_types(self) -> None:
        for text in (
            "[svg]\nints_only = 1\n",
            "[raster]\nsupersample = true\n",
            "[raster]\nsize = [10]\n",
            "[raster]\nsize = [10.5, 4]\n",
            "[canvas]\npoints_per_unit = -3\n",
        ):
            with self.subTest(text=text):
                with self.assertRaises(ConfigError):
                    load_config(self._write(text))

    def test_bad_background_hex(self) -> None:
        with self.assertRaises(ConfigError):
            load_config(self._write('[window]\nbackground = "#12"\n'))


if __name__ == "__main__":
    unittest.main()
