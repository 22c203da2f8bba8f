from __future__ import annotations

import math
import unittest

import numpy as np

from tessera_core import Canvas, Color, GaussianBlur, LineEnd, Stroke
from tessera_core.targets import (
    ObjRenderer,
    RasterRenderer,
    RasterSettings,
    SvgRenderer,
    SvgSettings,
    WindowRenderer,
    WindowSettings,
)


class _RecordingRuntime:
    def __init__(self) -> None:
        self.scenes = []

    def submit(self, scene, timeout=None) -> None:
        self.scenes.append(scene)


def _scene() -> Canvas:
    canvas = Canvas(points_per_unit=40)
    canvas.draw_rect((-1.0, -1.0), (1.0, 1.0), fill=Color.black())
    canvas.move_camera((0.25, 0.0))
    canvas.draw_circle((0.0, 0.0), 0.25, Stroke(color=Color.white(), width=0.02), Color.red())
    canvas.reset_camera()
    with canvas.cluster(GaussianBlur(0.01)):
        canvas.draw_path(
            Stroke(color=Color.white(), width=0.05, line_end=LineEnd.ROUND),
            None,
            lambda p: p.move_to((-0.8, -0.8)).cubic_bezier_to((0.8, -0.8), (-0.4, -0.2), (0.4, -0.2)),
        )
    return canvas


class RendererEndToEndTests(unittest.TestCase):
    def test_same_scene_through_every_backend(self) -> None:
        svg = _scene().render(SvgRenderer(SvgSettings(size=(80, 80))))
        self.assertIn("<circle", svg)
        self.assertIn("feGaussianBlur", svg)

        image = _scene().render(RasterRenderer(RasterSettings(size=(80, 80))))
        pixels = np.asarray(image)
        # The circle was drawn with the camera moved, so its centre is world (0.25, 0).
        self.assertEqual(tuple(pixels[40, 50]), (255, 0, 0, 255))
        self.assertEqual(tuple(pixels[2, 2]), (0, 0, 0, 255))

        obj, mtl = _scene().render(ObjRenderer())
        self.assertEqual(obj.count("usemtl "), 2)
        self.assertEqual(obj.count("\nl "), 1)
        self.assertIn("newmtl f1", mtl)

        runtime = _RecordingRuntime()
        _scene().render(WindowRenderer(WindowSettings(window_size=(80, 80)), runtime=runtime))
        (scene,) = runtime.scenes
        colors = [mesh.color for mesh in scene.meshes]
        self.assertEqual(colors, [Color.black(), Color.red(), Color.white(), Color.white()])

    def test_camera_zoom_scales_stroke_width_at_render_time(self) -> None:
        canvas = Canvas(points_per_unit=20)
        canvas.draw_line((-0.5, 0.0), (0.5, 0.0), Stroke(color=Color.white(), width=0.1))
        canvas.zoom_camera(2.0)
        svg = canvas.render(SvgRenderer(SvgSettings(size=(100, 100))))
        self.assertIn('stroke-width="10"', svg)

    def test_rotated_camera_rotates_ellipse(self) -> None:
        canvas = Canvas(points_per_unit=20)
        canvas.draw_ellipse((0.0, 0.0), (0.5, 0.25), fill=Color.white())
        canvas.rotate_camera(math.pi / 2.0)
        svg = canvas.render(SvgRenderer(SvgSettings(size=(100, 100))))
        self.assertIn('transform="rotate(-90 50 50)"', svg)


if __name__ == "__main__":
    unittest.main()
