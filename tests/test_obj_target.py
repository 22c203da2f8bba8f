from __future__ import annotations

import unittest
from unittest import mock

from tessera_core.core.canvas import Canvas
from tessera_core.core.color import Color
from tessera_core.core.elements import GaussianBlur, Stroke
from tessera_core.targets.obj_target import ObjRenderer, ObjSettings


def _lines(text: str, prefix: str) -> list[str]:
    return [line for line in text.splitlines() if line.startswith(prefix)]


def _vertex_z(obj: str) -> list[float]:
    return [float(line.split()[3]) for line in _lines(obj, "v ")]


class ObjRendererTests(unittest.TestCase):
    def test_two_filled_polygons(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_rect((0.0, 0.0), (0.5, 0.5), fill=Color.red())
        canvas.draw_triangle((-0.5, 0.0), (0.0, 0.0), (0.0, -0.5), fill=Color.blue())

        obj, mtl = canvas.render(ObjRenderer())

        self.assertEqual(obj.splitlines()[0], "mtllib canvas.mtl")
        self.assertEqual(_lines(obj, "usemtl "), ["usemtl f0", "usemtl f1"])
        self.assertEqual(_lines(obj, "f "), ["f 1 2 3 4", "f 5 6 7"])
        self.assertEqual(_lines(mtl, "newmtl "), ["newmtl f0", "newmtl f1"])
        self.assertEqual(_lines(mtl, "Kd "), ["Kd 1 0 0", "Kd 0 0 1"])

        z = _vertex_z(obj)
        self.assertEqual(z[:4], [0.0] * 4)
        self.assertEqual(z[4:], [0.01] * 3)

    def test_vertices_stay_in_camera_space(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_rect((0.0, 0.0), (0.5, 0.25), fill=Color.red())
        obj, _ = canvas.render(ObjRenderer())
        self.assertEqual(_lines(obj, "v "), ["v 0 0 0", "v 0.5 0 0", "v 0.5 0.25 0", "v 0 0.25 0"])

    def test_each_element_gets_its_own_layer(self) -> None:
        canvas = Canvas(points_per_unit=10)
        for i in range(3):
            canvas.draw_rect((0.0, 0.0), (0.1 * (i + 1), 0.1), fill=Color.green())
        obj, _ = canvas.render(ObjRenderer(ObjSettings(z_offset=0.5)))
        layers = sorted(set(_vertex_z(obj)))
        self.assertEqual(layers, [0.0, 0.5, 1.0])

    def test_open_polyline_becomes_line(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_polyline([(0.0, 0.0), (0.5, 0.0), (0.5, 0.5)], Stroke(color=Color.white(), width=0.1))
        obj, mtl = canvas.render(ObjRenderer())
        self.assertEqual(_lines(obj, "l "), ["l 1 2 3"])
        self.assertEqual(_lines(obj, "f "), [])
        self.assertEqual(mtl, "")

    def test_unfilled_polygon_uses_shared_black_material(self) -> None:
        canvas = Canvas(points_per_unit=10)
        outline = Stroke(color=Color.white(), width=0.1)
        canvas.draw_rect((0.0, 0.0), (0.5, 0.5), outline)
        canvas.draw_rect((-0.5, -0.5), (0.0, 0.0), outline)
        obj, mtl = canvas.render(ObjRenderer())
        self.assertEqual(_lines(obj, "usemtl "), ["usemtl black", "usemtl black"])
        self.assertEqual(_lines(mtl, "newmtl "), ["newmtl black"])
        self.assertIn("Kd 0 0 0", mtl)

    def test_ellipse_face(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_ellipse((0.0, 0.0), (0.5, 0.25), fill=Color.white())
        obj, _ = canvas.render(ObjRenderer(ObjSettings(ellipse_face_count=8)))
        (face,) = _lines(obj, "f ")
        self.assertEqual(len(face.split()) - 1, 8)

    def test_clusters_are_flattened_and_effects_warned_once(self) -> None:
        canvas = Canvas(points_per_unit=10)
        for _ in range(2):
            with canvas.cluster(GaussianBlur(0.1)):
                canvas.draw_rect((0.0, 0.0), (0.5, 0.5), fill=Color.red())
                canvas.draw_rect((-0.5, -0.5), (0.0, 0.0), fill=Color.red())
        with mock.patch("tessera_core.targets.obj_target.LOGGER") as logger:
            obj, _ = canvas.render(ObjRenderer())
        self.assertEqual(len(_lines(obj, "f ")), 4)
        self.assertEqual(logger.warning.call_count, 1)

    def test_custom_material_file_name(self) -> None:
        obj, _ = Canvas(points_per_unit=10).render(ObjRenderer(ObjSettings(mtl_filename="scene.mtl")))
        self.assertEqual(obj, "mtllib scene.mtl\n")

    def test_invalid_settings_raise(self) -> None:
        with self.assertRaises(ValueError):
            ObjSettings(z_offset=0.0)
        with self.assertRaises(ValueError):
            ObjSettings(ellipse_face_count=2)
        with self.assertRaises(ValueError):
            ObjSettings(mtl_filename="")


if __name__ == "__main__":
    unittest.main()
