from __future__ import annotations

import math
import os
import unittest
from unittest import mock

from tessera_core.core.canvas import Canvas
from tessera_core.core.color import Color
from tessera_core.core.config import POINTS_PER_UNIT_ENV_VAR
from tessera_core.core.elements import Cluster, Ellipse, GaussianBlur, Shape, Stroke, polyline
from tessera_core.core.errors import ConfigError
from tessera_core.targets.base import Renderer


STROKE = Stroke(color=Color.black(), width=0.1)


class _RecordingRenderer(Renderer[None, list]):
    def __init__(self) -> None:
        super().__init__(None)
        self.elements: list = []

    def _render(self, element) -> None:
        self.elements.append(element)

    def _finalize(self) -> list:
        return list(self.elements)


class CanvasDrawingTests(unittest.TestCase):
    def test_degenerate_shapes_are_dropped(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_shape([])
        canvas.draw_shape([(0.5, 0.5)], STROKE)
        canvas.draw_shape([(0.5, 0.5), (0.5, 0.5), (0.5, 0.5)], STROKE)
        canvas.draw_shape_absolute([(0.5, 0.5)], STROKE)
        self.assertEqual(len(canvas), 0)

    def test_draw_shape_dedups_but_absolute_keeps_points(self) -> None:
        canvas = Canvas(points_per_unit=10)
        points = [(0.0, 0.0), (0.0, 0.0), (1.0, 0.0)]
        canvas.draw_shape(points, STROKE)
        canvas.draw_shape_absolute(points, STROKE)
        relative, absolute = canvas.as_raw()
        self.assertEqual(relative.points, ((0.0, 0.0), (1.0, 0.0)))
        self.assertEqual(absolute.points, ((0.0, 0.0), (0.0, 0.0), (1.0, 0.0)))

    def test_polygon_classification_is_exact(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_shape([(0.0, 0.0), (1.0, 0.0), (0.0, 1.0), (0.0, 0.0)], fill=Color.red())
        canvas.draw_shape([(0.0, 0.0), (1.0, 0.0), (0.0, 1.0), (1e-6, 0.0)], fill=Color.red())
        closed, open_ = canvas.as_raw()
        self.assertTrue(closed.is_polygon)
        self.assertFalse(open_.is_polygon)

    def test_regular_polygon_invariant(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_regular_polygon((0.25, -0.25), 6, 0.5, fill=Color.red())
        (shape,) = canvas.as_raw()
        self.assertEqual(len(shape.points), 7)
        self.assertEqual(shape.points[0], shape.points[-1])
        for x, y in shape.points[:-1]:
            self.assertAlmostEqual(math.hypot(x - 0.25, y + 0.25), 0.5, places=9)

    def test_regular_polygon_rejects_fewer_than_three_sides(self) -> None:
        with self.assertRaises(ValueError):
            Canvas(points_per_unit=10).draw_regular_polygon((0.0, 0.0), 2, 1.0)

    def test_circle_side_count_and_tiny_circle_skip(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_circle((0.0, 0.0), 1.0, fill=Color.red())
        canvas.draw_circle((0.0, 0.0), 0.01, fill=Color.red())
        self.assertEqual(len(canvas), 1)
        self.assertEqual(len(canvas.as_raw()[0].points), int(2 * math.pi * 10) + 1)

    def test_single_point_line_raises(self) -> None:
        with self.assertRaises(ValueError):
            Canvas(points_per_unit=10).draw_line((0.1, 0.1), (0.1, 0.1), STROKE)

    def test_polygon_helpers_close_the_ring(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_triangle((0.0, 0.0), (1.0, 0.0), (0.0, 1.0), fill=Color.red())
        canvas.draw_quad((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0), STROKE)
        canvas.draw_rect((-0.9, -0.9), (0.9, 0.9), fill=Color.red())
        for shape in canvas.as_raw():
            self.assertTrue(shape.is_polygon)
        self.assertEqual([len(s.points) for s in canvas.as_raw()], [4, 5, 5])

    def test_draw_polyline_stays_open(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_polyline([(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)], STROKE)
        (shape,) = canvas.as_raw()
        self.assertFalse(shape.is_polygon)
        self.assertIsNone(shape.fill)

    def test_ellipse_with_zero_radius_is_skipped(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_ellipse((0.0, 0.0), (0.0, 0.5), fill=Color.red())
        canvas.draw_ellipse((0.0, 0.0), (0.3, 0.5), fill=Color.red())
        self.assertEqual(len(canvas), 1)
        self.assertIsInstance(canvas.as_raw()[0], Ellipse)

    def test_quadratic_bezier_ends_on_end_point(self) -> None:
        canvas = Canvas(points_per_unit=20)
        canvas.draw_quadratic_bezier((-0.5, -0.3), (0.0, -0.5), (0.5, -0.3), STROKE)
        (shape,) = canvas.as_raw()
        self.assertEqual(shape.points[0], (-0.5, -0.3))
        self.assertAlmostEqual(shape.points[-1][0], 0.5)
        self.assertAlmostEqual(shape.points[-1][1], -0.3)

    def test_draw_path_accepts_builder_returning_none(self) -> None:
        canvas = Canvas(points_per_unit=10)

        def build(path) -> None:
            path.move_to((0.0, 0.0))
            path.line_to((0.5, 0.5))

        canvas.draw_path(STROKE, None, build)
        self.assertEqual(canvas.as_raw()[0].points, ((0.0, 0.0), (0.5, 0.5)))


class CanvasCameraTests(unittest.TestCase):
    def test_shapes_are_stored_in_world_space(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.move_camera((1.0, 0.0))
        canvas.zoom_camera(2.0)
        canvas.draw_line((0.0, 0.0), (1.0, 0.0), STROKE)
        (shape,) = canvas.as_raw()
        self.assertEqual(shape.points, ((1.0, 0.0), (1.5, 0.0)))

    def test_later_camera_moves_do_not_change_stored_shapes(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_line((0.0, 0.0), (1.0, 0.0), STROKE)
        canvas.rotate_camera(1.0)
        canvas.move_camera((3.0, 3.0))
        self.assertEqual(canvas.as_raw()[0].points, ((0.0, 0.0), (1.0, 0.0)))

    def test_draw_element_converts_lengths_to_world_units(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.zoom_camera(2.0)
        canvas.draw_ellipse((0.0, 0.0), (0.4, 0.2), stroke=STROKE)
        (ellipse,) = canvas.as_raw()
        self.assertAlmostEqual(ellipse.radius[0], 0.2)
        self.assertAlmostEqual(ellipse.radius[1], 0.1)
        self.assertAlmostEqual(ellipse.stroke.width, 0.05)

    def test_render_maps_elements_into_camera_space(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_line((0.0, 0.0), (0.5, 0.0), Stroke(color=Color.black(), width=0.1))
        canvas.draw_ellipse((0.0, 0.0), (0.4, 0.2), fill=Color.red())
        canvas.zoom_camera(2.0)
        canvas.rotate_camera(math.pi / 2.0)

        rendered = canvas.render(_RecordingRenderer())

        line, ellipse = rendered
        x, y = line.points[1]
        self.assertAlmostEqual(x, 0.0)
        self.assertAlmostEqual(y, 1.0)
        self.assertAlmostEqual(line.stroke.width, 0.2)
        self.assertAlmostEqual(ellipse.radius[0], 0.8)
        self.assertAlmostEqual(ellipse.rotation, math.pi / 2.0)
        # Stored elements are untouched by rendering.
        self.assertEqual(canvas.as_raw()[0].points, ((0.0, 0.0), (0.5, 0.0)))

    def test_renderer_is_single_use(self) -> None:
        canvas = Canvas(points_per_unit=10)
        renderer = _RecordingRenderer()
        canvas.render(renderer)
        with self.assertRaises(RuntimeError):
            canvas.render(renderer)

    def test_to_camera_and_world_space(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.move_camera((1.0, 1.0))
        self.assertEqual(canvas.to_camera_space((0.0, 0.0)), (-1.0, -1.0))
        self.assertEqual(canvas.to_world_space((-1.0, -1.0)), (0.0, 0.0))
        canvas.reset_camera()
        self.assertEqual(canvas.to_camera_space((0.0, 0.0)), (0.0, 0.0))


class CanvasListTests(unittest.TestCase):
    def test_undo_pops_last_element(self) -> None:
        canvas = Canvas(points_per_unit=10)
        self.assertIsNone(canvas.undo())
        canvas.draw_line((0.0, 0.0), (1.0, 0.0), STROKE)
        canvas.draw_line((0.0, 0.0), (0.0, 1.0), STROKE)
        last = canvas.undo()
        self.assertEqual(last.points[-1], (0.0, 1.0))
        self.assertEqual(len(canvas), 1)

    def test_raw_access(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_line((0.0, 0.0), (1.0, 0.0), STROKE)
        self.assertIsInstance(canvas.as_raw(), tuple)
        canvas.as_raw_mut().append(polyline([(0.0, 0.0), (2.0, 0.0)], STROKE))
        self.assertEqual(len(canvas), 2)
        taken = canvas.to_raw()
        self.assertEqual(len(taken), 2)
        self.assertEqual(len(canvas), 0)

    def test_clear(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_line((0.0, 0.0), (1.0, 0.0), STROKE)
        canvas.clear()
        self.assertEqual(len(canvas), 0)


class CanvasClusterTests(unittest.TestCase):
    def test_cluster_collects_children_with_effects(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.draw_line((0.0, 0.0), (1.0, 0.0), STROKE)
        with canvas.cluster(GaussianBlur(0.1)):
            canvas.draw_rect((0.0, 0.0), (0.5, 0.5), fill=Color.red())
            with canvas.cluster():
                canvas.draw_line((0.0, 0.0), (0.0, 1.0), STROKE)
        self.assertEqual(len(canvas), 2)
        cluster = canvas.as_raw()[1]
        self.assertIsInstance(cluster, Cluster)
        self.assertEqual(cluster.post_effects, (GaussianBlur(0.1),))
        self.assertIsInstance(cluster.children[0], Shape)
        self.assertIsInstance(cluster.children[1], Cluster)

    def test_empty_cluster_is_dropped(self) -> None:
        canvas = Canvas(points_per_unit=10)
        with canvas.cluster(GaussianBlur(0.1)):
            canvas.draw_shape([(0.0, 0.0)])
        self.assertEqual(len(canvas), 0)

    def test_cluster_discarded_when_block_raises(self) -> None:
        canvas = Canvas(points_per_unit=10)
        with self.assertRaises(ValueError):
            with canvas.cluster():
                canvas.draw_line((0.0, 0.0), (1.0, 0.0), STROKE)
                canvas.draw_line((0.0, 0.0), (0.0, 0.0), STROKE)
        self.assertEqual(len(canvas), 0)
        canvas.draw_line((0.0, 0.0), (1.0, 0.0), STROKE)
        self.assertIsInstance(canvas.as_raw()[0], Shape)

    def test_blur_deviation_scales_with_zoom(self) -> None:
        canvas = Canvas(points_per_unit=10)
        canvas.zoom_camera(4.0)
        with canvas.cluster(GaussianBlur(0.4)):
            canvas.draw_line((0.0, 0.0), (1.0, 0.0), STROKE)
        (cluster,) = canvas.render(_RecordingRenderer())
        self.assertAlmostEqual(cluster.post_effects[0].std_dev, 1.6)


class CanvasConfigTests(unittest.TestCase):
    def test_points_per_unit_from_environment(self) -> None:
        with mock.patch.dict(os.environ, {POINTS_PER_UNIT_ENV_VAR: "25"}):
            self.assertEqual(Canvas().points_per_unit, 25)

    def test_invalid_environment_value_raises(self) -> None:
        with mock.patch.dict(os.environ, {POINTS_PER_UNIT_ENV_VAR: "many"}):
            with self.assertRaises(ConfigError):
                Canvas()

    def test_explicit_points_per_unit_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            Canvas(points_per_unit=0)


if __name__ == "__main__":
    unittest.main()
