"""Post-effects: a blurred disc and a cluster that is blurred and tilted as a whole."""

from __future__ import annotations

import math

from tessera_core import Adjust, Canvas, Color, GaussianBlur, Stroke, Transform


def build_canvas() -> Canvas:
    canvas = Canvas()

    canvas.draw_rect((-1.0, -1.0), (1.0, 1.0), fill=Color.black())

    with canvas.cluster(GaussianBlur(std_dev=0.01)):
        canvas.draw_circle((0.4, 0.4), 0.3, fill=Color.red())

    tilt = Adjust.from_transform(Transform(rotation=math.pi / 12.0))
    with canvas.cluster(GaussianBlur(std_dev=0.02), tilt):
        canvas.draw_triangle(
            (-0.8, -0.8),
            (-0.2, -0.2),
            (-0.2, -0.8),
            stroke=Stroke(color=Color(1.0, 0.0, 1.0), width=0.03),
            fill=Color.white(),
        )
        canvas.draw_line((-0.8, -0.8), (-0.2, -0.2), stroke=Stroke(color=Color.white(), width=0.01))
        canvas.draw_ellipse((0.3, -0.5), (0.3, 0.15), rotation=math.pi / 6.0, fill=Color(1.0, 1.0, 1.0, 0.6))
    return canvas
