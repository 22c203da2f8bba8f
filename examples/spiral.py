"""Eight copies of one spiral, the camera rotated by 45 degrees between them."""

from __future__ import annotations

import math

from tessera_core import Canvas, Color, LineEnd, Stroke


def spiral_points(count: int = 1000) -> list[tuple[float, float]]:
    return [
        (
            n / 500.0 * math.cos(2.0 * math.pi * n / 200.0),
            n / 500.0 * math.sin(2.0 * math.pi * n / 200.0),
        )
        for n in range(count)
    ]


def build_canvas() -> Canvas:
    canvas = Canvas()
    points = spiral_points()
    for i in range(8):
        stroke = Stroke(color=Color.white() * (i / 8.0), width=0.01, line_end=LineEnd.ROUND)
        canvas.draw_shape(points, stroke=stroke)
        canvas.rotate_camera(math.pi / 4.0)
    return canvas
