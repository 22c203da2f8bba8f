"""Smiley face: a filled circle, two round-capped eyes and a bezier mouth."""

from __future__ import annotations

from tessera_core import Canvas, Color, LineEnd, Stroke


def build_canvas() -> Canvas:
    # The camera spans -1..1 on both axes.
    canvas = Canvas(points_per_unit=200)

    canvas.draw_circle((0.0, 0.0), 1.0, fill=Color.from_hex("#fecb00"))

    eye = Stroke(color=Color.black(), width=0.2, line_end=LineEnd.ROUND)
    canvas.draw_line((-0.5, 0.25), (-0.5, 0.0), stroke=eye)
    canvas.draw_line((0.5, 0.25), (0.5, 0.0), stroke=eye)

    canvas.draw_quadratic_bezier((-0.5, -0.3), (0.0, -0.5), (0.5, -0.3), fill=Color.black())
    return canvas
