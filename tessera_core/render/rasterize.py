from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from tessera_core.core.geometry import Point, signed_area


def coverage_mask(
    polygons: Iterable[Sequence[Point]],
    width: int,
    height: int,
    supersample: int = 1,
) -> np.ndarray:
    """Fraction of every pixel covered by the polygons, non-zero winding rule.

    Polygons are in pixel coordinates and are closed implicitly. Winding is
    accumulated over all polygons, so same-orientation polygons union while
    opposite ones cancel. The scan runs on a `supersample`x finer grid and
    is averaged back down to `(height, width)` float32 values in 0..1.
    """
    if supersample < 1:
        raise ValueError("supersample must be >= 1")
    ss = supersample
    grid_w = width * ss
    grid_h = height * ss
    delta = np.zeros((grid_h, grid_w + 1), dtype=np.int32)

    for polygon in polygons:
        if len(polygon) < 3:
            continue
        pts = np.asarray(polygon, dtype=np.float64) * ss
        if not np.isfinite(pts).all():
            continue
        _accumulate_edges(delta, pts, grid_h, grid_w)

    winding = np.cumsum(delta, axis=1)[:, :grid_w]
    inside = (winding != 0).astype(np.float32)
    if ss == 1:
        return inside
    return inside.reshape(height, ss, width, ss).mean(axis=(1, 3), dtype=np.float32)


def _accumulate_edges(delta: np.ndarray, pts: np.ndarray, grid_h: int, grid_w: int) -> None:
    x0, y0 = pts[:, 0], pts[:, 1]
    nxt = np.roll(pts, -1, axis=0)
    x1, y1 = nxt[:, 0], nxt[:, 1]

    sloped = y0 != y1
    if not sloped.any():
        return
    x0, y0, x1, y1 = x0[sloped], y0[sloped], x1[sloped], y1[sloped]
    winding = np.where(y1 > y0, 1, -1).astype(np.int32)

    # Rows whose sample centre (r + 0.5) lies in [ymin, ymax).
    row_start = np.ceil(np.minimum(y0, y1) - 0.5).astype(np.int64)
    row_end = np.ceil(np.maximum(y0, y1) - 0.5).astype(np.int64)
    row_start = np.clip(row_start, 0, grid_h)
    row_end = np.clip(row_end, 0, grid_h)
    counts = np.maximum(row_end - row_start, 0)
    total = int(counts.sum())
    if total == 0:
        return

    edge = np.repeat(np.arange(counts.size), counts)
    first = np.repeat(np.cumsum(counts) - counts, counts)
    rows = row_start[edge] + (np.arange(total) - first)

    yc = rows + 0.5
    t = (yc - y0[edge]) / (y1[edge] - y0[edge])
    xi = x0[edge] + t * (x1[edge] - x0[edge])
    cols = np.clip(np.ceil(xi - 0.5), 0, grid_w).astype(np.int64)
    np.add.at(delta, (rows, cols), winding[edge])


def oriented(polygons: Iterable[Sequence[Point]]) -> list[list[Point]]:
    """Return the polygons all wound the same way so their union has no holes."""
    out: list[list[Point]] = []
    for polygon in polygons:
        ring = list(polygon)
        if signed_area(ring) < 0:
            ring.reverse()
        out.append(ring)
    return out
