from .framebuffer import FrameBuffer
from .rasterize import coverage_mask, oriented
from .stroke import round_cap, stroke_polygons
from .svg import SvgDocument

__all__ = ["FrameBuffer", "SvgDocument", "coverage_mask", "oriented", "round_cap", "stroke_polygons"]
