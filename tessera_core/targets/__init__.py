from .base import DeviceMapping, Renderer, close_seam, has_post_effects, iter_leaf_elements
from .obj_target import ObjRenderer, ObjSettings
from .raster_target import RasterRenderer, RasterSettings
from .svg_target import SvgRenderer, SvgSettings
from .window_target import TriangleMesh, WindowRenderer, WindowScene, WindowSettings, get_display_runtime

__all__ = [
    "DeviceMapping",
    "ObjRenderer",
    "ObjSettings",
    "RasterRenderer",
    "RasterSettings",
    "Renderer",
    "SvgRenderer",
    "SvgSettings",
    "TriangleMesh",
    "WindowRenderer",
    "WindowScene",
    "WindowSettings",
    "close_seam",
    "get_display_runtime",
    "has_post_effects",
    "iter_leaf_elements",
]
