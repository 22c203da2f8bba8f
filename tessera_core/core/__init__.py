from .canvas import Canvas
from .color import Color
from .config import CanvasConfig, TesseraConfig, load_config
from .display_runtime import DisplayRuntime, PresentTick, ScenePresenter
from .elements import (
    Adjust,
    Blank,
    Cluster,
    Element,
    ElementKind,
    Ellipse,
    GaussianBlur,
    LineEnd,
    PostEffect,
    Shape,
    Stroke,
    map_element,
    polygon,
    polyline,
)
from .errors import ColorParseError, ConfigError, InvalidHexDigitError, TruncatedHexError
from .geometry import Point, ellipse_points, rect_polygon_points, regular_polygon_points
from .path_builder import PathBuilder
from .transform import Affine2, Camera, Transform

__all__ = [
    "Adjust",
    "Affine2",
    "Blank",
    "Camera",
    "Canvas",
    "CanvasConfig",
    "Cluster",
    "Color",
    "ColorParseError",
    "ConfigError",
    "DisplayRuntime",
    "Element",
    "ElementKind",
    "Ellipse",
    "GaussianBlur",
    "InvalidHexDigitError",
    "LineEnd",
    "PathBuilder",
    "Point",
    "PostEffect",
    "PresentTick",
    "ScenePresenter",
    "Shape",
    "Stroke",
    "TesseraConfig",
    "Transform",
    "TruncatedHexError",
    "ellipse_points",
    "load_config",
    "map_element",
    "polygon",
    "polyline",
    "rect_polygon_points",
    "regular_polygon_points",
]
