from .core import (
    Adjust,
    Canvas,
    Cluster,
    Color,
    Ellipse,
    GaussianBlur,
    LineEnd,
    PathBuilder,
    Shape,
    Stroke,
    Transform,
)

__version__ = "0.1.0"

__all__ = [
    "Adjust",
    "Canvas",
    "Cluster",
    "Color",
    "Ellipse",
    "GaussianBlur",
    "LineEnd",
    "PathBuilder",
    "Shape",
    "Stroke",
    "Transform",
    "__version__",
]
