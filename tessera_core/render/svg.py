from __future__ import annotations

from typing import Optional, Sequence
import xml.etree.ElementTree as ET

from tessera_core.core.color import Color
from tessera_core.core.elements import Stroke
from tessera_core.core.geometry import Point


SVG_NAMESPACE = "http://www.w3.org/2000/svg"


class SvgDocument:
    """Incrementally built SVG markup in device units.

    Blur filters are shared: each distinct deviation gets one `<filter>`
    and the `<defs>` block holding them is appended once, at the end.
    """

    def __init__(self, width: int, height: int, ints_only: bool = False) -> None:
        self.width = width
        self.height = height
        self.ints_only = ints_only
        self.root = ET.Element(
            "svg",
            {
                "xmlns": SVG_NAMESPACE,
                "width": str(width),
                "height": str(height),
                "viewBox": f"0 0 {width} {height}",
            },
        )
        self._filters: dict[str, str] = {}

    def background(self, color: Color) -> ET.Element:
        rect = ET.SubElement(
            self.root,
            "rect",
            {"x": "0", "y": "0", "width": str(self.width), "height": str(self.height)},
        )
        _set_fill(rect, color)
        return rect

    def polygon(
        self,
        parent: ET.Element,
        points: Sequence[Point],
        stroke: Optional[Stroke],
        fill: Optional[Color],
    ) -> ET.Element:
        return self._point_list(parent, "polygon", points, stroke, fill)

    def polyline(
        self,
        parent: ET.Element,
        points: Sequence[Point],
        stroke: Optional[Stroke],
        fill: Optional[Color],
    ) -> ET.Element:
        return self._point_list(parent, "polyline", points, stroke, fill)

    def circle(
        self,
        parent: ET.Element,
        center: Point,
        radius: float,
        stroke: Optional[Stroke],
        fill: Optional[Color],
    ) -> ET.Element:
        node = ET.SubElement(
            parent,
            "circle",
            {"cx": self.num(center[0]), "cy": self.num(center[1]), "r": self.num(radius)},
        )
        self._paint(node, stroke, fill)
        return node

    def ellipse(
        self,
        parent: ET.Element,
        center: Point,
        radius: Point,
        rotation_degrees: float,
        stroke: Optional[Stroke],
        fill: Optional[Color],
    ) -> ET.Element:
        cx, cy = self.num(center[0]), self.num(center[1])
        node = ET.SubElement(
            parent,
            "ellipse",
            {"cx": cx, "cy": cy, "rx": self.num(radius[0]), "ry": self.num(radius[1])},
        )
        if rotation_degrees:
            node.set("transform", f"rotate({_fmt(rotation_degrees)} {cx} {cy})")
        self._paint(node, stroke, fill)
        return node

    def blur_group(self, parent: ET.Element, std_dev: float) -> ET.Element:
        return ET.SubElement(parent, "g", {"filter": f"url(#{self.blur_filter_id(std_dev)})"})

    def transform_group(self, parent: ET.Element, matrix: Sequence[float]) -> ET.Element:
        values = " ".join(_fmt(v) for v in matrix)
        return ET.SubElement(parent, "g", {"transform": f"matrix({values})"})

    def blur_filter_id(self, std_dev: float) -> str:
        key = _fmt(std_dev)
        filter_id = self._filters.get(key)
        if filter_id is None:
            filter_id = f"f{len(self._filters)}"
            self._filters[key] = filter_id
        return filter_id

    def num(self, value: float) -> str:
        if self.ints_only:
            return str(int(round(value)))
        return _fmt(value)

    def to_string(self) -> str:
        root = self.root
        if self._filters:
            # Work on a copy so rendering twice never duplicates the defs.
            root = ET.Element(self.root.tag, dict(self.root.attrib))
            root.extend(list(self.root))
            defs = ET.SubElement(root, "defs")
            for std_dev, filter_id in self._filters.items():
                node = ET.SubElement(defs, "filter", {"id": filter_id})
                ET.SubElement(node, "feGaussianBlur", {"stdDeviation": std_dev})
        return ET.tostring(root, encoding="unicode")

    def _point_list(
        self,
        parent: ET.Element,
        tag: str,
        points: Sequence[Point],
        stroke: Optional[Stroke],
        fill: Optional[Color],
    ) -> ET.Element:
        encoded = " ".join(f"{self.num(x)},{self.num(y)}" for x, y in points)
        node = ET.SubElement(parent, tag, {"points": encoded})
        self._paint(node, stroke, fill)
        return node

    def _paint(self, node: ET.Element, stroke: Optional[Stroke], fill: Optional[Color]) -> None:
        if stroke is not None:
            node.set("stroke", stroke.color.as_hex())
            node.set("stroke-width", _fmt(stroke.width))
            if stroke.color.a < 1.0:
                node.set("stroke-opacity", _fmt(max(0.0, stroke.color.a)))
            node.set("stroke-linecap", stroke.line_end.value)
        _set_fill(node, fill)


def _set_fill(node: ET.Element, fill: Optional[Color]) -> None:
    if fill is None:
        node.set("fill", "none")
        return
    node.set("fill", fill.as_hex())
    if fill.a < 1.0:
        node.set("fill-opacity", _fmt(max(0.0, fill.a)))


def _fmt(value: float) -> str:
    text = format(float(value), ".6g")
    return "0" if text == "-0" else text
