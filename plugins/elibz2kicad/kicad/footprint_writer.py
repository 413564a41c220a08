import logging
from typing import List

from ..api.models import (
    FootprintDocument, FootprintPad, FootprintLine, FootprintCircle,
    FootprintArc, FootprintPolygon, FootprintHole, FootprintText,
    GraphicPrimitive, KicadPadShape, PadType, Point
)
from ..utils.geometry import format_mm, mil_to_mm, to_output, absolute_to_relative


logger = logging.getLogger(__name__)


class FootprintWriter:
    """
    Renders a FootprintDocument as a KiCad 6 .kicad_mod S-expression.

    Primitives hold source units with Y up. Every coordinate goes through
    to_output() exactly once here; pad outlines go through
    absolute_to_relative() instead, which flips on its own.
    """

    CUSTOM_ANCHOR_SIZE = 0.0001

    def __init__(self):
        self._indent = 0

    def _fmt(self, value: float) -> str:
        return format_mm(value, precision=6)

    def _len(self, value: float) -> str:
        return self._fmt(mil_to_mm(value))

    def _xy(self, point: Point) -> str:
        x, y = to_output(point.x, point.y)
        return f"{self._fmt(x)} {self._fmt(y)}"

    def _line(self, content: str) -> str:
        return "  " * self._indent + content

    def _escape_string(self, s: str) -> str:
        if not s:
            return '""'
        s = s.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{s}"'

    def write_footprint(self, footprint: FootprintDocument) -> str:
        lines = []
        self._indent = 0

        lines.append(f'(footprint {self._escape_string(footprint.name)}')
        self._indent += 1

        lines.append(self._line(f'(version {footprint.version})'))
        lines.append(self._line(f'(generator {footprint.generator})'))
        lines.append(self._line(f'(layer {self._escape_string(footprint.layer)})'))
        lines.append(self._line(f'(tedit {footprint.tedit})'))
        lines.append(self._line(f'(descr {self._escape_string(footprint.descr)})'))
        lines.append(self._line(f'(tags {self._escape_string(footprint.tags)})'))
        lines.append(self._line(f'(attr {footprint.attr})'))

        for text in footprint.texts:
            lines.extend(self._write_text(text))

        for graphic in footprint.graphics:
            lines.extend(self._write_graphic(graphic))

        for pad in footprint.pads:
            lines.extend(self._write_pad(pad))

        self._indent -= 1
        lines.append(")")

        return "\n".join(lines) + "\n"

    def _write_text(self, text: FootprintText) -> List[str]:
        lines = []

        lines.append(self._line(
            f'(fp_text {text.kind} {self._escape_string(text.text)} '
            f'(at {self._fmt(text.x)} {self._fmt(text.y)}) '
            f'(layer {self._escape_string(text.layer)})'
        ))
        self._indent += 1
        lines.append(self._line('(effects (font (size 1 1) (thickness 0.15)))'))
        lines.append(self._line(f'(tstamp {text.uuid})'))
        self._indent -= 1
        lines.append(self._line(')'))

        return lines

    def _write_graphic(self, graphic: GraphicPrimitive) -> List[str]:
        if isinstance(graphic, FootprintLine):
            return self._write_line(graphic)
        if isinstance(graphic, FootprintCircle):
            return self._write_circle(graphic)
        if isinstance(graphic, FootprintArc):
            return self._write_arc(graphic)
        if isinstance(graphic, FootprintPolygon):
            return self._write_polygon(graphic)
        if isinstance(graphic, FootprintHole):
            return self._write_hole(graphic)
        raise TypeError(f"Unsupported graphic primitive: {type(graphic).__name__}")

    def _write_line(self, line: FootprintLine) -> List[str]:
        lines = []

        lines.append(self._line('(fp_line'))
        self._indent += 1
        lines.append(self._line(f'(start {self._xy(line.start)})'))
        lines.append(self._line(f'(end {self._xy(line.end)})'))
        lines.append(self._line(f'(layer {self._escape_string(line.layer)})'))
        lines.append(self._line(f'(width {self._len(line.stroke_width)})'))
        lines.append(self._line(f'(tstamp {line.uuid})'))
        self._indent -= 1
        lines.append(self._line(')'))

        return lines

    def _write_circle(self, circle: FootprintCircle) -> List[str]:
        lines = []

        lines.append(self._line('(fp_circle'))
        self._indent += 1
        lines.append(self._line(f'(center {self._xy(circle.center)})'))
        lines.append(self._line(f'(end {self._xy(circle.end)})'))
        lines.append(self._line(f'(layer {self._escape_string(circle.layer)})'))
        lines.append(self._line(f'(width {self._len(circle.stroke_width)})'))
        lines.append(self._line(f'(fill {"solid" if circle.fill else "none"})'))
        lines.append(self._line(f'(tstamp {circle.uuid})'))
        self._indent -= 1
        lines.append(self._line(')'))

        return lines

    def _write_arc(self, arc: FootprintArc) -> List[str]:
        lines = []

        lines.append(self._line('(fp_arc'))
        self._indent += 1
        lines.append(self._line(f'(start {self._xy(arc.start)})'))
        lines.append(self._line(f'(mid {self._xy(arc.mid)})'))
        lines.append(self._line(f'(end {self._xy(arc.end)})'))
        lines.append(self._line(f'(layer {self._escape_string(arc.layer)})'))
        lines.append(self._line(f'(width {self._len(arc.stroke_width)})'))
        lines.append(self._line(f'(tstamp {arc.uuid})'))
        self._indent -= 1
        lines.append(self._line(')'))

        return lines

    def _write_polygon(self, polygon: FootprintPolygon) -> List[str]:
        lines = []

        lines.append(self._line('(fp_poly'))
        self._indent += 1

        lines.append(self._line('(pts'))
        self._indent += 1
        for pt in polygon.points:
            lines.append(self._line(f'(xy {self._xy(pt)})'))
        self._indent -= 1
        lines.append(self._line(')'))

        lines.append(self._line(f'(layer {self._escape_string(polygon.layer)})'))
        lines.append(self._line(f'(width {self._len(polygon.stroke_width)})'))
        lines.append(self._line(f'(fill {"solid" if polygon.fill else "none"})'))
        lines.append(self._line(f'(tstamp {polygon.uuid})'))

        self._indent -= 1
        lines.append(self._line(')'))

        return lines

    def _write_hole(self, hole: FootprintHole) -> List[str]:
        lines = []
        diameter = self._len(hole.radius * 2)

        lines.append(self._line(f'(pad "" {PadType.NPTH.value} {KicadPadShape.CIRCLE.value}'))
        self._indent += 1
        lines.append(self._line(f'(at {self._xy(hole.center)})'))
        lines.append(self._line(f'(size {diameter} {diameter})'))
        lines.append(self._line(f'(drill {diameter})'))
        lines.append(self._line('(layers "*.Cu" "*.Mask")'))
        lines.append(self._line(f'(tstamp {hole.uuid})'))
        self._indent -= 1
        lines.append(self._line(')'))

        return lines

    def _write_pad(self, pad: FootprintPad) -> List[str]:
        lines = []

        lines.append(self._line(
            f'(pad {self._escape_string(pad.number)} {pad.pad_type.value} {pad.shape.value}'
        ))
        self._indent += 1

        if pad.rotation:
            lines.append(self._line(f'(at {self._xy(pad.center)} {self._fmt(pad.rotation)})'))
        else:
            lines.append(self._line(f'(at {self._xy(pad.center)})'))

        if pad.shape == KicadPadShape.CUSTOM:
            anchor = self._fmt(self.CUSTOM_ANCHOR_SIZE)
            lines.append(self._line(f'(size {anchor} {anchor})'))
        else:
            lines.append(self._line(f'(size {self._len(pad.width)} {self._len(pad.height)})'))

        if pad.drill_width > 0:
            if pad.drill_oval:
                lines.append(self._line(
                    f'(drill oval {self._len(pad.drill_width)} {self._len(pad.drill_height)})'
                ))
            else:
                lines.append(self._line(f'(drill {self._len(pad.drill_width)})'))

        layers_str = " ".join(self._escape_string(layer) for layer in pad.layers)
        lines.append(self._line(f'(layers {layers_str})'))

        if pad.shape == KicadPadShape.CUSTOM:
            lines.extend(self._write_pad_primitives(pad))

        if pad.mask_margin is not None:
            lines.append(self._line(f'(solder_mask_margin {self._len(pad.mask_margin)})'))
        elif pad.mask_margin_mm is not None:
            lines.append(self._line(f'(solder_mask_margin {self._fmt(pad.mask_margin_mm)})'))
        if pad.paste_margin is not None:
            lines.append(self._line(f'(solder_paste_margin {self._len(pad.paste_margin)})'))

        lines.append(self._line(f'(tstamp {pad.uuid})'))
        self._indent -= 1
        lines.append(self._line(')'))

        return lines

    def _write_pad_primitives(self, pad: FootprintPad) -> List[str]:
        lines = []
        relative = absolute_to_relative(
            [pt.as_tuple() for pt in pad.polygon], pad.center.x, pad.center.y
        )

        lines.append(self._line('(options (clearance outline) (anchor circle))'))
        lines.append(self._line('(primitives'))
        self._indent += 1
        lines.append(self._line('(gr_poly'))
        self._indent += 1
        lines.append(self._line('(pts'))
        self._indent += 1
        for x, y in relative:
            lines.append(self._line(f'(xy {self._len(x)} {self._len(y)})'))
        self._indent -= 1
        lines.append(self._line(')'))
        lines.append(self._line('(width 0) (fill yes)'))
        self._indent -= 1
        lines.append(self._line(')'))
        self._indent -= 1
        lines.append(self._line(')'))

        return lines
