import uuid
import logging
from datetime import datetime
from typing import List

from ..api.models import (
    FootprintDocument, FootprintPad, FootprintLine, FootprintCircle,
    FootprintArc, FootprintPolygon, FootprintHole, FootprintText,
    KicadPadShape, PadType, Point, SILKSCREEN_LAYER
)
from ..config import ConverterConfig, DEFAULT_CONFIG
from ..utils.geometry import arc_midpoint
from .footprint_writer import FootprintWriter


logger = logging.getLogger(__name__)


def _new_uuid() -> str:
    return str(uuid.uuid4())


class FootprintModel:
    """
    Accumulates the primitives of one footprint and serializes it.

    All add_* methods take source units (mil, Y up). Scaling and the Y
    flip happen in FootprintWriter.
    """

    def __init__(self, name: str, config: ConverterConfig = DEFAULT_CONFIG):
        self.config = config
        self._writer = FootprintWriter()

        tedit = f"{int(datetime.now().timestamp()):016x}"
        self.document = FootprintDocument(
            name=name,
            tedit=tedit,
            version=config.version,
            generator=config.generator,
        )
        self.document.texts.append(FootprintText(
            kind="reference", text="REF**", x=0, y=-config.reference_offset,
            layer="F.SilkS", uuid=_new_uuid()
        ))
        self.document.texts.append(FootprintText(
            kind="value", text=name, x=0, y=config.value_offset,
            layer="F.Fab", uuid=_new_uuid()
        ))

        logger.info(f"Created footprint model: {name}")

    @property
    def name(self) -> str:
        return self.document.name

    @property
    def graphics(self):
        return self.document.graphics

    @property
    def pads(self):
        return self.document.pads

    def add_line(self, start: Point, end: Point, layer: str, width: float):
        line = FootprintLine(start, end, layer, width, uuid=_new_uuid())
        self.document.graphics.append(line)
        logger.debug(f"Line {start} -> {end} on {layer}")
        return line

    def add_circle(self, center: Point, radius: float, layer: str, width: float, fill: bool):
        circle = FootprintCircle(
            center=center,
            end=Point(center.x, center.y + radius),
            layer=layer,
            stroke_width=width,
            fill=fill,
            uuid=_new_uuid()
        )
        self.document.graphics.append(circle)
        logger.debug(f"Circle at {center}, radius {radius} on {layer}")
        return circle

    def add_polygon(self, points: List[Point], layer: str, width: float, fill: bool):
        """
        Add a polygon outline or region.

        Unfilled polygons on the front silkscreen are written as separate
        fp_line segments, one per adjacent point pair.
        """
        if layer == SILKSCREEN_LAYER and not fill:
            logger.info(f"Writing silkscreen outline of {len(points)} points as lines")
            return [
                self.add_line(points[i], points[i + 1], layer, width)
                for i in range(len(points) - 1)
            ]

        polygon = FootprintPolygon(
            points=list(points),
            layer=layer,
            stroke_width=width,
            fill=fill,
            uuid=_new_uuid()
        )
        self.document.graphics.append(polygon)
        logger.debug(f"Polygon of {len(points)} points on {layer}")
        return [polygon]

    def add_arc(self, start: Point, end: Point, angle: float, layer: str, width: float):
        """Add an arc from start to end sweeping angle degrees (CCW positive)."""
        _, mid, _ = arc_midpoint(start.as_tuple(), end.as_tuple(), angle)
        arc = FootprintArc(
            start=start,
            mid=Point(*mid),
            end=end,
            layer=layer,
            stroke_width=width,
            uuid=_new_uuid()
        )
        self.document.graphics.append(arc)
        logger.debug(f"Arc {start} -> {end}, {angle} deg on {layer}")
        return arc

    def add_circle_hole(self, center: Point, radius: float):
        hole = FootprintHole(center, radius, uuid=_new_uuid())
        self.document.graphics.append(hole)
        logger.debug(f"Cutout hole at {center}, radius {radius}")
        return hole

    def add_pad_circle(
        self,
        name: str,
        center: Point,
        diameter: float,
        mask_margin: float,
        paste_margin: float
    ):
        return self._append_pad(FootprintPad(
            number=name,
            center=center,
            width=diameter,
            height=diameter,
            shape=KicadPadShape.CIRCLE,
            mask_margin=mask_margin,
            paste_margin=paste_margin,
        ))

    def add_pad_rect(
        self,
        name: str,
        center: Point,
        rotation: float,
        width: float,
        height: float,
        mask_margin: float,
        paste_margin: float
    ):
        return self._append_pad(FootprintPad(
            number=name,
            center=center,
            width=width,
            height=height,
            shape=KicadPadShape.RECT,
            rotation=rotation,
            mask_margin=mask_margin,
            paste_margin=paste_margin,
        ))

    def add_pad_oval(
        self,
        name: str,
        center: Point,
        width: float,
        height: float,
        rotation: float,
        mask_margin: float,
        paste_margin: float
    ):
        return self._append_pad(FootprintPad(
            number=name,
            center=center,
            width=width,
            height=height,
            shape=KicadPadShape.OVAL,
            rotation=rotation,
            mask_margin=mask_margin,
            paste_margin=paste_margin,
        ))

    def add_pad_poly(
        self,
        name: str,
        center: Point,
        points: List[Point],
        mask_margin: float,
        paste_margin: float
    ):
        return self._append_pad(FootprintPad(
            number=name,
            center=center,
            width=0,
            height=0,
            shape=KicadPadShape.CUSTOM,
            mask_margin=mask_margin,
            paste_margin=paste_margin,
            polygon=list(points),
        ))

    def add_pad_hole(
        self,
        name: str,
        center: Point,
        shape: KicadPadShape,
        width: float,
        height: float,
        rotation: float,
        drill_width: float,
        drill_height: float
    ):
        """Add a plated through-hole pad; unequal drill sizes give an oval drill."""
        if shape == KicadPadShape.CUSTOM:
            raise ValueError("Through-hole pads cannot use a custom shape")

        return self._append_pad(FootprintPad(
            number=name,
            center=center,
            width=width,
            height=height,
            shape=shape,
            pad_type=PadType.THRU_HOLE,
            rotation=rotation,
            drill_width=drill_width,
            drill_height=drill_height,
            drill_oval=shape == KicadPadShape.OVAL or drill_width != drill_height,
            mask_margin_mm=self.config.thru_hole_mask_margin,
        ))

    def _append_pad(self, pad: FootprintPad) -> FootprintPad:
        pad.uuid = _new_uuid()
        self.document.pads.append(pad)
        logger.debug(
            f"Pad {pad.number}: {pad.pad_type.value} {pad.shape.value} at {pad.center}"
        )
        return pad

    def serialize(self) -> str:
        content = self._writer.write_footprint(self.document)
        logger.info(
            f"Generated {self.name}: {len(self.document.texts)} texts, "
            f"{len(self.document.graphics)} graphics, {len(self.document.pads)} pads"
        )
        return content
