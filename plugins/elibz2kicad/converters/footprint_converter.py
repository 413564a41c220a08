import json
import logging
from typing import Iterable, List, Optional, Union

from ..api.models import (
    GraphicRecord, PadRecord, PadShape, DrillShape, KicadPadShape,
    CircleGeometry, PolygonGeometry, ArcGeometry, DecodeFailure,
    ConversionResult, CUTOUT_LAYER
)
from ..config import ConverterConfig, DEFAULT_CONFIG
from ..kicad.footprint_model import FootprintModel
from ..utils.geometry import is_odd_quarter_turn
from .record_decoder import RecordDecoder, RecordDecodeError
from .shape_interpreter import ShapeInterpreter


logger = logging.getLogger(__name__)


class FootprintConverter:
    """
    Converts an .efoo record stream into a KiCad footprint.

    Each line is decoded on its own; a bad line is recorded as a failure and
    the rest of the stream is still converted.
    """

    THRU_HOLE_SHAPE_MAP = {
        PadShape.ELLIPSE: KicadPadShape.CIRCLE,
        PadShape.RECT: KicadPadShape.RECT,
        PadShape.OVAL: KicadPadShape.OVAL,
    }

    def __init__(self, config: ConverterConfig = DEFAULT_CONFIG):
        self.config = config
        self.decoder = RecordDecoder(config)
        self.interpreter = ShapeInterpreter(config.arc_segments)
        self.current_footprint: Optional[FootprintModel] = None

    def convert(
        self,
        efoo_content: Union[str, Iterable[str]],
        component_name: str = "Footprint"
    ) -> ConversionResult:
        self.current_footprint = FootprintModel(component_name, self.config)

        if isinstance(efoo_content, str):
            efoo_content = efoo_content.splitlines()

        failures: List[DecodeFailure] = []
        for line_number, line in enumerate(efoo_content, start=1):
            line_failures = self.convert_line(line)
            for failure in line_failures:
                logger.warning(f"Line {line_number}: {failure.reason}")
            failures.extend(line_failures)

        content = self.current_footprint.serialize()
        logger.info(f"{component_name}: {len(failures)} records not fully converted")

        return ConversionResult(name=component_name, content=content, failures=failures)

    def convert_line(self, line: str) -> List[DecodeFailure]:
        """Decode one line into the current footprint; returns its failures."""
        if not line.strip():
            return []

        logger.debug(f"Record: {line}")

        try:
            array = json.loads(line)
        except json.JSONDecodeError as e:
            return [DecodeFailure(f"Invalid JSON: {e}")]

        tag = array[0] if isinstance(array, list) and array and isinstance(array[0], str) else ""

        try:
            result = self.decoder.decode(array)
            failures = list(result.failures)

            if isinstance(result.record, GraphicRecord):
                failures.extend(self._add_graphic(result.record))
            elif isinstance(result.record, PadRecord):
                failures.extend(self._add_pad(result.record))

        except RecordDecodeError as e:
            return [DecodeFailure(str(e), tag)]

        return failures

    def _add_graphic(self, record: GraphicRecord) -> List[DecodeFailure]:
        model = self.current_footprint
        geometry, failures = self.interpreter.interpret(record.shape)

        if isinstance(geometry, CircleGeometry):
            if record.layer == CUTOUT_LAYER:
                model.add_circle_hole(geometry.center, geometry.radius)
            else:
                model.add_circle(
                    geometry.center, geometry.radius, record.layer,
                    record.stroke_width, record.fill
                )
        elif isinstance(geometry, ArcGeometry):
            model.add_arc(
                geometry.start, geometry.end, geometry.angle,
                record.layer, record.stroke_width
            )
        elif isinstance(geometry, PolygonGeometry):
            model.add_polygon(
                geometry.points, record.layer, record.stroke_width, record.fill
            )

        return failures

    def _add_pad(self, pad: PadRecord) -> List[DecodeFailure]:
        if pad.is_through_hole:
            self._add_thru_hole_pad(pad)
        else:
            self._add_smd_pad(pad)
        return []

    def _add_thru_hole_pad(self, pad: PadRecord):
        shape = self.THRU_HOLE_SHAPE_MAP.get(pad.pad_shape.shape)
        if shape is None:
            raise RecordDecodeError(
                f"Pad shape {pad.pad_shape.shape.value} cannot be drilled"
            )

        drill_width = pad.drill.width
        drill_height = pad.drill.height
        if pad.drill.shape == DrillShape.SLOT and is_odd_quarter_turn(pad.orientation):
            drill_width, drill_height = drill_height, drill_width

        self.current_footprint.add_pad_hole(
            pad.name,
            pad.center,
            shape,
            pad.pad_shape.width,
            pad.pad_shape.height,
            pad.rotation,
            drill_width,
            drill_height
        )

    def _add_smd_pad(self, pad: PadRecord):
        model = self.current_footprint
        spec = pad.pad_shape

        if spec.shape == PadShape.ELLIPSE:
            model.add_pad_circle(
                pad.name, pad.center, spec.width, pad.mask_margin, pad.paste_margin
            )
        elif spec.shape == PadShape.RECT:
            model.add_pad_rect(
                pad.name, pad.center, pad.rotation, spec.width, spec.height,
                pad.mask_margin, pad.paste_margin
            )
        elif spec.shape == PadShape.OVAL:
            if is_odd_quarter_turn(pad.orientation):
                width, height = spec.width, spec.height
            else:
                width, height = spec.height, spec.width
            model.add_pad_oval(
                pad.name, pad.center, width, height, pad.rotation,
                pad.mask_margin, pad.paste_margin
            )
        else:
            model.add_pad_poly(
                pad.name, pad.center, spec.points, pad.mask_margin, pad.paste_margin
            )
