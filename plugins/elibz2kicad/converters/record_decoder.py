import logging
from typing import Any, List, Optional

from ..api.models import (
    GraphicRecord, GraphicTag, PadRecord, PadShape, PadShapeSpec, DrillShape,
    DrillSpec, Point, DecodeFailure, DecodeResult, get_kicad_layer
)
from ..config import ConverterConfig, DEFAULT_CONFIG


logger = logging.getLogger(__name__)


MIN_RECORD_LENGTH = 6
MIN_PAD_LENGTH = 11

PAD_TAG = "PAD"


class RecordDecodeError(Exception):
    pass


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def numeric_points(values: List[Any], skip_index: Optional[int] = None) -> List[Point]:
    """Pair up the numeric entries of a flat array into points."""
    numbers = [
        float(v) for i, v in enumerate(values)
        if i != skip_index and is_number(v)
    ]
    return [Point(numbers[i], numbers[i + 1]) for i in range(0, len(numbers) - 1, 2)]


def _tag_of(array: List[Any]) -> str:
    return array[0] if isinstance(array[0], str) else ""


class RecordDecoder:
    """Classifies one parsed footprint record into a graphic or pad record.

    Fields are located by array offset:

        graphics: [tag, id, ?, ?, layer, stroke_width, shape(POLY) | ?, shape(FILL)]
        pads:     [PAD, id, ?, ?, layer, name, x, y, rotation, drill, pad_shape,
                   ..., orientation(14), ..., mask(18), ..., paste(20)]
    """

    PAD_SHAPE_MAP = {
        "ELLIPSE": PadShape.ELLIPSE,
        "RECT": PadShape.RECT,
        "OVAL": PadShape.OVAL,
        "POLY": PadShape.POLYGON,
    }

    DRILL_SHAPE_MAP = {
        "ROUND": DrillShape.ROUND,
        "SLOT": DrillShape.SLOT,
    }

    def __init__(self, config: ConverterConfig = DEFAULT_CONFIG):
        self.config = config

    def decode(self, array: Any) -> DecodeResult:
        """
        Decode one record.

        Returns an empty result for records that are skipped on purpose
        (metadata lines and unsupported types). Raises RecordDecodeError
        when a supported record cannot be decoded.
        """
        if not isinstance(array, list):
            raise RecordDecodeError("Record is not a JSON array")

        tag = array[0] if array and isinstance(array[0], str) else ""
        is_graphic = tag in (GraphicTag.FILL.value, GraphicTag.POLY.value)

        if not is_graphic and tag != PAD_TAG:
            if len(array) < MIN_RECORD_LENGTH:
                logger.debug(f"Skipping metadata record: {tag or array[:1]}")
            else:
                logger.info(f"Skipping unsupported record type: {tag}")
            return DecodeResult()

        if len(array) < MIN_RECORD_LENGTH:
            raise RecordDecodeError(f"{tag} record too short ({len(array)} fields)")

        if tag == PAD_TAG:
            return DecodeResult(record=self._decode_pad(array))

        return self._decode_graphic(array, GraphicTag(tag))

    def _decode_graphic(self, array: List[Any], tag: GraphicTag) -> DecodeResult:
        layer = get_kicad_layer(array[4])
        if layer is None:
            raise RecordDecodeError(f"Unknown layer id: {array[4]!r}")

        stroke_width = self._required_number(array, 5, "stroke width")

        index = 7 if tag == GraphicTag.FILL else 6
        payload = array[index] if index < len(array) else None
        if not isinstance(payload, list) or not payload:
            raise RecordDecodeError(f"{tag.value} record has no shape array at index {index}")

        failures = []
        wrapped_count = 0
        shape = payload

        if isinstance(payload[0], list):
            wrapped_count = len(payload)
            shape = payload[0]
            if wrapped_count > 1:
                logger.warning(
                    f"{tag.value} record wraps {wrapped_count} shapes, "
                    f"only the first is converted"
                )
                failures.append(DecodeFailure(
                    f"{wrapped_count} wrapped shapes, only the first converted",
                    tag.value
                ))

        if not shape:
            raise RecordDecodeError(f"{tag.value} record has an empty shape array")

        logger.debug(f"{tag.value} on {layer}, width {stroke_width}")

        record = GraphicRecord(
            tag=tag,
            layer=layer,
            stroke_width=stroke_width,
            shape=shape,
            wrapped_count=wrapped_count
        )
        return DecodeResult(record=record, failures=failures)

    def _decode_pad(self, array: List[Any]) -> PadRecord:
        if len(array) < MIN_PAD_LENGTH:
            raise RecordDecodeError(f"PAD record too short ({len(array)} fields)")

        shape_array = array[10]
        if not isinstance(shape_array, list) or not shape_array:
            raise RecordDecodeError("PAD record has no pad shape array")

        drill = None
        drill_array = array[9]
        if isinstance(drill_array, list) and drill_array:
            drill = self._decode_drill(drill_array)

        name = array[5] if isinstance(array[5], str) else ""

        return PadRecord(
            name=name,
            center=Point(
                self._optional_number(array, 6, 0.0),
                self._optional_number(array, 7, 0.0)
            ),
            rotation=self._optional_number(array, 8, 0.0),
            pad_shape=self._decode_pad_shape(shape_array),
            drill=drill,
            orientation=self._optional_number(array, 14, 0.0),
            mask_margin=self._optional_number(array, 18, self.config.default_mask_margin),
            paste_margin=self._optional_number(array, 20, self.config.default_paste_margin),
        )

    def _decode_pad_shape(self, shape_array: List[Any]) -> PadShapeSpec:
        shape = self.PAD_SHAPE_MAP.get(_tag_of(shape_array))
        if shape is None:
            raise RecordDecodeError(f"Unknown pad shape: {shape_array[0]!r}")

        if shape == PadShape.ELLIPSE:
            diameter = self._required_number(shape_array, 1, "pad diameter")
            return PadShapeSpec(shape, diameter, diameter)

        if shape == PadShape.POLYGON:
            outline = shape_array[1] if len(shape_array) > 1 else None
            if not isinstance(outline, list):
                raise RecordDecodeError("Polygon pad has no outline array")
            points = numeric_points(outline, skip_index=2)
            if len(points) < 3:
                raise RecordDecodeError(f"Polygon pad outline has {len(points)} points")
            return PadShapeSpec(shape, points=points)

        width = self._required_number(shape_array, 1, "pad width")
        height = self._required_number(shape_array, 2, "pad height")
        return PadShapeSpec(shape, width, height)

    def _decode_drill(self, drill_array: List[Any]) -> DrillSpec:
        shape = self.DRILL_SHAPE_MAP.get(_tag_of(drill_array))
        if shape is None:
            raise RecordDecodeError(f"Unknown drill shape: {drill_array[0]!r}")

        width = self._required_number(drill_array, 1, "drill width")
        height = width
        if shape == DrillShape.SLOT:
            height = self._required_number(drill_array, 2, "drill height")

        if width <= 0 or height <= 0:
            raise RecordDecodeError(f"Drill size must be positive, got {width} x {height}")
        return DrillSpec(shape, width, height)

    def _required_number(self, array: List[Any], index: int, what: str) -> float:
        value = array[index] if index < len(array) else None
        if not is_number(value):
            raise RecordDecodeError(f"Missing {what} at index {index}")
        return float(value)

    def _optional_number(self, array: List[Any], index: int, default: float) -> float:
        value = array[index] if index < len(array) else None
        return float(value) if is_number(value) else default
