import math
import logging
from enum import Enum
from typing import Any, List, Optional, Tuple

from ..api.models import (
    Point, CircleGeometry, PolygonGeometry, ArcGeometry, LineRun, ArcRun,
    ShapeSegment, ShapeGeometry, DecodeFailure
)
from ..config import ARC_SEGMENTS
from ..utils.geometry import fit_arc_with_lines
from .record_decoder import RecordDecodeError, is_number, numeric_points


logger = logging.getLogger(__name__)


CIRCLE_TAG = "CIRCLE"
LINE_TOKEN = "L"
ARC_TOKENS = ("ARC", "CARC")
SEGMENT_TOKENS = (LINE_TOKEN,) + ARC_TOKENS


def count_segment_tokens(shape: List[Any]) -> int:
    return sum(1 for v in shape if isinstance(v, str) and v in SEGMENT_TOKENS)


class ScanState(Enum):
    EXPECT_TOKEN = "expect_token"
    CONSUMING_POINTS = "consuming_points"
    CONSUMING_ARC = "consuming_arc"


class ChainScanner:
    """
    Cursor walk over a mixed straight/arc chain such as

        [x0, y0, "L", x1, y1, x2, y2, "ARC", angle, x3, y3, "L", x4, y4]

    The leading pair seeds the chain. "L" is followed by any number of
    point pairs. An arc token takes its start from the two numbers before
    it, then a sweep angle in degrees and an end pair.
    """

    def __init__(self, shape: List[Any]):
        self.shape = shape
        self.cursor = 2
        self.state = ScanState.EXPECT_TOKEN
        self.segments: List[ShapeSegment] = []
        self.failures: List[DecodeFailure] = []

    def scan(self) -> Tuple[List[ShapeSegment], List[DecodeFailure]]:
        leading = self._pair_at(0)
        if leading is None:
            raise RecordDecodeError("Shape chain has no leading point")
        self.segments.append(LineRun([leading]))

        while self.cursor < len(self.shape):
            if self.state == ScanState.EXPECT_TOKEN:
                self._expect_token()
            elif self.state == ScanState.CONSUMING_POINTS:
                self._consume_points()
            else:
                self._consume_arc()

        return self.segments, self.failures

    def _expect_token(self):
        entry = self.shape[self.cursor]

        if entry == LINE_TOKEN:
            self.state = ScanState.CONSUMING_POINTS
            self.cursor += 1
        elif entry in ARC_TOKENS:
            self.state = ScanState.CONSUMING_ARC
        elif isinstance(entry, str):
            logger.warning(f"Unknown token in shape chain: {entry}")
            self.failures.append(DecodeFailure(f"Unknown chain token: {entry}"))
            self.cursor += 1
        else:
            self.cursor += 1

    def _consume_points(self):
        run = LineRun()
        pair = self._pair_at(self.cursor)
        while pair is not None:
            run.points.append(pair)
            self.cursor += 2
            pair = self._pair_at(self.cursor)

        self.segments.append(run)
        self.state = ScanState.EXPECT_TOKEN

    def _consume_arc(self):
        token = self.shape[self.cursor]
        start = self._pair_at(self.cursor - 2)
        angle = self.shape[self.cursor + 1] if self.cursor + 1 < len(self.shape) else None
        end = self._pair_at(self.cursor + 2)

        self.state = ScanState.EXPECT_TOKEN

        if start is None or end is None or not is_number(angle):
            logger.warning(f"Incomplete {token} segment at index {self.cursor}")
            self.failures.append(DecodeFailure(f"Incomplete {token} segment"))
            self.cursor += 1
            return

        self.segments.append(ArcRun(start, end, float(angle)))
        self.cursor += 4

    def _pair_at(self, index: int) -> Optional[Point]:
        if index < 0 or index + 1 >= len(self.shape):
            return None
        x = self.shape[index]
        y = self.shape[index + 1]
        if not (is_number(x) and is_number(y)):
            return None
        return Point(float(x), float(y))


def chain_points(segments: List[ShapeSegment], arc_segments: int = ARC_SEGMENTS) -> List[Point]:
    """
    Flatten chain segments into one continuous point list.

    Arcs are fitted in source space. The fitted start duplicates the last
    vertex already in the list, so only the points after it are appended.
    """
    points: List[Point] = []
    for segment in segments:
        if isinstance(segment, LineRun):
            points.extend(segment.points)
            continue

        fitted = fit_arc_with_lines(
            segment.start.as_tuple(),
            segment.end.as_tuple(),
            math.radians(segment.angle),
            arc_segments
        )
        tail = fitted[1:] if points else fitted
        points.extend(Point(x, y) for x, y in tail)

    return points


class ShapeInterpreter:
    """Turns a record's shape array into circle, polygon or arc geometry."""

    def __init__(self, arc_segments: int = ARC_SEGMENTS):
        self.arc_segments = arc_segments

    def interpret(self, shape: List[Any]) -> Tuple[ShapeGeometry, List[DecodeFailure]]:
        if shape and shape[0] == CIRCLE_TAG:
            return self._interpret_circle(shape)

        token_count = count_segment_tokens(shape)

        if token_count == 0:
            raise RecordDecodeError("Unrecognized shape array")

        if token_count == 1:
            token = shape[2] if len(shape) > 2 else None
            if token == LINE_TOKEN:
                return self._interpret_polygon(shape), []
            if token in ARC_TOKENS:
                return self._interpret_arc(shape), []
            raise RecordDecodeError("Segment token is not at index 2")

        segments, failures = ChainScanner(shape).scan()
        points = chain_points(segments, self.arc_segments)
        arc_count = sum(1 for s in segments if isinstance(s, ArcRun))
        logger.debug(f"Chain of {len(segments)} segments ({arc_count} arcs), {len(points)} points")

        if len(points) < 2:
            raise RecordDecodeError(f"Shape chain has {len(points)} points")
        return PolygonGeometry(points), failures

    def _interpret_circle(self, shape: List[Any]) -> Tuple[CircleGeometry, List[DecodeFailure]]:
        if len(shape) < 4 or not all(is_number(v) for v in shape[1:4]):
            raise RecordDecodeError("Circle shape needs center and radius")

        failures = []
        if len(shape) > 4:
            logger.warning(f"Circle shape has {len(shape) - 4} extra fields")
            failures.append(DecodeFailure("Circle shape has extra fields", CIRCLE_TAG))

        geometry = CircleGeometry(
            center=Point(float(shape[1]), float(shape[2])),
            radius=float(shape[3])
        )
        return geometry, failures

    def _interpret_polygon(self, shape: List[Any]) -> PolygonGeometry:
        points = numeric_points(shape, skip_index=2)
        if len(points) < 2:
            raise RecordDecodeError(f"Polygon shape has {len(points)} points")
        return PolygonGeometry(points)

    def _interpret_arc(self, shape: List[Any]) -> ArcGeometry:
        if len(shape) < 6 or not all(is_number(shape[i]) for i in (0, 1, 3, 4, 5)):
            raise RecordDecodeError("Arc shape needs start, angle and end")

        return ArcGeometry(
            start=Point(float(shape[0]), float(shape[1])),
            end=Point(float(shape[4]), float(shape[5])),
            angle=float(shape[3])
        )
