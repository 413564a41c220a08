from dataclasses import dataclass, field
from typing import List, Optional, Any, Tuple, Union
from enum import Enum


class GraphicTag(Enum):
    FILL = "FILL"
    POLY = "POLY"


class PadShape(Enum):
    ELLIPSE = "ELLIPSE"
    RECT = "RECT"
    OVAL = "OVAL"
    POLYGON = "POLY"


class DrillShape(Enum):
    ROUND = "ROUND"
    SLOT = "SLOT"


class PadType(Enum):
    SMD = "smd"
    THRU_HOLE = "thru_hole"
    NPTH = "np_thru_hole"


class KicadPadShape(Enum):
    CIRCLE = "circle"
    RECT = "rect"
    OVAL = "oval"
    CUSTOM = "custom"


@dataclass
class Point:
    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


# Decoded records


@dataclass
class GraphicRecord:
    tag: GraphicTag
    layer: str
    stroke_width: float
    shape: List[Any]
    wrapped_count: int = 0

    @property
    def fill(self) -> bool:
        return self.tag == GraphicTag.FILL


@dataclass
class PadShapeSpec:
    shape: PadShape
    width: float = 0.0
    height: float = 0.0
    points: List[Point] = field(default_factory=list)


@dataclass
class DrillSpec:
    shape: DrillShape
    width: float
    height: float


@dataclass
class PadRecord:
    name: str
    center: Point
    rotation: float
    pad_shape: PadShapeSpec
    drill: Optional[DrillSpec] = None
    orientation: float = 0.0
    mask_margin: float = 2.0
    paste_margin: float = 0.0

    @property
    def is_through_hole(self) -> bool:
        return self.drill is not None


# Shape geometry


@dataclass
class CircleGeometry:
    center: Point
    radius: float


@dataclass
class PolygonGeometry:
    points: List[Point] = field(default_factory=list)


@dataclass
class ArcGeometry:
    start: Point
    end: Point
    angle: float


@dataclass
class LineRun:
    points: List[Point] = field(default_factory=list)


@dataclass
class ArcRun:
    start: Point
    end: Point
    angle: float


ShapeSegment = Union[LineRun, ArcRun]
ShapeGeometry = Union[CircleGeometry, PolygonGeometry, ArcGeometry]


# Footprint primitives, stored in source units (mil, Y-up)


@dataclass
class FootprintLine:
    start: Point
    end: Point
    layer: str
    stroke_width: float
    uuid: str = ""


@dataclass
class FootprintCircle:
    center: Point
    end: Point
    layer: str
    stroke_width: float
    fill: bool = False
    uuid: str = ""


@dataclass
class FootprintArc:
    start: Point
    mid: Point
    end: Point
    layer: str
    stroke_width: float
    uuid: str = ""


@dataclass
class FootprintPolygon:
    points: List[Point] = field(default_factory=list)
    layer: str = "F.SilkS"
    stroke_width: float = 0.0
    fill: bool = True
    uuid: str = ""


@dataclass
class FootprintHole:
    center: Point
    radius: float
    uuid: str = ""


@dataclass
class FootprintPad:
    number: str
    center: Point
    width: float
    height: float
    shape: KicadPadShape = KicadPadShape.RECT
    pad_type: PadType = PadType.SMD
    rotation: float = 0.0
    drill_width: float = 0.0
    drill_height: float = 0.0
    drill_oval: bool = False
    mask_margin: Optional[float] = None
    paste_margin: Optional[float] = None
    # thru-hole pads carry a fixed mask margin already in mm
    mask_margin_mm: Optional[float] = None
    polygon: List[Point] = field(default_factory=list)
    uuid: str = ""

    @property
    def layers(self) -> List[str]:
        if self.pad_type == PadType.SMD:
            return ["F.Cu", "F.Paste", "F.Mask"]
        return ["*.Cu", "*.Mask"]


GraphicPrimitive = Union[
    FootprintLine, FootprintCircle, FootprintArc, FootprintPolygon, FootprintHole
]


@dataclass
class FootprintText:
    kind: str
    text: str
    x: float
    y: float
    layer: str
    uuid: str = ""


@dataclass
class FootprintDocument:
    name: str
    tedit: str
    version: str = "20211014"
    generator: str = "pcbnew"
    layer: str = "F.Cu"
    descr: str = ""
    tags: str = ""
    attr: str = "smd"

    texts: List[FootprintText] = field(default_factory=list)
    graphics: List[GraphicPrimitive] = field(default_factory=list)
    pads: List[FootprintPad] = field(default_factory=list)


# Decode outcomes


@dataclass
class DecodeFailure:
    reason: str
    tag: str = ""


@dataclass
class DecodeResult:
    record: Optional[Union[GraphicRecord, PadRecord]] = None
    failures: List[DecodeFailure] = field(default_factory=list)


@dataclass
class ConversionResult:
    name: str
    content: str
    failures: List[DecodeFailure] = field(default_factory=list)

    @property
    def unparsed(self) -> int:
        return len(self.failures)


CUTOUT_LAYER = "F&B.Cu *.Mask"
SILKSCREEN_LAYER = "F.SilkS"

EASYEDA_LAYER_MAP = {
    1: "F.Cu",
    2: "B.Cu",
    3: "F.SilkS",
    4: "B.SilkS",
    5: "F.Mask",
    6: "B.Mask",
    7: "F.Paste",
    8: "B.Paste",
    9: "F.Fab",
    10: "B.Fab",
    11: "Edge.Cuts",
    12: CUTOUT_LAYER,
    13: "Dwgs.User",
    48: "F.Fab",
    49: "User.7",
    50: "User.8",
    51: "User.9",
}


def get_kicad_layer(easyeda_layer: Any) -> Optional[str]:
    if isinstance(easyeda_layer, float) and easyeda_layer.is_integer():
        easyeda_layer = int(easyeda_layer)
    if isinstance(easyeda_layer, bool) or not isinstance(easyeda_layer, int):
        return None
    return EASYEDA_LAYER_MAP.get(easyeda_layer)
