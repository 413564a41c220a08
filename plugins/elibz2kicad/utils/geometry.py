import math
from typing import Tuple, List


MIL_TO_MM = 0.0254

EPSILON = 1e-10

Coord = Tuple[float, float]


def mil_to_mm(value: float) -> float:
    return value * MIL_TO_MM


def flip_y(y: float) -> float:
    return -y


def to_output(x: float, y: float) -> Coord:
    """Scale a source point to mm and flip it into the Y-down output frame."""
    return (mil_to_mm(x), flip_y(mil_to_mm(y)))


def absolute_to_relative(
    points: List[Coord],
    cx: float,
    cy: float
) -> List[Coord]:
    """
    Express points relative to a pad center.

    The Y flip is applied here, so callers only scale the result.
    """
    return [(x - cx, flip_y(y - cy)) for x, y in points]


def format_mm(value: float, precision: int = 6) -> str:
    formatted = f"{value:.{precision}f}"
    if '.' in formatted:
        formatted = formatted.rstrip('0').rstrip('.')
    if formatted in ("-0", ""):
        formatted = "0"
    return formatted


def arc_midpoint(
    start: Coord,
    end: Coord,
    angle_deg: float
) -> Tuple[Coord, Coord, Coord]:
    """
    Compute the three-point form (start, mid, end) of an arc.

    A negative angle is swept clockwise from start to end. The endpoints
    are swapped internally so the sweep is always counter-clockwise, and
    the result is reported in the caller's order. Degenerate arcs return
    the start point as the midpoint.
    """
    angle = math.radians(angle_deg)
    x1, y1 = start
    x2, y2 = end

    if abs(angle) < EPSILON or math.hypot(x1 - x2, y1 - y2) < EPSILON:
        return (start, start, end)

    if angle < 0:
        x1, y1, x2, y2 = x2, y2, x1, y1

    dx = x2 - x1
    dy = y2 - y1
    chord = math.hypot(dx, dy)
    if chord < EPSILON:
        return (start, start, end)

    half_angle = abs(angle) * 0.5
    sin_half = math.sin(half_angle)
    if abs(sin_half) < EPSILON:
        return (start, start, end)

    radius = chord / (2.0 * sin_half)
    dist_to_center = radius * math.cos(half_angle)

    # left normal of the chord, the center side for a CCW sweep
    nx = -dy / chord
    ny = dx / chord
    cx = (x1 + x2) * 0.5 + nx * dist_to_center
    cy = (y1 + y2) * 0.5 + ny * dist_to_center

    start_angle = math.atan2(y1 - cy, x1 - cx)
    mid_angle = start_angle + half_angle

    mid = (cx + radius * math.cos(mid_angle), cy + radius * math.sin(mid_angle))
    return (start, mid, end)


def fit_arc_with_lines(
    start: Coord,
    end: Coord,
    angle_rad: float,
    num_segments: int
) -> List[Coord]:
    """
    Approximate an arc with a polyline of num_segments + 1 points.

    Positive angles sweep counter-clockwise. The first and last points are
    start and end themselves. Degenerate input yields the chord [start, end].
    """
    chord_x = end[0] - start[0]
    chord_y = end[1] - start[1]
    chord = math.hypot(chord_x, chord_y)

    if chord < EPSILON or abs(angle_rad) < EPSILON or num_segments < 1:
        return [start, end]

    half_angle = abs(angle_rad) / 2.0
    sin_half = math.sin(half_angle)
    if sin_half < EPSILON:
        return [start, end]

    radius = (chord / 2.0) / sin_half
    center_dist = radius * math.cos(half_angle)
    if angle_rad < 0:
        center_dist = -center_dist

    cx = (start[0] + end[0]) / 2.0 - chord_y / chord * center_dist
    cy = (start[1] + end[1]) / 2.0 + chord_x / chord * center_dist

    start_angle = math.atan2(start[1] - cy, start[0] - cx)
    step = angle_rad / num_segments

    points = [start]
    for i in range(1, num_segments):
        current = start_angle + i * step
        points.append((cx + radius * math.cos(current), cy + radius * math.sin(current)))
    points.append(end)

    return points


def is_odd_quarter_turn(angle: float) -> bool:
    """True when angle is an odd multiple of 90 degrees (whole quarters only)."""
    return (int(abs(angle)) // 90) % 2 == 1
