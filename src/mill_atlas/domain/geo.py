# src/mill_atlas/domain/geo.py
"""
Geographic helpers: coordinate validation, WKT parsing and nearest-feature
snapping.

Conventions:
- Public coordinates are lat-first: `(lat, lng)` / `[lat, lng]`.
- WKT (as stored by PostGIS) is lng-first: `POINT(lng lat)`.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Literal, Optional, Protocol, Sequence

EARTH_RADIUS_M = 6_371_000.0
DEFAULT_SNAP_THRESHOLD_M = 10.0

LatLng = tuple[float, float]

_POINT_RE = re.compile(r"^\s*POINT\s*\(\s*([^\s,()]+)\s+([^\s,()]+)\s*\)\s*$", re.I)
_LINESTRING_RE = re.compile(r"^\s*LINESTRING\s*\((.*)\)\s*$", re.I | re.S)
_SRID_RE = re.compile(r"^\s*SRID=\d+;", re.I)


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def is_valid_coordinate(lat: Any, lng: Any) -> bool:
    """True for finite numbers within [-90, 90] x [-180, 180]."""
    flat, flng = _to_float(lat), _to_float(lng)
    if flat is None or flng is None:
        return False
    return -90.0 <= flat <= 90.0 and -180.0 <= flng <= 180.0


def parse_point_wkt(wkt: Optional[str]) -> Optional[LatLng]:
    """`POINT(lng lat)` -> `(lat, lng)`; None if unparsable or out of range."""
    if not wkt:
        return None
    match = _POINT_RE.match(_SRID_RE.sub("", wkt))
    if not match:
        return None
    lng, lat = _to_float(match.group(1)), _to_float(match.group(2))
    if not is_valid_coordinate(lat, lng):
        return None
    return lat, lng  # type: ignore[return-value]


def parse_linestring_wkt(wkt: Optional[str]) -> list[list[float]]:
    """
    `LINESTRING(lng lat, lng lat, ...)` -> `[[lat, lng], ...]`.

    Malformed or out-of-range pairs are dropped rather than failing the whole
    line; an empty or non-LINESTRING text yields `[]`.
    """
    if not wkt:
        return []
    match = _LINESTRING_RE.match(_SRID_RE.sub("", wkt))
    if not match:
        return []
    path: list[list[float]] = []
    for pair in match.group(1).split(","):
        parts = pair.split()
        if len(parts) < 2:
            continue
        lng, lat = _to_float(parts[0]), _to_float(parts[1])
        if not is_valid_coordinate(lat, lng):
            continue
        path.append([lat, lng])  # type: ignore[list-item]
    return path


def to_point_wkt(lat: float, lng: float) -> str:
    return f"POINT({lng} {lat})"


def to_linestring_wkt(path: Sequence[Sequence[float]]) -> str:
    """`[[lat, lng], ...]` -> `LINESTRING(lng lat, ...)`."""
    return "LINESTRING(" + ", ".join(f"{p[1]} {p[0]}" for p in path) + ")"


def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in metres (haversine)."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def distance_to_line_segment(
    point: LatLng, seg_start: LatLng, seg_end: LatLng
) -> tuple[float, LatLng]:
    """
    Distance in metres from `point` to the segment, and the closest point on it.

    The projection is done in planar radian space, which is accurate enough
    at the few-metre snapping scale it is used for.
    """
    p_lat, p_lng = math.radians(point[0]), math.radians(point[1])
    s_lat, s_lng = math.radians(seg_start[0]), math.radians(seg_start[1])
    e_lat, e_lng = math.radians(seg_end[0]), math.radians(seg_end[1])

    dx = e_lng - s_lng
    dy = e_lat - s_lat
    d2 = dx * dx + dy * dy

    if d2 < 1e-10:
        dist = calculate_distance(point[0], point[1], seg_start[0], seg_start[1])
        return dist, (seg_start[0], seg_start[1])

    t = max(0.0, min(1.0, ((p_lng - s_lng) * dx + (p_lat - s_lat) * dy) / d2))
    closest = (math.degrees(s_lat + t * dy), math.degrees(s_lng + t * dx))
    return calculate_distance(point[0], point[1], *closest), closest


class PointFeature(Protocol):
    lat: float
    lng: float


class PathFeature(Protocol):
    path: list[list[float]]


@dataclass(frozen=True)
class NearestFeature:
    type: Literal["mill", "levada"]
    distance: float
    snapped_point: LatLng
    feature: Any


def _nearest_on_path(
    lat: float, lng: float, path: Sequence[Sequence[float]]
) -> Optional[tuple[float, LatLng]]:
    if not path or len(path) < 2:
        return None
    best: Optional[tuple[float, LatLng]] = None
    for start, end in zip(path, path[1:]):
        dist, closest = distance_to_line_segment(
            (lat, lng), (start[0], start[1]), (end[0], end[1])
        )
        if best is None or dist < best[0]:
            best = (dist, closest)
    return best


def find_nearest_mill(
    lat: float,
    lng: float,
    mills: Sequence[PointFeature],
    threshold_m: float = DEFAULT_SNAP_THRESHOLD_M,
) -> Optional[NearestFeature]:
    nearest: Optional[NearestFeature] = None
    for mill in mills:
        if not is_valid_coordinate(mill.lat, mill.lng):
            continue
        dist = calculate_distance(lat, lng, mill.lat, mill.lng)
        if dist <= threshold_m and (nearest is None or dist < nearest.distance):
            nearest = NearestFeature("mill", dist, (mill.lat, mill.lng), mill)
    return nearest


def find_nearest_water_line(
    lat: float,
    lng: float,
    water_lines: Sequence[PathFeature],
    threshold_m: float = DEFAULT_SNAP_THRESHOLD_M,
) -> Optional[NearestFeature]:
    nearest: Optional[NearestFeature] = None
    for line in water_lines:
        hit = _nearest_on_path(lat, lng, line.path)
        if hit is None:
            continue
        dist, closest = hit
        if dist <= threshold_m and (nearest is None or dist < nearest.distance):
            nearest = NearestFeature("levada", dist, closest, line)
    return nearest


def find_nearest_feature(
    lat: float,
    lng: float,
    mills: Sequence[PointFeature],
    water_lines: Sequence[PathFeature],
    threshold_m: float = DEFAULT_SNAP_THRESHOLD_M,
) -> Optional[NearestFeature]:
    """
    Nearest mill or levada within `threshold_m` of the point.

    Mills are checked first, so on an exact tie the mill wins.
    """
    mill_hit = find_nearest_mill(lat, lng, mills, threshold_m)
    line_hit = find_nearest_water_line(lat, lng, water_lines, threshold_m)
    if mill_hit is None:
        return line_hit
    if line_hit is None or mill_hit.distance <= line_hit.distance:
        return mill_hit
    return line_hit
