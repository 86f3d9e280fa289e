"""Persistence of scan results as overlay JSON files.

An overlay file stores the detection (and optionally the derived geometry)
of one building so the drawing does not have to be scanned again::

    {
      "version": 3,
      "buildingId": "...",
      "processedAt": 1700000000000,
      "detected": {"walls": [...], "floors": [...], "entrances": [...],
                   "doors": [...], "rooms": [...], "corridors": [...]},
      "computed": {"buildingBounds": {...}, "roomBoxes": [...],
                   "filteredWalls": [...]}
    }
"""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Optional, Tuple, Union

from ..core.model import (
    Bounds,
    CorridorMarker,
    DetectionResult,
    DoorMarker,
    EntranceMarker,
    FloorPatch,
    GeometryResult,
    Point,
    RoomBox,
    RoomLabel,
    WallSegment,
)

OVERLAY_VERSION = 3


class OverlayError(ValueError):
    """Raised when an overlay file is malformed or has an unsupported version."""


def _wall_to_dict(wall: WallSegment) -> dict:
    data = {
        "x1": wall.p1.x,
        "y1": wall.p1.y,
        "x2": wall.p2.x,
        "y2": wall.p2.y,
        "source": wall.source_kind,
    }
    if wall.stroke_color:
        data["stroke"] = wall.stroke_color
    data["strokeWidth"] = wall.stroke_width
    return data


def _wall_from_dict(data: dict) -> WallSegment:
    return WallSegment(
        Point(float(data["x1"]), float(data["y1"])),
        Point(float(data["x2"]), float(data["y2"])),
        source_kind=data.get("source", "line"),
        stroke_color=data.get("stroke", ""),
        stroke_width=float(data.get("strokeWidth", 1.0)),
    )


def _bounds_to_dict(bounds: Bounds) -> dict:
    return {"minX": bounds.min_x, "minY": bounds.min_y, "maxX": bounds.max_x, "maxY": bounds.max_y}


def _bounds_from_dict(data: dict) -> Bounds:
    return Bounds(float(data["minX"]), float(data["minY"]), float(data["maxX"]), float(data["maxY"]))


def detection_to_dict(detection: DetectionResult) -> dict:
    """Serialize a detection result to plain JSON types."""
    return {
        "walls": [_wall_to_dict(w) for w in detection.walls],
        "floors": [
            {**_bounds_to_dict(Bounds(f.min_x, f.min_y, f.max_x, f.max_y)), "source": f.source_kind}
            for f in detection.floors
        ],
        "entrances": [
            {"x": e.point.x, "y": e.point.y, "source": e.source_kind} for e in detection.entrances
        ],
        "doors": [
            {"id": d.id, "x": d.point.x, "y": d.point.y, "source": d.source_kind}
            for d in detection.doors
        ],
        "rooms": [{"id": r.id, "x": r.point.x, "y": r.point.y} for r in detection.room_labels],
        "corridors": [
            {"id": c.id, "points": [[p.x, p.y] for p in c.points], "source": c.source_kind}
            for c in detection.corridors
        ],
    }


def detection_from_dict(data: dict) -> DetectionResult:
    """Rebuild a detection result from :func:`detection_to_dict` output.

    Raises:
        OverlayError: If a required key is missing or a value is not numeric.
    """
    try:
        floors = []
        for item in data.get("floors", []):
            box = _bounds_from_dict(item)
            floors.append(FloorPatch(box.min_x, box.min_y, box.max_x, box.max_y, item.get("source", "rect")))
        return DetectionResult(
            walls=tuple(_wall_from_dict(item) for item in data.get("walls", [])),
            floors=tuple(floors),
            entrances=tuple(
                EntranceMarker(Point(float(item["x"]), float(item["y"])), item.get("source", "polygon"))
                for item in data.get("entrances", [])
            ),
            doors=tuple(
                DoorMarker(
                    Point(float(item["x"]), float(item["y"])),
                    item.get("id"),
                    item.get("source", "rect"),
                )
                for item in data.get("doors", [])
            ),
            room_labels=tuple(
                RoomLabel(str(item["id"]), Point(float(item["x"]), float(item["y"])))
                for item in data.get("rooms", [])
            ),
            corridors=tuple(
                CorridorMarker(
                    tuple(Point(float(x), float(y)) for x, y in item["points"]),
                    item.get("id"),
                    item.get("source", "rect"),
                )
                for item in data.get("corridors", [])
            ),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise OverlayError(f"Invalid detection data: {e}") from e


def geometry_to_dict(geometry: GeometryResult) -> dict:
    """Serialize a geometry result to plain JSON types."""
    bounds = geometry.building_bounds
    return {
        "buildingBounds": _bounds_to_dict(bounds) if bounds is not None else None,
        "roomBoxes": [
            {"id": b.id, "left": b.left, "right": b.right, "top": b.top, "bottom": b.bottom}
            for b in geometry.room_boxes
        ],
        "filteredWalls": [_wall_to_dict(w) for w in geometry.filtered_walls],
    }


def geometry_from_dict(data: dict) -> GeometryResult:
    """Rebuild a geometry result from :func:`geometry_to_dict` output.

    Raises:
        OverlayError: If a required key is missing or a value is not numeric.
    """
    try:
        bounds = data.get("buildingBounds")
        return GeometryResult(
            building_bounds=_bounds_from_dict(bounds) if bounds else None,
            room_boxes=tuple(
                RoomBox(
                    str(item["id"]),
                    float(item["left"]),
                    float(item["right"]),
                    float(item["top"]),
                    float(item["bottom"]),
                )
                for item in data.get("roomBoxes", [])
            ),
            filtered_walls=tuple(_wall_from_dict(item) for item in data.get("filteredWalls", [])),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise OverlayError(f"Invalid geometry data: {e}") from e


def save_overlay(
    path: Union[str, Path],
    building_id: str,
    detection: DetectionResult,
    geometry: Optional[GeometryResult] = None,
) -> Path:
    """Write an overlay file, creating parent directories as needed.

    Args:
        path: Destination file.
        building_id: Identifier stored as ``buildingId``.
        detection: Detection result to store.
        geometry: Derived geometry to store under ``computed``, if any.

    Returns:
        The path written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "version": OVERLAY_VERSION,
        "buildingId": building_id,
        "processedAt": int(time.time() * 1000),
        "detected": detection_to_dict(detection),
    }
    if geometry is not None:
        payload["computed"] = geometry_to_dict(geometry)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
    return path


def load_overlay(path: Union[str, Path]) -> Tuple[DetectionResult, Optional[GeometryResult]]:
    """Read an overlay file written by :func:`save_overlay`.

    Args:
        path: Overlay file.

    Returns:
        The detection result and the stored geometry (``None`` if absent).

    Raises:
        FileNotFoundError: If the file does not exist.
        OverlayError: If the file is not valid overlay JSON.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Overlay file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        raise OverlayError(f"Invalid JSON in overlay file {path}: {e}") from e

    if not isinstance(payload, dict):
        raise OverlayError(f"Overlay file {path} must contain a JSON object")
    version = payload.get("version")
    if version != OVERLAY_VERSION:
        raise OverlayError(f"Unsupported overlay version {version!r} in {path}")
    if "detected" not in payload:
        raise OverlayError(f"Overlay file {path} has no 'detected' section")

    detection = detection_from_dict(payload["detected"])
    computed = payload.get("computed")
    geometry = geometry_from_dict(computed) if computed is not None else None
    return detection, geometry
