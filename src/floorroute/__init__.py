"""floorroute - Scan SVG floorplans and route to rooms."""

__version__ = "0.1.0"

from .core.model import DetectionResult, GeometryResult, Point, RoomBox, RoomLabel, WallSegment
from .engine.api import analyze, detect, plan_route

__all__ = [
    "DetectionResult",
    "GeometryResult",
    "Point",
    "RoomBox",
    "RoomLabel",
    "WallSegment",
    "analyze",
    "detect",
    "plan_route",
]
