"""Core data models, thresholds and color helpers."""

from .config import DetectionConfig, DoorConfig, GeometryConfig, GridConfig, VisibilityConfig
from .model import (
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
    RootFrame,
    Transform,
    WallSegment,
)

__all__ = [
    "Bounds",
    "CorridorMarker",
    "DetectionResult",
    "DoorMarker",
    "EntranceMarker",
    "FloorPatch",
    "GeometryResult",
    "Point",
    "RoomBox",
    "RoomLabel",
    "RootFrame",
    "Transform",
    "WallSegment",
    "DetectionConfig",
    "GeometryConfig",
    "DoorConfig",
    "VisibilityConfig",
    "GridConfig",
]
