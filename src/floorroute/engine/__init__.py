"""Engine module for floorplan navigation.

This module provides the pipeline API: analyze a drawing, find rooms by
label and plan routes to them.
"""

from ..geom.building import build_geometry
from .api import (
    FloorplanAnalysis,
    RoutePlan,
    analyze,
    choose_start,
    detect,
    find_rooms,
    plan_route,
    select_match,
)

__all__ = [
    "FloorplanAnalysis",
    "RoutePlan",
    "detect",
    "build_geometry",
    "analyze",
    "find_rooms",
    "select_match",
    "choose_start",
    "plan_route",
]
