"""Routing between two points of a floorplan.

Two strategies are available behind :func:`compute_route`: a visibility graph
over wall endpoints and an A* search over a sampled walk grid.
"""

from .grid import WalkGrid, build_walk_grid, grid_route, relax_grid, snap_to_grid
from .router import RouteStrategy, compute_route
from .visibility import path_length, visibility_route, wall_slide

__all__ = [
    "RouteStrategy",
    "compute_route",
    "visibility_route",
    "wall_slide",
    "path_length",
    "WalkGrid",
    "build_walk_grid",
    "relax_grid",
    "snap_to_grid",
    "grid_route",
]
