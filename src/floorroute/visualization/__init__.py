"""Visualization module for floorplans.

This module renders debug images of what was detected in a drawing,
optionally with a planned route.
"""

from .overlay import render_overlay

__all__ = ["render_overlay"]
