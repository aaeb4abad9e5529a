"""Image grid generation and slicing."""

from .generator import ImageGridGenerator
from .grid import placeholder_panels, split_grid

__all__ = [
    "ImageGridGenerator",
    "placeholder_panels",
    "split_grid",
]
