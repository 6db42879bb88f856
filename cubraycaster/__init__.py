"""Grid-based first-person raycasting engine that plays .cub scene files."""

__version__ = "0.1.0"