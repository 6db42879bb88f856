"""Structural checks run on a freshly parsed map."""

from __future__ import annotations

import os
from collections.abc import Sequence

from .model import CELL_FLOOR, CELL_VOID, CubError, GameMap

_OUTSIDE = -2


def transpose(grid: Sequence[Sequence[int]]) -> list[list[int]]:
    """Swap rows and columns, padding short rows with void cells."""
    height = len(grid)
    max_width = max((len(row) for row in grid), default=0)
    result = [[CELL_VOID] * height for _ in range(max_width)]
    for i, row in enumerate(grid):
        for j, cell in enumerate(row):
            result[j][i] = cell
    return result


def has_holes(grid: Sequence[Sequence[int]], width: int) -> bool:
    """Tell whether any floor cell of a row touches the void or the row's end.

    Only horizontal neighbours are checked; run the check on the transposed
    grid as well to cover columns.
    """
    for row in grid:
        for j in range(min(width, len(row))):
            cell = row[j]
            if cell < CELL_VOID:
                break
            if row[0] == CELL_FLOOR:
                return True
            if cell != CELL_FLOOR:
                continue
            if j > 0 and row[j - 1] == CELL_VOID:
                return True
            if j == width - 1:
                return True
            following = row[j + 1] if j + 1 < len(row) else _OUTSIDE
            if following < 0:
                return True
    return False


def _readable(path: str) -> bool:
    return os.path.exists(path) and os.access(path, os.R_OK)


def validate_map(game_map: GameMap) -> GameMap:
    """Check walls, textures, colours and the player; raise CubError on failure."""
    grid = game_map.grid
    if has_holes(grid, game_map.width) or has_holes(transpose(grid), len(grid)):
        raise CubError("Map has holes")

    textures = (game_map.north, game_map.south, game_map.west,
                game_map.east, game_map.door)
    if any(texture.path is None for texture in textures):
        raise CubError("Missing texture path")

    components = [
        value
        for color in (game_map.ceiling, game_map.floor)
        for value in (color.r, color.g, color.b)
    ]
    if any(value < 0 for value in components):
        raise CubError("Invalid color values")
    if any(value > 255 for value in components):
        raise CubError("Color value must be between 0 and 255")

    if game_map.player.direction == 0:
        raise CubError("No player position found in map")
    if game_map.player.direction == -1:
        raise CubError("Multiple player positions found")

    if any(not _readable(texture.path) for texture in textures):
        raise CubError("Invalid texture path")
    return game_map