"""Grid ray casting with a digital differential analyser."""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass

from .model import (
    CELL_DOOR_CLOSED,
    CELL_DOOR_OPEN,
    CELL_VOID,
    CELL_WALL,
    GameMap,
    Point,
)

TAU = 2 * math.pi
_MIN_DIRECTION = 0.000001
_SOLID = frozenset({CELL_WALL, CELL_DOOR_CLOSED})
_SOLID_VISUAL = frozenset({CELL_WALL, CELL_DOOR_CLOSED, CELL_DOOR_OPEN})


@dataclass
class Ray:
    """State and result of one cast ray, in map-cell units unless noted."""

    dir_x: float
    dir_y: float
    map_x: int
    map_y: int
    side_dist_x: float
    side_dist_y: float
    delta_dist_x: float
    delta_dist_y: float
    step_x: int
    step_y: int
    hit: bool = False
    side: int = -1
    perp_wall_dist: float = 0.0
    length: float = 0.0
    map_value: int = CELL_VOID


def normalize_angle(angle: float) -> float:
    """Bring ``angle`` into the interval [0, 2*pi)."""
    while angle < 0:
        angle += TAU
    while angle >= TAU:
        angle -= TAU
    return angle


def _cell(game_map: GameMap, x: int, y: int) -> int:
    if 0 <= y < len(game_map.grid):
        row = game_map.grid[y]
        if 0 <= x < len(row):
            return row[x]
    return CELL_VOID


def _start_ray(game_map: GameMap, angle: float) -> Ray:
    player = game_map.player
    size = game_map.size
    dir_x = math.cos(angle)
    dir_y = math.sin(angle)
    if abs(dir_x) < _MIN_DIRECTION:
        dir_x = _MIN_DIRECTION
    if abs(dir_y) < _MIN_DIRECTION:
        dir_y = _MIN_DIRECTION
    map_x = int(player.x / size)
    map_y = int(player.y / size)
    delta_x = abs(1 / dir_x)
    delta_y = abs(1 / dir_y)
    px = player.x / size
    py = player.y / size
    if dir_x < 0:
        step_x, side_x = -1, (px - map_x) * delta_x
    else:
        step_x, side_x = 1, (map_x + 1.0 - px) * delta_x
    if dir_y < 0:
        step_y, side_y = -1, (py - map_y) * delta_y
    else:
        step_y, side_y = 1, (map_y + 1.0 - py) * delta_y
    return Ray(dir_x, dir_y, map_x, map_y, side_x, side_y,
               delta_x, delta_y, step_x, step_y)


def _march(game_map: GameMap, ray: Ray, visual: bool) -> None:
    solid = _SOLID_VISUAL if visual else _SOLID
    iterations = 0
    while not ray.hit and iterations < game_map.player.max_ray_distance:
        if ray.side_dist_x < ray.side_dist_y:
            ray.side_dist_x += ray.delta_dist_x
            ray.map_x += ray.step_x
            ray.side = 0
        else:
            ray.side_dist_y += ray.delta_dist_y
            ray.map_y += ray.step_y
            ray.side = 1
        inside = (0 <= ray.map_x < game_map.width
                  and 0 <= ray.map_y < game_map.height)
        if not inside:
            break
        if _cell(game_map, ray.map_x, ray.map_y) in solid:
            ray.hit = True
        iterations += 1


def _perpendicular_distance(game_map: GameMap, ray: Ray) -> float:
    size = game_map.size
    if ray.side == 0:
        dist = (ray.map_x - game_map.player.x / size
                + (1 - ray.step_x) / 2.01) / ray.dir_x
    else:
        dist = (ray.map_y - game_map.player.y / size
                + (1 - ray.step_y) / 2.01) / ray.dir_y
    return max(dist, 0.0)


def cast_ray(game_map: GameMap, angle: float, visual: bool = False) -> Ray:
    """Cast one ray from the player; ``visual`` makes open doors stop it too."""
    ray = _start_ray(game_map, angle)
    _march(game_map, ray, visual)
    ray.perp_wall_dist = _perpendicular_distance(game_map, ray)
    ray.length = ray.perp_wall_dist * game_map.size
    ray.map_value = _cell(game_map, ray.map_x, ray.map_y)
    return ray


def cast_wall(game_map: GameMap, angle: float) -> Ray:
    """Cast a ray for the 3D view, which passes through open doors."""
    return cast_ray(game_map, angle, visual=False)


def ray_fan(game_map: GameMap) -> Iterator[tuple[Point, Point]]:
    """Yield the minimap segment of every ray across the field of view."""
    player = game_map.player
    fov = player.fov * (math.pi / 180.0)
    count = int(math.ceil(game_map.numrays))
    step = fov / float(game_map.numrays - 1)
    start = Point(int(player.x), int(player.y))
    for i in range(count):
        angle = normalize_angle((player.direction - fov / 2.0) + step * i)
        ray = cast_ray(game_map, angle, visual=False)
        end = Point(int(player.x + ray.dir_x * ray.length),
                    int(player.y + ray.dir_y * ray.length))
        yield start, end