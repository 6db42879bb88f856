"""Core value types shared by the map parser, the ray caster and the renderer."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

WIN_TITLE = "Cub3D"
WIN_WIDTH = 1280
WIN_HEIGHT = 768

BLACK = 0
BLUE = 255
GREEN_DARK = 32768
GREEN = 65280
CYAN = 65535
GRAY = 8421504
GRAY_DARK = 2631720
RED = 16711680
MAGENTA = 16711935
YELLOW = 16776960
WHITE = 16777215

# Cell values stored in a map grid.
CELL_VOID = -1
CELL_FLOOR = 0
CELL_WALL = 1
CELL_DOOR_CLOSED = 2
CELL_DOOR_OPEN = 3


class CubError(Exception):
    """Raised when a map, a texture or the game setup is invalid."""


@dataclass
class Color:
    """A colour as transparency, red, green and blue components."""

    t: int = 0
    r: int = 0
    g: int = 0
    b: int = 0

    def pack(self) -> int:
        """Return the colour as one integer laid out as 0xTTRRGGBB."""
        return (self.t << 24) | (self.r << 16) | (self.g << 8) | self.b


@dataclass(frozen=True)
class Point:
    """An integer position on the screen or in the map."""

    x: int
    y: int


@dataclass(frozen=True)
class Rect:
    """A quadrilateral given by its four corners in drawing order."""

    p0: Point
    p1: Point
    p2: Point
    p3: Point

    def __iter__(self) -> Iterator[Point]:
        return iter((self.p0, self.p1, self.p2, self.p3))


@dataclass(frozen=True)
class Range:
    """An inclusive integer interval."""

    min: int
    max: int


@dataclass
class Texture:
    """A wall texture: its file path and, once loaded, its pixels."""

    path: str | None = None
    width: int = 0
    height: int = 0
    data: Sequence[int] = field(default_factory=list)


@dataclass
class Player:
    """Position, heading and control settings of the player."""

    x: float = 0.0
    y: float = 0.0
    dx: float = 0.0
    dy: float = 0.0
    speed: float = 1.0
    direction: float = 0.0
    fov: float = 60.0
    max_ray_distance: float = 1000.0
    mouse_speed: float = 0.002
    mouse_x: int = 0


def _unset_color() -> Color:
    return Color(0, -1, 0, 0)


@dataclass
class GameMap:
    """A parsed scene: the cell grid, its textures, colours and the player."""

    grid: list[list[int]] = field(default_factory=list)
    width: int = 0
    height: int = 0
    size: float = 10.0
    numrays: float = 1360.0
    min_value: int = 0
    max_value: int = 0
    north: Texture = field(default_factory=Texture)
    south: Texture = field(default_factory=Texture)
    west: Texture = field(default_factory=Texture)
    east: Texture = field(default_factory=Texture)
    door: Texture = field(default_factory=Texture)
    floor: Color = field(default_factory=_unset_color)
    ceiling: Color = field(default_factory=_unset_color)
    player: Player = field(default_factory=Player)


def _trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b >= 0) else -quotient


def map_value(range_in: Range, range_out: Range, value: int) -> int:
    """Scale ``value`` from ``range_out`` into ``range_in`` with integer steps."""
    out_max = range_out.max
    if out_max - range_out.min == 0:
        out_max = range_out.min + 1
    step = _trunc_div(range_in.max - range_in.min, out_max - range_out.min)
    return range_in.min + step * (value - range_out.min)


def line_color(grid: Sequence[Sequence[int]], i: int, j: int, kind: str,
               value_range: Range) -> int:
    """Return the packed green shade of cell ``grid[i][j]``.

    The shade depends only on the cell value; ``kind`` ('h' or 'v') names the
    orientation of the line being drawn and does not change the result.
    """
    green = map_value(Range(40, 255), value_range, grid[i][j])
    return Color(0, 40, green, 40).pack()