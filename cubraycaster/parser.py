"""Reading of .cub scene files into a GameMap."""

from __future__ import annotations

import math
import os
from collections.abc import Iterable

from .model import (
    CELL_DOOR_CLOSED,
    CELL_FLOOR,
    CELL_VOID,
    CELL_WALL,
    Color,
    CubError,
    GameMap,
    Texture,
)
from .validate import validate_map

_SPACES = " \t\n\v\f\r"
_DIGITS = "0123456789"
_MAP_CHARS = "01NESWD \n"
_MAP_CELLS = "01NESWD"
_CELL_CODES = {
    " ": CELL_VOID,
    "0": CELL_FLOOR,
    "1": CELL_WALL,
    "D": CELL_DOOR_CLOSED,
}
_HEADINGS = {
    "N": 270 * math.pi / 180,
    "S": 90 * math.pi / 180,
    "E": 0.000001,
    "W": 180 * math.pi / 180,
}
_MULTIPLE_PLAYERS = -1


def split_fields(text: str, sep: str) -> list[str]:
    """Split ``text`` on ``sep`` and drop the empty pieces."""
    return [piece for piece in text.split(sep) if piece]


def parse_int(text: str) -> int:
    """Read a leading decimal integer the way C's atoi does; 0 if there is none."""
    rest = text.lstrip(_SPACES)
    negative = False
    if rest[:1] in ("-", "+"):
        negative = rest[0] == "-"
        rest = rest[1:]
    value = 0
    for ch in rest:
        if ch not in _DIGITS:
            break
        value = value * 10 + (ord(ch) - ord("0"))
    return -value if negative else value


def _is_number(text: str) -> bool:
    return all(ch in _DIGITS for ch in text)


def check_file(path: str) -> str:
    """Check that ``path`` names a readable file ending in .cub and return it."""
    if len(path) < 5:
        raise CubError("Invalid file name")
    if not path.endswith(".cub"):
        raise CubError("File must have .cub extension")
    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError as exc:
        raise CubError("Could not open file") from exc
    os.close(fd)
    return path


def is_map_line(line: str) -> bool:
    """Tell whether ``line`` holds only map characters and at least one cell."""
    return (all(ch in _MAP_CHARS for ch in line)
            and any(ch in _MAP_CELLS for ch in line))


def parse_color(text: str) -> Color:
    """Parse "R,G,B"; an invalid colour comes back with ``r`` set to -1."""
    values = split_fields(text, ",")
    if len(values) != 3 or not all(_is_number(value) for value in values):
        return Color(0, -1, 0, 0)
    r, g, b = (parse_int(value) for value in values)
    color = Color(0, r, g, b)
    if not all(0 <= component <= 255 for component in (r, g, b)):
        color.r = -1
    return color


def count_map_lines(lines: Iterable[str]) -> int:
    """Count the map lines of the first contiguous block of them."""
    count = 0
    started = False
    for line in lines:
        if is_map_line(line):
            started = True
            count += 1
        elif started:
            break
    return count


def _strip_newline(text: str) -> str:
    return text[:-1] if text.endswith("\n") else text


def _textures(game_map: GameMap) -> dict[str, Texture]:
    return {
        "NO": game_map.north,
        "SO": game_map.south,
        "WE": game_map.west,
        "EA": game_map.east,
        "D": game_map.door,
    }


def _textures_complete(game_map: GameMap) -> bool:
    return all(texture.path is not None
               for texture in _textures(game_map).values())


def _parse_config(game_map: GameMap, line: str) -> bool:
    """Apply a "KEY value" line; return False if it is not one."""
    fields = split_fields(line, " ")
    if len(fields) != 2:
        return False
    key, value = fields[0], _strip_newline(fields[1])
    textures = _textures(game_map)
    if key in textures:
        texture = textures[key]
        if texture.path is not None:
            raise CubError("Duplicate texture path")
        texture.path = value
        return True
    if key == "F":
        if game_map.floor.r >= 0:
            raise CubError("Duplicate floor color")
        game_map.floor = parse_color(value)
        return True
    if key == "C":
        if game_map.ceiling.r >= 0:
            raise CubError("Duplicate ceiling color")
        game_map.ceiling = parse_color(value)
        return True
    return False


def _place_player(game_map: GameMap, x: int, y: int, heading: str) -> None:
    player = game_map.player
    size = game_map.size
    player.x = x * size + size / 2
    player.y = y * size + size / 2
    if player.direction != 0:
        player.direction = _MULTIPLE_PLAYERS
    else:
        player.direction = _HEADINGS[heading]


def _parse_row(game_map: GameMap, line: str, y: int) -> list[int]:
    width = sum(1 for ch in line if ch != "\n")
    if width > game_map.width:
        game_map.width = width + 1
    row = [CELL_FLOOR] * width
    body = line.split("\n", 1)[0]
    for x, ch in enumerate(body):
        if ch in _CELL_CODES:
            row[x] = _CELL_CODES[ch]
        elif ch in _HEADINGS:
            row[x] = CELL_FLOOR
            _place_player(game_map, x, y, ch)
    return row


def parse_lines(lines: Iterable[str]) -> GameMap:
    """Build a GameMap from the lines of a scene, without validating it."""
    lines = list(lines)
    game_map = GameMap()
    expected_rows = count_map_lines(lines)
    rows: list[list[int]] = []
    config_done = False
    for line in lines:
        if not config_done and _parse_config(game_map, line):
            continue
        map_line = is_map_line(line)
        if map_line and _textures_complete(game_map):
            config_done = True
            rows.append(_parse_row(game_map, line, len(rows)))
        elif config_done and not map_line:
            raise CubError("Invalid map format")
        elif not config_done and not map_line and line[:1] != "\n":
            raise CubError("Wrong variables in fd")
    rows.extend([] for _ in range(expected_rows - len(rows)))
    game_map.grid = rows
    game_map.height = len(rows)
    return game_map


def _read_lines(path: str) -> list[str]:
    try:
        with open(path, "rb") as handle:
            return [raw.decode("utf-8", errors="surrogateescape")
                    for raw in handle]
    except OSError as exc:
        raise CubError("Could not open file") from exc


def parse_map(path: str) -> GameMap:
    """Read, parse and validate the scene file at ``path``."""
    return validate_map(parse_lines(_read_lines(path)))