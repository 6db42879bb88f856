"""Drawing of one frame: sky and floor, textured walls, minimap, weapon and HUD."""

from __future__ import annotations

import math

import numpy as np

from .canvas import Canvas, rotate_rect
from .game import GameState, Sprite
from .model import (
    BLUE,
    CELL_DOOR_CLOSED,
    CELL_DOOR_OPEN,
    CELL_FLOOR,
    CELL_VOID,
    CYAN,
    GREEN,
    RED,
    WHITE,
    WIN_HEIGHT,
    WIN_WIDTH,
    YELLOW,
    Color,
    GameMap,
    Point,
    Rect,
    Texture,
)
from .raycast import Ray, cast_wall, normalize_angle, ray_fan

_DEFAULT_FLOOR = Color(0, 100, 100, 100)
_DEFAULT_CEILING = Color(0, 135, 206, 235)
_SHADE_MASK = 8355711
_SPRITE_OPAQUE_MASK = 0x00FF00FF
_SPRITE_X_SHIFT = 75
_MINIMAP_CELLS = frozenset({CELL_FLOOR, 1, CELL_DOOR_CLOSED, CELL_DOOR_OPEN})

HudLine = tuple[int, int, int, str]


def draw_background(canvas: Canvas, game_map: GameMap) -> None:
    """Paint the floor on the lower half and the ceiling on the upper half."""
    floor = game_map.floor if game_map.floor.r >= 0 else _DEFAULT_FLOOR
    ceiling = game_map.ceiling if game_map.ceiling.r >= 0 else _DEFAULT_CEILING
    middle = canvas.height // 2
    canvas.pixels[middle:, :] = floor.pack() & 0xFFFFFFFF
    canvas.pixels[:middle + 1, :] = ceiling.pack() & 0xFFFFFFFF


def _wall_texture(game_map: GameMap, ray: Ray) -> tuple[Texture, int]:
    """Pick the texture a ray hit and the texture column of the hit point."""
    player = game_map.player
    size = game_map.size
    if ray.side == 0:
        wall_x = player.y / size + ray.perp_wall_dist * ray.dir_y
    else:
        wall_x = player.x / size + ray.perp_wall_dist * ray.dir_x
    wall_x -= math.floor(wall_x)
    if ray.map_value == CELL_DOOR_CLOSED:
        texture = game_map.door
    elif ray.side == 0:
        texture = game_map.east if ray.dir_x > 0 else game_map.west
    elif ray.dir_y > 0:
        texture = game_map.south
    else:
        texture = game_map.north
    tex_x = int(wall_x * float(texture.width))
    if (ray.side == 0 and ray.dir_x > 0) or (ray.side == 1 and ray.dir_y < 0):
        tex_x = texture.width - tex_x - 1
    return texture, tex_x


def _column_colors(texture: Texture, texels: np.ndarray, tex_x: int,
                   tex_pos: float, step: float, count: int,
                   shaded: bool) -> np.ndarray:
    positions = tex_pos + step * np.arange(count)
    tex_y = positions.astype(np.int64) & (texture.height - 1)
    index = texture.height * tex_y + tex_x
    valid = (index >= 0) & (index < len(texels))
    colors = np.where(valid, texels[np.clip(index, 0, len(texels) - 1)], 0)
    if shaded:
        colors = (colors >> 1) & _SHADE_MASK
    return (colors & 0xFFFFFFFF).astype(np.uint32)


def draw_walls(canvas: Canvas, game_map: GameMap) -> None:
    """Render the textured 3D view, one vertical strip per ray."""
    player = game_map.player
    width, height = canvas.width, canvas.height
    fov = player.fov * (math.pi / 180.0)
    numrays = game_map.numrays
    line_width = math.ceil(width / numrays)
    texel_cache: dict[int, np.ndarray] = {}
    angle = player.direction - fov / 2.0
    for i in range(math.ceil(numrays)):
        angle = normalize_angle(angle)
        ray = cast_wall(game_map, angle)
        texture, tex_x = _wall_texture(game_map, ray)

        denominator = ray.length * math.cos(angle - player.direction)
        if denominator == 0:
            wall_height = math.inf
        else:
            wall_height = (game_map.size * height) / denominator
        draw_start = max(height / 2 - wall_height / 2, 0.0)
        draw_end = height / 2 + wall_height / 2
        if draw_end >= height:
            draw_end = height - 1
        line_x = int(i * (width / numrays))

        angle += fov / numrays

        if not texture.data or texture.height <= 0:
            continue
        texels = texel_cache.get(id(texture))
        if texels is None:
            texels = np.asarray(texture.data, dtype=np.int64)
            texel_cache[id(texture)] = texels

        first_y = max(int(draw_start - 1) + 1, 0)
        last_y = min(math.ceil(draw_end), height)
        x_end = min(line_x + line_width, width)
        count = last_y - first_y
        if count <= 0 or line_x >= x_end:
            continue

        step = texture.height / wall_height
        tex_pos = (draw_start - height / 2 + wall_height / 2) * step
        if not math.isfinite(tex_pos):
            tex_pos = 0.0
        colors = _column_colors(texture, texels, tex_x, tex_pos, step, count,
                                ray.side == 1)
        canvas.pixels[first_y:last_y, max(line_x, 0):x_end] = colors[:, None]


def draw_player(canvas: Canvas, game_map: GameMap) -> None:
    """Draw the ray fan and the rotated player marker on the minimap."""
    player = game_map.player
    x, y = int(player.x), int(player.y)
    rect = Rect(
        Point(x - 2, y - 2),
        Point(x - 2, y + 2),
        Point(x + 2, y + 2),
        Point(x + 2, y - 2),
    )
    rect = rotate_rect(rect, Point(x, y), player.direction)
    for start, end in ray_fan(game_map):
        canvas.draw_line(start, end, RED)
    canvas.draw_rect(rect, BLUE, True)
    canvas.draw_rect(rect, RED, False)


def draw_minimap(canvas: Canvas, game_map: GameMap) -> None:
    """Draw the grid as coloured squares, then the player on top."""
    player = game_map.player
    player.dx = math.cos(player.direction)
    player.dy = math.sin(player.direction)
    size = game_map.size
    for i, row in enumerate(game_map.grid):
        if not row:
            break
        for j, cell in enumerate(row):
            if cell < CELL_VOID:
                break
            if cell in _MINIMAP_CELLS:
                canvas.draw_square(Point(int(j * size), int(i * size)),
                                   int(size), cell)
    draw_player(canvas, game_map)


def draw_crosshair(canvas: Canvas, center: Point) -> None:
    """Draw the red aiming cross around ``center``."""
    for i in range(11):
        for j in range(11):
            if i in (4, 5) or j in (4, 5):
                canvas.put_pixel(center.x + i - 5, center.y + j, RED)


def draw_sprite(canvas: Canvas, sprite: Sprite, position: Point) -> None:
    """Blit the current frame of ``sprite`` scaled by its ``scale``.

    Pixels whose red and blue channels are both zero are transparent.
    """
    if not sprite.visible or not sprite.data:
        return
    scale = sprite.scale
    rows = np.arange(max(int(sprite.frame_height * scale), 0))
    cols = np.arange(max(int(sprite.width * scale), 0))
    rows = rows[(rows + position.y < canvas.height) & (rows + position.y >= 0)]
    cols = cols[(cols + position.x < canvas.width) & (cols + position.x >= 0)]
    if rows.size == 0 or cols.size == 0:
        return

    data = np.asarray(sprite.data, dtype=np.int64)
    frame_offset = sprite.current_frame * sprite.frame_height
    src_x = (cols / scale).astype(np.int64)
    src_y = (rows / scale).astype(np.int64) + frame_offset
    valid_x = (src_x >= 0) & (src_x < sprite.width)
    valid_y = (src_y >= 0) & (src_y < sprite.height)
    index = src_y[:, None] * sprite.width + src_x[None, :]
    mask = valid_y[:, None] & valid_x[None, :] & (index < len(data))
    colors = data[np.where(mask, index, 0)]
    mask &= (colors & _SPRITE_OPAQUE_MASK) != 0

    draw_x = position.x + cols - _SPRITE_X_SHIFT
    draw_y = position.y + rows
    mask &= ((draw_x >= 0) & (draw_x < canvas.width))[None, :]
    rr, cc = np.nonzero(mask)
    canvas.pixels[draw_y[rr], draw_x[cc]] = (
        colors[rr, cc] & 0xFFFFFFFF
    ).astype(np.uint32)


def weapon_position(sprite: Sprite) -> Point:
    """Return where the weapon sits: centred, resting on the bottom edge."""
    return Point(
        int(WIN_WIDTH / 2 - sprite.width / 2),
        int(WIN_HEIGHT - sprite.frame_height * sprite.scale),
    )


def _player_position_lines(game_map: GameMap, x: int, y: int) -> tuple[list[HudLine], int]:
    player = game_map.player
    lines: list[HudLine] = [(x, y, GREEN, "Player Position:")]
    y += 20
    lines.append((x + 30, y, WHITE, str(int(player.x))))
    lines.append((x + 10, y, WHITE, "X: "))
    y += 20
    lines.append((x + 10, y, WHITE, "Y: "))
    lines.append((x + 30, y, WHITE, str(int(player.y))))
    return lines, y + 30


def _direction_lines(game_map: GameMap, x: int, y: int) -> tuple[list[HudLine], int]:
    player = game_map.player
    lines: list[HudLine] = [(x, y, GREEN, "Direction:")]
    y += 20
    lines.append((x + 10, y, WHITE, "Angle: "))
    lines.append((x + 70, y, WHITE, str(int(player.direction * 180 / math.pi))))
    lines.append((x + 90, y, WHITE, "degrees"))
    y += 20
    lines.append((x + 10, y, WHITE, "DX: "))
    lines.append((x + 40, y, WHITE, f"{player.dx:.2f}"))
    y += 20
    lines.append((x + 10, y, WHITE, "DY: "))
    lines.append((x + 40, y, WHITE, f"{player.dy:.2f}"))
    y += 20
    lines.append((x + 10, y, WHITE, "Speed: "))
    lines.append((x + 120, y, WHITE, f"{player.mouse_speed:.4f}"))
    return lines, y + 30


def _map_lines(game_map: GameMap, x: int, y: int) -> tuple[list[HudLine], int]:
    lines: list[HudLine] = [(x, y, CYAN, "Map Information:")]
    y += 20
    lines.append((x + 10, y, WHITE, "Width: "))
    lines.append((x + 70, y, WHITE, str(int(game_map.width))))
    y += 20
    lines.append((x + 10, y, WHITE, "Height: "))
    lines.append((x + 70, y, WHITE, str(int(game_map.height))))
    y += 20
    lines.append((x + 10, y, WHITE, "Size: "))
    lines.append((x + 70, y, WHITE, f"{game_map.size:.2f}"))
    return lines, y + 30


def _raycasting_lines(game_map: GameMap, x: int, y: int) -> tuple[list[HudLine], int]:
    lines: list[HudLine] = [(x, y, YELLOW, "Raycasting:")]
    y += 20
    lines.append((x + 10, y, WHITE, "Ray Count: "))
    lines.append((x + 100, y, WHITE, str(int(game_map.numrays))))
    y += 20
    lines.append((x + 10, y, WHITE, "FOV: "))
    lines.append((x + 100, y, WHITE, str(int(game_map.player.fov))))
    lines.append((x + 120, y, WHITE, "degrees"))
    y += 20
    fov_rad = 60.0 * (math.pi / 180.0)
    fov_step = fov_rad / (60.0 - 1.0)
    lines.append((x + 10, y, WHITE, "Ray Step: "))
    lines.append((x + 100, y, WHITE, f"{fov_step * 180 / math.pi:.2f}"))
    lines.append((x + 130, y, WHITE, "degrees"))
    return lines, y + 40


def hud_lines(game_map: GameMap) -> list[HudLine]:
    """Return the information panel as (x, y, colour, text) entries."""
    x = WIN_WIDTH - 200
    y = 20
    lines: list[HudLine] = []
    for section in (_player_position_lines, _direction_lines,
                    _map_lines, _raycasting_lines):
        part, y = section(game_map, x, y)
        lines.extend(part)
    return lines


def render_frame(canvas: Canvas, state: GameState) -> list[HudLine]:
    """Draw a whole frame onto ``canvas`` and return the HUD text to show."""
    game_map = state.game_map
    if not game_map.grid:
        return []
    canvas.clear()
    draw_background(canvas, game_map)
    draw_walls(canvas, game_map)
    draw_minimap(canvas, game_map)
    draw_crosshair(canvas, Point(canvas.width // 2, canvas.height // 2))
    draw_sprite(canvas, state.weapon, weapon_position(state.weapon))
    return hud_lines(game_map)