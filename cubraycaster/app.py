"""Window, asset loading and the main loop of the game."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Sequence

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import numpy as np  # noqa: E402
import pygame  # noqa: E402

from .canvas import Canvas  # noqa: E402
from .game import GameState, Key, Sprite  # noqa: E402
from .model import (  # noqa: E402
    WIN_HEIGHT,
    WIN_TITLE,
    WIN_WIDTH,
    CubError,
    GameMap,
    Point,
    Texture,
)
from .parser import check_file, parse_map  # noqa: E402
from .render import render_frame  # noqa: E402

WEAPON_PATH = "./assets/sprite_weapon.xpm"
WEAPON_FRAMES = 3
WEAPON_SCALE = 1.2
FRAME_RATE = 60
TRANSPARENT = 0xFF000000

_QUOTED = re.compile(r'"((?:[^"\\]|\\.)*)"')
_NAMED_COLORS = {
    "black": 0x000000,
    "white": 0xFFFFFF,
    "red": 0xFF0000,
    "green": 0x00FF00,
    "blue": 0x0000FF,
    "yellow": 0xFFFF00,
    "cyan": 0x00FFFF,
    "magenta": 0xFF00FF,
    "gray": 0xBEBEBE,
    "grey": 0xBEBEBE,
}
_KEYS = {
    pygame.K_ESCAPE: Key.ESCAPE,
    pygame.K_q: Key.Q,
    pygame.K_w: Key.W,
    pygame.K_s: Key.S,
    pygame.K_a: Key.A,
    pygame.K_d: Key.D,
    pygame.K_LEFT: Key.LEFT,
    pygame.K_RIGHT: Key.RIGHT,
    pygame.K_MINUS: Key.MINUS,
    pygame.K_KP_MINUS: Key.MINUS,
    pygame.K_PLUS: Key.PLUS,
    pygame.K_KP_PLUS: Key.PLUS,
}


def _parse_hex(value: str) -> int:
    digits = value[1:]
    if not digits or len(digits) % 3 or any(
            ch not in "0123456789abcdefABCDEF" for ch in digits):
        raise ValueError(f"bad colour {value!r}")
    n = len(digits) // 3
    parts = [digits[k * n:(k + 1) * n] for k in range(3)]
    if n == 1:
        r, g, b = (int(p, 16) * 17 for p in parts)
    else:
        r, g, b = (int(p[:2], 16) for p in parts)
    return (r << 16) | (g << 8) | b


def _parse_color(spec: str) -> int:
    tokens = spec.split()
    value = None
    for key, val in zip(tokens, tokens[1:]):
        if key == "c":
            value = val
            break
    if value is None and len(tokens) >= 2:
        value = tokens[-1]
    if value is None:
        raise ValueError("colour entry without value")
    if value.lower() == "none":
        return TRANSPARENT
    if value.startswith("#"):
        return _parse_hex(value)
    named = _NAMED_COLORS.get(value.lower())
    if named is None:
        raise ValueError(f"unknown colour {value!r}")
    return named


def _read_xpm(path: str) -> tuple[int, int, list[int]]:
    with open(path, encoding="utf-8", errors="replace") as handle:
        strings = _QUOTED.findall(handle.read())
    if not strings:
        raise ValueError("no XPM data")
    header = strings[0].split()
    width, height, ncolors, cpp = (int(v) for v in header[:4])
    if width <= 0 or height <= 0 or cpp <= 0:
        raise ValueError("bad XPM header")
    colors = {entry[:cpp]: _parse_color(entry[cpp:])
              for entry in strings[1:1 + ncolors]}
    rows = strings[1 + ncolors:1 + ncolors + height]
    if len(rows) != height:
        raise ValueError("missing XPM rows")
    data: list[int] = []
    for row in rows:
        if len(row) < width * cpp:
            raise ValueError("short XPM row")
        data.extend(colors[row[k * cpp:(k + 1) * cpp]] for k in range(width))
    return width, height, data


def _read_image(path: str) -> tuple[int, int, list[int]]:
    if path.lower().endswith(".xpm"):
        return _read_xpm(path)
    loaded = pygame.image.load(path)
    surface = pygame.Surface(loaded.get_size(), 0, 32)
    surface.blit(loaded, (0, 0))
    pixels = pygame.surfarray.array2d(surface).T & 0xFFFFFF
    height, width = pixels.shape
    return width, height, [int(v) for v in pixels.ravel()]


def load_texture(path: str) -> Texture:
    """Load an image file into a Texture of packed 0xRRGGBB pixels."""
    try:
        width, height, data = _read_image(path)
    except (OSError, ValueError, KeyError, pygame.error) as exc:
        raise CubError("Failed to load textures images") from exc
    return Texture(path=path, width=width, height=height, data=data)


def load_textures(game_map: GameMap) -> GameMap:
    """Load the five wall and door textures named in ``game_map``."""
    for name in ("north", "south", "east", "west", "door"):
        texture = getattr(game_map, name)
        if texture.path is None:
            raise CubError("Failed to load textures images")
        setattr(game_map, name, load_texture(texture.path))
    return game_map


def load_weapon(path: str = WEAPON_PATH) -> Sprite:
    """Load the weapon sprite sheet of three stacked frames."""
    try:
        width, height, data = _read_image(path)
    except (OSError, ValueError, KeyError, pygame.error) as exc:
        raise CubError("Failed to load sprite image") from exc
    return Sprite(path=path, width=width, height=height, data=data,
                  frames_count=WEAPON_FRAMES,
                  frame_height=height // WEAPON_FRAMES,
                  current_frame=0, scale=WEAPON_SCALE, visible=True)


def _key_for(event: pygame.event.Event) -> Key | None:
    if event.unicode == "+":
        return Key.PLUS
    if event.unicode == "-":
        return Key.MINUS
    return _KEYS.get(event.key)


def _rgb(color: int) -> tuple[int, int, int]:
    return (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF


def _handle_event(state: GameState, event: pygame.event.Event) -> None:
    if event.type == pygame.QUIT:
        state.running = False
    elif event.type == pygame.KEYDOWN:
        key = _key_for(event)
        if key is not None:
            state.key_press(key)
    elif event.type == pygame.KEYUP:
        key = _key_for(event)
        if key is not None:
            state.key_release(key)
    elif event.type == pygame.MOUSEBUTTONDOWN:
        state.button_press(event.button)
    elif event.type == pygame.MOUSEBUTTONUP:
        state.button_release(event.button)


def run(game_map: GameMap) -> None:
    """Open the window and play ``game_map`` until the player quits."""
    pygame.init()
    try:
        screen = pygame.display.set_mode((WIN_WIDTH, WIN_HEIGHT))
        pygame.display.set_caption(WIN_TITLE)
        weapon = load_weapon(WEAPON_PATH)
        state = GameState(game_map, weapon)
        pygame.mouse.set_visible(False)
        load_textures(game_map)
        game_map.player.mouse_x = pygame.mouse.get_pos()[0]

        canvas = Canvas(WIN_WIDTH, WIN_HEIGHT)
        frame = pygame.Surface((WIN_WIDTH, WIN_HEIGHT), 0, 32)
        font = pygame.font.Font(None, 18)
        clock = pygame.time.Clock()
        while state.running:
            for event in pygame.event.get():
                _handle_event(state, event)
            if not state.running:
                break
            x, y = pygame.mouse.get_pos()
            centre = state.mouse_move(x, y)
            if centre is not None:
                pygame.mouse.set_pos((centre.x, centre.y))
            state.step()
            hud = render_frame(canvas, state)
            pygame.surfarray.blit_array(
                frame, np.ascontiguousarray(canvas.pixels.T & 0xFFFFFF))
            screen.blit(frame, (0, 0))
            for text_x, text_y, color, text in hud:
                screen.blit(font.render(text, True, _rgb(color)),
                            (text_x, text_y))
            pygame.display.flip()
            clock.tick(FRAME_RATE)
    finally:
        pygame.quit()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the game on the .cub file named on the command line."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        if len(args) != 1:
            raise CubError("Usage: ./cub3d <map>.cub")
        check_file(args[0])
        game_map = parse_map(args[0])
        run(game_map)
    except CubError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


__all__ = ["Point", "load_texture", "load_textures", "load_weapon", "run", "main"]