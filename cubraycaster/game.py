"""Game state: input handling, movement with collisions and the weapon sprite."""

from __future__ import annotations

import enum
import math
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from .model import (
    CELL_DOOR_CLOSED,
    CELL_DOOR_OPEN,
    CELL_VOID,
    CELL_WALL,
    WIN_HEIGHT,
    WIN_WIDTH,
    GameMap,
    Point,
)
from .raycast import TAU, cast_ray, normalize_angle

ROTATION_STEP = 0.04
MOUSE_SPEED_STEP = 0.0002
MOUSE_SPEED_MIN = 0.0005
MOUSE_SPEED_MAX = 0.01
MOUSE_MARGIN = 100

BUTTON_LEFT = 1
BUTTON_RIGHT = 3
BUTTON_WHEEL_UP = 4
BUTTON_WHEEL_DOWN = 5

_BLOCKING = frozenset({CELL_WALL, CELL_DOOR_CLOSED})


class Key(enum.Enum):
    """Keys the game reacts to."""

    ESCAPE = "escape"
    Q = "q"
    W = "w"
    S = "s"
    A = "a"
    D = "d"
    LEFT = "left"
    RIGHT = "right"
    MINUS = "-"
    PLUS = "+"


_HELD_KEYS = {
    Key.W: "up",
    Key.S: "down",
    Key.A: "left",
    Key.D: "right",
    Key.LEFT: "arrow_left",
    Key.RIGHT: "arrow_right",
}


@dataclass
class Sprite:
    """An animated sprite sheet whose frames are stacked vertically."""

    path: str | None = None
    width: int = 0
    height: int = 0
    data: Sequence[int] = field(default_factory=list)
    frames_count: int = 3
    frame_height: int = 0
    current_frame: int = 0
    animating: bool = False
    anim_duration: float = 0.0
    anim_start_time: float = 0.0
    scale: float = 1.2
    visible: bool = True

    def __post_init__(self) -> None:
        if not self.frame_height and self.frames_count:
            self.frame_height = self.height // self.frames_count

    def set_frame(self, frame_index: int) -> None:
        """Show frame ``frame_index``; indexes outside the sheet are ignored."""
        if 0 <= frame_index < self.frames_count:
            self.current_frame = frame_index

    def play(self, now: float | None = None) -> None:
        """Start the firing animation unless it already runs."""
        if self.animating:
            return
        self.set_frame(1)
        self.animating = True
        self.anim_start_time = time.monotonic() if now is None else now
        self.anim_duration = 200

    def update_animation(self, now: float | None = None) -> None:
        """Flip between frames 1 and 2 once ``anim_duration`` ms have passed."""
        if not self.animating:
            return
        now = time.monotonic() if now is None else now
        elapsed_ms = (now - self.anim_start_time) * 1000
        if elapsed_ms >= self.anim_duration:
            self.set_frame(2 if self.current_frame == 1 else 1)
            self.anim_start_time = now


def collision(game_map: GameMap, x: float, y: float) -> bool:
    """Tell whether a player centred at ``(x, y)`` overlaps a wall or closed door."""
    size = game_map.size
    radius = size / 8
    for row_index, row in enumerate(game_map.grid[:game_map.height]):
        for col_index, cell in enumerate(row):
            if cell < CELL_VOID:
                break
            if cell not in _BLOCKING:
                continue
            left = col_index * size
            right = (col_index + 1) * size
            top = row_index * size
            bottom = (row_index + 1) * size
            if (x + radius > left and x - radius < right
                    and y + radius > top and y - radius < bottom):
                return True
    return False


@dataclass
class _HeldKeys:
    up: bool = False
    down: bool = False
    left: bool = False
    right: bool = False
    arrow_left: bool = False
    arrow_right: bool = False


class GameState:
    """The running game: map, player controls and the weapon sprite."""

    def __init__(self, game_map: GameMap, weapon: Sprite | None = None) -> None:
        self.game_map = game_map
        self.weapon = weapon if weapon is not None else Sprite()
        self.keys = _HeldKeys()
        self.running = True
        player = game_map.player
        player.dx = math.cos(player.direction) * player.speed
        player.dy = math.sin(player.direction) * player.speed

    def key_press(self, key: Key) -> None:
        """React to a key going down."""
        player = self.game_map.player
        if key in (Key.ESCAPE, Key.Q):
            self.running = False
        elif key in _HELD_KEYS:
            setattr(self.keys, _HELD_KEYS[key], True)
        elif key is Key.MINUS:
            if player.mouse_speed > MOUSE_SPEED_MIN:
                player.mouse_speed -= MOUSE_SPEED_STEP
        elif key is Key.PLUS:
            if player.mouse_speed < MOUSE_SPEED_MAX:
                player.mouse_speed += MOUSE_SPEED_STEP

    def key_release(self, key: Key) -> None:
        """React to a key going up."""
        if key in _HELD_KEYS:
            setattr(self.keys, _HELD_KEYS[key], False)

    def button_press(self, button: int) -> None:
        """React to a mouse button or wheel event."""
        if button == BUTTON_WHEEL_DOWN:
            self.key_press(Key.MINUS)
        if button == BUTTON_WHEEL_UP:
            self.key_press(Key.PLUS)
        if button == BUTTON_LEFT:
            self.weapon.animating = True
        if button == BUTTON_RIGHT:
            self.toggle_door()

    def button_release(self, button: int) -> None:
        """Stop firing when the left button is released."""
        if button == BUTTON_LEFT:
            self.weapon.set_frame(0)
            self.weapon.animating = False

    def toggle_door(self) -> None:
        """Open or close the door the player is looking at."""
        game_map = self.game_map
        player = game_map.player
        ray = cast_ray(game_map, normalize_angle(player.direction), visual=True)
        hit_x = int((player.x + ray.dir_x * ray.length) / game_map.size)
        hit_y = int((player.y + ray.dir_y * ray.length) / game_map.size)
        if not (0 <= hit_y < game_map.height and 0 <= hit_x < game_map.width):
            return
        row = game_map.grid[hit_y]
        if hit_x >= len(row):
            return
        if row[hit_x] == CELL_DOOR_CLOSED:
            row[hit_x] = CELL_DOOR_OPEN
        elif row[hit_x] == CELL_DOOR_OPEN:
            row[hit_x] = CELL_DOOR_CLOSED

    def mouse_move(self, x: int, y: int) -> Point | None:
        """Turn the player by the horizontal mouse motion.

        Returns the window centre when the pointer strayed near an edge and
        should be moved back there, otherwise None.
        """
        player = self.game_map.player
        delta_x = x - player.mouse_x
        if delta_x != 0:
            player.direction += delta_x * player.mouse_speed
            if player.direction < 0:
                player.direction += TAU
            elif player.direction > TAU:
                player.direction -= TAU
            player.dx = math.cos(player.direction) * player.speed
            player.dy = math.sin(player.direction) * player.speed
        player.mouse_x = x
        if (x < MOUSE_MARGIN or x > WIN_WIDTH - MOUSE_MARGIN
                or y < MOUSE_MARGIN or y > WIN_HEIGHT - MOUSE_MARGIN):
            centre = Point(WIN_WIDTH // 2, WIN_HEIGHT // 2)
            player.mouse_x = centre.x
            return centre
        return None

    def _movement_direction(self) -> int:
        player = self.game_map.player
        direction = 0
        if self.keys.up:
            direction = 1
        if self.keys.down:
            direction = -1
        if self.keys.left:
            direction = -1
            player.dx, player.dy = -player.dy, player.dx
        if self.keys.right:
            direction = 1
            player.dx, player.dy = -player.dy, player.dx
        return direction

    def _move(self, direction: int) -> None:
        if direction == 0:
            return
        game_map = self.game_map
        player = game_map.player
        new_y = player.y + player.dy * player.speed * direction
        if not collision(game_map, player.x, new_y):
            player.y = new_y
        new_x = player.x + player.dx * player.speed * direction
        if not collision(game_map, new_x, player.y):
            player.x = new_x

    def _rotate(self) -> None:
        player = self.game_map.player
        if self.keys.arrow_left:
            player.direction -= ROTATION_STEP
            if player.direction < 0:
                player.direction += TAU
            player.dx = math.cos(player.direction) * player.speed
            player.dy = math.sin(player.direction) * player.speed
        if self.keys.arrow_right:
            player.direction += ROTATION_STEP
            if player.direction > TAU:
                player.direction -= TAU
            player.dx = math.cos(player.direction) * player.speed
            player.dy = math.sin(player.direction) * player.speed

    def step(self) -> None:
        """Advance one frame: move, turn and animate the weapon."""
        self._move(self._movement_direction())
        self._rotate()
        self.weapon.update_animation()