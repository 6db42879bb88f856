import math

import pytest

from cubraycaster.game import (
    BUTTON_LEFT,
    BUTTON_RIGHT,
    BUTTON_WHEEL_DOWN,
    BUTTON_WHEEL_UP,
    GameState,
    Key,
    Sprite,
    collision,
)
from cubraycaster.model import GameMap, Player, Point, WIN_HEIGHT, WIN_WIDTH


def make_map(rows, x, y, direction):
    grid = [list(row) for row in rows]
    return GameMap(
        grid=grid,
        width=max(len(r) for r in grid) + 1,
        height=len(grid),
        size=10.0,
        player=Player(x=x, y=y, direction=direction),
    )


BOX = [
    [1, 1, 1, 1, 1],
    [1, 0, 0, 0, 1],
    [1, 0, 0, 0, 1],
    [1, 0, 0, 0, 1],
    [1, 1, 1, 1, 1],
]


def test_collision_open_floor_and_wall():
    game_map = make_map(BOX, 25, 25, math.pi)
    assert collision(game_map, 25, 25) is False
    assert collision(game_map, 5, 5) is True


def test_collision_uses_player_radius():
    game_map = make_map(BOX, 25, 25, math.pi)
    edge = game_map.size + game_map.size / 8
    assert collision(game_map, edge - 0.01, 25) is True
    assert collision(game_map, edge + 0.01, 25) is False


def test_closed_door_blocks_open_door_does_not():
    rows = [[1, 1, 1], [1, 2, 1], [1, 3, 1], [1, 1, 1]]
    game_map = make_map(rows, 15, 15, math.pi)
    assert collision(game_map, 15, 15) is True
    assert collision(game_map, 15, 25) is False


def test_init_sets_heading_vector():
    game_map = make_map(BOX, 25, 25, math.pi)
    GameState(game_map, Sprite())
    assert game_map.player.dx == pytest.approx(-1.0)
    assert game_map.player.dy == pytest.approx(0.0, abs=1e-9)


def test_key_press_and_release_toggle_held_keys():
    state = GameState(make_map(BOX, 25, 25, math.pi), Sprite())
    state.key_press(Key.W)
    state.key_press(Key.LEFT)
    assert state.keys.up is True
    assert state.keys.arrow_left is True
    state.key_release(Key.W)
    assert state.keys.up is False
    assert state.keys.arrow_left is True


@pytest.mark.parametrize("key", [Key.ESCAPE, Key.Q])
def test_quit_keys_stop_the_game(key):
    state = GameState(make_map(BOX, 25, 25, math.pi), Sprite())
    state.key_press(key)
    assert state.running is False


def test_mouse_speed_stays_bounded():
    game_map = make_map(BOX, 25, 25, math.pi)
    state = GameState(game_map, Sprite())
    for _ in range(200):
        state.key_press(Key.PLUS)
    assert 0.01 <= game_map.player.mouse_speed < 0.01 + 0.0002 + 1e-12
    for _ in range(200):
        state.key_press(Key.MINUS)
    assert 0.0005 - 0.0002 - 1e-12 < game_map.player.mouse_speed <= 0.0005


def test_wheel_buttons_change_mouse_speed():
    game_map = make_map(BOX, 25, 25, math.pi)
    state = GameState(game_map, Sprite())
    before = game_map.player.mouse_speed
    state.button_press(BUTTON_WHEEL_UP)
    assert game_map.player.mouse_speed == pytest.approx(before + 0.0002)
    state.button_press(BUTTON_WHEEL_DOWN)
    assert game_map.player.mouse_speed == pytest.approx(before)


def test_step_moves_forward():
    game_map = make_map(BOX, 25, 25, math.pi)
    state = GameState(game_map, Sprite())
    state.key_press(Key.W)
    state.step()
    assert game_map.player.x == pytest.approx(25 - game_map.player.speed)
    assert game_map.player.y == pytest.approx(25)


def test_step_backward_moves_opposite():
    game_map = make_map(BOX, 25, 25, math.pi)
    state = GameState(game_map, Sprite())
    state.key_press(Key.S)
    state.step()
    assert game_map.player.x == pytest.approx(25 + game_map.player.speed)


def test_wall_stops_the_player():
    game_map = make_map(BOX, 15, 15, math.pi)
    state = GameState(game_map, Sprite())
    state.key_press(Key.W)
    for _ in range(20):
        state.step()
    x = game_map.player.x
    assert game_map.size + game_map.size / 8 <= x < 15
    assert collision(game_map, x, game_map.player.y) is False


def test_strafe_right_moves_sideways():
    game_map = make_map(BOX, 25, 25, math.pi)
    state = GameState(game_map, Sprite())
    state.key_press(Key.D)
    state.step()
    assert game_map.player.y < 25
    assert game_map.player.x == pytest.approx(25)


def test_no_keys_no_motion():
    game_map = make_map(BOX, 25, 25, math.pi)
    state = GameState(game_map, Sprite())
    state.step()
    assert (game_map.player.x, game_map.player.y) == (25, 25)


def test_arrow_keys_rotate_and_stay_in_range():
    game_map = make_map(BOX, 25, 25, math.pi)
    state = GameState(game_map, Sprite())
    state.key_press(Key.RIGHT)
    state.step()
    assert game_map.player.direction == pytest.approx(math.pi + 0.04)
    assert game_map.player.dx == pytest.approx(math.cos(math.pi + 0.04))
    state.key_release(Key.RIGHT)
    state.key_press(Key.LEFT)
    for _ in range(200):
        state.step()
        assert 0 <= game_map.player.direction <= 2 * math.pi


def test_mouse_move_turns_player():
    game_map = make_map(BOX, 25, 25, math.pi)
    game_map.player.mouse_x = 600
    state = GameState(game_map, Sprite())
    speed = game_map.player.mouse_speed
    assert state.mouse_move(610, 400) is None
    assert game_map.player.direction == pytest.approx(math.pi + 10 * speed)
    assert game_map.player.mouse_x == 610


def test_mouse_move_near_edge_recentres():
    game_map = make_map(BOX, 25, 25, math.pi)
    game_map.player.mouse_x = 600
    state = GameState(game_map, Sprite())
    centre = state.mouse_move(50, 400)
    assert centre == Point(WIN_WIDTH // 2, WIN_HEIGHT // 2)
    assert game_map.player.mouse_x == WIN_WIDTH // 2
    assert 0 <= game_map.player.direction <= 2 * math.pi


def test_toggle_door_opens_and_closes():
    rows = [
        [1, 1, 1, 1, 1],
        [1, 2, 0, 0, 1],
        [1, 1, 1, 1, 1],
    ]
    game_map = make_map(rows, 35, 15, math.pi)
    state = GameState(game_map, Sprite())
    state.toggle_door()
    assert game_map.grid[1][1] == 3
    state.button_press(BUTTON_RIGHT)
    assert game_map.grid[1][1] == 2


def test_toggle_door_leaves_walls_alone():
    game_map = make_map(BOX, 25, 25, math.pi)
    state = GameState(game_map, Sprite())
    state.toggle_door()
    assert game_map.grid == BOX


def test_sprite_frame_height_from_sheet():
    sprite = Sprite(width=4, height=9)
    assert sprite.frame_height == 3


def test_set_frame_ignores_out_of_range():
    sprite = Sprite(height=9)
    sprite.set_frame(2)
    assert sprite.current_frame == 2
    sprite.set_frame(3)
    sprite.set_frame(-1)
    assert sprite.current_frame == 2


def test_play_then_animation_alternates_frames():
    sprite = Sprite(height=9)
    sprite.play(now=0.0)
    assert sprite.animating is True
    assert sprite.current_frame == 1
    sprite.update_animation(now=0.1)
    assert sprite.current_frame == 1
    sprite.update_animation(now=0.25)
    assert sprite.current_frame == 2
    sprite.update_animation(now=0.3)
    assert sprite.current_frame == 2
    sprite.update_animation(now=0.5)
    assert sprite.current_frame == 1


def test_play_does_not_restart_running_animation():
    sprite = Sprite(height=9)
    sprite.play(now=0.0)
    sprite.update_animation(now=0.25)
    sprite.play(now=1.0)
    assert sprite.current_frame == 2
    assert sprite.anim_start_time == 0.25


def test_idle_sprite_does_not_animate():
    sprite = Sprite(height=9)
    sprite.update_animation(now=100.0)
    assert sprite.current_frame == 0


def test_left_button_fires_and_release_resets():
    weapon = Sprite(height=9)
    state = GameState(make_map(BOX, 25, 25, math.pi), weapon)
    state.button_press(BUTTON_LEFT)
    assert weapon.animating is True
    weapon.update_animation(now=1.0)
    assert weapon.current_frame == 1
    state.button_release(BUTTON_LEFT)
    assert weapon.animating is False
    assert weapon.current_frame == 0