import math

import pytest

from cubraycaster.canvas import Canvas, point_inside_rect, rotate_rect
from cubraycaster.model import GREEN, RED, WHITE, Point, Rect


def square_rect(cx, cy, half):
    return Rect(
        Point(cx - half, cy - half),
        Point(cx - half, cy + half),
        Point(cx + half, cy + half),
        Point(cx + half, cy - half),
    )


def lit(canvas):
    return {
        (x, y)
        for y in range(canvas.height)
        for x in range(canvas.width)
        if canvas.get_pixel(x, y)
    }


def test_put_and_get_pixel():
    canvas = Canvas(4, 3)
    canvas.put_pixel(2, 1, RED)
    assert canvas.get_pixel(2, 1) == RED
    assert canvas.get_pixel(1, 2) == 0


def test_put_pixel_outside_is_ignored():
    canvas = Canvas(4, 3)
    canvas.put_pixel(-1, 0, RED)
    canvas.put_pixel(4, 0, RED)
    canvas.put_pixel(0, 3, RED)
    assert lit(canvas) == set()


def test_get_pixel_outside_raises():
    with pytest.raises(IndexError):
        Canvas(2, 2).get_pixel(2, 0)


def test_clear_resets_pixels():
    canvas = Canvas(3, 3)
    canvas.put_pixel(1, 1, WHITE)
    canvas.clear()
    assert lit(canvas) == set()


def test_line_excludes_end_point():
    canvas = Canvas(10, 10)
    canvas.draw_line(Point(0, 0), Point(3, 3), RED)
    assert lit(canvas) == {(0, 0), (1, 1), (2, 2)}


def test_horizontal_line_length():
    canvas = Canvas(10, 5)
    canvas.draw_line(Point(1, 2), Point(7, 2), GREEN)
    assert lit(canvas) == {(x, 2) for x in range(1, 7)}


def test_line_runs_backwards():
    canvas = Canvas(10, 10)
    canvas.draw_line(Point(5, 4), Point(5, 0), RED)
    assert lit(canvas) == {(5, y) for y in range(1, 5)}


def test_zero_length_line_draws_nothing():
    canvas = Canvas(5, 5)
    canvas.draw_line(Point(2, 2), Point(2, 2), RED)
    assert lit(canvas) == set()


def test_draw_square_wall_is_white():
    canvas = Canvas(20, 20)
    canvas.draw_square(Point(2, 3), 4, 1)
    assert lit(canvas) == {(x, y) for x in range(2, 6) for y in range(3, 7)}
    assert canvas.get_pixel(2, 3) == WHITE


def test_draw_square_door_colours():
    canvas = Canvas(20, 20)
    canvas.draw_square(Point(0, 0), 2, 2)
    canvas.draw_square(Point(5, 5), 2, 3)
    assert canvas.get_pixel(0, 0) == RED
    assert canvas.get_pixel(5, 5) == GREEN


def test_draw_square_unknown_value_draws_nothing():
    canvas = Canvas(10, 10)
    canvas.draw_square(Point(0, 0), 5, 7)
    canvas.draw_square(Point(0, 0), 5, -1)
    assert lit(canvas) == set()


def test_point_inside_rect():
    rect = square_rect(10, 10, 2)
    assert point_inside_rect(Point(10, 10), rect)
    assert point_inside_rect(Point(12, 12), rect)
    assert not point_inside_rect(Point(13, 10), rect)
    assert not point_inside_rect(Point(0, 0), rect)


def test_filled_rect_covers_bounding_box():
    canvas = Canvas(20, 20)
    canvas.draw_rect(square_rect(10, 10, 2), RED, True)
    assert lit(canvas) == {(x, y) for x in range(8, 13) for y in range(8, 13)}


def test_outline_rect_leaves_centre_empty():
    canvas = Canvas(20, 20)
    canvas.draw_rect(square_rect(10, 10, 2), RED, False)
    assert canvas.get_pixel(10, 10) == 0
    assert canvas.get_pixel(8, 8) == RED
    assert canvas.get_pixel(12, 12) == RED


def test_rotate_rect_zero_angle_is_identity():
    rect = square_rect(10, 10, 2)
    assert rotate_rect(rect, Point(10, 10), 0.0) == rect


def test_rotate_square_quarter_turn_keeps_corners():
    rect = square_rect(10, 10, 2)
    rotated = rotate_rect(rect, Point(10, 10), math.pi / 2)
    assert set(rotated) == set(rect)
    assert rotated != rect


def test_rotation_preserves_distance_from_centre():
    rect = square_rect(50, 50, 2)
    rotated = rotate_rect(rect, Point(50, 50), 0.7)
    for corner in rotated:
        dist = math.hypot(corner.x - 50, corner.y - 50)
        assert dist <= math.hypot(2, 2) + 1e-9
        assert dist >= math.hypot(2, 2) - 2
        