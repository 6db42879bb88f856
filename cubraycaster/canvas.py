"""A software frame buffer with line, square and quadrilateral drawing."""

from __future__ import annotations

import math

import numpy as np

from .model import BLACK, GREEN, RED, WHITE, Point, Rect

_SQUARE_COLORS = {0: BLACK, 1: WHITE, 2: RED, 3: GREEN}


class Canvas:
    """A width x height grid of 32-bit pixels."""

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.pixels = np.zeros((self.height, self.width), dtype=np.uint32)

    def clear(self) -> None:
        """Set every pixel to zero."""
        self.pixels.fill(0)

    def get_pixel(self, x: int, y: int) -> int:
        """Return the pixel at ``(x, y)``; raise IndexError outside the canvas."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height}")
        return int(self.pixels[y, x])

    def put_pixel(self, x: int, y: int, color: int) -> None:
        """Set one pixel; positions outside the canvas are ignored."""
        x, y = int(x), int(y)
        if 0 <= x < self.width and 0 <= y < self.height:
            self.pixels[y, x] = color & 0xFFFFFFFF

    def draw_line(self, begin: Point, end: Point, color: int) -> None:
        """Draw a Bresenham line from ``begin`` up to but not including ``end``."""
        x, y = int(begin.x), int(begin.y)
        end_x, end_y = int(end.x), int(end.y)
        dx = abs(end_x - x)
        dy = -abs(end_y - y)
        sx = 1 if x < end_x else -1
        sy = 1 if y < end_y else -1
        err = dx + dy
        while x != end_x or y != end_y:
            self.put_pixel(x, y, color)
            e2 = 2 * err
            if e2 >= dy:
                err += dy
                x += sx
            if e2 <= dx:
                err += dx
                y += sy

    def draw_square(self, origin: Point, width: int, value: int) -> None:
        """Draw a filled minimap square coloured by the cell ``value`` (0-3).

        Other values draw nothing.
        """
        color = _SQUARE_COLORS.get(value)
        if color is None:
            return
        width = int(width)
        for row in range(width):
            self.draw_line(
                Point(origin.x, origin.y + row),
                Point(origin.x + width, origin.y + row),
                color,
            )

    def draw_rect(self, rect: Rect, color: int, fill: bool) -> None:
        """Draw the outline of ``rect`` and, if ``fill``, its interior."""
        corners = list(rect)
        for start, stop in zip(corners, corners[1:] + corners[:1]):
            self.draw_line(start, stop, color)
        if fill:
            self._fill_rect(rect, color)

    def _fill_rect(self, rect: Rect, color: int) -> None:
        xs = [p.x for p in rect]
        ys = [p.y for p in rect]
        for y in range(min(ys), max(ys) + 1):
            for x in range(min(xs), max(xs) + 1):
                if point_inside_rect(Point(x, y), rect):
                    self.put_pixel(x, y, color)


def point_inside_rect(point: Point, rect: Rect) -> bool:
    """Tell whether ``point`` lies inside or on the edge of a convex ``rect``."""
    corners = list(rect)
    crosses = [
        (b.x - a.x) * (point.y - a.y) - (b.y - a.y) * (point.x - a.x)
        for a, b in zip(corners, corners[1:] + corners[:1])
    ]
    return all(c >= 0 for c in crosses) or all(c <= 0 for c in crosses)


def rotate_rect(rect: Rect, center: Point, angle: float) -> Rect:
    """Rotate every corner of ``rect`` about ``center`` by ``angle`` radians.

    Coordinates are truncated toward zero to stay on the integer grid.
    """
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)

    def turn(p: Point) -> Point:
        ox = p.x - center.x
        oy = p.y - center.y
        return Point(
            int(center.x + ox * cos_a - oy * sin_a),
            int(center.y + ox * sin_a + oy * cos_a),
        )

    return Rect(*(turn(p) for p in rect))