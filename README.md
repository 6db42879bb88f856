# cubraycaster

A small first-person raycasting engine in the style of classic grid shooters.
It reads a `.cub` scene file, checks it, and opens a pygame window where you
walk through the maze, open and close doors, and watch a weapon sprite
animate. A minimap with the player's field of view and an information panel
are drawn over the 3D view.

## Installing

```
pip install .
```

The test suite needs the `test` extra:

```
pip install .[test]
pytest
```

## Playing

```
cubraycaster path/to/level.cub
```

The command takes exactly one argument, the path of a readable scene file whose
name ends in `.cub`. Any problem with the arguments, the file, its textures or
the weapon sprite is printed on standard error as `Error: <message>`, and the
command exits with status 1.

The weapon sprite is read from `./assets/sprite_weapon.xpm`, relative to the
directory the command is started from. It must be an image of three frames
stacked vertically. This file is not shipped with the package; supply your own.

### Controls

| Input                  | Action                                |
|------------------------|---------------------------------------|
| `W` / `S`              | move forward / backward               |
| `A` / `D`              | strafe left / right                   |
| Left / Right arrow     | turn                                  |
| Mouse movement         | turn                                  |
| Mouse wheel, `+` / `-` | change mouse sensitivity              |
| Left button            | animate the weapon while held         |
| Right button           | open or close the door you are facing |
| `Esc` / `Q`            | quit                                  |

The pointer is hidden and moved back to the centre of the window whenever it
comes within 100 pixels of an edge. Walls and closed doors block movement;
open doors do not.

## The `.cub` format

A scene file starts with configuration lines and ends with the map:

```
NO ./textures/north.xpm
SO ./textures/south.xpm
WE ./textures/west.xpm
EA ./textures/east.xpm
D ./textures/door.xpm
F 100,100,100
C 135,206,235

111111
100D01
10N001
111111
```

- `NO`, `SO`, `WE`, `EA` and `D` name the wall and door textures. All five are
  required, each may appear only once, and every file must exist and be
  readable. XPM files are read directly; other formats are loaded through
  pygame.
- `F` and `C` give the floor and ceiling colours as three numbers from 0 to 255,
  separated by commas. Both are required and may appear only once.
- Empty lines are allowed among the configuration lines but not once the map
  has begun; nothing may follow the map.
- In the map, `1` is a wall, `0` is floor, `D` is a closed door and a space is
  void. Exactly one of `N`, `S`, `E` or `W` marks where the player starts and
  which way the player faces.
- The walls must close the map in: no floor cell may touch the void or the edge
  of the map, across rows or down columns.

## Using it as a library

The parts of the engine can be used on their own:

- `cubraycaster.parser.parse_map(path)` reads and checks a scene file and
  returns a `GameMap`. `parse_lines(lines)` builds a map from lines already in
  memory without checking it; `check_file`, `is_map_line` and `parse_color`
  are available too.
- `cubraycaster.validate.validate_map(game_map)` runs the checks on a map;
  `has_holes(grid, width)` and `transpose(grid)` work on a bare grid.
- `cubraycaster.raycast.cast_ray(game_map, angle, visual)` casts one ray
  through the grid and returns a `Ray`; with `visual` set, open doors stop the
  ray as well. `ray_fan(game_map)` yields the minimap segment of every ray over
  the player's field of view.
- `cubraycaster.game.GameState` holds the held keys and applies movement,
  rotation, mouse look and door toggling each `step()`.
  `collision(game_map, x, y)` tests a position against walls and closed doors,
  and `Sprite` handles the frames of an animated sprite sheet.
- `cubraycaster.canvas.Canvas` is an in-memory pixel buffer with line, square
  and rectangle drawing. `cubraycaster.render.render_frame(canvas, state)` draws
  a complete frame onto it and returns the information panel as
  `(x, y, colour, text)` entries.
- `cubraycaster.app.load_texture(path)`, `load_textures(game_map)`,
  `load_weapon(path)` and `run(game_map)` load assets and run the game window.

Errors about maps, textures and the sprite are raised as
`cubraycaster.model.CubError`.

## What it does not do

There are no enemies, items, sound or scoring. Firing only animates the
weapon sprite; it has no effect on the scene.