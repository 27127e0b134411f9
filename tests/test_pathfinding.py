from dungeonmap.sim.coords import CubeCoord, cube_key, hex_distance, hex_neighbors
from dungeonmap.sim.movement import MAX_PATH_LENGTH, find_nearest_adjacent_hex, find_path

ORIGIN = CubeCoord(0, 0, 0)


def _assert_continuous(start: CubeCoord, path: list[CubeCoord]) -> None:
    previous = start
    for step in path:
        assert hex_distance(previous, step) == 1
        previous = step


def test_same_position_returns_empty_path() -> None:
    assert find_path(ORIGIN, ORIGIN) == []


def test_adjacent_target_is_single_step() -> None:
    target = CubeCoord(1, -1, 0)

    assert find_path(ORIGIN, target) == [target]


def test_straight_path_without_obstacles() -> None:
    target = CubeCoord(3, -3, 0)

    path = find_path(ORIGIN, target)

    assert path == [CubeCoord(1, -1, 0), CubeCoord(2, -2, 0), target]


def test_diagonal_path_reaches_target_in_distance_steps() -> None:
    target = CubeCoord(2, -3, 1)

    path = find_path(ORIGIN, target)

    assert len(path) == hex_distance(ORIGIN, target)
    assert path[-1] == target
    _assert_continuous(ORIGIN, path)


def test_path_steps_around_single_blocked_hex() -> None:
    start = CubeCoord(5, -10, 5)
    target = CubeCoord(7, -12, 5)
    blocked = CubeCoord(6, -11, 5)

    path = find_path(start, target, lambda coord: coord == blocked)

    assert path
    assert path[-1] == target
    assert blocked not in path
    assert path == [CubeCoord(6, -10, 4), CubeCoord(7, -11, 4), target]
    _assert_continuous(start, path)


def test_occupied_keys_are_avoided() -> None:
    target = CubeCoord(2, -2, 0)
    occupied = {cube_key(CubeCoord(1, -1, 0))}

    path = find_path(ORIGIN, target, occupied=occupied)

    assert path[-1] == target
    assert all(cube_key(step) not in occupied for step in path)


def test_fully_boxed_in_start_returns_empty_path() -> None:
    walls = set(hex_neighbors(ORIGIN))

    path = find_path(ORIGIN, CubeCoord(2, -2, 0), lambda coord: coord in walls)

    assert path == []


def test_blocked_target_returns_empty_path() -> None:
    target = CubeCoord(2, -2, 0)

    assert find_path(ORIGIN, target, lambda coord: coord == target) == []
    assert find_path(ORIGIN, CubeCoord(1, -1, 0), lambda coord: coord == CubeCoord(1, -1, 0)) == []


def test_path_never_contains_blocked_cells_around_wall() -> None:
    wall = {CubeCoord(1, 0, -1), CubeCoord(1, -1, 0), CubeCoord(1, -2, 1)}
    target = CubeCoord(3, -3, 0)

    path = find_path(ORIGIN, target, lambda coord: coord in wall)

    assert path[-1] == target
    assert not wall.intersection(path)
    _assert_continuous(ORIGIN, path)


def test_unreachable_target_returns_partial_path_without_blocked_cells() -> None:
    def is_blocked(coord: CubeCoord) -> bool:
        return coord.x == 1

    path = find_path(ORIGIN, CubeCoord(2, -2, 0), is_blocked)

    assert len(path) <= MAX_PATH_LENGTH
    assert all(step.x != 1 for step in path)
    assert not path or path[-1] != CubeCoord(2, -2, 0)


def test_long_route_is_capped() -> None:
    target = CubeCoord(80, -80, 0)

    path = find_path(ORIGIN, target)

    assert len(path) == MAX_PATH_LENGTH
    assert path[-1] == CubeCoord(MAX_PATH_LENGTH, -MAX_PATH_LENGTH, 0)


def test_nearest_adjacent_hex_to_target() -> None:
    target = CubeCoord(3, -3, 0)

    approach = find_nearest_adjacent_hex(ORIGIN, target)

    assert approach is not None
    assert hex_distance(approach, target) == 1
    assert hex_distance(ORIGIN, approach) == 2


def test_nearest_adjacent_hex_when_already_adjacent() -> None:
    target = CubeCoord(1, -1, 0)

    assert find_nearest_adjacent_hex(ORIGIN, target) == ORIGIN


def test_nearest_adjacent_hex_none_when_target_enclosed() -> None:
    target = CubeCoord(4, -4, 0)
    ring = set(hex_neighbors(target))

    assert find_nearest_adjacent_hex(ORIGIN, target, lambda coord: coord in ring) is None


def test_enclosed_target_path_never_moves_away() -> None:
    target = CubeCoord(4, -4, 0)

    def is_blocked(coord: CubeCoord) -> bool:
        return 1 <= hex_distance(coord, target) <= 2

    path = find_path(ORIGIN, target, is_blocked)

    assert path
    assert all(hex_distance(step, target) <= hex_distance(ORIGIN, target) for step in path)
    assert hex_distance(path[-1], target) == 3
    assert len(path) < MAX_PATH_LENGTH
    _assert_continuous(ORIGIN, path)


def test_path_stops_when_every_open_step_moves_away() -> None:
    target = CubeCoord(3, -3, 0)
    wall = {CubeCoord(1, -1, 0), CubeCoord(1, 0, -1), CubeCoord(0, -1, 1)}

    assert find_path(ORIGIN, target, lambda coord: coord in wall) == []


def test_occupied_accepts_coordinates() -> None:
    target = CubeCoord(2, -2, 0)
    blocker = CubeCoord(1, -1, 0)

    by_coord = find_path(ORIGIN, target, occupied={blocker})
    by_key = find_path(ORIGIN, target, occupied={cube_key(blocker)})

    assert blocker not in by_coord
    assert by_coord == by_key
    assert by_coord[-1] == target
