from __future__ import annotations

import math
from collections.abc import Callable, Collection
from dataclasses import dataclass

from dungeonmap.sim.coords import (
    CUBE_DIRECTIONS,
    DEFAULT_HEX_SIZE,
    CubeCoord,
    cube_key,
    cube_to_world,
    hex_distance,
    hex_neighbors,
)

BlockedPredicate = Callable[[CubeCoord], bool]

FEET_PER_HEX = 5
MAX_PATH_LENGTH = 50

# Vertex index pairs bounding the edge shared with each CUBE_DIRECTIONS
# neighbour. Vertices sit at 30 + 60*i degrees around a pointy-top hex.
_EDGE_VERTEX_PAIRS: tuple[tuple[int, int], ...] = (
    (5, 0),
    (4, 5),
    (3, 4),
    (2, 3),
    (1, 2),
    (0, 1),
)


@dataclass(frozen=True)
class BoundaryEdge:
    start: tuple[float, float]
    end: tuple[float, float]


def movement_feet_to_steps(movement_feet: float) -> int:
    """Whole hex steps affordable with ``movement_feet``; remainders are dropped."""
    return max(0, math.floor(movement_feet / FEET_PER_HEX))


def get_reachable_hexes(
    start: CubeCoord,
    max_steps: int,
    is_blocked: BlockedPredicate | None = None,
) -> set[CubeCoord]:
    """Breadth-first flood fill of hexes within ``max_steps`` of ``start``.

    The start hex is always included. Blocked hexes are never entered but do
    not stop the frontier from flowing around them.
    """
    reachable = {start}
    blocked: set[CubeCoord] = set()
    frontier = [start]
    for _ in range(max(0, max_steps)):
        next_frontier: list[CubeCoord] = []
        for coord in frontier:
            for neighbor in hex_neighbors(coord):
                if neighbor in reachable or neighbor in blocked:
                    continue
                if is_blocked is not None and is_blocked(neighbor):
                    blocked.add(neighbor)
                    continue
                reachable.add(neighbor)
                next_frontier.append(neighbor)
        if not next_frontier:
            break
        frontier = next_frontier
    return reachable


def find_path(
    start: CubeCoord,
    target: CubeCoord,
    is_blocked: BlockedPredicate | None = None,
    occupied: Collection[str | CubeCoord] | None = None,
) -> list[CubeCoord]:
    """Greedy step-by-step path from ``start`` to ``target``, excluding ``start``.

    Each step moves to the open neighbour closest to the target, ties going to
    the earlier entry of ``CUBE_DIRECTIONS``. A step may keep the current
    distance but never increases it. There is no backtracking, so the route
    may be longer than optimal or stop short of the target when boxed in or
    after ``MAX_PATH_LENGTH`` steps.

    ``occupied`` holds cells to avoid, as ``CubeCoord`` values or
    ``cube_key`` strings.
    """
    occupied_keys = {item if isinstance(item, str) else cube_key(item) for item in occupied or ()}

    def _closed(coord: CubeCoord) -> bool:
        return cube_key(coord) in occupied_keys or (is_blocked is not None and is_blocked(coord))

    if start == target:
        return []
    if _closed(target):
        return []
    if hex_distance(start, target) <= 1:
        return [target]

    path: list[CubeCoord] = []
    visited = {start}
    current = start
    while current != target:
        best: CubeCoord | None = None
        best_distance = 0
        for direction in CUBE_DIRECTIONS:
            candidate = current + direction
            if candidate in visited or _closed(candidate):
                continue
            distance = hex_distance(candidate, target)
            if best is None or distance < best_distance:
                best = candidate
                best_distance = distance
        if best is None or best_distance > hex_distance(current, target):
            break

        path.append(best)
        visited.add(best)
        current = best
        if len(path) >= MAX_PATH_LENGTH:
            break
    return path


def find_nearest_adjacent_hex(
    start: CubeCoord,
    target: CubeCoord,
    is_blocked: BlockedPredicate | None = None,
) -> CubeCoord | None:
    """Open neighbour of ``target`` with the shortest greedy path from ``start``."""
    best_hex: CubeCoord | None = None
    best_length = 0
    for candidate in hex_neighbors(target):
        if candidate == start:
            return candidate
        if is_blocked is not None and is_blocked(candidate):
            continue
        path = find_path(start, candidate, is_blocked)
        if not path or path[-1] != candidate:
            continue
        if best_hex is None or len(path) < best_length:
            best_hex = candidate
            best_length = len(path)
    return best_hex


def movement_range_boundary(
    reachable: Collection[CubeCoord],
    hex_size: float = DEFAULT_HEX_SIZE,
) -> list[BoundaryEdge]:
    """World-space edges separating reachable hexes from unreachable ones."""
    edges: list[BoundaryEdge] = []
    for coord in sorted(reachable):
        center_x, center_z = cube_to_world(coord, hex_size)
        vertices = [
            (
                center_x + hex_size * math.cos(math.radians(30 + 60 * index)),
                center_z + hex_size * math.sin(math.radians(30 + 60 * index)),
            )
            for index in range(6)
        ]
        for direction, (first, second) in zip(CUBE_DIRECTIONS, _EDGE_VERTEX_PAIRS):
            if coord + direction in reachable:
                continue
            edges.append(BoundaryEdge(start=vertices[first], end=vertices[second]))
    return edges
