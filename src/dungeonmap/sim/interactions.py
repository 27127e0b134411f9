from __future__ import annotations

from dataclasses import dataclass

from dungeonmap.sim.coords import CubeCoord, cube_key, hex_distance
from dungeonmap.sim.dungeon_map import DungeonMapState
from dungeonmap.sim.movement import (
    FEET_PER_HEX,
    BlockedPredicate,
    find_nearest_adjacent_hex,
    find_path,
    get_reachable_hexes,
    movement_feet_to_steps,
)
from dungeonmap.sim.room import EntityPlacement


@dataclass(frozen=True)
class AttackApproach:
    target_entity_id: str
    approach_hex: CubeCoord
    path: list[CubeCoord]

    @property
    def cost_feet(self) -> int:
        return len(self.path) * FEET_PER_HEX


def occupied_positions(state: DungeonMapState, exclude_entity_id: str | None = None) -> set[str]:
    return {
        cube_key(placement.position)
        for entity_id, placement in state.entities.items()
        if entity_id != exclude_entity_id
    }


def find_entity_at(state: DungeonMapState, coord: CubeCoord) -> EntityPlacement | None:
    for entity_id in sorted(state.entities):
        placement = state.entities[entity_id]
        if placement.position == coord:
            return placement
    return None


def build_blocked_predicate(
    state: DungeonMapState,
    moving_entity_id: str | None = None,
    require_floor: bool = True,
) -> BlockedPredicate:
    """Blocked when off the revealed floor or standing room for another entity."""
    occupied = occupied_positions(state, exclude_entity_id=moving_entity_id)
    floor_tiles = state.floor_tiles

    def is_blocked(coord: CubeCoord) -> bool:
        key = cube_key(coord)
        if require_floor and key not in floor_tiles:
            return True
        return key in occupied

    return is_blocked


def movement_range(state: DungeonMapState, entity_id: str, movement_feet: float) -> set[CubeCoord]:
    placement = state.entities.get(entity_id)
    if placement is None:
        return set()
    return get_reachable_hexes(
        placement.position,
        movement_feet_to_steps(movement_feet),
        build_blocked_predicate(state, moving_entity_id=entity_id),
    )


def preview_path(
    state: DungeonMapState,
    entity_id: str,
    target: CubeCoord,
    movement_feet: float,
) -> list[CubeCoord]:
    """Path the entity would walk to ``target``, or [] when it cannot get there this turn."""
    placement = state.entities.get(entity_id)
    if placement is None:
        return []
    path = find_path(placement.position, target, build_blocked_predicate(state, moving_entity_id=entity_id))
    if not path or path[-1] != target:
        return []
    if len(path) * FEET_PER_HEX > movement_feet:
        return []
    return path


def attack_approach(
    state: DungeonMapState,
    entity_id: str,
    target_entity_id: str,
    movement_feet: float,
) -> AttackApproach | None:
    attacker = state.entities.get(entity_id)
    defender = state.entities.get(target_entity_id)
    if attacker is None or defender is None or entity_id == target_entity_id:
        return None
    if hex_distance(attacker.position, defender.position) == 1:
        return AttackApproach(target_entity_id=target_entity_id, approach_hex=attacker.position, path=[])

    is_blocked = build_blocked_predicate(state, moving_entity_id=entity_id)
    approach_hex = find_nearest_adjacent_hex(attacker.position, defender.position, is_blocked)
    if approach_hex is None:
        return None
    path = find_path(attacker.position, approach_hex, is_blocked)
    if len(path) * FEET_PER_HEX > movement_feet:
        return None
    return AttackApproach(target_entity_id=target_entity_id, approach_hex=approach_hex, path=path)
