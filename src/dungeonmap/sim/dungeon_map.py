from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from dungeonmap.sim.coords import CubeCoord, cube_key
from dungeonmap.sim.room import DoorInfo, EntityPlacement, FloorTile, Room, WallSegment

if TYPE_CHECKING:
    from dungeonmap.sim.events import RoomEvent

logger = logging.getLogger(__name__)


def _frozen(mapping: dict[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(mapping)


def _empty_mapping() -> Mapping[str, Any]:
    return _frozen({})


@dataclass(frozen=True)
class DungeonMapState:
    """Accumulated view of every revealed room in the current session.

    Collections are read-only views over containers built fresh by each
    transform, so any snapshot a caller holds stays unchanged.
    """

    floor_tiles: Mapping[str, FloorTile] = field(default_factory=_empty_mapping)
    walls: tuple[WallSegment, ...] = ()
    entities: Mapping[str, EntityPlacement] = field(default_factory=_empty_mapping)
    doors: Mapping[str, DoorInfo] = field(default_factory=_empty_mapping)
    revealed_room_ids: frozenset[str] = frozenset()
    rooms: Mapping[str, Room] = field(default_factory=_empty_mapping)
    current_room_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "floor_tiles": [self.floor_tiles[key].to_dict() for key in sorted(self.floor_tiles)],
            "walls": [wall.to_dict() for wall in self.walls],
            "entities": [self.entities[entity_id].to_dict() for entity_id in sorted(self.entities)],
            "doors": [self.doors[connection_id].to_dict() for connection_id in sorted(self.doors)],
            "revealed_room_ids": sorted(self.revealed_room_ids),
            "rooms": [self.rooms[room_id].to_dict() for room_id in sorted(self.rooms)],
            "current_room_id": self.current_room_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DungeonMapState":
        floor_tiles: dict[str, FloorTile] = {}
        for raw in data.get("floor_tiles", []):
            tile = FloorTile.from_dict(dict(raw))
            floor_tiles[cube_key(tile.coord)] = tile
        entities = (EntityPlacement.from_dict(dict(raw)) for raw in data.get("entities", []))
        doors = (DoorInfo.from_dict(dict(raw)) for raw in data.get("doors", []))
        rooms = (Room.from_dict(dict(raw)) for raw in data.get("rooms", []))
        current_room_id = data.get("current_room_id")
        return cls(
            floor_tiles=_frozen(floor_tiles),
            walls=tuple(WallSegment.from_dict(dict(raw)) for raw in data.get("walls", [])),
            entities=_frozen({entity.entity_id: entity for entity in entities}),
            doors=_frozen({door.connection_id: door for door in doors}),
            revealed_room_ids=frozenset(str(room_id) for room_id in data.get("revealed_room_ids", [])),
            rooms=_frozen({room.room_id: room for room in rooms}),
            current_room_id=str(current_room_id) if current_room_id is not None else None,
        )


def create_empty_state() -> DungeonMapState:
    return DungeonMapState()


def generate_floor_tiles(room: Room) -> list[FloorTile]:
    """Expand a room's width/height/origin into absolute floor tiles, row by row."""
    tiles: list[FloorTile] = []
    for local_z in range(room.height):
        for local_x in range(room.width):
            abs_x = room.origin.x + local_x
            abs_z = room.origin.z + local_z
            tiles.append(FloorTile(x=abs_x, y=-abs_x - abs_z, z=abs_z, room_id=room.room_id))
    return tiles


def _merged_entities(entities: Mapping[str, EntityPlacement], room: Room) -> dict[str, EntityPlacement]:
    merged = dict(entities)
    for entity_id, placement in room.entities.items():
        merged[entity_id] = placement
    return merged


def _merged_doors(doors: Mapping[str, DoorInfo], updates: Iterable[DoorInfo]) -> dict[str, DoorInfo]:
    merged = dict(doors)
    for door in updates:
        merged[door.connection_id] = door
    return merged


def merge_room(state: DungeonMapState, room: Room, doors: Iterable[DoorInfo] = ()) -> DungeonMapState:
    """Merge a revealed room into the map and make it the current room.

    Floor tiles and walls are only added the first time a room id is seen;
    entities and doors are last-write-wins on every merge.
    """
    is_update = room.room_id in state.revealed_room_ids

    floor_tiles = dict(state.floor_tiles)
    walls = state.walls
    if not is_update:
        for tile in generate_floor_tiles(room):
            floor_tiles[cube_key(tile.coord)] = tile
        walls = walls + room.walls

    rooms = dict(state.rooms)
    rooms[room.room_id] = room

    logger.debug(
        "merge_room room_id=%s update=%s floor_tiles=%d walls=%d entities=%d",
        room.room_id,
        is_update,
        len(floor_tiles),
        len(walls),
        len(room.entities),
    )
    return DungeonMapState(
        floor_tiles=_frozen(floor_tiles),
        walls=walls,
        entities=_frozen(_merged_entities(state.entities, room)),
        doors=_frozen(_merged_doors(state.doors, doors)),
        revealed_room_ids=state.revealed_room_ids | {room.room_id},
        rooms=_frozen(rooms),
        current_room_id=room.room_id,
    )


def update_entities_from_room(state: DungeonMapState, room: Room) -> DungeonMapState:
    """Per-turn update: refresh entity positions and the stored room snapshot only."""
    rooms = dict(state.rooms)
    rooms[room.room_id] = room
    if room.room_id not in state.revealed_room_ids:
        logger.debug("update_entities_from_room for unrevealed room_id=%s", room.room_id)
    return DungeonMapState(
        floor_tiles=state.floor_tiles,
        walls=state.walls,
        entities=_frozen(_merged_entities(state.entities, room)),
        doors=state.doors,
        revealed_room_ids=state.revealed_room_ids,
        rooms=_frozen(rooms),
        current_room_id=state.current_room_id,
    )


def update_doors(state: DungeonMapState, doors: Iterable[DoorInfo]) -> DungeonMapState:
    return DungeonMapState(
        floor_tiles=state.floor_tiles,
        walls=state.walls,
        entities=state.entities,
        doors=_frozen(_merged_doors(state.doors, doors)),
        revealed_room_ids=state.revealed_room_ids,
        rooms=state.rooms,
        current_room_id=state.current_room_id,
    )


def current_room(state: DungeonMapState) -> Room | None:
    if state.current_room_id is None:
        return None
    return state.rooms.get(state.current_room_id)


def get_entity(state: DungeonMapState, entity_id: str) -> EntityPlacement | None:
    return state.entities.get(entity_id)


def get_floor_tile(state: DungeonMapState, coord: CubeCoord) -> FloorTile | None:
    return state.floor_tiles.get(cube_key(coord))


class DungeonMapTracker:
    """Holds the live ``DungeonMapState`` for an encounter session.

    Every method swaps ``state`` for the result of a pure transform; earlier
    snapshots handed out to readers are never touched.
    """

    def __init__(self) -> None:
        self.state = create_empty_state()

    @property
    def current_room(self) -> Room | None:
        return current_room(self.state)

    def add_room(self, room: Room, doors: Iterable[DoorInfo] = ()) -> DungeonMapState:
        self.state = merge_room(self.state, room, doors)
        return self.state

    def update_entities(self, room: Room) -> DungeonMapState:
        self.state = update_entities_from_room(self.state, room)
        return self.state

    def update_doors(self, doors: Iterable[DoorInfo]) -> DungeonMapState:
        self.state = update_doors(self.state, doors)
        return self.state

    def apply(self, event: RoomEvent) -> DungeonMapState:
        from dungeonmap.sim.events import apply_room_event

        self.state = apply_room_event(self.state, event)
        return self.state

    def reset(self) -> DungeonMapState:
        logger.info(
            "resetting dungeon map rooms=%d entities=%d",
            len(self.state.revealed_room_ids),
            len(self.state.entities),
        )
        self.state = create_empty_state()
        return self.state
