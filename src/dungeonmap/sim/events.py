from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from dungeonmap.sim.dungeon_map import DungeonMapState, merge_room, update_doors, update_entities_from_room
from dungeonmap.sim.room import DoorInfo, Room

COMBAT_STARTED_EVENT_TYPE = "combat_started"
ROOM_REVEALED_EVENT_TYPE = "room_revealed"
TURN_ENDED_EVENT_TYPE = "turn_ended"
MONSTER_TURN_COMPLETED_EVENT_TYPE = "monster_turn_completed"
MOVEMENT_COMPLETED_EVENT_TYPE = "movement_completed"
ATTACK_RESOLVED_EVENT_TYPE = "attack_resolved"
DOOR_STATE_CHANGED_EVENT_TYPE = "door_state_changed"

ROOM_MERGE_EVENT_TYPES = frozenset({COMBAT_STARTED_EVENT_TYPE, ROOM_REVEALED_EVENT_TYPE})
ENTITY_UPDATE_EVENT_TYPES = frozenset(
    {
        TURN_ENDED_EVENT_TYPE,
        MONSTER_TURN_COMPLETED_EVENT_TYPE,
        MOVEMENT_COMPLETED_EVENT_TYPE,
        ATTACK_RESOLVED_EVENT_TYPE,
    }
)
DOOR_UPDATE_EVENT_TYPES = frozenset({DOOR_STATE_CHANGED_EVENT_TYPE})
ROOM_EVENT_TYPES = ROOM_MERGE_EVENT_TYPES | ENTITY_UPDATE_EVENT_TYPES | DOOR_UPDATE_EVENT_TYPES


@dataclass(frozen=True)
class RoomEvent:
    """One server notification carrying a room snapshot and/or door states."""

    event_type: str
    room: Room | None = None
    doors: tuple[DoorInfo, ...] = ()

    def __post_init__(self) -> None:
        if self.event_type not in ROOM_EVENT_TYPES:
            raise ValueError(f"unsupported room event_type: {self.event_type}")
        if self.event_type not in DOOR_UPDATE_EVENT_TYPES and self.room is None:
            raise ValueError(f"{self.event_type} event requires a room")
        object.__setattr__(self, "doors", tuple(self.doors))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "event_type": self.event_type,
            "doors": [door.to_dict() for door in self.doors],
        }
        if self.room is not None:
            data["room"] = self.room.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoomEvent":
        raw_room = data.get("room")
        return cls(
            event_type=str(data["event_type"]),
            room=Room.from_dict(dict(raw_room)) if raw_room is not None else None,
            doors=tuple(DoorInfo.from_dict(dict(raw)) for raw in data.get("doors") or ()),
        )


def apply_room_event(state: DungeonMapState, event: RoomEvent) -> DungeonMapState:
    # Doors on entity-update events are ignored; those events never touch doors.
    if event.room is None or event.event_type in DOOR_UPDATE_EVENT_TYPES:
        return update_doors(state, event.doors)
    if event.event_type in ROOM_MERGE_EVENT_TYPES:
        return merge_room(state, event.room, event.doors)
    return update_entities_from_room(state, event.room)


def replay_room_events(events: list[RoomEvent], state: DungeonMapState | None = None) -> DungeonMapState:
    current = state if state is not None else DungeonMapState()
    for event in events:
        current = apply_room_event(current, event)
    return current
