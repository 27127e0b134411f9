import pytest

from dungeonmap.content.io import load_room_events_json
from dungeonmap.sim.coords import CubeCoord
from dungeonmap.sim.dungeon_map import DungeonMapTracker, create_empty_state
from dungeonmap.sim.events import (
    ENTITY_UPDATE_EVENT_TYPES,
    ROOM_MERGE_EVENT_TYPES,
    RoomEvent,
    apply_room_event,
    replay_room_events,
)
from dungeonmap.sim.hash import dungeon_map_hash
from dungeonmap.sim.room import DoorInfo, EntityPlacement, Room

EXAMPLE_EVENTS = "content/examples/two_room_session.json"


def _room(room_id: str, char_x: int = 0, origin_x: int = 0) -> Room:
    return Room(
        room_id=room_id,
        width=3,
        height=2,
        origin=CubeCoord.from_xz(origin_x, 0),
        entities={"char-1": EntityPlacement("char-1", CubeCoord.from_xz(char_x, 0), "character")},
    )


def test_event_types_partition_merge_and_entity_updates() -> None:
    assert ROOM_MERGE_EVENT_TYPES == {"combat_started", "room_revealed"}
    assert ENTITY_UPDATE_EVENT_TYPES == {
        "turn_ended",
        "monster_turn_completed",
        "movement_completed",
        "attack_resolved",
    }


def test_room_event_rejects_unknown_type_and_missing_room() -> None:
    with pytest.raises(ValueError, match="unsupported room event_type"):
        RoomEvent(event_type="room_collapsed", room=_room("room-1"))
    with pytest.raises(ValueError, match="requires a room"):
        RoomEvent(event_type="turn_ended")


def test_merge_events_reveal_rooms() -> None:
    state = apply_room_event(create_empty_state(), RoomEvent("combat_started", _room("room-1")))
    state = apply_room_event(state, RoomEvent("room_revealed", _room("room-2", char_x=3, origin_x=3)))

    assert state.revealed_room_ids == {"room-1", "room-2"}
    assert len(state.floor_tiles) == 12
    assert state.current_room_id == "room-2"


def test_entity_update_event_moves_entities_without_revealing() -> None:
    state = apply_room_event(create_empty_state(), RoomEvent("combat_started", _room("room-1")))

    moved = apply_room_event(
        state,
        RoomEvent(
            "movement_completed",
            _room("room-1", char_x=2),
            doors=(DoorInfo("door-z", CubeCoord(9, -9, 0), is_open=True),),
        ),
    )

    assert moved.entities["char-1"].position == CubeCoord(2, -2, 0)
    assert moved.floor_tiles == state.floor_tiles
    assert len(moved.doors) == 0


def test_door_event_without_room_updates_doors_only() -> None:
    state = apply_room_event(create_empty_state(), RoomEvent("combat_started", _room("room-1")))

    updated = apply_room_event(
        state,
        RoomEvent("door_state_changed", doors=(DoorInfo("door-a", CubeCoord(3, -3, 0), is_open=True),)),
    )

    assert updated.doors["door-a"].is_open is True
    assert updated.entities == state.entities
    assert updated.current_room_id == "room-1"


def test_room_event_dict_round_trip() -> None:
    event = RoomEvent("room_revealed", _room("room-2", origin_x=3), doors=(DoorInfo("door-a", CubeCoord(3, -3, 0)),))

    restored = RoomEvent.from_dict(event.to_dict())

    assert restored.to_dict() == event.to_dict()
    assert restored.room is not None
    assert restored.room.origin == CubeCoord(3, -3, 0)


def test_example_session_replays_to_expected_map() -> None:
    events = load_room_events_json(EXAMPLE_EVENTS)

    state = replay_room_events(events)

    assert len(events) == 4
    assert state.revealed_room_ids == {"room-1", "room-2"}
    assert len(state.floor_tiles) == 12
    assert len(state.walls) == 2
    assert set(state.entities) == {"char-1", "monster-1", "monster-2"}
    assert state.entities["char-1"].position == CubeCoord(4, -4, 0)
    assert state.doors["door-a"].is_open is False
    assert state.doors["door-a"].physical_hint == "a heavy oak door"
    assert state.current_room_id == "room-2"


def test_replay_is_deterministic_and_matches_tracker() -> None:
    events = load_room_events_json(EXAMPLE_EVENTS)
    tracker = DungeonMapTracker()
    for event in events:
        tracker.apply(event)

    first = replay_room_events(events)
    second = replay_room_events(load_room_events_json(EXAMPLE_EVENTS))

    assert dungeon_map_hash(first) == dungeon_map_hash(second)
    assert dungeon_map_hash(tracker.state) == dungeon_map_hash(first)
    assert dungeon_map_hash(first) != dungeon_map_hash(create_empty_state())


def test_replay_continues_from_given_state() -> None:
    events = load_room_events_json(EXAMPLE_EVENTS)

    partial = replay_room_events(events[:2])
    resumed = replay_room_events(events[2:], partial)

    assert dungeon_map_hash(resumed) == dungeon_map_hash(replay_room_events(events))
    assert partial.entities["char-1"].position == CubeCoord(3, -3, 0)
