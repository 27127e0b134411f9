from __future__ import annotations

from typing import Any

from dungeonmap.sim.events import DOOR_UPDATE_EVENT_TYPES, ROOM_EVENT_TYPES

SUPPORTED_SCHEMA_VERSIONS = {1}
REQUIRED_ROOM_FIELDS = {"room_id", "width", "height"}


def _validate_schema_version(payload: dict[str, Any], *, label: str) -> None:
    schema_version = payload.get("schema_version")
    if isinstance(schema_version, bool) or not isinstance(schema_version, int):
        raise ValueError(f"{label} must contain integer field: schema_version")
    if schema_version not in SUPPORTED_SCHEMA_VERSIONS:
        raise ValueError(f"unsupported schema_version: {schema_version}")


def _validate_coord_shape(coord: Any, *, field_name: str) -> None:
    if not isinstance(coord, dict):
        raise ValueError(f"{field_name} must be an object")
    for axis, value in coord.items():
        if axis not in {"x", "y", "z"}:
            raise ValueError(f"{field_name} has unknown axis: {axis}")
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise ValueError(f"{field_name}.{axis} must be an integer")


def _validate_room_shape(room: Any, *, field_name: str) -> None:
    if not isinstance(room, dict):
        raise ValueError(f"{field_name} must be an object")
    missing = REQUIRED_ROOM_FIELDS - set(room.keys())
    if missing:
        raise ValueError(f"{field_name} missing fields: {sorted(missing)}")
    if not isinstance(room["room_id"], str) or not room["room_id"]:
        raise ValueError(f"{field_name}.room_id must be a non-empty string")
    for dimension in ("width", "height"):
        value = room[dimension]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{field_name}.{dimension} must be an integer")

    if room.get("origin") is not None:
        _validate_coord_shape(room["origin"], field_name=f"{field_name}.origin")

    entities = room.get("entities", {})
    if not isinstance(entities, dict):
        raise ValueError(f"{field_name}.entities must be an object")
    for entity_id, entity in entities.items():
        entity_field = f"{field_name}.entities[{entity_id}]"
        if not isinstance(entity, dict):
            raise ValueError(f"{entity_field} must be an object")
        if "entity_id" in entity and entity["entity_id"] != entity_id:
            raise ValueError(f"{entity_field}.entity_id does not match its key")
        _validate_coord_shape(entity.get("position"), field_name=f"{entity_field}.position")

    walls = room.get("walls", [])
    if not isinstance(walls, list):
        raise ValueError(f"{field_name}.walls must be a list")
    for index, wall in enumerate(walls):
        if not isinstance(wall, dict):
            raise ValueError(f"{field_name}.walls[{index}] must be an object")
        _validate_coord_shape(wall.get("start"), field_name=f"{field_name}.walls[{index}].start")
        _validate_coord_shape(wall.get("end"), field_name=f"{field_name}.walls[{index}].end")


def _validate_doors_shape(doors: Any, *, field_name: str) -> None:
    if not isinstance(doors, list):
        raise ValueError(f"{field_name} must be a list")
    for index, door in enumerate(doors):
        if not isinstance(door, dict):
            raise ValueError(f"{field_name}[{index}] must be an object")
        connection_id = door.get("connection_id")
        if not isinstance(connection_id, str) or not connection_id:
            raise ValueError(f"{field_name}[{index}].connection_id must be a non-empty string")
        _validate_coord_shape(door.get("position"), field_name=f"{field_name}[{index}].position")
        if "is_open" in door and not isinstance(door["is_open"], bool):
            raise ValueError(f"{field_name}[{index}].is_open must be a boolean")


def validate_event_log_payload(payload: dict[str, Any]) -> None:
    if not isinstance(payload, dict):
        raise ValueError("event log payload must be an object")
    _validate_schema_version(payload, label="event log payload")

    events = payload.get("events")
    if not isinstance(events, list):
        raise ValueError("event log payload must contain list field: events")

    for index, event in enumerate(events):
        field_name = f"events[{index}]"
        if not isinstance(event, dict):
            raise ValueError(f"{field_name} must be an object")
        event_type = event.get("event_type")
        if event_type not in ROOM_EVENT_TYPES:
            raise ValueError(f"{field_name} has unsupported event_type: {event_type}")
        if event.get("room") is None:
            if event_type not in DOOR_UPDATE_EVENT_TYPES:
                raise ValueError(f"{field_name}.room missing")
        else:
            _validate_room_shape(event["room"], field_name=f"{field_name}.room")
        if "doors" in event:
            _validate_doors_shape(event["doors"], field_name=f"{field_name}.doors")


def validate_map_snapshot_payload(payload: dict[str, Any]) -> None:
    if not isinstance(payload, dict):
        raise ValueError("map snapshot payload must be an object")
    _validate_schema_version(payload, label="map snapshot payload")

    digest = payload.get("map_hash")
    if not isinstance(digest, str) or not digest:
        raise ValueError("map snapshot payload must contain string field: map_hash")

    dungeon_map = payload.get("dungeon_map")
    if not isinstance(dungeon_map, dict):
        raise ValueError("map snapshot payload must contain object field: dungeon_map")
    for list_field in ("floor_tiles", "walls", "entities", "doors", "revealed_room_ids", "rooms"):
        if not isinstance(dungeon_map.get(list_field), list):
            raise ValueError(f"dungeon_map.{list_field} must be a list")
    current_room_id = dungeon_map.get("current_room_id")
    if current_room_id is not None and not isinstance(current_room_id, str):
        raise ValueError("dungeon_map.current_room_id must be a string or null")
    for index, room in enumerate(dungeon_map["rooms"]):
        _validate_room_shape(room, field_name=f"dungeon_map.rooms[{index}]")
