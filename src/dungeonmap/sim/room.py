from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from dungeonmap.sim.coords import ORIGIN, CubeCoord


def _require_non_empty_str(value: Any, *, field_name: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{field_name} must be a non-empty string")
    return value


def _require_int(value: Any, *, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer")
    return value


def _origin_from_dict(value: Any) -> CubeCoord:
    # Origins only carry x/z; a missing axis counts as 0.
    if not isinstance(value, dict):
        return ORIGIN
    return CubeCoord.from_xz(int(value.get("x") or 0), int(value.get("z") or 0))


@dataclass(frozen=True)
class FloorTile:
    """Walkable hex belonging to one room, in dungeon-absolute coordinates."""

    x: int
    y: int
    z: int
    room_id: str

    @property
    def coord(self) -> CubeCoord:
        return CubeCoord(self.x, self.y, self.z)

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "z": self.z, "room_id": self.room_id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FloorTile":
        coord = CubeCoord.from_dict(data)
        return cls(x=coord.x, y=coord.y, z=coord.z, room_id=str(data["room_id"]))


@dataclass(frozen=True)
class EntityPlacement:
    entity_id: str
    position: CubeCoord
    entity_type: str = "unknown"

    def __post_init__(self) -> None:
        _require_non_empty_str(self.entity_id, field_name="entity.entity_id")
        if not isinstance(self.position, CubeCoord):
            raise ValueError("entity.position must be a CubeCoord")

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "position": self.position.to_dict(),
            "entity_type": self.entity_type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EntityPlacement":
        return cls(
            entity_id=str(data["entity_id"]),
            position=CubeCoord.from_dict(data.get("position")),
            entity_type=str(data.get("entity_type", "unknown")),
        )


@dataclass(frozen=True)
class WallSegment:
    """Wall between two hex centres; already dungeon-absolute when received."""

    start: CubeCoord
    end: CubeCoord

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WallSegment":
        return cls(start=CubeCoord.from_dict(data.get("start")), end=CubeCoord.from_dict(data.get("end")))


@dataclass(frozen=True)
class DoorInfo:
    connection_id: str
    position: CubeCoord
    is_open: bool = False
    physical_hint: str = ""

    def __post_init__(self) -> None:
        _require_non_empty_str(self.connection_id, field_name="door.connection_id")

    def to_dict(self) -> dict[str, Any]:
        return {
            "connection_id": self.connection_id,
            "position": self.position.to_dict(),
            "is_open": self.is_open,
            "physical_hint": self.physical_hint,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DoorInfo":
        return cls(
            connection_id=str(data["connection_id"]),
            position=CubeCoord.from_dict(data.get("position")),
            is_open=bool(data.get("is_open", False)),
            physical_hint=str(data.get("physical_hint", "")),
        )


@dataclass(frozen=True)
class Room:
    """Server snapshot of one room.

    ``origin`` is the dungeon-absolute position of the room's local (0, 0)
    cell. Entity positions and walls arrive already in absolute coordinates;
    only the floor footprint is described relative to the origin.
    """

    room_id: str
    width: int
    height: int
    origin: CubeCoord = ORIGIN
    entities: Mapping[str, EntityPlacement] = field(default_factory=dict)
    walls: tuple[WallSegment, ...] = ()

    def __post_init__(self) -> None:
        _require_non_empty_str(self.room_id, field_name="room.room_id")
        _require_int(self.width, field_name="room.width")
        _require_int(self.height, field_name="room.height")
        if self.origin is None:
            object.__setattr__(self, "origin", ORIGIN)
        object.__setattr__(self, "entities", MappingProxyType(dict(self.entities or {})))
        object.__setattr__(self, "walls", tuple(self.walls or ()))

    def to_dict(self) -> dict[str, Any]:
        return {
            "room_id": self.room_id,
            "width": self.width,
            "height": self.height,
            "origin": {"x": self.origin.x, "z": self.origin.z},
            "entities": {entity_id: self.entities[entity_id].to_dict() for entity_id in sorted(self.entities)},
            "walls": [wall.to_dict() for wall in self.walls],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Room":
        raw_entities = data.get("entities") or {}
        entities: dict[str, EntityPlacement] = {}
        for entity_id, raw in raw_entities.items():
            payload = {"entity_id": entity_id, **dict(raw)}
            entities[str(entity_id)] = EntityPlacement.from_dict(payload)
        return cls(
            room_id=str(data["room_id"]),
            width=int(data.get("width", 0)),
            height=int(data.get("height", 0)),
            origin=_origin_from_dict(data.get("origin")),
            entities=entities,
            walls=tuple(WallSegment.from_dict(dict(raw)) for raw in data.get("walls") or ()),
        )
