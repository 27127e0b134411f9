from __future__ import annotations

from collections.abc import Collection, Sequence

from dungeonmap.sim.coords import CubeCoord, cube_to_offset
from dungeonmap.sim.dungeon_map import DungeonMapState

FLOOR_GLYPH = "."
REACHABLE_GLYPH = "*"
PATH_GLYPH = "o"
OPEN_DOOR_GLYPH = "/"
CLOSED_DOOR_GLYPH = "+"
UNKNOWN_ENTITY_GLYPH = "?"


def _entity_glyph(entity_type: str) -> str:
    return entity_type[:1].upper() if entity_type else UNKNOWN_ENTITY_GLYPH


class AsciiViewer:
    """Read-only projection of a dungeon map for terminal display.

    Hexes are laid out on odd-r offset rows; odd rows are indented by one
    character so neighbours line up diagonally.
    """

    def render(
        self,
        state: DungeonMapState,
        reachable: Collection[CubeCoord] = (),
        path: Sequence[CubeCoord] = (),
    ) -> str:
        lines: list[str] = []
        lines.append(
            f"rooms={len(state.revealed_room_ids)} "
            f"current_room={state.current_room_id if state.current_room_id is not None else 'none'} "
            f"floor_tiles={len(state.floor_tiles)} walls={len(state.walls)} "
            f"entities={len(state.entities)} doors={len(state.doors)}"
        )

        glyphs: dict[tuple[int, int], str] = {}

        def _place(coord: CubeCoord, glyph: str) -> None:
            offset = cube_to_offset(coord)
            glyphs[(offset.col, offset.row)] = glyph

        for tile in state.floor_tiles.values():
            _place(tile.coord, FLOOR_GLYPH)
        for coord in reachable:
            _place(coord, REACHABLE_GLYPH)
        for coord in path:
            _place(coord, PATH_GLYPH)
        for door in state.doors.values():
            _place(door.position, OPEN_DOOR_GLYPH if door.is_open else CLOSED_DOOR_GLYPH)
        for entity in state.entities.values():
            _place(entity.position, _entity_glyph(entity.entity_type))

        if not glyphs:
            return "\n".join(lines + ["<empty map>"])

        cols = [col for col, _ in glyphs]
        rows = [row for _, row in glyphs]
        for row in range(min(rows), max(rows) + 1):
            indent = " " if row & 1 else ""
            cells = [glyphs.get((col, row), " ") for col in range(min(cols), max(cols) + 1)]
            lines.append(f"row={row:>3}: {indent}{' '.join(cells)}".rstrip())

        for entity_id in sorted(state.entities):
            entity = state.entities[entity_id]
            position = entity.position
            lines.append(
                f"entity[{entity_id}] type={entity.entity_type} "
                f"at=({position.x},{position.y},{position.z})"
            )
        for connection_id in sorted(state.doors):
            door = state.doors[connection_id]
            position = door.position
            lines.append(
                f"door[{connection_id}] open={'yes' if door.is_open else 'no'} "
                f"at=({position.x},{position.y},{position.z})"
            )
        return "\n".join(lines)
