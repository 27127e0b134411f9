from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from dungeonmap.content.schema import validate_event_log_payload, validate_map_snapshot_payload
from dungeonmap.sim.dungeon_map import DungeonMapState
from dungeonmap.sim.events import RoomEvent
from dungeonmap.sim.hash import dungeon_map_hash, snapshot_hash

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
CANONICAL_JSON_INDENT = 2
CANONICAL_JSON_SEPARATORS = (",", ": ")


def _canonical_json(payload: dict[str, Any]) -> str:
    return json.dumps(
        payload,
        indent=CANONICAL_JSON_INDENT,
        separators=CANONICAL_JSON_SEPARATORS,
        sort_keys=True,
    )


def _write_atomic_json(path: str | Path, payload: dict[str, Any]) -> None:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    serialized = _canonical_json(payload)

    temp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=destination.parent,
            delete=False,
            suffix=".tmp",
        ) as temp_file:
            temp_file.write(serialized)
            temp_file.flush()
            os.fsync(temp_file.fileno())
            temp_path = Path(temp_file.name)
        os.replace(temp_path, destination)
    except Exception:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


def _build_snapshot_payload(state: DungeonMapState) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "dungeon_map": state.to_dict(),
    }
    payload["map_hash"] = snapshot_hash(payload)
    return payload


def build_event_log_payload(events: list[RoomEvent]) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "events": [event.to_dict() for event in events],
    }


def load_room_events_json(path: str | Path) -> list[RoomEvent]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    validate_event_log_payload(payload)
    events = [RoomEvent.from_dict(raw) for raw in payload["events"]]
    logger.info("loaded %d room events from %s", len(events), path)
    return events


def save_room_events_json(path: str | Path, events: list[RoomEvent]) -> None:
    payload = build_event_log_payload(events)
    validate_event_log_payload(payload)
    _write_atomic_json(path, payload)


def save_dungeon_map_json(path: str | Path, state: DungeonMapState) -> None:
    payload = _build_snapshot_payload(state)
    validate_map_snapshot_payload(payload)
    _write_atomic_json(path, payload)
    logger.info("saved dungeon map snapshot to %s hash=%s", path, dungeon_map_hash(state))


def load_dungeon_map_json(path: str | Path) -> DungeonMapState:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    validate_map_snapshot_payload(payload)

    expected_hash = payload["map_hash"]
    actual_hash = snapshot_hash(payload)
    if expected_hash != actual_hash:
        raise ValueError(
            f"map_hash mismatch while loading snapshot (stored={expected_hash}, recomputed={actual_hash})"
        )
    state = DungeonMapState.from_dict(payload["dungeon_map"])
    logger.info("loaded dungeon map snapshot from %s rooms=%d", path, len(state.revealed_room_ids))
    return state
