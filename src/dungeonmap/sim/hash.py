from __future__ import annotations

import hashlib
import json
from typing import Any

from dungeonmap.sim.dungeon_map import DungeonMapState


def _canonical_hash(payload: Any) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def dungeon_map_hash(state: DungeonMapState) -> str:
    return _canonical_hash(state.to_dict())


def snapshot_hash(payload: dict[str, Any]) -> str:
    hash_payload = {
        "schema_version": payload["schema_version"],
        "dungeon_map": payload["dungeon_map"],
    }
    return _canonical_hash(hash_payload)
