from __future__ import annotations

import argparse
import logging
from collections import Counter
from typing import Sequence

from dungeonmap.cli.viewer import AsciiViewer
from dungeonmap.content.io import load_room_events_json, save_dungeon_map_json
from dungeonmap.sim.coords import CubeCoord
from dungeonmap.sim.dungeon_map import DungeonMapTracker
from dungeonmap.sim.events import RoomEvent
from dungeonmap.sim.hash import dungeon_map_hash
from dungeonmap.sim.interactions import movement_range, preview_path

logger = logging.getLogger(__name__)

LOG_LEVEL_CHOICES = ("DEBUG", "INFO", "WARNING", "ERROR")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dungeonmap-replay",
        description=(
            "Replay a room event log through the dungeon map accumulator and report the "
            "resulting map, its hash, and optional movement queries."
        ),
    )
    parser.add_argument("events_path", help="Path to room event log JSON")
    parser.add_argument("--per-event", action="store_true", help="Print the map hash after each applied event")
    parser.add_argument("--show-map", action="store_true", help="Print an ASCII rendering of the final map")
    parser.add_argument("--print-entities", action="store_true", help="Print every tracked entity position")
    parser.add_argument(
        "--range",
        nargs=2,
        metavar=("ENTITY_ID", "FEET"),
        help="Print the movement range of ENTITY_ID with FEET of movement",
    )
    parser.add_argument(
        "--path",
        nargs=4,
        metavar=("ENTITY_ID", "X", "Z", "FEET"),
        help="Print the path ENTITY_ID would walk to hex (X, -X-Z, Z) with FEET of movement",
    )
    parser.add_argument("--dump-final-map", help="Optional path to write the canonical map snapshot")
    parser.add_argument("--log-level", choices=LOG_LEVEL_CHOICES, default="WARNING", help="Logging level")
    return parser


def _print_event_summary(events: list[RoomEvent]) -> None:
    counts = Counter(event.event_type for event in events)
    if not counts:
        print("event_summary none")
        return
    summary = " ".join(f"{event_type}={counts[event_type]}" for event_type in sorted(counts))
    print(f"event_summary {summary}")


def _print_entities(tracker: DungeonMapTracker) -> None:
    entities = tracker.state.entities
    if not entities:
        print("entity none")
    for entity_id in sorted(entities):
        position = entities[entity_id].position
        print(
            f"entity entity_id={entity_id} type={entities[entity_id].entity_type} "
            f"position={position.x},{position.y},{position.z}"
        )


def _format_coords(coords: Sequence[CubeCoord]) -> str:
    return " ".join(f"{coord.x},{coord.y},{coord.z}" for coord in coords) or "-"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        events = load_room_events_json(args.events_path)
        tracker = DungeonMapTracker()
        _print_event_summary(events)
        print(f"start_hash={dungeon_map_hash(tracker.state)}")

        for index, event in enumerate(events):
            tracker.apply(event)
            if args.per_event:
                print(f"event={index} type={event.event_type} hash={dungeon_map_hash(tracker.state)}")

        state = tracker.state
        print(f"end_hash={dungeon_map_hash(state)}")
        print(
            f"rooms={len(state.revealed_room_ids)} floor_tiles={len(state.floor_tiles)} "
            f"walls={len(state.walls)} entities={len(state.entities)} doors={len(state.doors)} "
            f"current_room={state.current_room_id if state.current_room_id is not None else 'none'}"
        )

        if args.print_entities:
            _print_entities(tracker)

        reachable: set[CubeCoord] = set()
        if args.range:
            entity_id, feet = args.range[0], float(args.range[1])
            reachable = movement_range(state, entity_id, feet)
            print(f"range entity_id={entity_id} feet={feet:g} hexes={len(reachable)}")

        path: list[CubeCoord] = []
        if args.path:
            entity_id = args.path[0]
            target = CubeCoord.from_xz(int(args.path[1]), int(args.path[2]))
            path = preview_path(state, entity_id, target, float(args.path[3]))
            print(f"path entity_id={entity_id} steps={len(path)} hexes={_format_coords(path)}")

        if args.show_map:
            print(AsciiViewer().render(state, reachable=reachable, path=path))

        if args.dump_final_map:
            save_dungeon_map_json(args.dump_final_map, state)
            print(f"dumped_final_map={args.dump_final_map}")

    except Exception as exc:
        logger.debug("replay failed", exc_info=True)
        print(f"error: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
