"""sots-inspect: print events and NPC decks from Unity game data.

    sots-inspect path/to/event_data.asset      every event in one document
    sots-inspect path/to/data                  every event, linked to its NPC
    sots-inspect path/to/data --npc alice      one NPC and its events
    sots-inspect path/to/data --event e1       one event and its cycle-0 deck
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from sots_inspect.catalog import Catalog, load_catalog, load_events
from sots_inspect.config import LOG_LEVELS, get_settings
from sots_inspect.errors import InspectError


def _build_parser(default_path: Path | None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sots-inspect",
        description="Inspect events and NPC decks in Unity game data",
    )
    parser.add_argument("path", type=Path, nargs="?", default=default_path,
                        help="Events document or data directory (default: $SOTS_DATA_DIR)")
    parser.add_argument("--npc", default=None, help="Show one NPC and its events")
    parser.add_argument("--event", default=None, help="Show a single event")
    parser.add_argument("--events-file", default=None,
                        help="Events document name inside a data directory")
    parser.add_argument("--log-level", default=None, type=str.upper, choices=LOG_LEVELS,
                        help="Logging level (default: WARNING)")
    return parser


def _show_document(path: Path, event_id: str | None) -> None:
    events = load_events(path)
    if event_id is not None:
        if event_id not in events:
            raise InspectError(f"No event `{event_id}` in `{path}`.")
        print(events[event_id])
        return
    for event in events.values():
        print(event)


def _show_catalog(catalog: Catalog, npc_id: str | None, event_id: str | None) -> None:
    if npc_id is not None:
        npc = catalog.npc(npc_id)
        if npc is None:
            raise InspectError(f"No NPC `{npc_id}` in the catalog.")
        print(npc)
        for event in catalog.events_for(npc_id):
            print(event)
        return

    if event_id is not None:
        event = catalog.events.get(event_id)
        if event is None:
            raise InspectError(f"No event `{event_id}` in the catalog.")
        print(event)
        print("cycle 0 deck:")
        print(catalog.deck_for(event, 0))
        return

    for event in catalog.events.values():
        print(event)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = _build_parser(settings.data_dir)
    args = parser.parse_args(argv)

    level = args.log_level or settings.log_level
    if level not in LOG_LEVELS:
        parser.error(f"SOTS_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, not `{level}`")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.path is None:
        parser.error("no PATH given and SOTS_DATA_DIR is not set")

    path: Path = args.path
    try:
        if path.is_file():
            _show_document(path, args.event)
        elif path.is_dir():
            catalog = load_catalog(path, args.events_file or settings.events_file)
            _show_catalog(catalog, args.npc, args.event)
        else:
            raise InspectError(f"The path `{path}` does not exist.")
    except InspectError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
