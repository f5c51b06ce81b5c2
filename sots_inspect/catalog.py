"""In-memory catalog of one game data directory.

Directory layout:

    {root}/
      event_data.asset          ← events document (name configurable)
      **/*.asset                ← NPC assets (non-NPC assets are skipped)
      **/*.asset.meta           ← sidecars holding each asset's guid

load_catalog() is all-or-nothing: the Catalog is only built once every
document has been decoded and every reference resolved. Any failure raises
and leaves nothing behind.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from sots_inspect.config import get_settings
from sots_inspect.decode import decode_events_document
from sots_inspect.document import read_document
from sots_inspect.models import NPC, Deck, Event, LinkedEvent
from sots_inspect.resolver import GuidRegistry, discover_npcs, link_events

logger = logging.getLogger(__name__)


class Catalog:
    """Linked events, NPCs and the indexes between them.

    Attributes:
        events:        event id → LinkedEvent, ordered by id.
        npcs:          asset guid → NPC.
        events_by_npc: NPC id → ids of the events that reference it.

    The guid <-> NPC id bijection is copied on construction and only
    reachable through guid_for() and npc_id_for().
    """

    def __init__(
        self,
        events: Mapping[str, LinkedEvent],
        npcs: Mapping[str, NPC],
        registry: GuidRegistry,
        events_by_npc: Mapping[str, set[str]],
    ) -> None:
        self.events: Mapping[str, LinkedEvent] = MappingProxyType(dict(events))
        self.npcs: Mapping[str, NPC] = MappingProxyType(dict(npcs))
        self._registry = GuidRegistry()
        for guid, npc_id in registry.items():
            self._registry.insert(guid, npc_id)
        self.events_by_npc: Mapping[str, frozenset[str]] = MappingProxyType(
            {npc_id: frozenset(ids) for npc_id, ids in events_by_npc.items()}
        )

    def guid_for(self, npc_id: str) -> str | None:
        return self._registry.guid_for(npc_id)

    def npc_id_for(self, guid: str) -> str | None:
        return self._registry.npc_id_for(guid)

    def npc(self, npc_id: str) -> NPC | None:
        guid = self.guid_for(npc_id)
        return self.npcs.get(guid) if guid is not None else None

    def npc_for(self, event: LinkedEvent) -> NPC:
        return self.npcs[event.npc_guid]

    def events_for(self, npc_id: str) -> list[LinkedEvent]:
        return sorted(self.events[event_id] for event_id in self.events_by_npc.get(npc_id, ()))

    def deck_for(self, event: LinkedEvent, cycle: int) -> Deck:
        """The deck an event is played with: its override, else the NPC's."""
        if event.deck is not None:
            return event.deck
        return self.npc_for(event).deck_for_cycle(cycle)


def load_events(path: Path) -> dict[str, Event]:
    """Read and decode a standalone events document."""
    return decode_events_document(read_document(path))


def load_catalog(root: Path, events_file: str | None = None) -> Catalog:
    """Load every NPC under `root`, then the events document, and link them."""
    if events_file is None:
        events_file = get_settings().events_file

    npcs, registry = discover_npcs(root)
    events = load_events(root / events_file)
    linked, events_by_npc = link_events(events, registry)

    logger.info("loaded catalog root=%s npcs=%d events=%d", root, len(npcs), len(linked))
    return Catalog(linked, npcs, registry, events_by_npc)
