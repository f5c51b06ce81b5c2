"""Cross-reference resolution between events and NPCs.

Events point at their NPC by Unity asset guid, which only appears in the
`.meta` sidecar written next to each asset. NPC assets declare a readable
`id` in their body. Resolution runs in two phases:

  1. discover_npcs() walks the data directory. For each `*.asset` with a
     `*.asset.meta` sidecar, it reads the guid, decodes the asset if it is
     an NPC, and records guid <-> NPC id in a GuidRegistry.
  2. link_events() resolves every event's npc guid through that registry,
     attaching the NPC id and building the NPC → event ids reverse index.

Any duplicate or unknown identifier raises IntegrityError.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Mapping

from sots_inspect.decode import decode_npc, is_npc_record
from sots_inspect.document import read_document, read_documents
from sots_inspect.errors import IntegrityError
from sots_inspect.models import NPC, Event, LinkedEvent
from sots_inspect.tree import Struct, Text, expect, get_field

logger = logging.getLogger(__name__)

ASSET_SUFFIX = ".asset"
SIDECAR_SUFFIX = ".meta"


# ---------------------------------------------------------------------------
# GuidRegistry: the guid <-> NPC id bijection
# ---------------------------------------------------------------------------

class GuidRegistry:
    """Bijective mapping between asset guids and NPC ids.

    Both directions are kept in sync by insert(), which refuses any guid or
    NPC id it has already seen.
    """

    def __init__(self) -> None:
        self._npc_by_guid: dict[str, str] = {}
        self._guid_by_npc: dict[str, str] = {}

    def insert(self, guid: str, npc_id: str) -> None:
        if guid in self._npc_by_guid:
            raise IntegrityError(
                f"npc {npc_id}: guid `{guid}` is already used by npc "
                f"`{self._npc_by_guid[guid]}`."
            )
        if npc_id in self._guid_by_npc:
            raise IntegrityError(
                f"npc {npc_id}: id is declared by both guid "
                f"`{self._guid_by_npc[npc_id]}` and guid `{guid}`."
            )
        self._npc_by_guid[guid] = npc_id
        self._guid_by_npc[npc_id] = guid

    def npc_id_for(self, guid: str) -> str | None:
        return self._npc_by_guid.get(guid)

    def guid_for(self, npc_id: str) -> str | None:
        return self._guid_by_npc.get(npc_id)

    def items(self) -> Iterator[tuple[str, str]]:
        """Yield (guid, npc_id) pairs in insertion order."""
        return iter(self._npc_by_guid.items())

    def __contains__(self, guid: object) -> bool:
        return guid in self._npc_by_guid

    def __len__(self) -> int:
        return len(self._npc_by_guid)


# ---------------------------------------------------------------------------
# Phase 1: NPC discovery
# ---------------------------------------------------------------------------

def sidecar_path(asset: Path) -> Path:
    return asset.with_name(asset.name + SIDECAR_SUFFIX)


def read_sidecar_guid(path: Path) -> str:
    """Return the guid declared by a `.meta` sidecar file."""
    root = expect(read_document(path), Struct, f"sidecar {path}")
    return get_field(root, "guid", Text, f"sidecar {path}").value


def discover_npcs(root: Path) -> tuple[dict[str, NPC], GuidRegistry]:
    """Decode every NPC asset below `root`. Returns (npcs by guid, registry)."""
    registry = GuidRegistry()
    npcs: dict[str, NPC] = {}

    for asset in sorted(root.rglob(f"*{ASSET_SUFFIX}")):
        if not asset.is_file():
            continue
        meta = sidecar_path(asset)
        if not meta.is_file():
            logger.debug("skip asset=%s reason=no sidecar", asset)
            continue

        guid = read_sidecar_guid(meta)
        documents = read_documents(asset)
        if len(documents) != 1 or not is_npc_record(documents[0]):
            logger.debug("skip asset=%s reason=not an npc", asset)
            continue

        npc = decode_npc(documents[0])
        registry.insert(guid, npc.id)
        npcs[guid] = npc
        logger.debug("npc id=%s guid=%s asset=%s", npc.id, guid, asset)

    logger.info("discovered npcs=%d under %s", len(npcs), root)
    return npcs, registry


# ---------------------------------------------------------------------------
# Phase 2: event linking
# ---------------------------------------------------------------------------

def link_events(
    events: Mapping[str, Event], registry: GuidRegistry
) -> tuple[dict[str, LinkedEvent], dict[str, set[str]]]:
    """Attach NPC ids to events. Returns (linked events, npc id → event ids)."""
    events_by_npc: dict[str, set[str]] = {npc_id: set() for _, npc_id in registry.items()}
    linked: dict[str, LinkedEvent] = {}

    for event_id in sorted(events):
        event = events[event_id]
        npc_id = registry.npc_id_for(event.npc_guid)
        if npc_id is None:
            raise IntegrityError(
                f"event {event.id}: npc guid `{event.npc_guid}` does not match any known NPC."
            )
        linked[event_id] = LinkedEvent.link(event, npc_id)
        events_by_npc[npc_id].add(event_id)

    return linked, events_by_npc
