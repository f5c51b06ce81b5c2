"""Typed decoding of Unity game data: events, NPCs and their card decks.

Layers, leaf-first:

  tree      Value tree variants and the get_field()/expect() accessors
  document  Unity YAML bytes → Value trees
  models    Pydantic domain records with their text rendering
  decode    Value → Effect, Connector, Card, Deck, Event, NPC
  resolver  guid <-> NPC id bijection, NPC discovery, event linking
  catalog   All-or-nothing load of a data directory
"""

# Re-export the collaborator-facing surface.

from .catalog import Catalog, load_catalog, load_events  # noqa: F401
from .decode import (  # noqa: F401
    decode_card,
    decode_connector,
    decode_deck,
    decode_effect,
    decode_event,
    decode_events_document,
    decode_npc,
    is_npc_record,
)
from .errors import (  # noqa: F401
    DocumentParseError,
    DocumentReadError,
    DomainError,
    InspectError,
    IntegrityError,
    SchemaError,
)
from .models import (  # noqa: F401
    NPC,
    Card,
    ConnectType,
    Connector,
    Deck,
    Effect,
    Event,
    LinkedEvent,
)
from .resolver import GuidRegistry, discover_npcs, link_events  # noqa: F401
