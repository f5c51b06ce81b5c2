"""Value tree → domain model decoders.

Every decoder is a pure function built only from get_field()/expect(). The
first failure raises and aborts the enclosing decode; no partial record is
ever returned.

Source layouts:

    card   {input: <bitmask>, output: <bitmask>, effect: <code>}
    deck   {anchor: <card>, cards: [<card>, ...]}
    event  {id, sequence, sequenceCount, strikeCount, overrideDeck,
            npc: {guid}, deck?}
    npc    MonoBehaviour: {id, handSize, prefersDoubles, mad,
                           cycle0Deck .. cycle5Deck}
    events MonoBehaviour: {data: [<event>, ...]}
"""

from __future__ import annotations

import logging

from sots_inspect.errors import DomainError, IntegrityError
from sots_inspect.models import (
    CONNECT_BITS,
    CYCLE_COUNT,
    NPC,
    Card,
    Connector,
    Deck,
    Effect,
    Event,
)
from sots_inspect.tree import List, Struct, Text, UInt, Value, expect, get_field

logger = logging.getLogger(__name__)

WRAPPER_KEY = "MonoBehaviour"
EVENTS_KEY = "data"
DECK_SLOT_KEYS = tuple(f"cycle{n}Deck" for n in range(CYCLE_COUNT))

SEQUENCE_SKIP = 2
SEQUENCE_STRIDE = 8
_DIGITS = "0123456789"
_U8_MAX = 255


def _join(context: str | None, suffix: str) -> str:
    return f"{context} {suffix}" if context else suffix


def _narrow_u8(value: int, key: str, context: str) -> int:
    if value > _U8_MAX:
        raise DomainError(
            f"{context}: `{key}` value {value} does not fit in an unsigned 8-bit integer."
        )
    return value


# ---------------------------------------------------------------------------
# Effect / Connector
# ---------------------------------------------------------------------------

def decode_effect(value: Value, context: str | None = None) -> Effect:
    """Unknown codes, 0 included, decode to Effect.NONE."""
    code = expect(value, UInt, "effect", context).value
    if 1 <= code <= 9:
        return Effect(code)
    return Effect.NONE


def decode_connector(value: Value, context: str | None = None) -> Connector:
    """Decode a shape bitmask. Bits outside the six known shapes are ignored."""
    mask = expect(value, UInt, "connector", context).value
    return Connector(tags=tuple(tag for tag, bit in CONNECT_BITS.items() if mask & bit))


# ---------------------------------------------------------------------------
# Card / Deck
# ---------------------------------------------------------------------------

def decode_card(value: Value, context: str | None = None) -> Card:
    where = _join(context, "card")
    card = expect(value, Struct, "card", context)
    return Card(
        input=decode_connector(get_field(card, "input", UInt, where), where),
        output=decode_connector(get_field(card, "output", UInt, where), where),
        effect=decode_effect(get_field(card, "effect", UInt, where), where),
    )


def decode_deck(value: Value, context: str | None = None) -> Deck:
    where = context or "deck"
    deck = expect(value, Struct, "deck", context)
    anchor = decode_card(get_field(deck, "anchor", Struct, where), _join(where, "anchor"))
    cards = get_field(deck, "cards", List, where)
    return Deck(
        anchor=anchor,
        cards=tuple(
            decode_card(item, f"{where} #{index}") for index, item in enumerate(cards)
        ),
    )


# ---------------------------------------------------------------------------
# Event
# ---------------------------------------------------------------------------

def decode_sequence(sequence: str) -> list[int]:
    """Unpack a `sequence` string into its list of lengths.

    Skip the first two characters, then sample every eighth character. Each
    sampled decimal digit is one length; anything else is dropped.

    The sampled positions are 2, 10, 18, ... (zero-based). A string laid out
    with its lengths at 1, 9, 17, ..., such as "0300000002000000", decodes
    to zeros.
    """
    return [
        int(ch)
        for ch in sequence[SEQUENCE_SKIP::SEQUENCE_STRIDE]
        if ch in _DIGITS
    ]


def decode_event(value: Value) -> Event:
    event = expect(value, Struct, "event")
    event_id = get_field(event, "id", Text).value
    sequence = get_field(event, "sequence", Text).value

    where = f"event {event_id}"
    seq_count = get_field(event, "sequenceCount", UInt, where).value
    strike_count = get_field(event, "strikeCount", UInt, where).value
    override_deck = get_field(event, "overrideDeck", UInt, where).value
    npc_data = get_field(event, "npc", Struct, where)
    npc_guid = get_field(npc_data, "guid", Text, where).value

    sequence_lengths = decode_sequence(sequence)
    if len(sequence_lengths) != seq_count:
        raise DomainError(
            f"{where}: Failed to parse `sequence` field "
            f"(found {len(sequence_lengths)} lengths, expected {seq_count})."
        )

    deck = None
    if override_deck == 1:
        deck = decode_deck(get_field(event, "deck", Struct, where), f"{where} deck")

    return Event(
        id=event_id,
        npc_guid=npc_guid,
        sequence_count=_narrow_u8(seq_count, "sequenceCount", where),
        strike_count=_narrow_u8(strike_count, "strikeCount", where),
        sequence_lengths=tuple(sequence_lengths),
        deck=deck,
    )


def decode_events_document(root: Value) -> dict[str, Event]:
    """Decode an events document into events keyed (and ordered) by id."""
    wrapper = get_field(expect(root, Struct, "document root"), WRAPPER_KEY, Struct)
    records = get_field(wrapper, EVENTS_KEY, List)

    events: dict[str, Event] = {}
    for record in records:
        event = decode_event(record)
        if event.id in events:
            raise IntegrityError(f"event {event.id}: id is declared more than once.")
        events[event.id] = event
    logger.debug("decoded events=%d", len(events))
    return dict(sorted(events.items()))


# ---------------------------------------------------------------------------
# NPC
# ---------------------------------------------------------------------------

def is_npc_record(root: Value) -> bool:
    """Cheap structural check that `root` is an NPC asset at all."""
    if not isinstance(root, Struct):
        return False
    wrapper = root.get(WRAPPER_KEY)
    return isinstance(wrapper, Struct) and DECK_SLOT_KEYS[0] in wrapper


def decode_npc(root: Value) -> NPC:
    wrapper = get_field(expect(root, Struct, "document root"), WRAPPER_KEY, Struct)
    npc_id = get_field(wrapper, "id", Text).value

    where = f"npc {npc_id}"
    hand_size = get_field(wrapper, "handSize", UInt, where).value
    prefers_doubles = get_field(wrapper, "prefersDoubles", UInt, where).value
    mad = get_field(wrapper, "mad", UInt, where).value

    decks = tuple(
        decode_deck(get_field(wrapper, key, Struct, where), f"{where} cycle {cycle}")
        for cycle, key in enumerate(DECK_SLOT_KEYS)
    )

    return NPC(
        id=npc_id,
        hand_size=_narrow_u8(hand_size, "handSize", where),
        prefers_doubles=prefers_doubles != 0,
        mad_threshold=_narrow_u8(mad, "mad", where),
        decks=decks,
    )
