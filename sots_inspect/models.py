"""Core domain models.

Decoders produce these types; the catalog and the CLI only ever see them.
Pydantic is used so that each record is validated once more at construction
and is immutable afterwards.

The __str__ of every model is the textual rendering other tooling may
parse, so field order and labels are fixed.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

U8 = Annotated[int, Field(ge=0, le=255)]

CYCLE_COUNT = 6


class Effect(IntEnum):
    """Narrative action attached to a card. Values are the source codes."""

    NONE = 0
    CHAIN = 1
    INHERIT = 2
    DUPLICATE = 3
    INSERT = 4
    COLLAPSE = 5
    REDRAW = 6
    VIEW_HAND = 7
    CHOOSE = 8
    LISTEN = 9

    @property
    def label(self) -> str:
        return _EFFECT_LABELS[self]

    def __str__(self) -> str:
        return self.label

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


_EFFECT_LABELS = {
    Effect.NONE: "",
    Effect.CHAIN: "Chatter",
    Effect.INHERIT: "Elaborate",
    Effect.DUPLICATE: "Accommodate",
    Effect.INSERT: "Clarify",
    Effect.COLLAPSE: "Backtrack",
    Effect.REDRAW: "Reconsider",
    Effect.VIEW_HAND: "Observe",
    Effect.CHOOSE: "Prepare",
    Effect.LISTEN: "Listen",
}


class ConnectType(IntEnum):
    """Connector shape. Member values give the canonical sort order only;
    the bit each shape occupies in the source bitmask is `bit`."""

    CIRCLE = 0
    TRIANGLE = 1
    SQUARE = 2
    DIAMOND = 3
    DOG = 4
    SPIRAL = 5

    @property
    def bit(self) -> int:
        return CONNECT_BITS[self]

    def __str__(self) -> str:
        return self.name.capitalize()

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


CONNECT_BITS = {
    ConnectType.CIRCLE: 0x1,
    ConnectType.TRIANGLE: 0x2,
    ConnectType.SQUARE: 0x4,
    ConnectType.DIAMOND: 0x8,
    ConnectType.SPIRAL: 0x10,
    ConnectType.DOG: 0x20,
}

CONNECT_MASK = 0x3F


class Connector(BaseModel):
    """An ordered set of shapes on one side of a card."""

    model_config = ConfigDict(frozen=True)

    tags: tuple[ConnectType, ...] = ()

    @field_validator("tags")
    @classmethod
    def _canonical(cls, tags: tuple[ConnectType, ...]) -> tuple[ConnectType, ...]:
        return tuple(sorted(set(tags)))

    @property
    def bitmask(self) -> int:
        mask = 0
        for tag in self.tags:
            mask |= tag.bit
        return mask

    def __contains__(self, tag: object) -> bool:
        return tag in self.tags

    def __len__(self) -> int:
        return len(self.tags)

    def __str__(self) -> str:
        return ", ".join(str(tag) for tag in self.tags)


class Card(BaseModel):
    model_config = ConfigDict(frozen=True)

    input: Connector
    output: Connector
    effect: Effect

    def __str__(self) -> str:
        return f"{self.input} | {self.effect} | {self.output}"


class Deck(BaseModel):
    """An anchor card plus an ordered, possibly empty, list of cards."""

    model_config = ConfigDict(frozen=True)

    anchor: Card
    cards: tuple[Card, ...] = ()

    def lines(self) -> list[str]:
        return [f"anchor: {self.anchor}", *(str(card) for card in self.cards)]

    def __str__(self) -> str:
        return "\n".join(self.lines())


def _indented(lines: list[str], depth: int) -> str:
    tabs = "\t" * depth
    return tabs + f"\n{tabs}".join(lines)


class Event(BaseModel):
    """A narrative event as declared in the events document.

    `deck` is None when the event does not override its NPC's deck; the
    consumer must then use the NPC's deck for the current cycle.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    npc_guid: str
    sequence_count: U8
    strike_count: U8
    sequence_lengths: tuple[U8, ...]
    deck: Deck | None = None

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return self.id < other.id

    def _header_lines(self) -> list[str]:
        return [
            f"{self.id}:",
            f"\tnpc_guid: {self.npc_guid}",
        ]

    def _fallback_line(self) -> str:
        return f"Default for cycle; see character with npc guid `{self.npc_guid}`"

    def __str__(self) -> str:
        lengths = ", ".join(str(n) for n in self.sequence_lengths)
        lines = [
            *self._header_lines(),
            f"\tsequence_count: {self.sequence_count}",
            f"\tstrike_count: {self.strike_count}",
            f"\tsequence_lengths: {lengths}",
            "\tdeck:",
        ]
        if self.deck is not None:
            lines.append(_indented(self.deck.lines(), 2))
        else:
            lines.append(_indented([self._fallback_line()], 2))
        return "\n".join(lines) + "\n"


class LinkedEvent(Event):
    """An Event whose npc guid has been resolved to an NPC id."""

    npc_id: str

    @classmethod
    def link(cls, event: Event, npc_id: str) -> LinkedEvent:
        return cls(**dict(event), npc_id=npc_id)

    def _header_lines(self) -> list[str]:
        return [*super()._header_lines(), f"\tnpc: {self.npc_id}"]

    def _fallback_line(self) -> str:
        return f"Default for cycle; see character `{self.npc_id}`"


class NPC(BaseModel):
    """A non-player character with one deck per cycle.

    Two NPCs are equal iff their ids match; the other fields are not
    compared.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    hand_size: U8
    prefers_doubles: bool
    mad_threshold: U8
    decks: tuple[Deck, ...] = Field(min_length=CYCLE_COUNT, max_length=CYCLE_COUNT)

    def deck_for_cycle(self, cycle: int) -> Deck:
        if not 0 <= cycle < CYCLE_COUNT:
            raise IndexError(f"cycle must be between 0 and {CYCLE_COUNT - 1}, got {cycle}")
        return self.decks[cycle]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NPC):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, NPC):
            return NotImplemented
        return self.id < other.id

    def __str__(self) -> str:
        lines = [
            f"{self.id}:",
            f"\thand_size: {self.hand_size}",
            f"\tprefers_doubles: {'true' if self.prefers_doubles else 'false'}",
            f"\tmad_threshold: {self.mad_threshold}",
        ]
        for cycle, deck in enumerate(self.decks):
            lines.append(f"\tcycle {cycle}:")
            lines.append(_indented(deck.lines(), 2))
        return "\n".join(lines) + "\n"
