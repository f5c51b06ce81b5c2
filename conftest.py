from pathlib import Path

import pytest

UNITY_HEADER = "%YAML 1.1\n%TAG !u! tag:unity3d.com,2011:\n--- !u!114 &11400000\n"

ALICE_GUID = "0a11ce00000000000000000000000001"
BOB_GUID = "0b0b0000000000000000000000000002"

# skip 2, then every 8th character: "3" at index 2, "2" at index 10
SEQUENCE_3_2 = "0030000000200000"


class UnityData:
    """Writes Unity-style YAML assets (and their .meta sidecars) under a root."""

    HEADER = UNITY_HEADER
    ALICE_GUID = ALICE_GUID
    BOB_GUID = BOB_GUID
    SEQUENCE_3_2 = SEQUENCE_3_2

    def __init__(self, root: Path) -> None:
        self.root = root

    # ── Text builders ────────────────────────────────────────

    @staticmethod
    def card(input: int = 1, output: int = 2, effect: int = 0) -> str:
        return f"{{input: {input}, output: {output}, effect: {effect}}}"

    @classmethod
    def deck(cls, indent: int, anchor: str | None = None, cards: list[str] | None = None) -> str:
        pad = " " * indent
        anchor = anchor or cls.card()
        cards = [cls.card(4, 8, 1)] if cards is None else cards
        lines = [f"{pad}anchor: {anchor}"]
        if cards:
            lines.append(f"{pad}cards:")
            lines.extend(f"{pad}- {c}" for c in cards)
        else:
            lines.append(f"{pad}cards: []")
        return "\n".join(lines)

    @classmethod
    def npc_text(
        cls,
        npc_id: str,
        hand_size: int = 5,
        prefers_doubles: int = 1,
        mad: int = 3,
        decks: dict[int, str] | None = None,
        omit: tuple[str, ...] = (),
    ) -> str:
        decks = decks or {}
        lines = [
            "MonoBehaviour:",
            "  m_ObjectHideFlags: 0",
            "  m_Script: {fileID: 11500000, guid: 9f3e2d1c0b0a09080706050403020100, type: 3}",
            f"  m_Name: {npc_id}",
            f"  id: {npc_id}",
            f"  handSize: {hand_size}",
            f"  prefersDoubles: {prefers_doubles}",
            f"  mad: {mad}",
        ]
        lines = [line for line in lines if line.strip().split(":")[0] not in omit]
        for cycle in range(6):
            key = f"cycle{cycle}Deck"
            if key in omit:
                continue
            lines.append(f"  {key}:")
            lines.append(decks.get(cycle, cls.deck(4)))
        return UNITY_HEADER + "\n".join(lines) + "\n"

    @classmethod
    def event_text(
        cls,
        event_id: str,
        npc_guid: str,
        sequence: str = SEQUENCE_3_2,
        sequence_count: int = 2,
        strike_count: int = 1,
        override_deck: int = 0,
        deck: str | None = None,
    ) -> str:
        lines = [
            f"  - id: {event_id}",
            f"    sequence: {sequence}",
            f"    sequenceCount: {sequence_count}",
            f"    strikeCount: {strike_count}",
            f"    overrideDeck: {override_deck}",
            f"    npc: {{fileID: 11400000, guid: {npc_guid}, type: 2}}",
        ]
        if deck is not None:
            lines.append("    deck:")
            lines.append(deck)
        return "\n".join(lines)

    @staticmethod
    def events_text(entries: list[str]) -> str:
        data = "  data:\n" + "\n".join(entries) if entries else "  data: []"
        return UNITY_HEADER + "MonoBehaviour:\n  m_Name: event_data\n" + data + "\n"

    @staticmethod
    def meta_text(guid: str) -> str:
        return (
            "fileFormatVersion: 2\n"
            f"guid: {guid}\n"
            "NativeFormatImporter:\n"
            "  externalObjects: {}\n"
            "  mainObjectFileID: 11400000\n"
        )

    # ── Writers ──────────────────────────────────────────────

    def write_asset(self, relpath: str, text: str, guid: str | None = None) -> Path:
        path = self.root / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        if guid is not None:
            path.with_name(path.name + ".meta").write_text(self.meta_text(guid))
        return path

    def write_npc(self, npc_id: str, guid: str, relpath: str | None = None, **kwargs) -> Path:
        relpath = relpath or f"Characters/{npc_id}.asset"
        return self.write_asset(relpath, self.npc_text(npc_id, **kwargs), guid)

    def write_events(self, entries: list[str], name: str = "event_data.asset") -> Path:
        return self.write_asset(name, self.events_text(entries))


@pytest.fixture
def unity(tmp_path: Path) -> UnityData:
    return UnityData(tmp_path)


@pytest.fixture
def game_dir(unity: UnityData) -> Path:
    """Two NPCs, one non-NPC asset and three events."""
    unity.write_npc("alice", ALICE_GUID)
    unity.write_npc(
        "bob", BOB_GUID, prefers_doubles=0, mad=7,
        decks={2: UnityData.deck(4, anchor=UnityData.card(32, 16, 9), cards=[])},
    )
    unity.write_asset(
        "Settings/audio.asset",
        UNITY_HEADER + "MonoBehaviour:\n  m_Name: audio\n  volume: 0.8\n",
        guid="5e77000000000000000000000000000a",
    )
    unity.write_events([
        UnityData.event_text("e2", BOB_GUID, override_deck=1,
                             deck=UnityData.deck(6, cards=[UnityData.card(5, 3, 2)])),
        UnityData.event_text("e1", ALICE_GUID),
        UnityData.event_text("e3", ALICE_GUID, sequence="00100000001000000010", sequence_count=3),
    ])
    return unity.root
