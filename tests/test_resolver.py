"""Tests for sots_inspect.resolver: guid registry, NPC discovery, event linking."""

import pytest

from sots_inspect.errors import DocumentParseError, IntegrityError, SchemaError
from sots_inspect.models import Event
from sots_inspect.resolver import (
    GuidRegistry,
    discover_npcs,
    link_events,
    read_sidecar_guid,
    sidecar_path,
)


def _event(event_id: str, npc_guid: str) -> Event:
    return Event(
        id=event_id, npc_guid=npc_guid, sequence_count=0,
        strike_count=0, sequence_lengths=(),
    )


# ---------------------------------------------------------------------------
# GuidRegistry
# ---------------------------------------------------------------------------

class TestGuidRegistry:
    def test_both_directions(self) -> None:
        reg = GuidRegistry()
        reg.insert("g1", "alice")
        reg.insert("g2", "bob")
        assert reg.npc_id_for("g1") == "alice"
        assert reg.guid_for("bob") == "g2"
        assert "g1" in reg
        assert len(reg) == 2
        assert list(reg.items()) == [("g1", "alice"), ("g2", "bob")]

    def test_unknown_lookups(self) -> None:
        reg = GuidRegistry()
        assert reg.npc_id_for("nope") is None
        assert reg.guid_for("nope") is None

    def test_duplicate_guid(self) -> None:
        reg = GuidRegistry()
        reg.insert("g1", "alice")
        with pytest.raises(IntegrityError, match="guid `g1` is already used by npc `alice`"):
            reg.insert("g1", "bob")
        assert reg.guid_for("bob") is None

    def test_duplicate_npc_id(self) -> None:
        reg = GuidRegistry()
        reg.insert("g1", "alice")
        with pytest.raises(IntegrityError, match="npc alice"):
            reg.insert("g2", "alice")
        assert "g2" not in reg


# ---------------------------------------------------------------------------
# Sidecars
# ---------------------------------------------------------------------------

class TestSidecar:
    def test_sidecar_path(self, tmp_path) -> None:
        assert sidecar_path(tmp_path / "a.asset").name == "a.asset.meta"

    def test_read_guid(self, unity) -> None:
        path = unity.write_asset("a.asset", "x: 1\n", guid=unity.ALICE_GUID)
        assert read_sidecar_guid(sidecar_path(path)) == unity.ALICE_GUID

    def test_missing_guid(self, unity) -> None:
        path = unity.write_asset("a.asset.meta", "fileFormatVersion: 2\n")
        with pytest.raises(SchemaError, match="`guid`"):
            read_sidecar_guid(path)

    def test_numeric_guid_is_not_text(self, unity) -> None:
        path = unity.write_asset("a.asset.meta", "guid: 12345678901234567890123456789012\n")
        with pytest.raises(SchemaError, match="not of type Text"):
            read_sidecar_guid(path)


# ---------------------------------------------------------------------------
# Phase 1: discovery
# ---------------------------------------------------------------------------

class TestDiscoverNpcs:
    def test_finds_npcs_and_skips_others(self, game_dir, unity) -> None:
        npcs, registry = discover_npcs(game_dir)
        assert sorted(npc.id for npc in npcs.values()) == ["alice", "bob"]
        assert npcs[unity.ALICE_GUID].id == "alice"
        assert registry.npc_id_for(unity.BOB_GUID) == "bob"
        assert len(registry) == 2

    def test_asset_without_sidecar_is_skipped(self, unity) -> None:
        unity.write_asset("Characters/carol.asset", unity.npc_text("carol"))
        npcs, registry = discover_npcs(unity.root)
        assert npcs == {}
        assert len(registry) == 0

    def test_multi_document_asset_is_skipped(self, unity) -> None:
        text = unity.npc_text("carol") + "--- !u!1 &2\nGameObject:\n  m_Name: x\n"
        unity.write_asset("carol.asset", text, guid="0c000000000000000000000000000003")
        npcs, _ = discover_npcs(unity.root)
        assert npcs == {}

    def test_duplicate_guid(self, unity) -> None:
        unity.write_npc("alice", unity.ALICE_GUID)
        unity.write_npc("bob", unity.ALICE_GUID)
        with pytest.raises(IntegrityError, match=unity.ALICE_GUID):
            discover_npcs(unity.root)

    def test_duplicate_npc_id(self, unity) -> None:
        unity.write_npc("alice", unity.ALICE_GUID)
        unity.write_npc("alice", unity.BOB_GUID, relpath="Copies/alice.asset")
        with pytest.raises(IntegrityError, match="npc alice"):
            discover_npcs(unity.root)

    def test_invalid_npc_aborts(self, unity) -> None:
        unity.write_npc("alice", unity.ALICE_GUID, omit=("mad",))
        with pytest.raises(SchemaError, match="npc alice"):
            discover_npcs(unity.root)

    def test_unparseable_asset_aborts(self, unity) -> None:
        unity.write_asset("broken.asset", "a: [1\n", guid=unity.ALICE_GUID)
        with pytest.raises(DocumentParseError, match="broken.asset"):
            discover_npcs(unity.root)


# ---------------------------------------------------------------------------
# Phase 2: linking
# ---------------------------------------------------------------------------

class TestLinkEvents:
    @pytest.fixture
    def registry(self) -> GuidRegistry:
        reg = GuidRegistry()
        reg.insert("g1", "alice")
        reg.insert("g2", "bob")
        reg.insert("g3", "carol")
        return reg

    def test_links_and_indexes(self, registry: GuidRegistry) -> None:
        events = {"e2": _event("e2", "g1"), "e1": _event("e1", "g1"), "e3": _event("e3", "g2")}
        linked, by_npc = link_events(events, registry)
        assert list(linked) == ["e1", "e2", "e3"]
        assert linked["e1"].npc_id == "alice"
        assert linked["e3"].npc_id == "bob"
        assert by_npc == {"alice": {"e1", "e2"}, "bob": {"e3"}, "carol": set()}

    def test_unknown_guid(self, registry: GuidRegistry) -> None:
        events = {"e1": _event("e1", "g1"), "e9": _event("e9", "zz")}
        with pytest.raises(IntegrityError) as exc:
            link_events(events, registry)
        assert str(exc.value) == "event e9: npc guid `zz` does not match any known NPC."

    def test_no_events(self, registry: GuidRegistry) -> None:
        linked, by_npc = link_events({}, registry)
        assert linked == {}
        assert set(by_npc) == {"alice", "bob", "carol"}
