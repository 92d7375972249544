import pytest

from ampmap.mappings.catalog import ROLE_SLOTS, find_slot
from ampmap.mappings.exceptions import MappingValidationError
from ampmap.mappings.models import DecodedAlias
from ampmap.mappings.store import MappingStore

from conftest import mapping


def test_duplicate_keys_rejected_on_load():
    with pytest.raises(MappingValidationError):
        MappingStore([mapping("a", "x"), mapping("a", "y")])


def test_upsert_replaces_in_place():
    store = MappingStore([mapping("a", "1"), mapping("b", "2"), mapping("c", "3")])
    store.upsert(mapping("b", "changed"))

    assert len(store) == 3
    assert [m.target_alias for m in store.all()] == ["1", "changed", "3"]


def test_upsert_appends_new_key():
    store = MappingStore([mapping("a", "1")])
    store.upsert(mapping("b", "2"))
    assert [m.source_model for m in store.all()] == ["a", "b"]


def test_remove_returns_entry_or_none():
    store = MappingStore([mapping("a", "1")])
    assert store.remove("a").target_alias == "1"
    assert store.remove("a") is None
    assert "a" not in store


def test_all_is_a_snapshot():
    store = MappingStore([mapping("a", "1")])
    snapshot = store.all()
    store.upsert(mapping("b", "2"))
    assert len(snapshot) == 1


def test_replace_all_enforces_unique_keys():
    store = MappingStore([mapping("a", "1")])
    with pytest.raises(MappingValidationError):
        store.replace_all([mapping("b", "1"), mapping("b", "2")])
    assert [m.source_model for m in store.all()] == ["a"]


def test_custom_mappings_exclude_slot_models():
    opus = find_slot("opus-4-6")
    store = MappingStore([mapping(opus.source_model, "gpt-5"), mapping("my-model", "gpt-5.2")])

    assert [m.source_model for m in store.custom_mappings(ROLE_SLOTS)] == ["my-model"]
    assert store.mapping_for_slot(opus).target_alias == "gpt-5"


def test_disabled_and_missing_are_both_inactive():
    store = MappingStore([mapping("a", "1", enabled=False), mapping("b", "2", enabled=None)])

    assert [m.source_model for m in store.active()] == ["b"]
    assert store.resolve("a", frozenset()) is None
    assert store.resolve("missing", frozenset()) is None


def test_resolve_decodes_target():
    store = MappingStore([mapping("gpt-5.2", "gpt-5(high)")])
    assert store.resolve("gpt-5.2", {"gpt-5"}) == DecodedAlias(base="gpt-5", level="high")


def test_resolve_canonicalises_request_names():
    store = MappingStore([mapping("claude-opus-4-5-20251101", "gpt-5")])
    assert store.resolve("claude-opus-4.5", {"gpt-5"}) == DecodedAlias(base="gpt-5")
