from ampmap.mappings.catalog import ROLE_SLOTS, SLOT_MODEL_MIGRATIONS, slot_source_models
from ampmap.mappings.migration import find_orphaned_mappings, migrate_mappings
from ampmap.mappings.models import MigrationRule

from conftest import mapping


RULES = [MigrationRule(from_model="claude-opus-4-5-20251101", to_model="claude-opus-4-6")]
ACTIVE = frozenset({"claude-opus-4-6", "gpt-5.2"})


def test_old_key_is_rewritten():
    result = migrate_mappings([mapping("claude-opus-4-5-20251101", "x")], RULES, ACTIVE)

    assert result.migrated is True
    assert [(m.source_model, m.target_alias) for m in result.mappings] == [("claude-opus-4-6", "x")]


def test_migration_is_idempotent():
    first = migrate_mappings([mapping("claude-opus-4-5-20251101", "x")], RULES, ACTIVE)
    second = migrate_mappings(first.mappings, RULES, ACTIVE)

    assert second.migrated is False
    assert second.mappings == first.mappings


def test_flags_survive_migration():
    original = mapping("claude-opus-4-5-20251101", "gpt-5(high)", enabled=True, fork=True)
    migrated = migrate_mappings([original], RULES, ACTIVE).mappings[0]

    assert migrated.target_alias == "gpt-5(high)"
    assert migrated.enabled is True
    assert migrated.fork is True


def test_inactive_target_is_not_migrated():
    result = migrate_mappings([mapping("claude-opus-4-5-20251101", "x")], RULES, frozenset({"gpt-5.2"}))

    assert result.migrated is False
    assert result.mappings[0].source_model == "claude-opus-4-5-20251101"


def test_existing_target_leaves_old_mapping_in_place():
    mappings = [mapping("claude-opus-4-5-20251101", "old"), mapping("claude-opus-4-6", "new")]
    result = migrate_mappings(mappings, RULES, ACTIVE)

    assert result.migrated is False
    assert [m.source_model for m in result.mappings] == ["claude-opus-4-5-20251101", "claude-opus-4-6"]
    assert find_orphaned_mappings(result.mappings, RULES) == [mappings[0]]


def test_two_old_keys_never_collide_on_one_new_key():
    mappings = [
        mapping("claude-opus-4-5-20251101", "first"),
        mapping("claude-opus-4-6-20260205", "second"),
    ]
    result = migrate_mappings(mappings, SLOT_MODEL_MIGRATIONS, slot_source_models(ROLE_SLOTS))

    keys = [m.source_model for m in result.mappings]
    assert result.migrated is True
    assert keys == ["claude-opus-4-6", "claude-opus-4-6-20260205"]
    assert len(set(keys)) == len(keys)


def test_order_is_preserved():
    mappings = [mapping("a", "1"), mapping("claude-opus-4-5-20251101", "2"), mapping("b", "3")]
    result = migrate_mappings(mappings, RULES, ACTIVE)

    assert [m.target_alias for m in result.mappings] == ["1", "2", "3"]
    assert result.mappings[1].source_model == "claude-opus-4-6"


def test_no_orphans_after_clean_migration():
    result = migrate_mappings([mapping("claude-opus-4-5-20251101", "x")], RULES, ACTIVE)
    assert find_orphaned_mappings(result.mappings, RULES) == []
