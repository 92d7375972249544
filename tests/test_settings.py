import pytest
import yaml

from ampmap.constants import DEFAULT_REASONING_MODELS
from ampmap.settings import SettingsError, get_app_settings, validate_settings
from ampmap.settings.config_editor import get_general_setting_value, update_general_setting
from ampmap.settings.store import (
    get_active_settings_path,
    get_reasoning_models,
    load_model_mappings,
    load_settings,
    refresh_settings_cache,
    save_model_mappings,
)

from conftest import mapping


def _write_settings(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    refresh_settings_cache()


def test_settings_file_seeded_from_template(system_root):
    path = get_active_settings_path()

    assert path == system_root / "settings.yaml"
    assert path.exists()
    assert load_model_mappings() == []
    assert get_reasoning_models() == frozenset(DEFAULT_REASONING_MODELS)
    assert get_general_setting_value("debug") is False


def test_mapping_round_trip_keeps_absent_flags_absent(system_root):
    _write_settings(system_root / "settings.yaml", {
        "model_mappings": [
            {"name": "gpt-5.2", "alias": "gpt-5(high)"},
            {"name": "claude-opus-4-6", "alias": "gpt-5", "enabled": False, "fork": True},
        ],
    })

    mappings = load_model_mappings()
    save_model_mappings(mappings)

    raw = yaml.safe_load((system_root / "settings.yaml").read_text(encoding="utf-8"))
    assert raw["model_mappings"] == [
        {"name": "gpt-5.2", "alias": "gpt-5(high)"},
        {"name": "claude-opus-4-6", "alias": "gpt-5", "enabled": False, "fork": True},
    ]


def test_save_model_mappings_keeps_other_sections(system_root):
    update_general_setting("debug", "true")
    save_model_mappings([mapping("a", "b")])

    assert get_general_setting_value("debug") is True
    assert [m.source_model for m in load_model_mappings()] == ["a"]
    assert get_reasoning_models() == frozenset(DEFAULT_REASONING_MODELS)


def test_update_general_setting_rereads_mappings_from_disk(system_root):
    load_settings()
    path = system_root / "settings.yaml"
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    raw["model_mappings"] = [{"name": "gpt-5.2", "alias": "gpt-5(high)"}]
    path.write_text(yaml.safe_dump(raw), encoding="utf-8")

    update_general_setting("debug", "true")

    assert get_general_setting_value("debug") is True
    assert [m.source_model for m in load_model_mappings()] == ["gpt-5.2"]
    assert list(system_root.glob("*.tmp")) == []


def test_unknown_general_setting_leaves_file_untouched(system_root):
    before = get_active_settings_path().read_text(encoding="utf-8")

    with pytest.raises(SettingsError):
        update_general_setting("missing", "1")

    assert (system_root / "settings.yaml").read_text(encoding="utf-8") == before


def test_missing_reasoning_section_uses_defaults_and_empty_is_kept(system_root):
    _write_settings(system_root / "settings.yaml", {"settings": {}})
    assert get_reasoning_models() == frozenset(DEFAULT_REASONING_MODELS)

    _write_settings(system_root / "settings.yaml", {"reasoning_models": []})
    assert get_reasoning_models() == frozenset()


def test_invalid_yaml_raises_settings_error(system_root):
    path = system_root / "settings.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("model_mappings: [unclosed\n", encoding="utf-8")
    refresh_settings_cache()

    with pytest.raises(SettingsError):
        load_settings()


def test_mapping_without_alias_is_rejected(system_root):
    _write_settings(system_root / "settings.yaml", {"model_mappings": [{"name": "gpt-5.2"}]})
    with pytest.raises(SettingsError):
        load_model_mappings()


def test_update_general_setting_coerces_booleans():
    entry = update_general_setting("logfire", "on")
    assert entry.value is True

    with pytest.raises(SettingsError):
        update_general_setting("logfire", "sometimes")
    with pytest.raises(SettingsError):
        update_general_setting("does_not_exist", "true")


def test_validate_settings_reports_duplicates_and_orphans():
    status = validate_settings(
        mappings=[
            mapping("a", "x"),
            mapping("a", "y"),
            mapping("claude-opus-4-5-20251101", "old"),
            mapping("claude-opus-4-6", "new"),
        ],
        reasoning_models=frozenset({"gpt-5"}),
    )

    assert [issue.name for issue in status.errors] == ["model_mappings:duplicate:a"]
    assert [issue.name for issue in status.warnings] == ["model_mappings:orphan:claude-opus-4-5-20251101"]
    assert status.is_healthy is False


def test_validate_settings_warns_on_empty_reasoning_list():
    status = validate_settings(mappings=[], reasoning_models=frozenset())
    assert status.is_healthy
    assert [issue.name for issue in status.warnings] == ["reasoning_models"]


def test_app_settings_read_environment(system_root):
    assert get_app_settings().system_root == system_root
    assert get_app_settings().logfire_token is None
