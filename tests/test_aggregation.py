from ampmap.mappings.aggregation import default_level_for_new_role, uniform_reasoning_level

from conftest import mapping


MODELS = frozenset({"gpt-5", "gpt-5.2"})


def test_empty_reasoning_set_reports_none():
    mappings = [mapping("a", "gpt-5(high)"), mapping("b", "gpt-5(low)")]
    assert uniform_reasoning_level(mappings, frozenset()) == "none"


def test_no_mappings_reports_none():
    assert uniform_reasoning_level([], MODELS) == "none"


def test_mixed_levels_report_none_value():
    mappings = [mapping("a", "gpt-5(high)"), mapping("b", "gpt-5.2(low)")]
    assert uniform_reasoning_level(mappings, MODELS) is None


def test_shared_level_is_reported():
    mappings = [
        mapping("a", "gpt-5(medium)"),
        mapping("b", "gpt-5.2(medium)"),
        mapping("c", "copilot-gpt-5(medium)"),
    ]
    assert uniform_reasoning_level(mappings, MODELS) == "medium"


def test_disabled_and_non_reasoning_mappings_are_ignored():
    mappings = [
        mapping("a", "gpt-5(high)"),
        mapping("b", "gpt-5(low)", enabled=False),
        mapping("c", "claude-opus-4-6"),
    ]
    assert uniform_reasoning_level(mappings, MODELS) == "high"


def test_absent_enabled_flag_counts_as_enabled():
    mappings = [mapping("a", "gpt-5(high)"), mapping("b", "gpt-5(low)", enabled=None)]
    assert uniform_reasoning_level(mappings, MODELS) is None


def test_unsuffixed_reasoning_targets_count_as_none():
    mappings = [mapping("a", "gpt-5"), mapping("b", "gpt-5.2(high)")]
    assert uniform_reasoning_level(mappings, MODELS) is None


def test_default_level_falls_back_to_none_when_mixed():
    mixed = [mapping("a", "gpt-5(high)"), mapping("b", "gpt-5(low)")]
    assert default_level_for_new_role(mixed, MODELS) == "none"
    assert default_level_for_new_role([mapping("a", "gpt-5(xhigh)")], MODELS) == "xhigh"
