import pytest

from ampmap.constants import SUFFIX_REASONING_LEVELS
from ampmap.mappings.codec import decode_alias, encode_alias, is_reasoning_model
from ampmap.mappings.exceptions import MappingValidationError
from ampmap.mappings.models import DecodedAlias


def test_decode_suffixed_reasoning_model():
    assert decode_alias("gpt-5(high)", {"gpt-5"}) == DecodedAlias(base="gpt-5", level="high")


def test_decode_rejects_unknown_level():
    assert decode_alias("my-model(custom)", {"gpt-5"}) == DecodedAlias(base="my-model(custom)", level="none")
    assert decode_alias("gpt-5(turbo)", {"gpt-5"}) == DecodedAlias(base="gpt-5(turbo)", level="none")


def test_decode_rejects_non_reasoning_base():
    assert decode_alias("claude-opus(high)", {"gpt-5"}) == DecodedAlias(base="claude-opus(high)")


def test_decode_none_is_not_a_suffix():
    assert decode_alias("gpt-5(none)", {"gpt-5"}) == DecodedAlias(base="gpt-5(none)", level="none")


def test_decode_bare_alias():
    assert decode_alias("gpt-5", {"gpt-5"}) == DecodedAlias(base="gpt-5", level="none")


def test_decode_prefixed_base():
    assert decode_alias("copilot-gpt-5(low)", {"gpt-5"}) == DecodedAlias(base="copilot-gpt-5", level="low")


def test_decode_uses_last_parenthesis_group():
    decoded = decode_alias("gpt-5(x)(high)", {"gpt-5(x)"})
    assert decoded == DecodedAlias(base="gpt-5(x)", level="high")


def test_decode_never_raises_on_odd_input():
    for alias in ["", "()", "(high)", "gpt-5(", "gpt-5)high(", "gpt-5(high) "]:
        decoded = decode_alias(alias, {"gpt-5"})
        assert decoded.base == alias
        assert decoded.level == "none"


@pytest.mark.parametrize("level", sorted(SUFFIX_REASONING_LEVELS))
def test_encode_then_decode_recovers_base_and_level(level):
    models = {"gpt-5", "gpt-5.2-codex"}
    for base in models:
        assert decode_alias(encode_alias(base, level, models), models) == DecodedAlias(base=base, level=level)


def test_encode_replaces_existing_suffix():
    assert encode_alias("gpt-5(low)", "xhigh", {"gpt-5"}) == "gpt-5(xhigh)"


def test_encode_none_strips_suffix():
    assert encode_alias("gpt-5(medium)", "none", {"gpt-5"}) == "gpt-5"
    assert encode_alias("gpt-5", "none", {"gpt-5"}) == "gpt-5"


def test_encode_is_noop_for_non_reasoning_target():
    assert encode_alias("claude-sonnet-4-5", "high", {"gpt-5"}) == "claude-sonnet-4-5"
    assert encode_alias("my-model(custom)", "low", {"gpt-5"}) == "my-model(custom)"


def test_encode_keeps_vendor_prefix():
    assert encode_alias("copilot-gpt-5", "high", {"gpt-5"}) == "copilot-gpt-5(high)"


def test_encode_with_empty_reasoning_set_is_identity():
    assert encode_alias("gpt-5(high)", "low", frozenset()) == "gpt-5(high)"


def test_encode_rejects_unknown_level():
    with pytest.raises(MappingValidationError):
        encode_alias("gpt-5", "maximum", {"gpt-5"})


def test_is_reasoning_model_checks_unprefixed_form():
    assert is_reasoning_model("copilot-gpt-5", {"gpt-5"})
    assert not is_reasoning_model("gpt-5", {"copilot-gpt-5"})
