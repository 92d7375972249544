from ampmap.mappings.prefixes import split_model_prefix, unprefixed_model


def test_known_prefix_is_split():
    split = split_model_prefix("copilot-gpt-5")
    assert split.prefix == "copilot-"
    assert split.unprefixed == "gpt-5"


def test_unprefixed_model_passes_through():
    split = split_model_prefix("gpt-5")
    assert split.prefix == ""
    assert split.unprefixed == "gpt-5"


def test_only_one_prefix_is_stripped():
    assert unprefixed_model("copilot-copilot-gpt-5") == "copilot-gpt-5"


def test_prefixes_tried_in_order():
    split = split_model_prefix("vendor-extra-model", prefixes=("vendor-", "vendor-extra-"))
    assert split.prefix == "vendor-"
    assert split.unprefixed == "extra-model"


def test_prefix_must_lead():
    assert unprefixed_model("gpt-5-copilot-") == "gpt-5-copilot-"
