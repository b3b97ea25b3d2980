from utils.capability_utils import (
    clean_capabilities,
    find_undefined_paths,
    is_effectively_undefined,
    remove_capability_keys,
    remove_undefined,
    verify_capabilities,
)


def test_effectively_undefined():
    assert is_effectively_undefined(None)
    assert is_effectively_undefined("undefined")
    for value in (0, False, "", "Undefined", [], {}):
        assert not is_effectively_undefined(value)


def test_remove_undefined_at_every_nesting_level():
    caps = {
        "platformName": "iOS",
        "appium:app": None,
        "appium:webDriverAgentUrl": "undefined",
        "appium:options": {"keep": 1, "drop": None, "deeper": {"gone": "undefined", "zero": 0}},
    }
    assert remove_undefined(caps) == {
        "platformName": "iOS",
        "appium:options": {"keep": 1, "deeper": {"zero": 0}},
    }


def test_falsy_defined_values_preserved():
    caps = {"appium:noReset": False, "appium:wdaStartupRetries": 0, "appium:udid": ""}
    assert clean_capabilities(caps) == caps


def test_lists_are_not_descended_into():
    caps = {"appium:processArguments": [None, "undefined"]}
    assert remove_undefined(caps) == caps


def test_input_not_mutated():
    caps = {"a": None, "b": {"c": None}}
    remove_undefined(caps)
    assert caps == {"a": None, "b": {"c": None}}


def test_find_undefined_paths_and_verify():
    caps = {"a": 1, "b": {"c": "undefined"}, "d": None}
    assert sorted(find_undefined_paths(caps)) == ["b.c", "d"]
    assert not verify_capabilities(caps)
    assert verify_capabilities(clean_capabilities(caps))


def test_remove_capability_keys():
    caps = {"appium:webDriverAgentUrl": "http://x", "platformName": "iOS"}
    assert remove_capability_keys(caps, ["appium:webDriverAgentUrl"]) == {"platformName": "iOS"}
