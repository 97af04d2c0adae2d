import pytest

from models import (
    ClickerConfig,
    ClickPosition,
    ESCAPE_KEY,
    KeyBindings,
    KeyEvent,
    KeyIdentifier,
)


def test_default_config_matches_documented_defaults():
    config = ClickerConfig()

    assert config.to_dict() == {
        "clickInterval": 100,
        "keys": {"start": "1", "stop": "2", "exit": "3", "updatePosition": "4"},
    }


def test_from_dict_reads_camel_case_shape():
    config = ClickerConfig.from_dict(
        {"clickInterval": 50, "keys": {"start": "A", "stop": "B", "exit": "C", "updatePosition": "D"}}
    )

    assert config.interval_ms == 50
    assert config.keys == KeyBindings(start="A", stop="B", exit="C", update_position="D")


def test_from_dict_fills_missing_keys_with_defaults():
    config = ClickerConfig.from_dict({"clickInterval": 250, "keys": {"start": "q"}})

    assert config.keys.start == "q"
    assert config.keys.stop == "2"
    assert config.keys.update_position == "4"


@pytest.mark.parametrize("interval", [0, -5, 12.5, "100", True])
def test_invalid_interval_is_rejected(interval):
    with pytest.raises(ValueError):
        ClickerConfig(interval_ms=interval)


def test_duplicate_keys_are_rejected_case_insensitively():
    with pytest.raises(ValueError):
        KeyBindings(start="a", stop="A")


@pytest.mark.parametrize("key", ["", "ab", " "])
def test_keys_must_be_single_characters(key):
    with pytest.raises(ValueError):
        KeyBindings(start=key)


def test_clicks_per_second():
    assert ClickerConfig(interval_ms=50).clicks_per_second() == pytest.approx(20.0)


def test_position_formatting():
    position = ClickPosition(3, 4)

    assert position.to_tuple() == (3, 4)
    assert str(position) == "(3, 4)"


def test_key_identifier_matches_name_case_insensitively():
    key = KeyIdentifier("A")

    assert key.matches(KeyEvent(name="a"))
    assert key.matches(KeyEvent(name="A"))
    assert not key.matches(KeyEvent(name="b"))


def test_digit_matches_by_raw_code_when_name_is_missing():
    key = KeyIdentifier("7")

    assert key.matches(KeyEvent(name=None, raw_code=55))
    assert not key.matches(KeyEvent(name=None, raw_code=56))


def test_letters_have_no_raw_code_fallback():
    assert not KeyIdentifier("a").matches(KeyEvent(name=None, raw_code=65))


def test_escape_identifier_matches_name_alias_and_code():
    assert ESCAPE_KEY.matches(KeyEvent(name="esc"))
    assert ESCAPE_KEY.matches(KeyEvent(name="ESCAPE"))
    assert ESCAPE_KEY.matches(KeyEvent(name=None, raw_code=27))
    assert KeyIdentifier("Escape") == ESCAPE_KEY


def test_named_event_never_falls_back_to_raw_code():
    # macOS reports space with virtual key 49, the same number Windows uses for "1".
    assert not KeyIdentifier("1").matches(KeyEvent(name="space", raw_code=49))
    assert not KeyIdentifier("3").matches(KeyEvent(name="backspace", raw_code=51))
    assert not ESCAPE_KEY.matches(KeyEvent(name="f1", raw_code=27))
