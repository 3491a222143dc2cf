import pytest

from webscraper.domain.options import Option, OptionFlags


def test_empty_flags_have_nothing_set():
    flags = OptionFlags()
    assert not any(flags.is_set(o) for o in Option)
    assert flags.names() == []


def test_from_names_accepts_mixed_spellings():
    flags = OptionFlags.from_names(["save_links", "DEBUG_MODE", "save-content", " "])
    assert flags.is_set(Option.SAVE_LINKS)
    assert flags.is_set(Option.DEBUG_MODE)
    assert flags.is_set(Option.SAVE_CONTENT)
    assert not flags.is_set(Option.UNLIMITED)
    assert flags.names() == ["debug_mode", "save_content", "save_links"]


def test_from_names_rejects_unknown_option():
    with pytest.raises(ValueError, match="unknown option: verbose"):
        OptionFlags.from_names(["verbose"])


def test_with_option_returns_new_flags():
    base = OptionFlags([Option.SAVE_LINKS])
    extended = base.with_option(Option.UNLIMITED)
    assert extended.is_set(Option.UNLIMITED)
    assert not base.is_set(Option.UNLIMITED)


def test_equality_and_hash():
    a = OptionFlags([Option.SAVE_LINKS, Option.DEBUG_MODE])
    b = OptionFlags.from_names(["debug_mode", "save_links"])
    assert a == b
    assert hash(a) == hash(b)
    assert a != OptionFlags()
