import pytest

from composetools.stringutils import string_contains


@pytest.mark.parametrize(
    "array, needle, expected",
    [
        (["web", "db"], "db", True),
        (["web", "db"], "words", False),
        ([], "web", False),
        (["Web"], "web", False),
    ],
)
def test_string_contains(array, needle, expected):
    assert string_contains(array, needle) is expected


def test_string_contains_accepts_generators():
    names = (name for name in ["a", "b", "c"])
    assert string_contains(names, "c") is True


def test_string_contains_does_not_match_substrings():
    assert string_contains(["service1"], "service") is False