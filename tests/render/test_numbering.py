from __future__ import annotations

import pytest

from clausework_render.numbering import SCHEMES, get_scheme, to_alpha, to_roman


@pytest.mark.parametrize("number,expected", [(1, "a"), (26, "z"), (27, "aa"), (52, "az"), (703, "aaa")])
def test_to_alpha(number, expected):
    assert to_alpha(number) == expected


@pytest.mark.parametrize("number,expected", [(1, "i"), (4, "iv"), (9, "ix"), (14, "xiv"), (1994, "mcmxciv")])
def test_to_roman(number, expected):
    assert to_roman(number) == expected


def test_outline_labels_each_level():
    outline = get_scheme("outline")
    assert outline.label([2]) == "2."
    assert outline.label([2, 3]) == "(c)"
    assert outline.label([2, 3, 4]) == "(iv)"
    assert outline.label([1, 1, 1, 2]) == "(B)"
    assert outline.label([1, 1, 1, 1, 9]) == "(IX)"
    # cycles back to the first level format
    assert outline.label([1, 1, 1, 1, 1, 7]) == "7."


def test_decimal_joins_levels():
    decimal = get_scheme("decimal")
    assert decimal.label([1, 2, 3]) == "1.2.3"
    assert decimal.label([]) == ""


def test_unknown_scheme_lists_available():
    with pytest.raises(KeyError) as info:
        get_scheme("legal")
    for name in SCHEMES:
        assert name in str(info.value)
