"""Numbering schemes for printed documents.

A scheme maps nesting depth to a label format. ``outline`` labels each level
on its own (``1.``, ``(a)``, ``(i)``, ...); ``decimal`` joins the numbers of
every enclosing level (``1.2.3``).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

_ROMAN = [
    (1000, "m"), (900, "cm"), (500, "d"), (400, "cd"),
    (100, "c"), (90, "xc"), (50, "l"), (40, "xl"),
    (10, "x"), (9, "ix"), (5, "v"), (4, "iv"), (1, "i"),
]


def to_alpha(number: int) -> str:
    """1 -> a, 26 -> z, 27 -> aa."""
    letters = ""
    while number > 0:
        number, remainder = divmod(number - 1, 26)
        letters = chr(ord("a") + remainder) + letters
    return letters


def to_roman(number: int) -> str:
    out = ""
    for value, numeral in _ROMAN:
        while number >= value:
            out += numeral
            number -= value
    return out


_STYLES = {
    "decimal": str,
    "lower-alpha": to_alpha,
    "upper-alpha": lambda n: to_alpha(n).upper(),
    "lower-roman": to_roman,
    "upper-roman": lambda n: to_roman(n).upper(),
}


@dataclass(frozen=True)
class LevelFormat:
    style: str
    template: str = "{}"

    def render(self, number: int) -> str:
        return self.template.format(_STYLES[self.style](number))


@dataclass(frozen=True)
class NumberingScheme:
    name: str
    levels: tuple[LevelFormat, ...]
    # Join every level's number ("1.2.3") instead of labelling only the last.
    cumulative: bool = False
    separator: str = "."

    def label(self, numbers: Sequence[int]) -> str:
        if not numbers:
            return ""
        if self.cumulative:
            return self.separator.join(
                self._level(depth).render(number) for depth, number in enumerate(numbers)
            )
        return self._level(len(numbers) - 1).render(numbers[-1])

    def _level(self, depth: int) -> LevelFormat:
        return self.levels[depth % len(self.levels)]


SCHEMES: dict[str, NumberingScheme] = {
    "outline": NumberingScheme(
        name="outline",
        levels=(
            LevelFormat("decimal", "{}."),
            LevelFormat("lower-alpha", "({})"),
            LevelFormat("lower-roman", "({})"),
            LevelFormat("upper-alpha", "({})"),
            LevelFormat("upper-roman", "({})"),
        ),
    ),
    "decimal": NumberingScheme(
        name="decimal",
        levels=(LevelFormat("decimal"),),
        cumulative=True,
    ),
}


def get_scheme(name: str) -> NumberingScheme:
    try:
        return SCHEMES[name]
    except KeyError:
        raise KeyError(f"unknown numbering scheme {name!r}; available: {', '.join(sorted(SCHEMES))}") from None
