"""Structural paths into a form.

A path is a sequence of ``(collection, index)`` steps from the root form.
The wire form is the flat token list used by annotation producers and blank
mappings, e.g. ``["content", 0, "form", "content", 2]``. The ``"form"`` token
only says "descend into the child at the previous step", so it carries no
position of its own and is dropped on parse: ``["content", 1, "form"]`` and
``["content", 1]`` name the same child form.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

Step = tuple[str, int]
Token = str | int

CONTENT = "content"
FORM = "form"
HEADING = "heading"


@dataclass(frozen=True)
class FormPath:
    steps: tuple[Step, ...] = ()

    @classmethod
    def parse(cls, tokens: Sequence[Token] | FormPath) -> FormPath:
        if isinstance(tokens, FormPath):
            return tokens
        steps: list[Step] = []
        position = 0
        while position < len(tokens):
            token = tokens[position]
            if token == CONTENT:
                if position + 1 >= len(tokens) or not _is_index(tokens[position + 1]):
                    raise ValueError(f"'content' must be followed by an index: {list(tokens)!r}")
                steps.append((CONTENT, int(tokens[position + 1])))
                position += 2
            elif token == FORM:
                position += 1
            elif token == HEADING:
                steps.append((HEADING, 0))
                position += 1
            else:
                raise ValueError(f"unexpected path token {token!r} in {list(tokens)!r}")
        return cls(tuple(steps))

    def extend(self, *steps: Step) -> FormPath:
        return FormPath(self.steps + tuple(steps))

    def child(self, index: int) -> FormPath:
        return self.extend((CONTENT, index))

    def parent(self) -> FormPath:
        return FormPath(self.steps[:-1])

    def strip_target(self) -> FormPath:
        """Drop the addressed element, leaving the form that holds it.

        A heading belongs to the child element it sits on, so
        ``["content", 0, "heading"]`` is held by the root, like the child.
        """
        if self.steps and self.steps[-1][0] == HEADING:
            return FormPath(self.steps[:-2])
        return FormPath(self.steps[:-1])

    def is_prefix_of(self, other: FormPath) -> bool:
        return other.steps[: len(self.steps)] == self.steps

    def common_prefix_length(self, other: FormPath) -> int:
        length = 0
        for mine, theirs in zip(self.steps, other.steps):
            if mine != theirs:
                break
            length += 1
        return length

    def to_tokens(self) -> list[Token]:
        tokens: list[Token] = []
        for collection, index in self.steps:
            if collection == HEADING:
                tokens.append(HEADING)
            else:
                tokens.extend((collection, index))
        return tokens

    def dotted(self) -> str:
        """Compact label used in anchor ids, e.g. ``0.3``."""
        return ".".join(str(index) for collection, index in self.steps if collection == CONTENT)

    def __len__(self) -> int:
        return len(self.steps)

    def __str__(self) -> str:
        return "/" + "/".join(f"{collection}:{index}" for collection, index in self.steps)


ROOT = FormPath()


def same_path(a: Sequence[Token] | FormPath, b: Sequence[Token] | FormPath) -> bool:
    return FormPath.parse(a) == FormPath.parse(b)


def is_prefix_of(a: Sequence[Token] | FormPath, b: Sequence[Token] | FormPath) -> bool:
    return FormPath.parse(a).is_prefix_of(FormPath.parse(b))


def extend(path: Sequence[Token] | FormPath, *steps: Step) -> FormPath:
    return FormPath.parse(path).extend(*steps)


def parse_all(paths: Iterable[Sequence[Token]]) -> list[FormPath]:
    return [FormPath.parse(p) for p in paths]


def _is_index(token: Token) -> bool:
    return isinstance(token, int) and not isinstance(token, bool) and token >= 0
