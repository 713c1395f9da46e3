"""Partition form content into series and paragraph runs."""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass

from clausework_core.errors import IntegrityError, IntegrityErrorType, IntegrityReport
from clausework_core.models import SERIES_KINDS, ContentElement, element_kind
from clausework_core.paths import FormPath


class GroupType(str, enum.Enum):
    series = "series"
    paragraph = "paragraph"


@dataclass(frozen=True)
class ContentGroup:
    type: GroupType
    offset: int
    content: tuple[ContentElement, ...]

    def __len__(self) -> int:
        return len(self.content)

    def indexed(self) -> list[tuple[int, ContentElement]]:
        """Members with their index in the parent form's content."""
        return [(self.offset + i, element) for i, element in enumerate(self.content)]


def group_type_for(element: ContentElement) -> GroupType:
    return GroupType.series if element_kind(element) in SERIES_KINDS else GroupType.paragraph


def group_content(content: Sequence[ContentElement]) -> list[ContentGroup]:
    groups: list[ContentGroup] = []
    current_type: GroupType | None = None
    current_offset = 0
    current: list[ContentElement] = []

    def flush() -> None:
        if current_type is not None and current:
            groups.append(ContentGroup(type=current_type, offset=current_offset, content=tuple(current)))

    for index, element in enumerate(content):
        kind = group_type_for(element)
        if kind is not current_type:
            flush()
            current_type = kind
            current_offset = index
            current = []
        current.append(element)
    flush()
    return groups


def check_congruent(
    resolved: Sequence[ContentGroup],
    authored: Sequence[ContentGroup],
    path: FormPath,
) -> None:
    """Raise if the authored groups do not line up with the resolved groups."""
    if len(resolved) != len(authored):
        _mismatch(
            path,
            f"resolved form has {len(resolved)} groups, authored form has {len(authored)}",
            resolved,
            authored,
        )
    for position, (mine, theirs) in enumerate(zip(resolved, authored)):
        if mine.type is not theirs.type or len(mine) != len(theirs):
            _mismatch(
                path,
                f"group {position} is {mine.type.value}[{len(mine)}] resolved "
                f"but {theirs.type.value}[{len(theirs)}] authored",
                resolved,
                authored,
            )


def _mismatch(
    path: FormPath,
    message: str,
    resolved: Sequence[ContentGroup],
    authored: Sequence[ContentGroup],
) -> None:
    raise IntegrityError(
        IntegrityReport(
            error_type=IntegrityErrorType.AUTHORED_SHAPE_MISMATCH,
            path=path.to_tokens(),
            message=message,
            details={
                "resolved": [f"{g.type.value}:{len(g)}" for g in resolved],
                "authored": [f"{g.type.value}:{len(g)}" for g in authored],
            },
        )
    )
