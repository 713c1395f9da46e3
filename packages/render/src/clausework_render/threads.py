"""
Comment thread reconstruction.

Comments arrive as a flat list. Each one carries ``reply_to``, the chain of
its ancestors with the direct parent first and the thread root last. The
forest is rebuilt in an arena: every comment is stored once, in input order,
and parents refer to their replies by arena index.

A reply is attached only when its chain is exactly the chain of the comment
it answers, prefixed by that comment's id. Replies naming a comment that is
not in the collection, or whose chain contradicts the real ancestry, never
reach a root and are left out of the forest.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from clausework_core.errors import IntegrityError, IntegrityErrorType, IntegrityReport
from clausework_core.models import Comment

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64


@dataclass(frozen=True)
class ThreadNode:
    index: int
    depth: int
    replies: tuple[int, ...]


@dataclass
class CommentForest:
    comments: list[Comment] = field(default_factory=list)
    nodes: dict[int, ThreadNode] = field(default_factory=dict)
    roots: list[int] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)

    def comment(self, index: int) -> Comment:
        return self.comments[index]

    def replies(self, index: int) -> list[int]:
        return list(self.nodes[index].replies)

    def walk(self) -> Iterator[tuple[int, Comment]]:
        """Depth-first, pre-order: (depth, comment)."""
        stack = [(0, index) for index in reversed(self.roots)]
        while stack:
            depth, index = stack.pop()
            yield depth, self.comments[index]
            stack.extend((depth + 1, reply) for reply in reversed(self.nodes[index].replies))

    def __len__(self) -> int:
        return len(self.nodes)

    def __bool__(self) -> bool:
        return bool(self.roots)


def thread_comments(comments: Iterable[Comment], *, max_depth: int = DEFAULT_MAX_DEPTH) -> CommentForest:
    arena = list(comments)
    by_chain: dict[tuple[str, ...], list[int]] = defaultdict(list)
    for index, comment in enumerate(arena):
        by_chain[tuple(comment.reply_to)].append(index)

    def ordered(indexes: list[int]) -> list[int]:
        # sorted() is stable, so equal timestamps keep input order
        return sorted(indexes, key=lambda i: arena[i].timestamp)

    forest = CommentForest(comments=arena)
    forest.roots = ordered(by_chain.get((), []))
    # Duplicate ids could otherwise put one reply under two parents.
    claimed = set(forest.roots)

    # Iterative descent: (arena index, chain that a reply to it must carry, depth)
    pending: list[tuple[int, tuple[str, ...], int]] = [
        (index, (arena[index].id,), 0) for index in forest.roots
    ]
    while pending:
        index, chain, depth = pending.pop()
        replies = [i for i in ordered(by_chain.get(chain, [])) if i not in claimed]
        claimed.update(replies)
        if replies and depth + 1 > max_depth:
            raise IntegrityError(
                IntegrityReport(
                    error_type=IntegrityErrorType.THREAD_DEPTH_EXCEEDED,
                    message=f"comment thread nests deeper than {max_depth} replies",
                    details={"comment": arena[index].id, "max_depth": max_depth},
                    digest=arena[index].form,
                )
            )
        forest.nodes[index] = ThreadNode(index=index, depth=depth, replies=tuple(replies))
        for reply in replies:
            pending.append((reply, (arena[reply].id,) + chain, depth + 1))

    forest.dropped = [arena[i].id for i in range(len(arena)) if i not in forest.nodes]
    if forest.dropped:
        logger.debug("dropped %d comments with unreachable reply chains", len(forest.dropped))
    return forest
