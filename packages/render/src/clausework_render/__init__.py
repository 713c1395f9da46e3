"""
clausework rendering

Composes resolved forms with their overlays and emits HTML or print markup.
"""

__version__ = "0.1.0"

from clausework_render.compose import (
    ComposedChild,
    ComposedDocument,
    ComposedForm,
    RenderOptions,
    TocEntry,
    compose,
    compose_document,
)
from clausework_render.emitters import DocumentEmitter, DocumentStyles, InteractiveEmitter
from clausework_render.grouping import ContentGroup, GroupType, group_content
from clausework_render.threads import CommentForest, thread_comments

__all__ = [
    "ComposedChild",
    "ComposedDocument",
    "ComposedForm",
    "RenderOptions",
    "TocEntry",
    "compose",
    "compose_document",
    "DocumentEmitter",
    "DocumentStyles",
    "InteractiveEmitter",
    "ContentGroup",
    "GroupType",
    "group_content",
    "CommentForest",
    "thread_comments",
]
