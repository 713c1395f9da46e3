"""Emitters turn a composed document into markup."""

from clausework_render.emitters.base import Emitter
from clausework_render.emitters.document import DocumentEmitter, DocumentStyles, Emphasis
from clausework_render.emitters.interactive import InteractiveEmitter

__all__ = ["Emitter", "DocumentEmitter", "DocumentStyles", "Emphasis", "InteractiveEmitter"]
