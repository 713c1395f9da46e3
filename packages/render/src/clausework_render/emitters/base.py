"""
Shared traversal for emitters.

``Emitter.emit`` owns the walk over a ``ComposedDocument``: table of contents
first, then the body, then nothing. Inside a form it always visits
annotations, then groups in order, then comment threads. Subclasses only
decide what markup each visit produces, so every emitter yields the same
tree shape.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from bs4 import BeautifulSoup, Tag

from clausework_core.models import Annotation
from clausework_render.compose import (
    BlankField,
    ComposedChild,
    ComposedDocument,
    ComposedForm,
    HeadingReference,
    ParagraphGroup,
    RenderedElement,
    SeriesGroup,
    TermDefinition,
    TermUse,
    TextRun,
    TocEntry,
)
from clausework_render.threads import CommentForest

Inline = Tag | str


class Emitter(ABC):
    def __init__(self) -> None:
        self.soup = BeautifulSoup("", "html.parser")
        self.document: ComposedDocument | None = None

    def emit(self, document: ComposedDocument) -> str:
        self.soup = BeautifulSoup("", "html.parser")
        self.document = document
        if document.toc:
            toc = self.toc_container(document)
            toc.append(self._toc_list(document.toc, ()))
            self.soup.append(toc)
        body = self.body_container(document)
        self._fill_form(body, document.body, 0, ())
        self.soup.append(body)
        return self.soup.decode(formatter="minimal")

    # -- traversal ------------------------------------------------------------

    def _toc_list(self, entries: Sequence[TocEntry], numbers: tuple[int, ...]) -> Tag:
        listing = self.toc_list(numbers)
        for entry in entries:
            entry_numbers = numbers + (entry.ordinal,)
            item = self.toc_item(entry, entry_numbers)
            if entry.children:
                item.append(self._toc_list(entry.children, entry_numbers))
            listing.append(item)
        return listing

    def _fill_form(self, container: Tag, form: ComposedForm, depth: int, numbers: tuple[int, ...]) -> None:
        for annotation in form.annotations:
            self._append(container, self.annotation(annotation))
        for group in form.groups:
            if isinstance(group, SeriesGroup):
                for child in group.children:
                    container.append(self._child(child, depth + 1, numbers + (child.ordinal,)))
            else:
                container.append(self._paragraph(group, form, depth))
        if form.comments:
            for index in form.comments.roots:
                container.append(self._comment(form.comments, index))

    def _child(self, child: ComposedChild, depth: int, numbers: tuple[int, ...]) -> Tag:
        section = self.section(child, depth, numbers)
        self._append(section, self.heading(child, depth, numbers))
        if child.provenance is not None:
            self._append(section, self.provenance(child))
        self._append(section, self.child_link(child))
        self._fill_form(section, child.form, depth, numbers)
        return section

    def _paragraph(self, group: ParagraphGroup, form: ComposedForm, depth: int) -> Tag:
        paragraph = self.paragraph(group, form, depth)
        for element in group.elements:
            self._append(paragraph, self._inline(element))
        return paragraph

    def _inline(self, element: RenderedElement) -> Inline:
        if isinstance(element, TextRun):
            return self.text(element)
        if isinstance(element, TermDefinition):
            return self.definition(element)
        if isinstance(element, TermUse):
            return self.use(element)
        if isinstance(element, HeadingReference):
            return self.reference(element)
        if isinstance(element, BlankField):
            return self.blank(element)
        raise TypeError(f"cannot emit {element!r} inline")

    def _comment(self, forest: CommentForest, index: int) -> Tag:
        tag = self.comment(forest, index)
        for reply in forest.replies(index):
            tag.append(self._comment(forest, reply))
        return tag

    @staticmethod
    def _append(container: Tag, item: Inline | None) -> None:
        if item is not None and item != "":
            container.append(item)

    # -- markup helpers -------------------------------------------------------

    def tag(self, name: str, *children: Inline | None, **attrs) -> Tag:
        attributes = {}
        for key, value in attrs.items():
            if value is None or value is False:
                continue
            key = key.rstrip("_").replace("_", "-")
            attributes[key] = "" if value is True else value
        tag = self.soup.new_tag(name, attrs=attributes)
        for child in children:
            self._append(tag, child)
        return tag

    # -- presentation hooks ---------------------------------------------------

    @abstractmethod
    def toc_container(self, document: ComposedDocument) -> Tag:
        ...

    def toc_list(self, numbers: tuple[int, ...]) -> Tag:
        return self.tag("ol")

    @abstractmethod
    def toc_item(self, entry: TocEntry, numbers: tuple[int, ...]) -> Tag:
        ...

    @abstractmethod
    def body_container(self, document: ComposedDocument) -> Tag:
        ...

    @abstractmethod
    def annotation(self, annotation: Annotation) -> Tag | None:
        ...

    @abstractmethod
    def section(self, child: ComposedChild, depth: int, numbers: tuple[int, ...]) -> Tag:
        ...

    @abstractmethod
    def heading(self, child: ComposedChild, depth: int, numbers: tuple[int, ...]) -> Tag | None:
        ...

    def provenance(self, child: ComposedChild) -> Tag | None:
        return None

    def child_link(self, child: ComposedChild) -> Tag | None:
        return None

    def paragraph(self, group: ParagraphGroup, form: ComposedForm, depth: int) -> Tag:
        return self.tag("p")

    def text(self, element: TextRun) -> Inline:
        return element.text

    @abstractmethod
    def definition(self, element: TermDefinition) -> Inline:
        ...

    @abstractmethod
    def use(self, element: TermUse) -> Inline:
        ...

    @abstractmethod
    def reference(self, element: HeadingReference) -> Inline:
        ...

    @abstractmethod
    def blank(self, element: BlankField) -> Inline:
        ...

    @abstractmethod
    def comment(self, forest: CommentForest, index: int) -> Tag:
        ...
