"""
Printable document markup.

Same walk as the interactive page; only the styling changes. Numbering,
alignment, emphasis and indentation come from ``DocumentStyles``, the print
options a form's front matter can set.
"""

from __future__ import annotations

from typing import Literal

from bs4 import Tag
from pydantic import BaseModel, ConfigDict, Field

from clausework_core.models import Annotation
from clausework_render.compose import (
    BlankField,
    ComposedChild,
    ComposedDocument,
    ComposedForm,
    HeadingReference,
    ParagraphGroup,
    TermDefinition,
    TermUse,
    TocEntry,
)
from clausework_render.emitters.base import Emitter, Inline
from clausework_render.numbering import NumberingScheme, get_scheme
from clausework_render.threads import CommentForest

EMPTY_BLANK = "[•]"
INDENT_INCHES = 0.5


class Emphasis(BaseModel):
    model_config = ConfigDict(frozen=True)

    bold: bool = False
    italic: bool = False
    underline: bool = False

    def css(self) -> str | None:
        rules = []
        if self.bold:
            rules.append("font-weight: bold")
        if self.italic:
            rules.append("font-style: italic")
        if self.underline:
            rules.append("text-decoration: underline")
        return "; ".join(rules) or None


class DocumentStyles(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    title: str | None = None
    edition: str | None = None
    numbering: str = "outline"
    alignment: Literal["left", "right", "center", "justify"] = "left"
    heading: Emphasis = Field(default_factory=lambda: Emphasis(italic=True))
    reference: Emphasis = Field(default_factory=lambda: Emphasis(italic=True))
    reference_heading: Emphasis = Field(default_factory=lambda: Emphasis(italic=True), alias="referenceHeading")
    indent_margins: bool = Field(default=True, alias="indentMargins")
    center_title: bool = Field(default=False, alias="centerTitle")
    mark_filled: bool = Field(default=True, alias="markFilled")


class DocumentEmitter(Emitter):
    def __init__(self, styles: DocumentStyles | None = None) -> None:
        super().__init__()
        self.styles = styles or DocumentStyles()
        self.scheme: NumberingScheme = get_scheme(self.styles.numbering)

    def toc_container(self, document: ComposedDocument) -> Tag:
        return self.tag("nav", self.tag("p", "Contents", class_="contents-title"), class_="contents")

    def toc_item(self, entry: TocEntry, numbers: tuple[int, ...]) -> Tag:
        return self.tag(
            "li",
            self.tag("span", self.scheme.label(numbers), class_="number"),
            " ",
            self.tag("span", entry.label, class_="heading", style=self.styles.heading.css()),
        )

    def body_container(self, document: ComposedDocument) -> Tag:
        container = self.tag("div", class_="document", data_digest=document.address.digest)
        if self.styles.title:
            title = self.tag(
                "h1",
                self.styles.title,
                class_="title",
                style="text-align: center" if self.styles.center_title else None,
            )
            container.append(title)
            if self.styles.edition:
                container.append(self.tag("p", self.styles.edition, class_="edition"))
        return container

    def annotation(self, annotation: Annotation) -> Tag:
        return self.tag("p", f"[{annotation.level.value}] {annotation.message}", class_="note")

    def section(self, child: ComposedChild, depth: int, numbers: tuple[int, ...]) -> Tag:
        return self.tag("div", class_="section", data_number=self.scheme.label(numbers))

    def heading(self, child: ComposedChild, depth: int, numbers: tuple[int, ...]) -> Tag:
        line = self.tag("p", class_="heading-line", style=self._block_style(depth, False))
        line.append(self.tag("span", self.scheme.label(numbers), class_="number"))
        if child.heading is not None:
            line.append(" ")
            line.append(self.tag("span", child.heading, class_="heading", style=self.styles.heading.css()))
        return line

    def paragraph(self, group: ParagraphGroup, form: ComposedForm, depth: int) -> Tag:
        return self.tag("p", style=self._block_style(depth, form.conspicuous))

    def definition(self, element: TermDefinition) -> Inline:
        return self.tag("span", f"“{element.term}”", class_="definition", style="font-weight: bold")

    def use(self, element: TermUse) -> Inline:
        return element.term

    def reference(self, element: HeadingReference) -> Inline:
        return self.tag(
            "span",
            self.tag("span", element.heading, class_="reference-heading", style=self.styles.reference_heading.css()),
            class_="reference",
            style=self.styles.reference.css(),
        )

    def blank(self, element: BlankField) -> Inline:
        if element.value is None:
            return EMPTY_BLANK
        if self.styles.mark_filled:
            return self.tag("span", element.value, class_="filled", style="text-decoration: underline")
        return element.value

    def comment(self, forest: CommentForest, index: int) -> Tag:
        comment = forest.comment(index)
        return self.tag("div", self.tag("p", f"{comment.author}: {comment.text}"), class_="comment")

    def _block_style(self, depth: int, conspicuous: bool) -> str:
        rules = [f"text-align: {self.styles.alignment}"]
        if self.styles.indent_margins and depth > 0:
            rules.append(f"margin-left: {depth * INDENT_INCHES:g}in")
        if conspicuous:
            rules.extend(["font-weight: bold", "text-transform: uppercase"])
        return "; ".join(rules)
