"""HTML for the interactive form page."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from bs4 import Tag

from clausework_core.models import Annotation
from clausework_render.compose import (
    BlankField,
    ComposedChild,
    ComposedDocument,
    HeadingReference,
    TermDefinition,
    TermUse,
    TocEntry,
)
from clausework_render.emitters.base import Emitter, Inline
from clausework_render.threads import CommentForest


def _json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def publication_href(publisher: str, project: str, edition: str) -> str:
    return "/" + "/".join(quote(part, safe="") for part in (publisher, project, edition))


def display_date(timestamp: int) -> str:
    """Milliseconds since the epoch, shown like ``Tue Jan 02 2024``."""
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).strftime("%a %b %d %Y")


class InteractiveEmitter(Emitter):
    """
    Sectioned HTML with the render inputs attached as ``data-*`` attributes
    on the article, so client-side code can toggle annotations or edit blanks
    without asking the server again.
    """

    def toc_container(self, document: ComposedDocument) -> Tag:
        return self.tag("header", self.tag("h2", "Table of Contents"), class_="toc")

    def toc_list(self, numbers: tuple[int, ...]) -> Tag:
        return self.tag("ol", class_="toc", id="toc" if not numbers else None)

    def toc_item(self, entry: TocEntry, numbers: tuple[int, ...]) -> Tag:
        if entry.heading is None:
            return self.tag("li", entry.label)
        return self.tag("li", self.tag("a", entry.heading, class_="reference", href="#" + entry.anchor))

    def body_container(self, document: ComposedDocument) -> Tag:
        options = document.options
        authored = document.authored.to_wire() if document.authored is not None else None
        return self.tag(
            "article",
            class_="commonform",
            data_digest=document.address.digest,
            data_form=_json(authored),
            data_loaded=_json(
                {
                    "form": document.loaded.form.to_wire(),
                    "resolutions": [r.model_dump(mode="json") for r in document.loaded.resolutions],
                }
            ),
            data_tree=_json(document.address.model_dump(mode="json")),
            data_mappings=_json([m.model_dump(mode="json") for m in options.mappings]),
            data_annotations=_json([a.model_dump(mode="json") for a in options.annotations]),
        )

    def annotation(self, annotation: Annotation) -> Tag:
        if annotation.url:
            message: Inline = self.tag("a", annotation.message, href=annotation.url)
        else:
            message = annotation.message
        return self.tag(
            "aside",
            self.tag("p", message),
            class_=f"annotation {annotation.level.value}",
            data_path=_json(annotation.path),
        )

    def section(self, child: ComposedChild, depth: int, numbers: tuple[int, ...]) -> Tag:
        classes = [name for name, on in (("conspicuous", child.form.conspicuous), ("component", child.is_component)) if on]
        return self.tag(
            "section",
            class_=" ".join(classes) or None,
            data_digest=child.digest,
            data_depth=str(depth),
        )

    def heading(self, child: ComposedChild, depth: int, numbers: tuple[int, ...]) -> Tag | None:
        if child.heading is None:
            return None
        return self.tag("h1", child.heading, class_="heading", id=child.heading_anchor)

    def provenance(self, child: ComposedChild) -> Tag:
        source = child.provenance
        assert source is not None
        line = self.tag(
            "p",
            self.tag(
                "a",
                f"{source.publisher}/{source.project} {source.edition}",
                class_="publication",
                href=publication_href(source.publisher, source.project, source.edition),
            ),
            class_="provenance",
        )
        if source.upgraded_from is not None:
            line.append(" (upgraded from ")
            line.append(
                self.tag(
                    "a",
                    source.upgraded_from,
                    class_="edition",
                    href=publication_href(source.publisher, source.project, source.upgraded_from),
                )
            )
            line.append(")")
        return line

    def child_link(self, child: ComposedChild) -> Tag | None:
        if not self.document.options.child_links:
            return None
        return self.tag("a", child.digest, class_="child-link", href=f"/forms/{child.digest}")

    def definition(self, element: TermDefinition) -> Tag:
        return self.tag("dfn", element.term, id=element.anchor, title=f"Definition of {element.term}")

    def use(self, element: TermUse) -> Tag:
        if element.target is None:
            return self.tag("a", element.term, class_="use undefined")
        return self.tag("a", element.term, class_="use", href="#" + element.target)

    def reference(self, element: HeadingReference) -> Tag:
        return self.tag("a", element.heading, class_="reference", href="#" + element.anchor)

    def blank(self, element: BlankField) -> Tag:
        return self.tag(
            "input",
            type="text",
            class_="blank",
            data_path=_json(element.path.to_tokens()),
            value=element.value,
            disabled=True,
        )

    def comment(self, forest: CommentForest, index: int) -> Tag:
        comment = forest.comment(index)
        byline = self.tag(
            "p",
            "—",
            self.tag("a", comment.author, class_="publisher", href="/" + quote(comment.author, safe="")),
            f", {display_date(comment.timestamp)}",
            class_="byline",
        )
        return self.tag(
            "aside",
            self.tag("p", comment.text),
            byline,
            class_="comment",
            data_uuid=comment.id,
        )
