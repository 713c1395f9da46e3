"""
Tree composition.

Walks the resolved form together with its content-address tree and, when
given, the authored form it was loaded from. The three trees move in lock
step: one recursive call per form, handed one ``NodeTriple``. Overlays are
attached on the way down:

- annotations, by path (the annotation's path minus the element it names);
- comments, by the digest of the form they were written against;
- blank values, by the exact path of the blank;
- component provenance, by the path of the child the loader filled in.

Overlays that match nothing are lookup misses and are ignored. Trees that do
not line up raise ``IntegrityError`` and nothing is returned for the document.
"""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import ClassVar, Union
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

from clausework_core.errors import IntegrityError, IntegrityErrorType, IntegrityReport
from clausework_core.hashing import merkleize
from clausework_core.models import (
    AddressNode,
    Annotation,
    Blank,
    BlankMapping,
    Child,
    Comment,
    Component,
    ContentElement,
    Definition,
    ElementKind,
    Form,
    LoadedForm,
    Reference,
    Resolution,
    Use,
    element_kind,
)
from clausework_core.paths import ROOT, FormPath
from clausework_core.settings import Settings
from clausework_core.settings import settings as default_settings
from clausework_render.grouping import ContentGroup, GroupType, check_congruent, group_content
from clausework_render.threads import DEFAULT_MAX_DEPTH, CommentForest, thread_comments

logger = logging.getLogger(__name__)

NO_HEADING = "(No Heading)"


class RenderOptions(BaseModel):
    """Everything overlaid on one document. Not pre-filtered per node."""

    model_config = ConfigDict(frozen=True)

    annotations: list[Annotation] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)
    mappings: list[BlankMapping] = Field(default_factory=list)
    child_links: bool = Field(default=False, description="Emit permalinks to child forms by digest")
    max_thread_depth: int = DEFAULT_MAX_DEPTH
    budget_seconds: float | None = Field(default=None, description="Wall-clock budget for one document")

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **overrides) -> RenderOptions:
        settings = settings or default_settings
        values = {
            "child_links": settings.child_links,
            "max_thread_depth": settings.max_thread_depth,
            "budget_seconds": settings.budget_seconds,
        }
        values.update(overrides)
        return cls(**values)


# =============================================================================
# Composed tree
# =============================================================================


@dataclass(frozen=True)
class TextRun:
    kind: ClassVar[ElementKind] = ElementKind.text
    text: str


@dataclass(frozen=True)
class TermDefinition:
    kind: ClassVar[ElementKind] = ElementKind.definition
    term: str
    term_id: str
    anchor: str


@dataclass(frozen=True)
class TermUse:
    kind: ClassVar[ElementKind] = ElementKind.use
    term: str
    term_id: str
    target: str | None


@dataclass(frozen=True)
class HeadingReference:
    kind: ClassVar[ElementKind] = ElementKind.reference
    heading: str
    anchor: str


@dataclass(frozen=True)
class BlankField:
    kind: ClassVar[ElementKind] = ElementKind.blank
    path: FormPath
    value: str | None


RenderedElement = Union[TextRun, TermDefinition, TermUse, HeadingReference, BlankField]


@dataclass(frozen=True)
class Provenance:
    publisher: str
    project: str
    edition: str
    repository: str = "commonform.org"
    upgraded_from: str | None = None


@dataclass(frozen=True)
class ParagraphGroup:
    type: ClassVar[GroupType] = GroupType.paragraph
    offset: int
    elements: tuple[RenderedElement, ...]


@dataclass(frozen=True)
class SeriesGroup:
    type: ClassVar[GroupType] = GroupType.series
    offset: int
    children: tuple[ComposedChild, ...]


ComposedGroup = Union[ParagraphGroup, SeriesGroup]


@dataclass(frozen=True)
class ComposedForm:
    path: FormPath
    digest: str
    conspicuous: bool
    annotations: tuple[Annotation, ...]
    groups: tuple[ComposedGroup, ...]
    comments: CommentForest = field(compare=False)

    def children(self) -> list[ComposedChild]:
        return [child for group in self.groups if isinstance(group, SeriesGroup) for child in group.children]


@dataclass(frozen=True)
class ComposedChild:
    index: int
    ordinal: int
    path: FormPath
    heading: str | None
    digest: str
    provenance: Provenance | None
    form: ComposedForm

    @property
    def is_component(self) -> bool:
        return self.provenance is not None

    @property
    def heading_anchor(self) -> str | None:
        return heading_anchor(self.heading) if self.heading is not None else None


@dataclass(frozen=True)
class TocEntry:
    heading: str | None
    path: FormPath
    ordinal: int
    children: tuple[TocEntry, ...] = ()

    @property
    def label(self) -> str:
        return self.heading if self.heading is not None else NO_HEADING

    @property
    def anchor(self) -> str | None:
        return heading_anchor(self.heading) if self.heading is not None else None


@dataclass(frozen=True)
class ComposedDocument:
    toc: tuple[TocEntry, ...]
    body: ComposedForm
    loaded: LoadedForm
    address: AddressNode
    authored: Form | None
    options: RenderOptions


@dataclass(frozen=True)
class NodeTriple:
    resolved: Form
    address: AddressNode
    authored: Form | None
    path: FormPath


# =============================================================================
# Anchors
# =============================================================================


def normalize_term(term: str) -> str:
    return " ".join(term.split()).lower()


def term_identifier(term: str) -> str:
    return quote(normalize_term(term), safe="")


def heading_anchor(heading: str) -> str:
    return "heading:" + quote(heading, safe="~()*!.'")


@dataclass(frozen=True)
class _Declaration:
    term_id: str
    node: FormPath
    element: FormPath
    anchor: str


class _TermIndex:
    """Term declarations in one document, for linking uses to the nearest one."""

    def __init__(self, form: Form, path: FormPath) -> None:
        found: list[tuple[str, FormPath, FormPath]] = []
        self._collect(form, path, found)
        counts: dict[str, int] = defaultdict(int)
        for term_id, _, _ in found:
            counts[term_id] += 1
        self._by_term: dict[str, list[_Declaration]] = defaultdict(list)
        self._by_element: dict[FormPath, _Declaration] = {}
        for term_id, node, element in found:
            anchor = f"definition:{term_id}"
            if counts[term_id] > 1:
                anchor += f"@{element.dotted()}"
            declaration = _Declaration(term_id=term_id, node=node, element=element, anchor=anchor)
            self._by_term[term_id].append(declaration)
            self._by_element[element] = declaration

    def _collect(self, form: Form, path: FormPath, found: list[tuple[str, FormPath, FormPath]]) -> None:
        for index, element in enumerate(form.content):
            if isinstance(element, Definition):
                found.append((term_identifier(element.definition), path, path.child(index)))
            elif isinstance(element, Child):
                self._collect(element.form, path.child(index), found)

    def declaration_at(self, element: FormPath) -> _Declaration:
        return self._by_element[element]

    def nearest(self, term_id: str, node: FormPath) -> _Declaration | None:
        """The declaration in the deepest form enclosing ``node``, if any."""
        best: _Declaration | None = None
        for declaration in self._by_term.get(term_id, ()):
            if not declaration.node.is_prefix_of(node):
                continue
            # strict comparison keeps the earliest declaration within one form
            if best is None or len(declaration.node) > len(best.node):
                best = declaration
        return best


# =============================================================================
# Composition
# =============================================================================


class _Composer:
    """State for a single composition call. Never shared between documents."""

    def __init__(
        self,
        root: Form,
        root_path: FormPath,
        resolutions: Iterable[Resolution],
        options: RenderOptions,
    ) -> None:
        self.options = options
        self.resolutions: dict[FormPath, Resolution] = {}
        for resolution in resolutions:
            self.resolutions.setdefault(resolution.form_path, resolution)

        self.annotations: dict[FormPath, list[Annotation]] = defaultdict(list)
        for annotation in options.annotations:
            self.annotations[annotation.form_path.strip_target()].append(annotation)

        self.comments: dict[str, list[Comment]] = defaultdict(list)
        for comment in options.comments:
            self.comments[comment.form].append(comment)

        self.mappings: dict[FormPath, str] = {}
        for mapping in options.mappings:
            self.mappings.setdefault(mapping.form_path, mapping.value)

        self.terms = _TermIndex(root, root_path)
        self.deadline = (
            time.monotonic() + options.budget_seconds if options.budget_seconds is not None else None
        )
        self.visited: set[FormPath] = set()
        self.digests: set[str] = set()
        self.blanks_filled = 0

    def compose_form(self, node: NodeTriple) -> ComposedForm:
        self._check_budget(node)
        self._check_address_shape(node)
        self.visited.add(node.path)
        self.digests.add(node.address.digest)

        resolved_groups = group_content(node.resolved.content)
        if node.authored is not None:
            check_congruent(resolved_groups, group_content(node.authored.content), node.path)

        groups: list[ComposedGroup] = []
        ordinal = 1
        for group in resolved_groups:
            if group.type is GroupType.series:
                groups.append(self._compose_series(node, group, ordinal))
                ordinal += len(group)
            else:
                groups.append(self._compose_paragraph(node, group))

        conspicuous = node.resolved.conspicuous or (node.authored is not None and node.authored.conspicuous)
        return ComposedForm(
            path=node.path,
            digest=node.address.digest,
            conspicuous=conspicuous,
            annotations=tuple(self.annotations.get(node.path, ())),
            groups=tuple(groups),
            comments=thread_comments(
                self.comments.get(node.address.digest, ()),
                max_depth=self.options.max_thread_depth,
            ),
        )

    def _compose_series(self, node: NodeTriple, group: ContentGroup, first_ordinal: int) -> SeriesGroup:
        children: list[ComposedChild] = []
        for position, (index, element) in enumerate(group.indexed()):
            child_path = node.path.child(index)
            if not isinstance(element, Child):
                raise TypeError(f"unresolved component at {child_path}; load components before composing")
            authored_form = None
            if node.authored is not None:
                authored_element = node.authored.content[index]
                if isinstance(authored_element, Child):
                    authored_form = authored_element.form
            address = node.address.content[index]
            composed = self.compose_form(
                NodeTriple(resolved=element.form, address=address, authored=authored_form, path=child_path)
            )
            children.append(
                ComposedChild(
                    index=index,
                    ordinal=first_ordinal + position,
                    path=child_path,
                    heading=element.heading if element.heading is not None else _authored_heading(node, index),
                    digest=address.digest,
                    provenance=self._provenance(child_path),
                    form=composed,
                )
            )
        return SeriesGroup(offset=group.offset, children=tuple(children))

    def _compose_paragraph(self, node: NodeTriple, group: ContentGroup) -> ParagraphGroup:
        return ParagraphGroup(
            offset=group.offset,
            elements=tuple(self._render_element(node.path, index, element) for index, element in group.indexed()),
        )

    def _render_element(self, path: FormPath, index: int, element: ContentElement) -> RenderedElement:
        if isinstance(element, str):
            return TextRun(text=element)
        if isinstance(element, Definition):
            declaration = self.terms.declaration_at(path.child(index))
            return TermDefinition(term=element.definition, term_id=declaration.term_id, anchor=declaration.anchor)
        if isinstance(element, Use):
            term_id = term_identifier(element.use)
            declaration = self.terms.nearest(term_id, path)
            return TermUse(
                term=element.use,
                term_id=term_id,
                target=declaration.anchor if declaration is not None else None,
            )
        if isinstance(element, Reference):
            return HeadingReference(heading=element.reference, anchor=heading_anchor(element.reference))
        if isinstance(element, Blank):
            blank_path = path.child(index)
            # An empty value leaves the blank unfilled.
            value = self.mappings.get(blank_path) or None
            if value is not None:
                self.blanks_filled += 1
            return BlankField(path=blank_path, value=value)
        # Child and Component are series members and never reach a paragraph.
        raise TypeError(f"{element_kind(element).value} element in a paragraph group at {path}")

    def _provenance(self, path: FormPath) -> Provenance | None:
        resolution = self.resolutions.get(path)
        if resolution is None:
            return None
        return Provenance(
            publisher=resolution.publisher,
            project=resolution.project,
            edition=resolution.edition,
            repository=resolution.repository,
            upgraded_from=resolution.upgraded_from,
        )

    def _check_address_shape(self, node: NodeTriple) -> None:
        content = node.resolved.content
        address = node.address.content
        if len(address) != len(content):
            self._shape_error(
                node,
                f"address node has {len(address)} entries for {len(content)} content elements",
            )
        for index, (element, entry) in enumerate(zip(content, address)):
            if not isinstance(element, Child) and entry.content:
                self._shape_error(node, f"address node for leaf element {index} has children")

    def _shape_error(self, node: NodeTriple, message: str) -> None:
        raise IntegrityError(
            IntegrityReport(
                error_type=IntegrityErrorType.ADDRESS_SHAPE_MISMATCH,
                path=node.path.to_tokens(),
                message=message,
                digest=node.address.digest,
            )
        )

    def _check_budget(self, node: NodeTriple) -> None:
        if self.deadline is not None and time.monotonic() > self.deadline:
            raise IntegrityError(
                IntegrityReport(
                    error_type=IntegrityErrorType.RENDER_BUDGET_EXCEEDED,
                    path=node.path.to_tokens(),
                    message=f"render exceeded its budget of {self.options.budget_seconds}s",
                )
            )

    def log_misses(self) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        unattached = sum(len(v) for k, v in self.annotations.items() if k not in self.visited)
        orphaned = sum(len(v) for k, v in self.comments.items() if k not in self.digests)
        logger.debug(
            "lookup misses: %d annotations, %d comments, %d of %d blank mappings unused",
            unattached,
            orphaned,
            len(self.mappings) - self.blanks_filled,
            len(self.mappings),
        )


def _authored_heading(node: NodeTriple, index: int) -> str | None:
    # A component's heading lives on the reference in the authored form.
    if node.authored is None:
        return None
    element = node.authored.content[index]
    if isinstance(element, Component):
        return element.heading
    return None


def compose(
    resolved: Form,
    address: AddressNode,
    authored: Form | None,
    path: FormPath,
    resolutions: Sequence[Resolution],
    options: RenderOptions,
) -> ComposedForm:
    composer = _Composer(resolved, path, resolutions, options)
    composed = composer.compose_form(NodeTriple(resolved=resolved, address=address, authored=authored, path=path))
    composer.log_misses()
    return composed


def build_toc(form: ComposedForm) -> tuple[TocEntry, ...]:
    entries: list[TocEntry] = []
    for child in form.children():
        nested = build_toc(child.form)
        if child.heading is None and not nested:
            continue
        entries.append(TocEntry(heading=child.heading, path=child.path, ordinal=child.ordinal, children=nested))
    return tuple(entries)


def compose_document(
    loaded: LoadedForm,
    *,
    authored: Form | None = None,
    address: AddressNode | None = None,
    options: RenderOptions | None = None,
) -> ComposedDocument:
    options = options or RenderOptions()
    if address is None:
        address = merkleize(loaded.form)
    body = compose(loaded.form, address, authored, ROOT, loaded.resolutions, options)
    toc = build_toc(body)
    logger.debug("composed form %s: %d toc entries", address.digest[:12], len(toc))
    return ComposedDocument(
        toc=toc,
        body=body,
        loaded=loaded,
        address=address,
        authored=authored,
        options=options,
    )
