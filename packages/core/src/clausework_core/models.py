"""
Form data model.

Forms use the commonform wire shape: a form is ``{"content": [...]}`` with an
optional ``"conspicuous": "yes"``, and each content element is either a plain
string or a single-purpose object (``{"use": "Buyer"}``,
``{"heading": "Payment", "form": {...}}``, ...).

Overlay records (resolutions, annotations, comments, blank mappings) are
produced by collaborators outside this package and are read-only here.
"""

from __future__ import annotations

import enum
from typing import Any, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from clausework_core.paths import FormPath, Token


class ElementKind(str, enum.Enum):
    text = "text"
    definition = "definition"
    use = "use"
    reference = "reference"
    blank = "blank"
    child = "child"
    component = "component"


class AnnotationLevel(str, enum.Enum):
    error = "error"
    warning = "warning"
    notice = "notice"
    info = "info"


class _Element(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Definition(_Element):
    definition: str

    def to_wire(self) -> dict[str, Any]:
        return {"definition": self.definition}


class Use(_Element):
    use: str

    def to_wire(self) -> dict[str, Any]:
        return {"use": self.use}


class Reference(_Element):
    reference: str

    def to_wire(self) -> dict[str, Any]:
        return {"reference": self.reference}


class Blank(_Element):
    blank: str = ""

    def to_wire(self) -> dict[str, Any]:
        return {"blank": self.blank}


class Child(_Element):
    """A nested form, optionally headed."""

    heading: str | None = None
    form: Form

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"form": self.form.to_wire()}
        if self.heading is not None:
            wire["heading"] = self.heading
        return wire


class Component(_Element):
    """An unresolved reference to a published form. Only found in authored forms."""

    repository: str = "commonform.org"
    publisher: str
    project: str
    edition: str
    upgrade: bool = False
    heading: str | None = None
    substitutions: dict[str, dict[str, str]] = Field(
        default_factory=lambda: {"terms": {}, "headings": {}, "blanks": {}}
    )

    @field_validator("upgrade", mode="before")
    @classmethod
    def _yes_flag(cls, value: Any) -> Any:
        return _yes_to_bool(value)

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {
            "repository": self.repository,
            "publisher": self.publisher,
            "project": self.project,
            "edition": self.edition,
            "substitutions": self.substitutions,
        }
        if self.upgrade:
            wire["upgrade"] = "yes"
        if self.heading is not None:
            wire["heading"] = self.heading
        return wire


ContentElement = Union[str, Definition, Use, Reference, Blank, Child, Component]


class Form(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    content: list[ContentElement]
    conspicuous: bool = False

    @field_validator("conspicuous", mode="before")
    @classmethod
    def _yes_flag(cls, value: Any) -> Any:
        return _yes_to_bool(value)

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"content": [element_to_wire(e) for e in self.content]}
        if self.conspicuous:
            wire["conspicuous"] = "yes"
        return wire


Child.model_rebuild()
Form.model_rebuild()


_KINDS: dict[type, ElementKind] = {
    str: ElementKind.text,
    Definition: ElementKind.definition,
    Use: ElementKind.use,
    Reference: ElementKind.reference,
    Blank: ElementKind.blank,
    Child: ElementKind.child,
    Component: ElementKind.component,
}

SERIES_KINDS = frozenset({ElementKind.child, ElementKind.component})


def element_kind(element: ContentElement) -> ElementKind:
    try:
        return _KINDS[type(element)]
    except KeyError:
        raise TypeError(f"not a form content element: {element!r}") from None


def element_to_wire(element: ContentElement) -> Any:
    if element_kind(element) is ElementKind.text:
        return element
    return element.to_wire()


# =============================================================================
# Overlays
# =============================================================================


class Resolution(BaseModel):
    """A component reference the loader expanded, and which edition it used."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    path: list[Token]
    repository: str = "commonform.org"
    publisher: str
    project: str
    edition: str = Field(..., description="Edition actually loaded")
    specified: str | None = Field(default=None, description="Edition named in the authored form")
    upgrade: bool = False

    @field_validator("upgrade", mode="before")
    @classmethod
    def _yes_flag(cls, value: Any) -> Any:
        return _yes_to_bool(value)

    @property
    def form_path(self) -> FormPath:
        return FormPath.parse(self.path)

    @property
    def upgraded_from(self) -> str | None:
        if self.upgrade and self.specified and self.specified != self.edition:
            return self.specified
        return None


class Annotation(BaseModel):
    """A lint or critique diagnostic addressed to a content element."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    path: list[Token]
    level: AnnotationLevel = AnnotationLevel.notice
    message: str
    url: str | None = None
    source: str | None = None

    @property
    def form_path(self) -> FormPath:
        return FormPath.parse(self.path)


class Comment(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str = Field(..., validation_alias=AliasChoices("id", "uuid"))
    author: str = Field(..., validation_alias=AliasChoices("author", "publisher"))
    timestamp: int = Field(..., description="Milliseconds since the epoch")
    text: str
    form: str = Field(..., description="Digest of the form commented on")
    reply_to: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("reply_to", "replyTo"),
        description="Ancestor comment ids, nearest first",
    )


class BlankMapping(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    blank: list[Token]
    value: str

    @property
    def form_path(self) -> FormPath:
        return FormPath.parse(self.blank)


class LoadedForm(BaseModel):
    """Loader output: the resolved form and the resolutions it applied."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    form: Form
    resolutions: list[Resolution] = Field(default_factory=list)


class AddressNode(BaseModel):
    """Content-address tree node. Mirrors a resolved form one-to-one."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    digest: str
    content: list[AddressNode] = Field(default_factory=list)


AddressNode.model_rebuild()


def _yes_to_bool(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower() in {"yes", "true", "1"}
    return value
