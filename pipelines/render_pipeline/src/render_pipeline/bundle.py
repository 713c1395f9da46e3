"""
Render bundles.

A bundle is one JSON file holding everything the collaborators produced for
a form: the authored form, the loader's output, the diagnostics, comments and
blank values, and optionally the content-address tree and print styles.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from clausework_core.models import AddressNode, Annotation, BlankMapping, Comment, Component, Form, LoadedForm
from clausework_render.emitters.document import DocumentStyles


class RenderBundle(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    form: Form | None = Field(default=None, description="Authored form, before components are loaded")
    loaded: LoadedForm
    tree: AddressNode | None = None
    annotations: list[Annotation] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)
    mappings: list[BlankMapping] = Field(default_factory=list)
    styles: DocumentStyles | None = None

    @model_validator(mode="before")
    @classmethod
    def _default_loaded(cls, data: Any) -> Any:
        # A form without components needs no loader pass.
        if isinstance(data, dict) and "loaded" not in data and "form" in data:
            data = dict(data)
            data["loaded"] = {"form": data["form"], "resolutions": []}
        return data

    @model_validator(mode="after")
    def _loaded_is_resolved(self) -> RenderBundle:
        if _has_component(self.loaded.form):
            raise ValueError("loaded form still contains component references")
        return self


def _has_component(form: Form) -> bool:
    for element in form.content:
        if isinstance(element, Component):
            return True
        child_form = getattr(element, "form", None)
        if isinstance(child_form, Form) and _has_component(child_form):
            return True
    return False


def load_bundle(path: Path) -> RenderBundle:
    return RenderBundle.model_validate_json(path.read_text(encoding="utf-8"))


def load_form(path: Path) -> Form:
    """Read either a bare form or a bundle and return the form to digest."""
    text = path.read_text(encoding="utf-8")
    try:
        return Form.model_validate_json(text)
    except ValueError:
        return load_bundle(path).loaded.form
