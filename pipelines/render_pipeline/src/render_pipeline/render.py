from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from clausework_core.settings import Settings
from clausework_render.compose import ComposedDocument, RenderOptions, compose_document
from clausework_render.emitters import DocumentEmitter, DocumentStyles, InteractiveEmitter
from render_pipeline.bundle import RenderBundle, load_bundle

logger = logging.getLogger(__name__)


def compose_bundle(
    bundle: RenderBundle,
    settings: Settings,
    *,
    annotated: bool = True,
    child_links: bool | None = None,
) -> ComposedDocument:
    overrides: dict = {
        "annotations": bundle.annotations if annotated else [],
        "comments": bundle.comments,
        "mappings": bundle.mappings,
    }
    if child_links is not None:
        overrides["child_links"] = child_links
    options = RenderOptions.from_settings(settings, **overrides)
    return compose_document(bundle.loaded, authored=bundle.form, address=bundle.tree, options=options)


def render_interactive(
    bundle: RenderBundle,
    settings: Settings,
    *,
    annotated: bool = True,
    child_links: bool | None = None,
) -> str:
    document = compose_bundle(bundle, settings, annotated=annotated, child_links=child_links)
    return InteractiveEmitter().emit(document)


def print_styles(
    bundle: RenderBundle,
    settings: Settings,
    *,
    numbering: str | None = None,
    title: str | None = None,
    edition: str | None = None,
) -> DocumentStyles:
    styles = bundle.styles or DocumentStyles(numbering=settings.numbering)
    updates = {k: v for k, v in {"numbering": numbering, "title": title, "edition": edition}.items() if v is not None}
    return styles.model_copy(update=updates) if updates else styles


def render_print(bundle: RenderBundle, settings: Settings, styles: DocumentStyles) -> str:
    # Printed copies never carry lint output.
    document = compose_bundle(bundle, settings, annotated=False)
    return DocumentEmitter(styles).emit(document)


@dataclass(frozen=True)
class BuildResult:
    source: Path
    outputs: tuple[Path, ...]


def build_directory(source_dir: Path, output_dir: Path, settings: Settings) -> list[BuildResult]:
    """
    Render every ``*.json`` bundle in ``source_dir``.

    Each bundle named ``NAME.json`` yields ``NAME.html`` (plain),
    ``NAME-annotated.html`` and ``NAME-print.html``.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    results: list[BuildResult] = []
    for path in sorted(source_dir.glob("*.json")):
        bundle = load_bundle(path)
        name = path.stem
        pages = {
            f"{name}.html": render_interactive(bundle, settings, annotated=False),
            f"{name}-annotated.html": render_interactive(bundle, settings, annotated=True),
            f"{name}-print.html": render_print(bundle, settings, print_styles(bundle, settings)),
        }
        written = []
        for filename, html in pages.items():
            target = output_dir / filename
            target.write_text(html, encoding="utf-8")
            written.append(target)
        logger.info("rendered %s -> %d files", path.name, len(written))
        results.append(BuildResult(source=path, outputs=tuple(written)))
    return results
