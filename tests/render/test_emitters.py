from __future__ import annotations

import json

import pytest
from bs4 import BeautifulSoup

from conftest import make_form

from clausework_core.hashing import form_digest
from clausework_core.models import Annotation, BlankMapping, Comment, LoadedForm
from clausework_render.compose import RenderOptions, compose_document
from clausework_render.emitters import DocumentEmitter, DocumentStyles, Emitter, Emphasis, InteractiveEmitter
from clausework_render.emitters.interactive import display_date, publication_href


def _parse(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


def _top_level(soup: BeautifulSoup) -> list[str]:
    return [tag.name for tag in soup.find_all(recursive=False)]


@pytest.fixture
def overlays(loaded_agreement) -> RenderOptions:
    digest = form_digest(loaded_agreement.form)
    return RenderOptions(
        annotations=[
            Annotation(path=["content", 1], level="warning", message="Define terms in Definitions.", url="https://example.com/lint"),
            Annotation(path=["content", 6, "content", 1], level="info", message="Spacing."),
        ],
        comments=[
            Comment(id="c1", author="ana", timestamp=1700000000000, text="Who is the customer?", form=digest),
            Comment(id="c2", author="ben", timestamp=1700000001000, text="See Definitions.", form=digest, reply_to=["c1"]),
        ],
        mappings=[BlankMapping(blank=["content", 3], value="Acme Corp")],
    )


# =============================================================================
# Interactive
# =============================================================================


def test_interactive_toc_comes_first(loaded_agreement):
    soup = _parse(InteractiveEmitter().emit(compose_document(loaded_agreement)))
    assert _top_level(soup) == ["header", "article"]
    toc = soup.find("ol", id="toc")
    assert [a.get_text() for a in toc.find_all("a", class_="reference")] == [
        "Payment",
        "Definitions",
        "Warranty Disclaimer",
    ]
    assert "(No Heading)" in toc.get_text()


def test_interactive_without_headings_has_no_toc():
    form = make_form({"content": ["Just text."]})
    soup = _parse(InteractiveEmitter().emit(compose_document(LoadedForm(form=form))))
    assert _top_level(soup) == ["article"]


def test_interactive_data_attributes(loaded_agreement, overlays):
    document = compose_document(loaded_agreement, options=overlays)
    article = _parse(InteractiveEmitter().emit(document)).find("article", class_="commonform")

    assert article["data-digest"] == document.address.digest
    assert json.loads(article["data-tree"])["digest"] == document.address.digest
    assert json.loads(article["data-form"]) is None
    assert json.loads(article["data-loaded"])["form"] == loaded_agreement.form.to_wire()
    assert json.loads(article["data-mappings"]) == [{"blank": ["content", 3], "value": "Acme Corp"}]
    assert len(json.loads(article["data-annotations"])) == 2


def test_interactive_sections_and_headings(loaded_agreement):
    soup = _parse(InteractiveEmitter().emit(compose_document(loaded_agreement)))
    sections = soup.find_all("section")
    assert len(sections) == 6
    assert "conspicuous" in sections[2]["class"]
    assert [s["data-depth"] for s in sections] == ["1", "1", "1", "2", "2", "1"]
    heading = soup.find("h1", class_="heading")
    assert heading["id"] == "heading:Payment"


def test_interactive_terms_and_blanks(loaded_agreement, overlays):
    soup = _parse(InteractiveEmitter().emit(compose_document(loaded_agreement, options=overlays)))
    assert soup.find("dfn", id="definition:agreement") is not None
    uses = soup.find_all("a", class_="use")
    assert [a["href"] for a in uses if a.has_attr("href")] == ["#definition:agreement"]
    # "Customer" is declared inside Definitions and used outside it
    assert [a.get_text() for a in uses if "undefined" in a["class"]] == ["Customer", "Customer"]
    filled, empty = soup.find_all("input", class_="blank")
    assert filled["value"] == "Acme Corp"
    assert json.loads(filled["data-path"]) == ["content", 3]
    assert filled.has_attr("disabled")
    assert not empty.has_attr("value")


def test_interactive_empty_mapping_renders_unfilled_blank():
    form = make_form({"content": ["Paid to ", {"blank": ""}]})
    options = RenderOptions(mappings=[BlankMapping(blank=["content", 1], value="")])
    soup = _parse(InteractiveEmitter().emit(compose_document(LoadedForm(form=form), options=options)))
    assert not soup.find("input", class_="blank").has_attr("value")


def test_emitter_must_supply_every_hook():
    class HeadingsOnly(Emitter):
        def heading(self, child, depth, numbers):
            return None

    with pytest.raises(TypeError):
        HeadingsOnly()


def test_interactive_undefined_use():
    form = make_form({"content": ["The ", {"use": "Ghost"}]})
    soup = _parse(InteractiveEmitter().emit(compose_document(LoadedForm(form=form))))
    use = soup.find("a", class_="use")
    assert "undefined" in use["class"]
    assert not use.has_attr("href")


def test_interactive_annotations(loaded_agreement, overlays):
    soup = _parse(InteractiveEmitter().emit(compose_document(loaded_agreement, options=overlays)))
    article = soup.find("article")
    root_notes = article.find_all("aside", class_="annotation", recursive=False)
    assert len(root_notes) == 1
    assert "warning" in root_notes[0]["class"]
    assert root_notes[0].find("a")["href"] == "https://example.com/lint"

    definitions = soup.find_all("section")[1]
    nested = definitions.find("aside", class_="annotation")
    assert "info" in nested["class"]
    # annotations precede the form's content
    assert definitions.find_all(recursive=False)[1] is nested


def test_interactive_comment_threads(loaded_agreement, overlays):
    soup = _parse(InteractiveEmitter().emit(compose_document(loaded_agreement, options=overlays)))
    article = soup.find("article")
    root = article.find_all("aside", class_="comment", recursive=False)
    assert [c["data-uuid"] for c in root] == ["c1"]
    reply = root[0].find("aside", class_="comment")
    assert reply["data-uuid"] == "c2"
    assert "Tue Nov 14 2023" in root[0].find("p", class_="byline").get_text()
    # comments come after the form's content
    assert article.find_all(recursive=False)[-1] is root[0]


def test_interactive_provenance(component_loaded, component_authored):
    document = compose_document(component_loaded, authored=component_authored)
    soup = _parse(InteractiveEmitter().emit(document))
    component = soup.find("section", class_="component")
    provenance = component.find("p", class_="provenance")
    assert provenance.find("a", class_="publication")["href"] == "/kemitchell/confidentiality/3"
    assert provenance.find("a", class_="edition")["href"] == "/kemitchell/confidentiality/2"
    assert "upgraded from" in provenance.get_text()
    assert json.loads(soup.find("article")["data-form"]) == component_authored.to_wire()


def test_interactive_child_links(loaded_agreement):
    plain = _parse(InteractiveEmitter().emit(compose_document(loaded_agreement)))
    assert plain.find("a", class_="child-link") is None

    linked = _parse(
        InteractiveEmitter().emit(compose_document(loaded_agreement, options=RenderOptions(child_links=True)))
    )
    links = linked.find_all("a", class_="child-link")
    assert len(links) == 6
    assert links[0]["href"] == "/forms/" + form_digest(loaded_agreement.form.content[5].form)


def test_publication_helpers():
    assert publication_href("kemitchell", "mutual nda", "1e") == "/kemitchell/mutual%20nda/1e"
    assert display_date(0) == "Thu Jan 01 1970"


# =============================================================================
# Document
# =============================================================================


def _numbers(markup: str) -> list[str]:
    return [div["data-number"] for div in _parse(markup).find_all("div", class_="section")]


def test_outline_numbering(loaded_agreement):
    markup = DocumentEmitter().emit(compose_document(loaded_agreement))
    assert _numbers(markup) == ["1.", "2.", "3.", "(a)", "(b)", "4."]
    toc_numbers = [span.get_text() for span in _parse(markup).find("nav").find_all("span", class_="number")]
    assert toc_numbers == ["1.", "2.", "3.", "(a)"]


def test_decimal_numbering(loaded_agreement):
    markup = DocumentEmitter(DocumentStyles(numbering="decimal")).emit(compose_document(loaded_agreement))
    assert _numbers(markup) == ["1", "2", "3", "3.1", "3.2", "4"]


def test_unknown_numbering_scheme():
    with pytest.raises(KeyError):
        DocumentEmitter(DocumentStyles(numbering="legal"))


def test_document_has_same_shape_as_interactive(loaded_agreement, overlays):
    document = compose_document(loaded_agreement, options=overlays)
    interactive = _parse(InteractiveEmitter().emit(document))
    printed = _parse(DocumentEmitter().emit(document))
    assert _top_level(printed) == ["nav", "div"]
    assert len(printed.find_all("div", class_="section")) == len(interactive.find_all("section"))
    assert len(printed.find_all("p", class_="note")) == 2
    assert len(printed.find_all("div", class_="comment")) == 2


def test_document_blanks_and_terms(loaded_agreement, overlays):
    printed = _parse(DocumentEmitter().emit(compose_document(loaded_agreement, options=overlays)))
    filled = printed.find("span", class_="filled")
    assert filled.get_text() == "Acme Corp"
    assert "[•]" in printed.get_text()
    assert printed.find("span", class_="definition").get_text() == "“Agreement”"
    assert printed.find("a") is None


def test_document_styles(loaded_agreement):
    styles = DocumentStyles.model_validate(
        {
            "title": "Services Agreement",
            "edition": "1e",
            "alignment": "justify",
            "centerTitle": True,
            "indentMargins": False,
            "markFilled": False,
            "heading": {"bold": True},
        }
    )
    printed = _parse(DocumentEmitter(styles).emit(compose_document(loaded_agreement)))
    title = printed.find("h1", class_="title")
    assert title.get_text() == "Services Agreement"
    assert title["style"] == "text-align: center"
    assert printed.find("p", class_="edition").get_text() == "1e"
    assert printed.find("span", class_="heading")["style"] == "font-weight: bold"
    assert all("margin-left" not in p.get("style", "") for p in printed.find_all("p"))
    assert all("justify" in p["style"] for p in printed.find_all("p", class_="heading-line"))


def test_document_indents_and_conspicuous_text():
    form = make_form(
        {"content": [{"heading": "Warranty", "form": {"conspicuous": "yes", "content": ["No warranty."]}}]}
    )
    printed = _parse(DocumentEmitter().emit(compose_document(LoadedForm(form=form))))
    paragraph = printed.find("div", class_="section").find("p", class_=False)
    assert "margin-left: 0.5in" in paragraph["style"]
    assert "text-transform: uppercase" in paragraph["style"]


def test_emphasis_css():
    assert Emphasis().css() is None
    assert Emphasis(bold=True, underline=True).css() == "font-weight: bold; text-decoration: underline"
