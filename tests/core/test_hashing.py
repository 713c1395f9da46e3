from __future__ import annotations

import copy

from conftest import SERVICES_AGREEMENT, make_form

from clausework_core.hashing import canonical_json, form_digest, merkleize, sha256_text
from clausework_core.models import Child


def test_canonical_json_is_key_sorted_and_compact():
    assert canonical_json({"b": 1, "a": ["é", 2]}) == '{"a":["é",2],"b":1}'


def test_digest_is_sha256_hex():
    digest = form_digest(make_form({"content": ["Hello."]}))
    assert len(digest) == 64
    assert digest == sha256_text('{"content":["Hello."]}')


def test_tree_mirrors_content(agreement):
    tree = merkleize(agreement)
    assert len(tree.content) == len(agreement.content)
    for element, node in zip(agreement.content, tree.content):
        if isinstance(element, Child):
            assert len(node.content) == len(element.form.content)
            assert node.digest == form_digest(element.form)
        else:
            assert node.content == []


def test_digest_is_deterministic(agreement):
    assert merkleize(agreement) == merkleize(make_form(copy.deepcopy(SERVICES_AGREEMENT)))


def test_nested_change_propagates_to_root_only():
    data = copy.deepcopy(SERVICES_AGREEMENT)
    before = merkleize(make_form(data))
    data["content"][5]["form"]["content"][4] = " within sixty days."
    after = merkleize(make_form(data))

    assert after.digest != before.digest
    assert after.content[5].digest != before.content[5].digest
    # sibling child untouched
    assert after.content[6].digest == before.content[6].digest


def test_conspicuous_and_heading_change_digest():
    plain = make_form({"content": [{"heading": "A", "form": {"content": ["x"]}}]})
    renamed = make_form({"content": [{"heading": "B", "form": {"content": ["x"]}}]})
    loud = make_form({"conspicuous": "yes", "content": [{"heading": "A", "form": {"content": ["x"]}}]})
    assert len({form_digest(plain), form_digest(renamed), form_digest(loud)}) == 3
    assert merkleize(plain).content[0].digest == merkleize(renamed).content[0].digest
