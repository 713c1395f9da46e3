"""
Content addressing for forms.

Digest algorithm: SHA-256, hex encoded, over the canonical JSON serialization
of the commonform wire shape (keys sorted, no insignificant whitespace, UTF-8).

The address tree is computed bottom-up. A form's digest covers its
``conspicuous`` flag and its content, where every nested child is replaced by
``{"heading": ..., "form": <child form digest>}``. Every leaf element gets its
own node whose digest covers the element's wire JSON, so the tree has exactly
one node per content element at every level.
"""

from __future__ import annotations

import json
from hashlib import sha256
from typing import Any

from clausework_core.models import AddressNode, Child, Form, element_to_wire


def sha256_hex(data: bytes) -> str:
    return sha256(data).hexdigest()


def sha256_text(text: str) -> str:
    return sha256_hex(text.encode("utf-8"))


def canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def merkleize(form: Form) -> AddressNode:
    children: list[AddressNode] = []
    hashed: list[Any] = []
    for element in form.content:
        if isinstance(element, Child):
            child = merkleize(element.form)
            children.append(child)
            entry: dict[str, Any] = {"form": child.digest}
            if element.heading is not None:
                entry["heading"] = element.heading
            hashed.append(entry)
        else:
            wire = element_to_wire(element)
            children.append(AddressNode(digest=sha256_text(canonical_json(wire))))
            hashed.append(wire)
    payload: dict[str, Any] = {"content": hashed}
    if form.conspicuous:
        payload["conspicuous"] = "yes"
    return AddressNode(digest=sha256_text(canonical_json(payload)), content=children)


def form_digest(form: Form) -> str:
    return merkleize(form).digest
