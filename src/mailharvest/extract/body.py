"""Canonical body selection over a part tree."""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from .decode import decode_leaf
from .parts import ContentKind, PartNode


class BodySource(str, Enum):
    PLAIN = "plain"
    HTML = "html"
    NONE = "none"


@dataclass(frozen=True)
class BodyMatch:
    """Result of a body search, tagged with where the text came from."""
    source: BodySource
    text: str = ""


NO_MATCH = BodyMatch(BodySource.NONE)


def find_body(nodes: Sequence[PartNode]) -> BodyMatch:
    """Depth-first search for the canonical body.

    The first non-blank plain-text leaf wins outright. HTML leaves are kept
    as a fallback, the last one visited winning. A nested HTML match does
    not stop the search among later siblings.
    """
    fallback = NO_MATCH
    for node in nodes:
        if node.is_malformed:
            continue
        kind = node.content_kind
        if kind is ContentKind.PLAIN:
            text = decode_leaf(node.encoded_payload)
            if text.strip():
                return BodyMatch(BodySource.PLAIN, text)
        elif kind is ContentKind.HTML:
            fallback = BodyMatch(BodySource.HTML, decode_leaf(node.encoded_payload))
        elif kind is ContentKind.CONTAINER:
            nested = find_body(node.children)
            if nested.source is BodySource.PLAIN:
                return nested
            if nested.source is BodySource.HTML and nested.text:
                fallback = nested
    return fallback


def select_body(nodes: Sequence[PartNode]) -> str:
    """Return the canonical body text, or "" if the tree has none."""
    return find_body(nodes).text
