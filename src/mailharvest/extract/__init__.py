"""Message content extraction: body selection, quote stripping, links."""

from .body import BodyMatch, BodySource, find_body, select_body
from .decode import decode_leaf
from .links import LINK_PATTERN, LINK_RE, extract_links, split_links
from .parts import ContentKind, PartNode, encode_payload, from_message, from_payload
from .quotes import (
    CHINESE,
    DEFAULT_LOCALES,
    ENGLISH,
    QuoteLocale,
    QuoteState,
    QuoteStripper,
    strip_quoted,
)
from .result import ExtractionResult, extract_message, extract_parts, extract_payload

__all__ = [
    "BodyMatch",
    "BodySource",
    "CHINESE",
    "ContentKind",
    "DEFAULT_LOCALES",
    "ENGLISH",
    "ExtractionResult",
    "LINK_PATTERN",
    "LINK_RE",
    "PartNode",
    "QuoteLocale",
    "QuoteState",
    "QuoteStripper",
    "decode_leaf",
    "encode_payload",
    "extract_links",
    "extract_message",
    "extract_parts",
    "extract_payload",
    "find_body",
    "from_message",
    "from_payload",
    "select_body",
    "split_links",
    "strip_quoted",
]
