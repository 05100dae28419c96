"""Extraction entry points."""

from dataclasses import dataclass, field
from email.message import Message
from typing import Iterable, Sequence

from .body import select_body
from .links import extract_links
from .parts import PartNode, from_message, from_payload
from .quotes import QuoteLocale, strip_quoted


@dataclass
class ExtractionResult:
    """Canonical body of a message and the media links found in it."""
    body: str = ""
    links: list[str] = field(default_factory=list)

    @property
    def wants_summary(self) -> bool:
        """Whether a companion summary document should be written."""
        return bool(self.links) and bool(self.body)

    def to_dict(self) -> dict:
        return {"body": self.body, "links": list(self.links)}


def extract_parts(
    nodes: Sequence[PartNode],
    locales: Iterable[QuoteLocale] | None = None,
) -> ExtractionResult:
    """Select the body, strip forwarded headers, then collect links."""
    body = strip_quoted(select_body(nodes), locales)
    return ExtractionResult(body=body, links=extract_links(body))


def extract_payload(
    payload: dict,
    locales: Iterable[QuoteLocale] | None = None,
) -> ExtractionResult:
    """Extract from a Gmail API message payload."""
    return extract_parts(from_payload(payload), locales)


def extract_message(
    msg: Message,
    locales: Iterable[QuoteLocale] | None = None,
) -> ExtractionResult:
    """Extract from a parsed email message."""
    return extract_parts(from_message(msg), locales)
