"""Body-part tree model and builders."""

import base64
from dataclasses import dataclass
from email.message import Message
from enum import Enum


class ContentKind(str, Enum):
    PLAIN = "plain-text"
    HTML = "html"
    OTHER = "other-leaf"
    CONTAINER = "container"


MIME_KINDS: dict[str, ContentKind] = {
    "text/plain": ContentKind.PLAIN,
    "text/html": ContentKind.HTML,
}


@dataclass(frozen=True)
class PartNode:
    """A node in a message's body-part tree.

    Leaves carry `encoded_payload` (URL-safe Base64), containers carry
    `children`. Never both, never neither.
    """
    content_kind: ContentKind
    encoded_payload: str | None = None
    children: tuple["PartNode", ...] | None = None

    @classmethod
    def leaf(cls, kind: ContentKind, payload: str) -> "PartNode":
        return cls(content_kind=kind, encoded_payload=payload)

    @classmethod
    def container(cls, children=()) -> "PartNode":
        return cls(content_kind=ContentKind.CONTAINER, children=tuple(children))

    @property
    def is_leaf(self) -> bool:
        return self.encoded_payload is not None and self.children is None

    @property
    def is_container(self) -> bool:
        return self.children is not None and self.encoded_payload is None

    @property
    def is_malformed(self) -> bool:
        if self.content_kind is ContentKind.CONTAINER:
            return not self.is_container
        return not self.is_leaf


def encode_payload(data: bytes) -> str:
    """Encode bytes the way the Gmail API encodes body data."""
    return base64.urlsafe_b64encode(data).decode("ascii")


# --- Gmail API payloads ---


def _body_data(part: dict) -> str | None:
    """A part's `body.data`, or None when absent, empty or not a string."""
    body = part.get("body")
    if not isinstance(body, dict):
        return None
    data = body.get("data")
    return data if isinstance(data, str) and data else None


def _node_from_payload(part: dict) -> PartNode:
    if not isinstance(part, dict):
        return PartNode.container()
    data = _body_data(part)
    children = part.get("parts")
    if not isinstance(children, list):
        children = None
    mime_type = part.get("mimeType")
    mime_type = mime_type.lower() if isinstance(mime_type, str) else ""

    if data and children:
        return PartNode.container()
    if data:
        return PartNode.leaf(MIME_KINDS.get(mime_type, ContentKind.OTHER), data)
    if children:
        return PartNode.container(_node_from_payload(p) for p in children)
    body = part.get("body")
    if isinstance(body, dict) and body.get("attachmentId"):
        # Content lives behind a separate attachments call
        return PartNode.leaf(ContentKind.OTHER, "")
    return PartNode.container()


def from_payload(payload: dict) -> list[PartNode]:
    """Build the top-level sibling sequence from a Gmail API message payload.

    Multipart payloads yield their `parts`; a single-part payload yields
    itself as the only root. Parts without usable data are kept as empty
    containers, which body selection skips.
    """
    if not payload or not isinstance(payload, dict):
        return []
    parts = payload.get("parts")
    if parts and isinstance(parts, list):
        return [_node_from_payload(p) for p in parts]
    if _body_data(payload):
        return [_node_from_payload(payload)]
    return []


# --- RFC 822 messages ---


def _leaf_bytes(part: Message) -> bytes:
    """Payload bytes of a leaf part, text transcoded to UTF-8."""
    raw = part.get_payload(decode=True) or b""
    if part.get_content_maintype() != "text":
        return raw
    charset = part.get_content_charset() or "utf-8"
    try:
        text = raw.decode(charset, errors="replace")
    except LookupError:
        text = raw.decode("utf-8", errors="replace")
    return text.encode("utf-8")


def _node_from_message(part: Message) -> PartNode:
    if part.is_multipart():
        return PartNode.container(_node_from_message(p) for p in part.get_payload())

    payload = encode_payload(_leaf_bytes(part))
    if not payload:
        return PartNode.container()
    if part.get_content_disposition() == "attachment":
        return PartNode.leaf(ContentKind.OTHER, payload)
    kind = MIME_KINDS.get(part.get_content_type(), ContentKind.OTHER)
    return PartNode.leaf(kind, payload)


def from_message(msg: Message) -> list[PartNode]:
    """Build the top-level sibling sequence from a parsed email message."""
    if msg.is_multipart():
        return [_node_from_message(p) for p in msg.get_payload()]
    return [_node_from_message(msg)]
