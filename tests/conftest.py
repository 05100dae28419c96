"""Shared fixtures: part-tree builders and sample messages."""

from email.message import EmailMessage

import pytest

from mailharvest.extract import ContentKind, PartNode, encode_payload


def plain(text: str) -> PartNode:
    return PartNode.leaf(ContentKind.PLAIN, encode_payload(text.encode()))


def html(text: str) -> PartNode:
    return PartNode.leaf(ContentKind.HTML, encode_payload(text.encode()))


def other(data: bytes = b"\x89PNG") -> PartNode:
    return PartNode.leaf(ContentKind.OTHER, encode_payload(data))


def container(*children: PartNode) -> PartNode:
    return PartNode.container(children)


VIDEO = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
SHORT = "https://youtu.be/abcdefghijk"


def build_message(
    body: str | None = "Hello",
    html_body: str | None = None,
    attachments: list[tuple[str, bytes]] = (),
    subject: str = "Week 3 materials",
    date: str = "Tue, 09 Dec 2025 10:30:00 +0000",
    sender: str = "Teacher <teacher@example.com>",
) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = "student@example.com"
    msg["Subject"] = subject
    msg["Date"] = date
    msg["Message-ID"] = "<abc123@example.com>"
    if body is not None:
        msg.set_content(body)
    if html_body is not None:
        if body is None:
            msg.set_content(html_body, subtype="html")
        else:
            msg.add_alternative(html_body, subtype="html")
    for filename, data in attachments:
        maintype, subtype = ("application", "pdf") if filename.endswith(".pdf") else ("application", "octet-stream")
        msg.add_attachment(data, maintype=maintype, subtype=subtype, filename=filename)
    return msg


@pytest.fixture
def message():
    return build_message
