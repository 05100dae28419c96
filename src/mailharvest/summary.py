"""Companion .docx documents listing a message's body with clickable links."""

import re
from pathlib import Path

from docx import Document
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.text.paragraph import Paragraph

from .extract.links import split_links

MAX_STEM_LEN = 50
SUFFIX = "_summary.docx"
HYPERLINK_COLOR = "0563C1"

_REPLY_PREFIX_RE = re.compile(r"^(?:Fwd|FW|Re|转发|回复)[:：]\s*", re.IGNORECASE)
_UNSAFE_RE = re.compile(r'[\\/?%*:|"<>]')


def summary_filename(subject: str) -> str:
    """Filename for a message's summary document, derived from its subject."""
    stem = _REPLY_PREFIX_RE.sub("", subject or "", count=1)
    stem = _UNSAFE_RE.sub("-", stem)[:MAX_STEM_LEN]
    return f"{stem}{SUFFIX}"


def add_hyperlink(paragraph: Paragraph, url: str, text: str | None = None) -> None:
    """Append an external hyperlink run to a paragraph."""
    r_id = paragraph.part.relate_to(url, RT.HYPERLINK, is_external=True)

    hyperlink = OxmlElement("w:hyperlink")
    hyperlink.set(qn("r:id"), r_id)

    run = OxmlElement("w:r")
    rpr = OxmlElement("w:rPr")
    color = OxmlElement("w:color")
    color.set(qn("w:val"), HYPERLINK_COLOR)
    rpr.append(color)
    underline = OxmlElement("w:u")
    underline.set(qn("w:val"), "single")
    rpr.append(underline)
    run.append(rpr)

    t = OxmlElement("w:t")
    t.set(qn("xml:space"), "preserve")
    t.text = text or url
    run.append(t)

    hyperlink.append(run)
    paragraph._p.append(hyperlink)


def build_summary(body: str):
    """Build a document with one paragraph per body line."""
    doc = Document()
    for line in body.split("\n"):
        if not line.strip():
            doc.add_paragraph("")
            continue
        paragraph = doc.add_paragraph()
        for segment, is_link in split_links(line):
            if is_link:
                add_hyperlink(paragraph, segment)
            else:
                paragraph.add_run(segment)
    return doc


def write_summary(
    subject: str,
    body: str,
    links: list[str],
    directory: Path,
) -> Path | None:
    """Write the summary document for a message.

    Nothing is written unless the message has both a body and links.
    Returns the written path, or None.
    """
    if not links or not body:
        return None
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / summary_filename(subject)
    build_summary(body).save(str(path))
    return path
