"""Attachment discovery and idempotent, date-partitioned storage."""

from dataclasses import dataclass
from datetime import datetime
from email.message import Message
from pathlib import Path
from typing import Iterator

from .layouts import DEFAULT_LAYOUT, AttachmentVars, PathTemplate, safe_filename


def file_type(filename: str) -> str:
    """Coarse document type from a filename's extension."""
    name = filename.lower()
    if name.endswith(".pdf"):
        return "pdf"
    if name.endswith(".docx"):
        return "docx"
    if name.endswith(".doc"):
        return "doc"
    return "other"


@dataclass
class AttachmentInfo:
    """An attachment materialized on disk."""
    name: str
    local_path: Path
    type: str
    skipped: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "local_path": str(self.local_path),
            "type": self.type,
            "skipped": self.skipped,
        }


def iter_attachments(msg: Message) -> Iterator[tuple[str, bytes]]:
    """Yield (filename, data) for each attachment part of a message."""
    for part in msg.walk():
        if part.is_multipart():
            continue
        filename = part.get_filename()
        disposition = part.get_content_disposition()
        if disposition == "attachment" or (
            filename and part.get_content_maintype() != "text"
        ):
            data = part.get_payload(decode=True) or b""
            yield filename or "unnamed", data


class AttachmentStore:
    """Writes attachments under `root` following a path template.

    Existing files are never overwritten: a second save of the same
    attachment reports it as skipped.
    """

    def __init__(self, root: Path, layout: str = DEFAULT_LAYOUT):
        self._root = Path(root)
        self._template = PathTemplate(layout)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def template(self) -> PathTemplate:
        return self._template

    def path_for(
        self,
        filename: str,
        date: datetime | None = None,
        subject: str = "",
        from_addr: str = "",
    ) -> Path:
        vars = AttachmentVars(
            filename=filename,
            date=date,
            subject=subject,
            from_addr=from_addr,
        )
        return self._root / self._template.render(vars)

    def save(
        self,
        filename: str,
        data: bytes,
        date: datetime | None = None,
        subject: str = "",
        from_addr: str = "",
        dry_run: bool = False,
    ) -> AttachmentInfo:
        """Write an attachment unless a file already exists at its path."""
        path = self.path_for(filename, date=date, subject=subject, from_addr=from_addr)
        name = safe_filename(filename)
        if path.exists():
            return AttachmentInfo(name=name, local_path=path, type=file_type(name), skipped=True)
        if not dry_run:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        return AttachmentInfo(name=name, local_path=path, type=file_type(name))
