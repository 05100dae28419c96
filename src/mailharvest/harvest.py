"""Per-message pipeline: extract content, save attachments, write summaries."""

import email
from dataclasses import dataclass, field
from email.message import Message
from email.policy import default as email_policy
from pathlib import Path
from typing import Iterable

from .attachments import AttachmentInfo, AttachmentStore, iter_attachments
from .extract import ExtractionResult, QuoteLocale, extract_message
from .imap import IMAPClient, SearchFilter, latest, parse_date
from .summary import summary_filename, write_summary


@dataclass
class HarvestedMessage:
    """Everything harvested from one message."""
    uid: str
    message_id: str
    from_addr: str
    date: str
    subject: str
    body: str = ""
    links: list[str] = field(default_factory=list)
    attachments: list[AttachmentInfo] = field(default_factory=list)
    summary_path: Path | None = None

    def to_dict(self) -> dict:
        return {
            "uid": self.uid,
            "message_id": self.message_id,
            "from": self.from_addr,
            "date": self.date,
            "subject": self.subject,
            "links": list(self.links),
            "attachments": [a.to_dict() for a in self.attachments],
            "summary": str(self.summary_path) if self.summary_path else None,
        }


def parse_raw(raw: bytes) -> Message:
    return email.message_from_bytes(raw, policy=email_policy)


def harvest_message(
    msg: Message,
    store: AttachmentStore,
    uid: str = "",
    locales: Iterable[QuoteLocale] | None = None,
    dry_run: bool = False,
) -> HarvestedMessage:
    """Extract, store attachments, and add a summary document if warranted."""
    from_addr = str(msg.get("From", ""))
    date_header = str(msg.get("Date", ""))
    subject = str(msg.get("Subject", ""))
    date = parse_date(date_header)

    result: ExtractionResult = extract_message(msg, locales)

    attachments = [
        store.save(
            filename, data,
            date=date, subject=subject, from_addr=from_addr, dry_run=dry_run,
        )
        for filename, data in iter_attachments(msg)
    ]

    summary_path = None
    if result.wants_summary:
        # Same directory the message's attachments land in
        name = summary_filename(subject)
        target = store.path_for(name, date=date, subject=subject, from_addr=from_addr)
        summary_path = target.parent / name
        if not dry_run:
            write_summary(subject, result.body, result.links, target.parent)
        attachments.append(AttachmentInfo(name=summary_path.name, local_path=summary_path, type="docx"))

    return HarvestedMessage(
        uid=uid,
        message_id=str(msg.get("Message-ID", "")),
        from_addr=from_addr,
        date=date_header,
        subject=subject,
        body=result.body,
        links=result.links,
        attachments=attachments,
        summary_path=summary_path,
    )


def harvest_raw(
    raw: bytes,
    store: AttachmentStore,
    uid: str = "",
    locales: Iterable[QuoteLocale] | None = None,
    dry_run: bool = False,
) -> HarvestedMessage:
    return harvest_message(parse_raw(raw), store, uid=uid, locales=locales, dry_run=dry_run)


def has_attachments(msg: Message) -> bool:
    return any(True for _ in iter_attachments(msg))


def candidate_uids(
    client: IMAPClient,
    search: SearchFilter,
    limit: int | None = None,
) -> list[bytes]:
    """Select the client's folder and return the newest matching UIDs."""
    client.select_folder()
    return latest(client.search_filter(search), limit)


def harvest_uid(
    client: IMAPClient,
    uid: bytes,
    store: AttachmentStore,
    search: SearchFilter,
    locales: Iterable[QuoteLocale] | None = None,
    dry_run: bool = False,
) -> HarvestedMessage | None:
    """Harvest one message by UID.

    Returns None for messages the server could not filter out but which
    lack the requested attachments.
    """
    msg = parse_raw(client.fetch_raw(uid))
    if search.has_attachment and not client.filters_attachments and not has_attachments(msg):
        return None
    return harvest_message(msg, store, uid=uid.decode(), locales=locales, dry_run=dry_run)


def harvest(
    client: IMAPClient,
    search: SearchFilter,
    store: AttachmentStore,
    limit: int | None = None,
    locales: Iterable[QuoteLocale] | None = None,
    dry_run: bool = False,
) -> list[HarvestedMessage]:
    """Harvest the newest matching messages from a connected client."""
    messages = []
    for uid in candidate_uids(client, search, limit):
        harvested = harvest_uid(client, uid, store, search, locales=locales, dry_run=dry_run)
        if harvested:
            messages.append(harvested)
    return messages
