"""IMAP client wrappers for Gmail and generic servers."""

import email
import imaplib
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from email.policy import default as email_policy
from email.utils import parsedate_to_datetime

from .config import AccountConfig


GMAIL_IMAP_HOST = "imap.gmail.com"
GMAIL_IMAP_PORT = 993


@dataclass
class MessageInfo:
    """Lightweight message metadata (headers only)."""
    uid: bytes
    message_id: str
    date: datetime | None
    from_addr: str
    subject: str


def parse_date(value: str | None) -> datetime | None:
    """Parse a Date header, returning None when absent or unparseable."""
    if not value:
        return None
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None


@dataclass
class SearchFilter:
    """Which messages to harvest."""
    sender: str = ""
    newer_than_days: int | None = 7
    has_attachment: bool = True

    def gmail_query(self) -> str:
        """Build a Gmail search query (as typed in the Gmail search bar)."""
        terms: list[str] = []
        if self.sender:
            terms.append(f"from:{self.sender}")
        if self.has_attachment:
            terms.append("has:attachment")
        if self.newer_than_days:
            terms.append(f"newer_than:{self.newer_than_days}d")
        return " ".join(terms)

    def imap_criteria(self, now: datetime | None = None) -> str:
        """Build standard IMAP SEARCH criteria.

        IMAP has no attachment predicate; callers filter those client-side.
        """
        terms: list[str] = []
        if self.sender:
            terms.append(f'FROM "{self.sender}"')
        if self.newer_than_days:
            since = (now or datetime.now(timezone.utc)) - timedelta(days=self.newer_than_days)
            terms.append(f"SINCE {since.strftime('%d-%b-%Y')}")
        if not terms:
            return "ALL"
        return f"({' '.join(terms)})"


def latest(uids: list[bytes], limit: int | None) -> list[bytes]:
    """Newest `limit` UIDs, newest first."""
    ordered = sorted(uids, key=int, reverse=True)
    return ordered[:limit] if limit else ordered


class IMAPClient:
    """Base IMAP client with common operations."""

    # Whether search_filter() honours SearchFilter.has_attachment server-side
    filters_attachments = False

    def __init__(self, host: str, port: int = 993):
        self.host = host
        self.port = port
        self.folder = "INBOX"
        self._conn: imaplib.IMAP4_SSL | None = None

    def connect(self, user: str, password: str) -> None:
        self._conn = imaplib.IMAP4_SSL(self.host, self.port)
        self._conn.login(user, password)

    def disconnect(self) -> None:
        if self._conn:
            try:
                self._conn.logout()
            except (imaplib.IMAP4.error, OSError):
                pass
            self._conn = None

    @property
    def conn(self) -> imaplib.IMAP4_SSL:
        if not self._conn:
            raise RuntimeError("Not connected")
        return self._conn

    def select_folder(self, folder: str | None = None, readonly: bool = True) -> int:
        """Select a folder, return message count."""
        folder = folder or self.folder
        typ, data = self.conn.select(f'"{folder}"', readonly=readonly)
        if typ != "OK":
            raise RuntimeError(f"Failed to select folder {folder}: {data}")
        return int(data[0])

    def search(self, criteria: str) -> list[bytes]:
        """Search for messages matching criteria, return UIDs."""
        typ, data = self.conn.uid("SEARCH", None, criteria)
        if typ != "OK":
            raise RuntimeError(f"Search failed: {data}")
        return data[0].split()

    def search_filter(self, search: SearchFilter) -> list[bytes]:
        return self.search(search.imap_criteria())

    def fetch_info(self, uid: bytes) -> MessageInfo:
        """Fetch lightweight message info (headers only)."""
        typ, data = self.conn.uid(
            "FETCH", uid, "(BODY.PEEK[HEADER.FIELDS (MESSAGE-ID DATE FROM SUBJECT)])"
        )
        if typ != "OK" or not data or not data[0]:
            raise RuntimeError(f"Failed to fetch headers for UID {uid}")

        msg = email.message_from_bytes(data[0][1], policy=email_policy)
        return MessageInfo(
            uid=uid,
            message_id=msg.get("Message-ID", ""),
            date=parse_date(msg.get("Date")),
            from_addr=msg.get("From", ""),
            subject=msg.get("Subject", ""),
        )

    def fetch_raw(self, uid: bytes) -> bytes:
        """Fetch full raw message by UID."""
        typ, data = self.conn.uid("FETCH", uid, "(BODY.PEEK[])")
        if typ != "OK" or not data or not data[0]:
            raise RuntimeError(f"Failed to fetch message for UID {uid}")
        return data[0][1]

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.disconnect()


class GmailClient(IMAPClient):
    """Gmail-specific IMAP client, searching with Gmail's own query syntax."""

    filters_attachments = True

    def __init__(self):
        super().__init__(GMAIL_IMAP_HOST, GMAIL_IMAP_PORT)
        self.folder = "[Gmail]/All Mail"

    def search_filter(self, search: SearchFilter) -> list[bytes]:
        query = search.gmail_query()
        if not query:
            return self.search("ALL")
        typ, data = self.conn.uid("SEARCH", "X-GM-RAW", f'"{query}"')
        if typ != "OK":
            raise RuntimeError(f"Search failed: {data}")
        return data[0].split()


def get_imap_client(account: AccountConfig) -> IMAPClient:
    """Get appropriate IMAP client for an account."""
    host = (account.host or "").lower()
    if "gmail" in host or (account.type == "gmail" and not host):
        return GmailClient()
    if not account.host:
        raise ValueError(f"Account '{account.name}' needs a host for type '{account.type}'")
    return IMAPClient(account.host, account.port)
