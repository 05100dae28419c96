"""Path templates deciding where attachments are stored."""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import PurePath
from string import Template


# Preset templates - simple names that expand to full templates
PRESETS: dict[str, str] = {
    # Default: one directory per message day (UTC)
    "daily": "$yyyy-$mm-$dd/$filename",
    "monthly": "$yyyy/$mm/$filename",
    "sender": "$from/$yyyy-$mm-$dd/$filename",
    "flat": "$filename",
}

DEFAULT_LAYOUT = "daily"


def is_valid_layout(layout: str) -> bool:
    """Check if a layout string is a preset name or a template."""
    if layout in PRESETS:
        return True
    # Templates must place the attachment's own name
    return "$filename" in layout or "${filename}" in layout


def resolve_layout(layout: str) -> str:
    """Resolve a preset name to its template string.

    Raises ValueError for strings that are neither a preset nor a template
    placing $filename.
    """
    if layout in PRESETS:
        return PRESETS[layout]
    if not is_valid_layout(layout):
        raise ValueError(
            f"Invalid layout {layout!r}. Use a preset ({', '.join(PRESETS)}) "
            "or a template containing $filename"
        )
    return layout


def sanitize_for_path(s: str, max_len: int = 30) -> str:
    """Sanitize a string for use as a single path component.

    - Lowercase
    - Replace spaces/punctuation with underscore
    - Remove non-ASCII
    - Collapse multiple underscores
    - Truncate to max_len
    """
    if not s:
        return "_"

    s = s.lower()

    # Remove common prefixes (keep looping until no more prefixes)
    prefixes = ["re:", "fwd:", "fw:"]
    changed = True
    while changed:
        changed = False
        for prefix in prefixes:
            if s.startswith(prefix):
                s = s[len(prefix):].lstrip()
                changed = True

    s = re.sub(r"[^a-z0-9]", "_", s)
    s = re.sub(r"_+", "_", s)
    s = s.strip("_")

    if len(s) > max_len:
        s = s[:max_len].rstrip("_")

    return s or "_"


def safe_filename(name: str) -> str:
    """Reduce an attachment filename to a bare, non-empty basename."""
    name = PurePath(name.replace("\\", "/")).name.strip()
    if name in ("", ".", ".."):
        return "unnamed"
    return name


def to_utc(dt: datetime | None) -> datetime:
    """Message date in UTC; now when missing. Naive dates are taken as UTC."""
    if dt is None:
        return datetime.now(timezone.utc)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def date_folder(dt: datetime | None) -> str:
    """YYYY-MM-DD directory name for a message date."""
    return to_utc(dt).strftime("%Y-%m-%d")


@dataclass
class AttachmentVars:
    """Variables available for path template interpolation."""

    filename: str
    date: datetime | None = None
    subject: str = ""
    from_addr: str = ""

    def to_dict(self) -> dict[str, str]:
        dt = to_utc(self.date)
        return {
            "filename": safe_filename(self.filename),
            "yyyy": dt.strftime("%Y"),
            "yy": dt.strftime("%y"),
            "mm": dt.strftime("%m"),
            "dd": dt.strftime("%d"),
            "subj": sanitize_for_path(self.subject, max_len=30),
            "subj20": sanitize_for_path(self.subject, max_len=20),
            "from": sanitize_for_path(self.from_addr, max_len=20),
            "from30": sanitize_for_path(self.from_addr, max_len=30),
        }


class PathTemplate:
    """Template for generating attachment paths from message metadata."""

    def __init__(self, template: str = DEFAULT_LAYOUT):
        """Initialize with a template string or preset name.

        Args:
            template: Either a preset name (e.g., "daily", "flat") or a
                     template string (e.g., "$yyyy/$mm/$dd/$filename")
        """
        self.original = template
        self.template_str = resolve_layout(template)
        self._template = Template(self.template_str)

    @property
    def variables(self) -> list[str]:
        """List of variable names used in this template."""
        return self._template.get_identifiers()

    def render(self, vars: AttachmentVars | dict[str, str]) -> str:
        if isinstance(vars, AttachmentVars):
            vars = vars.to_dict()
        return self._template.substitute(vars)

    def __repr__(self) -> str:
        if self.original != self.template_str:
            return f"PathTemplate({self.original!r} -> {self.template_str!r})"
        return f"PathTemplate({self.template_str!r})"
