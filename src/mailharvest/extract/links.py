"""Media link extraction."""

import re

# Video page or short link, each ending in an 11-character video ID
LINK_PATTERN = (
    r"https?://(?:www\.)?(?:youtube\.com/watch\?v=|youtu\.be/)[A-Za-z0-9_-]{11}"
)
LINK_RE = re.compile(LINK_PATTERN)
_SPLIT_RE = re.compile(f"({LINK_PATTERN})")


def extract_links(text: str) -> list[str]:
    """Unique media links in `text`, in order of first occurrence."""
    if not text:
        return []
    return list(dict.fromkeys(m.group() for m in LINK_RE.finditer(text)))


def split_links(line: str) -> list[tuple[str, bool]]:
    """Split a line into (segment, is_link) pieces, dropping empty segments."""
    pieces = []
    for i, segment in enumerate(_SPLIT_RE.split(line)):
        if segment:
            # re.split puts captured groups at odd indices
            pieces.append((segment, i % 2 == 1))
    return pieces
