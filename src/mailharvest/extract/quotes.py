"""Removal of forwarded-message header blocks from body text.

A two-state line scanner. In NORMAL, a marker line such as

    ---------- Forwarded message ---------

switches to SKIPPING and is dropped. In SKIPPING, blank lines and header
lines (`From:`, `Subject:`, ...) are dropped; the first other line is kept
and scanning returns to NORMAL.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable


@dataclass(frozen=True)
class QuoteLocale:
    """Marker phrases and header labels recognized for one language."""
    name: str
    markers: tuple[str, ...]
    headers: tuple[str, ...]


ENGLISH = QuoteLocale(
    name="en",
    markers=("forwarded message",),
    headers=("From", "Date", "Subject", "To", "Cc"),
)

CHINESE = QuoteLocale(
    name="zh",
    markers=("转发邮件", "转发的邮件"),
    headers=("发件人", "日期", "主题", "收件人", "抄送"),
)

DEFAULT_LOCALES: tuple[QuoteLocale, ...] = (ENGLISH, CHINESE)


class QuoteState(Enum):
    NORMAL = "normal"
    SKIPPING = "skipping"


def _alternation(phrases: Iterable[str]) -> str:
    # Longest first so overlapping phrases match greedily
    return "|".join(re.escape(p) for p in sorted(set(phrases), key=len, reverse=True))


class QuoteStripper:
    """Line scanner removing forwarded header blocks."""

    def __init__(self, locales: Iterable[QuoteLocale] = DEFAULT_LOCALES):
        self.locales = tuple(locales)
        markers = [m for loc in self.locales for m in loc.markers]
        headers = [h for loc in self.locales for h in loc.headers]
        self._marker_re = re.compile(
            rf"^-+\s*(?:{_alternation(markers)})\s*-+$", re.IGNORECASE,
        ) if markers else None
        self._header_re = re.compile(
            rf"^(?:{_alternation(headers)})[:：]", re.IGNORECASE,
        ) if headers else None

    def is_marker(self, line: str) -> bool:
        return bool(self._marker_re and self._marker_re.match(line.strip()))

    def is_header(self, line: str) -> bool:
        return bool(self._header_re and self._header_re.match(line.lstrip()))

    def step(self, state: QuoteState, line: str) -> tuple[QuoteState, bool]:
        """Advance one line. Returns (next_state, emit_line)."""
        if state is QuoteState.NORMAL:
            if self.is_marker(line):
                return QuoteState.SKIPPING, False
            return QuoteState.NORMAL, True
        if not line.strip() or self.is_header(line):
            return QuoteState.SKIPPING, False
        return QuoteState.NORMAL, True

    def strip(self, text: str) -> str:
        state = QuoteState.NORMAL
        kept = []
        for line in text.split("\n"):
            state, emit = self.step(state, line)
            if emit:
                kept.append(line)
        return "\n".join(kept).strip()


_default_stripper = QuoteStripper()


def strip_quoted(text: str, locales: Iterable[QuoteLocale] | None = None) -> str:
    """Remove forwarded-message header blocks from `text`."""
    stripper = _default_stripper if locales is None else QuoteStripper(locales)
    return stripper.strip(text)
