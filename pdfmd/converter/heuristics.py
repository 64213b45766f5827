from __future__ import annotations

import re
from typing import Optional

from .text_utils import TERMINAL_PUNCTUATION, _is_letter, has_terminal_punctuation

_CJK_NUM = r"[0-9０-９一二三四五六七八九十百千〇零]+"
# Explicit markers may sit behind a plain section number ("1. 第2章 概要").
_NUM_PREFIX = r"(?:\d+(?:[.．]\d+)*[.．]?\s*)?"

_CHAPTER_RE = re.compile(
    rf"^{_NUM_PREFIX}(?:第\s*{_CJK_NUM}\s*[章部編]|(?:Chapter|CHAPTER|Part|PART)\s+(?:\d+|[IVXLC]+)\b)"
)
_SECTION_RE = re.compile(
    rf"^{_NUM_PREFIX}(?:第\s*{_CJK_NUM}\s*節|(?:Section|SECTION)\s+\d+(?:\.\d+)*\b|§\s*\d+(?:\.\d+)*)"
)
_CLAUSE_RE = re.compile(
    rf"^{_NUM_PREFIX}(?:第\s*{_CJK_NUM}\s*[項条款]|(?:Article|ARTICLE|Clause|CLAUSE)\s+\d+\b)"
)
_NUMBERED_HEADING_RE = re.compile(
    r"^(?P<num>\d+(?:[.．]\d+)*)[.．]?\s+(?P<rest>\S.*)$"
)
_LETTER_HEADING_RE = re.compile(
    r"^(?P<letter>[A-Z])[.．]\s+(?P<rest>\S.*)$"
)
_MARKER_TAIL_RE = re.compile(r"^[\s.．:：\-–—]*")
# "a)", "1)" open list items, not headings.
_PAREN_MARKER_RE = re.compile(r"^(?:\d{1,3}|[A-Za-z])[)）]")
# Single-level "n. " prefix, used to spot runs of numbered list items.
_LIST_NUMBER_RE = re.compile(r"^(\d{1,3})[.．]\s+\S")

CHAPTER_LEVEL = 2
SECTION_LEVEL = 3
CLAUSE_LEVEL = 4
LETTER_LEVEL = 4
SHORT_LINE_LEVEL = 4


def _marker_heading(t: str, pattern: re.Pattern) -> bool:
    m = pattern.match(t)
    if not m:
        return False
    rest = _MARKER_TAIL_RE.sub("", t[m.end():])
    return not has_terminal_punctuation(rest)


def _parse_numbered_heading_level(t: str, base_level: int) -> Optional[int]:
    m = _NUMBERED_HEADING_RE.match(t)
    if not m:
        return None
    rest = m.group("rest")
    if rest[0].islower() or not _is_letter(rest[0]):
        return None
    if has_terminal_punctuation(rest):
        return None
    parts = re.split(r"[.．]", m.group("num"))
    # Guard against years, amounts and DOI-like prefixes.
    if any(len(p) > 2 for p in parts):
        return None
    first_n = int(parts[0])
    if first_n <= 0 or first_n > 200:
        return None
    return min(6, base_level + len(parts) - 1)


def _parse_letter_heading_level(t: str) -> Optional[int]:
    m = _LETTER_HEADING_RE.match(t)
    if not m:
        return None
    rest = m.group("rest")
    if rest[0].islower() or has_terminal_punctuation(rest):
        return None
    return LETTER_LEVEL


def _longest_lowercase_run(t: str) -> int:
    best = run = 0
    for word in t.split():
        if word[0].islower():
            run += 1
            best = max(best, run)
        else:
            run = 0
    return best


def _looks_like_short_line_heading(t: str, max_lowercase_run: int) -> bool:
    first = t[0]
    if not (first.isupper() or first in "0123456789"):
        return False
    if _PAREN_MARKER_RE.match(t):
        return False
    if not any(_is_letter(ch) for ch in t):
        return False
    if has_terminal_punctuation(t):
        return False
    return _longest_lowercase_run(t) <= max_lowercase_run


def match_heading(
    line: str,
    *,
    max_chars: int = 80,
    base_level: int = 3,
    max_lowercase_run: int = 3,
    allow_short_line: bool = True,
) -> Optional[tuple[str, int]]:
    """
    Classify one line as a heading.

    Returns ``(kind, level)`` for the first pattern that matches, tried from the
    most specific (explicit chapter marker) to the least (bare short line), or
    None. The level depends on the pattern, never on the line's length.
    """
    t = line.strip()
    if not t or len(t) >= max_chars:
        return None
    if _marker_heading(t, _CHAPTER_RE):
        return "chapter", CHAPTER_LEVEL
    if _marker_heading(t, _SECTION_RE):
        return "section", SECTION_LEVEL
    if _marker_heading(t, _CLAUSE_RE):
        return "clause", CLAUSE_LEVEL
    level = _parse_numbered_heading_level(t, base_level)
    if level is not None:
        return "numbered", level
    level = _parse_letter_heading_level(t)
    if level is not None:
        return "lettered", level
    if allow_short_line and _looks_like_short_line_heading(t, max_lowercase_run):
        return "short_line", SHORT_LINE_LEVEL
    return None


def _list_number(line: str) -> Optional[int]:
    m = _LIST_NUMBER_RE.match(line.strip())
    return int(m.group(1)) if m else None


def detect_headings(
    lines: list[str],
    *,
    max_chars: int = 80,
    base_level: int = 3,
    max_lowercase_run: int = 3,
) -> list[str]:
    """
    Prefix heading lines with Markdown hashes.

    A numbered line whose neighbour continues the count (``1.`` next to
    ``2.``) is a list item and is left for the list pass.
    """
    out: list[str] = []
    numbers = [_list_number(line) for line in lines]
    prev_src = ""
    prev_heading = False
    for i, line in enumerate(lines):
        s = line.strip()
        n = numbers[i]
        if n is not None and (
            (i > 0 and numbers[i - 1] == n - 1) or (i + 1 < len(numbers) and numbers[i + 1] == n + 1)
        ):
            out.append(line)
            prev_src = s
            prev_heading = False
            continue
        # A bare short line directly under an unfinished sentence is that sentence's tail.
        continues_paragraph = bool(prev_src) and not prev_heading and prev_src[-1] not in TERMINAL_PUNCTUATION
        hit = match_heading(
            s,
            max_chars=max_chars,
            base_level=base_level,
            max_lowercase_run=max_lowercase_run,
            allow_short_line=not continues_paragraph,
        )
        if hit:
            _, level = hit
            out.append("#" * level + " " + s)
        else:
            out.append(line)
        prev_src = s
        prev_heading = hit is not None
    return out
