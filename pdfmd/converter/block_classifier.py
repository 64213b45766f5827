from __future__ import annotations

import logging
import re

from .text_utils import map_unprotected

logger = logging.getLogger(__name__)

BULLET_GLYPHS = frozenset("•·▪▫◦●○■□◆◇►▶‣⁃・–—")
CIRCLED_NUMBERS = {
    "①": 1, "②": 2, "③": 3, "④": 4, "⑤": 5,
    "⑥": 6, "⑦": 7, "⑧": 8, "⑨": 9, "⑩": 10,
}

_GLYPH_BULLET_RE = re.compile(
    "^[" + re.escape("".join(sorted(BULLET_GLYPHS))) + r"]\s*(?P<rest>\S.*)$"
)
_ASCII_BULLET_RE = re.compile(r"^[-*+]\s+(?P<rest>\S.*)$")
_NUMBERED_ITEM_RE = re.compile(r"^(?:(?P<n>\d{1,3})(?:[.．](?!\d)|[)）])|[(（](?P<pn>\d{1,3})[)）])\s*(?P<rest>\S.*)$")
_CIRCLED_ITEM_RE = re.compile(
    "^(?P<c>[" + "".join(CIRCLED_NUMBERS) + r"])\s*(?P<rest>\S.*)$"
)
_LETTERED_ITEM_RE = re.compile(
    r"^(?P<marker>[a-zA-Z][).）]|[(（][a-zA-Z][)）])\s+(?P<rest>\S.*)$"
)

_ANNOTATION_RE = re.compile(
    r"^(?P<label>(?i:note|remark|warning|caution|important|tip)|注意|注記|備考|警告|参考|注)"
    r"\s*(?P<sep>[:：])\s*(?P<body>.*)$"
)
_WRAP_PAIRS = {"(": ")", "（": "）", "「": "」", "『": "』", "“": "”", "\"": "\""}

_URL_RE = (
    r"(?<![\w@/.])(?P<url>(?:https?://|www\.)[^\s<>()\[\]{}\"'（）「」『』、。]+)"
)
_EMAIL_RE = r"(?P<email>[A-Za-z0-9._%+-]+@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,})"
_LINK_RE = re.compile(_URL_RE + "|" + _EMAIL_RE)
_URL_TRAILING = ".,;:!?"

# Lines that already carry block-level markup from an earlier pass.
_STRUCTURED_RE = re.compile(r"^(?:#{1,6}\s|\||>|- |\d{1,3}\. )")


def _is_structured(line: str) -> bool:
    return bool(_STRUCTURED_RE.match(line))


def starts_with_list_marker(line: str) -> bool:
    s = line.strip()
    return any(
        p.match(s)
        for p in (_CIRCLED_ITEM_RE, _NUMBERED_ITEM_RE, _LETTERED_ITEM_RE, _GLYPH_BULLET_RE, _ASCII_BULLET_RE)
    )


def normalize_list_item(line: str) -> str:
    s = line.strip()
    if not s or s.startswith(("#", "|", ">")):
        return line
    m = _CIRCLED_ITEM_RE.match(s)
    if m:
        return f"{CIRCLED_NUMBERS[m.group('c')]}. {m.group('rest')}"
    m = _NUMBERED_ITEM_RE.match(s)
    if m:
        n = int(m.group("n") or m.group("pn"))
        return f"{n}. {m.group('rest')}"
    m = _LETTERED_ITEM_RE.match(s)
    if m:
        return f"- **{m.group('marker')}** {m.group('rest')}"
    m = _GLYPH_BULLET_RE.match(s) or _ASCII_BULLET_RE.match(s)
    if m:
        return f"- {m.group('rest')}"
    return line


def normalize_list_markers(lines: list[str]) -> list[str]:
    """Rewrite bullets, numbers, circled numbers and letters into canonical Markdown list markers."""
    out = [normalize_list_item(ln) for ln in lines]
    changed = sum(1 for a, b in zip(lines, out) if a != b)
    if changed:
        logger.debug("Normalized %d list items", changed)
    return out


def _is_wrapped(s: str) -> bool:
    if len(s) < 3:
        return False
    close = _WRAP_PAIRS.get(s[0])
    if close is None or s[-1] != close:
        return False
    inner = s[1:-1]
    if close == s[0]:
        return close not in inner
    # The opening bracket must close only at the very end.
    depth = 1
    for ch in inner:
        if ch == s[0]:
            depth += 1
        elif ch == close:
            depth -= 1
            if depth == 0:
                return False
    return depth == 1


def convert_annotation(line: str) -> str:
    s = line.strip()
    if not s or _is_structured(s):
        return line
    m = _ANNOTATION_RE.match(s)
    if m:
        body = m.group("body")
        label = f"> **{m.group('label')}{m.group('sep')}**"
        return f"{label} {body}" if body else label
    if _is_wrapped(s):
        return f"> {s}"
    return line


def convert_annotations(lines: list[str]) -> list[str]:
    """Annotation lines and fully parenthesised/quoted lines become blockquotes."""
    return [convert_annotation(ln) for ln in lines]


def _link_repl(m: re.Match) -> str:
    email = m.group("email")
    if email:
        return f"[{email}](mailto:{email})"
    url = m.group("url")
    tail = ""
    while url and url[-1] in _URL_TRAILING:
        tail = url[-1] + tail
        url = url[:-1]
    if not url or url.lower() in ("http://", "https://", "www."):
        return m.group(0)
    target = url if not url.lower().startswith("www.") else "https://" + url
    return f"[{url}]({target}){tail}"


def linkify(line: str) -> str:
    """Wrap bare URLs and e-mail addresses in Markdown links. Re-running is a no-op."""
    if not line or line.startswith("| ---"):
        return line
    return map_unprotected(line, lambda part: _LINK_RE.sub(_link_repl, part))


def linkify_lines(lines: list[str]) -> list[str]:
    return [linkify(ln) for ln in lines]
