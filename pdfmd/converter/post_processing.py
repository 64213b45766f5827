from __future__ import annotations

import re

from .text_utils import collapse_blank_lines, map_unprotected

SALIENCE_KEYWORDS = ("required", "important", "warning", "prohibited", "recommended", "mandatory")
SALIENCE_KEYWORDS_CJK = ("必須", "重要", "警告", "禁止", "推奨", "注意")

CODE_EXTENSIONS = (
    "pdf", "md", "txt", "csv", "tsv", "json", "xml", "yaml", "yml", "toml", "ini", "cfg",
    "html", "htm", "css", "js", "ts", "py", "sh", "sql", "log",
    "doc", "docx", "xls", "xlsx", "ppt", "pptx", "zip", "tar", "gz",
    "png", "jpg", "jpeg", "gif", "svg",
)

_KEYWORD_RE = re.compile(
    r"(?<![A-Za-z0-9_])(" + "|".join(SALIENCE_KEYWORDS) + r")(?![A-Za-z0-9_])",
    re.IGNORECASE,
)
# CJK has no word spacing: a keyword is whole unless it sits inside a longer kanji/katakana compound.
_KEYWORD_CJK_RE = re.compile(
    r"(?<![\u3400-\u9fff\u30a0-\u30ff])(" + "|".join(SALIENCE_KEYWORDS_CJK) + r")(?![\u3400-\u9fff\u30a0-\u30ff])"
)
_FILE_TOKEN_RE = re.compile(
    r"(?<![\w./\\-])([\w][\w.\-/\\]*\.(?:" + "|".join(CODE_EXTENSIONS) + r"))(?![\w/]|\.\w)",
    re.IGNORECASE,
)

_HEADING_RE = re.compile(r"^#{1,6}\s")
_LIST_RE = re.compile(r"^(?:[-*+]\s|\d{1,3}\.\s)")
_TABLE_RE = re.compile(r"^\|")
_QUOTE_RE = re.compile(r"^>")
_RUN_KINDS = ("list", "table", "quote")


def _line_kind(line: str) -> str:
    if not line.strip():
        return "blank"
    if _HEADING_RE.match(line):
        return "heading"
    if _LIST_RE.match(line):
        return "list"
    if _TABLE_RE.match(line):
        return "table"
    if _QUOTE_RE.match(line):
        return "quote"
    return "paragraph"


def _needs_blank(prev_kind: str, kind: str) -> bool:
    if prev_kind == "heading" or kind == "heading":
        return True
    if prev_kind != kind and (prev_kind in _RUN_KINDS or kind in _RUN_KINDS):
        return True
    return False


def enforce_block_spacing(md: str) -> str:
    """
    Exactly one blank line around every heading and around list, table and
    quote runs where they meet other content. Elsewhere existing blank lines
    are kept (collapsed to one) and adjacent lines stay adjacent.
    """
    out: list[str] = []
    prev_kind = None
    saw_blank = False
    for line in md.splitlines():
        kind = _line_kind(line)
        if kind == "blank":
            saw_blank = True
            continue
        if prev_kind is not None and (saw_blank or _needs_blank(prev_kind, kind)):
            out.append("")
        out.append(line)
        prev_kind = kind
        saw_blank = False
    return "\n".join(out)


def _emphasize(part: str) -> str:
    part = _KEYWORD_RE.sub(r"**\1**", part)
    return _KEYWORD_CJK_RE.sub(r"**\1**", part)


def emphasize_keywords(md: str) -> str:
    out: list[str] = []
    for line in md.splitlines():
        if _HEADING_RE.match(line) or not line.strip():
            out.append(line)
            continue
        out.append(map_unprotected(line, _emphasize))
    return "\n".join(out)


def _wrap_file_tokens(part: str) -> str:
    return _FILE_TOKEN_RE.sub(r"`\1`", part)


def wrap_code_spans(md: str) -> str:
    """Put file names such as ``report.pdf`` or ``src/app.py`` in inline code spans."""
    return "\n".join(map_unprotected(line, _wrap_file_tokens) for line in md.splitlines())


def refine_markdown(md: str) -> str:
    md = enforce_block_spacing(md)
    md = wrap_code_spans(md)
    md = emphasize_keywords(md)
    md = collapse_blank_lines(md)
    return md.strip()
