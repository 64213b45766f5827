from __future__ import annotations

import re
import unicodedata

LIGATURES = {
    "\ufb01": "fi",
    "\ufb02": "fl",
    "\ufb00": "ff",
    "\ufb03": "ffi",
    "\ufb04": "ffl",
}

# Every whitespace character except the newline itself (tabs, NBSP, U+3000, ...).
_HSPACE_RE = re.compile(r"[^\S\n]+")
_BLANK_RUN_RE = re.compile(r"\n(?:[^\S\n]*\n){2,}")

# Sentence/clause terminators of the body languages (Latin + CJK full-width forms).
TERMINAL_PUNCTUATION = frozenset(".。．!！?？:：;；")

_FILE_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def _fold_ligatures(s: str) -> str:
    for k, v in LIGATURES.items():
        if k in s:
            s = s.replace(k, v)
    return s


def normalize_line(s: str) -> str:
    if not s:
        return ""
    s = _fold_ligatures(s)
    return _HSPACE_RE.sub(" ", s).strip()


def collapse_blank_lines(text: str) -> str:
    """Collapse any run of two or more blank lines down to a single blank line."""
    return _BLANK_RUN_RE.sub("\n\n", text)


def normalize_text(text: str) -> str:
    """
    Canonical whitespace form of extracted text:
    single spaces inside lines, stripped lines, at most one blank line
    between paragraphs, no leading/trailing blank lines.
    Idempotent.
    """
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = [normalize_line(ln) for ln in text.split("\n")]
    return collapse_blank_lines("\n".join(lines)).strip()


def normalize_lines(lines: list[str]) -> list[str]:
    text = normalize_text("\n".join(lines))
    return text.split("\n") if text else []


def _is_letter(ch: str) -> bool:
    if not ch:
        return False
    return unicodedata.category(ch).startswith("L")


def has_terminal_punctuation(s: str) -> bool:
    return any(ch in TERMINAL_PUNCTUATION for ch in s)


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    i = 0
    while value >= 1024 and i < len(_FILE_SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {_FILE_SIZE_UNITS[i]}"


def format_processing_time(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds - minutes * 60:.1f}s"


# Inline spans later passes must not rewrite: links, code spans, bold text.
_PROTECTED_SPAN_RE = re.compile(r"\[[^\]\n]*\]\([^)\n]*\)|`[^`\n]*`|\*\*[^*\n]+\*\*")


def map_unprotected(line: str, fn) -> str:
    """Apply ``fn`` to the parts of ``line`` outside existing links, code spans and bold spans."""
    out: list[str] = []
    pos = 0
    for m in _PROTECTED_SPAN_RE.finditer(line):
        out.append(fn(line[pos:m.start()]))
        out.append(m.group(0))
        pos = m.end()
    out.append(fn(line[pos:]))
    return "".join(out)
