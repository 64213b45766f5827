from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Optional

from .block_classifier import starts_with_list_marker

logger = logging.getLogger(__name__)

# First ':' or '：' that is neither a URL scheme separator nor a clock/ratio colon.
_KV_SEPARATOR_RE = re.compile(r"：|(?<!\d):(?!//)|:(?!\d)(?!//)")

# Keys that introduce an annotation, handled by the quote pass instead.
ANNOTATION_KEYS = frozenset(
    {"note", "remark", "warning", "caution", "important", "tip", "注", "注意", "注記", "備考", "警告", "参考"}
)

TABLE_HEADER = ("Key", "Value")


class TableState(Enum):
    NORMAL = "normal"
    ACCUMULATING = "accumulating"


def _escape_md_table_cell(s: str) -> str:
    return s.replace("|", "\\|").strip()


def split_key_value(line: str, max_key_chars: int = 40) -> Optional[tuple[str, str]]:
    """Split ``key<sep>value`` at the first separator, or return None for non key/value lines."""
    s = line.strip()
    if not s or s.startswith(("#", "|", ">")):
        return None
    # Bulleted or numbered pairs belong to the list pass.
    if starts_with_list_marker(s):
        return None
    m = _KV_SEPARATOR_RE.search(s)
    if not m:
        return None
    key = s[: m.start()].strip()
    value = s[m.end():].strip()
    if not key or len(key) > max_key_chars:
        return None
    if key.lower() in ANNOTATION_KEYS:
        return None
    return key, value


def render_key_value_table(rows: list[tuple[str, str]]) -> list[str]:
    md_lines = [
        "| " + " | ".join(TABLE_HEADER) + " |",
        "| " + " | ".join(["---"] * len(TABLE_HEADER)) + " |",
    ]
    for key, value in rows:
        md_lines.append(f"| {_escape_md_table_cell(key)} | {_escape_md_table_cell(value)} |")
    return md_lines


def detect_key_value_tables(lines: list[str], *, min_rows: int = 3, max_key_chars: int = 40) -> list[str]:
    """
    Turn runs of consecutive ``key: value`` lines into two-column tables.

    Key/value lines are buffered while ACCUMULATING. When the run ends (a line
    without a separator, a blank line, or end of input) the buffer becomes a
    table if it holds at least ``min_rows`` rows, otherwise the original lines
    are released unchanged.
    """
    out: list[str] = []
    buf: list[tuple[str, tuple[str, str]]] = []
    state = TableState.NORMAL
    tables = 0

    def leave_accumulating():
        nonlocal buf, tables
        if len(buf) >= min_rows:
            out.extend(render_key_value_table([kv for _, kv in buf]))
            tables += 1
        else:
            out.extend(src for src, _ in buf)
        buf = []

    for line in lines:
        kv = split_key_value(line, max_key_chars=max_key_chars)
        if kv is None:
            if state is TableState.ACCUMULATING:
                leave_accumulating()
                state = TableState.NORMAL
            out.append(line)
            continue
        state = TableState.ACCUMULATING
        buf.append((line, kv))

    if state is TableState.ACCUMULATING:
        leave_accumulating()
    if tables:
        logger.debug("Detected %d key/value tables", tables)
    return out
