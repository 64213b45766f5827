"""
Recover the block structure of a converted Markdown body.

The detection passes rewrite lines in place; this module reads the result
back into ``Block`` records so callers can inspect what was inferred.
"""
from __future__ import annotations

import re
from collections import Counter

from .models import Block, BlockKind

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*)$")
_ORDERED_RE = re.compile(r"^(\d{1,3})\.\s+(.*)$")
_UNORDERED_RE = re.compile(r"^[-*+]\s+(.*)$")
_TABLE_SEP_RE = re.compile(r"^\|(?:\s*:?-{3,}:?\s*\|)+\s*$")


def _split_table_row(line: str) -> list[str]:
    inner = line.strip()
    if inner.startswith("|"):
        inner = inner[1:]
    if inner.endswith("|") and not inner.endswith("\\|"):
        inner = inner[:-1]
    cells = re.split(r"(?<!\\)\|", inner)
    return [c.strip().replace("\\|", "|") for c in cells]


def parse_blocks(md: str) -> list[Block]:
    blocks: list[Block] = []
    para: list[str] = []

    def flush_para():
        nonlocal para
        if para:
            blocks.append(Block(kind=BlockKind.PARAGRAPH, text=" ".join(para)))
            para = []

    for line in md.splitlines():
        s = line.strip()
        if not s:
            flush_para()
            continue
        m = _HEADING_RE.match(s)
        if m:
            flush_para()
            blocks.append(Block(kind=BlockKind.HEADING, text=m.group(2).strip(), level=len(m.group(1))))
            continue
        if s.startswith("|"):
            flush_para()
            if _TABLE_SEP_RE.match(s):
                # The row before the separator is the header.
                if blocks and blocks[-1].kind == BlockKind.TABLE_ROW:
                    blocks[-1].header = True
                continue
            cols = _split_table_row(s)
            blocks.append(Block(kind=BlockKind.TABLE_ROW, text=s, columns=cols))
            continue
        if s.startswith(">"):
            flush_para()
            blocks.append(Block(kind=BlockKind.QUOTE, text=s[1:].strip()))
            continue
        m = _ORDERED_RE.match(s)
        if m:
            flush_para()
            blocks.append(Block(kind=BlockKind.LIST_ITEM, text=m.group(2), level=int(m.group(1))))
            continue
        m = _UNORDERED_RE.match(s)
        if m:
            flush_para()
            blocks.append(Block(kind=BlockKind.LIST_ITEM, text=m.group(1)))
            continue
        para.append(s)
    flush_para()
    return blocks


def summarize_blocks(blocks: list[Block]) -> dict[str, int]:
    counts = Counter(b.kind.value for b in blocks)
    return {kind.value: counts.get(kind.value, 0) for kind in BlockKind}
