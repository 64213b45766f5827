from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Union

from pydantic import ValidationError

try:
    import fitz
except ImportError:
    fitz = None

from .models import InvalidInputError, RawFragment

FragmentLike = Union[RawFragment, Mapping]


def _coerce_fragment(frag: FragmentLike) -> RawFragment:
    if isinstance(frag, RawFragment):
        return frag
    try:
        return RawFragment.model_validate(frag)
    except ValidationError as e:
        raise InvalidInputError(f"invalid text fragment: {e}") from e


def assemble_lines(fragments: Sequence[FragmentLike], y_tolerance: float = 0.5) -> list[str]:
    """
    Group one page of positioned fragments into reading-order lines.

    PDF space has its origin at the bottom of the page, so larger y comes
    first. A fragment opens a new line when it sits more than
    ``height * y_tolerance`` away from the previous fragment's baseline.
    Within a line fragments are put in x order and joined without a
    separator, since they carry their own spacing.
    """
    if isinstance(fragments, (str, bytes)) or not isinstance(fragments, Sequence):
        raise InvalidInputError("a page must be a sequence of fragments")
    frags = [_coerce_fragment(f) for f in fragments]
    frags.sort(key=lambda f: -f.y)

    lines: list[str] = []
    cur: list[RawFragment] = []
    last_y = None

    def flush():
        nonlocal cur
        # Mixed font sizes put spans of one visual line at slightly different y.
        cur.sort(key=lambda f: f.x)
        text = "".join(f.text for f in cur)
        if text.strip():
            lines.append(text)
        cur = []

    for f in frags:
        if last_y is not None and abs(f.y - last_y) > f.height * y_tolerance:
            flush()
        cur.append(f)
        last_y = f.y
    flush()
    return lines


def assemble_pages(pages: Sequence[Sequence[FragmentLike]], y_tolerance: float = 0.5) -> list[str]:
    """Assemble every page and join them with one blank line. Empty pages add nothing."""
    if isinstance(pages, (str, bytes)) or not isinstance(pages, Sequence):
        raise InvalidInputError("pages must be a sequence of fragment sequences")
    out: list[str] = []
    for page in pages:
        page_lines = assemble_lines(page, y_tolerance=y_tolerance)
        if not page_lines:
            continue
        if out:
            out.append("")
        out.extend(page_lines)
    return out


def split_lines(text: str) -> list[str]:
    # Flat-text variant: the extractor already broke the text into lines.
    return text.split("\n") if text else []


def _page_fragments(page) -> list[RawFragment]:
    H = float(page.rect.height)
    frags: list[RawFragment] = []
    d = page.get_text("dict")
    for b in d.get("blocks", []):
        for l in b.get("lines", []) or []:
            for s in l.get("spans", []) or []:
                t = s.get("text") or ""
                if not t:
                    continue
                x0, y0, x1, y1 = s["bbox"]
                # MuPDF uses a top-left origin; flip the span bottom into PDF space.
                frags.append(
                    RawFragment(
                        text=t,
                        x=float(x0),
                        y=H - float(y1),
                        width=max(0.0, float(x1) - float(x0)),
                        height=max(0.0, float(y1) - float(y0)),
                    )
                )
    return frags


def extract_page_fragments(pdf_path: Path) -> list[list[RawFragment]]:
    """Positioned spans for every page of a PDF, via PyMuPDF."""
    if fitz is None:
        raise ImportError("PyMuPDF (fitz) not installed.")
    with fitz.open(pdf_path) as doc:
        return [_page_fragments(page) for page in doc]


def extract_plain_text(pdf_path: Path) -> tuple[str, int]:
    """Flat text of a PDF (page texts joined by blank lines) and its page count."""
    if fitz is None:
        raise ImportError("PyMuPDF (fitz) not installed.")
    with fitz.open(pdf_path) as doc:
        texts = [(page.get_text("text") or "").strip() for page in doc]
        return "\n\n".join(t for t in texts if t), len(texts)
