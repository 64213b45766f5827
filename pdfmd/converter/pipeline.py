from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from .block_classifier import convert_annotations, linkify_lines, normalize_list_markers
from .config import ConvertConfig
from .heuristics import detect_headings
from .layout_analysis import FragmentLike, assemble_pages, extract_page_fragments, extract_plain_text, split_lines
from .md_analyzer import parse_blocks, summarize_blocks
from .models import ConversionResult, Document, InvalidInputError
from .post_processing import refine_markdown
from .tables import detect_key_value_tables
from .text_utils import normalize_lines

logger = logging.getLogger(__name__)


def detect_structure(lines: list[str], cfg: ConvertConfig) -> list[str]:
    """Run the classification passes in their fixed precedence order."""
    lines = detect_headings(
        lines,
        max_chars=cfg.heading_max_chars,
        base_level=cfg.numbered_heading_base_level,
        max_lowercase_run=cfg.heading_max_lowercase_run,
    )
    lines = detect_key_value_tables(lines, min_rows=cfg.table_min_rows, max_key_chars=cfg.table_max_key_chars)
    lines = normalize_list_markers(lines)
    lines = convert_annotations(lines)
    lines = linkify_lines(lines)
    return lines


def assemble_markdown(title: str, body: str, provenance: str = "*Converted from PDF*") -> str:
    header = f"# {title}\n\n{provenance}\n\n---\n\n"
    if not body:
        return header
    return header + body + "\n"


class PDFConverter:
    def __init__(self, cfg: Optional[ConvertConfig] = None):
        self.cfg = cfg or ConvertConfig()

    def _clean_title(self, title) -> str:
        if not isinstance(title, str):
            raise InvalidInputError(f"title must be a string, got {type(title).__name__}")
        return " ".join(title.split()) or self.cfg.untitled

    def _convert_lines(self, lines: list[str], title: str) -> Document:
        title = self._clean_title(title)
        lines = normalize_lines(lines)
        lines = detect_structure(lines, self.cfg)
        body = refine_markdown("\n".join(lines))
        blocks = parse_blocks(body)
        logger.info("Converted %r: %s", title, summarize_blocks(blocks))
        return Document(
            title=title,
            blocks=blocks,
            markdown=assemble_markdown(title, body, self.cfg.provenance),
        )

    def convert_text_document(self, text: str, title: str) -> Document:
        if not isinstance(text, str):
            raise InvalidInputError(f"text must be a string, got {type(text).__name__}")
        return self._convert_lines(split_lines(text), title)

    def convert_pages_document(self, pages: Sequence[Sequence[FragmentLike]], title: str) -> Document:
        lines = assemble_pages(pages, y_tolerance=self.cfg.line_y_tolerance)
        return self._convert_lines(lines, title)

    def convert_text(self, text: str, title: str) -> str:
        return self.convert_text_document(text, title).markdown

    def convert_pages(self, pages: Sequence[Sequence[FragmentLike]], title: str) -> str:
        return self.convert_pages_document(pages, title).markdown

    def convert_file(self, pdf_path, *, text_only: bool = False) -> ConversionResult:
        pdf_path = Path(pdf_path).resolve()
        if not pdf_path.is_file():
            raise FileNotFoundError(f"PDF not found: {pdf_path}")
        file_size = pdf_path.stat().st_size
        if file_size > self.cfg.max_file_size:
            raise InvalidInputError(
                f"File size {file_size} exceeds limit of {self.cfg.max_file_size}"
            )

        start = time.perf_counter()
        if text_only:
            text, n_pages = extract_plain_text(pdf_path)
            markdown = self.convert_text(text, pdf_path.name)
        else:
            pages = extract_page_fragments(pdf_path)
            n_pages = len(pages)
            markdown = self.convert_pages(pages, pdf_path.name)
        elapsed = time.perf_counter() - start

        logger.info("Converted %s: %d pages in %.2fs", pdf_path.name, n_pages, elapsed)
        return ConversionResult(
            markdown=markdown,
            pages=n_pages,
            processing_time=elapsed,
            file_size=file_size,
        )

    def write_result(self, result: ConversionResult, pdf_path, save_dir) -> Path:
        save_dir = Path(save_dir).resolve()
        save_dir.mkdir(parents=True, exist_ok=True)
        out_file = save_dir / (Path(pdf_path).stem + ".md")
        out_file.write_text(result.markdown, encoding="utf-8")
        return out_file

    def convert(self, pdf_path, save_dir, *, text_only: bool = False) -> Path:
        result = self.convert_file(pdf_path, text_only=text_only)
        return self.write_result(result, pdf_path, save_dir)


def convert_text(text: str, title: str, cfg: Optional[ConvertConfig] = None) -> str:
    return PDFConverter(cfg).convert_text(text, title)


def convert_pages(pages: Sequence[Sequence[FragmentLike]], title: str, cfg: Optional[ConvertConfig] = None) -> str:
    return PDFConverter(cfg).convert_pages(pages, title)
