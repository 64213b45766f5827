import pytest
import fitz

from pdfmd.converter.config import ConvertConfig
from pdfmd.converter.models import BlockKind, InvalidInputError
from pdfmd.converter.pipeline import PDFConverter, assemble_markdown, convert_pages, convert_text

HEADER = "# doc.pdf\n\n*Converted from PDF*\n\n---\n\n"


def test_end_to_end_heading_and_key_value_table():
    out = convert_text("1. Overview\nName：Alice\nAge：30\nCity：Paris\n", "doc.pdf")
    assert out == (
        HEADER
        + "### 1. Overview\n"
        + "\n"
        + "| Key | Value |\n"
        + "| --- | --- |\n"
        + "| Name | Alice |\n"
        + "| Age | 30 |\n"
        + "| City | Paris |\n"
    )


def test_two_key_value_lines_stay_paragraph_lines():
    out = convert_text("Name：Alice\nAge：30", "doc.pdf")
    assert out == HEADER + "Name：Alice\nAge：30\n"


def test_empty_input_gives_header_only_document():
    assert convert_text("", "doc.pdf") == HEADER
    assert convert_pages([], "doc.pdf") == HEADER
    assert convert_pages([[], []], "doc.pdf") == HEADER


def test_blank_title_falls_back():
    assert convert_text("", "  ").startswith("# Untitled\n")


def test_title_whitespace_is_collapsed():
    assert convert_text("", "my\n  report.pdf").startswith("# my report.pdf\n")


def test_assemble_markdown():
    assert assemble_markdown("t", "body") == "# t\n\n*Converted from PDF*\n\n---\n\nbody\n"
    assert assemble_markdown("t", "") == "# t\n\n*Converted from PDF*\n\n---\n\n"


def test_mixed_document():
    src = """第1章 はじめに
This guide explains the setup. Reading it is required.
• Install the tool
• Read config.yaml
③ Run it
Note: Back up your data first
(Optional steps follow)
Contact support@example.com or see https://example.com/help).
"""
    out = convert_text(src, "guide.pdf")
    assert "## 第1章 はじめに" in out
    assert "**required**" in out
    assert "- Install the tool\n- Read `config.yaml`\n3. Run it" in out
    assert "> **Note:** Back up your data first" in out
    assert "> (Optional steps follow)" in out
    assert "[support@example.com](mailto:support@example.com)" in out
    assert "[https://example.com/help](https://example.com/help))." in out


def test_content_order_is_preserved():
    src = "Alpha paragraph.\n2. Beta Section\nGamma paragraph."
    out = convert_text(src, "x")
    assert out.index("Alpha") < out.index("Beta") < out.index("Gamma")


def test_positioned_fragments_end_to_end():
    pages = [
        [
            {"text": "Name：Alice", "x": 50, "y": 680, "height": 10},
            {"text": "1. Overview", "x": 50, "y": 700, "height": 12},
            {"text": "Age：", "x": 50, "y": 660, "height": 10},
            {"text": "30", "x": 80, "y": 660, "height": 10},
            {"text": "City：Paris", "x": 50, "y": 640, "height": 10},
        ]
    ]
    out = convert_pages(pages, "doc.pdf")
    assert "### 1. Overview\n\n| Key | Value |" in out
    assert "| Age | 30 |" in out


def test_document_exposes_blocks():
    doc = PDFConverter().convert_text_document("1. Overview\nName：Alice\nAge：30\nCity：Paris", "doc.pdf")
    assert doc.title == "doc.pdf"
    assert doc.blocks[0].kind == BlockKind.HEADING
    assert [b.columns for b in doc.blocks if b.kind == BlockKind.TABLE_ROW and not b.header] == [
        ["Name", "Alice"],
        ["Age", "30"],
        ["City", "Paris"],
    ]


def test_config_thresholds_are_honoured():
    cfg = ConvertConfig(table_min_rows=2)
    out = PDFConverter(cfg).convert_text("Name：Alice\nAge：30", "doc.pdf")
    assert "| Name | Alice |" in out


def test_contract_violations_raise_invalid_input():
    with pytest.raises(InvalidInputError):
        convert_text(None, "doc.pdf")
    with pytest.raises(InvalidInputError):
        convert_text("text", None)
    with pytest.raises(InvalidInputError):
        convert_pages([[{"text": "x", "x": 0, "y": 1, "height": -2}]], "doc.pdf")


@pytest.fixture
def sample_pdf(tmp_path):
    """Generates a simple PDF for testing."""
    pdf_path = tmp_path / "sample.pdf"
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((50, 60), "1. Overview", fontsize=14)
    page.insert_text((50, 100), "Name: Alice", fontsize=11)
    page.insert_text((50, 120), "Age: 30", fontsize=11)
    page.insert_text((50, 140), "City: Paris", fontsize=11)
    doc.save(str(pdf_path))
    doc.close()
    return pdf_path


@pytest.mark.parametrize("text_only", [False, True])
def test_convert_file(sample_pdf, text_only):
    result = PDFConverter().convert_file(sample_pdf, text_only=text_only)
    assert result.pages == 1
    assert result.file_size == sample_pdf.stat().st_size
    assert result.markdown.startswith("# sample.pdf\n")
    assert "### 1. Overview" in result.markdown
    assert "| Name | Alice |" in result.markdown


def test_convert_writes_markdown_file(sample_pdf, tmp_path):
    out_file = PDFConverter().convert(sample_pdf, tmp_path / "output")
    assert out_file.name == "sample.md"
    assert "| City | Paris |" in out_file.read_text(encoding="utf-8")


def test_convert_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        PDFConverter().convert_file(tmp_path / "non_existent.pdf")


def test_convert_file_size_limit(sample_pdf):
    with pytest.raises(InvalidInputError):
        PDFConverter(ConvertConfig(max_file_size=10)).convert_file(sample_pdf)


def test_mixed_font_line_keeps_reading_order(tmp_path):
    pdf_path = tmp_path / "mixed.pdf"
    doc = fitz.open()
    page = doc.new_page()
    x = 50.0
    for text, size in (("Total ", 11), ("BIG", 18), (" end", 9)):
        page.insert_text((x, 100), text, fontsize=size)
        x += fitz.get_text_length(text, fontsize=size)
    doc.save(str(pdf_path))
    doc.close()

    result = PDFConverter().convert_file(pdf_path)
    body = result.markdown.split("---\n\n", 1)[1]
    line = next(ln for ln in body.splitlines() if "Total" in ln)
    assert line.index("Total") < line.index("BIG") < line.index("end")


def test_bulleted_key_value_lines_stay_a_list():
    out = convert_text("• Name: Alice\n• Age: 30\n• City: Paris", "doc.pdf")
    assert out == HEADER + "- Name: Alice\n- Age: 30\n- City: Paris\n"
    assert "|" not in out


def test_numbered_sequence_is_a_list_not_headings():
    out = convert_text("Steps\n1. Install the tool\n2. Run it\n3. Check output", "doc.pdf")
    assert out == HEADER + "#### Steps\n\n1. Install the tool\n2. Run it\n3. Check output\n"
