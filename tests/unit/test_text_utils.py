from pdfmd.converter.text_utils import (
    collapse_blank_lines,
    format_file_size,
    format_processing_time,
    normalize_line,
    normalize_text,
)


def test_normalize_line_collapses_horizontal_whitespace():
    assert normalize_line("  Hello\u00a0\t  World\u3000again  ") == "Hello World again"


def test_ligature_replacement():
    assert normalize_line("\ufb01eld \ufb02ow") == "field flow"


def test_normalize_text_collapses_blank_runs_and_trims():
    src = "\n\n  Title  \n\n\n\nFirst   para\r\nline two\n\n\n\n\nSecond\n\n"
    assert normalize_text(src) == "Title\n\nFirst para\nline two\n\nSecond"


def test_normalize_text_keeps_single_blank_line():
    assert normalize_text("a\n\nb") == "a\n\nb"


def test_normalize_text_is_idempotent():
    src = " A  b \n\n\n\n c\t\td \r\n\r\n\r\n e "
    once = normalize_text(src)
    assert normalize_text(once) == once


def test_normalize_text_empty():
    assert normalize_text("") == ""
    assert normalize_text(" \n\n \t ") == ""


def test_normalize_does_not_fold_circled_numbers_or_fullwidth_colon():
    assert normalize_text("③ 項目：値") == "③ 項目：値"


def test_collapse_blank_lines():
    assert collapse_blank_lines("a\n\n\n\nb\n\nc") == "a\n\nb\n\nc"


def test_format_file_size():
    assert format_file_size(0) == "0 Bytes"
    assert format_file_size(500) == "500 Bytes"
    assert format_file_size(1536) == "1.5 KB"
    assert format_file_size(100 * 1024 * 1024) == "100 MB"


def test_format_processing_time():
    assert format_processing_time(12.34) == "12.3s"
    assert format_processing_time(125) == "2m 5.0s"
