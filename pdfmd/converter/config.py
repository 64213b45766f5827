from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ConvertConfig:
    # Tuned policy values, not derived ones. Override per call or via env.
    heading_max_chars: int = 80
    heading_max_lowercase_run: int = 3
    numbered_heading_base_level: int = 3
    table_min_rows: int = 3
    table_max_key_chars: int = 40
    line_y_tolerance: float = 0.5
    max_file_size: int = 100 * 1024 * 1024
    provenance: str = "*Converted from PDF*"
    untitled: str = "Untitled"


def _env_number(name: str, default, cast):
    raw = (os.environ.get(name) or "").strip()
    # Users often set env vars with quotes (e.g. cmd.exe: set PDFMD_TABLE_MIN_ROWS="4").
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "\"'":
        raw = raw[1:-1].strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def load_config() -> ConvertConfig:
    base = ConvertConfig()
    return ConvertConfig(
        heading_max_chars=_env_number("PDFMD_HEADING_MAX_CHARS", base.heading_max_chars, int),
        heading_max_lowercase_run=_env_number(
            "PDFMD_HEADING_MAX_LOWERCASE_RUN", base.heading_max_lowercase_run, int
        ),
        numbered_heading_base_level=base.numbered_heading_base_level,
        table_min_rows=_env_number("PDFMD_TABLE_MIN_ROWS", base.table_min_rows, int),
        table_max_key_chars=_env_number("PDFMD_TABLE_MAX_KEY_CHARS", base.table_max_key_chars, int),
        line_y_tolerance=_env_number("PDFMD_LINE_Y_TOLERANCE", base.line_y_tolerance, float),
        max_file_size=_env_number("PDFMD_MAX_FILE_SIZE", base.max_file_size, int),
    )
