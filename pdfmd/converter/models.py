from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class InvalidInputError(ValueError):
    """Raised when the caller breaks the converter's input contract."""


class RawFragment(BaseModel):
    """One positioned run of text as emitted by the PDF extractor (PDF space, origin bottom-left)."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    text: str
    x: float
    y: float
    width: float = Field(default=0.0, ge=0)
    height: float = Field(ge=0)


class BlockKind(str, Enum):
    HEADING = "heading"
    LIST_ITEM = "list_item"
    TABLE_ROW = "table_row"
    QUOTE = "quote"
    PARAGRAPH = "paragraph"


class Block(BaseModel):
    kind: BlockKind
    text: str = ""
    level: Optional[int] = None  # heading level, or the number of an ordered list item
    columns: list[str] = Field(default_factory=list)
    header: bool = False  # table header row


class Document(BaseModel):
    title: str
    blocks: list[Block] = Field(default_factory=list)
    markdown: str


class ConversionResult(BaseModel):
    markdown: str
    pages: int = Field(ge=0)
    processing_time: float = Field(ge=0)
    file_size: int = Field(ge=0)
