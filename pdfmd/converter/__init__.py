from .runner import main
from .pipeline import PDFConverter, convert_pages, convert_text
from .config import ConvertConfig, load_config
from .models import InvalidInputError

__all__ = [
    "PDFConverter",
    "ConvertConfig",
    "InvalidInputError",
    "convert_pages",
    "convert_text",
    "load_config",
    "main",
]
