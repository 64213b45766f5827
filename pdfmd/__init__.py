from .converter import ConvertConfig, InvalidInputError, PDFConverter, convert_pages, convert_text

__all__ = ["ConvertConfig", "InvalidInputError", "PDFConverter", "convert_pages", "convert_text"]
