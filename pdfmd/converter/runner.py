import argparse
import logging
import os
import sys

from .config import load_config
from .pipeline import PDFConverter
from .text_utils import format_file_size, format_processing_time

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Heuristic PDF text to Markdown converter")

    # Input/Output
    parser.add_argument("pdf_path", help="Path to input PDF file")
    parser.add_argument("--save_dir", "-o", default="output", help="Directory to save output (default: output)")

    parser.add_argument(
        "--text-only",
        action="store_true",
        help="Use the flat text layer instead of positioned spans",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("PDFMD_LOG_LEVEL", "WARNING"),
        help="Logging level (default: WARNING, or PDFMD_LOG_LEVEL)",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = load_config()
        converter = PDFConverter(cfg)
        result = converter.convert_file(args.pdf_path, text_only=args.text_only)
        out_file = converter.write_result(result, args.pdf_path, args.save_dir)
    except Exception as e:
        logger.debug("Conversion failed", exc_info=True)
        print(f"Error: {e}")
        return 1

    print(f"Pages: {result.pages}")
    print(f"Size: {format_file_size(result.file_size)}")
    print(f"Time: {format_processing_time(result.processing_time)}")
    print(f"Saved to {out_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
