#!/usr/bin/env python
"""
Command-line interface for the Region OCR pipeline.

Usage:
    regionocr --input <image> [--crop X,Y,W,H] [--mode text|table] [options]

Examples:
    # Text from the default centered selection
    regionocr --input scan.png

    # Table from a crop drawn on an 800x600 preview of the image
    regionocr --input scan.png --display-size 800x600 --crop 40,120,500,260 --mode table

    # Save the tab-separated table and the full result envelope
    regionocr --input scan.png --crop 10,10,80,60 --crop-unit % --mode table \\
        --output table.tsv --json result.json
"""

import argparse
import logging
import sys
from typing import Optional, Tuple

from . import __version__

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("regionocr")


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Region OCR - Extract text or a table from part of an image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Extract text from the default centered 16:9 selection:
    regionocr --input scan.png

  Extract a table from a crop measured on a scaled preview:
    regionocr --input scan.png --display-size 800x600 --crop 40,120,500,260 --mode table

  Use a percentage crop and keep rows sorted top to bottom:
    regionocr --input scan.png --crop 10,10,80,60 --crop-unit % --mode table --sort-rows
        """
    )

    # Required arguments
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Input image (PNG, JPEG, GIF, BMP)"
    )

    # Optional arguments
    parser.add_argument(
        "--crop", "-c",
        default=None,
        help="Crop rectangle X,Y,WIDTH,HEIGHT in display coordinates "
             "(default: centered 16:9 selection at 50%% width)"
    )

    parser.add_argument(
        "--crop-unit",
        choices=["px", "%"],
        default="px",
        help="Unit of --crop values (default: px)"
    )

    parser.add_argument(
        "--display-size",
        default=None,
        help="WIDTHxHEIGHT the image was displayed at when the crop was drawn "
             "(default: native size)"
    )

    parser.add_argument(
        "--mode", "-m",
        choices=["text", "table"],
        default="text",
        help="Output mode (default: text)"
    )

    parser.add_argument(
        "--tolerance",
        type=float,
        default=None,
        help="Row tolerance in pixels for table mode (default: 10)"
    )

    parser.add_argument(
        "--sort-rows",
        action="store_true",
        help="Sort lines top to bottom before grouping table rows"
    )

    parser.add_argument(
        "--lang",
        default=None,
        help="Tesseract language(s), e.g. 'eng' or 'eng+deu' (default: eng)"
    )

    parser.add_argument(
        "--whitelist",
        default=None,
        help="Characters Tesseract may output (default: printable ASCII subset)"
    )

    parser.add_argument(
        "--tesseract-cmd",
        default=None,
        help="Path to the tesseract binary"
    )

    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Write the text / tab-separated table to this file instead of stdout"
    )

    parser.add_argument(
        "--json",
        default=None,
        help="Also write the full result as JSON to this file"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def parse_crop(crop_str: str, unit: str = "px"):
    """Parse 'X,Y,WIDTH,HEIGHT' into a CropRegion."""
    from .utils.region import CropRegion

    parts = [p.strip() for p in crop_str.split(",")]
    if len(parts) != 4:
        raise ValueError(f"Crop must be X,Y,WIDTH,HEIGHT, got: {crop_str!r}")

    x, y, width, height = (float(p) for p in parts)
    return CropRegion(x=x, y=y, width=width, height=height, unit=unit)


def parse_size(size_str: str) -> Tuple[float, float]:
    """Parse 'WIDTHxHEIGHT' into a (width, height) tuple."""
    parts = size_str.lower().split("x")
    if len(parts) != 2:
        raise ValueError(f"Size must be WIDTHxHEIGHT, got: {size_str!r}")

    width, height = float(parts[0]), float(parts[1])
    if width <= 0 or height <= 0:
        raise ValueError(f"Size must be positive, got: {size_str!r}")
    return width, height


def check_dependencies() -> bool:
    """Check if required dependencies are available."""
    missing = []

    try:
        import cv2
    except ImportError:
        missing.append("opencv-python")

    try:
        import numpy
    except ImportError:
        missing.append("numpy")

    try:
        import PIL
    except ImportError:
        missing.append("Pillow")

    try:
        import pytesseract
        # Test if tesseract is actually installed
        try:
            pytesseract.get_tesseract_version()
        except Exception:
            missing.append("tesseract-ocr (system package)")
    except ImportError:
        missing.append("pytesseract")

    if missing:
        logger.error("Missing required dependencies:")
        for dep in missing:
            logger.error(f"  - {dep}")
        logger.error("\nInstall with: pip install -e .")
        return False

    return True


def build_config(args):
    """Default configuration with command-line overrides applied."""
    from .config import get_config

    config = get_config()
    if args.lang:
        config.ocr.language = args.lang
    if args.whitelist is not None:
        config.ocr.char_whitelist = args.whitelist
    if args.tesseract_cmd:
        config.ocr.tesseract_cmd = args.tesseract_cmd
    if args.tolerance is not None:
        config.table.row_tolerance = args.tolerance
    if args.sort_rows:
        config.table.presort_by_y = True
    return config


def run_extraction(args, pipeline=None) -> int:
    """Run one extraction and write its output."""
    from .errors import InputError
    from .utils.export import export_text, result_to_text
    from .utils.io import load_image, save_json
    from .utils.pipeline import ExtractionPipeline, ExtractionRequest, STATUS_FAILED, STATUS_EMPTY
    from .utils.region import center_aspect_crop

    try:
        image = load_image(args.input)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 2

    native_size = (image.shape[1], image.shape[0])

    try:
        displayed_size = parse_size(args.display_size) if args.display_size else native_size
        if args.crop:
            crop = parse_crop(args.crop, args.crop_unit)
        else:
            crop = center_aspect_crop(*displayed_size)
            logger.info(f"No crop given, using default selection: {crop}")
    except ValueError as e:
        logger.error(str(e))
        return 2

    if pipeline is None:
        pipeline = ExtractionPipeline(config=build_config(args))

    request = ExtractionRequest(
        image=image,
        crop=crop,
        mode=args.mode,
        displayed_size=displayed_size
    )

    def report_progress(value: float):
        logger.debug(f"Processing... {int(value * 100)}%")

    try:
        result = pipeline.run(request, progress=report_progress)
    except InputError as e:
        logger.error(str(e))
        return 2

    if args.json:
        save_json(result.to_dict(), args.json)
        logger.info(f"Saved JSON: {args.json}")

    if result.status == STATUS_FAILED:
        logger.error(result.error)
        return 1

    if result.status == STATUS_EMPTY:
        logger.warning("No table found in the selected region")
        return 0

    if args.output:
        path = export_text(result, args.output)
        logger.info(f"Saved {args.mode}: {path}")
    else:
        print(result_to_text(result))

    return 0


def main(argv: Optional[list] = None):
    """Main entry point."""
    parser = setup_argparser()
    args = parser.parse_args(argv)

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    # Check dependencies
    if not check_dependencies():
        sys.exit(1)

    try:
        exit_code = run_extraction(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.verbose:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
