"""
Configuration and constants for the region OCR pipeline.

This module provides:
- Global configuration settings
- Tesseract recognition parameters
- Table reconstruction parameters
"""

import os
from dataclasses import dataclass, field
from typing import Optional
import logging

logger = logging.getLogger("regionocr")


# ============================================================================
# Constants
# ============================================================================

# Characters Tesseract is allowed to emit. Everything printable on a US
# keyboard except the backtick and the pipe.
DEFAULT_CHAR_WHITELIST = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
    ".,;:!?@#$%^&*()[]{}<>\"'/\\-_+=~ "
)

# Tesseract page segmentation modes
PSM_AUTO = 3           # fully automatic page segmentation (columns, paragraphs)
PSM_UNIFORM_BLOCK = 6  # assume a single uniform block of text

MODE_TEXT = "text"
MODE_TABLE = "table"
MODES = (MODE_TEXT, MODE_TABLE)

GENERIC_FAILURE_MESSAGE = "Error processing image. Please try again."


# ============================================================================
# Processing Configuration
# ============================================================================

@dataclass
class ImageConfig:
    """Image normalization configuration."""
    binarize_threshold: int = 128  # average RGB strictly above this -> white


@dataclass
class OCRConfig:
    """OCR configuration."""
    language: str = "eng"
    oem: int = 3
    text_psm: int = PSM_AUTO
    table_psm: int = PSM_UNIFORM_BLOCK
    char_whitelist: str = DEFAULT_CHAR_WHITELIST
    preserve_interword_spaces: bool = True
    timeout: float = 0  # seconds, 0 = no timeout
    # Path to the tesseract binary when it is not on PATH
    tesseract_cmd: Optional[str] = None


@dataclass
class TableConfig:
    """Table reconstruction configuration."""
    row_tolerance: float = 10.0  # pixels between top edges still on one row
    # Sort fragments by their top edge before grouping rows
    presort_by_y: bool = False


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    image: ImageConfig = field(default_factory=ImageConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    table: TableConfig = field(default_factory=TableConfig)

    debug_mode: bool = False


# ============================================================================
# Default Configuration Instance
# ============================================================================

def get_config() -> PipelineConfig:
    """Get the default pipeline configuration with environment overrides."""
    config = PipelineConfig()

    if os.environ.get("REGIONOCR_DEBUG", "").lower() == "true":
        config.debug_mode = True

    language = os.environ.get("REGIONOCR_LANG")
    if language:
        config.ocr.language = language

    tesseract_cmd = os.environ.get("TESSERACT_CMD")
    if tesseract_cmd:
        config.ocr.tesseract_cmd = tesseract_cmd

    tolerance = os.environ.get("REGIONOCR_ROW_TOLERANCE")
    if tolerance:
        try:
            config.table.row_tolerance = float(tolerance)
        except ValueError:
            logger.warning(f"Ignoring invalid REGIONOCR_ROW_TOLERANCE: {tolerance!r}")

    return config
