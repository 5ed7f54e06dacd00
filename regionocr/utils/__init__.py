"""
Utility modules for the region OCR pipeline.
"""

from .io import load_image, decode_image, save_json
from .images import normalize, to_grayscale
from .region import CropRegion, extract_region, center_aspect_crop
from .ocr_text import (
    BoundingBox, TextFragment, RecognitionResult, RecognitionSettings,
    OCRAdapter, TesseractEngine,
)
from .tables import Row, Table, group_rows, reconstruct
from .export import table_to_tsv, result_to_text, export_text
from .pipeline import ExtractionPipeline, ExtractionRequest, ExtractionResult

__all__ = [
    # IO
    "load_image", "decode_image", "save_json",
    # Images
    "normalize", "to_grayscale",
    # Region
    "CropRegion", "extract_region", "center_aspect_crop",
    # OCR
    "BoundingBox", "TextFragment", "RecognitionResult", "RecognitionSettings",
    "OCRAdapter", "TesseractEngine",
    # Tables
    "Row", "Table", "group_rows", "reconstruct",
    # Export
    "table_to_tsv", "result_to_text", "export_text",
    # Pipeline
    "ExtractionPipeline", "ExtractionRequest", "ExtractionResult",
]
