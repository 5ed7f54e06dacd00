"""
I/O utilities for the region OCR pipeline.

Handles:
- Image loading from files and in-memory bytes
- JSON serialization
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.gif', '.bmp')


# ============================================================================
# Image Loading
# ============================================================================

def _decode_with_pil(data: bytes) -> np.ndarray:
    """Decode formats OpenCV cannot read (GIF) into a BGR array."""
    import io
    from PIL import Image, UnidentifiedImageError

    try:
        with Image.open(io.BytesIO(data)) as pil_img:
            rgb = np.array(pil_img.convert("RGB"))
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Could not decode image: {e}") from e

    return rgb[:, :, ::-1].copy()


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode an in-memory image (PNG, JPEG, GIF, BMP).

    Args:
        data: Encoded image bytes

    Returns:
        Numpy array in 8-bit BGR format

    Raises:
        ValueError: If the bytes cannot be decoded
    """
    import cv2

    if not data:
        raise ValueError("Empty image data")

    buffer = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(buffer, cv2.IMREAD_COLOR)

    if img is None:
        # OpenCV has no GIF decoder
        img = _decode_with_pil(data)

    return img


def load_image(image_path: Union[str, Path]) -> np.ndarray:
    """
    Load an image from file.

    Args:
        image_path: Path to the image file

    Returns:
        Numpy array representing the image (BGR format if color)

    Raises:
        FileNotFoundError: If image file doesn't exist
        ValueError: If image cannot be decoded
    """
    image_path = Path(image_path)
    if not image_path.exists():
        raise FileNotFoundError(f"Image file not found: {image_path}")

    if image_path.suffix.lower() not in IMAGE_EXTENSIONS:
        logger.warning(f"Unexpected image extension: {image_path.suffix}")

    try:
        img = decode_image(image_path.read_bytes())
    except ValueError as e:
        raise ValueError(f"Could not decode image: {image_path}") from e

    logger.debug(f"Loaded image: {image_path}, shape: {img.shape}")
    return img


# ============================================================================
# JSON Serialization
# ============================================================================

def save_json(
    data: Dict[str, Any],
    output_path: Union[str, Path],
    indent: int = 2,
    ensure_ascii: bool = False
) -> Path:
    """
    Save a result envelope to a JSON file.

    Args:
        data: Plain dict, e.g. ``ExtractionResult.to_dict()``
        output_path: Path to save the JSON file
        indent: Indentation level for pretty printing
        ensure_ascii: If True, escape non-ASCII characters

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii)

    logger.debug(f"Saved JSON: {output_path}")
    return output_path
