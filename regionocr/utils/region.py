"""
Crop region handling for the region OCR pipeline.

A crop is drawn over the image as it is displayed, which is usually scaled
down from the image's natural size. This module maps such a rectangle back
to native pixel coordinates and slices the matching sub-image.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple
import numpy as np

logger = logging.getLogger(__name__)

UNIT_PIXELS = "px"
UNIT_PERCENT = "%"


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class CropRegion:
    """Rectangle in displayed-image coordinates."""
    x: float
    y: float
    width: float
    height: float
    unit: str = UNIT_PIXELS  # px or %

    def __post_init__(self):
        if self.unit not in (UNIT_PIXELS, UNIT_PERCENT):
            raise ValueError(f"Unknown crop unit: {self.unit}")

    def to_pixels(self, displayed_size: Tuple[float, float]) -> "CropRegion":
        """Resolve a percentage crop against the displayed (width, height)."""
        if self.unit == UNIT_PIXELS:
            return self

        display_w, display_h = displayed_size
        return CropRegion(
            x=self.x * display_w / 100.0,
            y=self.y * display_h / 100.0,
            width=self.width * display_w / 100.0,
            height=self.height * display_h / 100.0,
            unit=UNIT_PIXELS
        )

    def to_dict(self):
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "unit": self.unit
        }


# ============================================================================
# Region Extraction
# ============================================================================

def _empty_like(image: np.ndarray) -> np.ndarray:
    return np.zeros((0, 0) + image.shape[2:], dtype=image.dtype)


def extract_region(
    image: np.ndarray,
    crop: Optional[CropRegion],
    displayed_size: Optional[Tuple[float, float]] = None,
    native_size: Optional[Tuple[int, int]] = None
) -> np.ndarray:
    """
    Extract the pixels under a display-space crop rectangle.

    The crop is scaled by native/displayed size on each axis, truncated to
    whole pixels and clipped to the image bounds.

    Args:
        image: Source image at native resolution
        crop: Crop rectangle in displayed coordinates (None if not yet drawn)
        displayed_size: (width, height) the image is shown at; defaults to
            the native size
        native_size: (width, height) of the source; defaults to the array shape

    Returns:
        Copy of the sub-image, or a zero-size array if the crop is missing or
        resolves to an empty area
    """
    if native_size is None:
        native_size = (image.shape[1], image.shape[0])
    if displayed_size is None:
        displayed_size = native_size

    if crop is None:
        logger.warning("No crop region established")
        return _empty_like(image)

    display_w, display_h = displayed_size
    native_w, native_h = native_size
    if display_w <= 0 or display_h <= 0:
        logger.warning(f"Invalid displayed size: {displayed_size}")
        return _empty_like(image)

    px = crop.to_pixels(displayed_size)
    scale_x = native_w / display_w
    scale_y = native_h / display_h

    x0 = int(px.x * scale_x)
    y0 = int(px.y * scale_y)
    width = int(px.width * scale_x)
    height = int(px.height * scale_y)

    if width <= 0 or height <= 0:
        logger.warning(f"Crop resolves to an empty region: {width}x{height}")
        return _empty_like(image)

    img_h, img_w = image.shape[:2]
    x1 = min(img_w, x0 + width)
    y1 = min(img_h, y0 + height)
    x0 = max(0, x0)
    y0 = max(0, y0)

    if x1 <= x0 or y1 <= y0:
        logger.warning("Crop lies outside the image")
        return _empty_like(image)

    logger.debug(
        f"Extracting region ({x0}, {y0}, {x1}, {y1}) "
        f"scale=({scale_x:.3f}, {scale_y:.3f})"
    )
    return image[y0:y1, x0:x1].copy()


def center_aspect_crop(
    displayed_width: float,
    displayed_height: float,
    aspect: float = 16 / 9,
    width_pct: float = 50.0
) -> CropRegion:
    """
    Build the default selection: a centered percentage crop of a fixed aspect.

    The crop starts at ``width_pct`` of the displayed width; if the height
    needed for ``aspect`` would exceed the image, the height is pinned to
    100% and the width shrinks to match.

    Returns:
        CropRegion in percent units
    """
    if displayed_width <= 0 or displayed_height <= 0:
        raise ValueError(
            f"Invalid displayed size: {displayed_width}x{displayed_height}"
        )

    width = width_pct
    height = (width / 100.0 * displayed_width / aspect) / displayed_height * 100.0

    if height > 100.0:
        height = 100.0
        width = (displayed_height * aspect) / displayed_width * 100.0

    return CropRegion(
        x=(100.0 - width) / 2.0,
        y=(100.0 - height) / 2.0,
        width=width,
        height=height,
        unit=UNIT_PERCENT
    )
