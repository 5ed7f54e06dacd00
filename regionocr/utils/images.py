"""
Image preprocessing utilities for the region OCR pipeline.

Provides:
- Binarization (fixed midpoint threshold on the RGB average)
- Grayscale conversion for handing buffers to the OCR engine
"""

import logging
import numpy as np

logger = logging.getLogger(__name__)


# ============================================================================
# Core Preprocessing Functions
# ============================================================================

def normalize(image: np.ndarray, threshold: int = 128) -> np.ndarray:
    """
    Binarize an image to pure black and white to raise OCR contrast.

    Each pixel's red/green/blue values are averaged; averages strictly above
    ``threshold`` become white (255), everything else black (0). A fourth
    (alpha) channel is copied through untouched. Single-channel images are
    thresholded on their own value.

    The input is never modified, and the transform is idempotent.

    Args:
        image: Input image, HxW, HxWx3 or HxWx4 (uint8, 0-255)
        threshold: Midpoint on the 0-255 scale

    Returns:
        New binarized image with the same shape and dtype

    Raises:
        ValueError: If the buffer does not have a supported pixel layout
    """
    if image.ndim == 2:
        binary = np.where(image > threshold, 255, 0).astype(image.dtype)
        logger.debug(f"Binarized single-channel image {image.shape} at {threshold}")
        return binary

    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Unexpected image shape: {image.shape}")

    average = image[:, :, :3].astype(np.float32).mean(axis=2)
    value = np.where(average > threshold, 255, 0).astype(image.dtype)

    binary = image.copy()
    binary[:, :, 0] = value
    binary[:, :, 1] = value
    binary[:, :, 2] = value

    logger.debug(f"Binarized image {image.shape} at {threshold}")
    return binary


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """
    Convert image to grayscale if it's color.

    Args:
        image: Input image (BGR, BGRA or grayscale)

    Returns:
        Grayscale image
    """
    import cv2

    if len(image.shape) == 2:
        return image
    elif len(image.shape) == 3:
        if image.shape[2] == 3:
            return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        elif image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        elif image.shape[2] == 1:
            return image.squeeze(axis=2)

    raise ValueError(f"Unexpected image shape: {image.shape}")
