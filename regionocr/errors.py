"""
Exceptions raised by the region OCR pipeline.
"""


class RegionOCRError(Exception):
    """Base class for all pipeline errors."""


class InputError(RegionOCRError):
    """No image, no crop region, or a crop that resolves to nothing."""


class AdapterError(RegionOCRError):
    """The OCR engine failed to start, load its language data, or recognize."""
