"""
Region OCR
==========

Extracts text from a selected region of an image and, optionally, rebuilds
the rows of a table from the recognized lines.

Main components:
- Image binarization
- Crop region mapping from display to native pixels
- Tesseract OCR adapter with scoped engine sessions
- Row reconstruction from line fragments
- Tab-separated export
"""

__version__ = "1.0.0"
