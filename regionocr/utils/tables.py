"""
Table reconstruction module for the region OCR pipeline.

Provides:
- Row / Table data classes
- Row grouping of OCR line fragments by top-edge proximity
- Mode dispatch between plain transcript and table output
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ..config import MODE_TABLE, MODE_TEXT
from .ocr_text import RecognitionResult, TextFragment

logger = logging.getLogger(__name__)

DEFAULT_ROW_TOLERANCE = 10.0


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class Row:
    """Fragments on one horizontal line, left to right."""
    fragments: Tuple[TextFragment, ...]

    def __post_init__(self):
        if not self.fragments:
            raise ValueError("A row must contain at least one fragment")

    @property
    def cells(self) -> List[str]:
        return [f.text for f in self.fragments]

    def __len__(self) -> int:
        return len(self.fragments)


@dataclass(frozen=True)
class Table:
    """
    Rows read top to bottom.

    Rows are not aligned into columns, so their lengths may differ.
    """
    rows: Tuple[Row, ...]

    @property
    def num_rows(self) -> int:
        return len(self.rows)

    @property
    def max_cols(self) -> int:
        return max((len(r) for r in self.rows), default=0)

    def to_list(self) -> List[List[str]]:
        return [row.cells for row in self.rows]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "num_rows": self.num_rows,
            "max_cols": self.max_cols,
            "rows": self.to_list(),
            "fragments": [[f.to_dict() for f in row.fragments] for row in self.rows]
        }


# ============================================================================
# Row Grouping
# ============================================================================

def _usable(fragments: Iterable[TextFragment]) -> List[TextFragment]:
    """Drop fragments whose box is missing or inverted."""
    usable = []
    for fragment in fragments:
        if fragment.bbox is None:
            logger.warning(f"Skipping fragment without bounding box: {fragment.text!r}")
        elif not fragment.bbox.is_valid:
            logger.warning(
                f"Skipping fragment with inverted bounding box "
                f"{fragment.bbox.to_tuple()}: {fragment.text!r}"
            )
        else:
            usable.append(fragment)
    return usable


def group_rows(
    fragments: Iterable[TextFragment],
    tolerance: float = DEFAULT_ROW_TOLERANCE,
    presort: bool = False
) -> Optional[Table]:
    """
    Group fragments into rows by the top edge of their bounding boxes.

    Fragments are consumed in the order given. The first fragment's top edge
    seeds the row reference; a fragment whose top edge is more than
    ``tolerance`` pixels from the reference closes the current row and
    becomes the reference of the next one. Fragments within tolerance join
    the current row without moving the reference. Each row is then sorted
    stably by left edge.

    Args:
        fragments: Line fragments from the OCR engine, in engine order
        tolerance: Maximum top-edge distance (pixels) for the same row
        presort: Stably sort fragments by top edge before grouping. Fixes
            engines that emit lines out of vertical order.

    Returns:
        Table, or None when there are no usable fragments
    """
    items = _usable(fragments)
    if not items:
        return None

    if presort:
        items = sorted(items, key=lambda f: f.bbox.y0)

    rows: List[List[TextFragment]] = []
    current: List[TextFragment] = []
    reference_y = items[0].bbox.y0

    for fragment in items:
        if abs(fragment.bbox.y0 - reference_y) > tolerance:
            if current:
                rows.append(current)
                current = []
            reference_y = fragment.bbox.y0
        current.append(fragment)

    if current:
        rows.append(current)

    table = Table(rows=tuple(
        Row(fragments=tuple(sorted(row, key=lambda f: f.bbox.x0)))
        for row in rows
    ))

    logger.debug(
        f"Grouped {len(items)} fragments into {table.num_rows} rows "
        f"(tolerance={tolerance}, presort={presort})"
    )
    return table


def reconstruct(
    recognition: RecognitionResult,
    mode: str,
    tolerance: float = DEFAULT_ROW_TOLERANCE,
    presort: bool = False
) -> Union[str, Table, None]:
    """
    Turn an OCR result into the output for the requested mode.

    Args:
        recognition: Transcript and fragments from the OCR adapter
        mode: 'text' returns the transcript untouched; 'table' groups rows
        tolerance: Row tolerance in pixels (table mode)
        presort: Sort by top edge before grouping (table mode)

    Returns:
        Transcript string, Table, or None if table mode found no fragments
    """
    if mode == MODE_TEXT:
        return recognition.transcript
    if mode == MODE_TABLE:
        return group_rows(recognition.fragments, tolerance=tolerance, presort=presort)
    raise ValueError(f"Unknown mode: {mode}")
