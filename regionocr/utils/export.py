"""
Export module for the region OCR pipeline.

Flattens extraction output to plain text: the transcript as-is, or a table
as tab-separated cells with one row per line.
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

from .tables import Table

logger = logging.getLogger(__name__)

CELL_SEPARATOR = "\t"
ROW_SEPARATOR = "\n"


def table_to_tsv(table: Optional[Table]) -> str:
    """Join cells with tabs and rows with newlines ("" for no table)."""
    if table is None:
        return ""
    return ROW_SEPARATOR.join(CELL_SEPARATOR.join(row.cells) for row in table.rows)


def result_to_text(result: Any) -> str:
    """
    Plain-text form of an extraction result, as it would be copied.

    Args:
        result: ExtractionResult

    Returns:
        TSV for table results, the transcript otherwise
    """
    if result.table is not None:
        return table_to_tsv(result.table)
    return result.text or ""


def export_text(result: Any, output_path: Union[str, Path]) -> Path:
    """
    Write the plain-text form of a result to a file.

    Args:
        result: ExtractionResult
        output_path: Output file path

    Returns:
        Path to the written file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(result_to_text(result))

    logger.debug(f"Saved text: {output_path}")
    return output_path
