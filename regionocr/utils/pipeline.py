"""
Extraction pipeline for the region OCR system.

Provides:
- Request / result data model
- Orchestration: crop -> binarize -> OCR -> reconstruct
- The error boundary around the OCR engine
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import numpy as np

from ..config import (
    GENERIC_FAILURE_MESSAGE,
    MODE_TABLE,
    MODE_TEXT,
    MODES,
    PipelineConfig,
    get_config,
)
from ..errors import AdapterError, InputError
from .export import table_to_tsv
from .images import normalize
from .ocr_text import OCRAdapter, ProgressCallback, RecognitionSettings
from .region import CropRegion, extract_region
from .tables import Table, reconstruct

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_EMPTY = "empty"
STATUS_FAILED = "failed"
STATUS_CANCELLED = "cancelled"


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class ExtractionRequest:
    """A single user-initiated extraction."""
    image: Optional[np.ndarray]
    crop: Optional[CropRegion]
    mode: str = MODE_TEXT
    displayed_size: Optional[Tuple[float, float]] = None  # (width, height)


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of one extraction."""
    mode: str
    status: str  # success, empty, failed, cancelled
    text: str = ""
    table: Optional[Table] = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status in (STATUS_SUCCESS, STATUS_EMPTY)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "status": self.status,
            "text": self.text,
            "table": self.table.to_dict() if self.table is not None else None,
            "error": self.error,
            "metadata": self.metadata
        }


# ============================================================================
# Pipeline
# ============================================================================

class ExtractionPipeline:
    """
    Runs one extraction request end to end.

    The pipeline holds no per-request state; a single instance (and its OCR
    engine) can serve any number of sequential requests.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        adapter: Optional[OCRAdapter] = None
    ):
        self.config = config or get_config()
        self._adapter = adapter

    @property
    def adapter(self) -> OCRAdapter:
        if self._adapter is None:
            from .ocr_text import TesseractEngine
            self._adapter = TesseractEngine(tesseract_cmd=self.config.ocr.tesseract_cmd)
        return self._adapter

    def settings_for(self, mode: str) -> RecognitionSettings:
        """Recognition settings for a mode, built fresh for each request."""
        ocr = self.config.ocr
        return RecognitionSettings(
            language=ocr.language,
            psm=ocr.table_psm if mode == MODE_TABLE else ocr.text_psm,
            oem=ocr.oem,
            char_whitelist=ocr.char_whitelist,
            preserve_interword_spaces=ocr.preserve_interword_spaces,
            timeout=ocr.timeout
        )

    def prepare(self, request: ExtractionRequest) -> np.ndarray:
        """
        Validate a request and return the binarized region to recognize.

        Raises:
            InputError: If the image or crop is missing, the mode is unknown,
                or the crop covers no pixels
        """
        if request.mode not in MODES:
            raise InputError(f"Unknown mode: {request.mode!r} (expected one of {MODES})")
        if request.image is None:
            raise InputError("No image selected")
        if request.crop is None:
            raise InputError("No crop region selected")

        region = extract_region(request.image, request.crop, request.displayed_size)
        if region.size == 0:
            raise InputError("Crop region is empty")

        return normalize(region, threshold=self.config.image.binarize_threshold)

    def run(
        self,
        request: ExtractionRequest,
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> ExtractionResult:
        """
        Extract text or a table from the request's crop region.

        Args:
            request: Image, crop and mode
            progress: Optional observer called with values in [0, 1] while
                the engine runs
            cancel_event: If set by the time recognition returns, the
                result is discarded

        Returns:
            ExtractionResult. Engine failures come back as status 'failed'
            with a single user-facing message.

        Raises:
            InputError: Before any OCR is attempted, if the request is invalid
        """
        start_time = time.time()
        binarized = self.prepare(request)
        settings = self.settings_for(request.mode)

        logger.info(
            f"Recognizing {binarized.shape[1]}x{binarized.shape[0]} region "
            f"in {request.mode} mode (psm {settings.psm})"
        )

        try:
            recognition = self.adapter.recognize(binarized, settings, progress)
        except AdapterError as e:
            logger.error(f"Error processing image: {e}")
            return ExtractionResult(
                mode=request.mode,
                status=STATUS_FAILED,
                error=GENERIC_FAILURE_MESSAGE,
                metadata={"detail": str(e)}
            )

        if cancel_event is not None and cancel_event.is_set():
            logger.info("Extraction cancelled; discarding recognition result")
            return ExtractionResult(mode=request.mode, status=STATUS_CANCELLED)

        output = reconstruct(
            recognition,
            request.mode,
            tolerance=self.config.table.row_tolerance,
            presort=self.config.table.presort_by_y
        )

        metadata = {
            "region_width": int(binarized.shape[1]),
            "region_height": int(binarized.shape[0]),
            "fragments": len(recognition.fragments),
            "engine": recognition.engine_used,
            "psm": settings.psm,
            "processing_time_seconds": round(time.time() - start_time, 3)
        }

        if request.mode == MODE_TEXT:
            return ExtractionResult(
                mode=MODE_TEXT,
                status=STATUS_SUCCESS,
                text=output,
                metadata=metadata
            )

        if output is None:
            logger.info("No text fragments found; no table produced")
            return ExtractionResult(mode=MODE_TABLE, status=STATUS_EMPTY, metadata=metadata)

        metadata["rows"] = output.num_rows
        return ExtractionResult(
            mode=MODE_TABLE,
            status=STATUS_SUCCESS,
            text=table_to_tsv(output),
            table=output,
            metadata=metadata
        )
