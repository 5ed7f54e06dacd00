"""
Text OCR module for the region OCR pipeline.

Provides:
- Fragment data contracts (BoundingBox, TextFragment, RecognitionResult)
- The OCR adapter interface the pipeline depends on
- Tesseract implementation with a scoped engine session
"""

import logging
import shlex
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Any
import numpy as np

from ..config import DEFAULT_CHAR_WHITELIST, PSM_AUTO
from ..errors import AdapterError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in image pixel coordinates."""
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def is_valid(self) -> bool:
        return self.x0 <= self.x1 and self.y0 <= self.y1

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x0, self.y0, self.x1, self.y1)


@dataclass(frozen=True)
class TextFragment:
    """One recognized unit of text (a line, as reported by the engine)."""
    text: str
    bbox: Optional[BoundingBox]
    confidence: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "bbox": self.bbox.to_tuple() if self.bbox else None,
            "confidence": self.confidence
        }


@dataclass(frozen=True)
class RecognitionResult:
    """Raw output of one OCR run: transcript plus unordered fragments."""
    transcript: str
    fragments: Tuple[TextFragment, ...] = ()
    engine_used: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RecognitionSettings:
    """
    Per-request engine configuration.

    Frozen so a session's settings cannot change while it recognizes.
    """
    language: str = "eng"
    psm: int = PSM_AUTO
    oem: int = 3
    char_whitelist: Optional[str] = DEFAULT_CHAR_WHITELIST
    preserve_interword_spaces: bool = True
    timeout: float = 0

    def to_config_string(self) -> str:
        """Build the tesseract command line options for these settings."""
        parts = [f"--oem {self.oem}", f"--psm {self.psm}"]
        if self.preserve_interword_spaces:
            parts.append("-c preserve_interword_spaces=1")
        if self.char_whitelist:
            parts.append(
                "-c " + shlex.quote(f"tessedit_char_whitelist={self.char_whitelist}")
            )
        return " ".join(parts)


# ============================================================================
# Adapter Interface
# ============================================================================

class OCRAdapter(ABC):
    """
    Interface for OCR engines used by the pipeline.

    Engines return the literal transcript and line fragments with their
    bounding boxes. They must raise AdapterError on any failure instead of
    returning partial output.
    """

    @abstractmethod
    def recognize(
        self,
        image: np.ndarray,
        settings: RecognitionSettings,
        progress: Optional[ProgressCallback] = None
    ) -> RecognitionResult:
        raise NotImplementedError


def _report(progress: Optional[ProgressCallback], value: float):
    if progress is not None:
        progress(min(1.0, max(0.0, value)))


# ============================================================================
# Tesseract Word Grouping
# ============================================================================

def parse_data_lines(data: Dict[str, List[Any]]) -> List[TextFragment]:
    """
    Group Tesseract word entries into line fragments.

    Words are keyed by (page, block, paragraph, line); each line's text is its
    words joined by single spaces and its box is the union of the word boxes.
    Lines come back in the order Tesseract emitted them.

    Args:
        data: Output of ``pytesseract.image_to_data`` with ``Output.DICT``

    Returns:
        List of TextFragments, one per non-empty line
    """
    lines: Dict[Tuple[int, int, int, int], List[Dict[str, Any]]] = {}

    for i in range(len(data.get('text', []))):
        text = str(data['text'][i]).strip()
        if not text:
            continue

        try:
            conf = float(data['conf'][i])
            key = (
                int(data['page_num'][i]),
                int(data['block_num'][i]),
                int(data['par_num'][i]),
                int(data['line_num'][i]),
            )
            left = int(data['left'][i])
            top = int(data['top'][i])
            width = int(data['width'][i])
            height = int(data['height'][i])
        except (KeyError, IndexError, TypeError, ValueError):
            logger.debug(f"Skipping malformed word entry {i}: {text!r}")
            continue

        if conf < 0:  # -1 means no valid confidence
            continue

        lines.setdefault(key, []).append({
            "text": text,
            "conf": conf / 100.0,
            "box": (left, top, left + width, top + height),
        })

    fragments = []
    for words in lines.values():
        fragments.append(TextFragment(
            text=" ".join(w["text"] for w in words),
            bbox=BoundingBox(
                x0=min(w["box"][0] for w in words),
                y0=min(w["box"][1] for w in words),
                x1=max(w["box"][2] for w in words),
                y1=max(w["box"][3] for w in words),
            ),
            confidence=float(np.mean([w["conf"] for w in words]))
        ))

    return fragments


# ============================================================================
# Tesseract Engine
# ============================================================================

class TesseractSession:
    """An acquired engine bound to one set of recognition settings."""

    def __init__(self, engine: "TesseractEngine", settings: RecognitionSettings):
        self.engine = engine
        self.settings = settings
        self.config = settings.to_config_string()

    def recognize(
        self,
        image: np.ndarray,
        progress: Optional[ProgressCallback] = None
    ) -> RecognitionResult:
        """Recognize text using Tesseract."""
        from PIL import Image
        from .images import to_grayscale

        if image.size == 0:
            raise AdapterError("Cannot recognize an empty image")

        pytesseract = self.engine.pytesseract

        try:
            pil_image = Image.fromarray(to_grayscale(image))
            _report(progress, 0.2)

            transcript = pytesseract.image_to_string(
                pil_image,
                lang=self.settings.language,
                config=self.config,
                timeout=self.settings.timeout
            )
            _report(progress, 0.55)

            data = pytesseract.image_to_data(
                pil_image,
                lang=self.settings.language,
                config=self.config,
                output_type=pytesseract.Output.DICT,
                timeout=self.settings.timeout
            )
        except Exception as e:
            logger.error(f"Tesseract error: {e}")
            raise AdapterError(f"Tesseract recognition failed: {e}") from e
        _report(progress, 0.9)

        fragments = parse_data_lines(data)
        _report(progress, 1.0)

        logger.debug(f"Tesseract returned {len(fragments)} line fragments")
        return RecognitionResult(
            transcript=transcript,
            fragments=tuple(fragments),
            engine_used="tesseract",
            metadata={"psm": self.settings.psm, "language": self.settings.language}
        )


class TesseractEngine(OCRAdapter):
    """
    OCR using Tesseract.

    One instance may be shared between requests. Sessions are serialized by
    an internal lock, and each session carries its own frozen settings.
    """

    def __init__(self, tesseract_cmd: Optional[str] = None):
        try:
            import pytesseract
            self.pytesseract = pytesseract
        except ImportError as e:
            raise AdapterError(
                f"pytesseract not available: {e}\n"
                "Install with: pip install pytesseract"
            ) from e

        self.tesseract_cmd = tesseract_cmd
        self._lock = threading.Lock()

    def _check_engine(self, language: str):
        """Verify the binary runs and the language data is installed."""
        try:
            version = self.pytesseract.get_tesseract_version()
            available = set(self.pytesseract.get_languages(config=""))
        except Exception as e:
            raise AdapterError(
                f"Tesseract not available: {e}\n"
                "Install Tesseract: https://github.com/tesseract-ocr/tesseract"
            ) from e

        missing = [lang for lang in language.split("+") if lang not in available]
        if missing:
            raise AdapterError(f"Tesseract language data not installed: {', '.join(missing)}")

        logger.debug(f"Tesseract {version} ready for '{language}'")

    @contextmanager
    def session(
        self,
        settings: RecognitionSettings,
        progress: Optional[ProgressCallback] = None
    ) -> Iterator[TesseractSession]:
        """
        Acquire the engine for one recognition.

        The lock is held and released on every exit path, including failures
        raised inside the ``with`` block.
        """
        with self._lock:
            _report(progress, 0.0)
            if self.tesseract_cmd:
                # module-level setting in pytesseract, so it is applied per session
                self.pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd
            self._check_engine(settings.language)
            _report(progress, 0.1)
            logger.debug(f"Opened Tesseract session: {settings.to_config_string()}")
            try:
                yield TesseractSession(self, settings)
            finally:
                logger.debug("Closed Tesseract session")

    def recognize(
        self,
        image: np.ndarray,
        settings: RecognitionSettings,
        progress: Optional[ProgressCallback] = None
    ) -> RecognitionResult:
        with self.session(settings, progress) as session:
            return session.recognize(image, progress)
