"""
OCR engines - Bridge to the text recognizer.

The engine pattern lets us swap implementations (tesseract in production,
a canned engine in tests) without changing the scan flow. The core only
needs recognize(image) -> OCRResult(text, confidence).
"""

import logging
import shlex
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

import pytesseract
from PIL import Image

from .config import OCR_CHAR_WHITELIST, settings
from .errors import OCRError
from .models import OCRResult

logger = logging.getLogger(__name__)

ImageInput = Union[str, Path, Image.Image]


class OCREngine(ABC):
    """
    Abstract interface for text recognition.

    Implementations read one captured image and report the text found
    with an overall confidence from 0 to 100.
    """

    @abstractmethod
    def recognize(self, image: ImageInput) -> OCRResult:
        """
        Recognize text in a single image.

        Args:
            image: Path to an image file or an already-loaded PIL image

        Returns:
            OCRResult with stripped text and rounded confidence
        """
        pass


class StaticOCREngine(OCREngine):
    """Returns a fixed result for every image. Used in tests and dry runs."""

    def __init__(self, text: str, confidence: float = 0):
        self._result = OCRResult(text=text, confidence=confidence)
        self.calls = 0

    def recognize(self, image: ImageInput) -> OCRResult:
        self.calls += 1
        return self._result


class TesseractEngine(OCREngine):
    """
    Tesseract via pytesseract, restricted to the slab label alphabet.

    Text comes from image_to_string; confidence is the mean of the
    per-word confidences tesseract reports (it uses -1 for non-words).
    """

    def __init__(
        self,
        lang: Optional[str] = None,
        whitelist: str = OCR_CHAR_WHITELIST,
        tesseract_cmd: Optional[str] = None,
    ):
        self.lang = lang or settings.OCR_LANG
        self.config = f"-c tessedit_char_whitelist={shlex.quote(whitelist)}"
        cmd = tesseract_cmd or settings.TESSERACT_CMD
        if cmd:
            pytesseract.pytesseract.tesseract_cmd = cmd

    def _load(self, image: ImageInput) -> Image.Image:
        if isinstance(image, Image.Image):
            return image
        path = Path(image)
        if not path.exists():
            raise OCRError(f"Image not found: {path}")
        try:
            return Image.open(str(path))
        except OSError as e:
            raise OCRError(f"Cannot read image {path}: {e}") from e

    def recognize(self, image: ImageInput) -> OCRResult:
        img = self._load(image)
        try:
            text = pytesseract.image_to_string(img, lang=self.lang, config=self.config)
            data = pytesseract.image_to_data(
                img, lang=self.lang, config=self.config,
                output_type=pytesseract.Output.DICT,
            )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
            raise OCRError(f"Tesseract failed: {e}") from e

        confidence = _mean_confidence(data.get("conf", []))
        logger.debug("OCR read %d chars at %d%% confidence", len(text.strip()), confidence)
        return OCRResult(text=text.strip(), confidence=confidence)


def _mean_confidence(values) -> int:
    scores = []
    for value in values:
        try:
            score = float(value)
        except (TypeError, ValueError):
            continue
        if score >= 0:
            scores.append(score)
    if not scores:
        return 0
    return round(sum(scores) / len(scores))
