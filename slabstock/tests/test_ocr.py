"""
Tests for the OCR engines.

Tesseract itself is never invoked; pytesseract calls are patched.
"""

from unittest.mock import patch

import pytesseract
import pytest
from PIL import Image

from slabstock.errors import OCRError
from slabstock.ocr import StaticOCREngine, TesseractEngine, _mean_confidence


@pytest.fixture
def image():
    return Image.new("RGB", (64, 32), "white")


class TestStaticEngine:
    def test_returns_fixed_result(self):
        engine = StaticOCREngine("SLAB 00925/6217", confidence=77)
        result = engine.recognize("anything.png")
        assert result.text == "SLAB 00925/6217"
        assert result.confidence == 77
        assert engine.calls == 1


class TestMeanConfidence:
    def test_ignores_non_words(self):
        assert _mean_confidence([-1, "90", 80, "-1"]) == 85

    def test_rounds(self):
        assert _mean_confidence([90, 92, 92]) == 91

    def test_empty(self):
        assert _mean_confidence([]) == 0
        assert _mean_confidence([-1, "junk"]) == 0


class TestTesseractEngine:
    def test_recognize(self, image):
        with patch("slabstock.ocr.pytesseract.image_to_string", return_value="  SLAB 00925/6217\n") as to_string, \
             patch("slabstock.ocr.pytesseract.image_to_data", return_value={"conf": [-1, 92, 88]}):
            result = TesseractEngine(lang="eng").recognize(image)

        assert result.text == "SLAB 00925/6217"
        assert result.confidence == 90
        _, kwargs = to_string.call_args
        assert kwargs["lang"] == "eng"
        assert "tessedit_char_whitelist" in kwargs["config"]

    def test_loads_from_path(self, image, tmp_path):
        path = tmp_path / "capture.png"
        image.save(path)
        with patch("slabstock.ocr.pytesseract.image_to_string", return_value="00925/6217"), \
             patch("slabstock.ocr.pytesseract.image_to_data", return_value={"conf": [75]}):
            result = TesseractEngine().recognize(path)
        assert result.text == "00925/6217"
        assert result.confidence == 75

    def test_missing_image(self, tmp_path):
        with pytest.raises(OCRError, match="Image not found"):
            TesseractEngine().recognize(tmp_path / "nope.png")

    def test_unreadable_image(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_text("not an image")
        with pytest.raises(OCRError, match="Cannot read image"):
            TesseractEngine().recognize(path)

    def test_tesseract_missing(self, image):
        with patch(
            "slabstock.ocr.pytesseract.image_to_string",
            side_effect=pytesseract.TesseractNotFoundError(),
        ):
            with pytest.raises(OCRError, match="Tesseract failed"):
                TesseractEngine().recognize(image)
