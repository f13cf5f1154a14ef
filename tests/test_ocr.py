"""Tests for OCR wrapper."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from medianote.config import Settings
from medianote.errors import OcrError, OcrUnavailableError
from medianote.ocr import run_ocr


@pytest.fixture
def image(tmp_path: Path) -> Path:
    path = tmp_path / "frame.png"
    path.write_bytes(b"png")
    return path


class TestRunOcr:
    def test_missing_binary(self, image):
        with patch("medianote.ocr.shutil.which", return_value=None):
            with pytest.raises(OcrUnavailableError):
                run_ocr(image, Settings())

    def test_missing_image(self, tmp_path: Path):
        with pytest.raises(OcrError):
            run_ocr(tmp_path / "nope.png", Settings())

    def test_reads_stdout(self, image):
        done = subprocess.CompletedProcess(args=[], returncode=0, stdout="  Slide 3\n\n", stderr="")
        with patch("medianote.ocr.shutil.which", return_value="/usr/bin/tesseract"), \
                patch("medianote.ocr.subprocess.run", return_value=done) as run:
            assert run_ocr(image, Settings(ocr_language="deu")) == "Slide 3"
        cmd = run.call_args.args[0]
        assert cmd == ["/usr/bin/tesseract", str(image), "stdout", "-l", "deu"]

    def test_nonzero_exit(self, image):
        done = subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="bad image")
        with patch("medianote.ocr.shutil.which", return_value="/usr/bin/tesseract"), \
                patch("medianote.ocr.subprocess.run", return_value=done):
            with pytest.raises(OcrError, match="bad image"):
                run_ocr(image, Settings())

    def test_timeout(self, image):
        with patch("medianote.ocr.shutil.which", return_value="/usr/bin/tesseract"), \
                patch("medianote.ocr.subprocess.run", side_effect=subprocess.TimeoutExpired("t", 60)):
            with pytest.raises(OcrError, match="timed out"):
                run_ocr(image, Settings())
