"""
Unit tests for the Cloudinary storage service and the debug logger.

The SDK uploader is replaced by a fake; nothing leaves the process.

Run with: python -m pytest tests/test_cloudinary_storage.py -v
"""

import asyncio
import base64
import json
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from comic_cover.services.cloudinary_storage import CloudinaryStorageService, decode_base64_payload
from comic_cover.services.errors import InputValidationError, UploadError
from comic_cover.services.logger import ComicCoverLogger, init_logger


class FakeUploader:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def upload(self, file, **options):
        self.calls.append((file, options))
        if self.error:
            raise self.error
        return self.result


def make_service(uploader, cc_logger=None):
    return CloudinaryStorageService(
        cloud_name="demo",
        api_key="key",
        api_secret="secret",
        cc_logger=cc_logger,
        uploader=uploader,
    )


class TestDecodeBase64:
    def test_data_url(self):
        payload = "data:image/jpeg;base64," + base64.b64encode(b"jpeg").decode()
        assert decode_base64_payload(payload) == b"jpeg"

    def test_bare_base64(self):
        assert decode_base64_payload(base64.b64encode(b"raw").decode()) == b"raw"

    def test_invalid_padding(self):
        with pytest.raises(InputValidationError):
            decode_base64_payload("abc")

    def test_non_base64_characters_rejected(self):
        """Stray characters are refused instead of silently dropped."""
        with pytest.raises(InputValidationError):
            decode_base64_payload("not base64!!")
        with pytest.raises(InputValidationError):
            decode_base64_payload("data:image/png;base64,@@@@")


class TestCloudinaryStorageService:
    """Uploads through the SDK with per-call options."""

    def test_upload_base64_options(self):
        uploader = FakeUploader({"secure_url": "https://res.cloudinary.com/x.png", "public_id": "exports/x"})
        service = make_service(uploader)

        result = asyncio.run(service.upload_base64(base64.b64encode(b"png").decode(), folder="exports"))

        file, options = uploader.calls[0]
        assert file.read() == b"png"
        assert options == {"resource_type": "image", "folder": "exports"}
        assert result == {"secure_url": "https://res.cloudinary.com/x.png", "public_id": "exports/x"}

    def test_sdk_error_becomes_upload_error(self):
        service = make_service(FakeUploader(error=RuntimeError("Invalid Signature")))

        with pytest.raises(UploadError, match="Invalid Signature"):
            asyncio.run(service.upload_base64(base64.b64encode(b"png").decode()))

    def test_sdk_error_is_logged(self, tmp_path):
        settings = SimpleNamespace(debug_generation=False, debug_api_calls=False, debug_log_dir=str(tmp_path))
        cc_logger = ComicCoverLogger(settings=settings, log_dir=str(tmp_path))
        errors = []
        cc_logger.error = lambda component, message, error=None: errors.append((component, type(error)))
        service = make_service(FakeUploader(error=RuntimeError("Invalid Signature")), cc_logger=cc_logger)

        with pytest.raises(UploadError):
            asyncio.run(service.upload_base64(base64.b64encode(b"png").decode()))

        assert errors == [("STORAGE", RuntimeError)]

    def test_missing_secure_url(self):
        service = make_service(FakeUploader({"public_id": "x"}))

        with pytest.raises(UploadError, match="no secure_url"):
            asyncio.run(service.upload_base64(base64.b64encode(b"png").decode()))

    def test_upload_is_logged(self, tmp_path):
        settings = SimpleNamespace(debug_generation=False, debug_api_calls=False, debug_log_dir=str(tmp_path))
        cc_logger = ComicCoverLogger(settings=settings, log_dir=str(tmp_path))
        calls = []
        cc_logger.upload_completed = lambda public_id, folder: calls.append((public_id, folder))
        service = make_service(FakeUploader({"secure_url": "https://x", "public_id": "p"}), cc_logger=cc_logger)

        asyncio.run(service.upload_base64(base64.b64encode(b"png").decode()))

        assert calls == [("p", "comic-exports")]


class TestComicCoverLogger:
    """JSONL debug logs are written only when enabled."""

    def test_generation_poll_written_when_enabled(self, tmp_path):
        settings = SimpleNamespace(debug_generation=True, debug_api_calls=False, debug_log_dir=str(tmp_path))
        cc_logger = ComicCoverLogger(settings=settings, log_dir=str(tmp_path))

        cc_logger.generation_poll("pred-1", 3, "processing")

        entry = json.loads(cc_logger.generation_log.read_text().strip().splitlines()[-1])
        assert entry["type"] == "generation_poll"
        assert entry["job_id"] == "pred-1"
        assert entry["attempt"] == 3

    def test_llm_call_skipped_when_disabled(self, tmp_path):
        settings = SimpleNamespace(debug_generation=False, debug_api_calls=False, debug_log_dir=str(tmp_path))
        cc_logger = ComicCoverLogger(settings=settings, log_dir=str(tmp_path))

        cc_logger.llm_api_call("gpt-4o", prompt_tokens=10, completion_tokens=5)

        assert list(tmp_path.glob("api_calls_*.jsonl")) == []

    def test_unwritable_log_reports_error(self, tmp_path, capsys):
        """A failed JSONL write is reported on the terminal and does not raise."""
        settings = SimpleNamespace(debug_generation=True, debug_api_calls=False, debug_log_dir=str(tmp_path))
        cc_logger = ComicCoverLogger(settings=settings, log_dir=str(tmp_path))
        cc_logger.generation_log = tmp_path

        cc_logger.generation_poll("pred-1", 1, "starting")

        out = capsys.readouterr().out
        assert "Error in LOGGER" in out
        assert "Failed to write JSON log" in out

    def test_init_logger_reads_debug_mode(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DEBUG_MODE", "false")

        assert init_logger().debug_mode is False

        monkeypatch.setenv("DEBUG_MODE", "true")
        assert init_logger().debug_mode is True
