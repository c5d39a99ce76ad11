"""Tests for upload validation."""

from __future__ import annotations

import pytest

from imagebed.errors import (
    ConfigMissingError,
    ErrorCode,
    FileTooLargeError,
    UnsupportedTypeError,
    UploadConfigError,
)
from imagebed.image.validate import validate_file_size, validate_file_type, validate_source
from imagebed.models import BYTES_PER_MB, SourceFile

from conftest import make_config


def blob(name: str, size: int = 16, mime_type: str = "image/png") -> SourceFile:
    return SourceFile(name=name, mime_type=mime_type, data=b"\0" * size)


class TestValidateFileType:
    @pytest.mark.parametrize("name", ["a.png", "a.PNG", "photo.final.JpEg", "x.webp"])
    def test_allowed(self, name):
        assert validate_file_type(name, ["png", "jpeg", "webp"])

    @pytest.mark.parametrize("name", ["a.exe", "png", "archive.png.zip", "noext", "trailing."])
    def test_rejected(self, name):
        assert not validate_file_type(name, ["png", "jpeg", "webp"])


class TestValidateFileSize:
    def test_exactly_at_limit(self):
        assert validate_file_size(10 * BYTES_PER_MB, 10)

    def test_one_byte_over(self):
        assert not validate_file_size(10 * BYTES_PER_MB + 1, 10)

    def test_fractional_limit(self):
        assert validate_file_size(BYTES_PER_MB // 2, 0.5)
        assert not validate_file_size(BYTES_PER_MB // 2 + 1, 0.5)


class TestValidateSource:
    def test_valid_request_passes(self):
        assert validate_source(blob("cat.png"), make_config()) is None

    @pytest.mark.parametrize(
        ("overrides", "missing"),
        [
            ({"api_url": ""}, ["api_url"]),
            ({"auth_code": ""}, ["auth_code"]),
            ({"api_url": "", "auth_code": ""}, ["api_url", "auth_code"]),
        ],
    )
    def test_missing_config(self, overrides, missing):
        with pytest.raises(ConfigMissingError) as exc_info:
            validate_source(blob("cat.png"), make_config(**overrides))
        assert exc_info.value.code == ErrorCode.CONFIG_MISSING
        assert exc_info.value.context["missing"] == missing

    def test_config_checked_before_type(self):
        with pytest.raises(ConfigMissingError):
            validate_source(blob("virus.exe"), make_config(auth_code=""))

    def test_unsupported_type(self):
        with pytest.raises(UnsupportedTypeError) as exc_info:
            validate_source(blob("virus.exe"), make_config())
        err = exc_info.value
        assert err.code == ErrorCode.UNSUPPORTED_TYPE
        assert err.context["extension"] == "exe"
        assert "exe" in err.message

    def test_type_checked_before_size(self):
        config = make_config(max_file_size=1)
        with pytest.raises(UnsupportedTypeError):
            validate_source(blob("big.exe", size=2 * BYTES_PER_MB), config)

    def test_too_large(self):
        config = make_config(max_file_size=1)
        with pytest.raises(FileTooLargeError) as exc_info:
            validate_source(blob("big.png", size=BYTES_PER_MB + 1), config)
        err = exc_info.value
        assert err.code == ErrorCode.FILE_TOO_LARGE
        assert err.context["size_bytes"] == BYTES_PER_MB + 1
        assert err.context["max_bytes"] == BYTES_PER_MB

    def test_custom_allowlist_normalised(self):
        config = make_config(allowed_file_types=[".PNG", "Tiff"])
        validate_source(blob("scan.tiff"), config)
        with pytest.raises(UnsupportedTypeError):
            validate_source(blob("cat.jpg"), config)

    def test_all_validation_errors_share_base(self):
        assert issubclass(ConfigMissingError, UploadConfigError)
        assert issubclass(UnsupportedTypeError, UploadConfigError)
        assert issubclass(FileTooLargeError, UploadConfigError)
