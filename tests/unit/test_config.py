"""Tests for UploadConfig and settings validation."""

from __future__ import annotations

import pytest

from imagebed.config import (
    DEFAULT_ALLOWED_FILE_TYPES,
    UploadConfig,
    is_valid_url,
    validate_settings,
)

from conftest import make_config


class TestDefaults:
    def test_default_values(self):
        config = UploadConfig()
        assert config.api_url == ""
        assert config.auth_code == ""
        assert config.upload_channel == "telegram"
        assert config.upload_name_type == "default"
        assert config.return_format == "default"
        assert config.server_compress is True
        assert config.auto_retry is True
        assert config.max_file_size == 10
        assert config.allowed_file_types == DEFAULT_ALLOWED_FILE_TYPES
        assert config.watermark_position == "bottom-right"
        assert config.watermark_size == 24
        assert config.watermark_opacity == 0.7
        assert config.compress_threshold == 2
        assert config.target_size == 1
        assert config.backup_path == "attachments/backup"
        assert config.timeout_seconds is None

    def test_allowlist_not_shared(self):
        a, b = UploadConfig(), UploadConfig()
        a.allowed_file_types.append("tiff")
        assert "tiff" not in b.allowed_file_types
        assert "tiff" not in DEFAULT_ALLOWED_FILE_TYPES

    def test_extensions_normalised(self):
        config = UploadConfig(allowed_file_types=[".PNG", "JpG"])
        assert config.allowed_file_types == ["png", "jpg"]


class TestSettingsObject:
    def test_from_settings_camel_case(self):
        config = UploadConfig.from_settings({
            "apiUrl": "https://img.example.com",
            "authCode": "abc",
            "uploadChannel": "s3",
            "enableWatermark": True,
            "watermarkText": "(c)",
            "maxFileSize": 20,
        })
        assert config.api_url == "https://img.example.com"
        assert config.auth_code == "abc"
        assert config.upload_channel == "s3"
        assert config.enable_watermark is True
        assert config.watermark_text == "(c)"
        assert config.max_file_size == 20

    def test_missing_keys_keep_defaults(self):
        assert UploadConfig.from_settings({}).return_format == "default"

    def test_unknown_keys_ignored(self):
        config = UploadConfig.from_settings({"apiUrl": "https://x.io", "legacyOption": 1})
        assert config.api_url == "https://x.io"

    def test_to_settings_keys(self):
        settings = UploadConfig().to_settings()
        assert settings["apiUrl"] == ""
        assert settings["enableClientCompress"] is False
        assert settings["showUploadProgress"] is True
        assert settings["allowedFileTypes"] == DEFAULT_ALLOWED_FILE_TYPES

    def test_settings_round_trip(self):
        config = make_config(upload_folder="blog", enable_local_backup=True)
        assert UploadConfig.from_settings(config.to_settings()) == config

    def test_to_settings_copies_lists(self):
        config = UploadConfig()
        config.to_settings()["allowedFileTypes"].append("exe")
        assert "exe" not in config.allowed_file_types


class TestRepr:
    def test_auth_code_masked(self):
        text = repr(UploadConfig(auth_code="super-secret-9876"))
        assert "super-secret" not in text
        assert "auth_code='...9876'" in text

    def test_short_auth_code_fully_masked(self):
        assert "auth_code='****'" in repr(UploadConfig(auth_code="abc"))

    def test_other_fields_visible(self):
        assert "api_url='https://img.example.com'" in repr(make_config())


class TestIsValidUrl:
    @pytest.mark.parametrize("url", ["https://img.example.com", "http://localhost:8787"])
    def test_valid(self, url):
        assert is_valid_url(url)

    @pytest.mark.parametrize("url", ["img.example.com", "ftp://x.io", "https://", ""])
    def test_invalid(self, url):
        assert not is_valid_url(url)


class TestValidateSettings:
    def test_valid_config(self):
        assert validate_settings(make_config()) == []

    def test_empty_config(self):
        errors = validate_settings(UploadConfig())
        assert "API URL must not be empty" in errors
        assert "Auth code must not be empty" in errors

    def test_bad_url(self):
        assert validate_settings(make_config(api_url="not a url")) == [
            "API URL is not a valid URL",
        ]

    @pytest.mark.parametrize("size", [0.5, 101])
    def test_max_file_size_range(self, size):
        assert validate_settings(make_config(max_file_size=size)) == [
            "Max file size must be between 1 and 100 MB",
        ]

    def test_enum_fields(self):
        errors = validate_settings(make_config(
            upload_channel="ftp", upload_name_type="random", return_format="xml",
        ))
        assert len(errors) == 3

    def test_compression_rules_only_when_enabled(self):
        config = make_config(compress_threshold=0.01, target_size=50)
        assert validate_settings(config) == []
        config.enable_client_compress = True
        errors = validate_settings(config)
        assert "Compression threshold must be between 0.1 and 20 MB" in errors
        assert "Target size must be between 0.1 and 10 MB" in errors
        assert "Target size must be smaller than the compression threshold" in errors

    def test_target_equal_to_threshold(self):
        config = make_config(enable_client_compress=True, compress_threshold=2, target_size=2)
        assert validate_settings(config) == [
            "Target size must be smaller than the compression threshold",
        ]

    @pytest.mark.parametrize("duration", [0, 31])
    def test_notification_duration(self, duration):
        assert validate_settings(make_config(notification_duration=duration)) == [
            "Notification duration must be between 1 and 30 seconds",
        ]

    def test_empty_allowlist(self):
        assert validate_settings(make_config(allowed_file_types=[])) == [
            "At least one allowed file type is required",
        ]

    def test_watermark_rules(self):
        config = make_config(
            enable_watermark=True,
            watermark_text=" ",
            watermark_size=4,
            watermark_opacity=1.5,
            watermark_position="middle",
        )
        assert len(validate_settings(config)) == 4

    def test_watermark_rules_skipped_when_disabled(self):
        assert validate_settings(make_config(watermark_size=4)) == []

    def test_backup_path_required(self):
        config = make_config(enable_local_backup=True, backup_path="  ")
        assert validate_settings(config) == [
            "Backup path is required when local backup is enabled",
        ]
