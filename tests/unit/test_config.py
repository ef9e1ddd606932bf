"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from imgconv.config import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        config = Settings()

        assert config.default_quality == 85
        assert config.atomic_writes is True
        assert config.report_skipped is False
        assert config.batch_workers == 1
        assert config.log_level == "WARNING"
        assert config.logging_enabled is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("IMGCONV_DEFAULT_QUALITY", "60")
        monkeypatch.setenv("IMGCONV_BATCH_WORKERS", "4")
        monkeypatch.setenv("IMGCONV_REPORT_SKIPPED", "true")

        config = Settings()

        assert config.default_quality == 60
        assert config.batch_workers == 4
        assert config.report_skipped is True

    @pytest.mark.parametrize("raw,expected", [("150", 100), ("-3", 0)])
    def test_quality_is_clamped(self, monkeypatch, raw, expected):
        monkeypatch.setenv("IMGCONV_DEFAULT_QUALITY", raw)
        assert Settings().default_quality == expected

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    @pytest.mark.parametrize("workers", [0, 33])
    def test_batch_workers_bounds(self, workers):
        with pytest.raises(ValidationError):
            Settings(batch_workers=workers)

    def test_png_compress_level_bounds(self):
        with pytest.raises(ValidationError):
            Settings(png_compress_level=10)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
