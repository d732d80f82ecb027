"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from fetchmd.models.config import (
    DEFAULT_MAX_BYTES,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_TIMEOUT_MS,
    ByteSize,
    FetchBudget,
    FetchmdConfig,
    RenderConfig,
)


class TestByteSize:
    """Tests for ByteSize parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (1024, 1024),
            ("200kb", 200 * 1024),
            ("5mb", 5 * 1024 * 1024),
            ("1GB", 1024**3),
            ("1.5kb", 1536),
            ("512b", 512),
            (" 2 mb ", 2 * 1024 * 1024),
            ("4096", 4096),
        ],
    )
    def test_parse(self, value, expected):
        assert ByteSize._parse(value) == expected

    @pytest.mark.parametrize("value", ["lots", "mb", "-", True, -1, None, 1.5])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            ByteSize._parse(value)

    @pytest.mark.parametrize("value", ["-1kb", "-0.5mb", "-5", " -2 b", "-1gb"])
    def test_negative_strings_rejected(self, value):
        """Test negative sizes fail whether given as int or string."""
        with pytest.raises(ValueError, match="must not be negative"):
            ByteSize._parse(value)

    def test_overflowing_string_rejected(self):
        with pytest.raises(ValueError, match="Invalid number"):
            ByteSize._parse("infkb")


class TestFetchBudget:
    """Tests for FetchBudget."""

    def test_defaults(self):
        budget = FetchBudget()
        assert budget.timeout_ms == DEFAULT_TIMEOUT_MS == 15_000
        assert budget.max_bytes == DEFAULT_MAX_BYTES == 5 * 1024 * 1024
        assert budget.max_redirects == DEFAULT_MAX_REDIRECTS == 5
        assert budget.timeout_seconds == 15.0

    def test_human_readable_size(self):
        assert FetchBudget(max_bytes="500kb").max_bytes == 500 * 1024

    def test_negative_size_string(self):
        """Test a negative size string cannot produce a negative ceiling."""
        with pytest.raises(ValidationError):
            FetchBudget(max_bytes="-1kb")

    def test_frozen(self):
        """Test a budget cannot be changed after construction."""
        budget = FetchBudget()
        with pytest.raises(ValidationError):
            budget.max_redirects = 10

    @pytest.mark.parametrize(
        "kwargs",
        [{"timeout_ms": 0}, {"max_redirects": -1}, {"max_bytes": "huge"}, {"retries": 3}],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            FetchBudget(**kwargs)

    def test_zero_redirects_allowed(self):
        assert FetchBudget(max_redirects=0).max_redirects == 0


class TestFetchmdConfig:
    """Tests for the root configuration."""

    def test_defaults(self):
        config = FetchmdConfig()
        assert config.budget == FetchBudget()
        assert config.render == RenderConfig()
        assert config.raw is False
        assert config.json_output is False
        assert config.render_js is False
        assert config.log_level == "WARNING"

    def test_nested_from_dict(self):
        config = FetchmdConfig(budget={"timeout_ms": 5000, "max_bytes": "1mb"}, render={"timeout_ms": 100})
        assert config.budget.timeout_ms == 5000
        assert config.budget.max_bytes == 1024 * 1024
        assert config.render.timeout_ms == 100

    def test_invalid_wait_until(self):
        with pytest.raises(ValidationError):
            RenderConfig(wait_until="whenever")

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError):
            FetchmdConfig(unknown=True)
