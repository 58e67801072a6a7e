"""Unit tests for URL validation and platform detection."""

import pytest

from download_gateway.core.platforms import Platform
from download_gateway.core.validation import (
    INVALID_FORMAT,
    INVALID_PROTOCOL,
    URL_REQUIRED,
    URLValidator,
)


class TestDetectPlatform:
    """Test platform detection."""

    def test_supported_urls(self):
        test_cases = [
            ("https://www.instagram.com/p/ABC123", Platform.INSTAGRAM),
            ("https://instagram.com/reel/XYZ789", Platform.INSTAGRAM),
            ("https://www.instagram.com/tv/DEF456", Platform.INSTAGRAM),
            ("https://www.tiktok.com/@user/video/1234567890", Platform.TIKTOK),
            ("https://tiktok.com/@user/video/1234567890", Platform.TIKTOK),
            ("https://vm.tiktok.com/ABC123", Platform.TIKTOK),
            ("https://twitter.com/user/status/1234567890", Platform.TWITTER),
            ("https://x.com/user/status/1234567890", Platform.TWITTER),
            ("https://www.x.com/user/status/9876543210", Platform.TWITTER),
            ("  HTTPS://WWW.INSTAGRAM.COM/p/ABC  ", Platform.INSTAGRAM),
        ]

        for url, expected in test_cases:
            assert URLValidator.detect_platform(url) == expected, f"Wrong platform for {url}"

    def test_unsupported_urls(self):
        for url in [
            "https://www.youtube.com/watch?v=123",
            "https://www.facebook.com/video/123",
            "https://example.com",
            "not-a-url",
        ]:
            assert URLValidator.detect_platform(url) is None, f"Should not detect: {url}"


class TestExtractContentId:
    """Test content ID extraction."""

    def test_extracts_ids(self):
        test_cases = [
            ("https://www.instagram.com/p/ABC123/", Platform.INSTAGRAM, "ABC123"),
            ("https://instagram.com/reel/XYZ789/", Platform.INSTAGRAM, "XYZ789"),
            ("https://www.instagram.com/tv/DEF456/", Platform.INSTAGRAM, "DEF456"),
            ("https://www.tiktok.com/@user/video/1234567890", Platform.TIKTOK, "1234567890"),
            ("https://tiktok.com/video/9876543210", Platform.TIKTOK, "9876543210"),
            ("https://twitter.com/user/status/1234567890", Platform.TWITTER, "1234567890"),
            ("https://x.com/user/status/9876543210", Platform.TWITTER, "9876543210"),
        ]

        for url, platform, expected in test_cases:
            assert URLValidator.extract_content_id(url, platform) == expected, url

    def test_path_params_do_not_leak_into_id(self):
        url = "https://www.instagram.com/p/ABC123;jsessionid=1"
        assert URLValidator.extract_content_id(url, Platform.INSTAGRAM) == "ABC123"

    def test_first_matching_pattern_wins(self):
        url = "https://www.instagram.com/reel/FIRST/p/SECOND/"
        assert URLValidator.extract_content_id(url, Platform.INSTAGRAM) == "FIRST"

    def test_only_path_is_searched(self):
        url = "https://www.instagram.com/?next=/p/ABC123"
        assert URLValidator.extract_content_id(url, Platform.INSTAGRAM) is None

    def test_missing_ids(self):
        assert URLValidator.extract_content_id("https://instagram.com/", Platform.INSTAGRAM) is None
        assert URLValidator.extract_content_id("https://tiktok.com/@user", Platform.TIKTOK) is None
        assert URLValidator.extract_content_id("not-a-url", Platform.TWITTER) is None


class TestValidate:
    """Test the full validation pipeline."""

    @pytest.mark.parametrize(
        "url,platform,content_id",
        [
            ("https://www.instagram.com/p/ABC123/", Platform.INSTAGRAM, "ABC123"),
            ("https://x.com/user/status/9876543210", Platform.TWITTER, "9876543210"),
            ("https://www.tiktok.com/@user/video/1234567890", Platform.TIKTOK, "1234567890"),
        ],
    )
    def test_valid_urls(self, url, platform, content_id):
        outcome = URLValidator.validate(url)
        assert outcome.is_valid
        assert outcome.errors == []
        assert outcome.platform == platform
        assert outcome.content_id == content_id

    def test_empty_and_missing(self):
        for value in [None, "", "   ", "\n", 123, ["https://x.com/a/status/1"]]:
            outcome = URLValidator.validate(value)
            assert not outcome.is_valid, f"Should be invalid: {value!r}"
            assert outcome.errors == [URL_REQUIRED]
            assert outcome.platform is None
            assert outcome.content_id is None

    def test_invalid_format(self):
        for value in ["not-a-valid-url", "instagram.com/p/ABC", "https://", "https:// x.com/a/status/1"]:
            outcome = URLValidator.validate(value)
            assert not outcome.is_valid, f"Should be invalid: {value!r}"
            assert outcome.errors == [INVALID_FORMAT], f"Wrong errors for {value!r}"
            assert outcome.platform is None

    def test_unsupported_platform(self):
        outcome = URLValidator.validate("https://www.youtube.com/watch?v=123")
        assert not outcome.is_valid
        assert "Unsupported platform" in outcome.errors[0]
        assert outcome.platform is None

    def test_missing_content_id_keeps_platform(self):
        outcome = URLValidator.validate("https://www.instagram.com/")
        assert not outcome.is_valid
        assert outcome.platform == Platform.INSTAGRAM
        assert outcome.content_id is None
        assert outcome.errors == ["Could not extract content ID from instagram URL"]

    def test_protocol_error_does_not_short_circuit(self):
        """A non-http scheme is reported alongside the detected platform."""
        outcome = URLValidator.validate("ftp://www.instagram.com/p/ABC123/")
        assert not outcome.is_valid
        assert outcome.errors == [INVALID_PROTOCOL]
        assert outcome.platform == Platform.INSTAGRAM
        assert outcome.content_id == "ABC123"

    def test_protocol_and_platform_errors_accumulate(self):
        outcome = URLValidator.validate("ftp://example.com/file")
        assert outcome.errors[0] == INVALID_PROTOCOL
        assert "Unsupported platform" in outcome.errors[1]

    def test_surrounding_whitespace_is_ignored(self):
        outcome = URLValidator.validate("  https://twitter.com/user/status/42  ")
        assert outcome.is_valid
        assert outcome.content_id == "42"
