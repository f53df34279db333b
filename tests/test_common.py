"""Tests for common utilities."""

import logging

import pytest
from friendly_urls.common.validators import is_valid_item_id, is_valid_base_path
from friendly_urls.common.headers import extract_forwarded_headers, build_public_origin
from friendly_urls.common.url_builder import (
    normalize_base_path,
    build_friendly_path,
    build_original_url,
    build_absolute_url,
)
from friendly_urls.common.logging_config import setup_logging, get_logger
from friendly_urls.database.models import FriendlyUrlMapping, normalize_friendly_url
from web_app.middleware.logging import LoggingMiddleware


class TestValidators:
    """Test validation utilities."""
    
    def test_valid_item_ids(self):
        """Test valid item id validation."""
        valid, _ = is_valid_item_id("m1")
        assert valid
        
        valid, _ = is_valid_item_id("6f1c0e2b9d7a4c3e8f1a2b3c4d5e6f70")
        assert valid
        
        valid, _ = is_valid_item_id("item_with-dash")
        assert valid
    
    def test_invalid_item_ids(self):
        """Test invalid item id validation."""
        valid, error = is_valid_item_id("")
        assert not valid
        assert "required" in error.lower()
        
        valid, error = is_valid_item_id("a" * 65)
        assert not valid
        
        valid, error = is_valid_item_id("bad id")
        assert not valid
        
        valid, error = is_valid_item_id("../etc")
        assert not valid
    
    def test_base_paths(self):
        """Test base path validation."""
        assert is_valid_base_path("/web")[0]
        assert is_valid_base_path("")[0]
        assert is_valid_base_path("/")[0]
        
        assert not is_valid_base_path("https://example.com/web")[0]
        assert not is_valid_base_path("/web?x=1")[0]
        assert not is_valid_base_path("/my web")[0]


class TestUrlBuilder:
    """Test URL building utilities."""
    
    @pytest.mark.parametrize(
        "base,expected",
        [
            (None, "/web"),
            ("/web", "/web"),
            ("/web/", "/web"),
            ("web", "/web"),
            ("", ""),
            ("/", ""),
            (" /media/web/ ", "/media/web"),
        ],
    )
    def test_normalize_base_path(self, base, expected):
        assert normalize_base_path(base) == expected
    
    def test_build_friendly_path(self):
        """Test friendly path assembly."""
        assert build_friendly_path("/web", "movie", "inception-2010") == "/web/movie/inception-2010"
        assert build_friendly_path("/web/", "show", "the-office", "season-2") == "/web/show/the-office/season-2"
        assert build_friendly_path("", "genre", "drama") == "/genre/drama"
        assert build_friendly_path("/web", "movie", "") == "/web/movie"
    
    def test_build_original_url(self):
        """Test item detail URLs."""
        assert build_original_url("/web", "abc") == "/web/index.html#!/details?id=abc"
        assert build_original_url("/web", "abc", "srv") == "/web/index.html#!/details?id=abc&serverId=srv"
        assert build_original_url("", "a b") == "/index.html#!/details?id=a%20b"
    
    def test_build_absolute_url(self):
        """Test absolute links."""
        assert build_absolute_url("/web/movie/up-2009") == "/web/movie/up-2009"
        assert (
            build_absolute_url("/web/movie/up-2009", "https://media.example.com/")
            == "https://media.example.com/web/movie/up-2009"
        )


class TestHeaders:
    """Test header utilities."""
    
    def test_extract_forwarded_headers(self):
        """Test extracting forwarded headers."""
        headers = {
            "X-Forwarded-Proto": "https",
            "X-Forwarded-Host": "media.example.com",
            "X-Forwarded-For": "192.168.1.1",
        }
        
        result = extract_forwarded_headers(headers)
        
        assert result["forwarded_proto"] == "https"
        assert result["forwarded_host"] == "media.example.com"
        assert result["forwarded_for"] == "192.168.1.1"
    
    def test_origin_from_forwarded_headers(self):
        """Test forwarded headers win over everything else."""
        headers = {"x-forwarded-proto": "https", "x-forwarded-host": "tv.example.org"}
        
        origin = build_public_origin(
            headers,
            fallback_origin="https://media.example.com",
            request_scheme="http",
            request_host="localhost:8097",
        )
        
        assert origin == "https://tv.example.org"
    
    def test_origin_from_config(self):
        """Test the configured public host is used next."""
        assert build_public_origin({}, fallback_origin="https://media.example.com/") == "https://media.example.com"
        assert build_public_origin({}, fallback_origin="media.example.com", request_scheme="http") == "http://media.example.com"
    
    def test_origin_from_request(self):
        """Test the request itself is the last resort."""
        assert build_public_origin({}, request_scheme="http", request_host="localhost:8097") == "http://localhost:8097"
        assert build_public_origin({}) is None
    
    def test_force_https(self):
        """Test forcing https."""
        origin = build_public_origin({}, request_scheme="http", request_host="localhost:8097", force_https=True)
        
        assert origin == "https://localhost:8097"


class TestModels:
    """Test mapping model helpers."""
    
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("/web/movie/Up-2009", "/web/movie/up-2009"),
            ("/web/movie/up-2009/", "/web/movie/up-2009"),
            ("  /WEB/Movie/up-2009  ", "/web/movie/up-2009"),
            ("/", "/"),
            ("", ""),
        ],
    )
    def test_normalize_friendly_url(self, url, expected):
        assert normalize_friendly_url(url) == expected
    
    def test_dict_round_trip(self):
        """Test a mapping survives serialization with its timestamps."""
        mapping = FriendlyUrlMapping(
            item_id="m1",
            item_type="movie",
            friendly_url="/web/movie/inception-2010",
            original_url="/web/index.html#!/details?id=m1",
            access_count=3,
        )
        
        restored = FriendlyUrlMapping.from_dict(mapping.to_dict())
        
        assert restored == mapping
    
    def test_naive_timestamps_are_utc(self):
        """Test timestamps without an offset are read as UTC."""
        mapping = FriendlyUrlMapping.from_dict({
            "id": "x",
            "item_id": "m1",
            "friendly_url": "/web/movie/a",
            "original_url": "/web/index.html#!/details?id=m1",
            "created_at": "2024-01-01T12:00:00",
        })
        
        assert mapping.created_at.tzinfo is not None
        assert mapping.is_active


class TestLogging:
    """Test logging setup."""
    
    def test_setup_logging(self, tmp_path):
        """Test console and file handlers."""
        log_file = tmp_path / "friendly.log"
        
        logger = setup_logging(level="WARNING", log_file=str(log_file), json_format=True)
        logger.warning("hello")
        
        assert logger.name == "friendly_urls"
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 2
        for handler in logger.handlers:
            handler.flush()
        assert '"message": "hello"' in log_file.read_text()
        
        setup_logging(level="DEBUG")
    
    def test_get_logger(self):
        assert get_logger().name == "friendly_urls"
        assert get_logger("friendly_urls.web").name == "friendly_urls.web"
    
    def test_web_layer_logs_under_service_logger(self):
        """Test request logs land in the configured friendly_urls tree."""
        middleware = LoggingMiddleware(app=None)
        
        assert middleware.logger is get_logger("friendly_urls.web")
        assert get_logger() is middleware.logger.parent
