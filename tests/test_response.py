"""Tests for maplehttp.response module."""

import gzip
from datetime import datetime, timezone

import pytest
from maplehttp.errors import InvalidArgumentError, ResponseError
from maplehttp.headers import Headers
from maplehttp.response import NO_CACHE_EXPIRES, PHRASES, Response, ResponseFactory
from maplehttp.stream import Stream


class TestResponseStatus:
    """Tests for status code and reason phrase."""

    def test_defaults(self):
        """Test a new response is 200 OK with an empty body."""
        response = Response()
        assert response.get_status_code() == 200
        assert response.get_reason_phrase() == "OK"
        assert response.status_line() == "HTTP/1.1 200 OK"
        assert bytes(response.get_body()) == b""

    def test_with_status_looks_up_phrase(self):
        """Test a standard phrase is filled in."""
        response = Response().with_status(404)
        assert response.get_reason_phrase() == "Not Found"

    def test_with_status_custom_phrase(self):
        """Test an explicit phrase is kept."""
        response = Response().with_status(418, "Short and stout")
        assert response.get_reason_phrase() == "Short and stout"

    def test_unknown_status_has_empty_phrase(self):
        """Test codes missing from the table render without a phrase."""
        response = Response().with_status(299)
        assert response.get_reason_phrase() == ""
        assert response.status_line() == "HTTP/1.1 299"

    def test_with_status_is_immutable(self, sample_response):
        """Test the original keeps its status."""
        sample_response.with_status(500)
        assert sample_response.get_status_code() == 200

    def test_explicit_phrase_in_constructor(self):
        """Test the constructor phrase overrides the table."""
        assert Response(status=200, phrase="Fine").get_reason_phrase() == "Fine"

    @pytest.mark.parametrize("code,valid", [(200, True), (204, True), (301, False), (500, False)])
    def test_is_valid_response(self, code, valid):
        """Test only 2xx responses are valid."""
        assert Response(status=code).is_valid_response() is valid

    def test_phrase_table(self):
        """Test a few entries of the phrase table."""
        assert PHRASES[201] == "Created"
        assert PHRASES[418] == "I'm a teapot"
        assert PHRASES[511] == "Network Authentication Required"

    def test_repr(self):
        """Test repr shows the status code."""
        assert repr(Response(status=201)) == "<Response [201]>"


class TestResponseConstruction:
    """Tests for response bodies and headers."""

    def test_non_seekable_body_raises(self, non_seekable_resource):
        """Test a non-seekable body is rejected."""
        with pytest.raises(ResponseError, match="not seekable"):
            Response(Stream(non_seekable_resource))

    def test_headers_instance_copied(self):
        """Test the passed Headers instance is not shared."""
        headers = Headers({"X-A": "1"})
        response = Response(headers=headers)
        headers.set_header("X-A", "2")
        assert response.get_header("X-A") == ["1"]

    def test_body_contents(self, sample_response):
        """Test the body stream holds the payload."""
        assert str(sample_response.get_body()) == '{"key":"val"}'

    def test_header_lines(self, sample_response):
        """Test header lines are ready for a transport."""
        assert sample_response.header_lines() == [
            "Content-Type: application/json",
            "Content-Length: 13",
        ]


class TestResponseDates:
    """Tests for Last-Modified and Expires."""

    def test_with_expires_iso(self):
        """Test ISO dates are rendered as HTTP dates."""
        response = Response().with_expires("2024-01-02T03:04:05")
        assert response.get_header_line("Expires") == "Tue, 02 Jan 2024 03:04:05 GMT"

    def test_with_expires_http_date(self):
        """Test HTTP dates are accepted as-is."""
        response = Response().with_expires("Sat, 26 Jul 1997 05:00:00 GMT")
        assert response.get_header_line("Expires") == "Sat, 26 Jul 1997 05:00:00 GMT"

    def test_with_expires_invalid(self):
        """Test unparseable dates raise."""
        with pytest.raises(InvalidArgumentError):
            Response().with_expires("not a date")

    def test_with_last_modified(self):
        """Test Last-Modified sets header and timestamp."""
        modified = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        response = Response().with_last_modified(modified)
        assert response.get_header_line("Last-Modified") == "Tue, 02 Jan 2024 03:04:05 GMT"
        assert response.get_mod_date() == 1704164645

    def test_mod_date_unset(self):
        """Test the mod date is None until set."""
        assert Response().get_mod_date() is None


class TestResponseCache:
    """Tests for cache header helpers."""

    def test_set_cache(self):
        """Test public caching headers."""
        response = Response().set_cache(0, 60)
        assert response.get_header_line("Cache-Control") == "max-age=60, immutable, public"
        assert response.get_header_line("Expires") == "Thu, 01 Jan 1970 00:01:00 GMT"
        assert response.get_header_line("Pragma") == "public"

    def test_clear_cache(self):
        """Test no-cache headers."""
        response = Response().clear_cache()
        assert response.get_header_line("Cache-Control") == (
            "no-store, no-cache, must-revalidate, private"
        )
        assert response.get_header_line("Expires") == NO_CACHE_EXPIRES


class TestResponseRedirect:
    """Tests for redirects."""

    def test_default_redirect(self):
        """Test a 302 redirect with Location."""
        response = Response().redirect("/login")
        assert response.get_status_code() == 302
        assert response.get_reason_phrase() == "Found"
        assert response.get_header_line("Location") == "/login"

    def test_permanent_redirect(self):
        """Test a 301 redirect."""
        assert Response().redirect("/new", 301).get_status_code() == 301

    def test_invalid_redirect_status(self):
        """Test other codes are rejected."""
        with pytest.raises(InvalidArgumentError, match="301 or 302"):
            Response().redirect("/x", 307)


class TestResponseDescription:
    """Tests for the free-form description."""

    def test_with_description(self):
        """Test the description is set on a copy."""
        response = Response()
        described = response.with_description("cached copy")
        assert described.get_description() == "cached copy"
        assert response.get_description() is None


class TestDecodedBody:
    """Tests for content-coding removal."""

    def test_gzip_body_decoded(self):
        """Test a gzip body is decoded and headers updated."""
        compressed = gzip.compress(b"hello world")
        body = Stream(Stream.TEMP)
        body.write(compressed)
        response = Response(
            body, {"Content-Encoding": "gzip", "Content-Length": str(len(compressed))}
        )
        decoded = response.with_decoded_body()
        assert str(decoded.get_body()) == "hello world"
        assert not decoded.has_header("Content-Encoding")
        assert decoded.get_header_line("Content-Length") == "11"
        assert response.has_header("Content-Encoding")

    def test_no_encoding_is_noop(self, sample_response):
        """Test responses without Content-Encoding keep their body."""
        decoded = sample_response.with_decoded_body()
        assert decoded.get_body() is sample_response.get_body()


class TestResponseFactory:
    """Tests for ResponseFactory."""

    def test_create_response(self):
        """Test the factory builds responses with the given status."""
        factory = ResponseFactory(headers=Headers({"Server": "maplehttp"}))
        response = factory.create_response(404)
        assert response.get_status_code() == 404
        assert response.get_reason_phrase() == "Not Found"
        assert response.get_header_line("Server") == "maplehttp"

    def test_shared_stream(self, temp_stream):
        """Test responses share the factory stream."""
        factory = ResponseFactory(temp_stream)
        assert factory.create_response().get_body() is temp_stream

    def test_reason_and_version(self):
        """Test reason phrase and version pass through."""
        response = ResponseFactory().create_response(200, "Fine", "2")
        assert response.status_line() == "HTTP/2 200 Fine"
