from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .compression import decode_stream
from .errors import InvalidArgumentError, ResponseError
from .headers import Headers
from .message import Message
from .stream import Stream
from .utils import DateLike, http_date, to_datetime

PHRASES = {
    100: "Continue",
    101: "Switching Protocols",
    102: "Processing",
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non-Authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",
    207: "Multi-Status",
    226: "IM Used",
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    306: "Reserved",
    307: "Temporary Redirect",
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    407: "Proxy Authentication Required",
    408: "Request Timeout",
    409: "Conflict",
    410: "Gone",
    411: "Length Required",
    412: "Precondition Failed",
    413: "Request Entity Too Large",
    414: "Request-URI Too Long",
    415: "Unsupported Media Type",
    416: "Requested Range Not Satisfiable",
    417: "Expectation Failed",
    418: "I'm a teapot",
    422: "Unprocessable Entity",
    423: "Locked",
    424: "Failed Dependency",
    426: "Upgrade Required",
    428: "Precondition Required",
    429: "Too Many Requests",
    431: "Request Header Fields Too Large",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    505: "HTTP Version Not Supported",
    506: "Variant Also Negotiates",
    507: "Insufficient Storage",
    510: "Not Extended",
    511: "Network Authentication Required",
}

NO_CACHE_EXPIRES = "Sat, 26 Jul 1997 05:00:00 GMT"


class Response(Message):
    """
    HTTP response value object.

    Args:
        body: Seekable body stream; a new TEMP stream when omitted
        headers: Initial headers (mapping or Headers, copied)
        status: Status code
        phrase: Explicit reason phrase; looked up in PHRASES when omitted
        version: Protocol version
    """

    def __init__(
        self,
        body: Stream | None = None,
        headers: Headers | Mapping[str, Any] | None = None,
        status: int = 200,
        phrase: str | None = None,
        version: str | None = None,
    ) -> None:
        if body is None:
            body = Stream(Stream.TEMP)
        if not body.is_seekable():
            raise ResponseError(f"The response body stream {body!r} is not seekable")
        if isinstance(headers, Headers):
            headers = headers.copy()
        super().__init__(headers, body, version)
        self._status_code = status
        self._phrase = phrase
        self._description: str | None = None
        self._mod_date: int | None = None

    def __repr__(self) -> str:
        return f"<Response [{self._status_code}]>"

    def with_status(self, code: int, reason_phrase: str = "") -> Response:
        inst = self._clone()
        inst._status_code = code
        inst._phrase = reason_phrase or PHRASES.get(code, "")
        return inst

    def get_status_code(self) -> int:
        return self._status_code

    def get_reason_phrase(self) -> str:
        if self._phrase is None:
            return PHRASES.get(self._status_code, "")
        return self._phrase

    def status_line(self) -> str:
        return (
            f"HTTP/{self.get_protocol_version()} {self._status_code} {self.get_reason_phrase()}"
        ).rstrip()

    def is_valid_response(self) -> bool:
        return 200 <= self._status_code < 300

    def get_mod_date(self) -> int | None:
        """Last-Modified as a UNIX timestamp, if set through with_last_modified."""
        return self._mod_date

    def with_last_modified(self, date: DateLike) -> Response:
        dt = to_datetime(date)
        inst = self.with_header("Last-Modified", http_date(dt))
        inst._mod_date = int(dt.timestamp())
        return inst

    def with_expires(self, date: DateLike) -> Response:
        return self.with_header("Expires", http_date(date))

    def set_cache(self, time: int, ttl: int) -> Response:
        """Publicly cacheable for ``ttl`` seconds counted from the ``time`` timestamp."""
        return self.with_headers(
            {
                "Cache-Control": f"max-age={ttl}, immutable, public",
                "Expires": http_date(time + ttl),
                "Pragma": "public",
            }
        )

    def clear_cache(self) -> Response:
        return self.with_headers(
            {
                "Cache-Control": "no-store, no-cache, must-revalidate, private",
                "Expires": NO_CACHE_EXPIRES,
            }
        )

    def redirect(self, url: str, status_code: int = 302) -> Response:
        if status_code not in (301, 302):
            raise InvalidArgumentError("The redirect status code must be 301 or 302")
        return self.with_status(status_code).with_header("Location", url)

    def with_description(self, description: str) -> Response:
        inst = self._clone()
        inst._description = description
        return inst

    def get_description(self) -> str | None:
        return self._description

    def with_decoded_body(self) -> Response:
        """
        Return a copy whose body is decoded according to Content-Encoding.

        The Content-Encoding header is dropped and Content-Length updated.
        """
        encoding = self.get_header_line("Content-Encoding")
        if not encoding:
            return self._clone()
        stream = decode_stream(self._body, encoding)
        inst = self.with_body(stream).without_header("Content-Encoding")
        if inst.has_header("Content-Length"):
            inst._require_headers().set_header("Content-Length", str(stream.get_size()))
        return inst


class ResponseFactory:
    """
    Creates responses sharing one body stream and headers template.

    Args:
        stream: Body stream; a new TEMP stream when omitted
        headers: Headers copied into every created response
    """

    def __init__(self, stream: Stream | None = None, headers: Headers | None = None) -> None:
        self.stream = Stream(Stream.TEMP) if stream is None else stream
        self.headers = headers

    def create_response(
        self, code: int = 200, reason_phrase: str | None = None, version: str | None = None
    ) -> Response:
        return Response(self.stream, self.headers, code, reason_phrase, version)
