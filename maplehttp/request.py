from __future__ import annotations

import urllib.parse
from collections.abc import Mapping
from typing import Any

from .headers import Headers
from .message import Message
from .stream import Stream
from .uri import Uri


class Request(Message):
    """
    Outgoing HTTP request.

    Args:
        method: HTTP method; stored uppercase
        uri: Target URI as a string or Uri
        headers: Initial headers (mapping or Headers, copied)
        body: Stream, form mapping, str/bytes, or None for an empty body
        env: Server environment used for protocol version, SSL and port lookups
        version: Explicit protocol version
    """

    def __init__(
        self,
        method: str,
        uri: Uri | str,
        headers: Headers | Mapping[str, Any] | None = None,
        body: Stream | Mapping[str, Any] | str | bytes | None = None,
        env: Mapping[str, Any] | None = None,
        version: str | None = None,
    ) -> None:
        if isinstance(headers, Headers):
            headers = headers.copy()
        super().__init__(headers, self._resolve_body(body), version, env)
        self._method = method.upper()
        self._uri = uri if isinstance(uri, Uri) else Uri(uri)
        self._request_target: str | None = None
        self._set_host_header()

    def __repr__(self) -> str:
        return f"<Request [{self._method}] {self._uri.get_uri()}>"

    @staticmethod
    def _resolve_body(body: Stream | Mapping[str, Any] | str | bytes | None) -> Stream:
        if isinstance(body, Stream):
            return body
        if isinstance(body, Mapping):
            body = urllib.parse.urlencode(body, doseq=True)
        stream = Stream(Stream.TEMP)
        if body is not None:
            stream.write(body)
            stream.rewind()
        return stream

    def _set_host_header(self) -> None:
        headers = self._require_headers()
        host = self._uri.get_host()
        if not headers.has_header("Host") or host != "":
            headers.set_header("Host", host)

    def get_request_target(self) -> str:
        if self._request_target is not None:
            return self._request_target
        target = self._uri.get_path() or "/"
        query = self._uri.get_query()
        if query:
            target += f"?{query}"
        return target

    def with_request_target(self, request_target: str) -> Request:
        inst = self._clone()
        inst._request_target = request_target
        return inst

    def get_method(self) -> str:
        return self._method

    def with_method(self, method: str) -> Request:
        inst = self._clone()
        inst._method = method.upper()
        return inst

    def get_uri(self) -> Uri:
        return self._uri

    def with_uri(self, uri: Uri, preserve_host: bool = False) -> Request:
        """
        Return a copy targeting ``uri``.

        The Host header follows the new URI unless ``preserve_host`` is set
        and the current Host header is non-empty.
        """
        inst = self._clone()
        inst._uri = uri
        host = uri.get_host()
        if host and (not preserve_host or not self.get_header_line("Host")):
            inst._require_headers().set_header("Host", host)
        return inst

    def is_ssl(self) -> bool:
        https = str(self._env.get("HTTPS", "")).lower()
        return (
            self._uri.get_scheme() == "https"
            or https in ("on", "1")
            or self.get_port() == 443
        )

    def get_port(self) -> int | None:
        try:
            server_port = int(self._env.get("SERVER_PORT", 0))
        except (TypeError, ValueError):
            server_port = 0
        return server_port if server_port > 0 else self._uri.get_port()

    def get_cli_keyword(self) -> str:
        """Positional CLI words after the script name, joined with ``/``."""
        words = []
        for arg in self._uri.get_argv():
            if not isinstance(arg, str):
                continue
            if arg.startswith("-"):
                break
            words.append(arg)
        return "/".join(words[1:])

    def get_cli_args(self) -> dict[str, str]:
        """
        ``--key=value`` and ``-key=value`` CLI flags, each parsed as a query string.

        Values are percent- and ``+``-decoded; bare flags map to ``""``.
        """
        args: dict[str, str] = {}
        for arg in self._uri.get_argv():
            if not isinstance(arg, str) or not arg.startswith("-"):
                continue
            body = arg[2:] if arg.startswith("--") else arg[1:]
            for key, value in urllib.parse.parse_qsl(body, keep_blank_values=True):
                if key:
                    args[key] = value
        return args
