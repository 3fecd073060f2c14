from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from .errors import RequestError
from .headers import Headers, HeaderToken
from .stream import Stream


def _canonical_name(name: str) -> str:
    return "-".join(part.capitalize() for part in name.split("-"))


class Message:
    """
    Shared state and behaviour of Request and Response.

    Every ``with_*`` method returns a copy owning its own Headers instance;
    the body stream is shared between copies until ``with_body`` is called.
    """

    def __init__(
        self,
        headers: Headers | Mapping[str, Any] | None = None,
        body: Stream | None = None,
        version: str | None = None,
        env: Mapping[str, Any] | None = None,
    ) -> None:
        self._headers: Headers | None = headers if isinstance(headers, Headers) else Headers(headers)
        self._body = body
        self._version = version
        self._env: dict[str, Any] = dict(env or {})

    def _clone(self):
        inst = copy.copy(self)
        if self._headers is not None:
            inst._headers = self._headers.copy()
        return inst

    def _require_headers(self) -> Headers:
        if self._headers is None:
            raise RequestError("Missing the HTTP headers instance")
        return self._headers

    def get_protocol_version(self) -> str:
        """Protocol version, derived from SERVER_PROTOCOL when not set explicitly."""
        if self._version is None:
            protocol = str(self._env.get("SERVER_PROTOCOL", "HTTP/1.1"))
            self._version = protocol.split("/")[-1]
        return self._version

    def with_protocol_version(self, version: str):
        inst = self._clone()
        inst._version = version
        return inst

    def get_headers(self) -> dict[str, list[HeaderToken]]:
        return self._require_headers().get_headers()

    def has_header(self, name: str) -> bool:
        return self._require_headers().has_header(name)

    def get_header(self, name: str) -> list[HeaderToken]:
        return self._require_headers().get_header(name)

    def get_header_line(self, name: str) -> str:
        return "; ".join(self.get_header_line_data(name))

    def get_header_line_data(self, name: str) -> list[str]:
        """Header tokens as strings; associative tokens are emitted as ``key value``."""
        if not self.has_header(name):
            return []
        return [
            f"{token[0]} {token[1]}" if isinstance(token, tuple) else str(token)
            for token in self.get_header(name)
        ]

    def header_lines(self) -> list[str]:
        """``Name: value`` lines ready to be written by a transport."""
        return [
            f"{_canonical_name(name)}: {self.get_header_line(name)}"
            for name in self._require_headers()
        ]

    def with_header(self, name: str, value: Any):
        inst = self._clone()
        inst._require_headers().set_header(name, value)
        return inst

    def with_headers(self, headers: Mapping[str, Any]):
        inst = self._clone()
        inst._require_headers().set_headers(headers)
        return inst

    def with_added_header(self, name: str, value: Any):
        inst = self._clone()
        inst._require_headers().add_header(name, value)
        return inst

    def without_header(self, name: str):
        inst = self._clone()
        inst._require_headers().delete_header(name)
        return inst

    def get_body(self) -> Stream | None:
        return self._body

    def with_body(self, body: Stream):
        inst = self._clone()
        inst._body = body
        return inst
