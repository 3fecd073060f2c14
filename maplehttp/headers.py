from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Union

# A token is either a bare directive or an associative (key, value) pair.
HeaderToken = Union[str, tuple[str, str]]


def _sanitize_header(value: str) -> str:
    """
    Strip CR, LF and null bytes to prevent HTTP header injection (CRLF injection).
    """
    return value.replace("\r", "").replace("\n", "").replace("\x00", "")


def _tokenize(value: Any) -> list[HeaderToken]:
    if isinstance(value, str):
        return [part.strip() for part in _sanitize_header(value).split(";")]
    if isinstance(value, Mapping):
        return [(_sanitize_header(str(k)), _sanitize_header(str(v))) for k, v in value.items()]
    if isinstance(value, (list, tuple)):
        return list(value)
    return [_sanitize_header(str(value))]


class Headers:
    """
    Case-insensitive multi-value header map.

    Names are normalised to lowercase with ``_`` mapped to ``-``, so
    ``Content_Type`` and ``content-type`` refer to the same header. A string
    value is split on ``;`` into trimmed tokens.
    """

    def __init__(
        self, headers: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None
    ) -> None:
        self._headers: dict[str, list[HeaderToken]] = {}
        if headers:
            self.set_headers(headers)

    @staticmethod
    def normalize_key(key: str) -> str:
        return _sanitize_header(key).replace("_", "-").lower()

    def set_header(self, name: str, value: Any) -> None:
        """Replace a header; a value with no tokens removes it."""
        key = self.normalize_key(name)
        tokens = _tokenize(value)
        if tokens:
            self._headers[key] = tokens
        else:
            self._headers.pop(key, None)

    def set_headers(self, headers: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> None:
        items = headers.items() if isinstance(headers, Mapping) else headers
        for name, value in items:
            self.set_header(name, value)

    def add_header(self, name: str, value: Any) -> None:
        """Append tokens to an existing header, or set it when absent."""
        key = self.normalize_key(name)
        tokens = _tokenize(value)
        if tokens:
            self._headers[key] = self._headers.get(key, []) + tokens

    def has_header(self, name: str) -> bool:
        return self.normalize_key(name) in self._headers

    def get_header(self, name: str) -> list[HeaderToken]:
        return list(self._headers.get(self.normalize_key(name), []))

    def get_headers(self) -> dict[str, list[HeaderToken]]:
        return {name: list(tokens) for name, tokens in self._headers.items()}

    def delete_header(self, name: str) -> bool:
        if self.has_header(name):
            del self._headers[self.normalize_key(name)]
            return True
        return False

    def copy(self) -> Headers:
        inst = Headers()
        inst._headers = self.get_headers()
        return inst

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_header(name)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._headers))

    def __len__(self) -> int:
        return len(self._headers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return self._headers == other._headers

    def __repr__(self) -> str:
        return f"<Headers {self._headers}>"

    @classmethod
    def from_raw(cls, block: str | bytes) -> Headers:
        """
        Parse a raw ``Name: value`` header block as received from a transport.

        The status line and anything without a colon is skipped; repeated
        names are merged into one header.
        """
        if isinstance(block, bytes):
            block = block.decode("iso-8859-1")
        inst = cls()
        for line in block.splitlines():
            if ":" not in line or line.startswith("HTTP/"):
                continue
            name, _, value = line.partition(":")
            name = name.strip()
            if name:
                inst.add_header(name, value.strip())
        return inst

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any]) -> Headers:
        """Collect request headers from a WSGI/CGI environ mapping."""
        inst = cls()
        for key, value in environ.items():
            if key.startswith("HTTP_"):
                inst.set_header(key[5:], str(value))
            elif key in ("CONTENT_TYPE", "CONTENT_LENGTH") and value:
                inst.set_header(key, str(value))
        return inst
