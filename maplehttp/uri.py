from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from typing import Any, Callable
from urllib.parse import quote, unquote_to_bytes, urlsplit

from .errors import InvalidArgumentError

_PART_KEYS = ("scheme", "user", "pass", "host", "port", "path", "query", "fragment", "dir", "argv")

# Query delimiters stay literal; brackets are left unescaped by the encoder
# so array-style keys (filter[]=1) survive.
_QUERY_DELIMITERS = re.compile(r"([=&])")


def _encode_path(path: str) -> str:
    # Each segment is round-tripped on its own, at byte level, so an encoded
    # %2F never collapses into a separator.
    return "/".join(quote(unquote_to_bytes(segment), safe="") for segment in path.split("/"))


def _encode_query(query: str) -> str:
    pieces = _QUERY_DELIMITERS.split(query)
    return "".join(
        piece if piece in ("=", "&") else quote(unquote_to_bytes(piece), safe="[]")
        for piece in pieces
    )


def _encode_fragment(fragment: str) -> str:
    return quote(unquote_to_bytes(fragment), safe="")


def _split_host_port(hostport: str) -> tuple[str, str]:
    if hostport.startswith("["):
        end = hostport.find("]")
        if end == -1:
            raise InvalidArgumentError(f"Invalid IPv6 host in URI: {hostport!r}")
        host, rest = hostport[: end + 1], hostport[end + 1 :]
        return host, rest[1:] if rest.startswith(":") else ""
    host, _, port = hostport.partition(":")
    return host, port


def parse_uri(uri: str) -> dict[str, Any]:
    """
    Split a URI string into its parts.

    The authority is split by hand so that ports are kept as given, without
    range validation.
    """
    try:
        split = urlsplit(uri)
    except ValueError as exc:
        raise InvalidArgumentError(f"Invalid URI {uri!r}: {exc}") from exc

    parts: dict[str, Any] = {
        "scheme": split.scheme,
        "path": split.path,
        "query": split.query,
        "fragment": split.fragment,
    }
    if split.netloc:
        userinfo, has_userinfo, hostport = split.netloc.rpartition("@")
        if has_userinfo:
            user, has_pass, password = userinfo.partition(":")
            parts["user"] = user
            if has_pass:
                parts["pass"] = password
        host, port = _split_host_port(hostport)
        parts["host"] = host
        if port:
            try:
                parts["port"] = int(port)
            except ValueError as exc:
                raise InvalidArgumentError(f"Invalid port in URI {uri!r}") from exc
    return parts


class Uri:
    """
    URI value object.

    Each part is encoded lazily on first read and cached; ``with_*`` returns
    a copy with one part replaced and only the caches depending on it cleared.
    """

    DEFAULT_PORTS = {
        "http": 80,
        "https": 443,
        "ftp": 21,
        "gopher": 70,
        "nntp": 119,
        "news": 119,
        "telnet": 23,
        "tn3270": 23,
        "imap": 143,
        "pop": 110,
        "ldap": 389,
    }

    def __init__(self, uri: str | Mapping[str, Any] = "") -> None:
        parts = uri if isinstance(uri, Mapping) else parse_uri(uri)
        self._parts: dict[str, Any] = {}
        for key in _PART_KEYS:
            value = parts.get(key)
            if value is not None and value != "":
                self._parts[key] = value
        if "port" in self._parts:
            self._parts["port"] = int(self._parts["port"])
        self._encoded: dict[str, Any] = {}
        self._reset_composed()

    @classmethod
    def from_parts(cls, parts: Mapping[str, Any]) -> Uri:
        return cls(parts)

    def _reset_composed(self) -> None:
        self._user_info: str | None = None
        self._authority: str | None = None
        self._build: str | None = None

    def _get_encoded(self, key: str, encode: Callable[[Any], Any]) -> Any:
        if key not in self._encoded:
            value = self._parts.get(key)
            self._encoded[key] = None if value is None else encode(value)
        return self._encoded[key]

    def __str__(self) -> str:
        return self.get_uri()

    def __repr__(self) -> str:
        return f"<Uri {self.get_uri()!r}>"

    def get_scheme(self) -> str:
        return self._get_encoded("scheme", lambda v: str(v).lower()) or ""

    def get_dir(self) -> str:
        return self._get_encoded("dir", str) or ""

    def get_user_info(self) -> str:
        if self._user_info is None:
            user = self._get_encoded("user", str)
            password = self._get_encoded("pass", str)
            self._user_info = ""
            if user is not None:
                self._user_info = user if password is None else f"{user}:{password}"
        return self._user_info

    def get_host(self) -> str:
        return self._get_encoded("host", lambda v: str(v).lower()) or ""

    def get_port(self) -> int | None:
        """Explicit port, or None when the URI does not carry one."""
        return self._get_encoded("port", int)

    def get_default_port(self) -> int | None:
        return self.DEFAULT_PORTS.get(self.get_scheme())

    def get_authority(self) -> str:
        """``[userinfo@]host[:port]``; the port is omitted when it is the scheme default."""
        if self._authority is None:
            host = self.get_host()
            authority = ""
            if host:
                user_info = self.get_user_info()
                authority = f"{user_info}@{host}" if user_info else host
                port = self.get_port()
                if port is not None and port != self.get_default_port():
                    authority += f":{port}"
            self._authority = authority
        return self._authority

    def get_path(self) -> str:
        return self._get_encoded("path", lambda v: _encode_path(str(v))) or ""

    def get_query(self) -> str:
        return self._get_encoded("query", lambda v: _encode_query(str(v))) or ""

    def get_fragment(self) -> str:
        return self._get_encoded("fragment", lambda v: _encode_fragment(str(v))) or ""

    def get_uri(self) -> str:
        if self._build is None:
            build = ""
            scheme = self.get_scheme()
            if scheme:
                build += f"{scheme}:"
            authority = self.get_authority()
            if authority:
                build += f"//{authority}"
            path = self.get_path()
            if path:
                if authority and not path.startswith("/"):
                    path = f"/{path}"
                build += path
            query = self.get_query()
            if query:
                build += f"?{query}"
            fragment = self.get_fragment()
            if fragment:
                build += f"#{fragment}"
            self._build = build
        return self._build

    def get_argv(self) -> list[str]:
        """Command-line arguments attached to the URI parts, if any."""
        return list(self._parts.get("argv", []))

    def get_part(self, key: str) -> Any:
        encoded = self._encoded.get(key)
        return encoded if encoded is not None else self._parts.get(key)

    def _set_part(self, key: str, value: Any) -> Uri:
        if value is None or value == "":
            self._parts.pop(key, None)
        else:
            self._parts[key] = value
        self._encoded.pop(key, None)
        self._reset_composed()
        return self

    def _clone(self) -> Uri:
        inst = copy.copy(self)
        inst._parts = dict(self._parts)
        inst._encoded = dict(self._encoded)
        return inst

    def with_scheme(self, scheme: str) -> Uri:
        return self._clone()._set_part("scheme", scheme)

    def with_user_info(self, user: str, password: str | None = None) -> Uri:
        inst = self._clone()._set_part("user", user)
        return inst._set_part("pass", password if user else None)

    def with_host(self, host: str) -> Uri:
        return self._clone()._set_part("host", host)

    def with_port(self, port: int | None) -> Uri:
        return self._clone()._set_part("port", None if port is None else int(port))

    def with_path(self, path: str) -> Uri:
        return self._clone()._set_part("path", path)

    def with_query(self, query: str) -> Uri:
        return self._clone()._set_part("query", query)

    def with_fragment(self, fragment: str) -> Uri:
        return self._clone()._set_part("fragment", fragment)
