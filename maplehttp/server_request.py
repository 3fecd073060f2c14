from __future__ import annotations

import json
import urllib.parse
from collections.abc import Mapping
from http.cookies import SimpleCookie
from typing import Any

from .headers import Headers
from .request import Request
from .stream import Stream
from .uploaded_file import UploadedFile
from .uri import Uri


class ServerRequest(Request):
    """
    Incoming request built from a WSGI environ.

    Args:
        uri: Requested URI
        environ: WSGI/CGI environ; REQUEST_METHOD, HTTP_* headers and
            ``wsgi.input`` are read from it
        files: Upload mappings keyed by form field, nested lists allowed
    """

    def __init__(
        self,
        uri: Uri | str,
        environ: Mapping[str, Any],
        files: Mapping[str, Any] | None = None,
    ) -> None:
        body_input = environ.get("wsgi.input")
        super().__init__(
            str(environ.get("REQUEST_METHOD", "GET")),
            uri,
            Headers.from_environ(environ),
            Stream(body_input) if body_input is not None else None,
            env=environ,
        )
        self._query_params: dict[str, Any] | None = None
        self._parsed_body: Any = None
        self._attributes: dict[str, Any] = {
            "env": dict(environ),
            "cookies": self._parse_cookies(str(environ.get("HTTP_COOKIE", ""))),
            "files": self.normalize_files(files or {}),
        }

    @classmethod
    def from_environ(
        cls, environ: Mapping[str, Any], files: Mapping[str, Any] | None = None
    ) -> ServerRequest:
        """Reconstruct the requested URI from the environ (PEP 3333) and build the request."""
        host = environ.get("HTTP_HOST")
        if host:
            authority = Uri(f"//{host}")
            hostname, port = authority.get_host(), authority.get_port()
        else:
            hostname, port = environ.get("SERVER_NAME", ""), environ.get("SERVER_PORT")
        uri = Uri.from_parts(
            {
                "scheme": environ.get("wsgi.url_scheme", "http"),
                "host": hostname,
                "port": port,
                "path": f"{environ.get('SCRIPT_NAME', '')}{environ.get('PATH_INFO', '')}",
                "query": environ.get("QUERY_STRING", ""),
            }
        )
        return cls(uri, environ, files)

    @staticmethod
    def _parse_cookies(header: str) -> dict[str, str]:
        cookie = SimpleCookie()
        cookie.load(header)
        return {morsel.key: morsel.value for morsel in cookie.values()}

    def _clone(self):
        inst = super()._clone()
        inst._attributes = dict(self._attributes)
        return inst

    def get_server_params(self) -> dict[str, Any]:
        return dict(self._env)

    def get_cookie_params(self) -> dict[str, str]:
        return dict(self._attributes["cookies"])

    def with_cookie_params(self, cookies: Mapping[str, str]) -> ServerRequest:
        inst = self._clone()
        inst._attributes["cookies"] = dict(cookies)
        return inst

    def get_query_params(self) -> dict[str, Any]:
        if self._query_params is None:
            # The raw QUERY_STRING keeps form-encoded "+" spaces intact.
            query = self._env.get("QUERY_STRING")
            if query is None:
                query = self.get_uri().get_query()
            self._query_params = dict(urllib.parse.parse_qsl(query, keep_blank_values=True))
        return dict(self._query_params)

    def with_query_params(self, query: Mapping[str, Any]) -> ServerRequest:
        inst = self._clone()
        inst._query_params = dict(query)
        return inst

    def get_uploaded_files(self) -> dict[str, Any]:
        return dict(self._attributes["files"])

    def with_uploaded_files(self, uploaded_files: Mapping[str, Any]) -> ServerRequest:
        inst = self._clone()
        inst._attributes["files"] = dict(uploaded_files)
        return inst

    def get_parsed_body(self) -> Any:
        """
        Deserialised POST body for form-urlencoded and JSON requests.

        Returns None for other methods and content types.
        """
        if self._parsed_body is None and self.get_method() == "POST":
            content_type = self.get_header("Content-Type")
            media_type = str(content_type[0]).lower() if content_type else ""
            body = self.get_body()
            if media_type == "application/x-www-form-urlencoded":
                self._parsed_body = dict(
                    urllib.parse.parse_qsl(self._read_body(body), keep_blank_values=True)
                )
            elif media_type == "application/json":
                self._parsed_body = json.loads(self._read_body(body) or "null")
        return self._parsed_body

    @staticmethod
    def _read_body(body: Stream) -> str:
        if body.is_seekable():
            return str(body)
        return body.get_contents().decode("utf-8", errors="replace")

    def with_parsed_body(self, data: Any) -> ServerRequest:
        inst = self._clone()
        inst._parsed_body = data
        return inst

    def get_attributes(self) -> dict[str, Any]:
        return dict(self._attributes)

    def get_attribute(self, name: str, default: Any = None) -> Any:
        return self._attributes.get(name, default)

    def with_attribute(self, name: str, value: Any) -> ServerRequest:
        inst = self._clone()
        inst._attributes[name] = value
        return inst

    def without_attribute(self, name: str) -> ServerRequest:
        inst = self._clone()
        inst._attributes.pop(name, None)
        return inst

    @classmethod
    def normalize_files(cls, files: Mapping[str, Any]) -> dict[str, Any]:
        """
        Turn raw upload mappings into UploadedFile instances.

        A field whose ``error`` entry is a list holds several files and is
        normalised into a list, recursively.
        """
        normalized: dict[str, Any] = {}
        for key, file in files.items():
            if isinstance(file, UploadedFile):
                normalized[key] = file
            elif isinstance(file.get("error"), list):
                normalized[key] = cls._normalize_file_list(file)
            else:
                normalized[key] = UploadedFile(file)
        return normalized

    @classmethod
    def _normalize_file_list(cls, file: Mapping[str, Any]) -> list[Any]:
        normalized: list[Any] = []
        for index, error in enumerate(file["error"]):
            entry = {
                "name": file["name"][index],
                "type": file["type"][index],
                "tmp_name": file["tmp_name"][index],
                "error": error,
                "size": file["size"][index],
            }
            if isinstance(error, list):
                normalized.append(cls._normalize_file_list(entry))
            else:
                normalized.append(UploadedFile(entry))
        return normalized
