from __future__ import annotations

import time
from collections.abc import Mapping
from http.cookies import Morsel, SimpleCookie

from .errors import InvalidArgumentError
from .utils import http_date


class Cookies:
    """
    Request cookies plus a queue of outgoing ``Set-Cookie`` values.

    Incoming cookies come from a mapping or a raw ``Cookie`` header. Cookies
    set through :meth:`set` are rendered by :meth:`header_values` for the
    transport to emit.
    """

    SAME_SITE_VALUES = ("None", "Lax", "Strict")

    def __init__(
        self,
        path: str = "/",
        domain: str = "",
        secure: bool = True,
        httponly: bool = True,
        cookies: Mapping[str, str] | str | None = None,
    ) -> None:
        self.path = path
        self.domain = domain
        self.secure = secure
        self.httponly = httponly
        self.samesite: str | None = None
        self.store: dict[str, str] = {}
        self._outgoing: dict[str, Morsel] = {}
        if isinstance(cookies, str):
            parsed = SimpleCookie()
            parsed.load(cookies)
            self.store = {morsel.key: morsel.value for morsel in parsed.values()}
        elif cookies:
            self.store = dict(cookies)

    def set_path(self, path: str) -> Cookies:
        self.path = path
        return self

    def set_domain(self, domain: str) -> Cookies:
        self.domain = domain
        return self

    def set_secure(self, secure: bool) -> Cookies:
        self.secure = secure
        return self

    def set_httponly(self, httponly: bool) -> Cookies:
        self.httponly = httponly
        return self

    def set_same_site(self, samesite: str) -> Cookies:
        samesite = samesite.lower().capitalize()
        if samesite not in self.SAME_SITE_VALUES:
            raise InvalidArgumentError("The argument needs to be one of (None, Lax or Strict)")
        self.samesite = samesite
        return self

    def set(self, name: str, value: str, expires: int = 0, force: bool = False) -> None:
        """
        Queue a cookie; ``expires`` is a UNIX timestamp, 0 for a session cookie.

        With ``force`` the value is also visible to :meth:`get` straight away.
        """
        jar = SimpleCookie()
        jar[name] = value
        morsel = jar[name]
        if expires:
            morsel["expires"] = http_date(expires)
        morsel["path"] = self.path
        if self.domain:
            morsel["domain"] = self.domain
        morsel["secure"] = self.secure
        morsel["httponly"] = self.httponly
        if self.samesite:
            morsel["samesite"] = self.samesite
        self._outgoing[name] = morsel
        if force:
            self.store[name] = value

    def has(self, name: str) -> bool:
        return name in self.store

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.store.get(name, default)

    def delete(self, name: str) -> None:
        if self.has(name):
            self.set(name, "", int(time.time()))
            del self.store[name]

    def is_secure(self) -> bool:
        """Whether cookies are strict same-site, HTTPS only and hidden from scripts."""
        return self.samesite == "Strict" and self.secure and self.httponly

    def header_values(self) -> list[str]:
        return [morsel.OutputString() for morsel in self._outgoing.values()]

    def __repr__(self) -> str:
        return f"<Cookies {self.store}>"
