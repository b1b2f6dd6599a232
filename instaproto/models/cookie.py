"""
Cookie Models
=============
Lossless serialized form of an http.cookiejar.CookieJar.
"""

from http.cookiejar import Cookie, CookieJar
from typing import Dict, List, Optional

from pydantic import BaseModel


class SerializedCookie(BaseModel):
    """Every attribute of a single cookie."""

    version: Optional[int] = 0
    name: str
    value: Optional[str] = None
    port: Optional[str] = None
    port_specified: bool = False
    domain: str = ""
    domain_specified: bool = False
    domain_initial_dot: bool = False
    path: str = "/"
    path_specified: bool = False
    secure: bool = False
    expires: Optional[int] = None
    discard: bool = True
    comment: Optional[str] = None
    comment_url: Optional[str] = None
    rest: Dict[str, Optional[str]] = {}
    rfc2109: bool = False

    @classmethod
    def from_cookie(cls, cookie: Cookie) -> "SerializedCookie":
        return cls(
            version=cookie.version,
            name=cookie.name,
            value=cookie.value,
            port=cookie.port,
            port_specified=cookie.port_specified,
            domain=cookie.domain,
            domain_specified=cookie.domain_specified,
            domain_initial_dot=cookie.domain_initial_dot,
            path=cookie.path,
            path_specified=cookie.path_specified,
            secure=cookie.secure,
            expires=cookie.expires,
            discard=cookie.discard,
            comment=cookie.comment,
            comment_url=cookie.comment_url,
            rest=dict(getattr(cookie, "_rest", {})),
            rfc2109=cookie.rfc2109,
        )

    def to_cookie(self) -> Cookie:
        return Cookie(
            version=self.version,
            name=self.name,
            value=self.value,
            port=self.port,
            port_specified=self.port_specified,
            domain=self.domain,
            domain_specified=self.domain_specified,
            domain_initial_dot=self.domain_initial_dot,
            path=self.path,
            path_specified=self.path_specified,
            secure=self.secure,
            expires=self.expires,
            discard=self.discard,
            comment=self.comment,
            comment_url=self.comment_url,
            rest=dict(self.rest),
            rfc2109=self.rfc2109,
        )


class SerializedCookieJar(BaseModel):
    """Whole jar, dumped with model_dump_json() and restored with model_validate_json()."""

    version: int = 1
    cookies: List[SerializedCookie] = []

    @classmethod
    def from_jar(cls, jar: CookieJar) -> "SerializedCookieJar":
        return cls(cookies=[SerializedCookie.from_cookie(c) for c in jar])

    def to_jar(self, jar: Optional[CookieJar] = None) -> CookieJar:
        """Fill `jar` (cleared first) or a new CookieJar with the stored cookies."""
        if jar is None:
            jar = CookieJar()
        else:
            jar.clear()
        for item in self.cookies:
            jar.set_cookie(item.to_cookie())
        return jar
