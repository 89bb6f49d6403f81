"""Persisted session and login protocol schemas.

The session file is a JSON document holding every cookie of the
authenticated client:

    {
      "saved_at": "2026-01-15T10:00:00",
      "cookies": [
        {"name": "ssohls", "value": "...", "domain": ".heise.de", ...},
        ...
      ]
    }
"""

from datetime import datetime
from http.cookiejar import Cookie

from pydantic import BaseModel, Field

HTTP_ONLY_ATTR = "HttpOnly"
SAME_SITE_ATTR = "SameSite"


def get_cookie_attr(cookie: Cookie, name: str) -> tuple[bool, str | None]:
    """Look up a non-standard cookie attribute regardless of its casing.

    Servers send ``HttpOnly``/``httponly`` and ``SameSite``/``samesite``
    interchangeably and http.cookiejar keeps whatever casing it received.

    Returns:
        Tuple of (present, value)
    """
    for key in (name, name.lower(), name.upper()):
        if cookie.has_nonstandard_attr(key):
            return True, cookie.get_nonstandard_attr(key)
    return False, None


class StoredCookie(BaseModel):
    """A single serialized cookie record.

    Attributes:
        name: Cookie name
        value: Cookie value (None for valueless cookies)
        domain: Cookie domain as stored by the jar (may carry a leading dot)
        path: Cookie path
        expires: Expiry as epoch seconds, None for session cookies
        secure: Only sent over HTTPS
        http_only: Not visible to page scripts
        same_site: Raw SameSite attribute, if the server sent one
        host_only: True if the server did not set a Domain attribute
    """

    name: str
    value: str | None = None
    domain: str
    path: str = "/"
    expires: int | None = None
    secure: bool = False
    http_only: bool = False
    same_site: str | None = None
    host_only: bool = False

    @classmethod
    def from_cookie(cls, cookie: Cookie) -> "StoredCookie":
        http_only, _ = get_cookie_attr(cookie, HTTP_ONLY_ATTR)
        _, same_site = get_cookie_attr(cookie, SAME_SITE_ATTR)
        return cls(
            name=cookie.name,
            value=cookie.value,
            domain=cookie.domain,
            path=cookie.path or "/",
            expires=int(cookie.expires) if cookie.expires is not None else None,
            secure=bool(cookie.secure),
            http_only=http_only,
            same_site=same_site,
            host_only=not cookie.domain_specified,
        )

    def to_cookie(self) -> Cookie:
        rest: dict[str, str | None] = {}
        if self.http_only:
            rest[HTTP_ONLY_ATTR] = None
        if self.same_site:
            rest[SAME_SITE_ATTR] = self.same_site
        return Cookie(
            version=0,
            name=self.name,
            value=self.value,
            port=None,
            port_specified=False,
            domain=self.domain,
            domain_specified=not self.host_only,
            domain_initial_dot=self.domain.startswith("."),
            path=self.path,
            path_specified=True,
            secure=self.secure,
            expires=self.expires,
            discard=self.expires is None,
            comment=None,
            comment_url=None,
            rest=rest,
        )


class SessionState(BaseModel):
    """Serialized cookie store of an authenticated session."""

    saved_at: datetime = Field(default_factory=datetime.now)
    cookies: list[StoredCookie] = []


class RemoteLoginData(BaseModel):
    token: str


class RemoteLogin(BaseModel):
    """One federated login endpoint returned by the login-submit call."""

    url: str
    data: RemoteLoginData


class LoginResponse(BaseModel):
    """JSON body of the login-submit response.

    Each remote login URL must receive its token before the session is
    recognized on the corresponding subdomain.
    """

    remote_login_urls: list[RemoteLogin] = []

    model_config = {"extra": "allow"}
