"""Translation of HTTP client cookies into browser cookies.

The httpx client stores cookies as ``http.cookiejar.Cookie`` objects while
Playwright expects plain dicts. The translation is one-way:

- a leading dot in the domain is stripped
- session cookies (no expiry) become ``expires=-1``
- SameSite ``strict``/``lax``/``none`` map to ``Strict``/``Lax``/``None``;
  an unspecified SameSite maps to ``None`` for secure cookies and ``Lax``
  otherwise, since Chromium rejects insecure ``SameSite=None`` cookies
"""

from http.cookiejar import Cookie, CookieJar
from urllib.parse import urlparse

from schemas.session import HTTP_ONLY_ATTR, SAME_SITE_ATTR, get_cookie_attr

SAME_SITE_VALUES = {
    "strict": "Strict",
    "lax": "Lax",
    "none": "None",
}

SESSION_COOKIE_EXPIRES = -1


def _same_site(cookie: Cookie) -> str:
    _, value = get_cookie_attr(cookie, SAME_SITE_ATTR)
    if value and value.lower() in SAME_SITE_VALUES:
        return SAME_SITE_VALUES[value.lower()]
    return "None" if cookie.secure else "Lax"


def to_browser_cookie(cookie: Cookie) -> dict:
    """Convert one cookiejar cookie to a Playwright cookie dict."""
    domain = cookie.domain[1:] if cookie.domain.startswith(".") else cookie.domain
    http_only, _ = get_cookie_attr(cookie, HTTP_ONLY_ATTR)
    return {
        "name": cookie.name,
        "value": cookie.value or "",
        "domain": domain,
        "path": cookie.path or "/",
        "expires": int(cookie.expires) if cookie.expires is not None else SESSION_COOKIE_EXPIRES,
        "httpOnly": http_only,
        "secure": bool(cookie.secure),
        "sameSite": _same_site(cookie),
    }


def cookies_for_url(jar: CookieJar, url: str) -> list[Cookie]:
    """Select the unexpired cookies a request to ``url`` could carry.

    Path restrictions are ignored so that cookies for every path of the
    matching domains are handed to the browser.
    """
    host = (urlparse(url).hostname or "").lower()
    selected = []
    for cookie in jar:
        if cookie.is_expired():
            continue
        domain = cookie.domain.lstrip(".").lower()
        if cookie.domain_specified:
            matches = host == domain or host.endswith("." + domain)
        else:
            matches = host == domain
        if matches:
            selected.append(cookie)
    return selected


def to_browser_cookies(jar: CookieJar, url: str) -> list[dict]:
    """Translate the cookies relevant to ``url`` for injection into a browser."""
    return [to_browser_cookie(cookie) for cookie in cookies_for_url(jar, url)]
