"""Page renderer for printing authenticated article pages to PDF.

Uses a headless Chromium driven by Playwright. One browser is launched
lazily and reused for the whole run; each page gets a fresh browser
context seeded with the session cookies.
"""

import logging
from http.cookiejar import CookieJar
from pathlib import Path

from playwright.sync_api import Browser, Playwright, sync_playwright
from playwright.sync_api import Error as PlaywrightError

from .cookies import to_browser_cookies
from .exceptions import RenderError

logger = logging.getLogger(__name__)


class PageRenderer:
    """Render web pages to fixed-layout PDF documents.

    Attributes:
        cookies: Cookie jar of the authenticated session (read only)
        timeout: Navigation timeout in seconds
        page_format: Paper format passed to the PDF printer
    """

    def __init__(
        self,
        cookies: CookieJar,
        timeout: float = 60.0,
        page_format: str = "A4",
    ):
        self.cookies = cookies
        self.timeout = timeout
        self.page_format = page_format
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    def _get_browser(self) -> Browser:
        """Get or launch the headless browser.

        A failed launch stops Playwright again, so the next call starts over.
        """
        if self._browser is None:
            self._playwright = sync_playwright().start()
            try:
                self._browser = self._playwright.chromium.launch(headless=True)
            except PlaywrightError:
                self.close()
                raise
        return self._browser

    def close(self) -> None:
        """Close the browser and stop Playwright if they were started."""
        if self._browser is not None:
            self._browser.close()
            self._browser = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None

    def __enter__(self) -> "PageRenderer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def render(self, url: str, destination: Path) -> Path:
        """Render a page to a PDF file.

        Waits until the page's network activity is idle before printing so
        that late-loading content is not cut off.

        Args:
            url: Page URL (typically its print view)
            destination: PDF file to write

        Returns:
            The destination path

        Raises:
            RenderError: If navigation or printing fails
        """
        temp_path = destination.with_name(destination.name + ".part")
        try:
            context = self._get_browser().new_context()
        except PlaywrightError as e:
            raise RenderError(f"Failed to render {url}: cannot start browser: {e}") from e

        try:
            cookies = to_browser_cookies(self.cookies, url)
            if cookies:
                context.add_cookies(cookies)

            page = context.new_page()
            page.goto(url, wait_until="networkidle", timeout=self.timeout * 1000)

            destination.parent.mkdir(parents=True, exist_ok=True)
            page.pdf(path=str(temp_path), format=self.page_format, print_background=True)
            temp_path.replace(destination)
        except PlaywrightError as e:
            temp_path.unlink(missing_ok=True)
            raise RenderError(f"Failed to render {url}: {e}") from e
        finally:
            context.close()

        logger.debug(f"Rendered {url} to {destination}")
        return destination
