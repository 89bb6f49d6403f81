"""Session manager owning the authenticated archive client."""

import logging
from pathlib import Path

import httpx
from pydantic import ValidationError as PydanticValidationError

from periodical_archiver.config import ArchiveSettings
from schemas.session import LoginResponse, SessionState, StoredCookie

from .exceptions import LoginError, SessionError

logger = logging.getLogger(__name__)


class SessionManager:
    """Owns the httpx client and its cookie-based login state.

    The session is either restored from the persisted cookie file or created
    by the login protocol, then saved. Fetchers and renderers read the
    client's cookies but never modify them.

    Example:
        settings = load_settings()
        with SessionManager(settings) as sessions:
            client = sessions.ensure_session()
    """

    def __init__(
        self,
        settings: ArchiveSettings,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the session manager.

        Args:
            settings: Archive settings with credentials and site URLs
            transport: Optional httpx transport, used by tests to stub the site
        """
        self.settings = settings
        self._transport = transport
        self._client: httpx.Client | None = None

    @property
    def session_path(self) -> Path:
        return self.settings.session_path

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialized httpx client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.settings.timeout,
                headers={"User-Agent": self.settings.user_agent},
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    @property
    def cookies(self) -> httpx.Cookies:
        return self.client.cookies

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def ensure_session(self, force_login: bool = False) -> httpx.Client:
        """Return an authenticated client, logging in only when needed.

        Args:
            force_login: Ignore a persisted session and log in again

        Returns:
            The authenticated httpx client

        Raises:
            LoginError: If the login protocol fails
        """
        if self.session_path.exists() and not force_login:
            try:
                self.load()
                return self.client
            except SessionError as e:
                logger.warning(f"{e}; logging in again")
        elif force_login:
            logger.info("Ignoring saved session, logging in")
        else:
            logger.info(f"No usable session at {self.session_path}, logging in")

        self.login()
        self.save()
        return self.client

    def login(self) -> None:
        """Run the login protocol on a fresh client.

        1. GET the login page to obtain anonymous session cookies
        2. POST the credentials to the login-submit endpoint
        3. POST each returned token to its remote login URL, in order

        Raises:
            LoginError: On any network, HTTP status or response format error
        """
        self.close()
        site = self.settings.site

        try:
            logger.info("Logging in...")
            self.client.get(site.login_url).raise_for_status()

            response = self.client.post(
                site.login_submit_url,
                data={
                    "forward": "",
                    "username": self.settings.username,
                    "password": self.settings.password,
                    "ajax": "1",
                },
            )
            response.raise_for_status()
            login_response = LoginResponse.model_validate(response.json())

            for remote in login_response.remote_login_urls:
                logger.debug(f"Completing login at {remote.url}")
                self.client.post(
                    remote.url, data={"token": remote.data.token}
                ).raise_for_status()
        except httpx.HTTPError as e:
            self.close()
            raise LoginError(f"Login failed: {e}") from e
        except (PydanticValidationError, ValueError) as e:
            self.close()
            raise LoginError(f"Login failed: unexpected login response: {e}") from e

        logger.info("Login successful.")

    def save(self) -> None:
        """Persist the client's cookies to the session file."""
        state = SessionState(
            cookies=[StoredCookie.from_cookie(cookie) for cookie in self.cookies.jar]
        )
        self.session_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.session_path.with_name(self.session_path.name + ".part")
        temp_path.write_text(state.model_dump_json(indent=2))
        temp_path.replace(self.session_path)
        logger.debug(f"Saved {len(state.cookies)} cookies to {self.session_path}")

    def load(self) -> None:
        """Restore cookies from the session file into a fresh client.

        Raises:
            SessionError: If the file cannot be read or parsed
        """
        try:
            state = SessionState.model_validate_json(self.session_path.read_text())
        except (OSError, PydanticValidationError) as e:
            raise SessionError(f"Cannot read session file {self.session_path}: {e}") from e

        self.close()
        for stored in state.cookies:
            self.cookies.jar.set_cookie(stored.to_cookie())
        logger.debug(f"Restored {len(state.cookies)} cookies from {self.session_path}")
