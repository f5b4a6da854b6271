import logging

import requests

from sentinel_explorer.config import get_settings
from sentinel_explorer.errors import InvalidArgument, RemoteError

log = logging.getLogger(__name__)


class ODataAuthenticator:
    """Handles OAuth2 password authentication for Copernicus Data Space Ecosystem"""

    def __init__(
        self,
        token_url: str,
        client_id: str,
        username: str | None,
        password: str | None,
        timeout: int | None = None,
    ):
        self.token_url = token_url
        self.client_id = client_id
        self.username = username
        self.password = password
        self.timeout = timeout
        self.access_token: str | None = None

        if not self.token_url or not self.client_id:
            raise InvalidArgument("Token URL and client ID must be set")
        if not self.username or not self.password:
            raise InvalidArgument(
                "Username and password must be provided, either explicitly or through "
                "SENTINEL_EXPLORER_USER and SENTINEL_EXPLORER_PASS"
            )

    def request_token(self) -> str:
        """Exchange username/password for an access token.

        Raises:
            RemoteError: when the identity service rejects the request or the reply has no token.

        Returns:
            str: the access token.
        """
        data = {
            "client_id": self.client_id,
            "username": self.username,
            "password": self.password,
            "grant_type": "password",
        }
        try:
            response = requests.post(
                self.token_url,
                data=data,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise RemoteError(f"Authentication request failed: {e}") from e

        if response.status_code != 200:
            raise RemoteError("Authentication failed", status_code=response.status_code, body=response.text)
        try:
            token = response.json().get("access_token")
        except ValueError as e:
            raise RemoteError(
                f"Unreadable reply from authentication: {e}", status_code=response.status_code, body=response.text
            ) from e
        if not token:
            raise RemoteError("No access token received from authentication", status_code=200, body=response.text)
        self.access_token = token
        log.debug("Successfully authenticated with Copernicus")
        return token

    def authenticate(self) -> bool:
        """Authenticate with username/password, logging failures instead of raising"""
        try:
            self.request_token()
            return True
        except RemoteError as e:
            log.error("Authentication failed with response code %s!\n\nResponse:\n%s", e.status_code, e.body or e)
            self.access_token = None
            return False


def get_access_token(username: str | None = None, password: str | None = None) -> str | None:
    """Authenticate with Copernicus Data Space credentials.

    Credentials may be passed explicitly; when omitted they are read from the settings,
    which map the SENTINEL_EXPLORER_USER and SENTINEL_EXPLORER_PASS environment variables.

    Args:
        username (str | None, optional): Copernicus Data Space username.
        password (str | None, optional): Copernicus Data Space password.

    Returns:
        str | None: an access token for downloading data, or None when authentication fails.

    Example:
        >>> token = get_access_token(os.environ["SENTINEL_EXPLORER_USER"], os.environ["SENTINEL_EXPLORER_PASS"])
        >>> token = get_access_token()  # same as above
    """
    settings = get_settings()
    authenticator = ODataAuthenticator(
        token_url=settings.token_url,
        client_id=settings.client_id,
        username=username or settings.user,
        password=password or settings.password,
        timeout=settings.timeout,
    )
    if not authenticator.authenticate():
        return None
    return authenticator.access_token
