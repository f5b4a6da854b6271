"""Authentication against the Copernicus Data Space identity service.

- ODataAuthenticator: OAuth2 password grant returning a bearer token
- get_access_token: one-shot token helper, returns None on failure
"""

from sentinel_explorer.auth.odata import ODataAuthenticator, get_access_token

__all__ = ["ODataAuthenticator", "get_access_token"]
