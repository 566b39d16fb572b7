# app/auth/graph_token.py
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import msal
import requests

from app.exceptions import AuthError

logger = logging.getLogger(__name__)

DEFAULT_AUTHORITY_HOST = "https://login.microsoftonline.com"
DEFAULT_SCOPE = "https://graph.microsoft.com/.default"
DEFAULT_EXPIRES_IN = 3600


@dataclass(frozen=True)
class AccessToken:
    value: str
    expires_at: float

    def is_valid(self, now: float, skew: float = 0) -> bool:
        return bool(self.value) and now < self.expires_at - skew


class TokenProvider:
    """Client-credentials token source for Microsoft Graph.

    Tokens are cached per (tenant, client) and reused until `refresh_skew`
    seconds before they expire. Lookup and refresh share one lock, so callers
    racing past expiry wait for a single token request instead of each
    issuing their own.
    """

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        authority_host: str = DEFAULT_AUTHORITY_HOST,
        scope: str = DEFAULT_SCOPE,
        refresh_skew: float = 60,
        clock: Callable[[], float] = time.time,
    ):
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.authority = f"{authority_host.rstrip('/')}/{tenant_id}"
        self.scope = [scope]
        self.refresh_skew = refresh_skew
        self._clock = clock
        self._app: Optional[msal.ConfidentialClientApplication] = None
        self._cache: Dict[Tuple[str, str], AccessToken] = {}
        self._lock = threading.Lock()

    @property
    def cache_key(self) -> Tuple[str, str]:
        return (self.tenant_id, self.client_id)

    def _get_app(self) -> msal.ConfidentialClientApplication:
        if self._app is None:
            self._app = msal.ConfidentialClientApplication(
                client_id=self.client_id,
                client_credential=self.client_secret,
                authority=self.authority
            )
        return self._app

    def get_token(self) -> AccessToken:
        """Return a cached token, or acquire a fresh one when it is close to expiry."""
        with self._lock:
            cached = self._cache.get(self.cache_key)
            if cached and cached.is_valid(self._clock(), self.refresh_skew):
                return cached

            token = self._acquire()
            self._cache[self.cache_key] = token
            return token

    def invalidate(self) -> None:
        with self._lock:
            self._cache.pop(self.cache_key, None)

    def _acquire(self) -> AccessToken:
        logger.info("Attempting to get access token...")
        try:
            result = self._get_app().acquire_token_for_client(scopes=self.scope)
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Token request failed: {str(e)}")
            raise AuthError(f"Authentication failed: {str(e)}") from e

        access_token = (result or {}).get("access_token")
        if not access_token:
            result = result or {}
            description = result.get("error_description") or result.get("error") or "Unknown error"
            logger.error(f"Token Error: {result.get('error')} - {description}")
            raise AuthError(f"Authentication failed: {description}")

        try:
            expires_in = float(result.get("expires_in") or DEFAULT_EXPIRES_IN)
        except (TypeError, ValueError):
            expires_in = DEFAULT_EXPIRES_IN

        logger.info("Token acquired successfully")
        return AccessToken(value=access_token, expires_at=self._clock() + expires_in)
