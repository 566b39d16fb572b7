# app/services/graph_client.py
import requests
from typing import Any, Optional
import logging

from app.exceptions import GraphApiError

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"

class GraphClient:
    """Authenticated GET access to Microsoft Graph.

    No retries and no paging: `@odata.nextLink` in a response is left for the
    caller to ignore.
    """

    def __init__(self, token_provider, base_url: str = GRAPH_BASE_URL,
                 timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.token_provider = token_provider
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def get(self, path: str) -> Any:
        """GET a Graph path (relative to the v1.0 root) and return the decoded JSON body."""
        url = self._url(path)
        access_token = self.token_provider.get_token().value
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json"
        }

        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Graph request failed for {path}: {str(e)}")
            raise GraphApiError(0, "Network Error", None, f"Graph request failed: {str(e)}") from e

        if not 200 <= response.status_code < 300:
            body = self._error_body(response)
            logger.error(
                f"Graph API error: status={response.status_code} "
                f"statusText={response.reason} data={body}"
            )
            raise GraphApiError(response.status_code, response.reason or "", body)

        if not response.content:
            return {}
        return response.json()

    @staticmethod
    def _error_body(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text
