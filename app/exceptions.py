# app/exceptions.py
from typing import Any


class GraphProxyError(Exception):
    """Base class for errors raised while proxying Microsoft Graph."""


class ConfigError(GraphProxyError):
    """A required configuration value is missing."""


class AuthError(GraphProxyError):
    """The identity provider rejected the credentials or could not be reached."""


class NotFoundError(GraphProxyError):
    """An expected resource (worksheet, form) is absent."""


class GraphApiError(GraphProxyError):
    def __init__(self, status: int, status_text: str = "", body: Any = None, message: str = ""):
        self.status = status
        self.status_text = status_text
        self.body = body
        if not message:
            message = f"Graph API error {status} {status_text}".strip()
            if self.upstream_message:
                message = f"{message}: {self.upstream_message}"
        super().__init__(message)

    @property
    def upstream_message(self) -> str:
        """Graph's own `error.message`, when the body carries one."""
        if isinstance(self.body, dict):
            error = self.body.get("error")
            if isinstance(error, dict):
                return error.get("message") or ""
        return ""
