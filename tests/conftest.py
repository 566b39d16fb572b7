import json

import pytest
import requests
from fastapi.testclient import TestClient

from app.config import Settings, get_settings
from app.main import app, get_graph_client


class FakeGraphClient:
    """Stands in for GraphClient: maps paths to payloads or exceptions."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, path):
        self.calls.append(path)
        result = self.routes[path]
        if isinstance(result, Exception):
            raise result
        return result


def make_response(status_code, body=None, reason=""):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    if body is None:
        response._content = b""
    elif isinstance(body, (dict, list)):
        response._content = json.dumps(body).encode()
    else:
        response._content = body.encode()
    return response


@pytest.fixture
def settings():
    return Settings(
        AZURE_TENANT_ID="tenant",
        AZURE_CLIENT_ID="client",
        AZURE_CLIENT_SECRET="secret",
        ENVIRONMENT="production",
        EXCEL_SITE_ID="root",
        EXCEL_DRIVE_ID="drive",
        EXCEL_FILE_ID="file",
        FORM_ID="abc",
        FORM_ID_EXACT=False,
        FORMS_OWNER_ID=None,
        FORMS_COLLECTION_PATH="/forms",
    )


@pytest.fixture
def make_client(settings):
    def _make(routes, **overrides):
        graph = FakeGraphClient(routes)
        active = settings.model_copy(update=overrides)
        app.dependency_overrides[get_settings] = lambda: active
        app.dependency_overrides[get_graph_client] = lambda: graph
        return TestClient(app), graph

    yield _make
    app.dependency_overrides.clear()
