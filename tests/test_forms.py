import pytest

from app.exceptions import AuthError, ConfigError, GraphApiError, NotFoundError
from app.services.forms import FormsService, flatten_response, match_form_id

from conftest import FakeGraphClient

RAW_RESPONSE = {
    "id": "r1",
    "submitDate": "2024-01-15T10:00:00Z",
    "respondent": {"emailAddress": "alice@example.com", "displayName": "Alice"},
    "answers": [
        {"questionId": "q1", "value": "Yes"},
        {"questionId": "q2", "answer": "42"},
    ],
}

FLAT_RESPONSE = {
    "id": "r1",
    "submitDate": "2024-01-15T10:00:00Z",
    "respondent": "alice@example.com",
    "answers": [
        {"questionId": "q1", "value": "Yes"},
        {"questionId": "q2", "value": "42"},
    ],
}


def forms_routes(responses=None, forms=None):
    if forms is None:
        forms = [{"id": "abc123", "title": "Survey"}, {"id": "xyz", "title": "Other"}]
    return {
        "/forms": {"value": forms},
        "/forms/abc123/responses": {"value": responses if responses is not None else [RAW_RESPONSE]},
    }


def test_match_prefers_first_overlapping_id():
    assert match_form_id("abc", ["abc123", "xyz"]) == "abc123"
    assert match_form_id("abc123-long", ["xyz", "abc123"]) == "abc123"
    assert match_form_id("abc", ["zabc", "abc123"]) == "zabc"


def test_match_without_overlap_is_none():
    assert match_form_id("abc", ["xyz", "def"]) is None
    assert match_form_id("abc", ["", "xyz"]) is None


def test_flatten_pulls_respondent_email_up():
    assert flatten_response(RAW_RESPONSE) == FLAT_RESPONSE


def test_flatten_anonymous_response():
    flat = flatten_response({"id": "r2", "submittedDateTime": "2024-02-01T00:00:00Z"})

    assert flat == {"id": "r2", "submitDate": "2024-02-01T00:00:00Z", "respondent": None, "answers": []}


def test_service_enumerates_and_resolves_partial_id():
    graph = FakeGraphClient(forms_routes())
    service = FormsService(graph, form_id="abc")

    assert service.get_responses() == [FLAT_RESPONSE]
    assert graph.calls == ["/forms", "/forms/abc123/responses"]


def test_service_with_exact_id_skips_enumeration():
    graph = FakeGraphClient({"/users/u1/forms/abc123/responses": {"value": []}})
    service = FormsService(graph, form_id="abc123", collection_path="/users/u1/forms", exact_id=True)

    assert service.get_responses() == []
    assert graph.calls == ["/users/u1/forms/abc123/responses"]


def test_service_requires_form_id():
    with pytest.raises(ConfigError, match="Form ID is required"):
        FormsService(FakeGraphClient({}), form_id=None).get_responses()


def test_service_without_match_raises_not_found():
    graph = FakeGraphClient(forms_routes(forms=[{"id": "xyz"}]))

    with pytest.raises(NotFoundError):
        FormsService(graph, form_id="abc").get_responses()


def test_forms_endpoint_returns_flattened_responses(make_client):
    client, _ = make_client(forms_routes())

    response = client.get("/api/forms")

    assert response.status_code == 200
    assert response.json() == {"responses": [FLAT_RESPONSE]}


def test_forms_endpoint_without_form_id_is_400(make_client):
    client, graph = make_client({}, FORM_ID=None)

    response = client.get("/api/forms")

    assert response.status_code == 400
    assert response.json() == {"error": "Form ID is required"}
    assert graph.calls == []


def test_forms_endpoint_unmatched_id_is_404(make_client):
    client, _ = make_client(forms_routes(forms=[{"id": "xyz"}]))

    response = client.get("/api/forms")

    assert response.status_code == 404
    assert response.json() == {"error": "Form not found"}


def test_forms_endpoint_graph_404_on_responses_is_500_with_status_text(make_client):
    routes = {"/forms/abc123/responses": GraphApiError(404, "Not Found", {"error": {"message": "gone"}})}
    client, _ = make_client(routes, FORM_ID="abc123", FORM_ID_EXACT=True)

    response = client.get("/api/forms")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to fetch form responses"
    assert "Not Found" in body["details"]


def test_forms_endpoint_graph_failure_is_500_with_status_text(make_client):
    routes = forms_routes()
    routes["/forms/abc123/responses"] = GraphApiError(503, "Service Unavailable", "busy")
    client, _ = make_client(routes)

    response = client.get("/api/forms")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to fetch form responses"
    assert "Service Unavailable" in body["details"]
    assert "upstream" not in body


def test_forms_endpoint_upstream_body_only_in_development(make_client):
    routes = forms_routes()
    routes["/forms/abc123/responses"] = GraphApiError(503, "Service Unavailable", "busy")
    client, _ = make_client(routes, ENVIRONMENT="development")

    assert client.get("/api/forms").json()["upstream"] == "busy"


def test_forms_endpoint_uses_per_user_collection(make_client):
    routes = {
        "/users/owner-1/forms": {"value": [{"id": "abc123"}]},
        "/users/owner-1/forms/abc123/responses": {"value": []},
    }
    client, graph = make_client(routes, FORMS_OWNER_ID="owner-1")

    response = client.get("/api/forms")

    assert response.status_code == 200
    assert graph.calls == ["/users/owner-1/forms", "/users/owner-1/forms/abc123/responses"]


def test_forms_list_endpoint(make_client):
    forms = [{"id": "form1", "title": "Test Form 1", "createdDateTime": "2024-01-15T10:00:00Z",
              "responseCount": 5, "settings": {}}]
    client, _ = make_client({"/forms": {"value": forms}})

    response = client.get("/api/forms/list")

    assert response.status_code == 200
    assert response.json() == {"value": [{
        "id": "form1", "title": "Test Form 1",
        "createdDateTime": "2024-01-15T10:00:00Z", "responseCount": 5,
    }]}


def test_post_forms_echoes_body(make_client):
    client, _ = make_client({})

    response = client.post("/api/forms", json={"answer": "yes"})

    assert response.status_code == 200
    assert response.json() == {"message": "Form data received", "data": {"answer": "yes"}}


def test_post_forms_rejects_invalid_json(make_client):
    client, _ = make_client({})

    response = client.post("/api/forms", content=b"not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}


def test_flatten_respondent_given_as_plain_string():
    flat = flatten_response({"id": "r3", "respondent": "bob@example.com"})

    assert flat["respondent"] == "bob@example.com"


def test_forms_endpoint_auth_failure_is_500(make_client):
    client, _ = make_client({"/forms": AuthError("Authentication failed: invalid_client")})

    response = client.get("/api/forms")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Authentication failed"
    assert "invalid_client" in body["details"]
