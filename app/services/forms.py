# app/services/forms.py
from typing import Any, Dict, List, Optional
import logging

from app.exceptions import ConfigError, NotFoundError

logger = logging.getLogger(__name__)


def match_form_id(form_id: str, available_ids: List[str]) -> Optional[str]:
    """Loose id match: the first id containing, or contained by, `form_id`.

    Several ids can satisfy the predicate; list order decides.
    """
    for candidate in available_ids:
        if candidate and (form_id in candidate or candidate in form_id):
            return candidate
    return None


def flatten_response(raw: Dict[str, Any]) -> Dict[str, Any]:
    respondent = raw.get("respondent")
    if isinstance(respondent, dict):
        respondent = respondent.get("emailAddress")
    elif not isinstance(respondent, str):
        respondent = None
    return {
        "id": raw.get("id"),
        "submitDate": raw.get("submitDate", raw.get("submittedDateTime")),
        "respondent": respondent,
        "answers": [
            {
                "questionId": answer.get("questionId"),
                "value": answer.get("value", answer.get("answer")),
            }
            for answer in raw.get("answers") or []
        ],
    }


def summarize_form(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": raw.get("id"),
        "title": raw.get("title"),
        "createdDateTime": raw.get("createdDateTime"),
        "responseCount": raw.get("responseCount"),
    }


class FormsService:
    def __init__(self, graph_client, form_id: Optional[str] = None,
                 collection_path: str = "/forms", exact_id: bool = False):
        self.graph_client = graph_client
        self.form_id = form_id
        self.collection_path = collection_path.rstrip("/")
        self.exact_id = exact_id

    def list_forms(self) -> List[Dict]:
        """List the forms visible to the service identity."""
        return self.graph_client.get(self.collection_path).get("value", [])

    def resolve_form_id(self) -> str:
        if not self.form_id:
            raise ConfigError("Form ID is required")

        if self.exact_id:
            return self.form_id

        forms = self.list_forms()
        logger.info(f"Available forms: {[f.get('id') for f in forms]}")
        resolved = match_form_id(self.form_id, [f.get("id") or "" for f in forms])
        if not resolved:
            raise NotFoundError("Form not found")
        logger.info(f"Resolved form ID {self.form_id} to {resolved}")
        return resolved

    def get_responses(self) -> List[Dict[str, Any]]:
        form_id = self.resolve_form_id()
        payload = self.graph_client.get(f"{self.collection_path}/{form_id}/responses")
        return [flatten_response(raw) for raw in payload.get("value", [])]
