# app/models/schemas.py
from pydantic import BaseModel
from typing import Any, List, Dict, Optional

class ExcelResponse(BaseModel):
    success: bool
    data: List[Dict[str, Any]]

class ExcelErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: Optional[Dict[str, Any]] = None

class Answer(BaseModel):
    questionId: Optional[str] = None
    value: Any = None

class FormResponse(BaseModel):
    id: Optional[str] = None
    submitDate: Optional[str] = None
    respondent: Optional[str] = None
    answers: List[Answer] = []

class FormsResponse(BaseModel):
    responses: List[FormResponse]

class FormSummary(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = None
    createdDateTime: Optional[str] = None
    responseCount: Optional[int] = None

class FormsListResponse(BaseModel):
    value: List[FormSummary]

class FormsErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None
    upstream: Optional[Any] = None

class FormSubmissionResponse(BaseModel):
    message: str
    data: Any = None
