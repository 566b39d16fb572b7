# app/main.py
from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings, validate_settings
from app.exceptions import AuthError, ConfigError, GraphApiError, NotFoundError
from app.models.schemas import (
    ExcelResponse,
    ExcelErrorResponse,
    FormsResponse,
    FormsListResponse,
    FormsErrorResponse,
    FormSubmissionResponse
)
from app.auth.graph_token import TokenProvider
from app.services.graph_client import GraphClient
from app.services.excel import ExcelService, rows_to_records
from app.services.forms import FormsService, summarize_form
from app.utils.logging import setup_logging

# Setup logging
logger = setup_logging()

settings = get_settings()

# Initialize FastAPI app
app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, debug=settings.DEBUG)

# Setup CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
def startup_event():
    """Fail fast on missing credentials and build the Graph clients."""
    settings = get_settings()
    validate_settings(settings)

    token_provider = TokenProvider(
        tenant_id=settings.AZURE_TENANT_ID,
        client_id=settings.AZURE_CLIENT_ID,
        client_secret=settings.AZURE_CLIENT_SECRET,
        authority_host=settings.AUTHORITY_HOST,
        scope=settings.GRAPH_SCOPE,
        refresh_skew=settings.TOKEN_REFRESH_SKEW_SECONDS
    )
    app.state.token_provider = token_provider
    app.state.graph_client = GraphClient(
        token_provider,
        base_url=settings.GRAPH_BASE_URL,
        timeout=settings.REQUEST_TIMEOUT
    )
    logger.info(f"Graph clients ready for tenant {settings.AZURE_TENANT_ID}")

@app.on_event("shutdown")
def shutdown_event():
    graph_client = getattr(app.state, "graph_client", None)
    if graph_client is not None:
        graph_client.session.close()

# Dependencies
def get_graph_client(request: Request) -> GraphClient:
    return request.app.state.graph_client

def get_excel_service(
    graph_client: GraphClient = Depends(get_graph_client),
    settings: Settings = Depends(get_settings)
) -> ExcelService:
    return ExcelService(
        graph_client,
        site_id=settings.EXCEL_SITE_ID,
        drive_id=settings.EXCEL_DRIVE_ID,
        file_id=settings.EXCEL_FILE_ID
    )

def get_forms_service(
    graph_client: GraphClient = Depends(get_graph_client),
    settings: Settings = Depends(get_settings)
) -> FormsService:
    return FormsService(
        graph_client,
        form_id=settings.FORM_ID,
        collection_path=settings.forms_collection_path,
        exact_id=settings.FORM_ID_EXACT
    )

def _error_response(status_code: int, model) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=model.model_dump(exclude_none=True))

@app.get("/")
def root(settings: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION
    }

@app.get(
    "/api/excel",
    response_model=ExcelResponse,
    responses={400: {"model": ExcelErrorResponse}, 404: {"model": ExcelErrorResponse},
               500: {"model": ExcelErrorResponse}}
)
def get_excel_data(
    excel_service: ExcelService = Depends(get_excel_service),
    settings: Settings = Depends(get_settings)
):
    """Return the first worksheet's used range as one record per data row."""
    logger.info("Starting Excel data fetch process...")
    try:
        values = excel_service.get_used_range()
        logger.info("Successfully fetched Excel data")

        records = rows_to_records(values)
        if not records:
            return _error_response(404, ExcelErrorResponse(error="No data found in Excel file"))

        return ExcelResponse(success=True, data=records)

    except ConfigError as e:
        logger.error(f"Excel configuration error: {str(e)}")
        return _error_response(400, ExcelErrorResponse(error=str(e)))
    except NotFoundError as e:
        logger.error(f"Excel resource not found: {str(e)}")
        return _error_response(404, ExcelErrorResponse(error=str(e)))
    except Exception as e:
        if isinstance(e, GraphApiError):
            message = f"Failed to fetch Excel data: {str(e)}"
        else:
            message = str(e) or "An unexpected error occurred"
        logger.exception(f"API Error: {message}")

        details = None
        if settings.is_development:
            details = {"message": str(e), "response": getattr(e, "body", None)}
        return _error_response(500, ExcelErrorResponse(error=message, details=details))

def _forms_failure(e: Exception, settings: Settings) -> JSONResponse:
    if isinstance(e, ConfigError):
        logger.error(f"Forms configuration error: {str(e)}")
        return _error_response(400, FormsErrorResponse(error=str(e)))
    if isinstance(e, NotFoundError):
        logger.error(f"Form lookup failed: {str(e)}")
        return _error_response(404, FormsErrorResponse(error="Form not found"))

    logger.exception(f"Forms API Error: {str(e)}")
    upstream = getattr(e, "body", None) if settings.is_development else None
    if isinstance(e, AuthError):
        error = "Authentication failed"
    else:
        error = "Failed to fetch form responses"
    return _error_response(500, FormsErrorResponse(error=error, details=str(e), upstream=upstream))

@app.get(
    "/api/forms",
    response_model=FormsResponse,
    responses={400: {"model": FormsErrorResponse}, 404: {"model": FormsErrorResponse},
               500: {"model": FormsErrorResponse}}
)
def get_form_responses(
    forms_service: FormsService = Depends(get_forms_service),
    settings: Settings = Depends(get_settings)
):
    """Return the configured form's responses with the respondent email pulled up."""
    try:
        responses = forms_service.get_responses()
        logger.info(f"Fetched {len(responses)} form responses")
        return FormsResponse(responses=responses)
    except Exception as e:
        return _forms_failure(e, settings)

@app.get(
    "/api/forms/list",
    response_model=FormsListResponse,
    responses={500: {"model": FormsErrorResponse}}
)
def list_forms(
    forms_service: FormsService = Depends(get_forms_service),
    settings: Settings = Depends(get_settings)
):
    """List the forms visible to the service identity."""
    try:
        forms = forms_service.list_forms()
        return FormsListResponse(value=[summarize_form(f) for f in forms])
    except Exception as e:
        return _forms_failure(e, settings)

@app.post("/api/forms", response_model=FormSubmissionResponse)
async def submit_form(request: Request):
    try:
        body = await request.json()
        return FormSubmissionResponse(message="Form data received", data=body)
    except ValueError as e:
        logger.error(f"Forms API Error: {str(e)}")
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
