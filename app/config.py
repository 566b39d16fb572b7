import os
from typing import Annotated, Optional, List
from pydantic_settings import BaseSettings, NoDecode
from pydantic import validator
from dotenv import load_dotenv
from functools import lru_cache

from app.exceptions import ConfigError

# Load environment variables from .env file
load_dotenv()

class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = "Graph Data API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "production")
    DEBUG: bool = False

    # CORS Settings
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = os.getenv("BACKEND_CORS_ORIGINS", "*").split(",")

    # Azure AD Settings
    AZURE_TENANT_ID: Optional[str] = os.getenv("AZURE_TENANT_ID")
    AZURE_CLIENT_ID: Optional[str] = os.getenv("AZURE_CLIENT_ID")
    AZURE_CLIENT_SECRET: Optional[str] = os.getenv("AZURE_CLIENT_SECRET")
    AUTHORITY_HOST: str = os.getenv("AUTHORITY_HOST", "https://login.microsoftonline.com")
    GRAPH_SCOPE: str = os.getenv("GRAPH_SCOPE", "https://graph.microsoft.com/.default")
    TOKEN_REFRESH_SKEW_SECONDS: int = int(os.getenv("TOKEN_REFRESH_SKEW_SECONDS", "60"))

    # Graph Settings
    GRAPH_BASE_URL: str = os.getenv("GRAPH_BASE_URL", "https://graph.microsoft.com/v1.0")
    REQUEST_TIMEOUT: Optional[float] = None

    # Excel Settings
    EXCEL_SITE_ID: str = os.getenv("EXCEL_SITE_ID", "root")
    EXCEL_DRIVE_ID: Optional[str] = os.getenv("EXCEL_DRIVE_ID")
    EXCEL_FILE_ID: Optional[str] = os.getenv("EXCEL_FILE_ID")

    # Forms Settings
    FORM_ID: Optional[str] = os.getenv("FORM_ID")
    FORM_ID_EXACT: bool = os.getenv("FORM_ID_EXACT", "False").lower() == "true"
    FORMS_OWNER_ID: Optional[str] = os.getenv("FORMS_OWNER_ID")
    FORMS_COLLECTION_PATH: str = os.getenv("FORMS_COLLECTION_PATH", "/forms")

    # Logging Settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE")

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str):
            return [i.strip() for i in v.split(",")]
        return v

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def forms_collection_path(self) -> str:
        """Per-user forms when an owner is configured, organization forms otherwise."""
        if self.FORMS_OWNER_ID:
            return f"/users/{self.FORMS_OWNER_ID}/forms"
        return "/" + self.FORMS_COLLECTION_PATH.strip("/")

    class Config:
        case_sensitive = True
        env_file = ".env"
        extra = "ignore"

@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

# Create settings instance
settings = get_settings()

# Validate required settings
def validate_settings(settings: Settings) -> None:
    """Validate that all required settings are present."""
    required_settings = [
        "AZURE_TENANT_ID",
        "AZURE_CLIENT_ID",
        "AZURE_CLIENT_SECRET",
    ]

    missing_settings = [
        setting for setting in required_settings
        if not getattr(settings, setting)
    ]

    if missing_settings:
        raise ConfigError(f"Missing required settings: {', '.join(missing_settings)}")
