"""
Configuració del servei de verificació de documents de viatge
"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Configuració de l'aplicació"""

    # App
    app_name: str = "DocVerify"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Google Cloud Vision (motor de fallback)
    google_cloud_vision_enabled: bool = True
    google_cloud_credentials_json: Optional[str] = None
    google_cloud_project_id: Optional[str] = None

    # Tesseract (motor principal)
    tesseract_enabled: bool = True
    tesseract_lang: str = "eng"
    tesseract_max_concurrency: int = 2

    # Limits
    max_file_size_mb: int = 10
    ocr_timeout_seconds: int = 30

    # Elegibilitat
    default_visa_type: str = "tourist"
    policy_file: Optional[str] = None  # JSON amb una EligibilityPolicy sencera

    # Dates no trobades: "" (desconegut) o data d'avui (comportament antic)
    missing_date_as_today: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = False


# Singleton de configuració
settings = Settings()
