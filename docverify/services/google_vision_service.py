"""
Servei de Google Cloud Vision (motor de fallback)
"""
import json
import logging
from google.cloud import vision
from google.oauth2 import service_account
from docverify.config import settings
from typing import Optional

log = logging.getLogger("ocr.vision")


class GoogleVisionService:
    """Wrapper per Google Cloud Vision API"""

    def __init__(self):
        self.client: Optional[vision.ImageAnnotatorClient] = None
        self._initialize_client()

    def _initialize_client(self):
        """Inicialitza el client de Google Vision"""
        if not settings.google_cloud_vision_enabled:
            log.info("vision_disabled")
            return

        try:
            # Credencials des de variable d'entorn JSON
            if settings.google_cloud_credentials_json:
                credentials_dict = json.loads(settings.google_cloud_credentials_json)
                credentials = service_account.Credentials.from_service_account_info(credentials_dict)
                self.client = vision.ImageAnnotatorClient(credentials=credentials)
                log.info("vision_credentials_env")
            else:
                # Application Default Credentials
                self.client = vision.ImageAnnotatorClient()
                log.info("vision_credentials_adc")

            log.info("vision_client_ready", extra={"project": settings.google_cloud_project_id or "N/A"})

        except Exception as e:
            log.warning("vision_init_error", extra={"error_type": type(e).__name__})
            self.client = None

    def is_available(self) -> bool:
        """Verifica si Google Vision està disponible"""
        return self.client is not None

    def recognize(self, image_bytes: bytes) -> str:
        """
        Detecta text de documents (millor per documents estructurats)

        Args:
            image_bytes: Contingut de la imatge

        Returns:
            Text complet del document ("" si no n'hi ha)
        """
        if not self.is_available():
            raise RuntimeError("Google Vision no està disponible")

        image = vision.Image(content=image_bytes)
        response = self.client.document_text_detection(image=image)

        if response.error.message:
            raise RuntimeError(f"Google Vision API error: {response.error.message}")

        if not response.full_text_annotation:
            return ""

        return response.full_text_annotation.text


# Singleton
google_vision_service = GoogleVisionService()
