"""
Servei de Tesseract OCR (motor principal)
"""
import io
import logging
import pytesseract
from PIL import Image
from docverify.config import settings
from typing import Optional

log = logging.getLogger("ocr.tesseract")


class TesseractService:
    """Wrapper per Tesseract OCR: bytes d'imatge → text"""

    def __init__(self):
        self.lang = settings.tesseract_lang
        self._check_availability()

    def _check_availability(self):
        """Verifica que Tesseract està instal·lat"""
        try:
            version = pytesseract.get_tesseract_version()
            log.info("tesseract_available", extra={"version": str(version)})
        except Exception as e:
            log.warning("tesseract_unavailable", extra={"error_type": type(e).__name__})

    def is_available(self) -> bool:
        """Verifica si Tesseract està disponible"""
        if not settings.tesseract_enabled:
            return False

        try:
            pytesseract.get_tesseract_version()
            return True
        except Exception:
            return False

    def recognize(self, image_bytes: bytes, lang: Optional[str] = None) -> str:
        """
        Reconeix el text d'una imatge

        Args:
            image_bytes: Contingut de la imatge (JPG, PNG, WEBP...)
            lang: Idiomes (per defecte usa config)

        Returns:
            Text en brut, línies en l'ordre de lectura
        """
        if not self.is_available():
            raise RuntimeError("Tesseract no està disponible")

        lang = lang or self.lang

        with Image.open(io.BytesIO(image_bytes)) as image:
            # PSM 6: un sol bloc uniforme de text (les MRZ queden en línies senceres)
            return pytesseract.image_to_string(image, lang=lang, config=r"--psm 6")


# Singleton
tesseract_service = TesseractService()
