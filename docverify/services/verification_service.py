"""
Orquestrador de verificació

  OCR (Tesseract → Google Vision) → còdec MRZ → extractor → validador documental
  + comprovador d'elegibilitat → confiança global, accions recomanades, resum

El nucli (còdec, extractor, comprovacions) és pur; aquí només hi ha la cola i
la tria de motor OCR.
"""
import logging
from datetime import date
from typing import Optional
from docverify.config import settings
from docverify.models.checks import CheckResult, EligibilityCheck, ValidationCheck
from docverify.models.fields import ExtractedDocument
from docverify.models.policy import ApplicantData, EligibilityPolicy
from docverify.models.verification_response import VerificationResult
from docverify.parsers.field_extractor import extract_fields
from docverify.parsers.mrz_codec import detect_mrz_lines, parse_and_validate_mrz
from docverify.services.google_vision_service import google_vision_service
from docverify.services.tesseract_service import tesseract_service
from docverify.utils.redact import redact_document_number, redact_name
from docverify.validators.document_validator import validate_document
from docverify.validators.eligibility_checker import check_eligibility

log = logging.getLogger("ocr.verify")

LOW_CONFIDENCE = 70
HIGH_CONFIDENCE = 85


class OCRUnavailableError(RuntimeError):
    """Cap motor OCR disponible per processar la imatge."""


# ---------------------------------------------------------------------------
# Agregats
# ---------------------------------------------------------------------------

def overall_confidence(doc: ExtractedDocument) -> int:
    """Mitjana arrodonida de la confiança de tots els camps presents."""
    confidences = list(doc.field_confidences())
    if not confidences:
        return 0
    return round(sum(confidences) / len(confidences))


def _names(checks: list[CheckResult]) -> str:
    return ", ".join(c.check for c in checks)


def recommended_actions(
    validation_checks: list[ValidationCheck],
    eligibility_checks: list[EligibilityCheck],
    confidence: int,
    additional_requirements: tuple[str, ...] = (),
    visa_type: str = "",
) -> list[str]:
    failed_validation = [c for c in validation_checks if not c.passed]
    failed_eligibility = [c for c in eligibility_checks if not c.passed]
    all_passed = not failed_validation and not failed_eligibility
    actions: list[str] = []

    if failed_validation:
        actions.append(f"Review failed validation checks: {_names(failed_validation)}")
    if failed_eligibility:
        actions.append(f"Address eligibility issues: {_names(failed_eligibility)}")
    if confidence < LOW_CONFIDENCE:
        actions.append("Request manual verification due to low confidence in extracted data")
    if confidence < HIGH_CONFIDENCE and all_passed:
        actions.append("Consider requesting clearer document images for higher confidence")
    if all_passed and confidence >= HIGH_CONFIDENCE:
        actions.append("Proceed with visa application - all checks passed")
    if additional_requirements:
        actions.append(
            f"Collect supporting documents for {visa_type} visa: {', '.join(additional_requirements)}"
        )

    if not actions:
        actions.append("Review application manually before proceeding")
    return actions


def build_summary(
    doc: ExtractedDocument,
    validation_checks: list[ValidationCheck],
    eligibility_checks: list[EligibilityCheck],
    confidence: int,
) -> str:
    failed_validation = [c for c in validation_checks if not c.passed]
    failed_eligibility = [c for c in eligibility_checks if not c.passed]
    described = f"{doc.document_type.value} document {doc.document_number.value} for {doc.holder_name}"

    if not failed_validation and not failed_eligibility and confidence >= HIGH_CONFIDENCE:
        return (
            f"Document verification successful. {described} passed all validation and eligibility "
            f"checks with {confidence}% confidence. Application is ready to proceed."
        )
    if failed_validation:
        return (
            f"Document verification flagged issues. {described} failed {len(failed_validation)} "
            f"validation check(s): {_names(failed_validation)}. Manual review required."
        )
    if failed_eligibility:
        return (
            f"Eligibility check failed. {described} does not meet eligibility requirements for visa "
            f"application. Failed {len(failed_eligibility)} check(s): {_names(failed_eligibility)}."
        )
    if confidence < LOW_CONFIDENCE:
        return (
            f"Low confidence verification. {described} extracted with only {confidence}% confidence. "
            f"Request clearer images or manual verification."
        )
    return (
        f"Document verification completed with {confidence}% confidence. {described}. "
        f"Review recommended actions before proceeding."
    )


# ---------------------------------------------------------------------------
# Servei
# ---------------------------------------------------------------------------

class VerificationService:

    @staticmethod
    def verify_text(
        raw_text: str,
        applicant: ApplicantData,
        policy: EligibilityPolicy,
        *,
        ocr_engine: Optional[str] = None,
        today: Optional[date] = None,
    ) -> VerificationResult:
        """Verificació completa a partir del text OCR."""
        today = today or date.today()

        record = parse_and_validate_mrz(raw_text)
        doc = extract_fields(
            raw_text,
            record,
            today=today,
            missing_date_as_today=settings.missing_date_as_today,
        )

        validation_checks = validate_document(doc, today=today)
        eligibility_checks = check_eligibility(doc, applicant, policy, today=today)
        confidence = overall_confidence(doc)

        requirement = policy.requirement_for(applicant.intended_visa_type)
        actions = recommended_actions(
            validation_checks,
            eligibility_checks,
            confidence,
            requirement.additional_requirements if requirement else (),
            applicant.intended_visa_type,
        )

        log.info("verification_done", extra={
            "doc_redacted": redact_document_number(doc.document_number.value),
            "titular_redacted": redact_name(doc.surname.value),
            "confianza": confidence,
            "mrz_valid": record.valid,
            "validation_passed": sum(c.passed for c in validation_checks),
            "eligibility_passed": sum(c.passed for c in eligibility_checks),
            "engine": ocr_engine,
        })

        return VerificationResult(
            overall_confidence=confidence,
            extracted_data=doc,
            validation_checks=validation_checks,
            eligibility_checks=eligibility_checks,
            recommended_actions=actions,
            summary=build_summary(doc, validation_checks, eligibility_checks, confidence),
            ocr_engine=ocr_engine,
        )

    @staticmethod
    def should_fallback_to_vision(text: str) -> tuple[bool, str]:
        """Decideix si el text de Tesseract és prou bo o cal Vision."""
        if not text.strip():
            return True, "text_buit"
        if not detect_mrz_lines(text):
            return True, "sense_mrz"
        return False, "tesseract_acceptat"

    @staticmethod
    def recognize(image_bytes: bytes) -> tuple[str, str]:
        """
        OCR amb doble passada: Tesseract primer, Vision si cal.
        Retorna (text, motor). Bloquejant: cridar des d'un threadpool.
        """
        tess_text: Optional[str] = None

        if tesseract_service.is_available():
            try:
                tess_text = tesseract_service.recognize(image_bytes)
                fallback, motiu = VerificationService.should_fallback_to_vision(tess_text)
                if not fallback:
                    return tess_text, "tesseract"
                log.info("ocr_tesseract_fallback", extra={"motiu": motiu})
            except Exception as e:
                log.warning("ocr_tesseract_error", extra={"error_type": type(e).__name__})

        if google_vision_service.is_available():
            return google_vision_service.recognize(image_bytes), "google_vision"

        # Sense Vision, el text de Tesseract (encara que sigui pobre) és millor que res
        if tess_text is not None:
            return tess_text, "tesseract"

        raise OCRUnavailableError("Cap motor OCR disponible")

    @staticmethod
    def verify_image(
        image_bytes: bytes,
        applicant: ApplicantData,
        policy: EligibilityPolicy,
        *,
        today: Optional[date] = None,
    ) -> VerificationResult:
        text, engine = VerificationService.recognize(image_bytes)
        return VerificationService.verify_text(text, applicant, policy, ocr_engine=engine, today=today)


# Singleton
verification_service = VerificationService()
