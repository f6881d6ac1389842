"""
Contracte de l'endpoint /verify (v1)

Petició:
{
  "image_data": "<base64 o data URL>",
  "applicant_data": { ApplicantData },
  "eligibility_policy": { EligibilityPolicy } | null   # null → política per defecte
}

Resposta:
{
  "overall_confidence": 0-100,
  "extracted_data": { ExtractedDocument },
  "validation_checks": [ ValidationCheck, ... ],     # ordre fix (7)
  "eligibility_checks": [ EligibilityCheck, ... ],   # ordre fix (9)
  "recommended_actions": [ "..." ],
  "summary": "...",
  "ocr_engine": "tesseract|google_vision" | null
}
"""
from pydantic import BaseModel
from typing import Optional, Literal, List
from docverify.models.checks import ValidationCheck, EligibilityCheck
from docverify.models.fields import ExtractedDocument
from docverify.models.policy import EligibilityPolicy


class ApplicantPayload(BaseModel):
    """Dades del sol·licitant tal com arriben (camps absents = "")."""
    name: str = ""
    date_of_birth: str = ""
    passport_number: str = ""
    nationality: str = ""
    intended_visa_type: Optional[str] = None  # None → settings.default_visa_type


class VerifyRequest(BaseModel):
    """Opcionals a nivell de model: l'absència es respon amb 400, no 422."""
    image_data: Optional[str] = None
    applicant_data: Optional[ApplicantPayload] = None
    eligibility_policy: Optional[EligibilityPolicy] = None


class VerifyTextRequest(BaseModel):
    """Variant sense OCR: el client ja envia el text reconegut."""
    raw_text: str
    applicant_data: Optional[ApplicantPayload] = None
    eligibility_policy: Optional[EligibilityPolicy] = None


class VerificationResult(BaseModel):
    """Resposta de /verify i /verify/text."""
    overall_confidence: int                                  # 0-100
    extracted_data: ExtractedDocument
    validation_checks: List[ValidationCheck] = []
    eligibility_checks: List[EligibilityCheck] = []
    recommended_actions: List[str] = []
    summary: str
    ocr_engine: Optional[Literal["tesseract", "google_vision"]] = None
