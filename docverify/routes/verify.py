"""
Rutes de verificació de documents de viatge — Contracte v1
"""
import asyncio
import base64
import binascii
import logging
import time
from fastapi import APIRouter, HTTPException
from fastapi.concurrency import run_in_threadpool
from docverify.config import settings
from docverify.models.policy import ApplicantData, EligibilityPolicy
from docverify.models.verification_response import (
    ApplicantPayload,
    VerificationResult,
    VerifyRequest,
    VerifyTextRequest,
)
from docverify.services.policy_service import effective_default_policy, resolve_policy
from docverify.services.verification_service import OCRUnavailableError, verification_service
from docverify.utils.redact import redact_document_number

log = logging.getLogger("ocr.verify")

_tesseract_semaphore = asyncio.Semaphore(settings.tesseract_max_concurrency)

router = APIRouter()


def _decode_image(image_data: str) -> bytes:
    """Accepta base64 pur o data URL ("data:image/png;base64,....")."""
    _, sep, payload = image_data.partition(",")
    try:
        return base64.b64decode(payload if sep else image_data, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Image data is not valid base64")


def _applicant(payload: ApplicantPayload | None) -> ApplicantData:
    if payload is None:
        raise HTTPException(status_code=400, detail="Applicant data is required")
    return ApplicantData(
        name=payload.name,
        date_of_birth=payload.date_of_birth,
        passport_number=payload.passport_number,
        nationality=payload.nationality,
        intended_visa_type=payload.intended_visa_type or settings.default_visa_type,
    )


@router.post("/verify", response_model=VerificationResult)
async def verify_document(request: VerifyRequest):
    """
    Verifica un document de viatge a partir de la imatge.

    - **image_data**: imatge en base64 (o data URL)
    - **applicant_data**: dades declarades pel sol·licitant
    - **eligibility_policy**: política pròpia (opcional; si no, la per defecte)

    OCR de doble passada: Tesseract primer, Google Vision si el text no té MRZ.
    """
    if not request.image_data:
        raise HTTPException(status_code=400, detail="Image data is required")
    applicant = _applicant(request.applicant_data)

    content = _decode_image(request.image_data)
    max_bytes = settings.max_file_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(status_code=413, detail=f"Image too large. Maximum {settings.max_file_size_mb}MB.")

    try:
        policy = resolve_policy(request.eligibility_policy)

        t0 = time.monotonic()
        async with _tesseract_semaphore:
            text, engine = await asyncio.wait_for(
                run_in_threadpool(verification_service.recognize, content),
                timeout=settings.ocr_timeout_seconds,
            )
        ocr_ms = round((time.monotonic() - t0) * 1000)
        del content

        result = verification_service.verify_text(text, applicant, policy, ocr_engine=engine)

        log.info("ocr_success", extra={
            "doc_redacted": redact_document_number(result.extracted_data.document_number.value),
            "confianza": result.overall_confidence,
            "engine": engine,
            "durada_ms": ocr_ms,
        })
        return result

    except HTTPException:
        raise
    except OCRUnavailableError:
        raise HTTPException(status_code=503, detail="No OCR engine available")
    except asyncio.TimeoutError:
        raise HTTPException(status_code=504, detail="Timeout processing the document.")
    except Exception:
        log.exception("verification_unexpected_error")
        raise HTTPException(status_code=500, detail="Verification failed")


@router.post("/verify/text", response_model=VerificationResult)
async def verify_text(request: VerifyTextRequest):
    """Verifica a partir de text OCR ja reconegut (sense motor OCR)."""
    applicant = _applicant(request.applicant_data)
    try:
        policy = resolve_policy(request.eligibility_policy)
        return verification_service.verify_text(request.raw_text, applicant, policy)
    except Exception:
        log.exception("verification_unexpected_error")
        raise HTTPException(status_code=500, detail="Verification failed")


@router.get("/policy/default", response_model=EligibilityPolicy)
async def get_default_policy():
    """Política d'elegibilitat efectiva quan el client no n'envia cap."""
    return effective_default_policy()
