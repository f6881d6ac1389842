"""
Model de camps extrets amb confiança — Contracte v1

Cada camp porta el valor (string) i una confiança 0-100 que indica la
procedència, no una probabilitat:
  MRZ amb checksums correctes (95) > MRZ present però invàlida (60) > heurística (70-85)

Cadena buida = valor desconegut. Els camps obligatoris sempre hi són.
"""
from typing import Iterator, Optional
from pydantic import BaseModel, ConfigDict, Field


class ConfidenceField(BaseModel):
    """Valor + confiança de procedència. Immutable."""
    model_config = ConfigDict(frozen=True)

    value: str = ""
    confidence: int = Field(ge=0, le=100)


class ExtractedDocument(BaseModel):
    """Camps d'un document de viatge. Dates en format ISO (YYYY-MM-DD) quan es poden llegir."""
    model_config = ConfigDict(frozen=True)

    # Document
    document_type: ConfidenceField
    document_number: ConfidenceField
    issuing_country: ConfidenceField
    issue_date: ConfidenceField
    expiry_date: ConfidenceField

    # Titular
    surname: ConfidenceField
    given_names: ConfidenceField
    nationality: ConfidenceField
    date_of_birth: ConfidenceField
    sex: ConfidenceField
    place_of_birth: Optional[ConfidenceField] = None

    # Línies MRZ detectades (eco per auditoria)
    mrz_line1: Optional[ConfidenceField] = None
    mrz_line2: Optional[ConfidenceField] = None
    mrz_line3: Optional[ConfidenceField] = None

    @property
    def holder_name(self) -> str:
        return f"{self.given_names.value} {self.surname.value}".strip()

    def field_confidences(self) -> Iterator[int]:
        """Confiança de cada camp present (obligatoris + opcionals informats)."""
        for name in type(self).model_fields:
            field = getattr(self, name)
            if field is not None:
                yield field.confidence
