"""
Model intern del còdec MRZ (no s'exposa fora del còdec)
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class MRZLayout(str, Enum):
    """Formats ICAO suportats. Es decideix només pel nombre de línies."""
    TD3 = "TD3"  # 2 × 44 (passaport / visat)
    TD1 = "TD1"  # 3 × 30 (targeta d'identitat)

    @property
    def line_length(self) -> int:
        return 44 if self is MRZLayout.TD3 else 30


class MRZRecord(BaseModel):
    """
    Resultat de parsejar una MRZ.

    Un registre amb valid=False conserva els valors descodificats: és una font
    de menys confiança, no s'ha de descartar.
    """
    layout: Optional[MRZLayout] = None
    lines: tuple[str, ...] = ()

    document_type: Optional[str] = None
    issuing_country: Optional[str] = None
    document_number: Optional[str] = None
    surname: Optional[str] = None
    given_names: Optional[str] = None
    nationality: Optional[str] = None
    date_of_birth: Optional[str] = None   # ISO, sense validar dia/mes
    sex: Optional[str] = None
    expiry_date: Optional[str] = None     # ISO, sense validar dia/mes
    personal_number: Optional[str] = None  # només TD3

    valid: bool = False
    errors: list[str] = Field(default_factory=list)
