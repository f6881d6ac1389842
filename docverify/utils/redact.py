"""
Utilitats de redacció de PII per a logs

Cap dada personal del titular ha d'aparèixer en clar als logs.
"""
from typing import Optional


def redact_document_number(number: Optional[str]) -> str:
    """
    Redacta un número de document per a logs.
    "L898902C3" → "L898****3"
    "X1234567"  → "X123****7"
    """
    if not number or len(number) < 3:
        return "***"
    return number[:4] + "****" + number[-1]


def redact_name(name: Optional[str]) -> str:
    """
    Redacta un nom per a logs.
    "ERIKSSON" → "E*******"
    "ANNA MARIA" → "A*********"
    """
    if not name:
        return "***"
    return name[0] + "*" * (len(name) - 1)
