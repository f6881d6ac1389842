"""
Resultat normalitzat d'una comprovació (validació documental o elegibilitat)
"""
from pydantic import BaseModel, ConfigDict


class CheckResult(BaseModel):
    """Veredicte d'una comprovació: nom, resultat i missatge llegible."""
    model_config = ConfigDict(frozen=True)

    check: str
    passed: bool
    message: str


class ValidationCheck(CheckResult):
    """Comprovació de coherència interna del document."""


class EligibilityCheck(CheckResult):
    """Comprovació creuada document + sol·licitant + política."""
