"""
Dades del sol·licitant i política d'elegibilitat

La política arriba per petició (o per defecte) i el motor la tracta com a
configuració de només lectura: tots els models són immutables.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ApplicantData(BaseModel):
    """Dades declarades pel sol·licitant."""
    model_config = ConfigDict(frozen=True)

    name: str = ""
    date_of_birth: str = ""      # YYYY-MM-DD
    passport_number: str = ""
    nationality: str = ""        # codi ISO de 3 lletres
    intended_visa_type: str = ""


class VisaTypeRequirement(BaseModel):
    """Requisits específics d'un tipus de visat (tots opcionals)."""
    model_config = ConfigDict(frozen=True)

    min_age: Optional[int] = None
    allowed_nationalities: Optional[frozenset[str]] = None
    additional_requirements: tuple[str, ...] = ()


class EligibilityPolicy(BaseModel):
    """Regles d'emissió de visats. Llistes buides = sense restricció."""
    model_config = ConfigDict(frozen=True)

    min_age: int = Field(default=18, ge=0)
    max_age: int = Field(default=120, ge=0)
    allowed_nationalities: frozenset[str] = frozenset()
    blocked_nationalities: frozenset[str] = frozenset()
    required_document_types: frozenset[str] = frozenset()
    min_validity_months: int = Field(default=6, ge=0)
    visa_type_requirements: dict[str, VisaTypeRequirement] = Field(default_factory=dict)

    def requirement_for(self, visa_type: str) -> Optional[VisaTypeRequirement]:
        return self.visa_type_requirements.get(visa_type)


def default_policy() -> EligibilityPolicy:
    """Política integrada. Es construeix de nou a cada crida."""
    return EligibilityPolicy(
        min_age=18,
        max_age=120,
        allowed_nationalities=frozenset(),
        blocked_nationalities=frozenset({"PRK"}),
        required_document_types=frozenset({"P", "I"}),
        min_validity_months=6,
        visa_type_requirements={
            "tourist": VisaTypeRequirement(
                min_age=18,
                additional_requirements=("Valid passport", "Proof of accommodation"),
            ),
            "business": VisaTypeRequirement(
                min_age=21,
                additional_requirements=("Valid passport", "Business invitation letter"),
            ),
            "student": VisaTypeRequirement(
                min_age=16,
                additional_requirements=("Valid passport", "Letter of acceptance from institution"),
            ),
            "work": VisaTypeRequirement(
                min_age=18,
                additional_requirements=("Valid passport", "Job offer letter", "Work permit"),
            ),
        },
    )
