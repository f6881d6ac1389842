"""
Origen de la política d'elegibilitat

Prioritat: política enviada pel client > fitxer JSON de config > política integrada.
"""
import logging
from pathlib import Path
from typing import Optional
from docverify.config import settings
from docverify.models.policy import EligibilityPolicy, default_policy

log = logging.getLogger("ocr.policy")


def load_policy_file(path: str) -> EligibilityPolicy:
    """Llegeix una EligibilityPolicy d'un fitxer JSON. Errors de format es propaguen."""
    return EligibilityPolicy.model_validate_json(Path(path).read_text(encoding="utf-8"))


def effective_default_policy() -> EligibilityPolicy:
    if settings.policy_file:
        log.info("policy_from_file", extra={"policy_file": settings.policy_file})
        return load_policy_file(settings.policy_file)
    return default_policy()


def resolve_policy(override: Optional[EligibilityPolicy] = None) -> EligibilityPolicy:
    return override if override is not None else effective_default_policy()
