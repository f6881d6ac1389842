"""
Extractor heurístic de camps

Per cada camp obligatori es prefereix el valor de la MRZ (si n'hi ha i no és
buit); si no, es busca al text OCR per paraules clau i regex.

La confiança depèn només de la procedència del valor:
  MRZ amb checksums OK → 95
  MRZ amb errors       → 60
  heurística           → 70-85 segons el camp (taula _HEURISTIC_CONFIDENCE)
La data d'expedició no surt mai de la MRZ: sempre 70.
"""
import re
import logging
from datetime import date
from types import MappingProxyType
from typing import Callable, Optional
from docverify.models.fields import ConfidenceField, ExtractedDocument
from docverify.models.mrz import MRZRecord

log = logging.getLogger("ocr.extractor")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MRZ_VERIFIED_CONFIDENCE = 95
MRZ_INVALID_CONFIDENCE = 60
ISSUE_DATE_CONFIDENCE = 70
PLACE_OF_BIRTH_CONFIDENCE = 70

_HEURISTIC_CONFIDENCE = MappingProxyType({
    "document_type": 80,
    "document_number": 75,
    "surname": 75,
    "given_names": 75,
    "nationality": 80,
    "issuing_country": 80,
    "date_of_birth": 70,
    "sex": 85,
    "expiry_date": 70,
})

# Paraula clau → codi de document (ordre = prioritat)
_DOCUMENT_TYPE_KEYWORDS = (
    (("PASSPORT",), "P"),
    (("VISA",), "V"),
    (("IDENTITY", "ID CARD"), "I"),
    (("DRIVING", "LICENSE", "LICENCE"), "D"),
)
DEFAULT_DOCUMENT_TYPE = "P"

SURNAME_LABELS = ("surname", "last name", "family name")
GIVEN_NAME_LABELS = ("given name", "first name")
PLACE_OF_BIRTH_LABELS = ("place of birth",)

BIRTH_KEYWORDS = ("birth", "born", "dob")
ISSUE_KEYWORDS = ("issue", "issued", "date of issue")
EXPIRY_KEYWORDS = ("expiry", "expires", "valid until", "exp")

_DOC_NUMBER_RE = re.compile(r"[A-Z]{1,2}\d{7,9}")
_COUNTRY_CODE_RE = re.compile(r"\b([A-Z]{3})\b")
# D/M/Y sense agafar un tros d'una data ISO (1990-05-15 no és 90-05-15)
_DMY_RE = re.compile(r"(?<!\d)(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2,4})(?!\d)")
_ISO_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")


# ---------------------------------------------------------------------------
# Heurístiques
# ---------------------------------------------------------------------------

def extract_document_type(text: str) -> str:
    upper = text.upper()
    for keywords, code in _DOCUMENT_TYPE_KEYWORDS:
        if any(kw in upper for kw in keywords):
            return code
    return DEFAULT_DOCUMENT_TYPE


def extract_document_number(text: str) -> str:
    m = _DOC_NUMBER_RE.search(text)
    return m.group(0) if m else ""


def extract_country_code(text: str) -> str:
    m = _COUNTRY_CODE_RE.search(text)
    return m.group(1) if m else ""


def extract_labelled_value(text: str, labels: tuple[str, ...]) -> str:
    """Primer 'Etiqueta: valor' amb alguna de les etiquetes; valor en majúscules."""
    for line in text.splitlines():
        lower = line.lower()
        if any(label in lower for label in labels):
            _, sep, value = line.partition(":")
            if sep:
                return value.split(":")[0].strip().upper()
    return ""


def normalize_dmy(day: str, month: str, year: str) -> str:
    """D/M/Y → YYYY-MM-DD. Any de 2 xifres amb la mateixa regla que la MRZ."""
    if len(year) == 2:
        year = f"19{year}" if int(year) > 50 else f"20{year}"
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def extract_date(text: str, keywords: tuple[str, ...]) -> str:
    """
    Data associada a unes paraules clau.

    1. Línia amb paraula clau: primer D/M/Y, després ISO.
    2. Primera data ISO de tot el text.
    3. "" (desconeguda).
    """
    for line in text.splitlines():
        lower = line.lower()
        if not any(kw in lower for kw in keywords):
            continue
        m = _DMY_RE.search(line)
        if m:
            return normalize_dmy(*m.groups())
        m = _ISO_RE.search(line)
        if m:
            return m.group(0)

    m = _ISO_RE.search(text)
    return m.group(0) if m else ""


def extract_sex(text: str) -> str:
    upper = text.upper()
    has_m = re.search(r"\bM\b", upper) is not None
    has_f = re.search(r"\bF\b", upper) is not None
    if has_m and not has_f:
        return "M"
    if has_f and not has_m:
        return "F"
    if "MALE" in upper and "FEMALE" not in upper:
        return "M"
    if "FEMALE" in upper:
        return "F"
    return "M"


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------

class FieldExtractor:

    @staticmethod
    def extract_fields(
        raw_text: str,
        mrz_record: Optional[MRZRecord] = None,
        *,
        today: Optional[date] = None,
        missing_date_as_today: bool = False,
    ) -> ExtractedDocument:
        """
        Fusiona MRZ + heurística en un ExtractedDocument.

        missing_date_as_today=True reprodueix el comportament antic: una data
        no trobada pren el valor d'avui en lloc de quedar buida.
        """
        today = today or date.today()
        mrz_confidence = MRZ_VERIFIED_CONFIDENCE if mrz_record and mrz_record.valid else MRZ_INVALID_CONFIDENCE
        provenance: dict[str, str] = {}

        def pick(name: str, heuristic: Callable[[], str]) -> ConfidenceField:
            mrz_value = getattr(mrz_record, name, None) if mrz_record else None
            if mrz_value:
                provenance[name] = "mrz"
                return ConfidenceField(value=mrz_value, confidence=mrz_confidence)
            provenance[name] = "text"
            return ConfidenceField(value=heuristic(), confidence=_HEURISTIC_CONFIDENCE[name])

        def date_or_placeholder(keywords: tuple[str, ...]) -> str:
            found = extract_date(raw_text, keywords)
            if not found and missing_date_as_today:
                return today.isoformat()
            return found

        fields = dict(
            document_type=pick("document_type", lambda: extract_document_type(raw_text)),
            document_number=pick("document_number", lambda: extract_document_number(raw_text)),
            surname=pick("surname", lambda: extract_labelled_value(raw_text, SURNAME_LABELS)),
            given_names=pick("given_names", lambda: extract_labelled_value(raw_text, GIVEN_NAME_LABELS)),
            nationality=pick("nationality", lambda: extract_country_code(raw_text)),
            date_of_birth=pick("date_of_birth", lambda: date_or_placeholder(BIRTH_KEYWORDS)),
            sex=pick("sex", lambda: extract_sex(raw_text)),
            issuing_country=pick("issuing_country", lambda: extract_country_code(raw_text)),
            expiry_date=pick("expiry_date", lambda: date_or_placeholder(EXPIRY_KEYWORDS)),
            issue_date=ConfidenceField(
                value=date_or_placeholder(ISSUE_KEYWORDS),
                confidence=ISSUE_DATE_CONFIDENCE,
            ),
        )

        place_of_birth = extract_labelled_value(raw_text, PLACE_OF_BIRTH_LABELS)
        if place_of_birth:
            fields["place_of_birth"] = ConfidenceField(value=place_of_birth, confidence=PLACE_OF_BIRTH_CONFIDENCE)

        # Eco de les línies MRZ detectades
        if mrz_record and mrz_record.lines:
            for i, line in enumerate(mrz_record.lines[:3], start=1):
                fields[f"mrz_line{i}"] = ConfidenceField(value=line, confidence=mrz_confidence)

        log.debug("fields_extracted", extra={
            "from_mrz": sorted(k for k, v in provenance.items() if v == "mrz"),
            "from_text": sorted(k for k, v in provenance.items() if v == "text"),
        })
        return ExtractedDocument(**fields)


def extract_fields(
    raw_text: str,
    mrz_record: Optional[MRZRecord] = None,
    *,
    today: Optional[date] = None,
    missing_date_as_today: bool = False,
) -> ExtractedDocument:
    return FieldExtractor.extract_fields(
        raw_text, mrz_record, today=today, missing_date_as_today=missing_date_as_today
    )


# Singleton
field_extractor = FieldExtractor()
