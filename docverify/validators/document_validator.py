"""
Validador documental — 7 comprovacions independents sobre un ExtractedDocument

Cada comprovació és una funció (doc, today) → ValidationCheck. No comparteixen
estat: l'ordre de DOCUMENT_CHECKS només decideix l'ordre de presentació.
Una data il·legible dona passed=False amb missatge, mai una excepció.
"""
import re
from datetime import date
from typing import Callable, Optional
from docverify.models.checks import ValidationCheck
from docverify.models.fields import ExtractedDocument
from docverify.validators.dates import ISO_DATE, calendar_age, parse_iso_date

MAX_PLAUSIBLE_AGE = 150

_NAME_RE = re.compile(r"^[A-Za-z\s\-']+$")
_DOC_NUMBER_CHARS_RE = re.compile(r"^[A-Z0-9]+$")
_NATIONALITY_RE = re.compile(r"^[A-Z]{3}$")


def check_document_expiry(doc: ExtractedDocument, today: date) -> ValidationCheck:
    name = "Document Expiry"
    expiry = parse_iso_date(doc.expiry_date.value)
    if expiry is None:
        return ValidationCheck(check=name, passed=False, message="Invalid expiry date format")

    if expiry < today:
        return ValidationCheck(check=name, passed=False, message=f"Document expired on {doc.expiry_date.value}")
    return ValidationCheck(check=name, passed=True, message=f"Document valid until {doc.expiry_date.value}")


def check_date_formats(doc: ExtractedDocument, today: date) -> ValidationCheck:
    dates = (
        ("Date of Birth", doc.date_of_birth.value),
        ("Issue Date", doc.issue_date.value),
        ("Expiry Date", doc.expiry_date.value),
    )
    invalid = [label for label, value in dates if not ISO_DATE.match(value)]
    if invalid:
        return ValidationCheck(
            check="Date Format Validation",
            passed=False,
            message=f"Invalid date formats: {', '.join(invalid)}",
        )
    return ValidationCheck(
        check="Date Format Validation",
        passed=True,
        message="All dates in valid ISO 8601 format",
    )


def check_age_consistency(doc: ExtractedDocument, today: date) -> ValidationCheck:
    name = "Age Consistency"
    birth = parse_iso_date(doc.date_of_birth.value)
    if birth is None:
        return ValidationCheck(check=name, passed=False, message="Unable to calculate age from date of birth")

    age = calendar_age(birth, today)
    if age < 0 or age > MAX_PLAUSIBLE_AGE:
        return ValidationCheck(check=name, passed=False, message=f"Calculated age ({age}) is invalid")
    return ValidationCheck(check=name, passed=True, message=f"Holder age: {age} years")


def check_name_format(doc: ExtractedDocument, today: date) -> ValidationCheck:
    surname = doc.surname.value
    given_names = doc.given_names.value
    valid = (
        bool(surname)
        and _NAME_RE.match(surname) is not None
        and (given_names == "" or _NAME_RE.match(given_names) is not None)
    )
    return ValidationCheck(
        check="Name Format",
        passed=valid,
        message="Name format valid" if valid else "Invalid name format or missing required fields",
    )


def check_document_number_format(doc: ExtractedDocument, today: date) -> ValidationCheck:
    number = doc.document_number.value
    valid = 6 <= len(number) <= 12 and _DOC_NUMBER_CHARS_RE.match(number) is not None
    return ValidationCheck(
        check="Document Number Format",
        passed=valid,
        message=(
            "Document number format valid" if valid
            else "Document number format invalid (should be 6-12 alphanumeric characters)"
        ),
    )


def check_nationality_format(doc: ExtractedDocument, today: date) -> ValidationCheck:
    nationality = doc.nationality.value
    valid = _NATIONALITY_RE.match(nationality) is not None
    return ValidationCheck(
        check="Nationality Code Format",
        passed=valid,
        message=(
            f"Valid nationality code: {nationality}" if valid
            else "Invalid nationality code (should be 3-letter ISO code)"
        ),
    )


def check_date_logic(doc: ExtractedDocument, today: date) -> ValidationCheck:
    name = "Date Logic"
    birth = parse_iso_date(doc.date_of_birth.value)
    issue = parse_iso_date(doc.issue_date.value)
    expiry = parse_iso_date(doc.expiry_date.value)
    if birth is None or issue is None or expiry is None:
        return ValidationCheck(check=name, passed=False, message="Unable to validate date logic")

    if birth < issue < expiry and birth <= today:
        return ValidationCheck(check=name, passed=True, message="All dates are logically consistent")
    return ValidationCheck(
        check=name,
        passed=False,
        message="Date sequence error: dates are not in logical order",
    )


DocumentCheck = Callable[[ExtractedDocument, date], ValidationCheck]

DOCUMENT_CHECKS: tuple[DocumentCheck, ...] = (
    check_document_expiry,
    check_date_formats,
    check_age_consistency,
    check_name_format,
    check_document_number_format,
    check_nationality_format,
    check_date_logic,
)


def validate_document(doc: ExtractedDocument, *, today: Optional[date] = None) -> list[ValidationCheck]:
    """Executa les 7 comprovacions en ordre fix."""
    today = today or date.today()
    return [check(doc, today) for check in DOCUMENT_CHECKS]
