"""
Comprovador d'elegibilitat — 9 comprovacions document × sol·licitant × política

Mateixa forma que el validador documental: funcions independents en una
tupla ordenada. Cap comprovació modifica la política ni les dades del
sol·licitant.
"""
import math
from datetime import date
from typing import Callable, Optional
from docverify.models.checks import EligibilityCheck
from docverify.models.fields import ExtractedDocument
from docverify.models.policy import ApplicantData, EligibilityPolicy
from docverify.validators.dates import calendar_age, months_until, parse_iso_date


def check_name_match(
    doc: ExtractedDocument, applicant: ApplicantData, policy: EligibilityPolicy, today: date
) -> EligibilityCheck:
    # Igualtat exacta després de minúscules + trim (no fuzzy)
    extracted = f"{doc.given_names.value} {doc.surname.value}".lower().strip()
    claimed = applicant.name.lower().strip()
    if extracted == claimed:
        return EligibilityCheck(check="Name Match", passed=True, message="Applicant name matches document")
    return EligibilityCheck(
        check="Name Match",
        passed=False,
        message=f'Name mismatch: Document shows "{extracted}", applicant claims "{claimed}"',
    )


def check_dob_match(
    doc: ExtractedDocument, applicant: ApplicantData, policy: EligibilityPolicy, today: date
) -> EligibilityCheck:
    if doc.date_of_birth.value == applicant.date_of_birth:
        return EligibilityCheck(check="Date of Birth Match", passed=True, message="Date of birth matches")
    return EligibilityCheck(
        check="Date of Birth Match",
        passed=False,
        message=(
            f"DOB mismatch: Document shows {doc.date_of_birth.value}, "
            f"applicant claims {applicant.date_of_birth}"
        ),
    )


def check_passport_number_match(
    doc: ExtractedDocument, applicant: ApplicantData, policy: EligibilityPolicy, today: date
) -> EligibilityCheck:
    if doc.document_number.value == applicant.passport_number:
        return EligibilityCheck(check="Passport Number Match", passed=True, message="Passport number matches")
    return EligibilityCheck(
        check="Passport Number Match",
        passed=False,
        message=(
            f"Passport number mismatch: Document shows {doc.document_number.value}, "
            f"applicant claims {applicant.passport_number}"
        ),
    )


def check_nationality_match(
    doc: ExtractedDocument, applicant: ApplicantData, policy: EligibilityPolicy, today: date
) -> EligibilityCheck:
    if doc.nationality.value == applicant.nationality:
        return EligibilityCheck(check="Nationality Match", passed=True, message="Nationality matches")
    return EligibilityCheck(
        check="Nationality Match",
        passed=False,
        message=(
            f"Nationality mismatch: Document shows {doc.nationality.value}, "
            f"applicant claims {applicant.nationality}"
        ),
    )


def check_age_requirements(
    doc: ExtractedDocument, applicant: ApplicantData, policy: EligibilityPolicy, today: date
) -> EligibilityCheck:
    name = "Age Requirements"
    birth = parse_iso_date(doc.date_of_birth.value)
    if birth is None:
        return EligibilityCheck(check=name, passed=False, message="Unable to verify age requirements")

    age = calendar_age(birth, today)
    requirement = policy.requirement_for(applicant.intended_visa_type)
    min_age = policy.min_age
    if requirement is not None and requirement.min_age is not None:
        min_age = requirement.min_age
    max_age = policy.max_age

    if min_age <= age <= max_age:
        return EligibilityCheck(
            check=name, passed=True, message=f"Age {age} meets requirements ({min_age}-{max_age})"
        )
    return EligibilityCheck(
        check=name, passed=False, message=f"Age {age} does not meet requirements ({min_age}-{max_age})"
    )


def check_nationality_eligibility(
    doc: ExtractedDocument, applicant: ApplicantData, policy: EligibilityPolicy, today: date
) -> EligibilityCheck:
    name = "Nationality Eligibility"
    nationality = doc.nationality.value

    if nationality in policy.blocked_nationalities:
        return EligibilityCheck(
            check=name, passed=False, message=f"Nationality {nationality} is not eligible for visa"
        )
    if policy.allowed_nationalities and nationality not in policy.allowed_nationalities:
        return EligibilityCheck(
            check=name, passed=False, message=f"Nationality {nationality} is not in allowed list"
        )
    return EligibilityCheck(check=name, passed=True, message=f"Nationality {nationality} is eligible")


def check_document_type(
    doc: ExtractedDocument, applicant: ApplicantData, policy: EligibilityPolicy, today: date
) -> EligibilityCheck:
    doc_type = doc.document_type.value
    required = policy.required_document_types
    if not required or doc_type in required:
        return EligibilityCheck(
            check="Document Type", passed=True, message=f"Document type {doc_type} is accepted"
        )
    return EligibilityCheck(
        check="Document Type",
        passed=False,
        message=f"Document type {doc_type} is not accepted. Required: {', '.join(sorted(required))}",
    )


def check_validity_period(
    doc: ExtractedDocument, applicant: ApplicantData, policy: EligibilityPolicy, today: date
) -> EligibilityCheck:
    name = "Validity Period"
    expiry = parse_iso_date(doc.expiry_date.value)
    if expiry is None:
        return EligibilityCheck(check=name, passed=False, message="Unable to verify validity period")

    months = months_until(expiry, today)
    shown = math.floor(months)
    if months >= policy.min_validity_months:
        return EligibilityCheck(
            check=name,
            passed=True,
            message=f"Document valid for {shown} months (min: {policy.min_validity_months})",
        )
    return EligibilityCheck(
        check=name,
        passed=False,
        message=f"Document only valid for {shown} months, requires {policy.min_validity_months}",
    )


def check_visa_type_requirements(
    doc: ExtractedDocument, applicant: ApplicantData, policy: EligibilityPolicy, today: date
) -> EligibilityCheck:
    name = "Visa Type Requirements"
    visa_type = applicant.intended_visa_type
    requirement = policy.requirement_for(visa_type)
    if requirement is None:
        return EligibilityCheck(
            check=name, passed=True, message=f"No specific requirements for visa type: {visa_type}"
        )

    nationality = doc.nationality.value
    allowed = requirement.allowed_nationalities
    if allowed and nationality not in allowed:
        return EligibilityCheck(
            check=name, passed=False, message=f"Nationality {nationality} not eligible for {visa_type} visa"
        )
    return EligibilityCheck(check=name, passed=True, message=f"Meets all requirements for {visa_type} visa")


EligibilityRule = Callable[[ExtractedDocument, ApplicantData, EligibilityPolicy, date], EligibilityCheck]

ELIGIBILITY_CHECKS: tuple[EligibilityRule, ...] = (
    check_name_match,
    check_dob_match,
    check_passport_number_match,
    check_nationality_match,
    check_age_requirements,
    check_nationality_eligibility,
    check_document_type,
    check_validity_period,
    check_visa_type_requirements,
)


def check_eligibility(
    doc: ExtractedDocument,
    applicant: ApplicantData,
    policy: EligibilityPolicy,
    *,
    today: Optional[date] = None,
) -> list[EligibilityCheck]:
    """Executa les 9 comprovacions en ordre fix."""
    today = today or date.today()
    return [check(doc, applicant, policy, today) for check in ELIGIBILITY_CHECKS]
