"""
Tests unitaris de l'extractor de camps (MRZ + heurística)
"""
from datetime import date
from docverify.parsers.field_extractor import (
    ISSUE_DATE_CONFIDENCE,
    MRZ_INVALID_CONFIDENCE,
    MRZ_VERIFIED_CONFIDENCE,
    extract_date,
    extract_document_number,
    extract_document_type,
    extract_fields,
    extract_sex,
    BIRTH_KEYWORDS,
)
from docverify.parsers.mrz_codec import parse_and_validate_mrz

TODAY = date(2026, 10, 16)

TD3_LINE1 = "P<UTOERIKSSON<<ANNA<MARIA".ljust(44, "<")
TD3_LINE2 = "L898902C<3UTO6908061F9406236ZE184226B<<<<<14"

PRINTED_PASSPORT = """PASSPORT
Surname: SMITH
Given names: JOHN
Nationality: GBR
Passport No: AB1234567
Date of birth: 15/05/1990
Sex: M
Date of issue: 2020-01-10
Date of expiry: 2030-01-09
Place of birth: LONDON
"""


def _extract(text):
    return extract_fields(text, parse_and_validate_mrz(text), today=TODAY)


# ---------------------------------------------------------------------------
# Heurístiques individuals
# ---------------------------------------------------------------------------

class TestHeuristics:
    def test_document_type_keywords(self):
        assert extract_document_type("REPUBLIC PASSPORT") == "P"
        assert extract_document_type("Schengen visa") == "V"
        assert extract_document_type("NATIONAL IDENTITY CARD") == "I"
        assert extract_document_type("DRIVING LICENCE") == "D"

    def test_document_type_default(self):
        assert extract_document_type("nothing useful") == "P"

    def test_passport_outranks_visa(self):
        assert extract_document_type("PASSPORT\nVISA PAGE") == "P"

    def test_document_number(self):
        assert extract_document_number("No. X12345678 issued") == "X12345678"
        assert extract_document_number("no number here") == ""

    def test_sex(self):
        assert extract_sex("Sex: F") == "F"
        assert extract_sex("Sex: M") == "M"
        assert extract_sex("FEMALE") == "F"
        assert extract_sex("") == "M"

    def test_dmy_with_keyword(self):
        assert extract_date("Date of birth: 15/05/1990", BIRTH_KEYWORDS) == "1990-05-15"

    def test_dmy_two_digit_year(self):
        assert extract_date("DOB 01.02.51", BIRTH_KEYWORDS) == "1951-02-01"
        assert extract_date("DOB 01.02.49", BIRTH_KEYWORDS) == "2049-02-01"

    def test_iso_not_read_as_dmy(self):
        assert extract_date("Born 1990-05-15", BIRTH_KEYWORDS) == "1990-05-15"

    def test_iso_anywhere_as_fallback(self):
        assert extract_date("Holder\n1985-03-02\n", BIRTH_KEYWORDS) == "1985-03-02"

    def test_missing_date_is_empty(self):
        assert extract_date("no dates at all", BIRTH_KEYWORDS) == ""


# ---------------------------------------------------------------------------
# Sense MRZ
# ---------------------------------------------------------------------------

class TestExtractFromPrintedText:
    def test_values(self):
        doc = _extract(PRINTED_PASSPORT)
        assert doc.document_type.value == "P"
        assert doc.document_number.value == "AB1234567"
        assert doc.surname.value == "SMITH"
        assert doc.given_names.value == "JOHN"
        assert doc.nationality.value == "GBR"
        assert doc.issuing_country.value == "GBR"
        assert doc.date_of_birth.value == "1990-05-15"
        assert doc.sex.value == "M"
        assert doc.issue_date.value == "2020-01-10"
        assert doc.expiry_date.value == "2030-01-09"

    def test_heuristic_confidences(self):
        doc = _extract(PRINTED_PASSPORT)
        assert doc.document_type.confidence == 80
        assert doc.document_number.confidence == 75
        assert doc.surname.confidence == 75
        assert doc.given_names.confidence == 75
        assert doc.nationality.confidence == 80
        assert doc.issuing_country.confidence == 80
        assert doc.date_of_birth.confidence == 70
        assert doc.sex.confidence == 85
        assert doc.expiry_date.confidence == 70
        assert doc.issue_date.confidence == ISSUE_DATE_CONFIDENCE

    def test_place_of_birth(self):
        doc = _extract(PRINTED_PASSPORT)
        assert doc.place_of_birth is not None
        assert doc.place_of_birth.value == "LONDON"
        assert doc.place_of_birth.confidence == 70

    def test_no_mrz_echo(self):
        doc = _extract(PRINTED_PASSPORT)
        assert doc.mrz_line1 is None
        assert doc.mrz_line2 is None

    def test_missing_dates_empty_by_default(self):
        doc = _extract("PASSPORT\nSurname: SMITH")
        assert doc.date_of_birth.value == ""
        assert doc.expiry_date.value == ""
        assert doc.issue_date.value == ""

    def test_missing_dates_as_today(self):
        doc = extract_fields("PASSPORT", None, today=TODAY, missing_date_as_today=True)
        assert doc.date_of_birth.value == "2026-10-16"
        assert doc.expiry_date.value == "2026-10-16"
        assert doc.issue_date.value == "2026-10-16"

    def test_empty_text_still_has_every_field(self):
        doc = extract_fields("", None, today=TODAY)
        assert doc.document_number.value == ""
        assert doc.surname.value == ""
        assert doc.document_type.value == "P"


# ---------------------------------------------------------------------------
# Amb MRZ
# ---------------------------------------------------------------------------

class TestExtractWithMrz:
    def test_valid_mrz_values_and_confidence(self):
        doc = _extract(f"PASSPORT\nDate of issue: 1989-06-24\n{TD3_LINE1}\n{TD3_LINE2}")
        assert doc.surname.value == "ERIKSSON"
        assert doc.given_names.value == "ANNA MARIA"
        assert doc.document_number.value == "L898902C"
        assert doc.nationality.value == "UTO"
        assert doc.date_of_birth.value == "1969-08-06"
        assert doc.expiry_date.value == "1994-06-23"
        assert doc.sex.value == "F"
        for field in (doc.surname, doc.document_number, doc.date_of_birth, doc.sex):
            assert field.confidence == MRZ_VERIFIED_CONFIDENCE

    def test_issue_date_never_from_mrz(self):
        doc = _extract(f"Date of issue: 1989-06-24\n{TD3_LINE1}\n{TD3_LINE2}")
        assert doc.issue_date.value == "1989-06-24"
        assert doc.issue_date.confidence == ISSUE_DATE_CONFIDENCE

    def test_invalid_mrz_still_used_with_lower_confidence(self):
        bad_line2 = TD3_LINE2[:43] + "0"
        doc = _extract(f"{TD3_LINE1}\n{bad_line2}")
        assert doc.surname.value == "ERIKSSON"
        assert doc.surname.confidence == MRZ_INVALID_CONFIDENCE
        assert doc.document_number.confidence == MRZ_INVALID_CONFIDENCE

    def test_mrz_lines_echoed(self):
        doc = _extract(f"{TD3_LINE1}\n{TD3_LINE2}")
        assert doc.mrz_line1.value == TD3_LINE1
        assert doc.mrz_line2.value == TD3_LINE2
        assert doc.mrz_line1.confidence == MRZ_VERIFIED_CONFIDENCE
        assert doc.mrz_line3 is None

    def test_empty_mrz_value_falls_back_to_text(self):
        line1 = "P<UTOMADONNA".ljust(44, "<")
        doc = _extract(f"Given names: LOUISE\n{line1}\n{TD3_LINE2}")
        assert doc.surname.value == "MADONNA"
        assert doc.given_names.value == "LOUISE"
        assert doc.given_names.confidence == 75

    def test_mrz_wins_over_text(self):
        doc = _extract(f"Surname: SMITH\n{TD3_LINE1}\n{TD3_LINE2}")
        assert doc.surname.value == "ERIKSSON"
