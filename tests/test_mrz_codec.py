"""
Tests unitaris del còdec MRZ (TD3 / TD1)
"""
import pytest
from docverify.models.mrz import MRZLayout
from docverify.parsers.mrz_codec import (
    INVALID_LINE_COUNT,
    MRZCodec,
    char_value,
    compute_check_digit,
    detect_mrz_lines,
    expand_mrz_date,
    parse_and_validate_mrz,
)

# Exemple ICAO 9303 (passaport d'Utopia)
TD3_LINE1 = "P<UTOERIKSSON<<ANNA<MARIA".ljust(44, "<")
TD3_LINE2 = "L898902C<3UTO6908061F9406236ZE184226B<<<<<14"

# Exemple ICAO 9303 (targeta d'identitat)
TD1_LINE1 = "I<UTOD231458907<<<<<<<<<<<<<<<"
TD1_LINE2 = "7408122F1204159UTO<<<<<<<<<<<6"
TD1_LINE3 = "ERIKSSON<<ANNA<MARIA<<<<<<<<<<"


def _td3_line2(doc_number: str, birth: str = "900515", expiry: str = "300101", sex: str = "M") -> str:
    """Línia 2 TD3 sintètica amb tots els dígits de control correctes."""
    doc = doc_number.ljust(9, "<")
    part_doc = doc + str(compute_check_digit(doc))
    part_birth = birth + str(compute_check_digit(birth))
    part_expiry = expiry + str(compute_check_digit(expiry))
    personal = "<" * 14 + "<"
    composite = part_doc + part_birth + part_expiry + personal
    return f"{part_doc}GBR{part_birth}{sex}{part_expiry}{personal}{compute_check_digit(composite)}"


# ---------------------------------------------------------------------------
# Checksum
# ---------------------------------------------------------------------------

class TestCheckDigit:
    def test_char_values(self):
        assert char_value("0") == 0
        assert char_value("9") == 9
        assert char_value("A") == 10
        assert char_value("Z") == 35
        assert char_value("<") == 0

    def test_icao_document_number(self):
        assert compute_check_digit("L898902C<") == 3

    def test_icao_dates(self):
        assert compute_check_digit("690806") == 1
        assert compute_check_digit("940623") == 6

    def test_personal_number(self):
        assert compute_check_digit("ZE184226B<<<<<") == 1

    def test_empty_is_zero(self):
        assert compute_check_digit("") == 0

    @pytest.mark.parametrize("doc_number", ["AB1234567", "X00000000", "ZZZZZZZZZ", "123456789"])
    def test_embedded_check_digit_parses_without_errors(self, doc_number):
        record = MRZCodec.parse([TD3_LINE1, _td3_line2(doc_number)])
        assert record.errors == []
        assert record.valid is True
        assert record.document_number == doc_number


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

class TestExpandMrzDate:
    def test_51_is_1900s(self):
        assert expand_mrz_date("510101") == "1951-01-01"

    def test_49_is_2000s(self):
        assert expand_mrz_date("490101") == "2049-01-01"

    def test_50_is_2000s(self):
        assert expand_mrz_date("500101") == "2050-01-01"

    def test_no_calendar_validation(self):
        # Mes 13 passa: ho atrapa el validador documental
        assert expand_mrz_date("901345") == "1990-13-45"

    def test_wrong_length(self):
        assert expand_mrz_date("9001") == ""

    def test_non_numeric_year(self):
        assert expand_mrz_date("<<0101") == ""


# ---------------------------------------------------------------------------
# Detecció de línies
# ---------------------------------------------------------------------------

class TestDetectMrzLines:
    def test_td3_inside_text(self):
        text = f"PASSPORT\nSurname: ERIKSSON\n{TD3_LINE1}\n{TD3_LINE2}\n"
        assert detect_mrz_lines(text) == (TD3_LINE1, TD3_LINE2)

    def test_spaces_removed_and_uppercased(self):
        spaced = "p<uto ERIKSSON<<ANNA<MARIA " + "<" * 19
        assert detect_mrz_lines(spaced) == (TD3_LINE1,)

    def test_wrong_length_ignored(self):
        assert detect_mrz_lines("P<UTOERIKSSON<<ANNA") == ()

    def test_invalid_chars_ignored(self):
        line = "P<UTOERIKSSON,ANNA".ljust(44, "<")
        assert detect_mrz_lines(line) == ()

    def test_order_preserved(self):
        text = f"{TD1_LINE1}\nnoise\n{TD1_LINE2}\n{TD1_LINE3}"
        assert detect_mrz_lines(text) == (TD1_LINE1, TD1_LINE2, TD1_LINE3)

    def test_iterator_is_lazy(self):
        candidates = MRZCodec.iter_mrz_candidates(f"{TD3_LINE1}\n{TD3_LINE2}")
        assert next(candidates) == TD3_LINE1
        assert next(candidates) == TD3_LINE2


# ---------------------------------------------------------------------------
# Tria de format
# ---------------------------------------------------------------------------

class TestLayoutDispatch:
    def test_two_lines_is_td3(self):
        assert MRZCodec.parse([TD3_LINE1, TD3_LINE2]).layout is MRZLayout.TD3

    def test_three_lines_is_td1(self):
        assert MRZCodec.parse([TD1_LINE1, TD1_LINE2, TD1_LINE3]).layout is MRZLayout.TD1

    @pytest.mark.parametrize("count", [0, 1, 4, 5])
    def test_other_counts_fail(self, count):
        record = MRZCodec.parse([TD1_LINE1] * count)
        assert record.valid is False
        assert record.errors == [INVALID_LINE_COUNT]
        assert record.layout is None
        assert record.document_number is None
        assert record.surname is None


# ---------------------------------------------------------------------------
# TD3
# ---------------------------------------------------------------------------

class TestParseTd3:
    def test_icao_sample_valid(self):
        record = MRZCodec.parse([TD3_LINE1, TD3_LINE2])
        assert record.valid is True
        assert record.errors == []
        assert record.document_type == "P"
        assert record.issuing_country == "UTO"
        assert record.surname == "ERIKSSON"
        assert record.given_names == "ANNA MARIA"
        assert record.document_number == "L898902C"
        assert record.nationality == "UTO"
        assert record.date_of_birth == "1969-08-06"
        assert record.sex == "F"
        assert record.expiry_date == "1994-06-23"
        assert record.personal_number == "ZE184226B"

    def test_wrong_composite_is_reported(self):
        line2 = TD3_LINE2[:43] + "0"
        record = MRZCodec.parse([TD3_LINE1, line2])
        assert record.valid is False
        assert record.errors == ["Composite check digit failed: expected 4, got 0"]
        # Valors descodificats igualment
        assert record.surname == "ERIKSSON"

    def test_wrong_document_number_check(self):
        line2 = TD3_LINE2[:9] + "7" + TD3_LINE2[10:]
        record = MRZCodec.parse([TD3_LINE1, line2])
        assert record.valid is False
        assert any(e.startswith("Document number check digit failed: expected 3, got 7") for e in record.errors)

    def test_wrong_birth_check(self):
        line2 = TD3_LINE2[:19] + "5" + TD3_LINE2[20:]
        record = MRZCodec.parse([TD3_LINE1, line2])
        assert "Date of birth check digit failed: expected 1, got 5" in record.errors

    def test_filler_check_digit_is_skipped(self):
        line2 = TD3_LINE2[:27] + "<" + TD3_LINE2[28:]
        record = MRZCodec.parse([TD3_LINE1, line2])
        assert not any(e.startswith("Expiry date") for e in record.errors)

    def test_empty_personal_number_not_checked(self):
        line2 = _td3_line2("AB1234567")
        assert line2[28:42] == "<" * 14
        record = MRZCodec.parse([TD3_LINE1, line2])
        assert record.valid is True
        assert record.personal_number == ""

    def test_short_line_is_structural_error(self):
        record = MRZCodec.parse([TD3_LINE1, TD3_LINE2[:40]])
        assert record.valid is False
        assert "Line 2 length invalid: 40, expected 44" in record.errors
        assert record.document_number == "L898902C"

    def test_filler_sex_is_empty(self):
        line2 = _td3_line2("AB1234567", sex="<")
        assert MRZCodec.parse([TD3_LINE1, line2]).sex == ""

    def test_surname_only(self):
        line1 = "P<UTOMADONNA".ljust(44, "<")
        record = MRZCodec.parse([line1, TD3_LINE2])
        assert record.surname == "MADONNA"
        assert record.given_names == ""


# ---------------------------------------------------------------------------
# TD1
# ---------------------------------------------------------------------------

class TestParseTd1:
    def test_icao_sample_valid(self):
        record = MRZCodec.parse([TD1_LINE1, TD1_LINE2, TD1_LINE3])
        assert record.valid is True
        assert record.document_type == "I"
        assert record.issuing_country == "UTO"
        assert record.document_number == "D23145890"
        assert record.date_of_birth == "1974-08-12"
        assert record.sex == "F"
        assert record.expiry_date == "2012-04-15"
        assert record.nationality == "UTO"
        assert record.surname == "ERIKSSON"
        assert record.given_names == "ANNA MARIA"
        assert record.personal_number is None

    def test_wrong_expiry_check(self):
        line2 = TD1_LINE2[:14] + "0" + TD1_LINE2[15:]
        record = MRZCodec.parse([TD1_LINE1, line2, TD1_LINE3])
        assert record.valid is False
        assert record.errors == ["Expiry date check digit failed: expected 9, got 0"]

    def test_length_errors_accumulate(self):
        record = MRZCodec.parse([TD1_LINE1[:28], TD1_LINE2, TD1_LINE3 + "<<"])
        assert "Line 1 length invalid: 28, expected 30" in record.errors
        assert "Line 3 length invalid: 32, expected 30" in record.errors


# ---------------------------------------------------------------------------
# Punt d'entrada
# ---------------------------------------------------------------------------

class TestParseAndValidateMrz:
    def test_from_raw_text(self):
        text = f"PASSPORT  PASSEPORT\nUTOPIA\n{TD3_LINE1}\n{TD3_LINE2}"
        record = parse_and_validate_mrz(text)
        assert record.valid is True
        assert record.lines == (TD3_LINE1, TD3_LINE2)

    def test_no_mrz(self):
        record = parse_and_validate_mrz("just some text\nno machine readable zone")
        assert record.valid is False
        assert record.errors == [INVALID_LINE_COUNT]
        assert record.lines == ()

    def test_idempotent(self):
        text = f"{TD3_LINE1}\n{TD3_LINE2}"
        assert parse_and_validate_mrz(text) == parse_and_validate_mrz(text)
