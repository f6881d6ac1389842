"""
Còdec MRZ (Machine Readable Zone) — formats ICAO TD3 i TD1

  detect_mrz_lines():  línies candidates dins del text OCR
  parse():             TD3 (2×44) o TD1 (3×30) segons el nombre de línies
  checksums:           pesos 7-3-1, mòdul 10

Cap error de format ni de checksum és fatal: s'acumulen a MRZRecord.errors i
el registre es retorna amb els valors descodificats. Només un nombre de
línies diferent de 2 o 3 retorna un registre buit.
"""
import re
import logging
from typing import Iterator, Sequence
from docverify.models.mrz import MRZLayout, MRZRecord

log = logging.getLogger("ocr.mrz")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FILLER = "<"
CHECK_WEIGHTS = (7, 3, 1)
MRZ_LINE_LENGTHS = frozenset({44, 30})
INVALID_LINE_COUNT = "Invalid MRZ format - expected 2 or 3 lines"

_MRZ_CHARS = re.compile(r"^[A-Z0-9<]+$")
_WHITESPACE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Checksum
# ---------------------------------------------------------------------------

def char_value(char: str) -> int:
    """0-9 → valor, A-Z → 10-35, '<' (i qualsevol altre) → 0."""
    if "0" <= char <= "9":
        return ord(char) - ord("0")
    if "A" <= char <= "Z":
        return ord(char) - ord("A") + 10
    return 0


def compute_check_digit(data: str) -> int:
    """Dígit de control ICAO 9303: suma ponderada (7, 3, 1) mòdul 10."""
    total = sum(
        char_value(char) * CHECK_WEIGHTS[i % len(CHECK_WEIGHTS)]
        for i, char in enumerate(data)
    )
    return total % 10


def _verify_check_digit(label: str, data: str, check_char: str, errors: list[str]) -> None:
    # '<' = dígit no informat, no és error
    if check_char == FILLER:
        return
    expected = compute_check_digit(data)
    if check_char != str(expected):
        errors.append(f"{label} check digit failed: expected {expected}, got {check_char or 'nothing'}")


# ---------------------------------------------------------------------------
# Helpers de camp
# ---------------------------------------------------------------------------

def expand_mrz_date(yymmdd: str) -> str:
    """
    YYMMDD → YYYY-MM-DD. Any > 50 → 19YY, si no 20YY.

    No valida dia ni mes (ho fa el validador documental). Retorna "" si el
    camp no té 6 caràcters o l'any no és numèric.
    """
    if len(yymmdd) != 6 or not yymmdd[:2].isdigit():
        return ""
    yy = int(yymmdd[:2])
    year = 1900 + yy if yy > 50 else 2000 + yy
    return f"{year}-{yymmdd[2:4]}-{yymmdd[4:6]}"


def _strip_filler(value: str) -> str:
    return value.replace(FILLER, "").strip()


def _split_name(name_zone: str) -> tuple[str, str]:
    """'COGNOM<<NOM<SEGON' → ('COGNOM', 'NOM SEGON')."""
    surname, _, given = name_zone.partition("<<")
    return (
        surname.replace(FILLER, " ").strip(),
        given.replace(FILLER, " ").strip(),
    )


def _char_at(line: str, index: int) -> str:
    return line[index] if index < len(line) else ""


def _check_lengths(lines: Sequence[str], layout: MRZLayout, errors: list[str]) -> None:
    for number, line in enumerate(lines, start=1):
        if len(line) != layout.line_length:
            errors.append(f"Line {number} length invalid: {len(line)}, expected {layout.line_length}")


# ---------------------------------------------------------------------------
# Còdec
# ---------------------------------------------------------------------------

class MRZCodec:

    @staticmethod
    def iter_mrz_candidates(text: str) -> Iterator[str]:
        """
        Recorre el text línia a línia i produeix les candidates MRZ, en
        l'ordre del text (l'OCR llegeix de dalt a baix).
        """
        for line in text.splitlines():
            clean = _WHITESPACE.sub("", line).upper()
            if len(clean) in MRZ_LINE_LENGTHS and _MRZ_CHARS.match(clean):
                yield clean

    @staticmethod
    def detect_mrz_lines(text: str) -> tuple[str, ...]:
        return tuple(MRZCodec.iter_mrz_candidates(text))

    @staticmethod
    def parse(lines: Sequence[str]) -> MRZRecord:
        """Tria el format només pel nombre de línies: 2 → TD3, 3 → TD1."""
        lines = tuple(lines)
        if len(lines) == 2:
            return MRZCodec._parse_td3(lines)
        if len(lines) == 3:
            return MRZCodec._parse_td1(lines)
        return MRZRecord(lines=lines, valid=False, errors=[INVALID_LINE_COUNT])

    @staticmethod
    def _parse_td3(lines: tuple[str, ...]) -> MRZRecord:
        line1, line2 = lines
        errors: list[str] = []
        _check_lengths(lines, MRZLayout.TD3, errors)

        # Línia 1: tipus, país emissor, nom
        surname, given_names = _split_name(line1[5:44])

        # Línia 2: número, nacionalitat, dates, sexe, número personal
        doc_number = line2[0:9]
        _verify_check_digit("Document number", doc_number, _char_at(line2, 9), errors)

        birth = line2[13:19]
        _verify_check_digit("Date of birth", birth, _char_at(line2, 19), errors)

        expiry = line2[21:27]
        _verify_check_digit("Expiry date", expiry, _char_at(line2, 27), errors)

        personal_number = line2[28:42]
        if _strip_filler(personal_number):
            _verify_check_digit("Personal number", personal_number, _char_at(line2, 42), errors)

        composite = line2[0:10] + line2[13:20] + line2[21:43]
        _verify_check_digit("Composite", composite, _char_at(line2, 43), errors)

        return MRZRecord(
            layout=MRZLayout.TD3,
            lines=lines,
            document_type=_strip_filler(line1[0:2]),
            issuing_country=_strip_filler(line1[2:5]),
            document_number=_strip_filler(doc_number),
            surname=surname,
            given_names=given_names,
            nationality=_strip_filler(line2[10:13]),
            date_of_birth=expand_mrz_date(birth),
            sex=_strip_filler(_char_at(line2, 20)),
            expiry_date=expand_mrz_date(expiry),
            personal_number=_strip_filler(personal_number),
            valid=not errors,
            errors=errors,
        )

    @staticmethod
    def _parse_td1(lines: tuple[str, ...]) -> MRZRecord:
        line1, line2, line3 = lines
        errors: list[str] = []
        _check_lengths(lines, MRZLayout.TD1, errors)

        # Línia 1: tipus, país emissor, número de document
        doc_number = line1[5:14]
        _verify_check_digit("Document number", doc_number, _char_at(line1, 14), errors)

        # Línia 2: dates, sexe, nacionalitat
        birth = line2[0:6]
        _verify_check_digit("Date of birth", birth, _char_at(line2, 6), errors)

        expiry = line2[8:14]
        _verify_check_digit("Expiry date", expiry, _char_at(line2, 14), errors)

        # Línia 3: cognoms << noms
        surname, given_names = _split_name(line3[0:30])

        return MRZRecord(
            layout=MRZLayout.TD1,
            lines=lines,
            document_type=_strip_filler(line1[0:2]),
            issuing_country=_strip_filler(line1[2:5]),
            document_number=_strip_filler(doc_number),
            surname=surname,
            given_names=given_names,
            nationality=_strip_filler(line2[15:18]),
            date_of_birth=expand_mrz_date(birth),
            sex=_strip_filler(_char_at(line2, 7)),
            expiry_date=expand_mrz_date(expiry),
            valid=not errors,
            errors=errors,
        )

    @staticmethod
    def parse_and_validate_mrz(raw_text: str) -> MRZRecord:
        """Punt d'entrada: detecta les línies MRZ del text OCR i les parseja."""
        lines = MRZCodec.detect_mrz_lines(raw_text)
        record = MRZCodec.parse(lines)
        log.info("mrz_parsed", extra={
            "mrz_lines": len(lines),
            "layout": record.layout.value if record.layout else None,
            "mrz_valid": record.valid,
            "mrz_errors": len(record.errors),
        })
        return record


def parse_and_validate_mrz(raw_text: str) -> MRZRecord:
    return MRZCodec.parse_and_validate_mrz(raw_text)


def detect_mrz_lines(text: str) -> tuple[str, ...]:
    return MRZCodec.detect_mrz_lines(text)


# Singleton
mrz_codec = MRZCodec()
