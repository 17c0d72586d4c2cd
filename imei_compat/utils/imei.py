"""
Utility functions for handling IMEI numbers.

We VALIDATE, SPLIT and MASK IMEIs here; we never log the full string.

An IMEI is 15 digits:
- TAC (Type Allocation Code): digits 1-8, identifies make/model
- serial number: digits 9-14
- check digit: digit 15, Luhn checksum over the first 14 digits
"""

from __future__ import annotations

import re
from dataclasses import dataclass

IMEI_LENGTH = 15
TAC_LENGTH = 8
FAC_LENGTH = 6
SERIAL_LENGTH = 6

# Example serial used when we build a demo IMEI for a known TAC.
EXAMPLE_SERIAL = "801234"

_SEPARATORS = re.compile(r"[\s-]+")


@dataclass(frozen=True)
class ImeiStructure:
    tac: str
    fac: str
    serial: str
    check_digit: str


def normalize_imei(raw: str) -> str:
    """
    Strip whitespace and dashes.

    This is the only normalization routine; the validator and the resolver
    both go through it so they always look at the same value.
    """
    if not isinstance(raw, str):
        return ""
    return _SEPARATORS.sub("", raw)


def is_ascii_digits(value: str) -> bool:
    # str.isdigit() also accepts things like "²" or Arabic-Indic digits.
    return value.isascii() and value.isdigit()


def luhn_check_digit(body: str) -> int:
    """
    Compute the Luhn check digit for a digit string (normally 14 digits).

    The algorithm:
    - walk the body right to left
    - double the rightmost digit and every second one after it
    - subtract 9 from doubled values above 9
    - check digit is (10 - sum % 10) % 10
    """
    if not is_ascii_digits(body):
        raise ValueError("Luhn body must contain digits only")

    total = 0
    for i, ch in enumerate(reversed(body)):
        digit = int(ch)
        if i % 2 == 0:  # these sit at even positions once the check digit is appended
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return (10 - total % 10) % 10


def is_valid_imei(raw: str) -> bool:
    """
    Check if a string is a valid 15-digit IMEI using the Luhn algorithm.

    Spaces and dashes are ignored. Never raises.
    """
    imei = normalize_imei(raw)
    if len(imei) != IMEI_LENGTH or not is_ascii_digits(imei):
        return False
    return luhn_check_digit(imei[:-1]) == int(imei[-1])


def extract_tac(imei: str) -> str:
    """Return the TAC (first 8 digits) of a normalized IMEI."""
    return normalize_imei(imei)[:TAC_LENGTH]


def analyze_structure(imei: str) -> ImeiStructure:
    """Split an IMEI into TAC, FAC (first 6 of the TAC), serial and check digit."""
    value = normalize_imei(imei)
    tac = value[:TAC_LENGTH]
    return ImeiStructure(
        tac=tac,
        fac=tac[:FAC_LENGTH],
        serial=value[TAC_LENGTH:IMEI_LENGTH - 1],
        check_digit=value[IMEI_LENGTH - 1:IMEI_LENGTH],
    )


def derive_example_imei(tac: str, serial: str = EXAMPLE_SERIAL) -> str:
    """
    Build a syntactically valid IMEI from an 8-digit TAC and a 6-digit serial.

    Used for fixtures and for showing users an example IMEI of a matched model.
    """
    if len(tac) != TAC_LENGTH or not is_ascii_digits(tac):
        raise ValueError(f"TAC must be {TAC_LENGTH} digits, got {tac!r}")
    if len(serial) != SERIAL_LENGTH or not is_ascii_digits(serial):
        raise ValueError(f"Serial must be {SERIAL_LENGTH} digits, got {serial!r}")

    body = tac + serial
    return body + str(luhn_check_digit(body))


def mask_imei(imei: str) -> str:
    """
    Return a masked IMEI representation for logs.

    We keep the TAC (first 8 digits), then add 8 asterisks.
    """
    return normalize_imei(imei)[:TAC_LENGTH] + "********"


def suffix_imei(imei: str) -> str:
    """Return last 4 digits, used only for UI."""
    return normalize_imei(imei)[-4:]
