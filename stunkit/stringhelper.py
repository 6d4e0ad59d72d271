"""Small string utilities used by the command-line front ends."""

import re

_ATOI_RE = re.compile(r"[\t\n\v\f\r ]*([+-]?\d+)")
_TRIM_WHITESPACE = "\t\n\v\f\r "


def is_null_or_empty(text):
    """Return True when ``text`` is None or the empty string."""
    return text is None or text == ""


def to_lower(text):
    """Lower-case ASCII letters only, leaving every other character as is."""
    return "".join(
        chr(ord(ch) + 32) if "A" <= ch <= "Z" else ch for ch in text
    )


def trim(text):
    """Strip leading and trailing whitespace.

    A string made only of whitespace is returned unchanged.
    """
    stripped = text.strip(_TRIM_WHITESPACE)
    return stripped if stripped else text


def parse_int_prefix(text):
    """Parse a leading integer the way C's ``atoi`` does; 0 when there is none."""
    match = _ATOI_RE.match(text or "")
    return int(match.group(1)) if match else 0


def validate_number_string(text, min_value, max_value):
    """Parse ``text`` as an integer and check it lies in [min_value, max_value].

    Raises ValueError when the text is empty or the number is out of range.
    """
    if is_null_or_empty(text):
        raise ValueError("empty number string")
    value = parse_int_prefix(text)
    if value < min_value or value > max_value:
        raise ValueError(
            f"value {value} is outside the range {min_value}-{max_value}"
        )
    return value