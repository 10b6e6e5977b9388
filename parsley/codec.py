"""
Parsley primitive codec.

Strict conversions between option literals and numbers, plus the small string
helpers the help renderer and diagnostics are built on.

Strictness rules
- parse_real() accepts a whole token only: surrounding whitespace is ignored, but
  any trailing garbage ("3.0x"), an empty or blank string, or the "!!" sequence
  anywhere in the input is rejected.
- Accepted real forms: decimal with optional exponent ("1", "-2.5", ".5", "1e-3"),
  "inf"/"infinity"/"nan" in any case, and hexadecimal floats ("0x1.8p1").
- parse_int() first parses the token as a real (garbage and magnitude checks), then
  requires a plain decimal integer literal with an optional sign. Fractions ("3.5")
  and exponents ("1e3") are rejected even when they denote whole numbers.
- Integers are bounded to the signed 32-bit range [INT_MIN, INT_MAX].

Every parse failure raises ValueError; callers translate it into a usage error.
"""
import re

INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1

_DECIMAL_REAL = re.compile(r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)", re.IGNORECASE)
_HEXADECIMAL_REAL = re.compile(r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?[0-9]+)?")
_DECIMAL_INT = re.compile(r"[+-]?[0-9]+")


def strip(text, /):
    """
    return `text` without leading and trailing whitespace.
    """
    return text.strip()


def split(text, splitter, include, /):
    """
    split `text` on every occurrence of the literal `splitter`.

    - include: keep empty pieces when True, drop them otherwise.
    - an empty splitter yields the whole text as a single piece.
    """
    if not splitter:
        return [text]
    return [piece for piece in text.split(splitter) if include or piece]


def join(items, separator=" ", /):
    """
    concatenate the strings in `items`, separated by `separator` ("" for no items).
    """
    return separator.join(items)


def index_of(items, value, /):
    """
    return the zero-based index of the first item equal to `value`, or -1.
    """
    for index, item in enumerate(items):
        if item == value:
            return index
    return -1


def parse_real(text, /):
    """
    parse a whole token as a floating point number.

    raises ValueError when the token is not exactly one real literal.
    """
    if not isinstance(text, str):
        raise TypeError("parse_real() argument must be a string")
    if "!!" in text:
        raise ValueError("invalid real literal: %r" % text)

    token = strip(text)
    if _DECIMAL_REAL.fullmatch(token):
        return float(token)
    if _HEXADECIMAL_REAL.fullmatch(token):
        return float.fromhex(token)
    raise ValueError("invalid real literal: %r" % text)


def parse_int(text, /):
    """
    parse a whole token as a decimal integer in [INT_MIN, INT_MAX].

    raises ValueError when the token is not a plain integer literal or does not fit.
    """
    # real first: rejects garbage and gives a magnitude to bound-check
    real = parse_real(text)
    if not INT_MIN <= real <= INT_MAX:
        raise ValueError("integer literal out of bounds: %r" % text)

    token = strip(text)
    if not _DECIMAL_INT.fullmatch(token):
        raise ValueError("invalid integer literal: %r" % text)
    return int(token)


def format_real(x, /):
    """
    render a real: whole numbers keep exactly one decimal ("4.0"), others use "%g".
    """
    x = float(x)
    if x.is_integer():
        return "%.1f" % x
    return "%g" % x


def format_int(i, /):
    return "%d" % i


__all__ = (
    "INT_MIN",
    "INT_MAX",
    "strip",
    "split",
    "join",
    "index_of",
    "parse_real",
    "parse_int",
    "format_real",
    "format_int",
)
