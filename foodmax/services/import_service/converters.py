"""Value coercion for imported rows.

Every normalizer takes the raw cell value (usually a string, occasionally a
number when rows arrive as JSON) and returns the canonical value, or None
when the input is empty or cannot be interpreted. None means "undefined":
the field default applies and the validator decides whether that is fine.
"""

import logging
import math
import re
import unicodedata
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal, DecimalException, InvalidOperation, localcontext
from typing import Any, Mapping

from .constants import (
    BRT_OFFSET_HOURS,
    FALSY_TOKENS,
    MAX_SCIENTIFIC_EXPONENT,
    MIN_CHOICE_PREFIX,
    PHONE_MAX_DIGITS,
    TRUTHY_TOKENS,
    UF_LENGTH,
)


logger = logging.getLogger(__name__)

BRT = timezone(timedelta(hours=BRT_OFFSET_HOURS))

_SCIENTIFIC_RE = re.compile(r"^(\d+)(?:\.(\d*))?[eE]\+?(\d+)$")
_THOUSANDS_DOT_RE = re.compile(r"\.(?=\d{3}(?:,|$))")
_BR_DATETIME_RE = re.compile(
    r"^(\d{2})/(\d{2})/(\d{4})(?:[ ,T]+(\d{2}):(\d{2})(?::(\d{2}))?)?$"
)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def strip_accents(value: str) -> str:
    """Remove diacritics ("Promoção" -> "Promocao")."""
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def fold(value: Any) -> str:
    """Case and diacritic insensitive comparison form with collapsed whitespace."""
    return " ".join(strip_accents(_as_text(value)).casefold().split())


def only_digits(value: Any) -> str:
    return re.sub(r"\D", "", _as_text(value))


def decode_scientific(value: Any) -> str:
    """Expand Excel's scientific rendering of long numbers.

    Spreadsheets show long phone/CEP/CNPJ cells as e.g. ``1.1E+12``. The
    mantissa digits are kept and zero-padded according to the exponent so
    no digit is lost: ``1.1E+12`` -> ``1100000000000``. Input that is not in
    scientific notation, or whose exponent exceeds MAX_SCIENTIFIC_EXPONENT,
    is returned trimmed and otherwise untouched.
    """
    text = _as_text(value)
    match = _SCIENTIFIC_RE.match(text.replace(",", ".", 1))
    if not match:
        return text

    integer, fraction, exponent = match.group(1), match.group(2) or "", int(match.group(3))
    if exponent > MAX_SCIENTIFIC_EXPONENT:
        logger.debug("Exponent of %r too large to expand", value)
        return text
    if exponent >= len(fraction):
        return integer + fraction + "0" * (exponent - len(fraction))
    return f"{integer}{fraction[:exponent]}.{fraction[exponent:]}"


def normalize_currency(value: Any) -> int | None:
    """Convert a money cell to integer cents.

    Examples:
        "1.234,56" -> 123456
        "R$ 10,5"  -> 1050
        "12.50"    -> 1250
        "1.1E+12"  -> 110000000000000
    """
    text = decode_scientific(value)
    if not text:
        return None
    if _SCIENTIFIC_RE.match(text.replace(",", ".", 1)):
        logger.debug("Currency value %r is beyond any real amount", value)
        return None

    clean = re.sub(r"[^0-9,.\-]", "", text)
    clean = _THOUSANDS_DOT_RE.sub("", clean)
    dotted = clean.replace(",", ".", 1)
    try:
        amount = Decimal(dotted)
    except InvalidOperation:
        amount = None

    if amount is not None and amount.is_finite():
        try:
            with localcontext() as ctx:
                ctx.prec = max(ctx.prec, len(amount.as_tuple().digits) + 4)
                return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        except DecimalException:
            logger.debug("Currency value %r out of range", value)
            return None

    # No recognisable separator layout: treat the digits as cents
    digits = only_digits(text)
    if not digits:
        logger.debug("Currency value %r has no digits", value)
        return None
    return int(digits)


def normalize_percent(value: Any) -> float | None:
    """Percentage as a number with two decimals ("12,5%" -> 12.5)."""
    text = decode_scientific(value).replace("%", "").strip()
    if not text:
        return None
    dotted = _THOUSANDS_DOT_RE.sub("", text).replace(",", ".", 1)
    try:
        number = float(dotted)
    except ValueError:
        logger.debug("Unparseable percentage %r", value)
        return None
    if not math.isfinite(number):
        return None
    return round(number, 2)


def normalize_bool(value: Any) -> bool | None:
    """Map locale-tolerant yes/no tokens to a bool; unknown tokens give None."""
    if isinstance(value, bool):
        return value
    token = _as_text(value).lower()
    if not token:
        return None
    if token in TRUTHY_TOKENS:
        return True
    if token in FALSY_TOKENS:
        return False
    return None


def normalize_digits(value: Any) -> str | None:
    """Digits only, after scientific-notation decoding (CEP, CNPJ)."""
    digits = only_digits(decode_scientific(value))
    return digits or None


def normalize_phone(value: Any) -> str | None:
    """Digits only, clamped to the longest valid phone number."""
    digits = normalize_digits(value)
    if digits is None:
        return None
    if len(digits) > PHONE_MAX_DIGITS:
        logger.debug("Phone %r clamped to %d digits", value, PHONE_MAX_DIGITS)
        digits = digits[:PHONE_MAX_DIGITS]
    return digits


def normalize_ddi(value: Any, default: str | None = None) -> str | None:
    """Country dialling code as ``+<digits>``; falls back to ``default``."""
    digits = normalize_digits(value)
    if digits:
        return f"+{digits}"
    return default


def normalize_datetime(value: Any) -> str | None:
    """Parse a date/time cell into an ISO instant at UTC-3.

    Accepts ``dd/mm/yyyy``, ``dd/mm/yyyy hh:mm[:ss]`` and ISO 8601. Naive
    values are read as Brasília time; aware values are converted to it.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = _as_text(value)
        if not text:
            return None

        match = _BR_DATETIME_RE.match(text)
        try:
            if match:
                dd, mm, yyyy, hh, mi, ss = match.groups()
                parsed = datetime(
                    int(yyyy), int(mm), int(dd),
                    int(hh or 0), int(mi or 0), int(ss or 0),
                )
            else:
                parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug("Unparseable date %r", value)
            return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=BRT).isoformat()
    try:
        return parsed.astimezone(BRT).isoformat()
    except OverflowError:
        # Aware instants at the edge of the datetime range
        logger.debug("Date %r out of range at UTC-3", value)
        return None


def normalize_date(value: Any) -> str | None:
    """Like normalize_datetime but anchored to midnight of the local day."""
    iso = normalize_datetime(value)
    if iso is None:
        return None
    day = datetime.fromisoformat(iso)
    return day.replace(hour=0, minute=0, second=0, microsecond=0).isoformat()


def normalize_uf(value: Any) -> str | None:
    text = _as_text(value).upper()[:UF_LENGTH]
    return text or None


def normalize_text(value: Any) -> str | None:
    text = _as_text(value)
    return text or None


def normalize_int(value: Any) -> int | None:
    """Try to coerce a cell to an int ("12", "12,0", "1.2E+3")."""
    text = decode_scientific(value).replace(",", ".")
    if not text:
        return None
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        return None


def normalize_reference(value: Any) -> int | str | None:
    """Foreign-key cells stay as given (id or display name) until resolution."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return normalize_text(value)


def match_choice(
    value: Any,
    choices: tuple[str, ...],
    aliases: Mapping[str, str] | None = None,
) -> str | None:
    """Best-effort canonicalisation of a categorical value.

    Tries, in order: exact match ignoring case/diacritics, an alias, then a
    unique prefix in either direction ("pend" -> "Pendente",
    "Pendentes" -> "Pendente"). Returns None when nothing matches.
    """
    key = fold(value)
    if not key:
        return None

    for choice in choices:
        if fold(choice) == key:
            return choice

    for alias, target in (aliases or {}).items():
        if fold(alias) == key:
            return target

    if len(key) < MIN_CHOICE_PREFIX:
        return None

    prefixed = [c for c in choices if fold(c).startswith(key) or key.startswith(fold(c))]
    if len(prefixed) == 1:
        return prefixed[0]
    return None


