"""
Phone and Telegram identity normalization.

Ethiopian mobile numbers are matched on their 9-digit national form
(``9XXXXXXXX`` / ``7XXXXXXXX``). Storage uses the ``+251`` form and the SMS
gateway expects ``251XXXXXXXXX``.
"""
import re

COUNTRY_CODE = "251"

_NON_DIGITS = re.compile(r"\D+")
_NATIONAL_NUMBER = re.compile(r"^[79]\d{8}$")
_SYNTHETIC_PHONE = re.compile(r"^q[a-f0-9]{19}$", re.IGNORECASE)


def normalize_phone(raw):
    """
    Return the 9-digit national number for a supported Ethiopian mobile
    format, or None.

    Accepted: 2519XXXXXXXX, +2519XXXXXXXX, 09XXXXXXXX, 9XXXXXXXX (and the
    same shapes starting with 7).
    """
    if raw is None:
        return None

    digits = _NON_DIGITS.sub("", str(raw))
    if not digits:
        return None

    if len(digits) == 12 and digits.startswith(COUNTRY_CODE):
        digits = digits[3:]
    elif len(digits) == 10 and digits.startswith("0"):
        digits = digits[1:]

    if _NATIONAL_NUMBER.match(digits):
        return digits
    return None


def with_country_code(normalized):
    """251 + national number, or None when the input is not a national number"""
    if not normalized or not _NATIONAL_NUMBER.match(str(normalized)):
        return None
    return f"{COUNTRY_CODE}{normalized}"


def with_plus_country_code(normalized):
    prefixed = with_country_code(normalized)
    return f"+{prefixed}" if prefixed else None


def normalize_telegram_id(raw):
    """Positive integer chat id, or None for zero/negative/non-numeric input"""
    if isinstance(raw, bool):
        return None

    if isinstance(raw, int):
        return raw if raw > 0 else None

    if not isinstance(raw, str):
        return None

    value = raw.strip()
    if not value or not (value.isascii() and value.isdigit()):
        return None

    telegram_id = int(value)
    return telegram_id if telegram_id > 0 else None


def is_synthetic_phone(value):
    """Table-session placeholder phones look like 'q' + 19 hex characters"""
    if not isinstance(value, str):
        return False
    return bool(_SYNTHETIC_PHONE.match(value.strip()))


def display_phone(value):
    """Human-facing phone: empty for missing or synthetic values"""
    if not isinstance(value, str) or is_synthetic_phone(value):
        return ""
    return value.strip()
