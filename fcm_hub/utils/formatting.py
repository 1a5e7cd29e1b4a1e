import re
from datetime import date, datetime
from typing import Any, Iterable, Optional, Union

from pydantic import EmailStr, TypeAdapter, ValidationError


_NON_NUMERIC = re.compile(r"[^0-9.]")
_LEADING_FLOAT = re.compile(r"^(\d+\.?\d*|\.\d+)")
_EMAIL = TypeAdapter(EmailStr)
# Philippine mobile numbers: +639XXXXXXXXX, 09XXXXXXXXX or 9XXXXXXXXX
_PH_PHONE = re.compile(r"^(\+63|0)?9[0-9]{9}$")


def parse_amount(value: Any) -> Optional[float]:
    """Strip everything but digits and dots, then read the leading number.

    Returns None when nothing numeric is left. ``"$1,234.56abc"`` -> 1234.56,
    ``"1.2.3"`` -> 1.2.
    """
    if value is None or value == "":
        return None
    cleaned = _NON_NUMERIC.sub("", str(value))
    match = _LEADING_FLOAT.match(cleaned)
    if not match:
        return None
    return float(match.group(1))


def normalize_amount(value: Any) -> float:
    return parse_amount(value) or 0.0


def format_currency(amount: Union[str, int, float, None]) -> str:
    if isinstance(amount, str):
        num = parse_amount(amount)
        if num is None:
            return amount
    elif amount is None:
        num = 0.0
    else:
        num = float(amount)
    return f"Php {num:,.2f}"


def calculate_total_from_items(items: Optional[Iterable[Any]]) -> float:
    total = 0.0
    for item in items or []:
        if not isinstance(item, dict):
            continue
        price = parse_amount(item.get("price"))
        if price is not None:
            total += price
    return total


def format_date_short(value: Union[str, date, datetime, None]) -> Optional[str]:
    """MM/DD/YY; unparsable strings are returned untouched."""
    if not value:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value.strftime("%m/%d/%y")


def validate_email(email: Optional[str]) -> str:
    if not email:
        return ""
    try:
        _EMAIL.validate_python(email)
    except ValidationError:
        return "Please enter a valid email address"
    return ""


def validate_phone(phone: Optional[str]) -> str:
    if not phone:
        return ""
    if not _PH_PHONE.match(phone):
        return "Please enter a valid Philippine phone number (e.g., +639123456789 or 09123456789)"
    return ""


def capitalize_first_letters(text: Optional[str]) -> Optional[str]:
    if not text:
        return text
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split())
