# utils/validation.py
"""
Validation Service
Pure checks for booking inputs: dates, prices, travelers, stars,
email, phone and name. Every check returns a ValidationResult and
never raises; bilingual messages follow the `lang` argument.

A hard error stops the check immediately; warnings never affect `valid`.
"""

import math
import re
from datetime import date, datetime
from typing import Optional, Dict, Any, List, Union

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta
from loguru import logger

from ..nlu.gazetteer import MONTHS_AR, MONTHS_EN
from ..schemas.ai_schemas import Language, ValidationResult

DDMM_PATTERN = re.compile(r"(?<!\d)(\d{1,2})[/\-](\d{1,2})(?!\d)")
YEAR_FIRST_PATTERN = re.compile(r"^\d{4}[/\-.]")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_STRIP_PATTERN = re.compile(r"[\s\-()]")
PHONE_PATTERN = re.compile(r"^\+?[0-9]+$")
NAME_UNUSUAL_PATTERN = re.compile(r"[^a-zA-Z؀-ۿ\s\-']")

EMAIL_TYPO_DOMAINS = {
    "gmial.com": "gmail.com",
    "gmai.com": "gmail.com",
    "yahooo.com": "yahoo.com",
    "hotmial.com": "hotmail.com",
}

# Month name -> month number, English and Arabic
MONTH_NUMBERS = {name: index for index, name in enumerate(MONTHS_EN, start=1)}
MONTH_NUMBERS.update({name: index for index, name in enumerate(MONTHS_AR, start=1)})

MIN_PRICE_HINT = 1000
MAX_PRICE_HINT = 100000
MAX_TRAVELERS_HINT = 10
MIN_NIGHTS_HINT = 2
MAX_NIGHTS_HINT = 30


def _msg(lang: Union[Language, str], ar: str, en: str) -> str:
    return ar if getattr(lang, "value", lang) == "ar" else en


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) or (isinstance(value, float) and value.is_integer())


def _fail(error: str, warnings: Optional[List[str]] = None) -> ValidationResult:
    return ValidationResult(valid=False, errors=[error], warnings=warnings or [])


def _roll_forward(parsed: date, today: date) -> date:
    return parsed.replace(year=today.year + 1) if parsed < today else parsed


def _parse_free_form(text: str, today: date) -> Optional[date]:
    """
    Full date via dateutil. Parsed twice against different defaults so a
    missing day or month is detected instead of silently filled in; a
    missing year means the next occurrence of that day.
    """
    dayfirst = not YEAR_FIRST_PATTERN.match(text)
    try:
        first = date_parser.parse(text, dayfirst=dayfirst, default=datetime(today.year, 1, 1))
        second = date_parser.parse(text, dayfirst=dayfirst, default=datetime(today.year + 1, 2, 2))
    except (ValueError, OverflowError):
        return None

    if first.day != second.day or first.month != second.month:
        return None
    if first.year != second.year:
        return _roll_forward(first.date(), today)
    return first.date()


def parse_date(value: str, today: Optional[date] = None) -> Optional[date]:
    """
    Parse a user date. Tried in order:
    1. ISO, then any free-form date with day and month (dateutil, day
       first unless the string starts with a year)
    2. DD/MM or DD-MM in the current year, next year if already past
    3. month name (English or Arabic): 1st of that month, next year if
       the month is earlier than the current one
    """
    today = today or date.today()
    text = (value or "").strip()
    if not text:
        return None

    try:
        return date_parser.isoparse(text).date()
    except (ValueError, OverflowError):
        pass

    parsed = _parse_free_form(text, today)
    if parsed:
        return parsed

    match = DDMM_PATTERN.search(text)
    if match:
        day, month = int(match.group(1)), int(match.group(2))
        try:
            parsed = date(today.year, month, day)
            if parsed < today:
                parsed = parsed.replace(year=today.year + 1)
            return parsed
        except ValueError:
            # 31/02 and friends; fall through to month names
            logger.debug(f"DateParsing: invalid day/month in '{text}'")

    lowered = text.lower()
    for name, month in MONTH_NUMBERS.items():
        if name in lowered:
            year = today.year + 1 if month < today.month else today.year
            return date(year, month, 1)

    return None


class ValidationService:
    """Stateless; one shared instance is enough"""

    def __init__(self, today_provider=None):
        self._today = today_provider or date.today

    def parse_date(self, value: str) -> Optional[date]:
        return parse_date(value, self._today())

    # ------------------------------------------
    # Dates
    # ------------------------------------------

    def validate_date(self, value: str, lang: Union[Language, str] = Language.AR) -> ValidationResult:
        parsed = self.parse_date(value)
        if parsed is None:
            return _fail(_msg(
                lang,
                "التاريخ غير صحيح. الرجاء إدخال تاريخ صحيح (مثال: 15/11 أو 15 نوفمبر)",
                "Invalid date format. Please enter a valid date (e.g., 15/11 or 15 November)",
            ))

        today = self._today()
        if parsed < today:
            return _fail(_msg(lang, "لا يمكن اختيار تاريخ في الماضي", "Cannot select a date in the past"))

        warnings = []
        if parsed > today + relativedelta(years=1):
            warnings.append(_msg(
                lang,
                "التاريخ المحدد بعيد جداً. قد لا تكون العروض متاحة",
                "Selected date is very far. Offers may not be available",
            ))

        return ValidationResult(valid=True, warnings=warnings, corrected_value=parsed.isoformat())

    def validate_date_range(self, start: str, end: str, lang: Union[Language, str] = Language.AR) -> ValidationResult:
        errors: List[str] = []
        errors.extend(self.validate_date(start, lang).errors)
        errors.extend(self.validate_date(end, lang).errors)
        if errors:
            return ValidationResult(valid=False, errors=errors)

        start_date = self.parse_date(start)
        end_date = self.parse_date(end)
        if start_date >= end_date:
            return _fail(_msg(
                lang,
                "تاريخ البداية يجب أن يكون قبل تاريخ النهاية",
                "Start date must be before end date",
            ))

        warnings = []
        nights = (end_date - start_date).days
        if nights < MIN_NIGHTS_HINT:
            warnings.append(_msg(
                lang,
                "مدة الإقامة قصيرة جداً. الحد الأدنى الموصى به هو ليلتان",
                "Stay duration is very short. Minimum recommended is 2 nights",
            ))
        if nights > MAX_NIGHTS_HINT:
            warnings.append(_msg(
                lang,
                "مدة الإقامة طويلة جداً. قد تحتاج لتأكيد خاص",
                "Stay duration is very long. May require special confirmation",
            ))

        return ValidationResult(
            valid=True,
            warnings=warnings,
            corrected_value={"start": start_date.isoformat(), "end": end_date.isoformat()},
        )

    # ------------------------------------------
    # Prices
    # ------------------------------------------

    def validate_price(self, price: Any, lang: Union[Language, str] = Language.AR) -> ValidationResult:
        if not _is_number(price):
            return _fail(_msg(lang, "السعر يجب أن يكون رقماً", "Price must be a number"))
        if price < 0:
            return _fail(_msg(lang, "السعر لا يمكن أن يكون سالباً", "Price cannot be negative"))

        warnings = []
        if price < MIN_PRICE_HINT:
            warnings.append(_msg(
                lang,
                "السعر منخفض جداً. قد لا تتوفر عروض بهذا السعر",
                "Price is very low. Offers may not be available at this price",
            ))
        if price > MAX_PRICE_HINT:
            warnings.append(_msg(lang, "السعر مرتفع جداً. هل أنت متأكد؟", "Price is very high. Are you sure?"))

        return ValidationResult(valid=True, warnings=warnings)

    def validate_price_range(self, min_price: Any = None, max_price: Any = None,
                             lang: Union[Language, str] = Language.AR) -> ValidationResult:
        errors: List[str] = []
        warnings: List[str] = []

        for value in (min_price, max_price):
            if value is not None:
                result = self.validate_price(value, lang)
                errors.extend(result.errors)
                warnings.extend(result.warnings)

        if errors:
            return ValidationResult(valid=False, errors=errors, warnings=warnings)

        if min_price is not None and max_price is not None and min_price > max_price:
            return _fail(_msg(
                lang,
                "الحد الأدنى للسعر يجب أن يكون أقل من الحد الأقصى",
                "Minimum price must be less than maximum price",
            ), warnings)

        return ValidationResult(valid=True, warnings=warnings)

    # ------------------------------------------
    # Counts
    # ------------------------------------------

    def validate_travelers(self, count: Any, lang: Union[Language, str] = Language.AR) -> ValidationResult:
        if not _is_number(count):
            return _fail(_msg(lang, "عدد المسافرين يجب أن يكون رقماً", "Number of travelers must be a number"))
        if not _is_integer(count):
            return _fail(_msg(lang, "عدد المسافرين يجب أن يكون رقماً صحيحاً", "Number of travelers must be an integer"))
        if count < 1:
            return _fail(_msg(lang, "يجب أن يكون هناك مسافر واحد على الأقل", "Must have at least 1 traveler"))

        warnings = []
        if count > MAX_TRAVELERS_HINT:
            warnings.append(_msg(
                lang,
                "عدد المسافرين كبير. قد تحتاج لتأكيد خاص للمجموعات",
                "Large number of travelers. May need special confirmation for groups",
            ))
        return ValidationResult(valid=True, warnings=warnings, corrected_value=int(count))

    def validate_stars(self, stars: Any, lang: Union[Language, str] = Language.AR) -> ValidationResult:
        if not _is_number(stars):
            return _fail(_msg(lang, "عدد النجوم يجب أن يكون رقماً", "Stars must be a number"))
        if not _is_integer(stars):
            return _fail(_msg(lang, "عدد النجوم يجب أن يكون رقماً صحيحاً", "Stars must be an integer"))
        if stars < 1 or stars > 5:
            return _fail(_msg(lang, "عدد النجوم يجب أن يكون بين 1 و 5", "Stars must be between 1 and 5"))
        return ValidationResult(valid=True, corrected_value=int(stars))

    # ------------------------------------------
    # Contact details
    # ------------------------------------------

    def validate_email(self, email: str, lang: Union[Language, str] = Language.AR) -> ValidationResult:
        email = (email or "").strip()
        if not EMAIL_PATTERN.match(email):
            return _fail(_msg(lang, "البريد الإلكتروني غير صحيح", "Invalid email address"))

        warnings = []
        local, _, domain = email.rpartition("@")
        suggestion = EMAIL_TYPO_DOMAINS.get(domain.lower())
        if suggestion:
            fixed = f"{local}@{suggestion}"
            warnings.append(_msg(lang, f"هل تقصد {fixed}؟", f"Did you mean {fixed}?"))

        return ValidationResult(valid=True, warnings=warnings, corrected_value=email)

    def validate_phone(self, phone: str, lang: Union[Language, str] = Language.AR) -> ValidationResult:
        clean = PHONE_STRIP_PATTERN.sub("", phone or "")

        if not PHONE_PATTERN.match(clean):
            return _fail(_msg(lang, "رقم الهاتف يجب أن يحتوي على أرقام فقط", "Phone number must contain only digits"))
        if len(clean) < 10 or len(clean) > 15:
            return _fail(_msg(lang, "رقم الهاتف يجب أن يكون بين 10 و 15 رقماً", "Phone number must be between 10 and 15 digits"))

        warnings = []
        # Local Egyptian mobile without country code
        if clean.startswith("01") and len(clean) == 11:
            warnings.append(_msg(lang, "يفضل إضافة رمز الدولة (+20)", "Consider adding country code (+20)"))

        return ValidationResult(valid=True, warnings=warnings, corrected_value=clean)

    def validate_name(self, name: str, lang: Union[Language, str] = Language.AR) -> ValidationResult:
        trimmed = (name or "").strip()
        if not trimmed:
            return _fail(_msg(lang, "الاسم مطلوب", "Name is required"))
        if len(trimmed) < 2:
            return _fail(_msg(lang, "الاسم قصير جداً", "Name is too short"))
        if len(trimmed) > 100:
            return _fail(_msg(lang, "الاسم طويل جداً", "Name is too long"))

        warnings = []
        if NAME_UNUSUAL_PATTERN.search(trimmed):
            warnings.append(_msg(lang, "الاسم يحتوي على أحرف غير مألوفة", "Name contains unusual characters"))

        return ValidationResult(valid=True, warnings=warnings, corrected_value=trimmed)

    # ------------------------------------------
    # Aggregate
    # ------------------------------------------

    def validate_booking_data(self, data: Dict[str, Any], lang: Union[Language, str] = Language.AR) -> ValidationResult:
        """
        Check a whole booking request. Unlike the single-field checks this
        collects every error and warning instead of stopping at the first.

        Keys: destination, start_date, end_date, travelers (required);
        customer_name, customer_email, customer_phone (optional).
        """
        errors: List[str] = []
        warnings: List[str] = []

        def collect(result: ValidationResult):
            errors.extend(result.errors)
            warnings.extend(result.warnings)

        if not data.get("destination"):
            errors.append(_msg(lang, "الوجهة مطلوبة", "Destination is required"))

        if data.get("start_date") and data.get("end_date"):
            collect(self.validate_date_range(data["start_date"], data["end_date"], lang))
        else:
            errors.append(_msg(lang, "تواريخ السفر مطلوبة", "Travel dates are required"))

        if data.get("travelers"):
            collect(self.validate_travelers(data["travelers"], lang))
        else:
            errors.append(_msg(lang, "عدد المسافرين مطلوب", "Number of travelers is required"))

        if data.get("customer_name"):
            collect(self.validate_name(data["customer_name"], lang))
        if data.get("customer_email"):
            collect(self.validate_email(data["customer_email"], lang))
        if data.get("customer_phone"):
            collect(self.validate_phone(data["customer_phone"], lang))

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


# Global instance
validation_service = ValidationService()
