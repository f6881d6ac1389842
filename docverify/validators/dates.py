"""
Helpers de data per als validadors

parse_iso_date() retorna una data o None: les comprovacions decideixen amb
un if, mai amb excepcions.
"""
import re
import calendar
from datetime import date
from typing import Optional

ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

DAYS_PER_MONTH_APPROX = 30


def parse_iso_date(value: str) -> Optional[date]:
    """YYYY-MM-DD → date. None si el format o el calendari no quadren."""
    m = ISO_DATE.match(value or "")
    if not m:
        return None
    year, month, day = int(m.group(1)), int(m.group(2)), int(m.group(3))
    if not (1 <= year and 1 <= month <= 12):
        return None
    if not (1 <= day <= calendar.monthrange(year, month)[1]):
        return None
    return date(year, month, day)


def calendar_age(birth: date, today: date) -> int:
    """Edat en anys complets (resta un any si encara no ha fet l'aniversari)."""
    age = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    return age


def months_until(target: date, today: date) -> float:
    """Mesos restants amb mesos fixos de 30 dies (aproximació, no calendari)."""
    return (target - today).days / DAYS_PER_MONTH_APPROX
