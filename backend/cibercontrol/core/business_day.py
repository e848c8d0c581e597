"""
Dia contable del local.

El negocio no cierra a medianoche: un "dia" va de las 06:00 hora de Lima
(UTC-5) hasta las 06:00 del dia siguiente. Todos los filtros por fecha de los
reportes usan estos limites, convertidos a UTC para consultar la base.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

from cibercontrol.core.config import settings
from cibercontrol.core.errors import ValidationError


def business_tz() -> timezone:
    return timezone(timedelta(hours=settings.business_utc_offset_hours))


def business_day_start(day: date) -> datetime:
    """06:00 local del dia indicado, con offset (ej. 2024-05-01T06:00:00-05:00)."""
    return datetime.combine(day, time(hour=settings.business_day_start_hour), tzinfo=business_tz())


def business_day_bounds(start_date: date, end_date: Optional[date] = None) -> Tuple[datetime, datetime]:
    """
    Rango UTC semiabierto [start_date 06:00, end_date 06:00).

    Si end_date falta o es igual a start_date el rango cubre ese dia contable
    completo (hasta las 06:00 del dia siguiente).

    Raises:
        ValidationError: si start_date > end_date
    """
    if end_date is not None and start_date > end_date:
        raise ValidationError("start_date must be on or before end_date")
    if end_date is None or end_date == start_date:
        end_date = start_date + timedelta(days=1)
    start = business_day_start(start_date).astimezone(timezone.utc)
    end = business_day_start(end_date).astimezone(timezone.utc)
    return start, end


def optional_bounds(start_date: Optional[date], end_date: Optional[date]) -> Optional[Tuple[datetime, datetime]]:
    """Como business_day_bounds, pero sin fechas no filtra (None)."""
    if start_date is None:
        if end_date is not None:
            raise ValidationError("end_date requires start_date")
        return None
    return business_day_bounds(start_date, end_date)


def business_date(value: datetime) -> date:
    """Dia contable al que pertenece un timestamp (naive = UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    local = value.astimezone(business_tz())
    return (local - timedelta(hours=settings.business_day_start_hour)).date()


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    first = date(year, month, 1)
    next_first = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return business_day_bounds(first, next_first)
