"""
Helpers genéricos de serialización.
NO contiene lógica de negocio, solo utilidades de formato.
"""
from datetime import date, datetime
from decimal import Decimal


def serialize_decimal(value):
    """Convierte Decimal a float para serialización JSON"""
    if value is None:
        return None
    return float(value)


def serialize_datetime(value):
    """Convierte datetime a string ISO para serialización JSON"""
    if value is None:
        return None
    return value.isoformat()


def serialize_row(row):
    """Fila del store -> dict listo para JSON (Decimal a float, fechas a ISO)"""
    if row is None:
        return None
    out = {}
    for key, value in row.items():
        if isinstance(value, Decimal):
            out[key] = serialize_decimal(value)
        elif isinstance(value, (datetime, date)):
            out[key] = serialize_datetime(value)
        else:
            out[key] = value
    return out


def serialize_rows(rows):
    return [serialize_row(r) for r in rows]
