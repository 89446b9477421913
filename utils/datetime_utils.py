"""
Hora actual para las columnas de auditoría (created_at / updated_at).

Se guardan como datetime naive en la zona horaria configurada
(`settings.timezone`, formato IANA).
"""
from datetime import datetime
from zoneinfo import ZoneInfo
from config import settings


def get_naive_now() -> datetime:
    """Hora local sin tzinfo, tal como se almacena en las columnas DateTime."""
    return datetime.now(ZoneInfo(settings.timezone)).replace(tzinfo=None)
