from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

TZ_SP = ZoneInfo('America/Sao_Paulo')


def now_trimmed():
    """Retorna datetime atual em timezone de São Paulo, sem microsegundos"""
    return datetime.now(TZ_SP).replace(microsecond=0)


def minutos_a_partir_de_agora(minutos: int) -> datetime:
    return now_trimmed() + timedelta(minutes=minutos)


def iso_or_none(valor: Optional[datetime]) -> Optional[str]:
    return valor.isoformat() if valor else None
