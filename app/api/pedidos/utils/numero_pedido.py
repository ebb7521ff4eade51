from datetime import date, datetime
from typing import Optional, Union

from app.utils.database_utils import now_trimmed


def gerar_numero_pedido(pedido_id: int, data: Optional[Union[date, datetime]] = None) -> str:
    """
    Número legível do pedido: ORD-<YYYYMMDD>-<id com 6 dígitos>.

    Depende do id já atribuído pelo banco, por isso é gravado depois do INSERT.
    """
    data = data or now_trimmed()
    return f"ORD-{data:%Y%m%d}-{pedido_id:06d}"


def gerar_numero_comprovante(pedido_id: int, data: Optional[Union[date, datetime]] = None) -> str:
    data = data or now_trimmed()
    return f"REC-{data:%Y%m%d}-{pedido_id:06d}"
