from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.api.pedidos.models.model_pedido import StatusPedido


class PedidoStatusHistoricoOut(BaseModel):
    id: int
    pedido_id: int
    status: StatusPedido
    observacoes: Optional[str] = None
    usuario_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
