from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from app.api.cadastros.models.model_endereco_dv import EnderecoModel
from app.api.pedidos.models.model_pedido import PedidoItemModel, PedidoModel, StatusPedido
from app.api.pedidos.models.model_pedido_historico import PedidoHistoricoModel
from app.api.pedidos.utils.numero_pedido import gerar_numero_pedido
from app.api.pedidos.utils.transicoes_status import campo_timestamp
from app.utils.database_utils import now_trimmed


class PedidoRepository:
    """Acesso a pedidos, itens e histórico. Não faz commit nas operações de escrita."""

    def __init__(self, db: Session):
        self.db = db

    # -------------------- Consultas ---------------------
    def _query_completa(self):
        return (
            self.db.query(PedidoModel)
            .options(
                selectinload(PedidoModel.itens).joinedload(PedidoItemModel.produto),
                selectinload(PedidoModel.itens).joinedload(PedidoItemModel.variacao),
                selectinload(PedidoModel.itens).joinedload(PedidoItemModel.borda),
                selectinload(PedidoModel.itens).joinedload(PedidoItemModel.recheio_borda),
                joinedload(PedidoModel.endereco),
                joinedload(PedidoModel.cliente),
            )
            .filter(PedidoModel.deleted_at.is_(None))
        )

    def get_pedido(self, pedido_id: int) -> Optional[PedidoModel]:
        return self._query_completa().filter(PedidoModel.id == pedido_id).first()

    def listar_por_cliente(self, cliente_id: int) -> List[PedidoModel]:
        return (
            self._query_completa()
            .filter(PedidoModel.cliente_id == cliente_id)
            .order_by(PedidoModel.created_at.desc(), PedidoModel.id.desc())
            .all()
        )

    def listar_todos(
        self,
        *,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[PedidoModel]:
        query = self._query_completa()
        if status:
            query = query.filter(PedidoModel.status == status)
        return (
            query.order_by(PedidoModel.created_at.desc(), PedidoModel.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def listar_historico(self, pedido_id: int) -> List[PedidoHistoricoModel]:
        return (
            self.db.query(PedidoHistoricoModel)
            .filter(PedidoHistoricoModel.pedido_id == pedido_id)
            .order_by(PedidoHistoricoModel.created_at.asc(), PedidoHistoricoModel.id.asc())
            .all()
        )

    def get_endereco(self, endereco_id: int) -> Optional[EnderecoModel]:
        return (
            self.db.query(EnderecoModel)
            .filter(EnderecoModel.id == endereco_id, EnderecoModel.deleted_at.is_(None))
            .first()
        )

    # -------------------- Mutations ---------------------
    def criar_pedido(
        self,
        *,
        cliente_id: int,
        endereco_id: int,
        meio_pagamento: str,
        subtotal: Decimal,
        taxa_entrega: Decimal,
        desconto: Decimal,
        observacoes: Optional[str],
        token_entrega: str,
        tempo_estimado: Optional[int],
    ) -> PedidoModel:
        pedido = PedidoModel(
            cliente_id=cliente_id,
            endereco_id=endereco_id,
            meio_pagamento=meio_pagamento,
            status=StatusPedido.PENDENTE.value,
            subtotal=subtotal,
            taxa_entrega=taxa_entrega,
            desconto=desconto,
            valor_total=subtotal + taxa_entrega - desconto,
            observacoes=observacoes,
            token_entrega=token_entrega,
            tempo_estimado=tempo_estimado,
        )
        self.db.add(pedido)
        self.db.flush()

        # Segunda fase: o número depende do id gerado
        pedido.numero_pedido = gerar_numero_pedido(pedido.id, pedido.created_at)
        self.db.flush()
        return pedido

    def adicionar_item(self, pedido_id: int, **campos) -> PedidoItemModel:
        item = PedidoItemModel(pedido_id=pedido_id, **campos)
        self.db.add(item)
        return item

    def add_status_historico(
        self,
        pedido_id: int,
        status: str,
        observacoes: str | None = None,
        usuario_id: int | None = None,
    ) -> PedidoHistoricoModel:
        hist = PedidoHistoricoModel(
            pedido_id=pedido_id,
            status=status,
            observacoes=observacoes,
            usuario_id=usuario_id,
        )
        self.db.add(hist)
        return hist

    def aplicar_status(self, pedido: PedidoModel, novo_status: StatusPedido) -> None:
        """Troca o status e grava o marco temporal correspondente, somente na primeira vez."""
        pedido.status = novo_status.value
        campo = campo_timestamp(novo_status)
        if campo and getattr(pedido, campo) is None:
            setattr(pedido, campo, now_trimmed())

    def soft_delete(self, pedido: PedidoModel) -> None:
        pedido.deleted_at = now_trimmed()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
