from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from app.api.pagamentos.models.model_pagamento import PagamentoModel, StatusPagamento

APROVADO = StatusPagamento.APROVADO.value
ESTORNADO = StatusPagamento.ESTORNADO.value


class PagamentoRepository:
    """Repositório de pagamentos PIX."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------------- Consultas -----------------
    def _query(self):
        return self.db.query(PagamentoModel).filter(PagamentoModel.deleted_at.is_(None))

    def get_by_id(self, pagamento_id: str) -> Optional[PagamentoModel]:
        return self._query().filter(PagamentoModel.id == str(pagamento_id)).first()

    def get_by_id_ou_gateway_id(self, identificador: str) -> Optional[PagamentoModel]:
        """O webhook pode trazer tanto o nosso id quanto o id do provedor."""
        identificador = str(identificador)
        return (
            self._query()
            .filter(or_(PagamentoModel.id == identificador, PagamentoModel.gateway_id == identificador))
            .order_by(PagamentoModel.created_at.desc())
            .first()
        )

    def get_ultimo_por_pedido(self, pedido_id: int) -> Optional[PagamentoModel]:
        return (
            self._query()
            .filter(PagamentoModel.pedido_id == pedido_id)
            .order_by(PagamentoModel.created_at.desc())
            .first()
        )

    def listar(self, *, page: int = 1, per_page: int = 20) -> Tuple[List[PagamentoModel], int]:
        query = self._query()
        total = query.count()
        itens = (
            query.order_by(PagamentoModel.created_at.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return itens, total

    # ---------------- Mutations ------------------
    def criar(
        self,
        *,
        cliente_id: int,
        pedido_id: Optional[int],
        valor: Decimal,
        gateway_id: Optional[str],
        pix_codigo: Optional[str],
        pix_qr_code_base64: Optional[str],
        ticket_url: Optional[str] = None,
        expira_em: Optional[datetime] = None,
    ) -> PagamentoModel:
        pagamento = PagamentoModel(
            cliente_id=cliente_id,
            pedido_id=pedido_id,
            valor=valor,
            status=StatusPagamento.PENDENTE.value,
            gateway_id=gateway_id,
            pix_codigo=pix_codigo,
            pix_qr_code_base64=pix_qr_code_base64,
            ticket_url=ticket_url,
            expira_em=expira_em,
        )
        self.db.add(pagamento)
        self.db.flush()
        return pagamento

    def aprovar_se_nao_aprovado(self, pagamento_id: str, agora: datetime) -> bool:
        """
        Escrita condicional: approved só para quem nunca foi aprovado.

        Retorna True apenas para a chamada que efetivamente fez a transição;
        entregas concorrentes ou atrasadas do mesmo webhook recebem False.
        Pagamento estornado não volta para approved e `pago_em` nunca é reescrito.
        """
        result = self.db.execute(
            update(PagamentoModel)
            .where(
                PagamentoModel.id == pagamento_id,
                PagamentoModel.status.notin_([APROVADO, ESTORNADO]),
                PagamentoModel.pago_em.is_(None),
            )
            .values(status=APROVADO, pago_em=agora, updated_at=agora)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def atualizar_status(self, pagamento_id: str, novo_status: StatusPagamento, agora: datetime) -> bool:
        """
        Grava um status diferente de approved.

        Um pagamento aprovado só pode virar refunded; refunded é final.
        """
        condicao = [PagamentoModel.id == pagamento_id, PagamentoModel.status != ESTORNADO]
        if novo_status != StatusPagamento.ESTORNADO:
            condicao.append(PagamentoModel.status != APROVADO)
        result = self.db.execute(
            update(PagamentoModel)
            .where(*condicao)
            .values(status=novo_status.value, updated_at=agora)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # ---------------- Unidade de trabalho --------
    def refresh(self, pagamento: PagamentoModel) -> PagamentoModel:
        self.db.refresh(pagamento)
        return pagamento

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
