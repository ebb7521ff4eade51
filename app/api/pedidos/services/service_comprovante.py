from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.notifications.services.email_notification_service import EmailNotificationService
from app.api.pedidos.models.model_comprovante import ComprovanteModel
from app.api.pedidos.models.model_pedido import PedidoModel
from app.api.pedidos.utils.numero_pedido import gerar_numero_comprovante
from app.utils.database_utils import iso_or_none

logger = logging.getLogger(__name__)


class ComprovanteService:
    """Gera o comprovante do pedido (um por pedido) e opcionalmente enfileira o e-mail."""

    def __init__(self, db: Session, email_service: Optional[EmailNotificationService] = None):
        self.db = db
        self.email_service = email_service

    def get_por_pedido(self, pedido_id: int) -> Optional[ComprovanteModel]:
        return self.db.query(ComprovanteModel).filter(ComprovanteModel.pedido_id == pedido_id).first()

    async def gerar_comprovante(self, pedido_id: int, enviar_email: bool = False) -> ComprovanteModel:
        pedido = self.db.get(PedidoModel, pedido_id)
        if not pedido or pedido.deleted_at is not None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, f"Pedido #{pedido_id} não encontrado")

        comprovante = self.get_por_pedido(pedido_id)
        if comprovante is None:
            comprovante = self._criar(pedido)

        if enviar_email and not comprovante.enviado_email:
            await self._enviar_email(pedido, comprovante)

        return comprovante

    def _criar(self, pedido: PedidoModel) -> ComprovanteModel:
        comprovante = ComprovanteModel(
            pedido_id=pedido.id,
            numero_comprovante=gerar_numero_comprovante(pedido.id),
            valor_total=pedido.valor_total,
        )
        self.db.add(comprovante)
        try:
            self.db.commit()
        except IntegrityError:
            # Outra requisição gerou o comprovante deste pedido ao mesmo tempo
            self.db.rollback()
            existente = self.get_por_pedido(pedido.id)
            if existente is None:
                raise
            return existente
        logger.info(f"[Comprovante] {comprovante.numero_comprovante} gerado para pedido_id={pedido.id}")
        return comprovante

    async def _enviar_email(self, pedido: PedidoModel, comprovante: ComprovanteModel) -> None:
        if self.email_service is None:
            raise RuntimeError("Serviço de e-mail não configurado para envio de comprovante")

        cliente = pedido.cliente
        if not cliente or not cliente.email:
            logger.info(f"[Comprovante] Pedido {pedido.id} sem e-mail do cliente; envio ignorado")
            return

        enviado = await self.email_service.enviar_comprovante(
            cliente.email,
            cliente.nome,
            {
                "numero_comprovante": comprovante.numero_comprovante,
                "numero_pedido": pedido.numero_pedido,
                "valor_total": float(comprovante.valor_total),
                "emitido_em": iso_or_none(comprovante.created_at),
            },
        )
        if enviado:
            comprovante.enviado_email = True
            self.db.commit()
