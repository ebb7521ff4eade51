from __future__ import annotations

from dataclasses import asdict
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.notifications.services.realtime_notifier import RealtimeNotifier, realtime_notifier
from app.api.pedidos.models.model_pedido import PedidoModel, StatusPedido
from app.api.pedidos.models.model_pedido_historico import PedidoHistoricoModel
from app.api.pedidos.repositories.repo_pedidos import PedidoRepository
from app.api.pedidos.schemas.schema_pedido import CriarPedidoRequest
from app.api.pedidos.services.service_comprovante import ComprovanteService
from app.api.pedidos.services.service_precificacao import PrecificacaoService, ZERO
from app.api.pedidos.utils.pedido_notification_helper import montar_payload_pedido
from app.api.pedidos.utils.token_entrega import (
    LimitadorTentativasToken,
    gerar_token_entrega,
    limitador_token_entrega,
)
from app.api.pedidos.utils.transicoes_status import pode_transicionar
from app.config.settings import DELIVERY_FEE, DEFAULT_ESTIMATED_TIME_MINUTES
from app.utils.logger import logger
from app.utils.side_effects import run_side_effect


class PedidoService:
    """Ciclo de vida do pedido: criação, consultas e transições de status."""

    def __init__(
        self,
        db: Session,
        *,
        comprovante_service: Optional[ComprovanteService] = None,
        notifier: Optional[RealtimeNotifier] = None,
        limitador_token: Optional[LimitadorTentativasToken] = None,
    ):
        self.db = db
        self.repo = PedidoRepository(db)
        self.precificacao = PrecificacaoService(db)
        self.comprovantes = comprovante_service or ComprovanteService(db)
        self.notifier = notifier or realtime_notifier
        self.limitador_token = limitador_token or limitador_token_entrega

    # ---------------- Criação ----------------
    def criar_pedido(self, cliente_id: int, payload: CriarPedidoRequest) -> PedidoModel:
        endereco = self.repo.get_endereco(payload.endereco_id)
        if not endereco:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, f"Endereço #{payload.endereco_id} não encontrado")
        if endereco.cliente_id != cliente_id:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Endereço não pertence a este cliente")

        precos = self.precificacao.precificar(payload.itens)

        try:
            pedido = self.repo.criar_pedido(
                cliente_id=cliente_id,
                endereco_id=endereco.id,
                meio_pagamento=payload.meio_pagamento.value,
                subtotal=precos.subtotal,
                taxa_entrega=DELIVERY_FEE,
                desconto=ZERO,
                observacoes=payload.observacoes,
                token_entrega=gerar_token_entrega(),
                tempo_estimado=DEFAULT_ESTIMATED_TIME_MINUTES,
            )
            for item in precos.itens:
                self.repo.adicionar_item(pedido.id, **asdict(item))

            self.repo.add_status_historico(
                pedido.id,
                StatusPedido.PENDENTE.value,
                observacoes=f"Pedido criado pelo cliente - #{pedido.numero_pedido}",
            )
            pedido_id = pedido.id
            numero = pedido.numero_pedido
            self.repo.commit()
        except HTTPException:
            self.repo.rollback()
            raise
        except Exception as e:
            self.repo.rollback()
            logger.error(f"[Pedidos] Erro ao criar pedido - cliente_id={cliente_id}: {e}", exc_info=True)
            raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Erro ao criar pedido")

        logger.info(
            f"[Pedidos] Pedido criado - pedido_id={pedido_id} numero={numero} "
            f"cliente_id={cliente_id} total={precos.subtotal + DELIVERY_FEE}"
        )
        return self.get_pedido(pedido_id)

    # ---------------- Consultas ----------------
    def get_pedido(self, pedido_id: int) -> PedidoModel:
        pedido = self.repo.get_pedido(pedido_id)
        if not pedido:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Pedido não encontrado")
        return pedido

    def get_pedido_do_cliente(self, pedido_id: int, cliente_id: int) -> PedidoModel:
        pedido = self.get_pedido(pedido_id)
        if pedido.cliente_id != cliente_id:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "Pedido não pertence a este cliente")
        return pedido

    def listar_por_cliente(self, cliente_id: int) -> List[PedidoModel]:
        return self.repo.listar_por_cliente(cliente_id)

    def listar_todos(self, *, status_filtro: Optional[StatusPedido] = None, skip: int = 0, limit: int = 100) -> List[PedidoModel]:
        return self.repo.listar_todos(
            status=status_filtro.value if status_filtro else None,
            skip=skip,
            limit=limit,
        )

    def listar_historico(self, pedido_id: int) -> List[PedidoHistoricoModel]:
        self.get_pedido(pedido_id)
        return self.repo.listar_historico(pedido_id)

    # ---------------- Status ----------------
    async def atualizar_status(
        self,
        pedido_id: int,
        novo_status: StatusPedido,
        observacoes: Optional[str] = None,
        usuario_id: Optional[int] = None,
    ) -> PedidoModel:
        pedido = self.get_pedido(pedido_id)
        atual = StatusPedido(pedido.status)

        if not pode_transicionar(atual, novo_status):
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                f"Transição de status inválida: {atual.value} -> {novo_status.value}",
            )

        self.repo.aplicar_status(pedido, novo_status)
        self.repo.add_status_historico(
            pedido.id,
            novo_status.value,
            observacoes=observacoes or f"Status alterado para {novo_status.value}",
            usuario_id=usuario_id,
        )
        self.repo.commit()
        logger.info(
            f"[Pedidos] Status alterado - pedido_id={pedido_id} {atual.value} -> {novo_status.value} "
            f"usuario_id={usuario_id}"
        )

        payload = montar_payload_pedido(self.get_pedido(pedido_id))

        if novo_status == StatusPedido.CONFIRMADO:
            await run_side_effect(
                "comprovante",
                lambda: self.comprovantes.gerar_comprovante(pedido_id),
                contexto=f"pedido_id={pedido_id}",
            )

        await run_side_effect(
            "ws_status",
            lambda: self.notifier.notificar_mudanca_status(payload),
            contexto=f"pedido_id={pedido_id}",
        )
        return self.get_pedido(pedido_id)

    async def cancelar(
        self,
        pedido_id: int,
        motivo: Optional[str] = None,
        usuario_id: Optional[int] = None,
    ) -> PedidoModel:
        padrao = "Pedido cancelado pelo estabelecimento" if usuario_id else "Pedido cancelado pelo cliente"
        return await self.atualizar_status(
            pedido_id,
            StatusPedido.CANCELADO,
            observacoes=motivo or padrao,
            usuario_id=usuario_id,
        )

    def confirmar_pagamento(self, pedido: PedidoModel) -> bool:
        """
        Leva o pedido de pending para confirmed após aprovação do pagamento.

        Não grava histórico: quem chama registra a nota da aprovação.
        """
        if pedido.status != StatusPedido.PENDENTE.value:
            logger.warning(
                f"[Pedidos] Pagamento aprovado para pedido_id={pedido.id} em status {pedido.status}; "
                f"status mantido"
            )
            return False
        self.repo.aplicar_status(pedido, StatusPedido.CONFIRMADO)
        self.repo.commit()
        logger.info(f"[Pedidos] Pedido confirmado por pagamento - pedido_id={pedido.id}")
        return True

    # ---------------- Entrega ----------------
    async def validar_token_entrega(
        self,
        pedido_id: int,
        token: str,
        usuario_id: Optional[int] = None,
    ) -> bool:
        pedido = self.get_pedido(pedido_id)

        if self.limitador_token.bloqueado(pedido_id):
            raise HTTPException(
                status.HTTP_429_TOO_MANY_REQUESTS,
                "Muitas tentativas inválidas de token. Tente novamente mais tarde.",
            )

        if not pedido.token_entrega or token != pedido.token_entrega:
            tentativas = self.limitador_token.registrar_falha(pedido_id)
            logger.warning(f"[Pedidos] Token de entrega inválido - pedido_id={pedido_id} tentativas={tentativas}")
            return False

        if pedido.status != StatusPedido.SAIU_PARA_ENTREGA.value:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Pedido não está em rota de entrega")

        await self.atualizar_status(
            pedido_id,
            StatusPedido.ENTREGUE,
            observacoes="Entrega confirmada com token pelo motoboy",
            usuario_id=usuario_id,
        )
        self.limitador_token.limpar(pedido_id)
        return True

    # ---------------- Remoção ----------------
    def remover(self, pedido_id: int) -> None:
        pedido = self.get_pedido(pedido_id)
        self.repo.soft_delete(pedido)
        self.repo.commit()
        logger.info(f"[Pedidos] Pedido removido (soft delete) - pedido_id={pedido_id}")
