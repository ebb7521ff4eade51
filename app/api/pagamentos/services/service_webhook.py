from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.notifications.services.email_notification_service import (
    EmailNotificationService,
    email_notification_service,
)
from app.api.notifications.services.realtime_notifier import RealtimeNotifier, realtime_notifier
from app.api.pagamentos.models.model_pagamento import PagamentoModel, StatusPagamento
from app.api.pagamentos.repositories.repo_pagamentos import PagamentoRepository
from app.api.pagamentos.services.service_pix_gateway import PixGatewayClient, pix_gateway
from app.api.pagamentos.utils.status_provedor import mapear_status_provedor
from app.api.pedidos.models.model_pedido import StatusPedido
from app.api.pedidos.repositories.repo_pedidos import PedidoRepository
from app.api.pedidos.services.service_comprovante import ComprovanteService
from app.api.pedidos.services.service_pedido import PedidoService
from app.api.pedidos.utils.pedido_notification_helper import montar_payload_pedido
from app.api.pedidos.utils.transicoes_status import STATUS_TERMINAIS
from app.config import settings
from app.integrations.mercadopago.webhook_signature import validar_assinatura_webhook
from app.utils.database_utils import now_trimmed
from app.utils.logger import logger
from app.utils.prometheus_metrics import payment_approvals_total, webhook_events_total
from app.utils.side_effects import run_side_effect


def _mensagem_aprovacao(confirmou: bool, encerrado: bool) -> str:
    if confirmou:
        return "Pagamento aprovado e pedido confirmado"
    if encerrado:
        return "Pagamento aprovado para pedido encerrado; estorno necessário"
    return "Pagamento aprovado"


def _resultado(ok: bool, resultado: str, **campos: Any) -> Dict[str, Any]:
    webhook_events_total.labels(result=resultado).inc()
    return {"ok": ok, **{k: v for k, v in campos.items() if v is not None}}


class WebhookPagamentoService:
    """
    Reconcilia notificações de pagamento do provedor.

    A aprovação é decidida por uma escrita condicional no pagamento: só a
    entrega que efetivamente leva o pagamento para approved confirma o pedido
    e dispara os efeitos colaterais. Reentregas viram no-op.
    """

    def __init__(
        self,
        db: Session,
        *,
        pedido_service: Optional[PedidoService] = None,
        comprovante_service: Optional[ComprovanteService] = None,
        email_service: Optional[EmailNotificationService] = None,
        notifier: Optional[RealtimeNotifier] = None,
        gateway: Optional[PixGatewayClient] = None,
        webhook_secret: Optional[str] = None,
    ):
        self.db = db
        self.repo = PagamentoRepository(db)
        self.pedidos = PedidoRepository(db)
        self.email_service = email_service or email_notification_service
        self.comprovantes = comprovante_service or ComprovanteService(db, email_service=self.email_service)
        self.notifier = notifier or realtime_notifier
        self.pedido_service = pedido_service or PedidoService(
            db,
            comprovante_service=self.comprovantes,
            notifier=self.notifier,
        )
        self.gateway = gateway or pix_gateway
        self.webhook_secret = webhook_secret if webhook_secret is not None else settings.MERCADOPAGO_WEBHOOK_SECRET

    async def processar_webhook(
        self,
        body: Optional[Dict[str, Any]],
        *,
        x_signature: Optional[str] = None,
        x_request_id: Optional[str] = None,
        data_id_query: Optional[str] = None,
    ) -> Dict[str, Any]:
        try:
            return await self._processar(body or {}, x_signature, x_request_id, data_id_query)
        except Exception as e:
            self.db.rollback()
            logger.error(f"[Webhook] Erro inesperado ao processar webhook: {e}", exc_info=True)
            return _resultado(False, "error", error=str(e))

    async def _processar(
        self,
        body: Dict[str, Any],
        x_signature: Optional[str],
        x_request_id: Optional[str],
        data_id_query: Optional[str],
    ) -> Dict[str, Any]:
        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        payment_id = data.get("id") or data_id_query
        payment_id = str(payment_id) if payment_id is not None else None

        # Assinatura apenas registrada: quem decide é a busca do pagamento
        if x_signature:
            if not validar_assinatura_webhook(x_signature, x_request_id, payment_id, self.webhook_secret):
                logger.warning(
                    f"[Webhook] Assinatura inválida ou não verificável - payment_id={payment_id} "
                    f"request_id={x_request_id}; processando mesmo assim"
                )

        tipo = body.get("type")
        if tipo and tipo != "payment":
            logger.info(f"[Webhook] Evento ignorado - type={tipo}")
            return _resultado(True, "ignored", message=f"Evento '{tipo}' ignorado")

        if not payment_id:
            logger.warning("[Webhook] Payload sem id de pagamento")
            return _resultado(False, "invalid", error="ID do pagamento não informado")

        pagamento = self.repo.get_by_id_ou_gateway_id(payment_id)
        if not pagamento:
            logger.info(f"[Webhook] Pagamento não encontrado - payment_id={payment_id}")
            return _resultado(True, "not_found", message="Pagamento não encontrado")

        novo_status = await self._resolver_status(data.get("status"), pagamento)
        status_anterior = pagamento.status
        pagamento_id = pagamento.id
        agora = now_trimmed()

        try:
            if novo_status == StatusPagamento.APROVADO:
                aprovou = self.repo.aprovar_se_nao_aprovado(pagamento_id, agora)
            else:
                aprovou = False
                self.repo.atualizar_status(pagamento_id, novo_status, agora)
            self.repo.commit()
        except IntegrityError:
            self.repo.rollback()
            logger.warning(
                f"[Webhook] Pedido do pagamento {pagamento_id} já possui outro pagamento aprovado; "
                f"aprovação descartada"
            )
            return _resultado(
                True,
                "duplicate",
                message="Pedido já possui pagamento aprovado",
                payment_status=status_anterior,
                order_id=pagamento.pedido_id,
            )

        pagamento = self.repo.refresh(pagamento)
        logger.info(
            f"[Webhook] Pagamento atualizado - payment_id={pagamento_id} "
            f"{status_anterior} -> {pagamento.status} (provedor: {novo_status.value})"
        )

        if not aprovou:
            resultado = "duplicate" if novo_status == StatusPagamento.APROVADO else "updated"
            return _resultado(
                True,
                resultado,
                message="Status do pagamento atualizado",
                payment_status=pagamento.status,
                order_id=pagamento.pedido_id,
            )

        payment_approvals_total.inc()
        return await self._confirmar_pedido(pagamento)

    async def _resolver_status(self, status_informado: Optional[str], pagamento: PagamentoModel) -> StatusPagamento:
        if status_informado:
            return mapear_status_provedor(status_informado)

        # Notificação sem status: pergunta ao provedor quando possível
        if pagamento.gateway_id and not self.gateway.offline:
            try:
                consultado = await self.gateway.consultar_status(pagamento.gateway_id)
                if consultado is not None:
                    return consultado
            except Exception as e:
                logger.warning(f"[Webhook] Falha ao consultar status no provedor - payment_id={pagamento.id}: {e}")
        return mapear_status_provedor(None)

    async def _confirmar_pedido(self, pagamento: PagamentoModel) -> Dict[str, Any]:
        if not pagamento.pedido_id:
            logger.warning(f"[Webhook] Pagamento {pagamento.id} aprovado sem pedido vinculado")
            return _resultado(
                True,
                "approved",
                message="Pagamento aprovado, sem pedido vinculado",
                payment_status=pagamento.status,
            )

        pedido = self.pedidos.get_pedido(pagamento.pedido_id)
        if not pedido:
            logger.warning(f"[Webhook] Pedido {pagamento.pedido_id} do pagamento {pagamento.id} não encontrado")
            return _resultado(
                True,
                "approved",
                message="Pagamento aprovado, pedido não encontrado",
                payment_status=pagamento.status,
            )

        confirmou = self.pedido_service.confirmar_pagamento(pedido)
        pedido = self.pedido_service.get_pedido(pedido.id)
        dados = montar_payload_pedido(pedido)
        pedido_id = pedido.id
        contexto = f"pedido_id={pedido_id} payment_id={pagamento.id}"
        cliente = pedido.cliente
        email_cliente = cliente.email if cliente else None
        nome_cliente = cliente.nome if cliente else ""
        pago_em = pagamento.pago_em

        async def comprovante():
            try:
                await self.comprovantes.gerar_comprovante(pedido_id, enviar_email=True)
            except Exception as e:
                logger.warning(f"[Webhook] Comprovante com e-mail falhou ({e}); gerando sem e-mail - {contexto}")
                self.db.rollback()
                await self.comprovantes.gerar_comprovante(pedido_id)

        async def email_cliente_confirmacao():
            if not email_cliente:
                logger.info(f"[Webhook] Cliente sem e-mail; confirmação não enviada - {contexto}")
                return
            await self.email_service.enviar_confirmacao_pedido(email_cliente, nome_cliente, dados)

        def historico():
            try:
                self.pedidos.add_status_historico(
                    pedido_id,
                    StatusPedido.CONFIRMADO.value if confirmou else dados["status"],
                    observacoes=f"Pagamento aprovado via webhook - {(pago_em or now_trimmed()).isoformat()}",
                )
                self.pedidos.commit()
            except Exception:
                self.pedidos.rollback()
                raise

        # Pedido já encerrado (ex.: cancelado): não vai para a cozinha
        encerrado = not confirmou and StatusPedido(dados["status"]) in STATUS_TERMINAIS
        if encerrado:
            logger.warning(
                f"[Webhook] Pagamento aprovado para pedido em status {dados['status']}; "
                f"estorno necessário - {contexto}"
            )

        await run_side_effect("comprovante", comprovante, contexto=contexto)
        if not encerrado:
            await run_side_effect("email_cliente", email_cliente_confirmacao, contexto=contexto)
            await run_side_effect(
                "aviso_admin",
                lambda: self.email_service.notificar_novo_pedido(dados["order_number"], nome_cliente, dados["total"]),
                contexto=contexto,
            )
        await run_side_effect("historico", historico, contexto=contexto)
        await run_side_effect(
            "ws_cliente",
            lambda: self.notifier.notificar_pagamento_aprovado(dados["customer_id"], dados),
            contexto=contexto,
        )
        if not encerrado:
            await run_side_effect(
                "ws_admin",
                lambda: self.notifier.notificar_novo_pedido_admin(dados),
                contexto=contexto,
            )

        logger.info(f"[Webhook] Pagamento aprovado processado - {contexto} pedido_confirmado={confirmou}")
        return _resultado(
            True,
            "approved",
            message=_mensagem_aprovacao(confirmou, encerrado),
            payment_status=StatusPagamento.APROVADO.value,
            order_id=pedido_id,
            order_number=dados["order_number"],
        )
