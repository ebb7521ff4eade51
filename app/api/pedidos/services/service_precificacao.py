from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.catalogo.models.model_borda import BordaPizzaModel, RecheioBordaModel
from app.api.catalogo.models.model_produto import ProdutoVariacaoModel
from app.api.pedidos.schemas.schema_pedido import ItemPedidoRequest

CENTAVOS = Decimal("0.01")
ZERO = Decimal("0.00")


def _dinheiro(valor) -> Decimal:
    return Decimal(str(valor or 0)).quantize(CENTAVOS, rounding=ROUND_HALF_UP)


@dataclass(slots=True)
class ItemPrecificado:
    produto_id: int
    variacao_id: int
    borda_id: Optional[int]
    recheio_borda_id: Optional[int]
    quantidade: int
    preco_unitario: Decimal
    preco_borda: Decimal
    preco_recheio_borda: Decimal
    subtotal: Decimal
    observacao: Optional[str] = None


@dataclass(slots=True)
class ResultadoPrecificacao:
    itens: List[ItemPrecificado] = field(default_factory=list)
    subtotal: Decimal = ZERO


class PrecificacaoService:
    """
    Calcula o valor das linhas do carrinho a partir dos preços atuais do catálogo.

    Variação inexistente invalida o pedido inteiro. Borda ou recheio não
    encontrados contam como custo zero.
    """

    def __init__(self, db: Session):
        self.db = db

    def precificar(self, itens: Sequence[ItemPedidoRequest]) -> ResultadoPrecificacao:
        resultado = ResultadoPrecificacao()
        for item in itens:
            linha = self._precificar_item(item)
            resultado.itens.append(linha)
            resultado.subtotal += linha.subtotal
        resultado.subtotal = _dinheiro(resultado.subtotal)
        return resultado

    def _precificar_item(self, item: ItemPedidoRequest) -> ItemPrecificado:
        variacao = (
            self.db.query(ProdutoVariacaoModel)
            .filter(
                ProdutoVariacaoModel.id == item.variacao_id,
                ProdutoVariacaoModel.produto_id == item.produto_id,
            )
            .first()
        )
        if not variacao:
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                f"Variação #{item.variacao_id} não encontrada",
            )

        preco_unitario = _dinheiro(variacao.preco)
        preco_borda = ZERO
        preco_recheio = ZERO
        # Referência só é gravada quando existe (FK)
        borda_id = None
        recheio_id = None

        if item.borda_id is not None:
            borda = self.db.get(BordaPizzaModel, item.borda_id)
            if borda:
                borda_id = borda.id
                preco_borda = _dinheiro(borda.preco_adicional)

        if item.recheio_borda_id is not None:
            recheio = self.db.get(RecheioBordaModel, item.recheio_borda_id)
            if recheio:
                recheio_id = recheio.id
                preco_recheio = _dinheiro(recheio.preco)

        subtotal = _dinheiro(item.quantidade * (preco_unitario + preco_borda + preco_recheio))

        return ItemPrecificado(
            produto_id=item.produto_id,
            variacao_id=variacao.id,
            borda_id=borda_id,
            recheio_borda_id=recheio_id,
            quantidade=item.quantidade,
            preco_unitario=preco_unitario,
            preco_borda=preco_borda,
            preco_recheio_borda=preco_recheio,
            subtotal=subtotal,
            observacao=item.observacao,
        )
