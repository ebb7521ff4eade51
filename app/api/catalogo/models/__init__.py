from .model_produto import ProdutoModel, ProdutoVariacaoModel
from .model_borda import BordaPizzaModel, RecheioBordaModel

__all__ = [
    "ProdutoModel",
    "ProdutoVariacaoModel",
    "BordaPizzaModel",
    "RecheioBordaModel",
]
