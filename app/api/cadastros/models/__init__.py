"""
Models de Cadastros: clientes, endereços e funcionários.
"""
from app.api.cadastros.models.model_cliente_dv import ClienteModel
from app.api.cadastros.models.model_endereco_dv import EnderecoModel
from app.api.cadastros.models.user_model import UserModel

__all__ = ["ClienteModel", "EnderecoModel", "UserModel"]
